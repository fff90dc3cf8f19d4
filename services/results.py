"""Failure taxonomy and the structured result returned by every operation."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any, Callable, Optional


class ErrorKind(Enum):
    MISSING_FIELD = ("MissingField", HTTPStatus.BAD_REQUEST)
    ALREADY_EXISTS = ("AlreadyExists", HTTPStatus.BAD_REQUEST)
    NOT_FOUND = ("NotFound", HTTPStatus.NOT_FOUND)
    INVALID_CREDENTIAL = ("InvalidCredential", HTTPStatus.NOT_FOUND)
    MISSING_TOKEN = ("MissingToken", HTTPStatus.UNPROCESSABLE_ENTITY)
    INVALID_TOKEN = ("InvalidToken", HTTPStatus.BAD_REQUEST)
    NOT_AUTHORIZED = ("NotAuthorized", HTTPStatus.FORBIDDEN)
    DELETION_FAILED = ("DeletionFailed", HTTPStatus.NOT_FOUND)
    INTERNAL_ERROR = ("InternalError", HTTPStatus.INTERNAL_SERVER_ERROR)

    def __init__(self, label: str, http_status: HTTPStatus):
        self.label = label
        self.http_status = http_status


class AccountError(Exception):
    """Base class for failures reported by the account service."""

    kind = ErrorKind.INTERNAL_ERROR
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class MissingField(AccountError):
    kind = ErrorKind.MISSING_FIELD

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"The {field} field is required")


class AlreadyExists(AccountError):
    kind = ErrorKind.ALREADY_EXISTS
    default_message = "User already exists"


class NotFound(AccountError):
    kind = ErrorKind.NOT_FOUND
    default_message = "user does not exist"


class InvalidCredential(AccountError):
    kind = ErrorKind.INVALID_CREDENTIAL
    default_message = "email or password is invalid"


class MissingToken(AccountError):
    kind = ErrorKind.MISSING_TOKEN
    default_message = "Missing Token"


class InvalidToken(AccountError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid or expired token"


class NotAuthorized(AccountError):
    kind = ErrorKind.NOT_AUTHORIZED
    default_message = "You are not allowed to perform this action"


class DeletionFailed(AccountError):
    kind = ErrorKind.DELETION_FAILED
    default_message = "deletion failed"


class InternalError(AccountError):
    kind = ErrorKind.INTERNAL_ERROR


@dataclass(frozen=True)
class ServiceResult:
    success: bool
    message: str
    data: Any = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> "ServiceResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, error: AccountError) -> "ServiceResult":
        return cls(
            success=False,
            message=error.message,
            error=error.kind,
            detail=error.detail,
        )


def service_operation(func: Callable[..., ServiceResult]) -> Callable[..., ServiceResult]:
    """Turn every exception raised by ``func`` into a failed ServiceResult."""

    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> ServiceResult:
        try:
            return func(*args, **kwargs)
        except AccountError as exc:
            logger.info("%s failed: %s (%s)", func.__name__, exc.kind.label, exc.message)
            return ServiceResult.failure(exc)
        except Exception:
            logger.exception("%s failed unexpectedly", func.__name__)
            return ServiceResult.failure(InternalError())

    return wrapper
