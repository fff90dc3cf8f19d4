"""Account domain services."""

from .access_policy import AccessPolicy
from .account_service import AccountService, normalize_email
from .password_hasher import PasswordHasher
from .results import AccountError, ErrorKind, ServiceResult
from .token_issuer import InvalidTokenError, TokenIssuer, TokenKind

__all__ = [
    "AccessPolicy",
    "AccountError",
    "AccountService",
    "ErrorKind",
    "InvalidTokenError",
    "PasswordHasher",
    "ServiceResult",
    "TokenIssuer",
    "TokenKind",
    "normalize_email",
]
