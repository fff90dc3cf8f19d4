"""Account repository abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from models.account import Account


FILTERABLE_FIELDS = ("firstname", "lastname", "email")


class RepositoryError(Exception):
    """Raised when the storage backend cannot complete an operation."""


class DuplicateAccountError(RepositoryError):
    """Raised when an account with the same email is already stored."""


class AbstractAccountRepository(ABC):
    """Interface for account storage backends."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Account]:
        """Return the account registered under ``email`` or None."""

    @abstractmethod
    def find_by_id(self, account_id: int) -> Optional[Account]:
        """Return the account with the given id or None."""

    @abstractmethod
    def find(self, filters: Mapping[str, str] | None = None) -> list[Account]:
        """Return the accounts matching every provided filter."""

    @abstractmethod
    def create(self, fields: Mapping[str, Any]) -> Account:
        """Persist a new account and return it.

        Raises DuplicateAccountError when the storage layer reports an
        email uniqueness conflict.
        """

    @abstractmethod
    def update_fields(self, account_id: int, fields: Mapping[str, Any]) -> None:
        """Replace the given fields on an existing account."""

    @abstractmethod
    def delete(self, account_id: int) -> None:
        """Remove an account, raising RepositoryError if that is not possible."""
