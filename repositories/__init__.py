"""Account persistence backends."""

from .abstract_repository import (
    AbstractAccountRepository,
    DuplicateAccountError,
    RepositoryError,
)
from .sqlalchemy_repository import SQLAlchemyAccountRepository

__all__ = [
    "AbstractAccountRepository",
    "DuplicateAccountError",
    "RepositoryError",
    "SQLAlchemyAccountRepository",
]
