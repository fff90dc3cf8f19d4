"""Flask-SQLAlchemy implementation of the account repository."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.account import Account

from .abstract_repository import (
    FILTERABLE_FIELDS,
    AbstractAccountRepository,
    DuplicateAccountError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"password_hash", "firstname", "lastname", "role", "verified"}


class SQLAlchemyAccountRepository(AbstractAccountRepository):
    """Store accounts in the application's SQL database."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def find_by_email(self, email: str) -> Optional[Account]:
        return (
            self.session.query(Account)
            .filter(func.lower(Account.email) == email.lower())
            .first()
        )

    def find_by_id(self, account_id: int) -> Optional[Account]:
        return self.session.get(Account, account_id)

    def find(self, filters: Mapping[str, str] | None = None) -> list[Account]:
        query = self.session.query(Account)
        for field in FILTERABLE_FIELDS:
            value = (filters or {}).get(field)
            if not value:
                continue
            column = getattr(Account, field)
            query = query.filter(func.lower(column).contains(value.lower(), autoescape=True))
        return query.order_by(Account.id.asc()).all()

    def create(self, fields: Mapping[str, Any]) -> Account:
        account = Account(**fields)
        self.session.add(account)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateAccountError(
                f"An account for {fields.get('email')} already exists."
            ) from exc
        return account

    def update_fields(self, account_id: int, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise RepositoryError(f"Cannot update fields: {', '.join(sorted(unknown))}.")

        account = self.find_by_id(account_id)
        if account is None:
            raise RepositoryError(f"Account {account_id} does not exist.")

        for name, value in fields.items():
            setattr(account, name, value)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RepositoryError(str(exc)) from exc

    def delete(self, account_id: int) -> None:
        account = self.find_by_id(account_id)
        if account is None:
            raise RepositoryError(f"Account {account_id} does not exist.")

        self.session.delete(account)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning("Deleting account %s failed: %s", account_id, exc)
            raise RepositoryError(str(exc)) from exc
