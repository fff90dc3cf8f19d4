"""Account model definition."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import false

from . import db


DEFAULT_ROLE = "customer"


@dataclass(frozen=True)
class AccountView:
    """Public projection of an account, safe to return to callers."""

    id: int
    email: str
    firstname: str
    lastname: str
    role: str
    verified: bool
    created_at: Optional[str]

    def to_dict(self) -> dict:
        return asdict(self)


class Account(db.Model):
    """Represents a registered shop customer or administrator."""

    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    firstname = db.Column(db.String(120), nullable=False)
    lastname = db.Column(db.String(120), nullable=False)
    role = db.Column(
        db.String(32),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=db.text(f"'{DEFAULT_ROLE}'"),
    )
    verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def mark_verified(self) -> None:
        """Mark the email address as verified. There is no way back."""

        self.verified = True

    def public_view(self) -> AccountView:
        """Return the projection of this account without secret fields."""

        return AccountView(
            id=self.id,
            email=self.email,
            firstname=self.firstname,
            lastname=self.lastname,
            role=self.role,
            verified=bool(self.verified),
            created_at=self.created_at.isoformat() if self.created_at else None,
        )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Account {self.email}>"
