"""One-way password hashing backed by werkzeug."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


DEFAULT_METHOD = "pbkdf2:sha256:600000"


class PasswordHasher:
    """Hash and verify passwords with a fixed method and work factor."""

    def __init__(self, method: str = DEFAULT_METHOD, salt_length: int = 16):
        self.method = method
        self.salt_length = salt_length

    def hash(self, plaintext: str) -> str:
        if not plaintext:
            raise ValueError("Cannot hash an empty password.")
        return generate_password_hash(
            plaintext, method=self.method, salt_length=self.salt_length
        )

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True if ``plaintext`` matches ``digest``; never raises."""

        if not plaintext or not digest:
            return False
        try:
            return check_password_hash(digest, plaintext)
        except (TypeError, ValueError):
            return False
