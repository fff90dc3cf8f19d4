"""Signed, time-bounded tokens for sessions, email verification and resets.

Each token kind has its own audience, signing secret and lifetime, so a
token minted for one purpose is rejected everywhere else. Session tokens use
the claim layout Flask-JWT-Extended expects (``sub``, ``type``, ``fresh``,
``jti``) so that ``jwt_required`` can guard routes with them.
"""

from __future__ import annotations

import hashlib
import hmac
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional

import jwt


ALGORITHM = "HS512"
RESERVED_CLAIMS = {"sub", "aud", "exp", "iat", "nbf", "jti", "type", "fresh"}


class TokenKind(Enum):
    SESSION = ("session", "access")
    EMAIL_VERIFICATION = ("email-verification", "email_verification")
    PASSWORD_RESET = ("password-reset", "password_reset")

    def __init__(self, audience: str, token_type: str):
        self.audience = audience
        self.token_type = token_type


DEFAULT_LIFETIMES = {
    TokenKind.SESSION: timedelta(hours=20),
    TokenKind.EMAIL_VERIFICATION: timedelta(hours=24),
    TokenKind.PASSWORD_RESET: timedelta(minutes=30),
}


class InvalidTokenError(Exception):
    """Raised when a token is malformed, tampered with, expired or of the wrong kind."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Issue and verify JWTs for every token kind."""

    def __init__(
        self,
        secrets: Mapping[TokenKind, str],
        lifetimes: Optional[Mapping[TokenKind, timedelta]] = None,
        algorithm: str = ALGORITHM,
        clock: Callable[[], datetime] = _utcnow,
    ):
        missing = [kind.name for kind in TokenKind if not secrets.get(kind)]
        if missing:
            raise ValueError(f"Missing signing secret for: {', '.join(missing)}")

        self._secrets = dict(secrets)
        self._lifetimes = {**DEFAULT_LIFETIMES, **(lifetimes or {})}
        self.algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], clock: Callable[[], datetime] = _utcnow
    ) -> "TokenIssuer":
        return cls(
            secrets={
                TokenKind.SESSION: config["JWT_SECRET_KEY"],
                TokenKind.EMAIL_VERIFICATION: config["VERIFICATION_TOKEN_SECRET"],
                TokenKind.PASSWORD_RESET: config["RESET_TOKEN_SECRET"],
            },
            lifetimes={
                TokenKind.SESSION: timedelta(hours=config["SESSION_TOKEN_HOURS"]),
                TokenKind.EMAIL_VERIFICATION: timedelta(
                    hours=config["VERIFICATION_TOKEN_HOURS"]
                ),
                TokenKind.PASSWORD_RESET: timedelta(minutes=config["RESET_TOKEN_MINUTES"]),
            },
            algorithm=config.get("JWT_ALGORITHM", ALGORITHM),
            clock=clock,
        )

    def lifetime(self, kind: TokenKind) -> timedelta:
        return self._lifetimes[kind]

    def issue(
        self,
        kind: TokenKind,
        subject: Any,
        claims: Optional[Mapping[str, Any]] = None,
        ttl: Optional[timedelta] = None,
    ) -> str:
        """Return a signed token of ``kind`` for ``subject``."""

        extra = dict(claims or {})
        clashing = RESERVED_CLAIMS.intersection(extra)
        if clashing:
            raise ValueError(f"Reserved claims cannot be overridden: {', '.join(sorted(clashing))}")

        now = self._clock()
        payload = {
            **extra,
            "sub": str(subject),
            "aud": kind.audience,
            "type": kind.token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "nbf": now,
            "exp": now + (ttl or self._lifetimes[kind]),
        }
        if kind is TokenKind.SESSION:
            payload["fresh"] = False
        return jwt.encode(payload, self._secrets[kind], algorithm=self.algorithm)

    def verify(self, kind: TokenKind, token: str) -> dict:
        """Return the claims of ``token`` or raise InvalidTokenError."""

        if not token:
            raise InvalidTokenError("Token is missing.")
        try:
            claims = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self.algorithm],
                audience=kind.audience,
                options={"require": ["exp", "iat", "sub", "aud"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Token is invalid: {exc}") from exc

        if claims.get("type") != kind.token_type:
            raise InvalidTokenError("Token is of the wrong type.")
        return claims

    def fingerprint(self, kind: TokenKind, value: str) -> str:
        """Return a short keyed digest of ``value`` to bind a token to state."""

        digest = hmac.new(
            self._secrets[kind].encode("utf-8"), value.encode("utf-8"), hashlib.sha256
        )
        return digest.hexdigest()[:32]
