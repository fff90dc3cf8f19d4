"""Tests for token issuance and verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from services.token_issuer import InvalidTokenError, TokenIssuer, TokenKind

SECRETS = {
    TokenKind.SESSION: "session-" + "s" * 64,
    TokenKind.EMAIL_VERIFICATION: "verification-" + "v" * 64,
    TokenKind.PASSWORD_RESET: "reset-" + "r" * 64,
}


@pytest.fixture()
def issuer() -> TokenIssuer:
    return TokenIssuer(SECRETS)


def test_session_token_carries_identity_claims(issuer):
    token = issuer.issue(
        TokenKind.SESSION,
        7,
        {"firstname": "jo", "lastname": "do", "email": "a@x.com", "role": "customer"},
    )

    claims = issuer.verify(TokenKind.SESSION, token)

    assert claims["sub"] == "7"
    assert claims["email"] == "a@x.com"
    assert claims["role"] == "customer"
    assert claims["aud"] == "session"
    assert claims["type"] == "access"
    assert claims["fresh"] is False
    assert claims["exp"] - claims["iat"] == 20 * 3600

    header = jwt.get_unverified_header(token)
    assert header["alg"] == "HS512"


def test_default_lifetimes_differ_by_kind(issuer):
    assert issuer.lifetime(TokenKind.SESSION) == timedelta(hours=20)
    assert issuer.lifetime(TokenKind.EMAIL_VERIFICATION) == timedelta(hours=24)
    assert issuer.lifetime(TokenKind.PASSWORD_RESET) == timedelta(minutes=30)


@pytest.mark.parametrize(
    "issued_as, checked_as",
    [
        (TokenKind.EMAIL_VERIFICATION, TokenKind.SESSION),
        (TokenKind.SESSION, TokenKind.EMAIL_VERIFICATION),
        (TokenKind.EMAIL_VERIFICATION, TokenKind.PASSWORD_RESET),
    ],
)
def test_token_of_one_kind_is_rejected_as_another(issuer, issued_as, checked_as):
    token = issuer.issue(issued_as, 1)

    with pytest.raises(InvalidTokenError):
        issuer.verify(checked_as, token)


def test_shared_secret_still_separates_kinds_by_audience():
    shared = {kind: "shared-" + "x" * 64 for kind in TokenKind}
    issuer = TokenIssuer(shared)
    token = issuer.issue(TokenKind.EMAIL_VERIFICATION, 1)

    with pytest.raises(InvalidTokenError):
        issuer.verify(TokenKind.SESSION, token)


def test_expired_token_is_rejected(issuer):
    past = datetime.now(timezone.utc) - timedelta(days=2)
    stale_issuer = TokenIssuer(SECRETS, clock=lambda: past)
    token = stale_issuer.issue(TokenKind.EMAIL_VERIFICATION, 1)

    with pytest.raises(InvalidTokenError, match="expired"):
        issuer.verify(TokenKind.EMAIL_VERIFICATION, token)


def test_explicit_ttl_overrides_lifetime(issuer):
    token = issuer.issue(TokenKind.SESSION, 1, ttl=timedelta(minutes=5))

    claims = issuer.verify(TokenKind.SESSION, token)

    assert claims["exp"] - claims["iat"] == 300


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_are_rejected(issuer, token):
    with pytest.raises(InvalidTokenError):
        issuer.verify(TokenKind.SESSION, token)


def test_tampered_token_is_rejected(issuer):
    token = issuer.issue(TokenKind.SESSION, 1, {"role": "customer"})
    forged = jwt.encode(
        {**jwt.decode(token, options={"verify_signature": False}), "role": "admin"},
        "attacker-" + "a" * 64,
        algorithm="HS512",
    )

    with pytest.raises(InvalidTokenError):
        issuer.verify(TokenKind.SESSION, forged)


def test_reserved_claims_cannot_be_overridden(issuer):
    with pytest.raises(ValueError):
        issuer.issue(TokenKind.SESSION, 1, {"sub": "2"})


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(ValueError):
        TokenIssuer({TokenKind.SESSION: "only-one"})


def test_fingerprint_is_stable_and_keyed(issuer):
    first = issuer.fingerprint(TokenKind.PASSWORD_RESET, "hash-a")

    assert first == issuer.fingerprint(TokenKind.PASSWORD_RESET, "hash-a")
    assert first != issuer.fingerprint(TokenKind.PASSWORD_RESET, "hash-b")
    assert first != issuer.fingerprint(TokenKind.SESSION, "hash-a")
