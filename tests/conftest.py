"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.account import Account  # noqa: E402
from notifications import OutboxMailer  # noqa: E402
from services import AccountService  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_URL = "https://shop.example.com"
    MAIL_BACKEND = "memory"
    MAIL_DEFAULT_SENDER = "E-Commerce <no-reply@shop.example.com>"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    JWT_SECRET_KEY = "session-" + "s" * 64
    VERIFICATION_TOKEN_SECRET = "verification-" + "v" * 64
    RESET_TOKEN_SECRET = "reset-" + "r" * 64


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(_BaseTestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def service(app: Flask) -> AccountService:
    """Return the app's account service inside an application context."""

    with app.app_context():
        yield app.extensions["account_service"]


@pytest.fixture()
def outbox(app: Flask) -> list:
    """Messages captured by the in-memory mailer."""

    mailer = app.extensions["account_service"].mailer
    assert isinstance(mailer, OutboxMailer)
    return mailer.outbox


def create_account(
    app: Flask,
    email: str,
    password: str,
    *,
    firstname: str = "Jo",
    lastname: str = "Do",
    role: str = "customer",
    verified: bool = False,
) -> int:
    """Persist an account directly and return its id."""

    with app.app_context():
        hasher = app.extensions["account_service"].hasher
        account = Account(
            email=email,
            password_hash=hasher.hash(password),
            firstname=firstname,
            lastname=lastname,
            role=role,
            verified=verified,
        )
        db.session.add(account)
        db.session.commit()
        return account.id
