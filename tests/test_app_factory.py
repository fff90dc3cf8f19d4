"""Tests for the Flask application factory."""
from __future__ import annotations

import pytest

from app import create_app
from notifications import OutboxMailer, SMTPMailer
from repositories import SQLAlchemyAccountRepository

from conftest import _BaseTestConfig


def test_health_endpoint_returns_ok(client):
    """The health endpoint should respond with an OK payload."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_blueprints_registered(app):
    """Application factory should register the users blueprint."""
    assert "users" in app.blueprints
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    assert {"/users/register", "/users/login", "/users/verify/<token>"}.issubset(rules)


def test_account_service_is_wired_from_config(app):
    service = app.extensions["account_service"]

    assert isinstance(service.repository, SQLAlchemyAccountRepository)
    assert isinstance(service.mailer, OutboxMailer)
    assert service.app_url == "https://shop.example.com"
    assert service.hasher.method == "pbkdf2:sha256:1000"
    assert app.config["JWT_DECODE_AUDIENCE"] == "session"


def test_smtp_backend_is_the_default():
    class SMTPConfig(_BaseTestConfig):
        MAIL_BACKEND = "smtp"
        MAIL_SERVER = "smtp.example.com"

    app = create_app(SMTPConfig)
    mailer = app.extensions["account_service"].mailer

    assert isinstance(mailer, SMTPMailer)
    assert mailer.host == "smtp.example.com"


def test_injected_collaborators_take_precedence():
    mailer = OutboxMailer()

    app = create_app(_BaseTestConfig, mailer=mailer)

    assert app.extensions["account_service"].mailer is mailer


def test_unknown_mail_backend_is_rejected():
    class BadConfig(_BaseTestConfig):
        MAIL_BACKEND = "pigeon"

    with pytest.raises(ValueError):
        create_app(BadConfig)
