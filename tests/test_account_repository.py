"""Tests for the SQLAlchemy account repository."""

from __future__ import annotations

import pytest

from repositories import DuplicateAccountError, RepositoryError, SQLAlchemyAccountRepository


def _fields(email: str, firstname: str = "Jo", lastname: str = "Do") -> dict:
    return {
        "email": email,
        "password_hash": "hash",
        "firstname": firstname,
        "lastname": lastname,
    }


@pytest.fixture()
def repository(app):
    with app.app_context():
        yield SQLAlchemyAccountRepository()


def test_create_applies_model_defaults(repository):
    account = repository.create(_fields("a@x.com"))

    assert account.id is not None
    assert account.role == "customer"
    assert account.verified is False
    assert account.created_at is not None


def test_unique_constraint_is_reported_as_duplicate(repository):
    repository.create(_fields("a@x.com"))

    with pytest.raises(DuplicateAccountError):
        repository.create(_fields("a@x.com", firstname="Other"))

    assert len(repository.find()) == 1


def test_find_by_email_ignores_case(repository):
    created = repository.create(_fields("a@x.com"))

    assert repository.find_by_email("A@X.COM").id == created.id
    assert repository.find_by_email("b@x.com") is None


def test_find_matches_every_filter_case_insensitively(repository):
    repository.create(_fields("jo@x.com", "Jo", "Do"))
    repository.create(_fields("joanna@x.com", "Joanna", "Smith"))
    repository.create(_fields("kim@x.com", "Kim", "Do"))

    assert [a.email for a in repository.find()] == ["jo@x.com", "joanna@x.com", "kim@x.com"]
    assert [a.email for a in repository.find({"firstname": "jo"})] == [
        "jo@x.com",
        "joanna@x.com",
    ]
    assert [a.email for a in repository.find({"firstname": "jo", "lastname": "do"})] == [
        "jo@x.com"
    ]
    assert repository.find({"email": "nobody"}) == []


def test_find_treats_wildcards_literally(repository):
    repository.create(_fields("jo@x.com"))

    assert repository.find({"email": "%"}) == []


def test_update_fields_replaces_values(repository):
    account = repository.create(_fields("a@x.com"))

    repository.update_fields(account.id, {"verified": True, "password_hash": "new"})

    refreshed = repository.find_by_id(account.id)
    assert refreshed.verified is True
    assert refreshed.password_hash == "new"


def test_update_fields_rejects_unknown_fields(repository):
    account = repository.create(_fields("a@x.com"))

    with pytest.raises(RepositoryError):
        repository.update_fields(account.id, {"email": "b@x.com"})


def test_delete_removes_account(repository):
    account = repository.create(_fields("a@x.com"))

    repository.delete(account.id)

    assert repository.find_by_id(account.id) is None


def test_delete_missing_account_fails(repository):
    with pytest.raises(RepositoryError):
        repository.delete(404)
