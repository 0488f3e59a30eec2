"""Tests for user accounts and password handling."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ledger_api.crud import crud_user
from ledger_api.db.core import NotFoundError, ValidationError
from ledger_api.models.user import UserCreate, UserUpdate


def user_request(email="jane.doe@example.com", password="correct horse", auth_provider_id="local|jane"):
    return UserCreate(
        auth_provider_id=auth_provider_id,
        auth_provider_type="EMAIL_PASSWORD",
        email=email,
        password=password,
        first_name=" Jane ",
        last_name="Doe",
    )


@pytest.fixture
def user(db):
    return crud_user.create_db_user(db, user_request())


def test_password_is_stored_as_bcrypt_hash(user):
    assert user.password_hash != "correct horse"
    assert user.password_hash.startswith("$2")
    assert crud_user.verify_password("correct horse", user.password_hash)
    assert user.first_name == "Jane"


def test_email_is_normalized(db):
    created = crud_user.create_db_user(db, user_request(email="  Jane.Doe@Example.COM "))
    assert created.email == "jane.doe@example.com"
    assert crud_user.read_db_user_by_email(db, "JANE.DOE@example.com").id == created.id


def test_invalid_email_is_rejected_by_the_model():
    with pytest.raises(PydanticValidationError):
        user_request(email="not-an-email")


def test_short_password_is_rejected_by_the_model():
    with pytest.raises(PydanticValidationError):
        user_request(password="short")


def test_duplicate_email(db, user):
    with pytest.raises(ValidationError, match="Email already registered"):
        crud_user.create_db_user(db, user_request(auth_provider_id="local|jane2"))


def test_duplicate_auth_provider_id(db, user):
    with pytest.raises(ValidationError, match="Auth provider ID"):
        crud_user.create_db_user(db, user_request(email="jane2@example.com"))


def test_sso_user_without_password(db):
    created = crud_user.create_db_user(db, user_request(password=None, auth_provider_id="google|123"))
    assert created.password_hash is None
    assert crud_user.authenticate_user(db, "jane.doe@example.com", "anything at all") is None


def test_password_change_is_rehashed(db, user):
    updated = crud_user.update_db_user(db, user.id, UserUpdate(password="battery staple"))

    assert crud_user.verify_password("battery staple", updated.password_hash)
    assert not crud_user.verify_password("correct horse", updated.password_hash)


def test_update_to_taken_email(db, user):
    other = crud_user.create_db_user(db, user_request(email="john@example.com", auth_provider_id="local|john"))
    with pytest.raises(ValidationError, match="Email already registered"):
        crud_user.update_db_user(db, other.id, UserUpdate(email="jane.doe@example.com"))


def test_authenticate_records_login(db, user):
    assert user.last_login_at is None

    authenticated = crud_user.authenticate_user(db, "Jane.Doe@example.com", "correct horse")
    assert authenticated.id == user.id
    assert authenticated.last_login_at is not None


def test_wrong_password(db, user):
    assert crud_user.authenticate_user(db, "jane.doe@example.com", "wrong password") is None


def test_deactivated_user(db, user):
    crud_user.deactivate_db_user(db, user.id)

    assert crud_user.authenticate_user(db, "jane.doe@example.com", "correct horse") is None
    with pytest.raises(NotFoundError):
        crud_user.read_db_user(db, user.id)
    with pytest.raises(NotFoundError):
        crud_user.deactivate_db_user(db, user.id)
