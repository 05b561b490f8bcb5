"""
Tests for the AdminAccount model: normalization, validation,
password staging and reset-token validity.
"""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from admin_identity.core.errors import ValidationError
from admin_identity.db.models.admin_model import AdminAccount, build_admin_account

NOW = datetime(2030, 1, 1, 12, 0, 0)


def make_account(**overrides):
    data = {
        "email": "  Admin@Veraawell.COM ",
        "role": "admin",
        "first_name": " Jane ",
        "last_name": "Doe ",
    }
    data.update(overrides)
    return build_admin_account(**data)


def test_email_and_names_are_normalized():
    account = make_account()

    assert account.email == "admin@veraawell.com"
    assert account.first_name == "Jane"
    assert account.last_name == "Doe"


def test_defaults():
    account = make_account()

    assert account.status == "active"
    assert account.is_active
    assert not account.is_first_admin
    assert not account.is_password_changed
    assert account.requires_password_change
    assert account.last_login is None
    assert account.reset_token is None and account.reset_token_expiry is None
    assert account.activity_log == []


@pytest.mark.parametrize("field,value", [
    ("email", "not-an-email"),
    ("first_name", "   "),
    ("last_name", ""),
    ("role", "owner"),
])
def test_invalid_fields_raise_validation_error(field, value):
    with pytest.raises(ValidationError) as exc_info:
        make_account(**{field: value})

    assert field in exc_info.value.errors


def test_missing_name_raises_validation_error():
    with pytest.raises(ValidationError):
        build_admin_account(email="x@y.com", role="admin", first_name="X")


def test_object_id_becomes_string():
    oid = ObjectId()
    account = AdminAccount.from_document({
        "_id": oid,
        "email": "x@y.com",
        "password_hash": "$2b$04$abc",
        "role": "moderator",
        "first_name": "X",
        "last_name": "Y",
    })

    assert account.id == str(oid)
    assert AdminAccount.from_document(None) is None


def test_set_password_stages_without_hashing():
    account = make_account()
    account.set_password("Secret123!")

    assert account.has_pending_password
    assert account.password_hash is None
    assert "Secret123!" not in account.model_dump_json()


def test_set_password_validates():
    account = make_account()

    with pytest.raises(ValidationError):
        account.set_password("short")
    assert not account.has_pending_password


def test_reset_token_validity_is_computed_from_expiry():
    account = make_account(reset_token="t" * 64, reset_token_expiry=NOW + timedelta(hours=1))

    assert account.has_pending_reset
    assert account.is_reset_token_valid(now=NOW)
    assert account.is_reset_token_valid(now=NOW + timedelta(minutes=59))
    # Expiry is a hard boundary
    assert not account.is_reset_token_valid(now=NOW + timedelta(hours=1))
    assert not account.is_reset_token_valid(now=NOW + timedelta(minutes=61))
    # Still stored, just invalid
    assert account.reset_token == "t" * 64


def test_half_set_reset_pair_is_never_valid():
    assert not make_account(reset_token="t" * 64).is_reset_token_valid(now=NOW)
    assert not make_account(reset_token_expiry=NOW + timedelta(hours=1)).is_reset_token_valid(now=NOW)


def test_reset_token_matches_only_current_valid_token():
    account = make_account(reset_token="a" * 64, reset_token_expiry=NOW + timedelta(hours=1))

    assert account.reset_token_matches("a" * 64, now=NOW)
    assert not account.reset_token_matches("b" * 64, now=NOW)
    assert not account.reset_token_matches("a" * 64, now=NOW + timedelta(hours=2))


def test_public_profile_hides_secrets():
    account = make_account(password_hash="$2b$04$abc", reset_token="a" * 64)
    profile = account.public_profile()

    assert "password_hash" not in profile
    assert "reset_token" not in profile
    assert profile["email"] == "admin@veraawell.com"
