"""
Login, password change, provisioning and suspension.
"""

import pytest

from admin_identity.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from admin_identity.services import admin_account_service

from conftest import FIRST_ADMIN_EMAIL, FIRST_ADMIN_PASSWORD, make_first_admin


async def make_moderator(db, creator, email="mod@x.com"):
    return await admin_account_service.provision_admin(
        db, creator, email=email, first_name="Mo", last_name="Derator", role="moderator"
    )


# ===========================
#           LOGIN
# ===========================
@pytest.mark.asyncio
async def test_login_updates_last_login_and_logs(db, repo):
    await make_first_admin(db)

    admin = await admin_account_service.authenticate_admin(
        db, "  A@x.com", FIRST_ADMIN_PASSWORD, ip_address="1.2.3.4", user_agent="pytest"
    )

    assert admin.last_login is not None
    stored = await repo.find_by_id(admin.id)
    assert stored.last_login is not None
    assert stored.activity_log[-1].action == "login"
    assert stored.activity_log[-1].details == {"ip_address": "1.2.3.4", "user_agent": "pytest"}


@pytest.mark.asyncio
async def test_login_failures_look_the_same(db, repo):
    admin = await make_first_admin(db)

    with pytest.raises(AuthenticationError) as unknown:
        await admin_account_service.authenticate_admin(db, "nobody@x.com", FIRST_ADMIN_PASSWORD)
    with pytest.raises(AuthenticationError) as wrong:
        await admin_account_service.authenticate_admin(db, FIRST_ADMIN_EMAIL, "wrong")

    assert unknown.value.message == wrong.value.message == "Invalid credentials"

    stored = await repo.find_by_id(admin.id)
    assert stored.last_login is None
    assert stored.activity_log[-1].action == "login_failed"


@pytest.mark.asyncio
async def test_suspended_admin_cannot_login(db):
    first = await make_first_admin(db)
    mod, temp = await make_moderator(db, first)
    await admin_account_service.set_admin_status(db, first, mod.id, "suspended")

    with pytest.raises(AuthorizationError):
        await admin_account_service.authenticate_admin(db, "mod@x.com", temp)


# ===========================
#      CHANGE PASSWORD
# ===========================
@pytest.mark.asyncio
async def test_change_password(db, repo):
    admin = await make_first_admin(db)
    assert admin.requires_password_change

    await admin_account_service.change_password(db, admin, FIRST_ADMIN_PASSWORD, "BrandNew123!")

    stored = await repo.find_by_id(admin.id)
    assert stored.is_password_changed
    assert not stored.requires_password_change
    assert stored.compare_password("BrandNew123!")
    assert not stored.compare_password(FIRST_ADMIN_PASSWORD)
    assert stored.activity_log[-1].action == "password_change"


@pytest.mark.asyncio
async def test_change_password_requires_current(db, repo):
    admin = await make_first_admin(db)

    with pytest.raises(AuthenticationError):
        await admin_account_service.change_password(db, admin, "wrong", "BrandNew123!")

    with pytest.raises(ValidationError):
        await admin_account_service.change_password(db, admin, FIRST_ADMIN_PASSWORD, FIRST_ADMIN_PASSWORD)

    with pytest.raises(ValidationError):
        await admin_account_service.change_password(db, admin, FIRST_ADMIN_PASSWORD, "short")

    stored = await repo.find_by_id(admin.id)
    assert not stored.is_password_changed
    assert stored.compare_password(FIRST_ADMIN_PASSWORD)


# ===========================
#        PROVISIONING
# ===========================
@pytest.mark.asyncio
async def test_provision_admin_generates_temporary_password(db, repo):
    first = await make_first_admin(db)

    new_admin, temp = await admin_account_service.provision_admin(
        db, first, email="New@X.com", first_name="New", last_name="Admin"
    )

    assert temp is not None
    assert new_admin.email == "new@x.com"
    assert new_admin.role == "admin"
    assert new_admin.is_first_admin is False
    assert new_admin.requires_password_change
    assert new_admin.compare_password(temp)

    stored_first = await repo.find_by_id(first.id)
    assert stored_first.activity_log[-1].action == "create_admin"
    assert stored_first.activity_log[-1].details["new_admin_email"] == "new@x.com"


@pytest.mark.asyncio
async def test_provision_admin_with_explicit_password(db):
    first = await make_first_admin(db)

    new_admin, temp = await admin_account_service.provision_admin(
        db, first, email="new@x.com", first_name="New", last_name="Admin", password="Chosen123!"
    )

    assert temp is None
    assert new_admin.compare_password("Chosen123!")


@pytest.mark.asyncio
async def test_only_super_admin_can_provision(db):
    first = await make_first_admin(db)
    mod, _ = await make_moderator(db, first)

    with pytest.raises(AuthorizationError):
        await admin_account_service.provision_admin(
            db, mod, email="other@x.com", first_name="O", last_name="Ther"
        )


@pytest.mark.asyncio
async def test_provision_rejects_unknown_role(db):
    first = await make_first_admin(db)

    with pytest.raises(ValidationError):
        await admin_account_service.provision_admin(
            db, first, email="other@x.com", first_name="O", last_name="Ther", role="owner"
        )


@pytest.mark.asyncio
async def test_provisioned_super_admin_is_not_first_admin(db):
    first = await make_first_admin(db)

    second, _ = await admin_account_service.provision_admin(
        db, first, email="s2@x.com", first_name="Second", last_name="Super", role="super_admin"
    )

    assert second.is_super_admin
    assert not second.is_first_admin
    assert await db["admins"].count_documents({"is_first_admin": True}) == 1


# ===========================
#         SUSPENSION
# ===========================
@pytest.mark.asyncio
async def test_suspend_and_reactivate(db, repo):
    first = await make_first_admin(db)
    mod, _ = await make_moderator(db, first)

    suspended = await admin_account_service.set_admin_status(db, first, mod.id, "suspended", reason="audit")
    assert suspended.status == "suspended"
    assert not suspended.is_active

    reactivated = await admin_account_service.set_admin_status(db, first, mod.id, "active")
    assert reactivated.is_active

    stored_first = await repo.find_by_id(first.id)
    assert [e.action for e in stored_first.activity_log[-2:]] == ["admin_suspended", "admin_reactivated"]
    assert stored_first.activity_log[-2].details["reason"] == "audit"


@pytest.mark.asyncio
async def test_first_admin_cannot_be_suspended(db):
    first = await make_first_admin(db)
    second, _ = await admin_account_service.provision_admin(
        db, first, email="s2@x.com", first_name="Second", last_name="Super", role="super_admin"
    )

    with pytest.raises(AuthorizationError):
        await admin_account_service.set_admin_status(db, second, first.id, "suspended")
    with pytest.raises(AuthorizationError):
        await admin_account_service.set_admin_status(db, second, second.id, "suspended")


@pytest.mark.asyncio
async def test_set_status_errors(db):
    first = await make_first_admin(db)
    mod, _ = await make_moderator(db, first)

    with pytest.raises(ValidationError):
        await admin_account_service.set_admin_status(db, first, mod.id, "deleted")
    with pytest.raises(NotFoundError):
        await admin_account_service.set_admin_status(db, first, "507f1f77bcf86cd799439011", "suspended")
    with pytest.raises(AuthorizationError):
        await admin_account_service.set_admin_status(db, mod, first.id, "suspended")
