# admin_identity/services/admin_account_service.py
"""
Admin account lifecycle: first-admin bootstrap, login, password change,
provisioning by a super admin and suspension.
"""

import logging
from typing import Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from admin_identity.core import security
from admin_identity.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from admin_identity.db.admin_repository import AdminRepository
from admin_identity.db.models.activity_log_model import ActivityEntry
from admin_identity.db.models.admin_model import (
    AdminAccount,
    AdminRole,
    AdminStatus,
    build_admin_account,
)
from admin_identity.services.activity_service import ActivityActions, log_activity
from admin_identity.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

FIRST_ADMIN_FIRST_NAME = "Super"
FIRST_ADMIN_LAST_NAME = "Admin"


def _session_details(ip_address: Optional[str], user_agent: Optional[str]) -> dict:
    details = {}
    if ip_address:
        details["ip_address"] = ip_address
    if user_agent:
        details["user_agent"] = user_agent
    return details


def ensure_active(account: AdminAccount) -> None:
    if not account.is_active:
        raise AuthorizationError("Account is suspended")


def ensure_super_admin(account: AdminAccount) -> None:
    ensure_active(account)
    if not account.is_super_admin:
        raise AuthorizationError("Super admin privileges required")


# ===========================
#          LOOKUPS
# ===========================
async def has_any_admin(db: AsyncIOMotorDatabase) -> bool:
    return await AdminRepository(db).has_any()


async def get_admin_by_id(db: AsyncIOMotorDatabase, admin_id: str) -> AdminAccount:
    account = await AdminRepository(db).find_by_id(admin_id)
    if account is None:
        raise NotFoundError()
    return account


# ===========================
#          BOOTSTRAP
# ===========================
async def create_first_admin(db: AsyncIOMotorDatabase, email: str, password: str) -> AdminAccount:
    """
    Create the bootstrap super admin.

    Only one call can ever win: the store accepts a single bootstrap
    marker, so concurrent callers that both saw an empty admins
    collection still end up with exactly one first admin.
    """
    account = build_admin_account(
        email=email,
        role=AdminRole.SUPER_ADMIN.value,
        first_name=FIRST_ADMIN_FIRST_NAME,
        last_name=FIRST_ADMIN_LAST_NAME,
        is_first_admin=True,
        is_password_changed=False,
    )
    account.set_password(password)
    # Written with the account itself, so the insert is the only commit point
    account.activity_log.append(
        ActivityEntry(action=ActivityActions.FIRST_ADMIN_CREATED, timestamp=utcnow(), details={})
    )

    repo = AdminRepository(db)
    if await repo.has_any():
        raise ConflictError("Cannot create first admin: admins already exist")

    if not await repo.claim_first_admin_marker(account.email):
        logger.warning("Lost first-admin bootstrap race for %s", account.email)
        raise ConflictError("Cannot create first admin: admins already exist")

    try:
        await repo.insert(account)
    except Exception:
        try:
            await repo.release_first_admin_marker()
        except PersistenceError:
            logger.exception("Could not release first-admin marker for %s", account.email)
        raise

    try:
        await repo.attach_first_admin_marker(account.id)
    except PersistenceError:
        # The marker still blocks a second bootstrap; only the back-reference is missing
        logger.warning("First admin %s created but marker not linked", account.id)

    logger.info("👤 First admin created: %s", account.email)
    return account


# ===========================
#           LOGIN
# ===========================
async def authenticate_admin(
    db: AsyncIOMotorDatabase,
    email: str,
    password: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AdminAccount:
    """
    Verify credentials and record the login.
    Unknown email and wrong password fail identically.
    """
    repo = AdminRepository(db)
    account = await repo.find_by_email(email)

    if account is None:
        # Burn the same bcrypt time as a real check
        security.pwd_context.dummy_verify()
        logger.info("Admin login failed: unknown email %s", email)
        raise AuthenticationError("Invalid credentials")

    if not account.compare_password(password):
        details = _session_details(ip_address, user_agent)
        details["reason"] = "bad_password"
        await log_activity(db, account, ActivityActions.LOGIN_FAILED, details)
        logger.info("Admin login failed: bad password for %s", account.email)
        raise AuthenticationError("Invalid credentials")

    ensure_active(account)

    account.last_login = utcnow()
    await repo.save(account, fields=["last_login"])
    await log_activity(db, account, ActivityActions.LOGIN, _session_details(ip_address, user_agent))

    logger.info("Admin logged in: %s", account.email)
    return account


async def record_logout(
    db: AsyncIOMotorDatabase,
    account: AdminAccount,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    await log_activity(db, account, ActivityActions.LOGOUT, _session_details(ip_address, user_agent))


# ===========================
#      CHANGE PASSWORD
# ===========================
async def change_password(
    db: AsyncIOMotorDatabase,
    account: AdminAccount,
    current_password: str,
    new_password: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AdminAccount:
    ensure_active(account)

    if not account.compare_password(current_password):
        raise AuthenticationError("Current password is incorrect")

    security.validate_password(new_password)
    if account.compare_password(new_password):
        raise ValidationError(
            "New password must be different from your current password",
            errors={"new_password": "unchanged"},
        )

    account.set_password(new_password)
    account.is_password_changed = True
    account.reset_token = None
    account.reset_token_expiry = None

    await AdminRepository(db).save(
        account,
        fields=["is_password_changed", "reset_token", "reset_token_expiry"],
    )
    await log_activity(db, account, ActivityActions.PASSWORD_CHANGE, _session_details(ip_address, user_agent))

    logger.info("Password changed for %s", account.email)
    return account


# ===========================
#        PROVISIONING
# ===========================
async def provision_admin(
    db: AsyncIOMotorDatabase,
    creator: AdminAccount,
    email: str,
    first_name: str,
    last_name: str,
    role: str = AdminRole.ADMIN.value,
    password: Optional[str] = None,
) -> Tuple[AdminAccount, Optional[str]]:
    """
    Create an admin on behalf of a super admin.

    Returns the account and, when no password was given, the generated
    temporary password so the caller can mail it.
    """
    ensure_super_admin(creator)

    temporary_password = None
    if password is None:
        temporary_password = security.generate_temporary_password()
        password = temporary_password

    account = build_admin_account(
        email=email,
        role=role or AdminRole.ADMIN.value,
        first_name=first_name,
        last_name=last_name,
        is_first_admin=False,
        is_password_changed=False,
    )
    account.set_password(password)

    await AdminRepository(db).insert(account)
    await log_activity(db, creator, ActivityActions.CREATE_ADMIN, {
        "new_admin_id": account.id,
        "new_admin_email": account.email,
        "role": account.role,
    })

    logger.info("Admin %s created by %s", account.email, creator.email)
    return account, temporary_password


# ===========================
#         SUSPENSION
# ===========================
async def set_admin_status(
    db: AsyncIOMotorDatabase,
    actor: AdminAccount,
    admin_id: str,
    status: str,
    reason: Optional[str] = None,
) -> AdminAccount:
    ensure_super_admin(actor)

    try:
        status = AdminStatus(status).value
    except ValueError:
        raise ValidationError("Unknown admin status", errors={"status": "invalid"})

    target = await get_admin_by_id(db, admin_id)

    if status == AdminStatus.SUSPENDED.value:
        if target.is_first_admin:
            raise AuthorizationError("The first admin cannot be suspended")
        if target.id == actor.id:
            raise AuthorizationError("Admins cannot suspend themselves")

    target.status = status
    target = await AdminRepository(db).save(target, fields=["status"])

    action = (
        ActivityActions.ADMIN_SUSPENDED
        if status == AdminStatus.SUSPENDED.value
        else ActivityActions.ADMIN_REACTIVATED
    )
    details = {"target_admin_id": target.id, "target_admin_email": target.email}
    if reason:
        details["reason"] = reason
    await log_activity(db, actor, action, details)

    logger.info("Admin %s set to %s by %s", target.email, status, actor.email)
    return target
