# admin_identity/services/password_reset_service.py
"""
Password reset flow for admin accounts.

A reset is pending while an account stores both a reset token and its
expiry. Validity is always recomputed from the expiry timestamp; expired
tokens are left in place until cleared, overwritten or swept.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from admin_identity.core import security
from admin_identity.core.config import settings
from admin_identity.core.errors import (
    AuthorizationError,
    NotFoundError,
    TokenInvalidError,
    ValidationError,
)
from admin_identity.db.admin_repository import AdminRepository
from admin_identity.db.models.admin_model import AdminAccount
from admin_identity.services.activity_service import ActivityActions, log_activity
from admin_identity.services.email_service import send_password_reset_email
from admin_identity.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def _mirror_reset_fields(account: AdminAccount, stored: AdminAccount) -> None:
    account.reset_token = stored.reset_token
    account.reset_token_expiry = stored.reset_token_expiry
    account.updated_at = stored.updated_at


# ===========================
#      TOKEN LIFECYCLE
# ===========================
async def issue_reset_token(
    db: AsyncIOMotorDatabase,
    account: AdminAccount,
    now: Optional[datetime] = None,
) -> str:
    """
    Store a fresh reset token valid for RESET_TOKEN_EXPIRE_MINUTES.
    Any earlier token is overwritten and stops working at once.
    """
    token = security.generate_reset_token()
    expiry = (now or utcnow()) + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)

    stored = await AdminRepository(db).update_fields(
        account.id,
        {"reset_token": token, "reset_token_expiry": expiry},
    )
    _mirror_reset_fields(account, stored)
    return token


async def clear_reset_token(db: AsyncIOMotorDatabase, account: AdminAccount) -> None:
    stored = await AdminRepository(db).update_fields(
        account.id,
        {"reset_token": None, "reset_token_expiry": None},
    )
    _mirror_reset_fields(account, stored)


async def sweep_expired_reset_tokens(db: AsyncIOMotorDatabase, now: Optional[datetime] = None) -> int:
    """Clear every reset pair whose expiry has passed. Not scheduled by default."""
    cleared = await AdminRepository(db).clear_expired_reset_tokens(now or utcnow())
    if cleared:
        logger.info("Cleared %d expired reset tokens", cleared)
    return cleared


# ===========================
#      FORGOT PASSWORD
# ===========================
async def request_password_reset(
    db: AsyncIOMotorDatabase,
    email: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[AdminAccount]:
    """
    Issue a reset token for the admin owning `email`.

    Returns None when there is nothing to reset (unknown or suspended
    account); the caller must answer the same way in every case.
    """
    account = await AdminRepository(db).find_by_email(email)

    if account is None:
        logger.info("Password reset requested for unknown email %s", email)
        return None

    if not account.is_active:
        logger.warning("Password reset requested for suspended admin %s", account.email)
        return None

    await issue_reset_token(db, account)

    details = {}
    if ip_address:
        details["ip_address"] = ip_address
    if user_agent:
        details["user_agent"] = user_agent
    await log_activity(db, account, ActivityActions.PASSWORD_RESET_REQUESTED, details)

    logger.info(
        "Password reset token generated for %s (expires %s)",
        account.email,
        account.reset_token_expiry,
    )
    return account


async def deliver_reset_email(account: AdminAccount) -> None:
    """
    Mail the account's pending token. A MailDeliveryError leaves the token
    untouched so the send can be retried.
    """
    if not account.is_reset_token_valid():
        raise TokenInvalidError()
    await send_password_reset_email(account.email, account.first_name, account.reset_token)


async def resend_reset_email(db: AsyncIOMotorDatabase, email: str) -> bool:
    """Re-send a still-valid token without issuing a new one."""
    account = await AdminRepository(db).find_by_email(email)
    if account is None or not account.is_active or not account.is_reset_token_valid():
        return False
    await deliver_reset_email(account)
    return True


# ===========================
#       RESET PASSWORD
# ===========================
async def reset_password(
    db: AsyncIOMotorDatabase,
    token: str,
    new_password: str,
    now: Optional[datetime] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AdminAccount:
    """
    Consume a reset token and set a new password.
    Missing, unknown and expired tokens all raise the same TokenInvalidError.
    """
    repo = AdminRepository(db)
    account = await repo.find_by_reset_token(token)

    if account is None or not account.reset_token_matches(token, now):
        raise TokenInvalidError()

    if not account.is_active:
        raise AuthorizationError("Account is suspended")

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

    try:
        # Only the holder of the current token may consume it, once
        await repo.save(
            account,
            fields=["is_password_changed", "reset_token", "reset_token_expiry"],
            conditions={"reset_token": token},
        )
    except NotFoundError:
        raise TokenInvalidError()

    details = {}
    if ip_address:
        details["ip_address"] = ip_address
    if user_agent:
        details["user_agent"] = user_agent
    await log_activity(db, account, ActivityActions.PASSWORD_RESET, details)

    logger.info("Password reset successful for %s", account.email)
    return account
