# admin_identity/services/activity_service.py
"""
Activity Logging Service for Admin Actions.

Each admin account carries its own append-only activity log. Entries are
pushed atomically onto the stored account and mirrored on the in-memory
copy the caller holds.
"""

import copy
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Type

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from admin_identity.core.errors import ValidationError
from admin_identity.db.admin_repository import AdminRepository
from admin_identity.db.models.activity_log_model import ActivityEntry
from admin_identity.db.models.admin_model import AdminAccount
from admin_identity.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


# Predefined action types for consistency
class ActivityActions:
    """Standard activity action types"""

    # Authentication
    LOGIN = "login"
    LOGOUT = "logout"
    LOGIN_FAILED = "login_failed"

    # Credentials
    PASSWORD_CHANGE = "password_change"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET = "password_reset"

    # Account management
    FIRST_ADMIN_CREATED = "first_admin_created"
    CREATE_ADMIN = "create_admin"
    ADMIN_SUSPENDED = "admin_suspended"
    ADMIN_REACTIVATED = "admin_reactivated"


# ========================================
# DETAILS SCHEMAS PER ACTION
# ========================================
# Known actions validate their payload; extra keys are kept so each action
# can grow its payload without a migration.

class _Details(BaseModel):
    class Config:
        extra = "allow"


class SessionDetails(_Details):
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class LoginFailedDetails(SessionDetails):
    reason: Optional[str] = None


class CreateAdminDetails(_Details):
    new_admin_id: str
    new_admin_email: str
    role: Optional[str] = None


class StatusChangeDetails(_Details):
    target_admin_id: str
    target_admin_email: Optional[str] = None
    reason: Optional[str] = None


ACTIVITY_DETAIL_SCHEMAS: Dict[str, Type[BaseModel]] = {
    ActivityActions.LOGIN: SessionDetails,
    ActivityActions.LOGOUT: SessionDetails,
    ActivityActions.LOGIN_FAILED: LoginFailedDetails,
    ActivityActions.PASSWORD_CHANGE: SessionDetails,
    ActivityActions.PASSWORD_RESET_REQUESTED: SessionDetails,
    ActivityActions.PASSWORD_RESET: SessionDetails,
    ActivityActions.CREATE_ADMIN: CreateAdminDetails,
    ActivityActions.ADMIN_SUSPENDED: StatusChangeDetails,
    ActivityActions.ADMIN_REACTIVATED: StatusChangeDetails,
}


def validate_activity_details(action: str, details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Check details against the action's schema, if one is registered."""
    if details is None:
        details = {}
    if not isinstance(details, dict):
        raise ValidationError("Activity details must be a mapping", errors={"details": "not_a_mapping"})

    schema = ACTIVITY_DETAIL_SCHEMAS.get(action)
    if schema is None:
        return copy.deepcopy(details)

    try:
        schema.model_validate(details)
    except PydanticValidationError as exc:
        errors = {".".join(str(p) for p in err["loc"]): err["msg"] for err in exc.errors()}
        raise ValidationError(f"Invalid details for action '{action}'", errors=errors) from exc

    return copy.deepcopy(details)


async def log_activity(
    db: AsyncIOMotorDatabase,
    account: AdminAccount,
    action: str,
    details: Optional[Dict[str, Any]] = None,
) -> ActivityEntry:
    """
    Append an entry to the account's activity log.

    Args:
        db: MongoDB database instance
        account: The admin the entry belongs to (must be persisted)
        action: Action type (see ActivityActions)
        details: Free-form payload for the action

    Returns:
        ActivityEntry: the entry as stored
    """
    if not isinstance(action, str) or not action.strip():
        raise ValidationError("Activity action is required", errors={"action": "required"})

    entry = ActivityEntry(
        action=action.strip(),
        timestamp=utcnow(),
        details=validate_activity_details(action.strip(), details),
    )

    await AdminRepository(db).append_activity(account.id, entry)
    account.activity_log.append(entry)

    logger.debug("Activity '%s' logged for %s", entry.action, account.email)
    return entry


async def get_activity_log(db: AsyncIOMotorDatabase, admin_id: str) -> List[ActivityEntry]:
    """Full snapshot of an admin's activity log, oldest first."""
    return await AdminRepository(db).get_activity_log(admin_id)


async def get_admin_activity_summary(
    db: AsyncIOMotorDatabase,
    admin_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Get activity summary for a specific admin.

    Returns counts by action type over the last `days` days.
    """
    date_from = (now or utcnow()) - timedelta(days=days)
    entries = await get_activity_log(db, admin_id)

    actions: Dict[str, int] = {}
    for entry in entries:
        if entry.timestamp >= date_from:
            actions[entry.action] = actions.get(entry.action, 0) + 1

    return {
        "admin_id": admin_id,
        "period_days": days,
        "actions": dict(sorted(actions.items(), key=lambda item: item[1], reverse=True)),
        "total_actions": sum(actions.values()),
    }
