"""
Admin Authentication Dependencies.

Resolves the bearer token on admin routes to a live AdminAccount.
The account is re-read on every request so a suspension applies to
sessions that are already open.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from admin_identity.core.errors import AuthenticationError, NotFoundError
from admin_identity.core.security import decode_admin_token
from admin_identity.db.admin_repository import AdminRepository
from admin_identity.db.models.admin_model import AdminAccount
from admin_identity.db.mongodb import get_database
from admin_identity.services.admin_account_service import ensure_active, ensure_super_admin

# OAuth2 scheme for admin routes
oauth2_admin_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/admin/auth/login",
    auto_error=False
)


async def get_current_admin(
    token: Optional[str] = Depends(oauth2_admin_scheme),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> AdminAccount:
    """
    Dependency to get the current authenticated admin.

    Usage:
        @router.get("/status")
        async def status(admin: AdminAccount = Depends(get_current_admin)):
            ...
    """
    if not token:
        raise AuthenticationError("Admin authentication required")

    payload = decode_admin_token(token)

    try:
        account = await AdminRepository(db).find_by_id(payload["admin_id"])
    except NotFoundError:
        account = None
    if account is None:
        raise AuthenticationError("Admin not found")

    ensure_active(account)
    return account


async def require_super_admin(admin: AdminAccount = Depends(get_current_admin)) -> AdminAccount:
    ensure_super_admin(admin)
    return admin


def get_client_ip(request: Request) -> str:
    """Extract client IP from request headers"""
    # Check for forwarded IP (if behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fallback to direct client
    if request.client:
        return request.client.host

    return "unknown"


def get_user_agent(request: Request) -> str:
    """Extract User-Agent from request headers"""
    return request.headers.get("User-Agent", "unknown")
