# admin_identity/schemas/admin_schemas.py
"""
Request/response schemas for the admin auth API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from admin_identity.db.models.admin_model import AdminRole, AdminStatus


# ========================================
# BOOTSTRAP
# ========================================

class SetupStatusResponse(BaseModel):
    needs_setup: bool


class AdminSetupRequest(BaseModel):
    """First admin setup. Without a password a temporary one is mailed."""
    email: str
    password: Optional[str] = None


# ========================================
# AUTHENTICATION
# ========================================

class AdminLogin(BaseModel):
    """Admin login request"""
    email: str
    password: str


class AdminProfile(BaseModel):
    """Admin profile response"""
    id: str
    email: str
    role: AdminRole
    first_name: str
    last_name: str
    status: AdminStatus
    is_first_admin: bool = False
    requires_password_change: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime


class AdminTokenResponse(BaseModel):
    """Admin login response"""
    access_token: str
    token_type: str = "bearer"
    admin: AdminProfile


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


# ========================================
# ADMIN MANAGEMENT
# ========================================

class AdminCreateRequest(BaseModel):
    email: str
    first_name: str
    last_name: str
    role: AdminRole = AdminRole.ADMIN


class AdminCreateResponse(BaseModel):
    success: bool = True
    message: str
    admin: AdminProfile
    credentials_sent: bool


class AdminStatusRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# ========================================
# ACTIVITY
# ========================================

class ActivityEntryItem(BaseModel):
    action: str
    timestamp: datetime
    details: Dict[str, Any] = {}


class ActivityLogResponse(BaseModel):
    entries: List[ActivityEntryItem]
    total: int
    summary: Dict[str, Any]


class SuccessResponse(BaseModel):
    """Generic success response"""
    success: bool = True
    message: str
