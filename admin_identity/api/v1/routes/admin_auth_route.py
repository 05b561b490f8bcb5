# admin_identity/api/v1/routes/admin_auth_route.py
"""
Admin authentication API.

Thin HTTP layer over the account and password-reset services. Errors are
raised as AdminIdentityError subclasses and rendered by the handler
registered in main.py.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from admin_identity.core.admin_security import (
    get_client_ip,
    get_current_admin,
    get_user_agent,
    require_super_admin,
)
from admin_identity.core.errors import MailDeliveryError
from admin_identity.core.security import create_admin_token, generate_temporary_password
from admin_identity.db.models.admin_model import AdminAccount, AdminStatus
from admin_identity.db.mongodb import get_database
from admin_identity.schemas.admin_schemas import (
    ActivityEntryItem,
    ActivityLogResponse,
    AdminCreateRequest,
    AdminCreateResponse,
    AdminLogin,
    AdminProfile,
    AdminSetupRequest,
    AdminStatusRequest,
    AdminTokenResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SetupStatusResponse,
    SuccessResponse,
)
from admin_identity.services import admin_account_service, password_reset_service
from admin_identity.services.activity_service import get_activity_log, get_admin_activity_summary
from admin_identity.services.email_service import send_admin_credentials_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin Auth"])

FORGOT_PASSWORD_MESSAGE = (
    "If an admin account exists for that email, password reset instructions have been sent."
)


def _profile(account: AdminAccount) -> AdminProfile:
    return AdminProfile(**account.public_profile())


async def _mail_credentials(email: str, temporary_password: str) -> bool:
    try:
        await send_admin_credentials_email(email, temporary_password)
    except MailDeliveryError:
        logger.warning("Credentials email for %s was not delivered", email)
        return False
    return True


# ===========================
#          BOOTSTRAP
# ===========================
@router.get("/setup-status", response_model=SetupStatusResponse)
async def setup_status(db: AsyncIOMotorDatabase = Depends(get_database)):
    return SetupStatusResponse(needs_setup=not await admin_account_service.has_any_admin(db))


@router.post("/setup", response_model=AdminCreateResponse, status_code=status.HTTP_201_CREATED)
async def setup_first_admin(body: AdminSetupRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    temporary_password = None
    password = body.password
    if password is None:
        temporary_password = generate_temporary_password()
        password = temporary_password

    admin = await admin_account_service.create_first_admin(db, body.email, password)

    credentials_sent = False
    message = "Super admin created successfully."
    if temporary_password is not None:
        credentials_sent = await _mail_credentials(admin.email, temporary_password)
        if credentials_sent:
            message = "Super admin created successfully. Check email for credentials."
        else:
            message = "Super admin created, but the credentials email failed. Use forgot password to sign in."

    return AdminCreateResponse(message=message, admin=_profile(admin), credentials_sent=credentials_sent)


# ===========================
#           SESSION
# ===========================
@router.post("/login", response_model=AdminTokenResponse)
async def login(credentials: AdminLogin, request: Request, db: AsyncIOMotorDatabase = Depends(get_database)):
    admin = await admin_account_service.authenticate_admin(
        db,
        credentials.email,
        credentials.password,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )

    token = create_admin_token({"admin_id": admin.id, "role": admin.role})
    return AdminTokenResponse(access_token=token, admin=_profile(admin))


@router.get("/status", response_model=AdminProfile)
async def auth_status(admin: AdminAccount = Depends(get_current_admin)):
    return _profile(admin)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    admin: AdminAccount = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await admin_account_service.record_logout(
        db, admin, ip_address=get_client_ip(request), user_agent=get_user_agent(request)
    )
    return SuccessResponse(message="Logged out successfully")


# ===========================
#          PASSWORDS
# ===========================
@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    admin: AdminAccount = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await admin_account_service.change_password(
        db,
        admin,
        body.current_password,
        body.new_password,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    return SuccessResponse(message="Password updated successfully")


@router.post("/forgot-password", response_model=SuccessResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    admin = await password_reset_service.request_password_reset(
        db, body.email, ip_address=get_client_ip(request), user_agent=get_user_agent(request)
    )

    if admin is not None:
        try:
            await password_reset_service.deliver_reset_email(admin)
        except MailDeliveryError as exc:
            # Token stays valid; /forgot-password/resend retries the send
            logger.error("Reset email for %s not delivered: %s", admin.email, exc.message)

    # Always the same answer (don't reveal whether the admin exists)
    return SuccessResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/forgot-password/resend", response_model=SuccessResponse)
async def resend_reset_email(body: ForgotPasswordRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    try:
        await password_reset_service.resend_reset_email(db, body.email)
    except MailDeliveryError as exc:
        logger.error("Reset email resend for %s not delivered: %s", body.email, exc.message)
    return SuccessResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await password_reset_service.reset_password(
        db,
        body.token,
        body.new_password,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    return SuccessResponse(message="Password reset successful. Please login with your new password.")


# ===========================
#      ADMIN MANAGEMENT
# ===========================
@router.post("/admins", response_model=AdminCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreateRequest,
    admin: AdminAccount = Depends(require_super_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    new_admin, temporary_password = await admin_account_service.provision_admin(
        db,
        admin,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role.value,
    )

    credentials_sent = await _mail_credentials(new_admin.email, temporary_password)
    message = (
        "Admin created successfully. Credentials sent via email."
        if credentials_sent
        else "Admin created, but the credentials email failed. Ask them to use forgot password."
    )
    return AdminCreateResponse(message=message, admin=_profile(new_admin), credentials_sent=credentials_sent)


@router.post("/admins/{admin_id}/suspend", response_model=AdminProfile)
async def suspend_admin(
    admin_id: str,
    body: AdminStatusRequest,
    admin: AdminAccount = Depends(require_super_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    target = await admin_account_service.set_admin_status(
        db, admin, admin_id, AdminStatus.SUSPENDED.value, reason=body.reason
    )
    return _profile(target)


@router.post("/admins/{admin_id}/reactivate", response_model=AdminProfile)
async def reactivate_admin(
    admin_id: str,
    body: AdminStatusRequest,
    admin: AdminAccount = Depends(require_super_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    target = await admin_account_service.set_admin_status(
        db, admin, admin_id, AdminStatus.ACTIVE.value, reason=body.reason
    )
    return _profile(target)


# ===========================
#          ACTIVITY
# ===========================
@router.get("/activity", response_model=ActivityLogResponse)
async def my_activity(
    admin: AdminAccount = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    entries = await get_activity_log(db, admin.id)
    summary = await get_admin_activity_summary(db, admin.id)
    return ActivityLogResponse(
        entries=[ActivityEntryItem(**entry.model_dump()) for entry in entries],
        total=len(entries),
        summary=summary,
    )
