import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from admin_identity.core.config import settings
from admin_identity.core.errors import MailDeliveryError

logger = logging.getLogger(__name__)


def _send_sync(to_email: str, subject: str, body: str):
    msg = MIMEMultipart()
    msg["From"] = settings.SMTP_USER          # SYSTEM EMAIL
    msg["To"] = to_email                      # ADMIN EMAIL
    msg["Subject"] = subject

    msg.attach(MIMEText(body, "plain"))

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    try:
        server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASS)
        server.sendmail(settings.SMTP_USER, to_email, msg.as_string())
    finally:
        server.quit()


async def send_email(to_email: str, subject: str, body: str):
    if not settings.SMTP_HOST or not settings.SMTP_USER:
        raise MailDeliveryError("Email delivery is not configured")

    try:
        await asyncio.to_thread(_send_sync, to_email, subject, body)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Email to %s failed: %s", to_email, exc)
        raise MailDeliveryError() from exc

    logger.info("Email '%s' sent to %s", subject, to_email)


async def send_password_reset_email(to_email: str, first_name: str, reset_token: str):
    reset_url = f"{settings.FRONTEND_BASE_URL}/admin/reset-password?token={reset_token}"
    body = (
        f"Hi {first_name},\n\n"
        "We received a request to reset your Veraawell admin password.\n"
        f"Use the link below to choose a new one:\n\n{reset_url}\n\n"
        f"This link will expire in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.\n"
        "If you did not request a reset you can ignore this email."
    )
    await send_email(to_email, "Reset Your Veraawell Admin Password", body)


async def send_admin_credentials_email(to_email: str, temporary_password: str):
    body = (
        "Your Veraawell admin account has been created.\n\n"
        f"Email: {to_email}\n"
        f"Temporary Password: {temporary_password}\n\n"
        "Please change your password upon first login."
    )
    await send_email(to_email, "Your Veraawell Admin Account", body)
