from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
import smtplib
from typing import Literal

from profitpulse.core.config import settings

EmailDeliveryStatus = Literal["sent", "not_configured", "failed"]


@dataclass(frozen=True)
class EmailDeliveryResult:
    status: EmailDeliveryStatus
    detail: str | None = None


def _smtp_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_sender_email)


def build_reset_link(raw_token: str) -> str:
    return f"{settings.frontend_url}/?token={raw_token}"


def _build_password_reset_body(*, username: str, reset_link: str, expires_at: datetime) -> str:
    return "\n".join(
        [
            f"Hello {username},",
            "",
            f"A password reset was requested for your {settings.app_name} account.",
            f"Reset your password: {reset_link}",
            "",
            f"This link expires at {expires_at.isoformat()}.",
            "If you did not request a reset, you can ignore this email.",
        ]
    )


def _deliver(message: EmailMessage) -> None:
    if settings.smtp_use_ssl:
        with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=20) as server:
            if settings.smtp_username:
                server.login(settings.smtp_username, settings.smtp_password or "")
            server.send_message(message)
        return

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=20) as server:
        if settings.smtp_use_starttls:
            server.starttls()
        if settings.smtp_username:
            server.login(settings.smtp_username, settings.smtp_password or "")
        server.send_message(message)


def send_password_reset_email(
    *,
    recipient_email: str,
    username: str,
    reset_link: str,
    expires_at: datetime,
) -> EmailDeliveryResult:
    if not _smtp_configured():
        return EmailDeliveryResult(status="not_configured", detail="SMTP not configured")

    message = EmailMessage()
    message["Subject"] = f"{settings.app_name} password reset"
    message["From"] = settings.smtp_sender_email
    message["To"] = recipient_email
    message.set_content(
        _build_password_reset_body(username=username, reset_link=reset_link, expires_at=expires_at)
    )

    try:
        _deliver(message)
    except Exception as exc:  # noqa: BLE001 - expose short status back to caller
        return EmailDeliveryResult(status="failed", detail=str(exc))

    return EmailDeliveryResult(status="sent")
