import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from profitpulse.core.config import settings
from profitpulse.core.errors import (
    ConflictOrInternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from profitpulse.core.observability import log_event
from profitpulse.core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from profitpulse.models.admin import Admin, AdminRole
from profitpulse.schemas.auth import AdminProfileOut, LoginOut
from profitpulse.services.email_service import build_reset_link, send_password_reset_email

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."
RESET_INVALID_MESSAGE = "Password reset token is invalid or has expired."
RESET_DONE_MESSAGE = "Password has been reset successfully."

# Checked against when the username is unknown so both login failures pay the bcrypt cost.
_DUMMY_PASSWORD_HASH = hash_password("profitpulse-unknown-admin")


@dataclass(frozen=True)
class PasswordResetDelivery:
    """Mail job handed to the background task; ``recipient_email`` is None for unknown accounts."""

    recipient_email: str | None
    username: str
    reset_link: str
    expires_at: datetime
    admin_id: int | None = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def profile_out(admin: Admin) -> AdminProfileOut:
    return AdminProfileOut(
        id=admin.id,
        username=admin.username,
        email=admin.email,
        full_name=admin.full_name,
        role=admin.role,
        created_at=admin.created_at,
    )


def authenticate(db: Session, username: str, password: str) -> LoginOut:
    admin = db.execute(
        select(Admin).where(func.lower(Admin.username) == username.strip().lower())
    ).scalar_one_or_none()

    # Unknown user and wrong password are indistinguishable to the caller.
    password_hash = admin.password_hash if admin else _DUMMY_PASSWORD_HASH
    if not verify_password(password, password_hash) or not admin:
        raise InvalidCredentialsError()

    token = create_access_token(admin.id, admin.role.value)
    return LoginOut(token=token, admin=profile_out(admin))


def get_admin_profile(db: Session, admin_id: int) -> AdminProfileOut:
    admin = db.get(Admin, admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    return profile_out(admin)


def request_password_reset(db: Session, email: str) -> PasswordResetDelivery:
    """Start a reset for ``email`` and return the mail job for the caller to schedule.

    Known and unknown addresses take the same path: a token is generated,
    hashed and committed, and a delivery is returned either way. Only the
    delivery for an unknown address carries no recipient.
    """
    raw_token = generate_reset_token()
    token_hash = hash_reset_token(raw_token)
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.password_reset_expire_minutes)
    reset_link = build_reset_link(raw_token)

    admin = db.execute(
        select(Admin).where(func.lower(Admin.email) == email.strip().lower())
    ).scalar_one_or_none()
    if admin:
        admin.password_reset_token = token_hash
        admin.password_reset_expires = expires_at

    delivery = PasswordResetDelivery(
        recipient_email=admin.email if admin else None,
        username=admin.username if admin else "",
        reset_link=reset_link,
        expires_at=expires_at,
        admin_id=admin.id if admin else None,
    )
    db.commit()
    return delivery


def deliver_password_reset(delivery: PasswordResetDelivery) -> None:
    """Background task body; mail problems are logged, never raised."""
    if delivery.recipient_email is None:
        return

    result = send_password_reset_email(
        recipient_email=delivery.recipient_email,
        username=delivery.username,
        reset_link=delivery.reset_link,
        expires_at=delivery.expires_at,
    )
    if result.status != "sent":
        log_event(
            logger,
            "password_reset.email_not_sent",
            level=logging.WARNING,
            admin_id=delivery.admin_id,
            status=result.status,
            detail=result.detail,
        )


def reset_password(db: Session, raw_token: str, new_password: str) -> str:
    token_hash = hash_reset_token(raw_token)
    admin = db.execute(
        select(Admin).where(Admin.password_reset_token == token_hash)
    ).scalar_one_or_none()

    if (
        not admin
        or admin.password_reset_expires is None
        or _as_utc(admin.password_reset_expires) <= datetime.now(timezone.utc)
    ):
        raise ValidationError(RESET_INVALID_MESSAGE)

    admin.password_hash = hash_password(new_password)
    admin.password_reset_token = None
    admin.password_reset_expires = None
    db.commit()
    return RESET_DONE_MESSAGE


def create_admin(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    role: AdminRole = AdminRole.ADMIN,
    full_name: str | None = None,
) -> Admin:
    username = username.strip()
    email = email.strip()
    if not username or not email:
        raise ValidationError("username and email are required")
    if len(password) < 8:
        raise ValidationError("password must be at least 8 characters")

    existing = db.execute(
        select(Admin.id).where(
            or_(
                func.lower(Admin.username) == username.lower(),
                func.lower(Admin.email) == email.lower(),
            )
        )
    ).first()
    if existing is not None:
        raise ValidationError("An admin with that username or email already exists")

    admin = Admin(
        username=username,
        email=email,
        full_name=full_name,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent insert of the same username or email.
        db.rollback()
        raise ConflictOrInternalError("Admin could not be created") from exc
    db.refresh(admin)
    return admin
