from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from profitpulse.core.api_docs import error_responses
from profitpulse.core.deps import get_db
from profitpulse.core.security_current import AdminContext, get_current_admin
from profitpulse.schemas.auth import (
    AdminProfileOut,
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    ResetPasswordIn,
)
from profitpulse.schemas.common import MessageOut, SuccessOut
from profitpulse.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=SuccessOut[LoginOut],
    summary="Login with username and password",
    description="Returns a bearer token and the admin profile.",
    responses=error_responses(400, 401, 500),
)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return SuccessOut(data=auth_service.authenticate(db, payload.username, payload.password))


@router.get(
    "/me",
    response_model=SuccessOut[AdminProfileOut],
    summary="Current admin profile",
    responses=error_responses(401, 403, 404, 500),
)
def me(
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(get_current_admin),
):
    return SuccessOut(data=auth_service.get_admin_profile(db, admin.admin_id))


@router.post(
    "/forgot-password",
    response_model=SuccessOut[MessageOut],
    summary="Request a password reset link",
    description="Always returns the same acknowledgement whether or not the email is registered.",
    responses=error_responses(400, 500),
)
def forgot_password(
    payload: ForgotPasswordIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    delivery = auth_service.request_password_reset(db, payload.email)
    # Mail goes out after the response so SMTP latency never shows in it.
    background_tasks.add_task(auth_service.deliver_password_reset, delivery)
    return SuccessOut(data=MessageOut(message=auth_service.RESET_REQUESTED_MESSAGE))


@router.post(
    "/reset-password",
    response_model=SuccessOut[MessageOut],
    summary="Set a new password with a reset token",
    responses=error_responses(400, 500),
)
def reset_password(payload: ResetPasswordIn, db: Session = Depends(get_db)):
    message = auth_service.reset_password(db, payload.token, payload.password)
    return SuccessOut(data=MessageOut(message=message))
