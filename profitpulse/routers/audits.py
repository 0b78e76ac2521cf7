from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from profitpulse.core.api_docs import error_responses
from profitpulse.core.deps import get_db, get_list_query
from profitpulse.core.errors import ValidationError
from profitpulse.core.permissions import require_roles
from profitpulse.core.query import ListQuery
from profitpulse.core.security_current import AdminContext
from profitpulse.models.admin import AdminRole
from profitpulse.models.audit import AuditAction
from profitpulse.schemas.audit import AuditListOut
from profitpulse.schemas.common import SuccessOut
from profitpulse.services import audit_service

router = APIRouter(prefix="/audits", tags=["audits"])


def _parse_action(raw: str | None) -> AuditAction | None:
    value = (raw or "").strip().upper()
    if not value:
        return None
    try:
        return AuditAction(value)
    except ValueError as exc:
        allowed = ", ".join(action.value for action in AuditAction)
        raise ValidationError(f"action must be one of: {allowed}") from exc


@router.get(
    "",
    response_model=SuccessOut[AuditListOut],
    summary="List audit entries",
    responses=error_responses(400, 401, 403, 500),
)
def list_audits(
    query: ListQuery = Depends(get_list_query),
    action: str | None = Query(default=None),
    resource: str | None = Query(default=None),
    admin_id: int | None = Query(default=None, alias="adminId"),
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(AdminRole.ADMIN)),
):
    result = audit_service.list_audits(
        db,
        query,
        action=_parse_action(action),
        resource=(resource or "").strip() or None,
        admin_id=admin_id,
    )
    return SuccessOut(data=result)
