import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from profitpulse.core.observability import log_event
from profitpulse.core.query import ListQuery, SortSpec, apply_filters, search_clause
from profitpulse.models.admin import Admin
from profitpulse.models.audit import Audit, AuditAction

logger = logging.getLogger(__name__)

AUDIT_SORT = SortSpec(
    allowed={
        "created_at": Audit.created_at,
        "action": Audit.action,
        "resource": Audit.resource,
    },
    default="created_at",
    tiebreak=Audit.audit_id,
)


@dataclass(frozen=True)
class AuditEvent:
    admin_id: int
    action: AuditAction
    resource: str
    resource_id: int | str | None = None
    before_state: dict[str, Any] | None = None
    after_state: dict[str, Any] | None = None
    ip_address: str | None = None


def to_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot(row: Any, keys: list[str] | None = None) -> dict[str, Any]:
    """Plain-dict copy of an ORM row keyed by column name, optionally restricted to ``keys``."""
    values = {
        attr.columns[0].name: getattr(row, attr.key) for attr in row.__mapper__.column_attrs
    }
    if keys is not None:
        values = {key: value for key, value in values.items() if key in keys}
    return to_jsonable(values)


def log_audit_event(db: Session, event: AuditEvent) -> Audit:
    """Add the audit row to the caller's open transaction; the caller commits."""
    row = Audit(
        admin_id=event.admin_id,
        action=event.action,
        resource=event.resource,
        resource_id=str(event.resource_id) if event.resource_id is not None else None,
        before_state=to_jsonable(event.before_state) if event.before_state else None,
        after_state=to_jsonable(event.after_state) if event.after_state else None,
        ip_address=event.ip_address,
    )
    db.add(row)
    return row


def emit_audit_event(db: Session, event: AuditEvent) -> Audit | None:
    """Post-commit hook for item and expense mutations.

    Runs after the primary change has been committed and writes the audit row in
    its own transaction. A failure here is logged and swallowed so the already
    committed mutation stands.
    """
    try:
        row = log_audit_event(db, event)
        db.commit()
    except Exception as exc:  # noqa: BLE001 - audit writes are best effort for non-sale mutations
        db.rollback()
        log_event(
            logger,
            "audit.write_failed",
            level=logging.ERROR,
            action=event.action.value,
            resource=event.resource,
            resource_id=event.resource_id,
            error=repr(exc),
        )
        return None
    return row


def list_audits(
    db: Session,
    query: ListQuery,
    *,
    action: AuditAction | None = None,
    resource: str | None = None,
    admin_id: int | None = None,
) -> dict:
    count_stmt = select(func.count(Audit.audit_id)).select_from(Audit).outerjoin(
        Admin, Admin.id == Audit.admin_id
    )
    data_stmt = select(Audit, Admin.username).outerjoin(Admin, Admin.id == Audit.admin_id)

    count_stmt, data_stmt = apply_filters(
        [count_stmt, data_stmt],
        Audit.action == action if action else None,
        Audit.resource == resource if resource else None,
        Audit.admin_id == admin_id if admin_id is not None else None,
        search_clause(
            query.search,
            [Audit.resource_id, Audit.resource, Admin.username],
        ),
    )

    total = int(db.execute(count_stmt).scalar_one())
    rows = db.execute(query.paginate(data_stmt, AUDIT_SORT)).all()

    audits = []
    for audit, username in rows:
        audits.append(
            {
                "audit_id": audit.audit_id,
                "admin_id": audit.admin_id,
                "username": username,
                "action": audit.action,
                "resource": audit.resource,
                "resource_id": audit.resource_id,
                "before_state": audit.before_state,
                "after_state": audit.after_state,
                "ip_address": audit.ip_address,
                "created_at": audit.created_at,
            }
        )

    return {"audits": audits, "total": total, "page": query.page, "limit": query.limit}
