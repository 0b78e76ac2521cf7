from datetime import datetime
from typing import Any

from pydantic import BaseModel

from profitpulse.models.audit import AuditAction


class AuditOut(BaseModel):
    audit_id: int
    admin_id: int
    username: str | None = None
    action: AuditAction
    resource: str
    resource_id: str | None = None
    before_state: dict[str, Any] | None = None
    after_state: dict[str, Any] | None = None
    ip_address: str | None = None
    created_at: datetime | None = None


class AuditListOut(BaseModel):
    audits: list[AuditOut]
    total: int
    page: int
    limit: int
