from collections.abc import Callable

from fastapi import Depends

from profitpulse.core.errors import ForbiddenError
from profitpulse.core.security_current import AdminContext, get_current_admin
from profitpulse.models.admin import AdminRole

STAFF_ROLES = (AdminRole.ADMIN, AdminRole.MANAGER)
ALL_ROLES = tuple(AdminRole)


def require_roles(*allowed_roles: AdminRole | str) -> Callable[[AdminContext], AdminContext]:
    normalized_allowed = {
        (role.value if isinstance(role, AdminRole) else str(role)).strip().lower()
        for role in allowed_roles
    }
    normalized_allowed.discard("")
    if not normalized_allowed:
        raise ValueError("At least one allowed role is required")

    def dependency(admin: AdminContext = Depends(get_current_admin)) -> AdminContext:
        current_role = (admin.role or "").lower()
        if current_role not in normalized_allowed:
            raise ForbiddenError(f"User role '{admin.role}' is not authorized to access this route")
        return admin

    return dependency
