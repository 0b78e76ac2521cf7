from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from profitpulse.core.errors import TokenMissingError
from profitpulse.core.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminContext:
    """The authenticated caller, resolved per request from the bearer token."""

    admin_id: int
    role: str
    ip_address: str


def client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for", "").strip()
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AdminContext:
    if credentials is None or not credentials.credentials:
        raise TokenMissingError()
    claims = decode_access_token(credentials.credentials)
    return AdminContext(admin_id=claims.admin_id, role=claims.role, ip_address=client_ip(request))
