import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from profitpulse.core.config import settings
from profitpulse.core.errors import TokenExpiredError, TokenInvalidError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    admin_id: int
    role: str
    jti: str
    expires_at: datetime


def hash_password(password: str) -> str:
    # bcrypt hard limit is 72 bytes. We encode as utf-8.
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_access_token(
    admin_id: int,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(admin_id),
        "role": role,
        "jti": str(uuid4()),
        "iat": int(now.timestamp()),
        "exp": int((now + delta).timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpiredError() from exc
    except JWTError as exc:
        raise TokenInvalidError() from exc

    subject = payload.get("sub")
    role = payload.get("role")
    exp = payload.get("exp")
    if not subject or not role or not exp or not payload.get("jti"):
        raise TokenInvalidError()
    try:
        admin_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise TokenInvalidError() from exc

    return TokenClaims(
        admin_id=admin_id,
        role=str(role),
        jti=str(payload["jti"]),
        expires_at=datetime.fromtimestamp(int(exp), tz=timezone.utc),
    )


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256((raw_token or "").strip().encode("utf-8")).hexdigest()
