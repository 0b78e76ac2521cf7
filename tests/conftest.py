import pytest
import os
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import profitpulse.models  # noqa: F401
from profitpulse.core.config import settings
from profitpulse.core.deps import get_db
from profitpulse.core.security import create_access_token
from profitpulse.db.base import Base
from profitpulse.main import app
from profitpulse.models.admin import AdminRole
from profitpulse.services.auth_service import create_admin


@pytest.fixture()
def test_context():
    original_secret = settings.secret_key
    settings.secret_key = "test-secret-key"

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, session_local

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
    settings.secret_key = original_secret


@pytest.fixture()
def make_admin(test_context):
    """Seed an admin and return ``(admin_id, auth_headers)``."""
    _, session_local = test_context

    def _make(username: str = "owner", role: AdminRole = AdminRole.ADMIN, password: str = "password123"):
        db = session_local()
        try:
            admin = create_admin(
                db,
                username=username,
                email=f"{username}@example.com",
                password=password,
                role=role,
                full_name=username.title(),
            )
            admin_id = admin.id
        finally:
            db.close()
        token = create_access_token(admin_id, role.value)
        return admin_id, {"Authorization": f"Bearer {token}"}

    return _make
