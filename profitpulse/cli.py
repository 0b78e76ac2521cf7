import argparse
import getpass
import json
import logging
import sys

from sqlalchemy import text

from profitpulse.core.errors import AppError
from profitpulse.core.observability import log_event, setup_observability
from profitpulse.db.base import Base
from profitpulse.db.session import SessionLocal, engine
from profitpulse.models import Admin  # noqa: F401  registers all tables on Base.metadata
from profitpulse.models.admin import AdminRole
from profitpulse.services.auth_service import create_admin

logger = logging.getLogger("profitpulse.cli")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="profitpulse-create-admin",
        description="Create a ProfitPulse admin account.",
    )
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Prompted for when omitted.")
    parser.add_argument("--full-name", dest="full_name")
    parser.add_argument(
        "--role",
        choices=[role.value for role in AdminRole],
        default=AdminRole.ADMIN.value,
    )
    parser.add_argument(
        "--skip-create-tables",
        action="store_true",
        help="Do not create missing tables (use when migrations manage the schema).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    setup_observability()
    args = _parse_args(argv)
    password = args.password or getpass.getpass("Password: ")

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    if not args.skip_create_tables:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin = create_admin(
            db,
            username=args.username,
            email=args.email,
            password=password,
            role=AdminRole(args.role),
            full_name=args.full_name,
        )
    except AppError as exc:
        log_event(logger, "admin.create_failed", level=logging.ERROR, username=args.username, error=exc.message)
        return 1
    finally:
        db.close()

    log_event(logger, "admin.created", admin_id=admin.id, username=admin.username, role=admin.role.value)
    print(json.dumps({"id": admin.id, "username": admin.username, "role": admin.role.value}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
