from sqlalchemy import text

from profitpulse.core.errors import AppError
from profitpulse.core.observability import (
    app_error_handler,
    http_exception_handler,
    request_logging_middleware,
    setup_observability,
    unhandled_exception_handler,
    validation_exception_handler,
)
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from profitpulse.core.config import settings
from profitpulse.db.session import engine
from profitpulse.routers import analytics, audits, auth, expenses, items, sales

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description=(
        "Backend API for ProfitPulse inventory, sales and expense tracking.\n\n"
        "Swagger quick test flow:\n"
        "1. Call `POST /auth/login` with an admin username and password.\n"
        "2. Click **Authorize** and paste the returned `token`.\n"
        "3. Test protected endpoints (`/items`, `/sales`, `/expenses`, `/analytics`, `/audits`)."
    ),
    swagger_ui_parameters={
        "persistAuthorization": True,
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": 1,
    },
    openapi_tags=[
        {"name": "health", "description": "Service status and quick links."},
        {"name": "auth", "description": "Admin login, profile and password reset."},
        {"name": "items", "description": "Inventory catalog with soft delete and restore."},
        {"name": "sales", "description": "Sales capture and sales history."},
        {"name": "expenses", "description": "Expense capture and expense history."},
        {"name": "analytics", "description": "Dashboard overview, monthly profit and expense totals."},
        {"name": "audits", "description": "Audit trail of item, expense and sale changes."},
    ],
)

setup_observability()
app.middleware("http")(request_logging_middleware)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

cors_origins = settings.cors_origins or ["http://localhost:3000"]
allow_all_origins = "*" in cors_origins
env_value = settings.env.lower().strip()
allow_origin_regex = settings.cors_origin_regex

if not allow_origin_regex and env_value in {"dev", "development"}:
    allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else cors_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=not allow_all_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(items.router)
app.include_router(sales.router)
app.include_router(expenses.router)
app.include_router(audits.router)
app.include_router(analytics.router)


@app.get("/", tags=["health"])
def root():
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
    }


@app.get("/health", tags=["health"])
def health():
    return {"ok": True}


@app.get("/ready", tags=["health"])
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        return {"ok": False}
    return {"ok": True}
