from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from profitpulse.core.api_docs import error_responses
from profitpulse.core.deps import get_db
from profitpulse.core.permissions import STAFF_ROLES, require_roles
from profitpulse.core.security_current import AdminContext
from profitpulse.schemas.analytics import ExpenseStatsOut, MonthlyOut, OverviewOut
from profitpulse.schemas.common import SuccessOut
from profitpulse.services import analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get(
    "/overview",
    response_model=SuccessOut[OverviewOut],
    summary="Dashboard overview",
    description="Month-over-month stat cards, 30-day and 6-month trends, top selling items.",
    responses=error_responses(401, 403, 500),
)
def overview(
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=analytics_service.get_overview(db))


@router.get(
    "/monthly",
    response_model=SuccessOut[MonthlyOut],
    summary="Monthly revenue, expenses and net profit",
    description="Defaults to the current month.",
    responses=error_responses(400, 401, 403, 500),
)
def monthly(
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    today = date.today()
    return SuccessOut(
        data=analytics_service.get_monthly(db, year or today.year, month or today.month)
    )


@router.get(
    "/expense-stats",
    response_model=SuccessOut[ExpenseStatsOut],
    summary="Expense totals for today, this week, month and year",
    responses=error_responses(401, 403, 500),
)
def expense_stats(
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=analytics_service.get_expense_stats(db))
