from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from profitpulse.core.api_docs import error_responses
from profitpulse.core.deps import get_db, get_list_query
from profitpulse.core.permissions import STAFF_ROLES, require_roles
from profitpulse.core.query import ListQuery
from profitpulse.core.security_current import AdminContext
from profitpulse.schemas.common import MessageOut, SuccessOut
from profitpulse.schemas.expense import ExpenseCreate, ExpenseListOut, ExpenseOut, ExpenseUpdate
from profitpulse.services import expenses_service

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get(
    "",
    response_model=SuccessOut[ExpenseListOut],
    summary="List expenses",
    responses=error_responses(400, 401, 403, 500),
)
def list_expenses(
    query: ListQuery = Depends(get_list_query),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    result = expenses_service.list_expenses(
        db,
        query,
        start_date=start_date,
        end_date=end_date,
        category=category,
    )
    return SuccessOut(data=result)


@router.get(
    "/{expense_id}",
    response_model=SuccessOut[ExpenseOut],
    summary="Get expense",
    responses=error_responses(401, 403, 404, 500),
)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=expenses_service.get_expense(db, expense_id))


@router.post(
    "",
    response_model=SuccessOut[ExpenseOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create expense",
    responses=error_responses(400, 401, 403, 500),
)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=expenses_service.create_expense(db, payload, admin))


@router.put(
    "/{expense_id}",
    response_model=SuccessOut[ExpenseOut],
    summary="Update expense",
    responses=error_responses(400, 401, 403, 404, 500),
)
def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=expenses_service.update_expense(db, expense_id, payload, admin))


@router.delete(
    "/{expense_id}",
    response_model=SuccessOut[MessageOut],
    summary="Delete expense",
    responses=error_responses(401, 403, 404, 500),
)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    expenses_service.delete_expense(db, expense_id, admin)
    return SuccessOut(data=MessageOut(message="Expense deleted"))
