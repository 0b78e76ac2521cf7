from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from profitpulse.core.api_docs import error_responses
from profitpulse.core.deps import get_db, get_list_query
from profitpulse.core.permissions import ALL_ROLES, require_roles
from profitpulse.core.query import ListQuery
from profitpulse.core.security_current import AdminContext
from profitpulse.schemas.common import SuccessOut
from profitpulse.schemas.sales import SaleCreate, SaleCreateOut, SaleListOut, SaleOut
from profitpulse.services import sales_service

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post(
    "",
    response_model=SuccessOut[SaleCreateOut],
    status_code=status.HTTP_201_CREATED,
    summary="Record a sale",
    description="Creates the sale, its line items, stock decrements and audit entry atomically.",
    responses=error_responses(400, 401, 403, 404, 500),
)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*ALL_ROLES)),
):
    return SuccessOut(data=sales_service.create_sale(db, payload, admin))


@router.get(
    "",
    response_model=SuccessOut[SaleListOut],
    summary="List sales",
    responses=error_responses(400, 401, 403, 500),
)
def list_sales(
    query: ListQuery = Depends(get_list_query),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*ALL_ROLES)),
):
    result = sales_service.list_sales(db, query, start_date=start_date, end_date=end_date)
    return SuccessOut(data=result)


@router.get(
    "/{sale_id}",
    response_model=SuccessOut[SaleOut],
    summary="Get sale with line items",
    responses=error_responses(401, 403, 404, 500),
)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*ALL_ROLES)),
):
    return SuccessOut(data=sales_service.get_sale(db, sale_id))
