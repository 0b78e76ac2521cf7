from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from profitpulse.core.api_docs import error_responses
from profitpulse.core.deps import get_db, get_list_query
from profitpulse.core.permissions import ALL_ROLES, STAFF_ROLES, require_roles
from profitpulse.core.query import ListQuery
from profitpulse.core.security_current import AdminContext
from profitpulse.schemas.common import SuccessOut
from profitpulse.schemas.item import ItemCreate, ItemListOut, ItemOut, ItemUpdate
from profitpulse.services import items_service

router = APIRouter(prefix="/items", tags=["items"])


@router.get(
    "",
    response_model=SuccessOut[ItemListOut],
    summary="List items",
    description="Active items by default; pass `status=inactive` or `status=all` to widen.",
    responses=error_responses(400, 401, 403, 500),
)
def list_items(
    query: ListQuery = Depends(get_list_query),
    status_filter: str | None = Query(default=None, alias="status"),
    low_stock: bool = Query(default=False, alias="lowStock"),
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*ALL_ROLES)),
):
    result = items_service.list_items(
        db,
        query,
        status=items_service.parse_status_filter(status_filter),
        low_stock=low_stock,
    )
    return SuccessOut(data=result)


@router.get(
    "/{item_id}",
    response_model=SuccessOut[ItemOut],
    summary="Get item",
    responses=error_responses(401, 403, 404, 500),
)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*ALL_ROLES)),
):
    return SuccessOut(data=items_service.get_item(db, item_id))


@router.post(
    "",
    response_model=SuccessOut[ItemOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create item",
    responses=error_responses(400, 401, 403, 500),
)
def create_item(
    payload: ItemCreate,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=items_service.create_item(db, payload, admin))


@router.put(
    "/{item_id}",
    response_model=SuccessOut[ItemOut],
    summary="Update item",
    responses=error_responses(400, 401, 403, 404, 500),
)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=items_service.update_item(db, item_id, payload, admin))


@router.delete(
    "/{item_id}",
    response_model=SuccessOut[ItemOut],
    summary="Deactivate item",
    description="Soft delete: the item is marked inactive and kept for sale history.",
    responses=error_responses(401, 403, 404, 500),
)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=items_service.delete_item(db, item_id, admin))


@router.put(
    "/{item_id}/restore",
    response_model=SuccessOut[ItemOut],
    summary="Restore item",
    responses=error_responses(401, 403, 404, 500),
)
def restore_item(
    item_id: int,
    db: Session = Depends(get_db),
    admin: AdminContext = Depends(require_roles(*STAFF_ROLES)),
):
    return SuccessOut(data=items_service.restore_item(db, item_id, admin))
