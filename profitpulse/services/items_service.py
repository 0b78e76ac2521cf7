from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from profitpulse.core.errors import ConflictOrInternalError, NotFoundError, ValidationError
from profitpulse.core.money import to_money
from profitpulse.core.query import ListQuery, SortSpec, apply_filters, search_clause
from profitpulse.core.security_current import AdminContext
from profitpulse.models.audit import AuditAction
from profitpulse.models.item import Item, ItemStatus
from profitpulse.schemas.item import ItemCreate, ItemListOut, ItemOut, ItemUpdate
from profitpulse.services.audit_service import AuditEvent, emit_audit_event, snapshot

RESOURCE = "items"

ITEM_SORT = SortSpec(
    allowed={
        "item_number": Item.item_number,
        "name": Item.name,
        "category": Item.category,
        "qty_in_stock": Item.qty_in_stock,
        "selling_price": Item.selling_price,
        "created_at": Item.created_at,
    },
    default="created_at",
    tiebreak=Item.item_id,
)

STATUS_FILTER_ALL = "all"

# Both actions are defined from every status, so restore is always possible
# and repeating either action lands on the same status.
ITEM_TRANSITIONS: dict[tuple[ItemStatus, AuditAction], ItemStatus] = {
    (ItemStatus.ACTIVE, AuditAction.DELETE): ItemStatus.INACTIVE,
    (ItemStatus.INACTIVE, AuditAction.DELETE): ItemStatus.INACTIVE,
    (ItemStatus.ACTIVE, AuditAction.RESTORE): ItemStatus.ACTIVE,
    (ItemStatus.INACTIVE, AuditAction.RESTORE): ItemStatus.ACTIVE,
}


def next_status(current: ItemStatus, action: AuditAction) -> ItemStatus:
    try:
        return ITEM_TRANSITIONS[(current, action)]
    except KeyError as exc:
        raise ValueError(f"No item transition for {action.value} from {current.value}") from exc


def item_out(item: Item) -> ItemOut:
    return ItemOut(
        item_id=item.item_id,
        item_number=item.item_number,
        name=item.name,
        description=item.description,
        category=item.category,
        sku=item.sku,
        barcode=item.barcode,
        image_url=item.image_url,
        qty_in_stock=item.qty_in_stock,
        reorder_level=item.reorder_level,
        purchase_price=float(to_money(item.purchase_price)),
        selling_price=float(to_money(item.selling_price)),
        status=item.status,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _get_item_row(db: Session, item_id: int) -> Item:
    item = db.execute(select(Item).where(Item.item_id == item_id)).scalar_one_or_none()
    if not item:
        raise NotFoundError("Item not found")
    return item


def _ensure_item_number_free(db: Session, item_number: str, *, exclude_item_id: int | None = None) -> None:
    stmt = select(Item.item_id).where(func.lower(Item.item_number) == item_number.lower())
    if exclude_item_id is not None:
        stmt = stmt.where(Item.item_id != exclude_item_id)
    if db.execute(stmt).first() is not None:
        raise ValidationError("Item number already exists")


def _commit_item(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        # The unique item_number index caught a concurrent duplicate.
        db.rollback()
        raise ConflictOrInternalError("Item could not be saved") from exc


def parse_status_filter(raw: str | None) -> ItemStatus | None:
    """``None``/empty means active only; ``all`` disables the filter."""
    value = (raw or "").strip().lower()
    if not value:
        return ItemStatus.ACTIVE
    if value == STATUS_FILTER_ALL:
        return None
    try:
        return ItemStatus(value)
    except ValueError as exc:
        raise ValidationError("status must be one of: active, inactive, all") from exc


def list_items(
    db: Session,
    query: ListQuery,
    *,
    status: ItemStatus | None = ItemStatus.ACTIVE,
    low_stock: bool = False,
) -> ItemListOut:
    count_stmt = select(func.count(Item.item_id))
    data_stmt = select(Item)

    count_stmt, data_stmt = apply_filters(
        [count_stmt, data_stmt],
        search_clause(query.search, [Item.name, Item.item_number, Item.sku]),
        Item.status == status if status is not None else None,
        Item.qty_in_stock <= Item.reorder_level if low_stock else None,
    )

    total = int(db.execute(count_stmt).scalar_one())
    rows = db.execute(query.paginate(data_stmt, ITEM_SORT)).scalars().all()
    return ItemListOut(
        items=[item_out(row) for row in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def get_item(db: Session, item_id: int) -> ItemOut:
    return item_out(_get_item_row(db, item_id))


def create_item(db: Session, payload: ItemCreate, actor: AdminContext) -> ItemOut:
    _ensure_item_number_free(db, payload.item_number)

    item = Item(
        item_number=payload.item_number,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        sku=payload.sku,
        barcode=payload.barcode,
        image_url=payload.image_url,
        qty_in_stock=payload.qty_in_stock,
        reorder_level=payload.reorder_level,
        purchase_price=to_money(payload.purchase_price),
        selling_price=to_money(payload.selling_price),
        status=payload.status,
    )
    db.add(item)
    _commit_item(db)
    db.refresh(item)

    emit_audit_event(
        db,
        AuditEvent(
            admin_id=actor.admin_id,
            action=AuditAction.CREATE,
            resource=RESOURCE,
            resource_id=item.item_id,
            after_state=snapshot(item),
            ip_address=actor.ip_address,
        ),
    )
    return item_out(item)


def update_item(db: Session, item_id: int, payload: ItemUpdate, actor: AdminContext) -> ItemOut:
    item = _get_item_row(db, item_id)

    changes = payload.model_dump(exclude_unset=True)
    for required in ("item_number", "name", "qty_in_stock", "reorder_level", "purchase_price", "selling_price"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be null")
    if not changes:
        raise ValidationError("No update fields provided")
    if "item_number" in changes:
        _ensure_item_number_free(db, changes["item_number"], exclude_item_id=item.item_id)

    before_state = snapshot(item, keys=list(changes))
    for key, value in changes.items():
        if key in ("purchase_price", "selling_price"):
            value = to_money(value)
        setattr(item, key, value)
    _commit_item(db)
    db.refresh(item)

    emit_audit_event(
        db,
        AuditEvent(
            admin_id=actor.admin_id,
            action=AuditAction.UPDATE,
            resource=RESOURCE,
            resource_id=item.item_id,
            before_state=before_state,
            after_state=payload.model_dump(exclude_unset=True),
            ip_address=actor.ip_address,
        ),
    )
    return item_out(item)


def _transition(db: Session, item_id: int, action: AuditAction, actor: AdminContext) -> ItemOut:
    item = _get_item_row(db, item_id)
    before_state = snapshot(item)
    # Only the status moves; stock and sale history stay untouched.
    item.status = next_status(item.status, action)
    db.commit()
    db.refresh(item)

    emit_audit_event(
        db,
        AuditEvent(
            admin_id=actor.admin_id,
            action=action,
            resource=RESOURCE,
            resource_id=item.item_id,
            before_state=before_state,
            ip_address=actor.ip_address,
        ),
    )
    return item_out(item)


def delete_item(db: Session, item_id: int, actor: AdminContext) -> ItemOut:
    return _transition(db, item_id, AuditAction.DELETE, actor)


def restore_item(db: Session, item_id: int, actor: AdminContext) -> ItemOut:
    return _transition(db, item_id, AuditAction.RESTORE, actor)
