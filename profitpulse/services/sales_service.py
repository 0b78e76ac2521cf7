import logging
from datetime import date

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from profitpulse.core.errors import InvalidSale, NotFoundError, ValidationError
from profitpulse.core.id_utils import generate_sale_number
from profitpulse.core.money import ZERO_MONEY, to_money
from profitpulse.core.observability import log_event
from profitpulse.core.query import ListQuery, SortSpec, apply_filters, search_clause
from profitpulse.core.security_current import AdminContext
from profitpulse.models.admin import Admin
from profitpulse.models.audit import AuditAction
from profitpulse.models.item import Item
from profitpulse.models.sales import Sale, SaleItem
from profitpulse.schemas.sales import (
    SaleCreate,
    SaleCreateOut,
    SaleLineOut,
    SaleListOut,
    SaleOut,
)
from profitpulse.services.audit_service import AuditEvent, log_audit_event

logger = logging.getLogger(__name__)

RESOURCE = "sales"

SALE_SORT = SortSpec(
    allowed={
        "created_at": Sale.created_at,
        "total_amount": Sale.total_amount,
        "sale_number": Sale.sale_number,
    },
    default="created_at",
    tiebreak=Sale.sale_id,
)


def decrement_stock(db: Session, item_id: int, quantity: int) -> None:
    # Single UPDATE so the store's row lock serializes concurrent sales.
    # Stock sufficiency is deliberately not checked; qty_in_stock may go negative.
    result = db.execute(
        update(Item)
        .where(Item.item_id == item_id)
        .values(qty_in_stock=Item.qty_in_stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"Item not found: {item_id}")


def create_sale(db: Session, payload: SaleCreate, actor: AdminContext) -> SaleCreateOut:
    """Record a sale and its side effects as one all-or-nothing transaction.

    Inserts the header, one row per line item, decrements each item's stock and
    adds the SALE audit row, then commits. Any failure rolls all of it back and
    is re-raised unchanged.
    """
    if not payload.items:
        raise InvalidSale()

    lines_total = ZERO_MONEY
    for line in payload.items:
        lines_total += to_money(to_money(line.price_at_sale) * line.quantity)
    tax_amount = to_money(payload.tax_amount)
    discount_amount = to_money(payload.discount_amount)
    total_amount = to_money(lines_total + tax_amount - discount_amount)

    sale_number = generate_sale_number()

    try:
        sale = Sale(
            sale_number=sale_number,
            admin_id=actor.admin_id,
            total_amount=total_amount,
            tax_amount=tax_amount,
            discount_amount=discount_amount,
            payment_method=payload.payment_method,
        )
        db.add(sale)
        db.flush()

        audit_lines = []
        for line in payload.items:
            price_at_sale = to_money(line.price_at_sale)
            subtotal = to_money(price_at_sale * line.quantity)
            db.add(
                SaleItem(
                    sale_id=sale.sale_id,
                    item_id=line.item_id,
                    quantity=line.quantity,
                    price_at_sale=price_at_sale,
                    subtotal=subtotal,
                )
            )
            decrement_stock(db, line.item_id, line.quantity)
            audit_lines.append(
                {
                    "item_id": line.item_id,
                    "quantity": line.quantity,
                    "price_at_sale": price_at_sale,
                    "subtotal": subtotal,
                }
            )

        log_audit_event(
            db,
            AuditEvent(
                admin_id=actor.admin_id,
                action=AuditAction.SALE,
                resource=RESOURCE,
                resource_id=sale.sale_id,
                after_state={
                    "sale_number": sale_number,
                    "total_amount": total_amount,
                    "tax_amount": tax_amount,
                    "discount_amount": discount_amount,
                    "payment_method": payload.payment_method,
                    "items": audit_lines,
                },
                ip_address=actor.ip_address,
            ),
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    log_event(
        logger,
        "sale.created",
        sale_id=sale.sale_id,
        sale_number=sale_number,
        admin_id=actor.admin_id,
        lines=len(payload.items),
        total_amount=float(total_amount),
    )
    return SaleCreateOut(
        sale_id=sale.sale_id,
        sale_number=sale_number,
        total_amount=float(total_amount),
        tax_amount=float(tax_amount),
        discount_amount=float(discount_amount),
        payment_method=payload.payment_method,
    )


def _lines_by_sale(db: Session, sale_ids: list[int]) -> dict[int, list[SaleLineOut]]:
    if not sale_ids:
        return {}
    rows = db.execute(
        select(SaleItem, Item.name, Item.item_number)
        .outerjoin(Item, Item.item_id == SaleItem.item_id)
        .where(SaleItem.sale_id.in_(sale_ids))
        .order_by(SaleItem.sale_item_id.asc())
    ).all()
    lines: dict[int, list[SaleLineOut]] = {sale_id: [] for sale_id in sale_ids}
    for sale_item, name, item_number in rows:
        lines[sale_item.sale_id].append(
            SaleLineOut(
                sale_item_id=sale_item.sale_item_id,
                item_id=sale_item.item_id,
                name=name,
                item_number=item_number,
                quantity=sale_item.quantity,
                price_at_sale=float(to_money(sale_item.price_at_sale)),
                subtotal=float(to_money(sale_item.subtotal)),
            )
        )
    return lines


def _sale_out(sale: Sale, username: str | None, lines: list[SaleLineOut]) -> SaleOut:
    return SaleOut(
        sale_id=sale.sale_id,
        sale_number=sale.sale_number,
        admin_id=sale.admin_id,
        username=username,
        total_amount=float(to_money(sale.total_amount)),
        tax_amount=float(to_money(sale.tax_amount)),
        discount_amount=float(to_money(sale.discount_amount)),
        payment_method=sale.payment_method,
        created_at=sale.created_at,
        items=lines,
    )


def list_sales(
    db: Session,
    query: ListQuery,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
) -> SaleListOut:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("endDate cannot be before startDate")

    count_stmt = select(func.count(Sale.sale_id)).select_from(Sale).outerjoin(
        Admin, Admin.id == Sale.admin_id
    )
    data_stmt = select(Sale, Admin.username).outerjoin(Admin, Admin.id == Sale.admin_id)

    count_stmt, data_stmt = apply_filters(
        [count_stmt, data_stmt],
        search_clause(query.search, [Sale.sale_number, Admin.username]),
        func.date(Sale.created_at) >= start_date if start_date else None,
        func.date(Sale.created_at) <= end_date if end_date else None,
    )

    total = int(db.execute(count_stmt).scalar_one())
    rows = db.execute(query.paginate(data_stmt, SALE_SORT)).all()
    lines = _lines_by_sale(db, [sale.sale_id for sale, _ in rows])

    return SaleListOut(
        sales=[_sale_out(sale, username, lines.get(sale.sale_id, [])) for sale, username in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def get_sale(db: Session, sale_id: int) -> SaleOut:
    row = db.execute(
        select(Sale, Admin.username)
        .outerjoin(Admin, Admin.id == Sale.admin_id)
        .where(Sale.sale_id == sale_id)
    ).first()
    if not row:
        raise NotFoundError("Sale not found")
    sale, username = row
    lines = _lines_by_sale(db, [sale.sale_id])
    return _sale_out(sale, username, lines.get(sale.sale_id, []))
