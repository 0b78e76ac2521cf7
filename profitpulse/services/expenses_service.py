from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from profitpulse.core.errors import NotFoundError, ValidationError
from profitpulse.core.money import to_money
from profitpulse.core.query import ListQuery, SortSpec, apply_filters, search_clause
from profitpulse.core.security_current import AdminContext
from profitpulse.models.admin import Admin
from profitpulse.models.audit import AuditAction
from profitpulse.models.expense import Expense
from profitpulse.schemas.expense import ExpenseCreate, ExpenseListOut, ExpenseOut, ExpenseUpdate
from profitpulse.services.audit_service import AuditEvent, emit_audit_event, snapshot

RESOURCE = "expenses"

EXPENSE_SORT = SortSpec(
    allowed={
        "date": Expense.expense_date,
        "amount": Expense.amount,
        "category": Expense.category,
        "created_at": Expense.created_at,
    },
    default="date",
    tiebreak=Expense.expense_id,
)

# API field name -> mapped attribute
_FIELD_ATTRS = {
    "date": "expense_date",
    "category": "category",
    "amount": "amount",
    "notes": "notes",
    "receipt_url": "receipt_url",
}


def expense_out(expense: Expense, username: str | None = None) -> ExpenseOut:
    return ExpenseOut(
        expense_id=expense.expense_id,
        admin_id=expense.admin_id,
        username=username,
        date=expense.expense_date,
        category=expense.category,
        amount=float(to_money(expense.amount)),
        notes=expense.notes,
        receipt_url=expense.receipt_url,
        created_at=expense.created_at,
    )


def _get_expense_row(db: Session, expense_id: int) -> Expense:
    expense = db.execute(
        select(Expense).where(Expense.expense_id == expense_id)
    ).scalar_one_or_none()
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


def get_expense(db: Session, expense_id: int) -> ExpenseOut:
    row = db.execute(
        select(Expense, Admin.username)
        .outerjoin(Admin, Admin.id == Expense.admin_id)
        .where(Expense.expense_id == expense_id)
    ).first()
    if not row:
        raise NotFoundError("Expense not found")
    expense, username = row
    return expense_out(expense, username)


def list_expenses(
    db: Session,
    query: ListQuery,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    category: str | None = None,
) -> ExpenseListOut:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("endDate cannot be before startDate")

    count_stmt = select(func.count(Expense.expense_id))
    data_stmt = select(Expense, Admin.username).outerjoin(Admin, Admin.id == Expense.admin_id)

    cleaned_category = (category or "").strip() or None
    count_stmt, data_stmt = apply_filters(
        [count_stmt, data_stmt],
        Expense.expense_date >= start_date if start_date else None,
        Expense.expense_date <= end_date if end_date else None,
        Expense.category == cleaned_category if cleaned_category else None,
        search_clause(query.search, [Expense.notes, Expense.category]),
    )

    total = int(db.execute(count_stmt).scalar_one())
    rows = db.execute(query.paginate(data_stmt, EXPENSE_SORT)).all()
    return ExpenseListOut(
        expenses=[expense_out(expense, username) for expense, username in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def create_expense(db: Session, payload: ExpenseCreate, actor: AdminContext) -> ExpenseOut:
    expense = Expense(
        admin_id=actor.admin_id,
        expense_date=payload.date,
        category=payload.category,
        amount=to_money(payload.amount),
        notes=payload.notes,
        receipt_url=payload.receipt_url,
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)

    emit_audit_event(
        db,
        AuditEvent(
            admin_id=actor.admin_id,
            action=AuditAction.CREATE,
            resource=RESOURCE,
            resource_id=expense.expense_id,
            after_state=snapshot(expense),
            ip_address=actor.ip_address,
        ),
    )
    return expense_out(expense)


def update_expense(
    db: Session, expense_id: int, payload: ExpenseUpdate, actor: AdminContext
) -> ExpenseOut:
    expense = _get_expense_row(db, expense_id)

    changes = payload.model_dump(exclude_unset=True)
    for required in ("date", "category", "amount"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be null")
    if not changes:
        raise ValidationError("No update fields provided")

    before_state = snapshot(expense, keys=list(changes))
    for key, value in changes.items():
        if key == "amount":
            value = to_money(value)
        setattr(expense, _FIELD_ATTRS[key], value)
    db.commit()
    db.refresh(expense)

    emit_audit_event(
        db,
        AuditEvent(
            admin_id=actor.admin_id,
            action=AuditAction.UPDATE,
            resource=RESOURCE,
            resource_id=expense.expense_id,
            before_state=before_state,
            after_state=payload.model_dump(exclude_unset=True),
            ip_address=actor.ip_address,
        ),
    )
    return expense_out(expense)


def delete_expense(db: Session, expense_id: int, actor: AdminContext) -> None:
    expense = _get_expense_row(db, expense_id)
    before_state = snapshot(expense)
    db.delete(expense)
    db.commit()

    emit_audit_event(
        db,
        AuditEvent(
            admin_id=actor.admin_id,
            action=AuditAction.DELETE,
            resource=RESOURCE,
            resource_id=expense_id,
            before_state=before_state,
            ip_address=actor.ip_address,
        ),
    )
