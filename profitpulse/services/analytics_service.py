from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from profitpulse.core.errors import ValidationError
from profitpulse.core.money import ZERO_MONEY, to_money
from profitpulse.models.expense import Expense
from profitpulse.models.item import Item, ItemStatus
from profitpulse.models.sales import Sale, SaleItem
from profitpulse.schemas.analytics import (
    ExpenseStatsOut,
    MonthlyOut,
    OverviewOut,
    OverviewStatsOut,
    OverviewTrendsOut,
    StatCardOut,
    TopItemOut,
)

DAILY_TREND_DAYS = 30
MONTHLY_TREND_MONTHS = 6
TOP_ITEMS_LIMIT = 5


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    return first, next_first - timedelta(days=1)


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _as_date(value) -> date:
    # func.date() yields a date on PostgreSQL and an ISO string on SQLite.
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def percentage_change(current: Decimal | int, previous: Decimal | int) -> float:
    if not previous:
        return 100.0 if current > 0 else 0.0
    return float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


def _sales_total(db: Session, start: date, end: date) -> Decimal:
    value = db.execute(
        select(func.coalesce(func.sum(Sale.total_amount), 0)).where(
            func.date(Sale.created_at) >= start,
            func.date(Sale.created_at) <= end,
        )
    ).scalar_one()
    return to_money(value or ZERO_MONEY)


def _expenses_total(db: Session, start: date, end: date) -> Decimal:
    value = db.execute(
        select(func.coalesce(func.sum(Expense.amount), 0)).where(
            Expense.expense_date >= start,
            Expense.expense_date <= end,
        )
    ).scalar_one()
    return to_money(value or ZERO_MONEY)


def _daily_sales(db: Session, start: date, end: date) -> dict[date, Decimal]:
    day = func.date(Sale.created_at)
    rows = db.execute(
        select(day, func.sum(Sale.total_amount))
        .where(day >= start, day <= end)
        .group_by(day)
    ).all()
    return {_as_date(key): to_money(total) for key, total in rows}


def _daily_expenses(db: Session, start: date, end: date) -> dict[date, Decimal]:
    rows = db.execute(
        select(Expense.expense_date, func.sum(Expense.amount))
        .where(Expense.expense_date >= start, Expense.expense_date <= end)
        .group_by(Expense.expense_date)
    ).all()
    return {_as_date(key): to_money(total) for key, total in rows}


def _daily_new_items(db: Session, start: date, end: date) -> dict[date, int]:
    day = func.date(Item.created_at)
    rows = db.execute(
        select(day, func.count(Item.item_id))
        .where(day >= start, day <= end)
        .group_by(day)
    ).all()
    return {_as_date(key): int(count) for key, count in rows}


def _fill_days(values: dict, days: list[date]) -> list[float]:
    return [float(values.get(day, 0)) for day in days]


def _bucket_by_month(values: dict[date, Decimal | int], months: list[tuple[int, int]]) -> list:
    buckets: dict[tuple[int, int], Decimal | int] = defaultdict(int)
    for day, amount in values.items():
        buckets[(day.year, day.month)] += amount
    return [buckets.get(key, 0) for key in months]


def _top_items(db: Session, start: date, end: date) -> list[TopItemOut]:
    qty = func.sum(SaleItem.quantity)
    rows = db.execute(
        select(SaleItem.item_id, Item.name, qty)
        .join(Sale, Sale.sale_id == SaleItem.sale_id)
        .outerjoin(Item, Item.item_id == SaleItem.item_id)
        .where(func.date(Sale.created_at) >= start, func.date(Sale.created_at) <= end)
        .group_by(SaleItem.item_id, Item.name)
        .order_by(qty.desc(), SaleItem.item_id.asc())
        .limit(TOP_ITEMS_LIMIT)
    ).all()
    return [TopItemOut(item_id=item_id, name=name, qty=int(total)) for item_id, name, total in rows]


def get_overview(db: Session, today: date | None = None) -> OverviewOut:
    """Dashboard figures relative to ``today``.

    Stat cards compare the current calendar month with the previous one and
    carry a zero-filled daily trend for the last 30 days. The trend block covers
    the current month and the five before it, oldest first.
    """
    today = today or date.today()
    month_start, month_end = _month_bounds(today.year, today.month)
    prev_year, prev_month = _shift_month(today.year, today.month, -1)
    prev_start, prev_end = _month_bounds(prev_year, prev_month)

    month_revenue = _sales_total(db, month_start, month_end)
    prev_revenue = _sales_total(db, prev_start, prev_end)
    month_expenses = _expenses_total(db, month_start, month_end)
    prev_expenses = _expenses_total(db, prev_start, prev_end)

    total_items = int(
        db.execute(
            select(func.count(Item.item_id)).where(Item.status == ItemStatus.ACTIVE)
        ).scalar_one()
    )
    new_items_this_month = int(
        db.execute(
            select(func.count(Item.item_id)).where(
                func.date(Item.created_at) >= month_start,
                func.date(Item.created_at) <= month_end,
            )
        ).scalar_one()
    )
    low_stock_count = int(
        db.execute(
            select(func.count(Item.item_id)).where(
                Item.status == ItemStatus.ACTIVE,
                Item.qty_in_stock <= Item.reorder_level,
            )
        ).scalar_one()
    )

    days = [today - timedelta(days=offset) for offset in range(DAILY_TREND_DAYS - 1, -1, -1)]
    months = [
        _shift_month(today.year, today.month, -offset)
        for offset in range(MONTHLY_TREND_MONTHS - 1, -1, -1)
    ]
    window_start = _month_bounds(*months[0])[0]
    range_start = min(window_start, days[0])

    daily_revenue = _daily_sales(db, range_start, today)
    daily_expenses = _daily_expenses(db, range_start, today)
    daily_new_items = _daily_new_items(db, range_start, today)

    def in_last_days(values: dict) -> dict:
        return {day: value for day, value in values.items() if day >= days[0]}

    def in_month_window(values: dict) -> dict:
        return {day: value for day, value in values.items() if day >= window_start}

    stats = OverviewStatsOut(
        monthRevenue=StatCardOut(
            value=float(month_revenue),
            change=percentage_change(month_revenue, prev_revenue),
            trend=_fill_days(in_last_days(daily_revenue), days),
        ),
        totalItems=StatCardOut(
            value=total_items,
            change=new_items_this_month,
            trend=_fill_days(in_last_days(daily_new_items), days),
        ),
        lowStockCount=StatCardOut(value=low_stock_count, change=None, trend=[]),
        monthExpenses=StatCardOut(
            value=float(month_expenses),
            change=percentage_change(month_expenses, prev_expenses),
            trend=_fill_days(in_last_days(daily_expenses), days),
        ),
    )
    trends = OverviewTrendsOut(
        months=[date(year, month, 1).strftime("%b") for year, month in months],
        revenue=[float(value) for value in _bucket_by_month(in_month_window(daily_revenue), months)],
        expenses=[float(value) for value in _bucket_by_month(in_month_window(daily_expenses), months)],
        newItems=[int(value) for value in _bucket_by_month(in_month_window(daily_new_items), months)],
    )
    return OverviewOut(
        stats=stats,
        trends=trends,
        topItems=_top_items(db, month_start, month_end),
    )


def get_monthly(db: Session, year: int, month: int) -> MonthlyOut:
    start, end = _month_bounds(year, month)
    revenue = _sales_total(db, start, end)
    expenses = _expenses_total(db, start, end)
    return MonthlyOut(
        year=year,
        month=month,
        totalRevenue=float(revenue),
        totalExpenses=float(expenses),
        netProfit=float(to_money(revenue - expenses)),
    )


def get_expense_stats(db: Session, today: date | None = None) -> ExpenseStatsOut:
    today = today or date.today()
    week_start = today - timedelta(days=today.weekday())
    month_start, month_end = _month_bounds(today.year, today.month)
    return ExpenseStatsOut(
        today=float(_expenses_total(db, today, today)),
        week=float(_expenses_total(db, week_start, week_start + timedelta(days=6))),
        month=float(_expenses_total(db, month_start, month_end)),
        year=float(_expenses_total(db, date(today.year, 1, 1), date(today.year, 12, 31))),
    )
