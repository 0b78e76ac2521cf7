from datetime import date, datetime
from decimal import Decimal

import pytest

from profitpulse.core.errors import ValidationError
from profitpulse.models.admin import AdminRole
from profitpulse.models.expense import Expense
from profitpulse.models.item import Item, ItemStatus
from profitpulse.models.sales import Sale, SaleItem
from profitpulse.services.analytics_service import (
    get_expense_stats,
    get_monthly,
    get_overview,
    percentage_change,
)

TODAY = date(2026, 3, 15)


def _seed(session_local, admin_id: int) -> None:
    db = session_local()
    try:
        widget = Item(
            item_number="A1", name="Widget", qty_in_stock=1, reorder_level=5,
            selling_price=Decimal("10"), created_at=datetime(2026, 3, 2, 9, 0),
        )
        gadget = Item(
            item_number="B1", name="Gadget", qty_in_stock=10, reorder_level=2,
            selling_price=Decimal("25"), created_at=datetime(2026, 1, 10, 9, 0),
        )
        retired = Item(
            item_number="C1", name="Retired", qty_in_stock=0, reorder_level=5,
            selling_price=Decimal("5"), status=ItemStatus.INACTIVE, created_at=datetime(2026, 3, 5, 9, 0),
        )
        db.add_all([widget, gadget, retired])
        db.flush()

        march = Sale(
            sale_number="SALE-1", admin_id=admin_id, total_amount=Decimal("100"),
            payment_method="cash", created_at=datetime(2026, 3, 10, 12, 0),
        )
        february = Sale(
            sale_number="SALE-2", admin_id=admin_id, total_amount=Decimal("50"),
            payment_method="cash", created_at=datetime(2026, 2, 20, 12, 0),
        )
        december = Sale(
            sale_number="SALE-3", admin_id=admin_id, total_amount=Decimal("30"),
            payment_method="card", created_at=datetime(2025, 12, 5, 12, 0),
        )
        db.add_all([march, february, december])
        db.flush()

        db.add_all(
            [
                SaleItem(sale_id=march.sale_id, item_id=widget.item_id, quantity=3,
                         price_at_sale=Decimal("10"), subtotal=Decimal("30")),
                SaleItem(sale_id=march.sale_id, item_id=gadget.item_id, quantity=1,
                         price_at_sale=Decimal("25"), subtotal=Decimal("25")),
                SaleItem(sale_id=february.sale_id, item_id=gadget.item_id, quantity=10,
                         price_at_sale=Decimal("5"), subtotal=Decimal("50")),
            ]
        )

        for day, amount in (
            (date(2026, 3, 15), "5"),
            (date(2026, 3, 9), "7"),
            (date(2026, 3, 1), "40"),
            (date(2026, 2, 10), "80"),
        ):
            db.add(Expense(admin_id=admin_id, expense_date=day, category="ops", amount=Decimal(amount)))
        db.commit()
    finally:
        db.close()


def test_percentage_change_edge_cases():
    assert percentage_change(0, 0) == 0.0
    assert percentage_change(Decimal("5"), 0) == 100.0
    assert percentage_change(Decimal("50"), Decimal("100")) == -50.0
    assert percentage_change(Decimal("150"), Decimal("100")) == 50.0


def test_overview_aggregates(test_context, make_admin):
    _, session_local = test_context
    admin_id, _ = make_admin()
    _seed(session_local, admin_id)

    db = session_local()
    try:
        overview = get_overview(db, today=TODAY)
    finally:
        db.close()

    stats = overview.stats
    assert stats.monthRevenue.value == 100.0
    assert stats.monthRevenue.change == 100.0
    assert len(stats.monthRevenue.trend) == 30
    # Trend runs oldest first and ends on the reference day.
    assert stats.monthRevenue.trend[24] == 100.0
    assert stats.monthRevenue.trend[6] == 50.0
    assert sum(stats.monthRevenue.trend) == 150.0

    assert stats.totalItems.value == 2
    assert stats.totalItems.change == 2
    assert stats.lowStockCount.value == 1
    assert stats.lowStockCount.change is None
    assert stats.lowStockCount.trend == []

    assert stats.monthExpenses.value == 52.0
    assert stats.monthExpenses.change == -35.0
    assert stats.monthExpenses.trend[-1] == 5.0

    trends = overview.trends
    assert trends.months == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert trends.revenue == [0.0, 0.0, 30.0, 0.0, 50.0, 100.0]
    assert trends.expenses == [0.0, 0.0, 0.0, 0.0, 80.0, 52.0]
    assert trends.newItems == [0, 0, 0, 1, 0, 2]

    assert [(item.name, item.qty) for item in overview.topItems] == [("Widget", 3), ("Gadget", 1)]


def test_monthly_and_expense_stats(test_context, make_admin):
    _, session_local = test_context
    admin_id, _ = make_admin()
    _seed(session_local, admin_id)

    db = session_local()
    try:
        march = get_monthly(db, 2026, 3)
        empty = get_monthly(db, 2024, 6)
        stats = get_expense_stats(db, today=TODAY)
        with pytest.raises(ValidationError):
            get_monthly(db, 2026, 13)
    finally:
        db.close()

    assert (march.totalRevenue, march.totalExpenses, march.netProfit) == (100.0, 52.0, 48.0)
    assert (empty.totalRevenue, empty.totalExpenses, empty.netProfit) == (0.0, 0.0, 0.0)
    assert (stats.today, stats.week, stats.month, stats.year) == (5.0, 12.0, 52.0, 132.0)


def test_analytics_endpoints_and_roles(test_context, make_admin):
    client, _ = test_context
    _, manager_headers = make_admin("mia", AdminRole.MANAGER)
    _, cashier_headers = make_admin("carl", AdminRole.CASHIER)

    overview = client.get("/analytics/overview", headers=manager_headers)
    assert overview.status_code == 200, overview.text
    data = overview.json()["data"]
    assert set(data) == {"stats", "trends", "topItems"}
    assert set(data["stats"]) == {"monthRevenue", "totalItems", "lowStockCount", "monthExpenses"}
    assert len(data["trends"]["months"]) == 6

    monthly = client.get("/analytics/monthly", params={"year": 2026, "month": 3}, headers=manager_headers)
    assert monthly.status_code == 200
    assert monthly.json()["data"] == {
        "year": 2026,
        "month": 3,
        "totalRevenue": 0.0,
        "totalExpenses": 0.0,
        "netProfit": 0.0,
    }

    assert client.get("/analytics/monthly", params={"month": 13}, headers=manager_headers).status_code == 400
    assert client.get("/analytics/expense-stats", headers=manager_headers).status_code == 200
    assert client.get("/analytics/overview", headers=cashier_headers).status_code == 403
