from sqlalchemy import func, select

from profitpulse.models.admin import AdminRole
from profitpulse.models.audit import Audit, AuditAction
from profitpulse.models.expense import Expense


def _create_expense(client, headers, **overrides) -> dict:
    payload = {"date": "2026-02-16", "category": "utilities", "amount": 45, "notes": "Generator fuel"}
    payload.update(overrides)
    res = client.post("/expenses", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_expense_crud_with_audit_trail(test_context, make_admin):
    client, session_local = test_context
    admin_id, headers = make_admin()

    created = _create_expense(client, headers)
    assert created["date"] == "2026-02-16"
    assert created["amount"] == 45.0
    assert created["admin_id"] == admin_id
    expense_id = created["expense_id"]

    fetched = client.get(f"/expenses/{expense_id}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["data"]["username"] == "owner"

    updated = client.put(
        f"/expenses/{expense_id}",
        json={"amount": 50.25, "date": "2026-02-17"},
        headers=headers,
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["data"]["amount"] == 50.25
    assert updated.json()["data"]["date"] == "2026-02-17"
    assert updated.json()["data"]["category"] == "utilities"

    deleted = client.delete(f"/expenses/{expense_id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["data"]["message"] == "Expense deleted"

    assert client.get(f"/expenses/{expense_id}", headers=headers).status_code == 404
    assert client.delete(f"/expenses/{expense_id}", headers=headers).status_code == 404

    db = session_local()
    try:
        remaining = db.execute(select(func.count(Expense.expense_id))).scalar_one()
        audits = db.execute(
            select(Audit).where(Audit.resource == "expenses").order_by(Audit.audit_id)
        ).scalars().all()
    finally:
        db.close()

    assert remaining == 0
    assert [audit.action for audit in audits] == [
        AuditAction.CREATE,
        AuditAction.UPDATE,
        AuditAction.DELETE,
    ]
    assert audits[1].before_state == {"amount": 45.0, "date": "2026-02-16"}
    assert audits[1].after_state == {"amount": 50.25, "date": "2026-02-17"}
    assert audits[2].before_state["category"] == "utilities"
    assert audits[2].resource_id == str(expense_id)


def test_expense_validation(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()

    for payload in (
        {"date": "2026-02-16", "category": "rent", "amount": 0},
        {"date": "not-a-date", "category": "rent", "amount": 10},
        {"date": "2026-02-16", "category": "   ", "amount": 10},
    ):
        res = client.post("/expenses", json=payload, headers=headers)
        assert res.status_code == 400, payload
        assert res.json()["error"]["message"] == "Validation failed"


def test_list_expenses_filters(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()
    _create_expense(client, headers, date="2026-01-05", category="rent", amount=500, notes="January rent")
    _create_expense(client, headers, date="2026-01-20", category="utilities", amount=40, notes="Power")
    _create_expense(client, headers, date="2026-02-03", category="rent", amount=500, notes="February rent")

    everything = client.get("/expenses", headers=headers).json()["data"]
    assert everything["total"] == 3
    # Newest expense date first by default.
    assert [expense["date"] for expense in everything["expenses"]] == [
        "2026-02-03",
        "2026-01-20",
        "2026-01-05",
    ]

    january = client.get(
        "/expenses",
        params={"startDate": "2026-01-01", "endDate": "2026-01-31"},
        headers=headers,
    ).json()["data"]
    assert january["total"] == 2

    rent = client.get("/expenses", params={"category": "rent"}, headers=headers).json()["data"]
    assert rent["total"] == 2

    search = client.get("/expenses", params={"search": "power"}, headers=headers).json()["data"]
    assert [expense["notes"] for expense in search["expenses"]] == ["Power"]

    by_amount = client.get(
        "/expenses",
        params={"sortBy": "amount", "sortOrder": "asc", "limit": 1},
        headers=headers,
    ).json()["data"]
    assert by_amount["total"] == 3
    assert [expense["amount"] for expense in by_amount["expenses"]] == [40.0]

    inverted = client.get(
        "/expenses",
        params={"startDate": "2026-02-01", "endDate": "2026-01-01"},
        headers=headers,
    )
    assert inverted.status_code == 400


def test_cashier_cannot_touch_expenses(test_context, make_admin):
    client, _ = test_context
    _, owner_headers = make_admin()
    _, cashier_headers = make_admin("carl", AdminRole.CASHIER)
    expense = _create_expense(client, owner_headers)

    assert client.get("/expenses", headers=cashier_headers).status_code == 403
    assert client.get(f"/expenses/{expense['expense_id']}", headers=cashier_headers).status_code == 403
    create_res = client.post(
        "/expenses",
        json={"date": "2026-02-16", "category": "rent", "amount": 10},
        headers=cashier_headers,
    )
    assert create_res.status_code == 403
