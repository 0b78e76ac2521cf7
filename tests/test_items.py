from sqlalchemy import select

from profitpulse.models.admin import AdminRole
from profitpulse.models.audit import Audit, AuditAction


def _create_item(client, headers, **overrides) -> dict:
    payload = {
        "item_number": "A1",
        "name": "Widget",
        "category": "hardware",
        "qty_in_stock": 10,
        "reorder_level": 5,
        "purchase_price": 6.5,
        "selling_price": 9.99,
    }
    payload.update(overrides)
    res = client.post("/items", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_create_and_get_item(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()

    item = _create_item(client, headers)
    assert item["item_number"] == "A1"
    assert item["status"] == "active"
    assert item["selling_price"] == 9.99

    res = client.get(f"/items/{item['item_id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "Widget"

    missing = client.get("/items/9999", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Item not found"


def test_duplicate_item_number_is_rejected(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()
    _create_item(client, headers)

    res = client.post(
        "/items",
        json={"item_number": "a1", "name": "Other", "selling_price": 1},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Item number already exists"


def test_create_item_validation_failure(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()

    res = client.post(
        "/items",
        json={"item_number": "A1", "name": "Widget", "selling_price": 1, "qty_in_stock": -1},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Validation failed"


def test_list_items_filters_search_and_paging(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()
    _create_item(client, headers, item_number="A1", name="Widget", qty_in_stock=10, reorder_level=5)
    _create_item(client, headers, item_number="A2", name="Gadget", qty_in_stock=2, reorder_level=5)
    _create_item(client, headers, item_number="A3", name="100% Cotton", qty_in_stock=50, reorder_level=5)
    hidden = _create_item(client, headers, item_number="A4", name="Old Widget", qty_in_stock=0)
    assert client.delete(f"/items/{hidden['item_id']}", headers=headers).status_code == 200

    active = client.get("/items", headers=headers).json()["data"]
    assert active["total"] == 3
    assert {item["item_number"] for item in active["items"]} == {"A1", "A2", "A3"}

    everything = client.get("/items", params={"status": "all"}, headers=headers).json()["data"]
    assert everything["total"] == 4

    inactive = client.get("/items", params={"status": "inactive"}, headers=headers).json()["data"]
    assert [item["item_number"] for item in inactive["items"]] == ["A4"]

    low = client.get("/items", params={"lowStock": "true"}, headers=headers).json()["data"]
    assert [item["item_number"] for item in low["items"]] == ["A2"]

    # % is matched literally, not as a wildcard.
    percent = client.get("/items", params={"search": "0%"}, headers=headers).json()["data"]
    assert [item["name"] for item in percent["items"]] == ["100% Cotton"]

    widget = client.get("/items", params={"search": "widg"}, headers=headers).json()["data"]
    assert [item["item_number"] for item in widget["items"]] == ["A1"]

    paged = client.get(
        "/items",
        params={"sortBy": "item_number", "sortOrder": "asc", "page": 2, "limit": 2},
        headers=headers,
    ).json()["data"]
    assert paged["total"] == 3
    assert paged["page"] == 2
    assert paged["limit"] == 2
    assert [item["item_number"] for item in paged["items"]] == ["A3"]

    bad_status = client.get("/items", params={"status": "archived"}, headers=headers)
    assert bad_status.status_code == 400


def test_unknown_sort_field_falls_back_to_default(test_context, make_admin):
    client, _ = test_context
    _, headers = make_admin()
    _create_item(client, headers, item_number="A1")
    _create_item(client, headers, item_number="A2")

    res = client.get(
        "/items",
        params={"sortBy": "name; DROP TABLE items", "sortOrder": "sideways"},
        headers=headers,
    )
    assert res.status_code == 200
    # Default is created_at desc with item_id desc as the tiebreak.
    assert [item["item_number"] for item in res.json()["data"]["items"]] == ["A2", "A1"]


def test_update_item_records_changed_fields(test_context, make_admin):
    client, session_local = test_context
    admin_id, headers = make_admin()
    item = _create_item(client, headers)

    res = client.put(
        f"/items/{item['item_id']}",
        json={"selling_price": 12.5, "reorder_level": 8},
        headers={**headers, "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert res.status_code == 200, res.text
    updated = res.json()["data"]
    assert updated["selling_price"] == 12.5
    assert updated["reorder_level"] == 8
    assert updated["name"] == "Widget"

    empty = client.put(f"/items/{item['item_id']}", json={}, headers=headers)
    assert empty.status_code == 400

    db = session_local()
    try:
        audit = db.execute(
            select(Audit).where(Audit.action == AuditAction.UPDATE)
        ).scalar_one()
    finally:
        db.close()
    assert audit.admin_id == admin_id
    assert audit.resource == "items"
    assert audit.resource_id == str(item["item_id"])
    assert audit.before_state == {"selling_price": 9.99, "reorder_level": 5}
    assert audit.after_state == {"selling_price": 12.5, "reorder_level": 8}
    assert audit.ip_address == "203.0.113.7"


def test_delete_and_restore_are_reversible(test_context, make_admin):
    client, session_local = test_context
    _, headers = make_admin()
    item = _create_item(client, headers)

    deleted = client.delete(f"/items/{item['item_id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["data"]["status"] == "inactive"

    # Deleting twice stays inactive.
    again = client.delete(f"/items/{item['item_id']}", headers=headers)
    assert again.json()["data"]["status"] == "inactive"

    restored = client.put(f"/items/{item['item_id']}/restore", headers=headers)
    assert restored.status_code == 200
    body = restored.json()["data"]
    assert body["status"] == "active"
    for key in ("item_number", "name", "qty_in_stock", "reorder_level", "purchase_price", "selling_price"):
        assert body[key] == item[key]

    db = session_local()
    try:
        actions = db.execute(
            select(Audit.action).where(Audit.resource == "items").order_by(Audit.audit_id)
        ).scalars().all()
    finally:
        db.close()
    assert actions == [
        AuditAction.CREATE,
        AuditAction.DELETE,
        AuditAction.DELETE,
        AuditAction.RESTORE,
    ]


def test_manager_can_mutate_items_but_cashier_cannot(test_context, make_admin):
    client, _ = test_context
    _, manager_headers = make_admin("mia", AdminRole.MANAGER)
    _, cashier_headers = make_admin("carl", AdminRole.CASHIER)

    item = _create_item(client, manager_headers)
    assert client.delete(f"/items/{item['item_id']}", headers=cashier_headers).status_code == 403
    assert client.put(f"/items/{item['item_id']}/restore", headers=cashier_headers).status_code == 403
    assert client.get(f"/items/{item['item_id']}", headers=cashier_headers).status_code == 200


def test_item_transitions_are_total_and_idempotent():
    import pytest

    from profitpulse.models.item import ItemStatus
    from profitpulse.services.items_service import next_status

    for status in ItemStatus:
        assert next_status(status, AuditAction.DELETE) is ItemStatus.INACTIVE
        assert next_status(status, AuditAction.RESTORE) is ItemStatus.ACTIVE
    with pytest.raises(ValueError):
        next_status(ItemStatus.ACTIVE, AuditAction.SALE)


def test_duplicate_slipping_past_precheck_hits_unique_index(test_context, make_admin, monkeypatch):
    from profitpulse.services import items_service

    client, _ = test_context
    _, headers = make_admin()
    _create_item(client, headers)

    monkeypatch.setattr(items_service, "_ensure_item_number_free", lambda *args, **kwargs: None)
    for item_number in ("A1", "a1"):
        res = client.post(
            "/items",
            json={"item_number": item_number, "name": "Twin", "qty_in_stock": 1, "selling_price": 1},
            headers=headers,
        )
        assert res.status_code == 500
        assert res.json()["error"]["message"] == "Item could not be saved"
    assert len(client.get("/items", headers=headers).json()["data"]["items"]) == 1
