import pytest

from profitpulse.client import ApiError, ApiSession, ProfitPulseClient
from profitpulse.models.admin import AdminRole


def _client(test_client) -> ProfitPulseClient:
    return ProfitPulseClient(ApiSession(base_url="http://testserver/"), http=test_client)


def test_session_holds_token_between_calls(test_context, make_admin):
    client, _ = test_context
    make_admin("alice")
    api = _client(client)

    assert api.session.base_url == "http://testserver"
    assert not api.session.is_authenticated

    admin = api.login("alice", "password123")
    assert admin["username"] == "alice"
    assert api.session.is_authenticated
    assert api.session.admin["role"] == "admin"
    assert api.me()["email"] == "alice@example.com"

    item = api.create_item({"item_number": "A1", "name": "Widget", "qty_in_stock": 1, "reorder_level": 3, "selling_price": 2})
    low = api.list_items(low_stock=True, sort_by="name", sort_order="asc")
    assert [row["item_id"] for row in low["items"]] == [item["item_id"]]

    sale = api.create_sale({"items": [{"item_id": item["item_id"], "quantity": 1, "price_at_sale": 2}]})
    assert sale["total_amount"] == 2.0
    assert api.get_item(item["item_id"])["qty_in_stock"] == 0

    api.logout()
    assert api.session.token is None
    assert api.session.admin is None
    with pytest.raises(ApiError) as exc_info:
        api.me()
    assert exc_info.value.status == 401
    assert exc_info.value.message == "Not authorized, no token"


def test_error_envelopes_become_api_errors(test_context, make_admin):
    client, _ = test_context
    make_admin("carl", AdminRole.CASHIER)
    api = _client(client)

    with pytest.raises(ApiError) as bad_login:
        api.login("carl", "wrong-password")
    assert bad_login.value.status == 401
    assert bad_login.value.message == "Invalid username or password"
    assert api.session.token is None

    api.login("carl", "password123")
    with pytest.raises(ApiError) as forbidden:
        api.list_expenses()
    assert forbidden.value.status == 403

    with pytest.raises(ApiError) as missing:
        api.get_sale(12345)
    assert missing.value.status == 404
    assert missing.value.message == "Sale not found"


def test_sessions_are_independent(test_context, make_admin):
    client, _ = test_context
    make_admin("alice")
    make_admin("mia", AdminRole.MANAGER)

    first = _client(client)
    second = _client(client)
    first.login("alice", "password123")
    second.login("mia", "password123")

    assert first.me()["username"] == "alice"
    assert second.me()["username"] == "mia"

    second.logout()
    assert first.me()["username"] == "alice"
