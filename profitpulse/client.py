"""HTTP client for the ProfitPulse API.

The bearer token is held by an :class:`ApiSession` that the caller creates and
passes in, so several independent sessions can coexist in one process::

    session = ApiSession(base_url="http://localhost:8000")
    client = ProfitPulseClient(session)
    client.login("admin", "password123")
    low_stock = client.list_items(low_stock=True)

Every call unwraps the ``{"success": true, "data": ...}`` envelope and raises
:class:`ApiError` for an error envelope or a non-2xx response.
"""

from dataclasses import dataclass, field
from typing import Any

import requests

DEFAULT_TIMEOUT_SECONDS = 15


class ApiError(Exception):
    def __init__(self, message: str, status: int):
        self.message = message
        self.status = status
        super().__init__(f"{status}: {message}")


@dataclass
class ApiSession:
    base_url: str = "http://localhost:8000"
    token: str | None = None
    admin: dict[str, Any] | None = field(default=None)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def clear(self) -> None:
        self.token = None
        self.admin = None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _params(**values: Any) -> dict[str, Any]:
    params = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[_camel(key)] = value
    return params


class ProfitPulseClient:
    def __init__(self, session: ApiSession, http=None, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.session = session
        # Anything with a requests-compatible ``request`` method works here.
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, *, params=None, json=None) -> Any:
        response = self.http.request(
            method,
            f"{self.session.base_url}{path}",
            params=params,
            json=json,
            headers=self.session.auth_headers(),
            timeout=self.timeout,
        )
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            if 200 <= response.status_code < 300:
                return body
            raise ApiError(response.text or "Unexpected response", response.status_code)

        if body.get("success") is False or response.status_code >= 400:
            error = body.get("error") or {}
            raise ApiError(
                error.get("message") or "Request failed",
                int(error.get("status") or response.status_code),
            )
        return body.get("data", body)

    # auth

    def login(self, username: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"username": username, "password": password})
        self.session.token = data["token"]
        self.session.admin = data["admin"]
        return data["admin"]

    def logout(self) -> None:
        # Tokens are stateless; dropping it client side is the whole logout.
        self.session.clear()

    def me(self) -> dict:
        return self._request("GET", "/auth/me")

    def forgot_password(self, email: str) -> str:
        return self._request("POST", "/auth/forgot-password", json={"email": email})["message"]

    def reset_password(self, token: str, password: str) -> str:
        data = self._request("POST", "/auth/reset-password", json={"token": token, "password": password})
        return data["message"]

    # items

    def list_items(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        status: str | None = None,
        low_stock: bool | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict:
        params = _params(
            page=page,
            limit=limit,
            search=search,
            status=status,
            low_stock=low_stock,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return self._request("GET", "/items", params=params)

    def get_item(self, item_id: int) -> dict:
        return self._request("GET", f"/items/{item_id}")

    def create_item(self, payload: dict) -> dict:
        return self._request("POST", "/items", json=payload)

    def update_item(self, item_id: int, payload: dict) -> dict:
        return self._request("PUT", f"/items/{item_id}", json=payload)

    def delete_item(self, item_id: int) -> dict:
        return self._request("DELETE", f"/items/{item_id}")

    def restore_item(self, item_id: int) -> dict:
        return self._request("PUT", f"/items/{item_id}/restore")

    # sales

    def list_sales(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict:
        params = _params(
            page=page,
            limit=limit,
            search=search,
            start_date=start_date,
            end_date=end_date,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return self._request("GET", "/sales", params=params)

    def get_sale(self, sale_id: int) -> dict:
        return self._request("GET", f"/sales/{sale_id}")

    def create_sale(self, payload: dict) -> dict:
        return self._request("POST", "/sales", json=payload)

    # expenses

    def list_expenses(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        category: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict:
        params = _params(
            page=page,
            limit=limit,
            search=search,
            start_date=start_date,
            end_date=end_date,
            category=category,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return self._request("GET", "/expenses", params=params)

    def get_expense(self, expense_id: int) -> dict:
        return self._request("GET", f"/expenses/{expense_id}")

    def create_expense(self, payload: dict) -> dict:
        return self._request("POST", "/expenses", json=payload)

    def update_expense(self, expense_id: int, payload: dict) -> dict:
        return self._request("PUT", f"/expenses/{expense_id}", json=payload)

    def delete_expense(self, expense_id: int) -> dict:
        return self._request("DELETE", f"/expenses/{expense_id}")

    # audits and analytics

    def list_audits(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        action: str | None = None,
        resource: str | None = None,
        admin_id: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict:
        params = _params(
            page=page,
            limit=limit,
            search=search,
            action=action,
            resource=resource,
            admin_id=admin_id,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return self._request("GET", "/audits", params=params)

    def analytics_overview(self) -> dict:
        return self._request("GET", "/analytics/overview")

    def analytics_monthly(self, year: int | None = None, month: int | None = None) -> dict:
        return self._request("GET", "/analytics/monthly", params=_params(year=year, month=month))

    def expense_stats(self) -> dict:
        return self._request("GET", "/analytics/expense-stats")
