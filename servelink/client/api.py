"""
HTTP client for the ServeLink API.

Every call returns an APIResult instead of raising: `data` on success,
`error` (a human readable message) on failure. Transport problems are
reported the same way as HTTP errors. There is no retry.

Usage:
    async with ServeLinkClient("http://localhost:8001") as api:
        result = await api.login("owner@example.com", "secret")
        if result.error:
            print(result.error)
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8001"


@dataclass
class APIResult:
    """Outcome of one remote call."""
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _value(v):
    return getattr(v, "value", v)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase

    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, list):
            # Validation errors: [{"loc": [...], "msg": "..."}]
            return "; ".join(str(err.get("msg", err)) for err in detail)
        if detail:
            return str(detail)
        if body.get("error"):
            return str(body["error"])
    return response.reason_phrase


class ServeLinkClient:
    """
    Thin async wrapper over the REST API.

    Args:
        base_url: Server root
        token: Bearer token of a signed-in user
        transport: Optional httpx transport (e.g. ASGITransport in tests)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ServeLinkClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # PLUMBING
    # =========================================================================

    async def _request(self, method: str, path: str, raw: bool = False, **kwargs) -> APIResult:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if "params" in kwargs:
            kwargs["params"] = {k: v for k, v in kwargs["params"].items() if v is not None}

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            return APIResult(error=str(e) or e.__class__.__name__)

        if response.is_error:
            message = _error_message(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            return APIResult(error=message, status_code=response.status_code)

        data = response.content if raw else response.json()
        return APIResult(data=data, status_code=response.status_code)

    # =========================================================================
    # AUTH
    # =========================================================================

    async def signup(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role: str = "owner",
    ) -> APIResult:
        result = await self._request(
            "POST",
            "/api/auth/signup",
            json={"email": email, "password": password, "full_name": full_name, "role": _value(role)},
        )
        if result.ok:
            self.token = result.data["access_token"]
        return result

    async def login(self, email: str, password: str) -> APIResult:
        result = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        if result.ok:
            self.token = result.data["access_token"]
        return result

    async def logout(self) -> APIResult:
        result = await self._request("POST", "/api/auth/logout")
        self.token = None
        return result

    async def me(self) -> APIResult:
        return await self._request("GET", "/api/auth/me")

    # =========================================================================
    # RESTAURANT
    # =========================================================================

    async def my_restaurant(self) -> APIResult:
        return await self._request("GET", "/api/restaurants/me")

    async def rename_restaurant(self, restaurant_id: str, name: str) -> APIResult:
        return await self._request("PATCH", f"/api/restaurants/{restaurant_id}", json={"name": name})

    # =========================================================================
    # MENU
    # =========================================================================

    async def list_categories(self, restaurant_id: str, active_only: bool = False) -> APIResult:
        return await self._request(
            "GET",
            "/api/categories",
            params={"restaurant_id": restaurant_id, "active_only": str(active_only).lower()},
        )

    async def create_category(self, **fields) -> APIResult:
        return await self._request("POST", "/api/categories", json=fields)

    async def update_category(self, category_id: str, **fields) -> APIResult:
        return await self._request("PATCH", f"/api/categories/{category_id}", json=fields)

    async def delete_category(self, category_id: str) -> APIResult:
        return await self._request("DELETE", f"/api/categories/{category_id}")

    async def list_menu_items(
        self,
        restaurant_id: str,
        available_only: bool = False,
        category_id: Optional[str] = None,
    ) -> APIResult:
        return await self._request(
            "GET",
            "/api/menu-items",
            params={
                "restaurant_id": restaurant_id,
                "available_only": str(available_only).lower(),
                "category_id": category_id,
            },
        )

    async def create_menu_item(self, **fields) -> APIResult:
        return await self._request("POST", "/api/menu-items", json=fields)

    async def update_menu_item(self, item_id: str, **fields) -> APIResult:
        return await self._request("PATCH", f"/api/menu-items/{item_id}", json=fields)

    async def delete_menu_item(self, item_id: str) -> APIResult:
        return await self._request("DELETE", f"/api/menu-items/{item_id}")

    async def public_menu(self, restaurant_id: str, table: Optional[str] = None) -> APIResult:
        return await self._request("GET", f"/api/public/menu/{restaurant_id}", params={"table": table})

    # =========================================================================
    # TABLES
    # =========================================================================

    async def list_tables(self) -> APIResult:
        return await self._request("GET", "/api/tables")

    async def create_table(self, table_number: str, capacity: Optional[int] = None) -> APIResult:
        return await self._request(
            "POST", "/api/tables", json={"table_number": table_number, "capacity": capacity}
        )

    async def delete_table(self, table_id: str) -> APIResult:
        return await self._request("DELETE", f"/api/tables/{table_id}")

    async def table_qr_png(self, table_id: str) -> APIResult:
        """PNG bytes of a table's QR code."""
        return await self._request("GET", f"/api/tables/{table_id}/qr.png", raw=True)

    # =========================================================================
    # ORDERS
    # =========================================================================

    async def list_orders(
        self,
        statuses: Optional[Iterable] = None,
        exclude: Optional[Iterable] = None,
        ascending: bool = False,
        limit: Optional[int] = None,
    ) -> APIResult:
        params = {
            "status": [_value(s) for s in statuses] if statuses else None,
            "exclude_status": [_value(s) for s in exclude] if exclude else None,
            "ascending": str(ascending).lower(),
            "limit": limit,
        }
        return await self._request("GET", "/api/orders", params=params)

    async def get_order(self, order_id: str) -> APIResult:
        return await self._request("GET", f"/api/orders/{order_id}")

    async def create_order(
        self,
        restaurant_id: str,
        total_amount: Optional[float],
        table_id: Optional[str] = None,
        customer_notes: Optional[str] = None,
    ) -> APIResult:
        return await self._request(
            "POST",
            "/api/orders",
            json={
                "restaurant_id": restaurant_id,
                "table_id": table_id,
                "total_amount": total_amount,
                "customer_notes": customer_notes,
            },
        )

    async def add_order_items(self, order_id: str, items: list[dict]) -> APIResult:
        return await self._request("POST", f"/api/orders/{order_id}/items", json=items)

    async def update_order_status(self, order_id: str, status) -> APIResult:
        return await self._request(
            "PATCH", f"/api/orders/{order_id}/status", json={"status": _value(status)}
        )

    async def delete_order(self, order_id: str) -> APIResult:
        return await self._request("DELETE", f"/api/orders/{order_id}")

    # =========================================================================
    # STAFF & ANALYTICS
    # =========================================================================

    async def list_staff(self) -> APIResult:
        return await self._request("GET", "/api/staff")

    async def assign_staff(self, email: str, role) -> APIResult:
        return await self._request("POST", "/api/staff/assign", json={"email": email, "role": _value(role)})

    async def analytics(self) -> APIResult:
        return await self._request("GET", "/api/analytics")

    async def health(self) -> APIResult:
        return await self._request("GET", "/health")
