"""Async client for the restaurant admin REST API."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed API call, carrying the server's message when it sent one."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


def _clean_params(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        token = settings.api_token if token is None else token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url or settings.api_base_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=settings.api_timeout_seconds if timeout is None else timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=_clean_params(params), json=json)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise ApiError("Request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(str(exc) or "Network error") from exc

        payload = _json_or_none(response)
        if response.is_error:
            message = payload.get("message") if isinstance(payload, dict) else None
            logger.warning("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(
                message or f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return payload

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class Resource:
    """CRUD endpoints of one collection; ``list`` doubles as a list-controller fetch function."""

    def __init__(self, client: ApiClient, path: str, *, stats_path: Optional[str] = None) -> None:
        self.client = client
        self.path = path
        self.stats_path = stats_path or f"{path}/stats/overview"

    async def list(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.client.get(self.path, params=params)

    async def get(self, item_id: str) -> Any:
        return await self.client.get(f"{self.path}/{item_id}")

    async def stats(self) -> Any:
        return await self.client.get(self.stats_path)

    async def create(self, data: Mapping[str, Any]) -> Any:
        return await self.client.post(self.path, json=dict(data))

    async def update(self, item_id: str, data: Mapping[str, Any]) -> Any:
        return await self.client.patch(f"{self.path}/{item_id}", json=dict(data))

    async def delete(self, item_id: str) -> Any:
        return await self.client.delete(f"{self.path}/{item_id}")


class OrdersResource(Resource):
    async def pending(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.client.get(f"{self.path}/pending/all", params=params)

    async def update_status(self, order_id: str, status: str, **extra: Any) -> Any:
        return await self.client.patch(f"{self.path}/{order_id}/status", json={"status": status, **extra})

    async def assign_delivery(self, order_id: str, delivery_partner_id: str) -> Any:
        return await self.client.patch(
            f"{self.path}/{order_id}/assign", json={"deliveryPartnerId": delivery_partner_id}
        )

    async def cancel(self, order_id: str, reason: str) -> Any:
        return await self.client.patch(f"{self.path}/{order_id}/cancel", json={"reason": reason})


class MenuResource(Resource):
    async def set_availability(self, item_id: str, is_available: bool) -> Any:
        return await self.client.patch(f"{self.path}/{item_id}/availability", json={"isAvailable": is_available})

    async def restore(self, item_id: str) -> Any:
        return await self.client.patch(f"{self.path}/{item_id}/restore")


class UsersResource(Resource):
    async def toggle_block(self, user_id: str, reason: Optional[str] = None) -> Any:
        return await self.client.patch(f"{self.path}/{user_id}/block", json={"reason": reason} if reason else {})

    async def update_role(self, user_id: str, role: str) -> Any:
        return await self.client.patch(f"{self.path}/{user_id}/role", json={"role": role})


class DeliveryResource(Resource):
    async def available(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.client.get("/delivery/available", params=params)

    async def delete(self, item_id: str) -> Any:
        return await self.client.delete(f"/delivery/partner/{item_id}")

    async def settle_session(self, session_id: str, data: Mapping[str, Any]) -> Any:
        return await self.client.patch(f"/delivery/session/{session_id}/settle", json=dict(data))


class CategoriesResource(Resource):
    async def toggle_status(self, category_id: str) -> Any:
        return await self.client.patch(f"{self.path}/{category_id}/toggle-status")


class SettingsResource:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def get(self) -> Any:
        return await self.client.get("/settings")

    async def update(self, data: Mapping[str, Any]) -> Any:
        return await self.client.put("/settings", json=dict(data))


class AdminApi:
    """Entry point grouping every admin collection behind one HTTP client."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.orders = OrdersResource(client, "/orders")
        self.menu = MenuResource(client, "/menu")
        self.users = UsersResource(client, "/users")
        self.delivery = DeliveryResource(client, "/delivery/partners", stats_path="/delivery/stats/overview")
        self.categories = CategoriesResource(client, "/categories", stats_path="/categories/stats")
        self.settings = SettingsResource(client)
