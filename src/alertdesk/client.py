"""HTTP client for the remote alert source."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .alerts import AlertPage, Priority
from .errors import RemoteSourceError
from .lifecycle import AlertAction

LOGGER = logging.getLogger(__name__)


class AlertSourceClient:
    """Query and mutate alerts on the dashboard backend.

    Pass ``client`` to share a connection pool (or a mock transport in tests);
    otherwise a short-lived ``httpx.AsyncClient`` is opened per request.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be provided for AlertSourceClient")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._client = client

    @classmethod
    def from_settings(cls, settings, client: httpx.AsyncClient | None = None) -> "AlertSourceClient":
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout_seconds=settings.request_timeout_seconds,
            client=client,
        )

    async def fetch_alerts(
        self, page: int = 1, limit: int = 20, priority: Priority | None = None
    ) -> AlertPage:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if priority is not None:
            params["priority"] = Priority(priority).value
        body = await self._request("GET", "/alerts/advanced", params=params)
        try:
            return AlertPage.model_validate(body.get("data") or {})
        except ValidationError as exc:
            raise RemoteSourceError(f"Malformed alert page: {exc}") from exc

    async def mutate(self, alert_id: str, action: AlertAction) -> dict[str, Any]:
        action = AlertAction(action)
        LOGGER.info("Requesting %s for alert %s", action.value, alert_id)
        return await self._request("PUT", f"/alerts/{alert_id}/{action.value}")

    async def acknowledge(self, alert_id: str) -> dict[str, Any]:
        return await self.mutate(alert_id, AlertAction.ACKNOWLEDGE)

    async def resolve(self, alert_id: str) -> dict[str, Any]:
        return await self.mutate(alert_id, AlertAction.RESOLVE)

    async def dismiss(self, alert_id: str) -> dict[str, Any]:
        return await self.mutate(alert_id, AlertAction.DISMISS)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self, method: str, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, params=params, headers=self._headers()
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.request(
                        method, url, params=params, headers=self._headers()
                    )
        except httpx.HTTPError as exc:
            LOGGER.warning("%s %s failed: %s", method, path, exc)
            raise RemoteSourceError(str(exc) or exc.__class__.__name__) from exc

        body = _json_body(response)
        if response.is_error:
            message = body.get("message") or f"HTTP {response.status_code}"
            LOGGER.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise RemoteSourceError(str(message), status_code=response.status_code)
        if not body.get("success", False):
            message = body.get("message") or "Request was not successful"
            raise RemoteSourceError(str(message), status_code=response.status_code)
        return body


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
