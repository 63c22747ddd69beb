from __future__ import annotations

import asyncio
from typing import Any

import pytest

from alertdesk.alerts import AlertPage
from alertdesk.errors import RemoteSourceError
from alertdesk.lifecycle import AlertAction
from alertdesk.overlay import OverlayStore

DURABLE_ID = "507f1f77bcf86cd799439011"


def raw_alert(alert_id: str, priority: str = "HIGH", **extra: Any) -> dict[str, Any]:
    payload = {
        "id": alert_id,
        "entityId": "ent-1",
        "title": f"Alert {alert_id}",
        "description": "Student inactive for 7 days",
        "priority": priority,
        "type": "INACTIVITY",
        "timestamp": "2025-03-01T10:00:00Z",
        "details": {"location": "Library"},
    }
    payload.update(extra)
    return payload


def summary(high: int = 0, medium: int = 0, low: int = 0, **extra: Any) -> dict[str, Any]:
    return {"byPriority": {"high": high, "medium": medium, "low": low}, "byType": {}, **extra}


def page(
    alerts: list[dict[str, Any]],
    summary_payload: dict[str, Any] | None = None,
    page_number: int = 1,
    has_more: bool = False,
) -> AlertPage:
    return AlertPage.model_validate(
        {
            "alerts": alerts,
            "summary": summary_payload or summary(),
            "pagination": {
                "page": page_number,
                "limit": 20,
                "total": len(alerts),
                "hasMore": has_more,
            },
        }
    )


class FakeSource:
    """In-memory stand-in for AlertSourceClient."""

    def __init__(self) -> None:
        self.pages: dict[tuple[int, str | None], AlertPage] = {}
        self.queries: list[tuple[int, int, str | None]] = []
        self.mutations: list[tuple[str, AlertAction]] = []
        self.mutation_error: RemoteSourceError | None = None
        self.gate: asyncio.Event | None = None

    def set_page(self, page_number: int, priority: str | None, result: AlertPage) -> None:
        self.pages[(page_number, priority)] = result

    async def fetch_alerts(self, page=1, limit=20, priority=None) -> AlertPage:
        key = priority.value if priority is not None else None
        self.queries.append((page, limit, key))
        await asyncio.sleep(0)
        try:
            return self.pages[(page, key)]
        except KeyError:
            raise RemoteSourceError(f"no page {page} for {key}") from None

    async def mutate(self, alert_id: str, action: AlertAction) -> dict[str, Any]:
        self.mutations.append((alert_id, action))
        if self.gate is not None:
            await self.gate.wait()
        if self.mutation_error is not None:
            raise self.mutation_error
        return {"success": True}


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def overlay(tmp_path) -> OverlayStore:
    return OverlayStore(tmp_path / "overlay.json")
