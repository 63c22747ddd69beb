"""Route operator actions to a remote mutation or a local overlay write."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from .alerts import ActionRecord, Alert, LocalBackedAlert, RemoteBackedAlert
from .client import AlertSourceClient
from .errors import ActionRejected, OverlayError, RemoteSourceError
from .identity import canonical_id
from .lifecycle import AlertAction, AlertStatus, next_status
from .overlay import OverlayStore
from .permissions import User, can_perform, permissions_for
from .views import AlertBoard

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class DispatchOutcome:
    alert_id: str
    action: AlertAction
    applied: bool
    status: AlertStatus | None = None
    alert: Alert | None = None
    persisted: bool = True


class ActionDispatcher:
    """Single entry point for acknowledge/resolve/dismiss requests.

    At most one mutation per alert id is outstanding at a time; a second
    request for the same id while the first is pending is a no-op.
    """

    def __init__(
        self,
        board: AlertBoard,
        source: AlertSourceClient,
        overlay: OverlayStore,
        user: User | None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.board = board
        self.source = source
        self.overlay = overlay
        self.user = user
        self.clock = clock
        self._in_flight: set[str] = set()

    def is_in_flight(self, alert_id: str) -> bool:
        return canonical_id(alert_id) in self._in_flight

    async def dispatch(self, alert_id: str, action: AlertAction | str) -> DispatchOutcome:
        key = canonical_id(alert_id)
        if not key:
            raise ActionRejected("An alert id is required")
        try:
            action = AlertAction(action)
        except ValueError:
            raise ActionRejected(f"Unknown action {action!r}", alert_id=key) from None

        if key in self._in_flight:
            LOGGER.info("Ignoring %s for %s; another action is in flight", action.value, key)
            return DispatchOutcome(alert_id=key, action=action, applied=False)

        self._in_flight.add(key)
        try:
            alert = self._validate(key, action)
            if isinstance(alert, RemoteBackedAlert):
                return await self._dispatch_remote(alert, action)
            return await self._dispatch_local(alert, action)
        finally:
            self._in_flight.discard(key)

    def _validate(self, alert_id: str, action: AlertAction) -> Alert:
        alert = self.board.find(alert_id)
        if alert is None:
            raise ActionRejected(
                f"Alert {alert_id} is not loaded", alert_id=alert_id, action=action.value
            )
        if can_perform(self.user, alert, action):
            return alert
        if self.user is None:
            raise ActionRejected(
                "Sign in to act on alerts", alert_id=alert_id, action=action.value
            )
        if action not in permissions_for(self.user.role):
            raise ActionRejected(
                f"Role {self.user.role} may not {action.value} alerts",
                alert_id=alert_id,
                action=action.value,
            )
        try:
            next_status(alert.status, action)
        except ActionRejected as exc:
            exc.alert_id = alert_id
            raise
        raise ActionRejected("Action not permitted", alert_id=alert_id, action=action.value)

    async def _dispatch_remote(
        self, alert: RemoteBackedAlert, action: AlertAction
    ) -> DispatchOutcome:
        status = next_status(alert.status, action)
        await self.source.mutate(alert.id, action)
        updated = alert.model_copy(update={"status": status})
        self.board.replace_alert(updated)
        LOGGER.info("Alert %s %s remotely", alert.id, status.value)

        try:
            await self.board.refresh()
        except RemoteSourceError as exc:
            LOGGER.warning("Refresh after %s of %s failed: %s", action.value, alert.id, exc)
        return DispatchOutcome(
            alert_id=alert.id, action=action, applied=True, status=status, alert=updated
        )

    async def _dispatch_local(
        self, alert: LocalBackedAlert, action: AlertAction
    ) -> DispatchOutcome:
        status = next_status(alert.status, action)
        record = ActionRecord(
            type=action,
            actor=self.user.actor if self.user else "local",
            timestamp=self.clock(),
        )
        updated = alert.model_copy(
            update={"status": status, "actions": [*alert.actions, record]}
        )
        self.board.replace_alert(updated)

        persisted = True
        try:
            await asyncio.to_thread(self.overlay.upsert, alert.id, status, record)
        except OverlayError as exc:
            persisted = False
            LOGGER.warning("Overlay write for %s failed; change is not durable: %s", alert.id, exc)
        LOGGER.info("Alert %s %s locally", alert.id, status.value)
        return DispatchOutcome(
            alert_id=alert.id,
            action=action,
            applied=True,
            status=status,
            alert=updated,
            persisted=persisted,
        )
