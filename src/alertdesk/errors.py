"""Exception types raised by the alert engine."""

from __future__ import annotations


class AlertDeskError(Exception):
    """Base class for every error surfaced to the operator."""


class ActionRejected(AlertDeskError):
    """An action failed validation before any I/O was attempted."""

    def __init__(self, message: str, *, alert_id: str = "", action: str = "") -> None:
        super().__init__(message)
        self.alert_id = alert_id
        self.action = action


class TransitionError(ActionRejected):
    """The lifecycle has no transition for the requested action."""


class RemoteSourceError(AlertDeskError):
    """The remote alert source failed or answered with ``success: false``."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OverlayError(AlertDeskError):
    """The local overlay record could not be read or written."""
