"""Alert lifecycle states and the transitions between them."""

from __future__ import annotations

from enum import Enum

from .errors import TransitionError


class AlertStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class AlertAction(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    RESOLVE = "resolve"
    DISMISS = "dismiss"


TRANSITIONS: dict[AlertAction, dict[AlertStatus, AlertStatus]] = {
    AlertAction.ACKNOWLEDGE: {
        AlertStatus.ACTIVE: AlertStatus.ACKNOWLEDGED,
    },
    AlertAction.RESOLVE: {
        AlertStatus.ACTIVE: AlertStatus.RESOLVED,
        AlertStatus.ACKNOWLEDGED: AlertStatus.RESOLVED,
    },
    AlertAction.DISMISS: {
        AlertStatus.ACTIVE: AlertStatus.DISMISSED,
        AlertStatus.ACKNOWLEDGED: AlertStatus.DISMISSED,
    },
}

TERMINAL_STATES = frozenset({AlertStatus.RESOLVED, AlertStatus.DISMISSED})


def is_terminal(status: AlertStatus) -> bool:
    return status in TERMINAL_STATES


def can_transition(status: AlertStatus, action: AlertAction) -> bool:
    return status in TRANSITIONS[action]


def next_status(status: AlertStatus, action: AlertAction) -> AlertStatus:
    """Return the state reached by applying ``action`` to ``status``."""

    try:
        return TRANSITIONS[action][status]
    except KeyError:
        if is_terminal(status):
            message = f"Alert is already {status.value}; no further actions apply"
        else:
            message = f"Cannot {action.value} an alert that is {status.value}"
        raise TransitionError(message, action=action.value) from None


__all__ = [
    "AlertAction",
    "AlertStatus",
    "TERMINAL_STATES",
    "TRANSITIONS",
    "can_transition",
    "is_terminal",
    "next_status",
]
