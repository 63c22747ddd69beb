"""Labels, colours and time formatting for rendering alerts."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from .alerts import AlertType, Priority
from .lifecycle import AlertAction, AlertStatus

TYPE_LABELS: dict[AlertType, str] = {
    AlertType.INACTIVITY: "Inactivity Alert",
    AlertType.SIMULTANEOUS_ACTIVITY: "Simultaneous Activity",
    AlertType.ADMIN_ACCESS: "Students Not in College",
    AlertType.SUSPICIOUS_ACTIVITY: "Suspicious Activity",
}

PRIORITY_STYLES: dict[Priority, str] = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "blue",
}

STATUS_STYLES: dict[AlertStatus, str] = {
    AlertStatus.ACTIVE: "bold",
    AlertStatus.ACKNOWLEDGED: "cyan",
    AlertStatus.RESOLVED: "green",
    AlertStatus.DISMISSED: "dim",
}

ACTION_LABELS: dict[AlertAction, str] = {
    AlertAction.ACKNOWLEDGE: "Acknowledge",
    AlertAction.RESOLVE: "Resolve",
    AlertAction.DISMISS: "Dismiss",
}


def type_label(alert_type: str) -> str:
    try:
        return TYPE_LABELS[AlertType(alert_type)]
    except ValueError:
        return alert_type


def priority_style(priority: Priority) -> str:
    return PRIORITY_STYLES[priority]


def status_style(status: AlertStatus) -> str:
    return STATUS_STYLES[status]


def status_label(status: AlertStatus) -> str:
    return status.value.capitalize()


def format_timestamp(value: datetime | None, now: datetime | None = None) -> str:
    """Render ``value`` relative to ``now`` for the last week, absolute before that."""

    if value is None:
        return "unknown"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    elapsed = (now - value).total_seconds()
    minutes = int(elapsed // 60)
    hours = int(elapsed // 3600)
    days = int(elapsed // 86400)
    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours < 24:
        return f"{hours} hours ago"
    if days < 7:
        return f"{days} days ago"
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"


def profile_path(entity_id: str) -> str | None:
    if not entity_id:
        return None
    return f"/entities/{entity_id}"


TYPE_COUNT_LABELS: dict[str, str] = {
    "inactivity": "Inactivity",
    "simultaneous": "Simultaneous",
    "suspicious": "Suspicious",
    "adminAccess": "Students Not in College",
}

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def humanize_key(key: str) -> str:
    """``lastSeenLocation`` -> ``last Seen Location``; separators become spaces."""
    spaced = _CAMEL_BOUNDARY.sub(r" \1", key).replace("_", " ")
    return " ".join(spaced.split())


def type_count_rows(by_type: dict[str, int]) -> list[tuple[str, int]]:
    """Known alert types first, always present, then any extra keys as sent."""
    rows = [(label, by_type.get(key, 0)) for key, label in TYPE_COUNT_LABELS.items()]
    rows.extend(
        (humanize_key(key), count)
        for key, count in by_type.items()
        if key not in TYPE_COUNT_LABELS
    )
    return rows
