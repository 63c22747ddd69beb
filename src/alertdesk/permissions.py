"""Role based permission checks for alert actions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .alerts import Alert
from .lifecycle import AlertAction, can_transition


class Role(str, Enum):
    ADMIN = "ADMIN"
    SECURITY_OFFICER = "SECURITY_OFFICER"
    OPERATOR = "OPERATOR"
    VIEWER = "VIEWER"


ROLE_PERMISSIONS: dict[Role, frozenset[AlertAction]] = {
    Role.ADMIN: frozenset(AlertAction),
    Role.SECURITY_OFFICER: frozenset(AlertAction),
    Role.OPERATOR: frozenset({AlertAction.ACKNOWLEDGE}),
    Role.VIEWER: frozenset(),
}


class User(BaseModel):
    """Authenticated session user; the role string comes from the session."""

    id: str
    role: str
    username: str | None = None

    @property
    def actor(self) -> str:
        return self.id or "local"


def permissions_for(role: str | Role | None) -> frozenset[AlertAction]:
    if isinstance(role, Role):
        return ROLE_PERMISSIONS[role]
    try:
        resolved = Role(str(role).upper())
    except ValueError:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


def can_perform(user: User | None, alert: Alert, action: AlertAction) -> bool:
    if user is None:
        return False
    if action not in permissions_for(user.role):
        return False
    return can_transition(alert.status, action)


def allowed_actions(user: User | None, alert: Alert) -> list[AlertAction]:
    return [action for action in AlertAction if can_perform(user, alert, action)]


__all__ = [
    "ROLE_PERMISSIONS",
    "Role",
    "User",
    "allowed_actions",
    "can_perform",
    "permissions_for",
]
