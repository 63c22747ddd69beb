"""Alert read models and payload normalisation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)

from .identity import IdentityClass, canonical_id, classify
from .lifecycle import AlertAction, AlertStatus


class Priority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class AlertType(str, Enum):
    INACTIVITY = "INACTIVITY"
    SIMULTANEOUS_ACTIVITY = "SIMULTANEOUS_ACTIVITY"
    ADMIN_ACCESS = "ADMIN_ACCESS"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"


class ActionRecord(BaseModel):
    type: AlertAction
    actor: str
    timestamp: datetime


class OverlayEntry(BaseModel):
    status: AlertStatus | None = None
    actions: list[ActionRecord] = Field(default_factory=list)


class _AlertBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    entity_id: str = Field(default="", alias="entityId")
    title: str = ""
    description: str = ""
    priority: Priority
    type: str = "UNKNOWN"
    timestamp: datetime | None = None
    status: AlertStatus = AlertStatus.ACTIVE
    details: dict[str, Any] = Field(default_factory=dict)

    @field_validator("priority", mode="before")
    @classmethod
    def _upper_priority(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("status", mode="before")
    @classmethod
    def _lower_status(cls, value: Any) -> Any:
        if value is None or value == "":
            return AlertStatus.ACTIVE
        return value.lower() if isinstance(value, str) else value


class RemoteBackedAlert(_AlertBase):
    """Alert whose id is owned by the remote source, which also keeps its history."""

    backing: Literal["remote"] = "remote"


class LocalBackedAlert(_AlertBase):
    """Alert regenerated on every query; status and history live in the overlay."""

    backing: Literal["local"] = "local"
    actions: list[ActionRecord] = Field(default_factory=list)


Alert = Annotated[
    Union[RemoteBackedAlert, LocalBackedAlert], Field(discriminator="backing")
]
_ALERT_ADAPTER: TypeAdapter[Alert] = TypeAdapter(Alert)


class PriorityCounts(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low


class StatusCounts(BaseModel):
    active: int = 0
    acknowledged: int = 0
    resolved: int = 0
    dismissed: int = 0


class Summary(BaseModel):
    """Aggregate counts returned next to each page of alerts.

    Status counts arrive either as top-level ``active``/``acknowledged``/
    ``resolved`` fields or nested under ``status``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    by_priority: PriorityCounts = Field(default_factory=PriorityCounts, alias="byPriority")
    by_type: dict[str, int] = Field(default_factory=dict, alias="byType")
    status: StatusCounts | None = None
    active: int | None = None
    acknowledged: int | None = None
    resolved: int | None = None

    def status_counts(self) -> StatusCounts | None:
        if self.status is not None:
            return self.status
        flat = (self.active, self.acknowledged, self.resolved)
        if all(value is None for value in flat):
            return None
        return StatusCounts(
            active=self.active or 0,
            acknowledged=self.acknowledged or 0,
            resolved=self.resolved or 0,
        )


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int = 20
    total: int = 0
    has_more: bool = Field(default=False, alias="hasMore")


class AlertPage(BaseModel):
    """One response from the advanced alerts query, alerts still unmerged."""

    alerts: list[dict[str, Any]] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)
    pagination: Pagination = Field(default_factory=Pagination)

    @field_validator("alerts", "summary", "pagination", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None:
            return value
        return [] if info.field_name == "alerts" else {}


def parse_alert_payload(payload: Mapping[str, Any]) -> Alert:
    """Build the typed alert variant for a raw payload from the remote source."""

    if not isinstance(payload, Mapping):
        raise TypeError("Alert payload must be a mapping")

    alert_id = canonical_id(payload)
    if not alert_id:
        raise ValueError("Alert payload carries no _id or id")

    entity = payload.get("entityId") or payload.get("entity_id") or payload.get("entity")
    record: dict[str, Any] = {
        "id": alert_id,
        "entityId": canonical_id(entity),
        "title": str(payload.get("title") or ""),
        "description": str(payload.get("description") or payload.get("message") or ""),
        "priority": payload.get("priority") or payload.get("severity"),
        "type": str(payload.get("type") or "UNKNOWN"),
        "timestamp": payload.get("timestamp") or payload.get("createdAt"),
        "status": payload.get("status"),
        "details": dict(payload.get("details") or {}),
    }

    if classify(alert_id) is IdentityClass.DURABLE:
        record["backing"] = "remote"
    else:
        record["backing"] = "local"
        record["actions"] = list(payload.get("actions") or [])
    return _ALERT_ADAPTER.validate_python(record)


def alert_payload(alert: Alert) -> dict[str, Any]:
    """Serialise an alert back to the camelCase wire shape."""

    return alert.model_dump(mode="json", by_alias=True, exclude={"backing"})


__all__ = [
    "ActionRecord",
    "Alert",
    "AlertPage",
    "AlertType",
    "LocalBackedAlert",
    "OverlayEntry",
    "Pagination",
    "Priority",
    "PriorityCounts",
    "RemoteBackedAlert",
    "StatusCounts",
    "Summary",
    "alert_payload",
    "parse_alert_payload",
]
