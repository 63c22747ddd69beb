"""Canonical alert identity and durable/ephemeral classification."""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

_DURABLE_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


class IdentityClass(str, Enum):
    DURABLE = "durable"
    EPHEMERAL = "ephemeral"


def canonical_id(value: Any) -> str:
    """Return the overlay key for an id string or an alert-like value.

    Strings and numbers are used verbatim, mappings and objects contribute
    their ``_id`` (falling back to ``id``). Anything else resolves to ``""``.
    """

    if value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, Mapping):
        candidate = value.get("_id") or value.get("id")
    else:
        candidate = getattr(value, "_id", None) or getattr(value, "id", None)
    if candidate is None or candidate == "":
        return ""
    return str(candidate)


def classify(alert_id: str) -> IdentityClass:
    if _DURABLE_PATTERN.match(alert_id or ""):
        return IdentityClass.DURABLE
    return IdentityClass.EPHEMERAL


def is_durable(alert_id: str) -> bool:
    return classify(alert_id) is IdentityClass.DURABLE


__all__ = ["IdentityClass", "canonical_id", "classify", "is_durable"]
