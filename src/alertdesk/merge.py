"""Reconcile freshly fetched alerts with the local overlay."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from .alerts import Alert, OverlayEntry, parse_alert_payload
from .identity import canonical_id

LOGGER = logging.getLogger(__name__)


def reconcile(
    raw_alerts: Iterable[Mapping[str, Any]],
    overlay: Mapping[str, OverlayEntry],
) -> list[Alert]:
    """Apply overlay status and actions to a page of remote alerts.

    Overlay values win for ``status`` and ``actions`` only; every other field
    is taken from the remote payload. No I/O happens here, so the caller must
    pass one snapshot for the whole page.
    """

    merged: list[Alert] = []
    for raw in raw_alerts:
        record = dict(raw)
        entry = overlay.get(canonical_id(record))
        if entry is not None:
            if entry.status is not None:
                record["status"] = entry.status.value
            record["actions"] = [action.model_dump() for action in entry.actions]
        try:
            merged.append(parse_alert_payload(record))
        except (TypeError, ValueError, ValidationError) as exc:
            LOGGER.warning("Skipping malformed alert %s: %s", canonical_id(record), exc)
    return merged
