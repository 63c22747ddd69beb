"""Persistent status overlay for alerts without a durable remote identity."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any

from pydantic import TypeAdapter

from .alerts import ActionRecord, OverlayEntry
from .errors import OverlayError
from .identity import canonical_id
from .lifecycle import AlertStatus

LOGGER = logging.getLogger(__name__)

_SNAPSHOT = TypeAdapter(dict[str, OverlayEntry])


class OverlayStore:
    """JSON-backed mapping of canonical alert id to ``{status, actions}``.

    The whole mapping is one record on disk: read in full, written in full.
    Entries are never evicted; only :meth:`reset` removes them.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = Lock()

    def load_all(self) -> dict[str, OverlayEntry]:
        with self._lock:
            return self._read()

    def get(self, alert_id: Any) -> OverlayEntry | None:
        return self.load_all().get(canonical_id(alert_id))

    def upsert(
        self, alert_id: Any, status: AlertStatus, action: ActionRecord
    ) -> OverlayEntry:
        key = canonical_id(alert_id)
        if not key:
            raise OverlayError("Cannot store an overlay entry without an alert id")
        with self._lock:
            entries = self._read(strict=True)
            current = entries.get(key) or OverlayEntry()
            updated = OverlayEntry(status=status, actions=[*current.actions, action])
            entries[key] = updated
            self._write(entries)
        LOGGER.debug("Overlay entry %s now %s", key, status.value)
        return updated

    def reset(self) -> None:
        with self._lock:
            self._write({})
        LOGGER.info("Cleared overlay store at %s", self.path)

    def _read(self, *, strict: bool = False) -> dict[str, OverlayEntry]:
        """Load the mapping; an unreadable record is empty unless ``strict``.

        Writers read strictly so a damaged record is never overwritten.
        """

        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("overlay record is not a mapping")
            return _SNAPSHOT.validate_python(data)
        except (OSError, ValueError) as exc:
            if strict:
                raise OverlayError(
                    f"Refusing to overwrite unreadable overlay store {self.path}: {exc}"
                ) from exc
            LOGGER.warning("Ignoring unreadable overlay store %s: %s", self.path, exc)
            return {}

    def _write(self, entries: dict[str, OverlayEntry]) -> None:
        payload = {
            key: entry.model_dump(mode="json") for key, entry in sorted(entries.items())
        }
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise OverlayError(f"Unable to write overlay store {self.path}: {exc}") from exc
