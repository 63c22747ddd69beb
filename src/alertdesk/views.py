"""Aggregate alert view: displayed page plus filtered and overall summaries."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter

from .alerts import Alert, AlertPage, Pagination, Priority, StatusCounts, Summary
from .client import AlertSourceClient
from .errors import RemoteSourceError
from .merge import reconcile
from .overlay import OverlayStore
from .settings import LoadMoreMode

LOGGER = logging.getLogger(__name__)


class AlertBoard:
    """State behind the alert dashboard.

    ``overall_summary`` is always unscoped; ``filtered_summary`` follows the
    active priority filter and equals the overall one when no filter is set.
    Each load is tagged with a generation number and a response that arrives
    after a newer load has started is dropped.
    """

    def __init__(
        self,
        source: AlertSourceClient,
        overlay: OverlayStore,
        *,
        page_limit: int = 20,
        load_more_mode: LoadMoreMode = LoadMoreMode.REPLACE,
    ) -> None:
        self.source = source
        self.overlay = overlay
        self.load_more_mode = LoadMoreMode(load_more_mode)
        self.alerts: list[Alert] = []
        self.filtered_summary: Summary | None = None
        self.overall_summary: Summary | None = None
        self.pagination = Pagination(page=1, limit=page_limit)
        self.priority_filter: Priority | None = None
        self.loading = False
        self._generation = 0

    @property
    def total_count(self) -> int:
        if self.overall_summary is None:
            return 0
        return self.overall_summary.by_priority.total

    async def load(self, page: int | None = None) -> bool:
        """Fetch ``page`` for the current filter and commit it.

        Returns ``False`` when the response was superseded by a newer load.
        """

        page = page or self.pagination.page
        limit = self.pagination.limit
        priority = self.priority_filter
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            filtered, overall = await self._fetch(page, limit, priority)
            snapshot = await asyncio.to_thread(self.overlay.load_all)
        except RemoteSourceError as exc:
            if generation == self._generation:
                LOGGER.error("Loading alerts failed: %s", exc)
                self.alerts = []
            raise
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            LOGGER.info(
                "Discarding stale alert page %s (filter=%s)",
                page,
                priority.value if priority else None,
            )
            return False

        merged = reconcile(filtered.alerts, snapshot)
        if self.load_more_mode is LoadMoreMode.APPEND and page > 1:
            seen = {alert.id for alert in self.alerts}
            self.alerts = [*self.alerts, *(a for a in merged if a.id not in seen)]
        else:
            self.alerts = merged
        self.filtered_summary = filtered.summary
        self.overall_summary = overall.summary
        self.pagination = filtered.pagination.model_copy(update={"page": page})
        LOGGER.debug(
            "Loaded %s alerts (page=%s, filter=%s)",
            len(merged),
            page,
            priority.value if priority else None,
        )
        return True

    async def _fetch(
        self, page: int, limit: int, priority: Priority | None
    ) -> tuple[AlertPage, AlertPage]:
        if priority is None:
            result = await self.source.fetch_alerts(page=page, limit=limit)
            return result, result
        overall, filtered = await asyncio.gather(
            self.source.fetch_alerts(page=1, limit=1),
            self.source.fetch_alerts(page=page, limit=limit, priority=priority),
        )
        return filtered, overall

    async def refresh(self) -> bool:
        return await self.load(page=1)

    async def toggle_priority(self, priority: Priority | str | None) -> bool:
        if isinstance(priority, str) and not isinstance(priority, Priority):
            priority = priority.upper()
        selected = Priority(priority) if priority else None
        if selected is not None and selected == self.priority_filter:
            selected = None
        self.priority_filter = selected
        return await self.load(page=1)

    async def clear_filter(self) -> bool:
        self.priority_filter = None
        return await self.load(page=1)

    async def load_more(self) -> bool:
        if not self.pagination.has_more or self.loading:
            return False
        return await self.load(page=self.pagination.page + 1)

    def find(self, alert_id: str) -> Alert | None:
        for alert in self.alerts:
            if alert.id == alert_id:
                return alert
        return None

    def replace_alert(self, updated: Alert) -> bool:
        for index, alert in enumerate(self.alerts):
            if alert.id == updated.id:
                self.alerts[index] = updated
                return True
        return False

    def status_counts(self) -> StatusCounts:
        """Status distribution for the current view.

        Uses the filtered summary when it carries status counts in either
        shape, otherwise counts the alerts currently loaded.
        """

        if self.filtered_summary is not None:
            counts = self.filtered_summary.status_counts()
            if counts is not None:
                return counts
        tally = Counter(alert.status.value for alert in self.alerts)
        return StatusCounts(**tally)

    def type_counts(self) -> dict[str, int]:
        summary = self.overall_summary or self.filtered_summary
        return dict(summary.by_type) if summary is not None else {}
