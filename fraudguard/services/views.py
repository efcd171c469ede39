"""View models holding the latest fetched snapshot per dashboard panel"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from fraudguard.config import settings
from fraudguard.domain.exceptions import DataAccessError
from fraudguard.domain.rankings import DATE_WINDOWS
from fraudguard.infrastructure.observability.metrics import stale_response_counter
from fraudguard.infrastructure.thresholds import ThresholdStore
from fraudguard.services.analytics import AnalyticsService
from fraudguard.services.recommendations import RecommendationService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Snapshot(Generic[T]):
    rows: List[T] = field(default_factory=list)
    error: Optional[str] = None
    sequence: int = 0


class SnapshotView(Generic[T]):
    """
    Single current snapshot refreshed by awaited fetches.

    Every refresh takes a ticket from a monotonic counter before awaiting.
    A result is applied only if its ticket is still the newest issued, so a
    slow superseded response can never overwrite a newer one.
    """

    name = "view"

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or settings.view_refresh_timeout_seconds
        self.snapshot: Snapshot[T] = Snapshot()
        self._issued = 0
        self.loading = False

    async def fetch(self) -> List[T]:
        raise NotImplementedError

    async def refresh(self) -> bool:
        """Fetch and apply; returns False when the result was superseded"""
        self._issued += 1
        ticket = self._issued
        self.loading = True

        try:
            rows = await asyncio.wait_for(self.fetch(), timeout=self.timeout)
            result = Snapshot(rows=list(rows), sequence=ticket)
        except asyncio.TimeoutError:
            logger.warning("View refresh timed out", extra={"view": self.name, "timeout": self.timeout})
            result = Snapshot(error=f"Timed out after {self.timeout}s", sequence=ticket)
        except DataAccessError as e:
            logger.warning("View refresh failed", extra={"view": self.name, "kind": e.kind, "error": str(e)})
            result = Snapshot(error=str(e), sequence=ticket)

        if ticket != self._issued:
            stale_response_counter.labels(view=self.name).inc()
            logger.info("Discarding stale view result", extra={"view": self.name, "ticket": ticket, "latest": self._issued})
            return False

        self.snapshot = result
        self.loading = False
        return True


class RecommendationsView(SnapshotView):
    name = "recommendations"

    def __init__(self, service: RecommendationService, store: ThresholdStore, timeout: float | None = None):
        super().__init__(timeout)
        self.service = service
        self.store = store

    async def fetch(self):
        # Thresholds are re-read each time so changes apply to the next refresh only
        return await self.service.evaluate_all(self.store.get())


class ChannelRankingView(SnapshotView):
    name = "channel_ranking"

    def __init__(
        self,
        service: AnalyticsService,
        window: str = "all",
        by_severity: bool = False,
        timeout: float | None = None,
    ):
        if window not in DATE_WINDOWS:
            raise ValueError(f"Unknown date window: {window}")
        super().__init__(timeout)
        self.service = service
        self.window = window
        self.by_severity = by_severity
        if by_severity:
            self.name = "channel_severity_ranking"

    async def set_filter(self, window: str) -> bool:
        """Switch the date window and re-fetch; an unknown window leaves the view untouched"""
        if window not in DATE_WINDOWS:
            raise ValueError(f"Unknown date window: {window}")
        self.window = window
        return await self.refresh()

    async def fetch(self):
        if self.by_severity:
            return await self.service.channel_severity_ranking(self.window)
        return await self.service.channel_ranking(self.window)


class Dashboard:
    """Blacklist recommendations plus channel rankings, refreshed together"""

    def __init__(self, recommendations: RecommendationsView, channels: ChannelRankingView, severity: ChannelRankingView):
        self.recommendations = recommendations
        self.channels = channels
        self.severity = severity

    @classmethod
    def build(cls, data, store: ThresholdStore, timeout: float | None = None) -> "Dashboard":
        analytics = AnalyticsService(data)
        return cls(
            recommendations=RecommendationsView(RecommendationService(data), store, timeout=timeout),
            channels=ChannelRankingView(analytics, timeout=timeout),
            severity=ChannelRankingView(analytics, by_severity=True, timeout=timeout),
        )

    @property
    def views(self) -> List[SnapshotView]:
        return [self.recommendations, self.channels, self.severity]

    async def refresh(self) -> List[Any]:
        # Failures are captured per snapshot, so gather never raises here
        return await asyncio.gather(*(view.refresh() for view in self.views))
