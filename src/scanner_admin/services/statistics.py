"""
Statistics aggregation.

Three sources are fetched concurrently: the backend's aggregate statistics,
the full website list and the full job batch list. Each fetch settles into a
``SourceOutcome`` on its own, using an empty fallback when it fails, and the
summary is computed only once all three have settled. A failing source never
fails the aggregation.

Field precedence:
    total_websites / active_websites  server value when present and not null,
                                      otherwise derived from the website list
    total_jobs                        sum of titles over all batches
    websites_with_errors              websites with a non-empty last error
    scanned_websites                  number of batches fetched
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, List, Optional, Sequence, Tuple, TypeVar

from ..gateway import GatewayError, RemoteGateway
from ..models import JobBatch, ServerStatistics, StatisticsSummary, Website

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SourceOutcome(Generic[T]):
    """Result of one independently failable fetch."""

    source: str
    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AggregationResult:
    summary: StatisticsSummary
    statistics: SourceOutcome[Optional[ServerStatistics]]
    websites: SourceOutcome[List[Website]]
    job_batches: SourceOutcome[List[JobBatch]]

    @property
    def failed_sources(self) -> Tuple[str, ...]:
        outcomes = (self.statistics, self.websites, self.job_batches)
        return tuple(o.source for o in outcomes if not o.ok)


async def settle(source: str, fetch: Awaitable[T], fallback: T) -> SourceOutcome[T]:
    """Await ``fetch``; on gateway failure log it and fall back."""
    try:
        return SourceOutcome(source, await fetch)
    except GatewayError as e:
        logger.warning("Error fetching %s for statistics: %s", source, e)
        return SourceOutcome(source, fallback, error=str(e))


def summarize(
    statistics: Optional[ServerStatistics],
    websites: Sequence[Website],
    job_batches: Sequence[JobBatch],
) -> StatisticsSummary:
    """Fold the three sources into one summary."""
    stats = statistics or ServerStatistics()

    total_websites = stats.total_websites
    if total_websites is None:
        total_websites = len(websites)

    active_websites = stats.active_websites
    if active_websites is None:
        active_websites = sum(1 for w in websites if w.is_active)

    return StatisticsSummary(
        total_jobs=sum(b.job_count for b in job_batches),
        total_websites=total_websites,
        active_websites=active_websites,
        websites_with_errors=sum(1 for w in websites if w.has_error),
        scanned_websites=len(job_batches),
        total_job_documents=stats.total_job_documents,
    )


async def aggregate(gateway: RemoteGateway) -> AggregationResult:
    statistics, websites, job_batches = await asyncio.gather(
        settle("statistics", gateway.get_statistics(), None),
        settle("websites", gateway.list_websites(), []),
        settle("job_batches", gateway.list_job_batches(), []),
    )
    summary = summarize(statistics.value, websites.value, job_batches.value)
    return AggregationResult(summary, statistics, websites, job_batches)


class StatisticsAggregator:
    """Holds the latest summary for one view.

    The summary is recomputed from scratch on every ``refresh``. Results
    landing after ``close`` or after a newer refresh started are dropped.
    """

    def __init__(self, gateway: RemoteGateway):
        self._gateway = gateway
        self.summary: Optional[StatisticsSummary] = None
        self.failed_sources: Tuple[str, ...] = ()
        self.loading = False
        self._closed = False
        self._latest_request = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def refresh(self) -> Optional[StatisticsSummary]:
        if self._closed:
            return None
        self._latest_request += 1
        request = self._latest_request
        self.loading = True
        try:
            result = await aggregate(self._gateway)
        finally:
            if request == self._latest_request:
                self.loading = False

        if self._closed or request != self._latest_request:
            logger.debug("Discarding stale statistics aggregation")
            return None
        self.summary = result.summary
        self.failed_sources = result.failed_sources
        return self.summary

    def close(self) -> None:
        self._closed = True
        self.loading = False
