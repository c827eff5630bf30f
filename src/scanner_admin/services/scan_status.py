"""
Scan status poller.

Asks the backend whether a scan is running on a fixed wall-clock period and
publishes the flag to subscribers. Each tick starts its own request, so a
slow or failing request never holds up the next one. Once the poller is
stopped, responses that are still in flight are dropped instead of published.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..config import settings
from ..gateway import GatewayError, RemoteGateway

logger = logging.getLogger(__name__)

ScanListener = Callable[[bool], None]

POLL_JOB_ID = "scan_status_poll"


class ScanStatusPoller:
    """Publishes ``is_scanning`` for the lifetime of one view."""

    def __init__(self, gateway: RemoteGateway, interval_seconds: Optional[float] = None):
        """Initialize the poller.

        Args:
            gateway: Source of the scan flag
            interval_seconds: Polling period; defaults to settings.scan_poll_interval_seconds
        """
        self._gateway = gateway
        self.interval_seconds = interval_seconds or settings.scan_poll_interval_seconds
        self._is_scanning = False
        self._listeners: List[ScanListener] = []
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._in_flight: Set[asyncio.Task] = set()
        # Bumped on every stop so late responses from an earlier activation are recognisable
        self._generation = 0
        self._next_seq = 0
        self._applied_seq = -1

    @property
    def is_scanning(self) -> bool:
        return self._is_scanning

    @property
    def active(self) -> bool:
        return self._scheduler is not None

    def subscribe(self, listener: ScanListener) -> Callable[[], None]:
        """Register a listener for flag changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        """Request the flag now, then every ``interval_seconds`` until stopped.

        Must be called from a running event loop.
        """
        if self.active:
            return
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self._tick,
            trigger="interval",
            args=[self._generation],
            seconds=self.interval_seconds,
            id=POLL_JOB_ID,
            coalesce=False,
            misfire_grace_time=None,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.debug("Scan status poller started (every %ss)", self.interval_seconds)
        self._spawn_poll(self._generation)

    def stop(self) -> None:
        """Stop the timer. Requests already sent still complete but are not published."""
        if not self.active:
            return
        self._generation += 1
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.debug("Scan status poller stopped (%d request(s) still in flight)", len(self._in_flight))

    async def drain(self) -> None:
        """Wait for outstanding requests to settle."""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def poll_now(self) -> bool:
        """Run one user-initiated poll and return the resulting flag."""
        await self._poll(self._generation, self._take_seq())
        return self._is_scanning

    async def __aenter__(self) -> "ScanStatusPoller":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()

    async def _tick(self, generation: int) -> None:
        # A run dispatched before stop() may still arrive; it belongs to an earlier activation
        if generation != self._generation or self._scheduler is None:
            logger.debug("Dropping scan status tick scheduled before the poller stopped")
            return
        # Fire and forget: the scheduler job returns at once so ticks never queue behind a slow request
        self._spawn_poll(generation)

    def _spawn_poll(self, generation: int) -> None:
        task = asyncio.get_running_loop().create_task(self._poll(generation, self._take_seq()))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    def _take_seq(self) -> int:
        seq = self._next_seq
        self._next_seq += 1
        return seq

    async def _poll(self, generation: int, seq: int) -> None:
        try:
            status = await self._gateway.get_scan_status()
        except GatewayError as e:
            # Keep the last known-good value
            logger.warning("Error checking scanning status: %s", e)
            return

        if generation != self._generation:
            logger.debug("Discarding scan status received after the poller stopped")
            return
        if seq < self._applied_seq:
            logger.debug("Discarding out-of-order scan status (seq %d < %d)", seq, self._applied_seq)
            return
        self._applied_seq = seq
        self._publish(status.is_scanning)

    def _publish(self, is_scanning: bool) -> None:
        if is_scanning == self._is_scanning:
            return
        self._is_scanning = is_scanning
        logger.info("Scan status changed: is_scanning=%s", is_scanning)
        for listener in list(self._listeners):
            try:
                listener(is_scanning)
            except Exception:
                logger.exception("Scan status listener failed")
