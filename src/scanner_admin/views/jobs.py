"""
Job scan view: scraped job batches, job filters and the scan trigger.
"""

import asyncio
import logging
from typing import List, Optional

from ..gateway import GatewayError, RemoteGateway
from ..models import JobBatch, Website
from ..services.filtering import FilterPipeline, JobCriteria
from ..services.scan_status import ScanStatusPoller
from ..services.statistics import StatisticsAggregator
from .base import MutationOutcome, View

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch jobs"
SCAN_ERROR = "Failed to scan jobs"
SCAN_OK = "Jobs scanned successfully!"
SCAN_BUSY = "A scan is already running"
NO_JOBS = "No jobs found. Try adjusting your filters or scan for new jobs."


class JobScanView(View):
    """State for the job management page.

    Polls the scan flag on its own, independently of any website view.
    """

    def __init__(self, gateway: RemoteGateway, *, poll_interval: Optional[float] = None):
        super().__init__(gateway)
        self.poller = ScanStatusPoller(gateway, poll_interval)
        self.pipeline: FilterPipeline[JobBatch, JobCriteria] = FilterPipeline.for_job_batches()
        self.statistics = StatisticsAggregator(gateway)
        self.website_options: List[Website] = []
        self.loading = False
        self.error: Optional[str] = None
        self.scan_in_flight = False
        self.scan_message: Optional[str] = None
        self.scan_error: Optional[str] = None

    async def open(self) -> None:
        self.poller.start()
        await asyncio.gather(self.refresh(), self.load_website_options(), self.statistics.refresh())

    def close(self) -> None:
        self.poller.stop()
        self.statistics.close()
        super().close()

    @property
    def job_batches(self) -> List[JobBatch]:
        return self.pipeline.filtered

    @property
    def all_job_batches(self) -> List[JobBatch]:
        return self.pipeline.source

    @property
    def criteria(self) -> JobCriteria:
        return self.pipeline.criteria

    @property
    def active_filter_count(self) -> int:
        return self.pipeline.criteria.active_count

    @property
    def empty_message(self) -> Optional[str]:
        return None if self.pipeline.filtered else NO_JOBS

    @property
    def can_scan(self) -> bool:
        return not (self.closed or self.scan_in_flight or self.poller.is_scanning)

    def set_search(self, search: str) -> List[JobBatch]:
        return self.pipeline.update_criteria(search=search)

    def set_website_filter(self, website_id: Optional[str]) -> List[JobBatch]:
        return self.pipeline.update_criteria(website_id=website_id or None)

    def set_active_filter(self, is_active: Optional[bool]) -> List[JobBatch]:
        return self.pipeline.update_criteria(is_active=is_active)

    def clear_filters(self) -> List[JobBatch]:
        return self.pipeline.clear_criteria()

    async def refresh(self) -> bool:
        """Fetch every job batch and replace the pipeline source."""
        if self.closed:
            return False
        token = self._begin("jobs")
        self.loading = True
        try:
            batches = await self._gateway.list_job_batches()
        except GatewayError as e:
            logger.warning("Error fetching jobs: %s", e)
            if self._accepts("jobs", token):
                self.error = FETCH_ERROR
                self.loading = False
            return False

        if not self._accepts("jobs", token):
            return False
        self.pipeline.set_source(batches)
        self.error = None
        self.loading = False
        return True

    async def load_website_options(self) -> List[Website]:
        """Websites offered in the website filter. Failure leaves the options empty."""
        if self.closed:
            return []
        token = self._begin("website_options")
        try:
            websites = await self._gateway.list_websites()
        except GatewayError as e:
            logger.warning("Error fetching websites for job filters: %s", e)
            websites = []
        if self._accepts("website_options", token):
            self.website_options = websites
        return self.website_options

    async def scan_jobs(self) -> MutationOutcome:
        """Trigger a backend scan, then re-fetch the batch list and statistics."""
        if not self.can_scan:
            return MutationOutcome.blocked(SCAN_BUSY)
        self.scan_in_flight = True
        self.scan_message = None
        self.scan_error = None
        try:
            result = await self._gateway.trigger_scan()
        except GatewayError as e:
            logger.error("Error scanning jobs: %s", e)
            if not self.closed:
                self.scan_error = SCAN_ERROR
            return MutationOutcome.failed(SCAN_ERROR)
        finally:
            self.scan_in_flight = False

        message = result.get("message") or SCAN_OK
        if not self.closed:
            self.scan_message = message
            await asyncio.gather(self.refresh(), self.statistics.refresh())
        return MutationOutcome.success(message)
