"""
Website management view.

Owns a scan status poller (driving the mutation gate), a filter pipeline over
the full website list, and a statistics aggregator. Mutations are never
optimistic: the list changes only after the request succeeded and the full
list was fetched again.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from ..gateway import GatewayError, RemoteGateway
from ..logging_config import log_structured
from ..models import Website
from ..services.filtering import FilterPipeline, WebsiteCriteria
from ..services.mutation_gate import Action, Capabilities, Confirmer, capabilities_for, confirm
from ..services.scan_status import ScanStatusPoller
from ..services.statistics import StatisticsAggregator
from .base import MutationOutcome, View

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch websites"
NO_WEBSITES = "No websites found. Add a new website to get started."
NO_MATCHES = "No websites match your current filters. Try adjusting your search criteria."
INVALID_FORM = "Website name and URL are required"


def _decline(prompt: str) -> bool:
    return False


@dataclass
class WebsiteForm:
    """Editable fields of a website, for both create and edit."""

    name: str = ""
    url: str = ""
    is_active: bool = True
    keywords: List[str] = field(default_factory=list)
    website_id: Optional[str] = None

    @classmethod
    def from_website(cls, website: Website) -> "WebsiteForm":
        return cls(
            name=website.name,
            url=website.url,
            is_active=website.is_active,
            keywords=list(website.keywords),
            website_id=website.id,
        )

    @property
    def is_editing(self) -> bool:
        return self.website_id is not None

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip() and self.url.strip())

    def add_keyword(self, keyword: str) -> bool:
        keyword = keyword.strip()
        if not keyword or keyword in self.keywords:
            return False
        self.keywords.append(keyword)
        return True

    def remove_keyword(self, keyword: str) -> None:
        self.keywords = [k for k in self.keywords if k != keyword]

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "isActive": self.is_active,
            "keywords": list(self.keywords),
        }


class WebsiteManagementView(View):
    """State for the website management page."""

    def __init__(
        self,
        gateway: RemoteGateway,
        *,
        poll_interval: Optional[float] = None,
        confirmer: Optional[Confirmer] = None,
    ):
        super().__init__(gateway)
        self.poller = ScanStatusPoller(gateway, poll_interval)
        self.pipeline: FilterPipeline[Website, WebsiteCriteria] = FilterPipeline.for_websites()
        self.statistics = StatisticsAggregator(gateway)
        self._confirmer = confirmer or _decline
        self.loading = False
        self.error: Optional[str] = None
        self.message: Optional[str] = None
        self._error_banner_dismissed = False

    async def open(self) -> None:
        self.poller.start()
        await asyncio.gather(self.refresh(), self.statistics.refresh())

    def close(self) -> None:
        self.poller.stop()
        self.statistics.close()
        super().close()

    # --- Read side ---

    @property
    def websites(self) -> List[Website]:
        """Websites matching the current criteria."""
        return self.pipeline.filtered

    @property
    def all_websites(self) -> List[Website]:
        return self.pipeline.source

    @property
    def criteria(self) -> WebsiteCriteria:
        return self.pipeline.criteria

    @property
    def active_filter_count(self) -> int:
        return self.pipeline.criteria.active_count

    @property
    def is_scanning(self) -> bool:
        return self.poller.is_scanning

    @property
    def capabilities(self) -> Capabilities:
        return capabilities_for(self.poller.is_scanning)

    @property
    def show_error_banner(self) -> bool:
        if self._error_banner_dismissed:
            return False
        return any(w.has_error for w in self.pipeline.source)

    @property
    def empty_message(self) -> Optional[str]:
        if self.pipeline.filtered:
            return None
        return NO_WEBSITES if not self.pipeline.source else NO_MATCHES

    def dismiss_error_banner(self) -> None:
        self._error_banner_dismissed = True

    # --- Filters ---

    def set_search(self, search: str) -> List[Website]:
        return self.pipeline.update_criteria(search=search)

    def set_active_filter(self, is_active: Optional[bool]) -> List[Website]:
        return self.pipeline.update_criteria(is_active=is_active)

    def clear_filters(self) -> List[Website]:
        return self.pipeline.clear_criteria()

    # --- Fetching ---

    async def refresh(self) -> bool:
        """Fetch the full website list and replace the pipeline source.

        On failure the previously fetched list stays in place.
        """
        if self.closed:
            return False
        token = self._begin("websites")
        self.loading = True
        try:
            websites = await self._gateway.list_websites()
        except GatewayError as e:
            logger.warning("Error fetching websites: %s", e)
            if self._accepts("websites", token):
                self.error = FETCH_ERROR
                self.loading = False
            return False

        if not self._accepts("websites", token):
            return False
        self.pipeline.set_source(websites)
        self.error = None
        self.loading = False
        self._error_banner_dismissed = False
        return True

    # --- Mutations ---

    async def toggle_active(self, website_id: str) -> MutationOutcome:
        return await self._mutate(
            Action.TOGGLE_ACTIVE,
            website_id,
            lambda: self._gateway.toggle_website_active(website_id),
            "Failed to toggle website status",
        )

    async def delete(self, website_id: str, confirmer: Optional[Confirmer] = None) -> MutationOutcome:
        return await self._mutate(
            Action.DELETE,
            website_id,
            lambda: self._gateway.delete_website(website_id),
            "Failed to delete website",
            confirmer,
        )

    async def clear_errors(self, website_id: str, confirmer: Optional[Confirmer] = None) -> MutationOutcome:
        return await self._mutate(
            Action.CLEAR_ERRORS,
            website_id,
            lambda: self._gateway.clear_website_errors(website_id),
            "Failed to clear website errors",
            confirmer,
        )

    async def save(self, form: WebsiteForm) -> MutationOutcome:
        """Create or update a website from ``form``."""
        if not form.is_valid:
            return MutationOutcome.failed(INVALID_FORM)
        if form.is_editing:
            return await self._mutate(
                Action.EDIT,
                form.website_id,
                lambda: self._gateway.update_website(form.website_id, form.to_payload()),
                "Failed to save website",
            )
        return await self._mutate(
            Action.CREATE,
            None,
            lambda: self._gateway.create_website(
                name=form.name,
                url=form.url,
                keywords=form.keywords,
                is_active=form.is_active,
            ),
            "Failed to save website",
        )

    async def _mutate(
        self,
        action: Action,
        website_id: Optional[str],
        request: Callable[[], Awaitable[object]],
        failure_message: str,
        confirmer: Optional[Confirmer] = None,
    ) -> MutationOutcome:
        if self.closed:
            return MutationOutcome.blocked("View is closed")
        capabilities = self.capabilities
        if not capabilities.allows(action):
            return MutationOutcome.blocked(capabilities.blocked_reason(action))
        if not confirm(action, confirmer or self._confirmer):
            return MutationOutcome.cancelled()

        try:
            await request()
        except GatewayError as e:
            log_structured(
                logger,
                "error",
                failure_message,
                {"action": action.value, "website_id": website_id, "error": str(e)},
            )
            if not self.closed:
                self.message = failure_message
            return MutationOutcome.failed(failure_message)

        logger.info("Website %s succeeded (id=%s)", action.value, website_id)
        if not self.closed:
            self.message = None
            await asyncio.gather(self.refresh(), self.statistics.refresh())
        return MutationOutcome.success()
