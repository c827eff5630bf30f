"""
Client-side filtering over a fully fetched entity list.

The pipeline holds the unfiltered source and the current criteria and keeps
the filtered view in step with both. It never fetches; the owning view
replaces the source after its own re-fetch.
"""

from dataclasses import dataclass, replace
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from ..models import JobBatch, Website

EntityT = TypeVar("EntityT")
CriteriaT = TypeVar("CriteriaT")


@dataclass(frozen=True)
class WebsiteCriteria:
    """Search text plus tri-state active flag (None means any)."""

    search: str = ""
    is_active: Optional[bool] = None

    @property
    def active_count(self) -> int:
        """Number of criteria differing from the defaults."""
        return sum([bool(self.search), self.is_active is not None])


@dataclass(frozen=True)
class JobCriteria:
    """Search text, owning website and tri-state active flag (None means any)."""

    search: str = ""
    website_id: Optional[str] = None
    is_active: Optional[bool] = None

    @property
    def active_count(self) -> int:
        return sum([bool(self.search), bool(self.website_id), self.is_active is not None])


def _matches_active(flag: Optional[bool], wanted: Optional[bool]) -> bool:
    if wanted is None:
        return True
    return flag == wanted


def website_matches(website: Website, criteria: WebsiteCriteria) -> bool:
    if criteria.search:
        term = criteria.search.lower()
        if term not in website.name.lower() and term not in website.url.lower():
            return False
    return _matches_active(website.is_active, criteria.is_active)


def job_batch_matches(batch: JobBatch, criteria: JobCriteria) -> bool:
    if criteria.search:
        term = criteria.search.lower()
        if not any(term in title.lower() for title in batch.data):
            return False
    if criteria.website_id and batch.website.id != criteria.website_id:
        return False
    # Unknown owner state only matches "any"
    return _matches_active(batch.website.is_active, criteria.is_active)


def filter_websites(websites: Optional[Sequence[Website]], criteria: WebsiteCriteria) -> List[Website]:
    return [w for w in (websites or []) if website_matches(w, criteria)]


def filter_job_batches(batches: Optional[Sequence[JobBatch]], criteria: JobCriteria) -> List[JobBatch]:
    return [b for b in (batches or []) if job_batch_matches(b, criteria)]


class FilterPipeline(Generic[EntityT, CriteriaT]):
    """Keeps ``filtered`` consistent with the latest source list and criteria."""

    def __init__(self, matcher: Callable[[EntityT, CriteriaT], bool], default_criteria: CriteriaT):
        self._matcher = matcher
        self._default_criteria = default_criteria
        self._source: List[EntityT] = []
        self._criteria = default_criteria
        self._filtered: List[EntityT] = []

    @classmethod
    def for_websites(cls) -> "FilterPipeline[Website, WebsiteCriteria]":
        return cls(website_matches, WebsiteCriteria())

    @classmethod
    def for_job_batches(cls) -> "FilterPipeline[JobBatch, JobCriteria]":
        return cls(job_batch_matches, JobCriteria())

    @property
    def source(self) -> List[EntityT]:
        return list(self._source)

    @property
    def criteria(self) -> CriteriaT:
        return self._criteria

    @property
    def filtered(self) -> List[EntityT]:
        return list(self._filtered)

    def set_source(self, entities: Optional[Sequence[EntityT]]) -> List[EntityT]:
        """Replace the unfiltered list. A missing list counts as empty."""
        self._source = list(entities or [])
        return self._recompute()

    def set_criteria(self, criteria: CriteriaT) -> List[EntityT]:
        self._criteria = criteria
        return self._recompute()

    def update_criteria(self, **changes) -> List[EntityT]:
        """Change individual criteria fields, e.g. ``update_criteria(search="eng")``."""
        return self.set_criteria(replace(self._criteria, **changes))

    def clear_criteria(self) -> List[EntityT]:
        """Reset to empty search and active flag "any"."""
        return self.set_criteria(self._default_criteria)

    def _recompute(self) -> List[EntityT]:
        self._filtered = [e for e in self._source if self._matcher(e, self._criteria)]
        return self.filtered
