"""
Client-side synchronization and aggregation services.
"""

from .filtering import (
    FilterPipeline,
    JobCriteria,
    WebsiteCriteria,
    filter_job_batches,
    filter_websites,
)
from .mutation_gate import Action, Capabilities, capabilities_for, confirm
from .scan_status import ScanStatusPoller
from .statistics import StatisticsAggregator, aggregate, summarize

__all__ = [
    "FilterPipeline",
    "JobCriteria",
    "WebsiteCriteria",
    "filter_job_batches",
    "filter_websites",
    "Action",
    "Capabilities",
    "capabilities_for",
    "confirm",
    "ScanStatusPoller",
    "StatisticsAggregator",
    "aggregate",
    "summarize",
]
