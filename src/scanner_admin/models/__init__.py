"""
Data models exchanged with the job scanner backend.
"""

from .job import JobBatch, WebsiteRef
from .settings import (
    DEFAULT_INTERVAL_MINUTES,
    DEFAULT_KEYWORDS,
    MAX_INTERVAL_MINUTES,
    MIN_INTERVAL_MINUTES,
    GeneralSettings,
    normalize_keyword,
)
from .statistics import ScanStatus, ServerStatistics, StatisticsSummary
from .website import Website, dedupe_keywords

__all__ = [
    "JobBatch",
    "WebsiteRef",
    "Website",
    "dedupe_keywords",
    "GeneralSettings",
    "normalize_keyword",
    "DEFAULT_KEYWORDS",
    "DEFAULT_INTERVAL_MINUTES",
    "MIN_INTERVAL_MINUTES",
    "MAX_INTERVAL_MINUTES",
    "ScanStatus",
    "ServerStatistics",
    "StatisticsSummary",
]
