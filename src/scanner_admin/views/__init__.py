"""
View state containers. Each instance owns its pollers, pipelines and timers
and releases them when closed.
"""

from .base import MutationOutcome, View
from .jobs import JobScanView
from .settings import SettingsView, StatusMessage, interval_choices, interval_label, interval_options
from .websites import WebsiteForm, WebsiteManagementView

__all__ = [
    "MutationOutcome",
    "View",
    "JobScanView",
    "SettingsView",
    "StatusMessage",
    "interval_choices",
    "interval_label",
    "interval_options",
    "WebsiteForm",
    "WebsiteManagementView",
]
