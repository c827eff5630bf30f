"""
General settings view: keyword vocabulary and scan interval.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import settings as app_settings
from ..gateway import GatewayError, RemoteGateway
from ..models import (
    MAX_INTERVAL_MINUTES,
    MIN_INTERVAL_MINUTES,
    GeneralSettings,
    normalize_keyword,
)
from .base import MutationOutcome, View

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load settings from server"
SAVE_OK = "Settings saved successfully!"
SAVE_ERROR = "Failed to save settings to server"
RESET_OK = "Settings reset to defaults"


@dataclass(frozen=True)
class StatusMessage:
    kind: str  # "success" or "error"
    text: str


def interval_options() -> List[int]:
    return list(range(MIN_INTERVAL_MINUTES, MAX_INTERVAL_MINUTES + 1))


def interval_choices(current: int) -> List[int]:
    """Selectable intervals, including a stored value outside the editable range."""
    options = interval_options()
    if current not in options:
        options = sorted(options + [current])
    return options


def interval_label(minutes: int) -> str:
    return f"{minutes} minute{'' if minutes == 1 else 's'}"


class SettingsView(View):
    """State for the settings page.

    Status messages disappear on their own after ``dismiss_after`` seconds.
    """

    def __init__(self, gateway: RemoteGateway, *, dismiss_after: Optional[float] = None):
        super().__init__(gateway)
        self.dismiss_after = dismiss_after if dismiss_after is not None else app_settings.message_dismiss_seconds
        self.settings = GeneralSettings.defaults()
        self.loading = False
        self.saving = False
        self.message: Optional[StatusMessage] = None
        self._dismiss_handle: Optional[asyncio.TimerHandle] = None

    async def open(self) -> None:
        await self.load()

    def close(self) -> None:
        self._cancel_dismiss()
        super().close()

    @property
    def keywords(self) -> List[str]:
        return list(self.settings.keywords)

    @property
    def interval(self) -> int:
        return self.settings.interval

    async def load(self) -> GeneralSettings:
        """Load settings from the backend, falling back to the defaults."""
        if self.closed:
            return self.settings
        token = self._begin("settings")
        self.loading = True
        failed = False
        try:
            loaded = await self._gateway.get_general_settings()
        except GatewayError as e:
            logger.warning("Error loading settings: %s", e)
            loaded, failed = None, True

        if not self._accepts("settings", token):
            return self.settings
        self.settings = loaded or GeneralSettings.defaults()
        self.loading = False
        if failed:
            self._show_message("error", LOAD_ERROR)
        return self.settings

    def add_keyword(self, keyword: str) -> bool:
        keyword = normalize_keyword(keyword)
        if not keyword or keyword in self.settings.keywords:
            return False
        self.settings = self.settings.model_copy(update={"keywords": self.settings.keywords + [keyword]})
        return True

    def remove_keyword(self, keyword: str) -> None:
        remaining = [k for k in self.settings.keywords if k != keyword]
        self.settings = self.settings.model_copy(update={"keywords": remaining})

    def set_interval(self, minutes: int) -> None:
        """Set the scan interval.

        Raises:
            ValueError: If minutes is not an integer between 1 and 59
        """
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise ValueError(f"Interval must be a whole number of minutes, got {minutes!r}")
        if not MIN_INTERVAL_MINUTES <= minutes <= MAX_INTERVAL_MINUTES:
            raise ValueError(
                f"Interval must be between {MIN_INTERVAL_MINUTES} and {MAX_INTERVAL_MINUTES} minutes, got {minutes}"
            )
        self.settings = self.settings.model_copy(update={"interval": minutes})

    def select_interval(self, minutes: int) -> bool:
        """Apply a picked interval. Re-picking the current value changes nothing, even when out of range."""
        if minutes == self.settings.interval:
            return False
        self.set_interval(minutes)
        return True

    async def save(self) -> MutationOutcome:
        if self.closed:
            return MutationOutcome.blocked("View is closed")
        self.saving = True
        try:
            saved = await self._gateway.update_general_settings(self.settings.keywords, self.settings.interval)
        except GatewayError as e:
            logger.error("Error updating general settings: %s", e)
            if not self.closed:
                self._show_message("error", SAVE_ERROR)
            return MutationOutcome.failed(SAVE_ERROR)
        finally:
            self.saving = False

        if not self.closed:
            self.settings = saved
            self._show_message("success", SAVE_OK)
        return MutationOutcome.success(SAVE_OK)

    def reset(self) -> None:
        """Restore the default vocabulary and interval locally; nothing is sent."""
        self.settings = self.settings.model_copy(
            update={"keywords": GeneralSettings.defaults().keywords, "interval": GeneralSettings.defaults().interval}
        )
        self._show_message("success", RESET_OK)

    def dismiss_message(self) -> None:
        self._cancel_dismiss()
        self.message = None

    def _show_message(self, kind: str, text: str) -> None:
        self._cancel_dismiss()
        self.message = StatusMessage(kind, text)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Called outside an event loop; the message stays until replaced or dismissed
            return
        self._dismiss_handle = loop.call_later(self.dismiss_after, self._expire_message)

    def _expire_message(self) -> None:
        self._dismiss_handle = None
        self.message = None

    def _cancel_dismiss(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None
