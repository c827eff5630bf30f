from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the absolute path to the project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_LOG_DIR = str(PROJECT_ROOT / "logs")


class Settings(BaseSettings):
    """
    Centralized runtime configuration for the scanner admin front end.
    All defaults are sensible for dev-mode; ops override via ENV
    (prefixed with SCANNER_ADMIN_).
    """

    model_config = SettingsConfigDict(
        env_prefix="SCANNER_ADMIN_",
        env_file=".env",
        extra="ignore",
    )

    # --- Remote service ---
    api_base_url: str = Field(default="http://localhost:3001/api")
    request_timeout: Optional[float] = Field(default=None)  # None = transport default
    gateway_max_workers: int = Field(default=4)

    # --- Polling ---
    scan_poll_interval_seconds: float = Field(default=2.0)

    # --- UI timers ---
    message_dismiss_seconds: float = Field(default=3.0)


# Create a singleton instance
settings = Settings()
