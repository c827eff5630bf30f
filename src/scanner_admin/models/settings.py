from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .website import dedupe_keywords

DEFAULT_KEYWORDS: List[str] = [
    "student",
    "intern",
    "internship",
    "entry level",
    "junior",
    "graduate",
    "trainee",
    "part time",
    "remote",
    "work from home",
]
DEFAULT_INTERVAL_MINUTES = 30
MIN_INTERVAL_MINUTES = 1
MAX_INTERVAL_MINUTES = 59


def normalize_keyword(keyword: str) -> str:
    return keyword.strip().lower()


class GeneralSettings(BaseModel):
    """Scraper-wide settings synced with the backend.

    Keywords are kept lowercase and unique. The interval is not range checked
    here; the backend may hold values the editor would not allow.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, alias="_id")
    keywords: List[str] = Field(default_factory=list)
    interval: int = DEFAULT_INTERVAL_MINUTES  # minutes
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value):
        if value is None:
            return []
        normalized = [normalize_keyword(k) for k in value if isinstance(k, str) and k.strip()]
        return dedupe_keywords(normalized)

    @classmethod
    def defaults(cls) -> "GeneralSettings":
        return cls(keywords=list(DEFAULT_KEYWORDS), interval=DEFAULT_INTERVAL_MINUTES)

    def to_payload(self) -> dict:
        return {"keywords": list(self.keywords), "interval": self.interval}
