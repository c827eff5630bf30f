"""
Website model: a registered scrape target.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def dedupe_keywords(keywords: List[str]) -> List[str]:
    """Drop repeated keywords, keeping the first occurrence of each."""
    seen = set()
    unique = []
    for keyword in keywords:
        if keyword not in seen:
            seen.add(keyword)
            unique.append(keyword)
    return unique


class Website(BaseModel):
    """A website the scraper monitors.

    ``last_scanned``, ``last_error`` and ``last_error_at`` are written by the
    remote scraping process only.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="_id")
    name: str
    url: str
    is_active: bool = Field(default=True, alias="isActive")
    keywords: List[str] = Field(default_factory=list)
    last_scanned: Optional[datetime] = Field(default=None, alias="lastScanned")
    last_error: Optional[str] = Field(default=None, alias="lastError")
    last_error_at: Optional[datetime] = Field(default=None, alias="lastErrorAt")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords_unique(cls, value):
        if value is None:
            return []
        return dedupe_keywords(list(value))

    @property
    def has_error(self) -> bool:
        return bool(self.last_error)

    @property
    def href(self) -> str:
        """Link target; bare hosts are opened over https."""
        if self.url.startswith("http"):
            return self.url
        return f"https://{self.url}"
