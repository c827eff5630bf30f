"""
Job batch models: the result of one scrape of one website.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WebsiteRef(BaseModel):
    """Owning website, denormalized by the backend when the batch is fetched."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="_id")
    name: str = ""
    url: str = ""
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class JobBatch(BaseModel):
    """Job titles produced by a single scrape. Never mutated client-side."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="_id")
    data: List[str] = Field(default_factory=list)
    website: WebsiteRef = Field(alias="websiteId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("website", mode="before")
    @classmethod
    def _expand_bare_id(cls, value):
        # Unpopulated references arrive as a plain id string
        if isinstance(value, str):
            return {"_id": value}
        return value

    @field_validator("data", mode="before")
    @classmethod
    def _data_as_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def job_count(self) -> int:
        return len(self.data)
