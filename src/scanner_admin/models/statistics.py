from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ServerStatistics(BaseModel):
    """Aggregate statistics as reported by the backend. Any field may be absent."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_jobs: Optional[int] = Field(default=None, alias="totalJobs")
    total_websites: Optional[int] = Field(default=None, alias="totalWebsites")
    active_websites: Optional[int] = Field(default=None, alias="activeWebsites")
    recent_jobs: Optional[int] = Field(default=None, alias="recentJobs")
    scanned_websites: Optional[int] = Field(default=None, alias="scannedWebsites")
    total_job_documents: Optional[int] = Field(default=None, alias="totalJobDocuments")


class StatisticsSummary(BaseModel):
    """Derived statistics for one aggregation cycle. Not persisted."""

    model_config = ConfigDict(frozen=True)

    total_jobs: int = 0
    total_websites: int = 0
    active_websites: int = 0
    websites_with_errors: int = 0
    scanned_websites: int = 0
    total_job_documents: Optional[int] = None

    @property
    def caption(self) -> str:
        return f"{self.total_jobs} total positions from {self.scanned_websites} websites"


class ScanStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    is_scanning: bool = Field(default=False, alias="isScanning")
