"""Test configuration and fixtures."""

import json
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest
import requests

from scanner_admin.gateway import RemoteGateway
from scanner_admin.models import JobBatch, ScanStatus, Website

TEST_API_URL = "http://api.test/api"


def make_website(name: str = "A", **fields) -> Website:
    """Build a Website from wire-format fields (``isActive``, ``lastError`` ...)."""
    data = {
        "_id": f"site-{name.lower()}",
        "name": name,
        "url": f"https://{name.lower()}.example.com",
        "isActive": True,
    }
    data.update(fields)
    return Website.model_validate(data)


def make_batch(titles: List[str], website: Optional[Website] = None, batch_id: str = "batch-1", **fields) -> JobBatch:
    website = website or make_website()
    data = {
        "_id": batch_id,
        "data": titles,
        "websiteId": {"_id": website.id, "name": website.name, "url": website.url},
    }
    data.update(fields)
    return JobBatch.model_validate(data)


def make_response(status_code: int = 200, payload=None, url: str = TEST_API_URL) -> requests.Response:
    """A real requests.Response carrying ``payload`` as its JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = b"" if payload is None else json.dumps(payload).encode()
    response.encoding = "utf-8"
    response.url = url
    return response


@pytest.fixture
def gateway():
    """Gateway double with empty, successful defaults."""
    mock = AsyncMock(spec=RemoteGateway)
    mock.list_websites.return_value = []
    mock.list_job_batches.return_value = []
    mock.get_statistics.return_value = None
    mock.get_scan_status.return_value = ScanStatus(is_scanning=False)
    mock.get_general_settings.return_value = None
    mock.trigger_scan.return_value = {}
    return mock


@pytest.fixture
def sample_websites():
    return [
        make_website("A", isActive=True),
        make_website("B", isActive=False, lastError="timeout", lastErrorAt="2024-01-01T00:00:00Z"),
    ]


@pytest.fixture
def sample_batches(sample_websites):
    return [make_batch(["Eng I", "Eng II"], website=sample_websites[0])]


@pytest.fixture
def test_log_dir(tmp_path, monkeypatch):
    """Point LOG_DIR at a temporary directory."""
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("LOG_DIR", str(log_dir))
    return log_dir
