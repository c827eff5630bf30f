"""End-to-end flows through the views against a gateway double."""

import pytest

from scanner_admin.models import ScanStatus, ServerStatistics
from scanner_admin.views import JobScanView, WebsiteManagementView

POLL = 60


@pytest.mark.asyncio
async def test_statistics_overview(gateway, sample_websites, sample_batches):
    gateway.get_statistics.return_value = ServerStatistics(totalWebsites=2, activeWebsites=1)
    gateway.list_websites.return_value = sample_websites
    gateway.list_job_batches.return_value = sample_batches

    async with JobScanView(gateway, poll_interval=POLL) as view:
        summary = view.statistics.summary

    assert (
        summary.total_jobs,
        summary.total_websites,
        summary.active_websites,
        summary.websites_with_errors,
        summary.scanned_websites,
    ) == (2, 2, 1, 1, 1)
    assert summary.caption == "2 total positions from 1 websites"


@pytest.mark.asyncio
async def test_scan_blocks_mutations_until_it_finishes(gateway, sample_websites):
    gateway.list_websites.return_value = sample_websites
    gateway.get_scan_status.return_value = ScanStatus(isScanning=True)

    async with WebsiteManagementView(gateway, poll_interval=POLL) as view:
        await view.poller.drain()
        blocked = await view.delete("site-a", confirmer=lambda prompt: True)
        assert blocked.status == "blocked"
        gateway.delete_website.assert_not_awaited()

        gateway.get_scan_status.return_value = ScanStatus(isScanning=False)
        await view.poller.poll_now()
        assert view.capabilities.can_delete

        gateway.list_websites.return_value = sample_websites[1:]
        done = await view.delete("site-a", confirmer=lambda prompt: True)

    assert done.ok
    gateway.delete_website.assert_awaited_once_with("site-a")
    assert [w.id for w in view.all_websites] == ["site-b"]


@pytest.mark.asyncio
async def test_website_filters(gateway, sample_websites):
    gateway.list_websites.return_value = sample_websites

    async with WebsiteManagementView(gateway, poll_interval=POLL) as view:
        assert [w.name for w in view.set_search("b")] == ["B"]
        view.clear_filters()
        assert [w.name for w in view.set_active_filter(True)] == ["A"]
        assert view.active_filter_count == 1
