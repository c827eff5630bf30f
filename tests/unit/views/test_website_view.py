"""Tests for the website management view."""

import asyncio
from unittest.mock import Mock

import pytest

from scanner_admin.gateway import GatewayError, NotFoundError
from scanner_admin.models import ScanStatus
from scanner_admin.views import WebsiteForm, WebsiteManagementView
from scanner_admin.views.websites import FETCH_ERROR, INVALID_FORM, NO_MATCHES, NO_WEBSITES

from conftest import make_website

POLL = 60


def always(prompt):
    return True


@pytest.fixture
def loaded_gateway(gateway, sample_websites):
    gateway.list_websites.return_value = sample_websites
    return gateway


@pytest.mark.asyncio
async def test_open_loads_websites_and_statistics(loaded_gateway, sample_websites):
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        await view.poller.drain()
        assert view.websites == sample_websites
        assert view.statistics.summary.total_websites == 2
        assert view.statistics.summary.websites_with_errors == 1
        assert view.error is None
        assert view.empty_message is None
        assert view.poller.active
    assert not view.poller.active
    assert view.closed


@pytest.mark.asyncio
async def test_empty_messages(gateway):
    async with WebsiteManagementView(gateway, poll_interval=POLL) as view:
        assert view.empty_message == NO_WEBSITES

        gateway.list_websites.return_value = [make_website("A")]
        await view.refresh()
        view.set_search("zzz")
        assert view.empty_message == NO_MATCHES


@pytest.mark.asyncio
async def test_filters(loaded_gateway):
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        assert [w.name for w in view.set_active_filter(False)] == ["B"]
        assert view.active_filter_count == 1
        view.set_search("a.example")
        assert view.websites == []
        assert len(view.clear_filters()) == 2


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_list(loaded_gateway, sample_websites):
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        loaded_gateway.list_websites.side_effect = GatewayError("down", status_code=503)
        assert await view.refresh() is False
        assert view.error == FETCH_ERROR
        assert view.all_websites == sample_websites
        assert view.loading is False


@pytest.mark.asyncio
async def test_error_banner_dismissal_resets_on_refetch(loaded_gateway):
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        assert view.show_error_banner
        view.dismiss_error_banner()
        assert not view.show_error_banner
        await view.refresh()
        assert view.show_error_banner


@pytest.mark.asyncio
async def test_mutations_blocked_while_scanning(loaded_gateway):
    loaded_gateway.get_scan_status.return_value = ScanStatus(isScanning=True)
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        await view.poller.drain()
        assert view.is_scanning

        toggle = await view.toggle_active("site-a")
        delete = await view.delete("site-a", confirmer=always)
        clear = await view.clear_errors("site-b", confirmer=always)
        create = await view.save(WebsiteForm(name="New", url="new.example.com"))

    assert toggle.status == "blocked"
    assert toggle.message == "Cannot toggle status during scan"
    assert delete.message == "Cannot delete during scan"
    assert clear.message == "Cannot clear errors during scan"
    assert create.message == "Cannot add websites during scan"
    loaded_gateway.toggle_website_active.assert_not_awaited()
    loaded_gateway.delete_website.assert_not_awaited()
    loaded_gateway.clear_website_errors.assert_not_awaited()
    loaded_gateway.create_website.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_declined_sends_nothing(loaded_gateway):
    confirmer = Mock(return_value=False)
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL, confirmer=confirmer) as view:
        outcome = await view.delete("site-a")
    assert outcome.status == "cancelled"
    confirmer.assert_called_once()
    loaded_gateway.delete_website.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_refetches_after_success(loaded_gateway, sample_websites):
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        loaded_gateway.list_websites.return_value = sample_websites[1:]
        outcome = await view.delete("site-a", confirmer=always)

        assert outcome.ok
        loaded_gateway.delete_website.assert_awaited_once_with("site-a")
        assert [w.name for w in view.all_websites] == ["B"]
        assert view.statistics.summary.total_websites == 1


@pytest.mark.asyncio
async def test_failed_mutation_leaves_list_unchanged(loaded_gateway, sample_websites):
    loaded_gateway.toggle_website_active.side_effect = GatewayError("boom", status_code=500)
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        calls_before = loaded_gateway.list_websites.await_count
        outcome = await view.toggle_active("site-a")

        assert outcome.status == "failed"
        assert view.message == "Failed to toggle website status"
        assert view.all_websites == sample_websites
        assert loaded_gateway.list_websites.await_count == calls_before


@pytest.mark.asyncio
async def test_delete_of_missing_website_fails(loaded_gateway):
    loaded_gateway.delete_website.side_effect = NotFoundError("gone", path="/websites/x", status_code=404)
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        outcome = await view.delete("x", confirmer=always)
    assert outcome.message == "Failed to delete website"


@pytest.mark.asyncio
async def test_clear_errors_requires_confirmation(loaded_gateway):
    async with WebsiteManagementView(loaded_gateway, poll_interval=POLL) as view:
        outcome = await view.clear_errors("site-b", confirmer=always)
    assert outcome.ok
    loaded_gateway.clear_website_errors.assert_awaited_once_with("site-b")


@pytest.mark.asyncio
async def test_save_rejects_incomplete_form(gateway):
    async with WebsiteManagementView(gateway, poll_interval=POLL) as view:
        outcome = await view.save(WebsiteForm(name="  ", url="x.com"))
    assert outcome.message == INVALID_FORM
    gateway.create_website.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_creates_and_updates(gateway):
    async with WebsiteManagementView(gateway, poll_interval=POLL) as view:
        form = WebsiteForm(name="New", url="new.example.com", keywords=["python"])
        assert (await view.save(form)).ok
        gateway.create_website.assert_awaited_once_with(
            name="New", url="new.example.com", keywords=["python"], is_active=True
        )

        edit = WebsiteForm.from_website(make_website("A", keywords=["x"]))
        edit.is_active = False
        assert (await view.save(edit)).ok
        gateway.update_website.assert_awaited_once_with(
            "site-a", {"name": "A", "url": "https://a.example.com", "isActive": False, "keywords": ["x"]}
        )


@pytest.mark.asyncio
async def test_closed_view_ignores_late_results(loaded_gateway, sample_websites):
    release = asyncio.Event()

    async def slow_list(*args, **kwargs):
        await release.wait()
        return sample_websites

    view = WebsiteManagementView(loaded_gateway, poll_interval=POLL)
    loaded_gateway.list_websites.side_effect = slow_list
    pending = asyncio.create_task(view.refresh())
    await asyncio.sleep(0)
    view.close()
    release.set()

    assert await pending is False
    assert view.all_websites == []
    assert (await view.toggle_active("site-a")).status == "blocked"


def test_form_keywords():
    form = WebsiteForm(name="A", url="a.com")
    assert form.add_keyword(" python ")
    assert not form.add_keyword("python")
    assert not form.add_keyword("   ")
    form.remove_keyword("python")
    assert form.keywords == []
    assert not form.is_editing
