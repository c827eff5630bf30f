"""Tests for the settings view."""

import asyncio
from unittest.mock import patch

import pytest
import requests

from scanner_admin.gateway import GatewayError, RemoteGateway
from scanner_admin.models import DEFAULT_KEYWORDS, GeneralSettings
from scanner_admin.views import SettingsView, interval_choices, interval_label, interval_options
from scanner_admin.views.settings import LOAD_ERROR, RESET_OK, SAVE_ERROR, SAVE_OK

from conftest import TEST_API_URL, make_response


@pytest.mark.asyncio
async def test_load_without_stored_settings_uses_defaults(gateway):
    async with SettingsView(gateway) as view:
        assert view.keywords == list(DEFAULT_KEYWORDS)
        assert view.interval == 30
        assert view.message is None


@pytest.mark.asyncio
async def test_load_failure_uses_defaults_and_reports(gateway):
    gateway.get_general_settings.side_effect = GatewayError("down")
    async with SettingsView(gateway) as view:
        assert view.interval == 30
        assert view.message.kind == "error"
        assert view.message.text == LOAD_ERROR


@pytest.mark.asyncio
async def test_load_stored_settings(gateway):
    gateway.get_general_settings.return_value = GeneralSettings(id="g1", keywords=["remote"], interval=15)
    async with SettingsView(gateway) as view:
        assert view.keywords == ["remote"]
        assert view.interval == 15


@pytest.mark.asyncio
async def test_keywords_are_normalized_and_unique(gateway):
    async with SettingsView(gateway) as view:
        view.remove_keyword("student")
        assert "student" not in view.keywords
        assert view.add_keyword("  Python ")
        assert not view.add_keyword("PYTHON")
        assert not view.add_keyword("python")
        assert not view.add_keyword("   ")
        assert view.keywords[-1] == "python"
        assert view.keywords.count("python") == 1


@pytest.mark.asyncio
async def test_existing_default_keyword_is_not_added_twice(gateway):
    async with SettingsView(gateway) as view:
        assert not view.add_keyword("  Remote ")
        assert view.keywords.count("remote") == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", [0, 60, -5, 2.5, "10", True])
async def test_interval_outside_range_is_rejected(gateway, bad):
    async with SettingsView(gateway) as view:
        with pytest.raises(ValueError):
            view.set_interval(bad)
        assert view.interval == 30


@pytest.mark.asyncio
async def test_save_sends_current_values(gateway):
    gateway.update_general_settings.return_value = GeneralSettings(id="g1", keywords=["remote"], interval=5)
    async with SettingsView(gateway) as view:
        view.settings = GeneralSettings(keywords=["remote"])
        view.set_interval(5)
        outcome = await view.save()

        assert outcome.ok
        gateway.update_general_settings.assert_awaited_once_with(["remote"], 5)
        assert view.settings.id == "g1"
        assert view.message.text == SAVE_OK
        assert not view.saving


@pytest.mark.asyncio
async def test_save_failure(gateway):
    gateway.update_general_settings.side_effect = GatewayError("boom", status_code=500)
    async with SettingsView(gateway) as view:
        view.set_interval(10)
        outcome = await view.save()
        assert outcome.status == "failed"
        assert view.message.text == SAVE_ERROR
        assert view.interval == 10


@pytest.mark.asyncio
async def test_reset_is_local(gateway):
    async with SettingsView(gateway) as view:
        view.add_keyword("extra")
        view.set_interval(1)
        view.reset()
        assert view.keywords == list(DEFAULT_KEYWORDS)
        assert view.interval == 30
        assert view.message.text == RESET_OK
    gateway.update_general_settings.assert_not_awaited()


@pytest.mark.asyncio
async def test_message_expires(gateway):
    async with SettingsView(gateway, dismiss_after=0.05) as view:
        view.reset()
        assert view.message is not None
        await asyncio.sleep(0.1)
        assert view.message is None


@pytest.mark.asyncio
async def test_close_cancels_pending_dismissal(gateway):
    view = SettingsView(gateway, dismiss_after=0.05)
    async with view:
        view.reset()
        handle = view._dismiss_handle
    assert handle.cancelled()


def test_interval_options_and_labels():
    options = interval_options()
    assert options[0] == 1 and options[-1] == 59
    assert len(options) == 59
    assert interval_label(1) == "1 minute"
    assert interval_label(30) == "30 minutes"


@pytest.mark.asyncio
async def test_save_acknowledged_without_echo_keeps_edits():
    session = requests.Session()
    remote = RemoteGateway(TEST_API_URL, session=session, max_workers=1)
    try:
        with patch.object(session, "request", return_value=make_response(200, None)):
            view = SettingsView(remote)
            await view.load()
        view.add_keyword("python")
        view.set_interval(15)

        with patch.object(session, "request", return_value=make_response(200, {"message": "Settings updated"})):
            outcome = await view.save()

        assert outcome.ok
        assert "python" in view.keywords
        assert len(view.keywords) == len(DEFAULT_KEYWORDS) + 1
        assert view.interval == 15
        view.close()
    finally:
        remote.close()


@pytest.mark.asyncio
async def test_stored_interval_outside_range_is_kept(gateway):
    gateway.get_general_settings.return_value = GeneralSettings(keywords=["remote"], interval=90)
    async with SettingsView(gateway) as view:
        options = interval_choices(view.interval)
        assert 90 in options
        assert options[-1] == 90

        assert view.select_interval(90) is False
        assert view.interval == 90

        assert view.select_interval(15) is True
        assert view.interval == 15
        assert 90 not in interval_choices(view.interval)
