import asyncio
import dataclasses
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from tenacity import wait_none

from promptfeeder.browser.session import BrowserSession


@pytest.fixture
def fake_playwright():
    """Patches async_playwright; yields (playwright, context, page) mocks."""
    page = MagicMock()
    for name in ("goto", "wait_for_selector", "click", "evaluate", "wait_for_function"):
        setattr(page, name, AsyncMock())
    item = MagicMock()
    item.click = AsyncMock()
    page.locator.return_value.nth.return_value = item

    context = MagicMock()
    context.pages = [page]
    context.close = AsyncMock()

    pw = MagicMock()
    pw.stop = AsyncMock()
    pw.chromium.launch_persistent_context = AsyncMock(return_value=context)

    with patch("promptfeeder.browser.session.async_playwright") as mock_factory, \
            patch("promptfeeder.browser.session.MODE_MENU_DELAY", 0):
        mock_factory.return_value.start = AsyncMock(return_value=pw)
        yield pw, context, page


def test_start_launches_persistent_profile(fake_playwright, fast_config):
    pw, context, page = fake_playwright
    config = dataclasses.replace(fast_config, headless=False, executable_path="/usr/bin/chrome")

    async def run():
        async with BrowserSession(config) as session:
            return session.page

    assert asyncio.run(run()) is page
    kwargs = pw.chromium.launch_persistent_context.await_args.kwargs
    assert kwargs["user_data_dir"] == str(config.profile_dir.resolve())
    assert kwargs["executable_path"] == "/usr/bin/chrome"
    assert kwargs["headless"] is False
    assert config.profile_dir.is_dir()
    context.close.assert_awaited_once()
    pw.stop.assert_awaited_once()


def test_close_twice_closes_once(fake_playwright, fast_config):
    pw, context, _ = fake_playwright
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        await session.close()
        await session.close()

    asyncio.run(run())
    context.close.assert_awaited_once()
    pw.stop.assert_awaited_once()


def test_close_stops_playwright_when_context_close_fails(fake_playwright, fast_config):
    pw, context, _ = fake_playwright
    context.close.side_effect = RuntimeError("browser crashed")
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        await session.close()

    with pytest.raises(RuntimeError):
        asyncio.run(run())
    pw.stop.assert_awaited_once()


def test_failed_launch_still_stops_playwright(fake_playwright, fast_config):
    pw, context, _ = fake_playwright
    pw.chromium.launch_persistent_context.side_effect = RuntimeError("no browser")

    async def run():
        async with BrowserSession(fast_config):
            pass

    with pytest.raises(RuntimeError, match="no browser"):
        asyncio.run(run())
    pw.stop.assert_awaited_once()
    context.close.assert_not_awaited()


def test_open_chat_retries_failed_navigation(fake_playwright, fast_config):
    _, _, page = fake_playwright
    page.goto.side_effect = [RuntimeError("net::ERR_CONNECTION_RESET"), "response"]
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        return await session.open_chat()

    with patch.object(BrowserSession.open_chat.retry, "wait", wait_none()):
        assert asyncio.run(run()) == "response"
    assert page.goto.await_count == 2
    assert page.goto.await_args.args == (fast_config.chat_url,)


def test_open_chat_gives_up_after_three_attempts(fake_playwright, fast_config):
    _, _, page = fake_playwright
    page.goto.side_effect = RuntimeError("offline")
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        await session.open_chat("https://chat.example.com")

    with patch.object(BrowserSession.open_chat.retry, "wait", wait_none()):
        with pytest.raises(RuntimeError, match="offline"):
            asyncio.run(run())
    assert page.goto.await_count == 3


def test_select_mode_clicks_matching_item(fake_playwright, fast_config):
    _, _, page = fake_playwright
    page.evaluate.return_value = ["  Fast ", "  Thinking  "]
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        return await session.select_mode("Thinking")

    assert asyncio.run(run()) is True
    page.locator.return_value.nth.assert_called_once_with(1)
    page.locator.return_value.nth.return_value.click.assert_awaited_once()
    assert page.wait_for_function.await_args.kwargs["arg"] == [
        fast_config.selectors.current_mode_title, "Thinking"
    ]


def test_select_mode_missing_label_returns_false(fake_playwright, fast_config):
    _, _, page = fake_playwright
    page.evaluate.return_value = ["Fast"]
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        return await session.select_mode("Thinking")

    assert asyncio.run(run()) is False
    page.locator.return_value.nth.return_value.click.assert_not_awaited()


def test_select_mode_missing_menu_returns_false(fake_playwright, fast_config):
    _, _, page = fake_playwright
    page.wait_for_selector.side_effect = RuntimeError("Timeout 100ms exceeded")
    session = BrowserSession(fast_config)

    async def run():
        await session.start()
        return await session.select_mode("Thinking")

    assert asyncio.run(run()) is False
    page.click.assert_not_awaited()
