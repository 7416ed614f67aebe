# tests/test_playwright_utils.py
import pytest
from unittest.mock import AsyncMock, MagicMock
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from webcivil_scraper.core.config import AppSettings
from webcivil_scraper.utils.playwright_utils import click_and_wait_for_navigation, safe_screenshot


class _Navigation:
    def __init__(self, raise_timeout=False):
        self.raise_timeout = raise_timeout

    async def __aenter__(self):
        return MagicMock()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.raise_timeout and exc_type is None:
            raise PlaywrightTimeoutError("Timeout 60000ms exceeded waiting for navigation")
        return False


def _page(navigation):
    page = AsyncMock(spec=Page)
    page.expect_navigation = MagicMock(return_value=navigation)
    page.is_closed = MagicMock(return_value=False)
    return page


@pytest.mark.asyncio
async def test_click_with_navigation():
    page = _page(_Navigation())
    assert await click_and_wait_for_navigation(page, "#btnFindCase", AppSettings()) is True
    page.click.assert_awaited_once_with("#btnFindCase")


@pytest.mark.asyncio
async def test_navigation_wait_timeout_is_tolerated():
    page = _page(_Navigation(raise_timeout=True))
    assert await click_and_wait_for_navigation(page, "#btnFindCase", AppSettings()) is False


@pytest.mark.asyncio
async def test_click_timeout_propagates():
    page = _page(_Navigation(raise_timeout=True))
    page.click = AsyncMock(side_effect=PlaywrightTimeoutError("waiting for locator('#btnFindCase')"))
    with pytest.raises(PlaywrightTimeoutError, match="btnFindCase"):
        await click_and_wait_for_navigation(page, "#btnFindCase", AppSettings())


@pytest.mark.asyncio
async def test_screenshot_disabled_by_default(tmp_path):
    page = _page(_Navigation())
    await safe_screenshot(page, AppSettings(DOWNLOAD_DIR=str(tmp_path), SCREENSHOT_ON_FAILURE=False), "hcaptcha", "606529/2023")
    page.screenshot.assert_not_awaited()


@pytest.mark.asyncio
async def test_screenshot_timeout_capped_by_selector_budget(tmp_path):
    page = _page(_Navigation())
    settings = AppSettings(
        DOWNLOAD_DIR=str(tmp_path), SCREENSHOT_ON_FAILURE=True,
        SCREENSHOT_TIMEOUT_SECONDS=20, SELECTOR_TIMEOUT_SECONDS=3,
    )
    await safe_screenshot(page, settings, "hcaptcha", "606529/2023")
    assert page.screenshot.await_args.kwargs["timeout"] == 3000
    assert page.screenshot.await_args.kwargs["path"].endswith("debug_hcaptcha_606529_2023.png")


@pytest.mark.asyncio
async def test_screenshot_failure_is_swallowed(tmp_path):
    page = _page(_Navigation())
    page.screenshot = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 5000ms exceeded."))
    settings = AppSettings(DOWNLOAD_DIR=str(tmp_path), SCREENSHOT_ON_FAILURE=True)
    await safe_screenshot(page, settings, "hcaptcha", "606529/2023")
    page.screenshot.assert_awaited_once()
