# webcivil_scraper/utils/playwright_utils.py
import os
import logging
from typing import Optional
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError
from webcivil_scraper.core.config import AppSettings
from webcivil_scraper.utils.common import sanitize_filename

logger = logging.getLogger(__name__)

async def goto(page: Page, url: str, settings: AppSettings, log_prefix: str = ""):
    """Navigate and wait for the network to go idle. Timeouts propagate to the caller."""
    logger.debug(f"{log_prefix} Navigating to {url}")
    await page.goto(url, wait_until="networkidle", timeout=settings.NAVIGATION_TIMEOUT_SECONDS * 1000)

async def click_and_wait_for_navigation(page: Page, selector: str, settings: AppSettings, log_prefix: str = "") -> bool:
    """
    Clicks `selector` and waits for the resulting navigation. A navigation-wait timeout is
    tolerated (the result may already be rendered); returns False in that case.
    A failed click always propagates.
    """
    clicked = False
    try:
        async with page.expect_navigation(wait_until="networkidle", timeout=settings.NAVIGATION_TIMEOUT_SECONDS * 1000):
            await page.click(selector)
            clicked = True
        return True
    except PlaywrightTimeoutError:
        if not clicked:
            raise
        logger.warning(f"{log_prefix} Timed out waiting for navigation after clicking '{selector}'. Continuing with current page.")
        return False

async def get_attribute_if_present(page: Page, selector: str, attribute: str) -> Optional[str]:
    """Best-effort attribute lookup that never waits and never raises."""
    try:
        element = await page.query_selector(selector)
        if not element:
            return None
        return await element.get_attribute(attribute)
    except Exception as e:
        logger.debug(f"Could not read '{attribute}' from '{selector}': {e}")
        return None

async def safe_screenshot(page: Optional[Page], settings: AppSettings, filename_prefix: str, details: str = ""):
    if not page or not settings.SCREENSHOT_ON_FAILURE:
        return
    sane_details = sanitize_filename(details, max_length=50)
    screenshot_path = os.path.join(settings.SCREENSHOT_PATH, f"debug_{filename_prefix}_{sane_details}.png")
    try:
        if page.is_closed():
            return
        os.makedirs(os.path.dirname(screenshot_path), exist_ok=True)
        # Capped by the selector budget so a debug capture never stalls the run
        timeout_ms = min(settings.SCREENSHOT_TIMEOUT_SECONDS, settings.SELECTOR_TIMEOUT_SECONDS) * 1000
        await page.screenshot(path=screenshot_path, timeout=timeout_ms)
        logger.info(f"Debug screenshot saved: {screenshot_path}")
    except Exception as e:
        logger.error(f"Failed to save screenshot {screenshot_path}: {e}")
