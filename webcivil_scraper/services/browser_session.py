# webcivil_scraper/services/browser_session.py
import logging
from typing import Optional
from playwright.async_api import async_playwright, Playwright, Browser, BrowserContext, Page

from webcivil_scraper.core.config import AppSettings

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    A single tab in the operator's already-running, already-authenticated Chrome,
    reached over the DevTools protocol. The tab is owned by one scrape run and is
    closed exactly once by close(); the browser itself is left running.
    """

    def __init__(self, settings: AppSettings, playwright_instance: Optional[Playwright] = None):
        self.settings = settings
        self.playwright: Optional[Playwright] = playwright_instance
        self._owns_playwright = playwright_instance is None
        self.browser: Optional[Browser] = None
        self.page: Optional[Page] = None
        self._closed = False

    async def open_page(self) -> Page:
        if self.page is not None:
            return self.page
        if self.playwright is None:
            self.playwright = await async_playwright().start()

        logger.info(f"Connecting to browser over CDP at {self.settings.CDP_URL}")
        self.browser = await self.playwright.chromium.connect_over_cdp(
            self.settings.CDP_URL, timeout=self.settings.NAVIGATION_TIMEOUT_SECONDS * 1000
        )
        # The first context carries the operator's cookies
        context: BrowserContext = self.browser.contexts[0] if self.browser.contexts else await self.browser.new_context()
        self.page = await context.new_page()
        self.page.set_default_navigation_timeout(self.settings.NAVIGATION_TIMEOUT_SECONDS * 1000)
        self.page.set_default_timeout(self.settings.SELECTOR_TIMEOUT_SECONDS * 1000)
        logger.info("New tab opened in existing browser session.")
        return self.page

    async def close(self):
        if self._closed:
            return
        self._closed = True
        if self.page and not self.page.is_closed():
            try:
                await self.page.close()
                logger.info("Closed scraper tab.")
            except Exception as e:
                logger.warning(f"Error closing scraper tab: {e}")
        self.page = None
        if self._owns_playwright and self.playwright:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright driver: {e}")
            self.playwright = None
