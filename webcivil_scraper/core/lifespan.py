# webcivil_scraper/core/lifespan.py
import os
import asyncio
import logging
from contextlib import asynccontextmanager
from playwright.async_api import async_playwright
from webcivil_scraper.core.config import get_app_settings
from webcivil_scraper.services.status_reporter import build_status_reporter

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan_manager(app):
    app_settings = get_app_settings()
    logger.info("--- WebCivil Scraper API Starting Up (Lifespan Manager) ---")
    app.state.settings = app_settings
    app.state.scrape_semaphore = asyncio.Semaphore(app_settings.MAX_CONCURRENT_SCRAPES)
    app.state.active_scrapes = 0
    app.state.playwright_instance = None
    app.state.service_ready = False

    download_loc = os.path.abspath(app_settings.DOWNLOAD_DIR)
    try:
        os.makedirs(download_loc, exist_ok=True)
    except Exception as e:
        logger.critical(f"CRITICAL: Could not create download directory {download_loc}: {e}")
        app.state.status_reporter = None
        yield
        return

    app.state.status_reporter = build_status_reporter(app_settings)

    logger.info("--- Initializing Playwright (Lifespan) ---")
    try:
        app.state.playwright_instance = await async_playwright().start()
        app.state.service_ready = True
        logger.info("--- Playwright Initialized (Lifespan) ---")
    except Exception as e:
        logger.critical(f"CRITICAL STARTUP FAILURE: Could not initialize Playwright: {e}")

    yield

    logger.info("--- WebCivil Scraper API Shutting Down (Lifespan Manager) ---")
    if app.state.playwright_instance:
        try:
            await app.state.playwright_instance.stop()
            logger.info("Playwright stopped (Lifespan).")
        except Exception as e:
            logger.error(f"Error stopping Playwright: {e}")
        app.state.playwright_instance = None
    if app.state.status_reporter:
        app.state.status_reporter.close()
    logger.info("--- WebCivil Scraper API Shutdown Complete (Lifespan Manager) ---")
