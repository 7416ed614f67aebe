# webcivil_scraper/services/case_scraper.py
import os
import logging
from typing import Callable, Optional
from playwright.async_api import Page

from webcivil_scraper.core.config import AppSettings
from webcivil_scraper.db.models import AgentStatusEnum
from webcivil_scraper.models_api.scrape import CaseQuery, ScrapeResult
from webcivil_scraper.services.browser_session import BrowserSession
from webcivil_scraper.services.pipeline_state import (
    PipelineState, PipelineTracker, TERMINAL_STATUS_STEPS, apply_terminal_state,
)
from webcivil_scraper.services.status_reporter import StatusReporter, NullStatusReporter
from webcivil_scraper.services.webcivil_handler import (
    WebCivilHandler, SearchStatusEnum, DocumentListStatusEnum,
)
from webcivil_scraper.utils import common, playwright_utils

logger = logging.getLogger(__name__)


class CaseScraperService:
    def __init__(
        self,
        settings: AppSettings,
        handler: Optional[WebCivilHandler] = None,
        status_reporter: Optional[StatusReporter] = None,
        session_factory: Optional[Callable[[], BrowserSession]] = None,
    ):
        self.settings = settings
        self.handler = handler or WebCivilHandler(settings)
        self.status_reporter = status_reporter or NullStatusReporter()
        self.session_factory = session_factory or (lambda: BrowserSession(settings))

    async def _report(self, query: CaseQuery, step: str, status: AgentStatusEnum = AgentStatusEnum.SEARCHING):
        try:
            await self.status_reporter.report(query.index_number, step, status)
        except Exception as e:
            logger.warning(f"[{query.index_number}] Status reporter raised: {e}")

    async def _finish(self, tracker: PipelineTracker, state: PipelineState, result: ScrapeResult, query: CaseQuery) -> ScrapeResult:
        tracker.advance(state)
        apply_terminal_state(result, state)
        if state in TERMINAL_STATUS_STEPS:
            await self._report(query, TERMINAL_STATUS_STEPS[state], AgentStatusEnum.FAILED)
        return result

    async def _download_documents(self, page: Page, query: CaseQuery, result: ScrapeResult):
        total = len(result.documents)
        downloaded = 0
        await self._report(query, f"Getting PDFs ({downloaded}/{total})...")
        for document in result.documents:
            saved_path = await self.handler.fetch_document(page, document, result.case_dir)
            if saved_path:
                result.pdfs[document.type] = saved_path
                downloaded += 1
            await self._report(query, f"Getting PDFs ({downloaded}/{total})...")

    async def scrape_case(self, query: CaseQuery, job_id: Optional[str] = None) -> ScrapeResult:
        log_prefix = f"[{query.index_number}{' job ' + job_id if job_id else ''}]"
        case_dir = common.case_directory(self.settings.DOWNLOAD_DIR, query.index_number)
        result = ScrapeResult(index_number=query.index_number, county=query.county, case_dir=case_dir)
        tracker = PipelineTracker(log_prefix)
        session = self.session_factory()
        page: Optional[Page] = None

        try:
            os.makedirs(case_dir, exist_ok=True)

            await self._report(query, "Connecting to browser...")
            page = await session.open_page()

            tracker.advance(PipelineState.SEARCHING)
            await self._report(query, "Searching for case...")
            outcome = await self.handler.search_case(page, query)

            if outcome.status == SearchStatusEnum.CHALLENGE:
                result.hcaptcha_detected = True
                result.hcaptcha_sitekey = outcome.hcaptcha_sitekey
                return await self._finish(tracker, PipelineState.CHALLENGE, result, query)
            if outcome.status == SearchStatusEnum.NOT_FOUND:
                return await self._finish(tracker, PipelineState.NOT_FOUND, result, query)

            tracker.advance(PipelineState.CASE_FOUND)
            await self._report(query, "Found case, navigating...")

            tracker.advance(PipelineState.EXTRACTING_INFO)
            result.case_info = await self.handler.extract_case_info(page, outcome.case_params)

            tracker.advance(PipelineState.LOCATING_DOCS)
            await self._report(query, "Getting eFiled documents...")
            listing = await self.handler.list_target_documents(page, query.index_number)
            if listing.status == DocumentListStatusEnum.NO_DOCS_BUTTON:
                return await self._finish(tracker, PipelineState.NO_DOCS_BUTTON, result, query)
            if listing.status == DocumentListStatusEnum.NO_TARGET_DOCS:
                return await self._finish(tracker, PipelineState.NO_TARGET_DOCS, result, query)

            tracker.advance(PipelineState.DOCS_FOUND)
            result.documents = listing.documents

            tracker.advance(PipelineState.DOWNLOADING)
            await self._download_documents(page, query, result)

            await self._finish(tracker, PipelineState.DONE, result, query)
            if result.success:
                await self._report(query, "PDFs downloaded, ready for scan")
            logger.info(f"{log_prefix} Finished: {len(result.pdfs)}/{len(result.documents)} document(s) downloaded.")

        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"{log_prefix} Scrape failed in state '{tracker.state.value}': {message}", exc_info=True)
            await playwright_utils.safe_screenshot(page, self.settings, "scrape_error", query.index_number)
            if not tracker.is_terminal:
                tracker.advance(PipelineState.FAILED)
            result.success = False
            result.error = message
            await self._report(query, f"Error: {message}", AgentStatusEnum.FAILED)
        finally:
            await session.close()

        return result
