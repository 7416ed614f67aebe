# webcivil_scraper/api/routers/cases.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status

from webcivil_scraper.api.deps import get_current_settings, get_status_reporter, get_write_api_key
from webcivil_scraper.core.config import AppSettings
from webcivil_scraper.models_api.scrape import CaseQuery, ScrapeResult
from webcivil_scraper.services.browser_session import BrowserSession
from webcivil_scraper.services.case_scraper import CaseScraperService
from webcivil_scraper.services.status_reporter import StatusReporter

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/scrape", response_model=ScrapeResult, response_model_by_alias=True)
async def scrape_case(
    query: CaseQuery,
    request: Request,
    api_key: str = Depends(get_write_api_key),
    settings: AppSettings = Depends(get_current_settings),
    status_reporter: StatusReporter = Depends(get_status_reporter),
):
    if not getattr(request.app.state, "service_ready", False):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service is not ready. Please try again later.")

    playwright_instance = request.app.state.playwright_instance
    service = CaseScraperService(
        settings,
        status_reporter=status_reporter,
        session_factory=lambda: BrowserSession(settings, playwright_instance),
    )
    async with request.app.state.scrape_semaphore:
        request.app.state.active_scrapes += 1
        try:
            logger.info(f"[{query.index_number}] Scrape requested via API ({query.county}).")
            return await service.scrape_case(query)
        finally:
            request.app.state.active_scrapes -= 1
