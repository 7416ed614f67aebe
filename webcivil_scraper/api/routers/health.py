# webcivil_scraper/api/routers/health.py
from fastapi import APIRouter, Request, status
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/healthz", status_code=status.HTTP_200_OK, summary="Health Check")
async def health_check(request: Request):
    service_is_ready = getattr(request.app.state, "service_ready", False)
    active_scrapes = getattr(request.app.state, "active_scrapes", 0)

    if service_is_ready:
        return {"status": "healthy", "message": "Playwright is initialized.", "active_scrapes": active_scrapes}
    logger.error("Health check: Playwright not initialized or service in a bad state.")
    return {"status": "unhealthy", "message": "Playwright not initialized or service not ready.", "active_scrapes": active_scrapes}
