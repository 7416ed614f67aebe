# webcivil_scraper/core/security.py
import secrets
import logging
from typing import Optional
from fastapi import Request, Security, HTTPException, status
from fastapi.security.api_key import APIKeyHeader
from webcivil_scraper.core.config import API_KEY_NOT_CONFIGURED, AppSettings, get_app_settings

logger = logging.getLogger(__name__)

API_KEY_NAME = "X-API-KEY"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def _settings_for(request: Request) -> AppSettings:
    return getattr(request.app.state, "settings", None) or get_app_settings()


def api_key_configured(settings: AppSettings) -> bool:
    return bool(settings.API_ACCESS_KEY) and settings.API_ACCESS_KEY != API_KEY_NOT_CONFIGURED


async def get_api_key(request: Request, api_key_header_value: Optional[str] = Security(api_key_header)) -> str:
    """Guards endpoints that drive the operator's browser. Every accepted call opens a tab in it."""
    settings = _settings_for(request)
    if not api_key_configured(settings):
        logger.critical("API_ACCESS_KEY is not configured. Refusing to drive the browser for API callers.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API Key not configured on server. Access denied.",
        )
    if api_key_header_value and secrets.compare_digest(api_key_header_value, settings.API_ACCESS_KEY):
        return api_key_header_value

    logger.warning(f"Rejected scrape request from {request.client.host if request.client else 'unknown'}: bad or missing {API_KEY_NAME}.")
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid or missing API Key.",
    )
