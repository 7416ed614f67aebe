# webcivil_scraper/api/deps.py
from fastapi import Depends, Request
from webcivil_scraper.core.security import get_api_key
from webcivil_scraper.core.config import AppSettings, get_app_settings
from webcivil_scraper.services.status_reporter import StatusReporter, NullStatusReporter
import logging

logger = logging.getLogger(__name__)

def get_current_settings(request: Request) -> AppSettings:
    if getattr(request.app.state, 'settings', None) is not None:
        return request.app.state.settings
    logger.warning("Settings not found in app.state, loading fresh.")
    return get_app_settings()

def get_status_reporter(request: Request) -> StatusReporter:
    return getattr(request.app.state, 'status_reporter', None) or NullStatusReporter()

def get_write_api_key(api_key: str = Depends(get_api_key)):
    return api_key
