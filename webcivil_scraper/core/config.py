# webcivil_scraper/core/config.py
import os
import json
from pydantic import BaseModel, Field
from typing import Dict, Optional, List
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

CONFIG_FILE_PATH = os.getenv("WEBCIVIL_CONFIG_FILE", "config.json")
API_KEY_NOT_CONFIGURED = "CONFIG_ERROR_API_KEY_NOT_IN_ENV"
DOTENV_PATH = ".env"

load_dotenv(DOTENV_PATH)

NY_COUNTIES: List[str] = [
    "Albany", "Allegany", "Bronx", "Broome", "Cattaraugus", "Cayuga", "Chautauqua",
    "Chemung", "Chenango", "Clinton", "Columbia", "Cortland", "Delaware", "Dutchess",
    "Erie", "Essex", "Franklin", "Fulton", "Genesee", "Greene", "Hamilton", "Herkimer",
    "Jefferson", "Kings", "Lewis", "Livingston", "Madison", "Monroe", "Montgomery",
    "Nassau", "New York", "Niagara", "Oneida", "Onondaga", "Ontario", "Orange",
    "Orleans", "Oswego", "Otsego", "Putnam", "Queens", "Rensselaer", "Richmond",
    "Rockland", "St. Lawrence", "Saratoga", "Schenectady", "Schoharie", "Schuyler",
    "Seneca", "Steuben", "Suffolk", "Sullivan", "Tioga", "Tompkins", "Ulster",
    "Warren", "Washington", "Wayne", "Westchester", "Wyoming", "Yates",
]


class WebCivilSelectors(BaseModel):
    # Search Page (FCASSearch)
    INDEX_NUMBER_INPUT: str = "#txtIndex"
    COURT_SELECT: str = "select[name=\"cboCourt\"]"
    FIND_CASE_BUTTON: str = "#btnFindCase"

    # hCaptcha markers on the search result page
    CHALLENGE_MARKERS: str = "[data-sitekey], .h-captcha, iframe[src*=\"hcaptcha\"]"
    CHALLENGE_SITEKEY_ELEMENT: str = "[data-sitekey]"
    CHALLENGE_SITEKEY_ATTRIBUTE: str = "data-sitekey"

    # Search results -> Case detail page (FCASCaseInfo)
    CASE_DETAILS_LINK: str = "a[onclick*=\"openCaseDetailsWindow\"]"
    CASE_DETAILS_HANDLER_NAME: str = "openCaseDetailsWindow"

    # Case detail page -> eFiled documents page (FCASeFiledDocsDetail)
    EFILED_DOCS_BUTTON: str = "input[onclick*=\"openDocumentWindow\"]"
    EFILED_DOCS_HANDLER_NAME: str = "openDocumentWindow"

    # eFiled documents table
    DOCUMENT_TABLE_ROWS: str = "table tr"
    PDF_OPEN_HANDLER_NAME: str = "openPDF"


class AppSettings(BaseModel):
    CDP_URL: str = os.getenv("CDP_URL", "http://127.0.0.1:18800")
    WEBCIVIL_BASE_URL: str = os.getenv("WEBCIVIL_BASE_URL", "https://iapps.courts.state.ny.us/webcivil")
    SEARCH_PATH: str = "FCASSearch"
    CASE_INFO_PATH: str = "FCASCaseInfo"
    EFILED_DOCS_PATH: str = "FCASeFiledDocsDetail"

    DOWNLOAD_DIR: str = os.getenv("DOWNLOAD_DIR", "/tmp/trex-pdfs")
    STATUS_DATABASE_URL: Optional[str] = os.getenv("STATUS_DATABASE_URL") or None

    PORT: int = Field(int(os.getenv("PORT", "8000")), gt=1023, lt=65536)
    HOST: str = os.getenv("HOST", "0.0.0.0")
    API_ACCESS_KEY: str = os.getenv("API_ACCESS_KEY", API_KEY_NOT_CONFIGURED)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    MAX_CONCURRENT_SCRAPES: int = Field(int(os.getenv("MAX_CONCURRENT_SCRAPES", "1")), gt=0)

    NAVIGATION_TIMEOUT_SECONDS: int = Field(int(os.getenv("NAVIGATION_TIMEOUT_SECONDS", "60")), gt=0)
    SELECTOR_TIMEOUT_SECONDS: int = Field(int(os.getenv("SELECTOR_TIMEOUT_SECONDS", "30")), gt=0)
    SCREENSHOT_TIMEOUT_SECONDS: int = Field(int(os.getenv("SCREENSHOT_TIMEOUT_SECONDS", "5")), gt=0)
    TYPING_DELAY_MS: int = Field(int(os.getenv("TYPING_DELAY_MS", "50")), ge=0)
    SCREENSHOT_ON_FAILURE: bool = os.getenv("SCREENSHOT_ON_FAILURE", "false").lower() == "true"

    WEBCIVIL_SELECTORS: WebCivilSelectors = Field(default_factory=WebCivilSelectors)

    @property
    def SEARCH_URL(self) -> str:
        return f"{self.WEBCIVIL_BASE_URL.rstrip('/')}/{self.SEARCH_PATH}"

    @property
    def CASE_INFO_URL(self) -> str:
        return f"{self.WEBCIVIL_BASE_URL.rstrip('/')}/{self.CASE_INFO_PATH}"

    @property
    def EFILED_DOCS_URL(self) -> str:
        return f"{self.WEBCIVIL_BASE_URL.rstrip('/')}/{self.EFILED_DOCS_PATH}"

    @property
    def SCREENSHOT_PATH(self) -> str:
        return os.path.join(os.path.abspath(self.DOWNLOAD_DIR), "debug_screenshots")

    class Config:
        extra = 'ignore'


_cached_settings: Optional[AppSettings] = None
CLIENT_CONFIG_KEYS = {
    "CDP_URL", "WEBCIVIL_BASE_URL", "DOWNLOAD_DIR", "STATUS_DATABASE_URL",
    "NAVIGATION_TIMEOUT_SECONDS", "SELECTOR_TIMEOUT_SECONDS", "SCREENSHOT_TIMEOUT_SECONDS", "TYPING_DELAY_MS",
    "SCREENSHOT_ON_FAILURE",
}


def _apply_config_file(current_values: AppSettings, json_config: Dict) -> AppSettings:
    overrides = {
        key: json_config[key] for key in CLIENT_CONFIG_KEYS
        if key in json_config and json_config[key] is not None
    }
    # Shape used by the dashboard deployment: {"database": {"connectionString": "..."}}
    legacy_db = json_config.get("database")
    if "STATUS_DATABASE_URL" not in overrides and isinstance(legacy_db, dict) and legacy_db.get("connectionString"):
        overrides["STATUS_DATABASE_URL"] = legacy_db["connectionString"]

    if "WEBCIVIL_SELECTORS" in json_config and isinstance(json_config["WEBCIVIL_SELECTORS"], dict):
        try:
            overrides["WEBCIVIL_SELECTORS"] = WebCivilSelectors(**json_config["WEBCIVIL_SELECTORS"])
            logger.info(f"Loaded WEBCIVIL_SELECTORS from {CONFIG_FILE_PATH}.")
        except Exception as e_sel:
            logger.warning(f"Error parsing WEBCIVIL_SELECTORS from {CONFIG_FILE_PATH}: {e_sel}. Using defaults.")

    if not overrides:
        return current_values
    return AppSettings(**{**current_values.model_dump(), **overrides})


def load_settings(config_file_path: Optional[str] = None) -> AppSettings:
    global _cached_settings
    if _cached_settings is None:
        path = config_file_path or CONFIG_FILE_PATH
        current_values = AppSettings()

        if os.path.exists(path):
            try:
                with open(path, 'r') as f:
                    json_config = json.load(f)
                current_values = _apply_config_file(current_values, json_config)
            except Exception as e:
                logger.error(f"Error reading or applying {path}: {e}. Using .env/defaults.")
        else:
            logger.debug(f"{path} not found. Using .env/defaults.")

        _cached_settings = current_values
        logger.debug(f"Effective settings: CDP='{_cached_settings.CDP_URL}', "
                     f"DownloadDir='{_cached_settings.DOWNLOAD_DIR}', "
                     f"StatusSink={'configured' if _cached_settings.STATUS_DATABASE_URL else 'disabled'}")

    return _cached_settings


def get_app_settings() -> AppSettings:
    if _cached_settings is None:
        load_settings()
    return _cached_settings


def clear_cached_settings():
    global _cached_settings
    _cached_settings = None
    logger.info("Cached settings cleared.")
