# webcivil_scraper/services/webcivil_handler.py
import os
import re
import base64
import enum
import logging
from typing import Optional, List, Dict, Any
from pydantic import BaseModel
from playwright.async_api import Page

from webcivil_scraper.core.config import AppSettings, WebCivilSelectors
from webcivil_scraper.models_api.scrape import (
    CaseQuery, CaseInfo, DocumentRecord, DocumentTypeEnum,
    TARGET_DOCUMENT_NAMES, TARGET_FILENAMES, document_type_for_name,
)
from webcivil_scraper.utils import playwright_utils, common
from webcivil_scraper.utils.inline_handlers import CaseDetailParams, EFiledDocsParams, extract_pdf_url

logger = logging.getLogger(__name__)

# Scripts evaluated inside the WebCivil tab
COUNTY_OPTIONS_SCRIPT = """(selector) => {
  const select = document.querySelector(selector);
  if (!select) return [];
  return Array.from(select.options).map(o => ({ value: o.value, text: o.text }));
}"""

BODY_TEXT_SCRIPT = "() => document.body.innerText"

DOCUMENT_ROWS_SCRIPT = """(selector) => Array.from(document.querySelectorAll(selector)).map(row => {
  const cells = Array.from(row.querySelectorAll('td'));
  const link = cells.length >= 3 ? cells[2].querySelector('a') : null;
  return {
    cells: cells.map(c => (c.textContent || '').trim()),
    linkText: link ? (link.textContent || '').trim() : null,
    onclick: link ? link.getAttribute('onclick') : null
  };
})"""

# Runs with the tab's cookies; non-2xx responses reject so the caller sees a failure
FETCH_AS_BASE64_SCRIPT = """async (url) => {
  const res = await fetch(url, { credentials: 'include' });
  if (!res.ok) throw new Error(`HTTP ${res.status} fetching ${url}`);
  const blob = await res.blob();
  return await new Promise((resolve, reject) => {
    const reader = new FileReader();
    reader.onloadend = () => resolve(String(reader.result).split(',')[1] || '');
    reader.onerror = () => reject(reader.error);
    reader.readAsDataURL(blob);
  });
}"""

PLAINTIFF_PATTERN = re.compile(r"Plaintiff[s]?[:\s]+([^\n]+)", re.IGNORECASE)
DEFENDANT_PATTERN = re.compile(r"Defendant[s]?[:\s]+([^\n]+)", re.IGNORECASE)


class SearchStatusEnum(str, enum.Enum):
    CHALLENGE = "challenge"
    NOT_FOUND = "not_found"
    FOUND = "found"


class DocumentListStatusEnum(str, enum.Enum):
    NO_DOCS_BUTTON = "no_docs_button"
    NO_TARGET_DOCS = "no_target_docs"
    FOUND = "found"


class CaseSearchOutcome(BaseModel):
    status: SearchStatusEnum
    hcaptcha_sitekey: Optional[str] = None
    case_params: Optional[CaseDetailParams] = None


class DocumentListing(BaseModel):
    status: DocumentListStatusEnum
    documents: List[DocumentRecord] = []


def resolve_county_option(options: List[Dict[str, Any]], county: str) -> Optional[str]:
    """Value of the first court option whose label contains '<county> supreme' (case-insensitive)."""
    wanted = f"{county.lower()} supreme"
    for option in options or []:
        if wanted in str(option.get("text") or "").lower():
            return option.get("value")
    return None


def _first_line_after(pattern: re.Pattern, text: str) -> Optional[str]:
    try:
        match = pattern.search(text or "")
        if not match:
            return None
        return match.group(1).strip() or None
    except Exception as e:
        logger.debug(f"Pattern {pattern.pattern!r} failed: {e}")
        return None


def parse_case_info(page_text: Optional[str]) -> CaseInfo:
    return CaseInfo(
        plaintiff=_first_line_after(PLAINTIFF_PATTERN, page_text or ""),
        defendant=_first_line_after(DEFENDANT_PATTERN, page_text or ""),
    )


def match_target_documents(rows: List[Dict[str, Any]], pdf_handler_name: str = "openPDF") -> List[DocumentRecord]:
    """
    Filters raw eFiled-documents table rows down to the target filings.
    Rows with fewer than three cells, another document name, or no openPDF('...') handler
    are skipped. A later row of the same type replaces an earlier one.
    """
    by_type: Dict[DocumentTypeEnum, DocumentRecord] = {}
    for row in rows or []:
        cells = row.get("cells") or []
        if len(cells) < 3:
            continue
        doc_name = (row.get("linkText") or "").strip()
        if doc_name not in TARGET_DOCUMENT_NAMES:
            continue
        url = extract_pdf_url(row.get("onclick"), pdf_handler_name)
        if not url:
            logger.debug(f"Row '{doc_name}' has no {pdf_handler_name} handler. Skipping.")
            continue
        doc_type = document_type_for_name(doc_name)
        if doc_type in by_type:
            logger.info(f"Duplicate '{doc_name}' row found; using the later one.")
        by_type[doc_type] = DocumentRecord(
            name=doc_name,
            type=doc_type,
            url=url,
            date=str(cells[1]).strip(),
        )
    return list(by_type.values())


class WebCivilHandler:
    def __init__(self, settings: AppSettings):
        self.settings = settings
        self.selectors: WebCivilSelectors = settings.WEBCIVIL_SELECTORS

    async def _read_county_options(self, page: Page) -> List[Dict[str, Any]]:
        return await page.evaluate(COUNTY_OPTIONS_SCRIPT, self.selectors.COURT_SELECT) or []

    async def _get_challenge_sitekey(self, page: Page) -> Optional[str]:
        return await playwright_utils.get_attribute_if_present(
            page, self.selectors.CHALLENGE_SITEKEY_ELEMENT, self.selectors.CHALLENGE_SITEKEY_ATTRIBUTE
        )

    async def search_case(self, page: Page, query: CaseQuery) -> CaseSearchOutcome:
        log_prefix = f"[{query.index_number}]"
        logger.info(f"{log_prefix} Searching WebCivil for {query.index_number} in {query.county} County.")
        await playwright_utils.goto(page, self.settings.SEARCH_URL, self.settings, log_prefix)
        await page.wait_for_selector(self.selectors.INDEX_NUMBER_INPUT, timeout=self.settings.SELECTOR_TIMEOUT_SECONDS * 1000)

        # Typed key by key so the form's client-side validators fire
        await page.type(self.selectors.INDEX_NUMBER_INPUT, query.index_number, delay=self.settings.TYPING_DELAY_MS)
        await common.random_delay(0.2, 0.6, "after typing index number")

        county_value = resolve_county_option(await self._read_county_options(page), query.county)
        if county_value:
            await page.select_option(self.selectors.COURT_SELECT, county_value)
            logger.debug(f"{log_prefix} Court filter set to option '{county_value}'.")
        else:
            logger.warning(f"{log_prefix} No '{query.county} Supreme' court option found. Searching without a court filter.")

        await playwright_utils.click_and_wait_for_navigation(page, self.selectors.FIND_CASE_BUTTON, self.settings, log_prefix)

        if await page.query_selector(self.selectors.CHALLENGE_MARKERS):
            sitekey = await self._get_challenge_sitekey(page)
            logger.warning(f"{log_prefix} hCaptcha challenge present on search results (sitekey={sitekey}).")
            await playwright_utils.safe_screenshot(page, self.settings, "hcaptcha", query.index_number)
            return CaseSearchOutcome(status=SearchStatusEnum.CHALLENGE, hcaptcha_sitekey=sitekey)

        case_link = await page.query_selector(self.selectors.CASE_DETAILS_LINK)
        if not case_link:
            logger.info(f"{log_prefix} No case details link in search results.")
            await playwright_utils.safe_screenshot(page, self.settings, "case_not_found", query.index_number)
            return CaseSearchOutcome(status=SearchStatusEnum.NOT_FOUND)

        onclick = await case_link.get_attribute("onclick")
        case_params = CaseDetailParams.from_onclick(onclick, self.selectors.CASE_DETAILS_HANDLER_NAME)
        logger.info(f"{log_prefix} Case found (parm={case_params.parm}, county={case_params.county}).")
        return CaseSearchOutcome(status=SearchStatusEnum.FOUND, case_params=case_params)

    async def extract_case_info(self, page: Page, case_params: CaseDetailParams) -> CaseInfo:
        log_prefix = f"[{case_params.index}]"
        await playwright_utils.goto(page, case_params.case_info_url(self.settings.CASE_INFO_URL), self.settings, log_prefix)
        try:
            page_text = await page.evaluate(BODY_TEXT_SCRIPT)
        except Exception as e:
            logger.warning(f"{log_prefix} Could not read case detail page text: {e}")
            page_text = ""
        case_info = parse_case_info(page_text)
        logger.info(f"{log_prefix} Case info: plaintiff={case_info.plaintiff!r}, defendant={case_info.defendant!r}")
        return case_info

    async def list_target_documents(self, page: Page, log_id: str = "") -> DocumentListing:
        log_prefix = f"[{log_id}]"
        efiled_button = await page.query_selector(self.selectors.EFILED_DOCS_BUTTON)
        if not efiled_button:
            logger.info(f"{log_prefix} Case page has no eFiled documents button.")
            return DocumentListing(status=DocumentListStatusEnum.NO_DOCS_BUTTON)

        onclick = await efiled_button.get_attribute("onclick")
        if not onclick:
            logger.info(f"{log_prefix} eFiled documents button carries no handler.")
            return DocumentListing(status=DocumentListStatusEnum.NO_DOCS_BUTTON)
        docs_params = EFiledDocsParams.from_onclick(onclick, self.selectors.EFILED_DOCS_HANDLER_NAME)
        await playwright_utils.goto(page, docs_params.efiled_docs_url(self.settings.EFILED_DOCS_URL), self.settings, log_prefix)

        rows = await page.evaluate(DOCUMENT_ROWS_SCRIPT, self.selectors.DOCUMENT_TABLE_ROWS) or []
        documents = match_target_documents(rows, self.selectors.PDF_OPEN_HANDLER_NAME)
        logger.info(f"{log_prefix} Scanned {len(rows)} table row(s); {len(documents)} target document(s) found.")
        if not documents:
            return DocumentListing(status=DocumentListStatusEnum.NO_TARGET_DOCS)
        return DocumentListing(status=DocumentListStatusEnum.FOUND, documents=documents)

    async def fetch_document(self, page: Page, document: DocumentRecord, case_dir: str) -> Optional[str]:
        """Downloads one document through the tab's session. Returns the saved path, or None on any failure."""
        filepath = os.path.join(case_dir, TARGET_FILENAMES[document.type])
        try:
            encoded = await page.evaluate(FETCH_AS_BASE64_SCRIPT, document.url)
            if not encoded:
                raise ValueError("empty response body")
            content = base64.b64decode(encoded, validate=True)
            if not content:
                raise ValueError("empty document after decoding")
            with open(filepath, "wb") as f:
                f.write(content)
            logger.info(f"Saved '{document.name}' ({len(content)} bytes) to {filepath}")
            return filepath
        except Exception as e:
            logger.warning(f"Download failed for '{document.name}' ({document.url}): {type(e).__name__} - {e}")
            return None
