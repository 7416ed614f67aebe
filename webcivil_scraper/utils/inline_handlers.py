# webcivil_scraper/utils/inline_handlers.py
"""
Parsers for the inline ``onclick`` handlers WebCivil uses to pass case identifiers
between pages. The portal renders calls such as::

    openCaseDetailsWindow('w','PARM','SUFFOLK','606529/2023','N','Y','01/01/2024','123')

and the receiving page expects those arguments back as query parameters. The layout is
positional and undocumented, so each parser checks the token count and raises
HandlerParseError instead of building a malformed URL.
"""
import re
import logging
from typing import List, Optional
from urllib.parse import urlencode
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class HandlerParseError(ValueError):
    """Inline handler missing or not in the expected argument layout."""


def parse_handler_args(onclick: Optional[str], function_name: str) -> List[str]:
    if not onclick:
        raise HandlerParseError(f"No inline handler text to parse for {function_name}()")
    match = re.search(re.escape(function_name) + r"\(([^)]+)\)", onclick)
    if not match:
        raise HandlerParseError(f"Inline handler does not call {function_name}(): {onclick!r}")
    return [token.strip().replace("'", "").replace('"', "") for token in match.group(1).split(",")]


def _require_tokens(tokens: List[str], minimum: int, function_name: str) -> None:
    if len(tokens) < minimum:
        raise HandlerParseError(
            f"{function_name}() has {len(tokens)} argument(s), expected at least {minimum}: {tokens}"
        )


def _build_url(base_url: str, query: dict) -> str:
    return f"{base_url}?{urlencode(query, safe='/')}"


class CaseDetailParams(BaseModel):
    window: str
    parm: str
    county: str
    index: str
    motion: str
    docs: str
    adate: str
    civil_case_id: Optional[str] = None

    @classmethod
    def from_onclick(cls, onclick: Optional[str], function_name: str = "openCaseDetailsWindow") -> "CaseDetailParams":
        tokens = parse_handler_args(onclick, function_name)
        _require_tokens(tokens, 7, function_name)
        return cls(
            window=tokens[0],
            parm=tokens[1],
            county=tokens[2],
            index=tokens[3],
            motion=tokens[4],
            docs=tokens[5],
            adate=tokens[6],
            civil_case_id=tokens[7] if len(tokens) > 7 else None,
        )

    def case_info_url(self, base_url: str) -> str:
        return _build_url(base_url, {
            "parm": self.parm,
            "index": self.index,
            "county": self.county,
            "motion": self.motion,
            "docs": self.docs,
            "adate": self.adate,
            "civilCaseId": self.civil_case_id or "",
        })


class EFiledDocsParams(BaseModel):
    window: str
    county_code: str
    index_number: str
    is_pre_rji: str
    civil_case: str

    @classmethod
    def from_onclick(cls, onclick: Optional[str], function_name: str = "openDocumentWindow") -> "EFiledDocsParams":
        tokens = parse_handler_args(onclick, function_name)
        _require_tokens(tokens, 5, function_name)
        return cls(
            window=tokens[0],
            county_code=tokens[1],
            index_number=tokens[2],
            is_pre_rji=tokens[3],
            civil_case=tokens[4],
        )

    def efiled_docs_url(self, base_url: str) -> str:
        return _build_url(base_url, {
            "county_code": self.county_code,
            "txtIndexNo": self.index_number,
            "showMenu": "no",
            "isPreRji": self.is_pre_rji,
            "civilCase": self.civil_case,
        })


def extract_pdf_url(onclick: Optional[str], function_name: str = "openPDF") -> Optional[str]:
    if not onclick:
        return None
    match = re.search(re.escape(function_name) + r"\(['\"]([^'\"]+)['\"]", onclick)
    return match.group(1) if match else None
