# webcivil_scraper/models_api/scrape.py
import re
import enum
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from webcivil_scraper.core.config import NY_COUNTIES

INDEX_NUMBER_PATTERN = re.compile(r"^\d+/\d{4}$")


class DocumentTypeEnum(str, enum.Enum):
    JUDGMENT = "judgment"
    NOTICE = "notice"


# Literal names as they appear in the eFiled documents table
TARGET_DOCUMENT_NAMES: Dict[str, DocumentTypeEnum] = {
    "JUDGMENT OF FORECLOSURE AND SALE": DocumentTypeEnum.JUDGMENT,
    "NOTICE OF SALE": DocumentTypeEnum.NOTICE,
}

TARGET_FILENAMES: Dict[DocumentTypeEnum, str] = {
    DocumentTypeEnum.JUDGMENT: "judgment.pdf",
    DocumentTypeEnum.NOTICE: "notice.pdf",
}


def document_type_for_name(doc_name: str) -> DocumentTypeEnum:
    return DocumentTypeEnum.JUDGMENT if "JUDGMENT" in doc_name else DocumentTypeEnum.NOTICE


class CaseQuery(BaseModel):
    index_number: str = Field(..., alias="indexNumber", description="Court index number, e.g. 606529/2023.")
    county: str = Field(..., description="New York county the case is venued in.")

    @field_validator("index_number")
    @classmethod
    def _check_index_number(cls, value: str) -> str:
        value = value.strip()
        if not INDEX_NUMBER_PATTERN.match(value):
            raise ValueError(f"Index number '{value}' is not in the form NNNNNN/YYYY")
        return value

    @field_validator("county")
    @classmethod
    def _check_county(cls, value: str) -> str:
        wanted = value.strip().lower()
        for county in NY_COUNTIES:
            if county.lower() == wanted:
                return county
        raise ValueError(f"Unsupported county '{value}'")

    class Config:
        populate_by_name = True
        frozen = True


class CaseInfo(BaseModel):
    plaintiff: Optional[str] = None
    defendant: Optional[str] = None


class DocumentRecord(BaseModel):
    name: str
    type: DocumentTypeEnum
    url: str
    date: str = ""


class ScrapeResult(BaseModel):
    success: bool = False
    index_number: str = Field(..., alias="indexNumber")
    county: str
    case_dir: str = Field(..., alias="caseDir")
    pdfs: Dict[DocumentTypeEnum, str] = Field(default_factory=dict)
    error: Optional[str] = None
    hcaptcha_detected: bool = Field(False, alias="hcaptchaDetected")
    hcaptcha_sitekey: Optional[str] = Field(None, alias="hcaptchaSitekey")
    case_info: Optional[CaseInfo] = Field(None, alias="caseInfo")
    documents: List[DocumentRecord] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    class Config:
        populate_by_name = True
