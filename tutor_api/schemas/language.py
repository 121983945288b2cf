# tutor_api/schemas/language.py
from typing import Any, Literal

from pydantic import BaseModel, Field

from tutor_api.schemas.diagnose import LanguageCode

LanguageTag = Literal["hi-Deva", "hi-Latn", "ur-Arab", "mixed-hi-Latn-en", "en", "unknown"]


class LanguageDetectionResult(BaseModel):
    tag: LanguageTag
    confidence: float = Field(ge=0, le=1)
    label: str
    notes: str


class LanguageCheckRequest(BaseModel):
    response: Any
    expected_language: LanguageCode = "en"


class LanguageCheckResponse(BaseModel):
    detection: LanguageDetectionResult
    expected_language: str
    is_target_match: bool
