# tutor_api/schemas/diagnose.py
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, Field, StringConstraints, field_validator

from tutor_api.core.constants import DiagnosisLimits

LanguageCode = Literal["en", "hi_latn", "es", "fr", "zh_hans"]

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


# ===========================================
# 요청
# ===========================================

class DiagnoseRequest(BaseModel):
    question_prompt: NonEmptyStr
    correct_answer: NonEmptyStr
    student_answer: NonEmptyStr
    student_explanation: Optional[str] = None
    topic: NonEmptyStr
    candidate_misconception_ids: List[NonEmptyStr] = Field(min_length=1)
    language: LanguageCode = "en"

    @field_validator("candidate_misconception_ids")
    @classmethod
    def _dedupe_ids(cls, v: List[str]) -> List[str]:
        # 순서 유지 중복 제거
        return list(dict.fromkeys(v))


# ===========================================
# 응답 계약 (모델 출력 검증에도 그대로 사용)
# ===========================================

class DiagnosedMisconception(BaseModel):
    id: NonEmptyStr
    name: NonEmptyStr
    confidence: float = Field(ge=0, le=1)
    evidence: NonEmptyStr
    diagnosis: NonEmptyStr
    remediation: NonEmptyStr


class NextPracticeQuestion(BaseModel):
    prompt: NonEmptyStr
    correct_answer: NonEmptyStr
    why_this_targets: NonEmptyStr


class DiagnoseResponse(BaseModel):
    top_3: List[DiagnosedMisconception] = Field(
        min_length=DiagnosisLimits.TOP_N, max_length=DiagnosisLimits.TOP_N
    )
    next_practice_question: NextPracticeQuestion
    teach_back_prompt: NonEmptyStr
    key_takeaway: Annotated[
        str,
        StringConstraints(
            strip_whitespace=True, min_length=1, max_length=DiagnosisLimits.KEY_TAKEAWAY_MAX_CHARS
        ),
    ]


# ===========================================
# 메타 (스키마 외 부가 정보)
# ===========================================

class DiagnoseMeta(BaseModel):
    status: Literal["ok", "retried", "fallback", "demo"]
    language: str
    requested_language: str
    language_downgraded: bool = False
    fraction_swap_detected: bool = False
    model_calls: int = 0
    error: Optional[str] = None
