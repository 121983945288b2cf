# tutor_api/schemas/evaluate.py
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from tutor_api.schemas.diagnose import LanguageCode, NonEmptyStr

ErrorClass = Literal["correct", "review_error", "misconception_error"]

ReviewErrorType = Literal[
    "extra_digit",
    "missing_digit",
    "extra_zero",
    "sign_slip",
    "decimal_slip",
    "transposed_digits",
    "arithmetic_slip",
    "format_typo",
]


class ThinkingLogEntry(BaseModel):
    type: Literal["initial_explanation", "followup_explanation", "teachback"]
    text: str = ""
    ts: int = 0


class EvaluateRequest(BaseModel):
    question_prompt: NonEmptyStr
    correct_answer: NonEmptyStr
    student_answer: NonEmptyStr
    student_explanation: Optional[str] = None
    question_id: Optional[str] = None
    language: LanguageCode = "en"
    thinking_log: List[ThinkingLogEntry] = Field(default_factory=list)


class EvaluateModelOutput(BaseModel):
    """LLM이 돌려주는 최소 스키마"""
    is_correct: bool
    solution_steps: List[str] = Field(default_factory=list)
    short_feedback: str = ""

    @field_validator("solution_steps", mode="before")
    @classmethod
    def _coerce_steps(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(s) for s in v if str(s).strip()] if isinstance(v, list) else v


class CoachNotes(BaseModel):
    title: str = "Coach Notes (from your thinking)"
    what_went_well: List[str] = Field(default_factory=list)
    what_to_fix: List[str] = Field(default_factory=list)
    remember: str = ""
    next_step: str = ""


class EvaluateResponse(BaseModel):
    is_correct: bool
    solution_steps: List[str]
    short_feedback: str
    error_class: ErrorClass
    review_error_type: Optional[ReviewErrorType] = None
    review_error_message: Optional[str] = None
    coach_notes: CoachNotes


class EvaluateMeta(BaseModel):
    status: Literal["ok", "heuristic", "fallback", "demo"]
    language: str
    model_calls: int = 0
    error: Optional[str] = None
