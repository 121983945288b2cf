# tutor_api/services/validators.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from tutor_api.schemas.diagnose import DiagnoseResponse

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Violation:
    """경로 태그가 붙은 스키마 위반 (repair 프롬프트에 그대로 인용)"""
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def _loc_to_path(loc) -> str:
    return ".".join(str(p) for p in loc)


def validate_with_model(model_cls: Type[M], data: Any) -> Tuple[Optional[M], List[Violation]]:
    """
    pydantic v2 검증 → (모델 or None, 위반 목록)
    bool 하나로 뭉개지 않고 위반을 전부 돌려준다.
    """
    if not isinstance(data, dict):
        return None, [Violation("", f"expected a JSON object, got {type(data).__name__}")]
    try:
        return model_cls.model_validate(data), []
    except ValidationError as e:
        return None, [Violation(_loc_to_path(err["loc"]), err["msg"]) for err in e.errors()]


def validate_diagnosis(data: Any) -> Tuple[Optional[DiagnoseResponse], List[Violation]]:
    """
    진단 응답 계약:
      - top_3 정확히 3개
      - confidence ∈ [0, 1]
      - 필수 문자열 필드 존재 + 비어있지 않음
      - key_takeaway ≤ 100자
    """
    return validate_with_model(DiagnoseResponse, data)
