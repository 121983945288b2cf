# tutor_api/services/heuristics.py
"""
구조적 휴리스틱 (LLM 없이 원답 문자열만 보고 판단하는 결정론적 검사)

- 모델 호출 전에 detect() 실행, 결과 플래그는 모델 단계 이후 override에서 소비
- override는 어느 단계(초기/repair/언어 폴백)가 성공했든 동일하게 마지막에 한 번 적용
- 결정론적 폴백 응답에는 적용하지 않는다
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Protocol, Tuple

from tutor_api.content.catalog import get_misconception_by_id
from tutor_api.core.constants import DiagnosisLimits
from tutor_api.schemas.catalog import CandidateMisconception
from tutor_api.schemas.diagnose import DiagnoseRequest, DiagnoseResponse, DiagnosedMisconception
from tutor_api.services.fallback import fill_from_candidates

log = logging.getLogger("service.heuristics")

_FRACTION_RE = re.compile(r"^(-?\d+)\s*/\s*(-?\d+)$")


def parse_fraction(s: str) -> Optional[Tuple[int, int]]:
    """'n/d' → (n, d). 형식이 아니거나 분모가 0이면 None"""
    m = _FRACTION_RE.match((s or "").strip())
    if not m:
        return None
    num, den = int(m.group(1)), int(m.group(2))
    if den == 0:
        return None
    return num, den


def detect_fraction_swap(student_answer: str, correct_answer: str) -> bool:
    student = parse_fraction(student_answer)
    correct = parse_fraction(correct_answer)
    if not student or not correct:
        return False
    # 3/3 처럼 뒤집어도 같은 값은 오답이 아니다
    if student == correct:
        return False
    return student[0] == correct[1] and student[1] == correct[0]


class StructuralHeuristic(Protocol):
    misconception_id: str

    def detect(self, student_answer: str, correct_answer: str) -> bool: ...
    def evidence(self, req: DiagnoseRequest) -> str: ...
    def diagnosis(self) -> str: ...


class FractionSwapHeuristic:
    """분자/분모 뒤바꿈 (예: 정답 3/4, 학생 4/3)"""
    misconception_id = "FRAC-SWAP"

    def detect(self, student_answer: str, correct_answer: str) -> bool:
        return detect_fraction_swap(student_answer, correct_answer)

    def evidence(self, req: DiagnoseRequest) -> str:
        if req.student_explanation:
            return (
                f"Student answered {req.student_answer} when correct was {req.correct_answer} "
                f'(reciprocal). "{req.student_explanation[:50]}..."'
            )
        return (
            f"Student answered {req.student_answer} when correct was {req.correct_answer} "
            "(reciprocal fraction)."
        )

    def diagnosis(self) -> str:
        return "The student swapped the numerator and denominator, writing the fraction upside down."


# 토픽 → 휴리스틱
HEURISTIC_REGISTRY: Dict[str, StructuralHeuristic] = {
    "fractions": FractionSwapHeuristic(),
}


def get_heuristic(topic: str) -> Optional[StructuralHeuristic]:
    return HEURISTIC_REGISTRY.get((topic or "").strip().lower())


def apply_heuristic_override(
    response: DiagnoseResponse,
    heuristic: StructuralHeuristic,
    req: DiagnoseRequest,
    candidates: List[CandidateMisconception],
    *,
    trace_id: Optional[str] = None,
) -> DiagnoseResponse:
    """
    휴리스틱 오개념을 1순위로 강제한다. 입력 response는 변경하지 않고 새 객체를 반환.
    같은 입력에 두 번 적용해도 결과가 같다.
      - 이미 1순위: confidence를 고정값 이상으로
      - 2~3순위: 맨 앞으로 이동 (중복 항목은 모두 제거), confidence 고정
      - 없음: 카탈로그 템플릿으로 새 항목 생성 후 맨 앞에 삽입
    1순위 confidence는 나머지 항목 이상. 결과는 3개로 자르고, 모자라면 후보로 채운다.
    """
    target_id = heuristic.misconception_id
    if target_id not in {c.id for c in candidates}:
        return response

    high = DiagnosisLimits.HEURISTIC_CONFIDENCE
    top = list(response.top_3)
    existing = next((m for m in top if m.id == target_id), None)
    # 모델이 같은 ID를 여러 번 냈어도 1순위 하나만 남김
    rest = [m for m in top if m.id != target_id]

    if existing is not None:
        head = existing
    else:
        record = next((c for c in candidates if c.id == target_id), None) or get_misconception_by_id(target_id)
        if record is None:
            log.warning("heuristic_misconception_missing", extra={"trace_id": trace_id, "id": target_id})
            return response
        head = DiagnosedMisconception(
            id=target_id,
            name=record.name,
            confidence=high,
            evidence=heuristic.evidence(req),
            diagnosis=heuristic.diagnosis(),
            remediation=record.remediation_template or record.description,
        )

    # 1순위 confidence는 나머지 어느 항목보다 낮지 않게
    own = head.confidence if top[0].id == target_id else high
    floor = max([high, own] + [m.confidence for m in rest])
    head = head.model_copy(update={"confidence": floor})

    top = fill_from_candidates([head] + rest[: DiagnosisLimits.TOP_N - 1], candidates)
    return response.model_copy(update={"top_3": top})
