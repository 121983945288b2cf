# tutor_api/services/fallback.py
"""
결정론적 폴백 / 데모 응답 생성기 (LLM 호출 없음, 항상 스키마 유효)

confidence는 일부러 낮게 잡아 품질 저하를 하위 소비자에게 알리되,
스키마의 [0, 1] 범위는 지킨다.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from tutor_api.content.catalog import get_topic_templates
from tutor_api.core.constants import DiagnosisLimits
from tutor_api.schemas.catalog import CandidateMisconception
from tutor_api.schemas.diagnose import DiagnoseResponse, DiagnosedMisconception, NextPracticeQuestion

GENERIC_NAME = "General calculation error"
GENERIC_DIAGNOSIS = "A general error occurred in the calculation."
GENERIC_REMEDIATION = "Double-check your work step by step. Make sure you understand each operation before moving forward."
DEFAULT_REMEDIATION = "Review the concept and try similar problems."


def _quote_explanation(explanation: Optional[str], limit: int, always_ellipsis: bool) -> str:
    text = (explanation or "").strip()
    if not text:
        return DiagnosisLimits.EVIDENCE_NONE
    if always_ellipsis or len(text) > limit:
        return f'"{text[:limit]}..."'
    return f'"{text}"'


def _ranked_entries(
    candidates: Sequence[CandidateMisconception],
    confidences: Sequence[float],
    evidence: str,
    padding_confidence: float,
) -> List[DiagnosedMisconception]:
    top = [
        DiagnosedMisconception(
            id=m.id,
            name=m.name,
            confidence=conf,
            evidence=evidence,
            diagnosis=m.description,
            remediation=m.remediation_template or DEFAULT_REMEDIATION,
        )
        for m, conf in zip(candidates[: DiagnosisLimits.TOP_N], confidences)
    ]

    # 후보가 3개 미만이면 일반 항목으로 채움 (ID는 후보 집합 안에서)
    padding_id = candidates[0].id if candidates else DiagnosisLimits.GENERIC_ID
    while len(top) < DiagnosisLimits.TOP_N:
        top.append(
            DiagnosedMisconception(
                id=padding_id,
                name=GENERIC_NAME,
                confidence=padding_confidence,
                evidence=DiagnosisLimits.EVIDENCE_NONE,
                diagnosis=GENERIC_DIAGNOSIS,
                remediation=GENERIC_REMEDIATION,
            )
        )
    return top


def fill_from_candidates(
    top: List[DiagnosedMisconception],
    candidates: Sequence[CandidateMisconception],
) -> List[DiagnosedMisconception]:
    """
    3개 미만이면 아직 안 쓰인 후보로 채우고, 그래도 모자라면 일반 항목으로 채운다.
    3개 초과분은 자른다.
    """
    top = list(top[: DiagnosisLimits.TOP_N])
    used = {m.id for m in top}
    unused = [c for c in candidates if c.id not in used]
    pad = DiagnosisLimits.PADDING_CONFIDENCE
    evidence = DiagnosisLimits.EVIDENCE_NONE
    filler = _ranked_entries(unused, [pad] * len(unused), evidence, pad)[: len(unused)]
    # 일반 항목 ID는 candidates[0]
    filler += _ranked_entries(candidates, [], evidence, pad)
    return (top + filler)[: DiagnosisLimits.TOP_N]


def _with_topic_templates(top: List[DiagnosedMisconception], topic: Optional[str]) -> DiagnoseResponse:
    tpl = get_topic_templates(topic)
    return DiagnoseResponse(
        top_3=top,
        next_practice_question=NextPracticeQuestion(**tpl.follow_up.model_dump()),
        teach_back_prompt=tpl.teach_back_prompt,
        key_takeaway=tpl.key_takeaway,
    )


def build_fallback_response(
    candidates: Sequence[CandidateMisconception],
    student_explanation: Optional[str] = None,
    topic: Optional[str] = None,
) -> DiagnoseResponse:
    """모든 모델 시도가 실패했을 때의 안전 응답. 실패하지 않는다."""
    top = _ranked_entries(
        candidates,
        DiagnosisLimits.FALLBACK_CONFIDENCES,
        _quote_explanation(student_explanation, 50, always_ellipsis=True),
        DiagnosisLimits.PADDING_CONFIDENCE,
    )
    return _with_topic_templates(top, topic)


def build_demo_response(
    candidates: Sequence[CandidateMisconception],
    student_explanation: Optional[str] = None,
    topic: Optional[str] = None,
) -> DiagnoseResponse:
    """DEMO_MODE 전용 결정론적 응답"""
    top = _ranked_entries(
        candidates,
        DiagnosisLimits.DEMO_CONFIDENCES,
        _quote_explanation(student_explanation, 60, always_ellipsis=False),
        DiagnosisLimits.DEMO_PADDING_CONFIDENCE,
    )
    return _with_topic_templates(top, topic)
