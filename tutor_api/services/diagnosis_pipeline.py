# tutor_api/services/diagnosis_pipeline.py
"""
오개념 진단 파이프라인 (구조화 출력 복원력 체인)

  후보 확정 → 휴리스틱 감지 → 프롬프트 → 모델 호출 → ID 보정 → 스키마 검증
     ├─ 성공 → 휴리스틱 override → 반환
     └─ 실패 → repair 재호출(1회) → ID 보정 → 스키마 검증
                 └─ 실패 → 기본 언어로 위 과정을 1회 반복 (요청 언어가 기본 언어가 아닐 때만)
                             └─ 실패 → 결정론적 폴백

요청당 모델 호출은 최대 4회 (요청 언어 initial/repair + 기본 언어 initial/repair).
NoValidCandidatesError 외의 실패는 모두 내부에서 흡수되고, 호출자는 항상 스키마 유효 응답을 받는다.
파이프라인 객체는 요청 간 상태를 갖지 않는다 (요청별 상태는 _RunContext에만).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from tutor_api.core.constants import PipelineStage, PipelineStatus
from tutor_api.core.exceptions import (
    AllAttemptsExhausted,
    MalformedOutput,
    ModelCallFailed,
    SchemaViolation,
)
from tutor_api.core.settings import settings
from tutor_api.prompts.diagnose_prompt import (
    assistant_echo,
    build_repair_prompt,
    build_system_prompt,
    build_user_prompt,
)
from tutor_api.schemas.catalog import CandidateMisconception
from tutor_api.schemas.diagnose import DiagnoseMeta, DiagnoseRequest, DiagnoseResponse
from tutor_api.services.candidates import resolve_candidates
from tutor_api.services.fallback import build_demo_response, build_fallback_response
from tutor_api.services.heuristics import apply_heuristic_override, get_heuristic
from tutor_api.services.llm_client import json_messages
from tutor_api.services.postprocess import fix_misconception_ids
from tutor_api.services.validators import Violation, validate_diagnosis

log = logging.getLogger("service.diagnosis")


class JsonModelInvoker(Protocol):
    def invoke(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        trace_id: Optional[str] = None,
        timeout_s: Optional[float] = None,
        model: Optional[str] = None,
    ) -> Dict[str, Any]: ...


@dataclass
class PipelineAttempt:
    """(언어, 단계) 1회 결과. 요청 처리 중에만 존재하고 저장하지 않는다."""
    language: str
    stage: str
    ok: bool
    error: Optional[str] = None
    violations: List[Violation] = field(default_factory=list)


@dataclass
class DiagnosisOutcome:
    response: DiagnoseResponse
    meta: DiagnoseMeta
    attempts: List[PipelineAttempt]

    def to_payload(self) -> Dict[str, Any]:
        return {**self.response.model_dump(), "_meta": self.meta.model_dump(exclude_none=True)}


@dataclass
class _RunContext:
    req: DiagnoseRequest
    candidates: List[CandidateMisconception]
    trace_id: Optional[str]
    model_calls: int = 0
    attempts: List[PipelineAttempt] = field(default_factory=list)

    @property
    def candidate_ids(self) -> List[str]:
        return [c.id for c in self.candidates]


class DiagnosisPipeline:
    def __init__(
        self,
        invoker: JsonModelInvoker,
        *,
        default_language: Optional[str] = None,
        demo_mode: Optional[bool] = None,
        temperature: Optional[float] = None,
        repair_temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout_s: Optional[float] = None,
    ):
        self.invoker = invoker
        self.default_language = default_language or settings.DEFAULT_LANGUAGE
        self.demo_mode = settings.DEMO_MODE if demo_mode is None else demo_mode
        self.temperature = settings.DIAGNOSE_TEMPERATURE if temperature is None else temperature
        self.repair_temperature = (
            settings.DIAGNOSE_REPAIR_TEMPERATURE if repair_temperature is None else repair_temperature
        )
        self.max_tokens = max_tokens or settings.DIAGNOSE_MAX_TOKENS
        self.timeout_s = timeout_s if timeout_s is not None else settings.LLM_TIMEOUT_S

    # =========================
    # Public API
    # =========================

    def run(self, req: DiagnoseRequest, *, trace_id: Optional[str] = None) -> DiagnosisOutcome:
        # NoValidCandidatesError는 여기서 그대로 호출자에게 전달 (4xx)
        candidates = resolve_candidates(req.topic, req.candidate_misconception_ids, trace_id=trace_id)
        ctx = _RunContext(req=req, candidates=candidates, trace_id=trace_id)

        heuristic = get_heuristic(req.topic)
        swap_detected = bool(heuristic and heuristic.detect(req.student_answer, req.correct_answer))
        if swap_detected:
            log.info(
                "fraction_swap_detected",
                extra={"trace_id": trace_id, "student": req.student_answer, "correct": req.correct_answer},
            )

        log.info(
            "diagnose_start",
            extra={
                "trace_id": trace_id,
                "language": req.language,
                "topic": req.topic,
                "candidates": ctx.candidate_ids,
            },
        )

        if self.demo_mode:
            return DiagnosisOutcome(
                response=build_demo_response(candidates, req.student_explanation, req.topic),
                meta=DiagnoseMeta(
                    status=PipelineStatus.DEMO,
                    language=req.language,
                    requested_language=req.language,
                    fraction_swap_detected=swap_detected,
                ),
                attempts=[],
            )

        try:
            response, language, stage = self._run_model_path(ctx)
        except AllAttemptsExhausted as e:
            log.warning(
                "diagnose_fallback",
                extra={"trace_id": trace_id, "attempts": len(e.attempts), "error": e.message},
            )
            ctx.attempts.append(PipelineAttempt(self.default_language, PipelineStage.DETERMINISTIC_FALLBACK, True))
            return DiagnosisOutcome(
                response=build_fallback_response(candidates, req.student_explanation, req.topic),
                meta=DiagnoseMeta(
                    status=PipelineStatus.FALLBACK,
                    language=req.language,
                    requested_language=req.language,
                    fraction_swap_detected=swap_detected,
                    model_calls=ctx.model_calls,
                    error=e.message,
                ),
                attempts=ctx.attempts,
            )

        if swap_detected:
            response = apply_heuristic_override(response, heuristic, req, candidates, trace_id=trace_id)

        downgraded = language != req.language
        first_try = stage == PipelineStage.INITIAL and not downgraded
        log.info(
            "diagnose_success",
            extra={"trace_id": trace_id, "language": language, "stage": stage, "model_calls": ctx.model_calls},
        )
        return DiagnosisOutcome(
            response=response,
            meta=DiagnoseMeta(
                status=PipelineStatus.OK if first_try else PipelineStatus.RETRIED,
                language=language,
                requested_language=req.language,
                language_downgraded=downgraded,
                fraction_swap_detected=swap_detected,
                model_calls=ctx.model_calls,
            ),
            attempts=ctx.attempts,
        )

    # =========================
    # States
    # =========================

    def _run_model_path(self, ctx: _RunContext) -> Tuple[DiagnoseResponse, str, str]:
        """요청 언어 → (실패 시) 기본 언어. 둘 다 실패하면 AllAttemptsExhausted"""
        languages = [ctx.req.language]
        if ctx.req.language != self.default_language:
            languages.append(self.default_language)

        for language in languages:
            result = self._attempt_language(ctx, language)
            if result is not None:
                response, stage = result
                if language != ctx.req.language:
                    stage = PipelineStage.LANGUAGE_FALLBACK
                return response, language, stage
            if language != self.default_language:
                log.info(
                    "diagnose_language_fallback",
                    extra={"trace_id": ctx.trace_id, "from": language, "to": self.default_language},
                )

        raise AllAttemptsExhausted(ctx.attempts)

    def _attempt_language(self, ctx: _RunContext, language: str) -> Optional[Tuple[DiagnoseResponse, str]]:
        """한 언어에 대한 initial + repair. 성공 시 (응답, 단계), 실패 시 None"""
        messages = json_messages(
            build_system_prompt(language, ctx.candidate_ids),
            build_user_prompt(ctx.req, ctx.candidates),
        )

        # --- Initial ---
        try:
            doc = self._call(ctx, messages, self.temperature)
        except (ModelCallFailed, MalformedOutput) as e:
            self._record(ctx, language, PipelineStage.INITIAL, error=e.message)
            return None

        try:
            response = self._sanitize_and_validate(doc, ctx.candidate_ids)
            self._record(ctx, language, PipelineStage.INITIAL)
            return response, PipelineStage.INITIAL
        except SchemaViolation as sv:
            self._record(ctx, language, PipelineStage.INITIAL, error=sv.message, violations=sv.violations)
            first_violation = sv

        # --- Repair (1회) ---
        repair_messages = messages + [
            {"role": "assistant", "content": assistant_echo(fix_misconception_ids(doc, ctx.candidate_ids))},
            {
                "role": "user",
                "content": build_repair_prompt(doc, first_violation.violations, ctx.candidate_ids),
            },
        ]
        try:
            repaired = self._call(ctx, repair_messages, self.repair_temperature)
        except (ModelCallFailed, MalformedOutput) as e:
            self._record(ctx, language, PipelineStage.REPAIR, error=e.message)
            return None

        try:
            response = self._sanitize_and_validate(repaired, ctx.candidate_ids)
            self._record(ctx, language, PipelineStage.REPAIR)
            return response, PipelineStage.REPAIR
        except SchemaViolation as sv:
            self._record(ctx, language, PipelineStage.REPAIR, error=sv.message, violations=sv.violations)
            return None

    # =========================
    # Helpers
    # =========================

    def _call(self, ctx: _RunContext, messages: List[Dict[str, str]], temperature: float) -> Dict[str, Any]:
        ctx.model_calls += 1
        return self.invoker.invoke(
            messages,
            temperature=temperature,
            max_tokens=self.max_tokens,
            trace_id=ctx.trace_id,
            timeout_s=self.timeout_s,
        )

    @staticmethod
    def _sanitize_and_validate(doc: Any, candidate_ids: List[str]) -> DiagnoseResponse:
        fixed = fix_misconception_ids(doc, candidate_ids)
        model, violations = validate_diagnosis(fixed)
        if model is None:
            raise SchemaViolation(violations)
        return model

    @staticmethod
    def _record(
        ctx: _RunContext,
        language: str,
        stage: str,
        *,
        error: Optional[str] = None,
        violations: Optional[List[Violation]] = None,
    ) -> None:
        ctx.attempts.append(
            PipelineAttempt(language, stage, ok=error is None, error=error, violations=list(violations or []))
        )
        if error is not None:
            log.warning(
                "diagnose_attempt_failed",
                extra={
                    "trace_id": ctx.trace_id,
                    "language": language,
                    "stage": stage,
                    "error": error,
                    "violations": [str(v) for v in (violations or [])][:10],
                },
            )
