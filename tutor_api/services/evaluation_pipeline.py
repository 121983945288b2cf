# tutor_api/services/evaluation_pipeline.py
"""
답안 채점 파이프라인

  정확 일치 → 리뷰 에러 휴리스틱 → (DEMO_MODE) 데모 응답 → 모델 1회 호출
                                                       └─ 실패 → 문자열 비교 폴백

진단 파이프라인과 달리 repair/언어 폴백 체인은 없다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tutor_api.core.constants import ErrorClasses, PipelineStatus
from tutor_api.core.exceptions import MalformedOutput, ModelCallFailed
from tutor_api.core.settings import settings
from tutor_api.prompts.evaluate_prompt import build_system_prompt, build_user_prompt
from tutor_api.schemas.evaluate import EvaluateMeta, EvaluateModelOutput, EvaluateRequest, EvaluateResponse
from tutor_api.services.coach_notes import generate_coach_notes
from tutor_api.services.llm_client import json_messages
from tutor_api.services.review_errors import detect_review_error, is_exact_match
from tutor_api.services.validators import validate_with_model

log = logging.getLogger("service.evaluation")

CORRECT_STEPS = ["Your answer is correct!"]
CORRECT_FEEDBACK = "Great job! You got it right."
FALLBACK_STEPS_CORRECT = ["Your answer matches the expected answer."]
FALLBACK_STEPS_WRONG = ["Unable to generate solution steps"]
FALLBACK_FEEDBACK = "Please review your answer."

# (키워드들, 풀이 단계, 피드백). 위에서부터 첫 매칭
_DEMO_SOLUTIONS = [
    (
        ("fraction", "/"),
        [
            "Step 1: Identify the fractions in the problem.",
            "Step 2: Find a common denominator if needed.",
            "Step 3: Perform the operation on the numerators.",
            "Step 4: Simplify the result if possible.",
        ],
        "Remember to find a common denominator before adding or subtracting fractions!",
    ),
    (
        ("negative", "-"),
        [
            "Step 1: Identify all negative numbers in the problem.",
            "Step 2: Apply the rules for operations with negatives.",
            "Step 3: Remember: negative × negative = positive.",
        ],
        "Watch your signs! Operations with negatives follow specific rules.",
    ),
    (
        ("solve", "x"),
        [
            "Step 1: Identify what operation is being done to x.",
            "Step 2: Use the inverse operation on both sides.",
            "Step 3: Isolate x by performing the same operation on both sides.",
        ],
        "Remember: whatever you do to one side, do to the other!",
    ),
]
_DEMO_GENERIC = (
    [
        "Step 1: Read the problem carefully.",
        "Step 2: Identify the operation needed.",
        "Step 3: Apply the correct mathematical rules.",
    ],
    "Not quite right, but keep practicing! Review the steps above.",
)


@dataclass
class EvaluationOutcome:
    response: EvaluateResponse
    meta: EvaluateMeta

    def to_payload(self) -> Dict[str, Any]:
        return {**self.response.model_dump(), "_meta": self.meta.model_dump(exclude_none=True)}


def _demo_solution(question_prompt: str):
    lower = (question_prompt or "").lower()
    for keywords, steps, feedback in _DEMO_SOLUTIONS:
        if any(k in lower for k in keywords):
            return list(steps), feedback
    return list(_DEMO_GENERIC[0]), _DEMO_GENERIC[1]


class EvaluationPipeline:
    def __init__(
        self,
        invoker,
        *,
        demo_mode: Optional[bool] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout_s: Optional[float] = None,
        model: Optional[str] = None,
    ):
        self.invoker = invoker
        self.demo_mode = settings.DEMO_MODE if demo_mode is None else demo_mode
        self.temperature = settings.EVALUATE_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.EVALUATE_MAX_TOKENS
        self.timeout_s = timeout_s if timeout_s is not None else settings.LLM_TIMEOUT_S
        # 비어 있으면 provider 기본 모델
        self.model = model or settings.OPENAI_MODEL_EVALUATE

    def run(self, req: EvaluateRequest, *, trace_id: Optional[str] = None) -> EvaluationOutcome:
        # 1) 정확 일치
        if is_exact_match(req.student_answer, req.correct_answer):
            return self._outcome(
                req,
                PipelineStatus.OK,
                is_correct=True,
                solution_steps=list(CORRECT_STEPS),
                short_feedback=CORRECT_FEEDBACK,
                error_class=ErrorClasses.CORRECT,
            )

        # 2) 리뷰 에러 (정답 노출 금지, 풀이도 보여주지 않음)
        slip = detect_review_error(req.student_answer, req.correct_answer)
        if slip:
            log.info("review_error_detected", extra={"trace_id": trace_id, "type": slip.type})
            return self._outcome(
                req,
                PipelineStatus.HEURISTIC,
                is_correct=False,
                solution_steps=[],
                short_feedback=slip.message,
                error_class=ErrorClasses.REVIEW_ERROR,
                review_error_type=slip.type,
                review_error_message=slip.message,
            )

        # 3) 데모
        if self.demo_mode:
            steps, feedback = _demo_solution(req.question_prompt)
            return self._outcome(
                req,
                PipelineStatus.DEMO,
                is_correct=False,
                solution_steps=steps,
                short_feedback=feedback,
                error_class=ErrorClasses.MISCONCEPTION_ERROR,
            )

        # 4) 모델 1회
        try:
            doc = self.invoker.invoke(
                json_messages(build_system_prompt(req.language), build_user_prompt(req)),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                trace_id=trace_id,
                timeout_s=self.timeout_s,
                model=self.model,
            )
        except (ModelCallFailed, MalformedOutput) as e:
            return self._fallback(req, trace_id, e.message)

        parsed, violations = validate_with_model(EvaluateModelOutput, doc)
        if parsed is None:
            return self._fallback(req, trace_id, "; ".join(str(v) for v in violations))

        return self._outcome(
            req,
            PipelineStatus.OK,
            is_correct=parsed.is_correct,
            solution_steps=parsed.solution_steps or list(FALLBACK_STEPS_WRONG),
            short_feedback=parsed.short_feedback or FALLBACK_FEEDBACK,
            error_class=ErrorClasses.CORRECT if parsed.is_correct else ErrorClasses.MISCONCEPTION_ERROR,
            model_calls=1,
        )

    def _fallback(self, req: EvaluateRequest, trace_id: Optional[str], error: str) -> EvaluationOutcome:
        """모델 실패 시 문자열 동등성만으로 판정 (정확 일치는 이미 걸러졌으므로 사실상 오답)"""
        log.warning("evaluate_fallback", extra={"trace_id": trace_id, "error": error})
        correct = is_exact_match(req.student_answer, req.correct_answer)
        return self._outcome(
            req,
            PipelineStatus.FALLBACK,
            is_correct=correct,
            solution_steps=list(FALLBACK_STEPS_CORRECT if correct else FALLBACK_STEPS_WRONG),
            short_feedback=CORRECT_FEEDBACK if correct else FALLBACK_FEEDBACK,
            error_class=ErrorClasses.CORRECT if correct else ErrorClasses.MISCONCEPTION_ERROR,
            model_calls=1,
            error=error,
        )

    @staticmethod
    def _outcome(
        req: EvaluateRequest,
        status: str,
        *,
        is_correct: bool,
        solution_steps: List[str],
        short_feedback: str,
        error_class: str,
        review_error_type: Optional[str] = None,
        review_error_message: Optional[str] = None,
        model_calls: int = 0,
        error: Optional[str] = None,
    ) -> EvaluationOutcome:
        notes = generate_coach_notes(
            req.student_explanation,
            is_correct,
            error_class,
            review_error_type,
            req.thinking_log,
        )
        return EvaluationOutcome(
            response=EvaluateResponse(
                is_correct=is_correct,
                solution_steps=solution_steps,
                short_feedback=short_feedback,
                error_class=error_class,
                review_error_type=review_error_type,
                review_error_message=review_error_message,
                coach_notes=notes,
            ),
            meta=EvaluateMeta(status=status, language=req.language, model_calls=model_calls, error=error),
        )
