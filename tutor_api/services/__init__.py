"""
서비스 레이어
진단/채점 파이프라인과 그 구성 요소
"""
from tutor_api.services.diagnosis_pipeline import (
    DiagnosisOutcome,
    DiagnosisPipeline,
    PipelineAttempt,
)
from tutor_api.services.evaluation_pipeline import (
    EvaluationOutcome,
    EvaluationPipeline,
)
from tutor_api.services.language_detect import (
    detect_language,
    detect_language_from_response,
    is_target_language_match,
)
from tutor_api.services.llm_client import (
    ModelInvoker,
    get_model_invoker,
)

__all__ = [
    # Diagnose
    "DiagnosisOutcome",
    "DiagnosisPipeline",
    "PipelineAttempt",

    # Evaluate
    "EvaluationOutcome",
    "EvaluationPipeline",

    # Language
    "detect_language",
    "detect_language_from_response",
    "is_target_language_match",

    # LLM
    "ModelInvoker",
    "get_model_invoker",
]
