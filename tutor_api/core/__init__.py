"""
Core 모듈
설정, 상수, 예외 등 핵심 컴포넌트
"""
from tutor_api.core.settings import settings, get_settings
from tutor_api.core.constants import (
    ErrorCodes,
    ErrorMessages,
    LanguageCodes,
    PipelineStatus,
    PipelineStage,
    DiagnosisLimits,
    ErrorClasses,
    HTTPHeaders,
)
from tutor_api.core.exceptions import (
    AppException,
    NoValidCandidatesError,
    ExternalServiceError,
    LLMAPIError,
    ModelCallFailed,
    MalformedOutput,
    SchemaViolation,
    AllAttemptsExhausted,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",

    # Constants
    "ErrorCodes",
    "ErrorMessages",
    "LanguageCodes",
    "PipelineStatus",
    "PipelineStage",
    "DiagnosisLimits",
    "ErrorClasses",
    "HTTPHeaders",

    # Exceptions
    "AppException",
    "NoValidCandidatesError",
    "ExternalServiceError",
    "LLMAPIError",
    "ModelCallFailed",
    "MalformedOutput",
    "SchemaViolation",
    "AllAttemptsExhausted",
]
