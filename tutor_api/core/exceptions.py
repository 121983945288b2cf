"""
커스텀 예외 클래스 정의
일관된 에러 처리를 위한 예외 계층 구조

진단 파이프라인 내부 예외(ModelCallFailed, MalformedOutput, SchemaViolation,
AllAttemptsExhausted)는 파이프라인 안에서 흡수되어 폴백으로 이어진다.
호출자에게 그대로 올라가는 것은 NoValidCandidatesError 뿐이다.
"""
from typing import Any, Dict, List, Optional
from fastapi import status

from tutor_api.core.constants import ErrorCodes, ErrorMessages


class AppException(Exception):
    """
    기본 애플리케이션 예외
    모든 커스텀 예외의 베이스 클래스
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """예외를 딕셔너리로 변환"""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class NoValidCandidatesError(AppException):
    """카탈로그에서 유효한 후보 오개념을 하나도 찾지 못함 (재시도 대상 아님)"""

    def __init__(self, topic: str, requested_ids: List[str]):
        super().__init__(
            code=ErrorCodes.NO_VALID_CANDIDATES,
            message=ErrorMessages.NO_VALID_CANDIDATES,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"topic": topic, "requested_ids": list(requested_ids)}
        )


# ===========================================
# 외부 서비스 관련 예외
# ===========================================

class ExternalServiceError(AppException):
    """외부 서비스 호출 실패"""

    def __init__(
        self,
        service: str,
        message: str,
        original_error: Optional[Exception] = None,
        code: str = ErrorCodes.EXTERNAL_SERVICE_ERROR,
    ):
        msg = f"{service} 서비스 오류: {message}"
        details = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            code=code,
            message=msg,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details
        )


class LLMAPIError(ExternalServiceError):
    """LLM API 호출 실패"""

    def __init__(
        self,
        provider: str,
        message: str = "LLM API 요청에 실패했습니다.",
        original_error: Optional[Exception] = None,
        code: str = ErrorCodes.EXTERNAL_SERVICE_ERROR,
    ):
        super().__init__(
            service=f"LLM ({provider})",
            message=message,
            original_error=original_error,
            code=code,
        )


class ModelCallFailed(LLMAPIError):
    """전송 오류 / 타임아웃 / 빈 응답"""

    def __init__(self, provider: str, original_error: Optional[Exception] = None):
        super().__init__(
            provider=provider,
            message=ErrorMessages.MODEL_CALL_FAILED,
            original_error=original_error,
            code=ErrorCodes.MODEL_CALL_FAILED,
        )


class MalformedOutput(LLMAPIError):
    """모델 응답이 JSON 객체로 파싱되지 않음"""

    def __init__(self, provider: str, raw_text: str = "", original_error: Optional[Exception] = None):
        super().__init__(
            provider=provider,
            message=ErrorMessages.MALFORMED_OUTPUT,
            original_error=original_error,
            code=ErrorCodes.MALFORMED_OUTPUT,
        )
        self.details["raw_preview"] = (raw_text or "")[:200]


# ===========================================
# 파이프라인 내부 예외
# ===========================================

class SchemaViolation(AppException):
    """응답 계약 위반. violations 목록은 repair 프롬프트에 그대로 인용된다."""

    def __init__(self, violations: List[Any]):
        self.violations = list(violations)
        super().__init__(
            code=ErrorCodes.SCHEMA_VIOLATION,
            message="; ".join(str(v) for v in self.violations)[:500],
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"violations": [str(v) for v in self.violations]},
        )


class AllAttemptsExhausted(AppException):
    """모델 경로의 모든 시도 실패 → 결정론적 폴백으로 전환"""

    def __init__(self, attempts: List[Any]):
        self.attempts = list(attempts)
        last_error = self.attempts[-1].error if self.attempts else None
        super().__init__(
            code=ErrorCodes.ALL_ATTEMPTS_EXHAUSTED,
            message=last_error or "all model attempts failed",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"attempts": len(self.attempts)},
        )
