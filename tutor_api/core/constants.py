"""
상수 정의 모듈
매직 스트링을 상수로 관리하여 유지보수성 향상
"""


class ErrorCodes:
    """에러 코드"""
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NO_VALID_CANDIDATES = "NO_VALID_CANDIDATES"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    MODEL_CALL_FAILED = "MODEL_CALL_FAILED"
    MALFORMED_OUTPUT = "MALFORMED_OUTPUT"
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"
    ALL_ATTEMPTS_EXHAUSTED = "ALL_ATTEMPTS_EXHAUSTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorMessages:
    """사용자 친화적 에러 메시지"""
    INVALID_INPUT = "입력값이 올바르지 않습니다."
    MISSING_FIELDS = "필수 입력값이 누락되었습니다."
    NO_VALID_CANDIDATES = "No valid misconceptions found for the given IDs"
    MODEL_CALL_FAILED = "LLM 호출에 실패했습니다."
    MALFORMED_OUTPUT = "LLM 응답을 JSON으로 해석할 수 없습니다."
    INTERNAL_ERROR = "서버 오류가 발생했습니다. 관리자에게 문의하세요."


class LanguageCodes:
    """AI 출력 언어 코드"""
    EN = "en"
    HI_LATN = "hi_latn"
    ES = "es"
    FR = "fr"
    ZH_HANS = "zh_hans"

    ALL = [EN, HI_LATN, ES, FR, ZH_HANS]


class PipelineStatus:
    """_meta.status 값"""
    OK = "ok"
    RETRIED = "retried"
    FALLBACK = "fallback"
    DEMO = "demo"
    HEURISTIC = "heuristic"


class PipelineStage:
    """진단 파이프라인 단계 (Initial → Repair → LanguageFallback → DeterministicFallback)"""
    INITIAL = "initial"
    REPAIR = "repair"
    LANGUAGE_FALLBACK = "language_fallback"
    DETERMINISTIC_FALLBACK = "deterministic_fallback"


class DiagnosisLimits:
    """진단 응답 스키마 제약"""
    TOP_N = 3
    KEY_TAKEAWAY_MAX_CHARS = 100
    EVIDENCE_NONE = "none provided"
    HEURISTIC_CONFIDENCE = 0.95
    FALLBACK_CONFIDENCES = (0.5, 0.3, 0.2)
    DEMO_CONFIDENCES = (0.75, 0.18, 0.07)
    PADDING_CONFIDENCE = 0.1
    DEMO_PADDING_CONFIDENCE = 0.05
    GENERIC_ID = "GENERAL"


class ErrorClasses:
    """채점 결과 분류"""
    CORRECT = "correct"
    REVIEW_ERROR = "review_error"
    MISCONCEPTION_ERROR = "misconception_error"


class HTTPHeaders:
    """HTTP 헤더 상수"""
    REQUEST_ID = "X-Request-Id"
