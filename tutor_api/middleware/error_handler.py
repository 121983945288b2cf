"""
전역 에러 핸들러
모든 오류 응답은 {code, message, trace_id?, ...} 형식
"""
import logging
import traceback
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutor_api.core.constants import ErrorCodes, ErrorMessages
from tutor_api.core.exceptions import AppException
from tutor_api.core.settings import settings

logger = logging.getLogger(__name__)


def _trace_id(request: Request) -> Optional[str]:
    return getattr(request.state, "trace_id", None)


def _error_response(
    request: Request,
    status_code: int,
    content: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    trace_id = _trace_id(request)
    if trace_id:
        content["trace_id"] = trace_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    # loc 예: ("body", "candidate_misconception_ids", 0) → "body -> candidate_misconception_ids -> 0"
    return [
        {"field": " -> ".join(str(p) for p in err["loc"]), "message": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


def setup_exception_handlers(app: FastAPI) -> None:
    """앱에 전역 예외 핸들러 등록"""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        logger.log(
            logging.WARNING if exc.status_code < 500 else logging.ERROR,
            exc.code,
            extra={
                "trace_id": _trace_id(request),
                "error_message": exc.message,
                "status_code": exc.status_code,
                "details": exc.details,
                "path": request.url.path,
            },
        )
        content = exc.to_dict()
        if not settings.DEBUG:
            content.pop("details", None)
        return _error_response(request, exc.status_code, content)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        요청 본문 검증 실패 → 400
        필수 필드 누락은 파이프라인 진입 전 클라이언트 오류로 본다.
        """
        errors = _field_errors(exc)
        logger.warning(
            "validation_error",
            extra={"trace_id": _trace_id(request), "path": request.url.path, "errors": errors},
        )
        return _error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            {"code": ErrorCodes.VALIDATION_FAILED, "message": ErrorMessages.INVALID_INPUT, "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(
            request,
            exc.status_code,
            {"code": f"HTTP_{exc.status_code}", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """처리되지 않은 예외. 상세 정보는 DEBUG 에서만 노출"""
        logger.error(
            "unhandled_exception",
            extra={
                "trace_id": _trace_id(request),
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "path": request.url.path,
            },
            exc_info=True,
        )
        content: Dict[str, Any] = {"code": ErrorCodes.INTERNAL_ERROR, "message": ErrorMessages.INTERNAL_ERROR}
        if settings.DEBUG:
            content["message"] = f"{type(exc).__name__}: {exc}"
            content["stack_trace"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, content)
