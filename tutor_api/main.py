# tutor_api/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

import logging
import time

from tutor_api.core.settings import settings, validate_required_settings
from tutor_api.core.logging import configure_logging
from tutor_api.middleware.error_handler import setup_exception_handlers
from tutor_api.middleware.request_context import RequestContextMiddleware

from tutor_api.routes.diagnose import router as diagnose_router
from tutor_api.routes.evaluate import router as evaluate_router
from tutor_api.routes.debug import router as debug_router

# ---------- 앱 초기화 ----------
configure_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.SERVICE_NAME, version="1.0.0")

access_logger = logging.getLogger("access")

_missing = validate_required_settings()
if _missing:
    # 기동은 하되, 모델 호출은 실패 → 결정론적 폴백으로 응답하게 됨
    logging.getLogger("startup").warning("missing_llm_settings", extra={"missing": _missing})


# ---------- 미들웨어 ----------
@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response | None = None
    try:
        response = await call_next(request)
        return response
    finally:
        access_logger.info(
            "request_done",
            extra={
                "trace_id": getattr(request.state, "trace_id", None),
                "method": request.method,
                "path": request.url.path,
                "status": getattr(response, "status_code", None),
                "latency_ms": int((time.perf_counter() - start) * 1000),
            },
        )


# 나중에 등록한 미들웨어가 바깥쪽 → trace_id 는 access log 보다 먼저 세팅됨
app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
    max_age=600,
)

# ---------- 예외 핸들러 ----------
setup_exception_handlers(app)

# ---------- 라우터 등록 ----------
app.include_router(diagnose_router)
app.include_router(evaluate_router)
app.include_router(debug_router)


# ---------- 헬스 체크 ----------
@app.get("/api/health")
def health_check():
    return {
        "message": "OK",
        "service": settings.SERVICE_NAME,
        "env": settings.ENV,
        "demo_mode": settings.DEMO_MODE,
    }
