# tutor_api/middleware/request_context.py
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from tutor_api.core.constants import HTTPHeaders
from tutor_api.core.logging import current_trace_id

_EXPOSE = "Access-Control-Expose-Headers"


def _expose_request_id(existing: str) -> str:
    names = [h.strip() for h in existing.split(",") if h.strip()]
    if HTTPHeaders.REQUEST_ID.lower() not in (n.lower() for n in names):
        names.append(HTTPHeaders.REQUEST_ID)
    return ", ".join(names)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    X-Request-Id 를 trace_id 로 사용 (없으면 uuid4).
    request.state 와 로깅 컨텍스트에 심어 두고, 진단 파이프라인의 모델 호출 헤더까지 그대로 흘려보낸다.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(HTTPHeaders.REQUEST_ID) or uuid.uuid4().hex
        request.state.trace_id = trace_id
        token = current_trace_id.set(trace_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request.state.elapsed_ms = int((time.perf_counter() - start) * 1000)
            current_trace_id.reset(token)

        response.headers[HTTPHeaders.REQUEST_ID] = trace_id
        response.headers[_EXPOSE] = _expose_request_id(response.headers.get(_EXPOSE, ""))
        return response
