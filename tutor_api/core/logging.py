# tutor_api/core/logging.py
"""
JSON 구조화 로깅

- 한 줄 = 한 이벤트(JSON). msg 는 이벤트 이름(diagnose_attempt_failed 등), 나머지는 extra
- trace_id 는 req_id 로 내보냄. extra 에 없으면 현재 요청 컨텍스트 값 사용
- 모델 원문(raw_text 등)이 extra 로 들어오면 길이 제한
"""
import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# RequestContextMiddleware 가 요청마다 세팅
current_trace_id: ContextVar[Optional[str]] = ContextVar("current_trace_id", default=None)

MAX_FIELD_CHARS = 2000

_SECRET_PATTERNS = (
    re.compile(r"(Authorization:\s*)(Basic|Bearer)\s+[A-Za-z0-9\-\._~\+\/]+=*", re.IGNORECASE),
    re.compile(r"(api[_-]?key[\"'=:\s]+)(sk-[A-Za-z0-9\-_]+|[A-Za-z0-9]{24,})", re.IGNORECASE),
)

# LogRecord 기본 속성 (extra 로 취급하지 않음)
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")


def _scrub(value: str) -> str:
    for pat in _SECRET_PATTERNS:
        value = pat.sub(r"\1***REDACTED***", value)
    if len(value) > MAX_FIELD_CHARS:
        value = value[:MAX_FIELD_CHARS] + f"...(+{len(value) - MAX_FIELD_CHARS})"
    return value


class JsonFormatter(logging.Formatter):
    """
    {"ts": "...Z", "ts_ms": 1698101025678, "level": "INFO", "logger": "service.diagnosis",
     "msg": "diagnose_attempt_failed", "req_id": "...", "language": "hi_latn", "stage": "repair"}
    """

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "ts_ms": int(record.created * 1000),
            "level": record.levelname,
            "logger": record.name,
            "msg": _scrub(record.getMessage()),
        }

        extras = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        trace_id = extras.pop("trace_id", None) or current_trace_id.get()
        if trace_id:
            payload["req_id"] = trace_id
        for k, v in extras.items():
            payload[k] = _scrub(v) if isinstance(v, str) else v

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO") -> None:
    """루트 + uvicorn 로거를 stdout JSON 핸들러 하나로 통일"""
    level = level.upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = False
        lg.addHandler(handler)
        lg.setLevel(level)

    # SDK 내부 요청 로그는 DEBUG 가 아니면 숨김
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level == "DEBUG" else "WARNING")
