# tutor_api/services/llm_client.py
from __future__ import annotations
import json, re, logging
from typing import Any, Callable, Dict, List, Optional

from tutor_api.core import openai_config
from tutor_api.core.exceptions import MalformedOutput, ModelCallFailed

log = logging.getLogger("service.llm_client")

# ``` 또는 ```json 펜스 제거
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.I | re.M)

# 트레일링 콤마 제거( }, ] 직전 )
_RE_TRAILING_COMMA = re.compile(r",\s*([}\]])")

# 개행(\n), 캐리지리턴(\r), 탭(\t) 포함 모든 제어문자 → 공백
CONTROL_CHARS_RE = re.compile(r'[\x00-\x1F]')

ChatFn = Callable[..., str]


def _strip_code_fences(txt: str) -> str:
    return _FENCE_RE.sub("", txt or "").strip()


def _extract_outer_json_block(s: str) -> str:
    """
    - 문자열이 곧바로 JSON이면 그대로 반환
    - 아니면 첫 '{'부터 마지막 '}'까지를 잘라낸다. 둘 다 없으면 에러.
    """
    s = s.strip()
    try:
        json.loads(s)
        return s
    except (ValueError, RecursionError):
        pass

    start = s.find("{")
    end = s.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in model response.")
    return s[start : end + 1]


def _preclean_jsonish(raw: str) -> str:
    """
    JSON 모드에서도 간혹 섞여 들어오는 포맷 잡음 정리:
      1) 제어문자 제거
      2) 코드펜스 제거
      3) 트레일링 콤마 제거
      4) 가장 바깥 { ... } 블록 추출
    """
    s = CONTROL_CHARS_RE.sub(" ", raw or "")
    s = _strip_code_fences(s)
    s = _RE_TRAILING_COMMA.sub(r"\1", s)
    return _extract_outer_json_block(s)


def parse_json_document(text: str) -> Dict[str, Any]:
    """
    모델 원문 → 타입 없는 dict 문서. 실패 시 ValueError.
    (필드 존재 여부는 여기서 보장하지 않는다. 스키마 검증은 validators 담당)
    """
    try:
        data = json.loads(_preclean_jsonish(text))
    except RecursionError as e:
        # 과도하게 중첩된 배열/객체는 디코더 재귀 한도를 넘는다
        raise ValueError("JSON nesting too deep") from e
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def json_messages(system: str, user: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


class ModelInvoker:
    """
    외부 LLM 1회 호출 + JSON 파싱.
    - 전송 오류/타임아웃/빈 응답 → ModelCallFailed
    - JSON 파싱 실패 → MalformedOutput
    이 레이어에서는 재시도하지 않는다 (재시도 횟수는 파이프라인이 관리).
    """

    def __init__(self, chat_fn: Optional[ChatFn] = None, provider: Optional[str] = None):
        self._chat_fn = chat_fn or openai_config.chat_completion
        self.provider = provider or openai_config.provider_name()

    def invoke(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        trace_id: Optional[str] = None,
        timeout_s: Optional[float] = None,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            text = self._chat_fn(
                messages,
                trace_id=trace_id,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout_s=timeout_s,
                json_mode=True,
                model=model,
            )
        except Exception as e:
            log.warning(
                "llm_call_failed",
                extra={"trace_id": trace_id, "provider": self.provider, "error": f"{type(e).__name__}: {e}"},
            )
            raise ModelCallFailed(self.provider, original_error=e) from e

        if not (text or "").strip():
            log.warning("llm_empty_response", extra={"trace_id": trace_id, "provider": self.provider})
            raise ModelCallFailed(self.provider, original_error=ValueError("empty response"))

        try:
            return parse_json_document(text)
        except ValueError as e:
            log.warning(
                "llm_malformed_output",
                extra={"trace_id": trace_id, "provider": self.provider, "preview": text[:200]},
            )
            raise MalformedOutput(self.provider, raw_text=text, original_error=e) from e


_default_invoker: Optional[ModelInvoker] = None


def get_model_invoker() -> ModelInvoker:
    """FastAPI 의존성: 기본 인보커 (테스트에서는 dependency_overrides로 교체)"""
    global _default_invoker
    if _default_invoker is None:
        _default_invoker = ModelInvoker()
    return _default_invoker
