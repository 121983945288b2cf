# tutor_api/core/openai_config.py
import logging
from functools import lru_cache

from tutor_api.core.settings import settings

log = logging.getLogger("core.openai")

# 공통 기본값
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 1200


def _norm(s: str | None) -> str:
    return (s or "").strip()


def provider_name() -> str:
    return settings.OPENAI_API_TYPE


# 통일된 시그니처:
# chat_completion(messages, *, trace_id=None, temperature=None, max_tokens=None,
#                 timeout_s=None, json_mode=True, model=None) -> str
# - json_mode: JSON 출력 모드 (OpenAI: response_format, Gemini: response_mime_type)
# - trace_id: OpenAI v1 계열에서는 X-Request-Id 헤더로 전달
# - 클라이언트는 첫 호출 시 생성 (키 없이도 앱 import 가능)

@lru_cache(maxsize=1)
def _openai_client():
    if settings.OPENAI_API_TYPE == "azure":
        from openai import AzureOpenAI

        return AzureOpenAI(
            api_key=_norm(settings.AZURE_OPENAI_KEY),
            api_version=_norm(settings.AZURE_OPENAI_API_VERSION),
            azure_endpoint=_norm(settings.AZURE_OPENAI_ENDPOINT),
        )

    from openai import OpenAI

    return OpenAI(api_key=_norm(settings.OPENAI_API_KEY))


@lru_cache(maxsize=1)
def _gemini_sdk():
    """SDK 전역 설정은 프로세스당 한 번"""
    import google.generativeai as genai

    genai.configure(api_key=_norm(settings.GEMINI_API_KEY))
    return genai


def get_chat_model() -> str:
    if settings.OPENAI_API_TYPE == "azure":
        return _norm(settings.AZURE_OPENAI_DEPLOYMENT_NAME or "gpt-4o-mini")
    if settings.OPENAI_API_TYPE == "gemini":
        return _norm(settings.GEMINI_MODEL_NAME or "gemini-2.5-flash")
    return _norm(settings.OPENAI_MODEL_NAME or "gpt-4o-mini")


def _openai_chat(
    messages: list[dict],
    *,
    model: str,
    trace_id: str | None,
    temperature: float,
    max_tokens: int,
    timeout_s: float | None,
    json_mode: bool,
) -> str:
    client = _openai_client()

    # per-call 옵션 주입
    opts = {}
    if timeout_s is not None:
        opts["timeout"] = timeout_s
    if trace_id:
        opts["extra_headers"] = {"X-Request-Id": trace_id}
    c = client.with_options(**opts) if opts else client

    kwargs = dict(
        model=model,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    resp = c.chat.completions.create(**kwargs)
    return (resp.choices[0].message.content or "").strip() if resp.choices else ""


def _gemini_chat(
    messages: list[dict],
    *,
    model: str,
    trace_id: str | None,
    temperature: float,
    max_tokens: int,
    json_mode: bool,
) -> str:
    genai = _gemini_sdk()

    # system 메시지는 system_instruction으로, assistant 역할은 'model'로 변환
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    gemini_model = genai.GenerativeModel(
        model,
        system_instruction="\n\n".join(system_parts) or None,
    )
    gemini_messages = [
        {"role": "model" if m["role"] == "assistant" else "user", "parts": [m["content"]]}
        for m in messages
        if m["role"] != "system"
    ]

    generation_config = {
        "temperature": temperature,
        "max_output_tokens": max_tokens,
    }
    if json_mode:
        generation_config["response_mime_type"] = "application/json"

    try:
        response = gemini_model.generate_content(gemini_messages, generation_config=generation_config)
        # 우선순위: response.text → candidates 구조
        if hasattr(response, "text") and response.text:
            return response.text.strip()
        if hasattr(response, "candidates") and response.candidates:
            parts = response.candidates[0].content.parts
            if parts and hasattr(parts[0], "text"):
                return (parts[0].text or "").strip()
        raise ValueError("Gemini 응답에서 텍스트를 찾을 수 없습니다.")
    except Exception as e:
        log.warning("gemini_call_failed", extra={"trace_id": trace_id, "error": str(e)})
        raise


def chat_completion(
    messages: list[dict],
    *,
    trace_id: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    timeout_s: float | None = None,
    json_mode: bool = True,
    model: str | None = None,
) -> str:
    temperature = temperature if temperature is not None else DEFAULT_TEMPERATURE
    max_tokens = max_tokens if max_tokens is not None else DEFAULT_MAX_TOKENS
    model = model or get_chat_model()

    if settings.OPENAI_API_TYPE == "gemini":
        # python 라이브러리의 per-request timeout 설정은 버전별로 상이 → 바깥 레이어에서 관리
        return _gemini_chat(
            messages,
            model=model,
            trace_id=trace_id,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
        )

    return _openai_chat(
        messages,
        model=model,
        trace_id=trace_id,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout_s=timeout_s,
        json_mode=json_mode,
    )
