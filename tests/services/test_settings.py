"""
설정 검증 테스트
"""
import pytest
from pydantic import ValidationError

from tutor_api.core.settings import BaseConfig, validate_required_settings


def _cfg(**overrides):
    return BaseConfig(_env_file=None, **overrides)


def test_missing_credentials_reported_per_provider():
    assert validate_required_settings(_cfg(OPENAI_API_TYPE="openai", OPENAI_API_KEY=None)) == ["OPENAI_API_KEY"]
    assert validate_required_settings(_cfg(OPENAI_API_TYPE="azure", AZURE_OPENAI_KEY="k")) == ["AZURE_OPENAI_ENDPOINT"]
    assert validate_required_settings(_cfg(OPENAI_API_TYPE="gemini", GEMINI_API_KEY="g")) == []


def test_demo_mode_needs_no_credentials():
    assert validate_required_settings(_cfg(DEMO_MODE=True, OPENAI_API_KEY=None)) == []


def test_values_are_normalized():
    cfg = _cfg(LOG_LEVEL="debug", OPENAI_API_TYPE="Gemini", DEFAULT_LANGUAGE="EN", CORS_ORIGINS="a, ,b")
    assert cfg.LOG_LEVEL == "DEBUG"
    assert cfg.OPENAI_API_TYPE == "gemini"
    assert cfg.DEFAULT_LANGUAGE == "en"
    assert cfg.cors_origins_list == ["a", "b"]


@pytest.mark.parametrize(
    "field, value",
    [("LOG_LEVEL", "loud"), ("OPENAI_API_TYPE", "anthropic"), ("DEFAULT_LANGUAGE", "de"), ("LLM_TIMEOUT_S", 0)],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        _cfg(**{field: value})
