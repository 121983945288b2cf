"""
환경 설정 모듈

ENV 환경변수로 환경별 설정 클래스를 고르고, .env 파일 값을 덮어쓴다.
LLM provider 자격증명은 기동을 막지 않는다. 누락 시 모델 호출이 실패하고
진단은 결정론적 폴백으로 응답한다 (validate_required_settings 로 경고만).
"""
import os
from functools import cached_property
from typing import Dict, List, Optional, Tuple, Type

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tutor_api.core.constants import LanguageCodes

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# provider 별 필수 자격증명
REQUIRED_BY_PROVIDER: Dict[str, Tuple[str, ...]] = {
    "azure": ("AZURE_OPENAI_KEY", "AZURE_OPENAI_ENDPOINT"),
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GEMINI_API_KEY",),
}


class BaseConfig(BaseSettings):
    """모든 환경 공통 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ----- 서비스 -----
    SERVICE_NAME: str = "math-tutor-diagnose"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    DEMO_MODE: bool = False

    # 요청 언어가 실패했을 때 내려갈 언어
    DEFAULT_LANGUAGE: str = LanguageCodes.EN

    # ----- LLM provider -----
    OPENAI_API_TYPE: str = "openai"

    AZURE_OPENAI_KEY: Optional[str] = None
    AZURE_OPENAI_ENDPOINT: Optional[str] = None
    AZURE_OPENAI_API_VERSION: str = "2025-01-01-preview"
    AZURE_OPENAI_DEPLOYMENT_NAME: Optional[str] = None

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL_NAME: str = "gpt-4o-mini"
    # 채점 전용 모델 (비우면 OPENAI_MODEL_NAME)
    OPENAI_MODEL_EVALUATE: Optional[str] = None

    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL_NAME: str = "gemini-2.5-flash"

    # ----- 파이프라인 -----
    LLM_TIMEOUT_S: float = Field(default=30.0, gt=0)
    DIAGNOSE_TEMPERATURE: float = Field(default=0.3, ge=0, le=2)
    DIAGNOSE_REPAIR_TEMPERATURE: float = Field(default=0.1, ge=0, le=2)
    DIAGNOSE_MAX_TOKENS: int = Field(default=1200, gt=0)
    EVALUATE_TEMPERATURE: float = Field(default=0.3, ge=0, le=2)
    EVALUATE_MAX_TOKENS: int = Field(default=500, gt=0)

    # 쉼표 구분
    CORS_ORIGINS: str = "http://localhost:3000"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {list(LOG_LEVELS)}")
        return v

    @field_validator("OPENAI_API_TYPE")
    @classmethod
    def validate_api_type(cls, v: str) -> str:
        v = v.lower()
        if v not in REQUIRED_BY_PROVIDER:
            raise ValueError(f"OPENAI_API_TYPE must be one of {sorted(REQUIRED_BY_PROVIDER)}")
        return v

    @field_validator("DEFAULT_LANGUAGE")
    @classmethod
    def validate_default_language(cls, v: str) -> str:
        v = v.lower()
        if v not in LanguageCodes.ALL:
            raise ValueError(f"DEFAULT_LANGUAGE must be one of {LanguageCodes.ALL}")
        return v

    @cached_property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"


class StagingConfig(BaseConfig):
    ENV: str = "staging"


class ProductionConfig(BaseConfig):
    ENV: str = "production"
    LOG_LEVEL: str = "WARNING"


class TestConfig(BaseConfig):
    """테스트: 데모 모드는 끄고 fake invoker 로 모델 경로를 탄다"""
    ENV: str = "test"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    DEMO_MODE: bool = False


_CONFIG_BY_ENV: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "dev": DevelopmentConfig,
    "local": DevelopmentConfig,
    "staging": StagingConfig,
    "stage": StagingConfig,
    "production": ProductionConfig,
    "prod": ProductionConfig,
    "test": TestConfig,
    "testing": TestConfig,
}


def get_settings() -> BaseConfig:
    """ENV 에 맞는 설정 인스턴스 (모르는 값이면 development)"""
    env = os.getenv("ENV", "development").lower()
    return _CONFIG_BY_ENV.get(env, DevelopmentConfig)()


settings = get_settings()


def validate_required_settings(cfg: Optional[BaseConfig] = None) -> List[str]:
    """
    선택된 provider 의 누락 자격증명 목록.
    데모 모드는 모델을 부르지 않으므로 항상 빈 목록.
    """
    cfg = cfg or settings
    if cfg.DEMO_MODE:
        return []
    return [name for name in REQUIRED_BY_PROVIDER[cfg.OPENAI_API_TYPE] if not getattr(cfg, name)]
