"""설정 관리 - 환경 변수 로드 및 검증"""
import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """클라이언트 설정"""

    model_config = SettingsConfigDict(
        env_prefix="MARKETPLACE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # 카탈로그 서버
    base_url: str = "http://marketplace.eclipse.org"
    # 대부분의 REST URL 끝에 붙는 provisional API 접미사 (검색 URL은 앞에 붙음)
    api_uri_suffix: str = "api/p"

    # HTTP
    http_timeout_s: float = 30.0
    http_user_agent: str = "marketplace-client/1.0"

    # 요청 메타 파라미터 (client / product 식별)
    client_id: str = "marketplace-client"
    client_version: str = "1.0.0"
    product_id: str = ""
    product_version: str = ""

    # 조회 캐시 (CachingMarketplaceService, Redis)
    redis_url: str = "redis://localhost:6379/0"
    cache_key_prefix: str = "marketplace"
    cache_ttl: int = 600  # 10분

    # 로깅
    log_level: str = "INFO"

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @field_validator("api_uri_suffix")
    @classmethod
    def validate_api_uri_suffix(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            raise ValueError("api_uri_suffix must not be empty")
        return v

    @field_validator("http_timeout_s")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_s must be positive")
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must start with redis://, rediss:// or unix://")
        return v

    @field_validator("cache_key_prefix")
    @classmethod
    def validate_cache_key_prefix(cls, v: str) -> str:
        v = v.strip(":")
        if not v:
            raise ValueError("cache_key_prefix must not be empty")
        return v

    @field_validator("cache_ttl")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache_ttl must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


settings = Settings()
