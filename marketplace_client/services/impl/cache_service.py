"""Redis 캐시 서비스 - 캐싱 로직만 담당

조회 결과(pydantic 모델 또는 모델 목록)를 JSON으로 직렬화해 TTL과 함께
저장합니다. 만료와 메모리 한도에 따른 제거는 Redis가 처리합니다.
"""
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError
from redis import Redis
from redis.exceptions import RedisError

from marketplace_client.core.config import Settings, settings as default_settings
from marketplace_client.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)
from marketplace_client.core.logging import logger


class CacheService:
    """Redis 캐시 관리 서비스"""

    def __init__(self, settings: Optional[Settings] = None, redis_client: Optional[Redis] = None):
        """Redis 클라이언트 초기화

        Args:
            settings: 설정 (기본값: 전역 settings)
            redis_client: 이미 만든 클라이언트 (없으면 redis_url로 생성)

        Raises:
            CacheConnectionException: 연결 실패
        """
        self.settings = settings or default_settings
        self.ttl = self.settings.cache_ttl
        self.key_prefix = self.settings.cache_key_prefix
        self.hits = 0
        self.misses = 0
        self._adapters: dict[Any, TypeAdapter] = {}
        try:
            self.redis_client = redis_client or Redis.from_url(
                self.settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            # 연결 테스트
            self.redis_client.ping()
            logger.info("Redis connection established")
        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheConnectionException(str(e), {"redis_url": self.settings.redis_url}) from e

    def _full_key(self, cache_key: str) -> str:
        return f"{self.key_prefix}:{cache_key}"

    def _adapter(self, value_type: Any) -> TypeAdapter:
        adapter = self._adapters.get(value_type)
        if adapter is None:
            adapter = self._adapters[value_type] = TypeAdapter(value_type)
        return adapter

    def get(self, cache_key: str, value_type: Any) -> Optional[Any]:
        """
        캐시 조회

        Args:
            cache_key: 캐시 키
            value_type: 역직렬화 타입 (예: Node, list[Market])

        Returns:
            저장된 값 또는 None (없거나 만료)

        Raises:
            CacheConnectionException: Redis 명령 실패
            CacheSerializationException: 저장된 값이 타입과 맞지 않음
        """
        full_key = self._full_key(cache_key)
        try:
            cached_data = self.redis_client.get(full_key)
        except RedisError as e:
            logger.error(f"Cache read error: {e}")
            raise CacheConnectionException(str(e), {"key": full_key}) from e

        if cached_data is None:
            self.misses += 1
            logger.debug(f"Cache miss for key: {full_key}")
            return None

        try:
            value = self._adapter(value_type).validate_json(cached_data)
        except ValidationError as e:
            logger.error(f"Failed to deserialize cache: {e}")
            raise CacheSerializationException("read", str(e), {"key": full_key}) from e

        self.hits += 1
        logger.debug(f"Cache hit for key: {full_key}")
        return value

    def set(self, cache_key: str, value: Any, value_type: Any = None, ttl: Optional[int] = None) -> bool:
        """
        캐시 저장

        Args:
            cache_key: 캐시 키
            value: 저장할 값 (None은 저장하지 않음)
            value_type: 직렬화 타입 (기본값: type(value))
            ttl: TTL (초, 기본값: 설정값)

        Returns:
            저장 여부

        Raises:
            CacheConnectionException: Redis 명령 실패
            CacheSerializationException: 직렬화 실패
        """
        if value is None:
            return False
        full_key = self._full_key(cache_key)
        try:
            payload = self._adapter(value_type or type(value)).dump_json(value, by_alias=True)
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to serialize cache data: {e}")
            raise CacheSerializationException("write", str(e), {"key": full_key}) from e

        try:
            self.redis_client.setex(full_key, ttl if ttl is not None else self.ttl, payload)
        except RedisError as e:
            logger.error(f"Cache write error: {e}")
            raise CacheConnectionException(str(e), {"key": full_key}) from e
        logger.debug(f"Cache set for key: {full_key}")
        return True

    def delete(self, cache_key: str) -> bool:
        """캐시 삭제"""
        try:
            return self.redis_client.delete(self._full_key(cache_key)) > 0
        except RedisError as e:
            raise CacheConnectionException(str(e)) from e

    def clear(self) -> int:
        """이 클라이언트 접두사의 캐시 전체 삭제

        Returns:
            삭제한 키 개수
        """
        try:
            keys = list(self.redis_client.scan_iter(match=f"{self.key_prefix}:*"))
            deleted = self.redis_client.delete(*keys) if keys else 0
        except RedisError as e:
            raise CacheConnectionException(str(e)) from e
        logger.info(f"Cache cleared: {deleted} keys")
        return deleted

    def get_stats(self) -> dict:
        """캐시 통계 (이 인스턴스 기준)"""
        total = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": (self.hits / total) if total else 0.0,
        }
