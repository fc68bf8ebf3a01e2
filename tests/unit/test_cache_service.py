"""Redis 캐시 서비스 유닛 테스트 (Mock / 더미 클라이언트 사용)"""
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from marketplace_client.core.config import Settings
from marketplace_client.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)
from marketplace_client.schemas.catalog_schema import Category, Ius, Market, Node
from marketplace_client.services.impl.cache_service import CacheService


class TestCacheServiceInit:
    """Redis 연결"""

    @patch("marketplace_client.services.impl.cache_service.Redis")
    def test_init_success(self, mock_redis):
        """redis_url로 연결 후 ping"""
        mock_redis.from_url.return_value.ping.return_value = True

        service = CacheService(Settings(redis_url="redis://cache.test:6379/1"))

        assert service.redis_client is mock_redis.from_url.return_value
        assert mock_redis.from_url.call_args.args[0] == "redis://cache.test:6379/1"
        assert mock_redis.from_url.call_args.kwargs["decode_responses"] is True
        mock_redis.from_url.return_value.ping.assert_called_once()

    @patch("marketplace_client.services.impl.cache_service.Redis")
    def test_init_failure(self, mock_redis):
        """Redis 연결 실패"""
        mock_redis.from_url.return_value.ping.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(CacheConnectionException):
            CacheService()

    def test_injected_client(self, fake_redis):
        service = CacheService(Settings(), redis_client=fake_redis)
        assert service.redis_client is fake_redis


class TestCacheService:
    """캐시 조회/저장"""

    def test_get_cache_miss(self, cache_service):
        """캐시 미스"""
        assert cache_service.get("node:id:1", Node) is None
        assert cache_service.get_stats()["misses"] == 1

    def test_node_round_trip(self, cache_service, fake_redis):
        """Node 저장 후 히트 (wire alias 포함)"""
        node = Node(id="1", name="Mylyn", short_description="Tasks", ius=Ius(iu_elements=["a.feature.group"]))

        assert cache_service.set("node:id:1", node) is True
        cached = cache_service.get("node:id:1", Node)

        assert cached == node
        assert cached.is_installable
        assert '"shortdescription"' in fake_redis.store["marketplace:node:id:1"]
        assert cache_service.get_stats()["hits"] == 1

    def test_market_list_round_trip(self, cache_service):
        markets = [Market(id="31", categories=[Category(id="38")]), Market(id="32")]
        cache_service.set("markets", markets, list[Market])
        cached = cache_service.get("markets", list[Market])
        assert [m.id for m in cached] == ["31", "32"]
        assert cached[0].categories[0].id == "38"

    def test_set_uses_ttl(self, cache_service, fake_redis):
        """기본 TTL은 설정값, 호출별 TTL 지정 가능"""
        cache_service.set("a", Node(id="a"))
        cache_service.set("b", Node(id="b"), ttl=5)
        assert fake_redis.ttls["marketplace:a"] == 600
        assert fake_redis.ttls["marketplace:b"] == 5

    def test_key_prefix(self, fake_redis):
        service = CacheService(Settings(cache_key_prefix="mp-test:"), redis_client=fake_redis)
        service.set("node:id:1", Node(id="1"))
        assert list(fake_redis.store) == ["mp-test:node:id:1"]

    def test_none_is_not_stored(self, cache_service, fake_redis):
        assert cache_service.set("node:id:1", None) is False
        assert fake_redis.store == {}

    def test_corrupted_value(self, cache_service, fake_redis):
        """저장 값이 타입과 맞지 않으면 역직렬화 예외"""
        fake_redis.store["marketplace:node:id:1"] = "{not json"
        with pytest.raises(CacheSerializationException):
            cache_service.get("node:id:1", Node)

    def test_read_error(self, cache_service, fake_redis):
        fake_redis.error = RedisConnectionError("gone")
        with pytest.raises(CacheConnectionException):
            cache_service.get("node:id:1", Node)

    def test_write_error(self, cache_service, fake_redis):
        fake_redis.error = RedisConnectionError("gone")
        with pytest.raises(CacheConnectionException):
            cache_service.set("node:id:1", Node(id="1"))

    def test_delete_and_clear(self, cache_service, fake_redis):
        """clear는 이 접두사의 키만 삭제"""
        fake_redis.store["other:key"] = "x"
        cache_service.set("a", Node(id="a"))
        cache_service.set("b", Node(id="b"))

        assert cache_service.delete("a") is True
        assert cache_service.delete("a") is False
        assert cache_service.clear() == 1
        assert list(fake_redis.store) == ["other:key"]

    def test_hit_rate(self, cache_service):
        cache_service.set("a", Node(id="a"))
        cache_service.get("a", Node)
        cache_service.get("missing", Node)
        assert cache_service.get_stats()["hit_rate"] == pytest.approx(0.5)

    def test_setex_called_with_json(self):
        client = MagicMock()
        service = CacheService(Settings(cache_ttl=60), redis_client=client)
        service.set("node:id:1", Node(id="1"))
        key, ttl, payload = client.setex.call_args.args
        assert (key, ttl) == ("marketplace:node:id:1", 60)
        assert b'"id":"1"' in payload
