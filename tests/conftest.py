"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Stub/Fake 주입 (transport, favorites provider, metadata)
- 노드/마켓 팩토리

금지:
- 실제 카탈로그 서버 호출
"""

from __future__ import annotations

import fnmatch
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from marketplace_client.core.config import Settings  # noqa: E402
from marketplace_client.core.exceptions import ResourceNotFoundException  # noqa: E402
from marketplace_client.engine.orchestrator import MarketplaceService  # noqa: E402
from marketplace_client.services.impl.cache_service import CacheService  # noqa: E402
from marketplace_client.schemas.catalog_schema import (  # noqa: E402
    Category,
    FavoriteReference,
    Ius,
    Market,
    Node,
)


BASE_URL = "http://mp.test"


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["MARKETPLACE_LOG_LEVEL"] = "INFO"


@dataclass
class StubTransport:
    """오케스트레이터 Unit 테스트용 전송 계층

    - routes: 절대 URL → 문서 | 예외 | callable(monitor)
    - 등록되지 않은 URL은 ResourceNotFoundException (404)
    """

    routes: dict[str, Any] = field(default_factory=dict)
    requests: list[str] = field(default_factory=list)
    posts: list[tuple[str, list[tuple[str, str]]]] = field(default_factory=list)
    streamed: list[str] = field(default_factory=list)
    post_error: Optional[BaseException] = None
    stream_error: Optional[BaseException] = None

    def fetch(self, url, monitor=None):
        self.requests.append(url)
        response = self.routes.get(url)
        if response is None:
            raise ResourceNotFoundException(url)
        if callable(response):
            response = response(monitor)
        if isinstance(response, BaseException):
            raise response
        return response

    def stream(self, url, monitor=None):
        self.streamed.append(url)
        if self.stream_error is not None:
            raise self.stream_error
        yield b"ok"

    def post_form(self, url, fields):
        self.posts.append((url, list(fields)))
        if self.post_error is not None:
            raise self.post_error


@dataclass
class StubFavoritesService:
    """즐겨찾기 제공자 더미"""

    references: list[FavoriteReference] = field(default_factory=list)
    favorite_ids: set[str] = field(default_factory=set)
    error: Optional[BaseException] = None
    calls: list[tuple] = field(default_factory=list)

    def get_favorites(self, monitor=None):
        self.calls.append(("get_favorites",))
        if self.error is not None:
            raise self.error
        return list(self.references)

    def get_favorites_by_uri(self, uri, monitor=None):
        self.calls.append(("get_favorites_by_uri", uri))
        if self.error is not None:
            raise self.error
        return list(self.references)

    def get_favorite_ids(self, monitor=None):
        self.calls.append(("get_favorite_ids",))
        if self.error is not None:
            raise self.error
        return set(self.favorite_ids)


@dataclass
class FakeRedisClient:
    """CacheService Unit 테스트용 Redis 더미 (decode_responses=True 동작)

    - error: 설정하면 모든 명령이 이 예외를 던짐
    """

    store: dict[str, str] = field(default_factory=dict)
    ttls: dict[str, int] = field(default_factory=dict)
    error: Optional[BaseException] = None

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    def ping(self) -> bool:
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value.decode("utf-8") if isinstance(value, bytes) else value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        self._check()
        deleted = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                deleted += 1
        return deleted

    def scan_iter(self, match="*"):
        self._check()
        return iter([key for key in list(self.store) if fnmatch.fnmatchcase(key, match)])


class EmptyMetadataProvider:
    """메타 파라미터 없음 - URL 비교를 단순하게"""

    def get_meta_parameters(self) -> dict[str, str]:
        return {}


def url(path: str) -> str:
    """테스트 서버 기준 절대 URL"""
    return f"{BASE_URL}/{path}"


def make_node(node_id: str, installable: bool = True, node_url: Optional[str] = None) -> Node:
    return Node(
        id=node_id,
        url=node_url or f"{BASE_URL}/content/{node_id}",
        name=f"Node {node_id}",
        ius=Ius(iu_elements=[f"org.example.{node_id}.feature.group"]) if installable else None,
    )


def make_markets() -> list[Market]:
    return [
        Market(
            id="31",
            url=f"{BASE_URL}/category/markets/tools",
            name="Tools",
            categories=[
                Category(id="38", url=f"{BASE_URL}/category/categories/editor", name="Editor"),
                Category(id="39", url=f"{BASE_URL}/category/categories/vcs", name="VCS"),
            ],
        ),
        Market(
            id="32",
            url=f"{BASE_URL}/category/markets/runtimes",
            name="Runtimes",
            categories=[
                Category(id="40", url=f"{BASE_URL}/category/categories/jvm", name="JVM"),
            ],
        ),
    ]


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def favorites_service() -> StubFavoritesService:
    return StubFavoritesService()


@pytest.fixture
def service_factory(transport: StubTransport) -> Callable[..., MarketplaceService]:
    """StubTransport를 쓰는 MarketplaceService 생성기"""

    def _make(**kwargs) -> MarketplaceService:
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("metadata_provider", EmptyMetadataProvider())
        return MarketplaceService(transport=transport, **kwargs)

    return _make


@pytest.fixture
def service(service_factory) -> MarketplaceService:
    return service_factory()


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def cache_service(fake_redis: FakeRedisClient) -> CacheService:
    return CacheService(Settings(cache_ttl=600), redis_client=fake_redis)


@pytest.fixture
def node_factory() -> Callable[..., Node]:
    return make_node


@pytest.fixture
def markets() -> list[Market]:
    return make_markets()


@pytest.fixture
def url_for() -> Callable[[str], str]:
    return url
