"""Caching Marketplace Service - 조회 캐시 래퍼

MarketplaceService를 감싸서 마켓 목록, 마켓, 카테고리, 노드 조회 결과를
캐시합니다. 그 밖의 호출(검색, 큐레이션 목록, 즐겨찾기, 리포트)은 그대로
위임합니다. 캐시 장애는 조회 실패로 이어지지 않습니다 (로깅 후 원본 조회).
"""

from typing import Any, Optional

from marketplace_client.core.exceptions import CacheException, CancelledException
from marketplace_client.core.logging import logger
from marketplace_client.engine import resolver
from marketplace_client.engine.orchestrator import MarketplaceService
from marketplace_client.engine.progress import ProgressMonitor
from marketplace_client.schemas.catalog_schema import Category, Identifiable, Market, Node
from marketplace_client.utils.hash_utils import generate_cache_key

from .cache_service import CacheService
from .http_transport import HttpCatalogTransport


class CachingMarketplaceService:
    """캐시 인지 MarketplaceService 래퍼

    즐겨찾기 해석처럼 같은 노드를 반복 조회하는 경로에서 중복 네트워크
    요청을 줄입니다. 위임 대상의 `node_lookup`으로 주입해 사용합니다.
    """

    def __init__(self, delegate: MarketplaceService, cache_service: Optional[CacheService] = None):
        """
        Args:
            delegate: 실제 요청을 수행하는 서비스
            cache_service: 캐시 저장소 (없으면 delegate 설정으로 생성)
        """
        if delegate is None:
            raise ValueError("delegate must not be None")
        self.delegate = delegate
        self.cache = cache_service if cache_service is not None else CacheService(delegate.settings)

    def __getattr__(self, name: str):
        # 캐시 대상이 아닌 호출은 그대로 위임
        return getattr(self.delegate, name)

    def _key(self, kind: str, identifier: str) -> str:
        return generate_cache_key(kind, identifier, self.delegate.base_url)

    def _cache_get(self, key: Optional[str], value_type: Any) -> Optional[Any]:
        if key is None:
            return None
        try:
            return self.cache.get(key, value_type)
        except CacheException as e:
            logger.warning(f"Cache get failed, falling back to request: {e}")
            return None

    def _cache_set(self, key: str, value: Any, value_type: Any = None) -> None:
        try:
            self.cache.set(key, value, value_type)
        except CacheException as e:
            logger.warning(f"Cache set failed: {e}")

    def list_markets(self, monitor: Optional[ProgressMonitor] = None) -> list[Market]:
        key = self._key("markets", "")
        cached = self._cache_get(key, list[Market])
        if cached is not None:
            return cached
        markets = self.delegate.list_markets(monitor)
        self._cache_set(key, markets, list[Market])
        return markets

    def get_market(self, market: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Market:
        resolver.validate_market_query(market)
        key = self._cache_key_for("market", market)
        cached = self._cache_get(key, Market)
        if cached is not None:
            return cached
        resolved = resolver.match_market(self.list_markets(monitor), market)
        self._store("market", resolved, key)
        return resolved

    def get_category(self, category: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Category:
        key = self._cache_key_for("category", category)
        cached = self._cache_get(key, Category)
        if cached is not None:
            return cached

        if category is not None and category.id is not None and category.url is None:
            # id만 있으면 캐시된 마켓 목록에서 요약본을 찾고 url로 상세 조회
            progress = ProgressMonitor.convert(monitor, 200, "get_category")
            markets = self.list_markets(progress.new_child(50))
            if progress.is_cancelled():
                raise CancelledException("get_category")
            summary = resolver.category_summary(markets, category)
            resolved = self.get_category(summary, progress.new_child(150))
        else:
            resolved = self.delegate.get_category(category, monitor)
        self._store("category", resolved, key)
        return resolved

    def get_node(self, node: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Node:
        key = self._cache_key_for("node", node)
        cached = self._cache_get(key, Node)
        if cached is not None:
            logger.debug(f"Node served from cache: id={node.id}")
            return cached
        resolved = self.delegate.get_node(node, monitor)
        self._store("node", resolved, key)
        return resolved

    def _cache_key_for(self, kind: str, entity: Optional[Identifiable]) -> Optional[str]:
        """id가 있으면 id 키, 없으면 url 키 (조회 규칙과 같은 우선순위)"""
        if entity is None:
            return None
        if entity.id is not None:
            return self._key(f"{kind}:id", entity.id)
        if entity.url is not None:
            return self._key(f"{kind}:url", entity.url)
        return None

    def _store(self, kind: str, entity: Identifiable, requested_key: Optional[str] = None) -> None:
        """요청 키와 결과의 id/url 키 모두에 저장"""
        # 즐겨찾기 플래그는 요청마다 달라지므로 캐시 값에는 싣지 않음
        if isinstance(entity, Node):
            entity = entity.with_favorite(None)
        keys = {requested_key}
        if entity.id is not None:
            keys.add(self._key(f"{kind}:id", entity.id))
        if entity.url is not None:
            keys.add(self._key(f"{kind}:url", entity.url))
        for key in keys - {None}:
            self._cache_set(key, entity)


def build_marketplace_service(
    transport=None,
    favorites_service=None,
    base_url: Optional[str] = None,
    cache_service: Optional[CacheService] = None,
    metadata_provider=None,
    settings=None,
) -> CachingMarketplaceService:
    """캐시 래퍼가 연결된 서비스 생성

    래퍼를 위임 대상의 `node_lookup`으로 설정해서 즐겨찾기 해석이 캐시를
    거치도록 합니다.

    Raises:
        CacheConnectionException: cache_service 없이 호출했고 Redis 연결 실패
    """
    if transport is None:
        transport = HttpCatalogTransport(settings=settings)
    service = MarketplaceService(
        transport=transport,
        base_url=base_url,
        favorites_service=favorites_service,
        metadata_provider=metadata_provider,
        settings=settings,
    )
    caching = CachingMarketplaceService(service, cache_service)
    service.node_lookup = caching
    return caching
