"""Marketplace Service - Main Engine Entry Point

카탈로그 조회 파이프라인을 조정합니다:
1. URL 생성 (utils.url_utils)
2. 전송 계층으로 문서 조회 (+ 메타 파라미터)
3. 응답 해석 (engine.resolver)
4. 즐겨찾기의 경우 참조별 2차 조회 및 재정렬 (engine.favorites)

모든 호출은 동기/순차적입니다. 라운드트립 사이마다 취소 여부를 확인합니다.
"""

import warnings
from typing import Iterable, Optional, Sequence

from marketplace_client.core.config import Settings, settings as default_settings
from marketplace_client.core.exceptions import (
    CancelledException,
    FavoritesNotSupportedException,
    InvalidArgumentException,
    ResourceNotFoundException,
    UnsupportedQueryException,
)
from marketplace_client.core.logging import logger, sanitize_for_log
from marketplace_client.schemas.catalog_schema import (
    Category,
    Identifiable,
    InstallStatus,
    Market,
    MarketplaceDocument,
    News,
    Node,
)
from marketplace_client.services.interfaces import (
    CatalogTransport,
    MetadataProvider,
    NodeLookup,
    UserFavoritesService,
)
from marketplace_client.services.metadata import SettingsMetadataProvider
from marketplace_client.utils import url_utils

from . import favorites, resolver
from .progress import ProgressMonitor
from .result import SearchResult


class MarketplaceService:
    """마켓플레이스 카탈로그 서비스

    Usage:
        service = MarketplaceService(transport=HttpCatalogTransport())
        result = service.search(market, None, "WikiText")
        for node in result.nodes:
            ...
    """

    def __init__(
        self,
        transport: CatalogTransport,
        base_url: Optional[str] = None,
        favorites_service: Optional[UserFavoritesService] = None,
        node_lookup: Optional[NodeLookup] = None,
        metadata_provider: Optional[MetadataProvider] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            transport: 카탈로그 전송 계층 (fetch/stream/post_form)
            base_url: 카탈로그 서버 URL (기본값: 설정값)
            favorites_service: 사용자 즐겨찾기 제공자 (없으면 즐겨찾기 기능 비활성)
            node_lookup: 즐겨찾기 해석 시 우선 사용할 노드 조회 서비스 (예: 캐시 래퍼)
            metadata_provider: 요청 메타 파라미터 제공자
            settings: 설정 (기본값: 전역 settings)
        """
        if transport is None:
            raise ValueError("transport must not be None")

        self.settings = settings or default_settings
        self.transport = transport
        self.base_url = base_url or self.settings.base_url
        self.favorites_service = favorites_service
        self.node_lookup = node_lookup
        self.metadata_provider = metadata_provider or SettingsMetadataProvider(self.settings)

    # ------------------------------------------------------------------
    # 요청 처리
    # ------------------------------------------------------------------

    def get_request_meta_parameters(self) -> dict[str, str]:
        return dict(self.metadata_provider.get_meta_parameters() or {})

    def _process_request(self, path: str, monitor: Optional[ProgressMonitor] = None) -> MarketplaceDocument:
        """상대/절대 경로를 요청해 카탈로그 문서를 반환

        Raises:
            CancelledException: 요청 전에 취소된 경우
            ResourceNotFoundException: HTTP 404
            TransportException: 그 밖의 I/O 실패
        """
        if monitor is not None:
            monitor.check_cancelled()
        url = url_utils.resolve_url(self.base_url, path)
        url = url_utils.add_meta_parameters(url, self.get_request_meta_parameters())
        logger.debug(f"Catalog request: {sanitize_for_log(url, 200)}")
        return self.transport.fetch(url, monitor)

    # ------------------------------------------------------------------
    # 마켓 / 카테고리 / 노드
    # ------------------------------------------------------------------

    def list_markets(self, monitor: Optional[ProgressMonitor] = None) -> list[Market]:
        """마켓 + 카테고리 전체 목록"""
        document = self._process_request(self.settings.api_uri_suffix, monitor)
        return list(document.markets)

    def get_market(self, market: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Market:
        """id(우선) 또는 url로 마켓 조회

        Raises:
            InvalidArgumentException: id 없이 url만 있거나 둘 다 없는 경우
            NotFoundException: 일치하는 마켓이 없음
        """
        resolver.validate_market_query(market)
        markets = self.list_markets(monitor)
        return resolver.match_market(markets, market)

    def get_category(self, category: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Category:
        """카테고리 상세 조회

        url 없이 id만 있으면 마켓 목록에서 요약본을 찾은 뒤, 그 요약본의 url로
        상세를 다시 요청합니다 (요약본을 그대로 반환하지 않음).

        Raises:
            InvalidArgumentException: id/url 모두 없음
            NotFoundException: 일치하는 카테고리 없음
            UnexpectedResponseException: 응답에 카테고리가 여러 개
            CancelledException: 마켓 탐색과 상세 요청 사이에 취소됨
        """
        if category is None or (category.id is None and category.url is None):
            raise InvalidArgumentException("category", "either id or url must be set")

        progress = ProgressMonitor.convert(monitor, 200, "get_category")

        if category.id is not None and category.url is None:
            markets = self.list_markets(progress.new_child(50))
            if progress.is_cancelled():
                raise CancelledException("get_category")
            summary = resolver.category_summary(markets, category)
            return self.get_category(summary, progress.new_child(150))

        document = self._process_request(url_utils.api_path(category.url), progress.new_child(200))
        return resolver.single_category(document)

    def get_node(self, node: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Node:
        """노드 상세 조회

        id가 있으면 id 경로를 씁니다 (이름 기반 url은 바뀔 수 있음).

        Raises:
            InvalidArgumentException: id/url 모두 없음
            NotFoundException: 노드 0개
            UnexpectedResponseException: 노드 2개 이상
        """
        if node is None or (node.id is None and node.url is None):
            raise InvalidArgumentException("node", "either id or url must be set")

        if node.id is not None:
            path = url_utils.node_path(node.id)
        else:
            path = url_utils.api_path(node.url)
        document = self._process_request(path, monitor)
        return resolver.single_node(document)

    # ------------------------------------------------------------------
    # 검색 / 분류 탐색
    # ------------------------------------------------------------------

    def compute_relative_search_url(
        self,
        market: Optional[Identifiable],
        category: Optional[Identifiable],
        query_text: Optional[str],
        api: bool = True,
    ) -> Optional[str]:
        return url_utils.compute_relative_search_url(
            market, category, query_text, api=api, suffix=self.settings.api_uri_suffix
        )

    def search(
        self,
        market: Optional[Identifiable],
        category: Optional[Identifiable],
        query_text: Optional[str],
        monitor: Optional[ProgressMonitor] = None,
    ) -> SearchResult:
        """검색어 + 마켓/카테고리 필터 검색

        검색어/마켓/카테고리가 모두 없으면 요청 없이 빈 결과를 반환합니다.

        Raises:
            UnsupportedQueryException: 서버가 검색어를 거부 (404)
        """
        relative_url = self.compute_relative_search_url(market, category, query_text, api=True)
        return self._process_search_request(relative_url, query_text, monitor)

    def tagged(self, tag: str, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """free-tagging 태그 검색"""
        return self._process_search_request(url_utils.free_tagging_path(tag), tag, monitor)

    def _process_search_request(
        self,
        relative_url: Optional[str],
        query_text: Optional[str],
        monitor: Optional[ProgressMonitor],
    ) -> SearchResult:
        if relative_url is None:
            logger.debug("Empty search: no query, market or category")
            return SearchResult.empty()

        try:
            document = self._process_request(relative_url, monitor)
        except ResourceNotFoundException as e:
            logger.info(f"Search string rejected by server: query='{sanitize_for_log(query_text or '')}'")
            raise UnsupportedQueryException(query_text) from e

        return resolver.search_result(document)

    # ------------------------------------------------------------------
    # 큐레이션 목록
    # ------------------------------------------------------------------

    def featured(
        self,
        market: Optional[Identifiable] = None,
        category: Optional[Identifiable] = None,
        monitor: Optional[ProgressMonitor] = None,
    ) -> SearchResult:
        """추천 목록 (마켓/카테고리로 범위 제한 가능)"""
        document = self._process_request(url_utils.featured_path(market, category), monitor)
        return resolver.listing_result(document.featured, "featured")

    def recent(self, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """최근 업데이트 목록"""
        document = self._process_request(url_utils.api_path(url_utils.API_RECENT_URI), monitor)
        return resolver.listing_result(document.recent, "recent")

    def top_favorites(self, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """즐겨찾기 상위 목록"""
        document = self._process_request(url_utils.api_path(url_utils.API_FAVORITES_URI), monitor)
        return resolver.listing_result(document.favorites, "favorites")

    def favorites(self, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """Deprecated: top_favorites() 사용"""
        warnings.warn("favorites() is deprecated, use top_favorites()", DeprecationWarning, stacklevel=2)
        return self.top_favorites(monitor)

    def popular(self, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """인기 목록"""
        document = self._process_request(url_utils.api_path(url_utils.API_POPULAR_URI), monitor)
        return resolver.listing_result(document.popular, "popular")

    def related(
        self,
        based_on: Optional[Iterable[Identifiable]] = None,
        monitor: Optional[ProgressMonitor] = None,
    ) -> SearchResult:
        """기준 노드 목록에 대한 연관 추천"""
        document = self._process_request(url_utils.related_path(based_on), monitor)
        return resolver.listing_result(document.related, "related")

    def news(self, monitor: Optional[ProgressMonitor] = None) -> Optional[News]:
        """뉴스 설정 - 서버가 뉴스 API를 지원하지 않으면(404) None"""
        try:
            document = self._process_request(url_utils.api_path(url_utils.API_NEWS_URI), monitor)
        except ResourceNotFoundException:
            logger.info("News API not supported by this server")
            return None
        return document.news

    # ------------------------------------------------------------------
    # 사용자 즐겨찾기
    # ------------------------------------------------------------------

    def _require_favorites_service(self) -> UserFavoritesService:
        if self.favorites_service is None:
            raise FavoritesNotSupportedException()
        return self.favorites_service

    def _resolve_service(self) -> NodeLookup:
        return self.node_lookup if self.node_lookup is not None else self

    def user_favorites(self, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """현재 사용자의 즐겨찾기 - 설치 불가 노드는 제외

        Raises:
            FavoritesNotSupportedException: 즐겨찾기 제공자 없음
            NotAuthorizedException: 재인증 필요
            RetrievalFailureException: 제공자 오류
        """
        service = self._require_favorites_service()
        progress = ProgressMonitor.convert(monitor, 10000, "user_favorites")
        child = progress.new_child(1000)
        references = favorites.fetch_favorite_references(lambda: service.get_favorites(child))
        progress.set_work_remaining(9000)
        return favorites.resolve_favorite_nodes(
            references,
            self._resolve_service().get_node,
            progress.new_child(9000),
            filter_incompatible=True,
        )

    def user_favorites_by_uri(self, favorites_uri: str, monitor: Optional[ProgressMonitor] = None) -> SearchResult:
        """즐겨찾기 URI의 목록 - 모든 노드를 유지하되 설치 가능 노드를 앞으로

        Raises:
            FavoritesNotSupportedException: 즐겨찾기 제공자 없음
            NotAuthorizedException: 재인증 필요
            RetrievalFailureException: 제공자 오류
        """
        service = self._require_favorites_service()
        progress = ProgressMonitor.convert(monitor, 10000, "user_favorites")
        child = progress.new_child(1000)
        references = favorites.fetch_favorite_references(
            lambda: service.get_favorites_by_uri(favorites_uri, child)
        )
        progress.set_work_remaining(9000)
        return favorites.resolve_favorite_nodes(
            references,
            self._resolve_service().get_node,
            progress.new_child(9000),
            filter_incompatible=False,
        )

    def update_user_favorites(self, nodes: Sequence[Node], monitor: Optional[ProgressMonitor] = None) -> list[Node]:
        """노드 목록의 즐겨찾기 플래그 갱신 (새 Node 목록 반환)

        Raises:
            FavoritesNotSupportedException: 즐겨찾기 제공자 없음
            NotAuthorizedException: 재인증 필요 (exc.nodes에 갱신된 노드)
            RetrievalFailureException: 조회 실패 (exc.nodes에 갱신된 노드)
        """
        service = self._require_favorites_service()
        if not nodes:
            return []
        progress = ProgressMonitor.convert(monitor, 10000, "update_user_favorites")
        return favorites.mark_favorites(nodes, lambda: service.get_favorite_ids(progress))

    # ------------------------------------------------------------------
    # 설치 결과 리포트 (best-effort)
    # ------------------------------------------------------------------

    def report_install_error(
        self,
        status: InstallStatus,
        nodes: Iterable[Identifiable],
        iu_ids_and_versions: Optional[Iterable[str]] = None,
        resolution_details: Optional[str] = None,
        monitor: Optional[ProgressMonitor] = None,
    ) -> None:
        """설치 오류 리포트 - 실패해도 호출 측에 예외를 전파하지 않음"""
        location = url_utils.resolve_url(self.base_url, url_utils.API_INSTALL_ERROR_URI)
        try:
            if monitor is not None:
                monitor.check_cancelled()
            fields: list[tuple[str, str]] = [
                (key, value) for key, value in self.get_request_meta_parameters().items() if key is not None
            ]
            fields.append(("status", str(status.severity)))
            fields.append(("statusMessage", status.message or ""))
            for node in nodes or []:
                if node.id is not None:
                    fields.append(("node", node.id))
            for iu_and_version in iu_ids_and_versions or []:
                fields.append(("iu", iu_and_version))
            fields.append(("detailedMessage", resolution_details or ""))

            self.transport.post_form(location, fields)
            logger.info(f"Install error reported: status={status.severity}")
        except Exception as e:
            logger.warning(f"Install error report failed: {location}: {type(e).__name__}: {e}")

    def report_install_success(self, node: Identifiable, monitor: Optional[ProgressMonitor] = None) -> None:
        """설치 성공 리포트 - 응답 본문은 읽고 버림, 실패는 무시"""
        if node is None or not node.url:
            logger.debug("Install success report skipped: node has no url")
            return
        url = url_utils.success_report_url(node.url)
        url = url_utils.add_meta_parameters(url, self.get_request_meta_parameters())
        try:
            for _ in self.transport.stream(url, monitor):
                pass
        except Exception as e:
            logger.debug(f"Install success report failed: {type(e).__name__}: {e}")
