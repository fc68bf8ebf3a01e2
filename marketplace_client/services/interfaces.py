"""외부 협력자 인터페이스 (Protocol)

오케스트레이터는 구현체가 아닌 이 계약에만 의존합니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Mapping, Optional, Protocol, Sequence

from marketplace_client.schemas.catalog_schema import (
    FavoriteReference,
    Identifiable,
    MarketplaceDocument,
    Node,
)

if TYPE_CHECKING:
    from marketplace_client.engine.progress import ProgressMonitor


class CatalogTransport(Protocol):
    """카탈로그 전송 계층

    구현체가 지켜야 할 오류 규칙:
    - HTTP 404 → ResourceNotFoundException
    - 그 밖의 I/O 실패 → TransportException
    """

    def fetch(self, url: str, monitor: Optional[ProgressMonitor] = None) -> MarketplaceDocument:
        """절대 URL을 요청하고 파싱된 카탈로그 문서를 반환"""
        ...

    def stream(self, url: str, monitor: Optional[ProgressMonitor] = None) -> Iterator[bytes]:
        """응답 본문을 바이트 청크로 반환 (fire-and-forget 알림용)"""
        ...

    def post_form(self, url: str, fields: Sequence[tuple[str, str]]) -> None:
        """form-url-encoded POST"""
        ...


class UserFavoritesService(Protocol):
    """사용자 즐겨찾기 제공자

    모든 메서드는 NotAuthorizedException 또는 일반 예외를 던질 수 있습니다.
    """

    def get_favorites(self, monitor: Optional[ProgressMonitor] = None) -> list[FavoriteReference]:
        """현재 사용자의 즐겨찾기 참조 목록"""
        ...

    def get_favorites_by_uri(self, uri: str, monitor: Optional[ProgressMonitor] = None) -> list[FavoriteReference]:
        """즐겨찾기 URI(다른 사용자/공유 목록)의 참조 목록"""
        ...

    def get_favorite_ids(self, monitor: Optional[ProgressMonitor] = None) -> set[str]:
        """현재 사용자의 즐겨찾기 node id 집합"""
        ...


class NodeLookup(Protocol):
    """단일 노드 조회 - 즐겨찾기 해석 시 캐시 인지 서비스를 주입하는 지점"""

    def get_node(self, node: Identifiable, monitor: Optional[ProgressMonitor] = None) -> Node:
        ...


class MetadataProvider(Protocol):
    """모든 요청에 query parameter로 붙는 메타 파라미터 제공자"""

    def get_meta_parameters(self) -> Mapping[str, Optional[str]]:
        ...
