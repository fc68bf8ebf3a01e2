"""Response Resolver - 카탈로그 문서를 결과 타입으로 변환

"정확히 하나" / "payload 존재" 규칙을 검사합니다. 네트워크 호출은 하지 않습니다.
"""

from typing import Optional

from marketplace_client.core.exceptions import (
    InvalidArgumentException,
    NotFoundException,
    UnexpectedResponseException,
)
from marketplace_client.core.logging import logger
from marketplace_client.schemas.catalog_schema import (
    Category,
    Identifiable,
    Market,
    MarketplaceDocument,
    Node,
    NodeListing,
)

from .result import SearchResult


def validate_market_query(market: Identifiable) -> None:
    """마켓 조회 인자 검증

    id가 우선합니다. id 없이 url만 주어지면 거부합니다 (url 단독 조회는
    지원하지 않음). id와 url이 모두 있으면 id로 조회합니다.

    Raises:
        InvalidArgumentException: id/url이 모두 없거나 url만 있는 경우
    """
    if market is None:
        raise InvalidArgumentException("market", "must not be None")
    if market.id is None and market.url is not None:
        raise InvalidArgumentException("market.id", "id is required when url is set")
    if market.id is None and market.url is None:
        raise InvalidArgumentException("market", "either id or url must be set")


def match_market(markets: list[Market], market: Identifiable) -> Market:
    """마켓 목록에서 id(우선) 또는 url로 선형 탐색

    Raises:
        NotFoundException: 일치하는 마켓이 없음
    """
    if market.id is not None:
        for candidate in markets:
            if candidate.id == market.id:
                return candidate
    elif market.url is not None:
        for candidate in markets:
            if candidate.url == market.url:
                return candidate
    logger.debug(f"Market not found: id={market.id}, url={market.url}")
    raise NotFoundException("market", {"id": market.id, "url": market.url})


def match_category_summary(markets: list[Market], category: Identifiable) -> Optional[Category]:
    """모든 마켓의 카테고리 목록에서 id가 같은 첫 항목 (요약본)"""
    for market in markets:
        for candidate in market.categories:
            if candidate.equals_id(category):
                return candidate
    return None


def category_summary(markets: list[Market], category: Identifiable) -> Category:
    """id 조회용 카테고리 요약본 (상세 재조회에 쓸 url 필수)

    Raises:
        NotFoundException: 일치하는 카테고리가 없거나 요약본에 url이 없음
    """
    summary = match_category_summary(markets, category)
    if summary is None:
        logger.debug(f"Category not found in markets: id={category.id}")
        raise NotFoundException("category", {"id": category.id})
    if summary.url is None:
        raise NotFoundException("category", {"id": category.id, "reason": "summary has no url"})
    return summary


def single_category(document: MarketplaceDocument) -> Category:
    """문서에 카테고리가 정확히 하나여야 함

    Raises:
        NotFoundException: 카테고리 0개
        UnexpectedResponseException: 카테고리 2개 이상
    """
    if not document.categories:
        raise NotFoundException("category")
    if len(document.categories) > 1:
        raise UnexpectedResponseException(
            f"expected exactly one category, got {len(document.categories)}"
        )
    return document.categories[0]


def single_node(document: MarketplaceDocument) -> Node:
    """문서에 노드가 정확히 하나여야 함

    Raises:
        NotFoundException: 노드 0개
        UnexpectedResponseException: 노드 2개 이상
    """
    if not document.nodes:
        raise NotFoundException("node")
    if len(document.nodes) > 1:
        raise UnexpectedResponseException(
            f"expected exactly one node, got {len(document.nodes)}"
        )
    return document.nodes[0]


def listing_result(listing: Optional[NodeListing], kind: str = "listing") -> SearchResult:
    """큐레이션 목록 payload → SearchResult

    Raises:
        UnexpectedResponseException: payload 없음
    """
    if listing is None:
        raise UnexpectedResponseException(f"missing {kind} payload")
    return SearchResult.from_listing(listing)


def search_result(document: MarketplaceDocument) -> SearchResult:
    """검색/분류 탐색 문서 → SearchResult

    search payload가 있으면 그것을 쓰고, 없으면 단일 카테고리 payload의
    노드 목록을 씁니다 (이때 count = 노드 수).

    Raises:
        UnexpectedResponseException: 두 payload 모두 없음
    """
    if document.search is not None:
        return SearchResult.from_listing(document.search)
    if len(document.categories) == 1:
        return SearchResult.from_nodes(document.categories[0].nodes)
    raise UnexpectedResponseException("missing search or category payload")
