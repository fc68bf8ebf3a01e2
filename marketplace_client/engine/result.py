"""Search Result - Standardized Result Format

검색/큐레이션/즐겨찾기 조회가 공통으로 반환하는 결과 형식입니다.
"""

from dataclasses import dataclass, field
from typing import Optional

from marketplace_client.schemas.catalog_schema import Node, NodeListing


@dataclass
class SearchResult:
    """검색 결과 표준 포맷

    Attributes:
        match_count: 전체 일치 건수 (페이지 결과라면 len(nodes)보다 클 수 있음)
        nodes: 순서가 보존된 노드 목록
    """

    match_count: Optional[int] = 0
    nodes: list[Node] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    @classmethod
    def empty(cls) -> "SearchResult":
        """요청 없이 반환하는 빈 검색 결과"""
        return cls(match_count=0, nodes=[])

    @classmethod
    def from_listing(cls, listing: NodeListing) -> "SearchResult":
        """count와 노드 목록을 그대로 감싼 결과 (재정렬 없음)"""
        return cls(match_count=listing.count, nodes=list(listing.nodes))

    @classmethod
    def from_nodes(cls, nodes: list[Node]) -> "SearchResult":
        """노드 목록 길이를 match_count로 쓰는 결과"""
        return cls(match_count=len(nodes), nodes=list(nodes))
