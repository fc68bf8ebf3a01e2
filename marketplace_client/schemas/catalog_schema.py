"""Pydantic 스키마 정의 - 카탈로그 문서와 엔티티

카탈로그 서버가 반환하는 문서를 그대로 표현합니다. 모든 엔티티는 호출마다
새로 만들어지는 읽기 전용 값이며, 즐겨찾기 플래그도 `with_favorite()`로
새 인스턴스를 만들어 갱신합니다.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CatalogModel(BaseModel):
    """카탈로그 엔티티 공통 설정 (불변, 알 수 없는 필드 무시)"""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Identifiable(CatalogModel):
    """id/url로 식별되는 엔티티"""
    id: Optional[str] = Field(None, description="카탈로그 ID")
    url: Optional[str] = Field(None, description="카탈로그 URL")
    name: Optional[str] = Field(None, description="표시 이름")

    def equals_id(self, other: "Identifiable") -> bool:
        """id 기준 동일성 (객체 동일성이 아님)"""
        if other is None or self.id is None:
            return False
        return self.id == other.id

    def equals_url(self, other: "Identifiable") -> bool:
        """url 기준 동일성"""
        if other is None or self.url is None:
            return False
        return self.url == other.url


class Ius(CatalogModel):
    """설치 단위(IU) 참조 목록"""
    iu_elements: list[str] = Field(default_factory=list, alias="iu", description="IU id 목록")


class Node(Identifiable):
    """마켓플레이스 리스팅 (설치 가능한 솔루션)"""
    short_description: Optional[str] = Field(None, alias="shortdescription")
    update_url: Optional[str] = Field(None, alias="updateurl")
    ius: Optional[Ius] = Field(None, description="설치 단위 참조")
    user_favorite: Optional[bool] = Field(None, description="True/False/None(알 수 없음)")

    @property
    def is_installable(self) -> bool:
        """IU 참조가 하나라도 있어야 설치 가능"""
        return self.ius is not None and len(self.ius.iu_elements) > 0

    def with_favorite(self, flag: Optional[bool]) -> "Node":
        """즐겨찾기 플래그가 반영된 새 Node 반환"""
        return self.model_copy(update={"user_favorite": flag})


class Category(Identifiable):
    """카테고리 - taxonomy 조회 시 소속 노드 목록을 함께 가짐"""
    nodes: list[Node] = Field(default_factory=list, alias="node")


class Market(Identifiable):
    """마켓 - 순서가 있는 카테고리 목록을 가짐"""
    categories: list[Category] = Field(default_factory=list, alias="category")


class NodeListing(CatalogModel):
    """큐레이션 목록 (featured/recent/popular/related/favorites)"""
    count: Optional[int] = Field(None, ge=0)
    nodes: list[Node] = Field(default_factory=list, alias="node")


class Search(NodeListing):
    """검색 결과 payload - count는 페이지 길이보다 클 수 있음"""
    term: Optional[str] = None
    url: Optional[str] = None


class News(CatalogModel):
    """뉴스 설정 (위치/제목)"""
    url: Optional[str] = None
    title: Optional[str] = Field(None, alias="shorttitle")
    timestamp: Optional[int] = None


class MarketplaceDocument(CatalogModel):
    """카탈로그 서버 응답 문서

    요청 종류에 따라 일부 필드만 채워집니다.
    """
    markets: list[Market] = Field(default_factory=list, alias="market")
    categories: list[Category] = Field(default_factory=list, alias="category")
    nodes: list[Node] = Field(default_factory=list, alias="node")
    search: Optional[Search] = None
    featured: Optional[NodeListing] = None
    recent: Optional[NodeListing] = None
    favorites: Optional[NodeListing] = None
    popular: Optional[NodeListing] = None
    related: Optional[NodeListing] = None
    news: Optional[News] = None


class FavoriteReference(Identifiable):
    """사용자 즐겨찾기 참조 - 전체 Node 데이터를 얻으려면 별도 조회 필요"""


class InstallStatus(CatalogModel):
    """설치 결과 상태 (오류 리포트용)"""
    severity: int = Field(..., ge=0, description="0=OK, 1=INFO, 2=WARNING, 4=ERROR, 8=CANCEL")
    message: str = Field("", description="상태 메시지")
