"""카탈로그 요청 URL 생성 유틸리티

모든 함수는 순수 함수입니다. id/url 값은 연결 직전에 정확히 한 번만
URL 인코딩합니다.

API 경로 (대부분 끝에 `api/p`가 붙음):
    api/p                              마켓 + 카테고리 목록
    node/<id>/api/p                    단일 리스팅 상세
    taxonomy/term/<cat>,<market>/api/p 카테고리 리스팅
    featured/[<market>,<cat>/]api/p    추천 목록
    recent/api/p                       최근 업데이트
    favorites/top/api/p                즐겨찾기 상위
    popular/top/api/p                  인기 목록
    related/api/p?nodes=<id>+<id>      연관 추천
    news/api/p                         뉴스 설정
    category/free-tagging/<tag>/api/p  태그 검색

검색만 예외로 접미사가 앞에 붙습니다:
    api/p/search/apachesolr_search/<query>?filters=tid:<id>%20tid:<id>
"""
from typing import Iterable, Mapping, Optional
from urllib.parse import quote, urlencode, urljoin

from marketplace_client.core.config import settings
from marketplace_client.core.exceptions import InvalidArgumentException
from marketplace_client.schemas.catalog_schema import Identifiable


API_FAVORITES_URI = "favorites/top"
API_FEATURED_URI = "featured"
API_NEWS_URI = "news"
API_NODE_URI = "node"
API_POPULAR_URI = "popular/top"
API_RELATED_URI = "related"
API_RECENT_URI = "recent"
API_SEARCH_URI = "search/apachesolr_search/"
API_TAXONOMY_URI = "taxonomy/term/"
API_FREETAGGING_URI = "category/free-tagging/"
API_INSTALL_ERROR_URI = "install/error/report"

# related 쿼리의 기준 노드 목록 파라미터
PARAM_BASED_ON_NODES = "nodes"


def url_encode(value: str) -> str:
    """경로 세그먼트/쿼리 값 하나를 인코딩 (공백은 %20)"""
    return quote(value, safe="")


def encoded_id(item: Identifiable, field: str) -> str:
    """필터/경로에 쓸 id 인코딩 (id 없는 마켓/카테고리는 거부)

    Raises:
        InvalidArgumentException: id가 없음
    """
    if item.id is None:
        raise InvalidArgumentException(f"{field}.id", "id is required for search and listing paths")
    return url_encode(item.id)


def api_path(uri: str, suffix: Optional[str] = None) -> str:
    """`<uri>/api/p` 형태의 상대 경로"""
    suffix = suffix or settings.api_uri_suffix
    return f"{uri.rstrip('/')}/{suffix}"


def compute_relative_search_url(
    market: Optional[Identifiable],
    category: Optional[Identifiable],
    query_text: Optional[str],
    api: bool = True,
    suffix: Optional[str] = None,
) -> Optional[str]:
    """검색/분류 탐색용 상대 URL 생성

    - 검색어가 있으면 `search/apachesolr_search/<query>` (+ `?filters=`)
      API 모드는 market이 먼저, 브라우저 모드는 category가 먼저입니다.
    - 검색어가 없고 market/category 중 하나라도 있으면
      `taxonomy/term/<category>,<market>` (API 모드면 `/api/p` 추가)
    - 셋 다 없으면 None (요청 없이 빈 결과로 처리)

    Examples:
        >>> compute_relative_search_url(Market(id="31"), Category(id="38"), "WikiText")
        'api/p/search/apachesolr_search/WikiText?filters=tid:31%20tid:38'
        >>> compute_relative_search_url(Market(id="31"), Category(id="38"), "")
        'taxonomy/term/38,31/api/p'

    Args:
        market: 검색할 마켓 또는 None
        category: 검색할 카테고리 또는 None
        query_text: 검색어
        api: True면 REST API URL, False면 브라우저 URL
        suffix: API 접미사 (기본값: 설정값)

    Returns:
        상대 URL 또는 None
    """
    suffix = suffix or settings.api_uri_suffix

    if query_text is not None and query_text.strip():
        prefix = f"{suffix}/{API_SEARCH_URI}" if api else API_SEARCH_URI
        relative_url = prefix + url_encode(query_text.strip())

        ordered = ((market, "market"), (category, "category"))
        if not api:
            ordered = ordered[::-1]
        filters = [f"tid:{encoded_id(item, field)}" for item, field in ordered if item is not None]
        if filters:
            relative_url += "?filters=" + "%20".join(filters)
        return relative_url

    if market is not None or category is not None:
        ids = [
            encoded_id(item, field)
            for item, field in ((category, "category"), (market, "market"))
            if item is not None
        ]
        relative_url = API_TAXONOMY_URI + ",".join(ids)
        if api:
            relative_url += "/" + suffix
        return relative_url

    return None


def node_path(node_id: str) -> str:
    """id 기반 노드 상세 경로 (이름 기반 URL보다 안정적)"""
    return api_path(f"{API_NODE_URI}/{url_encode(node_id)}")


def free_tagging_path(tag: str) -> str:
    """태그 검색 경로"""
    return api_path(API_FREETAGGING_URI + url_encode(tag))


def featured_path(market: Optional[Identifiable] = None, category: Optional[Identifiable] = None) -> str:
    """추천 목록 경로 - market이 먼저, category가 뒤"""
    ids = [
        encoded_id(item, field)
        for item, field in ((market, "market"), (category, "category"))
        if item is not None
    ]
    uri = API_FEATURED_URI
    if ids:
        uri += "/" + ",".join(ids)
    return api_path(uri)


def related_path(based_on: Optional[Iterable[Identifiable]] = None) -> str:
    """연관 추천 경로 - 기준 노드가 있으면 `?nodes=a+b+c`"""
    path = api_path(API_RELATED_URI)
    ids = [node.id for node in (based_on or []) if node is not None and node.id is not None]
    if ids:
        path += f"?{PARAM_BASED_ON_NODES}=" + "+".join(url_encode(node_id) for node_id in ids)
    return path


def resolve_url(base_url: str, path: str) -> str:
    """상대 경로를 base URL 기준 절대 URL로 변환 (절대 URL은 그대로)"""
    if path.startswith(("http://", "https://")):
        return path
    if not base_url.endswith("/"):
        base_url += "/"
    return urljoin(base_url, path.lstrip("/"))


def add_meta_parameters(url: str, meta_parameters: Optional[Mapping[str, Optional[str]]]) -> str:
    """요청 메타 파라미터를 query string으로 추가

    키가 None인 항목은 건너뜁니다. 기존 query string이 있으면 `&`로 잇습니다.
    """
    if not meta_parameters:
        return url
    pairs = [(key, value or "") for key, value in meta_parameters.items() if key is not None]
    if not pairs:
        return url
    separator = "&" if "?" in url else "?"
    return url + separator + urlencode(pairs)


def success_report_url(node_url: str) -> str:
    """설치 성공 리포트 URL (`<node url>/success`)"""
    if not node_url.endswith("/"):
        node_url += "/"
    return node_url + "success"
