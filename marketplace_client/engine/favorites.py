"""Favorites Pipeline - 즐겨찾기 참조 해석 및 설치 가능성 정렬

1. 즐겨찾기 참조 조회 (제공자)
2. 참조별로 전체 Node 조회 (입력 순서대로, 한 번에 하나씩)
3. 즐겨찾기 플래그 True 반영
4. 설치 불가 노드 제외(filter) 또는 설치 가능 노드를 앞으로(stable partition)
"""

from typing import Callable, Iterable, Optional, Sequence

from marketplace_client.core.exceptions import (
    CancelledException,
    MarketplaceClientException,
    NotAuthorizedException,
    RetrievalFailureException,
)
from marketplace_client.core.logging import logger
from marketplace_client.schemas.catalog_schema import FavoriteReference, Node

from .progress import ProgressMonitor
from .result import SearchResult


FAVORITES_RETRIEVE_ERROR = "Error retrieving favorites"

# 참조 하나당 진행 작업량
_WORK_PER_NODE = 100


def partition_installable(nodes: Iterable[Node]) -> list[Node]:
    """설치 가능 노드를 앞에, 불가 노드를 뒤에 (각 그룹 내부 순서 유지)

    정렬이 아닌 안정 분할입니다. 노드끼리는 설치 가능 여부 외에 비교하지 않습니다.
    """
    installable: list[Node] = []
    incompatible: list[Node] = []
    for node in nodes:
        (installable if node.is_installable else incompatible).append(node)
    return installable + incompatible


def fetch_favorite_references(
    fetch: Callable[[], list[FavoriteReference]],
) -> list[FavoriteReference]:
    """제공자 호출 래퍼 - 인증/취소 예외는 그대로, 나머지는 RetrievalFailure로

    Raises:
        NotAuthorizedException: 재인증 필요
        CancelledException: 취소됨
        RetrievalFailureException: 그 밖의 제공자 오류
    """
    try:
        return list(fetch() or [])
    except (NotAuthorizedException, CancelledException):
        raise
    except Exception as e:
        logger.warning(f"Favorites retrieval failed: {type(e).__name__}: {e}")
        raise RetrievalFailureException(FAVORITES_RETRIEVE_ERROR, cause=e) from e


def resolve_favorite_nodes(
    references: Sequence[FavoriteReference],
    get_node: Callable[[FavoriteReference, Optional[ProgressMonitor]], Node],
    monitor: Optional[ProgressMonitor] = None,
    filter_incompatible: bool = True,
) -> SearchResult:
    """즐겨찾기 참조 목록을 전체 Node 목록으로 해석

    Args:
        references: 즐겨찾기 참조 (순서 보존)
        get_node: 단일 노드 조회 함수 (캐시 인지 서비스 우선)
        monitor: 진행/취소 모니터
        filter_incompatible: True면 설치 불가 노드 제외, False면 뒤로 이동

    Returns:
        SearchResult: match_count == len(nodes)

    Raises:
        CancelledException: 참조 해석 사이에 취소된 경우
    """
    progress = ProgressMonitor.convert(monitor, max(1, len(references)) * _WORK_PER_NODE, "resolve_favorites")

    resolved: list[Node] = []
    for reference in references:
        progress.check_cancelled("resolve_favorites")
        node = get_node(reference, progress.new_child(_WORK_PER_NODE)).with_favorite(True)
        if filter_incompatible and not node.is_installable:
            logger.debug(f"Favorite skipped (not installable): id={node.id}")
            continue
        resolved.append(node)

    if not filter_incompatible:
        resolved = partition_installable(resolved)

    progress.done()
    return SearchResult.from_nodes(resolved)


def mark_favorites(
    nodes: Sequence[Node],
    fetch_ids: Callable[[], set[str]],
) -> list[Node]:
    """즐겨찾기 id 집합을 한 번 조회해서 모든 노드의 플래그를 갱신

    조회 성공 여부와 관계없이 모든 노드에 플래그를 반영합니다. 실패했다면
    값은 None(알 수 없음)이고, 갱신된 노드 목록은 발생한 예외의 `nodes`에
    실려 호출 측으로 전달됩니다.

    Returns:
        플래그가 반영된 새 Node 목록 (입력 순서 유지)

    Raises:
        NotAuthorizedException: 재인증 필요 (노드 갱신 후)
        RetrievalFailureException: 그 밖의 조회 실패 (노드 갱신 후)
    """
    favorite_ids: Optional[set[str]] = None
    failure: Optional[MarketplaceClientException] = None
    try:
        favorite_ids = set(fetch_ids() or ())
    except (NotAuthorizedException, CancelledException) as e:
        failure = e
    except Exception as e:
        logger.warning(f"Favorite ids retrieval failed: {type(e).__name__}: {e}")
        failure = RetrievalFailureException(FAVORITES_RETRIEVE_ERROR, cause=e)
        failure.__cause__ = e

    updated = [
        node.with_favorite(None if favorite_ids is None else node.id in favorite_ids)
        for node in nodes
    ]

    if failure is not None:
        failure.nodes = updated
        raise failure
    return updated
