"""HTTP 사용자 즐겨찾기 제공자 (httpx)

즐겨찾기 저장소 API:
    GET <favorites_url>                -> {"favorites": [{"id": "...", "url": "..."}]}
    GET <임의 favorites URI>           -> 같은 형식 (공유/다른 사용자 목록)

인증 토큰은 호출마다 `token_provider`에서 받습니다. 401/403은
NotAuthorizedException으로 변환해 호출 측이 재인증을 할 수 있게 합니다.
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from marketplace_client.core.config import Settings, settings as default_settings
from marketplace_client.core.exceptions import (
    NotAuthorizedException,
    ResourceNotFoundException,
    TransportException,
)
from marketplace_client.core.logging import logger, sanitize_for_log
from marketplace_client.engine.progress import ProgressMonitor
from marketplace_client.schemas.catalog_schema import FavoriteReference


class HttpUserFavoritesService:
    """UserFavoritesService 구현체"""

    def __init__(
        self,
        favorites_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.favorites_url = favorites_url
        self.token_provider = token_provider
        self.settings = settings or default_settings
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(self.settings.http_timeout_s),
            headers={"User-Agent": self.settings.http_user_agent, "Accept": "application/json"},
            follow_redirects=True,
        )

    def get_favorites(self, monitor: Optional[ProgressMonitor] = None) -> list[FavoriteReference]:
        return self._fetch_references(self.favorites_url, monitor, authorized=True)

    def get_favorites_by_uri(self, uri: str, monitor: Optional[ProgressMonitor] = None) -> list[FavoriteReference]:
        # 공유 목록은 인증 없이도 읽을 수 있음
        return self._fetch_references(uri, monitor, authorized=False)

    def get_favorite_ids(self, monitor: Optional[ProgressMonitor] = None) -> set[str]:
        references = self._fetch_references(self.favorites_url, monitor, authorized=True)
        return {ref.id for ref in references if ref.id is not None}

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpUserFavoritesService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _fetch_references(
        self,
        url: str,
        monitor: Optional[ProgressMonitor],
        authorized: bool,
    ) -> list[FavoriteReference]:
        if monitor is not None:
            monitor.check_cancelled()

        headers = {}
        if authorized:
            token = self.token_provider() if self.token_provider else None
            if not token:
                raise NotAuthorizedException("no access token available")
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"[FAVORITES] GET {sanitize_for_log(url, 200)}")
        try:
            resp = self._client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportException(url, f"{type(e).__name__}: {e}") from e

        if resp.status_code in (401, 403):
            raise NotAuthorizedException(f"HTTP {resp.status_code}", {"url": url})
        if resp.status_code == 404:
            raise ResourceNotFoundException(url)
        if resp.status_code >= 400:
            raise TransportException(url, f"HTTP {resp.status_code}", {"status_code": resp.status_code})

        try:
            payload = resp.json()
            entries = payload.get("favorites", []) if isinstance(payload, dict) else payload
            references = [FavoriteReference.model_validate(entry) for entry in entries or []]
        except (ValueError, AttributeError, TypeError, ValidationError) as e:
            raise TransportException(url, f"invalid favorites document: {e}") from e

        if monitor is not None:
            monitor.done()
        return references
