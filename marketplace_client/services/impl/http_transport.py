"""HTTP 카탈로그 전송 (httpx)

- 요청마다 클라이언트를 만들면 커넥션 오버헤드가 커지므로 인스턴스 단위로
  httpx.Client를 재사용합니다.
- 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Sequence
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from marketplace_client.core.config import Settings, settings as default_settings
from marketplace_client.core.exceptions import ResourceNotFoundException, TransportException
from marketplace_client.core.logging import logger, sanitize_for_log
from marketplace_client.engine.progress import ProgressMonitor
from marketplace_client.schemas.catalog_schema import MarketplaceDocument


class HttpCatalogTransport:
    """httpx 기반 CatalogTransport 구현체

    응답 본문은 JSON 카탈로그 문서로 가정하고 MarketplaceDocument로 검증합니다.
    """

    def __init__(self, client: Optional[httpx.Client] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(self.settings.http_timeout_s),
            headers=self.default_headers(),
            follow_redirects=True,
        )

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.settings.http_user_agent,
            "Accept": "application/json",
        }

    def fetch(self, url: str, monitor: Optional[ProgressMonitor] = None) -> MarketplaceDocument:
        """카탈로그 문서 조회

        Raises:
            CancelledException: 요청 전에 취소된 경우
            ResourceNotFoundException: HTTP 404
            TransportException: 그 밖의 I/O/파싱 실패
        """
        if monitor is not None:
            monitor.check_cancelled()
        logger.debug(f"[HTTP_TRANSPORT] GET {sanitize_for_log(url, 200)}")
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as e:
            raise TransportException(url, f"{type(e).__name__}: {e}") from e

        self._raise_for_status(url, resp)
        try:
            document = MarketplaceDocument.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise TransportException(url, f"invalid catalog document: {e}") from e

        if monitor is not None:
            monitor.done()
        return document

    def stream(self, url: str, monitor: Optional[ProgressMonitor] = None) -> Iterator[bytes]:
        """응답 본문 스트리밍"""
        if monitor is not None:
            monitor.check_cancelled()
        try:
            with self._client.stream("GET", url) as resp:
                self._raise_for_status(url, resp)
                for chunk in resp.iter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise TransportException(url, f"{type(e).__name__}: {e}") from e

    def post_form(self, url: str, fields: Sequence[tuple[str, str]]) -> None:
        """form-url-encoded POST (UTF-8)"""
        content = urlencode(list(fields)).encode("utf-8")
        try:
            resp = self._client.post(
                url,
                content=content,
                headers={"Content-Type": "application/x-www-form-urlencoded; charset=UTF-8"},
            )
        except httpx.HTTPError as e:
            raise TransportException(url, f"{type(e).__name__}: {e}") from e
        self._raise_for_status(url, resp)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpCatalogTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _raise_for_status(url: str, resp: httpx.Response) -> None:
        if resp.status_code == 404:
            raise ResourceNotFoundException(url, {"status_code": 404})
        if resp.status_code >= 400:
            raise TransportException(url, f"HTTP {resp.status_code}", {"status_code": resp.status_code})
