"""HttpUserFavoritesService 유닛 테스트 (httpx.MockTransport 사용)"""
import httpx
import pytest

from marketplace_client.core.exceptions import (
    NotAuthorizedException,
    ResourceNotFoundException,
    TransportException,
)
from marketplace_client.services.impl.favorites_service import HttpUserFavoritesService


FAVORITES_URL = "http://fav.test/api/favorites"

FAVORITES_JSON = {
    "favorites": [
        {"id": "1", "url": "http://mp.test/content/one"},
        {"id": "2", "url": "http://mp.test/content/two"},
        {"url": "http://mp.test/content/no-id"},
    ]
}


def make_service(handler, token="secret-token") -> HttpUserFavoritesService:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpUserFavoritesService(FAVORITES_URL, token_provider=lambda: token, client=client)


class TestHttpUserFavoritesService:
    """즐겨찾기 제공자"""

    def test_get_favorites_sends_bearer_token(self):
        seen = {}

        def handler(request):
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json=FAVORITES_JSON)

        references = make_service(handler).get_favorites()

        assert seen["authorization"] == "Bearer secret-token"
        assert [ref.id for ref in references] == ["1", "2", None]

    def test_get_favorite_ids_skips_missing_ids(self):
        service = make_service(lambda request: httpx.Response(200, json=FAVORITES_JSON))
        assert service.get_favorite_ids() == {"1", "2"}

    def test_bare_list_payload(self):
        service = make_service(lambda request: httpx.Response(200, json=[{"id": "7"}]))
        assert service.get_favorites()[0].id == "7"

    def test_by_uri_without_token(self):
        """공유 목록은 토큰 없이 조회"""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json=FAVORITES_JSON)

        references = make_service(handler, token=None).get_favorites_by_uri("http://fav.test/list/42")

        assert len(references) == 3
        assert seen["url"] == "http://fav.test/list/42"
        assert seen["authorization"] is None

    def test_missing_token(self):
        service = make_service(lambda request: httpx.Response(200, json=FAVORITES_JSON), token=None)
        with pytest.raises(NotAuthorizedException):
            service.get_favorites()

    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized_status(self, status):
        service = make_service(lambda request: httpx.Response(status))
        with pytest.raises(NotAuthorizedException):
            service.get_favorite_ids()

    def test_not_found(self):
        service = make_service(lambda request: httpx.Response(404))
        with pytest.raises(ResourceNotFoundException):
            service.get_favorites_by_uri("http://fav.test/list/missing")

    def test_server_error(self):
        service = make_service(lambda request: httpx.Response(500))
        with pytest.raises(TransportException):
            service.get_favorites()

    def test_invalid_payload(self):
        service = make_service(lambda request: httpx.Response(200, json={"favorites": "oops"}))
        with pytest.raises(TransportException):
            service.get_favorites()


class TestClientLifecycle:
    """httpx 클라이언트 정리"""

    def test_owned_client_closed_on_exit(self):
        with HttpUserFavoritesService(FAVORITES_URL) as service:
            client = service._client
            assert not client.is_closed
        assert client.is_closed

    def test_injected_client_left_open(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])))
        with HttpUserFavoritesService(FAVORITES_URL, client=client):
            pass
        assert not client.is_closed
        client.close()
