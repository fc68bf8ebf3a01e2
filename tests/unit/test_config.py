"""설정 검증 테스트"""
import pytest
from pydantic import ValidationError

from marketplace_client.core.config import Settings
from marketplace_client.core.logging import sanitize_for_log


class TestSettings:
    """Settings 검증"""

    def test_defaults(self):
        settings = Settings()
        assert settings.api_uri_suffix == "api/p"
        assert settings.base_url.startswith("http")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_BASE_URL", "https://catalog.test")
        monkeypatch.setenv("MARKETPLACE_CACHE_TTL", "30")
        settings = Settings()
        assert settings.base_url == "https://catalog.test"
        assert settings.cache_ttl == 30

    def test_invalid_base_url(self):
        with pytest.raises(ValidationError):
            Settings(base_url="ftp://catalog.test")

    def test_suffix_is_stripped(self):
        assert Settings(api_uri_suffix="/api/p/").api_uri_suffix == "api/p"

    def test_empty_suffix(self):
        with pytest.raises(ValidationError):
            Settings(api_uri_suffix="/")

    @pytest.mark.parametrize("field", ["http_timeout_s", "cache_ttl"])
    def test_non_positive_values(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_redis_url(self):
        assert Settings(redis_url="rediss://cache.test:6380/0").redis_url.startswith("rediss://")
        with pytest.raises(ValidationError):
            Settings(redis_url="http://cache.test")

    def test_cache_key_prefix(self):
        assert Settings(cache_key_prefix="mp:").cache_key_prefix == "mp"
        with pytest.raises(ValidationError):
            Settings(cache_key_prefix=":")

    def test_log_level(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")


class TestSanitizeForLog:
    """로그 마스킹"""

    def test_empty(self):
        assert sanitize_for_log("") == "[empty]"

    def test_masks_token_value_only(self):
        """키와 나머지 URL은 남기고 값만 가림"""
        result = sanitize_for_log("http://fav.test/list?access_token=abc123&page=2")
        assert result == "http://fav.test/list?access_token=***&page=2"

    def test_masks_prefixed_keys(self):
        assert sanitize_for_log("auth_token=xyz; password: hunter2") == "auth_token=***; password: ***"

    def test_masks_bearer_header(self):
        assert sanitize_for_log("Authorization: Bearer abc.def") == "Authorization: ***"

    def test_word_token_without_value_kept(self):
        assert sanitize_for_log("token refresh required") == "token refresh required"

    def test_truncates(self):
        assert sanitize_for_log("x" * 150) == "x" * 100 + "..."

    def test_plain_value(self):
        assert sanitize_for_log("http://mp.test/api/p") == "http://mp.test/api/p"
