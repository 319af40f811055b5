"""Tests for settings loading."""

import pytest

from montelog.cache import MemoryCacheStore, RedisCacheStore, create_cache_store
from montelog.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in ("DATABASE_URL", "REDIS_URL", "SESSION_ID_KEY", "POST_PAGE_SIZE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.post_page_size == 7
        assert settings.post_page_ttl == 3600
        assert settings.category_ttl == 86400
        assert settings.visitor_gate_ttl == 86400
        assert settings.session_ttl == 600
        assert settings.session_cookie_name == "sessionId"

    def test_unprefixed_aliases(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///blog.db")
        monkeypatch.setenv("SESSION_ID_KEY", "sid")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///blog.db"
        assert settings.session_cookie_name == "sid"

    def test_prefixed_fields(self, monkeypatch) -> None:
        monkeypatch.setenv("MONTELOG_PORT", "8080")

        assert Settings(_env_file=None).port == 8080


class TestCacheFactory:
    def test_memory_backend(self) -> None:
        store = create_cache_store(Settings(_env_file=None, cache_backend="memory"))

        assert isinstance(store, MemoryCacheStore)

    def test_redis_backend(self) -> None:
        store = create_cache_store(
            Settings(_env_file=None, cache_backend="redis", redis_url="redis://localhost:6379/0")
        )

        assert isinstance(store, RedisCacheStore)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            create_cache_store(Settings(_env_file=None, cache_backend="memcached"))
