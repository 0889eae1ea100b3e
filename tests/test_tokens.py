"""Tests for the refresh token store."""

import pytest
from django.core.cache import caches

from django_packflow.exceptions import TokenStoreLoadError
from django_packflow.tokens import (
    BaseRefreshTokenStore,
    CacheRefreshTokenStore,
    clear_token_store_cache,
    get_token_store,
)


@pytest.fixture(autouse=True)
def clean_cache():
    caches["default"].clear()
    clear_token_store_cache()
    yield
    clear_token_store_cache()


class TestCacheRefreshTokenStore:
    """Tests for the cache-backed store."""

    def test_store_and_validate(self):
        store = CacheRefreshTokenStore()
        store.store("refresh-abc")

        assert store.is_valid("refresh-abc")
        assert not store.is_valid("refresh-xyz")

    def test_tokens_stored_by_digest(self):
        store = CacheRefreshTokenStore(prefix="t")
        store.store("refresh-abc")

        key = store._key("refresh-abc")
        assert "refresh-abc" not in key
        assert caches["default"].get(key) is True

    def test_revoke(self):
        store = CacheRefreshTokenStore()
        store.store("a")
        store.store("b")

        store.revoke("a")

        assert not store.is_valid("a")
        assert store.is_valid("b")

    def test_revoke_unknown_is_noop(self):
        CacheRefreshTokenStore().revoke("never-stored")

    def test_revoke_all(self):
        store = CacheRefreshTokenStore()
        store.store("a")
        store.store("b")

        store.revoke_all()

        assert not store.is_valid("a")
        assert not store.is_valid("b")
        store.store("c")
        assert store.is_valid("c")

    def test_revoke_all_survives_evicted_generation(self):
        store = CacheRefreshTokenStore()
        store.store("a")
        caches["default"].delete(store._generation_key)

        store.revoke_all()

        assert not store.is_valid("a")

    def test_stores_share_state_through_cache(self):
        CacheRefreshTokenStore().store("shared")
        assert CacheRefreshTokenStore().is_valid("shared")

    def test_prefixes_isolate_stores(self):
        CacheRefreshTokenStore(prefix="one").store("token")
        assert not CacheRefreshTokenStore(prefix="two").is_valid("token")

    def test_empty_token(self):
        store = CacheRefreshTokenStore()
        assert not store.is_valid("")
        with pytest.raises(ValueError):
            store.store("")


class TestGetTokenStore:
    """Tests for loading the configured store."""

    def test_default_store(self):
        store = get_token_store()
        assert isinstance(store, CacheRefreshTokenStore)
        assert get_token_store() is store

    def test_options_passed_through(self, settings):
        settings.PACKFLOW_TOKEN_STORE_OPTIONS = {"prefix": "custom", "timeout": 60}

        store = get_token_store()

        assert store.prefix == "custom"
        assert store.timeout == 60

    def test_bad_path(self, settings):
        settings.PACKFLOW_TOKEN_STORE = "django_packflow.tokens.NoSuchStore"

        with pytest.raises(TokenStoreLoadError) as exc_info:
            get_token_store()
        assert exc_info.value.path == "django_packflow.tokens.NoSuchStore"

    def test_not_a_store(self, settings):
        settings.PACKFLOW_TOKEN_STORE = "django_packflow.exceptions.NotFound"

        with pytest.raises(TokenStoreLoadError):
            get_token_store()

    def test_bad_options(self, settings):
        settings.PACKFLOW_TOKEN_STORE_OPTIONS = {"colour": "blue"}

        with pytest.raises(TokenStoreLoadError):
            get_token_store()

    def test_base_interface_is_abstract(self):
        with pytest.raises(NotImplementedError):
            BaseRefreshTokenStore().is_valid("x")
