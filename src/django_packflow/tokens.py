"""
Refresh token store.

Tracks which issued refresh tokens are still valid. The backend is pluggable
through PACKFLOW_TOKEN_STORE; the default keeps tokens in the Django cache so
every worker process shares the same view.

Usage:
    from django_packflow.tokens import get_token_store

    store = get_token_store()
    store.store(token)
    store.is_valid(token)
"""

import hashlib
import logging
from functools import lru_cache

from django.core.cache import caches
from django.utils.module_loading import import_string

from .conf import get_setting
from .exceptions import TokenStoreLoadError

logger = logging.getLogger(__name__)


class BaseRefreshTokenStore:
    """
    Interface for refresh token stores.

    Subclasses implement store, is_valid, revoke and revoke_all.
    """

    def store(self, token: str, timeout: int | None = None) -> None:
        raise NotImplementedError

    def is_valid(self, token: str) -> bool:
        raise NotImplementedError

    def revoke(self, token: str) -> None:
        raise NotImplementedError

    def revoke_all(self) -> None:
        raise NotImplementedError


class CacheRefreshTokenStore(BaseRefreshTokenStore):
    """
    Refresh tokens kept in a Django cache.

    Tokens are stored under their SHA-256 digest, never in clear. Keys carry a
    generation number; revoke_all bumps it, which orphans every earlier key
    at once.
    """

    def __init__(self, alias: str = "default", prefix: str = "packflow:refresh", timeout: int | None = None):
        self.alias = alias
        self.prefix = prefix
        self.timeout = timeout

    @property
    def cache(self):
        return caches[self.alias]

    @property
    def _generation_key(self) -> str:
        return f"{self.prefix}:generation"

    def _generation(self) -> int:
        return self.cache.get_or_set(self._generation_key, 1, timeout=None)

    def _key(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self.prefix}:{self._generation()}:{digest}"

    def store(self, token: str, timeout: int | None = None) -> None:
        if not token:
            raise ValueError("Refresh token must be a non-empty string")
        if timeout is None:
            timeout = self.timeout
        self.cache.set(self._key(token), True, timeout=timeout)
        logger.debug("Stored refresh token in cache '%s'", self.alias)

    def is_valid(self, token: str) -> bool:
        if not token:
            return False
        return bool(self.cache.get(self._key(token), False))

    def revoke(self, token: str) -> None:
        if not token:
            return
        self.cache.delete(self._key(token))
        logger.debug("Revoked refresh token in cache '%s'", self.alias)

    def revoke_all(self) -> None:
        try:
            generation = self.cache.incr(self._generation_key)
        except ValueError:
            # Generation key evicted or never set
            generation = self._generation() + 1
            self.cache.set(self._generation_key, generation, timeout=None)
        logger.debug("Revoked all refresh tokens in cache '%s' (generation %s)", self.alias, generation)


@lru_cache(maxsize=1)
def get_token_store() -> BaseRefreshTokenStore:
    """
    Instantiate the configured token store.

    Raises TokenStoreLoadError for bad paths or non-subclass backends.
    """
    dotted_path = get_setting("TOKEN_STORE")
    options = get_setting("TOKEN_STORE_OPTIONS") or {}

    try:
        store_class = import_string(dotted_path)
    except ImportError as e:
        raise TokenStoreLoadError(dotted_path, f"Cannot import: {e}")

    if not isinstance(store_class, type) or not issubclass(store_class, BaseRefreshTokenStore):
        raise TokenStoreLoadError(
            dotted_path,
            "must be a subclass of BaseRefreshTokenStore"
        )

    try:
        return store_class(**options)
    except TypeError as e:
        raise TokenStoreLoadError(dotted_path, f"Bad options: {e}")


def clear_token_store_cache():
    """Drop the cached store instance. Useful for testing."""
    get_token_store.cache_clear()
