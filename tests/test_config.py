"""Tests for packflow settings helpers."""

from django_packflow.conf import (
    get_conflict_retries,
    get_role_aliases,
    get_setting,
    is_topology_enforced,
)


class TestSettings:

    def test_defaults(self, settings):
        del settings.PACKFLOW_ENFORCE_TOPOLOGY
        assert is_topology_enforced() is True
        assert get_conflict_retries() == 3
        assert get_setting("TOKEN_STORE") == "django_packflow.tokens.CacheRefreshTokenStore"

    def test_override(self, settings):
        settings.PACKFLOW_ENFORCE_TOPOLOGY = False
        assert is_topology_enforced() is False

    def test_retries_floor(self, settings):
        settings.PACKFLOW_CONFLICT_RETRIES = 0
        assert get_conflict_retries() == 1

    def test_aliases_lowercased(self, settings):
        settings.PACKFLOW_ROLE_ALIASES = {" Sex 2 ": "TIKUV"}
        assert get_role_aliases() == {"sex 2": "tikuv"}
