"""Configuration helpers for django-packflow.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    PACKFLOW_ENFORCE_TOPOLOGY = False
    PACKFLOW_ROLE_ALIASES = {"autsorsvishivka": "vishivka"}
"""

from django.conf import settings


DEFAULTS = {
    "ENFORCE_TOPOLOGY": True,
    "ROLE_ALIASES": {},
    "CONFLICT_RETRIES": 3,
    "TOKEN_STORE": "django_packflow.tokens.CacheRefreshTokenStore",
    "TOKEN_STORE_OPTIONS": {},
}


def get_setting(name: str, default=None):
    """Get a setting with PACKFLOW_ prefix."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"PACKFLOW_{name}", default)


def is_topology_enforced() -> bool:
    """Check if send targets are validated against the department topology."""
    return bool(get_setting("ENFORCE_TOPOLOGY"))


def get_role_aliases() -> dict[str, str]:
    """Extra alias -> role value entries, lowercased."""
    aliases = get_setting("ROLE_ALIASES") or {}
    return {str(k).strip().lower(): str(v).strip().lower() for k, v in aliases.items()}


def get_conflict_retries() -> int:
    """Attempts for the transparent conflict retry (at least 1)."""
    return max(1, int(get_setting("CONFLICT_RETRIES")))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# PACKFLOW_ENFORCE_TOPOLOGY = True  # Reject sends to non-adjacent departments
# PACKFLOW_ROLE_ALIASES = {}  # Extra department name aliases
# PACKFLOW_CONFLICT_RETRIES = 3  # Retry budget for deadlocks / serialization failures
# PACKFLOW_TOKEN_STORE = 'django_packflow.tokens.CacheRefreshTokenStore'
# PACKFLOW_TOKEN_STORE_OPTIONS = {}  # e.g. {'alias': 'tokens', 'timeout': 7776000}
