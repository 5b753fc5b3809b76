"""Configuration loading for docaudit.

Configuration is read from TOML files with ``DOCAUDIT_*`` environment
variable overrides.

Usage:
    from docaudit.config import get_settings

    settings = get_settings()
    audit_collection = settings.audit.collection_name
"""

from functools import lru_cache

from docaudit.config.loader import load_config
from docaudit.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    The result is cached; call ``get_settings.cache_clear()`` or
    ``reload_settings()`` to pick up changed files or variables.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and load configuration again."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
