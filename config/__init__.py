"""
Configuration module.

Exports:
    settings: Variant generation, ID, debounce and session settings
    get_settings: Cached settings factory (call cache_clear() to reload)
"""

from config.settings import settings, get_settings, Settings

__all__ = [
    "settings",
    "get_settings",
    "Settings",
]
