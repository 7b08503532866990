"""chatdraft configuration module."""

from chatdraft.config.provider_modes import ProviderMode, effective_reply_provider
from chatdraft.config.settings import Settings, get_settings, reset_settings_cache, settings

__all__ = [
    "settings",
    "Settings",
    "get_settings",
    "reset_settings_cache",
    "ProviderMode",
    "effective_reply_provider",
]
