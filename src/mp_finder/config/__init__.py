"""Config – settings loading and validation."""
from mp_finder.config.settings import EnvSettingsLoader, FinderSettings, Settings, SettingsLoader
from mp_finder.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "FinderSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
