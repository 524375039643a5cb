"""Config settings – 12-factor env-based configuration."""
from mp_finder.config.settings.base import Settings
from mp_finder.config.settings.finder import REPORT_MODES, FinderSettings
from mp_finder.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = ["REPORT_MODES", "EnvSettingsLoader", "FinderSettings", "Settings", "SettingsLoader"]
