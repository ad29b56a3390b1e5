"""Config settings – 12-factor env-based configuration."""
from mp_flags.config.settings.base import FlagServiceSettings, Settings
from mp_flags.config.settings.factory import load_settings
from mp_flags.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "FlagServiceSettings",
    "Settings",
    "SettingsLoader",
    "load_settings",
]
