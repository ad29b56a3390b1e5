"""Config – 12-factor settings and their validation errors."""

from mp_flags.config.settings import EnvSettingsLoader, FlagServiceSettings, Settings, load_settings
from mp_flags.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "FlagServiceSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "load_settings",
]
