"""Config settings – load_settings."""
from __future__ import annotations

from mp_flags.config.settings.base import FlagServiceSettings
from mp_flags.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader


def load_settings(env_file: str | None = None) -> FlagServiceSettings:
    """Build :class:`FlagServiceSettings` from the environment.

    When *env_file* is given it is read first; variables already present in
    the process environment take priority over the file.
    """
    loader: SettingsLoader = DotenvSettingsLoader(env_file) if env_file else EnvSettingsLoader()
    return loader.load(FlagServiceSettings)


__all__ = ["load_settings"]
