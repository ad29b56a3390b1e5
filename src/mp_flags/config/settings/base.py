"""Config settings – Settings base class and FlagServiceSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from mp_flags.config.validation.errors import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class FlagServiceSettings(Settings):
    """Runtime configuration of the feature-flag service (``FLAGS_*``)."""

    _prefix: ClassVar[str] = "FLAGS"

    database_url: str = "sqlite+aiosqlite:///./featureflags.db"
    log_level: str = "INFO"
    json_logs: bool = True
    echo_sql: bool = False

    def _validate(self) -> None:
        if not self.database_url.strip():
            raise InvalidSettingValueError("database_url", self.database_url, "must not be empty")
        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise InvalidSettingValueError("log_level", self.log_level, "unknown log level")
        self.log_level = self.log_level.upper()


__all__ = ["FlagServiceSettings", "Settings"]
