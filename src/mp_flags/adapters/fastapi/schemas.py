"""FastAPI adapter – request / response bodies (camelCase JSON)."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mp_flags.application.feature_flags import Flag, GroupOverride, UserOverride


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Length and emptiness rules are left to the service so every caller gets
# the same ValidationError messages.


class CreateFlagRequest(_Schema):
    key: str
    is_enabled: bool = False
    description: str | None = None


class UpdateFlagRequest(_Schema):
    is_enabled: bool = False
    description: str | None = None


class AddOverrideRequest(_Schema):
    id: str
    is_enabled: bool = False


class UpdateOverrideRequest(_Schema):
    is_enabled: bool = False


class EvaluateRequest(_Schema):
    user_id: str | None = None
    group_ids: list[str] = Field(default_factory=list)


class EvaluateResponse(_Schema):
    key: str
    is_enabled: bool


class UserOverrideResponse(_Schema):
    user_id: str
    is_enabled: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, override: UserOverride) -> "UserOverrideResponse":
        return cls(user_id=override.user_id, is_enabled=override.is_enabled, created_at=override.created_at)


class GroupOverrideResponse(_Schema):
    group_id: str
    is_enabled: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, override: GroupOverride) -> "GroupOverrideResponse":
        return cls(group_id=override.group_id, is_enabled=override.is_enabled, created_at=override.created_at)


class FlagResponse(_Schema):
    key: str
    description: str | None
    is_enabled: bool
    created_at: datetime
    updated_at: datetime
    user_overrides: list[UserOverrideResponse]
    group_overrides: list[GroupOverrideResponse]

    @classmethod
    def from_entity(cls, flag: Flag) -> "FlagResponse":
        return cls(
            key=flag.key,
            description=flag.description,
            is_enabled=flag.is_enabled,
            created_at=flag.created_at,
            updated_at=flag.updated_at,
            user_overrides=[UserOverrideResponse.from_entity(o) for o in flag.user_overrides],
            group_overrides=[GroupOverrideResponse.from_entity(o) for o in flag.group_overrides],
        )


class ErrorResponse(_Schema):
    type: str
    code: str
    message: str
    errors: dict[str, list[str]] | None = None


__all__ = [
    "AddOverrideRequest",
    "CreateFlagRequest",
    "ErrorResponse",
    "EvaluateRequest",
    "EvaluateResponse",
    "FlagResponse",
    "GroupOverrideResponse",
    "UpdateFlagRequest",
    "UpdateOverrideRequest",
    "UserOverrideResponse",
]
