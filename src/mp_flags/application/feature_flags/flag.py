"""Application feature flags – Flag, overrides and EvaluationContext snapshots."""
from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Iterable


@dataclasses.dataclass(frozen=True)
class UserOverride:
    """Per-user exception to a flag's global default."""

    flag_key: str
    user_id: str
    is_enabled: bool
    created_at: datetime


@dataclasses.dataclass(frozen=True)
class GroupOverride:
    """Per-group exception to a flag's global default."""

    flag_key: str
    group_id: str
    is_enabled: bool
    created_at: datetime


@dataclasses.dataclass(frozen=True)
class Flag:
    """A named boolean toggle with its overrides, in stored order.

    ``created_at`` is assigned once when the flag is created; ``updated_at``
    moves forward on every update of the flag itself.
    """

    key: str
    is_enabled: bool
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    user_overrides: tuple[UserOverride, ...] = ()
    group_overrides: tuple[GroupOverride, ...] = ()

    def with_overrides(
        self,
        user_overrides: Iterable[UserOverride],
        group_overrides: Iterable[GroupOverride],
    ) -> "Flag":
        return dataclasses.replace(
            self,
            user_overrides=tuple(user_overrides),
            group_overrides=tuple(group_overrides),
        )

    def without_overrides(self) -> "Flag":
        return dataclasses.replace(self, user_overrides=(), group_overrides=())


@dataclasses.dataclass(frozen=True)
class EvaluationContext:
    """Caller-supplied identity used to resolve precedence. Never persisted."""

    user_id: str | None = None
    group_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # accept any iterable (lists from JSON bodies) but keep the snapshot immutable
        if not isinstance(self.group_ids, tuple):
            object.__setattr__(self, "group_ids", tuple(self.group_ids))

    @property
    def has_user(self) -> bool:
        return bool(self.user_id and self.user_id.strip())


__all__ = ["EvaluationContext", "Flag", "GroupOverride", "UserOverride"]
