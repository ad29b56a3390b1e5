"""Application feature flags – InMemoryFlagStore."""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Generic, TypeVar

from mp_flags.application.feature_flags.flag import Flag, GroupOverride, UserOverride
from mp_flags.application.feature_flags.store import FlagStore
from mp_flags.kernel.errors import (
    DuplicateFlagError,
    DuplicateOverrideError,
    FlagNotFoundError,
    OverrideNotFoundError,
)

TOverride = TypeVar("TOverride", UserOverride, GroupOverride)


class _OverrideIndex(Generic[TOverride]):
    """Overrides keyed by ``(flag_key, override_id)``; dict order is stored order."""

    def __init__(self, kind: str, id_attr: str) -> None:
        self.kind = kind
        self._id_attr = id_attr
        self._rows: dict[tuple[str, str], TOverride] = {}

    def for_flag(self, key: str) -> list[TOverride]:
        return [row for (flag_key, _), row in self._rows.items() if flag_key == key]

    def get(self, key: str, override_id: str) -> TOverride | None:
        return self._rows.get((key, override_id))

    def insert(self, override: TOverride) -> TOverride:
        row_key = (override.flag_key, getattr(override, self._id_attr))
        if row_key in self._rows:
            raise DuplicateOverrideError(row_key[0], row_key[1], self.kind)
        self._rows[row_key] = override
        return override

    def set_enabled(self, key: str, override_id: str, is_enabled: bool) -> TOverride:
        row = self._require(key, override_id)
        updated = dataclasses.replace(row, is_enabled=is_enabled)
        self._rows[(key, override_id)] = updated
        return updated

    def remove(self, key: str, override_id: str) -> None:
        self._require(key, override_id)
        del self._rows[(key, override_id)]

    def drop_flag(self, key: str) -> int:
        doomed = [row_key for row_key in self._rows if row_key[0] == key]
        for row_key in doomed:
            del self._rows[row_key]
        return len(doomed)

    def _require(self, key: str, override_id: str) -> TOverride:
        row = self._rows.get((key, override_id))
        if row is None:
            raise OverrideNotFoundError(key, override_id, self.kind)
        return row


class InMemoryFlagStore(FlagStore):
    """Process-local :class:`FlagStore` for tests and single-process use.

    Writers are serialised by an :class:`asyncio.Lock`, so the uniqueness
    checks and the insert happen as one step. Readers get immutable snapshots.
    """

    def __init__(self) -> None:
        self._flags: dict[str, Flag] = {}
        self._users: _OverrideIndex[UserOverride] = _OverrideIndex("user", "user_id")
        self._groups: _OverrideIndex[GroupOverride] = _OverrideIndex("group", "group_id")
        self._lock = asyncio.Lock()

    def _snapshot(self, flag: Flag, with_overrides: bool) -> Flag:
        if not with_overrides:
            return flag
        return flag.with_overrides(self._users.for_flag(flag.key), self._groups.for_flag(flag.key))

    def _require_flag(self, key: str) -> Flag:
        flag = self._flags.get(key)
        if flag is None:
            raise FlagNotFoundError(key)
        return flag

    async def get(self, key: str, *, with_overrides: bool = True) -> Flag | None:
        flag = self._flags.get(key)
        return None if flag is None else self._snapshot(flag, with_overrides)

    async def list_all(self) -> list[Flag]:
        return [self._snapshot(self._flags[key], True) for key in sorted(self._flags)]

    async def exists(self, key: str) -> bool:
        return key in self._flags

    async def create(self, flag: Flag) -> Flag:
        async with self._lock:
            if flag.key in self._flags:
                raise DuplicateFlagError(flag.key)
            self._flags[flag.key] = flag.without_overrides()
            return self._snapshot(self._flags[flag.key], True)

    async def update(self, flag: Flag) -> Flag:
        async with self._lock:
            current = self._require_flag(flag.key)
            self._flags[flag.key] = dataclasses.replace(
                current,
                is_enabled=flag.is_enabled,
                description=flag.description,
                updated_at=flag.updated_at,
            )
            return self._snapshot(self._flags[flag.key], True)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._require_flag(key)
            self._users.drop_flag(key)
            self._groups.drop_flag(key)
            del self._flags[key]

    async def get_user_override(self, key: str, user_id: str) -> UserOverride | None:
        return self._users.get(key, user_id)

    async def add_user_override(self, override: UserOverride) -> UserOverride:
        async with self._lock:
            self._require_flag(override.flag_key)
            return self._users.insert(override)

    async def update_user_override(self, key: str, user_id: str, is_enabled: bool) -> UserOverride:
        async with self._lock:
            self._require_flag(key)
            return self._users.set_enabled(key, user_id, is_enabled)

    async def remove_user_override(self, key: str, user_id: str) -> None:
        async with self._lock:
            self._require_flag(key)
            self._users.remove(key, user_id)

    async def get_group_override(self, key: str, group_id: str) -> GroupOverride | None:
        return self._groups.get(key, group_id)

    async def add_group_override(self, override: GroupOverride) -> GroupOverride:
        async with self._lock:
            self._require_flag(override.flag_key)
            return self._groups.insert(override)

    async def update_group_override(self, key: str, group_id: str, is_enabled: bool) -> GroupOverride:
        async with self._lock:
            self._require_flag(key)
            return self._groups.set_enabled(key, group_id, is_enabled)

    async def remove_group_override(self, key: str, group_id: str) -> None:
        async with self._lock:
            self._require_flag(key)
            self._groups.remove(key, group_id)


__all__ = ["InMemoryFlagStore"]
