"""Application feature flags – FlagStore port."""
from __future__ import annotations

import abc

from mp_flags.application.feature_flags.flag import Flag, GroupOverride, UserOverride
from mp_flags.kernel.errors import FlagNotFoundError


class FlagStore(abc.ABC):
    """Port: durable storage of flags and their overrides, keyed by flag ``key``.

    Implementations enforce the uniqueness rules themselves (flag key, and
    ``(flag, user_id)`` / ``(flag, group_id)`` per override table) and make
    each mutating call atomic: it either fully commits or changes nothing.

    Raises:
        DuplicateFlagError / DuplicateOverrideError: uniqueness violated.
        FlagNotFoundError: the referenced flag does not exist.
        OverrideNotFoundError: the flag exists but the override does not.
    """

    @abc.abstractmethod
    async def get(self, key: str, *, with_overrides: bool = True) -> Flag | None: ...

    @abc.abstractmethod
    async def list_all(self) -> list[Flag]:
        """Every flag, overrides loaded, sorted by key ascending."""

    @abc.abstractmethod
    async def exists(self, key: str) -> bool: ...

    @abc.abstractmethod
    async def create(self, flag: Flag) -> Flag: ...

    @abc.abstractmethod
    async def update(self, flag: Flag) -> Flag:
        """Persist ``is_enabled``, ``description`` and ``updated_at`` of *flag*."""

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Delete the flag and all of its overrides in one transaction."""

    # user overrides

    @abc.abstractmethod
    async def get_user_override(self, key: str, user_id: str) -> UserOverride | None: ...

    @abc.abstractmethod
    async def add_user_override(self, override: UserOverride) -> UserOverride: ...

    @abc.abstractmethod
    async def update_user_override(self, key: str, user_id: str, is_enabled: bool) -> UserOverride: ...

    @abc.abstractmethod
    async def remove_user_override(self, key: str, user_id: str) -> None: ...

    # group overrides

    @abc.abstractmethod
    async def get_group_override(self, key: str, group_id: str) -> GroupOverride | None: ...

    @abc.abstractmethod
    async def add_group_override(self, override: GroupOverride) -> GroupOverride: ...

    @abc.abstractmethod
    async def update_group_override(self, key: str, group_id: str, is_enabled: bool) -> GroupOverride: ...

    @abc.abstractmethod
    async def remove_group_override(self, key: str, group_id: str) -> None: ...

    async def get_or_raise(self, key: str, *, with_overrides: bool = True) -> Flag:
        flag = await self.get(key, with_overrides=with_overrides)
        if flag is None:
            raise FlagNotFoundError(key)
        return flag


__all__ = ["FlagStore"]
