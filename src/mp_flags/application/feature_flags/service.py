"""Application feature flags – FlagManagementService.

Validates and normalises input, delegates persistence to a :class:`FlagStore`
and resolves evaluations with :func:`evaluate`. The store and clock are
injected; nothing here is process-global.
"""
from __future__ import annotations

from mp_flags.application.feature_flags.evaluation import evaluate
from mp_flags.application.feature_flags.flag import (
    EvaluationContext,
    Flag,
    GroupOverride,
    UserOverride,
)
from mp_flags.application.feature_flags.store import FlagStore
from mp_flags.application.feature_flags.validation import (
    normalize_description,
    normalize_group_id,
    normalize_key,
    normalize_user_id,
)
from mp_flags.kernel.time import Clock, SystemClock
from mp_flags.kernel.types import Nothing, Option
from mp_flags.observability.logging import get_logger

_LEAVE_UNCHANGED: Option[str] = Nothing()


class FlagManagementService:
    """Use cases for flags and their user / group overrides.

    Errors raised here are never swallowed or retried:

    * :class:`ValidationError` before any store access,
    * :class:`FlagNotFoundError` / :class:`OverrideNotFoundError`,
    * :class:`DuplicateFlagError` / :class:`DuplicateOverrideError`,
    * whatever :class:`InternalError` the store reports.
    """

    def __init__(self, store: FlagStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._log = get_logger(__name__)

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    async def create_flag(self, key: str, is_enabled: bool, description: str | None = None) -> Flag:
        key = normalize_key(key)
        if description is not None:
            description = normalize_description(description)
        now = self._clock.now()
        flag = await self._store.create(
            Flag(key=key, is_enabled=is_enabled, description=description, created_at=now, updated_at=now)
        )
        self._log.info("flag_created", key=key, is_enabled=is_enabled)
        return flag

    async def get_flag(self, key: str) -> Flag:
        return await self._store.get_or_raise(normalize_key(key))

    async def list_flags(self) -> list[Flag]:
        return await self._store.list_all()

    async def update_flag(
        self,
        key: str,
        is_enabled: bool,
        description: Option[str] = _LEAVE_UNCHANGED,
    ) -> Flag:
        """Overwrite ``is_enabled``; replace the description only for ``Some(text)``."""
        key = normalize_key(key)
        new_description = description.map(normalize_description)
        current = await self._store.get_or_raise(key, with_overrides=False)
        flag = await self._store.update(
            Flag(
                key=current.key,
                is_enabled=is_enabled,
                description=new_description.unwrap_or(current.description),
                created_at=current.created_at,
                updated_at=self._clock.now(),
            )
        )
        self._log.info(
            "flag_updated",
            key=key,
            is_enabled=is_enabled,
            description_changed=new_description.is_some(),
        )
        return flag

    async def delete_flag(self, key: str) -> None:
        key = normalize_key(key)
        await self._store.delete(key)
        self._log.info("flag_deleted", key=key)

    async def evaluate(self, key: str, context: EvaluationContext | None = None) -> bool:
        flag = await self._store.get_or_raise(normalize_key(key))
        return evaluate(flag, context)

    # ------------------------------------------------------------------
    # User overrides
    # ------------------------------------------------------------------

    async def add_user_override(self, key: str, user_id: str, is_enabled: bool) -> UserOverride:
        key, user_id = normalize_key(key), normalize_user_id(user_id)
        override = await self._store.add_user_override(
            UserOverride(flag_key=key, user_id=user_id, is_enabled=is_enabled, created_at=self._clock.now())
        )
        self._log.info("user_override_added", key=key, user_id=user_id, is_enabled=is_enabled)
        return override

    async def update_user_override(self, key: str, user_id: str, is_enabled: bool) -> UserOverride:
        key, user_id = normalize_key(key), normalize_user_id(user_id)
        override = await self._store.update_user_override(key, user_id, is_enabled)
        self._log.info("user_override_updated", key=key, user_id=user_id, is_enabled=is_enabled)
        return override

    async def remove_user_override(self, key: str, user_id: str) -> None:
        key, user_id = normalize_key(key), normalize_user_id(user_id)
        await self._store.remove_user_override(key, user_id)
        self._log.info("user_override_removed", key=key, user_id=user_id)

    # ------------------------------------------------------------------
    # Group overrides
    # ------------------------------------------------------------------

    async def add_group_override(self, key: str, group_id: str, is_enabled: bool) -> GroupOverride:
        key, group_id = normalize_key(key), normalize_group_id(group_id)
        override = await self._store.add_group_override(
            GroupOverride(flag_key=key, group_id=group_id, is_enabled=is_enabled, created_at=self._clock.now())
        )
        self._log.info("group_override_added", key=key, group_id=group_id, is_enabled=is_enabled)
        return override

    async def update_group_override(self, key: str, group_id: str, is_enabled: bool) -> GroupOverride:
        key, group_id = normalize_key(key), normalize_group_id(group_id)
        override = await self._store.update_group_override(key, group_id, is_enabled)
        self._log.info("group_override_updated", key=key, group_id=group_id, is_enabled=is_enabled)
        return override

    async def remove_group_override(self, key: str, group_id: str) -> None:
        key, group_id = normalize_key(key), normalize_group_id(group_id)
        await self._store.remove_group_override(key, group_id)
        self._log.info("group_override_removed", key=key, group_id=group_id)


__all__ = ["FlagManagementService"]
