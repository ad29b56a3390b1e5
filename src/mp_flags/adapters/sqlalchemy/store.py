"""SQLAlchemy adapter – SqlAlchemyFlagStore.

Uniqueness is enforced by the database constraints; an ``IntegrityError`` on
insert is reported as the matching :class:`ConflictError`. Overrides are kept
in their own tables and fetched by ``flag_id`` in insertion order, and flag
deletion removes them with explicit bulk deletes inside the same transaction.
"""
from __future__ import annotations

import contextlib
import dataclasses
import datetime
from collections import defaultdict
from typing import Any, AsyncIterator, Callable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mp_flags.adapters.sqlalchemy.models import FlagRecord, GroupOverrideRecord, UserOverrideRecord
from mp_flags.adapters.sqlalchemy.uow import SqlAlchemyUnitOfWork
from mp_flags.application.feature_flags.flag import Flag, GroupOverride, UserOverride
from mp_flags.application.feature_flags.store import FlagStore
from mp_flags.kernel.errors import (
    DuplicateFlagError,
    DuplicateOverrideError,
    FlagNotFoundError,
    OverrideNotFoundError,
    StoreUnavailableError,
)


@dataclasses.dataclass(frozen=True)
class _OverrideTable:
    kind: str
    model: Any
    id_attr: str
    entity: Any

    @property
    def id_column(self) -> Any:
        return getattr(self.model, self.id_attr)

    def to_entity(self, record: Any, key: str) -> Any:
        return self.entity(
            flag_key=key,
            is_enabled=record.is_enabled,
            created_at=_as_utc(record.created_at),
            **{self.id_attr: getattr(record, self.id_attr)},
        )


_USERS = _OverrideTable("user", UserOverrideRecord, "user_id", UserOverride)
_GROUPS = _OverrideTable("group", GroupOverrideRecord, "group_id", GroupOverride)


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value


def _to_flag(record: FlagRecord) -> Flag:
    return Flag(
        key=record.key,
        is_enabled=record.is_enabled,
        description=record.description,
        created_at=_as_utc(record.created_at),
        updated_at=_as_utc(record.updated_at),
    )


class SqlAlchemyFlagStore(FlagStore):
    """:class:`FlagStore` backed by a SQLAlchemy async engine."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    @contextlib.asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with SqlAlchemyUnitOfWork(self._session_factory) as uow:
                yield uow.session
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(operation, cause=exc) from exc

    # ------------------------------------------------------------------
    # helpers (run inside an open transaction)
    # ------------------------------------------------------------------

    async def _flag_record(self, session: AsyncSession, key: str) -> FlagRecord | None:
        result = await session.execute(select(FlagRecord).where(FlagRecord.key == key))
        return result.scalar_one_or_none()

    async def _require_flag_id(self, session: AsyncSession, key: str) -> int:
        result = await session.execute(select(FlagRecord.id).where(FlagRecord.key == key))
        flag_id = result.scalar_one_or_none()
        if flag_id is None:
            raise FlagNotFoundError(key)
        return flag_id

    async def _overrides_by_flag(
        self, session: AsyncSession, table: _OverrideTable, flag_ids: list[int]
    ) -> dict[int, list[Any]]:
        grouped: dict[int, list[Any]] = defaultdict(list)
        if not flag_ids:
            return grouped
        result = await session.execute(
            select(table.model).where(table.model.flag_id.in_(flag_ids)).order_by(table.model.id)
        )
        for record in result.scalars():
            grouped[record.flag_id].append(record)
        return grouped

    async def _with_overrides(self, session: AsyncSession, records: list[FlagRecord]) -> list[Flag]:
        ids = [record.id for record in records]
        users = await self._overrides_by_flag(session, _USERS, ids)
        groups = await self._overrides_by_flag(session, _GROUPS, ids)
        return [
            _to_flag(record).with_overrides(
                (_USERS.to_entity(row, record.key) for row in users[record.id]),
                (_GROUPS.to_entity(row, record.key) for row in groups[record.id]),
            )
            for record in records
        ]

    async def _override_record(self, session: AsyncSession, table: _OverrideTable, key: str, override_id: str) -> Any:
        flag_id = await self._require_flag_id(session, key)
        result = await session.execute(
            select(table.model).where(table.model.flag_id == flag_id, table.id_column == override_id)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise OverrideNotFoundError(key, override_id, table.kind)
        return record

    async def _add_override(self, table: _OverrideTable, override: Any) -> Any:
        override_id = getattr(override, table.id_attr)
        async with self._transaction(f"add_{table.kind}_override") as session:
            flag_id = await self._require_flag_id(session, override.flag_key)
            session.add(
                table.model(
                    flag_id=flag_id,
                    is_enabled=override.is_enabled,
                    created_at=override.created_at,
                    **{table.id_attr: override_id},
                )
            )
            try:
                await session.flush()
            except IntegrityError as exc:
                raise DuplicateOverrideError(override.flag_key, override_id, table.kind, cause=exc) from exc
        return override

    async def _get_override(self, table: _OverrideTable, key: str, override_id: str) -> Any:
        async with self._transaction(f"get_{table.kind}_override") as session:
            result = await session.execute(
                select(table.model)
                .join(FlagRecord, FlagRecord.id == table.model.flag_id)
                .where(FlagRecord.key == key, table.id_column == override_id)
            )
            record = result.scalar_one_or_none()
            return None if record is None else table.to_entity(record, key)

    async def _update_override(self, table: _OverrideTable, key: str, override_id: str, is_enabled: bool) -> Any:
        async with self._transaction(f"update_{table.kind}_override") as session:
            record = await self._override_record(session, table, key, override_id)
            record.is_enabled = is_enabled
            await session.flush()
            return table.to_entity(record, key)

    async def _remove_override(self, table: _OverrideTable, key: str, override_id: str) -> None:
        async with self._transaction(f"remove_{table.kind}_override") as session:
            record = await self._override_record(session, table, key, override_id)
            await session.delete(record)

    # ------------------------------------------------------------------
    # FlagStore
    # ------------------------------------------------------------------

    async def get(self, key: str, *, with_overrides: bool = True) -> Flag | None:
        async with self._transaction("get") as session:
            record = await self._flag_record(session, key)
            if record is None:
                return None
            if not with_overrides:
                return _to_flag(record)
            return (await self._with_overrides(session, [record]))[0]

    async def list_all(self) -> list[Flag]:
        async with self._transaction("list_all") as session:
            result = await session.execute(select(FlagRecord).order_by(FlagRecord.key))
            return await self._with_overrides(session, list(result.scalars().all()))

    async def exists(self, key: str) -> bool:
        async with self._transaction("exists") as session:
            result = await session.execute(select(FlagRecord.id).where(FlagRecord.key == key).limit(1))
            return result.scalar_one_or_none() is not None

    async def create(self, flag: Flag) -> Flag:
        async with self._transaction("create") as session:
            session.add(
                FlagRecord(
                    key=flag.key,
                    description=flag.description,
                    is_enabled=flag.is_enabled,
                    created_at=flag.created_at,
                    updated_at=flag.updated_at,
                )
            )
            try:
                await session.flush()
            except IntegrityError as exc:
                raise DuplicateFlagError(flag.key, cause=exc) from exc
        return flag.without_overrides()

    async def update(self, flag: Flag) -> Flag:
        async with self._transaction("update") as session:
            record = await self._flag_record(session, flag.key)
            if record is None:
                raise FlagNotFoundError(flag.key)
            record.is_enabled = flag.is_enabled
            record.description = flag.description
            record.updated_at = flag.updated_at
            await session.flush()
            return (await self._with_overrides(session, [record]))[0]

    async def delete(self, key: str) -> None:
        async with self._transaction("delete") as session:
            flag_id = await self._require_flag_id(session, key)
            await session.execute(delete(UserOverrideRecord).where(UserOverrideRecord.flag_id == flag_id))
            await session.execute(delete(GroupOverrideRecord).where(GroupOverrideRecord.flag_id == flag_id))
            await session.execute(delete(FlagRecord).where(FlagRecord.id == flag_id))

    async def get_user_override(self, key: str, user_id: str) -> UserOverride | None:
        return await self._get_override(_USERS, key, user_id)

    async def add_user_override(self, override: UserOverride) -> UserOverride:
        return await self._add_override(_USERS, override)

    async def update_user_override(self, key: str, user_id: str, is_enabled: bool) -> UserOverride:
        return await self._update_override(_USERS, key, user_id, is_enabled)

    async def remove_user_override(self, key: str, user_id: str) -> None:
        await self._remove_override(_USERS, key, user_id)

    async def get_group_override(self, key: str, group_id: str) -> GroupOverride | None:
        return await self._get_override(_GROUPS, key, group_id)

    async def add_group_override(self, override: GroupOverride) -> GroupOverride:
        return await self._add_override(_GROUPS, override)

    async def update_group_override(self, key: str, group_id: str, is_enabled: bool) -> GroupOverride:
        return await self._update_override(_GROUPS, key, group_id, is_enabled)

    async def remove_group_override(self, key: str, group_id: str) -> None:
        await self._remove_override(_GROUPS, key, group_id)


__all__ = ["SqlAlchemyFlagStore"]
