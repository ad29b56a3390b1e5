"""Unit tests for FlagManagementService backed by InMemoryFlagStore."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from mp_flags.application.feature_flags import (
    EvaluationContext,
    FlagManagementService,
    FlagStore,
    InMemoryFlagStore,
)
from mp_flags.kernel.errors import (
    ConflictError,
    DuplicateFlagError,
    DuplicateOverrideError,
    FlagNotFoundError,
    NotFoundError,
    OverrideNotFoundError,
    ValidationError,
)
from mp_flags.kernel.time import FrozenClock
from mp_flags.kernel.types import Nothing, Some

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def make_service() -> tuple[FlagManagementService, InMemoryFlagStore, FrozenClock]:
    store = InMemoryFlagStore()
    clock = FrozenClock(T0)
    return FlagManagementService(store, clock), store, clock


# ---------------------------------------------------------------------------
# Flags
# ---------------------------------------------------------------------------


class TestCreateFlag:
    def test_creates_with_server_timestamps(self) -> None:
        service, _, _ = make_service()
        flag = asyncio.run(service.create_flag("test-feature", True, "Test description"))
        assert flag.key == "test-feature"
        assert flag.is_enabled is True
        assert flag.description == "Test description"
        assert flag.created_at == flag.updated_at == T0
        assert flag.user_overrides == () and flag.group_overrides == ()

    def test_trims_key_and_description(self) -> None:
        service, _, _ = make_service()
        flag = asyncio.run(service.create_flag("  padded  ", False, "  words  "))
        assert flag.key == "padded"
        assert flag.description == "words"

    def test_duplicate_key_conflicts(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("duplicate-key", True)
            with pytest.raises(DuplicateFlagError, match="duplicate-key"):
                await service.create_flag("duplicate-key", False)
            assert (await service.get_flag("duplicate-key")).is_enabled is True

        asyncio.run(run())

    def test_duplicate_after_trim_conflicts(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("x", True)
            with pytest.raises(ConflictError):
                await service.create_flag(" x ", True)

        asyncio.run(run())

    def test_keys_are_case_sensitive(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("Beta", True)
            await service.create_flag("beta", False)
            assert [f.key for f in await service.list_flags()] == ["Beta", "beta"]

        asyncio.run(run())

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_blank_key_rejected(self, key: str | None) -> None:
        service, _, _ = make_service()
        with pytest.raises(ValidationError) as info:
            asyncio.run(service.create_flag(key, True))  # type: ignore[arg-type]
        assert "key" in info.value.errors

    def test_key_over_100_chars_rejected(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(ValidationError, match="100"):
            asyncio.run(service.create_flag("a" * 101, True))

    def test_key_of_exactly_100_chars_accepted(self) -> None:
        service, _, _ = make_service()
        assert asyncio.run(service.create_flag("a" * 100, True)).key == "a" * 100

    def test_description_over_500_chars_rejected(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(ValidationError) as info:
            asyncio.run(service.create_flag("x", True, "d" * 501))
        assert "description" in info.value.errors

    def test_validation_happens_before_store_access(self) -> None:
        store = AsyncMock(spec=FlagStore)
        service = FlagManagementService(store, FrozenClock(T0))
        with pytest.raises(ValidationError):
            asyncio.run(service.create_flag("", True))
        with pytest.raises(ValidationError):
            asyncio.run(service.add_user_override("x", " ", True))
        assert store.mock_calls == []


class TestReadFlags:
    def test_get_missing_flag(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(FlagNotFoundError):
            asyncio.run(service.get_flag("nope"))

    def test_get_blank_key_is_validation_error(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(ValidationError):
            asyncio.run(service.get_flag("  "))

    def test_get_loads_overrides(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_user_override("f", "alice", True)
            await service.add_group_override("f", "beta", True)
            flag = await service.get_flag("f")
            assert [o.user_id for o in flag.user_overrides] == ["alice"]
            assert [o.group_id for o in flag.group_overrides] == ["beta"]

        asyncio.run(run())

    def test_list_is_sorted_by_key(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            for key in ("zeta", "alpha", "mid"):
                await service.create_flag(key, False)
            await service.add_user_override("mid", "u1", True)
            flags = await service.list_flags()
            assert [f.key for f in flags] == ["alpha", "mid", "zeta"]
            assert len(flags[1].user_overrides) == 1

        asyncio.run(run())

    def test_list_empty(self) -> None:
        service, _, _ = make_service()
        assert asyncio.run(service.list_flags()) == []


class TestUpdateFlag:
    def test_omitted_description_is_preserved(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False, "keep me")
            flag = await service.update_flag("f", True)
            assert flag.is_enabled is True
            assert flag.description == "keep me"
            flag = await service.update_flag("f", False, Nothing())
            assert flag.description == "keep me"

        asyncio.run(run())

    def test_supplied_description_replaces(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False, "old")
            flag = await service.update_flag("f", False, Some("  new  "))
            assert flag.description == "new"
            flag = await service.update_flag("f", False, Some(""))
            assert flag.description == ""

        asyncio.run(run())

    def test_updated_at_advances_created_at_does_not(self) -> None:
        service, _, clock = make_service()

        async def run() -> None:
            created = await service.create_flag("f", False)
            clock.advance(minutes=10)
            updated = await service.update_flag("f", True)
            assert updated.created_at == created.created_at == T0
            assert updated.updated_at > created.updated_at

        asyncio.run(run())

    def test_update_keeps_overrides(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_user_override("f", "alice", True)
            flag = await service.update_flag("f", True)
            assert len(flag.user_overrides) == 1

        asyncio.run(run())

    def test_missing_flag(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(FlagNotFoundError):
            asyncio.run(service.update_flag("ghost", True))

    def test_long_description_rejected(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False, "old")
            with pytest.raises(ValidationError):
                await service.update_flag("f", True, Some("d" * 501))
            flag = await service.get_flag("f")
            assert flag.is_enabled is False
            assert flag.description == "old"

        asyncio.run(run())


class TestDeleteFlag:
    def test_delete_cascades(self) -> None:
        service, store, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_user_override("f", "alice", True)
            await service.add_group_override("f", "beta", True)
            await service.delete_flag("f")
            with pytest.raises(FlagNotFoundError):
                await service.get_flag("f")
            with pytest.raises(FlagNotFoundError):
                await service.evaluate("f")
            assert await store.get_user_override("f", "alice") is None
            assert await store.get_group_override("f", "beta") is None

        asyncio.run(run())

    def test_recreated_flag_starts_clean(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_user_override("f", "alice", True)
            await service.delete_flag("f")
            await service.create_flag("f", False)
            assert (await service.get_flag("f")).user_overrides == ()
            assert await service.evaluate("f", EvaluationContext(user_id="alice")) is False

        asyncio.run(run())

    def test_delete_missing(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(FlagNotFoundError):
            asyncio.run(service.delete_flag("ghost"))


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


class TestUserOverrides:
    def test_add_trims_and_stamps(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            override = await service.add_user_override("f", "  alice ", True)
            assert override.user_id == "alice"
            assert override.flag_key == "f"
            assert override.created_at == T0

        asyncio.run(run())

    def test_add_to_missing_flag(self) -> None:
        service, _, _ = make_service()
        with pytest.raises(FlagNotFoundError):
            asyncio.run(service.add_user_override("ghost", "alice", True))

    def test_duplicate_conflicts(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_user_override("f", "alice", True)
            with pytest.raises(DuplicateOverrideError):
                await service.add_user_override("f", "alice", False)

        asyncio.run(run())

    def test_same_user_on_two_flags(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.create_flag("g", False)
            await service.add_user_override("f", "alice", True)
            await service.add_user_override("g", "alice", False)

        asyncio.run(run())

    @pytest.mark.parametrize("user_id", ["", "   ", "u" * 101])
    def test_invalid_user_id(self, user_id: str) -> None:
        service, _, _ = make_service()
        with pytest.raises(ValidationError) as info:
            asyncio.run(service.add_user_override("f", user_id, True))
        assert "userId" in info.value.errors

    def test_update_replaces_value_keeps_created_at(self) -> None:
        service, _, clock = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_user_override("f", "alice", True)
            clock.advance(hours=1)
            override = await service.update_user_override("f", "alice", False)
            assert override.is_enabled is False
            assert override.created_at == T0
            assert await service.evaluate("f", EvaluationContext(user_id="alice")) is False

        asyncio.run(run())

    def test_update_and_remove_missing_override(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            with pytest.raises(OverrideNotFoundError):
                await service.update_user_override("f", "alice", True)
            with pytest.raises(OverrideNotFoundError):
                await service.remove_user_override("f", "alice")

        asyncio.run(run())

    def test_override_on_missing_flag_is_flag_not_found(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            with pytest.raises(FlagNotFoundError):
                await service.update_user_override("ghost", "alice", True)
            with pytest.raises(NotFoundError):
                await service.remove_user_override("ghost", "alice")

        asyncio.run(run())


class TestGroupOverrides:
    def test_add_update_remove(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            override = await service.add_group_override("f", " beta ", True)
            assert override.group_id == "beta"
            ctx = EvaluationContext(group_ids=("beta",))
            assert await service.evaluate("f", ctx) is True
            await service.update_group_override("f", "beta", False)
            assert await service.evaluate("f", ctx) is False
            await service.remove_group_override("f", "beta")
            assert (await service.get_flag("f")).group_overrides == ()

        asyncio.run(run())

    def test_duplicate_conflicts(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_group_override("f", "beta", True)
            with pytest.raises(DuplicateOverrideError):
                await service.add_group_override("f", "beta", True)

        asyncio.run(run())

    def test_missing_override(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            with pytest.raises(OverrideNotFoundError):
                await service.update_group_override("f", "beta", True)
            with pytest.raises(OverrideNotFoundError):
                await service.remove_group_override("f", "beta")

        asyncio.run(run())

    @pytest.mark.parametrize("group_id", ["", "\t", "g" * 101])
    def test_invalid_group_id(self, group_id: str) -> None:
        service, _, _ = make_service()
        with pytest.raises(ValidationError) as info:
            asyncio.run(service.add_group_override("f", group_id, True))
        assert "groupId" in info.value.errors


# ---------------------------------------------------------------------------
# Evaluation through the service
# ---------------------------------------------------------------------------


class TestEvaluateScenario:
    def test_checkout_walkthrough(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("checkout-v2", False)
            assert await service.evaluate("checkout-v2") is False

            await service.add_user_override("checkout-v2", "alice", True)
            assert await service.evaluate("checkout-v2", EvaluationContext(user_id="alice")) is True
            assert await service.evaluate("checkout-v2", EvaluationContext(user_id="bob")) is False

            await service.add_group_override("checkout-v2", "beta", True)
            ctx = EvaluationContext(user_id="alice", group_ids=("beta",))
            assert await service.evaluate("checkout-v2", ctx) is True
            ctx = EvaluationContext(user_id="carol", group_ids=("beta",))
            assert await service.evaluate("checkout-v2", ctx) is True

            await service.remove_user_override("checkout-v2", "alice")
            assert await service.evaluate("checkout-v2", EvaluationContext(user_id="alice")) is False

        asyncio.run(run())

    def test_missing_flag_is_hard_failure(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("x", True)
            with pytest.raises(ConflictError):
                await service.create_flag("x", True)
            with pytest.raises(FlagNotFoundError):
                await service.evaluate("y")

        asyncio.run(run())

    def test_group_tie_break_uses_stored_order(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            await service.add_group_override("f", "a", True)
            await service.add_group_override("f", "b", False)
            assert await service.evaluate("f", EvaluationContext(group_ids=("b", "a"))) is True

        asyncio.run(run())

    def test_evaluate_sees_latest_write(self) -> None:
        service, _, _ = make_service()

        async def run() -> None:
            await service.create_flag("f", False)
            assert await service.evaluate("f") is False
            await service.update_flag("f", True)
            assert await service.evaluate("f") is True

        asyncio.run(run())
