"""Tests for SQLStore against an in-process SQLite database (aiosqlite)."""
import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import someday.models  # noqa: F401  (registers tables on Base.metadata)
from someday.database import Base, normalise_database_url
from someday.exceptions import DuplicateSwipeError, StoreUnavailableError
from someday.schemas.match import MatchRecord, SwipeRecord
from someday.services.matching_service import MatchDetector
from someday.services.notification_service import NotificationService
from someday.services.swipe_service import SwipeLedger
from someday.stores.sql import SQLStore, _advisory_key


@pytest_asyncio.fixture
async def sql_store():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SQLStore(engine, timeout_seconds=5.0)
    await engine.dispose()


def swipe(user_id, target_id, liked=True, score=75.0, offset=0):
    return SwipeRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        target_id=target_id,
        liked=liked,
        compatibility_score_at_time=score,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=offset),
    )


def match(user_id, counterparty_id, offset=0):
    return MatchRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        counterparty_id=counterparty_id,
        compatibility_score=80.0,
        explanation="Aesthetic harmony - your venue preferences reveal aligned personality traits and values.",
        matched_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=offset),
    )


class TestProfiles:

    @pytest.mark.asyncio
    async def test_round_trip(self, sql_store, profile_factory, rustic_vector):
        saved = await sql_store.save_profile(profile_factory("alice", rustic_vector, name="Alice"))
        loaded = await sql_store.get_profile("alice")
        assert loaded.display_name == "Alice"
        assert loaded.preference_vector == rustic_vector
        assert loaded.signals == saved.signals
        assert loaded.narrative == saved.narrative
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_reonboarding_replaces_vector(self, sql_store, profile_factory, rustic_vector, lavish_vector):
        first = await sql_store.save_profile(profile_factory("alice", rustic_vector))
        await sql_store.save_profile(profile_factory("alice", lavish_vector))
        loaded = await sql_store.get_profile("alice")
        assert loaded.preference_vector == lavish_vector
        assert loaded.created_at == first.created_at
        assert loaded.updated_at is not None
        assert len(await sql_store.list_profiles()) == 1

    @pytest.mark.asyncio
    async def test_missing_profile(self, sql_store):
        assert await sql_store.get_profile("nobody") is None


class TestSwipes:

    @pytest.mark.asyncio
    async def test_append_sets_last_pointer(self, sql_store):
        first = await sql_store.append_swipe(swipe("u1", "c1", offset=0))
        second = await sql_store.append_swipe(swipe("u1", "c2", offset=1))
        assert await sql_store.get_last_swipe("u1") == second
        assert await sql_store.list_swipes("u1") == [first, second]

    @pytest.mark.asyncio
    async def test_duplicate_pair_rejected(self, sql_store):
        original = await sql_store.append_swipe(swipe("u1", "c1", liked=True))
        with pytest.raises(DuplicateSwipeError):
            await sql_store.append_swipe(swipe("u1", "c1", liked=False))
        assert await sql_store.get_swipe("u1", "c1") == original
        assert await sql_store.get_last_swipe("u1") == original

    @pytest.mark.asyncio
    async def test_delete_drops_pointer(self, sql_store):
        record = await sql_store.append_swipe(swipe("u1", "c1"))
        await sql_store.delete_swipe(record.id)
        assert await sql_store.get_swipe("u1", "c1") is None
        assert await sql_store.get_last_swipe("u1") is None

    @pytest.mark.asyncio
    async def test_reciprocal_like_only(self, sql_store):
        await sql_store.append_swipe(swipe("bob", "alice", liked=False))
        assert await sql_store.find_reciprocal_like("alice", "bob") is None

        liked = await sql_store.append_swipe(swipe("cara", "alice", liked=True))
        assert await sql_store.find_reciprocal_like("alice", "cara") == liked

    @pytest.mark.asyncio
    async def test_ledger_undo_against_sql(self, sql_store):
        ledger = SwipeLedger(sql_store)
        await ledger.record("u1", "c1", liked=False, compatibility_score=20.0)
        undone = await ledger.undo_last("u1")
        assert undone.target_id == "c1"
        assert await ledger.undo_last("u1") is None
        assert await ledger.history("u1") == []


class TestMatches:

    @pytest.mark.asyncio
    async def test_add_and_find_either_order(self, sql_store):
        stored = await sql_store.add_match(match("bob", "alice"))
        assert await sql_store.find_match("alice", "bob") == stored
        assert await sql_store.find_match("bob", "alice") == stored

    @pytest.mark.asyncio
    async def test_second_match_for_pair_returns_existing(self, sql_store):
        first = await sql_store.add_match(match("bob", "alice"))
        second = await sql_store.add_match(match("alice", "bob"))
        assert second == first
        assert len(await sql_store.list_matches("alice")) == 1

    @pytest.mark.asyncio
    async def test_list_newest_first(self, sql_store):
        older = await sql_store.add_match(match("alice", "bob", offset=0))
        newer = await sql_store.add_match(match("cara", "alice", offset=5))
        assert [m.id for m in await sql_store.list_matches("alice")] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_detector_against_sql(self, sql_store, profile_factory, rustic_vector, lavish_vector):
        await sql_store.save_profile(profile_factory("alice", rustic_vector, name="Alice"))
        await sql_store.save_profile(profile_factory("bob", lavish_vector, name="Bob"))
        ledger = SwipeLedger(sql_store)
        detector = MatchDetector(
            sql_store,
            notification_service=NotificationService(),
            notification_timeout=1.0,
        )

        first = await ledger.record("alice", "bob", liked=True, compatibility_score=70.0)
        assert await detector.evaluate(first) is None
        second = await ledger.record("bob", "alice", liked=True, compatibility_score=72.0)
        created = await detector.evaluate(second)

        assert created.compatibility_score == 72.0
        assert await detector.evaluate(first) == created
        assert await detector.list_matches("alice") == [created]


class TestFailureTranslation:

    @pytest.mark.asyncio
    async def test_timeout_becomes_store_unavailable(self, sql_store):
        sql_store._timeout = 0.01
        with pytest.raises(StoreUnavailableError) as exc_info:
            await sql_store._bounded("slow_query", asyncio.sleep(1))
        assert exc_info.value.operation == "slow_query"
        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_driver_error_becomes_store_unavailable(self, sql_store):
        async def broken():
            raise OperationalError("SELECT 1", {}, ConnectionRefusedError("db down"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            await sql_store._bounded("get_profile", broken())
        assert exc_info.value.operation == "get_profile"


class TestPairScope:
    """``pair_lock`` hands out one session; its writes commit on clean exit."""

    @pytest.mark.asyncio
    async def test_scope_commits_on_exit(self, sql_store):
        await sql_store.append_swipe(swipe("bob", "alice"))
        async with sql_store.pair_lock("alice", "bob") as pair:
            assert (await pair.find_reciprocal_like("alice", "bob")).user_id == "bob"
            assert await pair.find_match("alice", "bob") is None
            stored = await pair.add_match(match("alice", "bob"))
            assert await pair.find_match("bob", "alice") == stored
        assert await sql_store.find_match("alice", "bob") == stored

    @pytest.mark.asyncio
    async def test_scope_rolls_back_on_error(self, sql_store):
        with pytest.raises(RuntimeError):
            async with sql_store.pair_lock("alice", "bob") as pair:
                await pair.add_match(match("alice", "bob"))
                raise RuntimeError("evaluation failed")
        assert await sql_store.find_match("alice", "bob") is None

    @pytest.mark.asyncio
    async def test_scope_duplicate_match_returns_existing(self, sql_store):
        first = await sql_store.add_match(match("bob", "alice"))
        async with sql_store.pair_lock("alice", "bob") as pair:
            assert await pair.add_match(match("alice", "bob")) == first
        assert len(await sql_store.list_matches("alice")) == 1

    @pytest.mark.asyncio
    async def test_scope_deletes_swipe_and_pointer(self, sql_store):
        record = await sql_store.append_swipe(swipe("alice", "bob"))
        async with sql_store.pair_lock("alice", "bob") as pair:
            await pair.delete_swipe(record.id)
            assert await pair.get_swipe("alice", "bob") is None
        assert await sql_store.get_swipe("alice", "bob") is None
        assert await sql_store.get_last_swipe("alice") is None

    @pytest.mark.asyncio
    async def test_undo_and_stale_like_against_sql(
        self, sql_store, profile_factory, rustic_vector, lavish_vector
    ):
        await sql_store.save_profile(profile_factory("alice", rustic_vector))
        await sql_store.save_profile(profile_factory("bob", lavish_vector))
        ledger = SwipeLedger(sql_store)
        detector = MatchDetector(
            sql_store,
            notification_service=NotificationService(),
            notification_timeout=1.0,
        )

        await ledger.record("bob", "alice", liked=True, compatibility_score=70.0)
        stale = await ledger.record("alice", "bob", liked=True, compatibility_score=70.0)
        assert await ledger.undo_last("alice") == stale
        assert await detector.evaluate(stale) is None
        assert await sql_store.find_match("alice", "bob") is None

        again = await ledger.record("alice", "bob", liked=True, compatibility_score=75.0)
        created = await detector.evaluate(again)
        assert created.compatibility_score == 75.0
        # A matched like is terminal.
        assert await ledger.undo_last("alice") is None
        assert await sql_store.get_swipe("alice", "bob") == again


class TestHelpers:

    def test_advisory_key_is_order_independent(self):
        assert _advisory_key("alice", "bob") == _advisory_key("bob", "alice")
        assert _advisory_key("alice", "bob") != _advisory_key("alice", "cara")

    def test_advisory_key_fits_bigint(self):
        key = _advisory_key("alice", "bob")
        assert -(2 ** 63) <= key < 2 ** 63

    def test_plain_postgres_url_upgraded(self):
        assert normalise_database_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert normalise_database_url("sqlite+aiosqlite://") == "sqlite+aiosqlite://"
