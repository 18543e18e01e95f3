"""
Someday — Async SQLAlchemy store.

Every operation runs in its own short transaction bounded by
``STORE_TIMEOUT_SECONDS``.  Timeouts and driver errors surface as
``StoreUnavailableError``; unique-constraint violations are translated into
the engine's own semantics (``DuplicateSwipeError`` for swipes, "return the
existing row" for matches).

``pair_lock`` opens one session and one transaction for a pair.  On
PostgreSQL it first takes a transaction-scoped advisory lock keyed by the
pair, so the reciprocal lookup, the existing-match check and the insert of
one evaluation are a single isolated read-then-write that no concurrent
evaluation (or undo) of the same pair can interleave with.  The lock and
the queries share one pooled connection.  Other dialects (SQLite in tests)
get the same single transaction under a process-local lock.
"""

from __future__ import annotations

import asyncio
import hashlib
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar

import structlog
from sqlalchemy import delete, or_, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from someday.config import get_settings
from someday.database import get_engine
from someday.exceptions import DuplicateSwipeError, StoreUnavailableError
from someday.models.match import LastSwipe, Match, Swipe
from someday.models.profile import Profile
from someday.schemas.match import MatchRecord, SwipeRecord
from someday.schemas.preference import ensure_complete
from someday.schemas.profile import ProfileRecord, PsychometricSignals
from someday.stores.base import BaseStore, PairLocks, PairScope, pair_key

logger = structlog.get_logger("someday.stores.sql")

T = TypeVar("T")


def _advisory_key(user_a_id: str, user_b_id: str) -> int:
    """Signed 64-bit key for ``pg_advisory_xact_lock``."""
    low, high = pair_key(user_a_id, user_b_id)
    digest = hashlib.blake2b(f"{low}:{high}".encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _swipe_record(row: Swipe) -> SwipeRecord:
    return SwipeRecord(
        id=row.id,
        user_id=row.user_id,
        target_id=row.target_id,
        liked=row.liked,
        compatibility_score_at_time=row.compatibility_score,
        created_at=_as_utc(row.created_at),
    )


def _match_record(row: Match) -> MatchRecord:
    return MatchRecord(
        id=row.id,
        user_id=row.user_id,
        counterparty_id=row.counterparty_id,
        compatibility_score=row.compatibility_score,
        explanation=row.explanation,
        matched_at=_as_utc(row.matched_at),
    )


def _profile_record(row: Profile) -> ProfileRecord:
    return ProfileRecord(
        user_id=row.user_id,
        display_name=row.display_name,
        age=row.age,
        location=row.location,
        preference_vector=ensure_complete(row),
        narrative=row.narrative,
        signals=PsychometricSignals(**row.signals),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at) if row.updated_at else None,
    )


# ── Session-level queries ────────────────────────────────────────────────────
# Shared by the one-shot store methods and the locked pair scope.

async def _select_profile(session: AsyncSession, user_id: str) -> Optional[ProfileRecord]:
    row = await session.get(Profile, user_id)
    return _profile_record(row) if row is not None else None


async def _select_swipe(
    session: AsyncSession, user_id: str, target_id: str
) -> Optional[SwipeRecord]:
    stmt = select(Swipe).where(
        Swipe.user_id == user_id,
        Swipe.target_id == target_id,
    )
    row = (await session.execute(stmt)).scalar_one_or_none()
    return _swipe_record(row) if row is not None else None


async def _select_reciprocal_like(
    session: AsyncSession, user_id: str, target_id: str
) -> Optional[SwipeRecord]:
    stmt = select(Swipe).where(
        Swipe.user_id == target_id,
        Swipe.target_id == user_id,
        Swipe.liked.is_(True),
    )
    row = (await session.execute(stmt)).scalar_one_or_none()
    return _swipe_record(row) if row is not None else None


async def _delete_swipe(session: AsyncSession, swipe_id: str) -> None:
    await session.execute(delete(LastSwipe).where(LastSwipe.swipe_id == swipe_id))
    await session.execute(delete(Swipe).where(Swipe.id == swipe_id))


async def _clear_last_swipe(session: AsyncSession, user_id: str) -> None:
    await session.execute(delete(LastSwipe).where(LastSwipe.user_id == user_id))


async def _select_match(
    session: AsyncSession, user_a_id: str, user_b_id: str
) -> Optional[MatchRecord]:
    low, high = pair_key(user_a_id, user_b_id)
    stmt = select(Match).where(Match.pair_low == low, Match.pair_high == high)
    row = (await session.execute(stmt)).scalar_one_or_none()
    return _match_record(row) if row is not None else None


async def _insert_match(session: AsyncSession, record: MatchRecord) -> MatchRecord:
    low, high = pair_key(record.user_id, record.counterparty_id)
    session.add(
        Match(
            id=record.id,
            user_id=record.user_id,
            counterparty_id=record.counterparty_id,
            pair_low=low,
            pair_high=high,
            compatibility_score=record.compatibility_score,
            explanation=record.explanation,
            matched_at=record.matched_at,
        )
    )
    await session.flush()
    return record


class _LockedPair(PairScope):
    """Pair scope bound to the session that holds the pair's lock."""

    def __init__(self, store: "SQLStore", session: AsyncSession) -> None:
        self._store = store
        self._session = session

    async def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        return await self._store._bounded(
            "get_profile", _select_profile(self._session, user_id)
        )

    async def get_swipe(self, user_id: str, target_id: str) -> Optional[SwipeRecord]:
        return await self._store._bounded(
            "get_swipe", _select_swipe(self._session, user_id, target_id)
        )

    async def find_reciprocal_like(
        self, user_id: str, target_id: str
    ) -> Optional[SwipeRecord]:
        return await self._store._bounded(
            "find_reciprocal_like",
            _select_reciprocal_like(self._session, user_id, target_id),
        )

    async def delete_swipe(self, swipe_id: str) -> None:
        await self._store._bounded("delete_swipe", _delete_swipe(self._session, swipe_id))

    async def clear_last_swipe(self, user_id: str) -> None:
        await self._store._bounded(
            "clear_last_swipe", _clear_last_swipe(self._session, user_id)
        )

    async def find_match(self, user_a_id: str, user_b_id: str) -> Optional[MatchRecord]:
        return await self._store._bounded(
            "find_match", _select_match(self._session, user_a_id, user_b_id)
        )

    async def add_match(self, record: MatchRecord) -> MatchRecord:
        try:
            return await self._store._bounded(
                "add_match", _insert_match(self._session, record)
            )
        except IntegrityError:
            # Only a writer that skipped the pair lock can get here.  The
            # failed flush poisons the transaction, so start a fresh one.
            await self._session.rollback()
            existing = await self.find_match(record.user_id, record.counterparty_id)
            if existing is None:
                raise
            logger.info("match_already_stored", match_id=existing.id)
            return existing


class SQLStore(BaseStore):
    """``BaseStore`` backed by an ``AsyncEngine``."""

    def __init__(self, engine: AsyncEngine, timeout_seconds: float = 5.0) -> None:
        self._engine = engine
        self._timeout = timeout_seconds
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._local_locks = PairLocks()

    @classmethod
    def from_settings(cls) -> "SQLStore":
        settings = get_settings()
        return cls(get_engine(), timeout_seconds=settings.STORE_TIMEOUT_SECONDS)

    # ── Plumbing ──────────────────────────────────────────────────────────

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("store_timeout", operation=operation, timeout=self._timeout)
            raise StoreUnavailableError(operation, "timed out") from exc
        except IntegrityError:
            raise
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("store_error", operation=operation, error=str(exc))
            raise StoreUnavailableError(operation, str(exc)) from exc

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run ``work`` inside one transaction, committed on success."""

        async def _transaction() -> T:
            async with self._session_factory() as session:
                async with session.begin():
                    return await work(session)

        return await self._bounded(operation, _transaction())

    # ── Profiles ──────────────────────────────────────────────────────────

    async def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        return await self._run(
            "get_profile", lambda session: _select_profile(session, user_id)
        )

    async def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        vector = profile.preference_vector
        values: dict[str, Any] = {
            "display_name": profile.display_name,
            "age": profile.age,
            "location": profile.location,
            "budget_tier": vector.budget_tier.value,
            "guest_count": vector.guest_count.value,
            "venue_vibe": vector.venue_vibe.value,
            "family_involvement": vector.family_involvement,
            "narrative": profile.narrative,
            "signals": profile.signals.model_dump(),
        }

        async def _work(session: AsyncSession) -> ProfileRecord:
            row = await session.get(Profile, profile.user_id)
            if row is None:
                row = Profile(user_id=profile.user_id, created_at=profile.created_at, **values)
                session.add(row)
            else:
                for name, value in values.items():
                    setattr(row, name, value)
                row.updated_at = profile.created_at
            await session.flush()
            return _profile_record(row)

        return await self._run("save_profile", _work)

    async def list_profiles(self) -> list[ProfileRecord]:
        async def _work(session: AsyncSession) -> list[ProfileRecord]:
            result = await session.execute(select(Profile).order_by(Profile.created_at))
            return [_profile_record(row) for row in result.scalars().all()]

        return await self._run("list_profiles", _work)

    # ── Swipes ────────────────────────────────────────────────────────────

    async def get_swipe(self, user_id: str, target_id: str) -> Optional[SwipeRecord]:
        return await self._run(
            "get_swipe", lambda session: _select_swipe(session, user_id, target_id)
        )

    async def append_swipe(self, record: SwipeRecord) -> SwipeRecord:
        async def _work(session: AsyncSession) -> SwipeRecord:
            session.add(
                Swipe(
                    id=record.id,
                    user_id=record.user_id,
                    target_id=record.target_id,
                    liked=record.liked,
                    compatibility_score=record.compatibility_score_at_time,
                    created_at=record.created_at,
                )
            )
            await session.flush()
            await _clear_last_swipe(session, record.user_id)
            session.add(LastSwipe(user_id=record.user_id, swipe_id=record.id))
            return record

        try:
            return await self._run("append_swipe", _work)
        except IntegrityError as exc:
            raise DuplicateSwipeError(record.user_id, record.target_id) from exc

    async def get_last_swipe(self, user_id: str) -> Optional[SwipeRecord]:
        async def _work(session: AsyncSession) -> Optional[SwipeRecord]:
            stmt = (
                select(Swipe)
                .join(LastSwipe, LastSwipe.swipe_id == Swipe.id)
                .where(LastSwipe.user_id == user_id)
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _swipe_record(row) if row is not None else None

        return await self._run("get_last_swipe", _work)

    async def clear_last_swipe(self, user_id: str) -> None:
        await self._run(
            "clear_last_swipe", lambda session: _clear_last_swipe(session, user_id)
        )

    async def delete_swipe(self, swipe_id: str) -> None:
        await self._run("delete_swipe", lambda session: _delete_swipe(session, swipe_id))

    async def list_swipes(self, user_id: str) -> list[SwipeRecord]:
        async def _work(session: AsyncSession) -> list[SwipeRecord]:
            stmt = (
                select(Swipe)
                .where(Swipe.user_id == user_id)
                .order_by(Swipe.created_at, Swipe.id)
            )
            result = await session.execute(stmt)
            return [_swipe_record(row) for row in result.scalars().all()]

        return await self._run("list_swipes", _work)

    async def find_reciprocal_like(
        self, user_id: str, target_id: str
    ) -> Optional[SwipeRecord]:
        return await self._run(
            "find_reciprocal_like",
            lambda session: _select_reciprocal_like(session, user_id, target_id),
        )

    # ── Matches ───────────────────────────────────────────────────────────

    async def find_match(self, user_a_id: str, user_b_id: str) -> Optional[MatchRecord]:
        return await self._run(
            "find_match", lambda session: _select_match(session, user_a_id, user_b_id)
        )

    async def add_match(self, record: MatchRecord) -> MatchRecord:
        try:
            return await self._run(
                "add_match", lambda session: _insert_match(session, record)
            )
        except IntegrityError:
            existing = await self.find_match(record.user_id, record.counterparty_id)
            if existing is None:
                raise
            logger.info("match_already_stored", match_id=existing.id)
            return existing

    async def list_matches(self, user_id: str) -> list[MatchRecord]:
        async def _work(session: AsyncSession) -> list[MatchRecord]:
            stmt = (
                select(Match)
                .where(or_(Match.user_id == user_id, Match.counterparty_id == user_id))
                .order_by(Match.matched_at.desc())
            )
            result = await session.execute(stmt)
            return [_match_record(row) for row in result.scalars().all()]

        return await self._run("list_matches", _work)

    # ── Isolation ─────────────────────────────────────────────────────────

    @asynccontextmanager
    async def pair_lock(
        self, user_a_id: str, user_b_id: str
    ) -> AsyncIterator[PairScope]:
        async with self._local_locks.get(user_a_id, user_b_id):
            async with self._session_factory() as session:
                try:
                    if self._engine.dialect.name == "postgresql":
                        await self._bounded(
                            "pair_lock",
                            session.execute(
                                text("SELECT pg_advisory_xact_lock(:key)"),
                                {"key": _advisory_key(user_a_id, user_b_id)},
                            ),
                        )
                    yield _LockedPair(self, session)
                    await self._bounded("pair_commit", session.commit())
                except Exception:
                    await session.rollback()
                    raise
                finally:
                    await session.close()
