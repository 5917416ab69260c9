"""Saved startups, score history and free analysis counters.

Scores are always recomputed from the stored factors with the scoring
engine, except when a user overrides the score by hand; that sets
``manually_edited`` until the factors change again. Every score change
appends a snapshot so history can be shown per startup.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .core.errors import StartupNotFoundError
from .core.models import FactorSet, MarketTimingMode, PitchDeckAnalysis, ScoreHistoryEntry, StartupRecord, UsageStatus
from .core.scoring import DEFAULT_MARKET_TIMING_MODE, clamp01, compute_score
from .db import get_session_factory
from .sqlmodels import PitchDeck, ScoreSnapshot, Startup, UsageCounter

logger = logging.getLogger(__name__)


def _dump_factors(factors: FactorSet) -> str:
    return json.dumps(factors.to_wire())


def _load_factors(raw: str) -> FactorSet:
    return FactorSet.from_mapping(json.loads(raw))


def _to_record(row: Startup) -> StartupRecord:
    return StartupRecord(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        description=row.description,
        factors=_load_factors(row.factors),
        score=row.score,
        scored_manually=row.scored_manually,
        manually_edited=row.manually_edited,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _snapshot(row: Startup, now: datetime) -> ScoreSnapshot:
    return ScoreSnapshot(
        startup_id=row.id,
        score=row.score,
        factors=row.factors,
        manually_edited=row.manually_edited,
        recorded_at=now,
    )


async def _get_row(session, startup_id: str) -> Startup:
    row = await session.get(Startup, startup_id)
    if row is None:
        raise StartupNotFoundError(f"No startup with id {startup_id!r}")
    return row


async def create_startup(
    user_id: str,
    name: str,
    factors: FactorSet,
    description: Optional[str] = None,
    scored_manually: bool = True,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> StartupRecord:
    """Save a new startup, scoring it from its factors."""
    name = name.strip()
    if not name:
        raise ValueError("Startup name is required")

    now = datetime.utcnow()
    row = Startup(
        id=str(uuid.uuid4()),
        user_id=user_id,
        name=name,
        description=description or None,
        factors=_dump_factors(factors),
        score=compute_score(factors, mode),
        scored_manually=scored_manually,
        manually_edited=False,
        created_at=now,
        updated_at=now,
    )

    session_factory = get_session_factory()
    async with session_factory() as session:
        session.add(row)
        await session.flush()
        session.add(_snapshot(row, now))
        await session.commit()

    logger.info("Saved startup %s (%s) with score %.4f", row.name, row.id, row.score)
    return _to_record(row)


async def get_startup(startup_id: str) -> StartupRecord:
    session_factory = get_session_factory()
    async with session_factory() as session:
        row = await _get_row(session, startup_id)
        return _to_record(row)


async def list_startups(user_id: str) -> list[StartupRecord]:
    """All startups saved by a user, newest first."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(Startup)
            .where(Startup.user_id == user_id)
            .order_by(Startup.created_at.desc())
        )
        rows = result.scalars().all()
    return [_to_record(r) for r in rows]


async def update_startup(
    startup_id: str,
    factors: Optional[FactorSet] = None,
    name: Optional[str] = None,
    description: Optional[str] = None,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> StartupRecord:
    """Edit a saved startup.

    Only a change of factors rescores the startup: the score is recomputed,
    ``manually_edited`` is cleared, the startup counts as scored by hand and a
    snapshot is appended. Renaming or redescribing leaves the score, any
    manual override and the scoring flags as they were.
    """
    now = datetime.utcnow()
    session_factory = get_session_factory()
    async with session_factory() as session:
        row = await _get_row(session, startup_id)

        if factors is not None and _dump_factors(factors) != row.factors:
            row.factors = _dump_factors(factors)
            row.score = compute_score(factors, mode)
            row.manually_edited = False
            row.scored_manually = True
            session.add(_snapshot(row, now))
            logger.info("Rescored startup %s to %.4f", startup_id, row.score)
        if name is not None and name.strip():
            row.name = name.strip()
        if description is not None:
            row.description = description or None
        row.updated_at = now
        await session.commit()
        return _to_record(row)


async def override_score(startup_id: str, score: float) -> StartupRecord:
    """Hand-edit a startup's score. The value is clamped to [0, 1]."""
    now = datetime.utcnow()
    session_factory = get_session_factory()
    async with session_factory() as session:
        row = await _get_row(session, startup_id)
        row.score = clamp01(float(score))
        row.manually_edited = True
        row.updated_at = now
        session.add(_snapshot(row, now))
        await session.commit()
        logger.info("Score for startup %s manually set to %.4f", startup_id, row.score)
        return _to_record(row)


async def delete_startup(startup_id: str) -> None:
    """Delete a startup with its history and pitch deck records."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        row = await _get_row(session, startup_id)
        await session.execute(delete(ScoreSnapshot).where(ScoreSnapshot.startup_id == startup_id))
        await session.execute(delete(PitchDeck).where(PitchDeck.startup_id == startup_id))
        await session.delete(row)
        await session.commit()
    logger.info("Deleted startup %s", startup_id)


async def get_score_history(startup_id: str) -> list[ScoreHistoryEntry]:
    """Score snapshots for a startup, oldest first."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        await _get_row(session, startup_id)
        result = await session.execute(
            select(ScoreSnapshot)
            .where(ScoreSnapshot.startup_id == startup_id)
            .order_by(ScoreSnapshot.recorded_at.asc(), ScoreSnapshot.id.asc())
        )
        rows = result.scalars().all()

    return [
        ScoreHistoryEntry(
            score=r.score,
            manually_edited=r.manually_edited,
            factors=_load_factors(r.factors),
            recorded_at=r.recorded_at,
        )
        for r in rows
    ]


async def record_pitch_deck(startup_id: str, file_name: str, analysis: PitchDeckAnalysis) -> int:
    """Attach an analyzed document to a startup. Returns the record id."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        await _get_row(session, startup_id)
        deck = PitchDeck(
            startup_id=startup_id,
            file_name=file_name,
            analysis_complete=True,
            analysis_results=analysis.model_dump_json(by_alias=True),
            created_at=datetime.utcnow(),
        )
        session.add(deck)
        await session.commit()
        return deck.id


async def get_free_usage(user_id: str, limit: int) -> UsageStatus:
    session_factory = get_session_factory()
    async with session_factory() as session:
        row = await session.get(UsageCounter, user_id)
    used = row.free_analyses_used if row else 0
    return UsageStatus(user_id=user_id, free_analyses_used=used, free_analyses_limit=limit)


async def reserve_free_analysis(user_id: str, limit: int) -> bool:
    """Claim one of the user's free analyses. Returns False when none are left.

    The check and the increment are a single upsert, so concurrent calls can
    never claim more than ``limit`` analyses between them.
    """
    if limit <= 0:
        return False

    now = datetime.utcnow()
    counters = UsageCounter.__table__
    stmt = (
        sqlite_insert(counters)
        .values(user_id=user_id, free_analyses_used=1, updated_at=now)
        .on_conflict_do_update(
            index_elements=[counters.c.user_id],
            set_={"free_analyses_used": counters.c.free_analyses_used + 1, "updated_at": now},
            where=counters.c.free_analyses_used < limit,
        )
    )
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(stmt)
        await session.commit()

    reserved = result.rowcount == 1
    if reserved:
        logger.info("Reserved a free analysis for user %s (limit %d)", user_id, limit)
    return reserved


async def release_free_analysis(user_id: str) -> None:
    """Give back a reserved free analysis after the LLM call failed."""
    stmt = (
        update(UsageCounter)
        .where(UsageCounter.user_id == user_id, UsageCounter.free_analyses_used > 0)
        .values(free_analyses_used=UsageCounter.free_analyses_used - 1, updated_at=datetime.utcnow())
    )
    session_factory = get_session_factory()
    async with session_factory() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info("Released a free analysis for user %s", user_id)
