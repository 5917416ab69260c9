"""SQLAlchemy models for local SQLite storage.

Stores saved startups with their factor sets, a snapshot of every score
change, pitch deck analysis records, and per-user free analysis counters.
Factor sets are stored as camelCase JSON.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Startup(Base):
    """A named startup with its factors and score."""

    __tablename__ = "startups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    factors: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    scored_manually: Mapped[bool] = mapped_column(Boolean, default=True)
    manually_edited: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_startups_user_created", "user_id", "created_at"),
    )


class ScoreSnapshot(Base):
    """A point-in-time snapshot of a startup's score."""

    __tablename__ = "score_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    startup_id: Mapped[str] = mapped_column(String(36), ForeignKey("startups.id", ondelete="CASCADE"), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    factors: Mapped[str] = mapped_column(Text, nullable=False)
    manually_edited: Mapped[bool] = mapped_column(Boolean, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_snapshot_startup_recorded", "startup_id", "recorded_at"),
    )


class PitchDeck(Base):
    """A document analyzed for a startup."""

    __tablename__ = "pitch_decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    startup_id: Mapped[str] = mapped_column(String(36), ForeignKey("startups.id", ondelete="CASCADE"), nullable=False)
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    analysis_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    analysis_results: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class UsageCounter(Base):
    """How many free analyses a user has consumed."""

    __tablename__ = "usage_counters"

    user_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    free_analyses_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
