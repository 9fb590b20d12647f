"""SQLAlchemy ORM models for the Ladderwatch database.

Two tables: ``clubs`` (what the user tracks) and ``cached_ladders`` (the last
ladder snapshot fetched for each grade, replayed into memory at startup).
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class ClubRow(Base):
    __tablename__ = "clubs"

    org_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    short_name: Mapped[str] = mapped_column(String(100), default="")
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    added_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


class CachedLadderRow(Base):
    """Last successfully fetched ladder for a grade. One row per grade, upserted."""

    __tablename__ = "cached_ladders"

    grade_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    grade_name: Mapped[str] = mapped_column(String(200), nullable=False)
    payload: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
