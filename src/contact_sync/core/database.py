"""Async SQLAlchemy engine and session plumbing.

Provides:
- Base: Declarative base for all persistence models (contacts table)
- get_engine(): Lazily created async engine singleton
- session_factory(): async_sessionmaker used by repositories
- init_db() / close_db(): create tables and dispose the engine
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.contact_sync.config import get_settings

# ── Module-level engine (lazy init) ────────────────────────────────────────

_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.DATABASE_URL, echo=False)
    return _engine


# ── Declarative Base ────────────────────────────────────────────────────────


class Base(DeclarativeBase):
    """Base class for contact-sync persistence models."""


# ── Session Factories ───────────────────────────────────────────────────────


def session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """Return the session maker repositories open sessions from."""
    return async_sessionmaker(engine or get_engine(), expire_on_commit=False)


# ── Database Initialization ─────────────────────────────────────────────────


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all registered tables if they don't exist."""
    import src.contact_sync.contacts.models  # noqa: F401 -- registers tables on Base

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and close all connections."""
    global _engine
    if _engine:
        await _engine.dispose()
        _engine = None
