"""
Async SQLAlchemy engine and session factory for the companies table.

Env vars (set in .env or the deployment environment):
    DATABASE_URL  -- postgres:// or postgresql:// connection string; rewritten
                     to postgresql+asyncpg://. Defaults to a local SQLite file.
    DB_SSL        -- "true" to connect to Postgres over TLS without
                     certificate verification (managed Postgres hosts).
"""

from __future__ import annotations

import ssl
from typing import Any, AsyncIterator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src import config

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./local.db"


def normalize_database_url(raw_url: str) -> str:
    """Map provider-style Postgres URLs onto the asyncpg driver."""
    if not raw_url:
        return DEFAULT_DATABASE_URL
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


def _connect_args(url: str, use_ssl: bool) -> Dict[str, Any]:
    if not use_ssl or not url.startswith("postgresql+asyncpg"):
        return {}
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return {"ssl": ctx}


def make_engine(url: str | None = None, *, use_ssl: bool | None = None, **kwargs: Any) -> AsyncEngine:
    url = normalize_database_url(url if url is not None else config.DATABASE_URL)
    use_ssl = config.DB_SSL if use_ssl is None else use_ssl
    return create_async_engine(
        url, echo=False, connect_args=_connect_args(url, use_ssl), **kwargs
    )


DATABASE_URL = normalize_database_url(config.DATABASE_URL)

engine = make_engine(DATABASE_URL)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables (safe to call multiple times)."""
    # models must be imported so the table is registered on Base.metadata
    from . import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session
