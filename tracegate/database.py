"""Record store connection and session management."""

import logging
from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from fastapi import Request
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def get_engine_url_and_connect_args(database_url: str) -> tuple[str, dict]:
    """Strip sslmode from URL (asyncpg doesn't accept it) and request SSL via connect_args."""
    url = database_url
    connect_args: dict = {}
    if "sslmode=" in url or "ssl=" in url:
        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        query.pop("sslmode", None)
        query.pop("ssl", None)
        new_query = urlencode(query, doseq=True)
        url = urlunparse(parsed._replace(query=new_query))
        if url.startswith("postgresql+asyncpg"):
            connect_args["ssl"] = "require"
    return url, connect_args


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class RecordStore:
    """Owns the engine and session factory for one store.

    The store is constructed explicitly and has a bounded lifetime:
    ``open()`` creates the engine (and the schema when ``create_schema`` is
    set), ``close()`` disposes of it. Tests build one per temporary database.
    """

    def __init__(self, database_url: str, echo: bool = False, create_schema: bool = True):
        self.database_url = database_url
        self.echo = echo
        self.create_schema = create_schema
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> "RecordStore":
        if self._engine is not None:
            return self
        url, connect_args = get_engine_url_and_connect_args(self.database_url)
        self._engine = create_async_engine(url, echo=self.echo, connect_args=connect_args)
        self._session_maker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
        if self.create_schema:
            # Registers the mapped tables on Base.metadata
            import tracegate.models  # noqa: F401

            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Record store opened (%s)", url.split("://", 1)[0])
        return self

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        logger.info("Record store closed")

    def session(self) -> AsyncSession:
        if self._session_maker is None:
            raise RuntimeError("Record store is not open")
        return self._session_maker()

    async def __aenter__(self) -> "RecordStore":
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database sessions."""
    store: RecordStore = request.app.state.store
    async with store.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
