"""
ProgressLog Backend — Database Handle & Session Management
============================================================

What:  An explicitly constructed `Database` handle owning the async engine,
       the session factory and schema bootstrap, plus the FastAPI dependency
       that lends one session to each request.
How:   The application factory builds one handle and stores it on
       `app.state.db`; the lifespan creates the schema on startup and
       disposes the pool on shutdown. Route handlers receive a session via
       `Depends(get_db_session)`, which rolls back on error and always
       closes. Its teardown runs after the response is sent, so the service
       commits every write itself; the closing commit only ends reads.

Connection Pooling:
    pool_size / max_overflow come from settings (PostgreSQL only; SQLite,
    used by the test suite, keeps SQLAlchemy's own pool defaults).
    pool_pre_ping validates connections before use.
    pool_recycle=3600 recycles connections every hour.

TLS:
    When `settings.use_ssl` is true the asyncpg driver receives an SSL
    context with certificate verification and hostname checks disabled,
    which is what managed PostgreSQL providers with self-signed
    certificates require.
"""

import logging
import ssl
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Models register themselves on `Base.metadata`, which `Database.init_schema`
    uses to create missing tables.
    """
    pass


def _insecure_ssl_context() -> ssl.SSLContext:
    """TLS without certificate or hostname verification."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class Database:
    """
    Owns the connection pool for the lifetime of one application instance.

    Usage:
        db = Database.from_settings(settings)
        await db.init_schema()
        async with db.session() as session:
            ...
        await db.dispose()
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        use_ssl: bool = False,
        echo: bool = False,
    ):
        self.url = make_url(database_url)

        engine_kwargs: Dict[str, Any] = {
            "pool_pre_ping": pool_pre_ping,
            "echo": echo,
        }
        if self.url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        if use_ssl:
            engine_kwargs["connect_args"] = {"ssl": _insecure_ssl_context()}

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)

        # expire_on_commit=False: attributes stay readable after a service commit
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a handle from application settings."""
        return cls(
            database_url=settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            use_ssl=settings.use_ssl,
            echo=settings.log_level == "DEBUG",
        )

    async def init_schema(self) -> None:
        """
        Create every registered table and index that does not exist yet.

        Idempotent: create_all checks for each object before creating it.
        Errors propagate; the lifespan treats them as fatal.
        """
        # Registers the models on Base.metadata
        from app.models import record  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready (%s)", self.url.render_as_string(hide_password=True))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Scoped unit of work: commit on success, roll back on any error,
        always close so the connection returns to the pool.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Run SELECT 1; True when the database answered."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The handle is looked up on `request.app.state.db`, so each application
    instance (including the ones built by the test suite) uses its own pool.

    Example usage in a route:
        @router.get("/records")
        async def list_records(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Optional[Database] = getattr(request.app.state, "db", None)
    if database is None:
        raise RuntimeError("Database handle is not attached to the application")
    async with database.session() as session:
        yield session
