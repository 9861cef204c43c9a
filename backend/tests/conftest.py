"""
ProgressLog Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── mock_db_session: AsyncMock session for service unit tests (no database)
    ├── database: Database handle on a fresh SQLite file with the schema created
    ├── test_app: FastAPI app wired to that database
    ├── test_client: HTTPX AsyncClient talking to test_app over ASGITransport
    └── sample_payload: a complete record body
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any app import: app.main builds its module-level app from settings
_default_db_dir = tempfile.mkdtemp(prefix="progresslog_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_default_db_dir}/default.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("STATIC_DIR", None)
os.environ.pop("DB_SSL", None)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.rowcount = 1
        changes = await record_service.update_record(mock_db_session, 1, payload)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database(tmp_path):
    """Database handle on a per-test SQLite file, schema already created."""
    from app.database import Database

    db = Database(database_url=f"sqlite+aiosqlite:///{tmp_path}/records.db")
    await db.init_schema()
    yield db
    await db.dispose()


@pytest.fixture
def test_app(database):
    from app.main import create_app

    return create_app(database=database)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    ASGITransport does not run the lifespan; the `database` fixture has
    already created the schema.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_payload():
    """A record body with every field set."""
    return {
        "name": "Ahmad",
        "quantity": 3,
        "quantity_text": "three",
        "unit": "صفحة",
        "score": 8,
        "evaluation": "excellent",
        "notes": "reviewed the previous lesson",
        "frequency": "daily",
        "attendance": "present",
        "timestamp": 1_700_000_000_000,
        "kind": "record",
    }
