import os

os.environ.setdefault("TELEMETRY_ENABLED", "false")
os.environ.setdefault("API_KEY_PEPPER", "test-pepper")
os.environ.setdefault("INTERNAL_ADMIN_KEY", "test-internal")

import pytest
import httpx

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

# Import Base + all models so metadata is complete
from hotelhub.models import Base

from hotelhub.main import app
from hotelhub.core.db import get_db

from fixtures_seed import seed_accounts  # noqa: F401


def _test_db_url(tmp_path) -> str:
    # PostgreSQL when provided, otherwise a throwaway SQLite file per test
    return os.getenv("DATABASE_URL_TEST") or f"sqlite+aiosqlite:///{tmp_path / 'hotelhub.db'}"


@pytest.fixture
async def async_engine(tmp_path):
    engine = create_async_engine(_test_db_url(tmp_path))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
    """
    Session for seeding and for asserting on committed state.
    Requests get their own sessions, like in production.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """
    HTTP client on the ASGI app, one database session per request.
    """
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def hotel_body():
    def _make(name: str = "Seaside Inn", **overrides) -> dict:
        body = {
            "name": name,
            "city": "Xiamen",
            "address": "1 Harbour Road",
            "phone": "0592-1234567",
            "price": 399,
            "star_level": 4,
            "tags": "sea view, breakfast，sea view",
            "description": "Quiet rooms by the water.",
            "roomTypes": [
                {"name": "Standard King", "price": 399},
                {"name": "Family Suite", "price": 699, "description": "Two bedrooms"},
            ],
        }
        body.update(overrides)
        return body

    return _make
