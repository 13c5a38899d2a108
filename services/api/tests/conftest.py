import os

# Must be set before app.config is imported
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("TRACING_ENABLED", "false")

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, enable_sqlite_foreign_keys, get_db
from app.deps import get_session
from app.main import app
from app.models import Profile
from app.schemas import Session, SessionUser


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Switch the caller identity for subsequent requests; None = anonymous."""

    def _login(user_id: Optional[str]) -> None:
        session = None
        if user_id is not None:
            session = Session(user=SessionUser(id=user_id, email=f"{user_id}@example.com"))
        app.dependency_overrides[get_session] = lambda: session

    return _login


@pytest.fixture
def get_profile(session_factory):
    """Read a profile row straight from the database, bypassing the API."""

    async def _get(user_id: str) -> Optional[Profile]:
        async with session_factory() as session:
            result = await session.execute(select(Profile).where(Profile.user_id == user_id))
            return result.scalar_one_or_none()

    return _get
