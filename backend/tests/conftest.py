"""Shared fixtures: in-memory SQLite database, seeded forum data, API client."""

import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from datetime import datetime, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, enable_sqlite_foreign_keys, get_db
from app.core.security import Session, create_access_token
from app.main import app
from app.models.forum import Post, PostVote, Sub, UserSub
from app.models.user import User

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(db_session):
    """Two users: alice (member of python) and bob (member of rust)."""
    alice = User(email="alice@example.com", username="alice")
    bob = User(email="bob@example.com", username="bob")
    db_session.add_all([alice, bob])
    await db_session.flush()

    db_session.add_all(
        [
            Sub(name="python", creator_id=alice.id),
            Sub(name="rust", creator_id=bob.id),
            Sub(name="golang", creator_id=bob.id),
        ]
    )
    await db_session.flush()

    db_session.add_all(
        [
            UserSub(user_id=alice.id, sub_name="python"),
            UserSub(user_id=bob.id, sub_name="rust"),
        ]
    )
    await db_session.commit()
    return alice, bob


async def add_post(db_session, creator_id: int, sub_name: str, minutes: int, title: str = "") -> Post:
    """Insert a post created ``minutes`` after BASE_TIME."""
    created = BASE_TIME + timedelta(minutes=minutes)
    post = Post(
        creator_id=creator_id,
        sub_name=sub_name,
        title=title or f"{sub_name} post at {minutes}",
        body="body",
        created_at=created,
        updated_at=created,
    )
    db_session.add(post)
    await db_session.flush()
    return post


async def add_votes(db_session, post_id: int, votes: dict[int, int]) -> None:
    """Insert ``{user_id: value}`` votes on a post."""
    db_session.add_all(
        [PostVote(user_id=user_id, post_id=post_id, value=value) for user_id, value in votes.items()]
    )
    await db_session.flush()


def session_for(user: User) -> Session:
    return Session(user_id=user.id)


def auth_headers(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest_asyncio.fixture
async def client(session_factory):
    """API client whose requests use the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
