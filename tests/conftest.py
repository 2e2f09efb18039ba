# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets up test environment variables before the app is imported, then
# provides an in-memory database, a fake chat provider and an HTTP client
# wired to both.
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.core.config builds settings at import time

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")

from typing import List, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.stream import get_chat_provider
from app.main import app
from app.models.user import User
from app.repositories.user import UserRepository
from app.utils.exceptions import UpstreamError

TEST_PASSWORD = "secret123"


class FakeChatProvider:
    """In-memory stand-in for the Stream chat provider."""

    def __init__(self):
        self.upserts: List[Tuple[int, str, str]] = []
        self.fail_upsert = False

    async def upsert_user(self, user_id: int, name: str, image_url: str) -> None:
        if self.fail_upsert:
            raise UpstreamError("Error upserting chat user")
        self.upserts.append((user_id, name, image_url))

    def create_token(self, user_id: int) -> str:
        return f"chat-token-{user_id}"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def chat_provider():
    return FakeChatProvider()


@pytest.fixture
def make_user(session_factory):
    """Factory that inserts a user directly, optionally already onboarded."""

    async def _make_user(email: str, full_name: str = "Test User", onboarded: bool = False) -> User:
        async with session_factory() as session:
            repo = UserRepository(session)
            user = await repo.create(full_name, email, TEST_PASSWORD, "https://avatar.example.com/1.png")
            if onboarded:
                await repo.update_profile(user.id, {
                    "bio": "Hello",
                    "native_language": "english",
                    "learning_language": "spanish",
                    "location": "Lisbon",
                })
            await session.commit()
            return user

    return _make_user


# =============================================================================
# HTTP Client Fixtures
# =============================================================================

@pytest.fixture
async def client(session_factory, chat_provider):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chat_provider] = lambda: chat_provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def signup(client: AsyncClient, email: str, full_name: str = "Test User", password: str = TEST_PASSWORD):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"full_name": full_name, "email": email, "password": password},
    )
    # Several users share one client; tests pick the identity explicitly
    client.cookies.clear()
    return response


def cookie_value(response, name: str):
    """Value of a cookie from the response's Set-Cookie headers."""
    for header in response.headers.get_list("set-cookie"):
        key, _, rest = header.partition("=")
        if key.strip() == name:
            return rest.split(";", 1)[0]
    return None


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
