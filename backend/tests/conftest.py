"""
CityGuide Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite, one
       shared connection through StaticPool) with all tables created from
       Base.metadata. API tests talk to the real app over ASGITransport with
       get_db_session overridden to use that database.

Fixture Hierarchy:
    db_engine ── session_factory ─┬── db_session      service-level tests
                                  ├── test_client     API tests
                                  └── seed            committed test data for API tests

    make_user / make_place: builders that add rows to a given session
    auth_headers:           Authorization header for a user
"""

import os
import tempfile

# Must happen before anything imports cityguide.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-0123456789"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="cityguide_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["BCRYPT_ROUNDS"] = "4"

import uuid
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import cityguide.models  # noqa: F401
from cityguide.database import Base, get_db_session, utcnow
from cityguide.main import app
from cityguide.models.place import DEFAULT_PLACE_IMAGE, Place
from cityguide.models.user import ROLE_USER, User
from cityguide.services.auth_service import hash_password
from cityguide.services.token_service import token_service

DEFAULT_PASSWORD = "secret123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    A session for service-level tests. Services only flush, so tests can
    inspect state without committing.
    """
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Builders
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def make_user():
    """
    Usage:
        owner = await make_user(db_session, name="Owner")
        admin = await make_user(db_session, role="admin")
    """

    async def _make(
        session: AsyncSession,
        name: str = "Test User",
        email: Optional[str] = None,
        role: str = ROLE_USER,
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            name=name,
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        await session.flush()
        return user

    return _make


@pytest.fixture
def make_place():
    async def _make(session: AsyncSession, owner_id: Optional[uuid.UUID] = None, **fields) -> Place:
        values = {
            "name": "Blue Tokai Cafe",
            "category": "cafe",
            "city": "Mumbai",
            "description": "Single-origin coffee and pastries",
            "image": DEFAULT_PLACE_IMAGE,
            "address": "Lower Parel, Mumbai",
        }
        values.update(fields)
        rating = values.pop("rating", 0.0)
        place = Place(
            id=uuid.uuid4(),
            owner_id=owner_id,
            total_reviews=values.pop("total_reviews", 0),
            average_rating=rating,
            rating=rating,
            reviews=[],
            created_at=utcnow(),
            updated_at=utcnow(),
            **values,
        )
        session.add(place)
        await session.flush()
        return place

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> Dict[str, str]:
        token = token_service.issue(
            user_id=str(user.id), email=user.email, name=user.name, role=user.role
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ══════════════════════════════════════════════════════════════════════════
# API
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient bound to the FastAPI app (no server, no lifespan).

    Each request gets its own session that commits on success, mirroring
    get_db_session.
    """

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def seed(session_factory, make_user, make_place):
    """
    Commits arranged rows for API tests, outside any request.

    Usage:
        owner = await seed.user(name="Owner")
        place = await seed.place(owner_id=owner.id, city="Pune")
    """

    class Seeder:
        async def user(self, **kwargs) -> User:
            async with session_factory() as session:
                user = await make_user(session, **kwargs)
                await session.commit()
                return user

        async def place(self, **kwargs) -> Place:
            async with session_factory() as session:
                place = await make_place(session, **kwargs)
                await session.commit()
                return place

    return Seeder()
