"""
Pytest configuration for Describer tests.

Database-backed tests run against an in-memory SQLite database through
aiosqlite. Webhook dispatch is replaced with a recorder so nothing
reaches Celery.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncGenerator

import httpx
import pytest
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from describer.core.database import get_db
from describer.core.dependencies import get_redis
from describer.core.security import create_access_token
from describer.main import app
from describer.models import (
    Base,
    Endpoint,
    License,
    Membership,
    MembershipRole,
    Metum,
    Organization,
    ResourceGroup,
    User,
)
from describer.services import webhooks


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def webhook_calls(monkeypatch) -> list:
    """Resource ids handed to the webhook queue, in order."""
    calls = []
    monkeypatch.setattr(webhooks, "enqueue_webhook_delivery", calls.append)
    return calls


# ---------------------------------------------------------------------------
# Tenant data
# ---------------------------------------------------------------------------

@dataclass
class Tenant:
    organization: Organization
    owner: User
    admin: User
    editor: User
    author: User
    viewer: User
    default_group: ResourceGroup
    short_metum: Metum
    endpoint: Endpoint
    license: License

    def member(self, role: MembershipRole) -> User:
        return getattr(self, role.value)


def make_user(name: str, *, staff: bool = False) -> User:
    return User(email=f"{name}@example.com", display_name=name.title(), staff=staff, is_active=True)


async def seed_tenant(session: AsyncSession, slug: str = "museum") -> Tenant:
    """An organization with one active member per role, its default group and lookups."""
    org = Organization(name=slug.title(), slug=slug)
    session.add(org)

    users = {}
    started = datetime(2026, 1, 1, 9, 0, 0)
    # owner joined first, so owner is the default representation author
    for offset, role in enumerate(reversed(list(MembershipRole))):
        user = make_user(f"{role.value}-{slug}")
        session.add(user)
        session.add(
            Membership(
                organization=org,
                user=user,
                role=role,
                active=True,
                created_at=started + timedelta(minutes=offset),
            )
        )
        users[role.value] = user

    default_group = ResourceGroup(organization=org, title="Uncategorized", is_default=True)
    short_metum = Metum(organization=org, title="Short")
    session.add_all([default_group, short_metum])

    # endpoints and licenses are shared by every organization
    endpoint = (
        await session.execute(select(Endpoint).where(Endpoint.name == "Any"))
    ).scalar_one_or_none()
    if endpoint is None:
        endpoint = Endpoint(name="Any")
        session.add(endpoint)
    license = (
        await session.execute(select(License).where(License.name == "cc0-1.0"))
    ).scalar_one_or_none()
    if license is None:
        license = License(name="cc0-1.0", title="CC0 1.0 Universal")
        session.add(license)
    await session.flush()

    return Tenant(
        organization=org,
        owner=users["owner"],
        admin=users["admin"],
        editor=users["editor"],
        author=users["author"],
        viewer=users["viewer"],
        default_group=default_group,
        short_metum=short_metum,
        endpoint=endpoint,
        license=license,
    )


@pytest.fixture
async def tenant(db) -> Tenant:
    tenant = await seed_tenant(db)
    await db.commit()
    return tenant


@pytest.fixture
async def other_tenant(db, tenant) -> Tenant:
    other = await seed_tenant(db, slug="archive")
    await db.commit()
    return other


@pytest.fixture
async def staff_user(db) -> User:
    user = make_user("staffer", staff=True)
    db.add(user)
    await db.commit()
    return user


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

class FakeRedis:
    """Revocation list that never contains anything."""

    async def exists(self, *keys) -> int:
        return 0


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_redis() -> FakeRedis:
        return FakeRedis()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    return auth_headers
