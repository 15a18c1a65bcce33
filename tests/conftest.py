"""Общие фикстуры тестов: отдельная SQLite база на каждый тест."""
import os

# Настройки читаются при импорте curated.core.config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import asyncio
import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import curated.db.models  # noqa: F401
from curated.core.db import get_db
from curated.core.security import create_access_token
from curated.db.base import Base
from curated.db.repositories.user_repository import UserRepository
from curated.domains.identity.entities import User
from curated.domains.sources.schemas import AuthorCreate, SourceCreate
from curated.domains.sources.services import SourceService


class FakeClock:
    """Часы, которые сдвигаются на step при каждом вызове"""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0), step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        self.current = self.current + self.step
        return self.current


def make_domain_user(name: str, is_admin: bool = False, is_active: bool = True) -> User:
    return User(
        uuid=uuid.uuid4(),
        email=f"{name}@example.com",
        username=name,
        is_admin=is_admin,
        is_active=is_active
    )


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.uuid)})
    return {"Authorization": f"Bearer {token}"}


async def create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def engine(anyio_backend, tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def member(session):
    return await UserRepository(session).create(make_domain_user("alice"))


@pytest.fixture
async def other_member(session):
    return await UserRepository(session).create(make_domain_user("bob"))


@pytest.fixture
async def admin(session):
    return await UserRepository(session).create(make_domain_user("root", is_admin=True))


@pytest.fixture
async def source(session, member, clock):
    service = SourceService(session, clock=clock)
    author = await service.create_author(
        AuthorCreate(first_name="Ada", last_name="Lovelace"), member.to_identity()
    )
    return await service.create_source(
        SourceCreate(author_ids=[author.uuid], title="Notes on the Analytical Engine"),
        member.to_identity()
    )


# HTTP-тесты: TestClient работает в своём цикле событий, поэтому база
# создаётся синхронно, а соединения не переиспользуются (NullPool).

@pytest.fixture
def api_sessionmaker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    asyncio.run(create_schema(engine))
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def api_users(api_sessionmaker):
    async def seed():
        async with api_sessionmaker() as session:
            repository = UserRepository(session)
            return {
                "alice": await repository.create(make_domain_user("alice")),
                "bob": await repository.create(make_domain_user("bob")),
                "root": await repository.create(make_domain_user("root", is_admin=True)),
                "ghost": await repository.create(make_domain_user("ghost", is_active=False)),
            }

    return asyncio.run(seed())


@pytest.fixture
def client(api_sessionmaker):
    from curated.main import app

    async def override_get_db():
        async with api_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
