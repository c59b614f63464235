import os

# Must be set before edushare.config is imported
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///:memory:')
os.environ['ENABLE_SCHEDULER'] = 'false'

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from edushare.main import app
from edushare.db.database import Base, get_db
from edushare.models.user import User
from edushare.services.storage import LocalStorage, get_storage
import edushare.models  # noqa: F401


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path / "test.db"}', echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / 'uploads')


@pytest.fixture
async def client(session_factory, storage):
    """Async HTTP client for testing."""

    async def override_get_db():
        """Override database dependency for tests."""
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory):
    """Database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """Insert a user row directly, bypassing registration."""

    async def _make(username: str, weekly_score: int = 0, lifetime_score: int = 0, role: str = 'student'):
        async with session_factory() as session:
            user = User(
                username=username,
                email=f'{username}@example.com',
                password_hash='not-a-real-hash',
                role=role,
                score=lifetime_score,
                weekly_score=weekly_score,
                lifetime_score=lifetime_score,
            )
            session.add(user)
            await session.commit()
            return user.id

    return _make


@pytest.fixture
def register(client):
    """Register through the API. Returns (auth headers, user id)."""

    async def _register(username: str, role: str = 'student', password: str = 'password123'):
        resp = await client.post('/api/auth/register', json={
            'username': username,
            'email': f'{username}@example.com',
            'password': password,
            'role': role,
        })
        assert resp.status_code == 201, resp.text
        headers = {'Authorization': f'Bearer {resp.json()["token"]}'}
        me = await client.get('/api/auth/me', headers=headers)
        assert me.status_code == 200, me.text
        return headers, me.json()['id']

    return _register


@pytest.fixture
def scores_of(client):
    """Read (weekly, lifetime) for a registered user through /me."""

    async def _scores(headers: dict) -> tuple[int, int]:
        resp = await client.get('/api/auth/me', headers=headers)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        return data['weekly_score'], data['lifetime_score']

    return _scores
