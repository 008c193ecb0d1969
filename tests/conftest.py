from types import SimpleNamespace

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import estate_crm.models  # noqa: F401
from estate_crm.core import config
from estate_crm.db.base_class import Base
from estate_crm.db.redis_client import get_redis
from estate_crm.db.session import get_db
from estate_crm.main import app
from estate_crm.services.admin_bootstrap import create_staff_account
from estate_crm.services.ai_chat import get_ai_client

PASSWORD = "s3cure-pass"


class StubCompletions:
    """Stands in for `client.chat.completions` of the gateway SDK."""

    def __init__(self):
        self.calls = []
        self.reply = "We have several apartments in Clifton Block 5."
        self.error = None

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class StubAIClient:
    def __init__(self):
        self.chat = SimpleNamespace(completions=StubCompletions())


@pytest.fixture
async def engine():
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
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def redis():
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def ai_client():
    return StubAIClient()


@pytest.fixture
def ai_configured(monkeypatch):
    monkeypatch.setattr(config, "AI_GATEWAY_API_KEY", "test-gateway-key")


@pytest.fixture
async def client(session_factory, redis, ai_client):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        yield redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_ai_client] = lambda: ai_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _login(client, email):
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_staff(session_factory, client):
    """Create a staff account and return its agent id plus auth headers."""

    async def _make(email, role="agent", name="Staff Member"):
        async with session_factory() as session:
            _, agent = await create_staff_account(session, email, PASSWORD, name, role=role)
        headers = await _login(client, email)
        return SimpleNamespace(agent_id=agent.agent_id, name=name, headers=headers)

    return _make


@pytest.fixture
async def admin(make_staff):
    return await make_staff("sara@estatebnk.pk", role="admin", name="Sara Sheikh")


@pytest.fixture
async def agent(make_staff):
    return await make_staff("ahmed@estatebnk.pk", role="agent", name="Ahmed Raza")
