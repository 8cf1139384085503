import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("EMAIL_USER", None)

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from foodshare.auth import pwd_context
from foodshare.celery_app import celery_app
from foodshare.database import Base, get_db
from foodshare.main import app
from foodshare.utils import utcnow

# fast hashes; nothing here tests bcrypt strength
pwd_context.update(bcrypt__rounds=4)


# --- 1) in-memory SQLite, fresh for every test ---
@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# --- 2) celery: record instead of publishing ---
class DummyTask:
    def __init__(self, id):
        self.id = id


@pytest.fixture
def sent_tasks(monkeypatch):
    sent = []

    def _send_task(name, args=None, kwargs=None, **options):
        sent.append((name, list(args or [])))
        return DummyTask(id=f"task-{len(sent)}")

    monkeypatch.setattr(celery_app, "send_task", _send_task)
    return sent


@pytest_asyncio.fixture
async def client(session_factory, sent_tasks):
    # one session per request, like the real dependency
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --- 3) helpers for building a scenario through the API ---
class Api:
    def __init__(self, client: AsyncClient):
        self.client = client
        self._seq = 0

    @staticmethod
    def auth(token):
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def at(hours: float) -> str:
        return (utcnow() + timedelta(hours=hours)).isoformat()

    async def register(self, role, email=None, password="secret123", **extra):
        self._seq += 1
        payload = {
            "email": email or f"{role}{self._seq}@example.com",
            "password": password,
            "role": role,
            "first_name": role.title(),
            "last_name": f"User{self._seq}",
        }
        payload.update(extra)
        r = await self.client.post("/api/auth/register", json=payload)
        assert r.status_code == 201, r.text
        return r.json()

    async def restaurant(self, name="Green Bistro", latitude=40.7128, longitude=-74.0060, **extra):
        token = (await self.register("restaurant", **extra))["token"]
        r = await self.client.post(
            "/api/restaurants/profile",
            json={"name": name, "address": "1 Main St", "latitude": latitude, "longitude": longitude},
            headers=self.auth(token),
        )
        assert r.status_code == 200, r.text
        return token

    async def organization(self, name="City Shelter", org_type="shelter", **extra):
        token = (await self.register("organization", **extra))["token"]
        r = await self.client.post(
            "/api/organizations/profile",
            json={"name": name, "type": org_type, "address": "9 Side St", "capacity": 80},
            headers=self.auth(token),
        )
        assert r.status_code == 200, r.text
        return token

    async def volunteer(self, **extra):
        token = (await self.register("volunteer", **extra))["token"]
        r = await self.client.post(
            "/api/volunteers/profile",
            json={"transportation_type": "car", "max_distance": 15},
            headers=self.auth(token),
        )
        assert r.status_code == 200, r.text
        return token

    async def listing(self, token, **overrides):
        payload = {
            "title": "Vegetable soup",
            "description": "Fresh minestrone",
            "food_type": "prepared",
            "quantity": 10,
            "unit": "servings",
            "pickup_time_start": self.at(1),
            "pickup_time_end": self.at(3),
            "expiry_date": self.at(6),
        }
        payload.update(overrides)
        r = await self.client.post("/api/food-listings", json=payload, headers=self.auth(token))
        assert r.status_code == 201, r.text
        return r.json()["listing"]

    async def claim(self, token, listing_id, quantity=5, pickup_hours=2, notes=None):
        return await self.client.post(
            "/api/food-claims",
            json={
                "food_listing_id": listing_id,
                "claimed_quantity": quantity,
                "pickup_scheduled_time": self.at(pickup_hours),
                "notes": notes,
            },
            headers=self.auth(token),
        )

    async def set_status(self, token, claim_id, status, notes=None):
        body = {"status": status}
        if notes is not None:
            body["notes"] = notes
        return await self.client.put(
            f"/api/food-claims/{claim_id}/status", json=body, headers=self.auth(token)
        )


@pytest.fixture
def api(client):
    return Api(client)
