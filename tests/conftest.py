from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import app.services.match
from app.core.db import Database
from app.main import create_app
from app.models.member import Member
from app.utils.misc import get_utc_now


@dataclass
class RegisteredMember:
    id: int
    username: str
    email: str
    password: str
    access_token: str
    refresh_token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


RegisterMember = Callable[..., Awaitable[RegisteredMember]]


def member_payload(username: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "first_name": username.capitalize(),
        "last_name": "Tester",
        "username": username,
        "email": f"{username}@example.com",
        "password": "secret123",
        "phone": "0912345678",
        "age": 30,
        "gender": "Male",
        "utr": 5.0,
    }
    payload.update(overrides)
    return payload


def future_time(days: int = 1, hour: int = 10) -> datetime:
    """A UTC datetime ``days`` ahead at ``hour``:00."""
    return (get_utc_now() + timedelta(days=days)).replace(
        hour=hour, minute=0, second=0, microsecond=0
    )


@pytest.fixture
async def database() -> AsyncGenerator[Database]:
    engine = create_async_engine(
        "sqlite+aiosqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    db = Database(engine=engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient]:
    api = create_app(database)
    async with AsyncClient(transport=ASGITransport(app=api), base_url="http://test") as client:
        yield client


@pytest.fixture
def register(client: AsyncClient) -> RegisterMember:
    async def _register(username: str, **overrides: Any) -> RegisteredMember:
        payload = member_payload(username, **overrides)
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text

        data = response.json()["data"]
        return RegisteredMember(
            id=data["member"]["id"],
            username=username,
            email=payload["email"],
            password=payload["password"],
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
        )

    return _register


@pytest.fixture
def make_admin(database: Database) -> Callable[[RegisteredMember], Awaitable[None]]:
    async def _make_admin(member: RegisteredMember) -> None:
        async with database.session() as session:
            await session.exec(update(Member).where(Member.id == member.id).values(is_admin=True))
            await session.commit()

    return _make_admin


@pytest.fixture
async def admin(register: RegisterMember, make_admin) -> RegisteredMember:
    member = await register("admin", utr=10.0)
    await make_admin(member)
    return member


@pytest.fixture
def time_travel(monkeypatch: pytest.MonkeyPatch) -> Callable[[int], None]:
    """Move the clock used by the Pending to Finished sweep ``days`` ahead."""

    def _travel(days: int) -> None:
        later = get_utc_now() + timedelta(days=days)
        monkeypatch.setattr(app.services.match, "get_utc_now", lambda: later)

    return _travel


async def schedule_match(
    client: AsyncClient, challenger: RegisteredMember, challenged: RegisteredMember, days: int = 1
) -> int:
    """Issue and accept a challenge ``days`` ahead, returning the new match id."""
    created = await client.post(
        "/api/challenges/",
        json={"challenged_id": challenged.id, "match_time": future_time(days=days).isoformat()},
        headers=challenger.headers,
    )
    challenge_id = created.json()["data"]["id"]
    accepted = await client.put(f"/api/challenges/{challenge_id}/accept", headers=challenged.headers)
    return accepted.json()["data"]["match"]["id"]


async def sweep(client: AsyncClient, admin: RegisteredMember) -> int:
    response = await client.put("/api/matches/update-status", headers=admin.headers)
    assert response.status_code == 200
    return response.json()["data"]["updated"]
