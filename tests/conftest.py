import os

# Settings are read at import time; tests never touch a real database.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENV", "test")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from portal.core.db import get_session  # noqa: E402
from portal.core.security import create_access_token, hash_password  # noqa: E402
from portal.main import app  # noqa: E402
from portal.models import User  # noqa: E402


@pytest_asyncio.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_maker):
    async def _override_session():
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def make_user(session_maker, email: str, role: str = "client") -> User:
    async with session_maker() as s:
        user = User(
            email=email,
            first_name="Camille",
            last_name="Martin",
            hashed_password=hash_password("secret123"),
            role=role,
        )
        s.add(user)
        await s.commit()
        await s.refresh(user)
        return user


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def admin_headers(session_maker) -> dict[str, str]:
    admin = await make_user(session_maker, "admin@cabinet.fr", role="admin")
    return bearer(admin)


@pytest_asyncio.fixture
async def client_user(session_maker) -> User:
    return await make_user(session_maker, "client@example.com")
