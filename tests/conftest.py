"""
Pytest configuration and shared fixtures.
"""

import os
import tempfile
from pathlib import Path

# Settings and the app engine are built at import time, so point them at
# a throwaway sqlite file before anything from app/ is imported.
_BOOT_DB = Path(tempfile.mkdtemp()) / "boot.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_BOOT_DB}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, AsyncIterator, Dict, List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401  (registers tables on Base.metadata)
from app.db.database import Base, get_db
from app.main import app as fastapi_app
from app.repositories.user_repo import UserRepository
from app.schemas.auth import UserRegister
from app.services import password_reset_service


@pytest.fixture
async def engine(tmp_path):
    """A fresh sqlite database file with all tables created."""
    db_path = tmp_path / "test.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app, with get_db pointed at the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def user_password() -> str:
    return "OldPassword123"


@pytest.fixture
async def user(db_session, user_password):
    """A registered, active account."""
    repo = UserRepository(db_session)
    return await repo.create_user(
        UserRegister(
            email="user@example.com",
            password=user_password,
            full_name="Grant Writer",
        )
    )


@pytest.fixture
def sent_emails(monkeypatch) -> List[Dict[str, Any]]:
    """Capture reset emails instead of talking to SMTP."""
    outbox: List[Dict[str, Any]] = []

    def fake_send(email: str, code: str, expires_in_minutes: int = 15) -> bool:
        outbox.append({"email": email, "code": code, "expires_in_minutes": expires_in_minutes})
        return True

    monkeypatch.setattr(password_reset_service, "send_password_reset_code", fake_send)
    return outbox


@pytest.fixture
def project_analysis() -> Dict[str, Any]:
    return {
        "alignment_keywords": ["Solar", "microgrid", "resilience"],
        "focus_areas": ["Clean Energy", "Rural Development"],
        "innovation_level": "high",
        "project_scale": "regional",
        "confidence_score": 0.8,
    }


@pytest.fixture
def opportunity_analysis() -> Dict[str, Any]:
    return {
        "keyword_indicators": ["solar", "MICROGRID", "storage"],
        "funding_priorities": ["clean energy"],
        "success_factors": ["High innovation potential", "community partners"],
        "project_characteristics": ["Regional deployment", "3-year timeline"],
        "confidence_score": 0.6,
    }
