"""Shared fixtures: a fake asyncpg pool, signed Supabase tokens, and an API client."""

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.core.auth import extract_access_token
from app.core.backend import BackendClient, get_backend_client
from app.core.config import settings
from app.main import app

JWT_SECRET = "test-secret-with-at-least-32-bytes!!"


class FakePool:
    """Stands in for asyncpg.Pool; every acquire() yields the same mock connection."""

    def __init__(self) -> None:
        self.conn = MagicMock()
        self.conn.fetch = AsyncMock(return_value=[])
        self.conn.fetchrow = AsyncMock(return_value=None)
        self.conn.fetchval = AsyncMock(return_value=1)

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


def make_token(sub: str | None = "u1", *, secret: str = JWT_SECRET, **claims) -> str:
    payload = {
        "aud": "authenticated",
        "role": "authenticated",
        "exp": datetime.now(UTC) + timedelta(hours=1),
        **claims,
    }
    if sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, secret, algorithm="HS256")


def project_row(project_id: str = "proj-123", user_id: str = "u1", **overrides) -> dict:
    now = datetime(2026, 1, 5, 12, 0, tzinfo=UTC)
    return {
        "id": project_id,
        "user_id": user_id,
        "company_id": None,
        "name": "Lakeside Villa",
        "status": "CREATED",
        "address": "12 Shore Rd",
        "style": None,
        "stage": None,
        "notes": None,
        "persona_id": None,
        "created_at": now,
        "updated_at": now,
        **overrides,
    }


def asset_row(asset_id: str = "asset-1", project_id: str = "proj-123", **overrides) -> dict:
    return {
        "id": asset_id,
        "project_id": project_id,
        "type": "image",
        "provider": "replicate",
        "prompt": "exterior at dusk",
        "status": "complete",
        "external_job_id": None,
        "url": "https://cdn.example.com/a.png",
        "created_by": "u1",
        "metadata": '{"preset": "exterior"}',
        "created_at": datetime(2026, 1, 5, 12, 30, tzinfo=UTC),
        **overrides,
    }


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", JWT_SECRET)
    return JWT_SECRET


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def pool_factory(fake_pool):
    return AsyncMock(return_value=fake_pool)


@pytest.fixture
def client(jwt_secret, pool_factory):
    """TestClient whose backend client uses real session auth over the fake pool."""

    async def _backend(request: Request) -> BackendClient:
        token = extract_access_token(request.headers.get("Authorization"), request.cookies)
        return BackendClient(token, pool_factory=pool_factory)

    app.dependency_overrides[get_backend_client] = _backend
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_backend_client, None)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('u1', email='owner@example.com')}"}


def company_row(company_id: str = "comp-1", name: str = "Acme Homes", **overrides) -> dict:
    return {
        "id": company_id,
        "name": name,
        "logo_url": None,
        "primary_color": "#6366f1",
        "contact_email": None,
        "contact_phone": None,
        "website": None,
        "created_at": datetime(2026, 1, 2, 9, 0, tzinfo=UTC),
        **overrides,
    }
