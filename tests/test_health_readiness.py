from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from sqlalchemy import text

import app.main as main_module
from app.core.database import build_engine


def _client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=main_module.app)
    return httpx.AsyncClient(transport=transport, base_url="http://cleanmarket.test")


@pytest.mark.asyncio
async def test_ready_reports_database_ok_through_public_route(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _ready() -> bool:
        return True

    monkeypatch.setattr(main_module, "_is_database_ready", _ready)

    async with _client() as client:
        response = await client.get("/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["database"] == "ok"
    assert body["timestamp"].endswith("+00:00")


@pytest.mark.asyncio
async def test_ready_unavailable_database_uses_error_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _not_ready() -> bool:
        return False

    monkeypatch.setattr(main_module, "_is_database_ready", _not_ready)

    async with _client() as client:
        response = await client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"error": {"code": "http_error", "message": "Database is not ready"}}


@pytest.mark.asyncio
async def test_health_needs_no_credential() -> None:
    async with _client() as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_sqlite_engine_enforces_foreign_keys(tmp_path: Path) -> None:
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ready.db'}")
    try:
        async with engine.connect() as connection:
            enabled = await connection.scalar(text("PRAGMA foreign_keys"))
    finally:
        await engine.dispose()

    assert enabled == 1
