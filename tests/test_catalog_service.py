from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql

from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.service import DEFAULT_SERVICES, CatalogService


class FakeCatalogRepository:
    def __init__(self, services: dict[str, SimpleNamespace] | None = None) -> None:
        self.services: dict[str, SimpleNamespace] = services or {}

    async def list_active_services(self) -> list[SimpleNamespace]:
        active = [service for service in self.services.values() if service.is_active]
        return sorted(active, key=lambda service: service.title)

    async def insert_service_if_missing(self, service_id: str, title: str, price: Decimal) -> bool:
        if service_id in self.services:
            return False
        self.services[service_id] = SimpleNamespace(id=service_id, title=title, price=price, is_active=True)
        return True


class RecordingSession:
    def __init__(self, returned_id: str | None) -> None:
        self.returned_id = returned_id
        self.statements: list = []

    async def scalar(self, stmt):
        self.statements.append(stmt)
        return self.returned_id


@pytest.mark.asyncio
async def test_ensure_default_services_is_idempotent() -> None:
    repository = FakeCatalogRepository()
    service = CatalogService(repository)  # type: ignore[arg-type]

    assert await service.ensure_default_services() == len(DEFAULT_SERVICES)
    assert await service.ensure_default_services() == 0
    assert "svc-home" in repository.services


@pytest.mark.asyncio
async def test_default_catalog_insert_ignores_existing_rows() -> None:
    session = RecordingSession(returned_id=None)
    repository = CatalogRepository(session)  # type: ignore[arg-type]

    created = await repository.insert_service_if_missing("svc-home", "Home Cleaning", Decimal("60.00"))

    assert created is False
    sql = str(session.statements[0].compile(dialect=postgresql.dialect()))
    assert "INSERT INTO service_offerings" in sql
    assert "ON CONFLICT (id) DO NOTHING" in sql
    assert "RETURNING service_offerings.id" in sql


@pytest.mark.asyncio
async def test_default_catalog_insert_reports_created_row() -> None:
    repository = CatalogRepository(RecordingSession(returned_id="svc-home"))  # type: ignore[arg-type]

    assert await repository.insert_service_if_missing("svc-home", "Home Cleaning", Decimal("60.00")) is True


@pytest.mark.asyncio
async def test_inactive_services_are_hidden() -> None:
    repository = FakeCatalogRepository(
        {
            "svc-home": SimpleNamespace(id="svc-home", title="Home Cleaning", price=Decimal("60"), is_active=True),
            "svc-old": SimpleNamespace(id="svc-old", title="Old", price=Decimal("1"), is_active=False),
        },
    )
    service = CatalogService(repository)  # type: ignore[arg-type]

    listed = await service.list_services()

    assert [item.id for item in listed] == ["svc-home"]
