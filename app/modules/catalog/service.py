"""Service catalog business logic layer."""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.modules.catalog.models import ServiceOffering
from app.modules.catalog.repository import CatalogRepository

logger = logging.getLogger(__name__)

DEFAULT_SERVICES: tuple[tuple[str, str, Decimal], ...] = (
    ("svc-home", "Home Cleaning", Decimal("60.00")),
    ("svc-office", "Office Cleaning", Decimal("90.00")),
    ("svc-carpet", "Carpet Cleaning", Decimal("75.00")),
    ("svc-deep", "Deep Cleaning", Decimal("120.00")),
    ("svc-window", "Window Cleaning", Decimal("50.00")),
    ("svc-move", "Move-in/out Cleaning", Decimal("150.00")),
)


class CatalogService:
    """Read-mostly registry of bookable service types."""

    def __init__(self, repository: CatalogRepository) -> None:
        self.repository = repository

    async def ensure_default_services(self) -> int:
        """Insert missing default catalog entries, returning how many were created."""
        created = 0
        for service_id, title, price in DEFAULT_SERVICES:
            if await self.repository.insert_service_if_missing(service_id, title, price):
                created += 1
        if created:
            logger.info("Created %s default catalog entries", created)
        return created

    async def list_services(self) -> list[ServiceOffering]:
        return await self.repository.list_active_services()


async def get_catalog_service(session: AsyncSession = Depends(get_db_session)) -> CatalogService:
    """Dependency provider for catalog service."""
    return CatalogService(CatalogRepository(session))
