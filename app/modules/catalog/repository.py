"""Service catalog repository layer."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.catalog.models import ServiceOffering
from app.shared.utils import utc_now


class CatalogRepository:
    """DB operations for the service catalog."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_service_by_id(self, service_id: str) -> ServiceOffering | None:
        return await self.session.get(ServiceOffering, service_id)

    async def list_active_services(self) -> list[ServiceOffering]:
        stmt = (
            select(ServiceOffering)
            .where(ServiceOffering.is_active.is_(True))
            .order_by(ServiceOffering.title.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def insert_service_if_missing(self, service_id: str, title: str, price: Decimal) -> bool:
        """Insert catalog entry unless the id exists; True when this call created it.

        Safe when several app instances seed the catalog at the same time.
        """
        now = utc_now()
        stmt = (
            insert(ServiceOffering)
            .values(
                id=service_id,
                title=title,
                price=price,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=[ServiceOffering.id])
            .returning(ServiceOffering.id)
        )
        return (await self.session.scalar(stmt)) is not None
