"""Booking repository layer."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import BookingStatusEnum
from app.modules.booking.models import Booking
from app.shared.utils import utc_now

_LOAD_OPTIONS = (
    selectinload(Booking.service),
    selectinload(Booking.customer),
    selectinload(Booking.worker),
)


class BookingRepository:
    """DB operations for booking domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_booking(
        self,
        *,
        service_id: str,
        customer_id: str,
        start_at: datetime,
        duration_hours: float,
        address_line1: str,
        address_city: str | None,
        address_state: str | None,
        address_zip: str | None,
        contact_phone: str | None,
        notes: str | None,
    ) -> Booking:
        booking = Booking(
            service_id=service_id,
            customer_id=customer_id,
            worker_id=None,
            status=BookingStatusEnum.PENDING,
            start_at=start_at,
            duration_hours=duration_hours,
            address_line1=address_line1,
            address_city=address_city,
            address_state=address_state,
            address_zip=address_zip,
            contact_phone=contact_phone,
            notes=notes,
        )
        self.session.add(booking)
        await self.session.flush()
        return await self.get_booking_by_id(booking.id)

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        stmt = (
            select(Booking)
            .options(*_LOAD_OPTIONS)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def find_many(self, *criteria: ColumnElement[bool]) -> list[Booking]:
        stmt = (
            select(Booking)
            .options(*_LOAD_OPTIONS)
            .where(*criteria)
            .order_by(Booking.created_at.asc(), Booking.id.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_page(
        self,
        *criteria: ColumnElement[bool],
        limit: int,
        offset: int,
    ) -> tuple[list[Booking], int]:
        """One page of matching bookings, newest first, with the total count."""
        count_stmt = select(func.count()).select_from(Booking).where(*criteria)
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = (
            select(Booking)
            .options(*_LOAD_OPTIONS)
            .where(*criteria)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(limit)
            .offset(offset)
        )
        items = list((await self.session.scalars(stmt)).all())
        return items, total

    async def conditional_update(
        self,
        booking_id: UUID,
        expected: Mapping[str, object],
        values: Mapping[str, object],
    ) -> Booking | None:
        """Apply ``values`` only if the row still matches ``expected``.

        Runs as one UPDATE ... WHERE ... RETURNING statement, so concurrent
        callers with the same precondition cannot both succeed. Expected None
        means IS NULL; a collection means IN.
        """
        stmt = update(Booking).where(Booking.id == booking_id)
        for field_name, expected_value in expected.items():
            column = getattr(Booking, field_name)
            if expected_value is None:
                stmt = stmt.where(column.is_(None))
            elif isinstance(expected_value, Collection) and not isinstance(expected_value, str):
                stmt = stmt.where(column.in_(list(expected_value)))
            else:
                stmt = stmt.where(column == expected_value)

        stmt = (
            stmt.values(**values, updated_at=utc_now())
            .returning(Booking.id)
            .execution_options(synchronize_session=False)
        )
        updated_id = await self.session.scalar(stmt)
        if updated_id is None:
            return None
        return await self.get_booking_by_id(booking_id)

    async def delete(self, booking_id: UUID) -> bool:
        stmt = (
            delete(Booking)
            .where(Booking.id == booking_id)
            .returning(Booking.id)
            .execution_options(synchronize_session=False)
        )
        return (await self.session.scalar(stmt)) is not None

    async def count_by_status(self) -> dict[BookingStatusEnum, int]:
        stmt = select(Booking.status, func.count()).group_by(Booking.status)
        rows = (await self.session.execute(stmt)).all()
        return {status: int(count) for status, count in rows}
