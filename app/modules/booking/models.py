"""Booking ORM models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum as SAEnum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin
from app.core.enums import BookingStatusEnum, enum_values

if TYPE_CHECKING:
    from app.modules.catalog.models import ServiceOffering
    from app.modules.identity.models import User


class Booking(BaseModelMixin, Base):
    """Cleaning job requested by a customer."""

    __tablename__ = "bookings"

    service_id: Mapped[str] = mapped_column(
        ForeignKey("service_offerings.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    worker_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    status: Mapped[BookingStatusEnum] = mapped_column(
        SAEnum(
            BookingStatusEnum,
            name="booking_status_enum",
            native_enum=False,
            length=32,
            values_callable=enum_values,
        ),
        default=BookingStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_hours: Mapped[float] = mapped_column(Float, nullable=False)

    address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    address_state: Mapped[str | None] = mapped_column(String(128), nullable=True)
    address_zip: Mapped[str | None] = mapped_column(String(32), nullable=True)

    contact_phone: Mapped[str | None] = mapped_column(String(10), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    service: Mapped["ServiceOffering"] = relationship(lazy="raise")
    # Identity is external: profiles are optional, so no foreign keys here.
    customer: Mapped["User | None"] = relationship(
        primaryjoin="foreign(Booking.customer_id) == User.id",
        viewonly=True,
        lazy="raise",
    )
    worker: Mapped["User | None"] = relationship(
        primaryjoin="foreign(Booking.worker_id) == User.id",
        viewonly=True,
        lazy="raise",
    )
