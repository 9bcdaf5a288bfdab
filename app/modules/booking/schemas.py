"""Booking schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.core.enums import BookingStatusEnum
from app.modules.booking.views import format_address
from app.modules.catalog.schemas import ServiceOfferingRead


class BookingAddress(BaseModel):
    """Structured booking location."""

    line1: str = Field(max_length=255)
    city: str | None = Field(default=None, max_length=128)
    state: str | None = Field(default=None, max_length=128)
    zip: str | None = Field(default=None, max_length=32)


class BookingCreate(BaseModel):
    """Create booking request."""

    service_id: str = Field(min_length=1, max_length=64)
    start_at: datetime
    duration_hours: float | None = None
    address: Annotated[str, Field(max_length=255)] | BookingAddress
    notes: str | None = Field(default=None, max_length=2000)
    contact_phone: str | None = Field(default=None, max_length=32)


class BookingStatusUpdate(BaseModel):
    """Admin status override request."""

    status: BookingStatusEnum


class BookingWorkerUpdate(BaseModel):
    """Admin worker reassignment request."""

    worker_id: str = Field(min_length=1, max_length=64)


class PartySummaryRead(BaseModel):
    """Customer or worker profile fields shown next to a booking."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None


class BookingRead(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    service_id: str
    service: ServiceOfferingRead | None = None
    customer_id: str
    customer: PartySummaryRead | None = None
    worker_id: str | None
    worker: PartySummaryRead | None = None
    status: BookingStatusEnum
    start_at: datetime
    duration_hours: float
    address_line1: str
    address_city: str | None
    address_state: str | None
    address_zip: str | None
    contact_phone: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def formatted_address(self) -> str:
        return format_address(self)


class WorkerJobsRead(BaseModel):
    """Worker's own jobs split by lifecycle stage."""

    active: list[BookingRead]
    completed: list[BookingRead]
    cancelled: list[BookingRead]
    total: int
