"""Booking API routers for customer, worker and admin surfaces."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.enums import BookingStatusEnum
from app.modules.booking.schemas import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    BookingWorkerUpdate,
    WorkerJobsRead,
)
from app.modules.booking.service import BookingService, get_booking_service
from app.modules.identity.schemas import IdentityContext
from app.modules.identity.service import get_current_identity
from app.shared.pagination import Page, build_page, get_pagination_params

customer_router = APIRouter(prefix="/bookings", tags=["booking"])
worker_router = APIRouter(prefix="/worker/jobs", tags=["worker"])
admin_router = APIRouter(prefix="/admin/bookings", tags=["admin"])


@customer_router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> BookingRead:
    """Book a cleaning job."""
    booking = await service.create_booking(payload, identity)
    return BookingRead.model_validate(booking)


@customer_router.get("/me", response_model=Page[BookingRead])
async def list_my_bookings(
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> Page[BookingRead]:
    """List bookings created by current user."""
    items, total = await service.list_customer_bookings(identity, pagination.limit, pagination.offset)
    serialized = [BookingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@worker_router.get("/available", response_model=list[BookingRead])
async def list_available_jobs(
    service_id: str | None = Query(default=None, max_length=64),
    q: str | None = Query(default=None, max_length=255),
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> list[BookingRead]:
    """List pending jobs nobody has accepted yet."""
    items = await service.list_available_jobs(identity, service_id=service_id, query=q)
    return [BookingRead.model_validate(item) for item in items]


@worker_router.get("/me", response_model=WorkerJobsRead)
async def list_my_jobs(
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> WorkerJobsRead:
    """List jobs assigned to current worker, split into active/completed/cancelled."""
    jobs = await service.list_worker_jobs(identity)
    return WorkerJobsRead(
        active=[BookingRead.model_validate(item) for item in jobs.active],
        completed=[BookingRead.model_validate(item) for item in jobs.completed],
        cancelled=[BookingRead.model_validate(item) for item in jobs.cancelled],
        total=jobs.total,
    )


@worker_router.post("/{booking_id}/accept", response_model=BookingRead)
async def accept_job(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> BookingRead:
    """Claim a pending job; 409 conflict when another worker was first."""
    booking = await service.accept_job(booking_id, identity)
    return BookingRead.model_validate(booking)


@worker_router.post("/{booking_id}/start", response_model=BookingRead)
async def start_job(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> BookingRead:
    """Mark an accepted job as in progress."""
    booking = await service.start_job(booking_id, identity)
    return BookingRead.model_validate(booking)


@worker_router.post("/{booking_id}/complete", response_model=BookingRead)
async def complete_job(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> BookingRead:
    """Mark an assigned job as completed."""
    booking = await service.complete_job(booking_id, identity)
    return BookingRead.model_validate(booking)


@admin_router.get("", response_model=Page[BookingRead])
async def list_all_bookings(
    q: str | None = Query(default=None, max_length=255),
    status_filter: BookingStatusEnum | None = Query(default=None, alias="status"),
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> Page[BookingRead]:
    """Search all bookings by text and status."""
    items, total = await service.list_all_bookings(
        identity,
        pagination.limit,
        pagination.offset,
        query=q,
        status=status_filter,
    )
    serialized = [BookingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@admin_router.patch("/{booking_id}/status", response_model=BookingRead)
async def update_booking_status(
    booking_id: UUID,
    payload: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> BookingRead:
    """Overwrite booking status (audited)."""
    booking = await service.set_status(booking_id, payload.status, identity)
    return BookingRead.model_validate(booking)


@admin_router.patch("/{booking_id}/worker", response_model=BookingRead)
async def reassign_booking_worker(
    booking_id: UUID,
    payload: BookingWorkerUpdate,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> BookingRead:
    """Assign booking to another worker (audited)."""
    booking = await service.reassign_worker(booking_id, payload.worker_id, identity)
    return BookingRead.model_validate(booking)


@admin_router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> Response:
    """Permanently delete a booking (audited)."""
    await service.delete_booking(booking_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
