"""Booking lifecycle business logic layer."""

from __future__ import annotations

import logging
import math
from collections.abc import Collection
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import (
    ASSIGNED_BOOKING_STATUSES,
    TERMINAL_BOOKING_STATUSES,
    BookingStatusEnum,
    RoleEnum,
)
from app.core.metrics import record_booking_transition
from app.modules.audit.repository import AuditRepository
from app.modules.booking import views
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.booking.schemas import BookingAddress, BookingCreate
from app.modules.catalog.repository import CatalogRepository
from app.modules.identity.schemas import IdentityContext
from app.shared.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from app.shared.pagination import slice_page
from app.shared.utils import ensure_utc, normalize_phone, normalize_search_term, utc_now

settings = get_settings()
logger = logging.getLogger(__name__)

JOB_TAKEN_MESSAGE = "This job is no longer available: another worker accepted it first"
AddressParts = tuple[str, str | None, str | None, str | None]


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _normalize_address(address: str | BookingAddress) -> AddressParts:
    if isinstance(address, str):
        line1, city, state, zip_code = _clean(address), None, None, None
    else:
        line1 = _clean(address.line1)
        city, state, zip_code = _clean(address.city), _clean(address.state), _clean(address.zip)
    if line1 is None:
        raise ValidationException("Address is required")
    return line1, city, state, zip_code


class BookingService:
    """Booking lifecycle engine: creation, assignment and status transitions."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        catalog_repository: CatalogRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.booking_repository = booking_repository
        self.catalog_repository = catalog_repository
        self.audit_repository = audit_repository

    @staticmethod
    def _require_role(actor: IdentityContext, role: RoleEnum, message: str) -> None:
        if actor.role != role:
            raise ForbiddenException(message)

    async def _get_booking_or_404(self, booking_id: UUID) -> Booking:
        booking = await self.booking_repository.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking

    async def _audit(
        self,
        actor: IdentityContext,
        action: str,
        booking_id: UUID,
        payload: dict,
    ) -> None:
        await self.audit_repository.create_audit_log(
            actor_id=actor.subject_id,
            action=action,
            entity_type="booking",
            entity_id=str(booking_id),
            payload=payload,
        )

    async def create_booking(self, payload: BookingCreate, actor: IdentityContext) -> Booking:
        """Create a pending, unassigned booking for the calling customer."""
        line1, city, state, zip_code = _normalize_address(payload.address)

        duration_hours = payload.duration_hours
        if duration_hours is None:
            duration_hours = settings.booking_default_duration_hours
        if not math.isfinite(duration_hours) or duration_hours <= 0:
            raise ValidationException("Duration must be a positive number of hours")

        start_at = ensure_utc(payload.start_at)
        if settings.booking_require_future_start and start_at < utc_now():
            raise ValidationException("Start time must be in the future")

        contact_phone = normalize_phone(payload.contact_phone)

        service = await self.catalog_repository.get_service_by_id(payload.service_id)
        if service is None or not service.is_active:
            raise NotFoundException("Service not found")

        booking = await self.booking_repository.create_booking(
            service_id=service.id,
            customer_id=actor.subject_id,
            start_at=start_at,
            duration_hours=float(duration_hours),
            address_line1=line1,
            address_city=city,
            address_state=state,
            address_zip=zip_code,
            contact_phone=contact_phone,
            notes=_clean(payload.notes),
        )
        record_booking_transition("create", "success")
        logger.info("Booking %s created by customer %s", booking.id, actor.subject_id)
        return booking

    async def accept_job(self, booking_id: UUID, actor: IdentityContext) -> Booking:
        """Assign a pending job to the calling worker; at most one worker wins."""
        self._require_role(actor, RoleEnum.WORKER, "Only workers can accept jobs")

        booking = await self._get_booking_or_404(booking_id)
        if booking.status == BookingStatusEnum.CANCELLED:
            raise InvalidStateException("Cancelled booking cannot be accepted")
        if not views.is_available(booking):
            record_booking_transition("accept", "conflict")
            raise ConflictException(JOB_TAKEN_MESSAGE)

        accepted = await self.booking_repository.conditional_update(
            booking_id,
            expected={"status": BookingStatusEnum.PENDING, "worker_id": None},
            values={"status": BookingStatusEnum.ACCEPTED, "worker_id": actor.subject_id},
        )
        if accepted is None:
            record_booking_transition("accept", "conflict")
            logger.warning("Worker %s lost accept race for booking %s", actor.subject_id, booking_id)
            raise ConflictException(JOB_TAKEN_MESSAGE)

        record_booking_transition("accept", "success")
        logger.info("Booking %s accepted by worker %s", booking_id, actor.subject_id)
        return accepted

    @staticmethod
    def _check_assignment(
        booking: Booking,
        actor: IdentityContext,
        from_statuses: Collection[BookingStatusEnum],
        verb: str,
    ) -> None:
        if booking.worker_id != actor.subject_id:
            raise ForbiddenException(f"You can only {verb} jobs assigned to you")
        if booking.status not in from_statuses:
            raise InvalidStateException(f"Cannot {verb} a booking with status {booking.status}")

    async def _advance_assigned(
        self,
        booking_id: UUID,
        actor: IdentityContext,
        *,
        operation: str,
        from_statuses: frozenset[BookingStatusEnum],
        to_status: BookingStatusEnum,
    ) -> Booking:
        self._require_role(actor, RoleEnum.WORKER, f"Only workers can {operation} jobs")

        booking = await self._get_booking_or_404(booking_id)
        try:
            self._check_assignment(booking, actor, from_statuses, operation)
        except (ForbiddenException, InvalidStateException):
            record_booking_transition(operation, "rejected")
            raise

        # Assignment and status are re-checked inside the write itself.
        updated = await self.booking_repository.conditional_update(
            booking_id,
            expected={"status": from_statuses, "worker_id": actor.subject_id},
            values={"status": to_status},
        )
        if updated is None:
            record_booking_transition(operation, "rejected")
            current = await self._get_booking_or_404(booking_id)
            self._check_assignment(current, actor, from_statuses, operation)
            raise ConflictException("Booking changed while updating, please refresh")

        record_booking_transition(operation, "success")
        logger.info("Booking %s moved to %s by worker %s", booking_id, to_status, actor.subject_id)
        return updated

    async def start_job(self, booking_id: UUID, actor: IdentityContext) -> Booking:
        """Mark an accepted job as in progress (assigned worker only)."""
        return await self._advance_assigned(
            booking_id,
            actor,
            operation="start",
            from_statuses=frozenset({BookingStatusEnum.ACCEPTED}),
            to_status=BookingStatusEnum.IN_PROGRESS,
        )

    async def complete_job(self, booking_id: UUID, actor: IdentityContext) -> Booking:
        """Mark an accepted or in-progress job as completed (assigned worker only)."""
        return await self._advance_assigned(
            booking_id,
            actor,
            operation="complete",
            from_statuses=frozenset({BookingStatusEnum.ACCEPTED, BookingStatusEnum.IN_PROGRESS}),
            to_status=BookingStatusEnum.COMPLETED,
        )

    async def set_status(
        self,
        booking_id: UUID,
        new_status: BookingStatusEnum,
        actor: IdentityContext,
    ) -> Booking:
        """Admin override: overwrite status from any state."""
        self._require_role(actor, RoleEnum.ADMIN, "Only admin can override booking status")

        booking = await self._get_booking_or_404(booking_id)
        previous_status = booking.status
        previous_worker_id = booking.worker_id

        values: dict[str, object] = {"status": new_status}
        if new_status == BookingStatusEnum.PENDING and previous_worker_id is not None:
            # A pending booking never carries a worker.
            values["worker_id"] = None

        anomaly = new_status in ASSIGNED_BOOKING_STATUSES and previous_worker_id is None
        if anomaly:
            logger.warning(
                "Admin %s set booking %s to %s without an assigned worker",
                actor.subject_id,
                booking_id,
                new_status,
            )
        if previous_status in TERMINAL_BOOKING_STATUSES:
            logger.warning(
                "Admin %s overrides terminal booking %s (%s -> %s)",
                actor.subject_id,
                booking_id,
                previous_status,
                new_status,
            )

        updated = await self.booking_repository.conditional_update(booking_id, expected={}, values=values)
        if updated is None:
            raise NotFoundException("Booking not found")

        await self._audit(
            actor,
            "booking.status.override",
            booking_id,
            {
                "from_status": str(previous_status),
                "to_status": str(new_status),
                "worker_id": updated.worker_id,
                "previous_worker_id": previous_worker_id,
                "anomaly": anomaly,
            },
        )
        record_booking_transition("set_status", "success")
        return updated

    async def reassign_worker(
        self,
        booking_id: UUID,
        worker_id: str,
        actor: IdentityContext,
    ) -> Booking:
        """Admin override: put a booking in another worker's hands."""
        self._require_role(actor, RoleEnum.ADMIN, "Only admin can reassign bookings")
        worker_id = worker_id.strip()
        if not worker_id:
            raise ValidationException("Worker id is required")

        booking = await self._get_booking_or_404(booking_id)
        previous_worker_id = booking.worker_id

        values: dict[str, object] = {"worker_id": worker_id}
        if booking.status == BookingStatusEnum.PENDING:
            values["status"] = BookingStatusEnum.ACCEPTED

        updated = await self.booking_repository.conditional_update(booking_id, expected={}, values=values)
        if updated is None:
            raise NotFoundException("Booking not found")

        await self._audit(
            actor,
            "booking.worker.reassigned",
            booking_id,
            {
                "from_worker_id": previous_worker_id,
                "to_worker_id": worker_id,
                "status": str(updated.status),
            },
        )
        record_booking_transition("reassign", "success")
        logger.info(
            "Admin %s reassigned booking %s from %s to %s",
            actor.subject_id,
            booking_id,
            previous_worker_id,
            worker_id,
        )
        return updated

    async def delete_booking(self, booking_id: UUID, actor: IdentityContext) -> None:
        """Admin-only permanent removal."""
        self._require_role(actor, RoleEnum.ADMIN, "Only admin can delete bookings")

        booking = await self._get_booking_or_404(booking_id)
        snapshot = {
            "status": str(booking.status),
            "customer_id": booking.customer_id,
            "worker_id": booking.worker_id,
            "service_id": booking.service_id,
        }
        if not await self.booking_repository.delete(booking_id):
            raise NotFoundException("Booking not found")

        await self._audit(actor, "booking.deleted", booking_id, snapshot)
        record_booking_transition("delete", "success")
        logger.info("Admin %s deleted booking %s", actor.subject_id, booking_id)

    async def list_available_jobs(
        self,
        actor: IdentityContext,
        *,
        service_id: str | None = None,
        query: str | None = None,
    ) -> list[Booking]:
        """Pending, unassigned jobs visible to workers."""
        self._require_role(actor, RoleEnum.WORKER, "Only workers can browse available jobs")
        bookings = await self.booking_repository.find_many(
            Booking.status == BookingStatusEnum.PENDING,
            Booking.worker_id.is_(None),
        )
        return views.available_jobs(bookings, service_id=service_id, query=query)

    async def list_worker_jobs(self, actor: IdentityContext) -> views.WorkerJobs:
        """Jobs assigned to the calling worker."""
        self._require_role(actor, RoleEnum.WORKER, "Only workers have assigned jobs")
        bookings = await self.booking_repository.find_many(Booking.worker_id == actor.subject_id)
        return views.worker_jobs(bookings, actor.subject_id)

    async def list_customer_bookings(
        self,
        actor: IdentityContext,
        limit: int,
        offset: int,
    ) -> tuple[list[Booking], int]:
        """Bookings created by the caller."""
        bookings = await self.booking_repository.find_many(Booking.customer_id == actor.subject_id)
        return slice_page(views.customer_bookings(bookings, actor.subject_id), limit, offset)

    async def list_all_bookings(
        self,
        actor: IdentityContext,
        limit: int,
        offset: int,
        *,
        query: str | None = None,
        status: BookingStatusEnum | None = None,
    ) -> tuple[list[Booking], int]:
        """Admin listing across all customers and workers."""
        self._require_role(actor, RoleEnum.ADMIN, "Only admin can list all bookings")
        criteria = [Booking.status == status] if status is not None else []
        if normalize_search_term(query) is None:
            return await self.booking_repository.list_page(*criteria, limit=limit, offset=offset)

        # Text search spans joined profiles and the formatted address.
        bookings = await self.booking_repository.find_many(*criteria)
        return slice_page(views.search_bookings(bookings, query=query, status=status), limit, offset)


async def get_booking_service(session: AsyncSession = Depends(get_db_session)) -> BookingService:
    """Dependency provider for booking service."""
    return BookingService(
        booking_repository=BookingRepository(session),
        catalog_repository=CatalogRepository(session),
        audit_repository=AuditRepository(session),
    )
