"""Role-scoped projections over booking records.

Every view is a pure filter/sort over a snapshot loaded for a single query;
nothing here stores state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from app.core.enums import BookingStatusEnum
from app.shared.utils import normalize_search_term


@dataclass(slots=True)
class WorkerJobs:
    active: list[Any] = field(default_factory=list)
    completed: list[Any] = field(default_factory=list)
    cancelled: list[Any] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.active) + len(self.completed) + len(self.cancelled)


def format_address(booking: Any) -> str:
    """Join non-empty address parts, e.g. "1 Main St, Springfield, IL, 62701"."""
    parts = (
        booking.address_line1,
        booking.address_city,
        booking.address_state,
        booking.address_zip,
    )
    return ", ".join(part for part in parts if part)


def _party_labels(party: Any) -> list[str]:
    if party is None:
        return []
    return [value for value in (party.full_name, party.email) if value]


def booking_search_text(booking: Any) -> str:
    """Denormalized lowercase text that admin search matches against."""
    service = booking.service
    fields = [
        service.title if service is not None else booking.service_id,
        *(_party_labels(booking.customer) or [booking.customer_id]),
        *(_party_labels(booking.worker) or ([booking.worker_id] if booking.worker_id else [])),
        format_address(booking),
        str(booking.id),
    ]
    return " ".join(fields).casefold()


def _creation_key(booking: Any) -> tuple:
    return (booking.created_at, str(booking.id))


def is_available(booking: Any) -> bool:
    return booking.status == BookingStatusEnum.PENDING and booking.worker_id is None


def available_jobs(
    bookings: Iterable[Any],
    *,
    service_id: str | None = None,
    query: str | None = None,
) -> list[Any]:
    """Open, unassigned jobs, oldest first."""
    term = normalize_search_term(query)
    selected = []
    for booking in bookings:
        if not is_available(booking):
            continue
        if service_id is not None and booking.service_id != service_id:
            continue
        if term is not None:
            title = booking.service.title if booking.service is not None else ""
            haystack = f"{title} {format_address(booking)}".casefold()
            if term not in haystack:
                continue
        selected.append(booking)
    return sorted(selected, key=_creation_key)


def worker_jobs(bookings: Iterable[Any], worker_id: str) -> WorkerJobs:
    """Partition a worker's assigned jobs by stage."""
    jobs = WorkerJobs()
    for booking in sorted(bookings, key=_creation_key):
        if booking.worker_id != worker_id:
            continue
        if booking.status == BookingStatusEnum.COMPLETED:
            jobs.completed.append(booking)
        elif booking.status == BookingStatusEnum.CANCELLED:
            jobs.cancelled.append(booking)
        else:
            jobs.active.append(booking)
    return jobs


def customer_bookings(bookings: Iterable[Any], customer_id: str) -> list[Any]:
    """Bookings created by one customer, newest first."""
    owned = [booking for booking in bookings if booking.customer_id == customer_id]
    return sorted(owned, key=_creation_key, reverse=True)


def search_bookings(
    bookings: Iterable[Any],
    *,
    query: str | None = None,
    status: BookingStatusEnum | None = None,
) -> list[Any]:
    """Admin listing with substring search and exact status filter, newest first."""
    term = normalize_search_term(query)
    matched = [
        booking
        for booking in bookings
        if (status is None or booking.status == status)
        and (term is None or term in booking_search_text(booking))
    ]
    return sorted(matched, key=_creation_key, reverse=True)

