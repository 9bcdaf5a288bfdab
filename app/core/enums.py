"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    CUSTOMER = "customer"
    WORKER = "worker"
    ADMIN = "admin"


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_BOOKING_STATUSES = frozenset(
    {BookingStatusEnum.COMPLETED, BookingStatusEnum.CANCELLED},
)
ASSIGNED_BOOKING_STATUSES = frozenset(
    {
        BookingStatusEnum.ACCEPTED,
        BookingStatusEnum.IN_PROGRESS,
        BookingStatusEnum.COMPLETED,
    },
)


def enum_values(enum_cls: type[StrEnum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
