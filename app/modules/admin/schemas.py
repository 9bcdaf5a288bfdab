"""Admin schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class AdminOverviewRead(BaseModel):
    """Dashboard snapshot of bookings and directory users."""

    generated_at: datetime

    bookings_total: int
    bookings_pending: int
    bookings_accepted: int
    bookings_in_progress: int
    bookings_completed: int
    bookings_cancelled: int

    users_total: int
    users_customers: int
    users_workers: int
    users_admins: int
