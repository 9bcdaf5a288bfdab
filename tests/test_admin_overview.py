from __future__ import annotations

import pytest

from app.core.enums import BookingStatusEnum, RoleEnum
from app.modules.admin.service import AdminService
from app.modules.identity.schemas import IdentityContext
from app.shared.exceptions import ForbiddenException


class FakeBookingRepository:
    async def count_by_status(self) -> dict[BookingStatusEnum, int]:
        return {
            BookingStatusEnum.PENDING: 4,
            BookingStatusEnum.ACCEPTED: 2,
            BookingStatusEnum.COMPLETED: 7,
            BookingStatusEnum.CANCELLED: 1,
        }


class FakeIdentityRepository:
    async def count_users_by_role(self) -> dict[RoleEnum, int]:
        return {RoleEnum.CUSTOMER: 10, RoleEnum.WORKER: 3, RoleEnum.ADMIN: 1}


def make_service() -> AdminService:
    return AdminService(
        booking_repository=FakeBookingRepository(),  # type: ignore[arg-type]
        identity_repository=FakeIdentityRepository(),  # type: ignore[arg-type]
        audit_repository=None,  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_admin_overview_counts_bookings_and_users() -> None:
    admin = IdentityContext(subject_id="a1", role=RoleEnum.ADMIN)

    result = await make_service().get_overview(admin)

    assert result.bookings_total == 14
    assert result.bookings_pending == 4
    assert result.bookings_in_progress == 0
    assert result.bookings_completed == 7
    assert result.users_total == 14
    assert result.users_workers == 3
    assert result.generated_at.tzinfo is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [RoleEnum.CUSTOMER, RoleEnum.WORKER])
async def test_admin_overview_requires_admin_role(role: RoleEnum) -> None:
    with pytest.raises(ForbiddenException):
        await make_service().get_overview(IdentityContext(subject_id="u1", role=role))
