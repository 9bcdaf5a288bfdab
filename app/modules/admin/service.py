"""Admin business logic layer."""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import BookingStatusEnum, RoleEnum
from app.modules.admin.schemas import AdminOverviewRead
from app.modules.audit.repository import AuditRepository
from app.modules.booking.repository import BookingRepository
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.schemas import IdentityContext, UserCreate, UserUpdate
from app.shared.exceptions import ConflictException, ForbiddenException, NotFoundException
from app.shared.utils import normalize_phone, normalize_search_term, utc_now

logger = logging.getLogger(__name__)


def _clean_name(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class AdminService:
    """Admin dashboard queries and identity directory management."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        identity_repository: IdentityRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.booking_repository = booking_repository
        self.identity_repository = identity_repository
        self.audit_repository = audit_repository

    @staticmethod
    def _ensure_admin(actor: IdentityContext) -> None:
        if actor.role != RoleEnum.ADMIN:
            raise ForbiddenException("Only admin can perform this action")

    async def _get_user_or_404(self, user_id: str) -> User:
        user = await self.identity_repository.get_user_by_id(user_id)
        if user is None:
            raise NotFoundException("User not found")
        return user

    async def _ensure_email_free(self, email: str, user_id: str | None = None) -> None:
        existing = await self.identity_repository.get_user_by_email(email)
        if existing is not None and existing.id != user_id:
            raise ConflictException("Email is already used by another user")

    async def _audit(self, actor: IdentityContext, action: str, user_id: str, payload: dict) -> None:
        await self.audit_repository.create_audit_log(
            actor_id=actor.subject_id,
            action=action,
            entity_type="user",
            entity_id=user_id,
            payload=payload,
        )

    async def get_overview(self, actor: IdentityContext) -> AdminOverviewRead:
        """Return booking and user counts for the admin dashboard."""
        if actor.role != RoleEnum.ADMIN:
            raise ForbiddenException("Only admin can view overview")

        booking_counts = await self.booking_repository.count_by_status()
        role_counts = await self.identity_repository.count_users_by_role()

        return AdminOverviewRead(
            generated_at=utc_now(),
            bookings_total=sum(booking_counts.values()),
            bookings_pending=booking_counts.get(BookingStatusEnum.PENDING, 0),
            bookings_accepted=booking_counts.get(BookingStatusEnum.ACCEPTED, 0),
            bookings_in_progress=booking_counts.get(BookingStatusEnum.IN_PROGRESS, 0),
            bookings_completed=booking_counts.get(BookingStatusEnum.COMPLETED, 0),
            bookings_cancelled=booking_counts.get(BookingStatusEnum.CANCELLED, 0),
            users_total=sum(role_counts.values()),
            users_customers=role_counts.get(RoleEnum.CUSTOMER, 0),
            users_workers=role_counts.get(RoleEnum.WORKER, 0),
            users_admins=role_counts.get(RoleEnum.ADMIN, 0),
        )

    async def list_users(
        self,
        actor: IdentityContext,
        limit: int,
        offset: int,
        *,
        query: str | None = None,
        role: RoleEnum | None = None,
        is_active: bool | None = None,
    ) -> tuple[list[User], int]:
        self._ensure_admin(actor)
        return await self.identity_repository.list_users(
            limit,
            offset,
            query=normalize_search_term(query),
            role=role,
            is_active=is_active,
        )

    async def get_user(self, actor: IdentityContext, user_id: str) -> User:
        self._ensure_admin(actor)
        return await self._get_user_or_404(user_id)

    async def create_user(self, actor: IdentityContext, payload: UserCreate) -> User:
        """Register a directory profile for an externally issued subject id."""
        self._ensure_admin(actor)
        user_id = payload.id.strip()
        email = str(payload.email).lower()

        if await self.identity_repository.get_user_by_id(user_id) is not None:
            raise ConflictException("User already exists")
        await self._ensure_email_free(email)

        user = await self.identity_repository.create_user(
            user_id=user_id,
            email=email,
            full_name=_clean_name(payload.full_name),
            role=payload.role,
            phone=normalize_phone(payload.phone),
        )
        await self._audit(actor, "user.created", user.id, {"email": email, "role": str(user.role)})
        logger.info("Admin %s created directory user %s", actor.subject_id, user.id)
        return user

    async def update_user(self, actor: IdentityContext, user_id: str, payload: UserUpdate) -> User:
        """Apply a partial profile update."""
        self._ensure_admin(actor)
        user = await self._get_user_or_404(user_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("email") is not None:
            email = str(changes["email"]).lower()
            await self._ensure_email_free(email, user.id)
            user.email = email
        if "full_name" in changes:
            user.full_name = _clean_name(changes["full_name"])
        if changes.get("role") is not None:
            user.role = changes["role"]
        if "phone" in changes:
            user.phone = normalize_phone(changes["phone"])
        if changes.get("is_active") is not None:
            user.is_active = changes["is_active"]

        user = await self.identity_repository.save(user)
        await self._audit(
            actor,
            "user.updated",
            user.id,
            {"fields": sorted(changes), "role": str(user.role), "is_active": user.is_active},
        )
        return user

    async def deactivate_user(self, actor: IdentityContext, user_id: str) -> User:
        """Hide a profile from the directory; bookings keep referencing its id."""
        self._ensure_admin(actor)
        user = await self._get_user_or_404(user_id)
        if user.id == actor.subject_id:
            raise ForbiddenException("Admins cannot deactivate themselves")
        if user.is_active:
            user.is_active = False
            user = await self.identity_repository.save(user)
            await self._audit(actor, "user.deactivated", user.id, {"role": str(user.role)})
            logger.info("Admin %s deactivated directory user %s", actor.subject_id, user.id)
        return user


async def get_admin_service(session: AsyncSession = Depends(get_db_session)) -> AdminService:
    """Dependency provider for admin service."""
    return AdminService(
        BookingRepository(session),
        IdentityRepository(session),
        AuditRepository(session),
    )
