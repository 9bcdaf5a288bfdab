"""Admin API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.enums import RoleEnum
from app.modules.admin.schemas import AdminOverviewRead
from app.modules.admin.service import AdminService, get_admin_service
from app.modules.identity.schemas import IdentityContext, UserCreate, UserRead, UserUpdate
from app.modules.identity.service import get_current_identity
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/overview", response_model=AdminOverviewRead)
async def get_overview(
    service: AdminService = Depends(get_admin_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> AdminOverviewRead:
    """Booking and user counts for the admin dashboard."""
    return await service.get_overview(identity)


@router.get("/users", response_model=Page[UserRead])
async def list_users(
    q: str | None = Query(default=None, max_length=255),
    role: RoleEnum | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    pagination=Depends(get_pagination_params),
    service: AdminService = Depends(get_admin_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> Page[UserRead]:
    """Search directory profiles by id, email or name."""
    items, total = await service.list_users(
        identity,
        pagination.limit,
        pagination.offset,
        query=q,
        role=role,
        is_active=is_active,
    )
    serialized = [UserRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    service: AdminService = Depends(get_admin_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> UserRead:
    user = await service.create_user(identity, payload)
    return UserRead.model_validate(user)


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    service: AdminService = Depends(get_admin_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> UserRead:
    user = await service.get_user(identity, user_id)
    return UserRead.model_validate(user)


@router.patch("/users/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    service: AdminService = Depends(get_admin_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> UserRead:
    """Update profile fields, role or active flag (audited)."""
    user = await service.update_user(identity, user_id, payload)
    return UserRead.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(
    user_id: str,
    service: AdminService = Depends(get_admin_service),
    identity: IdentityContext = Depends(get_current_identity),
) -> Response:
    """Deactivate a profile (audited); the row is kept for booking history."""
    await service.deactivate_user(identity, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
