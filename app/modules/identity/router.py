"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.modules.identity.schemas import IdentityContext, MeRead, UserRead
from app.modules.identity.service import IdentityService, get_current_identity, get_identity_service

router = APIRouter(prefix="/identity", tags=["identity"])


@router.get("/me", response_model=MeRead)
async def get_me(
    identity: IdentityContext = Depends(get_current_identity),
    service: IdentityService = Depends(get_identity_service),
) -> MeRead:
    """Return caller identity and directory profile if one exists."""
    profile = await service.get_profile(identity)
    return MeRead(
        identity=identity,
        profile=UserRead.model_validate(profile) if profile is not None else None,
    )
