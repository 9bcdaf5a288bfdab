"""Service catalog API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.modules.catalog.schemas import ServiceOfferingRead
from app.modules.catalog.service import CatalogService, get_catalog_service

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/services", response_model=list[ServiceOfferingRead])
async def list_services(
    service: CatalogService = Depends(get_catalog_service),
) -> list[ServiceOfferingRead]:
    """List bookable service types."""
    items = await service.list_services()
    return [ServiceOfferingRead.model_validate(item) for item in items]
