"""Service catalog schemas."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ServiceOfferingRead(BaseModel):
    """Catalog entry response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    price: Decimal
