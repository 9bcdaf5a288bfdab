"""Identity schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.core.enums import RoleEnum


class IdentityContext(BaseModel):
    """Request-scoped caller identity decoded from the credential."""

    model_config = ConfigDict(frozen=True)

    subject_id: str
    role: RoleEnum


class UserRead(BaseModel):
    """Directory profile output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    full_name: str | None
    role: RoleEnum
    phone: str | None = None
    is_active: bool


class UserCreate(BaseModel):
    """Admin request to register a directory profile for a subject id."""

    id: str = Field(min_length=1, max_length=64)
    email: EmailStr
    full_name: str | None = Field(default=None, max_length=255)
    role: RoleEnum = RoleEnum.CUSTOMER
    phone: str | None = Field(default=None, max_length=32)


class UserUpdate(BaseModel):
    """Partial profile update; omitted fields stay unchanged."""

    email: EmailStr | None = None
    full_name: str | None = Field(default=None, max_length=255)
    role: RoleEnum | None = None
    phone: str | None = Field(default=None, max_length=32)
    is_active: bool | None = None


class MeRead(BaseModel):
    """Current caller identity with optional directory profile."""

    identity: IdentityContext
    profile: UserRead | None
