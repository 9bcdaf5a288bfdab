"""Identity resolution and directory lookups."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.core.security import decode_token
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.schemas import IdentityContext
from app.shared.exceptions import AuthenticationException

settings = get_settings()


def extract_credential(authorization: str | None, cookie_token: str | None) -> str | None:
    """Pick the bearer token from the Authorization header, falling back to the cookie."""
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    if cookie_token and cookie_token.strip():
        return cookie_token.strip()
    return None


def resolve_identity(token: str | None) -> IdentityContext | None:
    """Map a credential to subject id and role, None when missing or invalid."""
    if not token:
        return None
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        return None

    subject = payload.get("sub")
    role_value = payload.get("role")
    if not subject or role_value not in {role.value for role in RoleEnum}:
        return None
    return IdentityContext(subject_id=str(subject), role=RoleEnum(role_value))


def identity_from_request(request: Request) -> IdentityContext | None:
    """Resolve caller identity from request headers and cookies."""
    token = extract_credential(
        request.headers.get("authorization"),
        request.cookies.get(settings.auth_cookie_name),
    )
    return resolve_identity(token)


async def get_current_identity(request: Request) -> IdentityContext:
    """Return the identity attached by the access guard middleware."""
    if hasattr(request.state, "identity"):
        identity = request.state.identity
    else:
        identity = identity_from_request(request)
    if identity is None:
        raise AuthenticationException("Authentication required")
    return identity


class IdentityService:
    """Directory lookups for authenticated callers."""

    def __init__(self, repository: IdentityRepository) -> None:
        self.repository = repository

    async def get_profile(self, identity: IdentityContext) -> User | None:
        return await self.repository.get_user_by_id(identity.subject_id)


async def get_identity_service(session: AsyncSession = Depends(get_db_session)) -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(IdentityRepository(session))
