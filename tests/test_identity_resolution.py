from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from app.core.config import get_settings
from app.core.enums import RoleEnum
from app.core.security import create_access_token
from app.modules.identity.schemas import IdentityContext
from app.modules.identity.service import (
    IdentityService,
    extract_credential,
    get_current_identity,
    resolve_identity,
)
from app.shared.exceptions import AuthenticationException
from app.shared.utils import utc_now


def test_extract_credential_prefers_bearer_header() -> None:
    assert extract_credential("Bearer header-token", "cookie-token") == "header-token"
    assert extract_credential("bearer  spaced ", None) == "spaced"
    assert extract_credential("Basic abc", "cookie-token") == "cookie-token"
    assert extract_credential(None, "  ") is None


def test_resolve_identity_maps_subject_and_role() -> None:
    token = create_access_token("w-42", RoleEnum.WORKER.value)

    identity = resolve_identity(token)

    assert identity == IdentityContext(subject_id="w-42", role=RoleEnum.WORKER)


def test_resolve_identity_rejects_unknown_role_and_wrong_type() -> None:
    assert resolve_identity(create_access_token("u1", "superuser")) is None
    assert resolve_identity(create_access_token("u1", RoleEnum.ADMIN.value, type="refresh")) is None


def test_resolve_identity_rejects_expired_or_foreign_tokens() -> None:
    settings = get_settings()
    expired = create_access_token("c1", RoleEnum.CUSTOMER.value, exp=utc_now() - timedelta(minutes=1))
    foreign = jwt.encode(
        {"sub": "c1", "role": "customer", "type": "access"},
        "some-other-secret",
        algorithm=settings.jwt_algorithm,
    )

    assert resolve_identity(expired) is None
    assert resolve_identity(foreign) is None
    assert resolve_identity("garbage") is None
    assert resolve_identity(None) is None


@pytest.mark.asyncio
async def test_get_current_identity_uses_identity_attached_by_guard() -> None:
    identity = IdentityContext(subject_id="c1", role=RoleEnum.CUSTOMER)
    request = SimpleNamespace(state=SimpleNamespace(identity=identity))

    assert await get_current_identity(request) == identity  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_current_identity_requires_credential() -> None:
    request = SimpleNamespace(state=SimpleNamespace(identity=None))

    with pytest.raises(AuthenticationException):
        await get_current_identity(request)  # type: ignore[arg-type]


class FakeIdentityRepository:
    def __init__(self, users: dict[str, SimpleNamespace]) -> None:
        self._users = users

    async def get_user_by_id(self, user_id: str) -> SimpleNamespace | None:
        return self._users.get(user_id)


@pytest.mark.asyncio
async def test_profile_lookup_is_optional() -> None:
    profile = SimpleNamespace(id="c1", email="c1@example.com", full_name="C One")
    service = IdentityService(FakeIdentityRepository({"c1": profile}))  # type: ignore[arg-type]

    assert await service.get_profile(IdentityContext(subject_id="c1", role=RoleEnum.CUSTOMER)) is profile
    assert await service.get_profile(IdentityContext(subject_id="c2", role=RoleEnum.CUSTOMER)) is None
