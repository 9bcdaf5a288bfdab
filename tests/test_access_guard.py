from __future__ import annotations

import json

import pytest
from fastapi import Request, Response

from app.core.enums import RoleEnum
from app.core.security import create_access_token
from app.modules.access.guard import AccessOutcome, RouteClass, classify_route, evaluate_access
from app.modules.access.middleware import enforce_access
from app.modules.identity.schemas import IdentityContext

CUSTOMER = IdentityContext(subject_id="c1", role=RoleEnum.CUSTOMER)
WORKER = IdentityContext(subject_id="w1", role=RoleEnum.WORKER)
ADMIN = IdentityContext(subject_id="a1", role=RoleEnum.ADMIN)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/admin", RouteClass.ADMIN),
        ("/admin/bookings/123/status", RouteClass.ADMIN),
        ("/worker/jobs/available", RouteClass.WORKER),
        ("/bookings/me", RouteClass.CUSTOMER),
        ("/booking", RouteClass.CUSTOMER),
        ("/dashboard/", RouteClass.CUSTOMER),
        ("/identity/me", RouteClass.CUSTOMER),
        ("/", RouteClass.PUBLIC),
        ("/login", RouteClass.PUBLIC),
        ("/catalog/services", RouteClass.PUBLIC),
        ("/administrator", RouteClass.PUBLIC),
        ("/health", RouteClass.PUBLIC),
    ],
)
def test_classify_route(path: str, expected: RouteClass) -> None:
    assert classify_route(path) == expected


def test_classify_route_strips_api_prefix() -> None:
    assert classify_route("/api/v1/admin/overview", "/api/v1") == RouteClass.ADMIN
    assert classify_route("/api/v1/worker/jobs/me", "/api/v1") == RouteClass.WORKER
    assert classify_route("/api/v1/catalog/services", "/api/v1") == RouteClass.PUBLIC


@pytest.mark.parametrize(
    ("path", "identity", "expected"),
    [
        ("/admin/bookings", None, AccessOutcome.LOGIN_REQUIRED),
        ("/admin/bookings", CUSTOMER, AccessOutcome.DENIED),
        ("/admin/bookings", WORKER, AccessOutcome.DENIED),
        ("/admin/bookings", ADMIN, AccessOutcome.ALLOW),
        ("/worker/jobs/available", None, AccessOutcome.LOGIN_REQUIRED),
        ("/worker/jobs/available", CUSTOMER, AccessOutcome.DENIED),
        ("/worker/jobs/available", ADMIN, AccessOutcome.DENIED),
        ("/worker/jobs/available", WORKER, AccessOutcome.ALLOW),
        ("/bookings", None, AccessOutcome.LOGIN_REQUIRED),
        ("/bookings", CUSTOMER, AccessOutcome.ALLOW),
        ("/bookings", WORKER, AccessOutcome.ALLOW),
        ("/bookings", ADMIN, AccessOutcome.ALLOW),
        ("/catalog/services", None, AccessOutcome.ALLOW),
    ],
)
def test_evaluate_access_rule_table(
    path: str,
    identity: IdentityContext | None,
    expected: AccessOutcome,
) -> None:
    decision = evaluate_access(path, identity)

    assert decision.outcome == expected
    assert decision.allowed is (expected == AccessOutcome.ALLOW)


def _make_request(path: str, token: str | None = None, cookie: str | None = None) -> Request:
    headers: list[tuple[bytes, bytes]] = []
    if token is not None:
        headers.append((b"authorization", f"Bearer {token}".encode()))
    if cookie is not None:
        headers.append((b"cookie", f"token={cookie}".encode()))
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": headers,
        "client": ("127.0.0.1", 12345),
        "scheme": "http",
        "server": ("testserver", 80),
        "query_string": b"",
    }
    return Request(scope)


class RecordingEndpoint:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self, _: Request) -> Response:
        self.calls += 1
        return Response(status_code=200)


@pytest.mark.asyncio
async def test_middleware_rejects_missing_credential_on_api_route() -> None:
    endpoint = RecordingEndpoint()

    response = await enforce_access(_make_request("/api/v1/admin/bookings"), endpoint)

    assert response.status_code == 401
    assert json.loads(response.body)["error"]["code"] == "unauthenticated"
    assert endpoint.calls == 0


@pytest.mark.asyncio
async def test_middleware_rejects_wrong_role_on_api_route() -> None:
    endpoint = RecordingEndpoint()
    token = create_access_token("c1", RoleEnum.CUSTOMER.value)

    response = await enforce_access(_make_request("/api/v1/worker/jobs/available", token), endpoint)

    assert response.status_code == 403
    assert json.loads(response.body)["error"]["code"] == "forbidden"
    assert endpoint.calls == 0


@pytest.mark.asyncio
async def test_middleware_redirects_pages() -> None:
    endpoint = RecordingEndpoint()
    token = create_access_token("w1", RoleEnum.WORKER.value)

    to_login = await enforce_access(_make_request("/dashboard"), endpoint)
    to_denied = await enforce_access(_make_request("/admin", cookie=token), endpoint)

    assert to_login.status_code == 307
    assert to_login.headers["location"] == "/login"
    assert to_denied.status_code == 307
    assert to_denied.headers["location"] == "/"
    assert endpoint.calls == 0


@pytest.mark.asyncio
async def test_middleware_passes_allowed_request_and_attaches_identity() -> None:
    endpoint = RecordingEndpoint()
    token = create_access_token("a1", RoleEnum.ADMIN.value)
    request = _make_request("/api/v1/admin/overview", token)

    response = await enforce_access(request, endpoint)

    assert response.status_code == 200
    assert endpoint.calls == 1
    assert request.state.identity == ADMIN


@pytest.mark.asyncio
async def test_middleware_treats_invalid_token_as_missing() -> None:
    endpoint = RecordingEndpoint()

    response = await enforce_access(_make_request("/api/v1/bookings/me", "not-a-jwt"), endpoint)
    public = await enforce_access(_make_request("/api/v1/catalog/services", "not-a-jwt"), endpoint)

    assert response.status_code == 401
    assert public.status_code == 200
    assert endpoint.calls == 1
