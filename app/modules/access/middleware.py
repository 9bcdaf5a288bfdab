"""HTTP middleware applying the access guard to every request."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import RedirectResponse

from app.core.config import get_settings
from app.modules.access.guard import AccessOutcome, evaluate_access, strip_api_prefix
from app.modules.identity.service import identity_from_request
from app.shared.exceptions import AuthenticationException, ForbiddenException, error_response

logger = logging.getLogger(__name__)


def _is_api_path(path: str, api_prefix: str) -> bool:
    return bool(api_prefix) and strip_api_prefix(path, api_prefix) != path


async def enforce_access(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Resolve the caller, evaluate the guard and short-circuit denied requests."""
    settings = get_settings()
    path = request.url.path
    identity = identity_from_request(request)
    request.state.identity = identity

    decision = evaluate_access(path, identity, api_prefix=settings.api_prefix)
    if decision.allowed:
        return await call_next(request)

    logger.info(
        "Access %s for %s route %s (subject=%s)",
        decision.outcome,
        decision.route_class,
        path,
        identity.subject_id if identity else None,
    )
    if _is_api_path(path, settings.api_prefix):
        if decision.outcome == AccessOutcome.LOGIN_REQUIRED:
            return error_response(
                AuthenticationException.status_code,
                AuthenticationException.code,
                "Authentication required",
            )
        return error_response(
            ForbiddenException.status_code,
            ForbiddenException.code,
            "Operation not permitted for your role",
        )

    if decision.outcome == AccessOutcome.LOGIN_REQUIRED:
        return RedirectResponse(settings.login_redirect_path, status_code=307)
    return RedirectResponse(settings.denied_redirect_path, status_code=307)
