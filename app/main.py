"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine
from app.core.metrics import build_metrics_response, instrument_http_request
from app.modules.access.middleware import enforce_access
from app.modules.admin.router import router as admin_router
from app.modules.audit.router import router as audit_router
from app.modules.booking.router import admin_router as booking_admin_router
from app.modules.booking.router import customer_router as booking_customer_router
from app.modules.booking.router import worker_router as booking_worker_router
from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.router import router as catalog_router
from app.modules.catalog.service import CatalogService
from app.modules.identity.router import router as identity_router
from app.shared.exceptions import register_exception_handlers
from app.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


def _landing_page_html() -> str:
    """Build minimal landing page for root path."""
    return f"""
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{settings.app_name} API</title>
    <style>
      body {{
        margin: 0;
        font-family: "Segoe UI", Arial, sans-serif;
        background: linear-gradient(135deg, #effaf5 0%, #eef4fb 100%);
        color: #1c2a34;
      }}
      .container {{
        max-width: 760px;
        margin: 48px auto;
        padding: 0 20px;
      }}
      .hero {{
        background: #ffffff;
        border-radius: 16px;
        border: 1px solid #dce7ea;
        padding: 28px;
      }}
      a {{
        display: inline-block;
        margin: 16px 12px 0 0;
        color: #0f6b4f;
      }}
      code {{
        display: inline-block;
        margin-top: 12px;
        background: #f0f4f6;
        border-radius: 6px;
        padding: 4px 6px;
      }}
    </style>
  </head>
  <body>
    <main class="container">
      <section class="hero">
        <h1>{settings.app_name} API</h1>
        <p>Cleaning bookings backend is running.</p>
        <a href="{settings.api_prefix}/catalog/services">Services</a>
        <a href="/docs">API docs</a>
        <a href="/health">Health</a>
        <a href="/ready">Ready</a>
        <a href="/metrics">Metrics</a>
        <br />
        <code>API prefix: {settings.api_prefix}</code>
      </section>
    </main>
  </body>
</html>
"""


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s", settings.app_name)

    async with SessionLocal() as session:
        try:
            service = CatalogService(CatalogRepository(session))
            await service.ensure_default_services()
            await session.commit()
            logger.info("Default catalog ensured")
        except Exception:
            await session.rollback()
            logger.exception("Failed during startup initialization")
            raise

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.middleware("http")(enforce_access)
# Added last, so it wraps the guard and also counts rejected requests.
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(catalog_router, prefix=settings.api_prefix)
app.include_router(identity_router, prefix=settings.api_prefix)
app.include_router(booking_customer_router, prefix=settings.api_prefix)
app.include_router(booking_worker_router, prefix=settings.api_prefix)
app.include_router(booking_admin_router, prefix=settings.api_prefix)
app.include_router(admin_router, prefix=settings.api_prefix)
app.include_router(audit_router, prefix=settings.api_prefix)


@app.get("/", include_in_schema=False, response_class=HTMLResponse)
async def landing_page() -> HTMLResponse:
    """Root page with quick navigation links."""
    return HTMLResponse(content=_landing_page_html())


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness check endpoint."""
    return {"status": "ok"}


async def _is_database_ready() -> bool:
    """Return True if DB accepts basic queries."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint with DB dependency check."""
    if not await _is_database_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not ready",
        )
    return {
        "status": "ready",
        "database": "ok",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
