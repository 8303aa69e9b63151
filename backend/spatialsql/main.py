"""
spatialsql — FastAPI Application
================================
Coordinate reprojection and mergeable extent aggregation, exposed over
HTTP and as SQL functions on a SQLite host.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from spatialsql.config import get_settings
from spatialsql.routers import extent, features, transform

logger = logging.getLogger(__name__)
settings = get_settings()


# ── Lifespan (startup / shutdown) ─────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Create tables (idempotent).
        - Verify the spatial SQL functions are registered.
    Shutdown:
        - Dispose engine pool.
    """
    logger.info("%s starting up...", settings.app_name)

    from spatialsql.models.database import engine, init_models
    from sqlalchemy import text

    init_models()
    logger.info("Database schema verified / created.")

    with engine.connect() as conn:
        probe = conn.execute(
            text("SELECT TransformWkt('POINT (0 0)', 4326, 4326)")
        ).scalar()
    logger.info("Spatial SQL functions registered (probe=%s)", probe)

    yield

    engine.dispose()
    logger.info("%s shut down.", settings.app_name)


# ── App factory ───────────────────────────────────────────────────
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description=(
            "Coordinate reprojection for arbitrarily nested geometries and "
            "a mergeable spatial extent aggregate."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Trusted Host — rejects requests with unexpected Host headers.
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1"],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transform.router, prefix="/api")
    app.include_router(extent.router, prefix="/api")
    app.include_router(features.router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": settings.app_name}

    return app


# ── Module-level app instance (for `uvicorn spatialsql.main:app`) ─
app = create_app()  # pragma: no cover
