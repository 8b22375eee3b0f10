"""FastAPI application entrypoint."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Session
from app.api.errors import setup_exception_handlers
from app.api.routes import api_router
from app.core.config import Settings, get_settings
from app.core.database import init_db
from app.core.security import GoogleIdentityVerifier
from app.models.base import utcnow
from app.services.identity import DomainPolicy, PrincipalResolver

logger = logging.getLogger(__name__)

_start_time = time.time()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: ensure tables exist
    await init_db()
    logger.info("Thesis review API started")
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Thesis Review API",
        version="0.1.0",
        description="Thesis submission and faculty review backend",
        lifespan=lifespan,
    )

    app.state.settings = settings

    # Identity provider client + role policy, shared by every request
    app.state.identity_verifier = GoogleIdentityVerifier.from_settings(settings)
    app.state.principal_resolver = PrincipalResolver(DomainPolicy.from_settings(settings))

    # ── CORS ─────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",")],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # ── API routes ───────────────────────────────────────────
    app.include_router(api_router)

    @app.get("/health", tags=["system"])
    async def health_check(session: Session) -> dict:
        return {
            "status": "ok",
            "timestamp": utcnow().isoformat() + "Z",
            "uptime_seconds": int(time.time() - _start_time),
            "database": await _check_database(session),
        }

    return app


async def _check_database(session: AsyncSession) -> str:
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Database health check failed", exc_info=True)
        return "error"
    return "ok"


app = create_app()
