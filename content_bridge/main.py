"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_bridge.config import get_settings
from content_bridge.core.logging import setup_logging, get_logger
from content_bridge.core.error_handlers import register_error_handlers
from content_bridge.core.middleware import RequestContextMiddleware
from content_bridge.api.routes import router as api_router

settings = get_settings()


# ─── Lifespan: startup / shutdown ─────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared source HTTP client for the lifetime of the app."""
    logger = get_logger(__name__)

    setup_logging(level=settings.log_level, log_format=settings.log_format)
    logger.info(
        "Content bridge starting",
        extra={
            "app": settings.app_name,
            "version": settings.app_version,
            "env": settings.app_env,
            "config_path": settings.bridge_config_path,
            "config_key": settings.bridge_config_key,
        },
    )

    # One pooled client for every source; SourceClient applies per-request timeouts.
    async with httpx.AsyncClient(
        timeout=None,
        follow_redirects=True,
        headers={"User-Agent": f"{settings.app_name}/{settings.app_version}"},
    ) as http_client:
        app.state.http_client = http_client
        yield

    logger.info("Content bridge stopped; HTTP client closed.")


# ─── App factory ──────────────────────────────────────────────────────

def create_app() -> FastAPI:
    """Build the content bridge API: ingest and mapping preview under /api/v1."""
    application = FastAPI(
        title=settings.app_name,
        description="Pull paginated JSON APIs into markdown-ready content documents.",
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Middleware, outermost first
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestContextMiddleware)

    # Error handlers
    register_error_handlers(application)

    # Routes
    application.include_router(api_router, prefix="/api/v1")

    # Health check
    @application.get("/health", tags=["Health"])
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "config_path": settings.bridge_config_path,
        }

    return application


app = create_app()
