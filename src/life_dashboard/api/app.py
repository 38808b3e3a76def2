"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from life_dashboard.app_logging import configure_logging
from life_dashboard.config import parse_allowed_origins
from life_dashboard.containers import AppContainer
from life_dashboard.domain.errors import ConfigurationError
from life_dashboard.domain.records import DashboardPayload
from life_dashboard.services.looksmaxx import empty_looksmaxx
from life_dashboard.services.payloads import (
    serialize_dashboard,
    serialize_looksmaxx,
    serialize_roadmap,
    utc_timestamp,
)
from life_dashboard.services.roadmap import empty_roadmap


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allow_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/dashboard")
    async def dashboard(request: Request) -> JSONResponse:
        """Return meals, body composition and training entries."""
        state_container: AppContainer = request.app.state.container
        try:
            payload = await state_container.dashboard_service.load()
        except ConfigurationError as exc:
            logger.warning("Dashboard requested without Notion configuration")
            return _empty_dashboard(status.HTTP_400_BAD_REQUEST, str(exc))
        except Exception as exc:
            logger.exception("Failed to load dashboard")
            return _empty_dashboard(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                str(exc) or "Unknown server error",
            )
        return JSONResponse(serialize_dashboard(payload))

    @app.get("/api/portfolio")
    async def portfolio(request: Request) -> object:
        """Return the portfolio snapshot file or the built-in sample."""
        state_container: AppContainer = request.app.state.container
        return state_container.portfolio_service.load()

    @app.get("/api/looksmaxx")
    async def looksmaxx(request: Request) -> dict[str, object]:
        """Return looksmaxx counts; failures degrade to a zeroed payload."""
        state_container: AppContainer = request.app.state.container
        try:
            payload = await state_container.looksmaxx_service.load()
        except Exception as exc:
            logger.exception(
                "Failed to load looksmaxx", extra={"route": "/api/looksmaxx"}
            )
            payload = empty_looksmaxx(error=str(exc) or "looksmaxx_error")
        return serialize_looksmaxx(payload)

    @app.get("/api/roadmap")
    async def roadmap(request: Request) -> dict[str, object]:
        """Return the roadmap; failures degrade to an empty payload."""
        state_container: AppContainer = request.app.state.container
        try:
            payload = await state_container.roadmap_service.load()
        except Exception as exc:
            logger.exception("Failed to load roadmap", extra={"route": "/api/roadmap"})
            payload = empty_roadmap(error=str(exc) or "roadmap_error")
        return serialize_roadmap(payload)

    static_dir = container.settings.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


def _empty_dashboard(status_code: int, error: str) -> JSONResponse:
    payload = DashboardPayload(updated_at=utc_timestamp(), error=error)
    return JSONResponse(serialize_dashboard(payload), status_code=status_code)
