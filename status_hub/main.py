"""
Status Hub main application.

Serves the realtime ``/ws`` channel and the REST API from one FastAPI app.
Every app built by create_app() owns its own StatusHub on ``app.state.hub``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Mapping

from fastapi import FastAPI, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config.logging import setup_logging, status_hub_logger as logger
from shared.config.settings import Settings, get_settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.utils.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from rest_api.routers import docs_router, documents_router, health_router, templates_router
from status_hub.components.core.constants import WS_ENDPOINT_PATH
from status_hub.components.endpoints.base import HubEndpoint
from status_hub.components.health.probes import Probe
from status_hub.hub import StatusHub

PLATFORM_MOUNT_PATH = "/platform"

# Shortcut path -> page under the platform mount
QUICK_ACCESS_REDIRECTS = {
    "/customer-portal": "customer-portal/dashboard.html",
    "/register": "customer-registration.html",
    "/ai-arena": "games/ai-arena.html",
    "/marketplace": "marketplace/agent-marketplace.html",
    "/cleanup": "index.html",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Starts probes and the broadcast scheduler; on shutdown stops the
    scheduler, closes every connection and tears the hub down.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)

    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(config_errors)}. "
                "Server will not start with invalid configuration."
            )
        logger.warning("Running with development defaults")

    hub: StatusHub = app.state.hub
    logger.info(
        "Starting Status Hub",
        host=settings.host,
        port=settings.port,
        env=settings.environment,
    )
    await hub.start()

    yield

    logger.info("Shutting down Status Hub")
    await hub.shutdown()


def create_app(
    settings: Settings | None = None,
    probes: Mapping[str, Probe] | None = None,
) -> FastAPI:
    """
    Build the application and its hub.

    Args:
        settings: Settings to use. Defaults to the cached environment settings.
        probes: Service name -> probe. Defaults to the standard monitored services.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Status Hub",
        description="Realtime service status hub and document API",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.hub = StatusHub(settings, probes=probes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=settings.origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", CorrelationIdMiddleware.HEADER_NAME],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(docs_router)
    app.include_router(documents_router)
    app.include_router(templates_router)

    @app.get("/ws/health")
    def ws_health_check():
        """Hub state, service table and collector counters."""
        return {
            "service": "status-hub",
            "version": app.version,
            "environment": settings.environment,
            **app.state.hub.get_stats(),
        }

    @app.websocket(WS_ENDPOINT_PATH)
    async def hub_websocket(websocket: WebSocket):
        """Realtime status channel."""
        endpoint = HubEndpoint(websocket, websocket.app.state.hub)
        await endpoint.run()

    _mount_platform(app, settings)
    return app


def _mount_platform(app: FastAPI, settings: Settings) -> None:
    """Serve the bundled platform sub-application when it is present."""
    entry = Path(settings.platform_entry_path)
    if not entry.parent.is_dir():
        logger.info("Platform directory not found, static mount skipped", path=str(entry.parent))
        return

    app.mount(
        PLATFORM_MOUNT_PATH,
        StaticFiles(directory=entry.parent, html=True),
        name="platform",
    )

    @app.get("/", include_in_schema=False)
    def platform_entry():
        return RedirectResponse(url=f"{PLATFORM_MOUNT_PATH}/{entry.name}")

    for path, page in QUICK_ACCESS_REDIRECTS.items():
        app.add_api_route(
            path,
            _redirect_to(f"{PLATFORM_MOUNT_PATH}/{page}"),
            methods=["GET"],
            include_in_schema=False,
        )


def _redirect_to(url: str):
    def redirect():
        return RedirectResponse(url=url)

    return redirect


app = create_app()
