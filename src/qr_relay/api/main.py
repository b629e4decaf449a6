"""Application factory for qr-relay."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..container import RelayContainer
from ..errors import install_exception_handlers
from ..logging import get_logger, setup_logging
from ..request_context import install_request_id_middleware
from ..settings import RelaySettings, load_settings_from_env
from .routes import display as routes_display
from .routes import events as routes_events
from .routes import health as routes_health
from .routes import qr_data as routes_qr_data
from .routes import upload as routes_upload

SERVICE_NAME = "qr-relay"


def create_app(
    settings: RelaySettings | None = None,
    container: RelayContainer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings. If None, reads from environment variables
            (ignored when ``container`` is given).
        container: Prebuilt application context. If None, one is built from
            the settings and closed on shutdown.

    Returns:
        Configured FastAPI application instance.
    """
    if container is None:
        cfg = settings or load_settings_from_env()
        container = RelayContainer.from_settings(cfg)
    cfg = container.settings
    setup_logging(
        level=cfg["log_level"],
        format_mode=cfg["log_format"],
        service_name=SERVICE_NAME,
        instance_id=None,
    )
    ctx = container

    @asynccontextmanager
    async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
        get_logger(SERVICE_NAME).info("relay started", extra={"variant": ctx.variant})
        yield
        ctx.close()

    app = FastAPI(title=SERVICE_NAME, version="0.1.0", lifespan=_lifespan)
    install_request_id_middleware(app)
    install_exception_handlers(app, logger_name=SERVICE_NAME)

    app.include_router(routes_health.build_router(ctx))
    app.include_router(routes_upload.build_router(ctx))
    if ctx.variant == "poll":
        app.include_router(routes_qr_data.build_router(ctx))
    else:
        app.include_router(routes_events.build_router(ctx))
    app.include_router(routes_display.build_router(ctx))

    app.state.container = ctx
    return app


__all__ = ["SERVICE_NAME", "create_app"]
