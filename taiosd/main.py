"""Main FastAPI application for taiosd daemon.

This module creates and configures the FastAPI application that serves the
admin notification stream.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taios_library import __version__

from .config.loader import load_config
from .config.models import Config
from .routers import notifications_router
from .routers import status_router
from .services.event_bus import AdminEventBus

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    config: Config = app.state.config
    logger.info(f"Starting taiosd daemon on {config.daemon.host}:{config.daemon.port}")

    emitter = AdminEventBus.get_instance()
    emitter.queue_size = config.stream.subscriber_queue_size
    logger.info(
        f"Notification streams: heartbeat every {config.stream.heartbeat_interval_seconds}s, "
        f"queue size {config.stream.subscriber_queue_size}"
    )

    yield

    # Shutdown
    logger.info(f"Shutting down taiosd daemon, closing {emitter.subscriber_count} stream(s)")
    emitter.close_all()


def create_app(config: Config | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Daemon configuration (default: loaded from file and environment)

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    logging.basicConfig(
        level=config.daemon.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="taiosd",
        description="Trust TAI OS admin notification daemon with SSE streaming",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    origins = config.daemon.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info(f"CORS enabled for origins: {origins}")

    app.include_router(notifications_router)
    app.include_router(status_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint.

        Returns:
            Welcome message with API information
        """
        return {
            "name": "taiosd",
            "version": __version__,
            "description": "Admin notification daemon",
            "stream": "/api/admin/notifications/stream?adminId=<id>",
            "docs": "/docs",
        }

    return app


app = create_app()
