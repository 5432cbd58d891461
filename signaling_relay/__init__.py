# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from signaling_relay.logging import logger
from signaling_relay.managers.client_registry import ClientRegistry
from signaling_relay.managers.signaling_router import SignalingRouter
from signaling_relay.routing import collect_subrouters
from signaling_relay.settings import app_settings

__version__ = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Creates the client registry and the signaling router for this server
    instance and exposes the router as `app.state.signaling_router`. The
    registry lives exactly as long as the application.
    """
    app.state.signaling_router = SignalingRouter(
        registry=ClientRegistry(),
        send_timeout=app_settings.WS_SEND_TIMEOUT,
    )
    logger.info(
        f"Signaling relay started (websocket path: {app_settings.WS_PATH}, "
        f"environment: {app_settings.ENVIRONMENT})"
    )

    yield

    remaining = len(app.state.signaling_router.registry)
    logger.info(
        f"Signaling relay shutting down with {remaining} client(s) connected"
    )


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Sets up the lifespan handler that owns the signaling router, and
    includes the routers collected by `collect_subrouters()`:
    - the signaling WebSocket endpoint on WS_PATH
    - `/health` and `/metrics` HTTP endpoints
    """
    app = FastAPI(
        title="Signaling relay",
        description="WebSocket signaling relay for peer-to-peer clients",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(collect_subrouters())

    return app
