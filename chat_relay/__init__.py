# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette import status
from starlette.websockets import WebSocketDisconnect

from chat_relay.constants import WS_CLOSE_TIMEOUT_SECONDS
from chat_relay.logging import logger
from chat_relay.managers.connection_registry import ConnectionRegistry
from chat_relay.middlewares.correlation_id import CorrelationIDMiddleware
from chat_relay.routing import collect_subrouters
from chat_relay.settings import Settings, app_settings

__version__ = "1.0.0"


async def startup(app: FastAPI) -> None:
    """
    Application startup handler
    """
    from chat_relay.utils.metrics import app_info

    app_info.labels(
        version=__version__,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=app.state.settings.ENVIRONMENT,
    ).set(1)
    logger.info("Relay startup complete")


async def shutdown(app: FastAPI) -> None:
    """
    Application shutdown handler.

    Closes every connection still registered with 1001 (going away). Each
    close is bounded by WS_CLOSE_TIMEOUT_SECONDS and failures are only
    logged; the sessions unregister themselves when their receive loops
    end.
    """
    registry: ConnectionRegistry = app.state.connection_registry
    connections = registry.snapshot_for_broadcast()
    logger.info(f"Relay shutdown initiated, closing {len(connections)} connections")

    async def close(connection) -> None:
        try:
            await asyncio.wait_for(
                connection.close(
                    code=status.WS_1001_GOING_AWAY, reason="Server shutdown"
                ),
                timeout=WS_CLOSE_TIMEOUT_SECONDS,
            )
        except (
            TimeoutError, WebSocketDisconnect, RuntimeError, ConnectionError
        ) as ex:
            logger.warning(f"Error closing connection {id(connection)}: {ex!r}")

    await asyncio.gather(*[close(connection) for connection in connections])
    logger.info("Relay shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup(app)
    yield
    await shutdown(app)


def application(settings: Settings | None = None) -> FastAPI:
    """
    Initializes and configures the relay application.

    Every application owns its ConnectionRegistry and Settings, stored on
    `app.state` where the relay sessions and the health endpoint find them.
    Two applications never share connections.

    Args:
        settings: Settings to use instead of the environment driven
            `app_settings`.

    Returns:
        FastAPI: The configured application.
    """
    settings = settings or app_settings

    app = FastAPI(
        title="Chat relay",
        description="WebSocket message broadcast relay",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.connection_registry = ConnectionRegistry()

    app.include_router(collect_subrouters(settings))

    app.add_middleware(CorrelationIDMiddleware)

    return app
