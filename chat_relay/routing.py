import os
import pkgutil
from importlib import import_module

from fastapi import APIRouter

from chat_relay.api.ws.session import RelaySession
from chat_relay.logging import logger
from chat_relay.settings import Settings

# Track which modules have been registered to avoid duplicate logs
_registered_http_modules: set[str] = set()


def collect_subrouters(settings: Settings) -> APIRouter:
    """
    Collects all HTTP routers and mounts the relay WebSocket endpoint.

    Every module under `api/http` exposing a `router` is included. The relay
    session is mounted at `settings.WS_PATH`; every other request is left to
    the HTTP routes.
    """
    main_router: APIRouter = APIRouter()

    app_dir = os.path.dirname(__file__)
    app_name = os.path.basename(app_dir)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/http"]):
        api = import_module(f".{module}", package=f"{app_name}.api.http")
        main_router.include_router(api.router)

        # Only log on first registration
        if module not in _registered_http_modules:
            logger.info(f'Register "{module}" api')
            _registered_http_modules.add(module)

    main_router.add_websocket_route(settings.WS_PATH, RelaySession)
    logger.info(f'Register relay websocket at "{settings.WS_PATH}"')

    return main_router
