import uuid
from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from chat_relay.api.ws.broadcast import broadcast
from chat_relay.api.ws.constants import SessionState
from chat_relay.api.ws.messages import read_message
from chat_relay.constants import WS_ABNORMAL_CLOSURE_CODE
from chat_relay.exceptions import MessageDecodeError, MessageTooLargeError
from chat_relay.logging import clear_log_context, logger, set_log_context
from chat_relay.managers.connection_registry import ConnectionRegistry
from chat_relay.middlewares.correlation_id import set_correlation_id
from chat_relay.settings import OversizePolicy, Settings
from chat_relay.utils.metrics import MetricsCollector


class RelaySession(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint driving one relay session.

    Each accepted connection is registered in the application's
    ConnectionRegistry, every inbound message is broadcast to all registered
    connections (the sender included unless WS_BROADCAST_INCLUDE_SENDER is
    off), and the connection is unregistered on every exit path of the
    receive loop.

    The registry and settings are owned by the application and read from
    ``app.state`` through the ASGI scope, so every app instance has its own.
    """

    encoding = None  # Both text and binary frames carry UTF-8 text

    def __init__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        super().__init__(scope, receive, send)
        self.session_state = SessionState.CONNECTING
        self.connection_id: uuid.UUID | None = None
        self.close_reason: str | None = None
        self.errored = False

    @property
    def registry(self) -> ConnectionRegistry:
        return self.scope["app"].state.connection_registry

    @property
    def settings(self) -> Settings:
        return self.scope["app"].state.settings

    async def dispatch(self) -> None:
        """
        Run the session until the peer closes or the connection fails.

        The loop:
        1. Accepts and registers the connection (on_connect).
        2. Receives events; "websocket.receive" is relayed through
           on_receive, "websocket.disconnect" records the peer's close code
           and reason and ends the loop.
        3. An oversized message under the "close" policy ends the session
           with 1009.
        4. A transport error ends the session with 1006.
        5. Any other exception ends the session with 1011 and is re-raised
           to the server after cleanup.
        6. on_disconnect always runs: unregister, close, release.
        """
        websocket = WebSocket(self.scope, receive=self.receive, send=self.send)
        await self.on_connect(websocket)

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    await self.on_receive(websocket, message)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    self.close_reason = message.get("reason") or None
                    break
        except MessageTooLargeError as exc:
            logger.warning(f"Closing session: {exc}")
            close_code = status.WS_1009_MESSAGE_TOO_BIG
            self.close_reason = "Message too big"
        except (WebSocketDisconnect, ConnectionError) as exc:
            logger.warning(f"Connection lost without close handshake: {exc!r}")
            close_code = WS_ABNORMAL_CLOSURE_CODE
        except Exception as exc:
            logger.error(f"Unexpected error in relay session: {exc!r}")
            close_code = status.WS_1011_INTERNAL_ERROR
            self.errored = True
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accept the upgrade and register the connection.

        The correlation ID for the session's log lines comes from the
        upgrade request's X-Correlation-ID header, or from the connection
        identifier when the header is absent.
        """
        await super().on_connect(websocket)

        self.connection_id = self.registry.register(websocket)
        self.session_state = SessionState.OPEN

        headers = dict(websocket.headers)
        set_correlation_id(
            headers.get("x-correlation-id") or self.connection_id.hex
        )
        set_log_context(connection_id=str(self.connection_id))

        MetricsCollector.record_ws_connection_accepted()
        logger.info(
            f"Client connected ({len(self.registry)} connections registered)"
        )

    async def on_receive(self, websocket: WebSocket, data: dict[str, Any]) -> None:
        """
        Relay one inbound message.

        Undecodable and (under the "drop" policy) oversized messages are
        logged and skipped; the session stays open. Under the "close"
        policy an oversized message propagates MessageTooLargeError to
        dispatch, which ends the session.

        Args:
            websocket: The sender's connection.
            data: The raw ASGI "websocket.receive" event.
        """
        settings = self.settings

        try:
            inbound = read_message(
                data,
                buffer_size=settings.WS_RECEIVE_BUFFER_SIZE,
                oversize_policy=settings.WS_OVERSIZE_POLICY,
            )
        except MessageDecodeError as exc:
            logger.warning(f"Dropping message: {exc}")
            MetricsCollector.record_ws_message_received("dropped_decode")
            return
        except MessageTooLargeError as exc:
            if settings.WS_OVERSIZE_POLICY == OversizePolicy.CLOSE:
                MetricsCollector.record_ws_message_received("closed_oversize")
                raise
            logger.warning(f"Dropping message: {exc}")
            MetricsCollector.record_ws_message_received("dropped_oversize")
            return

        if inbound.truncated:
            logger.warning(
                f"Message of {inbound.size} bytes truncated to "
                f"{settings.WS_RECEIVE_BUFFER_SIZE} bytes"
            )
            MetricsCollector.record_ws_message_received("truncated")
        else:
            MetricsCollector.record_ws_message_received("accepted")

        await broadcast(
            self.registry,
            inbound.text,
            exclude=None if settings.WS_BROADCAST_INCLUDE_SENDER else websocket,
            send_timeout=settings.WS_SEND_TIMEOUT_SECONDS,
        )

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Unregister and finalize the connection.

        The connection leaves the registry before anything else, so no
        broadcast targets it while it closes. If the application side is
        still open (the session itself decided to end), the close frame is
        sent with the recorded code and reason; when the peer initiated the
        close, the protocol layer already answered its close frame.
        """
        self.session_state = SessionState.CLOSING
        self.registry.unregister(websocket)

        try:
            if (
                websocket.application_state == WebSocketState.CONNECTED
                and websocket.client_state == WebSocketState.CONNECTED
                and close_code != WS_ABNORMAL_CLOSURE_CODE
            ):
                try:
                    await websocket.close(
                        code=close_code, reason=self.close_reason
                    )
                except (
                    WebSocketDisconnect, RuntimeError, ConnectionError
                ) as exc:
                    logger.debug(f"Close handshake could not complete: {exc!r}")
        finally:
            # Also reached when the server cancels the session task
            self.session_state = SessionState.CLOSED
            MetricsCollector.record_ws_disconnection(errored=self.errored)
            logger.info(
                f"Client disconnected with code {close_code} "
                f"({len(self.registry)} connections registered)"
            )
            clear_log_context()
