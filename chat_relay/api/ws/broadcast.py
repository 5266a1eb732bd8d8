import asyncio
import time
from typing import NamedTuple

from starlette.websockets import WebSocket, WebSocketDisconnect

from chat_relay.logging import logger
from chat_relay.managers.connection_registry import ConnectionRegistry
from chat_relay.utils.metrics import MetricsCollector


class BroadcastResult(NamedTuple):
    attempted: int
    failed: int


async def broadcast(
    registry: ConnectionRegistry,
    message: str,
    *,
    exclude: WebSocket | None = None,
    send_timeout: float | None = None,
) -> BroadcastResult:
    """
    Send one text message to every registered connection.

    Takes a single registry snapshot and sends to all recipients
    concurrently, so a slow recipient delays nobody else. Each send is
    isolated: a failure is logged and counted, never retried and never
    propagated to the caller or to the other sends. Failing recipients stay
    registered; their own session removes them when it ends.

    Args:
        registry: Registry to take the recipient snapshot from.
        message: Text payload, sent unchanged as one complete text message.
        exclude: Connection to leave out of the recipient set (the sender,
            when self-echo is disabled).
        send_timeout: Upper bound in seconds for a single send, or None.

    Returns:
        BroadcastResult with the number of attempted and failed sends.
    """
    recipients = [
        connection
        for connection in registry.snapshot_for_broadcast()
        if connection is not exclude
    ]
    if not recipients:
        return BroadcastResult(attempted=0, failed=0)

    async def safe_send(connection: WebSocket) -> bool:
        """
        Send to a single recipient with error handling.

        Returns:
            True if the send completed.
        """
        try:
            await asyncio.wait_for(
                connection.send_text(message), timeout=send_timeout
            )
            return True
        except TimeoutError:
            logger.warning(
                f"Send to connection {id(connection)} timed out after "
                f"{send_timeout}s"
            )
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state (already closed)
            logger.warning(f"Failed to send to connection {id(connection)}: {e}")
        except Exception as e:
            logger.warning(
                f"Unexpected error sending to connection {id(connection)}: {e}"
            )
        return False

    start_time = time.perf_counter()
    outcomes = await asyncio.gather(
        *[safe_send(connection) for connection in recipients]
    )
    duration = time.perf_counter() - start_time

    failed = outcomes.count(False)
    MetricsCollector.record_broadcast(
        ok=len(outcomes) - failed, failed=failed, duration=duration
    )
    logger.debug(
        f"Broadcast {len(message)} chars to {len(recipients)} recipients "
        f"({failed} failed)"
    )

    return BroadcastResult(attempted=len(recipients), failed=failed)
