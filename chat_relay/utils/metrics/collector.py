"""
Facade for centralized metrics emission.

Provides high-level methods for recording metrics without exposing
Prometheus implementation details to the session and broadcast code.
"""

from chat_relay.utils.metrics.websocket import (
    ws_broadcast_duration_seconds,
    ws_broadcast_sends_total,
    ws_connections_active,
    ws_connections_total,
    ws_messages_received_total,
)


class MetricsCollector:
    """
    Centralized facade for relay Prometheus metrics.

    All methods are static for easy use without instantiation.
    """

    # ========== Session Metrics ==========

    @staticmethod
    def record_ws_connection_accepted() -> None:
        """Record a session entering the OPEN state."""
        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()

    @staticmethod
    def record_ws_disconnection(errored: bool = False) -> None:
        """
        Record a session reaching the CLOSED state.

        Args:
            errored: True if the session ended on an unexpected error.
        """
        status = "errored" if errored else "closed"
        ws_connections_total.labels(status=status).inc()
        ws_connections_active.dec()

    # ========== Message Metrics ==========

    @staticmethod
    def record_ws_message_received(outcome: str) -> None:
        """
        Record an inbound message.

        Args:
            outcome: One of 'accepted', 'truncated', 'dropped_decode',
                'dropped_oversize', 'closed_oversize'
        """
        ws_messages_received_total.labels(outcome=outcome).inc()

    # ========== Broadcast Metrics ==========

    @staticmethod
    def record_broadcast(ok: int, failed: int, duration: float) -> None:
        """Record the result of one broadcast fan-out."""
        if ok:
            ws_broadcast_sends_total.labels(status="ok").inc(ok)
        if failed:
            ws_broadcast_sends_total.labels(status="failed").inc(failed)
        ws_broadcast_duration_seconds.observe(duration)
