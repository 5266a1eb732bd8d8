"""
Prometheus metrics for the WebSocket relay.

This module defines metrics for tracking relay sessions, inbound message
outcomes and broadcast fan-out.
"""

from chat_relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)

# Session Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of active relay sessions"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total relay sessions",
    ["status"],  # accepted, closed, errored
)

# Inbound Message Metrics
ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total",
    "Total inbound relay messages",
    # accepted, truncated, dropped_decode, dropped_oversize, closed_oversize
    ["outcome"],
)

# Broadcast Metrics
ws_broadcast_sends_total = _get_or_create_counter(
    "ws_broadcast_sends_total",
    "Total per-recipient broadcast sends",
    ["status"],  # ok, failed
)

ws_broadcast_duration_seconds = _get_or_create_histogram(
    "ws_broadcast_duration_seconds",
    "Time to fan out one message to all recipients",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_broadcast_sends_total",
    "ws_broadcast_duration_seconds",
]
