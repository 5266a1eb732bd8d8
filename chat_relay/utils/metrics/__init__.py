"""
Prometheus metrics definitions and utilities.

Metrics are defined in submodules by subsystem and re-exported here:

    from chat_relay.utils.metrics import ws_connections_active

Relay code should go through the MetricsCollector facade:

    from chat_relay.utils.metrics import MetricsCollector
    MetricsCollector.record_ws_message_received("accepted")
"""

from chat_relay.utils.metrics._helpers import _get_or_create_gauge
from chat_relay.utils.metrics.collector import MetricsCollector
from chat_relay.utils.metrics.websocket import (
    ws_broadcast_duration_seconds,
    ws_broadcast_sends_total,
    ws_connections_active,
    ws_connections_total,
    ws_messages_received_total,
)

app_info = _get_or_create_gauge(
    "app_info",
    "Application information",
    ["version", "python_version", "environment"],
)

__all__ = [
    "MetricsCollector",
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_broadcast_sends_total",
    "ws_broadcast_duration_seconds",
    "app_info",
]
