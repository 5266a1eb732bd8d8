"""Tests for the health check endpoint."""

from unittest.mock import MagicMock

from fastapi import WebSocket


def test_health_endpoint_empty_relay(client):
    """
    Test health endpoint with no connected clients.

    Args:
        client: FastAPI test client fixture.
    """
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "active_connections": 0}


def test_health_endpoint_reports_registry_size(client, relay_app):
    """
    Test health endpoint reports the number of registered connections.

    Args:
        client: FastAPI test client fixture.
        relay_app: Application whose registry is inspected.
    """
    registry = relay_app.state.connection_registry
    registry.register(MagicMock(spec=WebSocket))
    registry.register(MagicMock(spec=WebSocket))

    response = client.get("/health")

    assert response.json()["active_connections"] == 2


def test_health_endpoint_counts_live_sessions(client, wait_for_connections):
    """
    Test health endpoint follows sessions connecting and leaving.

    Args:
        client: FastAPI test client fixture.
        wait_for_connections: Fixture polling /health.
    """
    with client.websocket_connect("/ws"):
        wait_for_connections(1)

    wait_for_connections(0)
