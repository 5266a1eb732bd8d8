"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the relay application, its
connection registry and the HTTP/WebSocket test client.
"""

import time

import pytest
from fastapi.testclient import TestClient

from chat_relay import application
from chat_relay.managers.connection_registry import ConnectionRegistry
from chat_relay.settings import Settings


@pytest.fixture
def registry():
    """
    Provides an empty ConnectionRegistry.

    Returns:
        ConnectionRegistry: Fresh registry instance
    """
    return ConnectionRegistry()


@pytest.fixture
def relay_settings():
    """
    Provides default relay settings.

    Override this fixture in a test module to run the app with other
    settings.

    Returns:
        Settings: Settings instance with defaults
    """
    return Settings()


@pytest.fixture
def relay_app(relay_settings):
    """
    Provides a relay application with its own registry.

    Args:
        relay_settings: Fixture providing settings

    Returns:
        FastAPI: Relay application
    """
    return application(relay_settings)


@pytest.fixture
def client(relay_app):
    """
    Provides a test client with the application lifespan running.

    Entering the client context makes every WebSocket session share one
    event loop, so sessions see each other's registrations.

    Args:
        relay_app: Fixture providing the relay application

    Yields:
        TestClient: Test client instance
    """
    with TestClient(relay_app) as test_client:
        yield test_client


@pytest.fixture
def wait_for_connections(client):
    """
    Provides a helper blocking until the relay has `count` registrations.

    Sessions register right after accepting the upgrade; polling /health
    removes the race between the test thread and the event loop.

    Args:
        client: Fixture providing the test client

    Returns:
        Callable[[int], None]: Wait helper
    """

    def wait(count: int, timeout: float = 2.0) -> None:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if client.get("/health").json()["active_connections"] == count:
                return
            time.sleep(0.01)
        raise AssertionError(f"relay did not reach {count} connections")

    return wait
