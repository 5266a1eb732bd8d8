"""
Tests for the relay connection registry.

This module tests ConnectionRegistry registration, removal, snapshots and
its behavior under concurrent access from many threads.
"""

import uuid
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

from fastapi import WebSocket

from chat_relay.managers.connection_registry import ConnectionRegistry


class TestConnectionRegistry:
    """Tests for ConnectionRegistry class."""

    def test_init(self):
        """Test ConnectionRegistry initialization."""
        registry = ConnectionRegistry()
        assert len(registry) == 0
        assert registry.snapshot_for_broadcast() == []

    def test_register(self):
        """Test adding WebSocket connection."""
        registry = ConnectionRegistry()
        mock_ws = MagicMock(spec=WebSocket)

        identifier = registry.register(mock_ws)

        assert isinstance(identifier, uuid.UUID)
        assert mock_ws in registry
        assert len(registry) == 1
        assert registry.get_identifier(mock_ws) == identifier

    def test_register_multiple(self):
        """Test adding multiple WebSocket connections gets unique identifiers."""
        registry = ConnectionRegistry()
        connections = [MagicMock(spec=WebSocket) for _ in range(3)]

        identifiers = {registry.register(ws) for ws in connections}

        assert len(identifiers) == 3
        assert len(registry) == 3
        for ws in connections:
            assert ws in registry

    def test_register_twice_keeps_single_entry(self):
        """Test registering the same connection twice keeps one entry."""
        registry = ConnectionRegistry()
        mock_ws = MagicMock(spec=WebSocket)

        first = registry.register(mock_ws)
        second = registry.register(mock_ws)

        assert first == second
        assert len(registry) == 1

    def test_unregister(self):
        """Test removing WebSocket connection."""
        registry = ConnectionRegistry()
        mock_ws = MagicMock(spec=WebSocket)
        registry.register(mock_ws)

        assert registry.unregister(mock_ws) is True

        assert len(registry) == 0
        assert mock_ws not in registry
        assert registry.get_identifier(mock_ws) is None

    def test_unregister_nonexistent(self):
        """Test unregistering a connection that was never added (no-op)."""
        registry = ConnectionRegistry()
        mock_ws1 = MagicMock(spec=WebSocket)
        mock_ws2 = MagicMock(spec=WebSocket)
        registry.register(mock_ws1)

        assert registry.unregister(mock_ws2) is False

        assert len(registry) == 1
        assert mock_ws1 in registry

    def test_unregister_twice_is_idempotent(self):
        """Test second unregister has no error and no further effect."""
        registry = ConnectionRegistry()
        mock_ws = MagicMock(spec=WebSocket)
        other_ws = MagicMock(spec=WebSocket)
        registry.register(mock_ws)
        registry.register(other_ws)

        assert registry.unregister(mock_ws) is True
        assert registry.unregister(mock_ws) is False

        assert registry.snapshot_for_broadcast() == [other_ws]

    def test_snapshot_is_a_copy(self):
        """Test changes after a snapshot do not affect the snapshot."""
        registry = ConnectionRegistry()
        mock_ws1 = MagicMock(spec=WebSocket)
        mock_ws2 = MagicMock(spec=WebSocket)
        registry.register(mock_ws1)

        snapshot = registry.snapshot_for_broadcast()
        registry.register(mock_ws2)
        registry.unregister(mock_ws1)

        assert snapshot == [mock_ws1]
        assert registry.snapshot_for_broadcast() == [mock_ws2]

    def test_contains_unregistered_object(self):
        """Test membership check for arbitrary objects."""
        registry = ConnectionRegistry()
        assert object() not in registry


class TestConnectionRegistryConcurrency:
    """Tests for ConnectionRegistry under concurrent access."""

    def test_concurrent_register_and_unregister(self):
        """
        Test registry neither duplicates nor loses entries under threads.

        Half of the connections are registered and then unregistered, the
        other half only registered, all from a thread pool.
        """
        registry = ConnectionRegistry()
        kept = [MagicMock(spec=WebSocket) for _ in range(200)]
        removed = [MagicMock(spec=WebSocket) for _ in range(200)]

        def register_and_unregister(ws):
            registry.register(ws)
            registry.unregister(ws)
            registry.unregister(ws)

        with ThreadPoolExecutor(max_workers=16) as pool:
            futures = [pool.submit(registry.register, ws) for ws in kept]
            futures += [
                pool.submit(register_and_unregister, ws) for ws in removed
            ]
            for future in futures:
                future.result()

        snapshot = registry.snapshot_for_broadcast()
        assert len(snapshot) == len(kept)
        assert {id(ws) for ws in snapshot} == {id(ws) for ws in kept}

    def test_concurrent_register_same_connection(self):
        """Test racing registrations of one connection produce one entry."""
        registry = ConnectionRegistry()
        mock_ws = MagicMock(spec=WebSocket)

        with ThreadPoolExecutor(max_workers=16) as pool:
            identifiers = list(
                pool.map(lambda _: registry.register(mock_ws), range(100))
            )

        assert len(set(identifiers)) == 1
        assert len(registry) == 1

    def test_snapshot_during_mutation(self):
        """Test snapshots taken while other threads mutate never fail."""
        registry = ConnectionRegistry()
        connections = [MagicMock(spec=WebSocket) for _ in range(100)]

        def churn(ws):
            registry.register(ws)
            registry.snapshot_for_broadcast()
            registry.unregister(ws)

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(churn, connections))

        assert len(registry) == 0
