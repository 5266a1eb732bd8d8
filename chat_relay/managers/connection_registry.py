import threading
import uuid
from typing import NamedTuple

from starlette.websockets import WebSocket

from chat_relay.logging import logger


class RegistryEntry(NamedTuple):
    connection: WebSocket
    identifier: uuid.UUID


class ConnectionRegistry:
    """
    Registry of live relay connections.

    Maps every accepted WebSocket to a unique identifier. The identifier is
    not used for routing yet; it tags log lines and is reserved for
    addressed delivery.

    Entries are keyed by ``id(connection)`` because Starlette connections
    are mappings and therefore unhashable. The entry keeps a reference to
    the connection, so the id cannot be reused while it is registered.

    All mutations and snapshots happen under a single ``threading.Lock``.
    Critical sections never await, so the lock is never held across I/O and
    the registry is safe from asyncio tasks and worker threads alike.
    """

    def __init__(self) -> None:
        self._entries: dict[int, RegistryEntry] = {}
        self._lock = threading.Lock()

    def register(self, connection: WebSocket) -> uuid.UUID:
        """
        Add a connection and return its identifier.

        Registering an already registered connection returns the existing
        identifier without creating a second entry.

        Args:
            connection: The accepted WebSocket connection.

        Returns:
            The identifier assigned to this connection.
        """
        key = id(connection)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = RegistryEntry(connection, uuid.uuid4())
                self._entries[key] = entry
                created = True
            else:
                created = False

        if created:
            logger.debug(
                f"websocket object ({key}) registered as {entry.identifier}"
            )
        return entry.identifier

    def unregister(self, connection: WebSocket) -> bool:
        """
        Remove a connection if present.

        Removing a connection that is not registered is a no-op.

        Args:
            connection: The WebSocket connection to remove.

        Returns:
            True if an entry was removed, False otherwise.
        """
        key = id(connection)
        with self._lock:
            entry = self._entries.pop(key, None)

        if entry is None:
            return False

        logger.debug(
            f"websocket object ({key}) unregistered ({entry.identifier})"
        )
        return True

    def snapshot_for_broadcast(self) -> list[WebSocket]:
        """
        Return the connections registered at this moment.

        The returned list is a copy; connections joining or leaving while
        the caller iterates it do not affect the iteration.
        """
        with self._lock:
            return [entry.connection for entry in self._entries.values()]

    def get_identifier(self, connection: WebSocket) -> uuid.UUID | None:
        """Identifier of a registered connection, or None."""
        with self._lock:
            entry = self._entries.get(id(connection))
        return entry.identifier if entry else None

    def __contains__(self, connection: object) -> bool:
        with self._lock:
            entry = self._entries.get(id(connection))
        return entry is not None and entry.connection is connection

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
