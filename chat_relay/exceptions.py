"""
Custom exception classes for the relay.

These exceptions never escape a session: the session handler catches them
and decides whether to drop the offending message or close the connection.
"""


class RelayError(Exception):
    """Base class for all relay errors."""

    pass


class MessageDecodeError(RelayError):
    """
    Inbound payload is not valid UTF-8.

    Raised when a binary frame cannot be decoded as text. The message is
    dropped; the session stays open.
    """

    pass


class MessageTooLargeError(RelayError):
    """
    Inbound payload exceeds the receive buffer capacity.

    Raised only when the oversize policy is not ``truncate``.
    """

    def __init__(self, size: int, limit: int):
        """
        Args:
            size: Encoded size of the message in bytes.
            limit: Configured receive buffer capacity in bytes.
        """
        super().__init__(
            f"Message of {size} bytes exceeds receive buffer of {limit} bytes"
        )
        self.size = size
        self.limit = limit
