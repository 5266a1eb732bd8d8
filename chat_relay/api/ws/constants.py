from enum import StrEnum


class SessionState(StrEnum):
    """
    Lifecycle of one relay session.

    Transitions:
        CONNECTING -> OPEN: upgrade accepted, connection registered
        OPEN -> OPEN: message received and broadcast
        OPEN -> CLOSING: peer closed, receive failed or session rejected
            an oversized message
        CLOSING -> CLOSED: connection unregistered and finalized

    Example:
        >>> str(SessionState.OPEN)
        'open'
    """

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
