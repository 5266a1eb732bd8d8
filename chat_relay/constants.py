"""
Application-level constants for hardcoded relay behavior.

These values represent protocol specifications and internal limits that
should NEVER be changed via environment variables. For configurable values
(buffer size, oversize policy, send timeout, etc.), see
chat_relay/settings.py.
"""

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Close code used when the peer drops the connection without a close frame
# (RFC 6455 reserves 1006 for this, it is never sent on the wire)
WS_ABNORMAL_CLOSURE_CODE = 1006

# Characters stripped from both ends of every inbound message
MESSAGE_PADDING_CHARS = " \0"

# Timeout (seconds) when closing relay connections during shutdown
# Ensures shutdown doesn't hang on a stalled client
WS_CLOSE_TIMEOUT_SECONDS = 5


# ============================================================================
# Logging
# ============================================================================

# Longest message kept in a JSON log line
MAX_LOG_MESSAGE_CHARS = 10_000

# Length of correlation IDs attached to requests and sessions
CORRELATION_ID_LENGTH = 8
