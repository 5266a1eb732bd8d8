"""
Reading inbound relay messages.

Turns an ASGI ``websocket.receive`` event into the trimmed text that gets
broadcast, applying the receive buffer capacity and the oversize policy.
"""

import codecs
from typing import Any, NamedTuple

from chat_relay.constants import MESSAGE_PADDING_CHARS
from chat_relay.exceptions import MessageDecodeError, MessageTooLargeError
from chat_relay.settings import OversizePolicy


class InboundMessage(NamedTuple):
    text: str
    size: int  # encoded size in bytes before truncation
    truncated: bool


def _decode(payload: bytes, complete: bool) -> str:
    """
    Strict UTF-8 decode of a received payload.

    When ``complete`` is False the payload was cut at the buffer boundary:
    an incomplete character at its end is discarded, invalid bytes anywhere
    else are still an error.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        return decoder.decode(payload, final=complete)
    except UnicodeDecodeError as exc:
        raise MessageDecodeError(
            f"Frame of {len(payload)} bytes is not valid UTF-8: {exc}"
        ) from exc


def read_message(
    message: dict[str, Any],
    buffer_size: int,
    oversize_policy: OversizePolicy = OversizePolicy.TRUNCATE,
) -> InboundMessage:
    """
    Decode and trim one inbound frame.

    Text and binary frames are both treated as UTF-8 text. A payload larger
    than ``buffer_size`` bytes is cut to the buffer capacity when the policy
    is ``truncate``, and only the bytes that fit are decoded (a multi-byte
    character split at the boundary is discarded). Any other policy raises
    ``MessageTooLargeError`` and leaves the decision to the caller. Spaces
    and NUL characters are stripped from both ends after truncation.

    Args:
        message: ASGI ``websocket.receive`` event.
        buffer_size: Receive buffer capacity in bytes.
        oversize_policy: What to do with payloads above the capacity.

    Returns:
        InboundMessage with the text to broadcast.

    Raises:
        MessageDecodeError: If the bytes that fit in the buffer are not
            valid UTF-8.
        MessageTooLargeError: If the payload is too large and the policy is
            not ``truncate``.
    """
    text = message.get("text")
    if text is not None:
        payload = text.encode("utf-8")
    else:
        payload = message.get("bytes") or b""

    size = len(payload)
    truncated = size > buffer_size

    if truncated:
        if oversize_policy != OversizePolicy.TRUNCATE:
            raise MessageTooLargeError(size, buffer_size)
        text = _decode(payload[:buffer_size], complete=False)
    elif text is None:
        text = _decode(payload, complete=True)

    return InboundMessage(
        text=text.strip(MESSAGE_PADDING_CHARS), size=size, truncated=truncated
    )
