"""
Line framing and decoding for serial traffic.

Pure functions with no I/O: the serial link feeds raw bytes in and gets
decoded events out.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from serialrelay.core.models import EventKind, InboundEvent, utc_timestamp

FRAME_DELIMITER = b"\n"


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class LineFramer:
    """Splits a byte stream into trimmed, non-empty text frames."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._buffer = bytearray()

    @property
    def pending(self) -> bytes:
        """Bytes received after the last delimiter."""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> list[str]:
        """
        Add received bytes and return any complete frames.

        Args:
            data: Raw bytes from the device

        Returns:
            Frames in arrival order, trailing whitespace removed, empty
            frames dropped
        """
        self._buffer.extend(data)
        frames = []

        while True:
            index = self._buffer.find(FRAME_DELIMITER)
            if index < 0:
                break
            raw = bytes(self._buffer[:index])
            del self._buffer[: index + 1]

            text = raw.decode(self.encoding, errors="replace").rstrip()
            if text:
                frames.append(text)

        return frames

    def reset(self) -> None:
        """Discard any partial frame."""
        self._buffer.clear()


def decode_frame(text: str, now: Optional[datetime] = None) -> InboundEvent:
    """
    Decode one frame into an inbound event.

    Valid JSON becomes a typed event carrying the parsed value. Anything else
    is wrapped as a raw message; decoding never fails.

    Args:
        text: Trimmed frame text
        now: Receive time (defaults to current UTC time)

    Returns:
        Decoded event
    """
    now = now or datetime.now(timezone.utc)

    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return InboundEvent(
            kind=EventKind.RAW_MESSAGE,
            payload={
                "type": "message",
                "data": text,
                "timestamp": utc_timestamp(now),
            },
            received_at=now,
        )

    return InboundEvent(kind=EventKind.TYPED, payload=payload, received_at=now)


def encode_command(command: Any, encoding: str = "utf-8") -> bytes:
    """
    Serialize a command into a newline-terminated frame.

    Strings are sent verbatim; anything else is sent as compact JSON.

    Raises:
        TypeError: If the command is not JSON serializable
        ValueError: If the command contains non-finite floats or cycles
    """
    if isinstance(command, str):
        text = command
    else:
        text = json.dumps(command, separators=(",", ":"), allow_nan=False)
    return (text + "\n").encode(encoding)
