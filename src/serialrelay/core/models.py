"""
Data models for the serial relay.

Defines the link state, decoded inbound events, viewer sessions, and the
named events passed from the serial link to the broadcast hub.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class LinkStatus(Enum):
    """Serial link status values."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class ErrorKind(Enum):
    """Machine-readable failure kinds reported to viewers."""

    PORT_OPEN_FAILURE = "port_open_failure"
    WRITE_FAILURE = "write_failure"
    UNEXPECTED_DISCONNECT = "unexpected_disconnect"
    NOT_CONNECTED = "not_connected"
    INVALID_COMMAND = "invalid_command"
    INVALID_REQUEST = "invalid_request"


class EventKind(Enum):
    """How an inbound frame was interpreted."""

    TYPED = "typed"
    RAW_MESSAGE = "rawMessage"


# Socket.IO event names, shared with the browser dashboards
EVENT_CONNECTED = "arduino_connected"
EVENT_DISCONNECTED = "arduino_disconnected"
EVENT_ERROR = "arduino_error"
EVENT_DATA = "arduino_data"
EVENT_SENT = "data_sent"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format a timestamp as ISO-8601 UTC with millisecond precision."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    text = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


@dataclass(frozen=True)
class LinkError:
    """A failure reported by the serial link."""

    kind: ErrorKind
    message: str
    detail: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to event payload."""
        data: dict[str, Any] = {"message": self.message, "kind": self.kind.value}
        if self.detail is not None:
            data["detail"] = self.detail
        return data


@dataclass(frozen=True)
class LinkState:
    """Snapshot of the serial link status."""

    status: LinkStatus = LinkStatus.DISCONNECTED
    port: Optional[str] = None
    last_error: Optional[LinkError] = None

    @property
    def is_connected(self) -> bool:
        return self.status == LinkStatus.CONNECTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "port": self.port,
            "last_error": self.last_error.to_dict() if self.last_error else None,
        }


@dataclass(frozen=True)
class InboundEvent:
    """One decoded line of serial input."""

    kind: EventKind
    payload: Any
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_typed(self) -> bool:
        return self.kind == EventKind.TYPED


@dataclass(frozen=True)
class LinkEvent:
    """A named event with a JSON payload, delivered to viewer sessions."""

    name: str
    payload: Any = None

    @classmethod
    def connected(cls, port: str, message: str = "Device connected successfully") -> "LinkEvent":
        return cls(EVENT_CONNECTED, {"port": port, "message": message})

    @classmethod
    def disconnected(cls, message: str = "Device disconnected") -> "LinkEvent":
        return cls(EVENT_DISCONNECTED, {"message": message})

    @classmethod
    def error(cls, error: LinkError) -> "LinkEvent":
        return cls(EVENT_ERROR, error.to_dict())

    @classmethod
    def data(cls, event: InboundEvent) -> "LinkEvent":
        return cls(EVENT_DATA, event.payload)

    @classmethod
    def sent(cls, message: str = "Data sent to device successfully") -> "LinkEvent":
        return cls(EVENT_SENT, {"message": message})

    @property
    def is_error(self) -> bool:
        return self.name == EVENT_ERROR


@dataclass
class ViewerSession:
    """Represents one connected browser client."""

    session_id: str
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    address: str = "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "connected_at": self.connected_at.isoformat(),
            "address": self.address,
        }
