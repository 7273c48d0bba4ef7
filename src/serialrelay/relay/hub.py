"""
Broadcast hub between the serial link and viewer sessions.

Fans link events out to every session, replays the current link state to
new sessions, and relays session commands to the link. Results of a
session's own request go back to that session only.
"""

import logging
import threading
from typing import Any, Callable, Optional

from serialrelay.core.models import (
    ErrorKind,
    LinkError,
    LinkEvent,
    LinkStatus,
    ViewerSession,
)
from serialrelay.relay.registry import SessionRegistry
from serialrelay.serial.link import SerialLink

logger = logging.getLogger(__name__)

# (session_id, event_name, payload)
Transport = Callable[[str, str, Any], None]


class BroadcastHub:
    """
    Relays events between one serial link and many viewer sessions.

    All deliveries go through a single lock, so each session receives events
    in the order they were produced.
    """

    def __init__(
        self,
        link: SerialLink,
        transport: Transport,
        registry: Optional[SessionRegistry] = None,
    ):
        """
        Initialize hub and subscribe to the link.

        Args:
            link: Serial link to relay
            transport: Callable delivering one event to one session
            registry: Session registry (a new one if None)
        """
        self.link = link
        self.registry = registry if registry is not None else SessionRegistry()
        self._transport = transport
        self._delivery_lock = threading.RLock()
        link.subscribe(self.on_link_event)

    @property
    def session_count(self) -> int:
        return len(self.registry)

    def detach(self) -> None:
        """Stop receiving link events."""
        self.link.unsubscribe(self.on_link_event)

    def _deliver(self, session_id: str, event: LinkEvent) -> bool:
        try:
            self._transport(session_id, event.name, event.payload)
            return True
        except Exception as e:
            logger.warning(f"Failed to deliver {event.name} to {session_id}: {e}")
            return False

    def broadcast(self, event: LinkEvent) -> int:
        """
        Deliver an event to every registered session.

        Returns:
            Number of sessions the event was delivered to
        """
        with self._delivery_lock:
            delivered = 0
            for session in self.registry.sessions():
                if self._deliver(session.session_id, event):
                    delivered += 1
            return delivered

    def send_to(self, session_id: str, event: LinkEvent) -> bool:
        """Deliver an event to one registered session."""
        with self._delivery_lock:
            if self.registry.get(session_id) is None:
                logger.debug(f"Dropping {event.name} for unknown session {session_id}")
                return False
            return self._deliver(session_id, event)

    def on_link_event(self, event: LinkEvent) -> None:
        """Link listener: device data and state changes go to everyone."""
        self.broadcast(event)

    def replay_event(self) -> LinkEvent:
        """Event describing the current link state for a new session."""
        state = self.link.state

        if state.status == LinkStatus.CONNECTED:
            return LinkEvent.connected(state.port, "Device already connected")
        if state.status == LinkStatus.ERROR and state.last_error:
            return LinkEvent.error(state.last_error)
        return LinkEvent.disconnected("Device not connected")

    def join(self, session: ViewerSession) -> None:
        """Register a session and send it the current link state."""
        with self._delivery_lock:
            self.registry.add(session)
            self._deliver(session.session_id, self.replay_event())

    def leave(self, session_id: str) -> Optional[ViewerSession]:
        """Deregister a session. The serial link is unaffected."""
        return self.registry.remove(session_id)

    def connect(self, session_id: str, port: Optional[str]) -> bool:
        """Open the link on a session's request. Outcome is broadcast."""
        if not port:
            self.send_to(
                session_id,
                LinkEvent.error(LinkError(ErrorKind.INVALID_REQUEST, "port required")),
            )
            return False

        logger.info(f"Viewer {session_id} requested connection to {port}")
        return self.link.open(port)

    def disconnect(self, session_id: str) -> None:
        """Close the link on a session's request."""
        logger.info(f"Viewer {session_id} requested disconnect")
        self.link.close()

    def command(self, session_id: str, command: Any) -> LinkEvent:
        """Send a session's command to the device; reply to that session only."""
        result = self.link.send(command)
        if result.is_error:
            logger.warning(f"Command from {session_id} failed: {result.payload['message']}")
        self.send_to(session_id, result)
        return result
