"""
Socket.IO bridge between browser dashboards and the broadcast hub.

Every browser connection becomes a viewer session. Event names match the
existing dashboards: they send connect_arduino, disconnect_arduino and
send_to_arduino, and receive arduino_connected, arduino_disconnected,
arduino_error, arduino_data and data_sent.
"""

import logging
from typing import Any

from flask import Flask, request
from flask_socketio import SocketIO

from serialrelay.core.models import ViewerSession
from serialrelay.relay.hub import BroadcastHub, Transport
from serialrelay.serial.link import SerialLink

logger = logging.getLogger(__name__)

HUB_EXTENSION = "serialrelay_hub"


def socketio_transport(sio: SocketIO) -> Transport:
    """Build a hub transport that emits to a single Socket.IO client."""

    def transport(session_id: str, event: str, payload: Any) -> None:
        sio.emit(event, payload, to=session_id)

    return transport


def init_socketio(app: Flask, link: SerialLink, **kwargs) -> SocketIO:
    """Initialize SocketIO and the broadcast hub for a Flask app."""
    sio = SocketIO(app, **kwargs)
    hub = BroadcastHub(link, socketio_transport(sio))
    app.extensions[HUB_EXTENSION] = hub
    register_handlers(sio, hub)
    return sio


def get_hub(app: Flask) -> BroadcastHub:
    """Get the broadcast hub attached to an app."""
    return app.extensions[HUB_EXTENSION]


def register_handlers(sio: SocketIO, hub: BroadcastHub):
    """Register SocketIO event handlers."""

    @sio.on("connect")
    def handle_connect(auth=None):
        """Register the viewer and replay the current link state."""
        session = ViewerSession(
            session_id=request.sid,
            address=request.remote_addr or "unknown",
        )
        hub.join(session)

    @sio.on("disconnect")
    def handle_disconnect(reason=None):
        """Forget the viewer; the serial link stays as it is."""
        hub.leave(request.sid)

    @sio.on("connect_arduino")
    def handle_connect_device(data=None):
        """Open the serial link.

        Expected data: {"port": "COM3"}
        """
        port = data.get("port") if isinstance(data, dict) else data
        hub.connect(request.sid, port)

    @sio.on("disconnect_arduino")
    def handle_disconnect_device(data=None):
        """Close the serial link."""
        hub.disconnect(request.sid)

    @sio.on("send_to_arduino")
    def handle_send(data=None):
        """Send a command to the device.

        Expected data: a string, or any JSON value sent as JSON
        """
        hub.command(request.sid, data)
