"""
Viewer-side relay: session registry and broadcast hub.
"""

from serialrelay.relay.hub import BroadcastHub
from serialrelay.relay.registry import SessionRegistry

__all__ = ["BroadcastHub", "SessionRegistry"]
