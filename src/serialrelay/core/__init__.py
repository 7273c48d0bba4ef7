"""
Core components for the serial relay.

Provides configuration and data models.
"""

from serialrelay.core.config import Config, load_config
from serialrelay.core.models import (
    ErrorKind,
    EventKind,
    InboundEvent,
    LinkError,
    LinkEvent,
    LinkState,
    LinkStatus,
    ViewerSession,
)

__all__ = [
    "Config",
    "load_config",
    "ErrorKind",
    "EventKind",
    "InboundEvent",
    "LinkError",
    "LinkEvent",
    "LinkState",
    "LinkStatus",
    "ViewerSession",
]
