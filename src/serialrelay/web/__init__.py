"""
Web interface for the serial relay.

Provides the Socket.IO bridge for dashboards and a small REST API.
"""

from serialrelay.web.app import create_app

__all__ = ["create_app"]
