"""
Serial Relay (serialrelay).

Bridges a single serial-attached microcontroller to any number of browser
dashboards over Socket.IO, and relays operator commands back to the device.
"""

__version__ = "0.1.0"
