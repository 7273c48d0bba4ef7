"""
Serial link for the relay.

Handles port discovery, line framing and decoding, the single device
connection, and traffic logging.
"""

from serialrelay.serial.codec import LineFramer, decode_frame, encode_command
from serialrelay.serial.link import SerialLink
from serialrelay.serial.ports import COMMON_PORTS, PortInfo, list_ports, merge_ports
from serialrelay.serial.traffic import TrafficLog

__all__ = [
    "LineFramer",
    "decode_frame",
    "encode_command",
    "SerialLink",
    "COMMON_PORTS",
    "PortInfo",
    "list_ports",
    "merge_ports",
    "TrafficLog",
]
