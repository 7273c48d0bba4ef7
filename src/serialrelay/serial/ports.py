"""
Serial port discovery.

Wraps pyserial's port listing and merges it with common port names so
dashboards can offer a choice even when detection finds nothing.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from serial.tools import list_ports as serial_list_ports

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortInfo:
    """A serial port candidate."""

    path: str
    friendly_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {"path": self.path, "friendlyName": self.friendly_name}


COMMON_PORTS = (
    PortInfo("COM3", "Arduino COM3 (Recommended)"),
    PortInfo("COM1", "Arduino COM1"),
    PortInfo("COM4", "Arduino COM4"),
    PortInfo("COM5", "Arduino COM5"),
    PortInfo("COM6", "Arduino COM6"),
    PortInfo("COM7", "Arduino COM7"),
    PortInfo("COM8", "Arduino COM8"),
    PortInfo("/dev/ttyUSB0", "Arduino USB0 (Linux)"),
    PortInfo("/dev/ttyACM0", "Arduino ACM0 (Linux)"),
    PortInfo("/dev/ttyUSB1", "Arduino USB1 (Linux)"),
    PortInfo("/dev/ttyACM1", "Arduino ACM1 (Linux)"),
)


def list_ports() -> list[PortInfo]:
    """
    List serial ports detected on this host.

    Returns:
        Detected ports, or an empty list if enumeration fails
    """
    try:
        found = serial_list_ports.comports()
    except OSError as e:
        logger.error(f"Error listing ports: {e}")
        return []

    ports = []
    for p in sorted(found, key=lambda p: p.device):
        description = p.description if p.description and p.description != "n/a" else None
        ports.append(PortInfo(path=p.device, friendly_name=description))
    return ports


def merge_ports(
    detected: Iterable[PortInfo],
    guesses: Iterable[PortInfo] = COMMON_PORTS,
) -> list[PortInfo]:
    """Detected ports first, then guesses not already detected."""
    merged = list(detected)
    seen = {p.path for p in merged}
    for port in guesses:
        if port.path not in seen:
            merged.append(port)
            seen.add(port.path)
    return merged
