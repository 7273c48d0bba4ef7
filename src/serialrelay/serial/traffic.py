"""
Traffic log for serial connections.

Records every frame exchanged with the device in a timestamped file, one
file per connection.
"""

import logging
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _safe_name(port: str) -> str:
    """Turn a port path into something usable in a file name."""
    name = re.sub(r"[^A-Za-z0-9_.-]+", "_", port).strip("_")
    return name or "serial"


class TrafficLog:
    """Logs serial frames to timestamped files."""

    def __init__(self, log_dir: Path, port: str):
        self.log_dir = log_dir
        self.port = port
        self.log_file: Optional[Path] = None
        self._file_handle = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._file_handle is not None

    def start(self) -> Path:
        """Start logging, returns log file path."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"{_safe_name(self.port)}_{timestamp}.log"

        self._file_handle = open(self.log_file, "a", buffering=1, encoding="utf-8")
        self._file_handle.write(f"# Port: {self.port}\n")
        self._file_handle.write(f"# Started: {datetime.now().isoformat()}\n")
        self._file_handle.write("# Direction: >> = from device, << = to device\n")
        self._file_handle.write("#" + "=" * 60 + "\n")
        return self.log_file

    def _write(self, direction: str, text: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        with self._lock:
            if self._file_handle is None:
                return
            try:
                self._file_handle.write(f"[{timestamp}] {direction} {text!r}\n")
            except OSError as e:
                logger.warning(f"Traffic log write failed, disabling: {e}")
                self._file_handle.close()
                self._file_handle = None

    def log_received(self, frame: str) -> None:
        """Log a frame received from the device."""
        self._write(">>", frame)

    def log_sent(self, data: bytes) -> None:
        """Log data written to the device."""
        self._write("<<", data.decode("utf-8", errors="replace"))

    def stop(self) -> None:
        """Stop logging."""
        with self._lock:
            handle, self._file_handle = self._file_handle, None
            if handle is None:
                return
            try:
                handle.write("#" + "=" * 60 + "\n")
                handle.write(f"# Ended: {datetime.now().isoformat()}\n")
            finally:
                handle.close()
