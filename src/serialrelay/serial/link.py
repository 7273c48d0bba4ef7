"""
Serial link manager.

Owns the single serial connection to the device. Opens and closes it, frames
and decodes incoming lines on a reader thread, writes commands, and reports
every state transition as a LinkEvent to its subscribers.

Only this class mutates the link state. open(), close() and send() are
serialized by one lock; state snapshots use a separate lock so readers never
wait on a slow port open.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional

import serial

from serialrelay.core.config import SerialConfig
from serialrelay.core.models import (
    ErrorKind,
    LinkError,
    LinkEvent,
    LinkState,
    LinkStatus,
)
from serialrelay.serial.codec import LineFramer, decode_frame, encode_command
from serialrelay.serial.traffic import TrafficLog

logger = logging.getLogger(__name__)

LinkListener = Callable[[LinkEvent], None]

READ_CHUNK_SIZE = 4096


def open_serial(port: str, baud_rate: int, timeout: float, write_timeout: float):
    """Open a serial port or pyserial URL (e.g. ``loop://``)."""
    return serial.serial_for_url(
        port,
        baudrate=baud_rate,
        timeout=timeout,
        write_timeout=write_timeout,
    )


class SerialLink:
    """
    The one serial connection shared by all viewers.

    State machine::

        disconnected --open()--> connecting --ok--> connected
        connecting --failure--> error
        connected --close()--> disconnected
        connected --I/O error--> error
        error --open()--> connecting
    """

    def __init__(
        self,
        baud_rate: int = 9600,
        read_timeout: float = 0.1,
        write_timeout: float = 2.0,
        traffic_log_dir: Optional[Path] = None,
        serial_factory: Optional[Callable[..., Any]] = None,
    ):
        """
        Initialize serial link.

        Args:
            baud_rate: Baud rate used for every open
            read_timeout: Reader poll timeout in seconds
            write_timeout: Write timeout in seconds
            traffic_log_dir: Directory for traffic logs (None to disable)
            serial_factory: Callable opening a port, defaults to open_serial
        """
        self.baud_rate = baud_rate
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.traffic_log_dir = traffic_log_dir
        self._serial_factory = serial_factory or open_serial

        self._lock = threading.RLock()
        self._state_lock = threading.Lock()
        self._state = LinkState()
        self._serial = None
        self._reader: Optional[threading.Thread] = None
        self._generation = 0
        self._traffic: Optional[TrafficLog] = None
        self._listeners: list[LinkListener] = []

    @classmethod
    def from_config(
        cls, config: SerialConfig, traffic_log_dir: Optional[Path] = None
    ) -> "SerialLink":
        """Create a link from serial configuration."""
        return cls(
            baud_rate=config.baud_rate,
            read_timeout=config.read_timeout,
            write_timeout=config.write_timeout,
            traffic_log_dir=traffic_log_dir,
        )

    @property
    def state(self) -> LinkState:
        """Current link state snapshot."""
        with self._state_lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        return self.state.is_connected

    def subscribe(self, listener: LinkListener) -> None:
        """Register a listener for broadcast link events."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: LinkListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: LinkEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Link listener failed on {event.name}")

    def _set_state(
        self,
        status: LinkStatus,
        port: Optional[str] = None,
        error: Optional[LinkError] = None,
    ) -> None:
        with self._state_lock:
            last_error = error if error is not None else self._state.last_error
            self._state = LinkState(status=status, port=port, last_error=last_error)

    def open(self, port: str) -> bool:
        """
        Open a serial port, closing any existing connection first.

        Args:
            port: Device path (e.g. COM3, /dev/ttyACM0) or pyserial URL

        Returns:
            True if the port was opened
        """
        with self._lock:
            stale_reader = self._close_locked("Device disconnected")
            self._set_state(LinkStatus.CONNECTING, port=port)
            logger.info(f"Connecting to {port} at {self.baud_rate} baud")

            try:
                handle = self._serial_factory(
                    port, self.baud_rate, self.read_timeout, self.write_timeout
                )
            except (serial.SerialException, OSError, ValueError) as e:
                error = LinkError(ErrorKind.PORT_OPEN_FAILURE, "Failed to connect", str(e))
                self._set_state(LinkStatus.ERROR, error=error)
                logger.error(f"Error opening port {port}: {e}")
                self._emit(LinkEvent.error(error))
                opened = False
            else:
                self._generation += 1
                self._serial = handle
                self._start_traffic_log(port)
                self._set_state(LinkStatus.CONNECTED, port=port)
                logger.info(f"Connected to device on {port}")
                self._emit(LinkEvent.connected(port))

                self._reader = threading.Thread(
                    target=self._read_loop,
                    args=(handle, self._generation),
                    name=f"serial-reader-{port}",
                    daemon=True,
                )
                self._reader.start()
                opened = True

        self._join_reader(stale_reader)
        return opened

    def close(self) -> None:
        """Close the serial connection if one is open."""
        with self._lock:
            reader = self._close_locked("Device disconnected")
        self._join_reader(reader)

    def send(self, command: Any) -> LinkEvent:
        """
        Write a command to the device.

        Args:
            command: Text sent verbatim, or a JSON-serializable value

        Returns:
            The result for the caller only: data_sent or an error event
        """
        with self._lock:
            if self._serial is None or not self.state.is_connected:
                return LinkEvent.error(LinkError(ErrorKind.NOT_CONNECTED, "not connected"))

            try:
                data = encode_command(command)
            except (TypeError, ValueError) as e:
                return LinkEvent.error(
                    LinkError(ErrorKind.INVALID_COMMAND, "Invalid command", str(e))
                )

            try:
                self._serial.write(data)
            except (serial.SerialException, OSError) as e:
                logger.error(f"Error sending to device: {e}")
                return LinkEvent.error(
                    LinkError(
                        ErrorKind.WRITE_FAILURE, "Failed to send data to device", str(e)
                    )
                )

            if self._traffic:
                self._traffic.log_sent(data)
            logger.debug(f"Sent to device: {data!r}")
            return LinkEvent.sent()

    def _close_locked(self, message: str) -> Optional[threading.Thread]:
        """Close the open connection. Caller holds the lock."""
        if self._serial is None:
            return None

        port = self.state.port
        self._generation += 1
        reader, self._reader = self._reader, None
        self._release_handle()
        self._set_state(LinkStatus.DISCONNECTED)
        logger.info(f"Device on {port} disconnected")
        self._emit(LinkEvent.disconnected(message))
        return reader

    def _release_handle(self) -> None:
        handle, self._serial = self._serial, None
        if handle is not None:
            try:
                handle.close()
            except (serial.SerialException, OSError) as e:
                logger.warning(f"Error closing serial port: {e}")

        if self._traffic:
            self._traffic.stop()
            self._traffic = None

    def _join_reader(self, reader: Optional[threading.Thread]) -> None:
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=max(1.0, self.read_timeout * 10))

    def _start_traffic_log(self, port: str) -> None:
        if not self.traffic_log_dir:
            return
        traffic = TrafficLog(self.traffic_log_dir, port)
        try:
            log_file = traffic.start()
        except OSError as e:
            logger.warning(f"Traffic logging disabled: {e}")
            return
        self._traffic = traffic
        logger.info(f"Traffic logging to {log_file}")

    def _read_loop(self, handle, generation: int) -> None:
        """Read from the device and emit one data event per frame."""
        framer = LineFramer()

        while generation == self._generation:
            try:
                data = handle.read(handle.in_waiting or 1)
            except (serial.SerialException, OSError, TypeError) as e:
                # pyserial raises TypeError when the handle is closed mid-read
                self._handle_io_error(generation, e)
                return

            if not data:
                continue

            for frame in framer.feed(data):
                # data is only emitted while this reader's connection is current
                with self._lock:
                    if generation != self._generation:
                        return
                    logger.debug(f"Received from device: {frame}")
                    if self._traffic:
                        self._traffic.log_received(frame)
                    self._emit(LinkEvent.data(decode_frame(frame)))

    def _handle_io_error(self, generation: int, exc: Exception) -> None:
        """Tear down a connection that failed underneath us."""
        if generation != self._generation:
            return

        with self._lock:
            if generation != self._generation:
                return

            port = self.state.port
            self._generation += 1
            self._reader = None
            self._release_handle()

            error = LinkError(ErrorKind.UNEXPECTED_DISCONNECT, "Serial port error", str(exc))
            self._set_state(LinkStatus.ERROR, error=error)
            logger.error(f"Serial port error on {port}: {exc}")
            self._emit(LinkEvent.error(error))
            self._emit(LinkEvent.disconnected("Device disconnected"))
