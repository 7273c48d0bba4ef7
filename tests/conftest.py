"""Shared fixtures for serialrelay tests."""

import queue
import time

import pytest


class FakeSerial:
    """In-memory stand-in for a pyserial port handle."""

    in_waiting = 0

    def __init__(self, port, baudrate, timeout=None, write_timeout=None):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.write_timeout = write_timeout
        self.is_open = True
        self.written = []
        self.write_error = None
        self._incoming = queue.Queue()

    def feed(self, data: bytes) -> None:
        """Queue bytes for the reader thread."""
        self._incoming.put(data)

    def fail(self, exc: Exception) -> None:
        """Make the next read raise exc."""
        self._incoming.put(exc)

    def read(self, size=1):
        try:
            item = self._incoming.get(timeout=0.01)
        except queue.Empty:
            return b""
        if isinstance(item, Exception):
            raise item
        return item

    def write(self, data):
        if self.write_error:
            raise self.write_error
        self.written.append(data)
        return len(data)

    def close(self):
        self.is_open = False


class FakeSerialFactory:
    """Serial factory recording every port it opens."""

    def __init__(self):
        self.opened: list[FakeSerial] = []
        self.fail_with = None

    def __call__(self, port, baud_rate, timeout, write_timeout):
        if self.fail_with is not None:
            raise self.fail_with
        handle = FakeSerial(port, baud_rate, timeout, write_timeout)
        self.opened.append(handle)
        return handle

    @property
    def last(self) -> FakeSerial:
        return self.opened[-1]


@pytest.fixture
def serial_factory():
    """Factory producing fake serial handles."""
    return FakeSerialFactory()


@pytest.fixture
def wait_until():
    """Poll a condition until it holds or a timeout expires."""

    def _wait(predicate, timeout=2.0, interval=0.01):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user config files and environment out of tests."""
    for name in (
        "SERIALRELAY_CONFIG",
        "SERIALRELAY_BAUD_RATE",
        "SERIALRELAY_HOST",
        "SERIALRELAY_PORT",
        "SERIALRELAY_LOG_LEVEL",
        "SERIALRELAY_TRAFFIC_LOG_DIR",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)

    missing = tmp_path / "no-config"
    monkeypatch.setattr("serialrelay.core.config.DEFAULT_CONFIG_FILE", missing / "config.yaml")
    monkeypatch.setattr("serialrelay.core.config.SYSTEM_CONFIG_FILE", missing / "system.yaml")
