"""Pytest config to ensure project root is on sys.path during test collection.

Some environments run pytest with a different working directory which can
lead to "No module named 'xbee_io'" import errors.
"""
import os
import sys
import time

import pytest

_HERE = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(_HERE, "..", ".."))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# 7E 00 0A | 83 0001 20 00 01 02 00 | 0123 | checksum
SCENARIO_STREAM = bytes.fromhex("7E000A8300012000010200012300")


def build_frame(payload: bytes, checksum: int = None) -> bytes:
    """Wrap a payload in start byte, length header and (valid by default) checksum."""
    if checksum is None:
        checksum = 0xFF - (sum(payload) & 0xFF)
    return bytes([0x7E, len(payload) >> 8, len(payload) & 0xFF]) + bytes(payload) + bytes([checksum])


def sample_payload(address=0x0001, rssi=0x20, options=0x00, channel_mask=0x02, samples=((0x0123,),)):
    """Build a 0x83 payload; `samples` is one tuple of readings per sample set."""
    body = bytearray([0x83, address >> 8, address & 0xFF, rssi, options, len(samples), channel_mask, 0x00])
    for sample_set in samples:
        for value in sample_set:
            body += bytes([value >> 8, value & 0xFF])
    return bytes(body)


@pytest.fixture
def scenario_stream():
    return SCENARIO_STREAM


@pytest.fixture
def frame_builder():
    return build_frame


@pytest.fixture
def payload_builder():
    return sample_payload


class FakeSerial:
    """Stands in for serial.Serial; load() makes bytes available to read()."""

    def __init__(self, port, baudrate, timeout=None):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.closed = False
        self._buf = bytearray()

    def load(self, data):
        self._buf += data

    @property
    def in_waiting(self):
        return len(self._buf)

    def read(self, size=1):
        if not self._buf:
            # nothing arrived before the port timeout
            time.sleep(0.01)
            return b""
        data = bytes(self._buf[:size])
        del self._buf[:size]
        return data

    def reset_input_buffer(self):
        self._buf.clear()

    def close(self):
        self.closed = True


@pytest.fixture
def fake_port(monkeypatch):
    """Replace serial.Serial with FakeSerial; returns the list of ports opened."""
    created = []

    def ctor(port, baudrate, timeout=None):
        s = FakeSerial(port, baudrate, timeout)
        created.append(s)
        return s

    import xbee_io.adapters.serial_port as sp_mod
    monkeypatch.setattr(sp_mod.serial, "Serial", ctor)
    return created


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Clear xbee_io environment variables and point HOME at an empty directory."""
    for var in ("XBEE_PORT", "XBEE_BAUDRATE", "XBEE_TIMEOUT", "XBEE_VERIFY_CHECKSUM", "XBEE_SOURCE", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path
