"""Serial-port byte source using pyserial.

XBee radios in API mode are normally attached through a USB/UART bridge; this
adapter reads whatever bytes are waiting and hands them on as chunks.
"""
from __future__ import annotations

import threading
import logging
import time
from typing import Optional, Iterable, Any

import serial

from .interface import Chunk
from xbee_io import metrics
from xbee_io.constants import (
    SERIAL_PORT_DEFAULT,
    SERIAL_BAUDRATE_DEFAULT,
    SERIAL_TIMEOUT_DEFAULT,
    SERIAL_READ_SIZE_DEFAULT,
)
from xbee_io.exceptions import AdapterError


logger = logging.getLogger(__name__)


class SerialAdapter:
    def __init__(self, port: Optional[str] = None, baudrate: int = SERIAL_BAUDRATE_DEFAULT,
                 timeout: float = SERIAL_TIMEOUT_DEFAULT, read_size: int = SERIAL_READ_SIZE_DEFAULT) -> None:
        self.port = port or SERIAL_PORT_DEFAULT
        self.baudrate = baudrate
        self.timeout = timeout
        self.read_size = read_size
        self._ser: Optional[Any] = None
        self._running = False
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> "SerialAdapter":
        """Build an adapter from a config.SerialSettings instance."""
        return cls(port=settings.port, baudrate=settings.baudrate, timeout=settings.timeout)

    def open(self) -> None:
        with self._lock:
            if self._ser is not None:
                return
            logger.info("Opening serial port %s @ %d baud", self.port, self.baudrate)
            try:
                self._ser = serial.Serial(self.port, self.baudrate, timeout=self.timeout)
            except serial.SerialException as e:
                raise AdapterError(
                    f"Failed to open serial port {self.port}: {e}",
                    adapter_type="SerialAdapter",
                    operation="open",
                    original_error=e,
                ) from e
            self._ser.reset_input_buffer()
            self._running = True

    def close(self) -> None:
        with self._lock:
            self._running = False
            if self._ser is not None:
                try:
                    self._ser.close()
                except serial.SerialException as e:
                    logger.warning(f"Error closing serial port {self.port}: {e}")
                self._ser = None
                logger.info("Closed serial port %s", self.port)

    def read(self, timeout: Optional[float] = None) -> Optional[Chunk]:
        """Read the bytes currently available (at least one, up to read_size).

        Returns None when the port timeout expires with nothing received. The
        per-call timeout, if given, overrides the port timeout.
        """
        ser = self._ser
        if ser is None:
            raise AdapterError("Serial port not open", adapter_type="SerialAdapter", operation="read")
        if timeout is not None:
            ser.timeout = timeout
        try:
            waiting = ser.in_waiting
            # block for one byte when nothing is buffered
            data = ser.read(min(waiting, self.read_size) if waiting else 1)
        except serial.SerialException as e:
            raise AdapterError(
                f"Serial read failed on {self.port}: {e}",
                adapter_type="SerialAdapter",
                operation="read",
                original_error=e,
            ) from e
        if not data:
            return None
        logger.debug("Serial read %d byte(s): %s", len(data), data.hex())
        metrics.inc("serial_read")
        return Chunk(data=bytes(data), timestamp=time.time())

    def iter_chunks(self) -> Iterable[Chunk]:
        """Yield chunks until the port is closed; close() from another thread ends the stream."""
        while True:
            with self._lock:
                if not self._running or self._ser is None:
                    break
            try:
                c = self.read()
            except AdapterError:
                with self._lock:
                    closed = not self._running or self._ser is None
                if closed:
                    logger.debug("Serial port %s closed during read, ending stream", self.port)
                    break
                raise
            if c is None:
                continue
            yield c
