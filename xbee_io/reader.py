"""Background reader that drives one framer from one byte source.

The framer is not thread-safe; the reader thread is its only caller, so each
byte stream gets exactly one ReaderThread and one framer.
"""
import logging
import threading
from typing import Optional

from xbee_io.adapters.interface import ByteSource
from xbee_io.exceptions import AdapterError
from xbee_io.framer import StreamFramer, Sink

logger = logging.getLogger(__name__)


def pump(source: ByteSource, framer: StreamFramer, sink: Sink) -> int:
    """Feed every chunk from source.iter_chunks() through the framer.

    Returns the number of bytes consumed once the source stops yielding.
    """
    consumed = 0
    for chunk in source.iter_chunks():
        framer.ingest(sink, chunk.data)
        consumed += len(chunk.data)
    return consumed


class ReaderThread:
    """Runs pump() in a daemon thread until the source is closed."""

    def __init__(self, source: ByteSource, framer: StreamFramer, sink: Sink, name: str = "xbee-reader") -> None:
        self.source = source
        self.framer = framer
        self.sink = sink
        self.bytes_consumed = 0
        self.error: Optional[Exception] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        self.source.close()
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        try:
            self.bytes_consumed = pump(self.source, self.framer, self.sink)
        except AdapterError as e:
            logger.error(f"Reader loop stopped: {e}", exc_info=True)
            self.error = e
        logger.debug("Reader loop finished after %d byte(s)", self.bytes_consumed)
