import queue
import threading
import time
from typing import Optional, Iterable
from .interface import Chunk
from xbee_io import metrics


class SimAdapter:
    """A simple in-memory byte source for tests and replays.

    Usage:
      a = SimAdapter()
      a.open()
      a.feed(bytes.fromhex("7e000a83..."))
      c = a.read()
      a.close()
    """

    def __init__(self) -> None:
        self._q: queue.Queue[Chunk] = queue.Queue()
        self._running = False
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._running

    def open(self) -> None:
        with self._lock:
            self._running = True

    def close(self) -> None:
        with self._lock:
            self._running = False
        # drain queue
        while True:
            try:
                self._q.get_nowait()
            except queue.Empty:
                break

    def feed(self, data: bytes, chunk_size: Optional[int] = None) -> None:
        """Queue bytes as if they had arrived from the radio.

        With chunk_size set, the bytes are split into chunks of that size to
        mimic a transport that delivers frames piecemeal.
        """
        data = bytes(data)
        if chunk_size is None or chunk_size <= 0:
            pieces = [data]
        else:
            pieces = [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]
        for piece in pieces:
            self._q.put(Chunk(data=piece, timestamp=time.time()))
            metrics.inc("sim_feed")

    def read(self, timeout: Optional[float] = None) -> Optional[Chunk]:
        try:
            c = self._q.get(timeout=timeout) if timeout else self._q.get_nowait()
        except queue.Empty:
            return None
        metrics.inc("sim_read")
        return c

    def iter_chunks(self) -> Iterable[Chunk]:
        """Yield chunks until the adapter is closed and the queue is empty."""
        while True:
            with self._lock:
                if not self._running and self._q.empty():
                    break
            try:
                c = self._q.get(timeout=0.5)
            except queue.Empty:
                continue
            metrics.inc("sim_read")
            yield c
