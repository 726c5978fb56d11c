from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Iterable, Protocol


@dataclass
class Chunk:
    """Raw bytes read from a transport in one read call."""
    data: bytes
    timestamp: Optional[float] = None


class ByteSource(Protocol):
    """Interface that all byte-source adapters implement."""

    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def read(self, timeout: Optional[float] = None) -> Optional[Chunk]:
        """Read the next chunk of bytes, or None on timeout."""
        ...

    def iter_chunks(self) -> Iterable[Chunk]:
        """Return an iterable that yields chunks as they arrive until closed."""
        ...
