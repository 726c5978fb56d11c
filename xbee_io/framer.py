"""Stateful framer for the XBee API-mode byte stream.

Bytes arrive in chunks of any size from a transport. The framer tracks its
position relative to the most recent start byte, reads the big-endian length
header and collects the payload. The byte after the payload (the checksum)
completes the frame: the payload is decoded and the record published on the
sink under the "data" event.

Wire format (API mode 1, no escaping):

    0x7E | LEN_MSB | LEN_LSB | PAYLOAD (LEN bytes) | CHECKSUM
    pos 0  pos 1     pos 2     pos 3 .. LEN+2        pos LEN+3

Every 0x7E byte restarts framing, including one inside a payload or in the
checksum slot. A frame interrupted that way is dropped and framing continues
from the new start byte. The checksum value is ignored unless the framer was
created with verify_checksum=True, in which case the checksum slot is read as
a checksum even when it holds 0x7E.

A framer instance owns its state and must be driven from one call site at a
time; use one instance per byte stream.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Any

from xbee_io import metrics
from xbee_io.constants import START_BYTE, EVENT_DATA, EVENT_ERROR
from xbee_io.decoder import decode_frame
from xbee_io.emitter import CollectingSink
from xbee_io.exceptions import ChecksumMismatchError, FrameDecodeError
from xbee_io.utils import api_checksum, verify_checksum as checksum_matches


logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Anything that accepts published events."""

    def emit(self, event: str, payload: Any) -> None:
        ...


@dataclass
class FramerState:
    """Per-stream framing state.

    position is None until the first start byte has been seen, then counts
    bytes from that start byte (which is position 0).
    """
    position: Optional[int] = None
    declared_length: int = 0
    payload: bytearray = field(default_factory=bytearray)

    def reset(self) -> None:
        self.position = 0
        self.declared_length = 0
        self.payload = bytearray()

    @property
    def payload_complete(self) -> bool:
        return self.declared_length > 0 and len(self.payload) == self.declared_length


class StreamFramer:
    """Rebuilds frames from a byte stream and publishes decoded records.

    Usage:
      framer = StreamFramer()
      framer.ingest(sink, chunk)   # repeatedly, as bytes arrive
    """

    def __init__(self, verify_checksum: bool = False) -> None:
        self.verify_checksum = verify_checksum
        self._state = FramerState()

    @property
    def state(self) -> FramerState:
        return self._state

    def reset(self) -> None:
        """Forget any partial frame; bytes are ignored until the next start byte."""
        self._state = FramerState()

    def ingest(self, sink: Sink, chunk: Iterable[int]) -> None:
        """Consume a chunk of raw bytes, publishing every frame it completes.

        Args:
            sink: Receives ("data", record) for each decoded frame and
                ("error", exception) for each frame that fails to decode or,
                with verify_checksum enabled, fails its checksum
            chunk: Bytes (or ints 0..255) in transport order; may be empty and
                may start or end anywhere inside a frame
        """
        for b in chunk:
            self._consume(sink, b)

    __call__ = ingest

    def _consume(self, sink: Sink, b: int) -> None:
        s = self._state
        if s.position is not None:
            s.position += 1

        at_checksum = s.payload_complete and s.position == s.declared_length + 3

        if self.verify_checksum and at_checksum:
            # a 0x7E here is the checksum value, not a new frame
            self._check_and_deliver(sink, b)
            return

        if b == START_BYTE:
            if s.position is not None and 0 < s.declared_length and s.position <= s.declared_length + 3:
                logger.debug(
                    "Start byte inside unfinished frame (%d/%d payload bytes), resynchronizing",
                    len(s.payload), s.declared_length,
                )
                metrics.inc("frames_resynced")
            s.reset()
            return

        if s.position is None:
            return

        if s.position == 1:
            s.declared_length += b << 8
        elif s.position == 2:
            s.declared_length += b

        if s.declared_length > 0 and s.position > 2 and len(s.payload) < s.declared_length:
            s.payload.append(b)
        elif at_checksum:
            # checksum byte completes the frame; its value is not checked
            self._deliver(sink, bytes(s.payload))
        # position > declared_length + 3: trailing bytes, ignored

    def _check_and_deliver(self, sink: Sink, checksum: int) -> None:
        payload = bytes(self._state.payload)
        if checksum_matches(payload, checksum):
            self._deliver(sink, payload)
            return
        expected = api_checksum(payload)
        logger.warning("Checksum mismatch: expected 0x%02X, received 0x%02X", expected, checksum)
        metrics.inc("checksum_errors")
        sink.emit(EVENT_ERROR, ChecksumMismatchError(
            f"Checksum mismatch: expected 0x{expected:02X}, received 0x{checksum:02X}",
            expected=expected,
            received=checksum,
            payload=payload,
        ))

    def _deliver(self, sink: Sink, payload: bytes) -> None:
        logger.debug("Frame complete: %d byte payload, type 0x%02X", len(payload), payload[0])
        try:
            record = decode_frame(payload)
        except FrameDecodeError as e:
            logger.warning(f"Dropping undecodable frame: {e}")
            metrics.inc("decode_errors")
            sink.emit(EVENT_ERROR, e)
            return
        metrics.inc("frames_emitted")
        sink.emit(EVENT_DATA, record)


def packet_parser(verify_checksum: bool = False) -> StreamFramer:
    """Return a new framer with its own private state.

    The returned object is callable as parser(sink, chunk), which is the same
    as parser.ingest(sink, chunk).
    """
    return StreamFramer(verify_checksum=verify_checksum)


def decode_stream(chunks: Iterable[Iterable[int]], verify_checksum: bool = False) -> CollectingSink:
    """Run a fresh framer over `chunks` and return the sink holding the results.

    The returned sink's `records` holds decoded frames in stream order and its
    `errors` holds per-frame failures.
    """
    sink = CollectingSink()
    framer = packet_parser(verify_checksum=verify_checksum)
    for chunk in chunks:
        framer.ingest(sink, chunk)
    return sink
