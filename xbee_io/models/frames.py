"""
Frame models produced by the decoder.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

# Slot value for an analog channel that did not contribute to a sample set
NO_DATA = None


@dataclass(frozen=True)
class AnalogSampleFrame:
    """Decoded I/O data sample report.

    Attributes:
        frame_type: Frame type tag (0x83)
        source_address_16: 16-bit address of the sending radio
        signal_strength: RSSI byte of the received packet
        is_address_broadcast: Packet was sent to the broadcast address
        is_pan_broadcast: Packet was sent to the broadcast PAN
        total_sample_sets: Number of sample sets carried by the payload
        channel_indicator_high: Raw high channel-indicator byte (analog mask)
        channel_indicator_low: Raw low channel-indicator byte (kept, not decoded)
        enabled_channels: Indices (0-5) of analog channels present, ascending
        sample_sets: One 6-slot list per sample set; NO_DATA for absent channels
        diagnostic_checksum: Sum of the first eight payload bytes (informational)
        payload: The payload bytes the record was decoded from
    """
    frame_type: int
    source_address_16: int
    signal_strength: int
    is_address_broadcast: bool
    is_pan_broadcast: bool
    total_sample_sets: int
    channel_indicator_high: int
    channel_indicator_low: int
    enabled_channels: Tuple[int, ...]
    sample_sets: List[List[Optional[int]]]
    diagnostic_checksum: int
    payload: bytes = field(default=b"", repr=False)

    @property
    def analog_channel_count(self) -> int:
        """Number of enabled analog channels."""
        return len(self.enabled_channels)

    def channel_values(self, channel: int) -> List[Optional[int]]:
        """Return the readings of one channel across all sample sets."""
        return [sample_set[channel] for sample_set in self.sample_sets]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation used by the API and WebSocket broadcaster."""
        return {
            "type": "data_sample",
            "frame_type": self.frame_type,
            "source_address_16": self.source_address_16,
            "signal_strength": self.signal_strength,
            "is_address_broadcast": self.is_address_broadcast,
            "is_pan_broadcast": self.is_pan_broadcast,
            "total_sample_sets": self.total_sample_sets,
            "channel_indicator_high": self.channel_indicator_high,
            "channel_indicator_low": self.channel_indicator_low,
            "enabled_channels": list(self.enabled_channels),
            "analog_channel_count": self.analog_channel_count,
            "sample_sets": [list(s) for s in self.sample_sets],
            "diagnostic_checksum": self.diagnostic_checksum,
            "payload": self.payload.hex(),
        }


@dataclass(frozen=True)
class RawUnknownFrame:
    """Payload of a frame type the decoder does not interpret, kept verbatim."""
    payload: bytes

    @property
    def frame_type(self) -> Optional[int]:
        return self.payload[0] if self.payload else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "raw",
            "frame_type": self.frame_type,
            "payload": self.payload.hex(),
        }


DecodedFrame = Union[AnalogSampleFrame, RawUnknownFrame]
