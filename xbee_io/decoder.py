"""
Frame payload decoder.

Maps one frame payload (start byte, length header and checksum already
stripped) to a decoded record. Only the I/O data sample report (0x83) is
interpreted; every other frame type is passed through unchanged.

Analog channel layout:
    The high channel-indicator byte carries the analog channel mask above a
    reserved low bit. After dropping that bit, the remaining significant bits
    are walked from the most significant one downwards and numbered 0, 1, 2...
    (at most six channels). Each sample set holds one big-endian 16-bit reading
    per enabled channel, in ascending channel order, starting at byte 8.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from xbee_io.constants import (
    FT_DATA_SAMPLE_RX,
    OFFSET_FRAME_TYPE,
    OFFSET_SOURCE_ADDR_MSB,
    OFFSET_SOURCE_ADDR_LSB,
    OFFSET_RSSI,
    OFFSET_OPTIONS,
    OFFSET_TOTAL_SAMPLES,
    OFFSET_CHANNEL_INDICATOR_HIGH,
    OFFSET_CHANNEL_INDICATOR_LOW,
    OPTION_BIT_ADDRESS_BROADCAST,
    OPTION_BIT_PAN_BROADCAST,
    SAMPLE_HEADER_SIZE,
    MAX_ANALOG_CHANNELS,
    ANALOG_SAMPLE_WIDTH,
)
from xbee_io.exceptions import TruncatedPayloadError
from xbee_io.models import AnalogSampleFrame, RawUnknownFrame, DecodedFrame, NO_DATA
from xbee_io.utils import bit_is_set, bits_msb_first, u16_be, byte_sum, stepped_range

logger = logging.getLogger(__name__)


def analog_channel_positions(channel_indicator_high: int) -> List[bool]:
    """Return the enabled flag of each analog channel slot, channel 0 first."""
    return bits_msb_first(channel_indicator_high >> 1, limit=MAX_ANALOG_CHANNELS)


def enabled_analog_channels(channel_indicator_high: int) -> Tuple[int, ...]:
    """Return the indices of the enabled analog channels in ascending order."""
    positions = analog_channel_positions(channel_indicator_high)
    return tuple(index for index, enabled in enumerate(positions) if enabled)


def expected_payload_length(channel_count: int, total_sample_sets: int) -> int:
    """Minimum payload length implied by the sample header fields."""
    return SAMPLE_HEADER_SIZE + channel_count * total_sample_sets * ANALOG_SAMPLE_WIDTH


def load_analog_sample(payload: Sequence[int], enabled: Tuple[int, ...], start: int) -> List[Optional[int]]:
    """Read one sample set starting at byte `start` into a 6-slot vector."""
    sample: List[Optional[int]] = [NO_DATA] * MAX_ANALOG_CHANNELS
    for rank, channel in enumerate(enabled):
        offset = start + rank * ANALOG_SAMPLE_WIDTH
        sample[channel] = u16_be(payload[offset], payload[offset + 1])
    return sample


def decode_data_sample(payload: Sequence[int]) -> AnalogSampleFrame:
    """Decode an I/O data sample report.

    Args:
        payload: Frame payload whose first byte is FT_DATA_SAMPLE_RX

    Returns:
        The decoded AnalogSampleFrame

    Raises:
        TruncatedPayloadError: If the payload is shorter than the 8-byte sample
            header, or shorter than the sample data its header announces
    """
    raw = bytes(payload)
    if len(raw) < SAMPLE_HEADER_SIZE:
        raise TruncatedPayloadError(
            f"I/O sample payload needs at least {SAMPLE_HEADER_SIZE} bytes, got {len(raw)}",
            expected_length=SAMPLE_HEADER_SIZE,
            actual_length=len(raw),
            frame_type=raw[OFFSET_FRAME_TYPE] if raw else None,
            payload=raw,
        )

    total_sample_sets = raw[OFFSET_TOTAL_SAMPLES]
    channel_indicator_high = raw[OFFSET_CHANNEL_INDICATOR_HIGH]
    enabled = enabled_analog_channels(channel_indicator_high)

    expected = expected_payload_length(len(enabled), total_sample_sets)
    if len(raw) < expected:
        raise TruncatedPayloadError(
            f"I/O sample payload announces {total_sample_sets} sample set(s) on "
            f"{len(enabled)} channel(s) ({expected} bytes), got {len(raw)}",
            expected_length=expected,
            actual_length=len(raw),
            frame_type=raw[OFFSET_FRAME_TYPE],
            payload=raw,
        )
    if len(raw) > expected:
        logger.debug("I/O sample payload has %d trailing byte(s) beyond sample data", len(raw) - expected)

    sample_set_size = len(enabled) * ANALOG_SAMPLE_WIDTH
    sample_sets = []
    if sample_set_size:
        starts = stepped_range(SAMPLE_HEADER_SIZE, expected, sample_set_size)
    else:
        # no enabled channels: every sample set is empty
        starts = [SAMPLE_HEADER_SIZE] * total_sample_sets
    for start in starts:
        sample_sets.append(load_analog_sample(raw, enabled, start))

    options = raw[OFFSET_OPTIONS]
    return AnalogSampleFrame(
        frame_type=raw[OFFSET_FRAME_TYPE],
        source_address_16=u16_be(raw[OFFSET_SOURCE_ADDR_MSB], raw[OFFSET_SOURCE_ADDR_LSB]),
        signal_strength=raw[OFFSET_RSSI],
        is_address_broadcast=bit_is_set(options, OPTION_BIT_ADDRESS_BROADCAST),
        is_pan_broadcast=bit_is_set(options, OPTION_BIT_PAN_BROADCAST),
        total_sample_sets=total_sample_sets,
        channel_indicator_high=channel_indicator_high,
        channel_indicator_low=raw[OFFSET_CHANNEL_INDICATOR_LOW],
        enabled_channels=enabled,
        sample_sets=sample_sets,
        diagnostic_checksum=byte_sum(raw, 0, SAMPLE_HEADER_SIZE),
        payload=raw,
    )


def decode_frame(payload: Sequence[int]) -> DecodedFrame:
    """Decode one frame payload.

    Returns an AnalogSampleFrame for I/O data sample reports and a
    RawUnknownFrame holding the untouched payload for any other frame type.
    TruncatedPayloadError propagates to the caller.
    """
    raw = bytes(payload)
    if raw and raw[OFFSET_FRAME_TYPE] == FT_DATA_SAMPLE_RX:
        return decode_data_sample(raw)
    return RawUnknownFrame(payload=raw)
