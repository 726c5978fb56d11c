"""
Byte and bit helpers for XBee API payloads.

All helpers work on plain ints (0..255) or any sequence of them, so callers can
pass bytes, bytearray or lists interchangeably.
"""
from typing import List, Sequence


def bit_is_set(value: int, bit: int) -> bool:
    """Return True if bit number `bit` (0 = least significant) of `value` is 1."""
    return ((value >> bit) & 0x01) == 1


def bits_msb_first(value: int, limit: int = 8) -> List[bool]:
    """Return the significant bits of `value` as booleans, most significant first.

    Leading zeros are not included, so 0b101 gives [True, False, True] and 0
    gives []. At most `limit` bits are returned.

    Args:
        value: Non-negative integer to split into bits
        limit: Maximum number of bits to return

    Returns:
        List of booleans ordered from the most significant set bit downwards
    """
    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")
    width = value.bit_length()
    return [bit_is_set(value, bit) for bit in range(width - 1, -1, -1)][:limit]


def u16_be(msb: int, lsb: int) -> int:
    """Assemble a big-endian 16-bit value from two bytes."""
    return ((msb & 0xFF) << 8) | (lsb & 0xFF)


def byte_sum(data: Sequence[int], start: int = 0, stop: int = None) -> int:
    """Plain arithmetic sum of data[start:stop] (no modulo)."""
    return sum(data[start:stop])


def stepped_range(start: int, stop: int, step: int) -> List[int]:
    """Return the integers from start (inclusive) to stop (exclusive) by step.

    Returns an empty list when the step points away from stop.
    """
    if step == 0:
        raise ValueError("step must not be zero")
    return list(range(start, stop, step))


def api_checksum(payload: Sequence[int]) -> int:
    """Compute the XBee API checksum: 0xFF minus the low byte of the payload sum."""
    return 0xFF - (sum(payload) & 0xFF)


def verify_checksum(payload: Sequence[int], checksum: int) -> bool:
    """Return True if `checksum` is the valid API checksum for `payload`."""
    return ((sum(payload) + checksum) & 0xFF) == 0xFF
