"""
Byte-level helpers shared by the framer and the decoder.

This package contains:
- bitops: Bit tests, big-endian assembly, stepped index ranges and the
  XBee API checksum
"""

from xbee_io.utils.bitops import (
    bit_is_set,
    bits_msb_first,
    u16_be,
    byte_sum,
    stepped_range,
    api_checksum,
    verify_checksum,
)

__all__ = [
    'bit_is_set',
    'bits_msb_first',
    'u16_be',
    'byte_sum',
    'stepped_range',
    'api_checksum',
    'verify_checksum',
]
