"""xbee_io: frame reconstruction and I/O sample decoding for XBee radios in API mode."""
from xbee_io.constants import START_BYTE, FT_DATA_SAMPLE_RX
from xbee_io.decoder import decode_frame
from xbee_io.framer import StreamFramer, packet_parser, decode_stream

__all__ = [
    "START_BYTE",
    "FT_DATA_SAMPLE_RX",
    "decode_frame",
    "StreamFramer",
    "packet_parser",
    "decode_stream",
]
