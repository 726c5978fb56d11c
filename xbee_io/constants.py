"""
Constants for the XBee API-mode byte stream.

This module centralizes the protocol values, frame layout offsets and
defaults used by the framer, the decoder and the byte-source adapters.

Constants are organized by category:
- Frame delimiters and frame type tags
- I/O data sample (0x83) payload layout
- Default serial transport settings
- Event names published to sinks
"""

# Frame delimiters
START_BYTE = 0x7E  # start of every XBee API frame

# Frame types
FT_DATA_SAMPLE_RX = 0x83  # I/O data sample received, 16-bit source address (series 1)

# I/O data sample payload layout (byte offsets within the payload)
OFFSET_FRAME_TYPE = 0
OFFSET_SOURCE_ADDR_MSB = 1
OFFSET_SOURCE_ADDR_LSB = 2
OFFSET_RSSI = 3
OFFSET_OPTIONS = 4
OFFSET_TOTAL_SAMPLES = 5
OFFSET_CHANNEL_INDICATOR_HIGH = 6
OFFSET_CHANNEL_INDICATOR_LOW = 7
# No digital channels are decoded, so ADC data starts straight after the header
SAMPLE_HEADER_SIZE = 8

OPTION_BIT_ADDRESS_BROADCAST = 1
OPTION_BIT_PAN_BROADCAST = 2

MAX_ANALOG_CHANNELS = 6  # ADC0..ADC5
ANALOG_SAMPLE_WIDTH = 2  # bytes per ADC reading

# Default serial transport settings
SERIAL_PORT_DEFAULT = "/dev/ttyUSB0"
SERIAL_BAUDRATE_DEFAULT = 9600
SERIAL_TIMEOUT_DEFAULT = 1.0
SERIAL_READ_SIZE_DEFAULT = 64

# Event names
EVENT_DATA = "data"
EVENT_ERROR = "error"

# Byte sources the API can read from
SOURCE_SIM = "sim"
SOURCE_SERIAL = "serial"
