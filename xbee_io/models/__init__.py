"""
Data models for decoded XBee frames.

Models:
- AnalogSampleFrame: Decoded I/O data sample report (frame type 0x83)
- RawUnknownFrame: Pass-through payload for frame types that are not decoded
"""

from xbee_io.models.frames import AnalogSampleFrame, RawUnknownFrame, DecodedFrame, NO_DATA

__all__ = ['AnalogSampleFrame', 'RawUnknownFrame', 'DecodedFrame', 'NO_DATA']
