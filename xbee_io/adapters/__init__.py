from .interface import ByteSource, Chunk
from .sim import SimAdapter
from .serial_port import SerialAdapter

__all__ = ["ByteSource", "Chunk", "SimAdapter", "SerialAdapter"]
