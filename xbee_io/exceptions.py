"""
Custom exception classes for xbee_io.

This module provides specific exception types for the failure scenarios of
the decoding pipeline and the byte-source adapters. Framing anomalies are
never raised; the framer resynchronizes on the next start byte instead.
"""

from typing import Optional


class XBeeException(Exception):
    """Base exception for all xbee_io errors.

    All custom exceptions inherit from this class so callers can catch every
    package-specific error while preserving the hierarchy.
    """
    pass


class FrameDecodeError(XBeeException):
    """Exception raised when a frame payload cannot be decoded.

    Attributes:
        frame_type: Frame type tag of the payload (None if the payload was empty)
        payload: The raw payload bytes that failed to decode
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, frame_type: Optional[int] = None, payload: bytes = b"",
                 original_error: Exception = None):
        """Initialize FrameDecodeError.

        Args:
            message: Human-readable error message
            frame_type: Frame type tag (optional)
            payload: Raw payload bytes (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.frame_type = frame_type
        self.payload = bytes(payload)
        self.original_error = original_error


class TruncatedPayloadError(FrameDecodeError):
    """Exception raised when a payload is shorter than its own header implies.

    Attributes:
        expected_length: Minimum payload length implied by the header fields
        actual_length: Length of the payload actually received
    """

    def __init__(self, message: str, expected_length: int, actual_length: int,
                 frame_type: Optional[int] = None, payload: bytes = b""):
        super().__init__(message, frame_type=frame_type, payload=payload)
        self.expected_length = expected_length
        self.actual_length = actual_length


class ChecksumMismatchError(XBeeException):
    """Exception reported when checksum validation is enabled and fails.

    Attributes:
        expected: Checksum computed over the payload
        received: Checksum byte read from the stream
        payload: The payload the checksum was computed over
    """

    def __init__(self, message: str, expected: int, received: int, payload: bytes = b""):
        super().__init__(message)
        self.expected = expected
        self.received = received
        self.payload = bytes(payload)


class AdapterError(XBeeException):
    """Exception raised for byte-source connection or read failures.

    Attributes:
        adapter_type: Type of adapter that failed (e.g., 'SerialAdapter')
        operation: Operation that failed (e.g., 'open', 'read')
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, adapter_type: str = None, operation: str = None,
                 original_error: Exception = None):
        super().__init__(message)
        self.adapter_type = adapter_type
        self.operation = operation
        self.original_error = original_error


class ConfigurationError(XBeeException):
    """Exception raised for invalid configuration values.

    Attributes:
        errors: List of validation error messages
    """

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = list(errors or [])
