"""
Custom exception classes for the candb package.

This module provides specific exception types for the failure modes of the
DBC merge engine, the tokenizer and the signal codec, so callers can tell a
malformed entry stream apart from an encoding problem or a missing value.
"""

from typing import Any


class CandbError(Exception):
    """Base exception for all candb errors.

    All custom exceptions inherit from this class to enable catching every
    package-specific error while preserving the exception hierarchy.
    """
    pass


class MissingContextError(CandbError):
    """Raised when a signal definition arrives before any frame was seen.

    Attributes:
        entry_kind: Kind of the entry that could not be placed
    """

    def __init__(self, message: str, entry_kind: Any = None):
        super().__init__(message)
        self.entry_kind = entry_kind


class UnsupportedEntryError(CandbError):
    """Raised when an entry kind does not apply to the frame/signal model.

    Attributes:
        entry_kind: Kind of the rejected entry (e.g. Version, BusConfiguration)
    """

    def __init__(self, message: str, entry_kind: Any = None):
        super().__init__(message)
        self.entry_kind = entry_kind


class EntryParseError(CandbError):
    """Raised when a DBC source line matches none of the known directives.

    Attributes:
        line: The source line that failed to parse
    """

    def __init__(self, message: str, line: str = None):
        super().__init__(message)
        self.line = line


class SignalLayoutMissingError(CandbError):
    """Raised when a codec operation needs the bit layout of a signal that has none.

    A signal record can be created from a description or attribute that
    arrived before its ``SG_`` definition. Such a record has no layout until
    the definition is merged in.

    Attributes:
        signal_name: Name of the incomplete signal
    """

    def __init__(self, message: str, signal_name: str = None):
        super().__init__(message)
        self.signal_name = signal_name


class MissingSignalDataError(CandbError):
    """Raised when a frame is encoded without a value for one of its signals.

    Attributes:
        signal_name: Name of the signal without a value
        frame_id: Arbitration ID of the frame being encoded (optional)
    """

    def __init__(self, message: str, signal_name: str = None, frame_id: int = None):
        super().__init__(message)
        self.signal_name = signal_name
        self.frame_id = frame_id


class SignalOverflowError(CandbError):
    """Raised when an encoded raw value does not fit the signal bit width.

    Attributes:
        signal_name: Name of the signal being encoded (optional)
        raw_value: The scaled raw value that overflowed
        bit_length: Bit width of the signal
    """

    def __init__(self, message: str, signal_name: str = None, raw_value: float = None,
                 bit_length: int = None):
        super().__init__(message)
        self.signal_name = signal_name
        self.raw_value = raw_value
        self.bit_length = bit_length


class DbcReadError(CandbError, OSError):
    """Raised when DBC file bytes cannot be turned into text.

    Subclasses ``OSError`` so the whole-file loader surfaces encoding
    problems the same way as open/read failures.

    Attributes:
        path: Path of the DBC file (optional)
        encoding: Encoding that was requested
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, path: str = None, encoding: str = None,
                 original_error: Exception = None):
        super().__init__(message)
        self.path = path
        self.encoding = encoding
        self.original_error = original_error


class ConfigurationError(CandbError):
    """Exception raised for invalid configuration values.

    Attributes:
        setting_name: Name of the setting that is invalid
        setting_value: The invalid value
        expected: Description of expected value
    """

    def __init__(self, message: str, setting_name: str = None, setting_value: Any = None,
                 expected: str = None):
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error message
            setting_name: Name of invalid setting (optional)
            setting_value: Invalid value (optional)
            expected: Expected value description (optional)
        """
        super().__init__(message)
        self.setting_name = setting_name
        self.setting_value = setting_value
        self.expected = expected
