"""
candb - CAN database (DBC) ingestion and signal codec.

Builds frame and signal records from DBC source one entry at a time and
converts between raw CAN payloads and scaled physical values.

Usage:
    lib = DbcLibrary.from_file("vehicle.dbc")
    speed = lib.get_signal("Engine_Speed").decode(payload)
    payload = lib.get_frame(0x8CF00400).encode({"Engine_Speed": 2728.5})
"""

from candb.exceptions import (
    CandbError, MissingContextError, UnsupportedEntryError, EntryParseError,
    SignalLayoutMissingError, MissingSignalDataError, SignalOverflowError,
    DbcReadError, ConfigurationError,
)
from candb.models import (
    Entry, EntryKind, SignalLayout, DbcSignal, DbcFrame, SignalValue,
)
from candb.parser import parse_entry
from candb.services import DbcLibrary, SignalService
from candb.codec import decode, encode, encode_frame

__all__ = [
    'CandbError', 'MissingContextError', 'UnsupportedEntryError', 'EntryParseError',
    'SignalLayoutMissingError', 'MissingSignalDataError', 'SignalOverflowError',
    'DbcReadError', 'ConfigurationError',
    'Entry', 'EntryKind', 'SignalLayout', 'DbcSignal', 'DbcFrame', 'SignalValue',
    'parse_entry', 'DbcLibrary', 'SignalService',
    'decode', 'encode', 'encode_frame',
]
