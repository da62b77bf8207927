"""
Data models for candb.

Models:
- Entry and its variants: one parsed fact per DBC source line
- SignalLayout / DbcSignal: signal bit layout and accumulated signal record
- DbcFrame: frame record owning its signals
- SignalValue: a decoded signal value with frame metadata
"""

from candb.models.entry import (
    Entry, EntryKind, Version, BusConfiguration,
    FrameDefinition, FrameDescription, FrameAttribute,
    SignalDefinition, SignalDescription, SignalAttribute, SignalValueTable, Unknown,
)
from candb.models.signal import SignalLayout, DbcSignal
from candb.models.frame import DbcFrame
from candb.models.signal_value import SignalValue

__all__ = [
    'Entry', 'EntryKind', 'Version', 'BusConfiguration',
    'FrameDefinition', 'FrameDescription', 'FrameAttribute',
    'SignalDefinition', 'SignalDescription', 'SignalAttribute', 'SignalValueTable', 'Unknown',
    'SignalLayout', 'DbcSignal', 'DbcFrame', 'SignalValue',
]
