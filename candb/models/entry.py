"""
DBC entry models.

Each entry is one immutable fact extracted from a single line of DBC
source. Entries carry no references to each other; the only thing that
ties them together is a shared frame ID or signal name, which the
library's merge engine uses to fold them into frame and signal records.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Tuple


class EntryKind(Enum):
    """Classification tag for DBC entries, used for dispatch and error messages."""
    VERSION = 'Version'
    BUS_CONFIGURATION = 'BusConfiguration'
    FRAME_DEFINITION = 'FrameDefinition'
    FRAME_DESCRIPTION = 'FrameDescription'
    FRAME_ATTRIBUTE = 'FrameAttribute'
    SIGNAL_DEFINITION = 'SignalDefinition'
    SIGNAL_DESCRIPTION = 'SignalDescription'
    SIGNAL_ATTRIBUTE = 'SignalAttribute'
    SIGNAL_VALUE_TABLE = 'SignalValueTable'
    UNKNOWN = 'Unknown'

    def __str__(self) -> str:
        return self.value


class Entry:
    """Base class of all DBC entries."""

    kind: ClassVar[EntryKind] = EntryKind.UNKNOWN

    def __str__(self) -> str:
        return str(self.kind)

    @classmethod
    def from_str(cls, line: str) -> 'Entry':
        """Parse a single line of DBC source.

        Raises:
            EntryParseError: If the line matches no known directive
        """
        from candb.parser import parse_entry_strict
        return parse_entry_strict(line)


@dataclass(frozen=True)
class Version(Entry):
    """`VERSION "<text>"`"""
    kind: ClassVar[EntryKind] = EntryKind.VERSION
    text: str


@dataclass(frozen=True)
class BusConfiguration(Entry):
    """`BS_: <speed>`"""
    kind: ClassVar[EntryKind] = EntryKind.BUS_CONFIGURATION
    speed: float


@dataclass(frozen=True)
class FrameDefinition(Entry):
    """`BO_ <id> <name> : <length> <sender>`

    Attributes:
        id: Arbitration ID
        name: CAN frame name
        length: Length of frame in bytes
        sender: Node that sends the frame
    """
    kind: ClassVar[EntryKind] = EntryKind.FRAME_DEFINITION
    id: int
    name: str
    length: int
    sender: str


@dataclass(frozen=True)
class FrameDescription(Entry):
    """`CM_ BO_ <id> "<text>";`"""
    kind: ClassVar[EntryKind] = EntryKind.FRAME_DESCRIPTION
    id: int
    text: str


@dataclass(frozen=True)
class FrameAttribute(Entry):
    """`BA_ "<key>" BO_ <id> <value>;`"""
    kind: ClassVar[EntryKind] = EntryKind.FRAME_ATTRIBUTE
    id: int
    key: str
    value: str


@dataclass(frozen=True)
class SignalDefinition(Entry):
    """`SG_ <name> : <start>|<len>@<endian><sign> (<scale>,<offset>) [<min>|<max>] "<unit>" <receivers>`

    Carries no frame ID: by definition it follows the `BO_` line of the
    frame it belongs to.

    Attributes:
        name: Signal name
        start_bit: Bit position in the 64-bit payload word where the signal starts
        bit_length: Length of the signal in bits
        little_endian: True if the payload is read little endian
        signed: True if the signal is declared signed (recorded, not applied on decode)
        scale: Factor applied to the raw value to get the physical value
        offset: Offset added after scaling
        min: Minimum physical value
        max: Maximum physical value
        unit: Unit of the physical value
        receivers: Receiving nodes, comma separated
    """
    kind: ClassVar[EntryKind] = EntryKind.SIGNAL_DEFINITION
    name: str
    start_bit: int
    bit_length: int
    little_endian: bool
    signed: bool
    scale: float
    offset: float
    min: float
    max: float
    unit: str
    receivers: str


@dataclass(frozen=True)
class SignalDescription(Entry):
    """`CM_ SG_ <id> <signal_name> "<text>";`"""
    kind: ClassVar[EntryKind] = EntryKind.SIGNAL_DESCRIPTION
    id: int
    signal_name: str
    text: str


@dataclass(frozen=True)
class SignalAttribute(Entry):
    """`BA_ "<key>" SG_ <id> <signal_name> <value>;`"""
    kind: ClassVar[EntryKind] = EntryKind.SIGNAL_ATTRIBUTE
    id: int
    signal_name: str
    key: str
    value: str


@dataclass(frozen=True)
class SignalValueTable(Entry):
    """`VAL_ <id> <signal_name> <ordinal> "<label>" ... ;`

    Pairs are kept as a tuple so the entry stays immutable and hashable.
    """
    kind: ClassVar[EntryKind] = EntryKind.SIGNAL_VALUE_TABLE
    id: int
    signal_name: str
    values: Tuple[Tuple[int, str], ...]

    def as_dict(self) -> Dict[int, str]:
        return dict(self.values)


@dataclass(frozen=True)
class Unknown(Entry):
    kind: ClassVar[EntryKind] = EntryKind.UNKNOWN
    raw_text: str


SIGNAL_ENTRY_KINDS = frozenset({
    EntryKind.SIGNAL_DEFINITION,
    EntryKind.SIGNAL_DESCRIPTION,
    EntryKind.SIGNAL_ATTRIBUTE,
    EntryKind.SIGNAL_VALUE_TABLE,
})

FRAME_ENTRY_KINDS = frozenset({
    EntryKind.FRAME_DEFINITION,
    EntryKind.FRAME_DESCRIPTION,
    EntryKind.FRAME_ATTRIBUTE,
})
