"""
Signal record model.

A DbcSignal accumulates every entry that concerns one named signal of a
frame: the SG_ bit layout, the CM_ SG_ description, BA_ SG_ attributes and
the VAL_ value table. Entries may arrive in any order, so a record can
exist before its layout is known.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from candb import codec
from candb.constants import LONG_NAME_ATTRIBUTE
from candb.exceptions import SignalLayoutMissingError, UnsupportedEntryError
from candb.models.entry import (
    Entry, EntryKind, SignalDefinition, SignalDescription, SignalAttribute, SignalValueTable
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalLayout:
    """Bit position, width, endianness, sign and physical scaling of a signal.

    Attributes:
        name: Signal name as written in the SG_ line
        start_bit: Bit position in the 64-bit payload word (bit 0 = LSB)
        bit_length: Length of the signal in bits
        little_endian: True if payload byte 0 is the least significant byte
        signed: Declared signedness (not applied by the codec)
        scale: Factor applied to the raw value
        offset: Offset added after scaling
        min: Minimum physical value
        max: Maximum physical value
        unit: Unit of the physical value
        receivers: Receiving nodes, comma separated
    """
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

    @classmethod
    def from_definition(cls, definition: SignalDefinition) -> 'SignalLayout':
        return cls(
            name=definition.name,
            start_bit=definition.start_bit,
            bit_length=definition.bit_length,
            little_endian=definition.little_endian,
            signed=definition.signed,
            scale=definition.scale,
            offset=definition.offset,
            min=definition.min,
            max=definition.max,
            unit=definition.unit,
            receivers=definition.receivers,
        )


class DbcSignal:
    """Container holding everything known about one signal of a CAN frame.

    Attributes:
        name: Signal name, unique within its frame
        definition: Bit layout from the SG_ line, None until it has been merged
        description: Free text from CM_ SG_, if any
        attributes: BA_ SG_ key -> value
        value_table: VAL_ ordinal -> label, if any
    """

    def __init__(self, name: str, definition: Optional[SignalLayout] = None,
                 description: Optional[str] = None,
                 attributes: Optional[Dict[str, str]] = None,
                 value_table: Optional[Dict[int, str]] = None):
        self.name = name
        self.definition = definition
        self.description = description
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.value_table = dict(value_table) if value_table is not None else None

    def __repr__(self) -> str:
        return f"DbcSignal(name={self.name!r}, definition={self.definition!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, DbcSignal):
            return NotImplemented
        return (self.name, self.definition, self.description, self.attributes, self.value_table) == \
            (other.name, other.definition, other.description, other.attributes, other.value_table)

    @staticmethod
    def entry_signal_name(entry: Entry) -> str:
        """Return the signal name a signal-bearing entry refers to."""
        if entry.kind is EntryKind.SIGNAL_DEFINITION:
            return entry.name
        if entry.kind in (EntryKind.SIGNAL_DESCRIPTION, EntryKind.SIGNAL_ATTRIBUTE,
                          EntryKind.SIGNAL_VALUE_TABLE):
            return entry.signal_name
        raise UnsupportedEntryError(f"Unsupported entry for signal: {entry.kind}.",
                                    entry_kind=entry.kind)

    @classmethod
    def from_entry(cls, entry: Entry) -> 'DbcSignal':
        """Build a signal record from the first entry that mentions it."""
        signal = cls(cls.entry_signal_name(entry))
        signal.merge_entry(entry)
        return signal

    def merge_entry(self, entry: Entry) -> None:
        """Fold a signal-bearing entry into this record.

        The entry's fields overwrite the matching record fields; all other
        fields are left as they are.

        Raises:
            UnsupportedEntryError: If the entry does not describe a signal
        """
        if isinstance(entry, SignalDefinition):
            self.definition = SignalLayout.from_definition(entry)
        elif isinstance(entry, SignalDescription):
            self.description = entry.text
        elif isinstance(entry, SignalAttribute):
            previous = self.attributes.get(entry.key)
            if previous is not None and previous != entry.value:
                logger.debug(f"Signal {self.name}: attribute {entry.key} overwritten "
                             f"({previous!r} -> {entry.value!r})")
            self.attributes[entry.key] = entry.value
        elif isinstance(entry, SignalValueTable):
            self.value_table = entry.as_dict()
        else:
            raise UnsupportedEntryError(f"Unsupported entry for signal: {entry.kind}.",
                                        entry_kind=entry.kind)

    @property
    def has_definition(self) -> bool:
        return self.definition is not None

    def get_definition(self) -> SignalLayout:
        """Return the bit layout of the signal.

        Raises:
            SignalLayoutMissingError: If no SG_ definition has been merged yet
        """
        if self.definition is None:
            raise SignalLayoutMissingError(f"Signal {self.name} has no bit layout",
                                           signal_name=self.name)
        return self.definition

    def get_attribute(self, key: str) -> Optional[str]:
        return self.attributes.get(key)

    @property
    def long_name(self) -> str:
        """The SystemSignalLongSymbol attribute, or the signal name when absent."""
        return self.attributes.get(LONG_NAME_ATTRIBUTE, self.name)

    def value_label(self, raw: int) -> Optional[str]:
        """Look up the VAL_ label for a raw ordinal, if the signal has a value table."""
        if self.value_table is None:
            return None
        return self.value_table.get(raw)

    def decode(self, data: bytes) -> Optional[float]:
        """Decode this signal from a frame payload.

        Args:
            data: Payload bytes; shorter buffers are zero padded to 8 bytes

        Returns:
            Physical value, or None if the payload is empty

        Raises:
            SignalLayoutMissingError: If the signal has no bit layout
        """
        return codec.decode(self.get_definition(), data)

    def encode(self, value: float) -> bytes:
        """Encode a physical value into this signal's 8-byte contribution.

        Raises:
            SignalLayoutMissingError: If the signal has no bit layout
            SignalOverflowError: If the raw value does not fit the bit width
        """
        return codec.encode(self.get_definition(), value, signal_name=self.name)

    def decoder(self) -> Callable[[bytes], Optional[float]]:
        """Return a reusable decode function bound to this signal's layout."""
        layout = self.get_definition()
        return lambda data: codec.decode(layout, data)
