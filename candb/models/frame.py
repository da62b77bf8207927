"""
Frame record model.

A DbcFrame accumulates every entry that references one arbitration ID and
owns the signal records routed to it.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from candb import codec
from candb.constants import DESIGNATED_ATTRIBUTE_DEFAULT
from candb.exceptions import UnsupportedEntryError
from candb.models.entry import (
    Entry, FrameDefinition, FrameDescription, FrameAttribute, SIGNAL_ENTRY_KINDS
)
from candb.models.signal import DbcSignal

logger = logging.getLogger(__name__)


class DbcFrame:
    """Container for everything a DBC file says about one CAN frame.

    Attributes:
        id: Arbitration ID; fixed once the record exists
        name: Frame name from BO_ ('' until defined)
        length: Payload length in bytes from BO_ (0 until defined)
        sender: Sending node from BO_ ('' until defined)
        description: Free text from CM_ BO_, if any
        attributes: BA_ BO_ key -> value
        signals: Signal name -> DbcSignal
    """

    def __init__(self, id: int, name: str = '', length: int = 0, sender: str = '',
                 description: Optional[str] = None,
                 attributes: Optional[Dict[str, str]] = None,
                 signals: Optional[Dict[str, DbcSignal]] = None):
        self._id = id
        self.name = name
        self.length = length
        self.sender = sender
        self.description = description
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.signals: Dict[str, DbcSignal] = dict(signals or {})

    def __repr__(self) -> str:
        return (f"DbcFrame(id=0x{self._id:X}, name={self.name!r}, length={self.length}, "
                f"signals={sorted(self.signals)})")

    @property
    def id(self) -> int:
        return self._id

    @classmethod
    def from_entry(cls, frame_id: int, entry: Entry) -> 'DbcFrame':
        """Build a frame record from the first entry that references ``frame_id``.

        Fields the entry does not carry keep their defaults. Signal-bearing
        entries create the frame with a single signal record.

        Raises:
            UnsupportedEntryError: If the entry kind does not apply to frames
        """
        frame = cls(frame_id)
        frame.merge_entry(entry)
        return frame

    def merge_entry(self, entry: Entry) -> None:
        """Fold an entry into this frame record in place.

        Frame entries overwrite the fields they carry. Signal entries are
        routed to the signal record of the same name, which is created on
        first reference and merged into afterwards.

        Raises:
            UnsupportedEntryError: If the entry kind does not apply to frames
        """
        if isinstance(entry, FrameDefinition):
            self.name = entry.name
            self.length = entry.length
            self.sender = entry.sender
        elif isinstance(entry, FrameDescription):
            self.description = entry.text
        elif isinstance(entry, FrameAttribute):
            previous = self.attributes.get(entry.key)
            if previous is not None and previous != entry.value:
                logger.debug(f"Frame 0x{self._id:X}: attribute {entry.key} overwritten "
                             f"({previous!r} -> {entry.value!r})")
            self.attributes[entry.key] = entry.value
        elif entry.kind in SIGNAL_ENTRY_KINDS:
            name = DbcSignal.entry_signal_name(entry)
            signal = self.signals.get(name)
            if signal is None:
                self.signals[name] = DbcSignal.from_entry(entry)
            else:
                signal.merge_entry(entry)
        else:
            raise UnsupportedEntryError(f"Unsupported entry for frame: {entry.kind}.",
                                        entry_kind=entry.kind)

    def get_signals(self) -> List[DbcSignal]:
        return list(self.signals.values())

    def get_signal(self, name: str) -> Optional[DbcSignal]:
        return self.signals.get(name)

    def get_name(self) -> str:
        return self.name

    def get_id(self) -> int:
        return self._id

    def get_length(self) -> int:
        return self.length

    def get_sender(self) -> str:
        return self.sender

    def get_description(self) -> Optional[str]:
        return self.description

    def get_attribute(self, key: str) -> Optional[str]:
        return self.attributes.get(key)

    def signal_attribute_view(self, key: str = DESIGNATED_ATTRIBUTE_DEFAULT) -> Dict[str, str]:
        """Signal name -> value of one designated signal attribute (e.g. 'SPN').

        Signals without the attribute are left out.
        """
        return {
            name: signal.attributes[key]
            for name, signal in self.signals.items()
            if key in signal.attributes
        }

    def encode(self, values: Mapping[str, float]) -> bytes:
        """Encode all signals of this frame; see ``codec.encode_frame``."""
        return codec.encode_frame(self, values)

    def decode(self, data: bytes) -> Dict[str, float]:
        """Decode every signal that has a bit layout.

        Returns:
            Signal name -> physical value (empty for an empty payload)
        """
        values: Dict[str, float] = {}
        for name, signal in self.signals.items():
            if not signal.has_definition:
                logger.debug(f"Frame 0x{self._id:X}: skipping signal {name} without layout")
                continue
            value = signal.decode(data)
            if value is not None:
                values[name] = value
        return values
