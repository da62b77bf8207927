"""
Regex-based DBC line tokenizer.

Turns one line of DBC source into a typed Entry. Lines that match no
supported directive yield None; the whole-file loader skips them.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from candb.constants import CAN_ID_MAX
from candb.exceptions import EntryParseError
from candb.models.entry import (
    Entry, Version, BusConfiguration,
    FrameDefinition, FrameDescription, FrameAttribute,
    SignalDefinition, SignalDescription, SignalAttribute, SignalValueTable,
)
from candb.utils.regex_patterns import (
    REGEX_VERSION, REGEX_BUS_CONFIGURATION,
    REGEX_FRAME_DEFINITION, REGEX_FRAME_DESCRIPTION, REGEX_FRAME_ATTRIBUTE,
    REGEX_SIGNAL_DEFINITION, REGEX_SIGNAL_DESCRIPTION, REGEX_SIGNAL_ATTRIBUTE,
    REGEX_VALUE_TABLE, REGEX_VALUE_PAIR,
)

logger = logging.getLogger(__name__)


def _frame_id(text: str) -> Optional[int]:
    value = int(text)
    if value > CAN_ID_MAX:
        logger.debug(f"Frame ID {value} exceeds 32 bits, ignoring line")
        return None
    return value


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_version(line: str) -> Optional[Version]:
    m = REGEX_VERSION.match(line)
    if m is None:
        return None
    return Version(text=m.group('text'))


def parse_bus_configuration(line: str) -> Optional[BusConfiguration]:
    m = REGEX_BUS_CONFIGURATION.match(line)
    if m is None:
        return None
    speed = m.group('speed')
    return BusConfiguration(speed=float(speed) if speed else 0.0)


def parse_frame_definition(line: str) -> Optional[FrameDefinition]:
    m = REGEX_FRAME_DEFINITION.match(line)
    if m is None:
        return None
    frame_id = _frame_id(m.group('id'))
    if frame_id is None:
        return None
    return FrameDefinition(
        id=frame_id,
        name=m.group('name'),
        length=int(m.group('length')),
        sender=m.group('sender') or '',
    )


def parse_frame_description(line: str) -> Optional[FrameDescription]:
    m = REGEX_FRAME_DESCRIPTION.match(line)
    if m is None:
        return None
    frame_id = _frame_id(m.group('id'))
    if frame_id is None:
        return None
    return FrameDescription(id=frame_id, text=m.group('text'))


def parse_frame_attribute(line: str) -> Optional[FrameAttribute]:
    m = REGEX_FRAME_ATTRIBUTE.match(line)
    if m is None:
        return None
    frame_id = _frame_id(m.group('id'))
    if frame_id is None:
        return None
    return FrameAttribute(id=frame_id, key=m.group('key'), value=_unquote(m.group('value')))


def parse_signal_definition(line: str) -> Optional[SignalDefinition]:
    """Parse an `SG_` line.

    The multiplexer indicator (``M`` / ``m<n>``) is accepted and dropped;
    multiplexed signals are treated like plain signals.
    """
    m = REGEX_SIGNAL_DEFINITION.match(line)
    if m is None:
        return None
    return SignalDefinition(
        name=m.group('name'),
        start_bit=int(m.group('start_bit')),
        bit_length=int(m.group('bit_length')),
        little_endian=m.group('endian') == '1',
        signed=m.group('sign') == '-',
        scale=float(m.group('scale')),
        offset=float(m.group('offset')),
        min=float(m.group('min')),
        max=float(m.group('max')),
        unit=m.group('unit'),
        receivers=m.group('receivers'),
    )


def parse_signal_description(line: str) -> Optional[SignalDescription]:
    m = REGEX_SIGNAL_DESCRIPTION.match(line)
    if m is None:
        return None
    frame_id = _frame_id(m.group('id'))
    if frame_id is None:
        return None
    return SignalDescription(id=frame_id, signal_name=m.group('name'), text=m.group('text'))


def parse_signal_attribute(line: str) -> Optional[SignalAttribute]:
    m = REGEX_SIGNAL_ATTRIBUTE.match(line)
    if m is None:
        return None
    frame_id = _frame_id(m.group('id'))
    if frame_id is None:
        return None
    return SignalAttribute(
        id=frame_id,
        signal_name=m.group('name'),
        key=m.group('key'),
        value=_unquote(m.group('value')),
    )


def parse_value_table(line: str) -> Optional[SignalValueTable]:
    m = REGEX_VALUE_TABLE.match(line)
    if m is None:
        return None
    frame_id = _frame_id(m.group('id'))
    if frame_id is None:
        return None
    pairs = tuple(
        (int(p.group('ordinal')), p.group('label'))
        for p in REGEX_VALUE_PAIR.finditer(m.group('pairs'))
    )
    return SignalValueTable(id=frame_id, signal_name=m.group('name'), values=pairs)


_PARSERS: List[Callable[[str], Optional[Entry]]] = [
    parse_frame_description,
    parse_frame_attribute,
    parse_signal_description,
    parse_signal_attribute,
    parse_value_table,
    parse_frame_definition,
    parse_signal_definition,
    parse_version,
    parse_bus_configuration,
]


def parse_entry(line: str) -> Optional[Entry]:
    """Tokenize one line of DBC source.

    Args:
        line: A single line, with or without trailing newline

    Returns:
        The matching Entry, or None if the line is not a supported directive
    """
    for parse in _PARSERS:
        entry = parse(line)
        if entry is not None:
            return entry
    return None


def parse_entry_strict(line: str) -> Entry:
    """Like parse_entry, but raise instead of returning None.

    Raises:
        EntryParseError: If no directive matches the line
    """
    entry = parse_entry(line)
    if entry is None:
        raise EntryParseError(f"Could not find a regex match for input: {line!r}", line=line)
    return entry
