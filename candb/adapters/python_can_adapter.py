"""Conversions between python-can messages and DBC records.

DBC files mark extended (29-bit) identifiers by setting bit 31 of the
frame ID. python-can keeps the flag separately in ``is_extended_id``; the
helpers here translate between the two so library lookups work on
received messages.

python-can is optional (the ``can`` extra); the conversions that build
``can.Message`` objects raise RuntimeError without it.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple

try:
    import can
except Exception:
    can = None

from candb.constants import (
    CAN_FRAME_MAX_LENGTH, CAN_ID_MAX_EXTENDED, CAN_ID_MAX_STANDARD, DBC_EXTENDED_ID_FLAG
)
from candb.models.frame import DbcFrame
from candb.models.signal import DbcSignal

from .interface import Frame

logger = logging.getLogger(__name__)


def _require_can() -> None:
    if can is None:
        raise RuntimeError('python-can library not available')


def dbc_id_from_arbitration_id(arbitration_id: int, is_extended_id: bool) -> int:
    if is_extended_id:
        return (arbitration_id & CAN_ID_MAX_EXTENDED) | DBC_EXTENDED_ID_FLAG
    return arbitration_id


def arbitration_id_from_dbc_id(dbc_id: int) -> Tuple[int, bool]:
    """Split a DBC frame ID into (arbitration_id, is_extended_id)."""
    if dbc_id & DBC_EXTENDED_ID_FLAG:
        return dbc_id & CAN_ID_MAX_EXTENDED, True
    return dbc_id, dbc_id > CAN_ID_MAX_STANDARD


def frame_from_message(msg) -> Frame:
    """Convert a ``can.Message`` into a Frame keyed by its DBC frame ID."""
    data = bytes(msg.data or b'')[:CAN_FRAME_MAX_LENGTH]
    can_id = dbc_id_from_arbitration_id(int(msg.arbitration_id), bool(msg.is_extended_id))
    return Frame(can_id=can_id, data=data, timestamp=getattr(msg, 'timestamp', None))


def message_from_frame(frame: Frame, is_extended_id: Optional[bool] = None):
    """Convert a Frame into a ``can.Message``.

    Args:
        frame: Frame whose ``can_id`` is a DBC frame ID
        is_extended_id: Override for the extended flag; derived from the ID when None
    """
    _require_can()
    arbitration_id, extended = arbitration_id_from_dbc_id(frame.can_id)
    if is_extended_id is not None:
        extended = is_extended_id
    kwargs = {}
    if frame.timestamp is not None:
        kwargs['timestamp'] = frame.timestamp
    return can.Message(arbitration_id=arbitration_id, data=frame.data,
                       is_extended_id=extended, **kwargs)


def decode_message(signal: DbcSignal, msg) -> Optional[float]:
    """Decode one signal from the payload of a ``can.Message``.

    Returns:
        Physical value, or None if the message has no data
    """
    return signal.decode(bytes(msg.data or b''))


def encode_message(dbc_frame: DbcFrame, values: Mapping[str, float]):
    """Encode all signals of a frame into a ``can.Message``.

    The payload is cut to the frame's declared length when that is between
    1 and 8 bytes, otherwise all 8 bytes are sent.

    Raises:
        MissingSignalDataError: If a signal of the frame has no value
        SignalOverflowError: If a value does not fit its signal
    """
    _require_can()
    data = dbc_frame.encode(values)
    if 0 < dbc_frame.length < CAN_FRAME_MAX_LENGTH:
        data = data[:dbc_frame.length]
    arbitration_id, extended = arbitration_id_from_dbc_id(dbc_frame.id)
    logger.debug(f"Built message 0x{arbitration_id:X} (extended={extended}): {data.hex()}")
    return can.Message(arbitration_id=arbitration_id, data=data, is_extended_id=extended)
