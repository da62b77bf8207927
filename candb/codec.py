"""
Bit-level signal codec.

Pure functions converting between classic CAN payloads and physical
values. A payload is treated as one unsigned 64-bit word read in the
signal's byte order (little endian: byte 0 is least significant; big
endian: byte 0 is most significant). A signal occupies
``bit_length`` bits of that word starting at ``start_bit`` (bit 0 is the
least significant bit of the word).

Physical values are computed in 32-bit float arithmetic,
``raw * scale + offset``. The signed flag of a layout is not applied:
raw values are always treated as unsigned.
"""
from __future__ import annotations

import math
import struct
import logging
from typing import TYPE_CHECKING, Mapping, Optional

from candb.constants import CAN_FRAME_MAX_LENGTH, U64_MASK
from candb.exceptions import MissingSignalDataError, SignalOverflowError

if TYPE_CHECKING:
    from candb.models.frame import DbcFrame
    from candb.models.signal import SignalLayout

logger = logging.getLogger(__name__)

_LE_U64 = struct.Struct('<Q')
_BE_U64 = struct.Struct('>Q')
_F32 = struct.Struct('<f')


def to_f32(value: float) -> float:
    """Round a Python float to the nearest IEEE 754 single precision value.

    Finite values that round past the single precision range become
    infinity of the same sign.
    """
    try:
        return _F32.unpack(_F32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _struct_for(little_endian: bool) -> struct.Struct:
    return _LE_U64 if little_endian else _BE_U64


def payload_to_word(data: bytes, little_endian: bool) -> Optional[int]:
    """Read a payload as an unsigned 64-bit word.

    Buffers shorter than 8 bytes are right padded with zero bytes, longer
    ones are truncated to their first 8 bytes.

    Returns:
        The word, or None for an empty buffer
    """
    data = bytes(data)
    if not data:
        return None
    data = data[:CAN_FRAME_MAX_LENGTH].ljust(CAN_FRAME_MAX_LENGTH, b'\x00')
    return _struct_for(little_endian).unpack(data)[0]


def word_to_payload(word: int, little_endian: bool) -> bytes:
    return _struct_for(little_endian).pack(word & U64_MASK)


def extract_raw(layout: 'SignalLayout', data: bytes) -> Optional[int]:
    """Extract the unsigned raw value of a signal from a payload."""
    word = payload_to_word(data, layout.little_endian)
    if word is None:
        return None
    mask = (1 << layout.bit_length) - 1
    return (word >> layout.start_bit) & mask


def decode(layout: 'SignalLayout', data: bytes) -> Optional[float]:
    """Decode the physical value of a signal from a payload.

    Args:
        layout: Bit layout of the signal
        data: Payload bytes (1..8 used, zero padded when shorter)

    Returns:
        ``raw * scale + offset`` in single precision, or None if ``data`` is empty
    """
    raw = extract_raw(layout, data)
    if raw is None:
        return None
    scaled = to_f32(to_f32(float(raw)) * to_f32(layout.scale))
    return to_f32(scaled + to_f32(layout.offset))


def physical_to_raw(layout: 'SignalLayout', value: float) -> float:
    """Invert the physical scaling: ``(value - offset) / scale``.

    Division follows IEEE 754: a zero scale gives a signed infinity, or NaN
    when the numerator is zero as well.
    """
    numerator = float(value) - to_f32(layout.offset)
    scale = to_f32(layout.scale)
    if scale == 0.0:
        if numerator == 0.0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, scale)
    return numerator / scale


def _saturate_u64(raw: float) -> int:
    """Truncate toward zero, clamping to the unsigned 64-bit range (NaN -> 0)."""
    if math.isnan(raw) or raw <= 0:
        return 0
    if raw >= U64_MASK:
        return U64_MASK
    return int(raw)


def encode(layout: 'SignalLayout', value: float, signal_name: Optional[str] = None) -> bytes:
    """Encode a physical value into an 8-byte payload contribution.

    The overflow check is ``log2(raw) > bit_length``. It bounds the
    magnitude only; a raw value of exactly ``2 ** bit_length`` passes and
    spills one bit past the signal.

    Args:
        layout: Bit layout of the signal
        value: Physical value
        signal_name: Name used in error messages (defaults to the layout name)

    Returns:
        8 bytes in the layout's byte order, zero outside the signal bits

    Raises:
        SignalOverflowError: If the raw value exceeds the bit width
    """
    raw = physical_to_raw(layout, value)
    if raw > 0 and math.log2(raw) > layout.bit_length:
        name = signal_name or layout.name
        raise SignalOverflowError(
            f"Signal {name} does not fit into {layout.bit_length} bits: raw value {raw}",
            signal_name=name, raw_value=raw, bit_length=layout.bit_length)
    word = (_saturate_u64(raw) << layout.start_bit) & U64_MASK
    return word_to_payload(word, layout.little_endian)


def encode_frame(frame: 'DbcFrame', values: Mapping[str, float]) -> bytes:
    """Encode every signal of a frame into one 8-byte payload.

    Each signal's contribution is OR-ed into the result, so signal bit
    ranges must not overlap. Overlap is not checked.

    Args:
        frame: Frame record whose signals are encoded
        values: Signal name -> physical value; must cover every signal of the frame

    Raises:
        MissingSignalDataError: If a signal has no value in ``values``
        SignalLayoutMissingError: If a signal has no bit layout
        SignalOverflowError: If a value does not fit its signal
    """
    result = bytearray(CAN_FRAME_MAX_LENGTH)
    for signal in frame.get_signals():
        if signal.name not in values:
            raise MissingSignalDataError(f"Missing signal data: {signal.name}",
                                         signal_name=signal.name, frame_id=frame.id)
        contribution = signal.encode(values[signal.name])
        for i, byte in enumerate(contribution):
            result[i] |= byte
    logger.debug(f"Encoded frame 0x{frame.id:X}: {bytes(result).hex()}")
    return bytes(result)
