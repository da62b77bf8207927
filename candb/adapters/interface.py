from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from candb.constants import CAN_FRAME_MAX_LENGTH, CAN_ID_MIN, CAN_ID_MAX


@dataclass
class Frame:
    """Simple CAN frame representation decoupled from any bus library.

    Attributes:
        can_id: Arbitration ID as written in the DBC (may carry the extended flag bit)
        data: Payload bytes (up to 8 for classic CAN)
        timestamp: Optional receive time (Unix timestamp)
    """
    can_id: int
    data: bytes
    timestamp: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(f"data must be bytes, got {type(self.data)}")
        self.data = bytes(self.data)
        if len(self.data) > CAN_FRAME_MAX_LENGTH:
            raise ValueError(f"CAN data length must be <= {CAN_FRAME_MAX_LENGTH} bytes, got {len(self.data)}")
        if not (CAN_ID_MIN <= self.can_id <= CAN_ID_MAX):
            raise ValueError(f"CAN ID out of range: 0x{self.can_id:X}")

    @property
    def data_hex(self) -> str:
        return self.data.hex()
