"""
Signal Value model for representing decoded CAN signal values.
"""
from dataclasses import dataclass
from typing import Optional

from candb.constants import CAN_ID_MIN, CAN_ID_MAX


@dataclass
class SignalValue:
    """A decoded signal value from a CAN frame.

    Attributes:
        signal_name: Name of the signal from DBC
        value: Decoded physical value
        message_id: Arbitration ID of the frame the signal was found in
        message_name: Name of the frame (optional)
        unit: Unit of the physical value (optional)
        label: VAL_ label for the raw value (optional)
        timestamp: Timestamp when the frame was received
        raw_data: Raw frame data bytes (optional, for debugging)
    """
    signal_name: str
    value: float
    message_id: int
    message_name: Optional[str] = None
    unit: Optional[str] = None
    label: Optional[str] = None
    timestamp: Optional[float] = None
    raw_data: Optional[bytes] = None

    def __post_init__(self):
        """Validate signal value data."""
        if not self.signal_name:
            raise ValueError("signal_name cannot be empty")
        if not (CAN_ID_MIN <= self.message_id <= CAN_ID_MAX):
            raise ValueError(f"message_id out of range: 0x{self.message_id:X}")

    @property
    def key(self) -> str:
        """Return a cache key for this signal (message_id:signal_name)."""
        return f"{self.message_id}:{self.signal_name}"

    def __str__(self) -> str:
        if self.label is not None:
            return f"{self.signal_name}={self.label}"
        return f"{self.signal_name}={self.value}"
