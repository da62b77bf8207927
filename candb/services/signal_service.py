"""
Signal Service for decoding CAN frames against a DBC library.

This service decodes every signal of a received frame into SignalValue
records and keeps the latest value per signal for quick lookup.
"""
import time
import logging
from typing import Dict, List, Optional, Tuple

from candb import codec
from candb.adapters.interface import Frame
from candb.models.signal_value import SignalValue
from candb.services.library import DbcLibrary

logger = logging.getLogger(__name__)


class SignalService:
    """Service for decoding CAN frames and caching signal values.

    Attributes:
        library: DbcLibrary used to look up frames and signals
        _signal_values: Cache of latest signal values
                       Key: "message_id:signal_name" -> (timestamp, value)
    """

    def __init__(self, library: DbcLibrary):
        """Initialize the signal service.

        Args:
            library: DbcLibrary instance for frame and signal lookup
        """
        self.library = library
        self._signal_values: Dict[str, Tuple[float, float]] = {}

    def decode_frame(self, frame: Frame) -> List[SignalValue]:
        """Decode a CAN frame into signal values.

        Args:
            frame: CAN frame with can_id, data, and optional timestamp

        Returns:
            List of SignalValue objects (empty for unknown IDs or empty payloads)
        """
        dbc_frame = self.library.get_frame(frame.can_id)
        if dbc_frame is None:
            logger.debug(f"SignalService.decode_frame: No frame found for CAN ID 0x{frame.can_id:X}")
            return []

        if not frame.data:
            logger.debug(f"SignalService.decode_frame: Empty frame data for CAN ID 0x{frame.can_id:X}")
            return []

        timestamp = frame.timestamp if frame.timestamp is not None else time.time()
        results: List[SignalValue] = []
        for signal in dbc_frame.get_signals():
            if not signal.has_definition:
                logger.debug(f"SignalService.decode_frame: Signal {signal.name} of 0x{frame.can_id:X} "
                             f"has no layout, skipping")
                continue
            value = signal.decode(frame.data)
            if value is None:
                continue
            raw = codec.extract_raw(signal.definition, frame.data)
            signal_value = SignalValue(
                signal_name=signal.name,
                value=value,
                message_id=frame.can_id,
                message_name=dbc_frame.name or None,
                unit=signal.definition.unit or None,
                label=signal.value_label(raw),
                timestamp=timestamp,
                raw_data=frame.data,
            )
            self._signal_values[signal_value.key] = (timestamp, value)
            results.append(signal_value)
        return results

    def get_latest_signal(self, can_id: int, signal_name: str) -> Tuple[Optional[float], Optional[float]]:
        """Get the latest cached value of a signal.

        Returns:
            Tuple of (timestamp, value), or (None, None) if never decoded
        """
        return self._signal_values.get(f"{can_id}:{signal_name}", (None, None))

    def clear_cache(self) -> None:
        self._signal_values.clear()
        logger.debug("Cleared signal value cache")
