from .interface import Frame
from .python_can_adapter import (
    frame_from_message, message_from_frame, decode_message, encode_message,
)

__all__ = ["Frame", "frame_from_message", "message_from_frame", "decode_message", "encode_message"]
