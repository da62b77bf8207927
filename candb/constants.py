"""
Constants and default values for the candb package.

This module centralizes the limits and well-known keys used by the DBC
tokenizer, the merge engine and the signal codec so there is a single
source of truth for them.

Constants are organized by category:
- CAN ID ranges and limits
- CAN frame specifications
- DBC file loading defaults
- Well-known DBC attribute keys
"""

# CAN ID ranges
CAN_ID_MIN = 0
CAN_ID_MAX_STANDARD = 0x7FF  # Standard CAN (11-bit)
CAN_ID_MAX_EXTENDED = 0x1FFFFFFF  # Extended CAN (29-bit)
# DBC files store extended IDs with bit 31 set, so IDs span the full u32 range
CAN_ID_MAX = 0xFFFFFFFF
DBC_EXTENDED_ID_FLAG = 0x80000000

# CAN frame limits
CAN_FRAME_MAX_LENGTH = 8  # Classic CAN maximum data length
CAN_FRAME_BITS = CAN_FRAME_MAX_LENGTH * 8
U64_MASK = (1 << CAN_FRAME_BITS) - 1

# DBC file loading
DBC_ENCODING_DEFAULT = 'iso-8859-1'
DBC_DECODE_ERRORS_DEFAULT = 'replace'

# Attribute keys
LONG_NAME_ATTRIBUTE = 'SystemSignalLongSymbol'
DESIGNATED_ATTRIBUTE_DEFAULT = 'SPN'  # J1939 suspect parameter number
