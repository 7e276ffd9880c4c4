"""TC 1-4: Aircraft identification (callsign).

ME field layout (56 bits):
- TC (5 bits): Type code 1-4
- CA (3 bits): Aircraft category
- Callsign (48 bits): 8 characters x 6 bits each
"""

from __future__ import annotations

from .messages import IdentificationMsg

# ADS-B character set for callsign encoding (6 bits per character)
CHARSET = "#ABCDEFGHIJKLMNOPQRSTUVWXYZ##### ###############0123456789######"

# Character -> 6-bit code; '#' marks unused codes and has no encoding
_CODES = {c: i for i, c in enumerate(CHARSET) if c != "#"}


def decode_identification(me: int, type_code: int) -> IdentificationMsg:
    category = (me >> 48) & 0x07

    chars = []
    for i in range(8):
        idx = (me >> (42 - i * 6)) & 0x3F
        c = CHARSET[idx]
        chars.append(" " if c == "#" else c)

    return IdentificationMsg(
        callsign="".join(chars).rstrip(),
        category=(type_code - 1) * 8 + category,
    )


def encode_identification(callsign: str, category: int = 0, type_code: int = 4) -> int:
    """Pack a callsign (up to 8 chars) into an identification ME field."""
    callsign = callsign.upper().ljust(8)
    if len(callsign) > 8:
        raise ValueError(f"Callsign too long: {callsign!r}")
    if not 1 <= type_code <= 4:
        raise ValueError(f"Identification type code must be 1-4, got {type_code}")

    me = (type_code << 51) | ((category & 0x07) << 48)
    for i, c in enumerate(callsign):
        if c not in _CODES:
            raise ValueError(f"Character {c!r} cannot be encoded in a callsign")
        me |= _CODES[c] << (42 - i * 6)
    return me
