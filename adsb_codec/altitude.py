"""12-bit altitude field of airborne position messages.

Bit layout, MSB first (Q replaces D1, which is never used for altitude):

    C1 A1 C2 A2 C4 A4 B1 Q B2 D2 B4 D4

Q=1: 25-ft binary code. The 11 bits around Q form n, altitude = n * 25 - 1000.
Q=0: 100-ft Gillham (Mode C) code. D2..B4 are a Gray-coded 500-ft index,
C1 C2 C4 a Gray-coded 100-ft step inside that band. The step runs backwards
in odd 500-ft bands.

GNSS altitude (TC 20-22) has no Q bit: the whole field scales by 25 ft.
"""

from __future__ import annotations

# Returned when a Gillham code is illegal or out of the Mode C range
INVALID_ALTITUDE = 0

MIN_GILLHAM_FT = -1200
MAX_GILLHAM_FT = 126700

_Q_BIT = 0x010

# 100-ft step indexed by the raw C1 C2 C4 bits. Codes 000, 101, 111 are illegal.
_C_STEPS: tuple[int | None, ...] = (None, 1, 3, 2, 5, None, 4, None)
_C_CODES = {step: code for code, step in enumerate(_C_STEPS) if step is not None}

# (bit position in the 12-bit field) for D2 D4 A1 A2 A4 B1 B2 B4, MSB first
_FIVE_HUNDRED_BITS = (2, 0, 10, 8, 6, 5, 3, 1)
# C1 C2 C4
_HUNDRED_BITS = (11, 9, 7)


def _gray_to_binary(gray: int) -> int:
    binary = gray
    mask = gray >> 1
    while mask:
        binary ^= mask
        mask >>= 1
    return binary


def _gather(alt_bits: int, positions: tuple[int, ...]) -> int:
    value = 0
    for pos in positions:
        value = (value << 1) | ((alt_bits >> pos) & 1)
    return value


def _scatter(value: int, positions: tuple[int, ...]) -> int:
    alt_bits = 0
    for i, pos in enumerate(reversed(positions)):
        if (value >> i) & 1:
            alt_bits |= 1 << pos
    return alt_bits


def decode_altitude(alt_bits: int) -> int:
    """Decode a barometric 12-bit altitude field to feet."""
    if alt_bits & _Q_BIT:
        n = ((alt_bits >> 5) << 4) | (alt_bits & 0x0F)
        return n * 25 - 1000
    return decode_gillham(alt_bits)


def decode_gnss_altitude(alt_bits: int) -> int:
    """Decode a GNSS 12-bit altitude field to feet (no Q bit)."""
    return (alt_bits & 0xFFF) * 25 - 1000


def decode_gillham(alt_bits: int) -> int:
    """Decode a 100-ft Gillham altitude. Returns INVALID_ALTITUDE on bad codes."""
    five_hundreds = _gray_to_binary(_gather(alt_bits, _FIVE_HUNDRED_BITS))
    one_hundreds = _C_STEPS[_gather(alt_bits, _HUNDRED_BITS)]
    if one_hundreds is None:
        return INVALID_ALTITUDE

    if five_hundreds % 2:
        one_hundreds = 6 - one_hundreds

    altitude = five_hundreds * 500 + one_hundreds * 100 - 1300
    if altitude < MIN_GILLHAM_FT or altitude > MAX_GILLHAM_FT:
        return INVALID_ALTITUDE
    return altitude


def encode_altitude(altitude_ft: float) -> int:
    """Encode feet as a 25-ft binary (Q=1) altitude field."""
    n = round((altitude_ft + 1000) / 25)
    if not 0 <= n <= 0x7FF:
        raise ValueError(f"Altitude {altitude_ft} ft out of 25-ft code range")
    return ((n >> 4) << 5) | _Q_BIT | (n & 0x0F)


def encode_gnss_altitude(altitude_ft: float) -> int:
    """Encode feet as a GNSS altitude field."""
    n = round((altitude_ft + 1000) / 25)
    if not 0 <= n <= 0xFFF:
        raise ValueError(f"Altitude {altitude_ft} ft out of GNSS code range")
    return n


def encode_gillham(altitude_ft: float) -> int:
    """Encode feet (rounded to 100 ft) as a Gillham (Q=0) altitude field."""
    units = round((altitude_ft + 1300) / 100)
    if not 1 <= units <= (MAX_GILLHAM_FT + 1300) // 100:
        raise ValueError(f"Altitude {altitude_ft} ft out of Mode C range")

    five_hundreds = (units - 1) // 5
    one_hundreds = units - five_hundreds * 5
    if five_hundreds % 2:
        one_hundreds = 6 - one_hundreds

    gray = five_hundreds ^ (five_hundreds >> 1)
    return _scatter(gray, _FIVE_HUNDRED_BITS) | _scatter(_C_CODES[one_hundreds], _HUNDRED_BITS)
