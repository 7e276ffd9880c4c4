"""Parse raw hex strings into fixed-width Mode S frames.

Responsibilities:
- Validate length: 28 hex chars (112-bit squitter) or 14 hex chars (bare ME field)
- Hold the frame as a single integer and slice bit ranges out of it
- Classify Downlink Format (DF) and ADS-B Type Code (TC)
- Assemble frames from fields for the encode direction

The 24-bit parity field is carried but never checked.
"""

from __future__ import annotations

from dataclasses import dataclass

# Downlink Formats this codec interprets
ADSB_DFS = frozenset({17, 18})

DF_NAMES: dict[int, str] = {
    17: "ADS-B extended squitter",
    18: "TIS-B / ADS-R",
}

LONG_HEX = 28  # 112 bits
SHORT_HEX = 14  # 56 bits, ME payload only

# Fixed stand-in for the PI field written by the encoder
STUB_PARITY = 0xA5A5A5

_ME_MASK = (1 << 56) - 1


@dataclass(frozen=True)
class ModeFrame:
    """A 56- or 112-bit frame held as one integer.

    For ME-only (56-bit) frames the header is implied: DF17, CA 0 and an
    ICAO address supplied by the caller.
    """

    value: int
    msg_bits: int  # 56 or 112
    icao: str  # 6-char uppercase hex
    raw: str  # normalized hex input
    implied_df: int = 17

    def bits(self, start: int, length: int) -> int:
        """Extract ``length`` bits starting at ``start`` (0 = MSB)."""
        shift = self.msg_bits - start - length
        return (self.value >> shift) & ((1 << length) - 1)

    @property
    def is_long(self) -> bool:
        return self.msg_bits == 112

    @property
    def df(self) -> int:
        if self.is_long:
            return self.bits(0, 5)
        return self.implied_df

    @property
    def ca(self) -> int:
        if self.is_long:
            return self.bits(5, 3)
        return 0

    @property
    def icao_int(self) -> int:
        return int(self.icao, 16)

    @property
    def me(self) -> int:
        """56-bit Message Extension field."""
        if self.is_long:
            return (self.value >> 24) & _ME_MASK
        return self.value & _ME_MASK

    @property
    def parity(self) -> int | None:
        if self.is_long:
            return self.value & 0xFFFFFF
        return None

    @property
    def type_code(self) -> int:
        return (self.me >> 51) & 0x1F

    @property
    def df_name(self) -> str:
        return DF_NAMES.get(self.df, f"Unknown DF{self.df}")

    @property
    def is_adsb(self) -> bool:
        return self.df in ADSB_DFS


def is_icao(value) -> bool:
    """True for a 24-bit address written as exactly 6 hex digits."""
    if not isinstance(value, str):
        return False
    value = value.strip().upper()
    return len(value) == 6 and all(c in "0123456789ABCDEF" for c in value)


def parse_frame(hex_str: str, icao: str | None = None) -> ModeFrame | None:
    """Parse a hex string into a ModeFrame.

    Args:
        hex_str: 28 hex chars (full DF17/18 frame) or 14 hex chars (ME only).
        icao: Address to attach to an ME-only frame. Ignored for full frames.

    Returns:
        ModeFrame, or None if the length is wrong, the string is not hex, or
        an ME-only frame is given an address that is not 6 hex digits.
    """
    hex_str = hex_str.strip().upper()

    if len(hex_str) not in (LONG_HEX, SHORT_HEX):
        return None

    try:
        value = int(hex_str, 16)
    except ValueError:
        return None
    # int() tolerates "0x" prefixes, underscores and signs; a frame does not
    if not all(c in "0123456789ABCDEF" for c in hex_str):
        return None

    msg_bits = len(hex_str) * 4
    if msg_bits == 112:
        frame_icao = f"{(value >> 80) & 0xFFFFFF:06X}"
    elif icao is None:
        frame_icao = "000000"
    elif is_icao(icao):
        frame_icao = icao.strip().upper()
    else:
        return None

    return ModeFrame(value=value, msg_bits=msg_bits, icao=frame_icao, raw=hex_str)


def classify(frame: ModeFrame) -> tuple[int, int] | None:
    """Return (df, type_code) for an ADS-B frame, None for anything else."""
    if frame.df not in ADSB_DFS:
        return None
    return frame.df, frame.type_code


def assemble_frame(df: int, ca: int, icao: int | str, me: int, parity: int = STUB_PARITY) -> str:
    """Pack header, ME payload and parity into a 28-char uppercase hex frame."""
    if isinstance(icao, str):
        icao = int(icao, 16)
    if not 0 <= icao <= 0xFFFFFF:
        raise ValueError(f"ICAO address out of range: {icao:#x}")

    msg = 0
    msg |= (df & 0x1F) << 107
    msg |= (ca & 0x07) << 104
    msg |= (icao & 0xFFFFFF) << 80
    msg |= (me & _ME_MASK) << 24
    msg |= parity & 0xFFFFFF

    return f"{msg:0{LONG_HEX}X}"
