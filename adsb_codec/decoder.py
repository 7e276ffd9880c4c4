"""Decode DF17/18 frames into typed aircraft messages, and synthesize them.

Handles the ADS-B Type Codes:
- TC 1-4:   Aircraft identification (callsign)
- TC 9-18:  Airborne position (barometric alt + CPR-encoded lat/lon)
- TC 19:    Airborne velocity (ground speed or airspeed + heading)
- TC 20-22: Airborne position (GNSS altitude)

Any other type code yields a DecodeResult with ``data=None``. Frames that are
not DF17/18, or are not 14/28 hex chars, yield None.

The encode direction packs DO-260B-compliant ME fields (real CPR, Q=1 or
Gillham altitude, velocity components) into 112-bit frames with a stub parity.
"""

from __future__ import annotations

import logging
import time

from . import altitude, cpr, identification, velocity
from .frame_parser import ModeFrame, assemble_frame, classify, parse_frame
from .messages import DecodedMsg, DecodeResult, PositionMsg
from .nic import nic_for_type_code

logger = logging.getLogger(__name__)

DEFAULT_CA = 5  # Airborne, level 2+ transponder


def now_ms() -> float:
    return time.time() * 1000


class MessageCodec:
    """Stateful DF17/18 codec.

    Holds the CPR cache (per ICAO) and the receiver reference position used
    for local CPR decode. Deterministic for identical (hex, timestamp, cache,
    reference).
    """

    def __init__(
        self,
        ref_lat: float | None = None,
        ref_lon: float | None = None,
        max_pair_age_ms: float = cpr.MAX_PAIR_AGE_MS,
    ):
        self.cpr = cpr.CprPositionCodec(
            ref_lat=ref_lat, ref_lon=ref_lon, max_pair_age_ms=max_pair_age_ms
        )

    # --- State ---

    def set_reference_position(self, lat: float, lon: float) -> None:
        """Set the fallback reference for local CPR decode (receiver location)."""
        self.cpr.set_reference_position(lat, lon)

    def clear_cache(self) -> None:
        """Drop all per-aircraft CPR state. Required before replay rewinds."""
        self.cpr.clear()

    def last_position(self, icao: str) -> tuple[float, float] | None:
        return self.cpr.last_position(icao)

    # --- Decode ---

    def decode(
        self,
        hex_str: str,
        timestamp: float | None = None,
        icao: str | None = None,
    ) -> DecodeResult | None:
        """Decode a hex frame.

        Args:
            hex_str: 28 hex chars (DF17/18 frame) or 14 hex chars (ME only).
            timestamp: Reception time in ms. Defaults to the wall clock.
            icao: Address for ME-only input.

        Returns:
            DecodeResult, or None for malformed or non-ADS-B frames.
        """
        frame = parse_frame(hex_str, icao=icao)
        if frame is None:
            logger.debug("Rejected frame with bad length or characters: %r", hex_str)
            return None
        return self.decode_frame(frame, timestamp)

    def decode_frame(self, frame: ModeFrame, timestamp: float | None = None) -> DecodeResult | None:
        if timestamp is None:
            timestamp = now_ms()

        classified = classify(frame)
        if classified is None:
            return None
        _, tc = classified

        try:
            data = self._decode_payload(frame, tc, timestamp)
        except (ArithmeticError, ValueError) as e:
            logger.warning("Failed to decode %s: %s", frame.raw, e)
            data = None

        return DecodeResult(icao=frame.icao, data=data, timestamp=timestamp)

    def _decode_payload(self, frame: ModeFrame, tc: int, timestamp: float) -> DecodedMsg | None:
        me = frame.me
        if 1 <= tc <= 4:
            return identification.decode_identification(me, tc)
        if 9 <= tc <= 18:
            return self._decode_position(frame, tc, timestamp, gnss=False)
        if tc == velocity.TYPE_CODE:
            return velocity.decode_velocity(me)
        if 20 <= tc <= 22:
            return self._decode_position(frame, tc, timestamp, gnss=True)
        return None

    def _decode_position(self, frame: ModeFrame, tc: int, timestamp: float, gnss: bool) -> PositionMsg:
        """Decode TC 9-18/20-22 (airborne position).

        ME field layout (56 bits):
        - TC (5 bits): Type code
        - SS (2 bits): Surveillance status
        - SAF/NIC-B (1 bit)
        - ALT (12 bits): Altitude code
        - T (1 bit): UTC sync flag
        - F (1 bit): CPR format (0=even, 1=odd)
        - LAT_CPR (17 bits): CPR latitude
        - LON_CPR (17 bits): CPR longitude
        """
        me = frame.me
        ss = (me >> 49) & 0x03
        nic_b = (me >> 48) & 0x01
        alt_bits = (me >> 36) & 0x0FFF

        if gnss:
            altitude_ft = altitude.decode_gnss_altitude(alt_bits)
        else:
            altitude_ft = altitude.decode_altitude(alt_bits)

        cpr_odd = (me >> 34) & 1
        cpr_lat = (me >> 17) & 0x1FFFF
        cpr_lon = me & 0x1FFFF

        position = self.cpr.decode(frame.icao, cpr_lat, cpr_lon, bool(cpr_odd), timestamp)
        lat, lng = position if position is not None else (0.0, 0.0)

        return PositionMsg(
            lat=lat,
            lng=lng,
            altitude=altitude_ft,
            altitude_type="gnss" if gnss else "baro",
            nic=nic_for_type_code(tc),
            cpr_odd_even=cpr_odd,
            cpr_lat=cpr_lat,
            cpr_lon=cpr_lon,
            surveillance_status=ss,
            nic_b=nic_b,
            type_code=tc,
        )

    # --- Encode ---

    @staticmethod
    def encode_position(
        icao: str,
        lat: float,
        lon: float,
        altitude_ft: float,
        cpr_odd: bool = False,
        type_code: int = 11,
        gillham: bool = False,
        df: int = 17,
        ca: int = DEFAULT_CA,
    ) -> str:
        """Synthesize an airborne position frame."""
        if not (9 <= type_code <= 18 or 20 <= type_code <= 22):
            raise ValueError(f"Not an airborne position type code: {type_code}")

        if type_code >= 20:
            alt_bits = altitude.encode_gnss_altitude(altitude_ft)
        elif gillham:
            alt_bits = altitude.encode_gillham(altitude_ft)
        else:
            alt_bits = altitude.encode_altitude(altitude_ft)

        cpr_lat, cpr_lon = cpr.encode(lat, lon, cpr_odd)

        me = type_code << 51
        me |= alt_bits << 36
        me |= (1 if cpr_odd else 0) << 34
        me |= cpr_lat << 17
        me |= cpr_lon
        return assemble_frame(df, ca, icao, me)

    @staticmethod
    def encode_velocity(
        icao: str,
        speed: float,
        heading: float,
        vertical_rate: float | None = None,
        supersonic: bool = False,
        df: int = 17,
        ca: int = DEFAULT_CA,
    ) -> str:
        """Synthesize a ground-speed velocity frame (subtype 1/2)."""
        me = velocity.encode_ground_velocity(speed, heading, vertical_rate, supersonic)
        return assemble_frame(df, ca, icao, me)

    @staticmethod
    def encode_airspeed(
        icao: str,
        speed: float,
        heading: float | None,
        vertical_rate: float | None = None,
        tas: bool = True,
        supersonic: bool = False,
        df: int = 17,
        ca: int = DEFAULT_CA,
    ) -> str:
        """Synthesize an airspeed velocity frame (subtype 3/4)."""
        me = velocity.encode_airspeed(speed, heading, vertical_rate, tas, supersonic)
        return assemble_frame(df, ca, icao, me)

    @staticmethod
    def encode_identification(
        icao: str,
        callsign: str,
        category: int = 0,
        type_code: int = 4,
        df: int = 17,
        ca: int = DEFAULT_CA,
    ) -> str:
        """Synthesize an identification frame."""
        me = identification.encode_identification(callsign, category, type_code)
        return assemble_frame(df, ca, icao, me)
