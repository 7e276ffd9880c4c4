"""Compact Position Reporting — the hardest part of ADS-B.

Decodes 17-bit CPR-encoded latitude/longitude into geographic coordinates.

Two decode modes:
- Global decode: Requires even+odd frame pair within 10 seconds. No reference needed.
  Determines zone index from both frames, computes precise lat/lon (~5.1m resolution).
- Local decode: Single frame + reference position within 180nm.
  Uses reference to determine zone, decodes relative position.

Key constants:
- NZ = 15 (number of latitude zones per hemisphere for even frames)
- Nb = 17 (bits per coordinate)
- Dlat_even = 360 / (4 * NZ) = 6.0 degrees
- Dlat_odd = 360 / (4 * NZ - 1) = 360/59 ~ 6.1017 degrees

Edge cases: zone boundary crossings, polar regions (NL=1), antimeridian wrapping.

CprPositionCodec keeps the per-aircraft state (latest even frame, latest odd
frame, last resolved position) keyed by the integer ICAO address. Timestamps
are milliseconds.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)

NZ = 15  # Number of latitude zones per hemisphere
NB = 17  # Bits per coordinate
CPR_MAX = 2**NB  # 131072

D_LAT_EVEN = 360.0 / (4 * NZ)  # 6.0 degrees
D_LAT_ODD = 360.0 / (4 * NZ - 1)  # ~6.1017 degrees

# Maximum time between even/odd frames for global decode (milliseconds)
MAX_PAIR_AGE_MS = 10_000.0

_MAX_NL = 4 * NZ - 1  # 59 zones in the equatorial band


def nl(lat: float) -> int:
    """Number of longitude zones at a given latitude (NL function).

    Ranges from NL=1 near poles to NL=59 at equator. The closed form reaches
    exactly 60 at the equator, so the result is clamped to 59.
    """
    if abs(lat) >= 87.0:
        return 1

    # NL formula from ICAO Doc 9871
    a = 1 - math.cos(math.pi / (2 * NZ))
    b = math.cos(math.pi / 180 * abs(lat)) ** 2
    zones = math.floor(2 * math.pi / math.acos(1 - a / b))
    return min(max(zones, 1), _MAX_NL)


def _mod(x: float, y: float) -> float:
    """Modulo that always returns non-negative result."""
    return x - y * math.floor(x / y)


def _normalize_lon(lon: float) -> float:
    """Wrap longitude into (-180, 180]."""
    lon = _mod(lon, 360.0)
    if lon > 180:
        lon -= 360
    return lon


def global_decode(
    lat_even: int,
    lon_even: int,
    lat_odd: int,
    lon_odd: int,
    use_odd: bool,
) -> tuple[float, float] | None:
    """Global CPR decode from an even/odd frame pair.

    Args:
        lat_even: 17-bit CPR latitude from even frame
        lon_even: 17-bit CPR longitude from even frame
        lat_odd: 17-bit CPR latitude from odd frame
        lon_odd: 17-bit CPR longitude from odd frame
        use_odd: Resolve to the odd frame's position (the more recent one)

    Returns:
        (latitude, longitude) in degrees, or None if the pair straddles an
        NL boundary or yields an impossible latitude.
    """
    lat_even_cpr = lat_even / CPR_MAX
    lon_even_cpr = lon_even / CPR_MAX
    lat_odd_cpr = lat_odd / CPR_MAX
    lon_odd_cpr = lon_odd / CPR_MAX

    # Latitude zone index
    j = math.floor(59 * lat_even_cpr - 60 * lat_odd_cpr + 0.5)

    lat_e = D_LAT_EVEN * (_mod(j, 60) + lat_even_cpr)
    lat_o = D_LAT_ODD * (_mod(j, 59) + lat_odd_cpr)

    # Southern hemisphere
    if lat_e >= 270:
        lat_e -= 360
    if lat_o >= 270:
        lat_o -= 360

    if abs(lat_e) > 90 or abs(lat_o) > 90:
        return None

    # Both latitudes must fall in the same longitude-zone band
    if nl(lat_e) != nl(lat_o):
        return None

    lat = lat_o if use_odd else lat_e
    nl_lat = nl(lat)
    n_lon = max(nl_lat - (1 if use_odd else 0), 1)
    dlon = 360.0 / n_lon

    m = math.floor(lon_even_cpr * (nl_lat - 1) - lon_odd_cpr * nl_lat + 0.5)
    lon = dlon * (_mod(m, n_lon) + (lon_odd_cpr if use_odd else lon_even_cpr))

    return (lat, _normalize_lon(lon))


def local_decode(
    cpr_lat: int,
    cpr_lon: int,
    cpr_odd: bool,
    ref_lat: float,
    ref_lon: float,
) -> tuple[float, float] | None:
    """Local CPR decode using a reference position.

    Valid when the aircraft is within ~180nm of the reference.

    Args:
        cpr_lat: 17-bit CPR latitude
        cpr_lon: 17-bit CPR longitude
        cpr_odd: True if odd frame, False if even
        ref_lat: Reference latitude in degrees
        ref_lon: Reference longitude in degrees

    Returns:
        (latitude, longitude) in degrees, or None if the latitude is off the globe.
    """
    i = 1 if cpr_odd else 0
    dlat = 360.0 / (4 * NZ - i)

    cpr_lat_norm = cpr_lat / CPR_MAX
    cpr_lon_norm = cpr_lon / CPR_MAX

    # Latitude zone index from reference
    j = math.floor(ref_lat / dlat) + math.floor(
        0.5 + _mod(ref_lat, dlat) / dlat - cpr_lat_norm
    )
    lat = dlat * (j + cpr_lat_norm)
    if abs(lat) > 90:
        return None

    n_lon = max(nl(lat) - i, 1)
    dlon = 360.0 / n_lon

    # Longitude zone index from reference
    m = math.floor(ref_lon / dlon) + math.floor(
        0.5 + _mod(ref_lon, dlon) / dlon - cpr_lon_norm
    )
    lon = dlon * (m + cpr_lon_norm)

    return (lat, _normalize_lon(lon))


def encode(lat: float, lon: float, cpr_odd: bool) -> tuple[int, int]:
    """Encode a position into 17-bit CPR (lat, lon) for an even or odd frame."""
    i = 1 if cpr_odd else 0
    dlat = 360.0 / (4 * NZ - i)

    yz = math.floor(CPR_MAX * _mod(lat, dlat) / dlat + 0.5)
    r_lat = dlat * (yz / CPR_MAX + math.floor(lat / dlat))

    n_lon = max(nl(r_lat) - i, 1)
    dlon = 360.0 / n_lon
    xz = math.floor(CPR_MAX * _mod(lon, dlon) / dlon + 0.5)

    return (yz % CPR_MAX, xz % CPR_MAX)


def _icao_key(icao: str | int) -> int:
    if isinstance(icao, int):
        return icao & 0xFFFFFF
    return int(icao, 16)


@dataclass
class CprFrame:
    """One CPR-encoded position as received."""

    cpr_lat: int
    cpr_lon: int
    received_at: float  # ms


@dataclass
class CprCacheEntry:
    """Per-aircraft CPR state."""

    even: CprFrame | None = None
    odd: CprFrame | None = None
    last_lat: float | None = None
    last_lon: float | None = None
    last_seen: float = 0.0

    @property
    def has_position(self) -> bool:
        return self.last_lat is not None and self.last_lon is not None


class CprPositionCodec:
    """Resolve CPR frames into positions, one cache entry per aircraft.

    Resolution order for each new frame:
    1. Global decode with the opposite-parity frame (within the pair window)
    2. Local decode against the aircraft's last resolved position
    3. Local decode against the receiver reference position, if set
    """

    def __init__(
        self,
        ref_lat: float | None = None,
        ref_lon: float | None = None,
        max_pair_age_ms: float = MAX_PAIR_AGE_MS,
    ):
        self.ref_lat = ref_lat
        self.ref_lon = ref_lon
        self.max_pair_age_ms = max_pair_age_ms
        self._cache: dict[int, CprCacheEntry] = {}

    def set_reference_position(self, lat: float, lon: float) -> None:
        self.ref_lat = lat
        self.ref_lon = lon

    @property
    def reference(self) -> tuple[float, float] | None:
        if self.ref_lat is None or self.ref_lon is None:
            return None
        return (self.ref_lat, self.ref_lon)

    def _store(self, icao: str | int, cpr_lat: int, cpr_lon: int, cpr_odd: bool,
               timestamp: float) -> CprCacheEntry:
        key = _icao_key(icao)
        entry = self._cache.get(key)
        if entry is None:
            entry = CprCacheEntry()
            self._cache[key] = entry

        frame = CprFrame(cpr_lat=cpr_lat, cpr_lon=cpr_lon, received_at=timestamp)
        if cpr_odd:
            entry.odd = frame
        else:
            entry.even = frame
        entry.last_seen = max(entry.last_seen, timestamp)
        return entry

    def _pair_decode(self, entry: CprCacheEntry) -> tuple[float, float] | None:
        even, odd = entry.even, entry.odd
        if even is None or odd is None:
            return None
        if abs(even.received_at - odd.received_at) > self.max_pair_age_ms:
            logger.debug("CPR pair too far apart: %.0f ms", abs(even.received_at - odd.received_at))
            return None

        # Resolve to the most recent frame; equal timestamps resolve to even
        use_odd = odd.received_at > even.received_at

        result = global_decode(even.cpr_lat, even.cpr_lon, odd.cpr_lat, odd.cpr_lon, use_odd)
        if result is None:
            logger.debug("CPR pair straddles an NL boundary")
        return result

    def decode_global(
        self,
        icao: str | int,
        cpr_lat: int,
        cpr_lon: int,
        cpr_odd: bool,
        timestamp: float,
    ) -> tuple[float, float] | None:
        """Store a frame and resolve it from its pair or the last known position."""
        entry = self._store(icao, cpr_lat, cpr_lon, cpr_odd, timestamp)

        position = self._pair_decode(entry)
        if position is None and entry.has_position:
            position = local_decode(cpr_lat, cpr_lon, cpr_odd, entry.last_lat, entry.last_lon)

        if position is not None:
            entry.last_lat, entry.last_lon = position
        return position

    def decode_local(
        self,
        icao: str | int,
        cpr_lat: int,
        cpr_lon: int,
        cpr_odd: bool,
        ref_lat: float,
        ref_lon: float,
        timestamp: float,
    ) -> tuple[float, float] | None:
        """Store a frame and resolve it against an explicit reference."""
        entry = self._store(icao, cpr_lat, cpr_lon, cpr_odd, timestamp)

        position = local_decode(cpr_lat, cpr_lon, cpr_odd, ref_lat, ref_lon)
        if position is not None:
            entry.last_lat, entry.last_lon = position
        return position

    def decode(
        self,
        icao: str | int,
        cpr_lat: int,
        cpr_lon: int,
        cpr_odd: bool,
        timestamp: float,
    ) -> tuple[float, float] | None:
        """Resolve a position frame, or None if no reference material exists yet."""
        position = self.decode_global(icao, cpr_lat, cpr_lon, cpr_odd, timestamp)
        if position is None and self.reference is not None:
            position = self.decode_local(
                icao, cpr_lat, cpr_lon, cpr_odd, self.ref_lat, self.ref_lon, timestamp
            )
        if position is None:
            logger.debug("Unresolved CPR position for %s", icao)
        return position

    def last_position(self, icao: str | int) -> tuple[float, float] | None:
        entry = self._cache.get(_icao_key(icao))
        if entry is None or not entry.has_position:
            return None
        return (entry.last_lat, entry.last_lon)

    def entry(self, icao: str | int) -> CprCacheEntry | None:
        return self._cache.get(_icao_key(icao))

    def clear(self) -> None:
        """Drop all per-aircraft state."""
        self._cache.clear()

    def prune(self, now: float, max_age_ms: float) -> int:
        """Remove entries not updated for max_age_ms. Returns count removed."""
        expired = [k for k, v in self._cache.items() if now - v.last_seen > max_age_ms]
        for k in expired:
            del self._cache[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._cache)
