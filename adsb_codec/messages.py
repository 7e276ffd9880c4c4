"""Typed results produced by the decoder.

Output: frozen dataclasses (IdentificationMsg, PositionMsg, VelocityMsg)
wrapped in a DecodeResult that carries the ICAO address.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class IdentificationMsg:
    """TC 1-4: Aircraft identification (callsign)."""

    callsign: str
    category: int  # (TC - 1) * 8 + CA


@dataclass(frozen=True)
class PositionMsg:
    """TC 9-18 (baro) or TC 20-22 (GNSS): airborne position.

    ``lat``/``lng`` are (0.0, 0.0) until the CPR fields can be resolved,
    either from an even/odd pair or from a reference position.
    """

    lat: float
    lng: float
    altitude: int
    altitude_type: str  # "baro" or "gnss"
    nic: int
    cpr_odd_even: int  # 0 = even, 1 = odd
    cpr_lat: int  # 17-bit CPR latitude
    cpr_lon: int  # 17-bit CPR longitude
    surveillance_status: int = 0
    nic_b: int = 0
    type_code: int = 0

    @property
    def resolved(self) -> bool:
        return not (self.lat == 0.0 and self.lng == 0.0)


@dataclass(frozen=True)
class VelocityMsg:
    """TC 19: Airborne velocity."""

    speed: float  # knots
    heading: float  # degrees, [0, 360)
    vertical_rate: int  # ft/min, positive = climb
    sub_type: int
    speed_type: str  # "ground", "IAS" or "TAS"
    vertical_rate_available: bool = True  # False when the raw rate field is 0


DecodedMsg = IdentificationMsg | PositionMsg | VelocityMsg


@dataclass(frozen=True)
class DecodeResult:
    """A recognized DF17/18 frame. ``data`` is None for unmodeled type codes."""

    icao: str
    data: DecodedMsg | None
    timestamp: float = 0.0  # milliseconds

    def to_dict(self) -> dict:
        payload = None
        kind = None
        if self.data is not None:
            payload = asdict(self.data)
            kind = {
                IdentificationMsg: "identification",
                PositionMsg: "position",
                VelocityMsg: "velocity",
            }[type(self.data)]
        return {
            "icao": self.icao,
            "type": kind,
            "data": payload,
            "timestamp": self.timestamp,
        }
