"""Mock ADS-B traffic generator.

Places a deterministic set of aircraft around a center point, moves them by
dead reckoning, and emits hex frames for each one.

Two output formats:
- Simplified (default): the demo packing below, read back by decode_simulated().
  It is NOT DO-260B: lat/lon are linear 17-bit fractions of the globe, the
  NIC sits in the surveillance-status bits, and velocity is speed plus a 7-bit
  heading. MessageCodec.decode() sees these frames as TC 11 / TC 19 with
  meaningless CPR and altitude fields.
- Compliant: real CPR (alternating even/odd), 25-ft altitude, velocity
  components and identification frames, built with MessageCodec encoders.

Simplified position ME layout (bit shifts from LSB):
    51: TC=11 (5)   47: NIC (4)   35: ALT (12)   34: F=0
    17: LAT (17)    0: LON (17)
Simplified velocity ME layout:
    51: TC=19 (5)   48: subtype=1 (3)   30: speed (10)   20: heading (7)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .decoder import DEFAULT_CA, MessageCodec
from .frame_parser import assemble_frame, parse_frame
from .identification import decode_identification
from .messages import DecodeResult, PositionMsg, VelocityMsg
from .nic import type_code_for_nic

# Shenzhen, the default simulation center
DEFAULT_CENTER = (22.5431, 114.0579)

AIRLINES = ("CZ", "CA", "MU", "BZ", "FM", "ZH", "HU", "SC", "3U", "GS")

# ~137.5 degrees, spreads aircraft evenly without spiral arms
GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))

_SIM_SCALE = 131071


@dataclass
class SimAircraft:
    """Ground truth for one simulated aircraft."""

    id: str  # ICAO address
    callsign: str
    lat: float
    lng: float
    altitude: float  # ft
    speed: float  # kt
    heading: float  # deg
    nic: int  # 0-11


@dataclass(frozen=True)
class SimEvent:
    """One synthesized frame."""

    hex_message: str
    aircraft_id: str
    message_type: str  # "position", "velocity" or "identification"


def generate_position_message(aircraft: SimAircraft) -> str:
    """Simplified TC 11 position frame (see module docstring)."""
    alt_encoded = int((aircraft.altitude + 1000) / 25) & 0xFFF
    lat_encoded = int((aircraft.lat + 90) / 180 * _SIM_SCALE) & 0x1FFFF
    lng_encoded = int((aircraft.lng + 180) / 360 * _SIM_SCALE) & 0x1FFFF

    payload = 11 << 51
    payload |= (aircraft.nic & 0xF) << 47
    payload |= alt_encoded << 35
    payload |= lat_encoded << 17
    payload |= lng_encoded
    return assemble_frame(17, DEFAULT_CA, aircraft.id, payload)


def generate_velocity_message(aircraft: SimAircraft) -> str:
    """Simplified TC 19 velocity frame (see module docstring)."""
    speed_encoded = int(aircraft.speed) & 0x3FF
    heading_encoded = int(aircraft.heading / 360 * 127) & 0x7F

    payload = 19 << 51
    payload |= 1 << 48
    payload |= speed_encoded << 30
    payload |= heading_encoded << 20
    return assemble_frame(17, DEFAULT_CA, aircraft.id, payload)


def decode_simulated(hex_str: str) -> DecodeResult | None:
    """Read back a simplified simulator frame. Stateless."""
    frame = parse_frame(hex_str)
    if frame is None or not frame.is_long or frame.df != 17:
        return None

    me = frame.me
    tc = frame.type_code

    if 9 <= tc <= 18:
        lat_encoded = (me >> 17) & 0x1FFFF
        lng_encoded = me & 0x1FFFF
        data = PositionMsg(
            lat=lat_encoded / _SIM_SCALE * 180 - 90,
            lng=lng_encoded / _SIM_SCALE * 360 - 180,
            altitude=((me >> 35) & 0xFFF) * 25 - 1000,
            altitude_type="baro",
            nic=(me >> 47) & 0xF,
            cpr_odd_even=0,
            cpr_lat=lat_encoded,
            cpr_lon=lng_encoded,
            type_code=tc,
        )
        return DecodeResult(icao=frame.icao, data=data)

    if tc == 19:
        data = VelocityMsg(
            speed=float((me >> 30) & 0x3FF),
            heading=((me >> 20) & 0x7F) / 127 * 360,
            vertical_rate=0,
            sub_type=1,
            speed_type="ground",
            vertical_rate_available=False,
        )
        return DecodeResult(icao=frame.icao, data=data)

    if 1 <= tc <= 4:
        return DecodeResult(icao=frame.icao, data=decode_identification(me, tc))

    return DecodeResult(icao=frame.icao, data=None)


class AdsbSimulator:
    """Deterministic mock traffic around a center point."""

    def __init__(
        self,
        center_lat: float = DEFAULT_CENTER[0],
        center_lng: float = DEFAULT_CENTER[1],
        seed: int | None = 0,
    ):
        self.center_lat = center_lat
        self.center_lng = center_lng
        self.aircraft: list[SimAircraft] = []
        self._rng = np.random.default_rng(seed)
        self._odd = False

    def generate_mock_aircraft(self, count: int) -> list[SimAircraft]:
        """Create ``count`` aircraft spread 0.15-0.6 degrees around the center."""
        self.aircraft.clear()

        for i in range(count):
            angle = i * GOLDEN_ANGLE
            spread = (i * 7919 + 104729) % 10000  # prime-based pseudo random
            distance = 0.15 + spread / 10000.0 * 0.45

            self.aircraft.append(
                SimAircraft(
                    id=f"{0x780000 + i * 0x1111:06X}",
                    callsign=f"{AIRLINES[i % len(AIRLINES)]}{1000 + (i * 111) % 9000}",
                    lat=self.center_lat + distance * math.sin(angle),
                    lng=self.center_lng + distance * math.cos(angle),
                    altitude=5000.0 + (i * 2749) % 10000,
                    speed=400.0 + (i * 3571) % 250,
                    heading=float((i * 6997 + 99991) % 360),
                    nic=5 + i % 7,
                )
            )
        return self.aircraft

    def update_positions(self, dt: float = 1.0) -> None:
        """Advance every aircraft by ``dt`` seconds with small random drift."""
        for ac in self.aircraft:
            # ~111 km per degree; speed is treated as km/h here
            step = ac.speed / 3600.0 / 111.0 * dt
            rad = math.radians(90.0 - ac.heading)
            ac.lat += step * math.sin(rad)
            ac.lng += step * math.cos(rad)

            # NIC fluctuation
            if self._rng.random() > 0.9:
                ac.nic = int(np.clip(ac.nic + self._rng.integers(-1, 2), 0, 11))

            ac.altitude = float(np.clip(ac.altitude + self._rng.integers(-20, 21), 3000.0, 12000.0))
            ac.heading = float((ac.heading + self._rng.integers(-1, 2) + 360.0) % 360.0)

    def generate_all_messages(self, compliant: bool = False) -> list[SimEvent]:
        """Emit one position and one velocity frame per aircraft.

        Compliant mode also emits identification frames and alternates CPR
        parity on every call, so two consecutive calls give a global-decodable
        pair per aircraft.
        """
        events = []
        for ac in self.aircraft:
            if compliant:
                events.append(SimEvent(
                    MessageCodec.encode_identification(ac.id, ac.callsign),
                    ac.id, "identification",
                ))
                events.append(SimEvent(
                    MessageCodec.encode_position(
                        ac.id, ac.lat, ac.lng, ac.altitude,
                        cpr_odd=self._odd, type_code=type_code_for_nic(ac.nic),
                    ),
                    ac.id, "position",
                ))
                events.append(SimEvent(
                    MessageCodec.encode_velocity(ac.id, ac.speed, ac.heading, 0),
                    ac.id, "velocity",
                ))
            else:
                events.append(SimEvent(generate_position_message(ac), ac.id, "position"))
                events.append(SimEvent(generate_velocity_message(ac), ac.id, "velocity"))

        if compliant:
            self._odd = not self._odd
        return events
