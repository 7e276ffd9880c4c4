"""TC 19: Airborne velocity.

Subtypes 1-2: Ground speed (E-W and N-S velocity components)
Subtypes 3-4: Airspeed (heading + IAS or TAS)
Subtypes 2 and 4 are the supersonic variants, 4-knot resolution.
All subtypes carry the vertical rate.

ME field layout (bit shifts from the LSB of the 56-bit ME):
- 51: TC (5)       48: subtype (3)
- 42: E-W direction / heading available
- 32: E-W velocity / heading (10)
- 31: N-S direction / airspeed type (0=IAS, 1=TAS)
- 21: N-S velocity / airspeed (10)
- 20: vertical rate source   19: vertical rate sign   10: vertical rate (9)
"""

from __future__ import annotations

import math

from .messages import VelocityMsg

TYPE_CODE = 19


def _vertical_rate(me: int) -> tuple[int, bool]:
    """(rate, available). Raw 0 flags no data but still maps through (raw - 1) * 64."""
    vr_sign = (me >> 19) & 1  # 0=up, 1=down
    vr_raw = (me >> 10) & 0x1FF
    vrate = (vr_raw - 1) * 64
    return (-vrate if vr_sign else vrate), vr_raw != 0


def decode_velocity(me: int) -> VelocityMsg | None:
    """Decode a TC 19 ME field. None for unknown subtypes or missing components."""
    subtype = (me >> 48) & 0x07

    if subtype in (1, 2):
        return _decode_ground_velocity(me, subtype)
    if subtype in (3, 4):
        return _decode_airspeed(me, subtype)
    return None


def _decode_ground_velocity(me: int, subtype: int) -> VelocityMsg | None:
    """Decode ground speed from E-W and N-S components."""
    ew_dir = (me >> 42) & 1  # 0=East, 1=West
    ew_vel = ((me >> 32) & 0x3FF) - 1
    ns_dir = (me >> 31) & 1  # 0=North, 1=South
    ns_vel = ((me >> 21) & 0x3FF) - 1

    if ew_vel < 0 or ns_vel < 0:
        return None

    vx = -ew_vel if ew_dir else ew_vel
    vy = -ns_vel if ns_dir else ns_vel

    speed = math.hypot(vx, vy)
    heading = (math.degrees(math.atan2(vx, vy)) + 360) % 360
    if subtype == 2:
        speed *= 4

    vrate, vrate_available = _vertical_rate(me)
    return VelocityMsg(
        speed=speed,
        heading=heading,
        vertical_rate=vrate,
        vertical_rate_available=vrate_available,
        sub_type=subtype,
        speed_type="ground",
    )


def _decode_airspeed(me: int, subtype: int) -> VelocityMsg:
    """Decode airspeed and heading. The airspeed field is taken as-is, in knots."""
    hdg_available = (me >> 42) & 1
    hdg_raw = (me >> 32) & 0x3FF
    tas = (me >> 31) & 1
    speed_raw = (me >> 21) & 0x3FF

    heading = hdg_raw * 360 / 1024 if hdg_available else 0.0
    speed = float(speed_raw)
    if subtype == 4:
        speed *= 4

    vrate, vrate_available = _vertical_rate(me)
    return VelocityMsg(
        speed=speed,
        heading=heading,
        vertical_rate=vrate,
        vertical_rate_available=vrate_available,
        sub_type=subtype,
        speed_type="TAS" if tas else "IAS",
    )


def _encode_vertical_rate(vertical_rate: float | None) -> int:
    if vertical_rate is None:
        return 0
    raw = min(round(abs(vertical_rate) / 64) + 1, 0x1FF)
    sign = 1 if vertical_rate < 0 else 0
    return (sign << 19) | (raw << 10)


def encode_ground_velocity(
    speed: float,
    heading: float,
    vertical_rate: float | None = None,
    supersonic: bool = False,
) -> int:
    """Encode ground speed (kt) and track (deg) as a subtype 1/2 ME field."""
    scale = 4 if supersonic else 1
    rad = math.radians(heading)
    vx = speed * math.sin(rad) / scale
    vy = speed * math.cos(rad) / scale

    ew = min(round(abs(vx)) + 1, 0x3FF)
    ns = min(round(abs(vy)) + 1, 0x3FF)

    me = TYPE_CODE << 51
    me |= (2 if supersonic else 1) << 48
    me |= (1 if vx < 0 else 0) << 42
    me |= ew << 32
    me |= (1 if vy < 0 else 0) << 31
    me |= ns << 21
    me |= _encode_vertical_rate(vertical_rate)
    return me


def encode_airspeed(
    speed: float,
    heading: float | None,
    vertical_rate: float | None = None,
    tas: bool = True,
    supersonic: bool = False,
) -> int:
    """Encode airspeed (kt) and magnetic heading (deg) as a subtype 3/4 ME field."""
    scale = 4 if supersonic else 1

    me = TYPE_CODE << 51
    me |= (4 if supersonic else 3) << 48
    if heading is not None:
        me |= 1 << 42
        me |= (round(heading % 360 * 1024 / 360) % 1024) << 32
    me |= (1 if tas else 0) << 31
    me |= min(round(speed / scale), 0x3FF) << 21
    me |= _encode_vertical_rate(vertical_rate)
    return me
