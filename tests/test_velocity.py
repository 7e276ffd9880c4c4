"""Tests for TC 19 airborne velocity — ground speed and airspeed subtypes."""

import pytest

from adsb_codec.frame_parser import parse_frame
from adsb_codec.velocity import (
    TYPE_CODE,
    decode_velocity,
    encode_airspeed,
    encode_ground_velocity,
)
from tests.fixtures.known_frames import AIRSPEED_FRAMES, VELOCITY_FRAMES


def _me(hex_str):
    return parse_frame(hex_str).me


class TestGroundSpeed:
    """Subtypes 1-2: E-W / N-S components."""

    def test_known_velocity(self):
        for hex_str, _, speed, heading, vrate in VELOCITY_FRAMES:
            msg = decode_velocity(_me(hex_str))
            assert msg is not None
            assert msg.speed == pytest.approx(speed, abs=0.5)
            assert msg.heading == pytest.approx(heading, abs=0.01)
            assert msg.vertical_rate == vrate
            assert msg.sub_type == 1
            assert msg.speed_type == "ground"

    def test_missing_component(self):
        # E-W velocity raw 0 = no information
        me = encode_ground_velocity(100, 90) & ~(0x3FF << 32)
        assert decode_velocity(me) is None

    @pytest.mark.parametrize("speed, heading", [
        (450, 0), (450, 90), (300, 180), (250, 270), (159, 182.88), (520, 45),
    ])
    def test_encode_decode(self, speed, heading):
        msg = decode_velocity(encode_ground_velocity(speed, heading, vertical_rate=-832))
        assert msg.speed == pytest.approx(speed, abs=1.0)
        assert (msg.heading - heading + 180) % 360 - 180 == pytest.approx(0, abs=0.5)
        assert msg.vertical_rate == -832

    def test_supersonic_scale(self):
        me = encode_ground_velocity(1600, 90, supersonic=True)
        msg = decode_velocity(me)
        assert msg.sub_type == 2
        assert msg.speed == pytest.approx(1600, abs=4.0)

    def test_heading_range(self):
        for heading in range(0, 360, 15):
            msg = decode_velocity(encode_ground_velocity(400, heading))
            assert 0 <= msg.heading < 360


class TestAirspeed:
    """Subtypes 3-4: heading + IAS/TAS."""

    def test_known_airspeed(self):
        for hex_str, _, speed, heading, vrate in AIRSPEED_FRAMES:
            msg = decode_velocity(_me(hex_str))
            assert msg is not None
            assert msg.speed == speed
            assert msg.heading == pytest.approx(heading, abs=0.01)
            assert msg.vertical_rate == vrate
            assert msg.sub_type == 3
            assert msg.speed_type == "TAS"

    def test_ias(self):
        msg = decode_velocity(encode_airspeed(250, 120, tas=False))
        assert msg.speed_type == "IAS"
        assert msg.speed == 250

    def test_airspeed_raw_zero_kept(self):
        me = encode_airspeed(250, 120) & ~(0x3FF << 21)
        msg = decode_velocity(me)
        assert msg is not None
        assert msg.speed == 0.0
        assert msg.heading == pytest.approx(120, abs=0.5)

    def test_airspeed_field_taken_directly(self):
        me = (TYPE_CODE << 51) | (3 << 48) | (1 << 31) | (376 << 21) | (1 << 10)
        assert decode_velocity(me).speed == 376.0
        me4 = (TYPE_CODE << 51) | (4 << 48) | (376 << 21) | (1 << 10)
        assert decode_velocity(me4).speed == 1504.0

    def test_heading_unavailable(self):
        msg = decode_velocity(encode_airspeed(250, None))
        assert msg.heading == 0.0

    def test_supersonic(self):
        msg = decode_velocity(encode_airspeed(1200, 10, supersonic=True))
        assert msg.sub_type == 4
        assert msg.speed == 1200


class TestVerticalRate:
    def test_climb(self):
        msg = decode_velocity(encode_ground_velocity(300, 10, vertical_rate=1536))
        assert msg.vertical_rate == 1536

    def test_level(self):
        msg = decode_velocity(encode_ground_velocity(300, 10, vertical_rate=0))
        assert msg.vertical_rate == 0

    def test_no_information(self):
        msg = decode_velocity(encode_ground_velocity(300, 10))
        assert msg.vertical_rate == -64
        assert not msg.vertical_rate_available

    def test_raw_zero_descending(self):
        me = encode_ground_velocity(300, 10) | (1 << 19)
        msg = decode_velocity(me)
        assert msg.vertical_rate == 64
        assert not msg.vertical_rate_available

    def test_available_flag(self):
        msg = decode_velocity(encode_ground_velocity(300, 10, vertical_rate=0))
        assert msg.vertical_rate_available


class TestSubtype:
    @pytest.mark.parametrize("subtype", [0, 5, 6, 7])
    def test_unknown_subtype(self, subtype):
        me = (TYPE_CODE << 51) | (subtype << 48) | (10 << 32) | (10 << 21)
        assert decode_velocity(me) is None
