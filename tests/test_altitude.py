"""Tests for the 12-bit altitude field — 25-ft binary, Gillham, GNSS."""

import pytest

from adsb_codec.altitude import (
    INVALID_ALTITUDE,
    decode_altitude,
    decode_gillham,
    decode_gnss_altitude,
    encode_altitude,
    encode_gillham,
    encode_gnss_altitude,
)
from tests.fixtures.known_frames import GILLHAM_VECTORS


class TestBinaryAltitude:
    """Q=1: 25-ft increments."""

    def test_riddle_field(self):
        # ALT field of 8D40621D58C382D690C8AC2863A7
        assert decode_altitude(0xC38) == 38000

    def test_lowest(self):
        assert decode_altitude(0x010) == -1000

    def test_round_trip_every_25ft(self):
        for ft in range(-1000, 50176, 25):
            bits = encode_altitude(ft)
            assert bits & 0x010, "Q bit must be set"
            assert decode_altitude(bits) == ft

    def test_rounds_to_nearest_step(self):
        assert decode_altitude(encode_altitude(10012)) == 10000
        assert decode_altitude(encode_altitude(10013)) == 10025

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            encode_altitude(-1100)
        with pytest.raises(ValueError):
            encode_altitude(60000)


class TestGillhamAltitude:
    """Q=0: 100-ft Gillham code."""

    @pytest.mark.parametrize("alt_bits, expected", GILLHAM_VECTORS)
    def test_known_codes(self, alt_bits, expected):
        assert decode_altitude(alt_bits) == expected
        assert decode_gillham(alt_bits) == expected

    def test_all_zero_is_invalid(self):
        assert decode_altitude(0x000) == INVALID_ALTITUDE

    def test_illegal_c_code(self):
        # C1 C2 C4 = 101 with a valid 500-ft index
        assert decode_gillham(0x362 | 0x800 | 0x080) == INVALID_ALTITUDE

    def test_round_trip_every_100ft(self):
        for ft in range(-1200, 126800, 100):
            bits = encode_gillham(ft)
            assert not bits & 0x010, "Q bit must be clear"
            assert decode_altitude(bits) == ft, f"{ft} ft -> {bits:#05x}"

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            encode_gillham(-1300)
        with pytest.raises(ValueError):
            encode_gillham(126800)


class TestGnssAltitude:
    def test_no_q_bit(self):
        assert decode_gnss_altitude(0x000) == -1000
        assert decode_gnss_altitude(0xFFF) == 4095 * 25 - 1000

    def test_round_trip(self):
        for ft in (-1000, 0, 10000, 38000, 101375):
            assert decode_gnss_altitude(encode_gnss_altitude(ft)) == ft
