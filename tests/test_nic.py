"""Tests for the type code -> NIC table."""

import pytest

from adsb_codec.nic import NIC_BY_TYPE_CODE, nic_for_type_code, type_code_for_nic


class TestNicForTypeCode:
    @pytest.mark.parametrize("tc, nic", [
        (9, 11), (10, 10), (11, 9), (12, 7), (13, 6), (14, 5),
        (15, 4), (16, 3), (17, 2), (18, 0), (20, 11), (21, 10), (22, 0),
    ])
    def test_table(self, tc, nic):
        assert nic_for_type_code(tc) == nic

    @pytest.mark.parametrize("tc", [0, 1, 4, 5, 8, 19, 23, 31])
    def test_non_position_codes(self, tc):
        assert nic_for_type_code(tc) == 0


class TestTypeCodeForNic:
    def test_exact_matches(self):
        for tc in range(9, 19):
            assert nic_for_type_code(type_code_for_nic(NIC_BY_TYPE_CODE[tc])) == NIC_BY_TYPE_CODE[tc]

    def test_nic_9_is_tc_11(self):
        assert type_code_for_nic(9) == 11

    def test_rounds_down(self):
        # No baro type code carries NIC 8 or 1
        assert type_code_for_nic(8) == 12
        assert type_code_for_nic(1) == 18

    def test_gnss(self):
        assert type_code_for_nic(11, gnss=True) == 20
        assert type_code_for_nic(10, gnss=True) == 21
        assert type_code_for_nic(5, gnss=True) == 22
