"""Navigation Integrity Category from the position type code."""

from __future__ import annotations

# TC -> NIC. TC 11 and 16 are ambiguous without the NIC supplement (9/8, 3/2);
# the higher value is reported.
NIC_BY_TYPE_CODE: dict[int, int] = {
    9: 11,  # Rc < 7.5 m
    10: 10,  # Rc < 25 m
    11: 9,  # Rc < 75 m
    12: 7,  # Rc < 0.2 NM
    13: 6,  # Rc < 0.5 NM
    14: 5,  # Rc < 1 NM
    15: 4,  # Rc < 2 NM
    16: 3,  # Rc < 4 NM
    17: 2,  # Rc < 8 NM
    18: 0,  # Rc >= 20 NM or unknown
    20: 11,
    21: 10,
    22: 0,
}


def nic_for_type_code(type_code: int) -> int:
    return NIC_BY_TYPE_CODE.get(type_code, 0)


def type_code_for_nic(nic: int, gnss: bool = False) -> int:
    """Type code with the highest NIC not above ``nic``."""
    codes = range(20, 23) if gnss else range(9, 19)
    for tc in codes:
        if NIC_BY_TYPE_CODE[tc] <= nic:
            return tc
    return codes[-1]
