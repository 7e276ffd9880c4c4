"""Shared test fixtures for adsb-codec.

Provides:
- A codec with and without a receiver reference
- An isolated config directory (never touches ~/.adsb-codec)
- Receiver location fixtures
"""

import pytest

from adsb_codec.decoder import MessageCodec


# Amsterdam area, close to the Riddle position vectors
RECEIVER_LAT = 52.258
RECEIVER_LON = 3.918


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config module at a per-test directory."""
    monkeypatch.setattr("adsb_codec.config.CONFIG_DIR", tmp_path / ".adsb-codec")
    monkeypatch.setattr("adsb_codec.config.CONFIG_FILE", tmp_path / ".adsb-codec" / "config.yaml")
    return tmp_path / ".adsb-codec" / "config.yaml"


@pytest.fixture
def receiver_location():
    """Default receiver coordinates (Amsterdam area)."""
    return (RECEIVER_LAT, RECEIVER_LON)


@pytest.fixture
def codec():
    """Codec with no reference position."""
    return MessageCodec()


@pytest.fixture
def ref_codec():
    """Codec with the receiver reference set."""
    return MessageCodec(ref_lat=RECEIVER_LAT, ref_lon=RECEIVER_LON)
