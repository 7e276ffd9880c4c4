"""Configuration file management for adsb-codec.

Reads/writes ~/.adsb-codec/config.yaml with the receiver reference position,
CPR pairing window, simulator defaults, and decode API address. The file is
a flat two-level mapping, so a small line parser stands in for PyYAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".adsb-codec"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


def _default_config() -> dict:
    return {
        "receiver": {
            "name": "default",
            "lat": None,
            "lon": None,
        },
        "cpr": {
            "max_pair_age_ms": 10000,
        },
        "simulator": {
            "center_lat": 22.5431,
            "center_lng": 114.0579,
            "aircraft_count": 10,
            "seed": 0,
        },
        "api": {
            "host": "127.0.0.1",
            "port": 8080,
        },
    }


def _parse_value(val: str):
    if val in ("null", "~", ""):
        return None
    if val in ("true", "false"):
        return val == "true"
    if len(val) >= 2 and val[0] == val[-1] == '"':
        return val[1:-1]
    for cast in (int, float):
        try:
            return cast(val)
        except ValueError:
            pass
    return val


def _format_value(val) -> str:
    if val is None:
        return "null"
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, str):
        return f'"{val}"'
    return str(val)


def load_config() -> dict:
    """Load config from ~/.adsb-codec/config.yaml over the defaults.

    Only ``section:`` headers and indented ``key: value`` lines under them
    are read. Unknown sections and unindented scalars are skipped.
    """
    config = _default_config()
    if not CONFIG_FILE.exists():
        return config

    try:
        lines = CONFIG_FILE.read_text().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s, using defaults: %s", CONFIG_FILE, e)
        return config

    section = None
    for lineno, line in enumerate(lines, 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, val = stripped.partition(":")
        if not sep:
            logger.debug("%s:%d: no ':' in line, skipped", CONFIG_FILE, lineno)
            continue
        key, val = key.strip(), val.strip()

        if not line.startswith(" "):
            section = config.get(key) if not val else None
            if not isinstance(section, dict):
                section = None
                logger.debug("%s:%d: unknown entry '%s' skipped", CONFIG_FILE, lineno, key)
        elif section is not None:
            section[key] = _parse_value(val)

    return config


def save_config(config: dict) -> Path:
    """Save config to ~/.adsb-codec/config.yaml.

    Returns the path to the config file.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    lines = ["# adsb-codec configuration", ""]
    for section, values in config.items():
        if not isinstance(values, dict):
            continue
        lines.append(f"{section}:")
        lines.extend(f"  {key}: {_format_value(val)}" for key, val in values.items())
        lines.append("")

    CONFIG_FILE.write_text("\n".join(lines) + "\n")
    return CONFIG_FILE


def receiver_reference(config: dict) -> tuple[float, float] | None:
    """(lat, lon) of the configured receiver, or None if either is unset."""
    receiver = config.get("receiver") or {}
    lat, lon = receiver.get("lat"), receiver.get("lon")
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return None
    return (float(lat), float(lon))
