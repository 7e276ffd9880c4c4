"""Read hex frame logs for ADS-B decoding.

Input formats, one frame per line:
- Plain hex:      8D4840D6202CC371C32CE0576098
- dump1090 raw:   *8D4840D6202CC371C32CE0576098;
- CSV:            8D4840D6202CC371C32CE0576098,1712000000123[,...]

Blank lines and lines starting with ``#`` or ``//`` are skipped, as is a CSV
header row. Timestamps are milliseconds.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)


@dataclass
class RawFrame:
    """A raw Mode S frame before parsing."""

    hex_str: str
    timestamp: float = 0.0  # ms
    line_number: int = 0
    source: str = ""


# Pattern for valid frame hex: 14 chars (ME only) or 28 chars (112-bit)
_HEX_PATTERN = re.compile(r"^[0-9A-Fa-f]{14}$|^[0-9A-Fa-f]{28}$")

# dump1090 raw format: *<hex>;
_DUMP1090_PATTERN = re.compile(r"^\*([0-9A-Fa-f]{14}|[0-9A-Fa-f]{28});$")


def _clean_hex_line(line: str) -> tuple[str, float | None] | None:
    """Extract (hex, timestamp_ms) from a line, or None if it holds no frame.

    Handles:
    - Plain hex: "8D4840D6202CC371C32CE0576098"
    - dump1090 raw: "*8D4840D6202CC371C32CE0576098;"
    - CSV: "8D4840D6202CC371C32CE0576098,1500"
    - With leading/trailing whitespace
    """
    line = line.strip()
    if not line or line.startswith("#") or line.startswith("//"):
        return None

    timestamp = None
    if "," in line:
        fields = [f.strip() for f in line.split(",")]
        line = fields[0]
        if len(fields) > 1 and fields[1]:
            try:
                timestamp = float(fields[1])
            except ValueError:
                return None  # header row or garbage

    # Try dump1090 format first
    m = _DUMP1090_PATTERN.match(line)
    if m:
        return m.group(1).upper(), timestamp

    # Try plain hex
    if _HEX_PATTERN.match(line):
        return line.upper(), timestamp

    return None


class FrameReader:
    """Read hex frames from a file or iterable.

    Accepts hex strings from tools like dump1090 --raw, CSV exports with a
    timestamp column, or any source that produces one hex frame per line.
    """

    def __init__(
        self,
        source: str | Path | Iterable[str],
        label: str = "",
        start_ms: float = 0.0,
        interval_ms: float = 1.0,
    ):
        """Initialize frame reader.

        Args:
            source: File path or iterable of lines.
            label: Optional label for the source (used in RawFrame.source).
            start_ms: First synthetic timestamp for lines without one.
            interval_ms: Spacing of synthetic timestamps.
        """
        self._source = source
        self._label = label or (str(source) if isinstance(source, (str, Path)) else "iterable")
        self._start_ms = start_ms
        self._interval_ms = interval_ms
        self.skipped = 0

    def __iter__(self) -> Iterator[RawFrame]:
        lines: Iterable[str]
        if isinstance(self._source, (str, Path)):
            path = Path(self._source)
            if not path.exists():
                raise FileNotFoundError(f"Frame file not found: {path}")
            lines = path.read_text().splitlines()
        else:
            lines = self._source

        self.skipped = 0
        for i, line in enumerate(lines):
            parsed = _clean_hex_line(line)
            if parsed is None:
                stripped = line.strip()
                if stripped and not stripped.startswith(("#", "//")):
                    self.skipped += 1
                    logger.debug("Skipping line %d: %r", i + 1, stripped)
                continue

            hex_str, timestamp = parsed
            if timestamp is None:
                timestamp = self._start_ms + i * self._interval_ms
            yield RawFrame(
                hex_str=hex_str,
                timestamp=timestamp,
                line_number=i + 1,
                source=self._label,
            )

    def read_all(self) -> list[RawFrame]:
        """Read all frames into a list."""
        return list(self)
