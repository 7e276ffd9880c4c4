"""Recording and replay of hex frame streams.

A recording is a JSON document:

    {
      "version": "1.0.0",
      "recordedAt": "2024-04-01T12:00:00+00:00",
      "duration": 12000,
      "mapConfig": {"center": [22.5431, 114.0579], "zoom": 10},
      "events": [
        {"timestamp": 0, "type": "init", "data": {"truthStates": [...]}},
        {"timestamp": 15, "type": "message", "data": {"hexMessage": "8D..."}}
      ],
      "metadata": {"description": "...", "tags": ["adsb", "simulation"]}
    }

Event timestamps are milliseconds relative to the start of the recording.

ReplaySession rebuilds aircraft state at any point of a recording. CPR
decode depends on the cache built from earlier frames, so seeking backwards
clears the codec and replays from the first message.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

from .decoder import MessageCodec, now_ms
from .messages import DecodeResult
from .simulator import SimAircraft
from .tracker import Tracker

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0.0"

EVENT_MESSAGE = "message"
EVENT_INIT = "init"


@dataclass
class RecordedEvent:
    timestamp: float  # ms since recording start
    type: str  # "message" or "init"
    data: dict = field(default_factory=dict)

    @property
    def hex_message(self) -> str | None:
        return self.data.get("hexMessage")


@dataclass
class Recording:
    """A complete recording session."""

    version: str = FORMAT_VERSION
    recorded_at: str = ""
    duration: float = 0.0
    map_center: tuple[float, float] = (0.0, 0.0)
    map_zoom: int = 10
    events: list[RecordedEvent] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    def messages(self) -> list[tuple[str, float]]:
        """(hex, timestamp) for every message event, in timestamp order."""
        msgs = [
            (e.hex_message, e.timestamp)
            for e in self.events
            if e.type == EVENT_MESSAGE and e.hex_message
        ]
        # Stable: equal timestamps keep recording order
        msgs.sort(key=lambda m: m[1])
        return msgs

    def messages_up_to(self, until_ms: float) -> list[tuple[str, float]]:
        return [m for m in self.messages() if m[1] <= until_ms]

    def truth_states(self) -> list[SimAircraft]:
        """Ground truth from the first init event, if the recording has one."""
        for e in self.events:
            if e.type == EVENT_INIT:
                return [SimAircraft(**s) for s in e.data.get("truthStates", [])]
        return []

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "recordedAt": self.recorded_at,
            "duration": self.duration,
            "mapConfig": {"center": list(self.map_center), "zoom": self.map_zoom},
            "events": [
                {"timestamp": e.timestamp, "type": e.type, "data": e.data}
                for e in self.events
            ],
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Recording:
        """Build a Recording from parsed JSON.

        Raises:
            ValueError: If the version or the event list is missing.
        """
        if not isinstance(data, dict) or not data.get("version"):
            raise ValueError("Invalid recording: missing version")
        raw_events = data.get("events")
        if not isinstance(raw_events, list):
            raise ValueError("Invalid recording: events must be a list")

        events = []
        for i, raw in enumerate(raw_events):
            try:
                events.append(RecordedEvent(
                    timestamp=float(raw["timestamp"]),
                    type=str(raw["type"]),
                    data=dict(raw.get("data") or {}),
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed event %d: %s", i, e)

        map_config = data.get("mapConfig") or {}
        center = map_config.get("center") or (0.0, 0.0)
        return cls(
            version=str(data["version"]),
            recorded_at=str(data.get("recordedAt", "")),
            duration=float(data.get("duration", 0.0)),
            map_center=(float(center[0]), float(center[1])),
            map_zoom=int(map_config.get("zoom", 10)),
            events=events,
            metadata=dict(data.get("metadata") or {}),
        )

    @classmethod
    def load(cls, path: str | Path) -> Recording:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Recording not found: {path}")
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid recording JSON: {e}") from e
        return cls.from_dict(data)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.write_text(json.dumps(self.to_dict(), indent=2))
        return path

    @classmethod
    def from_frames(cls, frames: Iterable[tuple[str, float]]) -> Recording:
        """Wrap (hex, timestamp_ms) pairs, e.g. from a FrameReader, as a recording."""
        events = [
            RecordedEvent(timestamp=ts, type=EVENT_MESSAGE, data={"hexMessage": h})
            for h, ts in frames
        ]
        duration = max((e.timestamp for e in events), default=0.0)
        return cls(duration=duration, events=events)


class Recorder:
    """Capture frames into a Recording with timestamps relative to start()."""

    def __init__(self, clock: Callable[[], float] = now_ms):
        self._clock = clock
        self._start = 0.0
        self._events: list[RecordedEvent] = []
        self._map_center: tuple[float, float] = (0.0, 0.0)
        self._map_zoom = 10
        self.is_recording = False

    def start(
        self,
        map_center: tuple[float, float] = (0.0, 0.0),
        map_zoom: int = 10,
        truth: Iterable[SimAircraft] | None = None,
    ) -> None:
        self._start = self._clock()
        self._events = []
        self._map_center = map_center
        self._map_zoom = map_zoom
        self.is_recording = True

        states = [asdict(ac) for ac in truth or ()]
        if states:
            self._events.append(
                RecordedEvent(timestamp=0.0, type=EVENT_INIT, data={"truthStates": states})
            )
        logger.info("Recording started")

    def record(self, hex_message: str) -> None:
        if not self.is_recording:
            return
        self._events.append(RecordedEvent(
            timestamp=self._clock() - self._start,
            type=EVENT_MESSAGE,
            data={"hexMessage": hex_message},
        ))

    @property
    def event_count(self) -> int:
        return len(self._events)

    def stop(self) -> Recording | None:
        """Finish the recording. None if start() was never called."""
        if not self.is_recording:
            logger.warning("stop() called while not recording")
            return None

        self.is_recording = False
        duration = self._clock() - self._start
        recorded_at = datetime.fromtimestamp(self._start / 1000, tz=timezone.utc).isoformat()
        logger.info("Recording stopped: %d events over %.1fs", len(self._events), duration / 1000)

        return Recording(
            recorded_at=recorded_at,
            duration=duration,
            map_center=self._map_center,
            map_zoom=self._map_zoom,
            events=self._events,
            metadata={
                "description": f"ADS-B Recording - {len(self._events)} events",
                "tags": ["adsb", "simulation"],
            },
        )


class ReplaySession:
    """Deterministic state reconstruction over a recording.

    ``rebuild(until_ms)`` and ``seek(index)`` both return the Tracker holding
    aircraft state after the selected messages. Calls are serialized by a
    lock so a rebuild never interleaves with another decode on the same codec.
    """

    def __init__(self, recording: Recording, codec: MessageCodec | None = None):
        self.recording = recording
        self.codec = codec or MessageCodec()
        self.messages = recording.messages()
        self.tracker = Tracker(self.codec)
        self.results: list[DecodeResult | None] = []
        self._index = 0
        self._lock = threading.Lock()

    @property
    def index(self) -> int:
        """Number of messages applied so far."""
        return self._index

    @property
    def current_time(self) -> float:
        if self._index == 0:
            return 0.0
        return self.messages[self._index - 1][1]

    def _reset(self) -> None:
        self.codec.clear_cache()
        self.tracker = Tracker(self.codec)
        self.results = []
        self._index = 0

    def _apply_until(self, stop: int) -> None:
        while self._index < stop:
            hex_str, ts = self.messages[self._index]
            self.results.append(self.tracker.ingest(hex_str, ts))
            self._index += 1

    def rebuild(self, until_ms: float) -> Tracker:
        """Clear all state and replay every message with timestamp <= until_ms."""
        with self._lock:
            self._reset()
            stop = 0
            while stop < len(self.messages) and self.messages[stop][1] <= until_ms:
                stop += 1
            self._apply_until(stop)
            logger.debug("Rebuilt %d messages up to %.0f ms", stop, until_ms)
            return self.tracker

    def seek(self, index: int) -> Tracker:
        """Move to just after message ``index - 1``.

        Forward seeks continue from the current state; backward seeks rebuild
        from the start.
        """
        with self._lock:
            index = max(0, min(index, len(self.messages)))
            if index < self._index:
                self._reset()
            self._apply_until(index)
            return self.tracker

    def step(self) -> DecodeResult | None:
        """Apply the next message. None at the end or for rejected frames."""
        with self._lock:
            if self._index >= len(self.messages):
                return None
            self._apply_until(self._index + 1)
            return self.results[-1]

    @property
    def finished(self) -> bool:
        return self._index >= len(self.messages)
