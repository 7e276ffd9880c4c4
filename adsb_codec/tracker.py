"""Per-aircraft state folded from decoded messages.

Maintains a dictionary of AircraftState objects keyed by ICAO address.
Each state tracks:
- Current position (lat, lng, altitude) from the latest resolved decode
- Current velocity (speed, heading, vertical rate)
- Callsign, category and NIC
- A bounded position history (the track trail)
- Timestamps (ms) for staleness detection

CPR pairing lives in the codec; the tracker only folds DecodeResults.
Aircraft are considered stale after 60 seconds of no messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .decoder import MessageCodec
from .messages import DecodeResult, IdentificationMsg, PositionMsg, VelocityMsg

# Aircraft considered stale after this many milliseconds of silence
STALE_TIMEOUT_MS = 60_000.0

MAX_HISTORY = 120


@dataclass
class AircraftState:
    """Mutable state for a single tracked aircraft."""

    icao: str
    callsign: str | None = None
    category: int | None = None

    # Position
    lat: float | None = None
    lng: float | None = None
    altitude: int | None = None
    altitude_type: str | None = None
    nic: int | None = None

    # Velocity
    speed: float | None = None
    heading: float | None = None
    vertical_rate: int | None = None
    speed_type: str | None = None

    first_seen: float = 0.0
    last_seen: float = 0.0
    message_count: int = 0

    position_history: list = field(default_factory=list)  # [(timestamp, lat, lng, alt)]

    @property
    def has_position(self) -> bool:
        return self.lat is not None and self.lng is not None

    def is_stale(self, now: float) -> bool:
        return now - self.last_seen > STALE_TIMEOUT_MS

    def to_dict(self) -> dict:
        return {
            "icao": self.icao,
            "callsign": self.callsign,
            "category": self.category,
            "lat": self.lat,
            "lng": self.lng,
            "altitude": self.altitude,
            "altitude_type": self.altitude_type,
            "nic": self.nic,
            "speed": self.speed,
            "heading": self.heading,
            "vertical_rate": self.vertical_rate,
            "speed_type": self.speed_type,
            "first_seen": self.first_seen,
            "last_seen": self.last_seen,
            "message_count": self.message_count,
        }


class Tracker:
    """Track multiple aircraft from decoded messages."""

    def __init__(self, codec: MessageCodec | None = None):
        """Initialize tracker.

        Args:
            codec: Codec used by ``ingest`` for raw hex. A fresh one is
                created when omitted.
        """
        self.codec = codec or MessageCodec()
        self.aircraft: dict[str, AircraftState] = {}

        # Counters
        self.total_frames = 0
        self.valid_frames = 0
        self.position_decodes = 0

    def _get_or_create(self, icao_addr: str, timestamp: float) -> AircraftState:
        if icao_addr not in self.aircraft:
            self.aircraft[icao_addr] = AircraftState(
                icao=icao_addr, first_seen=timestamp, last_seen=timestamp
            )
        return self.aircraft[icao_addr]

    def ingest(self, hex_str: str, timestamp: float, icao: str | None = None) -> DecodeResult | None:
        """Decode a raw hex frame with the tracker's codec and fold it in."""
        self.total_frames += 1
        result = self.codec.decode(hex_str, timestamp, icao=icao)
        if result is None:
            return None
        self.update(result)
        return result

    def update(self, result: DecodeResult) -> AircraftState:
        """Fold one DecodeResult into the aircraft it belongs to."""
        self.valid_frames += 1
        ac = self._get_or_create(result.icao, result.timestamp)
        ac.last_seen = max(ac.last_seen, result.timestamp)
        ac.message_count += 1

        msg = result.data
        if isinstance(msg, IdentificationMsg):
            self._handle_identification(ac, msg)
        elif isinstance(msg, PositionMsg):
            self._handle_position(ac, msg, result.timestamp)
        elif isinstance(msg, VelocityMsg):
            self._handle_velocity(ac, msg)
        return ac

    def _handle_identification(self, ac: AircraftState, msg: IdentificationMsg):
        ac.callsign = msg.callsign.strip() or ac.callsign
        ac.category = msg.category

    def _handle_position(self, ac: AircraftState, msg: PositionMsg, timestamp: float):
        ac.altitude = msg.altitude
        ac.altitude_type = msg.altitude_type
        ac.nic = msg.nic

        # Unresolved CPR keeps the previous fix
        if not msg.resolved:
            return

        ac.lat, ac.lng = msg.lat, msg.lng
        self.position_decodes += 1

        ac.position_history.append((timestamp, ac.lat, ac.lng, ac.altitude))
        if len(ac.position_history) > MAX_HISTORY:
            ac.position_history = ac.position_history[-MAX_HISTORY:]

    def _handle_velocity(self, ac: AircraftState, msg: VelocityMsg):
        ac.speed = msg.speed
        ac.heading = msg.heading
        ac.speed_type = msg.speed_type
        if msg.vertical_rate_available:
            ac.vertical_rate = msg.vertical_rate

    def get_active(self, now: float) -> list[AircraftState]:
        """Return all non-stale aircraft, most recently seen first."""
        return sorted(
            (ac for ac in self.aircraft.values() if not ac.is_stale(now)),
            key=lambda ac: ac.last_seen,
            reverse=True,
        )

    def prune_stale(self, now: float) -> int:
        """Remove stale aircraft from tracking. Returns count removed."""
        stale = [k for k, v in self.aircraft.items() if v.is_stale(now)]
        for k in stale:
            del self.aircraft[k]
        return len(stale)

    def clear(self) -> None:
        self.aircraft.clear()
        self.total_frames = 0
        self.valid_frames = 0
        self.position_decodes = 0
