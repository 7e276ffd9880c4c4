"""Tests for recording, loading and deterministic replay."""

import json
import threading

import pytest

from adsb_codec.decoder import MessageCodec
from adsb_codec.replay import (
    FORMAT_VERSION,
    RecordedEvent,
    Recorder,
    Recording,
    ReplaySession,
)
from adsb_codec.simulator import AdsbSimulator
from tests.fixtures.known_frames import (
    IDENTIFICATION_FRAMES,
    POSITION_DECODED,
    POSITION_FRAMES,
    VELOCITY_FRAMES,
)

ICAO = POSITION_DECODED["icao"]


class FakeClock:
    def __init__(self, start=1_700_000_000_000.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def recording():
    """Odd frame, even frame, then a second odd frame much later."""
    return Recording.from_frames([
        (POSITION_FRAMES[1][0], 0.0),
        (IDENTIFICATION_FRAMES[0][0], 200.0),
        (POSITION_FRAMES[0][0], 1000.0),
        (VELOCITY_FRAMES[0][0], 1500.0),
        (POSITION_FRAMES[1][0], 30_000.0),
    ])


class TestRecorder:
    def test_relative_timestamps(self):
        clock = FakeClock()
        rec = Recorder(clock=clock)
        rec.start()
        clock.now += 15
        rec.record("8D4840D6202CC371C32CE0576098")
        clock.now += 985
        rec.record("8D485020994409940838175B284F")
        clock.now += 500
        session = rec.stop()

        assert session.version == FORMAT_VERSION
        assert session.duration == 1500
        assert [e.timestamp for e in session.events] == [15, 1000]
        assert session.recorded_at.startswith("2023-11-14T22:13:20")

    def test_init_event_with_truth(self):
        sim = AdsbSimulator()
        sim.generate_mock_aircraft(3)
        rec = Recorder(clock=FakeClock())
        rec.start(map_center=(22.5, 114.0), truth=sim.aircraft)
        session = rec.stop()

        assert session.events[0].type == "init"
        assert session.events[0].timestamp == 0
        assert session.truth_states() == sim.aircraft
        assert session.map_center == (22.5, 114.0)

    def test_record_ignored_when_stopped(self):
        rec = Recorder(clock=FakeClock())
        rec.record("8D4840D6202CC371C32CE0576098")
        assert rec.event_count == 0
        assert rec.stop() is None


class TestRecordingFile:
    def test_save_and_load(self, tmp_path, recording):
        path = recording.save(tmp_path / "rec.json")
        loaded = Recording.load(path)
        assert loaded.messages() == recording.messages()
        assert loaded.duration == 30_000.0

    def test_json_layout(self, tmp_path, recording):
        path = recording.save(tmp_path / "rec.json")
        data = json.loads(path.read_text())
        assert data["version"] == "1.0.0"
        assert set(data) >= {"version", "recordedAt", "duration", "mapConfig", "events"}
        assert data["events"][0] == {
            "timestamp": 0.0,
            "type": "message",
            "data": {"hexMessage": POSITION_FRAMES[1][0]},
        }

    def test_missing_version(self):
        with pytest.raises(ValueError):
            Recording.from_dict({"events": []})

    def test_events_not_list(self):
        with pytest.raises(ValueError):
            Recording.from_dict({"version": "1.0.0", "events": {}})

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            Recording.load(path)

    def test_malformed_event_skipped(self):
        rec = Recording.from_dict({
            "version": "1.0.0",
            "events": [
                {"timestamp": 5, "type": "message", "data": {"hexMessage": "8D4840D6202CC371C32CE0576098"}},
                {"type": "message"},
                "nonsense",
            ],
        })
        assert len(rec.events) == 1

    def test_messages_sorted_and_filtered(self):
        rec = Recording(events=[
            RecordedEvent(300, "message", {"hexMessage": "B"}),
            RecordedEvent(0, "init", {"truthStates": []}),
            RecordedEvent(100, "message", {"hexMessage": "A"}),
            RecordedEvent(300, "message", {"hexMessage": "C"}),
            RecordedEvent(400, "message", {}),
        ])
        assert rec.messages() == [("A", 100), ("B", 300), ("C", 300)]
        assert rec.messages_up_to(100) == [("A", 100)]


class TestReplaySession:
    def test_rebuild_before_pair(self, recording):
        tracker = ReplaySession(recording).rebuild(500.0)
        ac = tracker.aircraft[ICAO]
        assert not ac.has_position
        assert ac.altitude == 38000

    def test_rebuild_after_pair(self, recording):
        tracker = ReplaySession(recording).rebuild(1000.0)
        ac = tracker.aircraft[ICAO]
        assert ac.lat == pytest.approx(POSITION_DECODED["lat"], abs=1e-3)
        assert ac.lng == pytest.approx(POSITION_DECODED["lon"], abs=1e-3)
        assert tracker.aircraft["4840D6"].callsign == "KLM1023"

    def test_rebuild_is_repeatable(self, recording):
        session = ReplaySession(recording)
        forward = session.rebuild(float("inf")).aircraft[ICAO].to_dict()
        session.rebuild(500.0)
        again = session.rebuild(float("inf")).aircraft[ICAO].to_dict()
        assert forward == again

    def test_rebuild_clears_codec(self, recording):
        codec = MessageCodec()
        session = ReplaySession(recording, codec)
        session.rebuild(float("inf"))
        assert codec.last_position(ICAO) is not None
        session.rebuild(500.0)
        assert codec.last_position(ICAO) is None

    def test_reference_survives_rebuild(self, recording, receiver_location):
        codec = MessageCodec(*receiver_location)
        tracker = ReplaySession(recording, codec).rebuild(0.0)
        assert tracker.aircraft[ICAO].has_position

    def test_seek_forward_and_back(self, recording):
        session = ReplaySession(recording)
        session.seek(3)
        assert session.index == 3
        assert session.current_time == 1000.0
        assert session.tracker.aircraft[ICAO].has_position

        session.seek(1)
        assert session.index == 1
        assert not session.tracker.aircraft[ICAO].has_position

        session.seek(99)
        assert session.finished

    def test_seek_matches_rebuild(self, recording):
        a = ReplaySession(recording)
        a.seek(2)
        a.seek(4)
        b = ReplaySession(recording)
        b.rebuild(1500.0)
        assert a.tracker.aircraft[ICAO].to_dict() == b.tracker.aircraft[ICAO].to_dict()

    def test_step(self, recording):
        session = ReplaySession(recording)
        first = session.step()
        assert first.icao == ICAO
        assert session.index == 1
        for _ in range(10):
            session.step()
        assert session.step() is None

    def test_late_frame_uses_last_position(self, recording):
        tracker = ReplaySession(recording).rebuild(30_000.0)
        ac = tracker.aircraft[ICAO]
        # The pair is 29 s old, so the last frame resolved against the previous fix
        assert ac.lat == pytest.approx(52.2658, abs=1e-3)
        assert len(ac.position_history) == 2

    def test_concurrent_rebuilds(self, recording):
        session = ReplaySession(recording)
        results = []

        def worker(until):
            tracker = session.rebuild(until)
            results.append(until)
            assert tracker is not None

        threads = [threading.Thread(target=worker, args=(t,)) for t in (500.0, 1000.0, 30_000.0) * 5]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(results) == 15
        final = session.rebuild(1000.0)
        assert final.aircraft[ICAO].has_position

    def test_simulated_recording(self):
        sim = AdsbSimulator()
        sim.generate_mock_aircraft(3)
        clock = FakeClock(0.0)
        rec = Recorder(clock=clock)
        rec.start(truth=sim.aircraft)
        for step in range(2):
            clock.now = step * 1000.0
            for e in sim.generate_all_messages(compliant=True):
                rec.record(e.hex_message)
        tracker = ReplaySession(rec.stop()).rebuild(float("inf"))
        for ac in sim.aircraft:
            state = tracker.aircraft[ac.id]
            assert state.callsign == ac.callsign
            assert state.lat == pytest.approx(ac.lat, abs=1e-4)
