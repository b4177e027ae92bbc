"""Tests for the bounded recorder state machine."""

import pytest

from notestream.core import RecordedNote
from notestream.recording import Recorder, RecorderConfig, RecorderState


@pytest.fixture
def recorder():
    return Recorder(max_duration_ms=30000, max_notes=10)


class TestStateMachine:
    """Transitions between idle and recording."""

    def test_starts_idle(self, recorder):
        """A new recorder is idle."""
        assert recorder.state is RecorderState.IDLE
        assert not recorder.is_recording

    def test_start_and_stop(self, recorder):
        """start() enters RECORDING and stop() returns to IDLE."""
        recorder.start(1000)
        assert recorder.is_recording
        recorder.stop(2000)
        assert recorder.state is RecorderState.IDLE

    def test_idle_ignores_update_and_stop(self, recorder):
        """update() and stop() are no-ops while idle."""
        assert recorder.update(["A4"], 10) == []
        assert recorder.stop(20) == []
        assert recorder.get_recording() == []
        assert recorder.active_notes == {}

    def test_update_after_stop_is_ignored(self, recorder):
        """Ticks after a stop do not add events."""
        recorder.start(0)
        recorder.update(["A4"], 10)
        recorder.stop(50)
        recorder.update(["C4"], 60)
        recorder.update([], 100)
        assert recorder.get_recording() == [RecordedNote("A4", 10, 40)]

    def test_start_discards_previous_session(self, recorder):
        """Starting again clears events and held notes."""
        recorder.start(0)
        recorder.update(["A4"], 10)
        recorder.update([], 20)
        recorder.update(["C4"], 30)
        recorder.start(100)
        assert recorder.get_recording() == []
        assert recorder.active_notes == {}
        assert recorder.start_time == 100
        recorder.stop(200)
        assert recorder.get_recording() == []


class TestNoteEvents:
    """Note-on/note-off bookkeeping."""

    def test_note_off_finalizes_event(self, recorder):
        """A note leaving the confirmed set becomes an event."""
        recorder.start(1000)
        recorder.update(["A4"], 1100)
        recorder.update(["A4"], 1150)
        recorder.update([], 1300)
        assert recorder.get_recording() == [
            RecordedNote(note="A4", start_time=100, duration=200)
        ]

    def test_onset_is_first_tick_seen(self, recorder):
        """The onset is the first tick the note is confirmed on."""
        recorder.start(0)
        recorder.update([], 10)
        recorder.update(["C4"], 40)
        recorder.update(["C4"], 80)
        assert recorder.active_notes == {"C4": 40}

    def test_overlapping_notes(self, recorder):
        """Overlapping notes are tracked independently."""
        recorder.start(0)
        recorder.update(["A4"], 0)
        recorder.update(["A4", "E5"], 100)
        recorder.update(["E5"], 200)
        recorder.update([], 300)
        assert recorder.get_recording() == [
            RecordedNote("A4", 0, 200),
            RecordedNote("E5", 100, 200),
        ]

    def test_repeated_note_makes_two_events(self, recorder):
        """A note that returns after a gap is a new event."""
        recorder.start(0)
        recorder.update(["A4"], 10)
        recorder.update([], 20)
        recorder.update(["A4"], 30)
        recorder.update([], 60)
        assert [n.start_time for n in recorder.get_recording()] == [10, 30]

    def test_capacity_drops_new_notes(self):
        """Notes past max_notes are not tracked."""
        recorder = Recorder(max_notes=2)
        recorder.start(0)
        recorder.update(["A4", "C4", "E5"], 10)
        assert list(recorder.active_notes) == ["A4", "C4"]

    def test_capacity_frees_up_after_note_off(self):
        """A note-off makes room for a waiting note."""
        recorder = Recorder(max_notes=2)
        recorder.start(0)
        recorder.update(["A4", "C4", "E5"], 10)
        recorder.update(["C4", "E5"], 20)
        assert recorder.active_notes == {"C4": 10, "E5": 20}

    def test_zero_capacity_records_nothing(self):
        """max_notes=0 records no events."""
        recorder = Recorder(max_notes=0)
        recorder.start(0)
        recorder.update(["A4"], 10)
        recorder.stop(20)
        assert recorder.get_recording() == []


class TestFinalizedPerCall:
    """update() and stop() report the events they finalize."""

    def test_update_returns_finalized_events(self, recorder):
        """Only the events ended on this tick are returned."""
        recorder.start(0)
        assert recorder.update(["A4", "C4"], 10) == []
        assert recorder.update(["C4"], 50) == [RecordedNote("A4", 10, 40)]
        assert recorder.update(["C4"], 60) == []
        assert recorder.update([], 90) == [RecordedNote("C4", 10, 80)]

    def test_stop_returns_held_notes(self, recorder):
        """stop() returns the notes it closed."""
        recorder.start(0)
        recorder.update(["A4", "C4"], 10)
        assert recorder.stop(30) == [
            RecordedNote("A4", 10, 20),
            RecordedNote("C4", 10, 20),
        ]

    def test_auto_stop_returns_deadline_events(self):
        """The tick that hits the deadline returns the closed notes."""
        recorder = Recorder(max_duration_ms=100)
        recorder.start(0)
        recorder.update(["A4"], 60)
        assert recorder.update(["A4"], 150) == [RecordedNote("A4", 60, 40)]

    def test_returned_list_is_independent(self, recorder):
        """Mutating a returned list leaves the recording intact."""
        recorder.start(0)
        recorder.update(["A4"], 10)
        recorder.update([], 20).clear()
        assert recorder.get_recording() == [RecordedNote("A4", 10, 10)]


class TestGetRecording:
    """Snapshots of the event list."""

    def test_mid_session_returns_finalized_only(self, recorder):
        """Held notes are not part of the snapshot."""
        recorder.start(0)
        recorder.update(["A4", "C4"], 10)
        recorder.update(["C4"], 50)
        assert recorder.get_recording() == [RecordedNote("A4", 10, 40)]

    def test_snapshot_is_a_copy(self, recorder):
        """Mutating a snapshot does not touch the recorder."""
        recorder.start(0)
        recorder.update(["A4"], 10)
        recorder.update([], 50)
        snapshot = recorder.get_recording()
        snapshot.append(RecordedNote("X", 0, 0))
        snapshot.clear()
        assert recorder.get_recording() == [RecordedNote("A4", 10, 40)]

    def test_stop_adds_exactly_the_active_notes(self, recorder):
        """stop() appends one event per held note and nothing else."""
        recorder.start(0)
        recorder.update(["A4", "C4"], 10)
        recorder.update(["C4", "E5"], 50)
        before = recorder.get_recording()
        recorder.stop(120)
        after = recorder.get_recording()
        assert after[: len(before)] == before
        assert after[len(before):] == [
            RecordedNote("C4", 10, 110),
            RecordedNote("E5", 50, 70),
        ]
        assert recorder.active_notes == {}


class TestMaxDuration:
    """Automatic stop at the session deadline."""

    def test_auto_stop_at_deadline(self):
        """Held notes end at start + max_duration."""
        recorder = Recorder(max_duration_ms=1000)
        recorder.start(500)
        recorder.update(["A4"], 700)
        recorder.update(["A4", "C4"], 1200)
        recorder.update(["A4", "C4"], 1500)
        assert recorder.state is RecorderState.IDLE
        # duration = max_duration - onset offset
        assert recorder.get_recording() == [
            RecordedNote("A4", 200, 800),
            RecordedNote("C4", 700, 300),
        ]

    def test_late_tick_finalizes_at_deadline(self):
        """A tick well past the deadline still ends notes at the deadline."""
        recorder = Recorder(max_duration_ms=1000)
        recorder.start(0)
        recorder.update(["A4"], 100)
        recorder.update(["A4", "C4"], 1700)
        assert not recorder.is_recording
        assert recorder.get_recording() == [RecordedNote("A4", 100, 900)]

    def test_manual_stop_past_deadline_is_clamped(self):
        """A stop after the deadline finalizes at the deadline."""
        recorder = Recorder(max_duration_ms=1000)
        recorder.start(0)
        recorder.update(["A4"], 100)
        recorder.stop(5000)
        assert recorder.get_recording() == [RecordedNote("A4", 100, 900)]

    def test_just_before_deadline_keeps_recording(self):
        """A tick one millisecond early does not stop the session."""
        recorder = Recorder(max_duration_ms=1000)
        recorder.start(0)
        recorder.update(["A4"], 999)
        assert recorder.is_recording
        assert recorder.elapsed(999) == 999


class TestRecorderConfig:
    """Configuration validation."""

    def test_defaults(self):
        """Defaults are 30 s and 10 notes."""
        config = RecorderConfig()
        assert config.max_duration_ms == 30000
        assert config.max_notes == 10

    def test_config_object_wins(self):
        """An explicit config overrides keyword arguments."""
        recorder = Recorder(max_notes=3, config=RecorderConfig(max_notes=7))
        assert recorder.config.max_notes == 7

    def test_invalid_values(self):
        """Non-positive durations and negative capacities are rejected."""
        with pytest.raises(ValueError):
            RecorderConfig(max_duration_ms=0)
        with pytest.raises(ValueError):
            RecorderConfig(max_notes=-1)
