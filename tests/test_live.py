"""Tests for real-time tone playback."""

import numpy as np
import pytest

from notestream.core import RecordedNote
from notestream.playback import (
    AudioOutputError,
    LiveToneScheduler,
    OfflineToneRenderer,
    Player,
    tone_envelope,
)

SAMPLE_RATE = 8000


@pytest.fixture
def scheduler(fake_sounddevice):
    scheduler = LiveToneScheduler(sample_rate=SAMPLE_RATE)
    scheduler.start()
    yield scheduler
    scheduler.stop()


@pytest.fixture
def device(scheduler, fake_sounddevice):
    """The output stream the scheduler opened."""
    return fake_sounddevice.streams[-1]


class TestStreamClock:
    """current_time follows the samples handed to the device."""

    def test_starts_at_zero(self, scheduler):
        """The clock starts at zero with the stream."""
        assert scheduler.current_time == 0.0

    def test_advances_with_callbacks(self, scheduler, device):
        """Each callback block moves the clock by its length."""
        device.pull(800)
        assert scheduler.current_time == pytest.approx(0.1)
        device.pull(400)
        assert scheduler.current_time == pytest.approx(0.15)

    def test_player_schedules_on_stream_clock(self, scheduler, device):
        """Player offsets are relative to the stream time at play()."""
        device.pull(800)
        tones = Player(scheduler).play([RecordedNote("A4", 500, 200)])
        assert tones[0].start == pytest.approx(0.6)
        assert tones[0].end == pytest.approx(0.8)


class TestMixing:
    """Tones mixed into the output blocks."""

    def test_output_matches_offline_render(self, scheduler, device):
        """Live output equals the offline rendering of the same tone."""
        envelope = tone_envelope(0.0, 0.05, gain=0.1, ramp=0.01)
        scheduler.schedule_tone(440.0, 0.0, 0.05, envelope)
        offline = OfflineToneRenderer(sample_rate=SAMPLE_RATE)
        offline.schedule_tone(440.0, 0.0, 0.05, envelope)

        played = np.concatenate([device.pull(100) for _ in range(4)])
        expected = offline.render()
        assert len(expected) == 400
        np.testing.assert_allclose(played, expected, atol=1e-6)
        assert np.abs(played).max() > 0.05

    def test_future_tone_waits(self, scheduler, device):
        """A tone scheduled ahead of the clock is silent until its start."""
        scheduler.schedule_tone(440.0, 0.1, 0.05, tone_envelope(0.1, 0.05))
        assert not device.pull(400).any()
        assert scheduler.pending == 1
        assert device.pull(800).any()

    def test_finished_tones_dropped(self, scheduler, device):
        """Tones the stream has played past are forgotten."""
        scheduler.schedule_tone(440.0, 0.0, 0.01, tone_envelope(0.0, 0.01))
        device.pull(100)
        assert scheduler.pending == 0
        assert not device.pull(100).any()

    def test_cancel_all(self, scheduler, device):
        """cancel_all silences everything still pending."""
        scheduler.schedule_tone(440.0, 0.0, 1.0, tone_envelope(0.0, 1.0))
        scheduler.schedule_tone(660.0, 0.5, 1.0, tone_envelope(0.5, 1.0))
        assert scheduler.cancel_all() == 2
        assert not device.pull(800).any()

    def test_end_time(self, scheduler, device):
        """end_time is the last pending tone end, or the clock."""
        assert scheduler.end_time == 0.0
        scheduler.schedule_tone(440.0, 0.2, 0.3, tone_envelope(0.2, 0.3))
        assert scheduler.end_time == pytest.approx(0.5)


class TestStreamLifecycle:
    """Opening and closing the output device."""

    def test_stream_settings(self, scheduler, device):
        """The device is opened mono at the scheduler's rate."""
        assert device.kwargs["samplerate"] == SAMPLE_RATE
        assert device.kwargs["channels"] == 1
        assert device.started

    def test_context_manager_closes_stream(self, fake_sounddevice):
        """Leaving the with-block stops and closes the device."""
        with LiveToneScheduler(sample_rate=SAMPLE_RATE) as scheduler:
            assert scheduler.is_running
        stream = fake_sounddevice.streams[-1]
        assert stream.stopped and stream.closed
        assert not scheduler.is_running

    def test_open_failure(self, fake_sounddevice):
        """A device that cannot be opened raises AudioOutputError."""
        fake_sounddevice.error = fake_sounddevice.PortAudioError("Device unavailable")
        with pytest.raises(AudioOutputError, match="Could not open output device"):
            LiveToneScheduler(sample_rate=SAMPLE_RATE).start()

    def test_wait_requires_running_stream(self, fake_sounddevice):
        """wait() on a stopped scheduler is an error, not a hang."""
        with pytest.raises(RuntimeError):
            LiveToneScheduler(sample_rate=SAMPLE_RATE).wait()

    def test_wait_until_tones_played(self, fake_sounddevice):
        """wait() returns once the stream clock passes the last tone."""
        fake_sounddevice.autoplay = True
        with LiveToneScheduler(sample_rate=SAMPLE_RATE) as scheduler:
            scheduler.schedule_tone(440.0, 0.0, 0.1, tone_envelope(0.0, 0.1))
            scheduler.wait(poll=0.001)
            assert scheduler.current_time >= 0.1

    def test_invalid_sample_rate(self):
        """Non-positive sample rates are rejected."""
        with pytest.raises(ValueError):
            LiveToneScheduler(sample_rate=0)
