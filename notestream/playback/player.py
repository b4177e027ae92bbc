"""Playback - resynthesize a recording as enveloped sine tones."""

from typing import Iterable, List, Tuple

from .synth import EnvelopePoint, ScheduledTone, ToneScheduler
from ..analysis.pitch import frequency_from_note
from ..core import RecordedNote
from ..core.constants import DEFAULT_ENVELOPE_RAMP, DEFAULT_PLAYBACK_GAIN


def tone_envelope(
    start: float,
    duration: float,
    gain: float = DEFAULT_PLAYBACK_GAIN,
    ramp: float = DEFAULT_ENVELOPE_RAMP,
) -> Tuple[EnvelopePoint, ...]:
    """
    Attack/sustain/release control points for one tone.

    The gain rises from silence over ``ramp`` seconds, holds, and falls
    back to silence over the last ``ramp`` seconds. Tones shorter than
    two ramps get a zero-width plateau: attack and release meet at the
    midpoint.

    Returns:
        Four (time, gain) points with non-decreasing times
    """
    duration = max(0.0, duration)
    edge = min(ramp, duration / 2)
    return (
        (start, 0.0),
        (start + edge, gain),
        (start + duration - edge, gain),
        (start + duration, 0.0),
    )


class Player:
    """Schedule recorded notes on a ToneScheduler."""

    def __init__(
        self,
        scheduler: ToneScheduler,
        gain: float = DEFAULT_PLAYBACK_GAIN,
        ramp: float = DEFAULT_ENVELOPE_RAMP,
    ):
        """
        Initialize Player.

        Args:
            scheduler: Audio output the tones are scheduled on
            gain: Sustain gain of each tone
            ramp: Attack and release length in seconds
        """
        self.scheduler = scheduler
        self.gain = gain
        self.ramp = ramp

    def play(self, recording: Iterable[RecordedNote]) -> List[ScheduledTone]:
        """
        Schedule every playable note relative to the scheduler's clock.

        Notes are placed by their own ``start_time``, so order does not
        matter. Notes whose names cannot be mapped to a frequency are
        skipped. Earlier schedules are left untouched.

        Returns:
            The tones that were scheduled
        """
        now = self.scheduler.current_time
        scheduled = []

        for item in recording:
            freq = frequency_from_note(item.note)
            if freq <= 0:
                continue

            start = now + item.start_time / 1000.0
            duration = item.duration / 1000.0
            envelope = tone_envelope(start, duration, self.gain, self.ramp)
            scheduled.append(
                self.scheduler.schedule_tone(freq, start, duration, envelope)
            )

        return scheduled
