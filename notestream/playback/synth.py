"""Tone scheduling backends for playback."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import soundfile as sf

from ..core.constants import DEFAULT_PLAYBACK_SR

EnvelopePoint = Tuple[float, float]  # (absolute time in seconds, gain)


@dataclass(frozen=True)
class ScheduledTone:
    """A sine tone placed on a scheduler's clock."""

    frequency: float  # Hz
    start: float  # Absolute start in seconds
    duration: float  # Seconds
    envelope: Tuple[EnvelopePoint, ...]

    @property
    def end(self) -> float:
        return self.start + self.duration

    def samples(self, t: np.ndarray) -> np.ndarray:
        """Enveloped sine values at absolute times ``t`` (seconds)."""
        t = np.asarray(t, dtype=np.float64)
        if self.envelope:
            times = [p[0] for p in self.envelope]
            gains = [p[1] for p in self.envelope]
            gain = np.interp(t, times, gains, left=0.0, right=0.0)
        else:
            gain = ((t >= self.start) & (t < self.end)).astype(np.float64)
        return np.sin(2 * np.pi * self.frequency * (t - self.start)) * gain


class ToneScheduler(ABC):
    """Abstract audio output that can play a tone at a given time."""

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Current time of the scheduler's clock in seconds."""
        pass

    @abstractmethod
    def schedule_tone(
        self,
        frequency: float,
        start: float,
        duration: float,
        envelope: Sequence[EnvelopePoint],
    ) -> ScheduledTone:
        """
        Schedule a sine-like tone.

        Args:
            frequency: Tone frequency in Hz
            start: Absolute start time on the scheduler's clock (seconds)
            duration: Tone length in seconds
            envelope: Gain control points as absolute (time, gain) pairs,
                linearly interpolated

        Returns:
            The scheduled tone
        """
        pass


class OfflineToneRenderer(ToneScheduler):
    """Collects scheduled tones and mixes them into a sample buffer."""

    def __init__(self, sample_rate: int = DEFAULT_PLAYBACK_SR, start_time: float = 0.0):
        """
        Initialize OfflineToneRenderer.

        Args:
            sample_rate: Output sample rate in Hz
            start_time: Initial clock value in seconds
        """
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate
        self._clock = start_time
        self.tones: List[ScheduledTone] = []

    @property
    def current_time(self) -> float:
        return self._clock

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""
        self._clock += max(0.0, seconds)

    def schedule_tone(
        self,
        frequency: float,
        start: float,
        duration: float,
        envelope: Sequence[EnvelopePoint],
    ) -> ScheduledTone:
        tone = ScheduledTone(
            frequency=float(frequency),
            start=float(start),
            duration=float(duration),
            envelope=tuple((float(t), float(g)) for t, g in envelope),
        )
        self.tones.append(tone)
        return tone

    def cancel_all(self) -> int:
        """Drop every scheduled tone, returning how many were dropped."""
        count = len(self.tones)
        self.tones = []
        return count

    @property
    def end_time(self) -> float:
        """Time the last scheduled tone ends, or the clock if none."""
        if not self.tones:
            return self._clock
        return max(tone.end for tone in self.tones)

    def render(self, end: Optional[float] = None) -> np.ndarray:
        """
        Mix all scheduled tones from the scheduler's time zero.

        Args:
            end: Render up to this time in seconds (default: end of last tone)

        Returns:
            Mono float32 audio array
        """
        end = self.end_time if end is None else end
        n_samples = max(0, int(np.ceil(end * self.sample_rate - 1e-9)))
        audio = np.zeros(n_samples, dtype=np.float32)

        for tone in self.tones:
            first = max(0, int(np.floor(tone.start * self.sample_rate)))
            last = min(n_samples, int(np.ceil(tone.end * self.sample_rate - 1e-9)))
            if last <= first:
                continue

            t = np.arange(first, last) / self.sample_rate
            audio[first:last] += tone.samples(t).astype(np.float32)

        return audio

    def write(self, path: Union[str, Path], end: Optional[float] = None) -> Path:
        """Render and write a WAV file, returning its path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(path), self.render(end), self.sample_rate)
        return path
