"""Real-time tone playback on an output device via sounddevice."""

import threading
import time
from typing import List, Optional, Sequence, Union

import numpy as np

from .synth import EnvelopePoint, ScheduledTone, ToneScheduler
from ..core.constants import DEFAULT_PLAYBACK_SR

Device = Union[int, str, None]


class AudioOutputError(Exception):
    """Raised when the audio output device cannot be used."""


def _import_sounddevice():
    """Import sounddevice, which loads the PortAudio library on import."""
    try:
        import sounddevice
    except (ImportError, OSError) as e:
        raise AudioOutputError(f"Audio output is unavailable: {e}") from e
    return sounddevice


class LiveToneScheduler(ToneScheduler):
    """Mix scheduled tones into an output stream as it plays.

    The clock is the stream's sample position: ``current_time`` is the
    number of samples handed to the device divided by the sample rate.
    It starts at zero and only advances while the stream is running.
    Tones are dropped once the stream has played past their end.
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_PLAYBACK_SR,
        device: Device = None,
        block_size: int = 0,
    ):
        """
        Initialize LiveToneScheduler.

        Args:
            sample_rate: Output sample rate in Hz
            device: sounddevice device index or name (default: system output)
            block_size: Frames per callback, 0 lets PortAudio choose
        """
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate
        self.device = device
        self.block_size = block_size
        self.underflows = 0
        self._lock = threading.Lock()
        self._tones: List[ScheduledTone] = []
        self._position = 0
        self._stream = None

    @property
    def current_time(self) -> float:
        with self._lock:
            return self._position / self.sample_rate

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    @property
    def pending(self) -> int:
        """Tones not yet fully played."""
        with self._lock:
            return len(self._tones)

    @property
    def end_time(self) -> float:
        """Time the last pending tone ends, or the clock if none."""
        with self._lock:
            now = self._position / self.sample_rate
            return max([now] + [tone.end for tone in self._tones])

    def start(self) -> None:
        """
        Open and start the output stream.

        Raises:
            AudioOutputError: If the device cannot be opened
        """
        if self._stream is not None:
            return
        sd = _import_sounddevice()
        try:
            stream = sd.OutputStream(
                device=self.device,
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                blocksize=self.block_size,
                callback=self._callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            raise AudioOutputError(f"Could not open output device: {e}") from e
        self._stream = stream

    def stop(self) -> None:
        """Stop and close the stream; pending tones stay scheduled."""
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        stream.stop()
        stream.close()

    def __enter__(self) -> "LiveToneScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

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
        with self._lock:
            self._tones.append(tone)
        return tone

    def cancel_all(self) -> int:
        """Silence every pending tone, returning how many were dropped."""
        with self._lock:
            count = len(self._tones)
            self._tones = []
        return count

    def wait(self, until: Optional[float] = None, poll: float = 0.05) -> None:
        """
        Block until the clock reaches ``until`` (default: end of the last tone).

        Returns early if the stream is stopped from another thread.
        """
        if self._stream is None:
            raise RuntimeError("Output stream is not running")
        target = self.end_time if until is None else until
        while self._stream is not None and self.current_time < target:
            time.sleep(poll)

    def _callback(self, outdata, frames, time_info, status):
        if status:
            self.underflows += 1
        with self._lock:
            t = (self._position + np.arange(frames)) / self.sample_rate
            block_end = (self._position + frames) / self.sample_rate
            block = np.zeros(frames)
            remaining = []
            for tone in self._tones:
                if tone.start < block_end:
                    block += tone.samples(t)
                if tone.end > block_end:
                    remaining.append(tone)
            self._tones = remaining
            self._position += frames
        outdata[:, 0] = block
