"""Frame sources - audio to per-tick byte magnitude frames.

Frames mimic a browser analyser node: Blackman-windowed FFT magnitudes,
exponentially smoothed over time, converted to dB and linearly mapped
from [min_decibels, max_decibels] onto 0-255.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

import librosa
import numpy as np

from .loader import AudioLoader, AudioSourceError
from ..core.constants import DEFAULT_FFT_SIZE, DEFAULT_FRAME_RATE


@dataclass(frozen=True)
class SpectrumFrame:
    """One animation tick worth of spectrum data."""

    magnitudes: np.ndarray  # uint8, one value per bin, low to high frequency
    sample_rate: int
    timestamp_ms: float


class FrameSource(ABC):
    """Abstract producer of spectrum frames."""

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """Sample rate of the analysed signal in Hz."""
        pass

    @abstractmethod
    def frames(self) -> Iterator[SpectrumFrame]:
        """Yield frames in timestamp order."""
        pass

    def __iter__(self) -> Iterator[SpectrumFrame]:
        return self.frames()


class AnalyserFrameSource(FrameSource):
    """Shared analyser settings and byte scaling for concrete sources."""

    def __init__(
        self,
        fft_size: int = DEFAULT_FFT_SIZE,
        frame_rate: float = DEFAULT_FRAME_RATE,
        smoothing: float = 0.5,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ):
        """
        Initialize AnalyserFrameSource.

        Args:
            fft_size: FFT window length; frames carry fft_size // 2 bins
            frame_rate: Frames per second of signal time
            smoothing: Time smoothing constant in [0, 1)
            min_decibels: dB value mapped to 0
            max_decibels: dB value mapped to 255

        Raises:
            ValueError: If any setting is out of range
        """
        if fft_size <= 0 or fft_size % 2:
            raise ValueError(f"fft_size must be a positive even number, got {fft_size}")
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {frame_rate}")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {smoothing}")
        if max_decibels <= min_decibels:
            raise ValueError("max_decibels must be greater than min_decibels")

        self.fft_size = fft_size
        self.frame_rate = frame_rate
        self.smoothing = smoothing
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

    @property
    def hop_length(self) -> int:
        """Samples between consecutive frames."""
        return max(1, int(round(self.sample_rate / self.frame_rate)))

    @property
    def n_bins(self) -> int:
        return self.fft_size // 2

    def _to_bytes(self, smoothed: np.ndarray) -> np.ndarray:
        """Map smoothed linear magnitudes onto the 0-255 byte scale."""
        db = librosa.amplitude_to_db(smoothed, ref=1.0, amin=1e-10, top_db=None)
        scale = 255.0 / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (db - self.min_decibels))
        return np.clip(scaled, 0, 255).astype(np.uint8)


class ArrayFrameSource(AnalyserFrameSource):
    """Spectrum frames computed from an in-memory mono signal."""

    def __init__(
        self,
        audio: np.ndarray,
        sample_rate: int,
        fft_size: int = DEFAULT_FFT_SIZE,
        frame_rate: float = DEFAULT_FRAME_RATE,
        **kwargs,
    ):
        """
        Initialize ArrayFrameSource.

        Args:
            audio: Mono audio array
            sample_rate: Sample rate of ``audio`` in Hz
            fft_size: FFT window length; frames carry fft_size // 2 bins
            frame_rate: Frames per second of signal time
            **kwargs: smoothing, min_decibels, max_decibels
        """
        super().__init__(fft_size=fft_size, frame_rate=frame_rate, **kwargs)
        self.audio = np.asarray(audio, dtype=np.float32)
        self._sample_rate = int(sample_rate)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def magnitudes(self) -> np.ndarray:
        """
        Byte magnitudes for the whole signal.

        Returns:
            uint8 array of shape (n_frames, fft_size // 2)
        """
        audio = self.audio
        if len(audio) < self.fft_size:
            audio = librosa.util.fix_length(audio, size=self.fft_size)

        spectrum = librosa.stft(
            audio,
            n_fft=self.fft_size,
            hop_length=self.hop_length,
            window="blackman",
            center=False,
        )
        mag = np.abs(spectrum[: self.n_bins]) / self.fft_size

        smoothed = np.empty_like(mag)
        previous = np.zeros(self.n_bins, dtype=mag.dtype)
        for i in range(mag.shape[1]):
            previous = self.smoothing * previous + (1.0 - self.smoothing) * mag[:, i]
            smoothed[:, i] = previous

        return self._to_bytes(smoothed).T

    def frames(self) -> Iterator[SpectrumFrame]:
        frame_ms = 1000.0 * self.hop_length / self._sample_rate
        for i, row in enumerate(self.magnitudes()):
            yield SpectrumFrame(
                magnitudes=row,
                sample_rate=self._sample_rate,
                timestamp_ms=i * frame_ms,
            )


class AudioFileFrameSource(ArrayFrameSource):
    """Spectrum frames computed from an audio file."""

    def __init__(
        self,
        path: str,
        fft_size: int = DEFAULT_FFT_SIZE,
        frame_rate: float = DEFAULT_FRAME_RATE,
        target_sr: Optional[int] = None,
        **kwargs,
    ):
        """
        Initialize AudioFileFrameSource.

        Args:
            path: Audio file path
            fft_size: FFT window length
            frame_rate: Frames per second of signal time
            target_sr: Resample to this rate, None keeps the file's rate
            **kwargs: Passed to ArrayFrameSource

        Raises:
            AudioSourceError: If the file cannot be acquired
        """
        loader = AudioLoader(target_sr=target_sr)
        audio, sr = loader.load(path)
        if audio.size == 0:
            raise AudioSourceError(f"Audio file is empty: {path}")
        self.path = path
        self.duration = loader.get_duration(audio, sr)
        super().__init__(audio, sr, fft_size=fft_size, frame_rate=frame_rate, **kwargs)
