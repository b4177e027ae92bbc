"""Audio loading utilities."""

import numpy as np
import librosa
from pathlib import Path
from typing import Tuple, Optional


class AudioSourceError(Exception):
    """The audio source could not be acquired (missing, unsupported, unreadable)."""


class AudioLoader:
    """Handles audio file loading and preprocessing."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        mono: bool = True,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling, None keeps the file's rate
            mono: Convert to mono if True
            normalize: Normalize audio amplitude if True
        """
        self.target_sr = target_sr
        self.mono = mono
        self.normalize = normalize

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load audio file and preprocess.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            AudioSourceError: If the file is missing, its format is not
                supported, or it cannot be decoded
        """
        path = Path(path)

        if not path.exists():
            raise AudioSourceError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise AudioSourceError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        try:
            audio, sr = librosa.load(
                str(path),
                sr=self.target_sr,
                mono=self.mono,
            )
        except Exception as e:
            raise AudioSourceError(f"Failed to decode {path}: {e}") from e

        if self.normalize:
            audio = self._normalize(audio)

        return audio, int(sr)

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max() if audio.size else 0.0
        if peak > 0:
            audio = audio / peak
        return audio

    def get_duration(self, audio: np.ndarray, sr: int) -> float:
        """Get duration in seconds."""
        return audio.shape[-1] / sr
