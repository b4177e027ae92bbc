"""Spectrogram history - the scrolling frame buffer a renderer draws from."""

import numpy as np
from typing import Optional

from ..core.constants import (
    DEFAULT_AMPLITUDE_LOG_SCALE,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_MAX_FREQ_SCALE,
)


class SpectrogramHistory:
    """Fixed-depth history of magnitude frames, oldest row first.

    Each ``push`` shifts every row up by one and writes the new frame
    into the last row. Frames shorter than ``n_bins`` are zero padded,
    longer frames are truncated.
    """

    def __init__(self, n_bins: int, history_size: int = DEFAULT_HISTORY_SIZE):
        """
        Initialize SpectrogramHistory.

        Args:
            n_bins: Number of frequency bins per frame
            history_size: Number of frames kept
        """
        if n_bins <= 0 or history_size <= 0:
            raise ValueError(
                f"n_bins and history_size must be positive, got {n_bins}, {history_size}"
            )
        self.n_bins = n_bins
        self.history_size = history_size
        self._data = np.zeros((history_size, n_bins), dtype=np.uint8)
        self._count = 0

    def __len__(self) -> int:
        """Number of frames pushed so far, capped at ``history_size``."""
        return min(self._count, self.history_size)

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the raw byte history (history_size x n_bins)."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def push(self, magnitudes: np.ndarray) -> None:
        """Append a frame, dropping the oldest one."""
        row = np.asarray(magnitudes, dtype=np.uint8)[: self.n_bins]
        self._data[:-1] = self._data[1:]
        self._data[-1] = 0
        self._data[-1, : len(row)] = row
        self._count += 1

    def clear(self) -> None:
        """Reset every row to silence."""
        self._data.fill(0)
        self._count = 0

    def image(
        self,
        max_freq_scale: float = DEFAULT_MAX_FREQ_SCALE,
        amplitude_log_scale: Optional[float] = DEFAULT_AMPLITUDE_LOG_SCALE,
    ) -> np.ndarray:
        """
        Log-scaled intensities for display.

        Args:
            max_freq_scale: Fraction of the bins to keep (low frequencies)
            amplitude_log_scale: Compression factor s in log(1 + a*s) / log(1 + s),
                None or 0 for linear scaling

        Returns:
            Float array (history_size x kept_bins) with values in [0, 1]
        """
        kept = max(1, int(np.floor(self.n_bins * max_freq_scale)))
        amp = self._data[:, :kept].astype(np.float32) / 255.0
        if not amplitude_log_scale:
            return amp
        return np.log1p(amp * amplitude_log_scale) / np.log1p(amplitude_log_scale)
