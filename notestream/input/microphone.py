"""Live capture - spectrum frames from an input device via sounddevice.

The device callback runs on PortAudio's thread and only copies blocks
into a queue; all analysis happens on the thread iterating ``frames()``.
"""

import queue
import threading
from typing import Iterator, Optional, Union

import librosa
import numpy as np

from .capture import AnalyserFrameSource, SpectrumFrame
from .loader import AudioSourceError
from ..core.constants import DEFAULT_FFT_SIZE, DEFAULT_FRAME_RATE

Device = Union[int, str, None]


def _import_sounddevice():
    """Import sounddevice, which loads the PortAudio library on import."""
    try:
        import sounddevice
    except (ImportError, OSError) as e:
        raise AudioSourceError(f"Audio input is unavailable: {e}") from e
    return sounddevice


class MicrophoneFrameSource(AnalyserFrameSource):
    """Spectrum frames from a live input device.

    Frame ``i`` analyses the latest ``fft_size`` samples once
    ``(i + 1) * hop_length`` samples have arrived, zero-padded at the
    start. Timestamps follow the input stream's sample clock, so frame
    ``i`` is stamped ``i * hop_length / sample_rate`` seconds, the same
    spacing the offline sources use.
    """

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        device: Device = None,
        fft_size: int = DEFAULT_FFT_SIZE,
        frame_rate: float = DEFAULT_FRAME_RATE,
        max_duration: Optional[float] = None,
        read_timeout: float = 0.5,
        **kwargs,
    ):
        """
        Initialize MicrophoneFrameSource.

        Args:
            sample_rate: Capture rate in Hz (default: the device's default rate)
            device: sounddevice device index or name (default: system input)
            fft_size: FFT window length; frames carry fft_size // 2 bins
            frame_rate: Frames per second of signal time
            max_duration: Stop after this many seconds of audio, None runs
                until ``stop()`` is called or the consumer stops iterating
            read_timeout: Seconds to wait for a block before re-checking stop
            **kwargs: smoothing, min_decibels, max_decibels

        Raises:
            AudioSourceError: If the device cannot be queried
            ValueError: If any setting is out of range
        """
        super().__init__(fft_size=fft_size, frame_rate=frame_rate, **kwargs)
        if max_duration is not None and max_duration <= 0:
            raise ValueError(f"max_duration must be positive, got {max_duration}")

        if sample_rate is None:
            sd = _import_sounddevice()
            try:
                info = sd.query_devices(device, "input")
            except (sd.PortAudioError, ValueError) as e:
                raise AudioSourceError(f"No usable input device: {e}") from e
            sample_rate = int(info["default_samplerate"])
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self._sample_rate = int(sample_rate)
        self.device = device
        self.max_duration = max_duration
        self.read_timeout = read_timeout
        self.overflows = 0
        self._window = librosa.filters.get_window("blackman", fft_size, fftbins=True)
        self._blocks: "queue.Queue[np.ndarray]" = queue.Queue()
        self._stop = threading.Event()

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def stop(self) -> None:
        """Ask a running ``frames()`` loop to finish; safe from any thread."""
        self._stop.set()

    def _callback(self, indata, frames, time_info, status):
        if status:
            self.overflows += 1
        self._blocks.put(indata[:, 0].copy())

    def _open_stream(self):
        sd = _import_sounddevice()
        try:
            stream = sd.InputStream(
                device=self.device,
                samplerate=self._sample_rate,
                channels=1,
                dtype="float32",
                blocksize=self.hop_length,
                callback=self._callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            raise AudioSourceError(f"Could not open input device: {e}") from e
        return stream

    def frames(self) -> Iterator[SpectrumFrame]:
        """
        Yield frames as audio arrives.

        Raises:
            AudioSourceError: If the device cannot be opened, including
                when the system denies microphone access
        """
        self._stop.clear()
        self._blocks = queue.Queue()
        stream = self._open_stream()

        hop = self.hop_length
        limit = None
        if self.max_duration is not None:
            limit = int(np.ceil(self.max_duration * self._sample_rate / hop))

        window = np.zeros(self.fft_size, dtype=np.float32)
        pending = np.zeros(0, dtype=np.float32)
        previous = np.zeros(self.n_bins)
        index = 0

        try:
            while not self._stop.is_set() and (limit is None or index < limit):
                try:
                    block = self._blocks.get(timeout=self.read_timeout)
                except queue.Empty:
                    continue
                pending = np.concatenate([pending, block])

                while len(pending) >= hop:
                    window = np.concatenate([window, pending[:hop]])[-self.fft_size:]
                    pending = pending[hop:]

                    spectrum = np.fft.rfft(window * self._window)
                    mag = np.abs(spectrum[: self.n_bins]) / self.fft_size
                    previous = self.smoothing * previous + (1.0 - self.smoothing) * mag

                    yield SpectrumFrame(
                        magnitudes=self._to_bytes(previous),
                        sample_rate=self._sample_rate,
                        timestamp_ms=1000.0 * index * hop / self._sample_rate,
                    )
                    index += 1
                    if self._stop.is_set() or (limit is not None and index >= limit):
                        return
        finally:
            stream.stop()
            stream.close()
