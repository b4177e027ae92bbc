"""Shared fixtures: an in-process stand-in for the sounddevice module.

Only the device boundary is replaced; everything behind the stream
callbacks runs for real.
"""

import threading
import time

import numpy as np
import pytest

import notestream.input.microphone as microphone
import notestream.playback.live as live


class FakePortAudioError(Exception):
    pass


class FakeInputStream:
    """Delivers its preset blocks through the callback as soon as it starts."""

    def __init__(self, blocks, error=None, **kwargs):
        self.kwargs = kwargs
        self.callback = kwargs["callback"]
        self.blocks = list(blocks)
        self.error = error
        self.started = False
        self.stopped = False
        self.closed = False

    def start(self):
        if self.error is not None:
            raise self.error
        self.started = True
        for block in self.blocks:
            block = np.asarray(block, dtype=np.float32)
            self.callback(block.reshape(-1, 1), len(block), None, 0)

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed = True


class FakeOutputStream:
    """Pulls audio from the callback on demand, or from a thread when autoplaying."""

    def __init__(self, error=None, autoplay=False, **kwargs):
        self.kwargs = kwargs
        self.callback = kwargs["callback"]
        self.error = error
        self.autoplay = autoplay
        self.started = False
        self.stopped = False
        self.closed = False
        self.played = []
        self._thread = None

    def pull(self, frames):
        outdata = np.zeros((frames, 1), dtype=np.float32)
        self.callback(outdata, frames, None, 0)
        self.played.append(outdata[:, 0].copy())
        return outdata[:, 0]

    def start(self):
        if self.error is not None:
            raise self.error
        self.started = True
        if self.autoplay:
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def _run(self):
        while not self.stopped:
            self.pull(441)
            time.sleep(0.0005)

    def stop(self):
        self.stopped = True
        if self._thread is not None:
            self._thread.join()

    def close(self):
        self.closed = True


class FakeSoundDevice:
    """Module-shaped object exposing the parts of sounddevice in use."""

    PortAudioError = FakePortAudioError

    def __init__(self):
        self.blocks = []
        self.error = None
        self.query_error = None
        self.autoplay = False
        self.default_samplerate = 48000.0
        self.streams = []

    def InputStream(self, **kwargs):
        stream = FakeInputStream(self.blocks, error=self.error, **kwargs)
        self.streams.append(stream)
        return stream

    def OutputStream(self, **kwargs):
        stream = FakeOutputStream(error=self.error, autoplay=self.autoplay, **kwargs)
        self.streams.append(stream)
        return stream

    def query_devices(self, device=None, kind=None):
        if self.query_error is not None:
            raise self.query_error
        return {"name": "fake", "default_samplerate": self.default_samplerate}


@pytest.fixture
def fake_sounddevice(monkeypatch):
    """Route device access in notestream to a FakeSoundDevice."""
    fake = FakeSoundDevice()
    monkeypatch.setattr(microphone, "_import_sounddevice", lambda: fake)
    monkeypatch.setattr(live, "_import_sounddevice", lambda: fake)
    return fake
