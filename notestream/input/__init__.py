"""Input layer - Audio acquisition and spectrum frames."""

from .loader import AudioLoader, AudioSourceError
from .capture import (
    SpectrumFrame,
    FrameSource,
    AnalyserFrameSource,
    ArrayFrameSource,
    AudioFileFrameSource,
)
from .microphone import MicrophoneFrameSource

__all__ = [
    "AudioLoader",
    "AudioSourceError",
    "SpectrumFrame",
    "FrameSource",
    "AnalyserFrameSource",
    "ArrayFrameSource",
    "AudioFileFrameSource",
    "MicrophoneFrameSource",
]
