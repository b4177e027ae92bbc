"""Playback layer - Recorded notes back to audio.

- Player: note events -> scheduled tones with an ASR envelope
- Tone schedulers: the audio output tones are placed on, either an
  offline renderer or a live output stream
"""

from .player import Player, tone_envelope
from .synth import ToneScheduler, OfflineToneRenderer, ScheduledTone
from .live import LiveToneScheduler, AudioOutputError

__all__ = [
    "Player",
    "tone_envelope",
    "ToneScheduler",
    "OfflineToneRenderer",
    "ScheduledTone",
    "LiveToneScheduler",
    "AudioOutputError",
]
