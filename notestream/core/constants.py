"""Global constants for notestream."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Tuning reference
A4_FREQ = 440.0
A4_MIDI = 69

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127

# Spectrum analysis defaults
DEFAULT_FFT_SIZE = 2048
DEFAULT_HISTORY_SIZE = 512  # frames kept for the spectrogram
DEFAULT_MAX_FREQ_SCALE = 0.3  # fraction of the bins scanned (0.5 = half of Nyquist)
DEFAULT_AMPLITUDE_LOG_SCALE = 10.0
DEFAULT_FRAME_RATE = 60.0  # animation ticks per second

# Note detection defaults
DEFAULT_MIN_NOTE_DURATION_MS = 50.0
DEFAULT_NOTE_THRESHOLD = 100  # amplitude threshold (0-255)
DEFAULT_NOTES_TO_SHOW = 5

# Recording defaults
DEFAULT_RECORD_DURATION_MS = 30000.0  # 30 seconds
DEFAULT_NOTES_TO_RECORD = DEFAULT_NOTES_TO_SHOW * 2

# Playback defaults
DEFAULT_PLAYBACK_GAIN = 0.1
DEFAULT_ENVELOPE_RAMP = 0.05  # seconds
DEFAULT_PLAYBACK_SR = 44100
