"""Command-line interface for notestream.

Provides commands for:
- detect: Run note detection and lane assignment over an audio file
- record: Record the detected notes of an audio file
- listen: Detect (and optionally record) notes from the microphone
- play: Render a saved recording to WAV or play it live
- info: Show audio file information
"""

import typer
from pathlib import Path
from typing import Optional, List
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="notestream",
    help="Live spectrum to note lanes, recordings and playback",
    rich_markup_mode="markdown",
)
console = Console()


def _build_config(
    config_file: Optional[Path],
    threshold: Optional[int],
    min_duration: Optional[float],
    notes: Optional[int],
    max_freq_scale: Optional[float],
    fft_size: Optional[int],
):
    """PipelineConfig from an optional JSON file plus CLI overrides."""
    from .pipeline import PipelineConfig

    config = PipelineConfig.from_json(config_file) if config_file else PipelineConfig()
    if threshold is not None:
        config.note_threshold = threshold
    if min_duration is not None:
        config.min_note_duration_ms = min_duration
    if notes is not None:
        config.notes_to_show = notes
    if max_freq_scale is not None:
        config.max_freq_scale = max_freq_scale
    if fft_size is not None:
        config.fft_size = fft_size
    return config


def _open_source(input_file: Path, fft_size: int, frame_rate: float):
    """Open a frame source, exiting with a message if it cannot be acquired."""
    from .input import AudioFileFrameSource, AudioSourceError

    try:
        return AudioFileFrameSource(str(input_file), fft_size=fft_size, frame_rate=frame_rate)
    except (AudioSourceError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def detect(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with pipeline settings"
    ),
    threshold: Optional[int] = typer.Option(
        None, "--threshold", "-t", help="Peak amplitude threshold (0-255)"
    ),
    min_duration: Optional[float] = typer.Option(
        None, "--min-duration", help="Debounce window in ms"
    ),
    notes: Optional[int] = typer.Option(
        None, "--notes", "-n", help="Maximum notes shown at once"
    ),
    max_freq_scale: Optional[float] = typer.Option(
        None, "--max-freq-scale", help="Fraction of the spectrum scanned"
    ),
    fft_size: Optional[int] = typer.Option(
        None, "--fft-size", help="FFT window length"
    ),
    frame_rate: float = typer.Option(
        60.0, "--frame-rate", help="Analysis frames per second"
    ),
    spectrogram: Optional[Path] = typer.Option(
        None, "--spectrogram", help="Save the final spectrogram history as .npy"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Detect notes in an audio file and show when they enter the lanes.

    **Examples:**

        notestream detect scale.wav

        notestream detect chord.wav --threshold 120 --notes 3 --json
    """
    from .pipeline import NoteStream

    try:
        config = _build_config(
            config_file, threshold, min_duration, notes, max_freq_scale, fft_size
        )
        stream = NoteStream(config)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    source = _open_source(input_file, config.fft_size, frame_rate)

    if not json_output:
        console.print(f"[blue]Analysing:[/blue] {input_file}")

    entries = []
    n_frames = 0
    for tick in stream.run(source):
        n_frames += 1
        for event in tick.lanes.events:
            entries.append(
                {
                    "time_ms": round(tick.timestamp_ms, 1),
                    "event": event.kind.value,
                    "lane": event.lane,
                    "note": event.note,
                }
            )

    if spectrogram:
        import numpy as np

        spectrogram.parent.mkdir(parents=True, exist_ok=True)
        np.save(
            str(spectrogram),
            stream.history.image(config.max_freq_scale, config.amplitude_log_scale),
        )

    if json_output:
        console.print_json(
            data={
                "input": str(input_file),
                "frames": n_frames,
                "config": config.to_dict(),
                "events": entries,
            }
        )
        return

    console.print(f"  Processed {n_frames} frames")
    _show_lane_table([e for e in entries if e["event"] == "entered"])
    if spectrogram:
        console.print(f"[green]Spectrogram saved:[/green] {spectrogram}")


@app.command()
def record(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output recording JSON path"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with pipeline settings"
    ),
    threshold: Optional[int] = typer.Option(
        None, "--threshold", "-t", help="Peak amplitude threshold (0-255)"
    ),
    min_duration: Optional[float] = typer.Option(
        None, "--min-duration", help="Debounce window in ms"
    ),
    max_duration: Optional[float] = typer.Option(
        None, "--max-duration", help="Maximum recording length in ms"
    ),
    max_notes: Optional[int] = typer.Option(
        None, "--max-notes", help="Maximum simultaneously recorded notes"
    ),
    frame_rate: float = typer.Option(
        60.0, "--frame-rate", help="Analysis frames per second"
    ),
    wav: Optional[Path] = typer.Option(
        None, "--wav", help="Also render the recording to this WAV file"
    ),
    midi: Optional[Path] = typer.Option(
        None, "--midi", help="Also export the recording to this MIDI file"
    ),
):
    """Record the notes detected in an audio file.

    Recording starts with the first frame and stops at the end of the
    file or after the maximum duration.

    **Examples:**

        notestream record melody.wav -o melody.json --wav replay.wav
    """
    from .pipeline import NoteStream
    from .recording import save_recording

    try:
        config = _build_config(config_file, threshold, min_duration, None, None, None)
        if max_duration is not None:
            config.record_duration_ms = max_duration
        if max_notes is not None:
            config.notes_to_record = max_notes
        stream = NoteStream(config)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    source = _open_source(input_file, config.fft_size, frame_rate)

    if output is None:
        output = input_file.with_suffix(".notes.json")

    console.print(f"[blue]Recording:[/blue] {input_file}")
    stream.start_recording(0.0)
    last_ms = 0.0
    for tick in stream.run(source):
        last_ms = tick.timestamp_ms
        if not tick.recording:
            console.print(f"  Maximum duration reached at {last_ms / 1000:.2f}s")
            break
    recording = stream.stop_recording(last_ms)

    save_recording(output, recording)
    console.print(f"  Recorded {len(recording)} notes")
    _show_recording_table(recording)
    console.print(f"[green]Recording saved:[/green] {output}")

    if wav:
        _render(recording, wav, gain=0.1, sample_rate=44100)
        console.print(f"[green]Playback rendered:[/green] {wav}")

    if midi:
        from .output import MIDIExporter

        MIDIExporter().export(recording, str(midi))
        console.print(f"[green]MIDI exported:[/green] {midi}")


@app.command()
def listen(
    seconds: Optional[float] = typer.Option(
        None, "--seconds", "-s", help="Stop after this many seconds (default: Ctrl+C)"
    ),
    device: Optional[str] = typer.Option(
        None, "--device", help="Input device name or index"
    ),
    sample_rate: Optional[int] = typer.Option(
        None, "--sample-rate", help="Capture rate (default: device rate)"
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Record the session to this JSON path"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with pipeline settings"
    ),
    threshold: Optional[int] = typer.Option(
        None, "--threshold", "-t", help="Peak amplitude threshold (0-255)"
    ),
    min_duration: Optional[float] = typer.Option(
        None, "--min-duration", help="Debounce window in ms"
    ),
    notes: Optional[int] = typer.Option(
        None, "--notes", "-n", help="Maximum notes shown at once"
    ),
    fft_size: Optional[int] = typer.Option(
        None, "--fft-size", help="FFT window length"
    ),
    frame_rate: float = typer.Option(
        60.0, "--frame-rate", help="Analysis frames per second"
    ),
):
    """Detect notes from the microphone as they are played.

    Lane entries are printed as they happen. With **-o** the confirmed
    notes are also recorded, up to the configured maximum duration.

    **Examples:**

        notestream listen --seconds 20

        notestream listen -o take1.json --threshold 120
    """
    from .input import AudioSourceError, MicrophoneFrameSource
    from .pipeline import NoteStream
    from .recording import save_recording

    try:
        config = _build_config(config_file, threshold, min_duration, notes, None, fft_size)
        stream = NoteStream(config)
        source = MicrophoneFrameSource(
            sample_rate=sample_rate,
            device=_parse_device(device),
            fft_size=config.fft_size,
            frame_rate=frame_rate,
            max_duration=seconds,
        )
    except (AudioSourceError, ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if output:
        stream.start_recording(0.0)

    console.print(f"[blue]Listening[/blue] at {source.sample_rate} Hz (Ctrl+C to stop)")
    last_ms = 0.0
    try:
        for tick in stream.run(source):
            last_ms = tick.timestamp_ms
            for lane, note in tick.lanes.entered:
                console.print(f"  {last_ms / 1000:7.2f}s  lane {lane}  [cyan]{note}[/cyan]")
    except AudioSourceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("  Stopped")

    if output:
        recording = stream.stop_recording(last_ms)
        save_recording(output, recording)
        _show_recording_table(recording)
        console.print(f"[green]Recording saved:[/green] {output}")


@app.command()
def play(
    recording_file: Path = typer.Argument(..., help="Recording JSON file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output WAV path"
    ),
    gain: float = typer.Option(0.1, "--gain", help="Tone sustain gain"),
    sample_rate: int = typer.Option(44100, "--sample-rate", help="Output sample rate"),
    live: bool = typer.Option(
        False, "--live", help="Play through the default output device instead"
    ),
    device: Optional[str] = typer.Option(
        None, "--device", help="Output device name or index (with --live)"
    ),
):
    """Render a saved recording as sine tones to a WAV file, or play it.

    **Examples:**

        notestream play melody.json -o melody.wav

        notestream play melody.json --live
    """
    from .recording import load_recording

    try:
        recording = load_recording(recording_file)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if live:
        from .playback import AudioOutputError, LiveToneScheduler, Player

        try:
            with LiveToneScheduler(
                sample_rate=sample_rate, device=_parse_device(device)
            ) as scheduler:
                tones = Player(scheduler, gain=gain).play(recording)
                console.print(f"[blue]Playing {len(tones)} tones[/blue]")
                scheduler.wait()
        except (AudioOutputError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        except KeyboardInterrupt:
            console.print("  Stopped")
        return

    if output is None:
        output = recording_file.with_suffix(".wav")

    count = _render(recording, output, gain=gain, sample_rate=sample_rate)
    console.print(f"[green]Rendered {count} tones:[/green] {output}")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    fft_size: int = typer.Option(2048, "--fft-size", help="FFT window length"),
):
    """Show information about an audio file."""
    from .input import AudioLoader, AudioSourceError

    if fft_size <= 0:
        console.print(f"[red]Error: fft_size must be positive, got {fft_size}[/red]")
        raise typer.Exit(1)

    loader = AudioLoader()
    try:
        audio, sr = loader.load(str(input_file))
    except AudioSourceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {loader.get_duration(audio, sr):.2f} seconds")
    console.print(f"  Sample rate: {sr} Hz")
    console.print(f"  Samples: {len(audio):,}")
    console.print(f"  Bin width: {sr / fft_size:.2f} Hz at FFT size {fft_size}")


def _parse_device(device: Optional[str]):
    """sounddevice accepts an index or a name substring."""
    if device is None:
        return None
    return int(device) if device.isdigit() else device


def _render(recording, output: Path, gain: float, sample_rate: int) -> int:
    """Schedule ``recording`` on an offline renderer and write it out."""
    from .playback import OfflineToneRenderer, Player

    renderer = OfflineToneRenderer(sample_rate=sample_rate)
    tones = Player(renderer, gain=gain).play(recording)
    renderer.write(output)
    return len(tones)


def _show_lane_table(entries: List[dict]):
    """Display lane entries in a table."""
    table = Table(title="Lane Entries")
    table.add_column("Time (s)", style="green")
    table.add_column("Lane", style="yellow")
    table.add_column("Note", style="cyan")

    for entry in entries:
        table.add_row(
            f"{entry['time_ms'] / 1000:.3f}",
            str(entry["lane"]),
            entry["note"],
        )

    console.print(table)


def _show_recording_table(recording):
    """Display recorded notes in a table."""
    table = Table(title="Recorded Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Start (s)", style="green")
    table.add_column("Duration (s)", style="yellow")

    for item in sorted(recording, key=lambda n: n.start_time):
        table.add_row(
            item.note,
            f"{item.start_time / 1000:.3f}",
            f"{item.duration / 1000:.3f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
