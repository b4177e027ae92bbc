"""Save and load recordings as JSON."""

import json
from pathlib import Path
from typing import List, Union

from ..core import RecordedNote

FORMAT_VERSION = 1


def save_recording(path: Union[str, Path], recording: List[RecordedNote]) -> None:
    """Write a recording to ``path`` as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": FORMAT_VERSION,
        "notes": [note.to_dict() for note in recording],
    }
    path.write_text(json.dumps(payload, indent=2))


def load_recording(path: Union[str, Path]) -> List[RecordedNote]:
    """
    Read a recording written by ``save_recording``.

    A bare JSON list of note dictionaries is accepted too.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the content is not a recording
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Recording not found: {path}")

    data = json.loads(path.read_text())
    notes = data.get("notes") if isinstance(data, dict) else data
    if not isinstance(notes, list):
        raise ValueError(f"Not a recording file: {path}")

    try:
        return [RecordedNote.from_dict(item) for item in notes]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed note in {path}: {e}") from e
