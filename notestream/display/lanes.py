"""Lane assignment - keep confirmed notes in stable display slots."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from ..core.constants import DEFAULT_NOTES_TO_SHOW


class LaneEventType(Enum):
    """What happened to a lane during a tick."""

    ENTERED = "entered"
    VACATED = "vacated"


@dataclass(frozen=True)
class LaneEvent:
    """A note entering or leaving a lane."""

    kind: LaneEventType
    lane: int
    note: str


@dataclass
class LaneUpdate:
    """Result of one lane assignment tick."""

    slots: Tuple[Optional[str], ...]
    events: List[LaneEvent] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)  # confirmed but no free lane

    @property
    def entered(self) -> List[Tuple[int, str]]:
        """(lane, note) pairs for notes that entered the display this tick."""
        return [(e.lane, e.note) for e in self.events if e.kind is LaneEventType.ENTERED]

    @property
    def vacated(self) -> List[Tuple[int, str]]:
        """(lane, note) pairs for notes that left the display this tick."""
        return [(e.lane, e.note) for e in self.events if e.kind is LaneEventType.VACATED]


class LaneAssignor:
    """Map a changing set of notes onto a fixed number of lanes.

    Occupants keep their lane for as long as they stay confirmed and are
    never preempted; a new note takes the lowest free lane or is dropped
    when every lane is taken.
    """

    def __init__(self, num_lanes: int = DEFAULT_NOTES_TO_SHOW):
        if num_lanes < 0:
            raise ValueError(f"num_lanes must be >= 0, got {num_lanes}")
        self.num_lanes = num_lanes
        self._slots: List[Optional[str]] = [None] * num_lanes

    @property
    def slots(self) -> Tuple[Optional[str], ...]:
        """Lane contents, index -> note name or None."""
        return tuple(self._slots)

    def lane_of(self, note: str) -> int:
        """Lane holding ``note``, -1 if it is not displayed."""
        try:
            return self._slots.index(note)
        except ValueError:
            return -1

    def update(self, confirmed: Iterable[str]) -> LaneUpdate:
        """
        Assign this tick's confirmed notes to lanes.

        Args:
            confirmed: Confirmed note names; new notes are placed in the
                order given

        Returns:
            LaneUpdate with the new slot contents, entered/vacated events
            and the notes that found no free lane
        """
        confirmed = list(dict.fromkeys(confirmed))
        wanted = set(confirmed)
        events: List[LaneEvent] = []

        matched = set()
        for lane, note in enumerate(self._slots):
            if note is None:
                continue
            if note in wanted:
                matched.add(note)
            else:
                self._slots[lane] = None
                events.append(LaneEvent(LaneEventType.VACATED, lane, note))

        dropped = []
        for note in confirmed:
            if note in matched:
                continue
            try:
                lane = self._slots.index(None)
            except ValueError:
                dropped.append(note)
                continue
            self._slots[lane] = note
            events.append(LaneEvent(LaneEventType.ENTERED, lane, note))

        return LaneUpdate(slots=self.slots, events=events, dropped=dropped)

    def clear(self) -> List[LaneEvent]:
        """Vacate every lane, returning the vacated events."""
        return self.update(()).events
