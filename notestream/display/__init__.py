"""Display layer - Stable lane assignment for rendering collaborators."""

from .lanes import LaneAssignor, LaneEvent, LaneEventType, LaneUpdate

__all__ = [
    "LaneAssignor",
    "LaneEvent",
    "LaneEventType",
    "LaneUpdate",
]
