from .arena import ArcArena
from .model import (
    TRIPLE_EPS,
    Arc,
    ArcHandle,
    CircleEvent,
    EngineCounters,
    Event,
    SiteEvent,
    StaleHandleError,
    Triple,
    Vertex,
)
from .replay import advance_to, collect_circle_events, find_triple_arc, replay_to
from .sweep import NEAR_EVENT_WINDOW, SweepEngine, run_to_completion

__all__ = [
    "Arc",
    "ArcArena",
    "ArcHandle",
    "CircleEvent",
    "EngineCounters",
    "Event",
    "NEAR_EVENT_WINDOW",
    "SiteEvent",
    "StaleHandleError",
    "SweepEngine",
    "TRIPLE_EPS",
    "Triple",
    "Vertex",
    "advance_to",
    "collect_circle_events",
    "find_triple_arc",
    "replay_to",
    "run_to_completion",
]
