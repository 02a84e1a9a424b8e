"""Rebuild-and-replay helpers used by every probe of the selector.

Probes never rewind an engine: they construct a fresh one from the same
sites and advance it to the requested sweep position.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..geometry import Bounds, Point
from .model import TRIPLE_EPS, Arc, CircleEvent, Triple
from .sweep import SweepEngine, run_to_completion


def advance_to(engine: SweepEngine, y: float) -> SweepEngine:
    """Process every event at or before ``y`` and leave the sweep at ``y``."""

    while True:
        next_y = engine.next_event_y()
        if next_y is None or next_y > y:
            break
        engine.step()
    engine.move_sweep(y)
    return engine


def replay_to(sites: Iterable[Sequence[float]], bounds: Bounds, y: float) -> SweepEngine:
    return advance_to(SweepEngine(sites, bounds), y)


def find_triple_arc(
    engine: SweepEngine,
    triple: Triple,
    eps: float = TRIPLE_EPS,
    doomed_site: Optional[Point] = None,
) -> Optional[Arc]:
    """Locate the arc whose ``(prev, self, next)`` sites match ``triple``.

    Matching ignores order.  When several arcs match, the one whose own site
    is ``doomed_site`` wins; otherwise the first in beachline order.
    """

    fallback: Optional[Arc] = None
    for arc in engine.iter_arcs():
        candidate = engine.triple_of(arc)
        if candidate is None or not candidate.matches(triple, eps):
            continue
        if doomed_site is None or arc.site.matches(doomed_site, eps):
            return arc
        if fallback is None:
            fallback = arc
    return fallback


def collect_circle_events(sites: Iterable[Sequence[float]], bounds: Bounds) -> List[CircleEvent]:
    """Run a fresh engine to completion; fired events in firing order."""

    return run_to_completion(SweepEngine(sites, bounds))


__all__ = ["advance_to", "collect_circle_events", "find_triple_arc", "replay_to"]
