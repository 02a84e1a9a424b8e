"""Core data structures for the sweep engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

from ..geometry import Point, Site

TRIPLE_EPS = 1e-5


class StaleHandleError(LookupError):
    """Raised when an arc handle outlived the arc it pointed to."""


@dataclass(frozen=True)
class ArcHandle:
    """Generation-checked reference into an :class:`~.arena.ArcArena`."""

    index: int
    generation: int

    def __repr__(self) -> str:
        return f"ArcHandle({self.index}@{self.generation})"


class Triple(NamedTuple):
    """Previous, doomed and next site of a circle event."""

    a: Site
    b: Site
    c: Site

    @property
    def doomed(self) -> Site:
        return self.b

    @property
    def max_y(self) -> float:
        return max(self.a.y, self.b.y, self.c.y)

    def contains(self, site: Point, eps: float = TRIPLE_EPS) -> bool:
        return any(p.matches(site, eps) for p in self)

    def matches(self, other: "Triple", eps: float = TRIPLE_EPS) -> bool:
        """Order-independent comparison within ``eps``."""

        mine = sorted(self, key=lambda p: (p.y, p.x))
        theirs = sorted(other, key=lambda p: (p.y, p.x))
        return all(p.matches(q, eps) for p, q in zip(mine, theirs))

    def describe(self) -> str:
        return "[" + " ".join(f"({p.x:.1f},{p.y:.1f})" for p in self) + "]"


@dataclass(frozen=True)
class SiteEvent:
    site: Site

    @property
    def y(self) -> float:
        return self.site.y


@dataclass(eq=False)
class CircleEvent:
    """Predicted vanishing of the arc ``arc`` at sweep position ``y``.

    ``arc_version`` is the owning arc's version when the prediction was made;
    the event is stale once the arc's version moves on.
    """

    center: Point
    y: float
    radius: float
    triple: Triple
    arc: ArcHandle
    arc_version: int
    valid: bool = True

    def describe(self) -> str:
        return (
            f"y={self.y:.2f} c=({self.center.x:.1f},{self.center.y:.1f}) "
            f"sites={self.triple.describe()}"
        )


Event = Union[SiteEvent, CircleEvent]


@dataclass
class Arc:
    """One beachline arc.  Links are handles, never direct references."""

    site: Site
    handle: ArcHandle
    prev: Optional[ArcHandle] = None
    next: Optional[ArcHandle] = None
    circle_event: Optional[CircleEvent] = None
    version: int = 0

    def invalidate_prediction(self) -> None:
        if self.circle_event is not None:
            self.circle_event.valid = False
            self.circle_event = None
        self.version += 1


@dataclass(frozen=True)
class Vertex:
    point: Point
    triple: Triple


@dataclass
class EngineCounters:
    site_events: int = 0
    circle_events: int = 0
    stale_events: int = 0
    predictions: int = field(default=0)
