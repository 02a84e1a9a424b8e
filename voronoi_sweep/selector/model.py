"""Result records produced by the event selector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..engine import Triple
from ..geometry import Point


@dataclass(frozen=True)
class TripleProbe:
    """Rendered lengths of a triple's three arc instances at sweep ``y``.

    ``exists`` is ``False`` when no beachline arc carries the triple at ``y``;
    a length is ``None`` when that arc is not visible on screen.
    """

    y: float
    exists: bool
    prev_px: Optional[float] = None
    doomed_px: Optional[float] = None
    next_px: Optional[float] = None
    sites: Optional[Tuple[Point, Point, Point]] = None

    @classmethod
    def missing(cls, y: float) -> "TripleProbe":
        return cls(y=y, exists=False)

    @property
    def lengths(self) -> Tuple[Optional[float], Optional[float], Optional[float]]:
        return self.prev_px, self.doomed_px, self.next_px

    @property
    def all_measured(self) -> bool:
        return self.exists and all(length is not None for length in self.lengths)

    @property
    def min_px(self) -> Optional[float]:
        if not self.all_measured:
            return None
        return min(self.lengths)  # type: ignore[type-var]

    def all_at_least(self, threshold_px: float) -> bool:
        smallest = self.min_px
        return smallest is not None and smallest >= threshold_px

    def smallest_site(self) -> Optional[Point]:
        """Site of the shortest of the three arcs, ``None`` unless all are measured."""

        if not self.all_measured or self.sites is None:
            return None
        index = min(range(3), key=lambda i: self.lengths[i])  # type: ignore[return-value]
        return self.sites[index]


@dataclass(frozen=True)
class Rejection:
    event_y: Optional[float]
    reason: str

    def __str__(self) -> str:
        if self.event_y is None:
            return self.reason
        return f"[y={self.event_y:.2f}] {self.reason}"


@dataclass(frozen=True)
class ChosenEvent:
    triple: Triple
    doomed_site: Point
    event_y: float
    center: Point
    radius: float
    preview_y: float
    arc_chord_length: float
    wake_y: float
    approach_y: float
    wake_min_arc_px: float
    approach_doomed_px: float

    @property
    def preview_distance(self) -> float:
        return self.event_y - self.preview_y

    def to_dict(self) -> Dict[str, object]:
        return {
            "triple": [[p.x, p.y] for p in self.triple],
            "doomed_site": [self.doomed_site.x, self.doomed_site.y],
            "event_y": self.event_y,
            "center": [self.center.x, self.center.y],
            "radius": self.radius,
            "preview_y": self.preview_y,
            "arc_chord_length": self.arc_chord_length,
            "wake_y": self.wake_y,
            "approach_y": self.approach_y,
            "wake_min_arc_px": self.wake_min_arc_px,
            "approach_doomed_px": self.approach_doomed_px,
        }

    def __str__(self) -> str:
        return (
            f"ChosenEvent[y={self.event_y:.2f}, center=({self.center.x:.2f}, {self.center.y:.2f}), "
            f"radius={self.radius:.2f}, wake_y={self.wake_y:.2f}, approach_y={self.approach_y:.2f}, "
            f"wake_min_arc={self.wake_min_arc_px:.1f}px, approach_doomed={self.approach_doomed_px:.1f}px]"
        )


__all__ = ["ChosenEvent", "Rejection", "TripleProbe"]
