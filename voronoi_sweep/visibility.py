"""Rendered-length measurement of beachline arcs.

The beachline is sampled across the visible screen width, the winning arc
is found at every sample, and consecutive samples on the same arc instance
form a segment.  Lengths are reported in screen pixels so that every
threshold in the selector means "what the viewer would see".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .engine import Arc, SweepEngine
from .geometry import Bounds, Point, as_point

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SPACING_PX = 2.0


@dataclass(frozen=True)
class CameraTransform:
    """``screen = (world - focus) * zoom + screen_center`` on both axes."""

    zoom: float
    focus: Point
    screen_center: Point

    def __post_init__(self) -> None:
        if not self.zoom > 0.0:
            raise ValueError(f"zoom must be positive, got {self.zoom!r}")
        object.__setattr__(self, "focus", as_point(self.focus))
        object.__setattr__(self, "screen_center", as_point(self.screen_center))

    @classmethod
    def centered(cls, screen: Bounds, focus: Sequence[float], zoom: float) -> "CameraTransform":
        center = Point(0.5 * (screen.min_x + screen.max_x), 0.5 * (screen.min_y + screen.max_y))
        return cls(zoom=zoom, focus=as_point(focus), screen_center=center)

    def world_to_screen_x(self, wx: float) -> float:
        return (wx - self.focus.x) * self.zoom + self.screen_center.x

    def world_to_screen_y(self, wy: float) -> float:
        return (wy - self.focus.y) * self.zoom + self.screen_center.y

    def screen_to_world_x(self, sx: float) -> float:
        return (sx - self.screen_center.x) / self.zoom + self.focus.x

    def screen_to_world_y(self, sy: float) -> float:
        return (sy - self.screen_center.y) / self.zoom + self.focus.y

    def world_to_screen(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=float)
        offset = np.array([self.focus.x, self.focus.y])
        center = np.array([self.screen_center.x, self.screen_center.y])
        return (pts - offset) * self.zoom + center


@dataclass(eq=False)
class ArcSegment:
    """Visible run of one arc instance; ``points`` has shape ``(n, 2)``."""

    arc: Arc
    site: Point
    points: np.ndarray = field(repr=False)

    def __len__(self) -> int:
        return int(self.points.shape[0])


def visible_world_x_range(transform: CameraTransform, screen: Bounds) -> Tuple[float, float]:
    return transform.screen_to_world_x(screen.min_x), transform.screen_to_world_x(screen.max_x)


def _envelope_candidates(foci: np.ndarray, xs: np.ndarray, directrix_y: float) -> np.ndarray:
    fx = foci[:, 0:1]
    fy = foci[:, 1:2]
    den = 2.0 * (fy - directrix_y)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        ys = ((xs[np.newaxis, :] - fx) ** 2 + fy * fy - directrix_y * directrix_y) / den
    ys[np.broadcast_to(den == 0.0, ys.shape)] = np.nan
    return ys


def _site_labels(arcs: Sequence[Arc]) -> Tuple[np.ndarray, Dict[int, List[int]]]:
    ids: Dict[Point, int] = {}
    labels = np.empty(len(arcs), dtype=int)
    instances: Dict[int, List[int]] = {}
    for position, arc in enumerate(arcs):
        label = ids.setdefault(arc.site, len(ids))
        labels[position] = label
        instances.setdefault(label, []).append(position)
    return labels, instances


def _claim_instance(
    engine: SweepEngine, arcs: Sequence[Arc], candidates: List[int], cursor: int, x: float
) -> int:
    if len(candidates) == 1:
        return candidates[0]
    for position in candidates:
        left, right = engine.breakpoints(arcs[position].handle)
        if left <= x <= right:
            return position
    ahead = [p for p in candidates if p >= cursor]
    return ahead[0] if ahead else candidates[0]


def compute_segments(
    engine: SweepEngine,
    sweep_y: float,
    screen: Bounds,
    transform: CameraTransform,
    spacing_px: float = DEFAULT_SAMPLE_SPACING_PX,
) -> List[ArcSegment]:
    """Segment the beachline at ``sweep_y`` into visible arc-instance runs.

    The envelope only tells which *site* wins at a sample.  When that site
    owns several arcs, the run goes to the instance whose extent from
    :meth:`SweepEngine.breakpoints` encloses it, falling back to the next
    unclaimed instance in beachline order.  ``sweep_y`` is expected to be
    the engine's own sweep position.
    """

    arcs = list(engine.iter_arcs())
    if not arcs:
        return []

    left, right = visible_world_x_range(transform, screen)
    xs = np.arange(left, right, spacing_px / transform.zoom)
    if xs.size == 0:
        return []

    foci = np.array([(arc.site.x, arc.site.y) for arc in arcs], dtype=float)
    ys = _envelope_candidates(foci, xs, sweep_y)
    finite = np.isfinite(ys)
    masked = np.where(finite, ys, -np.inf)
    winners = np.argmax(masked, axis=0)
    best_y = masked[winners, np.arange(xs.size)]

    site_of_arc, instances = _site_labels(arcs)
    labels = np.where(finite.any(axis=0), site_of_arc[winners], -1)

    cuts = np.flatnonzero(labels[1:] != labels[:-1]) + 1
    starts = np.concatenate(([0], cuts))
    ends = np.concatenate((cuts, [labels.size]))

    segments: List[ArcSegment] = []
    cursor = 0
    previous: Optional[Tuple[int, int]] = None
    for start, end in zip(starts, ends):
        label = int(labels[start])
        if label < 0:
            continue
        if previous is not None and previous[0] == label:
            # same site on both sides of an undefined gap
            position = previous[1]
        else:
            mid_x = float(xs[(start + end - 1) // 2])
            position = _claim_instance(engine, arcs, instances[label], cursor, mid_x)
            cursor = position + 1
        previous = (label, position)
        arc = arcs[position]
        points = np.column_stack((xs[start:end], best_y[start:end]))
        segments.append(ArcSegment(arc=arc, site=arc.site, points=points))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Segmented %d arc(s) into %d run(s) at sweep y=%.3f", len(arcs), len(segments), sweep_y
        )
    return segments


def measure_arc_instance_pixels(
    segments: Sequence[ArcSegment], target: Arc, transform: CameraTransform
) -> Optional[float]:
    """Screen-space polyline length of ``target``; ``None`` when not visible."""

    total = 0.0
    found = False
    for segment in segments:
        if segment.arc is not target:
            continue
        found = True
        if len(segment) < 2:
            continue
        screen_pts = transform.world_to_screen(segment.points)
        total += float(np.hypot(*np.diff(screen_pts, axis=0).T).sum())
    return total if found else None


def measure_arcs(
    engine: SweepEngine,
    sweep_y: float,
    arcs: Sequence[Arc],
    screen: Bounds,
    transform: CameraTransform,
    spacing_px: float = DEFAULT_SAMPLE_SPACING_PX,
) -> List[Optional[float]]:
    """Segment once and measure several arc instances."""

    segments = compute_segments(engine, sweep_y, screen, transform, spacing_px)
    return [measure_arc_instance_pixels(segments, arc, transform) for arc in arcs]


__all__ = [
    "ArcSegment",
    "CameraTransform",
    "DEFAULT_SAMPLE_SPACING_PX",
    "compute_segments",
    "measure_arc_instance_pixels",
    "measure_arcs",
    "visible_world_x_range",
]
