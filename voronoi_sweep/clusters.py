"""Seeded generator for small site clusters that stage well.

A cluster is drawn in the middle of the canvas, its sites are nudged
vertically so the sweep meets them at a readable pace, and it is accepted
only when the resulting diagram has a handful of compact circle events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np
from scipy.spatial.distance import pdist

from .engine import collect_circle_events
from .geometry import Bounds, Point, as_point
from .selector import EventSelector
from .visibility import CameraTransform

logger = logging.getLogger(__name__)

SelectorFactory = Callable[[CameraTransform], EventSelector]


@dataclass
class ClusterOptions:
    width: float = 1280.0
    height: float = 720.0
    central_width: float = 0.22
    central_height: float = 0.26
    zoom: float = 3.0
    max_attempts: int = 50
    min_circle_events: int = 3
    max_circle_events: int = 10
    max_radius_fraction: float = 0.45
    edge_padding_fraction: float = 0.05
    min_distance_fraction: float = 0.15

    def bounds(self) -> Bounds:
        return Bounds(0.0, 0.0, self.width, self.height)

    def transform_for(self, points: Sequence[Point]) -> CameraTransform:
        return CameraTransform.centered(self.bounds(), cluster_center(points), self.zoom)


def cluster_center(points: Sequence[Sequence[float]]) -> Point:
    arr = np.asarray(points, dtype=float)
    cx, cy = arr.mean(axis=0)
    return Point(float(cx), float(cy))


def top_site(points: Sequence[Point]) -> Point:
    return min(points, key=lambda p: p.y)


def _random_cluster(count: int, rng: np.random.Generator, options: ClusterOptions) -> np.ndarray:
    unit = rng.random((count, 2))
    pts = np.empty_like(unit)
    pts[:, 0] = (unit[:, 0] - 0.5) * options.width * options.central_width + options.width / 2.0
    pts[:, 1] = (unit[:, 1] - 0.5) * options.height * options.central_height + options.height / 2.0
    return pts[np.argsort(pts[:, 1], kind="stable")]


def _fix_highest(ys: np.ndarray, height: float) -> None:
    center = ys.mean()
    adjust = 0.0
    if ys[0] < center - 0.15 * height:
        adjust = center - 0.15 * height - ys[0]
    elif ys[0] > center - 0.142 * height:
        adjust = center - 0.142 * height - ys[0]
    if adjust != 0.0:
        ys[0] += adjust
        ys[1:] -= adjust / (ys.size - 1)


def _fix_second(ys: np.ndarray, height: float) -> None:
    center = ys.mean()
    if ys[1] < center - 0.135 * height:
        adjust = center - 0.135 * height - ys[1]
        ys[1] += adjust
        ys[2:] -= adjust / (ys.size - 2)


def _fix_remaining(ys: np.ndarray, height: float) -> None:
    # every later site starts at least 1% of the height below the second one
    floor = ys[1]
    for i in range(2, ys.size):
        if ys[i] > floor:
            continue
        catchup = floor - ys[i] + 0.01 * height
        ys[i] += catchup
        floor = ys[i]
        if i + 1 < ys.size:
            ys[i + 1 :] -= catchup / (ys.size - i - 1)


def shape_cluster(pts: np.ndarray, height: float) -> np.ndarray:
    """Apply the three vertical adjustments to y-sorted sites (in place)."""

    ys = pts[:, 1]
    _fix_highest(ys, height)
    _fix_second(ys, height)
    _fix_remaining(ys, height)
    return pts


def cluster_looks_nice(
    points: Sequence[Point],
    options: ClusterOptions,
    selector: Optional[SelectorFactory] = None,
) -> bool:
    arr = np.asarray(points, dtype=float)
    min_distance = options.min_distance_fraction * min(
        options.width * options.central_width, options.height * options.central_height
    )
    if arr.shape[0] > 1 and float(pdist(arr).min()) < min_distance:
        logger.debug("Cluster rejected: sites closer than %.1f", min_distance)
        return False

    bounds = options.bounds()
    events = collect_circle_events(points, bounds)
    if not options.min_circle_events <= len(events) <= options.max_circle_events:
        logger.debug("Cluster rejected: %d circle events", len(events))
        return False

    max_radius = min(options.width, options.height) * options.max_radius_fraction
    pad_x = options.width * options.edge_padding_fraction
    pad_y = options.height * options.edge_padding_fraction
    for event in events:
        cx, cy = event.center
        if event.radius > max_radius:
            logger.debug("Cluster rejected: circle radius %.1f", event.radius)
            return False
        if not (pad_x <= cx <= options.width - pad_x and pad_y <= cy <= options.height - pad_y):
            logger.debug("Cluster rejected: circle center (%.1f, %.1f) near the edge", cx, cy)
            return False

    if selector is not None:
        chosen = selector(options.transform_for(points)).find_eligible_event(
            points, bounds, required_site=top_site(points)
        )
        if chosen is None:
            logger.debug("Cluster rejected: no eligible event for the top site")
            return False
    return True


def generate_nice_cluster(
    count: int,
    rng: np.random.Generator,
    options: Optional[ClusterOptions] = None,
    *,
    selector: Optional[SelectorFactory] = None,
) -> Optional[List[Point]]:
    """Return ``count`` sites, top site first, or ``None`` after ``max_attempts``.

    ``selector`` builds an :class:`EventSelector` for a camera transform;
    when given, a cluster is accepted only if it yields an eligible event
    that involves its top site.
    """

    if count < 3:
        raise ValueError(f"A cluster needs at least 3 sites, got {count}")
    options = options or ClusterOptions()

    for attempt in range(1, options.max_attempts + 1):
        pts = shape_cluster(_random_cluster(count, rng, options), options.height)
        points = [as_point(p) for p in pts.tolist()]
        if cluster_looks_nice(points, options, selector):
            logger.info("Nice cluster found after %d attempt(s)", attempt)
            return points

    logger.info("No nice cluster after %d attempts", options.max_attempts)
    return None


__all__ = [
    "ClusterOptions",
    "cluster_center",
    "cluster_looks_nice",
    "generate_nice_cluster",
    "shape_cluster",
    "top_site",
]
