"""Numeric kernel shared by the sweep engine and the visibility measurement.

Coordinates are screen-style: ``y`` grows downward and the sweep line moves
toward increasing ``y``.  For a focus above the directrix the parabola opens
toward smaller ``y``, so the beachline at a given ``x`` is the parabola with
the greatest ``y`` value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple, Union

SITE_EPS = 1e-6

_AREA_EPS = 1e-9
_DIRECTRIX_EPS = 1e-9
_COEFF_EPS = 1e-12
_PROBE_FRACTION = 1e-4
_CONTRACT_TOL = 1e-6


class Point(NamedTuple):
    x: float
    y: float

    def matches(self, other: "Point", eps: float = SITE_EPS) -> bool:
        """Return ``True`` when both coordinates agree within ``eps``."""

        return abs(self.x - other.x) < eps and abs(self.y - other.y) < eps

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


Site = Point


def as_point(value) -> Point:
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


class InvalidBoundsError(ValueError):
    """Raised when a rectangle is constructed with min > max on an axis."""


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        if self.min_x > self.max_x:
            raise InvalidBoundsError(
                f"Invalid bounds: min_x > max_x ({self.min_x} > {self.max_x})"
            )
        if self.min_y > self.max_y:
            raise InvalidBoundsError(
                f"Invalid bounds: min_y > max_y ({self.min_y} > {self.max_y})"
            )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, p: Point) -> bool:
        return self.min_x <= p.x <= self.max_x and self.min_y <= p.y <= self.max_y


def orientation(a: Point, b: Point, c: Point) -> float:
    """Signed cross product ``(b - a) x (c - a)``; zero when collinear."""

    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def parabola_y(focus: Point, x: float, directrix_y: float) -> float:
    """Evaluate the parabola with ``focus`` and horizontal directrix at ``x``."""

    den = 2.0 * (focus.y - directrix_y)
    if den == 0.0:
        return math.nan
    return ((x - focus.x) ** 2 + focus.y * focus.y - directrix_y * directrix_y) / den


def circumcenter(a: Point, b: Point, c: Point) -> Optional[Point]:
    """Circumcenter of ``abc`` or ``None`` for (nearly) collinear input."""

    d = 2.0 * (a.x * (b.y - c.y) + b.x * (c.y - a.y) + c.x * (a.y - b.y))
    if abs(d) < _AREA_EPS:
        return None

    a2 = a.x * a.x + a.y * a.y
    b2 = b.x * b.x + b.y * b.y
    c2 = c.x * c.x + c.y * c.y
    ux = (a2 * (b.y - c.y) + b2 * (c.y - a.y) + c2 * (a.y - b.y)) / d
    uy = (a2 * (c.x - b.x) + b2 * (a.x - c.x) + c2 * (b.x - a.x)) / d
    return Point(ux, uy)


def _breakpoint_roots(
    focus1: Point, focus2: Point, directrix_y: float
) -> Union[float, Tuple[float, float]]:
    """Solve ``y1(x) == y2(x)``.

    Returns a single ``float`` when no choice is left to make (degenerate
    foci, linear case, no real roots, one finite root) and the pair of
    finite roots otherwise.
    """

    fx1, fy1 = focus1
    fx2, fy2 = focus2
    d = directrix_y
    mid = 0.5 * (fx1 + fx2)

    den1 = fy1 - d
    den2 = fy2 - d
    if abs(den1) < _DIRECTRIX_EPS and abs(den2) < _DIRECTRIX_EPS:
        return mid
    if abs(den1) < _DIRECTRIX_EPS:
        return fx1
    if abs(den2) < _DIRECTRIX_EPS:
        return fx2

    # y = A x^2 + B x + C for each parabola
    a1 = 1.0 / (2.0 * den1)
    b1 = -fx1 / den1
    c1 = (fx1 * fx1 + fy1 * fy1 - d * d) / (2.0 * den1)
    a2 = 1.0 / (2.0 * den2)
    b2 = -fx2 / den2
    c2 = (fx2 * fx2 + fy2 * fy2 - d * d) / (2.0 * den2)

    a = a1 - a2
    b = b1 - b2
    c = c1 - c2

    if abs(a) < _COEFF_EPS:
        if abs(b) < _COEFF_EPS:
            return mid
        return -c / b

    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return mid

    sqrt_disc = math.sqrt(disc)
    r1 = (-b - sqrt_disc) / (2.0 * a)
    r2 = (-b + sqrt_disc) / (2.0 * a)
    r1_ok = math.isfinite(r1)
    r2_ok = math.isfinite(r2)
    if not r1_ok and not r2_ok:
        return mid
    if r1_ok and not r2_ok:
        return r1
    if r2_ok and not r1_ok:
        return r2
    return r1, r2


def _hands_over(focus1: Point, focus2: Point, directrix_y: float, root: float, dx: float) -> bool:
    # focus1 owns the envelope just left of root, focus2 just right of it
    left = parabola_y(focus1, root - dx, directrix_y) - parabola_y(focus2, root - dx, directrix_y)
    right = parabola_y(focus1, root + dx, directrix_y) - parabola_y(focus2, root + dx, directrix_y)
    return left >= 0.0 and right <= 0.0


def parabola_intersection_x(focus1: Point, focus2: Point, directrix_y: float) -> float:
    """X of the breakpoint between a left arc of ``focus1`` and a right arc of ``focus2``.

    The foci are not reordered: the two breakpoints shared by a pair of sites
    are told apart by which focus is on the left.
    """

    roots = _breakpoint_roots(focus1, focus2, directrix_y)
    if not isinstance(roots, tuple):
        return roots
    r1, r2 = roots

    dx = _PROBE_FRACTION * max(1.0, abs(focus2.x - focus1.x))
    r1_ok = _hands_over(focus1, focus2, directrix_y, r1, dx)
    r2_ok = _hands_over(focus1, focus2, directrix_y, r2, dx)
    if r1_ok and not r2_ok:
        return r1
    if r2_ok and not r1_ok:
        return r2

    lo = min(focus1.x, focus2.x)
    hi = max(focus1.x, focus2.x)
    r1_between = lo <= r1 <= hi
    r2_between = lo <= r2 <= hi
    if r1_between and not r2_between:
        return r1
    if r2_between and not r1_between:
        return r2

    mid = 0.5 * (focus1.x + focus2.x)
    return r1 if abs(r1 - mid) < abs(r2 - mid) else r2


def parabola_intersection_x_near_circle_event(
    focus1: Point, focus2: Point, directrix_y: float, target_x: float
) -> float:
    """Breakpoint X for a sweep that is about to reach a circle event.

    Close to the event the side probe tends to pick the diverging outer root,
    so the root nearest the circle center's ``target_x`` is used instead.
    """

    roots = _breakpoint_roots(focus1, focus2, directrix_y)
    if not isinstance(roots, tuple):
        return roots
    r1, r2 = roots
    return r1 if abs(r1 - target_x) < abs(r2 - target_x) else r2


@dataclass
class IntersectionDiagnostic:
    """Both raw roots of a breakpoint equation and the contract check."""

    chosen_x: float
    root1: float
    root2: float
    contract_error: float
    contract_valid: bool


def intersection_diagnostic(focus1: Point, focus2: Point, directrix_y: float) -> IntersectionDiagnostic:
    chosen = parabola_intersection_x(focus1, focus2, directrix_y)
    roots = _breakpoint_roots(focus1, focus2, directrix_y)
    if isinstance(roots, tuple):
        root1, root2 = roots
    else:
        root1, root2 = roots, math.nan

    y1 = parabola_y(focus1, chosen, directrix_y)
    y2 = parabola_y(focus2, chosen, directrix_y)
    error = abs(y1 - y2)
    scale = max(1.0, abs(y1), abs(y2))
    valid = math.isfinite(error) and error < _CONTRACT_TOL * scale
    return IntersectionDiagnostic(
        chosen_x=chosen,
        root1=root1,
        root2=root2,
        contract_error=error,
        contract_valid=valid,
    )


__all__ = [
    "Bounds",
    "IntersectionDiagnostic",
    "InvalidBoundsError",
    "Point",
    "SITE_EPS",
    "Site",
    "as_point",
    "circumcenter",
    "intersection_diagnostic",
    "orientation",
    "parabola_intersection_x",
    "parabola_intersection_x_near_circle_event",
    "parabola_y",
]
