import math

import pytest

from voronoi_sweep.geometry import (
    Bounds,
    InvalidBoundsError,
    Point,
    circumcenter,
    intersection_diagnostic,
    orientation,
    parabola_intersection_x,
    parabola_intersection_x_near_circle_event,
    parabola_y,
)

LEFT = Point(0.0, 0.0)
TOP = Point(10.0, -5.0)

# Roots of x^2 + 40x - 350 = 0: where the parabolas of LEFT and TOP meet when
# the directrix is at y=10.
INNER_ROOT = -20.0 + math.sqrt(750.0)
OUTER_ROOT = -20.0 - math.sqrt(750.0)


@pytest.mark.parametrize(
    "a, b, c",
    [
        ((0.0, 0.0), (10.0, -5.0), (20.0, 0.0)),
        ((1.0, 2.0), (4.0, 3.0), (-2.0, 5.0)),
        ((3.5, -1.0), (-7.0, 2.25), (0.0, 9.0)),
    ],
)
def test_orientation_is_antisymmetric(a, b, c):
    a, b, c = Point(*a), Point(*b), Point(*c)
    assert orientation(a, b, c) == pytest.approx(-orientation(a, c, b))
    assert orientation(a, b, c) != 0.0


def test_orientation_of_collinear_points_is_zero():
    assert orientation(Point(0, 0), Point(1, 1), Point(5, 5)) == 0.0


def test_orientation_is_positive_for_converging_triple():
    assert orientation(LEFT, TOP, Point(20.0, 0.0)) == pytest.approx(100.0)


def test_parabola_y_matches_closed_form():
    assert parabola_y(LEFT, 0.0, 10.0) == pytest.approx(5.0)
    assert parabola_y(LEFT, 10.0, 10.0) == pytest.approx(0.0)
    assert parabola_y(TOP, 10.0, 10.0) == pytest.approx(2.5)


def test_parabola_y_is_nan_on_the_directrix():
    assert math.isnan(parabola_y(Point(3.0, 10.0), 1.0, 10.0))


def test_parabola_point_is_equidistant_from_focus_and_directrix():
    focus = Point(4.0, -3.0)
    d = 7.0
    for x in (-10.0, 0.0, 4.0, 12.5):
        y = parabola_y(focus, x, d)
        assert math.hypot(x - focus.x, y - focus.y) == pytest.approx(abs(d - y))


def test_circumcenter_of_right_triangle():
    center = circumcenter(Point(0, 0), Point(2, 0), Point(0, 2))
    assert tuple(center) == pytest.approx((1.0, 1.0))


def test_circumcenter_is_equidistant():
    a, b, c = Point(1, 2), Point(4, 3), Point(-2, 5)
    center = circumcenter(a, b, c)
    assert center is not None
    ra = center.distance_to(a)
    assert center.distance_to(b) == pytest.approx(ra)
    assert center.distance_to(c) == pytest.approx(ra)


def test_circumcenter_of_collinear_points_is_none():
    assert circumcenter(Point(0, 0), Point(1, 1), Point(2, 2)) is None


def test_breakpoint_depends_on_which_focus_is_left():
    assert parabola_intersection_x(LEFT, TOP, 10.0) == pytest.approx(INNER_ROOT)
    assert parabola_intersection_x(TOP, LEFT, 10.0) == pytest.approx(OUTER_ROOT)


@pytest.mark.parametrize(
    "focus1, focus2, d",
    [
        ((0.0, 0.0), (10.0, -5.0), 10.0),
        ((10.0, -5.0), (0.0, 0.0), 10.0),
        ((540.0, 360.0), (640.0, 310.0), 461.0),
        ((-3.0, 1.0), (2.0, 4.0), 4.5),
    ],
)
def test_breakpoint_lies_on_both_parabolas(focus1, focus2, d):
    f1, f2 = Point(*focus1), Point(*focus2)
    x = parabola_intersection_x(f1, f2, d)
    assert parabola_y(f1, x, d) == pytest.approx(parabola_y(f2, x, d), rel=1e-9, abs=1e-9)


def test_breakpoint_hands_envelope_from_left_to_right_focus():
    d = 10.0
    x = parabola_intersection_x(LEFT, TOP, d)
    assert parabola_y(LEFT, x - 0.5, d) > parabola_y(TOP, x - 0.5, d)
    assert parabola_y(TOP, x + 0.5, d) > parabola_y(LEFT, x + 0.5, d)


def test_breakpoint_with_both_foci_on_directrix_is_midpoint():
    assert parabola_intersection_x(Point(2.0, 5.0), Point(8.0, 5.0), 5.0) == pytest.approx(5.0)


def test_breakpoint_with_one_focus_on_directrix_is_that_focus():
    assert parabola_intersection_x(Point(0.0, 0.0), Point(4.0, 10.0), 10.0) == pytest.approx(4.0)
    assert parabola_intersection_x(Point(4.0, 10.0), Point(0.0, 0.0), 10.0) == pytest.approx(4.0)


def test_breakpoint_of_foci_at_same_height_is_linear_solution():
    assert parabola_intersection_x(Point(0.0, 0.0), Point(10.0, 0.0), 5.0) == pytest.approx(5.0)


def test_near_circle_event_variant_picks_root_closest_to_target():
    assert parabola_intersection_x_near_circle_event(LEFT, TOP, 10.0, -40.0) == pytest.approx(OUTER_ROOT)
    assert parabola_intersection_x_near_circle_event(LEFT, TOP, 10.0, 0.0) == pytest.approx(INNER_ROOT)


def test_near_circle_event_variant_keeps_degenerate_handling():
    assert parabola_intersection_x_near_circle_event(
        Point(0.0, 0.0), Point(4.0, 10.0), 10.0, 100.0
    ) == pytest.approx(4.0)


def test_intersection_diagnostic_reports_both_roots():
    diag = intersection_diagnostic(LEFT, TOP, 10.0)
    assert sorted([diag.root1, diag.root2]) == pytest.approx([OUTER_ROOT, INNER_ROOT])
    assert diag.chosen_x == pytest.approx(INNER_ROOT)
    assert diag.contract_valid
    assert diag.contract_error < 1e-9


def test_intersection_diagnostic_single_root_leaves_nan():
    diag = intersection_diagnostic(Point(0.0, 0.0), Point(10.0, 0.0), 5.0)
    assert diag.chosen_x == pytest.approx(5.0)
    assert math.isnan(diag.root2)


def test_point_matches_within_eps():
    assert Point(1.0, 2.0).matches(Point(1.0 + 1e-7, 2.0))
    assert not Point(1.0, 2.0).matches(Point(1.001, 2.0))
    assert Point(1.0, 2.0).matches(Point(1.00005, 2.0), eps=1e-4)


def test_bounds_validation():
    bounds = Bounds(0.0, 0.0, 1280.0, 720.0)
    assert bounds.width == 1280.0
    assert bounds.height == 720.0
    assert bounds.contains(Point(0.0, 720.0))
    assert not bounds.contains(Point(-1.0, 10.0))

    with pytest.raises(InvalidBoundsError, match="min_x > max_x"):
        Bounds(10.0, 0.0, 0.0, 5.0)
    with pytest.raises(ValueError, match="min_y > max_y"):
        Bounds(0.0, 10.0, 5.0, 0.0)
