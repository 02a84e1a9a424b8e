import math
import random

import numpy as np
import pytest
from scipy.spatial import Voronoi

from voronoi_sweep.engine import (
    ArcArena,
    CircleEvent,
    SiteEvent,
    StaleHandleError,
    SweepEngine,
    Triple,
    advance_to,
    collect_circle_events,
    find_triple_arc,
    replay_to,
    run_to_completion,
)
from voronoi_sweep.geometry import Bounds, Point

BOUNDS = Bounds(-1000.0, -1000.0, 1000.0, 1000.0)

LEFT = Point(0.0, 0.0)
TOP = Point(10.0, -5.0)
RIGHT = Point(20.0, 0.0)
INSIDE = Point(10.0, 5.0)


def _random_sites(seed, count=25, scale=100.0):
    rng = np.random.default_rng(seed)
    return [Point(float(x), float(y)) for x, y in rng.uniform(0.0, scale, size=(count, 2))]


def _site_sequence(engine):
    return [arc.site for arc in engine.iter_arcs()]


def test_empty_engine_has_nothing_to_do():
    engine = SweepEngine([], BOUNDS)
    assert engine.beachline() is None
    assert engine.next_event_y() is None
    assert engine.step() is False
    assert engine.last_event() is None


def test_first_site_installs_single_arc():
    engine = SweepEngine([TOP], BOUNDS)
    assert engine.step()
    assert engine.arc_count == 1
    assert engine.arc(engine.beachline()).site == TOP
    assert isinstance(engine.last_event(), SiteEvent)
    assert engine.sweep_y == TOP.y


def test_three_site_scenario_fires_one_event():
    engine = SweepEngine([LEFT, RIGHT, TOP], BOUNDS)
    fired = run_to_completion(engine)

    assert len(fired) == 1
    event = fired[0]
    assert event.y == pytest.approx(20.0)
    assert tuple(event.center) == pytest.approx((10.0, 7.5))
    assert event.radius == pytest.approx(12.5)
    assert event.triple == Triple(LEFT, TOP, RIGHT)
    assert event.triple.doomed == TOP

    assert engine.site_events_processed == 3
    assert engine.circle_events_processed == 1
    assert engine.arc_count == 4
    assert _site_sequence(engine) == [TOP, LEFT, RIGHT, TOP]
    assert [tuple(v.point) for v in engine.vertices] == [pytest.approx((10.0, 7.5))]
    assert engine.step() is False
    assert engine.last_event() is None


def test_split_site_owns_two_arcs():
    engine = replay_to([LEFT, RIGHT, TOP], BOUNDS, 10.0)
    assert _site_sequence(engine) == [TOP, LEFT, TOP, RIGHT, TOP]
    assert engine.sweep_y == 10.0
    assert engine.next_event_y() == pytest.approx(20.0)
    assert isinstance(engine.next_event(), CircleEvent)


def test_site_inside_predicted_circle_invalidates_it():
    engine = SweepEngine([LEFT, RIGHT, TOP, INSIDE], BOUNDS)
    fired = run_to_completion(engine)

    assert engine.stale_events_discarded == 1
    assert engine.circle_events_processed == 2
    centers = sorted(tuple(event.center) for event in fired)
    assert centers[0] == pytest.approx((6.25, 0.0))
    assert centers[1] == pytest.approx((13.75, 0.0))
    assert all(not event.triple.matches(Triple(LEFT, TOP, RIGHT)) for event in fired)
    assert engine.arc_count == 2 * 4 - 1 - 2


def test_breakpoints_bound_each_arc():
    engine = replay_to([LEFT, RIGHT, TOP], BOUNDS, 10.0)
    handles = [arc.handle for arc in engine.iter_arcs()]
    extents = [engine.breakpoints(handle) for handle in handles]

    assert extents[0][0] == -math.inf
    assert extents[-1][1] == math.inf
    assert extents[1][1] == pytest.approx(-20.0 + math.sqrt(750.0))
    assert extents[2][1] == pytest.approx(20.0 - (-20.0 + math.sqrt(750.0)))
    for (_, right), (left, _) in zip(extents, extents[1:]):
        assert right == pytest.approx(left)


@pytest.mark.parametrize("seed", [3, 11, 29])
def test_events_are_processed_in_sweep_order(seed):
    sites = _random_sites(seed)
    engine = SweepEngine(sites, BOUNDS)
    seen_sites = []
    last_y = -math.inf
    while engine.step():
        event = engine.last_event()
        assert event.y >= last_y
        assert engine.sweep_y == event.y
        last_y = event.y
        if isinstance(event, SiteEvent):
            seen_sites.append(event.site)
    assert sorted(seen_sites) == sorted(sites)


@pytest.mark.parametrize("seed", [3, 11, 29])
def test_arc_count_follows_processed_events(seed):
    engine = SweepEngine(_random_sites(seed), BOUNDS)
    while engine.step():
        k = engine.site_events_processed
        c = engine.circle_events_processed
        assert engine.arc_count == 2 * k - 1 - c


@pytest.mark.parametrize("seed", [5, 17])
def test_beachline_is_ordered_between_events(seed):
    engine = SweepEngine(_random_sites(seed), BOUNDS)
    while engine.step():
        next_y = engine.next_event_y()
        if next_y is None or next_y - engine.sweep_y < 1e-3:
            continue
        probe = replay_to(engine.sites, BOUNDS, 0.5 * (engine.sweep_y + next_y))
        extents = [probe.breakpoints(arc.handle) for arc in probe.iter_arcs()]
        for left, right in extents:
            assert left <= right + 1e-6
        for (_, right), (left, _) in zip(extents, extents[1:]):
            assert right == pytest.approx(left, abs=1e-6)


@pytest.mark.parametrize("seed", [1, 8, 42])
def test_vertices_match_scipy_voronoi(seed):
    sites = _random_sites(seed, count=30)
    fired = collect_circle_events(sites, BOUNDS)
    reference = Voronoi(np.array(sites))

    assert len(fired) == len(reference.vertices)
    for event in fired:
        distances = np.hypot(*(reference.vertices - np.array(event.center)).T)
        assert distances.min() < 1e-6 * max(1.0, math.hypot(*event.center))


def _event_signature(event):
    triple = tuple(sorted((round(p.x, 9), round(p.y, 9)) for p in event.triple))
    return (triple, round(event.y, 9), round(event.center.x, 9), round(event.center.y, 9), round(event.radius, 9))


@pytest.mark.parametrize("seed", [0, 4, 21, 33, 57, 90])
def test_result_does_not_depend_on_input_order(seed):
    sites = _random_sites(seed)
    shuffled = list(sites)
    random.Random(seed).shuffle(shuffled)
    first = collect_circle_events(sites, BOUNDS)
    second = collect_circle_events(shuffled, BOUNDS)
    assert sorted(map(_event_signature, first)) == sorted(map(_event_signature, second))


def test_advance_to_moves_sweep_without_passing_events():
    engine = SweepEngine([LEFT, RIGHT, TOP], BOUNDS)
    advance_to(engine, 19.0)
    assert engine.sweep_y == 19.0
    assert engine.circle_events_processed == 0
    advance_to(engine, 5.0)
    assert engine.sweep_y == 19.0
    advance_to(engine, 25.0)
    assert engine.circle_events_processed == 1
    assert engine.sweep_y == 25.0


def test_find_triple_arc_ignores_order_and_prefers_doomed_site():
    engine = replay_to([LEFT, RIGHT, TOP], BOUNDS, 10.0)
    arc = find_triple_arc(engine, Triple(RIGHT, LEFT, TOP), doomed_site=TOP)
    assert arc is not None
    assert arc.site == TOP
    assert engine.triple_of(arc) == Triple(LEFT, TOP, RIGHT)
    assert find_triple_arc(engine, Triple(LEFT, TOP, INSIDE)) is None


def test_drain_returns_each_fired_event_once():
    engine = SweepEngine([LEFT, RIGHT, TOP], BOUNDS)
    while engine.step():
        pass
    assert len(engine.drain_circle_events()) == 1
    assert engine.drain_circle_events() == []


def test_arena_handles_go_stale_after_release():
    arena = ArcArena()
    arc = arena.allocate(LEFT)
    handle = arc.handle
    assert handle in arena
    assert len(arena) == 1

    arena.release(handle)
    assert arena.resolve(handle) is None
    assert handle not in arena
    with pytest.raises(StaleHandleError):
        arena.get(handle)

    reused = arena.allocate(RIGHT)
    assert reused.handle.index == handle.index
    assert reused.handle.generation == handle.generation + 1
    assert arena.resolve(handle) is None
    assert arena.get(reused.handle).site == RIGHT


def test_release_invalidates_pending_prediction():
    engine = replay_to([LEFT, RIGHT, TOP], BOUNDS, 10.0)
    pending = engine.next_event()
    assert pending.valid
    doomed = engine.arc(pending.arc)
    assert doomed.circle_event is pending
    version = doomed.version

    doomed.invalidate_prediction()
    assert not pending.valid
    assert doomed.circle_event is None
    assert doomed.version == version + 1
