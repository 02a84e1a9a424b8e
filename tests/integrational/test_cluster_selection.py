from __future__ import annotations

from functools import partial

import numpy as np
import pytest

from voronoi_sweep import (
    ClusterOptions,
    EventSelector,
    SelectorConfig,
    collect_circle_events,
    generate_nice_cluster,
    relocate_chosen_event,
)
from voronoi_sweep.clusters import top_site
from voronoi_sweep.engine import find_triple_arc, replay_to
from voronoi_sweep.selector import ProbeContext
from voronoi_sweep.visibility import measure_arcs

SEEDS = (1, 2, 3, 4)


def _select(seed: int, config: SelectorConfig):
    options = ClusterOptions()
    factory = partial(EventSelector, config)
    sites = generate_nice_cluster(7, np.random.default_rng(seed), options, selector=factory)
    if sites is None:
        return options, None, None
    selector = factory(options.transform_for(sites))
    chosen = selector.find_eligible_event(sites, options.bounds(), required_site=top_site(sites))
    return options, sites, chosen


@pytest.fixture(scope="module")
def selections():
    config = SelectorConfig.lenient()
    found = [(seed, *_select(seed, config)) for seed in SEEDS]
    found = [entry for entry in found if entry[3] is not None]
    if not found:
        pytest.fail(f"no eligible cluster for seeds {SEEDS}")
    return found


def test_chosen_events_involve_the_top_site(selections):
    for _, _, sites, chosen in selections:
        assert chosen.triple.contains(top_site(sites), 1e-4)


def test_chosen_events_replay_exactly(selections):
    for _, options, sites, chosen in selections:
        event = relocate_chosen_event(sites, options.bounds(), chosen)
        assert event.y == pytest.approx(chosen.event_y)
        assert any(e.triple.matches(chosen.triple) for e in collect_circle_events(sites, options.bounds()))


def test_staging_positions_are_ordered(selections):
    config = SelectorConfig.lenient()
    for _, options, sites, chosen in selections:
        lowest = chosen.triple.max_y
        assert lowest + config.y_guard <= chosen.wake_y < chosen.approach_y < chosen.event_y
        assert chosen.wake_min_arc_px >= config.wake_px
        assert chosen.approach_doomed_px <= config.approach_px
        assert chosen.arc_chord_length >= config.min_arc_len_px


def test_wake_position_measures_as_reported(selections):
    config = SelectorConfig.lenient()
    for _, options, sites, chosen in selections:
        engine = replay_to(sites, options.bounds(), chosen.wake_y)
        arc = find_triple_arc(engine, chosen.triple, doomed_site=chosen.doomed_site)
        assert arc is not None
        arcs = [engine.resolve(arc.prev), arc, engine.resolve(arc.next)]
        lengths = measure_arcs(
            engine, chosen.wake_y, arcs, options.bounds(), options.transform_for(sites), config.sample_spacing_px
        )
        assert all(length is not None and length >= config.wake_px for length in lengths)


def test_doomed_arc_shrinks_from_wake_to_approach(selections):
    config = SelectorConfig.lenient()
    for seed, options, sites, chosen in selections:
        context = ProbeContext(
            sites=tuple(sites),
            bounds=options.bounds(),
            triple=chosen.triple,
            doomed_site=chosen.doomed_site,
            transform=options.transform_for(sites),
            config=config,
        )
        lengths = [context.probe(float(y)).doomed_px for y in np.linspace(chosen.wake_y, chosen.approach_y, 6)]
        assert all(length is not None for length in lengths), (seed, lengths)
        assert all(a > b for a, b in zip(lengths, lengths[1:])), (seed, lengths)
