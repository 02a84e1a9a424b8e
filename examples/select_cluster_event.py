"""Example: generate a cluster, pick a circle event and inspect its staging."""

from functools import partial

import numpy as np

from voronoi_sweep import ClusterOptions, EventSelector, SelectorConfig, generate_nice_cluster
from voronoi_sweep.clusters import top_site
from voronoi_sweep.selector import ProbeContext


def main() -> None:
    options = ClusterOptions()
    factory = partial(EventSelector, SelectorConfig.lenient())
    sites = generate_nice_cluster(7, np.random.default_rng(2024), options, selector=factory)
    if sites is None:
        print("No cluster found")
        return

    transform = options.transform_for(sites)
    selector = factory(transform)
    chosen = selector.find_eligible_event(sites, options.bounds(), required_site=top_site(sites))
    if chosen is None:
        print("Nothing eligible:")
        for reason in selector.rejection_reasons:
            print(f"  {reason}")
        return
    print(chosen)

    context = ProbeContext(
        sites=tuple(sites),
        bounds=options.bounds(),
        triple=chosen.triple,
        doomed_site=chosen.doomed_site,
        transform=transform,
        config=selector.config,
    )
    print("\nArc lengths between WAKE and the event (prev / doomed / next):")
    for y in np.linspace(chosen.wake_y, chosen.event_y - 0.01, 8):
        probe = context.probe(float(y))
        shown = ["  -  " if px is None else f"{px:6.1f}" for px in probe.lengths]
        print(f"  y={y:8.2f}  " + " / ".join(shown))


if __name__ == "__main__":
    main()
