import argparse
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from voronoi_sweep import (
    ClusterOptions,
    EventSelector,
    Point,
    SelectorConfig,
    SweepEngine,
    generate_nice_cluster,
    get_selector_config,
    relocate_chosen_event,
)
from voronoi_sweep.clusters import top_site
from voronoi_sweep.engine import CircleEvent, SiteEvent

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _trace_sweep(sites: List[Point], options: ClusterOptions) -> None:
    engine = SweepEngine(sites, options.bounds())
    while engine.step():
        event = engine.last_event()
        if isinstance(event, SiteEvent):
            print(f"site   y={event.y:8.2f} at ({event.site.x:.1f}, {event.site.y:.1f}) arcs={engine.arc_count}")
        elif isinstance(event, CircleEvent) and engine.drain_circle_events():
            print(f"circle y={event.y:8.2f} {event.describe()} arcs={engine.arc_count}")
    print(
        f"done: {engine.site_events_processed} site event(s), "
        f"{engine.circle_events_processed} circle event(s), "
        f"{engine.stale_events_discarded} stale prediction(s) discarded"
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Pick a circle event to stage from a random site cluster")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=123,
        help="Random seed for cluster generation (default: 123)",
    )
    parser.add_argument("--count", type=int, default=7, help="Number of sites (default: 7)")
    parser.add_argument("--width", type=float, default=1280.0, help="Canvas width in pixels")
    parser.add_argument("--height", type=float, default=720.0, help="Canvas height in pixels")
    parser.add_argument("--zoom", type=float, default=3.0, help="Camera zoom (default: 3.0)")
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Use the lenient selection thresholds",
    )
    parser.add_argument(
        "--any-site",
        action="store_true",
        help="Do not require the chosen event to involve the top site",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the event-by-event sweep of the generated cluster",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=0,
        help="Run selection probes on a thread pool of this size (default: sequential)",
    )
    parser.add_argument(
        "--json-output-path",
        help="Write the chosen event as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    config: SelectorConfig = SelectorConfig.lenient() if args.lenient else get_selector_config()
    options = ClusterOptions(width=args.width, height=args.height, zoom=args.zoom)
    rng = np.random.default_rng(args.seed)
    executor = ThreadPoolExecutor(max_workers=args.workers) if args.workers > 0 else None

    try:
        factory = partial(EventSelector, config, executor=executor)
        logger.info("Generating a %d-site cluster with seed %d", args.count, args.seed)
        sites = generate_nice_cluster(args.count, rng, options, selector=factory)
        if sites is None:
            logger.error("Could not generate a nice cluster after %d attempts", options.max_attempts)
            raise SystemExit(1)

        for site in sites:
            logger.info("Site (%.2f, %.2f)", site.x, site.y)
        if args.trace:
            _trace_sweep(sites, options)

        bounds = options.bounds()
        required = None if args.any_site else top_site(sites)
        selector = factory(options.transform_for(sites))
        chosen = selector.find_eligible_event(sites, bounds, required_site=required)
        if chosen is None:
            logger.error("No eligible circle event found")
            for reason in selector.rejection_reasons:
                logger.info("Rejected: %s", reason)
            raise SystemExit(1)
    finally:
        if executor is not None:
            executor.shutdown()

    event = relocate_chosen_event(sites, bounds, chosen)
    logger.info("Chosen event re-located on replay at y=%.2f", event.y)
    print(chosen)

    if args.json_output_path:
        payload = {
            "seed": args.seed,
            "sites": [[site.x, site.y] for site in sites],
            "chosen": chosen.to_dict(),
        }
        output_path = Path(args.json_output_path)
        if output_path.parent and not output_path.parent.exists():
            output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Chosen event written to %s", output_path)


if __name__ == "__main__":
    main()
