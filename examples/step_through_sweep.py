"""Example: step a sweep by hand and print the beachline after each event."""

from voronoi_sweep import Bounds, Point, SweepEngine
from voronoi_sweep.engine import CircleEvent

SITES = [
    Point(0.0, 0.0),
    Point(20.0, 0.0),
    Point(10.0, -5.0),
    Point(10.0, 5.0),
]


def main() -> None:
    engine = SweepEngine(SITES, Bounds(-100.0, -100.0, 100.0, 100.0))
    while engine.step():
        event = engine.last_event()
        kind = "circle" if isinstance(event, CircleEvent) else "site"
        print(f"{kind} event at y={event.y:.3f}")
        for arc in engine.iter_arcs():
            left, right = engine.breakpoints(arc.handle)
            print(f"  arc ({arc.site.x:.1f}, {arc.site.y:.1f}) spans [{left:.3f}, {right:.3f}]")

    print("\nVertices:")
    for vertex in engine.vertices:
        print(f"  ({vertex.point.x:.4f}, {vertex.point.y:.4f}) from {vertex.triple.describe()}")
    print(f"Stale predictions discarded: {engine.stale_events_discarded}")


if __name__ == "__main__":
    main()
