"""Fortune's sweep-line engine: event queue, beachline and circle events."""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..geometry import (
    Bounds,
    Site,
    as_point,
    circumcenter,
    orientation,
    parabola_intersection_x,
    parabola_intersection_x_near_circle_event,
)
from .arena import ArcArena
from .model import (
    Arc,
    ArcHandle,
    CircleEvent,
    EngineCounters,
    Event,
    SiteEvent,
    Triple,
    Vertex,
)

logger = logging.getLogger(__name__)

# Sweep distance below which breakpoints next to a live prediction are
# resolved toward the circle center.
NEAR_EVENT_WINDOW = 1e-6


class SweepEngine:
    """Incremental Fortune sweep over a fixed set of sites.

    Each :meth:`step` processes exactly one queued event.  Everything else is
    a read-only query on the current state.
    """

    def __init__(self, sites: Iterable[Sequence[float]], bounds: Bounds) -> None:
        self._sites: Tuple[Site, ...] = tuple(as_point(site) for site in sites)
        self._bounds = bounds
        self._arena = ArcArena()
        self._head: Optional[ArcHandle] = None
        self._sweep_y = -math.inf
        self._queue: List[Tuple[float, int, Event]] = []
        self._sequence = itertools.count()
        self._vertices: List[Vertex] = []
        self._fired: List[CircleEvent] = []
        self._last_event: Optional[Event] = None
        self._counters = EngineCounters()

        for site in sorted(self._sites, key=lambda p: (p.y, p.x)):
            self._push(SiteEvent(site))

    # ------------------------------------------------------------------
    # queries

    @property
    def sites(self) -> Tuple[Site, ...]:
        return self._sites

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def sweep_y(self) -> float:
        return self._sweep_y

    @property
    def vertices(self) -> List[Vertex]:
        return list(self._vertices)

    @property
    def arc_count(self) -> int:
        return len(self._arena)

    @property
    def site_events_processed(self) -> int:
        return self._counters.site_events

    @property
    def circle_events_processed(self) -> int:
        return self._counters.circle_events

    @property
    def stale_events_discarded(self) -> int:
        return self._counters.stale_events

    def beachline(self) -> Optional[ArcHandle]:
        return self._head

    def arc(self, handle: ArcHandle) -> Arc:
        return self._arena.get(handle)

    def resolve(self, handle: Optional[ArcHandle]) -> Optional[Arc]:
        return self._arena.resolve(handle)

    def iter_arcs(self) -> Iterator[Arc]:
        arc = self._arena.resolve(self._head)
        while arc is not None:
            yield arc
            arc = self._arena.resolve(arc.next)

    def next_event(self) -> Optional[Event]:
        return self._queue[0][2] if self._queue else None

    def next_event_y(self) -> Optional[float]:
        return self._queue[0][0] if self._queue else None

    def last_event(self) -> Optional[Event]:
        return self._last_event

    def drain_circle_events(self) -> List[CircleEvent]:
        """Return the circle events fired since the previous drain."""

        fired = list(self._fired)
        self._fired.clear()
        return fired

    def triple_of(self, arc: Arc) -> Optional[Triple]:
        prev = self._arena.resolve(arc.prev)
        nxt = self._arena.resolve(arc.next)
        if prev is None or nxt is None:
            return None
        return Triple(prev.site, arc.site, nxt.site)

    def breakpoints(self, handle: ArcHandle) -> Tuple[float, float]:
        """World X extent of an arc at the current sweep position."""

        arc = self._arena.get(handle)
        prev = self._arena.resolve(arc.prev)
        nxt = self._arena.resolve(arc.next)
        left = -math.inf if prev is None else self._breakpoint(prev, arc)
        right = math.inf if nxt is None else self._breakpoint(arc, nxt)
        return left, right

    # ------------------------------------------------------------------
    # stepping

    def step(self) -> bool:
        """Process one event; ``False`` once the queue is exhausted."""

        if not self._queue:
            self._last_event = None
            return False
        y, _, event = heapq.heappop(self._queue)
        self._last_event = event
        self._sweep_y = y
        if isinstance(event, SiteEvent):
            self._handle_site_event(event)
        else:
            self._handle_circle_event(event)
        return True

    def move_sweep(self, y: float) -> None:
        """Place the sweep at ``y`` without crossing any queued event."""

        next_y = self.next_event_y()
        if next_y is not None and y > next_y:
            y = next_y
        if y > self._sweep_y:
            self._sweep_y = y

    def _push(self, event: Event) -> None:
        heapq.heappush(self._queue, (event.y, next(self._sequence), event))

    def _handle_site_event(self, event: SiteEvent) -> None:
        site = event.site
        self._counters.site_events += 1

        if self._head is None:
            self._head = self._arena.allocate(site).handle
            return

        above = self._arc_above(site.x)
        left = self._arena.allocate(above.site)
        middle = self._arena.allocate(site)
        right = self._arena.allocate(above.site)

        left.prev = above.prev
        left.next = middle.handle
        middle.prev = left.handle
        middle.next = right.handle
        right.prev = middle.handle
        right.next = above.next

        outer_prev = self._arena.resolve(above.prev)
        if outer_prev is None:
            self._head = left.handle
        else:
            outer_prev.next = left.handle
        outer_next = self._arena.resolve(above.next)
        if outer_next is not None:
            outer_next.prev = right.handle

        # the split arc takes its pending prediction with it
        self._arena.release(above.handle)

        self._maybe_create_circle_event(left)
        self._maybe_create_circle_event(middle)
        self._maybe_create_circle_event(right)

    def _is_live(self, event: CircleEvent) -> bool:
        if not event.valid:
            return False
        arc = self._arena.resolve(event.arc)
        if arc is None:
            return False
        return arc.circle_event is event and arc.version == event.arc_version

    def _handle_circle_event(self, event: CircleEvent) -> None:
        if not self._is_live(event):
            self._counters.stale_events += 1
            return

        doomed = self._arena.get(event.arc)
        self._vertices.append(Vertex(event.center, event.triple))
        self._counters.circle_events += 1

        prev = self._arena.resolve(doomed.prev)
        nxt = self._arena.resolve(doomed.next)
        if prev is not None:
            prev.next = doomed.next
        else:
            self._head = doomed.next
        if nxt is not None:
            nxt.prev = doomed.prev

        doomed.circle_event = None
        self._arena.release(doomed.handle)

        for neighbour in (prev, nxt):
            if neighbour is not None:
                neighbour.invalidate_prediction()
        if prev is not None:
            self._maybe_create_circle_event(prev)
        if nxt is not None:
            self._maybe_create_circle_event(nxt)

        self._fired.append(event)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Circle event fired %s; %d arc(s) remain", event.describe(), self.arc_count)

    def _maybe_create_circle_event(self, middle: Arc) -> None:
        triple = self.triple_of(middle)
        if triple is None:
            return
        # convergent breakpoints turn this way in y-down coordinates
        if orientation(triple.a, triple.b, triple.c) <= 0.0:
            return
        center = circumcenter(triple.a, triple.b, triple.c)
        if center is None:
            return
        radius = center.distance_to(triple.b)
        event_y = center.y + radius
        if event_y <= self._sweep_y:
            return

        if middle.circle_event is not None:
            middle.invalidate_prediction()
        event = CircleEvent(
            center=center,
            y=event_y,
            radius=radius,
            triple=triple,
            arc=middle.handle,
            arc_version=middle.version,
        )
        middle.circle_event = event
        self._counters.predictions += 1
        self._push(event)

    # ------------------------------------------------------------------
    # beachline geometry

    def _arc_above(self, x: float) -> Arc:
        arc = self._arena.get(self._head)
        while True:
            nxt = self._arena.resolve(arc.next)
            if nxt is None or x < self._breakpoint(arc, nxt):
                return arc
            arc = nxt

    def _near_prediction(self, arc: Arc) -> Optional[CircleEvent]:
        event = arc.circle_event
        if event is not None and event.y - self._sweep_y < NEAR_EVENT_WINDOW:
            return event
        return None

    def _breakpoint(self, left: Arc, right: Arc) -> float:
        near = self._near_prediction(left) or self._near_prediction(right)
        if near is not None:
            return parabola_intersection_x_near_circle_event(
                left.site, right.site, self._sweep_y, near.center.x
            )
        return parabola_intersection_x(left.site, right.site, self._sweep_y)


def run_to_completion(engine: SweepEngine) -> List[CircleEvent]:
    """Step ``engine`` until its queue is empty and return the fired events."""

    fired: List[CircleEvent] = []
    while engine.step():
        fired.extend(engine.drain_circle_events())
    return fired


__all__ = ["NEAR_EVENT_WINDOW", "SweepEngine", "run_to_completion"]
