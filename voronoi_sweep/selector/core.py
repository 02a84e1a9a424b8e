"""Choose one circle event worth staging, plus its WAKE and APPROACH positions."""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Iterable, Iterator, List, Optional, Sequence

from ..engine import CircleEvent, SweepEngine, collect_circle_events
from ..geometry import Bounds, Point, as_point
from ..logging_utils import apply_debug_logging
from ..visibility import CameraTransform
from .config import SelectorConfig, get_selector_config
from .model import ChosenEvent, Rejection
from .search import ProbeContext, find_approach_y, find_wake_y

logger = logging.getLogger(__name__)

RELOCATE_Y_TOL = 0.01
RELOCATE_CENTER_TOL = 1.0


class ReproducibilityError(RuntimeError):
    """Raised when a chosen event does not fire again on a fresh replay."""


class IneligibleEvent(Exception):
    """Raised by :meth:`EventSelector.evaluate` with the rejection reason."""


class EventSelector:
    """Scan the circle events of a site set and keep the best eligible one.

    The ``bounds`` passed to :meth:`find_eligible_event` are both the sweep
    bounds and the screen rectangle that measurements are clipped to.
    """

    def __init__(
        self,
        config: Optional[SelectorConfig],
        transform: CameraTransform,
        executor: Optional[Executor] = None,
    ) -> None:
        self.config = config if config is not None else get_selector_config()
        self.transform = transform
        self.executor = executor
        self.rejections: List[Rejection] = []

    @property
    def rejection_reasons(self) -> List[str]:
        return [str(rejection) for rejection in self.rejections]

    def _candidates(
        self, engine: SweepEngine, required_site: Optional[Point]
    ) -> Iterator[CircleEvent]:
        scanned = 0
        while scanned < self.config.max_circle_events_to_scan and engine.step():
            for event in engine.drain_circle_events():
                if required_site is not None and not event.triple.contains(
                    required_site, self.config.site_eps
                ):
                    continue
                scanned += 1
                yield event
                if scanned >= self.config.max_circle_events_to_scan:
                    return

    def find_eligible_event(
        self,
        sites: Iterable[Sequence[float]],
        bounds: Bounds,
        required_site: Optional[Sequence[float]] = None,
    ) -> Optional[ChosenEvent]:
        self.rejections = []
        points = tuple(as_point(site) for site in sites)
        required = as_point(required_site) if required_site is not None else None

        engine = SweepEngine(points, bounds)
        eligible: List[ChosenEvent] = []
        scanned = 0
        for event in self._candidates(engine, required):
            scanned += 1
            try:
                chosen = self.evaluate(event, points, bounds, required)
            except IneligibleEvent as exc:
                self._reject(event, str(exc))
                continue
            eligible.append(chosen)
            logger.debug(
                "Eligible event #%d: y=%.2f arc=%.2fpx", len(eligible), chosen.event_y, chosen.arc_chord_length
            )

        if not eligible:
            reason = f"No eligible events found after scanning {scanned} circle events"
            self.rejections.append(Rejection(None, reason))
            logger.info(reason)
            return None

        best = eligible[0]
        for candidate in eligible[1:]:
            if (candidate.arc_chord_length, candidate.preview_distance) > (
                best.arc_chord_length,
                best.preview_distance,
            ):
                best = candidate
        logger.info(
            "Chosen event (best of %d): y=%.2f preview_y=%.2f arc=%.2fpx",
            len(eligible),
            best.event_y,
            best.preview_y,
            best.arc_chord_length,
        )
        return best

    def _reject(self, event: CircleEvent, reason: str) -> None:
        self.rejections.append(Rejection(event.y, reason))
        logger.debug("Rejected %s: %s", event.describe(), reason)

    def evaluate(
        self,
        event: CircleEvent,
        sites: Sequence[Point],
        bounds: Bounds,
        required_site: Optional[Point] = None,
    ) -> ChosenEvent:
        """Run every eligibility gate; raises :class:`IneligibleEvent` on the first failure."""

        config = self.config
        triple = event.triple
        lowest = triple.max_y

        if event.y - lowest < config.min_event_dy:
            raise IneligibleEvent(
                f"event_y - lowest site = {event.y - lowest:.2f} < min_event_dy ({config.min_event_dy:.2f})"
            )
        y_start = lowest + config.y_guard
        y_end = event.y - config.epsilon
        if y_start >= y_end:
            raise IneligibleEvent(f"empty window: y_start={y_start:.2f} >= y_end={y_end:.2f}")

        context = ProbeContext(
            sites=tuple(sites),
            bounds=bounds,
            triple=triple,
            doomed_site=triple.doomed,
            transform=self.transform,
            config=config,
        )

        preview_y = 0.5 * (y_start + y_end)
        preview = context.probe(preview_y)
        if not preview.exists:
            raise IneligibleEvent(f"triple not on the beachline at preview y={preview_y:.2f}")
        self._require_membership(required_site, preview.sites, "preview", preview_y)
        if preview.doomed_px is None or preview.doomed_px < config.min_arc_len_px:
            shown = "n/a" if preview.doomed_px is None else f"{preview.doomed_px:.2f}px"
            raise IneligibleEvent(f"doomed arc {shown} < {config.min_arc_len_px:.2f}px at preview")

        check = context.probe(y_end)
        if not check.exists:
            raise IneligibleEvent(f"triple not on the beachline at y_end={y_end:.2f}")
        self._require_membership(required_site, check.sites, "y_end", y_end)

        identity = context.probe(event.y - config.doomed_probe_offset)
        if not identity.exists:
            raise IneligibleEvent("triple not on the beachline next to the event")
        smallest = identity.smallest_site()
        if smallest is not None and not smallest.matches(triple.doomed, config.site_eps):
            raise IneligibleEvent(
                f"shortest arc next to the event is ({smallest.x:.1f},{smallest.y:.1f}), "
                f"not the doomed site ({triple.doomed.x:.1f},{triple.doomed.y:.1f})"
            )

        wake = find_wake_y(context, y_start, y_end, self.executor)
        if wake is None:
            raise IneligibleEvent("no WAKE position found")
        approach = find_approach_y(context, wake.y, y_end, self.executor)
        if approach is None or approach.doomed_px is None:
            raise IneligibleEvent("no APPROACH position found")
        if approach.doomed_px > config.approach_px:
            raise IneligibleEvent(
                f"doomed arc never shrinks below {config.approach_px:.1f}px "
                f"(minimum {approach.doomed_px:.1f}px)"
            )
        if not (wake.y < approach.y < event.y):
            raise IneligibleEvent(
                f"ordering violated: wake={wake.y:.2f} approach={approach.y:.2f} event={event.y:.2f}"
            )

        return ChosenEvent(
            triple=triple,
            doomed_site=triple.doomed,
            event_y=event.y,
            center=event.center,
            radius=event.radius,
            preview_y=preview_y,
            arc_chord_length=preview.doomed_px,
            wake_y=wake.y,
            approach_y=approach.y,
            wake_min_arc_px=wake.min_px,
            approach_doomed_px=approach.doomed_px,
        )

    def _require_membership(self, required_site, sites, stage: str, y: float) -> None:
        if required_site is None:
            return
        if sites is None or not any(p.matches(required_site, self.config.site_eps) for p in sites):
            raise IneligibleEvent(
                f"required site ({required_site.x:.1f},{required_site.y:.1f}) "
                f"not in the triple at {stage} y={y:.2f}"
            )


def relocate_chosen_event(
    sites: Iterable[Sequence[float]], bounds: Bounds, chosen: ChosenEvent
) -> CircleEvent:
    """Replay ``sites`` and return the fired event that ``chosen`` describes."""

    for event in collect_circle_events(sites, bounds):
        if (
            event.triple.matches(chosen.triple)
            and abs(event.y - chosen.event_y) <= RELOCATE_Y_TOL
            and abs(event.center.x - chosen.center.x) <= RELOCATE_CENTER_TOL
            and abs(event.center.y - chosen.center.y) <= RELOCATE_CENTER_TOL
        ):
            return event
    raise ReproducibilityError(
        f"Chosen event at y={chosen.event_y:.2f} with sites {chosen.triple.describe()} "
        "did not fire on replay"
    )


apply_debug_logging(globals(), logger=logger, skip={"IneligibleEvent", "ReproducibilityError", "_candidates"})


__all__ = ["EventSelector", "IneligibleEvent", "ReproducibilityError", "relocate_chosen_event"]
