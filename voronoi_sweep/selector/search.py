"""WAKE and APPROACH searches over replayed sweep positions.

Every probe rebuilds an engine and measures the staged triple there, so
probes are independent and may be mapped through an executor.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from scipy.optimize import minimize_scalar

from ..engine import Triple, find_triple_arc, replay_to
from ..geometry import Bounds, Point
from ..logging_utils import apply_debug_logging
from ..visibility import CameraTransform, measure_arcs
from .config import SelectorConfig
from .model import TripleProbe

logger = logging.getLogger(__name__)

_UNMEASURED_PENALTY = 1e12


@dataclass(frozen=True)
class ProbeContext:
    """Everything a probe needs; shared read-only between workers."""

    sites: Tuple[Point, ...]
    bounds: Bounds
    triple: Triple
    doomed_site: Point
    transform: CameraTransform
    config: SelectorConfig

    def probe(self, y: float) -> TripleProbe:
        engine = replay_to(self.sites, self.bounds, y)
        arc = find_triple_arc(engine, self.triple, self.config.triple_eps, doomed_site=self.doomed_site)
        if arc is None:
            return TripleProbe.missing(y)

        arcs = [engine.resolve(arc.prev), arc, engine.resolve(arc.next)]
        lengths = measure_arcs(
            engine, y, arcs, self.bounds, self.transform, self.config.sample_spacing_px
        )
        doomed = 1
        if not arc.site.matches(self.doomed_site, self.config.site_eps):
            for index, candidate in enumerate(arcs):
                if candidate.site.matches(self.doomed_site, self.config.site_eps):
                    doomed = index
                    break
        others = [i for i in range(3) if i != doomed]
        order = (others[0], doomed, others[1])
        return TripleProbe(
            y=y,
            exists=True,
            prev_px=lengths[order[0]],
            doomed_px=lengths[order[1]],
            next_px=lengths[order[2]],
            sites=tuple(arcs[i].site for i in order),
        )


def scan_positions(start: float, stop: float, step: float, *, inclusive: bool) -> List[float]:
    """``start, start + step, ...`` up to ``stop``; computed by index."""

    if step <= 0.0 or start > stop:
        return []
    count = int(math.floor((stop - start) / step)) + 1
    ys = [start + i * step for i in range(count)]
    if inclusive:
        return [y for y in ys if y <= stop]
    return [y for y in ys if y < stop]


def iter_probes(
    context: ProbeContext,
    ys: Sequence[float],
    executor: Optional[Executor] = None,
    batch_size: int = 8,
) -> Iterator[TripleProbe]:
    """Probe ``ys`` in order; with an executor, in batches of ``batch_size``."""

    if executor is None:
        for y in ys:
            yield context.probe(y)
        return
    batch_size = max(1, batch_size)
    for start in range(0, len(ys), batch_size):
        yield from executor.map(context.probe, ys[start : start + batch_size])


def find_wake_y(
    context: ProbeContext,
    y_start: float,
    y_end: float,
    executor: Optional[Executor] = None,
) -> Optional[TripleProbe]:
    """Earliest sweep position where all three arcs are at least ``wake_px``.

    A coarse scan brackets the position and bisection narrows it down to
    ``bisection_tol``; the probe returned always satisfies the threshold.
    """

    config = context.config
    if y_start >= y_end:
        return None

    bracket: Optional[TripleProbe] = None
    ys = scan_positions(y_start, y_end, config.coarse_step, inclusive=True)
    for probe in iter_probes(context, ys, executor, config.probe_batch_size):
        if not probe.exists:
            logger.debug("Triple gone at y=%.2f before WAKE", probe.y)
            return None
        if probe.all_at_least(config.wake_px):
            bracket = probe
            break
    if bracket is None:
        return None

    low = max(y_start, bracket.y - config.coarse_step)
    best = bracket
    while best.y - low > config.bisection_tol:
        mid = 0.5 * (low + best.y)
        probe = context.probe(mid)
        if probe.all_at_least(config.wake_px):
            best = probe
        else:
            low = mid

    logger.debug(
        "WAKE y=%.2f | prev=%s doomed=%s next=%s",
        best.y,
        _fmt_px(best.prev_px),
        _fmt_px(best.doomed_px),
        _fmt_px(best.next_px),
    )
    return best


def find_approach_y(
    context: ProbeContext,
    wake_y: float,
    y_end: float,
    executor: Optional[Executor] = None,
) -> Optional[TripleProbe]:
    """Sweep position in ``[wake_y, y_end)`` where the doomed arc is smallest."""

    config = context.config
    best: Optional[TripleProbe] = None
    ys = scan_positions(wake_y, y_end, config.fine_step, inclusive=False)
    for probe in iter_probes(context, ys, executor, config.probe_batch_size):
        if not probe.exists:
            logger.debug("Triple gone at y=%.2f during APPROACH scan", probe.y)
            break
        if probe.doomed_px is None:
            continue
        if best is None or probe.doomed_px < best.doomed_px:
            best = probe
    if best is None:
        return None

    refined = refine_approach(context, best, lower=wake_y, upper=y_end)
    logger.debug("APPROACH y=%.2f | doomed=%s", refined.y, _fmt_px(refined.doomed_px))
    return refined


def refine_approach(
    context: ProbeContext, best: TripleProbe, *, lower: float, upper: float
) -> TripleProbe:
    """Polish the scan argmin with a bounded scalar minimisation.

    The refined position replaces ``best`` only when the triple is still there
    and the doomed arc measures strictly shorter.
    """

    config = context.config
    lo = max(lower, best.y - config.fine_step)
    hi = min(upper, best.y + config.fine_step)
    if hi - lo <= config.bisection_tol:
        return best

    def objective(y: float) -> float:
        probe = context.probe(float(y))
        if not probe.exists or probe.doomed_px is None:
            return _UNMEASURED_PENALTY
        return probe.doomed_px

    result = minimize_scalar(
        objective, bounds=(lo, hi), method="bounded", options={"xatol": config.bisection_tol}
    )
    y = float(result.x)
    if not (lo <= y < upper):
        return best
    candidate = context.probe(y)
    if (
        candidate.exists
        and candidate.doomed_px is not None
        and best.doomed_px is not None
        and candidate.doomed_px < best.doomed_px
    ):
        return candidate
    return best


def _fmt_px(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.1f}px"


apply_debug_logging(globals(), logger=logger, skip={"scan_positions", "_fmt_px", "iter_probes"})


__all__ = [
    "ProbeContext",
    "find_approach_y",
    "find_wake_y",
    "iter_probes",
    "refine_approach",
    "scan_positions",
]
