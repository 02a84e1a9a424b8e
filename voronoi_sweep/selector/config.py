"""Threshold record for event selection and its process-wide default."""

from __future__ import annotations

import copy
from dataclasses import dataclass, replace


@dataclass
class SelectorConfig:
    """Thresholds in screen pixels (``*_px``) or world units (everything else).

    ``min_arc_len_px``
        Doomed arc length required at the preview position.
    ``wake_px``
        WAKE is the first sweep position where all three arcs reach this.
    ``approach_px``
        The smallest doomed length found for APPROACH must not exceed this.
    ``y_guard``
        Distance kept after the lowest site of the triple before searching.
    ``probe_batch_size``
        Number of scan probes handed to an executor at a time.
    """

    min_arc_len_px: float = 20.0
    epsilon: float = 0.001
    min_event_dy: float = 5.0
    max_circle_events_to_scan: int = 50
    wake_px: float = 40.0
    approach_px: float = 20.0
    y_guard: float = 2.0
    coarse_step: float = 4.0
    fine_step: float = 0.5
    bisection_tol: float = 0.02
    doomed_probe_offset: float = 0.5
    site_eps: float = 1e-4
    triple_eps: float = 1e-5
    sample_spacing_px: float = 2.0
    probe_batch_size: int = 8

    @classmethod
    def lenient(cls) -> "SelectorConfig":
        return cls(min_arc_len_px=15.0, min_event_dy=2.0, max_circle_events_to_scan=100)

    def with_overrides(self, **changes) -> "SelectorConfig":
        return replace(self, **changes)


_SELECTOR_CONFIG = SelectorConfig()


def get_selector_config() -> SelectorConfig:
    return copy.deepcopy(_SELECTOR_CONFIG)


def set_selector_config(config: SelectorConfig) -> None:
    global _SELECTOR_CONFIG
    _SELECTOR_CONFIG = copy.deepcopy(config)


__all__ = ["SelectorConfig", "get_selector_config", "set_selector_config"]
