"""Event eligibility selection: pick a circle event and its staging positions."""

from .config import SelectorConfig, get_selector_config, set_selector_config
from .core import EventSelector, IneligibleEvent, ReproducibilityError, relocate_chosen_event
from .model import ChosenEvent, Rejection, TripleProbe
from .search import ProbeContext, find_approach_y, find_wake_y

__all__ = [
    "ChosenEvent",
    "EventSelector",
    "IneligibleEvent",
    "ProbeContext",
    "Rejection",
    "ReproducibilityError",
    "SelectorConfig",
    "TripleProbe",
    "find_approach_y",
    "find_wake_y",
    "get_selector_config",
    "relocate_chosen_event",
    "set_selector_config",
]
