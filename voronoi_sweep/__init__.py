from .geometry import (
    Bounds,
    InvalidBoundsError,
    Point,
    Site,
    circumcenter,
    intersection_diagnostic,
    orientation,
    parabola_intersection_x,
    parabola_intersection_x_near_circle_event,
    parabola_y,
)
from .engine import (
    ArcHandle,
    CircleEvent,
    SiteEvent,
    StaleHandleError,
    SweepEngine,
    Triple,
    Vertex,
    advance_to,
    collect_circle_events,
    find_triple_arc,
    replay_to,
    run_to_completion,
)
from .visibility import (
    ArcSegment,
    CameraTransform,
    compute_segments,
    measure_arc_instance_pixels,
    measure_arcs,
    visible_world_x_range,
)
from .selector import (
    ChosenEvent,
    EventSelector,
    ReproducibilityError,
    SelectorConfig,
    get_selector_config,
    relocate_chosen_event,
    set_selector_config,
)
from .clusters import ClusterOptions, cluster_center, generate_nice_cluster

__all__ = [
    'Bounds',
    'InvalidBoundsError',
    'Point',
    'Site',
    'circumcenter',
    'intersection_diagnostic',
    'orientation',
    'parabola_intersection_x',
    'parabola_intersection_x_near_circle_event',
    'parabola_y',
    'ArcHandle',
    'CircleEvent',
    'SiteEvent',
    'StaleHandleError',
    'SweepEngine',
    'Triple',
    'Vertex',
    'advance_to',
    'collect_circle_events',
    'find_triple_arc',
    'replay_to',
    'run_to_completion',
    'ArcSegment',
    'CameraTransform',
    'compute_segments',
    'measure_arc_instance_pixels',
    'measure_arcs',
    'visible_world_x_range',
    'ChosenEvent',
    'EventSelector',
    'ReproducibilityError',
    'SelectorConfig',
    'get_selector_config',
    'relocate_chosen_event',
    'set_selector_config',
    'ClusterOptions',
    'cluster_center',
    'generate_nice_cluster',
]
