"""Higher-level algorithms built on the metric and topology layers.

- borders: nearest and longest border segments
- lloyd: Lloyd relaxation (evenly spaced point fill)
- grid: rotated geodesic point grid inside a polygon
- spikes: thin-spike and narrow-angle cleanup
- splitting: polygon splitting by cutting lines
- straighten: line straightening within an area
"""

from safe_geometry.algorithms.borders import find_longest_border_segments, find_nearest_border_segment
from safe_geometry.algorithms.grid import fold_grid_angle, generate_grid_points
from safe_geometry.algorithms.lloyd import (
    LloydRelaxation,
    RelaxationState,
    generate_lloyd_points_wgs84,
)
from safe_geometry.algorithms.spikes import remove_narrow_angles, remove_thin_spikes
from safe_geometry.algorithms.splitting import polygonize, split_polygon
from safe_geometry.algorithms.straighten import straighten_line

__all__ = [
    "LloydRelaxation",
    "RelaxationState",
    "find_longest_border_segments",
    "find_nearest_border_segment",
    "fold_grid_angle",
    "generate_grid_points",
    "generate_lloyd_points_wgs84",
    "polygonize",
    "remove_narrow_angles",
    "remove_thin_spikes",
    "split_polygon",
    "straighten_line",
]
