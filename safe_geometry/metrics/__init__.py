"""Metric operations in metres on WGS 84 geometries.

- projected: buffer, area, length and distances via a local metric frame
- geodesic: ellipsoidal azimuths, distances and point placement
"""

from safe_geometry.metrics.geodesic import (
    azimuth,
    destination_point,
    geodesic_distance,
    line_azimuth,
    make_bearing_line,
    normalize_azimuth,
)
from safe_geometry.metrics.projected import (
    angle_between_projected,
    buffer_projected,
    calc_area,
    calc_length,
    distance_m,
    increase_line_length,
    make_aabb,
    make_circle,
    min_width_m,
    nearest_point,
    nearest_points,
)

__all__ = [
    "angle_between_projected",
    "azimuth",
    "buffer_projected",
    "calc_area",
    "calc_length",
    "destination_point",
    "distance_m",
    "geodesic_distance",
    "increase_line_length",
    "line_azimuth",
    "make_aabb",
    "make_bearing_line",
    "make_circle",
    "min_width_m",
    "nearest_point",
    "nearest_points",
    "normalize_azimuth",
]
