"""Cleanup of thin spikes and narrow angles on WGS 84 polygons.

Both functions return approximations of their input and may introduce
small artifacts; they are meant for cartographic cleanup, not exact
geometry.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from shapely.geometry import Polygon

from safe_geometry.core.config import get_config
from safe_geometry.metrics.projected import buffer_projected
from safe_geometry.models.buffer_style import BufferStyle
from safe_geometry.projection.mercator import from_mercator, simplify_projected, to_mercator
from safe_geometry.topology.safe_ops import safe_intersection
from safe_geometry.utils.shapes import angle_between, get_boundary, make_polygon

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.algorithms.spikes")

# Angles sharper than this are treated as narrow (about 81 degrees)
NARROW_ANGLE_RAD = 0.9 * math.pi / 2
# Angles sharper than this get twice the cut width
VERY_NARROW_ANGLE_RAD = math.pi / 4
# Number of attempts when shortening the arms of a narrow angle
ANGLE_CUT_STEPS = 5

_REINFLATE_STYLE = BufferStyle(quad_segs=4, cap_style="square", join_style="mitre")


def remove_thin_spikes(block: BaseGeometry, min_width_m: float) -> BaseGeometry | None:
    """Remove parts of *block* thinner than *min_width_m* metres.

    Shrinks the geometry by half the width (which erases thin parts),
    inflates it back with mitred joins, clips to the input and
    simplifies the outline.

    Returns:
        The cleaned geometry, or ``None`` if nothing survives the shrink.
    """
    half_width = min_width_m / 2.0
    cropped = buffer_projected(block, -half_width)
    if cropped.is_empty:
        return None

    inflated = buffer_projected(cropped, half_width, _REINFLATE_STYLE)
    result = safe_intersection(inflated, block)
    if result.is_empty:
        return None
    return simplify_projected(result, get_config().simplify_tolerance_m)


def remove_narrow_angles(polygon: BaseGeometry, min_width_m: float) -> BaseGeometry:
    """Turn sharp ``/\\`` corners of a polygon into blunt ``/-\\`` ones.

    Every vertex whose interior angle is below ~81 degrees is examined.
    If its neighbours are closer than the width (doubled for angles below
    45 degrees) the vertex is dropped; otherwise both arms are shortened
    in up to five steps until the cut is wider than the width.

    Non-polygons are returned unchanged. Holes are discarded. If fewer
    than three vertices remain the result is an empty polygon.
    """
    if not isinstance(polygon, Polygon) or polygon.is_empty:
        return polygon

    projected = to_mercator(polygon)
    # Web Mercator stretches ground distances by 1 / cos(latitude)
    scale = 1.0 / max(math.cos(math.radians(polygon.centroid.y)), 1e-6)
    width = min_width_m * scale

    ring = list(get_boundary(projected).coords)
    vertex_count = len(ring) - 1
    kept: list[tuple[float, float]] = []
    for index in range(vertex_count):
        point = ring[index]
        prev_point = ring[index - 1] if index > 0 else ring[vertex_count - 1]
        next_point = ring[(index + 1) % vertex_count]

        angle = angle_between(prev_point, point, next_point)
        if angle >= NARROW_ANGLE_RAD:
            kept.append(point)
            continue

        cut_width = width * 2 if angle < VERY_NARROW_ANGLE_RAD else width
        if math.dist(prev_point, next_point) < cut_width:
            continue
        kept.extend(_cut_corner(point, prev_point, next_point, cut_width))

    if len(kept) < 3:
        logger.debug("Narrow-angle removal collapsed polygon | vertices=%d", len(kept))
        return Polygon()
    return from_mercator(make_polygon(kept))


def _cut_corner(
    point: tuple[float, ...],
    prev_point: tuple[float, ...],
    next_point: tuple[float, ...],
    cut_width: float,
) -> list[tuple[float, float]]:
    left_len = math.dist(point, prev_point)
    right_len = math.dist(point, next_point)
    if left_len == 0 or right_len == 0:
        return [(point[0], point[1])]
    step = min(left_len, right_len) / ANGLE_CUT_STEPS
    for i in range(1, ANGLE_CUT_STEPS + 1):
        left = _point_along(point, prev_point, i * step / left_len)
        right = _point_along(point, next_point, i * step / right_len)
        if math.dist(left, right) > cut_width:
            return [left, right]
    return [(point[0], point[1])]


def _point_along(start: tuple[float, ...], end: tuple[float, ...], fraction: float) -> tuple[float, float]:
    return (
        start[0] + fraction * (end[0] - start[0]),
        start[1] + fraction * (end[1] - start[1]),
    )
