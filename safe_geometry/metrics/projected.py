"""Projection-driven metric operations on WGS 84 geometries.

Degrees of latitude and longitude have different lengths in metres
depending on location, so buffering or measuring directly in
``(lon, lat)`` gives deformed results. Every operation here projects
the input into a local metric frame anchored at the geometry, runs the
planar kernel there, and converts the result back.

Degradation policy:
- ``buffer_projected``, ``increase_line_length``: on any projection or
  kernel failure, log and return the input unchanged.
- ``calc_area``, ``calc_length``, ``angle_between_projected``: on failure,
  log and return the raw-frame (metrically approximate) value.
- ``nearest_points``, ``distance_m``, ``min_width_m``: on failure, log
  and return zero values.

Only ``ArgumentError`` (caller misuse) is ever raised.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import shapely
from shapely.errors import GEOSException
from shapely.geometry import LineString, Point, box
from shapely.ops import nearest_points as kernel_nearest_points

from safe_geometry.core.config import get_config
from safe_geometry.core.exceptions import ArgumentError, ProjectionError
from safe_geometry.metrics.geodesic import as_xy, geodesic_distance
from safe_geometry.models.buffer_style import BufferStyle
from safe_geometry.projection.local_frame import LocalProjection, local_frame
from safe_geometry.utils.shapes import angle_between

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.metrics.projected")

_ZERO_PAIR: tuple[tuple[float, float], tuple[float, float]] = ((0.0, 0.0), (0.0, 0.0))


def default_buffer_style() -> BufferStyle:
    """Round caps and joins with the configured segment count."""
    return BufferStyle(quad_segs=get_config().buffer_quad_segs)


# ---------------------------------------------------------------------------
# Buffer
# ---------------------------------------------------------------------------


def buffer_projected(
    geom: BaseGeometry,
    meters: float,
    style: BufferStyle | None = None,
    *,
    frame: LocalProjection | None = None,
) -> BaseGeometry:
    """Buffer a WGS 84 geometry by *meters* measured on the ground.

    Args:
        geom: Geometry in WGS 84.
        meters: Buffer distance in metres (negative shrinks).
        style: Cap/join/segment parameters. Defaults to round caps and
            joins with the configured segment count.
        frame: Local frame to buffer in. Resolved from the geometry's
            centroid when omitted.

    Returns:
        The buffered geometry in WGS 84, or *geom* unchanged if it is
        empty or any step fails.
    """
    if geom is None or geom.is_empty:
        return geom
    style = style or default_buffer_style()
    try:
        frame = frame or local_frame(geom)
        projected = frame.forward(geom)
        buffered = projected.buffer(meters, **style.as_kwargs())
        return frame.inverse(buffered)
    except (ProjectionError, GEOSException) as exc:
        logger.error(
            "Projected buffer failed | geom_type=%s | meters=%.3f | error=%s",
            geom.geom_type,
            meters,
            exc,
        )
        return geom


def make_circle(
    center: Point | Sequence[float],
    radius_m: float,
    style: BufferStyle | None = None,
) -> BaseGeometry:
    """Round buffer around a point that looks circular on the ground."""
    return buffer_projected(Point(as_xy(center)), radius_m, style)


def make_aabb(
    center: Point | Sequence[float],
    width_m: float,
    height_m: float,
) -> BaseGeometry:
    """Axis-aligned rectangle of *width_m* x *height_m* metres centred on *center*.

    Raises:
        ArgumentError: If either dimension is not positive.
        ProjectionError: If no local frame can be resolved for *center*.
    """
    if width_m <= 0 or height_m <= 0:
        msg = f"Rectangle dimensions must be positive, got {width_m} x {height_m}"
        raise ArgumentError(msg, operation="make_aabb")
    origin = as_xy(center)
    frame = local_frame(origin)
    cx, cy = frame.forward_coord(origin)
    half_w, half_h = width_m / 2.0, height_m / 2.0
    return frame.inverse(box(cx - half_w, cy - half_h, cx + half_w, cy + half_h))


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


def calc_area(geom: BaseGeometry) -> float:
    """Area of a WGS 84 geometry in square metres.

    Falls back to the raw ``(lon, lat)`` area if projection fails.
    """
    if geom.is_empty:
        return geom.area
    try:
        return local_frame(geom).forward(geom).area
    except ProjectionError as exc:
        logger.error("Projected area failed, using raw-frame area | error=%s", exc)
        return geom.area


def calc_length(geom: BaseGeometry) -> float:
    """Length of a WGS 84 line (or perimeter of a polygon) in metres.

    Falls back to the raw ``(lon, lat)`` length if projection fails.
    """
    if geom.is_empty:
        return geom.length
    try:
        return local_frame(geom).forward(geom).length
    except ProjectionError as exc:
        logger.error("Projected length failed, using raw-frame length | error=%s", exc)
        return geom.length


def min_width_m(geom: BaseGeometry) -> float:
    """Minimum width (minimum diameter) of a geometry in metres.

    The smallest distance between two parallel lines enclosing the
    geometry, measured in a local frame. Returns ``0.0`` for empty or
    degenerate input.
    """
    if geom is None or geom.is_empty:
        return 0.0
    try:
        local = local_frame(geom).forward(geom)
        return float(shapely.minimum_width(local).length)
    except (ProjectionError, GEOSException) as exc:
        logger.error("Projected minimum width failed | error=%s", exc)
        return 0.0


# ---------------------------------------------------------------------------
# Nearest points and distances
# ---------------------------------------------------------------------------


def nearest_points(
    geom1: BaseGeometry,
    geom2: BaseGeometry,
    *,
    frame: LocalProjection | None = None,
) -> tuple[tuple[float, float], tuple[float, float]]:
    """Nearest pair of points between two WGS 84 geometries.

    The search runs in a local frame (anchored at *geom1* unless
    *frame* is given) so "nearest" is judged in metres.

    Returns:
        ``(point_on_geom1, point_on_geom2)`` as ``(lon, lat)`` tuples,
        or ``((0, 0), (0, 0))`` if either input is empty or a step fails.
    """
    if geom1.is_empty or geom2.is_empty:
        logger.error("nearest_points called with empty geometry")
        return _ZERO_PAIR
    try:
        frame = frame or local_frame(geom1)
        local1, local2 = kernel_nearest_points(frame.forward(geom1), frame.forward(geom2))
        return (
            frame.inverse_coord((local1.x, local1.y)),
            frame.inverse_coord((local2.x, local2.y)),
        )
    except (ProjectionError, GEOSException) as exc:
        logger.error("Failed to find nearest points | error=%s", exc)
        return _ZERO_PAIR


def nearest_point(
    coord: Point | Sequence[float],
    geom: BaseGeometry,
    *,
    frame: LocalProjection | None = None,
) -> tuple[float, float]:
    """The point of *geom* closest to *coord*, as ``(lon, lat)``."""
    return nearest_points(Point(as_xy(coord)), geom, frame=frame)[1]


def distance_m(
    geom1: BaseGeometry,
    geom2: BaseGeometry,
    *,
    frame: LocalProjection | None = None,
) -> float:
    """Geodesic distance in metres between the nearest points of two geometries.

    Returns ``0.0`` if either geometry is empty.
    """
    if geom1.is_empty or geom2.is_empty:
        return 0.0
    first, second = nearest_points(geom1, geom2, frame=frame)
    return geodesic_distance(first, second)


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------


def angle_between_projected(
    first_end: Point | Sequence[float],
    middle: Point | Sequence[float],
    second_end: Point | Sequence[float],
    *,
    frame: LocalProjection | None = None,
) -> float:
    """Angle at *middle* between the arms to *first_end* and *second_end*.

    The three ``(lon, lat)`` coordinates are projected into a local frame
    anchored at *middle*, so the angle is the one seen on the ground.

    Returns:
        The unsigned angle in radians, in ``[0, pi]``. Falls back to the
        raw ``(lon, lat)`` angle if projection fails.
    """
    coords = [as_xy(first_end), as_xy(middle), as_xy(second_end)]
    try:
        frame = frame or local_frame(coords[1])
        coords = [frame.forward_coord(coord) for coord in coords]
    except ProjectionError as exc:
        logger.error("Projected angle failed, using raw-frame angle | error=%s", exc)
    return angle_between(*coords)


# ---------------------------------------------------------------------------
# Line extension
# ---------------------------------------------------------------------------


def increase_line_length(
    line: LineString,
    fraction: float,
    *,
    frame: LocalProjection | None = None,
) -> LineString:
    """Extend a two-point WGS 84 line by *fraction* of its length.

    Each end is pushed outwards collinearly by ``fraction / 2`` of the
    total length, so ``fraction=0.5`` grows the line by 25% at each end.

    Raises:
        ArgumentError: If the line does not have exactly two coordinates.
    """
    coords = list(line.coords)
    if len(coords) != 2:
        msg = f"LineString with 2 coordinates expected; {len(coords)} coordinates provided"
        raise ArgumentError(msg, operation="increase_line_length")
    try:
        frame = frame or local_frame(line)
        local = frame.forward(line)
        return frame.inverse(_extend_planar(local, fraction))
    except ProjectionError as exc:
        logger.error("Failed to increase line length | fraction=%.3f | error=%s", fraction, exc)
        return line


def _extend_planar(line: LineString, fraction: float) -> LineString:
    (x0, y0), (x1, y1) = (c[:2] for c in line.coords)
    half = fraction / 2.0
    dx, dy = (x1 - x0) * half, (y1 - y0) * half
    return LineString([(x0 - dx, y0 - dy), (x1 + dx, y1 + dy)])
