"""Geodesic bearing and distance computations on the WGS 84 ellipsoid.

These are true ellipsoidal geodesics (``pyproj.Geod``), independent of
any local planar frame, because consumers such as grid generation need
real-world bearing accuracy. Azimuths are degrees clockwise from north.
"""

from __future__ import annotations

import functools
import math
from typing import TYPE_CHECKING

from pyproj import Geod
from shapely.geometry import LineString, Point

from safe_geometry.core.constants import ELLIPSOID, FULL_CIRCLE_DEG
from safe_geometry.core.exceptions import ArgumentError

if TYPE_CHECKING:
    from collections.abc import Sequence


@functools.lru_cache(maxsize=1)
def _geod() -> Geod:
    return Geod(ellps=ELLIPSOID)


def as_xy(coord: Point | Sequence[float]) -> tuple[float, float]:
    """Coerce a shapely ``Point`` or an ``(x, y[, z])`` sequence to ``(x, y)``."""
    if isinstance(coord, Point):
        if coord.is_empty:
            msg = "Empty point has no coordinate"
            raise ArgumentError(msg, operation="as_xy")
        return (coord.x, coord.y)
    if len(coord) < 2:
        msg = f"Coordinate needs at least 2 elements, got {len(coord)}"
        raise ArgumentError(msg, operation="as_xy")
    return (float(coord[0]), float(coord[1]))


def normalize_azimuth(azimuth_deg: float) -> float:
    """Fold an azimuth into ``[0, 360)``.

    Raises:
        ArgumentError: If the azimuth is NaN or infinite.
    """
    if not math.isfinite(azimuth_deg):
        msg = f"Azimuth must be finite, got {azimuth_deg}"
        raise ArgumentError(msg, operation="normalize_azimuth")
    folded = math.fmod(azimuth_deg, FULL_CIRCLE_DEG)
    if folded < 0:
        folded += FULL_CIRCLE_DEG
    # -1e-20 + 360 rounds to exactly 360.
    if folded >= FULL_CIRCLE_DEG:
        folded = 0.0
    return folded


def azimuth(c1: Point | Sequence[float], c2: Point | Sequence[float]) -> float:
    """Forward azimuth from *c1* to *c2* in degrees, normalized to ``[0, 360)``."""
    lon1, lat1 = as_xy(c1)
    lon2, lat2 = as_xy(c2)
    forward_az, _back_az, _dist = _geod().inv(lon1, lat1, lon2, lat2)
    return normalize_azimuth(forward_az)


def line_azimuth(line: LineString) -> float:
    """Azimuth of a two-point line from its first to its second coordinate.

    Returns ``0.0`` for an empty line.

    Raises:
        ArgumentError: If the line does not have exactly two coordinates.
    """
    coords = list(line.coords)
    if line.is_empty or not coords:
        return 0.0
    if len(coords) != 2:
        msg = f"LineString with 2 coordinates expected; {len(coords)} coordinates provided"
        raise ArgumentError(msg, operation="line_azimuth")
    return azimuth(coords[0], coords[1])


def geodesic_distance(c1: Point | Sequence[float], c2: Point | Sequence[float]) -> float:
    """Ellipsoidal distance in metres between two ``(lon, lat)`` coordinates."""
    lon1, lat1 = as_xy(c1)
    lon2, lat2 = as_xy(c2)
    _fwd, _back, dist = _geod().inv(lon1, lat1, lon2, lat2)
    return float(dist)


def destination_point(
    start: Point | Sequence[float],
    distance_m: float,
    azimuth_deg: float,
) -> tuple[float, float]:
    """Point reached by travelling *distance_m* from *start* along *azimuth_deg*."""
    lon, lat = as_xy(start)
    dest_lon, dest_lat, _back_az = _geod().fwd(lon, lat, azimuth_deg, distance_m)
    return (float(dest_lon), float(dest_lat))


def make_bearing_line(
    start: Point | Sequence[float],
    azimuth_deg: float,
    length_m: float,
) -> LineString:
    """Two-point line from *start*, heading *azimuth_deg* for *length_m* metres."""
    origin = as_xy(start)
    return LineString([origin, destination_point(origin, length_m, azimuth_deg)])
