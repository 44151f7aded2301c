"""Small constructors and structural helpers for shapely geometries.

None of these functions project; they rearrange coordinates and parts
or compute plain planar quantities. All of them return new geometries
and leave their inputs untouched.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import shapely
from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Polygon,
)
from shapely.ops import unary_union

from safe_geometry.core.exceptions import ArgumentError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from shapely.geometry.base import BaseGeometry

# Minimum distinct vertices for a polygon ring
MIN_RING_VERTICES = 3

MULTI_BY_KIND: dict[str, type[BaseGeometry]] = {
    "Point": MultiPoint,
    "LineString": MultiLineString,
    "LinearRing": MultiLineString,
    "Polygon": MultiPolygon,
}


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def close_ring(coords: Sequence[Sequence[float]]) -> list[tuple[float, ...]]:
    """Return *coords* with the first coordinate appended if the ring is open.

    Closure is judged on ``x`` and ``y`` only.

    Raises:
        ArgumentError: If *coords* is empty.
    """
    ring = [tuple(c) for c in coords]
    if not ring:
        msg = "Cannot close an empty coordinate sequence"
        raise ArgumentError(msg, operation="close_ring")
    if ring[0][:2] != ring[-1][:2]:
        ring.append(ring[0])
    return ring


def make_polygon(coords: Sequence[Sequence[float]]) -> Polygon:
    """Build a hole-free polygon from an open or closed coordinate sequence.

    Raises:
        ArgumentError: If fewer than three distinct vertices are given.
    """
    ring = close_ring(coords)
    if len(ring) - 1 < MIN_RING_VERTICES:
        msg = f"Polygon needs at least {MIN_RING_VERTICES} vertices, got {len(ring) - 1}"
        raise ArgumentError(msg, operation="make_polygon")
    return Polygon(ring)


def get_boundary(area: BaseGeometry) -> BaseGeometry:
    """Outer boundary of an areal geometry as linework.

    Polygons yield their exterior ring as a ``LineString``. Multi-polygons
    and collections yield the union of the exterior rings of their
    polygon parts; holes are ignored.

    Raises:
        ArgumentError: If *area* is not areal, or is a collection
            without any polygons.
    """
    if isinstance(area, Polygon):
        return LineString(area.exterior.coords)
    if isinstance(area, MultiPolygon | GeometryCollection):
        exteriors = [
            LineString(part.exterior.coords)
            for part in iter_parts(area)
            if isinstance(part, Polygon)
        ]
        if not exteriors:
            msg = f"{area.geom_type} has no polygon parts to take a boundary from"
            raise ArgumentError(msg, operation="get_boundary")
        if len(exteriors) == 1:
            return exteriors[0]
        return unary_union(exteriors)
    msg = f"Unknown boundary shape type: {area.geom_type}"
    raise ArgumentError(msg, operation="get_boundary")


def get_all_hole_rings(area: BaseGeometry) -> BaseGeometry:
    """Interior rings of an areal geometry as linework.

    Every hole of every polygon part (of a polygon, multi-polygon or
    collection) is returned as a ``LineString``; several holes are
    unioned together. Geometries without holes yield an empty
    ``GeometryCollection``.
    """
    holes = [
        LineString(ring.coords)
        for part in iter_parts(area)
        if isinstance(part, Polygon)
        for ring in part.interiors
    ]
    if not holes:
        return GeometryCollection()
    if len(holes) == 1:
        return holes[0]
    return unary_union(holes)


def swap_axes(geom: BaseGeometry) -> BaseGeometry:
    """Swap ``x`` and ``y`` of every coordinate, returning a new geometry.

    Converts between ``(lat, lon)`` and ``(lon, lat)`` axis orders.
    """
    return shapely.transform(geom, lambda coords: coords[:, ::-1])


# ---------------------------------------------------------------------------
# Parts
# ---------------------------------------------------------------------------


def iter_parts(geom: BaseGeometry | None) -> Iterator[BaseGeometry]:
    """Yield the non-empty single-part geometries inside *geom*, recursively."""
    if geom is None or geom.is_empty:
        return
    if hasattr(geom, "geoms"):
        for part in geom.geoms:
            yield from iter_parts(part)
        return
    yield geom


def build_geometry(parts: Iterable[BaseGeometry]) -> BaseGeometry:
    """Collect geometries into the most specific container.

    Parts are flattened and empties dropped. A single part is returned
    as-is; parts of one kind become the matching ``Multi*``; mixed kinds
    become a ``GeometryCollection``. No parts yield an empty collection.
    """
    flat = [part for geom in parts for part in iter_parts(geom)]
    if not flat:
        return GeometryCollection()
    if len(flat) == 1:
        return flat[0]

    kinds = {part.geom_type for part in flat}
    if len(kinds) == 1:
        multi = MULTI_BY_KIND.get(kinds.pop())
        if multi is not None:
            return multi(flat)
    return GeometryCollection(flat)


def prepared_copy(geom: BaseGeometry) -> BaseGeometry:
    """Clone *geom* and prepare the clone for repeated spatial queries.

    ``shapely.prepare`` works in place; cloning keeps the caller's
    geometry unprepared.
    """
    clone = shapely.from_wkb(shapely.to_wkb(geom))
    shapely.prepare(clone)
    return clone


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------


def angle_between(
    first_end: Sequence[float],
    middle: Sequence[float],
    second_end: Sequence[float],
) -> float:
    """Unsigned planar angle at *middle* between its two arms, in ``[0, pi]``."""
    a1 = math.atan2(first_end[1] - middle[1], first_end[0] - middle[0])
    a2 = math.atan2(second_end[1] - middle[1], second_end[0] - middle[0])
    diff = abs(a1 - a2)
    return 2 * math.pi - diff if diff > math.pi else diff
