"""Split polygons with cutting lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

import shapely
from shapely.geometry import GeometryCollection, LineString
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from safe_geometry.utils.shapes import iter_parts, prepared_copy

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shapely.geometry import Polygon


def polygonize(linework: BaseGeometry) -> GeometryCollection:
    """Polygons formed by the linear parts of *linework*.

    The linework must already be noded (lines meet only at endpoints).
    """
    lines = [part for part in iter_parts(linework) if isinstance(part, LineString)]
    if not lines:
        return GeometryCollection()
    return shapely.polygonize(lines)


def split_polygon(
    poly: BaseGeometry,
    lines: BaseGeometry | Sequence[BaseGeometry],
) -> list[Polygon]:
    """Cut *poly* into parts along *lines*.

    The polygon boundary is noded together with the cutting lines,
    the result is polygonized, and only faces lying inside the input
    polygon are kept (which drops faces formed by holes or by lines
    outside the polygon).
    """
    if isinstance(lines, BaseGeometry):
        lines = [lines]

    noded = poly.boundary
    for line in lines:
        noded = noded.union(line)

    inside = prep(prepared_copy(poly))
    return [
        face
        for face in polygonize(noded).geoms
        if inside.contains(face.representative_point())
    ]
