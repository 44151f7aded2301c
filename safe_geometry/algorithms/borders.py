"""Border segment lookup on linework and polygon rings.

A border segment is one straight edge between two consecutive vertices
of a line or ring. Segments never bridge separate parts or rings.
Distances and lengths are planar, in the geometry's own frame.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import shapely
from shapely.geometry import LineString, Point, Polygon

from safe_geometry.core.exceptions import ArgumentError
from safe_geometry.metrics.geodesic import as_xy
from safe_geometry.utils.shapes import iter_parts

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.algorithms.borders")


def find_nearest_border_segment(
    geometry: BaseGeometry,
    point: Point | Sequence[float],
) -> LineString | None:
    """Border segment of *geometry* closest to *point*.

    Ties go to the segment met first (exterior before holes, parts in
    order). Returns ``None`` if *geometry* has no segments.
    """
    segments = _segments(geometry)
    if len(segments) == 0:
        return None
    distances = shapely.distance(segments, Point(as_xy(point)))
    return segments[int(np.argmin(distances))]


def find_longest_border_segments(geometry: BaseGeometry, limit: int) -> list[LineString]:
    """Up to *limit* border segments of *geometry*, longest first.

    Raises:
        ArgumentError: If *limit* is negative.
    """
    if limit < 0:
        msg = f"limit must be >= 0, got {limit}"
        raise ArgumentError(msg, operation="find_longest_border_segments")
    segments = _segments(geometry)
    if len(segments) == 0 or limit == 0:
        return []
    order = np.argsort(-shapely.length(segments), kind="stable")
    return list(segments[order[:limit]])


def _segments(geometry: BaseGeometry | None) -> np.ndarray:
    """Non-degenerate two-point segments of every line and ring in *geometry*."""
    paths: list[np.ndarray] = []
    for part in iter_parts(geometry):
        if isinstance(part, Polygon):
            paths.append(np.asarray(part.exterior.coords)[:, :2])
            paths.extend(np.asarray(ring.coords)[:, :2] for ring in part.interiors)
        elif isinstance(part, LineString):
            paths.append(np.asarray(part.coords)[:, :2])

    pairs = [
        np.stack([path[:-1], path[1:]], axis=1)
        for path in paths
        if len(path) >= 2
    ]
    if not pairs:
        return np.empty(0, dtype=object)
    pairs_array = np.concatenate(pairs)
    pairs_array = pairs_array[np.any(pairs_array[:, 0] != pairs_array[:, 1], axis=1)]
    logger.debug("Border segments collected | paths=%d | segments=%d", len(paths), len(pairs_array))
    return shapely.linestrings(pairs_array)
