"""Line straightening within an allowed area."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shapely.geometry import LineString
from shapely.prepared import prep

from safe_geometry.utils.shapes import prepared_copy

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shapely.geometry.base import BaseGeometry


def straighten_line(
    line: LineString,
    area: BaseGeometry | None = None,
    keep: Iterable[Sequence[float]] | None = None,
) -> LineString:
    """Drop intermediate vertices of *line* where a straight shortcut is allowed.

    Walking from the start, each vertex is skipped as long as the
    shortcut from the last kept vertex stays inside *area* (any shortcut
    is allowed when *area* is ``None``). Vertices listed in *keep* are
    never skipped. Lines with two or fewer coordinates are returned
    unchanged.
    """
    coords = list(line.coords)
    if len(coords) <= 2:
        return line

    keep_xy = {(float(c[0]), float(c[1])) for c in keep} if keep else set()
    allowed = prep(prepared_copy(area)) if area is not None else None

    def fits(start: tuple[float, ...], end: tuple[float, ...]) -> bool:
        return allowed is None or allowed.contains(LineString([start, end]))

    last = len(coords) - 1
    start_idx, ray_idx = 0, 1
    result = [coords[0]]
    while ray_idx < last:
        end = coords[ray_idx]
        if end[:2] in keep_xy:
            result.append(end)
            start_idx, ray_idx = ray_idx, ray_idx + 1
        elif not fits(coords[start_idx], end):
            if ray_idx == start_idx + 1:
                # the segment itself leaves the area; keep it
                result.append(end)
                start_idx, ray_idx = ray_idx, ray_idx + 1
            else:
                result.append(coords[ray_idx - 1])
                start_idx = ray_idx - 1
        else:
            ray_idx += 1

    if ray_idx - 1 > start_idx and not fits(coords[start_idx], coords[ray_idx]):
        result.append(coords[ray_idx - 1])
    result.append(coords[ray_idx])
    return LineString(result)
