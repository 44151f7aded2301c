"""Rotated point grid inside a geographic polygon.

Rows and columns are laid out with direct geodesics, so spacing is
``step_m`` on the ground regardless of latitude. The grid starts at the
south-west corner of the polygon's envelope, walks along ``main_angle``
(degrees clockwise from north) and sweeps perpendicular to it on both
sides. Only points strictly inside the polygon are returned.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
import shapely
from shapely.geometry import box

from safe_geometry.core.exceptions import ArgumentError, ProjectionError
from safe_geometry.metrics.geodesic import destination_point
from safe_geometry.projection.local_frame import LocalProjection, local_frame
from safe_geometry.utils.shapes import prepared_copy

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.algorithms.grid")

QUARTER_TURN_DEG = 90.0


def fold_grid_angle(main_angle: float) -> float:
    """Fold a grid orientation into ``[0, 90]``.

    A square grid repeats every quarter turn, so only the orientation
    modulo 90 degrees matters.

    Raises:
        ArgumentError: If the angle is NaN or infinite.
    """
    if not math.isfinite(main_angle):
        msg = f"Grid angle must be finite, got {main_angle}"
        raise ArgumentError(msg, operation="generate_grid_points")
    folded = math.fmod(main_angle, QUARTER_TURN_DEG)
    if folded < 0:
        folded += QUARTER_TURN_DEG
    if folded == 0 and main_angle > 0:
        folded = QUARTER_TURN_DEG
    return folded


def generate_grid_points(
    bounds: BaseGeometry,
    step_m: float,
    main_angle: float,
    *,
    frame: LocalProjection | None = None,
) -> list[tuple[float, float]]:
    """Square grid of ``(lon, lat)`` points inside *bounds*.

    Args:
        bounds: Polygonal area in WGS 84.
        step_m: Grid spacing in metres.
        main_angle: Grid orientation in degrees from north.
        frame: Local frame used to size the sweep. Resolved from
            *bounds* when omitted.

    Returns:
        Grid points inside *bounds*; ``[]`` for an empty area or when
        the local frame cannot be resolved.

    Raises:
        ArgumentError: If ``step_m`` is not positive.
    """
    if not step_m > 0:
        msg = f"Grid step must be positive, got {step_m}"
        raise ArgumentError(msg, operation="generate_grid_points")
    angle = fold_grid_angle(main_angle)
    if bounds.is_empty:
        return []

    min_lon, min_lat, max_lon, max_lat = bounds.bounds
    try:
        frame = frame or local_frame(bounds)
        local_min_x, local_min_y, local_max_x, local_max_y = frame.forward(
            box(min_lon, min_lat, max_lon, max_lat)
        ).bounds
    except ProjectionError as exc:
        logger.error("Grid sizing failed | error=%s", exc)
        return []

    width = local_max_x - local_min_x
    height = local_max_y - local_min_y
    sweep = max(width, height)
    diagonal = math.hypot(width, height)

    candidates: list[tuple[float, float]] = []
    row_origin = (min_lon, min_lat)
    walked = 0.0
    while True:
        candidates.append(row_origin)
        for side in (QUARTER_TURN_DEG, -QUARTER_TURN_DEG):
            index = 1
            while True:
                candidates.append(destination_point(row_origin, step_m * index, angle + side))
                index += 1
                if step_m * index >= sweep:
                    break
        row_origin = destination_point(row_origin, step_m, angle)
        walked += step_m
        if walked >= diagonal:
            break

    coords = np.asarray(candidates, dtype=float)
    inside = shapely.contains_xy(prepared_copy(bounds), coords[:, 0], coords[:, 1])
    points = [(float(x), float(y)) for x, y in coords[inside]]
    logger.debug(
        "Grid generated | step_m=%.2f | angle=%.2f | candidates=%d | inside=%d",
        step_m,
        angle,
        len(candidates),
        len(points),
    )
    return points
