"""Lloyd relaxation: fill a polygon with roughly evenly spaced points.

Starting from a random point set inside the area, each iteration builds
the Voronoi diagram of the points, clips every cell to the area and
moves each point to the centroid of its clipped cell. After enough
iterations neighbouring points sit about ``point_distance`` apart
(typically within 10%). The result is not a regular grid.

``LloydRelaxation`` works in whatever planar frame the area is given
in; use ``generate_lloyd_points_wgs84`` for ``(lon, lat)`` areas.

See https://en.wikipedia.org/wiki/Lloyd%27s_algorithm
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import shapely
from shapely.geometry import MultiPoint
from shapely.ops import nearest_points as kernel_nearest_points

from safe_geometry.core.config import get_config
from safe_geometry.core.exceptions import ArgumentError, ProjectionError
from safe_geometry.projection.local_frame import LocalProjection, local_frame
from safe_geometry.utils.shapes import prepared_copy

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.algorithms.lloyd")

# Decimal places kept in area / spacing² before rounding up, so that
# reprojection noise (e.g. 100.00000001) does not add a point.
POINT_COUNT_PRECISION = 6

# Oversampling factor for each rejection-sampling batch
SEED_OVERSAMPLING = 1.25


@dataclass
class RelaxationState:
    """Working state of one relaxation run.

    Attributes:
        points: Current point set, shape ``(n, 2)``. Replaced wholesale
            on every iteration.
        area: Area being filled (planar frame).
        spacing: Target distance between neighbouring points.
        iteration: Number of completed iterations.
        max_iterations: Iteration cap.
    """

    points: np.ndarray
    area: BaseGeometry
    spacing: float
    iteration: int = 0
    max_iterations: int = 0

    @property
    def done(self) -> bool:
        return self.iteration >= self.max_iterations


class LloydRelaxation:
    """Evenly spaced point fill of a planar area.

    Args:
        area: Polygonal area in a planar (metric) frame.
        point_distance: Desired distance between neighbouring points,
            in area units.
        max_iterations: Iteration cap. Defaults to the configured value.
        rng: Random source for the initial points. A fresh unseeded
            generator is used when omitted.

    Raises:
        ArgumentError: If ``point_distance`` is not positive or
            ``max_iterations`` is negative.
    """

    def __init__(
        self,
        area: BaseGeometry,
        point_distance: float,
        *,
        max_iterations: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        _check_spacing(point_distance)
        if max_iterations is None:
            max_iterations = get_config().lloyd_max_iterations
        if max_iterations < 0:
            msg = f"max_iterations must be >= 0, got {max_iterations}"
            raise ArgumentError(msg, operation="lloyd_relaxation")

        self.area = area
        self.point_distance = point_distance
        self.max_iterations = max_iterations
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state: RelaxationState | None = None

    def generate(self) -> list[tuple[float, float]]:
        """Run the relaxation and return the final points.

        Returns:
            ``ceil(area / point_distance²)`` points as ``(x, y)`` tuples,
            or ``[]`` for an empty area.

        Raises:
            ArgumentError: If the area is non-empty but has no positive area.
        """
        if self.area.is_empty:
            return []
        if self.area.area <= 0:
            msg = f"Area to fill must be positive, got {self.area.area} ({self.area.geom_type})"
            raise ArgumentError(msg, operation="lloyd_relaxation")

        count = self.point_count()
        area = prepared_copy(self.area)
        self.state = RelaxationState(
            points=self._seed(area, count),
            area=area,
            spacing=self.point_distance,
            max_iterations=self.max_iterations,
        )
        while not self.state.done:
            self._step(self.state)

        logger.debug(
            "Lloyd relaxation complete | points=%d | spacing=%.3f | iterations=%d",
            len(self.state.points),
            self.point_distance,
            self.state.iteration,
        )
        return [(float(x), float(y)) for x, y in self.state.points]

    def point_count(self) -> int:
        """Number of points needed to fill the area at the target spacing."""
        ratio = self.area.area / (self.point_distance**2)
        return math.ceil(round(ratio, POINT_COUNT_PRECISION))

    # -- internals ----------------------------------------------------------

    def _seed(self, area: BaseGeometry, count: int) -> np.ndarray:
        """Uniform random points inside *area* by batched rejection sampling."""
        min_x, min_y, max_x, max_y = area.bounds
        acceptance = area.area / area.envelope.area
        accepted: list[np.ndarray] = []
        found = 0
        while found < count:
            missing = count - found
            batch = max(missing, math.ceil(missing / acceptance * SEED_OVERSAMPLING))
            xs = self.rng.uniform(min_x, max_x, batch)
            ys = self.rng.uniform(min_y, max_y, batch)
            inside = shapely.contains_xy(area, xs, ys)
            accepted.append(np.column_stack([xs[inside], ys[inside]]))
            found += int(inside.sum())
        return np.concatenate(accepted)[:count]

    def _step(self, state: RelaxationState) -> None:
        """Move every point to the centroid of its clipped Voronoi cell."""
        if len(state.points) < 2:
            centroid = state.area.centroid
            state.points = np.array([[centroid.x, centroid.y]] * len(state.points), dtype=float)
            state.iteration += 1
            return

        cells = shapely.voronoi_polygons(MultiPoint(state.points), extend_to=state.area)
        centroids = []
        for cell in shapely.get_parts(cells):
            clipped = cell.intersection(state.area)
            if clipped.is_empty:
                target = kernel_nearest_points(state.area, cell.centroid)[0]
            else:
                target = clipped.centroid
            centroids.append((target.x, target.y))
        state.points = np.asarray(centroids, dtype=float)
        state.iteration += 1


# ---------------------------------------------------------------------------
# Geographic wrapper
# ---------------------------------------------------------------------------


def generate_lloyd_points_wgs84(
    area: BaseGeometry,
    meters_between_points: float,
    *,
    frame: LocalProjection | None = None,
    max_iterations: int | None = None,
    rng: np.random.Generator | None = None,
) -> list[tuple[float, float]]:
    """Evenly spaced ``(lon, lat)`` points inside a WGS 84 area.

    The area is projected to a local metric frame, relaxed there, and
    the points are mapped back.

    Returns:
        The points, or ``[]`` for an empty area or when projection fails.

    Raises:
        ArgumentError: If the spacing is not positive or the area has no
            positive area.
    """
    _check_spacing(meters_between_points)
    if area.is_empty:
        return []
    try:
        frame = frame or local_frame(area)
        local_area = frame.forward(area)
    except ProjectionError as exc:
        logger.error("Lloyd points projection failed | error=%s", exc)
        return []

    relaxation = LloydRelaxation(
        local_area,
        meters_between_points,
        max_iterations=max_iterations,
        rng=rng,
    )
    local_points = relaxation.generate()
    try:
        return [frame.inverse_coord(point) for point in local_points]
    except ProjectionError as exc:
        logger.error("Lloyd points inverse projection failed | error=%s", exc)
        return []


def _check_spacing(point_distance: float) -> None:
    if not point_distance > 0:
        msg = f"Point distance must be positive, got {point_distance}"
        raise ArgumentError(msg, operation="lloyd_relaxation")

