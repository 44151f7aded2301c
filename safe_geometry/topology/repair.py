"""Topology diagnosis and repair.

Turns the planar kernel's validity report into a typed
``ValidityError`` and applies a repair heuristic chosen by defect kind:

- self-intersection / ring self-intersection: zero-distance buffer;
- hole outside shell (``Polygon`` only): rebuild the shell as a
  standalone polygon and subtract each hole from it individually.

Anything else yields a ``RepairFailed`` value. ``fix_geometry`` chains
collection normalization, diagnosis and repair, and never raises for
data problems: an unrepairable geometry is returned as-is.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import shapely
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, Polygon

from safe_geometry.models.validity import (
    VALID_REASON,
    RepairFailed,
    ValidityError,
    ValidityErrorKind,
)
from safe_geometry.utils.shapes import MULTI_BY_KIND, iter_parts

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.topology.repair")

_BUFFER_REPAIRABLE = frozenset(
    {ValidityErrorKind.SELF_INTERSECTION, ValidityErrorKind.RING_SELF_INTERSECTION}
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def diagnose(geom: BaseGeometry | None) -> ValidityError | None:
    """Return the first topology defect of *geom*, or ``None`` if it is valid.

    Missing and empty geometries are treated as valid.
    """
    if geom is None or geom.is_empty:
        return None
    reason = shapely.is_valid_reason(geom)
    if reason is None or reason == VALID_REASON:
        return None
    return ValidityError.from_reason(reason)


def repair(geom: BaseGeometry, error: ValidityError) -> BaseGeometry | RepairFailed:
    """Apply the repair heuristic for *error* to *geom*.

    Returns:
        The repaired geometry, or ``RepairFailed`` when no heuristic
        applies or the kernel fails while repairing.
    """
    try:
        if error.kind in _BUFFER_REPAIRABLE:
            return geom.buffer(0)
        if error.kind is ValidityErrorKind.HOLE_OUTSIDE_SHELL:
            if isinstance(geom, Polygon):
                return _subtract_holes(geom)
            return RepairFailed(
                error=error,
                reason=f"hole repair needs a Polygon, got {geom.geom_type}",
            )
    except GEOSException as exc:
        return RepairFailed(error=error, reason=f"kernel failure during repair: {exc}")
    return RepairFailed(error=error, reason=f"no repair heuristic for {error.kind.value}")


def normalize_collection(geom: BaseGeometry) -> BaseGeometry:
    """Give heterogeneous collections a shape the boolean kernel can handle.

    A ``GeometryCollection`` whose flattened parts share one shape kind
    becomes the matching ``Multi*`` geometry. Mixed kinds are merged with
    a zero-distance buffer, which keeps areal parts and may drop pure
    line or point parts. Any other geometry is returned unchanged.
    """
    if geom.geom_type != "GeometryCollection" or geom.is_empty:
        return geom

    parts = list(iter_parts(geom))
    kinds = {part.geom_type for part in parts}
    if len(kinds) == 1:
        multi = MULTI_BY_KIND.get(kinds.pop())
        if multi is not None:
            return multi(parts)

    try:
        merged = geom.buffer(0)
    except GEOSException as exc:
        logger.warning(
            "Collection normalization failed | kinds=%s | error=%s",
            ",".join(sorted(kinds)),
            exc,
        )
        return geom
    logger.debug(
        "Mixed collection merged by zero buffer | kinds=%s | result=%s",
        ",".join(sorted(kinds)),
        merged.geom_type,
    )
    return merged


def fix_geometry(geom: BaseGeometry | None) -> BaseGeometry:
    """Normalize, diagnose and repair *geom* in one step.

    Returns:
        An empty ``GeometryCollection`` for ``None``; *geom* itself when
        it is empty or valid; otherwise the repaired geometry. When
        repair fails the normalized (possibly still invalid) geometry is
        returned and a warning is logged.
    """
    if geom is None:
        return GeometryCollection()
    if geom.is_empty:
        return geom

    normalized = normalize_collection(geom)
    error = diagnose(normalized)
    if error is None:
        return normalized

    result = repair(normalized, error)
    if isinstance(result, RepairFailed):
        logger.warning(
            "Geometry repair failed | geom_type=%s | kind=%s | reason=%s",
            normalized.geom_type,
            error.kind.value,
            result.reason,
        )
        return normalized

    logger.debug(
        "Geometry repaired | kind=%s | location=%s | result=%s",
        error.kind.value,
        error.location,
        result.geom_type,
    )
    return result


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _subtract_holes(polygon: Polygon) -> BaseGeometry:
    result: BaseGeometry = Polygon(polygon.exterior.coords)
    for interior in polygon.interiors:
        result = result.difference(Polygon(interior.coords))
    return result
