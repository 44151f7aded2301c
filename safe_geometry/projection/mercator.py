"""Fixed global planar frame (Web Mercator).

Web Mercator deforms distances severely away from the equator. It is
used only for non-metric tasks such as cheap simplification and
narrow-angle cleanup. Never measure length or area in this frame; use
``safe_geometry.metrics.projected`` instead.

Failures are logged and the input is returned unchanged.
"""

from __future__ import annotations

import functools
import logging

import shapely
from pyproj import Transformer
from pyproj.exceptions import ProjError
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from safe_geometry.core.constants import WEB_MERCATOR, WGS84

logger = logging.getLogger("safe_geometry.projection.mercator")


@functools.lru_cache(maxsize=1)
def _transformers() -> tuple[Transformer, Transformer]:
    """Forward / inverse WGS 84 <-> Web Mercator transformers, built once."""
    to_mercator = Transformer.from_crs(WGS84, WEB_MERCATOR, always_xy=True)
    from_mercator = Transformer.from_crs(WEB_MERCATOR, WGS84, always_xy=True)
    return to_mercator, from_mercator


def to_mercator(geom: BaseGeometry) -> BaseGeometry:
    """Transform a WGS 84 geometry to Web Mercator."""
    if geom is None or geom.is_empty:
        return geom
    try:
        return _reproject(geom, _transformers()[0])
    except (ProjError, ValueError) as exc:
        logger.error("Mercator transform failed | direction=forward | error=%s", exc)
        return geom


def from_mercator(geom: BaseGeometry) -> BaseGeometry:
    """Transform a Web Mercator geometry back to WGS 84."""
    if geom is None or geom.is_empty:
        return geom
    try:
        return _reproject(geom, _transformers()[1])
    except (ProjError, ValueError) as exc:
        logger.error("Mercator transform failed | direction=inverse | error=%s", exc)
        return geom


def mercator_bounds(
    bounds: tuple[float, float, float, float],
) -> tuple[float, float, float, float]:
    """Convert ``(min_lon, min_lat, max_lon, max_lat)`` to Web Mercator bounds."""
    min_lon, min_lat, max_lon, max_lat = bounds
    try:
        min_x, min_y = _transformers()[0].transform(min_lon, min_lat, errcheck=True)
        max_x, max_y = _transformers()[0].transform(max_lon, max_lat, errcheck=True)
    except ProjError as exc:
        logger.error("Mercator bounds transform failed | bounds=%s | error=%s", bounds, exc)
        return bounds
    return (min_x, min_y, max_x, max_y)


def simplify_projected(geom: BaseGeometry, meters: float) -> BaseGeometry:
    """Simplify, collapsing vertices closer than roughly *meters* to each other.

    Projects to Web Mercator, applies a topology-preserving simplification
    and projects back. Mercator scale means the tolerance is only
    approximate away from the equator, which is acceptable for cleanup.
    """
    if geom is None or geom.is_empty:
        return geom
    projected = to_mercator(geom)
    try:
        simplified = projected.simplify(meters, preserve_topology=True)
    except GEOSException as exc:
        logger.error("Projected simplification failed | tolerance=%.2f m | error=%s", meters, exc)
        return geom
    return from_mercator(simplified)


def _reproject(geom: BaseGeometry, transformer: Transformer) -> BaseGeometry:
    return shapely.transform(geom, transformer.transform, include_z=None, interleaved=False)
