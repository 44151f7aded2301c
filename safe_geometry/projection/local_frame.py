"""Local metric frames for geographic geometries.

A ``LocalProjection`` converts WGS 84 ``(lon, lat)`` geometries into a
planar frame measured in metres that is accurate near a chosen anchor,
and back again. Distortion grows with distance from the anchor, so a
projection is resolved per operation call and never reused for
geometries anchored elsewhere.

Two frame kinds are supported:

- ``"tmerc"``: transverse Mercator centred exactly on the anchor
  (scale factor 1 on the anchor meridian). Default.
- ``"utm"``: the standard UTM zone containing the anchor.

Every failure (bad anchor, CRS resolution, transform) raises
``ProjectionError``. Callers catch it and degrade instead of aborting.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import shapely
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError
from shapely.geometry.base import BaseGeometry

from safe_geometry.core.config import get_config
from safe_geometry.core.constants import (
    LOCAL_FRAME_TMERC,
    LOCAL_FRAME_UTM,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    WGS84,
)
from safe_geometry.core.exceptions import ProjectionError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("safe_geometry.projection.local_frame")


@dataclass(frozen=True, slots=True)
class LocalProjection:
    """Forward / inverse transform pair between WGS 84 and a local frame.

    Attributes:
        anchor: ``(lon, lat)`` the frame was resolved for.
        crs: The local planar CRS (metres).
        kind: Frame kind (``"tmerc"`` or ``"utm"``).
    """

    anchor: tuple[float, float]
    crs: CRS
    kind: str
    _to_local: Transformer
    _to_global: Transformer

    def forward(self, geom: BaseGeometry) -> BaseGeometry:
        """Transform a geographic geometry into the local frame."""
        return _transform_geometry(self._to_local, geom, "forward")

    def inverse(self, geom: BaseGeometry) -> BaseGeometry:
        """Transform a local-frame geometry back to geographic coordinates."""
        return _transform_geometry(self._to_global, geom, "inverse")

    def forward_coord(self, coord: tuple[float, float]) -> tuple[float, float]:
        """Transform a single ``(lon, lat)`` into local ``(x, y)`` metres."""
        return _transform_coord(self._to_local, coord, "forward")

    def inverse_coord(self, coord: tuple[float, float]) -> tuple[float, float]:
        """Transform a single local ``(x, y)`` back into ``(lon, lat)``."""
        return _transform_coord(self._to_global, coord, "inverse")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def local_frame(
    anchor: BaseGeometry | tuple[float, float],
    *,
    kind: str | None = None,
) -> LocalProjection:
    """Resolve a local metric frame suitable for work near *anchor*.

    Args:
        anchor: A geometry (its centroid is used) or a ``(lon, lat)`` tuple.
        kind: ``"tmerc"`` or ``"utm"``. Defaults to the configured kind.

    Returns:
        A ``LocalProjection`` for this anchor.

    Raises:
        ProjectionError: If the anchor is empty, non-finite or outside
            WGS 84 bounds, or if the CRS engine cannot build the frame.
    """
    lon, lat = anchor_point(anchor)
    kind = kind or get_config().local_frame

    try:
        if kind == LOCAL_FRAME_TMERC:
            crs = _tmerc_crs(lon, lat)
        elif kind == LOCAL_FRAME_UTM:
            crs = CRS.from_user_input(_get_utm_crs(lon, lat))
        else:
            msg = f"Unknown local frame kind {kind!r}"
            raise ProjectionError(msg, operation="local_frame")
        to_local = Transformer.from_crs(WGS84, crs, always_xy=True)
        to_global = Transformer.from_crs(crs, WGS84, always_xy=True)
    except (CRSError, ProjError) as exc:
        msg = f"Cannot resolve local frame at ({lon}, {lat}): {exc}"
        raise ProjectionError(msg, operation="local_frame") from exc

    logger.debug("Local frame resolved | kind=%s | anchor=(%.6f, %.6f)", kind, lon, lat)
    return LocalProjection(
        anchor=(lon, lat),
        crs=crs,
        kind=kind,
        _to_local=to_local,
        _to_global=to_global,
    )


def anchor_point(anchor: BaseGeometry | tuple[float, float]) -> tuple[float, float]:
    """Reduce an anchor (geometry or coordinate) to a validated ``(lon, lat)``.

    Raises:
        ProjectionError: If the anchor is empty, non-finite or out of bounds.
    """
    if isinstance(anchor, BaseGeometry):
        if anchor.is_empty:
            msg = "Cannot resolve a local frame for an empty geometry"
            raise ProjectionError(msg, operation="local_frame")
        centroid = anchor.centroid
        if centroid.is_empty:
            # Degenerate input (e.g. zero-length collection parts).
            centroid = anchor.envelope.centroid
        lon, lat = centroid.x, centroid.y
    else:
        lon, lat = float(anchor[0]), float(anchor[1])

    if not (math.isfinite(lon) and math.isfinite(lat)):
        msg = f"Non-finite anchor ({lon}, {lat})"
        raise ProjectionError(msg, operation="local_frame")
    if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE) or not (MIN_LATITUDE <= lat <= MAX_LATITUDE):
        msg = f"Anchor ({lon}, {lat}) outside WGS 84 range"
        raise ProjectionError(msg, operation="local_frame")
    return lon, lat


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tmerc_crs(lon: float, lat: float) -> CRS:
    """Transverse Mercator on the WGS 84 ellipsoid centred on ``(lon, lat)``."""
    return CRS.from_dict(
        {
            "proj": "tmerc",
            "lat_0": lat,
            "lon_0": lon,
            "k": 1.0,
            "x_0": 0.0,
            "y_0": 0.0,
            "ellps": "WGS84",
            "units": "m",
            "no_defs": True,
        }
    )


def _get_utm_crs(lon: float, lat: float) -> str:
    """Determine the UTM CRS for a given WGS 84 coordinate.

    Returns an EPSG code like ``"EPSG:32610"`` (UTM zone 10N) or
    ``"EPSG:32710"`` (UTM zone 10S).
    """
    # UTM zone number: 1-based, 6° wide, starting at -180°
    zone_number = int((lon + 180) / 6) + 1
    zone_number = max(1, min(60, zone_number))

    if lat >= 0:
        return f"EPSG:{32600 + zone_number}"
    return f"EPSG:{32700 + zone_number}"


def _checked(transformer: Transformer, direction: str) -> Callable[..., Any]:
    """Wrap ``transformer.transform`` so that failures raise ``ProjectionError``."""

    def apply(*args: Any) -> Any:
        try:
            result = transformer.transform(*args, errcheck=True)
        except ProjError as exc:
            msg = f"Coordinate transform ({direction}) failed: {exc}"
            raise ProjectionError(msg, operation=f"{direction}_transform") from exc
        if not all(np.isfinite(np.asarray(values, dtype=float)).all() for values in result[:2]):
            msg = f"Coordinate transform ({direction}) produced non-finite values"
            raise ProjectionError(msg, operation=f"{direction}_transform")
        return result

    return apply


def _transform_geometry(
    transformer: Transformer,
    geom: BaseGeometry,
    direction: str,
) -> BaseGeometry:
    if geom.is_empty:
        return geom
    try:
        return shapely.transform(
            geom, _checked(transformer, direction), include_z=None, interleaved=False
        )
    except ProjectionError:
        raise
    except (ValueError, TypeError) as exc:
        msg = f"Geometry transform ({direction}) failed for {geom.geom_type}: {exc}"
        raise ProjectionError(msg, operation=f"{direction}_transform") from exc


def _transform_coord(
    transformer: Transformer,
    coord: tuple[float, float],
    direction: str,
) -> tuple[float, float]:
    x, y = _checked(transformer, direction)(float(coord[0]), float(coord[1]))[:2]
    return (float(x), float(y))
