"""Shared geometry constants: single source of truth.

Centralises CRS identifiers, default tolerances and coordinate bounds
used across the projection, metric and topology modules.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Coordinate reference systems
# ---------------------------------------------------------------------------

WGS84: str = "EPSG:4326"
"""Geographic frame for all external input and output (``lon, lat``)."""

WEB_MERCATOR: str = "EPSG:3857"
"""Fixed global planar frame. Non-metric tasks only (it deforms distances)."""

ELLIPSOID: str = "WGS84"
"""Ellipsoid used for geodesic azimuth / distance / destination computations."""

LOCAL_FRAME_TMERC: str = "tmerc"
LOCAL_FRAME_UTM: str = "utm"
LOCAL_FRAME_KINDS: frozenset[str] = frozenset({LOCAL_FRAME_TMERC, LOCAL_FRAME_UTM})

# ---------------------------------------------------------------------------
# WGS 84 coordinate bounds
# ---------------------------------------------------------------------------

MIN_LONGITUDE: float = -180.0
MAX_LONGITUDE: float = 180.0
MIN_LATITUDE: float = -90.0
MAX_LATITUDE: float = 90.0

# ---------------------------------------------------------------------------
# Operation defaults
# ---------------------------------------------------------------------------

DEFAULT_PERTURBATION_BUFFER_M: float = 1.0
"""Buffer applied to operand A before the second boolean-operation attempt."""

DEFAULT_BUFFER_QUAD_SEGS: int = 4
"""Segments per quarter circle for projected buffers."""

DEFAULT_MITRE_LIMIT: float = 5.0

DEFAULT_LLOYD_MAX_ITERATIONS: int = 50

DEFAULT_SIMPLIFY_TOLERANCE_M: float = 5.0
"""Web Mercator simplification tolerance used after spike removal."""

FULL_CIRCLE_DEG: float = 360.0
