"""Coordinate projection layer.

- local_frame: per-anchor metric frames (transverse Mercator or UTM)
- mercator: fixed Web Mercator frame for non-metric tasks
"""

from safe_geometry.projection.local_frame import LocalProjection, anchor_point, local_frame
from safe_geometry.projection.mercator import (
    from_mercator,
    mercator_bounds,
    simplify_projected,
    to_mercator,
)

__all__ = [
    "LocalProjection",
    "anchor_point",
    "from_mercator",
    "local_frame",
    "mercator_bounds",
    "simplify_projected",
    "to_mercator",
]
