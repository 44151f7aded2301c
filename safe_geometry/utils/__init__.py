"""Structural geometry helpers (constructors, part flattening, axis swap)."""

from safe_geometry.utils.shapes import (
    angle_between,
    build_geometry,
    close_ring,
    get_all_hole_rings,
    get_boundary,
    iter_parts,
    make_polygon,
    prepared_copy,
    swap_axes,
)

__all__ = [
    "angle_between",
    "build_geometry",
    "close_ring",
    "get_all_hole_rings",
    "get_boundary",
    "iter_parts",
    "make_polygon",
    "prepared_copy",
    "swap_axes",
]
