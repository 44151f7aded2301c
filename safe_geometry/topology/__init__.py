"""Topology layer.

- repair: validity diagnosis and repair heuristics
- safe_ops: boolean predicates and set operations with retry and soft failure
"""

from safe_geometry.topology.repair import diagnose, fix_geometry, normalize_collection, repair
from safe_geometry.topology.safe_ops import (
    PreparedOperand,
    prepare_operand,
    safe_contains,
    safe_covers,
    safe_difference,
    safe_intersection,
    safe_intersects,
    safe_union,
)

__all__ = [
    "PreparedOperand",
    "diagnose",
    "fix_geometry",
    "normalize_collection",
    "prepare_operand",
    "repair",
    "safe_contains",
    "safe_covers",
    "safe_difference",
    "safe_intersection",
    "safe_intersects",
    "safe_union",
]
