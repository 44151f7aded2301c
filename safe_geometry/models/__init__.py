"""Data models shared across the geometry layers.

- ValidityError / ValidityErrorKind: typed topology defects
- RepairFailed: sentinel returned by repair heuristics
- BufferStyle: buffer cap/join/segment parameters
"""

from safe_geometry.models.buffer_style import BufferStyle
from safe_geometry.models.validity import (
    VALID_REASON,
    RepairFailed,
    ValidityError,
    ValidityErrorKind,
)

__all__ = [
    "VALID_REASON",
    "BufferStyle",
    "RepairFailed",
    "ValidityError",
    "ValidityErrorKind",
]
