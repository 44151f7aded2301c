"""Buffer/offset parameters for projected buffers."""

from __future__ import annotations

from dataclasses import dataclass

from safe_geometry.core.constants import DEFAULT_BUFFER_QUAD_SEGS, DEFAULT_MITRE_LIMIT
from safe_geometry.core.exceptions import ArgumentError

CAP_STYLES = frozenset({"round", "flat", "square"})
JOIN_STYLES = frozenset({"round", "mitre", "bevel"})


@dataclass(frozen=True, slots=True)
class BufferStyle:
    """Cap, join and segment parameters passed to the kernel buffer operator.

    Attributes:
        quad_segs: Segments used to approximate a quarter circle.
        cap_style: ``"round"``, ``"flat"`` or ``"square"``.
        join_style: ``"round"``, ``"mitre"`` or ``"bevel"``.
        mitre_limit: Limit on mitre join length relative to buffer width.
    """

    quad_segs: int = DEFAULT_BUFFER_QUAD_SEGS
    cap_style: str = "round"
    join_style: str = "round"
    mitre_limit: float = DEFAULT_MITRE_LIMIT

    def __post_init__(self) -> None:
        if self.quad_segs < 1:
            msg = f"quad_segs must be >= 1, got {self.quad_segs}"
            raise ArgumentError(msg, operation="buffer_style")
        if self.cap_style not in CAP_STYLES:
            msg = f"cap_style must be one of {sorted(CAP_STYLES)}, got {self.cap_style!r}"
            raise ArgumentError(msg, operation="buffer_style")
        if self.join_style not in JOIN_STYLES:
            msg = f"join_style must be one of {sorted(JOIN_STYLES)}, got {self.join_style!r}"
            raise ArgumentError(msg, operation="buffer_style")
        if self.mitre_limit <= 0:
            msg = f"mitre_limit must be > 0, got {self.mitre_limit}"
            raise ArgumentError(msg, operation="buffer_style")

    def as_kwargs(self) -> dict[str, object]:
        """Keyword arguments for ``shapely`` ``buffer``."""
        return {
            "quad_segs": self.quad_segs,
            "cap_style": self.cap_style,
            "join_style": self.join_style,
            "mitre_limit": self.mitre_limit,
        }
