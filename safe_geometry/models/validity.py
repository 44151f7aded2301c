"""Typed topology-validity model.

``ValidityError`` describes a single topology defect reported by the
planar kernel's validity checker. ``RepairFailed`` is the sentinel that
the repair heuristics return (never raise) when they cannot produce a
valid geometry; the immediate caller decides the fallback.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

# GEOS reports "<Reason>[<x> <y>]", e.g. "Ring Self-intersection[10 0]".
_REASON_PATTERN = re.compile(r"^\s*(?P<reason>[^\[]+?)\s*(?:\[(?P<x>\S+)\s+(?P<y>[^\s\]]+)[^\]]*\])?\s*$")

VALID_REASON = "Valid Geometry"


class ValidityErrorKind(enum.Enum):
    """Class of topology defect.

    Values:
        SELF_INTERSECTION:      Rings of a polygon cross each other.
        RING_SELF_INTERSECTION: A single ring touches or crosses itself.
        HOLE_OUTSIDE_SHELL:     A hole is not inside its polygon's shell.
        OTHER:                  Any other defect (no automatic repair).
    """

    SELF_INTERSECTION = "self_intersection"
    RING_SELF_INTERSECTION = "ring_self_intersection"
    HOLE_OUTSIDE_SHELL = "hole_outside_shell"
    OTHER = "other"


_KIND_BY_REASON: dict[str, ValidityErrorKind] = {
    "self-intersection": ValidityErrorKind.SELF_INTERSECTION,
    "ring self-intersection": ValidityErrorKind.RING_SELF_INTERSECTION,
    "hole lies outside shell": ValidityErrorKind.HOLE_OUTSIDE_SHELL,
}


@dataclass(frozen=True, slots=True)
class ValidityError:
    """A typed topology defect.

    Attributes:
        kind: Defect class.
        location: ``(x, y)`` where the kernel detected the defect, if known.
        reason: Raw reason string reported by the kernel.
    """

    kind: ValidityErrorKind
    location: tuple[float, float] | None = None
    reason: str = ""

    @classmethod
    def from_reason(cls, reason: str) -> ValidityError:
        """Build a ``ValidityError`` from a kernel reason string."""
        match = _REASON_PATTERN.match(reason or "")
        if match is None:
            return cls(kind=ValidityErrorKind.OTHER, reason=reason)

        kind = _KIND_BY_REASON.get(match.group("reason").lower(), ValidityErrorKind.OTHER)
        location: tuple[float, float] | None = None
        if match.group("x") is not None:
            try:
                location = (float(match.group("x")), float(match.group("y")))
            except ValueError:
                location = None
        return cls(kind=kind, location=location, reason=reason)


@dataclass(frozen=True, slots=True)
class RepairFailed:
    """Returned by repair heuristics that could not produce a valid geometry.

    Attributes:
        error: The defect that was being repaired, if any.
        reason: Why the repair failed.
    """

    error: ValidityError | None = None
    reason: str = ""
