"""Unified geometry exception taxonomy.

Provides a shared base exception hierarchy for projection, metric and
topology operations. Every domain exception inherits from
``GeometryError`` and carries structured context fields so that batch
callers can decide whether a failure is a data-quality issue (recovered
locally) or caller misuse (surfaced).

Taxonomy categories
-------------------
- ``ArgumentError``:          precondition violations, never recoverable.
- ``ProjectionError``:        CRS resolution / transform failures, recoverable.
- ``TopologyOperationError``: kernel predicate/operation failures, recoverable.

Only ``ArgumentError`` ever reaches the caller of a public operation.
The recoverable categories are caught inside the metric and boolean
operation layers, which return a degraded result instead.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging.
"""

from __future__ import annotations


class GeometryError(Exception):
    """Base exception for all geometry-domain errors.

    Attributes:
        message: Human-readable error description.
        operation: Operation where the error occurred
            (e.g. ``"buffer_projected"``, ``"safe_difference"``).
        code: Machine-readable error code (e.g. ``"PROJECTION_FAILED"``).
        recoverable: Whether the operation layer degrades instead of raising.
    """

    #: Default operation for subclasses (override via class attribute or kwarg).
    default_operation: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        operation: str = "",
        code: str = "",
        recoverable: bool = False,
    ) -> None:
        self.message = message
        self.operation = operation or self.default_operation
        self.code = code or self.default_code
        self.recoverable = recoverable
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ArgumentError):
            return "argument"
        if isinstance(self, ProjectionError):
            return "projection"
        if isinstance(self, TopologyOperationError):
            return "topology"
        return "recoverable" if self.recoverable else "fatal"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "operation": self.operation,
            "message": self.message,
            "recoverable": self.recoverable,
        }


# ---------------------------------------------------------------------------
# Category classes
# ---------------------------------------------------------------------------


class ArgumentError(ValueError, GeometryError):
    """Precondition violation (wrong coordinate arity, non-positive spacing).

    Also a ``ValueError`` so generic callers can catch it idiomatically.
    """

    default_code = "INVALID_ARGUMENT"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("recoverable", False)
        GeometryError.__init__(self, message, **kwargs)  # type: ignore[arg-type]


class ProjectionError(GeometryError):
    """Local frame could not be resolved or a transform failed."""

    default_code = "PROJECTION_FAILED"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TopologyOperationError(GeometryError):
    """The planar kernel failed while evaluating a predicate or operation."""

    default_code = "TOPOLOGY_OPERATION_FAILED"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
