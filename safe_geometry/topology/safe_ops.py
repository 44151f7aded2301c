"""Fault-tolerant boolean predicates and set operations.

Every operation follows the same policy:

1. Repair both operands (``fix_geometry``).
2. Evaluate exactly. Predicates query a prepared copy of operand A,
   so they use the kernel's prepared-geometry fast path.
3. If the kernel fails, evaluate once more with A replaced by a small
   projected buffer of itself (``buffer_m`` metres), which usually
   perturbs it off the degenerate configuration.
4. If that fails too, predicates return ``False`` and operations
   return an empty ``GeometryCollection``.

Data problems never raise out of this module. Kernel failures
(``GEOSException``) are surfaced internally as
``TopologyOperationError`` and logged.

Operand A may be given as a ``PreparedOperand`` built once with
``prepare_operand`` and reused for many queries against different B
geometries. It is read-only: perturbed retry geometries are computed
per call and never stored on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import shapely
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection
from shapely.prepared import PreparedGeometry, prep

from safe_geometry.core.config import get_config
from safe_geometry.core.exceptions import TopologyOperationError
from safe_geometry.metrics.projected import buffer_projected
from safe_geometry.topology.repair import fix_geometry
from safe_geometry.utils.shapes import build_geometry, iter_parts, prepared_copy

if TYPE_CHECKING:
    from collections.abc import Callable

    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("safe_geometry.topology.safe_ops")


@dataclass(frozen=True, slots=True)
class PreparedOperand:
    """A repaired geometry plus its prepared form, built once.

    Attributes:
        geometry: The repaired operand.
        prepared: Prepared-geometry index over ``geometry``.
    """

    geometry: BaseGeometry
    prepared: PreparedGeometry


def prepare_operand(geom: BaseGeometry | None) -> PreparedOperand:
    """Repair and prepare *geom* for repeated one-against-many queries.

    The caller's geometry is never prepared in place.
    """
    geometry = prepared_copy(fix_geometry(geom))
    return PreparedOperand(geometry=geometry, prepared=prep(geometry))


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def safe_intersects(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None = None,
) -> bool:
    """Fault-tolerant ``intersects``; ``False`` if the kernel keeps failing."""
    return _predicate("safe_intersects", _intersects, a, b, buffer_m)


def safe_covers(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None = None,
) -> bool:
    """Fault-tolerant ``covers``; ``False`` if the kernel keeps failing."""
    return _predicate("safe_covers", _covers, a, b, buffer_m)


def safe_contains(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None = None,
) -> bool:
    """Fault-tolerant ``contains``; ``False`` if the kernel keeps failing."""
    return _predicate("safe_contains", _contains, a, b, buffer_m)


# ---------------------------------------------------------------------------
# Set operations
# ---------------------------------------------------------------------------


def safe_intersection(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None = None,
) -> BaseGeometry:
    """Fault-tolerant intersection. Empty if either operand is empty."""
    operand, other = _operands(a, b)
    if operand.geometry.is_empty or other.is_empty:
        return GeometryCollection()
    return _operation("safe_intersection", _intersection, operand.geometry, other, buffer_m)


def safe_union(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None = None,
) -> BaseGeometry:
    """Fault-tolerant union. If one operand is empty the other is returned."""
    operand, other = _operands(a, b)
    if other.is_empty:
        return operand.geometry
    if operand.geometry.is_empty:
        return other
    return _operation("safe_union", _union, operand.geometry, other, buffer_m)


def safe_difference(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None = None,
) -> BaseGeometry:
    """Fault-tolerant ``a - b``.

    Multi-part operands are decomposed: every part of B is subtracted
    from every part of A in turn (each subtraction with its own retry),
    and the non-empty remainders are recombined. If any subtraction
    fails on both attempts the whole result is an empty collection.
    """
    operand, other = _operands(a, b)
    if operand.geometry.is_empty:
        return GeometryCollection()
    if other.is_empty:
        return operand.geometry

    buffer_m = _resolve_buffer(buffer_m)
    subtrahends = list(iter_parts(other))
    remainders: list[BaseGeometry] = []
    try:
        for part in iter_parts(operand.geometry):
            current = part
            for subtrahend in subtrahends:
                if current.is_empty:
                    break
                current = _with_retry("safe_difference", _difference, current, subtrahend, buffer_m)
            remainders.append(current)
    except TopologyOperationError as exc:
        _log_soft_failure("safe_difference", exc)
        return GeometryCollection()
    return build_geometry(remainders)


# ---------------------------------------------------------------------------
# Kernel calls
# ---------------------------------------------------------------------------


def _intersects(a: BaseGeometry | PreparedGeometry, b: BaseGeometry) -> bool:
    return bool(a.intersects(b))


def _covers(a: BaseGeometry | PreparedGeometry, b: BaseGeometry) -> bool:
    return bool(a.covers(b))


def _contains(a: BaseGeometry | PreparedGeometry, b: BaseGeometry) -> bool:
    return bool(a.contains(b))


def _intersection(a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
    return shapely.intersection(a, b)


def _union(a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
    return shapely.union(a, b)


def _difference(a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
    return shapely.difference(a, b)


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


def _operands(
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
) -> tuple[PreparedOperand, BaseGeometry]:
    operand = a if isinstance(a, PreparedOperand) else prepare_operand(a)
    return operand, fix_geometry(b)


def _resolve_buffer(buffer_m: float | None) -> float:
    return get_config().perturbation_buffer_m if buffer_m is None else buffer_m


def _evaluate(
    operation: str,
    kernel: Callable[..., Any],
    a: BaseGeometry | PreparedGeometry,
    b: BaseGeometry,
) -> Any:
    try:
        return kernel(a, b)
    except GEOSException as exc:
        msg = f"Kernel failure: {exc}"
        raise TopologyOperationError(msg, operation=operation) from exc


def _with_retry(
    operation: str,
    kernel: Callable[..., Any],
    a: BaseGeometry,
    b: BaseGeometry,
    buffer_m: float,
    first: BaseGeometry | PreparedGeometry | None = None,
) -> Any:
    """Evaluate exactly, then once more with a perturbed A.

    The exact attempt runs against *first* when given (the prepared form
    of A); the retry always buffers the plain geometry *a*.

    Raises:
        TopologyOperationError: If both attempts fail.
    """
    try:
        return _evaluate(operation, kernel, a if first is None else first, b)
    except TopologyOperationError as exc:
        logger.warning(
            "Kernel operation failed, retrying perturbed | operation=%s | buffer_m=%.3f | error=%s",
            operation,
            buffer_m,
            exc,
        )
    perturbed = buffer_projected(a, buffer_m)
    return _evaluate(operation, kernel, perturbed, b)


def _predicate(
    operation: str,
    kernel: Callable[..., bool],
    a: BaseGeometry | PreparedOperand,
    b: BaseGeometry | None,
    buffer_m: float | None,
) -> bool:
    operand, other = _operands(a, b)
    try:
        return _with_retry(
            operation,
            kernel,
            operand.geometry,
            other,
            _resolve_buffer(buffer_m),
            first=operand.prepared,
        )
    except TopologyOperationError as exc:
        _log_soft_failure(operation, exc)
        return False


def _operation(
    operation: str,
    kernel: Callable[..., BaseGeometry],
    a: BaseGeometry,
    b: BaseGeometry,
    buffer_m: float | None,
) -> BaseGeometry:
    try:
        return _with_retry(operation, kernel, a, b, _resolve_buffer(buffer_m))
    except TopologyOperationError as exc:
        _log_soft_failure(operation, exc)
        return GeometryCollection()


def _log_soft_failure(operation: str, exc: TopologyOperationError) -> None:
    logger.error(
        "Kernel operation failed after perturbation, returning empty result | "
        "operation=%s | code=%s | error=%s",
        operation,
        exc.code,
        exc.message,
    )
