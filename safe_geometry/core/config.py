"""Geometry configuration loaded from environment variables.

All configuration values have sensible defaults. Environment variables
override them, which lets a batch pipeline tune the perturbation buffer
or the Lloyd iteration cap without a code change.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range.  This catches bad configuration at startup rather
    than half-way through a batch of features.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass

from safe_geometry.core.constants import (
    DEFAULT_BUFFER_QUAD_SEGS,
    DEFAULT_LLOYD_MAX_ITERATIONS,
    DEFAULT_PERTURBATION_BUFFER_M,
    DEFAULT_SIMPLIFY_TOLERANCE_M,
    LOCAL_FRAME_KINDS,
    LOCAL_FRAME_TMERC,
)
from safe_geometry.core.exceptions import GeometryError


class ConfigValidationError(GeometryError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_operation = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class GeometryConfig:
    """Immutable geometry configuration.

    Attributes:
        perturbation_buffer_m: Buffer (metres) applied to operand A before
            the second attempt of a safe boolean operation.
        buffer_quad_segs: Segments per quarter circle for projected buffers.
        lloyd_max_iterations: Fixed iteration cap for Lloyd relaxation.
        local_frame: Local metric frame kind (``"tmerc"`` or ``"utm"``).
        simplify_tolerance_m: Web Mercator simplification tolerance used
            by spike removal.
    """

    perturbation_buffer_m: float = DEFAULT_PERTURBATION_BUFFER_M
    buffer_quad_segs: int = DEFAULT_BUFFER_QUAD_SEGS
    lloyd_max_iterations: int = DEFAULT_LLOYD_MAX_ITERATIONS
    local_frame: str = LOCAL_FRAME_TMERC
    simplify_tolerance_m: float = DEFAULT_SIMPLIFY_TOLERANCE_M

    @classmethod
    def from_env(cls) -> GeometryConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``SAFE_GEOMETRY_BUFFER_QUAD_SEGS=abc``).
        """
        config = cls(
            perturbation_buffer_m=float(
                os.getenv("SAFE_GEOMETRY_PERTURBATION_BUFFER_M", str(DEFAULT_PERTURBATION_BUFFER_M))
            ),
            buffer_quad_segs=int(
                os.getenv("SAFE_GEOMETRY_BUFFER_QUAD_SEGS", str(DEFAULT_BUFFER_QUAD_SEGS))
            ),
            lloyd_max_iterations=int(
                os.getenv("SAFE_GEOMETRY_LLOYD_MAX_ITERATIONS", str(DEFAULT_LLOYD_MAX_ITERATIONS))
            ),
            local_frame=os.getenv("SAFE_GEOMETRY_LOCAL_FRAME", LOCAL_FRAME_TMERC).strip().lower(),
            simplify_tolerance_m=float(
                os.getenv("SAFE_GEOMETRY_SIMPLIFY_TOLERANCE_M", str(DEFAULT_SIMPLIFY_TOLERANCE_M))
            ),
        )
        _validate(config)
        return config


def _validate(config: GeometryConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.perturbation_buffer_m <= 0:
        raise ConfigValidationError(
            "SAFE_GEOMETRY_PERTURBATION_BUFFER_M",
            config.perturbation_buffer_m,
            "must be > 0 (metres)",
        )

    if config.buffer_quad_segs < 1:
        raise ConfigValidationError(
            "SAFE_GEOMETRY_BUFFER_QUAD_SEGS",
            config.buffer_quad_segs,
            "must be >= 1",
        )

    if config.lloyd_max_iterations < 0:
        raise ConfigValidationError(
            "SAFE_GEOMETRY_LLOYD_MAX_ITERATIONS",
            config.lloyd_max_iterations,
            "must be >= 0",
        )

    if config.local_frame not in LOCAL_FRAME_KINDS:
        raise ConfigValidationError(
            "SAFE_GEOMETRY_LOCAL_FRAME",
            config.local_frame,
            f"must be one of {sorted(LOCAL_FRAME_KINDS)}",
        )

    if config.simplify_tolerance_m < 0:
        raise ConfigValidationError(
            "SAFE_GEOMETRY_SIMPLIFY_TOLERANCE_M",
            config.simplify_tolerance_m,
            "must be >= 0 (metres)",
        )


@functools.lru_cache(maxsize=1)
def get_config() -> GeometryConfig:
    """Return the process-wide configuration, loaded once from the environment."""
    return GeometryConfig.from_env()


def reset_config() -> None:
    """Forget the cached configuration so the next ``get_config()`` reloads it."""
    get_config.cache_clear()
