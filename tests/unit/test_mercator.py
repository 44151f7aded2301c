"""Tests for the Web Mercator frame and projected simplification."""

from __future__ import annotations

import logging
import warnings
from unittest.mock import MagicMock, patch

import pytest
from pyproj.exceptions import ProjError
from shapely.geometry import LineString, Point, Polygon

from safe_geometry.projection.mercator import (
    from_mercator,
    mercator_bounds,
    simplify_projected,
    to_mercator,
)

# Half the Web Mercator world width in metres
HALF_WORLD_M = 20037508.342789244


class TestMercatorTransforms:
    """Forward and inverse Web Mercator transforms."""

    def test_origin(self) -> None:
        p = to_mercator(Point(0.0, 0.0))
        assert p.x == pytest.approx(0.0, abs=1e-6)
        assert p.y == pytest.approx(0.0, abs=1e-6)

    def test_antimeridian(self) -> None:
        assert to_mercator(Point(180.0, 0.0)).x == pytest.approx(HALF_WORLD_M, rel=1e-9)

    def test_round_trip(self) -> None:
        poly = Polygon([(30.50, 59.90), (30.51, 59.90), (30.51, 59.91), (30.50, 59.90)])
        restored = from_mercator(to_mercator(poly))
        assert restored.equals_exact(poly, tolerance=1e-9)

    def test_z_preserved(self) -> None:
        point = Point(30.0, 60.0, 75.0)
        projected = to_mercator(point)
        assert projected.has_z
        assert projected.z == pytest.approx(75.0)
        assert from_mercator(projected).z == pytest.approx(75.0)

    def test_no_deprecation_warnings(self) -> None:
        poly = Polygon([(30.50, 59.90), (30.51, 59.90), (30.51, 59.91)])
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            from_mercator(to_mercator(poly))

    def test_empty_and_none_pass_through(self) -> None:
        assert to_mercator(None) is None
        assert from_mercator(None) is None
        assert to_mercator(Polygon()).is_empty
        assert from_mercator(Polygon()).is_empty

    def test_bounds(self) -> None:
        min_x, min_y, max_x, max_y = mercator_bounds((-180.0, 0.0, 180.0, 0.0))
        assert min_x == pytest.approx(-HALF_WORLD_M, rel=1e-9)
        assert max_x == pytest.approx(HALF_WORLD_M, rel=1e-9)
        assert min_y == pytest.approx(0.0, abs=1e-6)
        assert max_y == pytest.approx(0.0, abs=1e-6)

    def test_failure_returns_input(self, caplog: pytest.LogCaptureFixture) -> None:
        broken = MagicMock()
        broken.transform.side_effect = ProjError("boom")
        point = Point(30.0, 60.0)
        with (
            patch("safe_geometry.projection.mercator._transformers", return_value=(broken, broken)),
            caplog.at_level(logging.ERROR, logger="safe_geometry.projection.mercator"),
        ):
            assert to_mercator(point) is point
            assert from_mercator(point) is point
        assert "Mercator transform failed" in caplog.text


class TestSimplifyProjected:
    """Topology-preserving simplification with a metre tolerance."""

    def test_small_wiggle_removed(self) -> None:
        # ~1 m sideways bump on a 1 km line at the equator
        line = LineString([(0.0, 0.0), (0.0045, 0.00001), (0.009, 0.0)])
        simplified = simplify_projected(line, 5.0)
        assert len(simplified.coords) == 2

    def test_large_feature_kept(self) -> None:
        line = LineString([(0.0, 0.0), (0.0045, 0.001), (0.009, 0.0)])
        simplified = simplify_projected(line, 5.0)
        assert len(simplified.coords) == 3

    def test_empty_passes_through(self) -> None:
        assert simplify_projected(Polygon(), 5.0).is_empty
