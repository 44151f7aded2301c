"""Tests for local metric frames.

Covers:
- Forward / inverse round trip accuracy
- Z values carried through unchanged
- Frame kinds (transverse Mercator, UTM) and config default
- Empty geometry pass-through
- Anchor validation and transform failures → ProjectionError
"""

from __future__ import annotations

import math
import os
import warnings
from unittest.mock import patch

import pytest
from shapely.geometry import GeometryCollection, LineString, Point, Polygon

from safe_geometry.core.exceptions import ProjectionError
from safe_geometry.metrics.geodesic import destination_point
from safe_geometry.projection.local_frame import anchor_point, local_frame

# Field block near St Petersburg
FIELD = Polygon(
    [
        (30.529875152102818, 59.9017412528203),
        (30.529768819463612, 59.89774169966455),
        (30.537177463764948, 59.89766857856378),
        (30.537094135302652, 59.899803611085986),
        (30.533053495003486, 59.89982138683976),
        (30.533088939216583, 59.9016344637553),
    ]
)


class TestRoundTrip:
    """inverse(forward(g)) reproduces coordinates."""

    @pytest.mark.parametrize("kind", ["tmerc", "utm"])
    def test_polygon_round_trip(self, kind: str) -> None:
        frame = local_frame(FIELD, kind=kind)
        restored = frame.inverse(frame.forward(FIELD))
        for (x0, y0), (x1, y1) in zip(FIELD.exterior.coords, restored.exterior.coords, strict=True):
            assert x1 == pytest.approx(x0, abs=1e-6)
            assert y1 == pytest.approx(y0, abs=1e-6)

    def test_coord_round_trip(self) -> None:
        frame = local_frame((-120.52, 46.61))
        lon, lat = frame.inverse_coord(frame.forward_coord((-120.5, 46.6)))
        assert lon == pytest.approx(-120.5, abs=1e-6)
        assert lat == pytest.approx(46.6, abs=1e-6)

    def test_southern_hemisphere_round_trip(self) -> None:
        line = LineString([(117.85, -5.30), (117.90, -5.345)])
        frame = local_frame(line)
        restored = frame.inverse(frame.forward(line))
        assert restored.equals_exact(line, tolerance=1e-6)

    def test_z_preserved(self) -> None:
        line = LineString([(30.53, 59.90, 12.5), (30.54, 59.91, 40.0)])
        frame = local_frame(line)
        local = frame.forward(line)
        assert local.has_z
        assert [c[2] for c in local.coords] == pytest.approx([12.5, 40.0])
        restored = frame.inverse(local)
        assert [c[2] for c in restored.coords] == pytest.approx([12.5, 40.0])

    def test_no_deprecation_warnings(self) -> None:
        frame = local_frame(FIELD)
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            frame.inverse(frame.forward(FIELD))


class TestMetricFrame:
    """Local frame units are metres on the ground."""

    def test_anchor_maps_to_origin(self) -> None:
        frame = local_frame((30.5, 59.9), kind="tmerc")
        x, y = frame.forward_coord((30.5, 59.9))
        assert x == pytest.approx(0.0, abs=1e-6)
        assert y == pytest.approx(0.0, abs=1e-6)

    def test_hundred_metres_east(self) -> None:
        origin = (30.5, 59.9)
        frame = local_frame(origin)
        east = destination_point(origin, 100.0, 90.0)
        x0, y0 = frame.forward_coord(origin)
        x1, y1 = frame.forward_coord(east)
        assert math.hypot(x1 - x0, y1 - y0) == pytest.approx(100.0, abs=0.01)

    def test_utm_zone_selected(self) -> None:
        assert local_frame(FIELD, kind="utm").crs.to_epsg() == 32636

    def test_utm_southern_zone_selected(self) -> None:
        assert local_frame((-70.6, -33.4), kind="utm").crs.to_epsg() == 32719

    def test_kind_defaults_to_config(self) -> None:
        with patch.dict(os.environ, {"SAFE_GEOMETRY_LOCAL_FRAME": "utm"}):
            frame = local_frame(FIELD)
        assert frame.kind == "utm"

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ProjectionError, match="Unknown local frame kind"):
            local_frame(FIELD, kind="lambert")


class TestEmptyAndInvalid:
    """Empty geometries pass through; bad anchors raise ProjectionError."""

    def test_empty_geometry_passes_through(self) -> None:
        frame = local_frame(FIELD)
        empty = GeometryCollection()
        assert frame.forward(empty).is_empty
        assert frame.inverse(empty).is_empty

    def test_empty_anchor_rejected(self) -> None:
        with pytest.raises(ProjectionError, match="empty geometry"):
            local_frame(Polygon())

    @pytest.mark.parametrize(
        "anchor",
        [(200.0, 10.0), (10.0, -91.0), (math.nan, 0.0), (0.0, math.inf)],
    )
    def test_bad_anchor_rejected(self, anchor: tuple[float, float]) -> None:
        with pytest.raises(ProjectionError):
            local_frame(anchor)

    def test_anchor_point_uses_centroid(self) -> None:
        lon, lat = anchor_point(LineString([(10.0, 20.0), (12.0, 20.0)]))
        assert (lon, lat) == pytest.approx((11.0, 20.0))

    def test_anchor_point_accepts_point(self) -> None:
        assert anchor_point(Point(5.0, 6.0)) == (5.0, 6.0)

    def test_non_finite_transform_rejected(self) -> None:
        frame = local_frame((30.5, 59.9))
        with pytest.raises(ProjectionError):
            frame.inverse_coord((math.nan, 0.0))

    def test_projection_error_is_recoverable(self) -> None:
        with pytest.raises(ProjectionError) as exc_info:
            local_frame((200.0, 0.0))
        assert exc_info.value.recoverable is True
        assert exc_info.value.operation == "local_frame"
