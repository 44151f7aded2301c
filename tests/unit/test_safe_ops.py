"""Tests for fault-tolerant predicates and set operations.

Covers:
- Predicates on real-world WGS 84 polygons
- Empty-operand rules for intersection / union / difference
- Repair of invalid operands before evaluation
- One perturbed retry after a kernel failure
- Soft failure (False / empty collection) after two kernel failures
- Reuse of a PreparedOperand across queries
- Part-wise multi-polygon difference
- Empty-operand rules on random self-crossing polygons
- Caller geometries are never prepared in place
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import numpy as np
import pytest
import shapely
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon, box
from shapely.prepared import PreparedGeometry

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

SAFE_OPS = "safe_geometry.topology.safe_ops"

# Self-intersecting figure-eight around (30.5, 59.9)
BOWTIE = Polygon([(30.50, 59.90), (30.51, 59.91), (30.51, 59.90), (30.50, 59.91)])
NEAR_BOWTIE = box(30.502, 59.90, 30.515, 59.91)


class TestPredicates:
    """intersects / covers / contains on well-formed polygons."""

    def test_intersects(self, predicate_cases: dict) -> None:
        assert safe_intersects(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert not safe_intersects(predicate_cases["intersects_1"], predicate_cases["intersects_3"])

    def test_covers(self, predicate_cases: dict) -> None:
        assert safe_covers(predicate_cases["covers_1"], predicate_cases["covers_2"])
        assert not safe_covers(predicate_cases["covers_1"], predicate_cases["covers_3"])

    def test_contains(self, predicate_cases: dict) -> None:
        assert safe_contains(predicate_cases["covers_1"], predicate_cases["covers_2"])
        assert not safe_contains(predicate_cases["covers_1"], predicate_cases["covers_3"])

    def test_empty_operand_intersects_nothing(self, predicate_cases: dict) -> None:
        assert not safe_intersects(predicate_cases["intersects_1"], Polygon())
        assert not safe_intersects(None, predicate_cases["intersects_1"])

    def test_invalid_operand_repaired(self) -> None:
        assert safe_intersects(BOWTIE, NEAR_BOWTIE)


class TestSetOperations:
    """Empty-operand rules and ordinary results."""

    def test_intersection_of_empties(self) -> None:
        assert safe_intersection(Polygon(), Polygon()).is_empty

    def test_intersection_with_empty(self, predicate_cases: dict) -> None:
        result = safe_intersection(predicate_cases["intersects_1"], GeometryCollection())
        assert result.is_empty
        assert result.geom_type == "GeometryCollection"

    def test_intersection(self, predicate_cases: dict) -> None:
        result = safe_intersection(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert not result.is_empty
        assert result.area == pytest.approx(0.0001)

    def test_union_of_empties(self) -> None:
        assert safe_union(Polygon(), Polygon()).is_empty

    def test_union_with_empty_returns_other(self, predicate_cases: dict) -> None:
        poly = predicate_cases["intersects_1"]
        assert safe_union(poly, Polygon()).equals(poly)
        assert safe_union(Polygon(), poly).equals(poly)

    def test_union(self, predicate_cases: dict) -> None:
        result = safe_union(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert result.area == pytest.approx(0.0007)

    def test_difference(self, predicate_cases: dict) -> None:
        result = safe_difference(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert not result.is_empty
        assert result.area == pytest.approx(0.0003)

    def test_difference_of_empty(self, predicate_cases: dict) -> None:
        assert safe_difference(Polygon(), predicate_cases["intersects_1"]).is_empty

    def test_difference_minus_empty(self, predicate_cases: dict) -> None:
        poly = predicate_cases["intersects_1"]
        assert safe_difference(poly, Polygon()).equals(poly)

    def test_invalid_operands_repaired(self) -> None:
        result = safe_intersection(BOWTIE, NEAR_BOWTIE)
        assert result.is_valid
        assert result.area > 0

    def test_invalid_operand_with_empty(self) -> None:
        assert safe_intersection(BOWTIE, Polygon()).is_empty
        union = safe_union(BOWTIE, Polygon())
        difference = safe_difference(BOWTIE, Polygon())
        assert union.is_valid
        assert difference.is_valid
        assert union.equals(difference)
        assert safe_difference(Polygon(), BOWTIE).is_empty


class TestMultiPartDifference:
    """Every part of B is subtracted from every part of A."""

    def test_covered_part_dropped(self, difference_features: dict) -> None:
        a = GeometryCollection(difference_features["a"])
        b = GeometryCollection(difference_features["b"])
        result = safe_difference(a, b)
        assert result.equals(difference_features["a"][0])

    def test_multipolygon_operands(self, difference_features: dict) -> None:
        a = MultiPolygon(difference_features["a"])
        b = MultiPolygon(difference_features["b"])
        result = safe_difference(a, b)
        assert result.area == pytest.approx(difference_features["a"][0].area)

    def test_part_failure_empties_result(self, difference_features: dict) -> None:
        a = MultiPolygon(difference_features["a"])
        b = MultiPolygon(difference_features["b"])
        with patch("shapely.difference", side_effect=GEOSException("TopologyException")):
            result = safe_difference(a, b)
        assert result.is_empty
        assert result.geom_type == "GeometryCollection"


class TestRetryPolicy:
    """Exact attempt, one perturbed retry, then a soft failure."""

    def test_predicate_retried_once(self, predicate_cases: dict, caplog: pytest.LogCaptureFixture) -> None:
        with (
            patch(f"{SAFE_OPS}._intersects", side_effect=[GEOSException("side location conflict"), True]) as kernel,
            caplog.at_level(logging.WARNING, logger="safe_geometry.topology.safe_ops"),
        ):
            result = safe_intersects(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert result is True
        assert kernel.call_count == 2
        assert "retrying perturbed" in caplog.text

    def test_retry_uses_buffered_operand(self, predicate_cases: dict) -> None:
        a = predicate_cases["intersects_1"]
        with patch(f"{SAFE_OPS}._intersects", side_effect=[GEOSException("x"), True]) as kernel:
            safe_intersects(a, predicate_cases["intersects_2"], buffer_m=10.0)
        retried_a = kernel.call_args_list[1].args[0]
        assert retried_a.area > a.area

    def test_predicate_soft_failure(self, predicate_cases: dict, caplog: pytest.LogCaptureFixture) -> None:
        with (
            patch(f"{SAFE_OPS}._covers", side_effect=GEOSException("x")) as kernel,
            caplog.at_level(logging.ERROR, logger="safe_geometry.topology.safe_ops"),
        ):
            result = safe_covers(predicate_cases["covers_1"], predicate_cases["covers_2"])
        assert result is False
        assert kernel.call_count == 2
        assert "returning empty result" in caplog.text

    def test_operation_retried_once(self, predicate_cases: dict) -> None:
        expected = box(0, 0, 1, 1)
        with patch("shapely.intersection", side_effect=[GEOSException("x"), expected]):
            result = safe_intersection(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert result is expected

    def test_operation_soft_failure(self, predicate_cases: dict) -> None:
        with patch("shapely.union", side_effect=GEOSException("x")):
            result = safe_union(predicate_cases["intersects_1"], predicate_cases["intersects_2"])
        assert result.is_empty
        assert result.geom_type == "GeometryCollection"


class TestPreparedOperand:
    """One repaired, prepared operand against many geometries."""

    def test_prepare_repairs(self) -> None:
        operand = prepare_operand(BOWTIE)
        assert isinstance(operand, PreparedOperand)
        assert operand.geometry.is_valid

    def test_reuse_across_queries(self, predicate_cases: dict) -> None:
        operand = prepare_operand(predicate_cases["covers_1"])
        assert safe_covers(operand, predicate_cases["covers_2"])
        assert not safe_covers(operand, predicate_cases["covers_3"])
        assert safe_intersects(operand, predicate_cases["covers_3"])

    def test_retry_leaves_operand_untouched(self, predicate_cases: dict) -> None:
        operand = prepare_operand(predicate_cases["intersects_1"])
        original = operand.geometry
        with patch(f"{SAFE_OPS}._intersects", side_effect=[GEOSException("x"), True]):
            safe_intersects(operand, predicate_cases["intersects_2"])
        assert operand.geometry is original

    def test_operand_frozen(self, predicate_cases: dict) -> None:
        operand = prepare_operand(predicate_cases["intersects_1"])
        with pytest.raises(AttributeError):
            operand.geometry = Polygon()  # type: ignore[misc]

    def test_exact_attempt_uses_prepared_operand(self, predicate_cases: dict) -> None:
        operand = prepare_operand(predicate_cases["covers_1"])
        with patch(f"{SAFE_OPS}._covers", return_value=True) as kernel:
            assert safe_covers(operand, predicate_cases["covers_2"])
        assert kernel.call_count == 1
        assert kernel.call_args.args[0] is operand.prepared

    def test_plain_operand_queried_prepared(self, predicate_cases: dict) -> None:
        with patch(f"{SAFE_OPS}._contains", return_value=False) as kernel:
            safe_contains(predicate_cases["covers_1"], predicate_cases["covers_2"])
        assert isinstance(kernel.call_args.args[0], PreparedGeometry)

    def test_retry_buffers_plain_geometry(self, predicate_cases: dict) -> None:
        operand = prepare_operand(predicate_cases["intersects_1"])
        with patch(f"{SAFE_OPS}._intersects", side_effect=[GEOSException("x"), True]) as kernel:
            safe_intersects(operand, predicate_cases["intersects_2"])
        retried_a = kernel.call_args_list[1].args[0]
        assert not isinstance(retried_a, PreparedGeometry)
        assert retried_a.area > operand.geometry.area


class TestInputsNotPrepared:
    """The caller's geometry comes back exactly as it went in."""

    def test_prepare_operand_copies(self) -> None:
        area = box(30.0, 59.0, 30.1, 59.1)
        operand = prepare_operand(area)
        assert not shapely.is_prepared(area)
        assert shapely.is_prepared(operand.geometry)
        assert operand.geometry.equals(area)

    @pytest.mark.parametrize("predicate", [safe_intersects, safe_covers, safe_contains])
    def test_predicates_leave_input_unprepared(self, predicate, predicate_cases: dict) -> None:
        a = predicate_cases["covers_1"]
        b = predicate_cases["covers_2"]
        predicate(a, b)
        assert not shapely.is_prepared(a)
        assert not shapely.is_prepared(b)


class TestRandomSelfCrossingPolygons:
    """Empty-operand rules hold for arbitrary, mostly invalid, polygons."""

    @pytest.fixture()
    def polygons(self) -> list[Polygon]:
        rng = np.random.default_rng(20240611)
        return [Polygon(30.0 + rng.uniform(size=(6, 2))) for _ in range(200)]

    def test_sample_mostly_invalid(self, polygons: list[Polygon]) -> None:
        invalid = sum(not polygon.is_valid for polygon in polygons)
        assert invalid > len(polygons) // 2

    def test_empty_second_operand(self, polygons: list[Polygon]) -> None:
        for polygon in polygons:
            assert safe_intersection(polygon, Polygon()).is_empty
            union = safe_union(polygon, Polygon())
            difference = safe_difference(polygon, Polygon())
            assert union.is_valid
            assert union.equals(difference)

    def test_empty_first_operand(self, polygons: list[Polygon]) -> None:
        for polygon in polygons:
            assert safe_intersection(Polygon(), polygon).is_empty
            union = safe_union(Polygon(), polygon)
            assert union.is_valid
            assert union.equals(safe_union(polygon, Polygon()))
            assert safe_difference(Polygon(), polygon).is_empty
