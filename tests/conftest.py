"""Shared pytest fixtures for the safe_geometry test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from shapely.geometry import shape

from safe_geometry.core.config import reset_config

if TYPE_CHECKING:
    from collections.abc import Iterator

    from shapely.geometry.base import BaseGeometry

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"


def load_features(path: Path) -> list[tuple[dict, BaseGeometry]]:
    """Read a GeoJSON FeatureCollection as ``(properties, geometry)`` pairs."""
    with path.open(encoding="utf-8") as fh:
        collection = json.load(fh)
    return [
        (feature.get("properties") or {}, shape(feature["geometry"]))
        for feature in collection["features"]
    ]


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


# ---------------------------------------------------------------------------
# Configuration isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_config() -> Iterator[None]:
    """Reload configuration around every test so env patches take effect."""
    reset_config()
    yield
    reset_config()


# ---------------------------------------------------------------------------
# GeoJSON fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def predicate_cases(data_dir: Path) -> dict[str, BaseGeometry]:
    """Polygons for intersects / covers / contains checks, keyed by name."""
    return {props["name"]: geom for props, geom in load_features(data_dir / "predicate_cases.geojson")}


@pytest.fixture()
def difference_features(data_dir: Path) -> dict[str, list[BaseGeometry]]:
    """Four polygons split into operands ``"a"`` and ``"b"`` (two parts each)."""
    operands: dict[str, list[BaseGeometry]] = {"a": [], "b": []}
    for props, geom in load_features(data_dir / "safe_difference.geojson"):
        operands[props["operand"]].append(geom)
    return operands
