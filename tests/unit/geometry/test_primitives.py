"""Unit tests for the Point2D primitive.

Tests construction and validation, the total ``create`` factory, tuple
conversion, exact versus tolerance-based equality, and distances.
"""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from kerf.geometry import GEOMETRY_EPSILON, InvalidCoordinatesError, Point2D
from kerf.geometry.primitives import checked_point


class TestPointConstruction:
    """Tests for constructing points."""

    def test_point_creation_valid(self) -> None:
        """Test creating a valid point, including negative coordinates."""
        point = Point2D(x=-100.5, y=200.25)
        assert point.x == -100.5
        assert point.y == 200.25

    @pytest.mark.parametrize(
        ("x", "y"),
        [(math.nan, 0.0), (0.0, math.inf), (-math.inf, 1.0)],
    )
    def test_direct_construction_rejects_non_finite(self, x: float, y: float) -> None:
        """Test NaN and infinity fail fast on direct construction."""
        with pytest.raises(ValidationError):
            Point2D(x=x, y=y)

    @pytest.mark.parametrize(
        ("x", "y"),
        [(math.nan, 0.0), (0.0, math.inf), (-math.inf, 1.0)],
    )
    def test_create_returns_none_for_non_finite(self, x: float, y: float) -> None:
        """Test the factory signals absence instead of raising."""
        assert Point2D.create(x, y) is None

    def test_create_valid(self) -> None:
        point = Point2D.create(3.0, 4.0)
        assert point is not None
        assert point.to_tuple() == (3.0, 4.0)
        assert point.is_valid()

    def test_point_is_frozen(self) -> None:
        """Test Point2D is immutable."""
        point = Point2D(x=1.0, y=2.0)
        with pytest.raises(ValidationError):
            point.x = 3.0  # type: ignore[misc]

    def test_tuple_round_trip(self) -> None:
        point = Point2D.from_tuple((1.5, -2.5))
        assert point.to_tuple() == (1.5, -2.5)


class TestPointEquality:
    """Tests for exact and tolerance-based equality."""

    def test_exact_equality(self) -> None:
        assert Point2D(x=1.0, y=2.0) == Point2D(x=1.0, y=2.0)
        assert Point2D(x=1.0, y=2.0) != Point2D(x=1.0, y=2.0 + 1e-12)

    def test_point_hashable(self) -> None:
        """Test points can be used as deduplication keys."""
        points = {Point2D(x=1.0, y=2.0), Point2D(x=1.0, y=2.0)}
        assert len(points) == 1

    def test_is_equal_within_tolerance(self) -> None:
        p1 = Point2D(x=1.0, y=2.0)
        p2 = Point2D(x=1.0 + GEOMETRY_EPSILON / 2, y=2.0 - GEOMETRY_EPSILON / 2)
        assert p1.is_equal(p2)
        assert p1 != p2

    def test_is_equal_is_per_axis(self) -> None:
        """Test that each axis difference must be below tolerance."""
        p1 = Point2D(x=0.0, y=0.0)
        assert not p1.is_equal(Point2D(x=0.1, y=0.0), tolerance=0.1)
        assert p1.is_equal(Point2D(x=0.09, y=0.09), tolerance=0.1)


class TestPointDistance:
    """Tests for distance helpers."""

    def test_distance_to(self) -> None:
        assert Point2D(x=0, y=0).distance_to(Point2D(x=3, y=4)) == pytest.approx(5.0)

    def test_distance_squared_to(self) -> None:
        assert Point2D(x=1, y=1).distance_squared_to(Point2D(x=4, y=5)) == 25.0

    def test_distance_is_symmetric(self) -> None:
        a = Point2D(x=-3.0, y=7.0)
        b = Point2D(x=11.0, y=-2.0)
        assert a.distance_to(b) == b.distance_to(a)


class TestCheckedPoint:
    """Tests for the overflow-checked point builder."""

    def test_returns_point_for_finite_values(self) -> None:
        assert checked_point(1.0, 2.0, operation="test") == Point2D(x=1.0, y=2.0)

    def test_raises_on_overflow(self) -> None:
        with pytest.raises(InvalidCoordinatesError, match="translate") as exc_info:
            checked_point(1e308 * 10, 0.0, operation="translate")
        assert math.isinf(exc_info.value.x)

    def test_error_is_value_error(self) -> None:
        assert issubclass(InvalidCoordinatesError, ValueError)
