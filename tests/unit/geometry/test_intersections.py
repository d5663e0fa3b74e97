"""Unit tests for line and arc intersection."""

from __future__ import annotations

import math

import pytest

from kerf.geometry import (
    PI,
    Arc2D,
    Line2D,
    Point2D,
    intersect_arc_arc,
    intersect_line_arc,
    line_line_intersection,
    segment_segment_intersection,
    segments_intersect,
)


def _circle(cx: float, cy: float, radius: float) -> Arc2D:
    return Arc2D(
        center=Point2D(x=cx, y=cy), radius=radius, start_angle=0.0, end_angle=0.0
    )


def _line(x1: float, y1: float, x2: float, y2: float) -> Line2D:
    return Line2D(start=Point2D(x=x1, y=y1), end=Point2D(x=x2, y=y2))


def _sorted(points: list[Point2D]) -> list[tuple[float, float]]:
    return sorted(p.to_tuple() for p in points)


class TestLineLine:
    """Tests for carrier and segment intersection."""

    def test_crossing_segments(self) -> None:
        hit = segment_segment_intersection(_line(0, 0, 10, 10), _line(0, 10, 10, 0))
        assert hit is not None
        assert hit.to_tuple() == pytest.approx((5.0, 5.0))
        assert segments_intersect(_line(0, 0, 10, 10), _line(0, 10, 10, 0))

    def test_carriers_cross_outside_segments(self) -> None:
        first = _line(0, 0, 1, 0)
        second = _line(5, -1, 5, 1)
        assert segment_segment_intersection(first, second) is None
        hit = line_line_intersection(first, second)
        assert hit is not None
        assert hit.to_tuple() == pytest.approx((5.0, 0.0))

    def test_parallel_lines_do_not_intersect(self) -> None:
        assert line_line_intersection(_line(0, 0, 10, 0), _line(0, 1, 10, 1)) is None
        assert not segments_intersect(_line(0, 0, 10, 0), _line(0, 1, 10, 1))

    def test_touching_endpoints_count(self) -> None:
        hit = segment_segment_intersection(_line(0, 0, 5, 0), _line(5, 0, 5, 5))
        assert hit is not None
        assert hit.to_tuple() == pytest.approx((5.0, 0.0))


class TestLineArc:
    """Tests for intersect_line_arc."""

    circle = _circle(0.0, 0.0, 10.0)

    def test_secant_gives_two_points(self) -> None:
        points = intersect_line_arc(_line(-20, 0, 20, 0), self.circle)
        assert len(points) == 2
        assert _sorted(points) == [
            pytest.approx((-10.0, 0.0)),
            pytest.approx((10.0, 0.0)),
        ]

    def test_tangent_gives_one_point(self) -> None:
        points = intersect_line_arc(_line(-20, 10, 20, 10), self.circle)
        assert len(points) == 1
        assert points[0].to_tuple() == pytest.approx((0.0, 10.0))

    def test_line_outside_circle_gives_nothing(self) -> None:
        assert intersect_line_arc(_line(-20, 20, 20, 20), self.circle) == []

    def test_sweep_filters_circle_hits(self) -> None:
        """Test a point below a CCW upper semicircle hits the circle only."""
        semicircle = Arc2D(
            center=Point2D(x=0.0, y=0.0), radius=10.0, start_angle=0.0, end_angle=PI
        )
        assert intersect_line_arc(_line(-20, -5, 20, -5), semicircle) == []
        assert len(intersect_line_arc(_line(-20, -5, 20, -5), self.circle)) == 2

    def test_segment_range_filters_hits(self) -> None:
        """Test a segment ending inside the circle reaches only one side."""
        points = intersect_line_arc(_line(0, 0, 20, 0), self.circle)
        assert _sorted(points) == [pytest.approx((10.0, 0.0))]

    def test_clockwise_arc(self) -> None:
        lower = Arc2D(
            center=Point2D(x=0.0, y=0.0),
            radius=10.0,
            start_angle=0.0,
            end_angle=PI,
            counter_clockwise=False,
        )
        points = intersect_line_arc(_line(0, -20, 0, 20), lower)
        assert _sorted(points) == [pytest.approx((0.0, -10.0), abs=1e-12)]


class TestArcArc:
    """Tests for intersect_arc_arc."""

    def test_external_tangency(self) -> None:
        points = intersect_arc_arc(_circle(0, 0, 10), _circle(20, 0, 10))
        assert len(points) == 1
        assert points[0].to_tuple() == pytest.approx((10.0, 0.0))

    def test_two_points(self) -> None:
        points = intersect_arc_arc(_circle(0, 0, 10), _circle(10, 0, 10))
        root = math.sqrt(75.0)
        assert _sorted(points) == [
            pytest.approx((5.0, -root)),
            pytest.approx((5.0, root)),
        ]

    def test_disjoint_circles(self) -> None:
        assert intersect_arc_arc(_circle(0, 0, 10), _circle(30, 0, 10)) == []

    def test_nested_circles(self) -> None:
        assert intersect_arc_arc(_circle(0, 0, 10), _circle(1, 0, 2)) == []

    def test_internal_tangency(self) -> None:
        points = intersect_arc_arc(_circle(0, 0, 10), _circle(5, 0, 5))
        assert len(points) == 1
        assert points[0].to_tuple() == pytest.approx((10.0, 0.0))

    def test_concentric_arcs_give_nothing(self) -> None:
        assert intersect_arc_arc(_circle(0, 0, 10), _circle(0, 0, 10)) == []

    def test_sweep_filters_one_point(self) -> None:
        upper = Arc2D(
            center=Point2D(x=0.0, y=0.0), radius=10.0, start_angle=0.0, end_angle=PI
        )
        points = intersect_arc_arc(upper, _circle(10, 0, 10))
        assert _sorted(points) == [pytest.approx((5.0, math.sqrt(75.0)))]
