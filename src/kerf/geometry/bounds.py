"""Axis-aligned bounding boxes.

``BoundingBox()`` with no arguments is the empty box. It is invalid, contains
nothing, and is the identity element for ``merge``, so boxes for a collection
can be folded starting from it.

The arc factory is not simply the box of the two endpoints: an arc that
crosses one of the axis-aligned directions (0, pi/2, pi, 3*pi/2) bulges past
its endpoints, and those extreme points must be included too.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel

from kerf.geometry.angles import angle_in_sweep
from kerf.geometry.constants import HALF_PI, PI
from kerf.geometry.primitives import Point2D

if TYPE_CHECKING:
    from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D

_AXIS_ANGLES = (0.0, HALF_PI, PI, PI + HALF_PI)


class EmptyBoundingBoxError(ValueError):
    """Raised when a geometric query needs a non-empty box."""


class BoundingBox(BaseModel, frozen=True):
    """An axis-aligned rectangle (min_x, min_y) - (max_x, max_y).

    Attributes:
        min_x: Left edge.
        min_y: Bottom edge.
        max_x: Right edge.
        max_y: Top edge.
    """

    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def from_points(cls, p1: Point2D, p2: Point2D) -> Self:
        """Create the box spanned by two points."""
        return cls(
            min_x=min(p1.x, p2.x),
            min_y=min(p1.y, p2.y),
            max_x=max(p1.x, p2.x),
            max_y=max(p1.y, p2.y),
        )

    @classmethod
    def from_point_list(cls, points: Iterable[Point2D]) -> Self:
        """Create the box enclosing all points; empty input gives the empty box."""
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for point in points:
            min_x = min(min_x, point.x)
            min_y = min(min_y, point.y)
            max_x = max(max_x, point.x)
            max_y = max(max_y, point.y)
        return cls(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)

    @classmethod
    def from_line(cls, line: Line2D) -> Self:
        """Create the box of a line segment."""
        return cls.from_points(line.start, line.end)

    @classmethod
    def from_arc(cls, arc: Arc2D) -> Self:
        """Create the exact box of a circular arc.

        Starts from the endpoints, then adds center + radius * (cos, sin) for
        every axis-aligned angle the arc passes through. Containment uses the
        arc's direction-aware sweep, so clockwise arcs and arcs wrapping past
        2*pi are handled, and a full circle includes all four extremes.
        """
        points = [arc.start_point, arc.end_point]
        cx, cy, r = arc.center.x, arc.center.y, arc.radius
        for theta in _AXIS_ANGLES:
            if angle_in_sweep(
                theta, arc.start_angle, arc.sweep_angle, arc.counter_clockwise
            ):
                points.append(
                    Point2D(x=cx + r * math.cos(theta), y=cy + r * math.sin(theta))
                )
        return cls.from_point_list(points)

    @staticmethod
    def from_ellipse(ellipse: Ellipse2D) -> BoundingBox:
        """Return the rotation-aware box of an ellipse or elliptical arc."""
        return ellipse.bounding_box

    # =========================================================================
    # Queries
    # =========================================================================

    def is_valid(self) -> bool:
        """Return False for the empty box."""
        return self.min_x <= self.max_x and self.min_y <= self.max_y

    @property
    def width(self) -> float:
        """Horizontal extent (0 for the empty box)."""
        return self.max_x - self.min_x if self.is_valid() else 0.0

    @property
    def height(self) -> float:
        """Vertical extent (0 for the empty box)."""
        return self.max_y - self.min_y if self.is_valid() else 0.0

    @property
    def center(self) -> Point2D:
        """Center of the box.

        Raises:
            EmptyBoundingBoxError: If the box is empty.
        """
        if not self.is_valid():
            raise EmptyBoundingBoxError("Empty bounding box has no center")
        return Point2D(
            x=(self.min_x + self.max_x) / 2.0,
            y=(self.min_y + self.max_y) / 2.0,
        )

    def corners(self) -> tuple[Point2D, Point2D, Point2D, Point2D]:
        """Return the four corners counter-clockwise from (min_x, min_y).

        Raises:
            EmptyBoundingBoxError: If the box is empty.
        """
        if not self.is_valid():
            raise EmptyBoundingBoxError("Empty bounding box has no corners")
        return (
            Point2D(x=self.min_x, y=self.min_y),
            Point2D(x=self.max_x, y=self.min_y),
            Point2D(x=self.max_x, y=self.max_y),
            Point2D(x=self.min_x, y=self.max_y),
        )

    def contains(self, point: Point2D, tolerance: float = 0.0) -> bool:
        """Check if a point is inside the box, edges inclusive.

        Args:
            point: Point to test.
            tolerance: Margin by which the box is grown for the test.
        """
        return (
            self.min_x - tolerance <= point.x <= self.max_x + tolerance
            and self.min_y - tolerance <= point.y <= self.max_y + tolerance
        )

    def intersects(self, other: BoundingBox) -> bool:
        """Check if two boxes overlap or touch."""
        return not (
            self.max_x < other.min_x
            or self.min_x > other.max_x
            or self.max_y < other.min_y
            or self.min_y > other.max_y
        )

    def contains_box(self, other: BoundingBox) -> bool:
        """Check if other lies entirely inside this box."""
        return (
            other.min_x >= self.min_x
            and other.max_x <= self.max_x
            and other.min_y >= self.min_y
            and other.max_y <= self.max_y
        )

    # =========================================================================
    # Operations
    # =========================================================================

    def merge(self, other: BoundingBox) -> BoundingBox:
        """Return the union of two boxes; the empty box is the identity."""
        if not self.is_valid():
            return other
        if not other.is_valid():
            return self
        return BoundingBox(
            min_x=min(self.min_x, other.min_x),
            min_y=min(self.min_y, other.min_y),
            max_x=max(self.max_x, other.max_x),
            max_y=max(self.max_y, other.max_y),
        )

    def expand(self, margin: float) -> BoundingBox:
        """Grow the box by margin on every side (the empty box stays empty)."""
        if not self.is_valid():
            return self
        return BoundingBox(
            min_x=self.min_x - margin,
            min_y=self.min_y - margin,
            max_x=self.max_x + margin,
            max_y=self.max_y + margin,
        )
