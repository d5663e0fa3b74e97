"""Point primitive for the kerf geometry kernel.

This module provides the immutable Pydantic model every other primitive is
built from. Coordinates are finite double-precision values in drawing units
(millimetres for CNC work); there is no sign or range restriction.
"""

from __future__ import annotations

import math
from typing import Self

from pydantic import BaseModel, Field, FiniteFloat

from kerf.geometry.constants import GEOMETRY_EPSILON
from kerf.utils.logging import get_logger

logger = get_logger(__name__)


class InvalidCoordinatesError(ValueError):
    """Raised when an operation would produce a NaN or infinite coordinate.

    Attributes:
        x: The offending x value.
        y: The offending y value.
    """

    def __init__(self, x: float, y: float, *, operation: str) -> None:
        self.x = x
        self.y = y
        super().__init__(f"{operation} produced non-finite coordinates ({x}, {y})")


class Point2D(BaseModel, frozen=True):
    """A 2D point with finite coordinates.

    Direct construction with NaN or infinity raises ``ValidationError``;
    use ``create`` to get ``None`` instead.

    Two notions of equality exist. ``==`` is exact, field-by-field, and is
    meant for identity cases such as set membership. Geometric comparison
    must use ``is_equal`` with a tolerance.

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.
    """

    x: FiniteFloat = Field(..., description="X coordinate")
    y: FiniteFloat = Field(..., description="Y coordinate")

    @classmethod
    def create(cls, x: float, y: float) -> Self | None:
        """Create a point, returning None for non-finite coordinates."""
        if not cls.would_be_valid(x, y):
            logger.debug("Rejected point", x=x, y=y)
            return None
        return cls(x=x, y=y)

    @staticmethod
    def would_be_valid(x: float, y: float) -> bool:
        """Check whether (x, y) would form a valid point."""
        return math.isfinite(x) and math.isfinite(y)

    def is_valid(self) -> bool:
        """Check the coordinate invariant (always true for validated points)."""
        return self.would_be_valid(self.x, self.y)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to (x, y) tuple."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, coord: tuple[float, float]) -> Self:
        """Create Point2D from (x, y) tuple."""
        return cls(x=coord[0], y=coord[1])

    def is_equal(self, other: Point2D, tolerance: float = GEOMETRY_EPSILON) -> bool:
        """Check if both coordinates differ by less than tolerance.

        Args:
            other: Point to compare against.
            tolerance: Per-axis tolerance.

        Returns:
            True if |dx| < tolerance and |dy| < tolerance.
        """
        return abs(self.x - other.x) < tolerance and abs(self.y - other.y) < tolerance

    def distance_to(self, other: Point2D) -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def distance_squared_to(self, other: Point2D) -> float:
        """Squared Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy


def checked_point(x: float, y: float, *, operation: str) -> Point2D:
    """Build a point from computed coordinates, failing loudly on overflow.

    Used by transforms and evaluators whose inputs are already finite, so a
    non-finite result signals an arithmetic overflow rather than bad input.

    Raises:
        InvalidCoordinatesError: If either coordinate is NaN or infinite.
    """
    if not Point2D.would_be_valid(x, y):
        raise InvalidCoordinatesError(x, y, operation=operation)
    return Point2D(x=x, y=y)
