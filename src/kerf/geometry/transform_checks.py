"""Transform precision checks.

Compares expected and actual geometry after a transform, so callers can
certify that moving, rotating or mirroring a drawing kept it within
tolerance and, for arcs, kept the tool-path direction.

Comparisons return a ``ComparisonResult`` instead of raising. Checks run in
a fixed order and stop at the first failure, so ``failure_reason``
describes the most basic mismatch (center before radius, radius before
direction, and so on).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Self, TypeVar, assert_never

from pydantic import BaseModel

from kerf.config import settings
from kerf.geometry.constants import GEOMETRY_EPSILON, TWO_PI
from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D
from kerf.geometry.entities import Entity, entity_kind
from kerf.geometry.primitives import Point2D
from kerf.geometry.transforms import rotate
from kerf.geometry.validators import IssueKind
from kerf.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["ComparisonResult", "TransformValidator"]

_E = TypeVar("_E", Point2D, Line2D, Arc2D, Ellipse2D)


def _direction(ccw: bool) -> str:
    return "CCW" if ccw else "CW"


class ComparisonResult(BaseModel, frozen=True):
    """Outcome of comparing expected and actual geometry.

    Attributes:
        passed: True if every checked quantity is within tolerance.
        max_deviation: Largest difference found (0.0 for orientation checks).
        failure_reason: Human-readable explanation, empty when passed.
        issue: Issue kind for categorical failures (ORIENTATION_MISMATCH,
            DEGENERATE_GEOMETRY); None for plain deviations and passes.
    """

    passed: bool
    max_deviation: float = 0.0
    failure_reason: str = ""
    issue: IssueKind | None = None

    @classmethod
    def ok(cls, deviation: float = 0.0) -> Self:
        """Build a passing result."""
        return cls(passed=True, max_deviation=deviation)

    @classmethod
    def fail(
        cls, deviation: float, reason: str, issue: IssueKind | None = None
    ) -> Self:
        """Build a failing result."""
        return cls(
            passed=False, max_deviation=deviation, failure_reason=reason, issue=issue
        )


class TransformValidator:
    """Checks that transforms preserve geometry within tolerance.

    Comparison tolerances default to GEOMETRY_EPSILON. Cumulative drift uses
    the coarser ``settings.DRIFT_TOLERANCE`` since round-off grows with
    every repeated application.
    """

    # =========================================================================
    # Comparisons
    # =========================================================================

    def compare_points(
        self,
        expected: Point2D,
        actual: Point2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Compare two points by their largest per-axis difference."""
        deviation = max(abs(expected.x - actual.x), abs(expected.y - actual.y))
        if deviation < tolerance:
            return ComparisonResult.ok(deviation)
        return ComparisonResult.fail(
            deviation,
            f"Point deviation exceeds tolerance: expected {expected.to_tuple()}, "
            f"actual {actual.to_tuple()}, deviation {deviation:.3g} > {tolerance:.3g}",
        )

    def compare_lines(
        self,
        expected: Line2D,
        actual: Line2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Compare two segments endpoint by endpoint, in order."""
        start = self.compare_points(expected.start, actual.start, tolerance)
        end = self.compare_points(expected.end, actual.end, tolerance)
        deviation = max(start.max_deviation, end.max_deviation)
        if start.passed and end.passed:
            return ComparisonResult.ok(deviation)

        reasons = []
        if not start.passed:
            reasons.append(f"start point failed ({start.failure_reason})")
        if not end.passed:
            reasons.append(f"end point failed ({end.failure_reason})")
        return ComparisonResult.fail(
            deviation, "Line deviation exceeds tolerance: " + "; ".join(reasons)
        )

    def compare_arcs(
        self,
        expected: Arc2D,
        actual: Arc2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Compare two arcs: center, radius, direction, sweep, then start point.

        A direction flip always fails with ORIENTATION_MISMATCH, even when
        every numeric parameter matches. Sweeps and start points are
        compared rather than raw angles, which wrap at 2*pi.
        """
        center = self.compare_points(expected.center, actual.center, tolerance)
        if not center.passed:
            return ComparisonResult.fail(
                center.max_deviation, f"Arc center mismatch: {center.failure_reason}"
            )

        radius_diff = abs(expected.radius - actual.radius)
        if radius_diff >= tolerance:
            return ComparisonResult.fail(
                radius_diff,
                f"Arc radius mismatch: expected {expected.radius}, "
                f"actual {actual.radius}, difference {radius_diff:.3g}",
            )

        direction = self.validate_arc_direction(expected, actual)
        if not direction.passed:
            return direction

        sweep_diff = abs(expected.sweep_angle - actual.sweep_angle)
        if sweep_diff >= tolerance:
            return ComparisonResult.fail(
                sweep_diff,
                f"Arc sweep mismatch: expected {expected.sweep_angle} rad, "
                f"actual {actual.sweep_angle} rad, difference {sweep_diff:.3g}",
            )

        start = self.compare_points(expected.start_point, actual.start_point, tolerance)
        deviation = max(
            center.max_deviation, radius_diff, sweep_diff, start.max_deviation
        )
        if not start.passed:
            return ComparisonResult.fail(
                deviation, f"Arc start point mismatch: {start.failure_reason}"
            )

        return ComparisonResult.ok(deviation)

    def compare_ellipses(
        self,
        expected: Ellipse2D,
        actual: Ellipse2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Compare two ellipses: center, axis lengths, major-axis end, sweep."""
        center = self.compare_points(expected.center, actual.center, tolerance)
        if not center.passed:
            return ComparisonResult.fail(
                center.max_deviation,
                f"Ellipse center mismatch: {center.failure_reason}",
            )

        axes = self.validate_ellipse_axes(expected, actual, tolerance)
        if not axes.passed:
            return axes

        major_end = self.compare_points(
            expected.major_axis_end, actual.major_axis_end, tolerance
        )
        if not major_end.passed:
            return ComparisonResult.fail(
                major_end.max_deviation,
                f"Ellipse rotation mismatch: {major_end.failure_reason}",
            )

        sweep_diff = abs(expected.sweep_angle - actual.sweep_angle)
        if sweep_diff >= tolerance:
            return ComparisonResult.fail(
                sweep_diff,
                f"Ellipse sweep mismatch: expected {expected.sweep_angle} rad, "
                f"actual {actual.sweep_angle} rad",
            )

        return ComparisonResult.ok(
            max(
                center.max_deviation,
                axes.max_deviation,
                major_end.max_deviation,
                sweep_diff,
            )
        )

    def compare(
        self,
        expected: Entity,
        actual: Entity,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Compare two entities of any kind.

        Entities of different kinds never match.
        """
        if type(expected) is not type(actual):
            return ComparisonResult.fail(
                0.0,
                f"Entity kind changed: expected {entity_kind(expected)}, "
                f"actual {entity_kind(actual)}",
                IssueKind.DEGENERATE_GEOMETRY,
            )
        match expected:
            case Point2D():
                assert isinstance(actual, Point2D)
                return self.compare_points(expected, actual, tolerance)
            case Line2D():
                assert isinstance(actual, Line2D)
                return self.compare_lines(expected, actual, tolerance)
            case Arc2D():
                assert isinstance(actual, Arc2D)
                return self.compare_arcs(expected, actual, tolerance)
            case Ellipse2D():
                assert isinstance(actual, Ellipse2D)
                return self.compare_ellipses(expected, actual, tolerance)
            case _:
                assert_never(expected)

    # =========================================================================
    # Invariant checks (original vs transformed)
    # =========================================================================

    def validate_line_length(
        self,
        original: Line2D,
        transformed: Line2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Check that a rigid transform kept the segment length."""
        diff = abs(original.length - transformed.length)
        if diff < tolerance:
            return ComparisonResult.ok(diff)
        return ComparisonResult.fail(
            diff,
            f"Line length changed: original {original.length}, "
            f"transformed {transformed.length}, difference {diff:.3g}",
        )

    def validate_arc_direction(
        self, original: Arc2D, transformed: Arc2D
    ) -> ComparisonResult:
        """Check that the arc direction is unchanged."""
        if original.counter_clockwise == transformed.counter_clockwise:
            return ComparisonResult.ok()
        return ComparisonResult.fail(
            0.0,
            f"Arc direction changed from {_direction(original.counter_clockwise)} "
            f"to {_direction(transformed.counter_clockwise)}",
            IssueKind.ORIENTATION_MISMATCH,
        )

    def validate_arc_radius(
        self,
        original: Arc2D,
        transformed: Arc2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Check that the arc radius is unchanged."""
        diff = abs(original.radius - transformed.radius)
        if diff < tolerance:
            return ComparisonResult.ok(diff)
        return ComparisonResult.fail(
            diff,
            f"Arc radius changed: original {original.radius}, "
            f"transformed {transformed.radius}, difference {diff:.3g}",
        )

    def validate_arc_sweep(
        self,
        original: Arc2D,
        transformed: Arc2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Check that the sweep magnitude is unchanged (mirror included)."""
        diff = abs(original.sweep_angle - transformed.sweep_angle)
        if diff < tolerance:
            return ComparisonResult.ok(diff)
        return ComparisonResult.fail(
            diff,
            f"Arc sweep changed: original {original.sweep_angle} rad, "
            f"transformed {transformed.sweep_angle} rad, difference {diff:.3g}",
        )

    def validate_ellipse_axes(
        self,
        original: Ellipse2D,
        transformed: Ellipse2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Check that major axis, minor axis and ratio are unchanged."""
        major_diff = abs(original.major_axis_length - transformed.major_axis_length)
        minor_diff = abs(original.minor_axis_length - transformed.minor_axis_length)
        ratio_diff = abs(original.minor_axis_ratio - transformed.minor_axis_ratio)
        deviation = max(major_diff, minor_diff, ratio_diff)
        if deviation < tolerance:
            return ComparisonResult.ok(deviation)
        return ComparisonResult.fail(
            deviation,
            f"Ellipse axes changed: major diff={major_diff:.3g}, "
            f"minor diff={minor_diff:.3g}, ratio diff={ratio_diff:.3g}",
        )

    # =========================================================================
    # Round trips and drift
    # =========================================================================

    def validate_point_round_trip(
        self,
        original: Point2D,
        transform: Callable[[Point2D], Point2D],
        inverse: Callable[[Point2D], Point2D],
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Apply transform then inverse and compare with the original point."""
        return self.compare_points(original, inverse(transform(original)), tolerance)

    def validate_round_trip(
        self,
        original: _E,
        transform: Callable[[_E], _E | None],
        inverse: Callable[[_E], _E | None],
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Apply transform then inverse to any entity and compare.

        A transform returning None (the result would be degenerate) is a
        failure with DEGENERATE_GEOMETRY.
        """
        transformed = transform(original)
        if transformed is None:
            return _degenerate("forward transform", original)
        restored = inverse(transformed)
        if restored is None:
            return _degenerate("inverse transform", original)

        result = self.compare(original, restored, tolerance)
        if not result.passed:
            logger.debug(
                "Round trip failed",
                kind=entity_kind(original),
                deviation=result.max_deviation,
                reason=result.failure_reason,
            )
        return result

    def validate_cumulative_drift(
        self,
        original: _E,
        transform: Callable[[_E], _E | None],
        iterations: int,
        expected_final: _E,
        tolerance: float | None = None,
    ) -> ComparisonResult:
        """Apply transform repeatedly and compare with the expected end state.

        For example, 1000 rotations by 2*pi/1000 should bring a point back
        to where it started, within manufacturing tolerance.

        Args:
            original: Starting entity.
            transform: Step applied ``iterations`` times.
            iterations: Number of applications.
            expected_final: Entity the sequence should end at.
            tolerance: Allowed drift, defaulting to settings.DRIFT_TOLERANCE.

        Returns:
            The comparison of the final state with ``expected_final``.
        """
        tol = settings.DRIFT_TOLERANCE if tolerance is None else tolerance
        current = original
        for step in range(iterations):
            stepped = transform(current)
            if stepped is None:
                return _degenerate(f"transform at iteration {step + 1}", original)
            current = stepped

        result = self.compare(expected_final, current, tol)
        if result.passed:
            return result

        logger.debug(
            "Cumulative drift exceeded tolerance",
            kind=entity_kind(original),
            iterations=iterations,
            drift=result.max_deviation,
            tolerance=tol,
        )
        return ComparisonResult.fail(
            result.max_deviation,
            f"Cumulative drift after {iterations} iterations: {result.failure_reason}",
            result.issue,
        )

    def validate_full_rotation(
        self,
        entity: Entity,
        center: Point2D,
        tolerance: float = GEOMETRY_EPSILON,
    ) -> ComparisonResult:
        """Check that rotating by 2*pi about center is the identity."""
        rotated = rotate(entity, center, TWO_PI)
        if rotated is None:
            return _degenerate("full rotation", entity)
        return self.compare(entity, rotated, tolerance)


def _degenerate(step: str, entity: Entity) -> ComparisonResult:
    return ComparisonResult.fail(
        0.0,
        f"{step} produced invalid {entity_kind(entity)} geometry",
        IssueKind.DEGENERATE_GEOMETRY,
    )
