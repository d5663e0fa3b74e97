"""Angle and tolerance utilities.

Pure scalar helpers used by every primitive. All angles are in radians.

Conventions:
    - Normalized angles live in [0, 2*pi).
    - Sweeps are direction-aware magnitudes in (0, 2*pi]. Equal inputs, or
      inputs a whole turn apart in the direction of travel, denote a full
      turn. Any other sweep that normalizes to nearly zero stays nearly zero.
    - Positive rotation is counter-clockwise.
"""

from __future__ import annotations

import math

from kerf.geometry.constants import GEOMETRY_EPSILON, PI, TWO_PI

__all__ = [
    "angle_difference",
    "angle_in_sweep",
    "arc_length",
    "are_equal",
    "clamp",
    "is_angle_between",
    "is_zero",
    "normalize_angle",
    "normalize_angle_signed",
    "snap_angle",
    "sweep_angle",
]


def normalize_angle(radians: float) -> float:
    """Normalize an angle to the range [0, 2*pi).

    Args:
        radians: Any finite angle.

    Returns:
        Equivalent angle in [0, 2*pi).
    """
    result = math.fmod(radians, TWO_PI)
    if result < 0.0:
        result += TWO_PI
    # -1e-20 + 2*pi rounds to exactly 2*pi
    if result >= TWO_PI:
        result = 0.0
    return result


def normalize_angle_signed(radians: float) -> float:
    """Normalize an angle to the range [-pi, pi).

    Args:
        radians: Any finite angle.

    Returns:
        Equivalent angle in [-pi, pi).
    """
    return normalize_angle(radians + PI) - PI


def angle_difference(from_angle: float, to_angle: float) -> float:
    """Return the signed smallest rotation taking from_angle to to_angle.

    Positive results are counter-clockwise, in [-pi, pi).
    """
    return normalize_angle_signed(to_angle - from_angle)


def sweep_angle(start_angle: float, end_angle: float, ccw: bool) -> float:
    """Compute the direction-aware sweep from start to end.

    Counter-clockwise arcs sweep (end - start) mod 2*pi, clockwise arcs
    sweep (start - end) mod 2*pi. When that wraps to (nearly) zero, the
    result is 2*pi only if the raw inputs are equal or more than half a turn
    apart in the direction of travel, i.e. the caller asked for a whole
    revolution. A sliver such as 0 to 1e-12 keeps its tiny sweep.

    Args:
        start_angle: Start angle (any finite value).
        end_angle: End angle (any finite value).
        ccw: True for counter-clockwise traversal.

    Returns:
        Sweep magnitude in [0, 2*pi].
    """
    start = normalize_angle(start_angle)
    end = normalize_angle(end_angle)

    sweep = end - start if ccw else start - end
    if sweep < 0.0:
        sweep += TWO_PI

    if sweep < GEOMETRY_EPSILON:
        travel = end_angle - start_angle if ccw else start_angle - end_angle
        if travel == 0.0 or travel > PI:
            sweep = TWO_PI

    return sweep


def angle_in_sweep(
    angle: float,
    start_angle: float,
    sweep: float,
    ccw: bool,
    tolerance: float = GEOMETRY_EPSILON,
) -> bool:
    """Check whether an angle lies on a swept interval.

    The interval starts at start_angle and extends by sweep radians in the
    traversal direction. Wrap-around past 2*pi is handled, and both
    boundaries are inclusive within tolerance.

    Args:
        angle: Angle to test.
        start_angle: Interval start.
        sweep: Interval extent in radians, in [0, 2*pi].
        ccw: True if the interval runs counter-clockwise from start_angle.
        tolerance: Angular slack at both ends.

    Returns:
        True if angle is inside the interval.
    """
    offset = normalize_angle(angle - start_angle if ccw else start_angle - angle)
    return offset <= sweep + tolerance or offset >= TWO_PI - tolerance


def is_angle_between(
    angle: float,
    start_angle: float,
    end_angle: float,
    ccw: bool,
    tolerance: float = GEOMETRY_EPSILON,
) -> bool:
    """Check whether an angle lies between start and end in a direction.

    Coinciding start and end angles describe a full turn, which contains
    every angle.

    Example:
        >>> is_angle_between(0.0, 3 * PI / 2, PI / 2, ccw=True)
        True
        >>> is_angle_between(0.0, 3 * PI / 2, PI / 2, ccw=False)
        False
    """
    sweep = sweep_angle(start_angle, end_angle, ccw)
    return angle_in_sweep(angle, start_angle, sweep, ccw, tolerance)


def arc_length(radius: float, sweep: float) -> float:
    """Length of a circular arc of the given radius and sweep."""
    return radius * abs(sweep)


def snap_angle(angle: float, increment: float) -> float:
    """Snap an angle to the nearest multiple of increment.

    Non-positive increments disable snapping and return the angle as is.
    """
    if increment <= 0.0:
        return angle
    return round(angle / increment) * increment


def are_equal(a: float, b: float, tolerance: float = GEOMETRY_EPSILON) -> bool:
    """Check if two values differ by less than tolerance."""
    return abs(a - b) < tolerance


def is_zero(value: float, tolerance: float = GEOMETRY_EPSILON) -> bool:
    """Check if a value is within tolerance of zero."""
    return abs(value) < tolerance


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value to the closed range [lower, upper]."""
    return max(lower, min(value, upper))
