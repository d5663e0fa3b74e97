"""Rigid transforms for the geometry primitives.

Each transform takes a primitive and returns a new primitive of the same
kind; inputs are never modified. Curve results are optional: ``None`` means
the transformed parameters would not form a valid curve (for instance a
degenerate mirror axis collapsing the input). Points always transform to a
point.

Orientation rules, which downstream tool-path generation relies on:
    - translate and rotate keep ``Arc2D.counter_clockwise`` unchanged.
    - mirror inverts it; radius, length and sweep magnitude are kept.
"""

from __future__ import annotations

import math
from typing import assert_never, overload

from kerf.geometry.constants import GEOMETRY_EPSILON
from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D
from kerf.geometry.primitives import Point2D, checked_point

__all__ = ["mirror", "rotate", "translate"]


# =============================================================================
# Translation
# =============================================================================


@overload
def translate(entity: Point2D, dx: float, dy: float) -> Point2D: ...
@overload
def translate(entity: Line2D, dx: float, dy: float) -> Line2D | None: ...
@overload
def translate(entity: Arc2D, dx: float, dy: float) -> Arc2D | None: ...
@overload
def translate(entity: Ellipse2D, dx: float, dy: float) -> Ellipse2D | None: ...


def translate(
    entity: Point2D | Line2D | Arc2D | Ellipse2D, dx: float, dy: float
) -> Point2D | Line2D | Arc2D | Ellipse2D | None:
    """Move an entity by (dx, dy).

    Args:
        entity: Point, line, arc or ellipse.
        dx: Horizontal displacement.
        dy: Vertical displacement.

    Returns:
        The moved entity, or None if the result is not a valid curve.

    Raises:
        InvalidCoordinatesError: If a coordinate overflows.
    """
    match entity:
        case Point2D():
            return _translate_point(entity, dx, dy)
        case Line2D():
            return Line2D.create(
                _translate_point(entity.start, dx, dy),
                _translate_point(entity.end, dx, dy),
            )
        case Arc2D():
            return Arc2D.create(
                _translate_point(entity.center, dx, dy),
                entity.radius,
                entity.start_angle,
                entity.end_angle,
                entity.counter_clockwise,
            )
        case Ellipse2D():
            return Ellipse2D.create(
                _translate_point(entity.center, dx, dy),
                _translate_point(entity.major_axis_end, dx, dy),
                entity.minor_axis_ratio,
                entity.start_angle,
                entity.end_angle,
            )
        case _:
            assert_never(entity)


def _translate_point(point: Point2D, dx: float, dy: float) -> Point2D:
    return checked_point(point.x + dx, point.y + dy, operation="translate")


# =============================================================================
# Rotation
# =============================================================================


@overload
def rotate(entity: Point2D, center: Point2D, angle: float) -> Point2D: ...
@overload
def rotate(entity: Line2D, center: Point2D, angle: float) -> Line2D | None: ...
@overload
def rotate(entity: Arc2D, center: Point2D, angle: float) -> Arc2D | None: ...
@overload
def rotate(entity: Ellipse2D, center: Point2D, angle: float) -> Ellipse2D | None: ...


def rotate(
    entity: Point2D | Line2D | Arc2D | Ellipse2D, center: Point2D, angle: float
) -> Point2D | Line2D | Arc2D | Ellipse2D | None:
    """Rotate an entity about center by angle radians (positive = CCW).

    Arcs rotate their center and shift both angles by the same amount, so
    radius, sweep and direction are preserved. Ellipses rotate their center
    and major-axis end; their parameter range is relative to the major axis
    and does not change.

    Returns:
        The rotated entity, or None if the result is not a valid curve.
    """
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    def turn(point: Point2D) -> Point2D:
        return _rotate_point(point, center, cos_a, sin_a)

    match entity:
        case Point2D():
            return turn(entity)
        case Line2D():
            return Line2D.create(turn(entity.start), turn(entity.end))
        case Arc2D():
            return Arc2D.create(
                turn(entity.center),
                entity.radius,
                entity.start_angle + angle,
                entity.end_angle + angle,
                entity.counter_clockwise,
            )
        case Ellipse2D():
            return Ellipse2D.create(
                turn(entity.center),
                turn(entity.major_axis_end),
                entity.minor_axis_ratio,
                entity.start_angle,
                entity.end_angle,
            )
        case _:
            assert_never(entity)


def _rotate_point(
    point: Point2D, center: Point2D, cos_a: float, sin_a: float
) -> Point2D:
    dx = point.x - center.x
    dy = point.y - center.y
    return checked_point(
        center.x + dx * cos_a - dy * sin_a,
        center.y + dx * sin_a + dy * cos_a,
        operation="rotate",
    )


# =============================================================================
# Mirror
# =============================================================================


@overload
def mirror(entity: Point2D, axis_p1: Point2D, axis_p2: Point2D) -> Point2D: ...
@overload
def mirror(entity: Line2D, axis_p1: Point2D, axis_p2: Point2D) -> Line2D | None: ...
@overload
def mirror(entity: Arc2D, axis_p1: Point2D, axis_p2: Point2D) -> Arc2D | None: ...
@overload
def mirror(
    entity: Ellipse2D, axis_p1: Point2D, axis_p2: Point2D
) -> Ellipse2D | None: ...


def mirror(
    entity: Point2D | Line2D | Arc2D | Ellipse2D,
    axis_p1: Point2D,
    axis_p2: Point2D,
) -> Point2D | Line2D | Arc2D | Ellipse2D | None:
    """Reflect an entity across the infinite line through axis_p1 and axis_p2.

    A reflection reverses orientation, so a mirrored arc runs the opposite
    way: an axis at angle phi maps the direction theta to 2*phi - theta,
    which turns a CCW sweep from s to e into a CW sweep from 2*phi - s to
    2*phi - e. Mirrored ellipses map their parameter range [s, e] to
    [-e, -s] so they still run counter-clockwise over the same curve.

    A degenerate axis (coincident points) leaves points unchanged and makes
    curve results None.

    Returns:
        The mirrored entity, or None if the axis or result is invalid.
    """
    axis_dx = axis_p2.x - axis_p1.x
    axis_dy = axis_p2.y - axis_p1.y
    axis_len_sq = axis_dx * axis_dx + axis_dy * axis_dy
    degenerate = axis_len_sq < GEOMETRY_EPSILON * GEOMETRY_EPSILON

    def reflect(point: Point2D) -> Point2D:
        if degenerate:
            return point
        rel_x = point.x - axis_p1.x
        rel_y = point.y - axis_p1.y
        t = (rel_x * axis_dx + rel_y * axis_dy) / axis_len_sq
        foot_x = axis_p1.x + t * axis_dx
        foot_y = axis_p1.y + t * axis_dy
        return checked_point(
            2.0 * foot_x - point.x, 2.0 * foot_y - point.y, operation="mirror"
        )

    match entity:
        case Point2D():
            return reflect(entity)
        case Line2D():
            if degenerate:
                return None
            return Line2D.create(reflect(entity.start), reflect(entity.end))
        case Arc2D():
            if degenerate:
                return None
            axis_angle = math.atan2(axis_dy, axis_dx)
            return Arc2D.create(
                reflect(entity.center),
                entity.radius,
                2.0 * axis_angle - entity.start_angle,
                2.0 * axis_angle - entity.end_angle,
                not entity.counter_clockwise,
            )
        case Ellipse2D():
            if degenerate:
                return None
            return Ellipse2D.create(
                reflect(entity.center),
                reflect(entity.major_axis_end),
                entity.minor_axis_ratio,
                -entity.end_angle,
                -entity.start_angle,
            )
        case _:
            assert_never(entity)
