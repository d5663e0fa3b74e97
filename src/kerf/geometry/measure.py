"""Distance, projection and closest-point queries.

Stateless functions over the kernel primitives. Curves are only used through
their public attributes, so this module can be imported by ``curves`` itself.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from kerf.geometry.angles import clamp, normalize_angle
from kerf.geometry.constants import GEOMETRY_EPSILON
from kerf.geometry.primitives import Point2D

if TYPE_CHECKING:
    from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D

__all__ = [
    "angle_between_points",
    "closest_point_on_arc",
    "closest_point_on_ellipse",
    "closest_point_on_segment",
    "distance",
    "distance_point_to_arc",
    "distance_point_to_ellipse",
    "distance_point_to_line",
    "distance_point_to_segment",
    "distance_squared",
    "project_point_on_line",
]

_ELLIPSE_COARSE_SAMPLES = 64
_GOLDEN_ITERATIONS = 80
_INV_PHI = (math.sqrt(5.0) - 1.0) / 2.0


def distance(p1: Point2D, p2: Point2D) -> float:
    """Euclidean distance between two points."""
    return p1.distance_to(p2)


def distance_squared(p1: Point2D, p2: Point2D) -> float:
    """Squared distance between two points (no square root)."""
    return p1.distance_squared_to(p2)


def angle_between_points(origin: Point2D, target: Point2D) -> float:
    """Direction from origin to target, normalized to [0, 2*pi)."""
    return normalize_angle(math.atan2(target.y - origin.y, target.x - origin.x))


def _segment_parameter(point: Point2D, line: Line2D) -> float:
    """Unclamped parameter of the projection of point onto line's carrier."""
    dx = line.end.x - line.start.x
    dy = line.end.y - line.start.y
    length_sq = dx * dx + dy * dy
    return ((point.x - line.start.x) * dx + (point.y - line.start.y) * dy) / length_sq


def distance_point_to_line(point: Point2D, line: Line2D) -> float:
    """Perpendicular distance from point to the infinite line through line."""
    dx = line.end.x - line.start.x
    dy = line.end.y - line.start.y
    cross = dx * (line.start.y - point.y) - dy * (line.start.x - point.x)
    return abs(cross) / math.hypot(dx, dy)


def project_point_on_line(point: Point2D, line: Line2D) -> Point2D:
    """Orthogonal projection of point onto the infinite line through line."""
    return line.point_at(_segment_parameter(point, line))


def closest_point_on_segment(point: Point2D, line: Line2D) -> Point2D:
    """Closest point to point on the segment (may be an endpoint)."""
    return line.point_at(clamp(_segment_parameter(point, line), 0.0, 1.0))


def distance_point_to_segment(point: Point2D, line: Line2D) -> float:
    """Distance from point to the nearest point of the segment."""
    return distance(point, closest_point_on_segment(point, line))


def closest_point_on_arc(point: Point2D, arc: Arc2D) -> Point2D:
    """Closest point to point on the arc.

    If the direction from the arc center to point falls inside the sweep,
    the radial projection is the answer; otherwise the nearer endpoint is.
    A point at the center itself maps to the start point.
    """
    if point.distance_squared_to(arc.center) < GEOMETRY_EPSILON * GEOMETRY_EPSILON:
        return arc.start_point

    angle = angle_between_points(arc.center, point)
    if arc.contains_angle(angle):
        return arc.point_at_angle(angle)

    start = arc.start_point
    end = arc.end_point
    if distance_squared(point, start) <= distance_squared(point, end):
        return start
    return end


def distance_point_to_arc(point: Point2D, arc: Arc2D) -> float:
    """Distance from point to the nearest point of the arc."""
    return distance(point, closest_point_on_arc(point, arc))


def closest_point_on_ellipse(point: Point2D, ellipse: Ellipse2D) -> Point2D:
    """Closest point to point on an ellipse or elliptical arc.

    Uses coarse sampling over the parameter range followed by a
    golden-section refinement around the best sample. Accurate to well below
    GEOMETRY_EPSILON for hit testing and containment checks.
    """
    start = ellipse.start_angle
    sweep = ellipse.sweep_angle

    def dist_sq(theta: float) -> float:
        return distance_squared(point, ellipse.point_at_angle(theta))

    step = sweep / _ELLIPSE_COARSE_SAMPLES
    best_index = min(
        range(_ELLIPSE_COARSE_SAMPLES + 1),
        key=lambda i: dist_sq(start + i * step),
    )

    lo = start + max(best_index - 1, 0) * step
    hi = start + min(best_index + 1, _ELLIPSE_COARSE_SAMPLES) * step
    if ellipse.is_full_ellipse:
        # Wrap-around: the neighbourhood of sample 0 extends below start.
        lo = start + (best_index - 1) * step
        hi = start + (best_index + 1) * step

    c = hi - _INV_PHI * (hi - lo)
    d = lo + _INV_PHI * (hi - lo)
    fc = dist_sq(c)
    fd = dist_sq(d)
    for _ in range(_GOLDEN_ITERATIONS):
        if fc < fd:
            hi, d, fd = d, c, fc
            c = hi - _INV_PHI * (hi - lo)
            fc = dist_sq(c)
        else:
            lo, c, fc = c, d, fd
            d = lo + _INV_PHI * (hi - lo)
            fd = dist_sq(d)

    candidates = [ellipse.point_at_angle((lo + hi) / 2.0)]
    if not ellipse.is_full_ellipse:
        candidates.extend([ellipse.start_point, ellipse.end_point])
    return min(candidates, key=lambda p: distance_squared(point, p))


def distance_point_to_ellipse(point: Point2D, ellipse: Ellipse2D) -> float:
    """Distance from point to the nearest point of the ellipse."""
    return distance(point, closest_point_on_ellipse(point, ellipse))
