"""Curve-curve intersection.

Every routine first solves the problem for the underlying infinite carriers
(lines and full circles), then keeps only candidates that lie on both actual
curves: within the [0, 1] parameter range of a segment and inside the
direction-aware sweep of an arc. Results are returned in no guaranteed
order; a tangency yields exactly one point.
"""

from __future__ import annotations

import math

from kerf.geometry.constants import GEOMETRY_EPSILON
from kerf.geometry.curves import Arc2D, Line2D
from kerf.geometry.measure import angle_between_points
from kerf.geometry.primitives import Point2D

__all__ = [
    "intersect_arc_arc",
    "intersect_line_arc",
    "line_line_intersection",
    "segment_segment_intersection",
    "segments_intersect",
]


def _cross_terms(l1: Line2D, l2: Line2D) -> tuple[float, float, float]:
    """Return (denominator, t numerator, u numerator) for two carriers."""
    x1, y1 = l1.start.x, l1.start.y
    x2, y2 = l1.end.x, l1.end.y
    x3, y3 = l2.start.x, l2.start.y
    x4, y4 = l2.end.x, l2.end.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    t_num = (x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)
    u_num = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3))
    return denom, t_num, u_num


def line_line_intersection(l1: Line2D, l2: Line2D) -> Point2D | None:
    """Intersection of the infinite lines through two segments.

    Returns:
        The crossing point, or None if the lines are parallel or coincident.
    """
    denom, t_num, _ = _cross_terms(l1, l2)
    if abs(denom) < GEOMETRY_EPSILON:
        return None
    return l1.point_at(t_num / denom)


def segment_segment_intersection(l1: Line2D, l2: Line2D) -> Point2D | None:
    """Intersection of two segments, None if they miss or are parallel."""
    denom, t_num, u_num = _cross_terms(l1, l2)
    if abs(denom) < GEOMETRY_EPSILON:
        return None

    t = t_num / denom
    u = u_num / denom
    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return l1.point_at(t)
    return None


def segments_intersect(l1: Line2D, l2: Line2D) -> bool:
    """Check if two non-parallel segments cross."""
    return segment_segment_intersection(l1, l2) is not None


def _on_segment(point: Point2D, line: Line2D) -> bool:
    dx = line.end.x - line.start.x
    dy = line.end.y - line.start.y
    t = ((point.x - line.start.x) * dx + (point.y - line.start.y) * dy) / (
        line.length * line.length
    )
    slack = GEOMETRY_EPSILON / line.length
    return -slack <= t <= 1.0 + slack


def _on_arc(point: Point2D, arc: Arc2D) -> bool:
    angle = angle_between_points(arc.center, point)
    return arc.contains_angle(angle, GEOMETRY_EPSILON / arc.radius)


def intersect_line_arc(line: Line2D, arc: Arc2D) -> list[Point2D]:
    """Intersection points of a segment and an arc.

    The carrier line is compared with the full circle through the foot of
    the perpendicular from the arc center: farther than the radius gives no
    candidates, at the radius (within GEOMETRY_EPSILON) gives one tangent
    point, closer gives two points half a chord either side of the foot.

    Args:
        line: The segment.
        arc: The arc.

    Returns:
        Zero, one or two points lying on both curves.
    """
    ux, uy = line.direction
    # Foot of the perpendicular from the center onto the carrier line
    along = (arc.center.x - line.start.x) * ux + (arc.center.y - line.start.y) * uy
    foot_x = line.start.x + along * ux
    foot_y = line.start.y + along * uy
    offset = math.hypot(arc.center.x - foot_x, arc.center.y - foot_y)

    if offset > arc.radius + GEOMETRY_EPSILON:
        return []

    if abs(offset - arc.radius) <= GEOMETRY_EPSILON:
        candidates = [Point2D(x=foot_x, y=foot_y)]
    else:
        half_chord = math.sqrt(arc.radius * arc.radius - offset * offset)
        candidates = [
            Point2D(x=foot_x - half_chord * ux, y=foot_y - half_chord * uy),
            Point2D(x=foot_x + half_chord * ux, y=foot_y + half_chord * uy),
        ]

    return [p for p in candidates if _on_segment(p, line) and _on_arc(p, arc)]


def intersect_arc_arc(first: Arc2D, second: Arc2D) -> list[Point2D]:
    """Intersection points of two arcs.

    Uses the standard two-circle construction. With d the center distance
    and r1, r2 the radii, the chord midpoint lies a = (r1^2 - r2^2 + d^2) / 2d
    from the first center and the points sit h = sqrt(r1^2 - a^2) either side
    of it. External or internal tangency (within GEOMETRY_EPSILON) yields a
    single point. Concentric arcs yield nothing: they either miss or share
    a whole stretch, which is a coincidence, not an intersection.

    Returns:
        Zero, one or two points lying on both arcs.
    """
    r1, r2 = first.radius, second.radius
    dx = second.center.x - first.center.x
    dy = second.center.y - first.center.y
    d = math.hypot(dx, dy)

    if d < GEOMETRY_EPSILON:
        return []
    if d > r1 + r2 + GEOMETRY_EPSILON or d < abs(r1 - r2) - GEOMETRY_EPSILON:
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    mid_x = first.center.x + a * dx / d
    mid_y = first.center.y + a * dy / d

    tangent = (
        abs(d - (r1 + r2)) <= GEOMETRY_EPSILON
        or abs(d - abs(r1 - r2)) <= GEOMETRY_EPSILON
    )
    h_sq = r1 * r1 - a * a
    if tangent or h_sq <= 0.0:
        candidates = [Point2D(x=mid_x, y=mid_y)]
    else:
        h = math.sqrt(h_sq)
        candidates = [
            Point2D(x=mid_x - h * dy / d, y=mid_y + h * dx / d),
            Point2D(x=mid_x + h * dy / d, y=mid_y - h * dx / d),
        ]

    return [p for p in candidates if _on_arc(p, first) and _on_arc(p, second)]
