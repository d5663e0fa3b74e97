"""Curve primitives: line segments, circular arcs and ellipses.

All curves are immutable Pydantic models. Direct construction validates the
shape invariants and raises ``ValidationError`` when they fail; ``create``
performs the same checks up front and returns ``None`` instead, which is
what batch import code should use to skip degenerate entities.

Derived values (length, bounding box, sweep, endpoints, ellipse axes) are
computed once, at construction, and kept in private attributes. Instances
carry no lazily written state and can be shared freely between threads.

Angles are radians, normalized to [0, 2*pi). Arc orientation
(``counter_clockwise``) is load-bearing: it is the tool-path direction.
"""

from __future__ import annotations

import math
from typing import Any, Self

from pydantic import (
    BaseModel,
    Field,
    FiniteFloat,
    PrivateAttr,
    field_validator,
    model_validator,
)

from kerf.config import settings
from kerf.geometry.angles import (
    angle_difference,
    angle_in_sweep,
    arc_length,
    normalize_angle,
    normalize_angle_signed,
    sweep_angle,
)
from kerf.geometry.bounds import BoundingBox
from kerf.geometry.constants import (
    GEOMETRY_EPSILON,
    MIN_ARC_RADIUS,
    MIN_ARC_SWEEP,
    MIN_LINE_LENGTH,
    PI,
    TWO_PI,
)
from kerf.geometry.measure import (
    angle_between_points,
    distance_point_to_ellipse,
    distance_point_to_segment,
)
from kerf.geometry.primitives import Point2D, checked_point
from kerf.utils.logging import get_logger

logger = get_logger(__name__)


class Line2D(BaseModel, frozen=True):
    """A straight segment from start to end.

    Invariant: the endpoints are at least MIN_LINE_LENGTH apart.

    Attributes:
        start: First endpoint.
        end: Second endpoint.
    """

    start: Point2D
    end: Point2D

    _length: float = PrivateAttr()
    _bounding_box: BoundingBox = PrivateAttr()

    @classmethod
    def create(cls, start: Point2D, end: Point2D) -> Self | None:
        """Create a line, returning None if the endpoints coincide."""
        if not cls.would_be_valid(start, end):
            logger.debug(
                "Rejected degenerate line",
                start=start.to_tuple(),
                end=end.to_tuple(),
            )
            return None
        return cls(start=start, end=end)

    @staticmethod
    def would_be_valid(start: Point2D, end: Point2D) -> bool:
        """Check whether a line between these points would be valid."""
        if not start.is_valid() or not end.is_valid():
            return False
        return start.distance_squared_to(end) >= MIN_LINE_LENGTH * MIN_LINE_LENGTH

    @model_validator(mode="after")
    def _validate_length(self) -> Self:
        if not self.would_be_valid(self.start, self.end):
            raise ValueError(
                f"Line endpoints coincide within {MIN_LINE_LENGTH} "
                f"(start={self.start.to_tuple()}, end={self.end.to_tuple()})"
            )
        return self

    def model_post_init(self, context: Any, /) -> None:
        self._length = self.start.distance_to(self.end)
        self._bounding_box = BoundingBox.from_line(self)

    def is_valid(self) -> bool:
        """Re-check the length invariant."""
        return self.would_be_valid(self.start, self.end)

    @property
    def length(self) -> float:
        """Segment length."""
        return self._length

    @property
    def bounding_box(self) -> BoundingBox:
        """Axis-aligned box of the segment."""
        return self._bounding_box

    @property
    def angle(self) -> float:
        """Direction from start to end in [0, 2*pi)."""
        return angle_between_points(self.start, self.end)

    @property
    def direction(self) -> tuple[float, float]:
        """Unit vector from start to end."""
        return (
            (self.end.x - self.start.x) / self._length,
            (self.end.y - self.start.y) / self._length,
        )

    @property
    def midpoint(self) -> Point2D:
        """Point halfway along the segment."""
        return self.point_at(0.5)

    def point_at(self, t: float) -> Point2D:
        """Linear interpolation from start (t=0) to end (t=1).

        The parameter is not clamped: values outside [0, 1] extrapolate
        along the carrier line.
        """
        return checked_point(
            self.start.x + t * (self.end.x - self.start.x),
            self.start.y + t * (self.end.y - self.start.y),
            operation="Line2D.point_at",
        )

    def contains_point(
        self, point: Point2D, tolerance: float = GEOMETRY_EPSILON
    ) -> bool:
        """Check if point lies on the segment (not the infinite line)."""
        if not self._bounding_box.contains(point, tolerance):
            return False
        return distance_point_to_segment(point, self) < tolerance

    def is_equal(self, other: Line2D, tolerance: float = GEOMETRY_EPSILON) -> bool:
        """Check if both endpoints match in order, within tolerance."""
        return self.start.is_equal(other.start, tolerance) and self.end.is_equal(
            other.end, tolerance
        )

    def reversed(self) -> Line2D:
        """Return the same segment traversed from end to start."""
        return Line2D(start=self.end, end=self.start)


class Arc2D(BaseModel, frozen=True):
    """A circular arc.

    The arc runs from start_angle to end_angle around center, in the
    direction given by counter_clockwise. Angles are normalized to
    [0, 2*pi) on construction. Equal start and end angles describe a full
    circle (sweep of 2*pi).

    Invariants: radius >= MIN_ARC_RADIUS and sweep >= MIN_ARC_SWEEP.

    Attributes:
        center: Circle center.
        radius: Circle radius.
        start_angle: Start angle in radians, normalized.
        end_angle: End angle in radians, normalized.
        counter_clockwise: Traversal direction (tool-path direction).
    """

    center: Point2D
    radius: FiniteFloat
    start_angle: FiniteFloat
    end_angle: FiniteFloat
    counter_clockwise: bool = True

    _sweep: float = PrivateAttr()
    _start_point: Point2D = PrivateAttr()
    _end_point: Point2D = PrivateAttr()
    _length: float = PrivateAttr()
    _bounding_box: BoundingBox = PrivateAttr()

    @classmethod
    def create(
        cls,
        center: Point2D,
        radius: float,
        start_angle: float,
        end_angle: float,
        counter_clockwise: bool = True,
    ) -> Self | None:
        """Create an arc, returning None for degenerate or non-finite input."""
        if not cls.would_be_valid(
            center, radius, start_angle, end_angle, counter_clockwise
        ):
            logger.debug(
                "Rejected degenerate arc",
                center=center.to_tuple(),
                radius=radius,
                start_angle=start_angle,
                end_angle=end_angle,
                counter_clockwise=counter_clockwise,
            )
            return None
        return cls(
            center=center,
            radius=radius,
            start_angle=start_angle,
            end_angle=end_angle,
            counter_clockwise=counter_clockwise,
        )

    @staticmethod
    def would_be_valid(
        center: Point2D,
        radius: float,
        start_angle: float,
        end_angle: float,
        counter_clockwise: bool,
    ) -> bool:
        """Check whether an arc with these parameters would be valid."""
        if not center.is_valid():
            return False
        if not math.isfinite(radius) or radius < MIN_ARC_RADIUS:
            return False
        if not math.isfinite(start_angle) or not math.isfinite(end_angle):
            return False
        return sweep_angle(start_angle, end_angle, counter_clockwise) >= MIN_ARC_SWEEP

    @model_validator(mode="before")
    @classmethod
    def _close_full_turn(cls, data: Any) -> Any:
        return _snap_full_turn(data, ccw_key="counter_clockwise")

    @field_validator("start_angle", "end_angle")
    @classmethod
    def _normalize(cls, value: float) -> float:
        return normalize_angle(value)

    @model_validator(mode="after")
    def _validate_shape(self) -> Self:
        if self.radius < MIN_ARC_RADIUS:
            raise ValueError(f"Arc radius {self.radius} is below {MIN_ARC_RADIUS}")
        sweep = sweep_angle(self.start_angle, self.end_angle, self.counter_clockwise)
        if sweep < MIN_ARC_SWEEP:
            raise ValueError(f"Arc sweep {sweep} is below {MIN_ARC_SWEEP}")
        return self

    def model_post_init(self, context: Any, /) -> None:
        self._sweep = sweep_angle(
            self.start_angle, self.end_angle, self.counter_clockwise
        )
        self._start_point = self.point_at_angle(self.start_angle)
        self._end_point = self.point_at_angle(self.end_angle)
        self._length = arc_length(self.radius, self._sweep)
        self._bounding_box = BoundingBox.from_arc(self)

    def is_valid(self) -> bool:
        """Re-check the radius and sweep invariants."""
        return self.would_be_valid(
            self.center,
            self.radius,
            self.start_angle,
            self.end_angle,
            self.counter_clockwise,
        )

    @property
    def sweep_angle(self) -> float:
        """Direction-aware angular extent in (0, 2*pi]."""
        return self._sweep

    @property
    def is_full_circle(self) -> bool:
        """True if the arc sweeps a full turn."""
        return abs(self._sweep - TWO_PI) < GEOMETRY_EPSILON

    @property
    def start_point(self) -> Point2D:
        """Point at start_angle."""
        return self._start_point

    @property
    def end_point(self) -> Point2D:
        """Point at end_angle."""
        return self._end_point

    @property
    def length(self) -> float:
        """Arc length, radius * sweep."""
        return self._length

    @property
    def bounding_box(self) -> BoundingBox:
        """Exact axis-aligned box, including axis crossings."""
        return self._bounding_box

    def point_at_angle(self, angle: float) -> Point2D:
        """Point on the underlying circle at the given angle."""
        return checked_point(
            self.center.x + self.radius * math.cos(angle),
            self.center.y + self.radius * math.sin(angle),
            operation="Arc2D.point_at_angle",
        )

    def point_at(self, t: float) -> Point2D:
        """Point at fraction t of the sweep, following the arc direction."""
        if self.counter_clockwise:
            angle = self.start_angle + t * self._sweep
        else:
            angle = self.start_angle - t * self._sweep
        return self.point_at_angle(angle)

    def contains_angle(self, angle: float, tolerance: float = GEOMETRY_EPSILON) -> bool:
        """Check if a direction from the center falls inside the sweep."""
        return angle_in_sweep(
            angle, self.start_angle, self._sweep, self.counter_clockwise, tolerance
        )

    def contains_point(
        self, point: Point2D, tolerance: float = GEOMETRY_EPSILON
    ) -> bool:
        """Check if point lies on the arc within tolerance."""
        if abs(self.center.distance_to(point) - self.radius) > tolerance:
            return False
        angle = angle_between_points(self.center, point)
        return self.contains_angle(angle, tolerance / self.radius)

    def is_equal(self, other: Arc2D, tolerance: float = GEOMETRY_EPSILON) -> bool:
        """Check if all parameters match within tolerance and direction is equal."""
        return (
            self.counter_clockwise == other.counter_clockwise
            and self.center.is_equal(other.center, tolerance)
            and abs(self.radius - other.radius) < tolerance
            and abs(angle_difference(self.start_angle, other.start_angle)) < tolerance
            and abs(angle_difference(self.end_angle, other.end_angle)) < tolerance
        )

    def reversed(self) -> Arc2D:
        """Return the same curve traversed in the opposite direction."""
        return Arc2D(
            center=self.center,
            radius=self.radius,
            start_angle=self.end_angle,
            end_angle=self.start_angle,
            counter_clockwise=not self.counter_clockwise,
        )


class Ellipse2D(BaseModel, frozen=True):
    """An ellipse or elliptical arc.

    ``major_axis_end`` is the point at the end of the semi-major axis, so
    the distance from center gives the semi-major length and its direction
    gives the rotation. Start and end are eccentric-anomaly parameters
    measured from the major axis and always run counter-clockwise; equal
    normalized values (the default 0 to 2*pi) describe the full ellipse.

    Attributes:
        center: Ellipse center.
        major_axis_end: Endpoint of the semi-major axis.
        minor_axis_ratio: Minor / major ratio in (0, 1].
        start_angle: Start parameter in radians, normalized.
        end_angle: End parameter in radians, normalized.
    """

    center: Point2D
    major_axis_end: Point2D
    minor_axis_ratio: float = Field(..., gt=0.0, le=1.0)
    start_angle: FiniteFloat = Field(default=0.0, validate_default=True)
    end_angle: FiniteFloat = Field(default=TWO_PI, validate_default=True)

    _major: float = PrivateAttr()
    _minor: float = PrivateAttr()
    _rotation: float = PrivateAttr()
    _sweep: float = PrivateAttr()
    _start_point: Point2D = PrivateAttr()
    _end_point: Point2D = PrivateAttr()
    _bounding_box: BoundingBox = PrivateAttr()

    @classmethod
    def create(
        cls,
        center: Point2D,
        major_axis_end: Point2D,
        minor_axis_ratio: float,
        start_angle: float = 0.0,
        end_angle: float = TWO_PI,
    ) -> Self | None:
        """Create an ellipse, returning None for degenerate input."""
        if not cls.would_be_valid(
            center, major_axis_end, minor_axis_ratio, start_angle, end_angle
        ):
            logger.debug(
                "Rejected degenerate ellipse",
                center=center.to_tuple(),
                major_axis_end=major_axis_end.to_tuple(),
                minor_axis_ratio=minor_axis_ratio,
            )
            return None
        return cls(
            center=center,
            major_axis_end=major_axis_end,
            minor_axis_ratio=minor_axis_ratio,
            start_angle=start_angle,
            end_angle=end_angle,
        )

    @staticmethod
    def would_be_valid(
        center: Point2D,
        major_axis_end: Point2D,
        minor_axis_ratio: float,
        start_angle: float,
        end_angle: float,
    ) -> bool:
        """Check whether an ellipse with these parameters would be valid."""
        if not center.is_valid() or not major_axis_end.is_valid():
            return False
        if center.distance_to(major_axis_end) < MIN_LINE_LENGTH:
            return False
        if not (0.0 < minor_axis_ratio <= 1.0):
            return False
        if not math.isfinite(start_angle) or not math.isfinite(end_angle):
            return False
        return sweep_angle(start_angle, end_angle, True) >= MIN_ARC_SWEEP

    @model_validator(mode="before")
    @classmethod
    def _close_full_turn(cls, data: Any) -> Any:
        return _snap_full_turn(data)

    @field_validator("start_angle", "end_angle")
    @classmethod
    def _normalize(cls, value: float) -> float:
        return normalize_angle(value)

    @model_validator(mode="after")
    def _validate_shape(self) -> Self:
        major = self.center.distance_to(self.major_axis_end)
        if major < MIN_LINE_LENGTH:
            raise ValueError(f"Ellipse major axis {major} is below {MIN_LINE_LENGTH}")
        sweep = sweep_angle(self.start_angle, self.end_angle, True)
        if sweep < MIN_ARC_SWEEP:
            raise ValueError(f"Ellipse sweep {sweep} is below {MIN_ARC_SWEEP}")
        return self

    def model_post_init(self, context: Any, /) -> None:
        dx = self.major_axis_end.x - self.center.x
        dy = self.major_axis_end.y - self.center.y
        self._major = math.hypot(dx, dy)
        self._minor = self._major * self.minor_axis_ratio
        self._rotation = normalize_angle(math.atan2(dy, dx))
        self._sweep = sweep_angle(self.start_angle, self.end_angle, True)
        self._start_point = self.point_at_angle(self.start_angle)
        self._end_point = self.point_at_angle(self.end_angle)
        self._bounding_box = self._compute_bounding_box()

    def _compute_bounding_box(self) -> BoundingBox:
        """Box from endpoints plus every in-range extremum of x(t) and y(t).

        With a = semi-major, b = semi-minor and rotation phi:
            dx/dt = 0  at  t = atan2(-b sin(phi), a cos(phi)) (+ pi)
            dy/dt = 0  at  t = atan2( b cos(phi), a sin(phi)) (+ pi)
        """
        a, b = self._major, self._minor
        cos_rot = math.cos(self._rotation)
        sin_rot = math.sin(self._rotation)

        t_x = math.atan2(-b * sin_rot, a * cos_rot)
        t_y = math.atan2(b * cos_rot, a * sin_rot)

        points = [self._start_point, self._end_point]
        for t in (t_x, t_x + PI, t_y, t_y + PI):
            if angle_in_sweep(t, self.start_angle, self._sweep, True):
                points.append(self.point_at_angle(t))
        return BoundingBox.from_point_list(points)

    def is_valid(self) -> bool:
        """Re-check the axis, ratio and sweep invariants."""
        return self.would_be_valid(
            self.center,
            self.major_axis_end,
            self.minor_axis_ratio,
            self.start_angle,
            self.end_angle,
        )

    @property
    def major_axis_length(self) -> float:
        """Semi-major axis length."""
        return self._major

    @property
    def minor_axis_length(self) -> float:
        """Semi-minor axis length."""
        return self._minor

    @property
    def rotation(self) -> float:
        """Angle of the major axis in [0, 2*pi)."""
        return self._rotation

    @property
    def sweep_angle(self) -> float:
        """Parameter extent in (0, 2*pi]."""
        return self._sweep

    @property
    def is_full_ellipse(self) -> bool:
        """True if the parameter range covers a full turn."""
        return abs(self._sweep - TWO_PI) < MIN_ARC_SWEEP

    @property
    def start_point(self) -> Point2D:
        """Point at start_angle."""
        return self._start_point

    @property
    def end_point(self) -> Point2D:
        """Point at end_angle."""
        return self._end_point

    @property
    def bounding_box(self) -> BoundingBox:
        """Rotation-aware axis-aligned box."""
        return self._bounding_box

    @property
    def length(self) -> float:
        """Curve length over the parameter range (composite Simpson rule)."""
        segments = _even(settings.ELLIPSE_LENGTH_SEGMENTS)
        h = self._sweep / segments
        end = self.start_angle + self._sweep
        total = self._speed(self.start_angle) + self._speed(end)
        for i in range(1, segments):
            weight = 4.0 if i % 2 else 2.0
            total += weight * self._speed(self.start_angle + i * h)
        return total * h / 3.0

    def _speed(self, t: float) -> float:
        """|dP/dt|; independent of rotation."""
        return math.hypot(self._major * math.sin(t), self._minor * math.cos(t))

    def point_at_angle(self, angle: float) -> Point2D:
        """Evaluate the rotated parametric ellipse at parameter angle."""
        cos_t = math.cos(angle)
        sin_t = math.sin(angle)
        cos_rot = math.cos(self._rotation)
        sin_rot = math.sin(self._rotation)
        a, b = self._major, self._minor
        return checked_point(
            self.center.x + a * cos_t * cos_rot - b * sin_t * sin_rot,
            self.center.y + a * cos_t * sin_rot + b * sin_t * cos_rot,
            operation="Ellipse2D.point_at_angle",
        )

    def point_at(self, t: float) -> Point2D:
        """Point at fraction t of the parameter range.

        The mapping is linear in parameter angle, not in arc length, so equal
        steps in t are not equal distances along the curve. Use
        ``point_at_arc_length`` for uniform spacing.
        """
        return self.point_at_angle(self.start_angle + t * self._sweep)

    def point_at_arc_length(self, fraction: float) -> Point2D:
        """Point at the given fraction of the curve length (clamped to [0, 1])."""
        fraction = min(max(fraction, 0.0), 1.0)
        segments = _even(settings.ELLIPSE_LENGTH_SEGMENTS)
        h = self._sweep / segments

        cumulative = [0.0]
        prev = self._speed(self.start_angle)
        for i in range(1, segments + 1):
            cur = self._speed(self.start_angle + i * h)
            cumulative.append(cumulative[-1] + (prev + cur) * h / 2.0)
            prev = cur

        target = fraction * cumulative[-1]
        for i in range(1, segments + 1):
            if cumulative[i] >= target:
                span = cumulative[i] - cumulative[i - 1]
                local = (target - cumulative[i - 1]) / span if span > 0.0 else 0.0
                return self.point_at_angle(self.start_angle + (i - 1 + local) * h)
        return self._end_point

    def contains_point(
        self, point: Point2D, tolerance: float = GEOMETRY_EPSILON
    ) -> bool:
        """Check if point lies on the curve (within the parameter range)."""
        if not self._bounding_box.contains(point, tolerance):
            return False
        return distance_point_to_ellipse(point, self) <= tolerance

    def is_equal(self, other: Ellipse2D, tolerance: float = GEOMETRY_EPSILON) -> bool:
        """Check if all defining parameters match within tolerance."""
        return (
            self.center.is_equal(other.center, tolerance)
            and self.major_axis_end.is_equal(other.major_axis_end, tolerance)
            and abs(self.minor_axis_ratio - other.minor_axis_ratio) < tolerance
            and abs(angle_difference(self.start_angle, other.start_angle)) < tolerance
            and abs(angle_difference(self.end_angle, other.end_angle)) < tolerance
        )


def _even(segments: int) -> int:
    """Round a segment count up to a positive even number."""
    segments = max(segments, 2)
    return segments + (segments % 2)


def _snap_full_turn(data: Any, ccw_key: str | None = None) -> Any:
    """Make the end angle equal the start angle when a whole turn is asked for.

    Separately normalized, 0.3 and 0.3 + 2*pi can differ by a few ulps.
    """
    if not isinstance(data, dict):
        return data
    start = data.get("start_angle")
    end = data.get("end_angle")
    if not isinstance(start, int | float) or not isinstance(end, int | float):
        return data
    if not math.isfinite(start) or not math.isfinite(end):
        return data
    ccw = bool(data.get(ccw_key, True)) if ccw_key else True
    travel = end - start if ccw else start - end
    if travel > PI and abs(normalize_angle_signed(travel)) < GEOMETRY_EPSILON:
        return {**data, "end_angle": start}
    return data
