"""Geometry kernel for kerf.

This package provides the immutable 2D primitives used for CNC cutting
paths, the stateless geometry math over them, and the validation layer
that finds degenerate, duplicated or fragile geometry.

Key Components:
    - Primitives: Point2D, Line2D, Arc2D, Ellipse2D, BoundingBox
    - Math: angles, distances, intersections and rigid transforms
    - Validators: per-entity and collection checks (GeometryValidator)
    - Transform checks: precision and orientation checks (TransformValidator)

Example:
    from kerf.geometry import Arc2D, GeometryValidator, Point2D, mirror

    arc = Arc2D.create(Point2D(x=0, y=0), 10.0, 0.0, 1.5708)
    flipped = mirror(arc, Point2D(x=0, y=0), Point2D(x=1, y=0))
    assert flipped is not None and not flipped.counter_clockwise

    result = GeometryValidator().validate_entities([arc, flipped])
    assert result.passed
"""

from kerf.geometry.angles import (
    angle_difference,
    angle_in_sweep,
    arc_length,
    are_equal,
    clamp,
    is_angle_between,
    is_zero,
    normalize_angle,
    normalize_angle_signed,
    snap_angle,
    sweep_angle,
)
from kerf.geometry.bounds import BoundingBox, EmptyBoundingBoxError
from kerf.geometry.constants import (
    DEFAULT_DRIFT_TOLERANCE,
    GEOMETRY_EPSILON,
    HALF_PI,
    MIN_ARC_RADIUS,
    MIN_ARC_SWEEP,
    MIN_LINE_LENGTH,
    PI,
    TWO_PI,
)
from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D
from kerf.geometry.entities import (
    Entity,
    bounding_box_of,
    collection_bounds,
    entity_kind,
    length_of,
    sample_points,
)
from kerf.geometry.intersections import (
    intersect_arc_arc,
    intersect_line_arc,
    line_line_intersection,
    segment_segment_intersection,
    segments_intersect,
)
from kerf.geometry.measure import (
    angle_between_points,
    closest_point_on_arc,
    closest_point_on_ellipse,
    closest_point_on_segment,
    distance,
    distance_point_to_arc,
    distance_point_to_ellipse,
    distance_point_to_line,
    distance_point_to_segment,
    distance_squared,
    project_point_on_line,
)
from kerf.geometry.primitives import InvalidCoordinatesError, Point2D
from kerf.geometry.transform_checks import ComparisonResult, TransformValidator
from kerf.geometry.transforms import mirror, rotate, translate
from kerf.geometry.validators import (
    GeometryIssue,
    GeometryValidator,
    IssueKind,
    ValidationResult,
)

__all__ = [
    "DEFAULT_DRIFT_TOLERANCE",
    "GEOMETRY_EPSILON",
    "HALF_PI",
    "MIN_ARC_RADIUS",
    "MIN_ARC_SWEEP",
    "MIN_LINE_LENGTH",
    "PI",
    "TWO_PI",
    "Arc2D",
    "BoundingBox",
    "ComparisonResult",
    "Ellipse2D",
    "EmptyBoundingBoxError",
    "Entity",
    "GeometryIssue",
    "GeometryValidator",
    "InvalidCoordinatesError",
    "IssueKind",
    "Line2D",
    "Point2D",
    "TransformValidator",
    "ValidationResult",
    "angle_between_points",
    "angle_difference",
    "angle_in_sweep",
    "arc_length",
    "are_equal",
    "bounding_box_of",
    "clamp",
    "closest_point_on_arc",
    "closest_point_on_ellipse",
    "closest_point_on_segment",
    "collection_bounds",
    "distance",
    "distance_point_to_arc",
    "distance_point_to_ellipse",
    "distance_point_to_line",
    "distance_point_to_segment",
    "distance_squared",
    "entity_kind",
    "intersect_arc_arc",
    "intersect_line_arc",
    "is_angle_between",
    "is_zero",
    "length_of",
    "line_line_intersection",
    "mirror",
    "normalize_angle",
    "normalize_angle_signed",
    "project_point_on_line",
    "rotate",
    "sample_points",
    "segment_segment_intersection",
    "segments_intersect",
    "snap_angle",
    "sweep_angle",
    "translate",
]
