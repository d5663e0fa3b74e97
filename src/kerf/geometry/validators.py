"""Geometry validation for kerf.

This module detects structurally invalid or manufacturing-unsafe geometry.
It never modifies its input and never raises for geometric problems: every
check returns a ``ValidationResult`` listing zero or more issues.

Two kinds of checks exist:
    - Per-entity checks (zero length, zero radius, bad sweep, coordinates,
      values so close to a tolerance boundary that they are fragile).
    - Relational checks across a collection (duplicate or overlapping lines,
      duplicate or coincident arcs).

Relational checks are practical on collections of several thousand
entities: candidate pairs come from a sort-and-sweep over bounding boxes
along x, then cheap center/radius filters run before any angular test.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import TypeVar, assert_never

from pydantic import BaseModel, Field

from kerf.config import settings
from kerf.geometry.angles import angle_difference, normalize_angle
from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D
from kerf.geometry.entities import Entity, bounding_box_of
from kerf.geometry.measure import distance_point_to_line
from kerf.geometry.primitives import Point2D
from kerf.utils.logging import entity_context, get_logger

logger = get_logger(__name__)

__all__ = [
    "GeometryIssue",
    "GeometryValidator",
    "IssueKind",
    "ValidationResult",
]

_T = TypeVar("_T", Line2D, Arc2D)


class IssueKind(str, Enum):
    """Every defect the validators can report.

    Per-entity kinds come first, then the pairwise kinds, then the kind only
    produced by transform checks.
    """

    ZERO_LENGTH_LINE = "zero_length_line"
    ZERO_RADIUS_ARC = "zero_radius_arc"
    INVALID_ARC_ANGLE = "invalid_arc_angle"
    DEGENERATE_GEOMETRY = "degenerate_geometry"
    NUMERICAL_INSTABILITY = "numerical_instability"
    INVALID_COORDINATES = "invalid_coordinates"

    DUPLICATE_LINE = "duplicate_line"
    OVERLAPPING_LINES = "overlapping_lines"
    DUPLICATE_ARC = "duplicate_arc"
    COINCIDENT_ARCS = "coincident_arcs"

    ORIENTATION_MISMATCH = "orientation_mismatch"

    @property
    def is_warning(self) -> bool:
        """True for kinds that flag fragile but technically valid geometry."""
        return self is IssueKind.NUMERICAL_INSTABILITY

    @property
    def is_relational(self) -> bool:
        """True for kinds that involve a pair of entities."""
        return self in _RELATIONAL_KINDS

    @property
    def label(self) -> str:
        """Human-readable name, e.g. "Zero-length line"."""
        return _LABELS[self]


_RELATIONAL_KINDS = frozenset(
    {
        IssueKind.DUPLICATE_LINE,
        IssueKind.OVERLAPPING_LINES,
        IssueKind.DUPLICATE_ARC,
        IssueKind.COINCIDENT_ARCS,
    }
)

_LABELS = {
    IssueKind.ZERO_LENGTH_LINE: "Zero-length line",
    IssueKind.ZERO_RADIUS_ARC: "Zero-radius arc",
    IssueKind.INVALID_ARC_ANGLE: "Invalid arc angle",
    IssueKind.DEGENERATE_GEOMETRY: "Degenerate geometry",
    IssueKind.NUMERICAL_INSTABILITY: "Numerical instability",
    IssueKind.INVALID_COORDINATES: "Invalid coordinates",
    IssueKind.DUPLICATE_LINE: "Duplicate line",
    IssueKind.OVERLAPPING_LINES: "Overlapping lines",
    IssueKind.DUPLICATE_ARC: "Duplicate arc",
    IssueKind.COINCIDENT_ARCS: "Coincident arcs",
    IssueKind.ORIENTATION_MISMATCH: "Orientation mismatch",
}


class GeometryIssue(BaseModel, frozen=True):
    """A single detected defect.

    Issues refer to entities by position in the validated collection (and
    optionally by handle), never by object reference.

    Attributes:
        kind: What is wrong.
        entity_index: Index of the offending entity (the lower index for
            pairwise issues).
        description: Human-readable explanation.
        entity_handle: Caller-supplied identifier of the entity, if any.
        related_index: Index of the other entity for pairwise issues.
        related_handle: Handle of the other entity for pairwise issues.
    """

    kind: IssueKind
    entity_index: int = Field(default=0, ge=0)
    description: str
    entity_handle: str | None = None
    related_index: int | None = Field(default=None, ge=0)
    related_handle: str | None = None


class ValidationResult(BaseModel, frozen=True):
    """Outcome of a validation run.

    ``passed`` is strict: any issue at all, warnings included, fails it.
    ``is_valid`` ignores warnings, so geometry that is merely fragile is
    still considered structurally valid.
    """

    issues: tuple[GeometryIssue, ...] = ()

    @property
    def passed(self) -> bool:
        """True iff no issues were found."""
        return not self.issues

    @property
    def is_valid(self) -> bool:
        """True iff every issue is a warning."""
        return all(issue.kind.is_warning for issue in self.issues)

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    def has_issue_type(self, kind: IssueKind) -> bool:
        """Check if at least one issue of this kind was found."""
        return any(issue.kind is kind for issue in self.issues)

    def issues_of_type(self, kind: IssueKind) -> list[GeometryIssue]:
        """Return all issues of this kind, in report order."""
        return [issue for issue in self.issues if issue.kind is kind]

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Concatenate two results (self's issues first)."""
        return ValidationResult(issues=self.issues + other.issues)


class GeometryValidator:
    """Validator for individual entities and entity collections.

    The validator is stateless apart from its stability factor and
    operates purely on the inputs provided to each method. Every
    ``tolerance`` argument defaults to ``settings.VALIDATION_TOLERANCE``.

    Args:
        stability_factor: Multiple of the tolerance below which values are
            flagged as numerically unstable. Defaults to
            ``settings.STABILITY_FACTOR``.
    """

    def __init__(self, stability_factor: float | None = None) -> None:
        self.stability_factor = (
            settings.STABILITY_FACTOR if stability_factor is None else stability_factor
        )

    # =========================================================================
    # Per-entity validation
    # =========================================================================

    def validate_point(
        self, point: Point2D, tolerance: float | None = None
    ) -> ValidationResult:
        """Validate a point's coordinates.

        ``tolerance`` is unused: a point has no extent to measure. It is
        accepted so every ``validate_*`` method takes the same arguments.
        """
        issues: list[GeometryIssue] = []
        if not _finite_point(point):
            issues.append(
                _issue(
                    IssueKind.INVALID_COORDINATES,
                    "Point contains invalid coordinates (NaN or infinity)",
                )
            )
        return ValidationResult(issues=tuple(issues))

    def validate_line(
        self, line: Line2D, tolerance: float | None = None
    ) -> ValidationResult:
        """Validate a line segment.

        Args:
            line: Line to validate.
            tolerance: Minimum meaningful length.

        Returns:
            Result with ZERO_LENGTH_LINE, NUMERICAL_INSTABILITY and
            INVALID_COORDINATES issues as applicable (entity_index 0).
        """
        tol = _resolve(tolerance)
        issues: list[GeometryIssue] = []

        if self.is_zero_length(line, tol):
            issues.append(
                _issue(
                    IssueKind.ZERO_LENGTH_LINE,
                    f"Line has zero or near-zero length ({line.length:.3g})",
                )
            )
        if not self.is_numerically_stable(line, tol):
            issues.append(
                _issue(
                    IssueKind.NUMERICAL_INSTABILITY,
                    "Line length is close to the tolerance boundary "
                    f"({line.length:.3g} <= {tol * self.stability_factor:.3g})",
                )
            )
        if not _finite_point(line.start) or not _finite_point(line.end):
            issues.append(
                _issue(
                    IssueKind.INVALID_COORDINATES,
                    "Line contains invalid coordinates (NaN or infinity)",
                )
            )
        return ValidationResult(issues=tuple(issues))

    def validate_arc(
        self, arc: Arc2D, tolerance: float | None = None
    ) -> ValidationResult:
        """Validate a circular arc.

        Args:
            arc: Arc to validate.
            tolerance: Minimum meaningful radius and sweep.

        Returns:
            Result with ZERO_RADIUS_ARC, INVALID_ARC_ANGLE,
            NUMERICAL_INSTABILITY and INVALID_COORDINATES issues as
            applicable (entity_index 0).
        """
        tol = _resolve(tolerance)
        issues: list[GeometryIssue] = []

        if self.is_zero_radius(arc, tol):
            issues.append(
                _issue(
                    IssueKind.ZERO_RADIUS_ARC,
                    f"Arc has zero or near-zero radius ({arc.radius:.3g})",
                )
            )
        if not self.has_valid_angles(arc, tol):
            issues.append(
                _issue(
                    IssueKind.INVALID_ARC_ANGLE,
                    f"Arc has a degenerate sweep ({arc.sweep_angle:.3g} rad)",
                )
            )
        if not self.is_numerically_stable(arc, tol):
            issues.append(
                _issue(
                    IssueKind.NUMERICAL_INSTABILITY,
                    "Arc radius or sweep is close to the tolerance boundary",
                )
            )
        if not _finite_point(arc.center):
            issues.append(
                _issue(
                    IssueKind.INVALID_COORDINATES,
                    "Arc center contains invalid coordinates (NaN or infinity)",
                )
            )
        return ValidationResult(issues=tuple(issues))

    def validate_ellipse(
        self, ellipse: Ellipse2D, tolerance: float | None = None
    ) -> ValidationResult:
        """Validate an ellipse or elliptical arc.

        Reports DEGENERATE_GEOMETRY for a collapsed major or minor axis or
        an out-of-range axis ratio, INVALID_ARC_ANGLE for a degenerate
        parameter range, plus instability and coordinate issues.
        """
        tol = _resolve(tolerance)
        issues: list[GeometryIssue] = []

        if ellipse.major_axis_length < tol:
            issues.append(
                _issue(
                    IssueKind.DEGENERATE_GEOMETRY,
                    "Ellipse has zero or near-zero major axis "
                    f"({ellipse.major_axis_length:.3g})",
                )
            )
        ratio_ok = 0.0 < ellipse.minor_axis_ratio <= 1.0
        if not ratio_ok or ellipse.minor_axis_length < tol:
            issues.append(
                _issue(
                    IssueKind.DEGENERATE_GEOMETRY,
                    f"Ellipse has a degenerate minor axis "
                    f"(ratio {ellipse.minor_axis_ratio:.3g})",
                )
            )
        if ellipse.sweep_angle < tol or not math.isfinite(ellipse.sweep_angle):
            issues.append(
                _issue(
                    IssueKind.INVALID_ARC_ANGLE,
                    f"Ellipse has a degenerate sweep ({ellipse.sweep_angle:.3g} rad)",
                )
            )
        if not self.is_numerically_stable(ellipse, tol):
            issues.append(
                _issue(
                    IssueKind.NUMERICAL_INSTABILITY,
                    "Ellipse axes or sweep are close to the tolerance boundary",
                )
            )
        endpoints = (ellipse.center, ellipse.major_axis_end)
        if not all(_finite_point(p) for p in endpoints):
            issues.append(
                _issue(
                    IssueKind.INVALID_COORDINATES,
                    "Ellipse contains invalid coordinates (NaN or infinity)",
                )
            )
        return ValidationResult(issues=tuple(issues))

    def validate_entity(
        self, entity: Entity, tolerance: float | None = None
    ) -> ValidationResult:
        """Dispatch to the per-entity validator for the entity's type."""
        match entity:
            case Point2D():
                return self.validate_point(entity, tolerance)
            case Line2D():
                return self.validate_line(entity, tolerance)
            case Arc2D():
                return self.validate_arc(entity, tolerance)
            case Ellipse2D():
                return self.validate_ellipse(entity, tolerance)
            case _:
                assert_never(entity)

    # =========================================================================
    # Collection validation
    # =========================================================================

    def validate_entities(
        self,
        entities: Sequence[Entity],
        tolerance: float | None = None,
        handles: Sequence[str] | None = None,
    ) -> ValidationResult:
        """Validate every entity and every relevant pair in a collection.

        Per-entity issues come first, ordered by entity index. Relational
        issues follow, ordered by (entity_index, related_index).

        Args:
            entities: Heterogeneous collection of entities.
            tolerance: Geometric tolerance for all checks.
            handles: Optional identifiers parallel to entities, copied into
                every issue that references an entity.

        Returns:
            Aggregated result. An empty collection passes.

        Raises:
            ValueError: If handles is given with a different length.
        """
        tol = _resolve(tolerance)
        _check_handles(entities, handles)

        issues: list[GeometryIssue] = []
        for index, entity in enumerate(entities):
            handle = handles[index] if handles is not None else None
            with entity_context(index):
                for issue in self.validate_entity(entity, tol).issues:
                    logger.debug(
                        "Geometry issue",
                        kind=issue.kind.value,
                        detail=issue.description,
                    )
                    issues.append(
                        issue.model_copy(
                            update={"entity_index": index, "entity_handle": handle}
                        )
                    )

        relations = self.detect_duplicates(entities, tol, handles)
        for issue in relations.issues:
            logger.debug(
                "Geometry issue",
                kind=issue.kind.value,
                entity_index=issue.entity_index,
                related_index=issue.related_index,
                detail=issue.description,
            )
        result = ValidationResult(issues=tuple(issues)).merge(relations)

        logger.info(
            "Validated entities",
            entity_count=len(entities),
            issue_count=result.issue_count,
            passed=result.passed,
            is_valid=result.is_valid,
        )
        return result

    def detect_duplicates(
        self,
        entities: Sequence[Entity],
        tolerance: float | None = None,
        handles: Sequence[str] | None = None,
    ) -> ValidationResult:
        """Run only the relational checks over a collection.

        Lines are paired with lines and arcs with arcs. Each pair is
        reported at most once, with the most specific kind: a duplicate is
        not also reported as an overlap or coincidence.
        """
        tol = _resolve(tolerance)
        _check_handles(entities, handles)

        lines = [(i, e) for i, e in enumerate(entities) if isinstance(e, Line2D)]
        arcs = [(i, e) for i, e in enumerate(entities) if isinstance(e, Arc2D)]

        found: list[tuple[int, int, IssueKind, str]] = []

        for (i, l1), (j, l2) in _candidate_pairs(lines, tol):
            if self.are_lines_duplicate(l1, l2, tol):
                found.append((i, j, IssueKind.DUPLICATE_LINE, "Lines are duplicates"))
            elif self.are_lines_overlapping(l1, l2, tol):
                found.append(
                    (i, j, IssueKind.OVERLAPPING_LINES, "Collinear lines overlap")
                )

        for (i, a1), (j, a2) in _candidate_pairs(arcs, tol):
            if not _same_circle(a1, a2, tol):
                continue
            if self.are_arcs_duplicate(a1, a2, tol):
                found.append((i, j, IssueKind.DUPLICATE_ARC, "Arcs are duplicates"))
            elif self.are_arcs_coincident(a1, a2, tol):
                found.append(
                    (
                        i,
                        j,
                        IssueKind.COINCIDENT_ARCS,
                        "Arcs share center and radius with overlapping sweeps",
                    )
                )

        found.sort(key=lambda item: (item[0], item[1]))
        issues = tuple(
            GeometryIssue(
                kind=kind,
                entity_index=i,
                related_index=j,
                description=f"{description} (entities {i} and {j})",
                entity_handle=handles[i] if handles is not None else None,
                related_handle=handles[j] if handles is not None else None,
            )
            for i, j, kind, description in found
        )
        return ValidationResult(issues=issues)

    # =========================================================================
    # Structural predicates
    # =========================================================================

    def is_zero_length(self, line: Line2D, tolerance: float | None = None) -> bool:
        """True if the line is shorter than tolerance."""
        return line.length < _resolve(tolerance)

    def is_zero_radius(self, arc: Arc2D, tolerance: float | None = None) -> bool:
        """True if the arc radius is below tolerance."""
        return arc.radius < _resolve(tolerance)

    def has_valid_angles(self, arc: Arc2D, tolerance: float | None = None) -> bool:
        """True if the sweep is finite and at least tolerance."""
        sweep = arc.sweep_angle
        return math.isfinite(sweep) and sweep >= _resolve(tolerance)

    def is_numerically_stable(
        self, entity: Line2D | Arc2D | Ellipse2D, tolerance: float | None = None
    ) -> bool:
        """Check that an entity's defining sizes are well clear of tolerance.

        A size within ``stability_factor`` times the tolerance is a near
        miss: the entity is valid, but small perturbations could make it
        degenerate.
        """
        threshold = _resolve(tolerance) * self.stability_factor
        match entity:
            case Line2D():
                return entity.length > threshold
            case Arc2D():
                return entity.radius > threshold and entity.sweep_angle > threshold
            case Ellipse2D():
                return (
                    entity.major_axis_length > threshold
                    and entity.minor_axis_length > threshold
                    and entity.sweep_angle > threshold
                )
            case _:
                assert_never(entity)

    # =========================================================================
    # Pairwise predicates
    # =========================================================================

    def are_lines_duplicate(
        self, first: Line2D, second: Line2D, tolerance: float | None = None
    ) -> bool:
        """True if two segments have the same endpoints, in either order."""
        tol = _resolve(tolerance)
        same = first.start.is_equal(second.start, tol) and first.end.is_equal(
            second.end, tol
        )
        swapped = first.start.is_equal(second.end, tol) and first.end.is_equal(
            second.start, tol
        )
        return same or swapped

    def are_lines_overlapping(
        self, first: Line2D, second: Line2D, tolerance: float | None = None
    ) -> bool:
        """True if two segments are collinear and share a stretch of length.

        Both endpoints of ``second`` must lie within tolerance of the line
        through ``first``. The segments are then projected onto ``first``'s
        direction; the shared interval must be longer than tolerance, so
        segments that merely touch end to end do not overlap.
        """
        tol = _resolve(tolerance)
        if distance_point_to_line(second.start, first) >= tol:
            return False
        if distance_point_to_line(second.end, first) >= tol:
            return False

        ux, uy = first.direction
        ox, oy = first.start.x, first.start.y
        b0 = (second.start.x - ox) * ux + (second.start.y - oy) * uy
        b1 = (second.end.x - ox) * ux + (second.end.y - oy) * uy

        lo = max(0.0, min(b0, b1))
        hi = min(first.length, max(b0, b1))
        return hi - lo > tol

    def are_arcs_duplicate(
        self, first: Arc2D, second: Arc2D, tolerance: float | None = None
    ) -> bool:
        """True if two arcs match in every parameter, direction included."""
        return first.is_equal(second, _resolve(tolerance))

    def are_arcs_coincident(
        self, first: Arc2D, second: Arc2D, tolerance: float | None = None
    ) -> bool:
        """True if two arcs lie on the same circle and their sweeps overlap.

        Identical, contained and partially overlapping sweeps all count, in
        either direction. Arcs that only share an endpoint do not.
        """
        tol = _resolve(tolerance)
        if not _same_circle(first, second, tol):
            return False
        if first.is_full_circle or second.is_full_circle:
            return True

        angle_tol = tol / first.radius
        start1, sweep1 = _ccw_interval(first)
        start2, sweep2 = _ccw_interval(second)

        if abs(angle_difference(start1, start2)) < angle_tol:
            return True
        offset = normalize_angle(start2 - start1)
        if angle_tol < offset < sweep1 - angle_tol:
            return True
        offset = normalize_angle(start1 - start2)
        return angle_tol < offset < sweep2 - angle_tol


# =============================================================================
# Helpers
# =============================================================================


def _resolve(tolerance: float | None) -> float:
    return settings.VALIDATION_TOLERANCE if tolerance is None else tolerance


def _issue(kind: IssueKind, description: str) -> GeometryIssue:
    return GeometryIssue(kind=kind, entity_index=0, description=description)


def _finite_point(point: Point2D) -> bool:
    return math.isfinite(point.x) and math.isfinite(point.y)


def _check_handles(entities: Sequence[Entity], handles: Sequence[str] | None) -> None:
    if handles is not None and len(handles) != len(entities):
        raise ValueError(
            f"Got {len(handles)} handles for {len(entities)} entities"
        )


def _same_circle(first: Arc2D, second: Arc2D, tolerance: float) -> bool:
    return (
        abs(first.radius - second.radius) < tolerance
        and first.center.is_equal(second.center, tolerance)
    )


def _ccw_interval(arc: Arc2D) -> tuple[float, float]:
    """Return the arc's coverage as (start, sweep) running counter-clockwise."""
    if arc.counter_clockwise:
        return arc.start_angle, arc.sweep_angle
    return arc.end_angle, arc.sweep_angle


def _candidate_pairs(
    items: list[tuple[int, _T]], tolerance: float
) -> Iterator[tuple[tuple[int, _T], tuple[int, _T]]]:
    """Yield pairs whose bounding boxes overlap, lower entity index first.

    Sort-and-sweep along x: items are sorted by min_x and each one is only
    compared with the following items whose min_x does not exceed its
    max_x (plus tolerance).
    """
    boxed = sorted(
        ((bounding_box_of(entity), index, entity) for index, entity in items),
        key=lambda item: (item[0].min_x, item[1]),
    )
    for pos, (box_a, index_a, entity_a) in enumerate(boxed):
        reach = box_a.max_x + tolerance
        for box_b, index_b, entity_b in boxed[pos + 1 :]:
            if box_b.min_x > reach:
                break
            if box_b.min_y > box_a.max_y + tolerance:
                continue
            if box_b.max_y < box_a.min_y - tolerance:
                continue
            if index_a < index_b:
                yield (index_a, entity_a), (index_b, entity_b)
            else:
                yield (index_b, entity_b), (index_a, entity_a)
