"""Unit tests for GeometryValidator and its result types.

Covers per-entity structural checks, the warning semantics of numerical
instability, and the relational checks (duplicate and overlapping lines,
duplicate and coincident arcs) across collections.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kerf.config import settings
from kerf.geometry import (
    HALF_PI,
    PI,
    Arc2D,
    Ellipse2D,
    Entity,
    GeometryIssue,
    GeometryValidator,
    IssueKind,
    Line2D,
    Point2D,
    ValidationResult,
)

ORIGIN = Point2D(x=0.0, y=0.0)


def _line(x1: float, y1: float, x2: float, y2: float) -> Line2D:
    return Line2D(start=Point2D(x=x1, y=y1), end=Point2D(x=x2, y=y2))


def _arc(start: float, end: float, *, ccw: bool = True, radius: float = 10.0) -> Arc2D:
    return Arc2D(
        center=ORIGIN,
        radius=radius,
        start_angle=start,
        end_angle=end,
        counter_clockwise=ccw,
    )


@pytest.fixture
def validator() -> GeometryValidator:
    return GeometryValidator()


class TestIssueKind:
    """Tests for the issue taxonomy."""

    def test_only_instability_is_warning(self) -> None:
        warnings = [kind for kind in IssueKind if kind.is_warning]
        assert warnings == [IssueKind.NUMERICAL_INSTABILITY]

    def test_relational_kinds(self) -> None:
        relational = {kind for kind in IssueKind if kind.is_relational}
        assert relational == {
            IssueKind.DUPLICATE_LINE,
            IssueKind.OVERLAPPING_LINES,
            IssueKind.DUPLICATE_ARC,
            IssueKind.COINCIDENT_ARCS,
        }

    def test_every_kind_has_label(self) -> None:
        for kind in IssueKind:
            assert kind.label
        assert IssueKind.ZERO_LENGTH_LINE.label == "Zero-length line"

    def test_values_are_snake_case(self) -> None:
        assert IssueKind("coincident_arcs") is IssueKind.COINCIDENT_ARCS


class TestValidationResult:
    """Tests for ValidationResult queries."""

    warning = GeometryIssue(kind=IssueKind.NUMERICAL_INSTABILITY, description="w")
    error = GeometryIssue(kind=IssueKind.DUPLICATE_LINE, description="e")

    def test_empty_result_passes(self) -> None:
        result = ValidationResult()
        assert result.passed
        assert result.is_valid
        assert result.issue_count == 0

    def test_warning_fails_passed_but_not_is_valid(self) -> None:
        result = ValidationResult(issues=(self.warning,))
        assert not result.passed
        assert result.is_valid

    def test_error_fails_both(self) -> None:
        result = ValidationResult(issues=(self.warning, self.error))
        assert not result.passed
        assert not result.is_valid

    def test_queries_and_merge(self) -> None:
        merged = ValidationResult(issues=(self.warning,)).merge(
            ValidationResult(issues=(self.error,))
        )
        assert merged.issues == (self.warning, self.error)
        assert merged.has_issue_type(IssueKind.DUPLICATE_LINE)
        assert not merged.has_issue_type(IssueKind.DUPLICATE_ARC)
        assert merged.issues_of_type(IssueKind.NUMERICAL_INSTABILITY) == [
            self.warning
        ]

    def test_issue_rejects_negative_index(self) -> None:
        with pytest.raises(ValidationError):
            GeometryIssue(
                kind=IssueKind.DUPLICATE_LINE, entity_index=-1, description="x"
            )


class TestPerEntityChecks:
    """Tests for single-entity validation."""

    def test_clean_entities_pass(
        self,
        validator: GeometryValidator,
        unit_line: Line2D,
        quarter_arc: Arc2D,
        rotated_ellipse: Ellipse2D,
    ) -> None:
        assert validator.validate_line(unit_line).passed
        assert validator.validate_arc(quarter_arc).passed
        assert validator.validate_ellipse(rotated_ellipse).passed
        assert validator.validate_point(ORIGIN).passed

    @pytest.mark.parametrize("tolerance", [None, 1e-12, 1.0, 1e6])
    def test_point_result_ignores_tolerance(
        self, validator: GeometryValidator, tolerance: float | None
    ) -> None:
        point = Point2D(x=1e-10, y=-3.0)
        assert validator.validate_point(point, tolerance).issues == ()

    def test_zero_length_line_against_coarse_tolerance(
        self, validator: GeometryValidator
    ) -> None:
        result = validator.validate_line(_line(0, 0, 0.5, 0), tolerance=1.0)
        assert result.has_issue_type(IssueKind.ZERO_LENGTH_LINE)
        assert not result.is_valid
        assert validator.is_zero_length(_line(0, 0, 0.5, 0), 1.0)

    def test_zero_radius_arc(self, validator: GeometryValidator) -> None:
        result = validator.validate_arc(_arc(0.0, 1.0, radius=0.5), tolerance=1.0)
        assert result.has_issue_type(IssueKind.ZERO_RADIUS_ARC)
        assert validator.is_zero_radius(_arc(0.0, 1.0, radius=0.5), 1.0)
        assert not validator.is_zero_radius(_arc(0.0, 1.0, radius=0.5), 0.1)

    def test_tiny_sweep(self, validator: GeometryValidator) -> None:
        arc = _arc(0.0, 0.01)
        result = validator.validate_arc(arc, tolerance=0.1)
        assert result.has_issue_type(IssueKind.INVALID_ARC_ANGLE)
        assert not validator.has_valid_angles(arc, 0.1)
        assert validator.has_valid_angles(arc, 1e-9)

    def test_near_boundary_line_is_warning(self, validator: GeometryValidator) -> None:
        """Test a valid line within 10x the tolerance is only fragile."""
        line = _line(0, 0, 5e-9, 0)
        result = validator.validate_line(line, tolerance=1e-9)
        assert [issue.kind for issue in result.issues] == [
            IssueKind.NUMERICAL_INSTABILITY
        ]
        assert not result.passed
        assert result.is_valid

    def test_stability_factor_is_configurable(self) -> None:
        line = _line(0, 0, 5e-9, 0)
        assert not GeometryValidator().is_numerically_stable(line, 1e-9)
        assert GeometryValidator(stability_factor=1.0).is_numerically_stable(
            line, 1e-9
        )

    def test_thin_ellipse_is_degenerate(self, validator: GeometryValidator) -> None:
        ellipse = Ellipse2D(
            center=ORIGIN,
            major_axis_end=Point2D(x=10.0, y=0.0),
            minor_axis_ratio=1e-10,
        )
        result = validator.validate_ellipse(ellipse, tolerance=1e-6)
        assert result.has_issue_type(IssueKind.DEGENERATE_GEOMETRY)
        assert result.has_issue_type(IssueKind.NUMERICAL_INSTABILITY)

    def test_default_tolerance_comes_from_settings(
        self, validator: GeometryValidator, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "VALIDATION_TOLERANCE", 1.0)
        assert validator.validate_line(_line(0, 0, 0.5, 0)).has_issue_type(
            IssueKind.ZERO_LENGTH_LINE
        )

    def test_validate_entity_dispatches(
        self, validator: GeometryValidator, quarter_arc: Arc2D
    ) -> None:
        result = validator.validate_entity(quarter_arc, tolerance=100.0)
        assert result.has_issue_type(IssueKind.ZERO_RADIUS_ARC)


class TestLineRelations:
    """Tests for duplicate and overlapping line detection."""

    def test_reversed_line_is_duplicate(self, validator: GeometryValidator) -> None:
        result = validator.validate_entities(
            [_line(0, 0, 100, 0), _line(100, 0, 0, 0)]
        )
        assert [issue.kind for issue in result.issues] == [IssueKind.DUPLICATE_LINE]
        issue = result.issues[0]
        assert (issue.entity_index, issue.related_index) == (0, 1)
        assert "entities 0 and 1" in issue.description

    def test_partial_overlap(self, validator: GeometryValidator) -> None:
        result = validator.validate_entities(
            [_line(0, 0, 100, 0), _line(50, 0, 150, 0)]
        )
        assert [issue.kind for issue in result.issues] == [
            IssueKind.OVERLAPPING_LINES
        ]

    def test_contained_segment_overlaps(self, validator: GeometryValidator) -> None:
        assert validator.are_lines_overlapping(
            _line(0, 0, 100, 0), _line(80, 0, 20, 0)
        )

    def test_touching_lines_do_not_overlap(self, validator: GeometryValidator) -> None:
        result = validator.validate_entities(
            [_line(0, 0, 100, 0), _line(100, 0, 200, 0)]
        )
        assert result.passed

    def test_parallel_offset_lines(self, validator: GeometryValidator) -> None:
        assert not validator.are_lines_overlapping(
            _line(0, 0, 100, 0), _line(0, 1e-3, 100, 1e-3)
        )

    def test_diagonal_overlap(self, validator: GeometryValidator) -> None:
        assert validator.are_lines_overlapping(
            _line(0, 0, 10, 10), _line(5, 5, 20, 20)
        )
        assert not validator.are_lines_duplicate(
            _line(0, 0, 10, 10), _line(5, 5, 20, 20)
        )

    def test_lines_within_tolerance_are_duplicates(
        self, validator: GeometryValidator
    ) -> None:
        assert validator.are_lines_duplicate(
            _line(0, 0, 100, 0), _line(0, 0.05, 100, 0), tolerance=0.1
        )
        assert not validator.are_lines_duplicate(
            _line(0, 0, 100, 0), _line(0, 0.05, 100, 0)
        )


class TestArcRelations:
    """Tests for duplicate and coincident arc detection."""

    def test_identical_arcs_are_duplicates(self, validator: GeometryValidator) -> None:
        result = validator.validate_entities([_arc(0, HALF_PI), _arc(0, HALF_PI)])
        assert [issue.kind for issue in result.issues] == [IssueKind.DUPLICATE_ARC]

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            pytest.param((0.0, HALF_PI), (PI / 4, 3 * PI / 4), id="partial"),
            pytest.param((0.0, PI), (PI / 4, HALF_PI), id="contained"),
            pytest.param((PI / 4, HALF_PI), (0.0, PI), id="container"),
            pytest.param((3 * HALF_PI, HALF_PI), (0.0, 0.1), id="wrapping"),
        ],
    )
    def test_overlapping_sweeps_are_coincident(
        self,
        validator: GeometryValidator,
        first: tuple[float, float],
        second: tuple[float, float],
    ) -> None:
        result = validator.validate_entities([_arc(*first), _arc(*second)])
        assert [issue.kind for issue in result.issues] == [IssueKind.COINCIDENT_ARCS]

    def test_same_curve_opposite_direction(self, validator: GeometryValidator) -> None:
        """Test a CW arc over the same stretch is coincident, not duplicate."""
        ccw = _arc(0.0, HALF_PI)
        cw = _arc(HALF_PI, 0.0, ccw=False)
        assert not validator.are_arcs_duplicate(ccw, cw)
        assert validator.are_arcs_coincident(ccw, cw)

    def test_disjoint_sweeps(self, validator: GeometryValidator) -> None:
        assert validator.validate_entities(
            [_arc(0.0, HALF_PI), _arc(PI, 3 * HALF_PI)]
        ).passed

    def test_arcs_sharing_an_endpoint(self, validator: GeometryValidator) -> None:
        assert not validator.are_arcs_coincident(_arc(0.0, HALF_PI), _arc(HALF_PI, PI))

    def test_different_radius_is_not_coincident(
        self, validator: GeometryValidator
    ) -> None:
        assert not validator.are_arcs_coincident(
            _arc(0.0, PI), _arc(0.0, PI, radius=10.5)
        )

    def test_full_circle_covers_everything(self, validator: GeometryValidator) -> None:
        assert validator.are_arcs_coincident(_arc(0.0, 0.0), _arc(PI, PI + 0.2))


class TestValidateEntities:
    """Tests for collection validation."""

    def test_empty_collection_passes(self, validator: GeometryValidator) -> None:
        result = validator.validate_entities([])
        assert result.passed
        assert result.issue_count == 0

    def test_indices_refer_to_collection_positions(
        self, validator: GeometryValidator
    ) -> None:
        entities: list[Entity] = [
            ORIGIN,
            _line(0, 0, 5e-9, 0),
            _arc(0.0, HALF_PI),
            _arc(0.0, HALF_PI),
        ]
        result = validator.validate_entities(entities)
        kinds = [(i.kind, i.entity_index, i.related_index) for i in result.issues]
        assert kinds == [
            (IssueKind.NUMERICAL_INSTABILITY, 1, None),
            (IssueKind.DUPLICATE_ARC, 2, 3),
        ]

    def test_handles_are_copied(self, validator: GeometryValidator) -> None:
        entities: list[Entity] = [
            _line(500, 500, 500 + 5e-9, 500),
            _line(0, 0, 100, 0),
            _line(100, 0, 0, 0),
        ]
        result = validator.validate_entities(entities, handles=["1A", "1B", "1C"])
        warning, duplicate = result.issues
        assert warning.entity_handle == "1A"
        assert duplicate.entity_handle == "1B"
        assert duplicate.related_handle == "1C"

    def test_handle_length_mismatch_raises(self, validator: GeometryValidator) -> None:
        with pytest.raises(ValueError, match="handles"):
            validator.validate_entities([_line(0, 0, 1, 0)], handles=["a", "b"])

    def test_lines_and_arcs_are_not_cross_paired(
        self, validator: GeometryValidator
    ) -> None:
        result = validator.validate_entities(
            [_line(10, 0, 0, 10), _arc(0.0, HALF_PI), _line(0, 10, 10, 0)]
        )
        assert [(i.entity_index, i.related_index) for i in result.issues] == [(0, 2)]

    def test_input_is_not_modified(self, validator: GeometryValidator) -> None:
        entities: list[Entity] = [_line(0, 0, 100, 0), _line(100, 0, 0, 0)]
        snapshot = list(entities)
        validator.validate_entities(entities)
        assert entities == snapshot

    def test_large_collection_finds_single_duplicate(
        self, validator: GeometryValidator
    ) -> None:
        """Test a few thousand collinear, non-touching segments."""
        entities: list[Entity] = [
            _line(i * 10.0, 0.0, i * 10.0 + 5.0, 0.0) for i in range(3000)
        ]
        entities.append(_line(1505.0, 0.0, 1500.0, 0.0))
        result = validator.validate_entities(entities)
        assert [(i.kind, i.entity_index, i.related_index) for i in result.issues] == [
            (IssueKind.DUPLICATE_LINE, 150, 3000)
        ]

    def test_relational_issues_sorted_by_index(
        self, validator: GeometryValidator
    ) -> None:
        entities: list[Entity] = [
            _line(200, 0, 300, 0),
            _line(0, 0, 100, 0),
            _line(300, 0, 200, 0),
            _line(100, 0, 0, 0),
        ]
        pairs = [
            (i.entity_index, i.related_index)
            for i in validator.validate_entities(entities).issues
        ]
        assert pairs == [(0, 2), (1, 3)]

    def test_detect_duplicates_skips_per_entity_checks(
        self, validator: GeometryValidator
    ) -> None:
        entities: list[Entity] = [_line(0, 0, 5e-9, 0), _line(5e-9, 0, 0, 0)]
        result = validator.detect_duplicates(entities)
        assert [issue.kind for issue in result.issues] == [IssueKind.DUPLICATE_LINE]
