"""JSON entity records.

A thin, permissive input format for feeding the kernel from files:

    {"entities": [
        {"type": "line", "start": [0, 0], "end": [100, 0], "handle": "L1"},
        {"type": "arc", "center": [0, 0], "radius": 5,
         "start_angle": 0, "end_angle": 1.57, "counter_clockwise": true},
        {"type": "ellipse", "center": [0, 0], "major_axis_end": [10, 0],
         "minor_axis_ratio": 0.5},
        {"type": "point", "position": [3, 4]}
    ]}

Records only check the JSON shape. Geometric validity is left to the
kernel factories, so a degenerate record is skipped and reported instead
of failing the whole document. Angles are radians.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from kerf.geometry.constants import TWO_PI
from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D
from kerf.geometry.entities import Entity
from kerf.geometry.primitives import Point2D
from kerf.geometry.validators import GeometryIssue, IssueKind, ValidationResult
from kerf.utils.logging import entity_context, get_logger

logger = get_logger(__name__)

__all__ = [
    "ArcRecord",
    "EllipseRecord",
    "EntityDocument",
    "EntityRecord",
    "LineRecord",
    "LoadedEntities",
    "PointRecord",
    "load_document",
]

Coordinate = tuple[float, float]


def _point(coord: Coordinate) -> Point2D | None:
    return Point2D.create(coord[0], coord[1])


class PointRecord(BaseModel):
    """A standalone point."""

    type: Literal["point"]
    handle: str | None = None
    position: Coordinate

    def to_entity(self) -> Point2D | None:
        return _point(self.position)


class LineRecord(BaseModel):
    """A line segment."""

    type: Literal["line"]
    handle: str | None = None
    start: Coordinate
    end: Coordinate

    def to_entity(self) -> Line2D | None:
        start = _point(self.start)
        end = _point(self.end)
        if start is None or end is None:
            return None
        return Line2D.create(start, end)


class ArcRecord(BaseModel):
    """A circular arc; equal start and end angles mean a full circle."""

    type: Literal["arc"]
    handle: str | None = None
    center: Coordinate
    radius: float
    start_angle: float
    end_angle: float
    counter_clockwise: bool = True

    def to_entity(self) -> Arc2D | None:
        center = _point(self.center)
        if center is None:
            return None
        return Arc2D.create(
            center,
            self.radius,
            self.start_angle,
            self.end_angle,
            self.counter_clockwise,
        )


class EllipseRecord(BaseModel):
    """An ellipse or elliptical arc (full ellipse by default)."""

    type: Literal["ellipse"]
    handle: str | None = None
    center: Coordinate
    major_axis_end: Coordinate
    minor_axis_ratio: float
    start_angle: float = 0.0
    end_angle: float = TWO_PI

    def to_entity(self) -> Ellipse2D | None:
        center = _point(self.center)
        major_axis_end = _point(self.major_axis_end)
        if center is None or major_axis_end is None:
            return None
        return Ellipse2D.create(
            center,
            major_axis_end,
            self.minor_axis_ratio,
            self.start_angle,
            self.end_angle,
        )


EntityRecord = Annotated[
    PointRecord | LineRecord | ArcRecord | EllipseRecord,
    Field(discriminator="type"),
]


class LoadedEntities(BaseModel, frozen=True):
    """Kernel entities built from a document.

    Attributes:
        entities: Successfully built entities, in document order.
        handles: Handle of each built entity. Records without a handle get
            ``#<position>`` from their position in the document.
        skipped: One DEGENERATE_GEOMETRY issue per rejected record, indexed
            by document position.
    """

    entities: tuple[Entity, ...] = ()
    handles: tuple[str, ...] = ()
    skipped: ValidationResult = ValidationResult()


class EntityDocument(BaseModel):
    """A JSON document holding a list of entity records."""

    entities: list[EntityRecord] = Field(default_factory=list)

    def build(self) -> LoadedEntities:
        """Run every record through its kernel factory.

        Returns:
            The built entities, their handles, and the skipped records.
        """
        entities: list[Entity] = []
        handles: list[str] = []
        skipped: list[GeometryIssue] = []

        for position, record in enumerate(self.entities):
            handle = record.handle or f"#{position}"
            with entity_context(position):
                entity = record.to_entity()
            if entity is None:
                logger.debug(
                    "Skipped degenerate record",
                    record_type=record.type,
                    handle=handle,
                    position=position,
                )
                skipped.append(
                    GeometryIssue(
                        kind=IssueKind.DEGENERATE_GEOMETRY,
                        entity_index=position,
                        entity_handle=handle,
                        description=f"Skipped degenerate {record.type} record",
                    )
                )
                continue
            entities.append(entity)
            handles.append(handle)

        return LoadedEntities(
            entities=tuple(entities),
            handles=tuple(handles),
            skipped=ValidationResult(issues=tuple(skipped)),
        )


def load_document(path: Path) -> EntityDocument:
    """Read and parse an entity document.

    Raises:
        OSError: If the file cannot be read.
        pydantic.ValidationError: If the JSON does not match the format.
    """
    return EntityDocument.model_validate_json(path.read_text(encoding="utf-8"))
