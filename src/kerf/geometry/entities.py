"""The closed set of drawable entities.

``Entity`` is a tagged union of every kernel primitive. Consumers dispatch
with ``match`` and end with ``assert_never`` so that adding a primitive
shows up as a type error in every function that must handle it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import assert_never

from kerf.geometry.bounds import BoundingBox
from kerf.geometry.curves import Arc2D, Ellipse2D, Line2D
from kerf.geometry.primitives import Point2D

__all__ = [
    "Entity",
    "bounding_box_of",
    "collection_bounds",
    "entity_kind",
    "length_of",
    "sample_points",
]

Entity = Point2D | Line2D | Arc2D | Ellipse2D


def entity_kind(entity: Entity) -> str:
    """Short lowercase name of the entity type ("point", "line", ...)."""
    match entity:
        case Point2D():
            return "point"
        case Line2D():
            return "line"
        case Arc2D():
            return "arc"
        case Ellipse2D():
            return "ellipse"
        case _:
            assert_never(entity)


def bounding_box_of(entity: Entity) -> BoundingBox:
    """Axis-aligned box of any entity (a degenerate box for a point)."""
    match entity:
        case Point2D():
            return BoundingBox.from_points(entity, entity)
        case Line2D() | Arc2D() | Ellipse2D():
            return entity.bounding_box
        case _:
            assert_never(entity)


def collection_bounds(entities: Iterable[Entity]) -> BoundingBox:
    """Merged box of a collection; the empty box for an empty collection."""
    box = BoundingBox()
    for entity in entities:
        box = box.merge(bounding_box_of(entity))
    return box


def length_of(entity: Entity) -> float:
    """Curve length of an entity; points have zero length."""
    match entity:
        case Point2D():
            return 0.0
        case Line2D() | Arc2D() | Ellipse2D():
            return entity.length
        case _:
            assert_never(entity)


def sample_points(entity: Entity, segments: int = 32) -> list[Point2D]:
    """Sample an entity as a polyline for rendering.

    Lines always produce their two endpoints. Curves produce segments + 1
    points from start to end along their direction; a full circle or full
    ellipse repeats the start point at the end so the polyline closes.

    Args:
        entity: Entity to sample.
        segments: Number of polyline segments for curves (minimum 1).

    Returns:
        Sampled points in traversal order.
    """
    match entity:
        case Point2D():
            return [entity]
        case Line2D():
            return [entity.start, entity.end]
        case Arc2D() | Ellipse2D():
            count = max(segments, 1)
            return [entity.point_at(i / count) for i in range(count + 1)]
        case _:
            assert_never(entity)
