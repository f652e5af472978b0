from __future__ import annotations

from collections.abc import Iterable

from domain.errors import MissingGeometryError
from domain.models import (
    AnnotationPrimitive,
    BaseSceneNode,
    BoundingBox,
    DotPrimitive,
    HasChildren,
    HighlightRegion,
    LinePrimitive,
    ValueMarker,
)


def center_delta(box: BoundingBox, reference: BoundingBox) -> tuple[float, float]:
    center = box.center
    ref_center = reference.center
    return center.x - ref_center.x, center.y - ref_center.y


def require_bounds(node: BaseSceneNode) -> BoundingBox:
    if node.bounds is None:
        raise MissingGeometryError(node.id)
    return node.bounds


def union_bounds(boxes: Iterable[BoundingBox]) -> BoundingBox | None:
    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    for box in boxes:
        min_x = min(min_x, box.x)
        min_y = min(min_y, box.y)
        max_x = max(max_x, box.right)
        max_y = max(max_y, box.bottom)
    if min_x == float("inf"):
        return None
    return BoundingBox(min_x, min_y, max_x - min_x, max_y - min_y)


def subtree_bounds(node: BaseSceneNode) -> BoundingBox | None:
    boxes: list[BoundingBox] = []
    stack: list[BaseSceneNode] = [node]
    while stack:
        current = stack.pop()
        if current.bounds is not None:
            boxes.append(current.bounds)
        if isinstance(current, HasChildren):
            stack.extend(current.children)
    return union_bounds(boxes)


def primitive_bounds(primitive: AnnotationPrimitive) -> BoundingBox:
    if isinstance(primitive, LinePrimitive):
        min_x = min(primitive.start.x, primitive.end.x)
        min_y = min(primitive.start.y, primitive.end.y)
        return BoundingBox(
            min_x,
            min_y,
            abs(primitive.end.x - primitive.start.x),
            abs(primitive.end.y - primitive.start.y),
        )
    if isinstance(primitive, DotPrimitive):
        radius = primitive.diameter / 2
        return BoundingBox(
            primitive.center.x - radius,
            primitive.center.y - radius,
            primitive.diameter,
            primitive.diameter,
        )
    if isinstance(primitive, ValueMarker):
        return BoundingBox(
            primitive.center.x - primitive.size.width / 2,
            primitive.center.y - primitive.size.height / 2,
            primitive.size.width,
            primitive.size.height,
        )
    if isinstance(primitive, HighlightRegion):
        return primitive.bounds
    msg = f"Unsupported annotation primitive: {type(primitive).__name__}"
    raise TypeError(msg)
