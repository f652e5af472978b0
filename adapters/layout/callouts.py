from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from adapters.layout.quadrants import classify_targets
from domain.models import (
    LEGEND_COLOR,
    SIDE_ORDER,
    AnnotationPrimitive,
    BoundingBox,
    CalloutBatch,
    CalloutPlan,
    CalloutTarget,
    DotPrimitive,
    LegendEntry,
    LinePrimitive,
    Point,
    Side,
    Size,
    ValueMarker,
)
from domain.ports.layout import CalloutLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalloutConfig:
    annotation_buffer: float = 12.0
    min_spacing: float = 32.0
    container_padding: float = 80.0
    elbow_length: float = 30.0
    dot_diameter: float = 5.0
    marker_diameter: float = 24.0
    color: str = LEGEND_COLOR


@dataclass
class RouterState:
    """Legend numbering shared by every quadrant of one annotation pass."""

    next_number: int = 1

    def take_number(self) -> int:
        number = self.next_number
        self.next_number += 1
        return number


class QuadrantCalloutRouter(CalloutLayout):
    def __init__(self, config: CalloutConfig | None = None) -> None:
        self.config = config or CalloutConfig()

    def route_numbered_legend(
        self, targets: Sequence[CalloutTarget], reference: BoundingBox
    ) -> CalloutPlan:
        quadrants = classify_targets(targets, reference)
        state = RouterState()
        primitives: list[AnnotationPrimitive] = []
        entries: list[LegendEntry] = []
        for side in SIDE_ORDER:
            batch = self.route_quadrant(quadrants.for_side(side), side, reference, state)
            primitives.extend(batch.connectors)
            primitives.extend(batch.dots)
            primitives.extend(batch.markers)
            entries.extend(batch.entries)
        return CalloutPlan(primitives=primitives, entries=entries)

    def route_quadrant(
        self,
        targets: Sequence[CalloutTarget],
        side: Side,
        reference: BoundingBox,
        state: RouterState,
    ) -> CalloutBatch:
        if not targets:
            return CalloutBatch()

        horizontal = side in ("left", "right")

        def perpendicular(target: CalloutTarget) -> float:
            center = target.bounds.center
            return center.y if horizontal else center.x

        connectors: list[LinePrimitive] = []
        dots: list[DotPrimitive] = []
        markers: list[ValueMarker] = []
        entries: list[LegendEntry] = []
        last_start = float("-inf")
        last_end = float("-inf")
        for target in sorted(targets, key=perpendicular):
            anchor_pos = max(perpendicular(target), last_start + self.config.annotation_buffer)
            last_start = anchor_pos
            end_pos = max(anchor_pos, last_end + self.config.min_spacing)
            last_end = end_pos

            start, elbow, end = self._connector_points(
                side, target.bounds, reference, anchor_pos, end_pos
            )
            connectors.append(LinePrimitive(start=start, end=elbow, color=self.config.color))
            connectors.append(LinePrimitive(start=elbow, end=end, color=self.config.color))
            dots.append(
                DotPrimitive(
                    center=start, diameter=self.config.dot_diameter, color=self.config.color
                )
            )
            number = state.take_number()
            markers.append(self.legend_marker(number).centered_at(end))
            entries.append(LegendEntry(number=number, target=target, side=side))
            logger.debug(
                "Routed %s on %s: anchor=%.1f end=%.1f number=%d",
                target.id,
                side,
                anchor_pos,
                end_pos,
                number,
            )
        return CalloutBatch(connectors=connectors, dots=dots, markers=markers, entries=entries)

    def legend_marker(self, number: int) -> ValueMarker:
        diameter = self.config.marker_diameter
        return ValueMarker(
            label=str(number),
            color=self.config.color,
            size=Size(diameter, diameter),
            shape="circle",
            number=number,
        )

    def _connector_points(
        self,
        side: Side,
        bounds: BoundingBox,
        reference: BoundingBox,
        anchor_pos: float,
        end_pos: float,
    ) -> tuple[Point, Point, Point]:
        padding = self.config.container_padding
        elbow = self.config.elbow_length
        if side == "left":
            end = Point(reference.x - padding, end_pos)
            return Point(bounds.x, anchor_pos), Point(end.x + elbow, anchor_pos), end
        if side == "right":
            end = Point(reference.right + padding, end_pos)
            return Point(bounds.right, anchor_pos), Point(end.x - elbow, anchor_pos), end
        if side == "top":
            end = Point(end_pos, reference.y - padding)
            return Point(anchor_pos, bounds.y), Point(anchor_pos, end.y + elbow), end
        end = Point(end_pos, reference.bottom + padding)
        return Point(anchor_pos, bounds.bottom), Point(anchor_pos, end.y - elbow), end
