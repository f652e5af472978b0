from __future__ import annotations

from dataclasses import dataclass

from domain.formatting import format_marker_value
from domain.geometry import require_bounds
from domain.models import (
    GAP_COLOR,
    PADDING_COLOR,
    RADIUS_COLOR,
    AnnotationPrimitive,
    BaseSceneNode,
    BoundingBox,
    FrameNode,
    HasCornerRadii,
    HighlightRegion,
    LinePrimitive,
    Point,
    Size,
    ValueMarker,
)
from domain.ports.layout import EdgeMarkerLayout


@dataclass(frozen=True)
class EdgeMarkerConfig:
    extension: float = 24.0
    gap_from_line: float = 4.0
    corner_offset: float = 8.0
    marker_font_size: float = 10.0
    marker_padding_x: float = 8.0
    marker_padding_y: float = 4.0
    marker_diameter: float = 24.0
    padding_color: str = PADDING_COLOR
    gap_color: str = GAP_COLOR
    radius_color: str = RADIUS_COLOR


def value_marker(
    value: float, color: str, unit: str = "", config: EdgeMarkerConfig | None = None
) -> ValueMarker:
    config = config or EdgeMarkerConfig()
    label = format_marker_value(value, unit)
    if not unit:
        return ValueMarker(
            label=label,
            color=color,
            size=Size(config.marker_diameter, config.marker_diameter),
            shape="circle",
        )
    # Bold 10px text: roughly 0.6em per glyph, 1.2em line box.
    text_width = len(label) * config.marker_font_size * 0.6
    text_height = config.marker_font_size * 1.2
    return ValueMarker(
        label=label,
        color=color,
        size=Size(
            text_width + config.marker_padding_x * 2,
            text_height + config.marker_padding_y * 2,
        ),
        shape="pill",
    )


@dataclass(frozen=True)
class _GuideFrame:
    start_x: float
    end_x: float
    start_y: float
    end_y: float


class EdgeMarkerAnnotator(EdgeMarkerLayout):
    def __init__(self, config: EdgeMarkerConfig | None = None) -> None:
        self.config = config or EdgeMarkerConfig()

    def padding_annotations(
        self, frame: FrameNode, container: BoundingBox
    ) -> list[AnnotationPrimitive]:
        focus = require_bounds(frame)
        guides = self._guides(container)
        color = self.config.padding_color
        created: list[AnnotationPrimitive] = []
        paddings = (
            ("top", frame.padding_top),
            ("bottom", frame.padding_bottom),
            ("left", frame.padding_left),
            ("right", frame.padding_right),
        )
        for side, value in paddings:
            if value <= 0:
                continue
            if side == "top":
                region = BoundingBox(focus.x, focus.y, focus.width, value)
            elif side == "bottom":
                region = BoundingBox(focus.x, focus.bottom - value, focus.width, value)
            elif side == "left":
                region = BoundingBox(focus.x, focus.y, value, focus.height)
            else:
                region = BoundingBox(focus.right - value, focus.y, value, focus.height)
            created.append(HighlightRegion(bounds=region, color=color))
            created.extend(
                self._strip_guides(
                    region, vertical_strip=side in ("left", "right"), guides=guides, color=color
                )
            )
            created.append(
                self._strip_marker(region, value, side in ("left", "right"), guides, color)
            )
        return created

    def item_spacing_annotations(
        self, frame: FrameNode, container: BoundingBox
    ) -> list[AnnotationPrimitive]:
        value = frame.item_spacing
        if (
            value <= 0
            or len(frame.children) < 2
            or frame.primary_axis_align_items == "SPACE_BETWEEN"
        ):
            return []
        guides = self._guides(container)
        color = self.config.gap_color
        vertical_flow = frame.layout_mode == "VERTICAL"
        created: list[AnnotationPrimitive] = []
        labelled = False
        for child in frame.children[:-1]:
            if child.bounds is None:
                continue
            bounds = child.bounds
            if vertical_flow:
                region = BoundingBox(bounds.x, bounds.bottom, bounds.width, value)
            else:
                region = BoundingBox(bounds.right, bounds.y, value, bounds.height)
            if not labelled:
                created.extend(
                    self._strip_guides(
                        region, vertical_strip=not vertical_flow, guides=guides, color=color
                    )
                )
                created.append(self._strip_marker(region, value, not vertical_flow, guides, color))
                labelled = True
            created.append(HighlightRegion(bounds=region, color=color))
        return created

    def radius_annotations(self, node: BaseSceneNode) -> list[AnnotationPrimitive]:
        if not isinstance(node, HasCornerRadii) or node.bounds is None:
            return []
        focus = node.bounds
        ext = self.config.extension
        offset = self.config.corner_offset
        color = self.config.radius_color
        created: list[AnnotationPrimitive] = []
        corners = (
            ("top_left", node.top_left_radius, False, False),
            ("top_right", node.top_right_radius, True, False),
            ("bottom_left", node.bottom_left_radius, False, True),
            ("bottom_right", node.bottom_right_radius, True, True),
        )
        for corner, value, is_right, is_bottom in corners:
            if value <= 0:
                continue
            region_x = focus.right - value if is_right else focus.x
            region_y = focus.bottom - value if is_bottom else focus.y
            guide_x = focus.right - value if is_right else focus.x + value
            guide_y = focus.bottom - value if is_bottom else focus.y + value
            outer_x = focus.right + ext if is_right else focus.x - ext
            outer_y = focus.bottom + ext if is_bottom else focus.y - ext
            created.append(
                HighlightRegion(
                    bounds=BoundingBox(region_x, region_y, value, value),
                    color=color,
                    corner_radii=_single_corner(corner, value),
                )
            )
            created.append(
                LinePrimitive(Point(outer_x, guide_y), Point(guide_x, guide_y), color, role="guide")
            )
            created.append(
                LinePrimitive(Point(guide_x, outer_y), Point(guide_x, guide_y), color, role="guide")
            )
            marker = value_marker(value, color, "px", self.config)
            marker_x = focus.right + offset if is_right else focus.x - offset - marker.size.width
            marker_y = focus.bottom + offset if is_bottom else focus.y - offset - marker.size.height
            created.append(marker.with_top_left(marker_x, marker_y))
        return created

    def _guides(self, container: BoundingBox) -> _GuideFrame:
        ext = self.config.extension
        return _GuideFrame(
            start_x=container.x - ext,
            end_x=container.right + ext,
            start_y=container.y - ext,
            end_y=container.bottom + ext,
        )

    def _strip_guides(
        self, region: BoundingBox, vertical_strip: bool, guides: _GuideFrame, color: str
    ) -> list[LinePrimitive]:
        if vertical_strip:
            return [
                LinePrimitive(Point(x, guides.start_y), Point(x, guides.end_y), color, role="guide")
                for x in (region.x, region.right)
            ]
        return [
            LinePrimitive(Point(guides.start_x, y), Point(guides.end_x, y), color, role="guide")
            for y in (region.y, region.bottom)
        ]

    def _strip_marker(
        self,
        region: BoundingBox,
        value: float,
        vertical_strip: bool,
        guides: _GuideFrame,
        color: str,
    ) -> ValueMarker:
        marker = value_marker(value, color, "px", self.config)
        gap = self.config.gap_from_line
        if vertical_strip:
            return marker.centered_at(
                Point(region.center.x, guides.end_y + gap + marker.size.height / 2)
            )
        return marker.centered_at(
            Point(guides.end_x + gap + marker.size.width / 2, region.center.y)
        )


def _single_corner(corner: str, value: float) -> tuple[float, float, float, float]:
    order = ("top_left", "top_right", "bottom_right", "bottom_left")
    return tuple(value if name == corner else 0.0 for name in order)  # type: ignore[return-value]
