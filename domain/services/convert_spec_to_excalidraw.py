from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from typing import Callable, List

from domain.formatting import color_to_hex
from domain.geometry import primitive_bounds, subtree_bounds, union_bounds
from domain.models import (
    CUSTOM_DATA_KEY,
    LEGEND_COLOR,
    MARKER_TEXT_COLOR,
    SWATCH_STROKE_COLOR,
    AnnotationPrimitive,
    BaseSceneNode,
    BoundingBox,
    DotPrimitive,
    EllipseNode,
    ExcalidrawDocument,
    FrameNode,
    HasChildren,
    HasCornerRadii,
    HasOpacity,
    HasPaints,
    HighlightRegion,
    LinePrimitive,
    Paint,
    Point,
    RectangleNode,
    Size,
    TextNode,
    ValueMarker,
    VectorNode,
)
from domain.services.build_spec_sheets import InfoLine, SpecBook, SpecSection, SpecSheet

MASTER_TITLE = "Design Specs"
MASTER_PADDING = 50.0
MASTER_SPACING = 80.0
MASTER_FILL = "#e6e6e6"
SECTION_TITLE_SIZE = 48.0
SECTION_SPACING = 32.0
SHEET_ROW_SPACING = 50.0
SHEET_PADDING_TOP = 24.0
SHEET_PADDING_BOTTOM = 40.0
SHEET_PADDING_LEFT = 24.0
SHEET_PADDING_RIGHT = 40.0
SHEET_SPACING = 24.0
SHEET_FILL = "#f2f2f2"
SHEET_RADIUS = 8.0
SHEET_TITLE_SIZE = 36.0
CONTENT_SPACING = 24.0
INFO_FONT_SIZE = 12.0
INFO_LINE_HEIGHT = 20.0
INFO_TEXT_COLOR = "#333333"
TITLE_COLOR = "#000000"
SPACER_HEIGHT = 16.0
SWATCH_SIZE = 16.0
LEGEND_BADGE_SIZE = 24.0
INLINE_SPACING = 8.0
MARKER_FONT_SIZE = 10.0
GLYPH_WIDTH_RATIO = 0.6
TITLE_LINE_RATIO = 1.25

AddElement = Callable[[dict], None]


@dataclass(frozen=True)
class _SheetMetrics:
    sheet: SpecSheet
    visual: BoundingBox
    info: Size
    title: Size
    content: Size
    size: Size


@dataclass(frozen=True)
class _SectionMetrics:
    section: SpecSection
    sheets: List[_SheetMetrics]
    title: Size
    size: Size


def text_size(text: str, font_size: float, line_height: float | None = None) -> Size:
    lines = text.split("\n") if text else [""]
    longest = max(len(line) for line in lines)
    height = line_height if line_height is not None else font_size * TITLE_LINE_RATIO
    return Size(longest * font_size * GLYPH_WIDTH_RATIO, height * len(lines))


def info_line_size(line: InfoLine) -> Size:
    if line.kind == "spacer":
        return Size(1.0, SPACER_HEIGHT)
    text = text_size(line.text, INFO_FONT_SIZE, INFO_LINE_HEIGHT)
    if line.kind == "swatch":
        return Size(
            SWATCH_SIZE + INLINE_SPACING + text.width, max(SWATCH_SIZE, text.height)
        )
    if line.kind == "legend":
        return Size(
            LEGEND_BADGE_SIZE + INLINE_SPACING + text.width, max(LEGEND_BADGE_SIZE, text.height)
        )
    return text


def info_panel_size(sheet: SpecSheet) -> Size:
    sizes = [info_line_size(line) for line in sheet.info]
    if not sizes:
        return Size(0.0, 0.0)
    height = sum(size.height for size in sizes) + sheet.info_spacing * (len(sizes) - 1)
    return Size(max(size.width for size in sizes), height)


def visual_bounds(sheet: SpecSheet) -> BoundingBox:
    boxes = [subtree_bounds(sheet.artwork.root)]
    boxes.extend(primitive_bounds(primitive) for primitive in sheet.annotations)
    bounds = union_bounds(box for box in boxes if box is not None)
    return bounds or BoundingBox(0.0, 0.0, 0.0, 0.0)


def effective_opacity(node: BaseSceneNode, inherited: float = 1.0) -> float:
    own = node.opacity if isinstance(node, HasOpacity) else 1.0
    return inherited * own


class SpecToExcalidrawConverter:
    def __init__(self) -> None:
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, "specsheet-excalidraw")

    def convert(self, book: SpecBook) -> ExcalidrawDocument:
        elements: List[dict] = []
        sections = [self._measure_section(section) for section in book.sections]
        inner_width = max((metrics.size.width for metrics in sections), default=0.0)
        inner_height = sum(metrics.size.height for metrics in sections)
        inner_height += MASTER_SPACING * max(len(sections) - 1, 0)
        master_size = Size(inner_width + MASTER_PADDING * 2, inner_height + MASTER_PADDING * 2)
        base_metadata = {"source": book.source_name}

        elements.append(
            self._rectangle_element(
                element_id=self._stable_id("master", book.source_name),
                position=book.origin,
                size=master_size,
                metadata={**base_metadata, "role": "master", "name": MASTER_TITLE},
                background_color=MASTER_FILL,
            )
        )
        cursor_y = book.origin.y + MASTER_PADDING
        for metrics in sections:
            self._place_section(
                metrics,
                Point(book.origin.x + MASTER_PADDING, cursor_y),
                elements.append,
                base_metadata,
            )
            cursor_y += metrics.size.height + MASTER_SPACING

        app_state = {
            "viewBackgroundColor": "#ffffff",
            "gridSize": None,
        }
        return ExcalidrawDocument(elements=elements, app_state=app_state, files={})

    def _measure_sheet(self, sheet: SpecSheet) -> _SheetMetrics:
        visual = visual_bounds(sheet)
        info = info_panel_size(sheet)
        title = text_size(sheet.name, SHEET_TITLE_SIZE)
        content = Size(
            visual.width + CONTENT_SPACING + info.width, max(visual.height, info.height)
        )
        size = Size(
            SHEET_PADDING_LEFT + max(title.width, content.width) + SHEET_PADDING_RIGHT,
            SHEET_PADDING_TOP
            + title.height
            + SHEET_SPACING
            + content.height
            + SHEET_PADDING_BOTTOM,
        )
        return _SheetMetrics(
            sheet=sheet, visual=visual, info=info, title=title, content=content, size=size
        )

    def _measure_section(self, section: SpecSection) -> _SectionMetrics:
        sheets = [self._measure_sheet(sheet) for sheet in section.sheets]
        title = text_size(section.title, SECTION_TITLE_SIZE)
        row_width = sum(metrics.size.width for metrics in sheets)
        row_width += SHEET_ROW_SPACING * max(len(sheets) - 1, 0)
        row_height = max((metrics.size.height for metrics in sheets), default=0.0)
        size = Size(max(title.width, row_width), title.height + SECTION_SPACING + row_height)
        return _SectionMetrics(section=section, sheets=sheets, title=title, size=size)

    def _place_section(
        self,
        metrics: _SectionMetrics,
        origin: Point,
        add_element: AddElement,
        base_metadata: dict,
    ) -> None:
        section = metrics.section
        metadata = {**base_metadata, "section": section.title}
        add_element(
            self._text_element(
                element_id=self._stable_id("section", section.category),
                text=section.title,
                position=origin,
                size=metrics.title,
                metadata={**metadata, "role": "section_title"},
                font_size=SECTION_TITLE_SIZE,
                color=TITLE_COLOR,
            )
        )
        cursor_x = origin.x
        row_y = origin.y + metrics.title.height + SECTION_SPACING
        for index, sheet_metrics in enumerate(metrics.sheets):
            self._place_sheet(
                sheet_metrics,
                Point(cursor_x, row_y),
                add_element,
                {
                    **metadata,
                    "sheet": sheet_metrics.sheet.name,
                    "sheet_key": sheet_metrics.sheet.key,
                    "sheet_index": index,
                },
            )
            cursor_x += sheet_metrics.size.width + SHEET_ROW_SPACING

    def _place_sheet(
        self,
        metrics: _SheetMetrics,
        origin: Point,
        add_element: AddElement,
        metadata: dict,
    ) -> None:
        sheet = metrics.sheet
        sheet_key = sheet.key
        add_element(
            self._rectangle_element(
                element_id=self._stable_id("sheet", sheet_key),
                position=origin,
                size=metrics.size,
                metadata={**metadata, "role": "sheet", "category": sheet.category},
                background_color=SHEET_FILL,
                radius=SHEET_RADIUS,
            )
        )
        add_element(
            self._text_element(
                element_id=self._stable_id("sheet-title", sheet_key),
                text=sheet.name,
                position=Point(origin.x + SHEET_PADDING_LEFT, origin.y + SHEET_PADDING_TOP),
                size=metrics.title,
                metadata={**metadata, "role": "sheet_title"},
                font_size=SHEET_TITLE_SIZE,
                color=TITLE_COLOR,
            )
        )
        content_x = origin.x + SHEET_PADDING_LEFT
        content_y = origin.y + SHEET_PADDING_TOP + metrics.title.height + SHEET_SPACING
        visual_x = content_x
        visual_y = content_y + (metrics.content.height - metrics.visual.height) / 2
        offset = Point(visual_x - metrics.visual.x, visual_y - metrics.visual.y)
        group_id = self._stable_id("visual", sheet_key)
        visual_metadata = {**metadata, "visual": sheet.visual_name or sheet.name}

        self._build_node(
            sheet.artwork.root, offset, 1.0, [group_id], add_element, visual_metadata, sheet_key
        )
        for index, primitive in enumerate(sheet.annotations):
            for element in self._primitive_elements(
                primitive, offset, [group_id], visual_metadata, f"{sheet_key}|{index}"
            ):
                add_element(element)

        info_origin = Point(
            content_x + metrics.visual.width + CONTENT_SPACING,
            content_y + (metrics.content.height - metrics.info.height) / 2,
        )
        self._build_info_panel(sheet, info_origin, add_element, metadata, sheet_key)

    def _build_node(
        self,
        node: BaseSceneNode,
        offset: Point,
        inherited_opacity: float,
        group_ids: List[str],
        add_element: AddElement,
        metadata: dict,
        sheet_key: str,
    ) -> None:
        if not node.visible:
            return
        opacity = effective_opacity(node, inherited_opacity)
        if node.bounds is not None:
            element = self._node_element(
                node, node.bounds, offset, opacity, group_ids, metadata, sheet_key
            )
            if element is not None:
                add_element(element)
        if isinstance(node, HasChildren):
            for child in node.children:
                self._build_node(
                    child, offset, opacity, group_ids, add_element, metadata, sheet_key
                )

    def _node_element(
        self,
        node: BaseSceneNode,
        bounds: BoundingBox,
        offset: Point,
        opacity: float,
        group_ids: List[str],
        metadata: dict,
        sheet_key: str,
    ) -> dict | None:
        position = Point(bounds.x + offset.x, bounds.y + offset.y)
        size = Size(bounds.width, bounds.height)
        element_id = self._stable_id("node", sheet_key, node.id)
        node_metadata = {**metadata, "role": "artwork", "node_name": node.name}
        fill = _first_solid(node.fills) if isinstance(node, HasPaints) else None
        stroke = _first_solid(node.strokes) if isinstance(node, HasPaints) else None
        paint = fill or stroke
        element_opacity = _percent(opacity * (paint.opacity if paint is not None else 1.0))

        if isinstance(node, TextNode):
            return self._text_element(
                element_id=element_id,
                text=node.characters,
                position=position,
                size=size,
                metadata=node_metadata,
                font_size=node.font_size or INFO_FONT_SIZE,
                color=_paint_hex(fill) or TITLE_COLOR,
                group_ids=group_ids,
                opacity=element_opacity,
            )
        if isinstance(node, (FrameNode, RectangleNode, EllipseNode, VectorNode)):
            type_name = "ellipse" if isinstance(node, EllipseNode) else "rectangle"
            radius = max(node.corner_radii()) if isinstance(node, HasCornerRadii) else 0.0
            return self._base_shape(
                element_id=element_id,
                type_name=type_name,
                position=position,
                width=size.width,
                height=size.height,
                group_ids=group_ids,
                metadata=node_metadata,
                extra={
                    "strokeColor": _paint_hex(stroke) or "transparent",
                    "backgroundColor": _paint_hex(fill) or "transparent",
                    "fillStyle": "solid",
                    "opacity": element_opacity,
                    "roundness": {"type": 3, "value": radius} if radius > 0 else None,
                },
            )
        return None

    def _primitive_elements(
        self,
        primitive: AnnotationPrimitive,
        offset: Point,
        group_ids: List[str],
        metadata: dict,
        key: str,
    ) -> List[dict]:
        if isinstance(primitive, LinePrimitive):
            return [self._line_element(primitive, offset, group_ids, metadata, key)]
        if isinstance(primitive, DotPrimitive):
            radius = primitive.diameter / 2
            return [
                self._base_shape(
                    element_id=self._stable_id("dot", key),
                    type_name="ellipse",
                    position=Point(
                        primitive.center.x - radius + offset.x,
                        primitive.center.y - radius + offset.y,
                    ),
                    width=primitive.diameter,
                    height=primitive.diameter,
                    group_ids=group_ids,
                    metadata={**metadata, "role": "dot"},
                    extra={
                        "strokeColor": primitive.color,
                        "backgroundColor": primitive.color,
                        "fillStyle": "solid",
                    },
                )
            ]
        if isinstance(primitive, HighlightRegion):
            bounds = primitive.bounds
            radius = max(primitive.corner_radii)
            return [
                self._base_shape(
                    element_id=self._stable_id("highlight", key),
                    type_name="rectangle",
                    position=Point(bounds.x + offset.x, bounds.y + offset.y),
                    width=bounds.width,
                    height=bounds.height,
                    group_ids=group_ids,
                    metadata={**metadata, "role": "highlight"},
                    extra={
                        "strokeColor": "transparent",
                        "backgroundColor": primitive.color,
                        "fillStyle": "solid",
                        "opacity": _percent(primitive.opacity),
                        "roundness": {"type": 3, "value": radius} if radius > 0 else None,
                    },
                )
            ]
        return self._marker_elements(primitive, offset, group_ids, metadata, key)

    def _marker_elements(
        self,
        marker: ValueMarker,
        offset: Point,
        group_ids: List[str],
        metadata: dict,
        key: str,
    ) -> List[dict]:
        position = Point(
            marker.center.x - marker.size.width / 2 + offset.x,
            marker.center.y - marker.size.height / 2 + offset.y,
        )
        marker_metadata = {**metadata, "role": "marker", "label": marker.label}
        if marker.number is not None:
            marker_metadata["legend_number"] = marker.number
        shape_id = self._stable_id("marker", key)
        shape = self._base_shape(
            element_id=shape_id,
            type_name="ellipse" if marker.shape == "circle" else "rectangle",
            position=position,
            width=marker.size.width,
            height=marker.size.height,
            group_ids=group_ids,
            metadata=marker_metadata,
            extra={
                "strokeColor": marker.color,
                "backgroundColor": marker.color,
                "fillStyle": "solid",
                "roundness": {"type": 3, "value": marker.size.height / 2}
                if marker.shape == "pill"
                else None,
            },
        )
        label = self._text_element(
            element_id=self._stable_id("marker-label", key),
            text=marker.label,
            position=position,
            size=marker.size,
            metadata=marker_metadata,
            font_size=MARKER_FONT_SIZE,
            color=marker.text_color,
            group_ids=group_ids,
            container_id=shape_id,
            align="center",
        )
        shape["boundElements"] = [{"id": label["id"], "type": "text"}]
        return [shape, label]

    def _build_info_panel(
        self,
        sheet: SpecSheet,
        origin: Point,
        add_element: AddElement,
        metadata: dict,
        sheet_key: str,
    ) -> None:
        info_metadata = {**metadata, "role": "info"}
        cursor_y = origin.y
        for index, line in enumerate(sheet.info):
            size = info_line_size(line)
            key = f"{sheet_key}|info|{index}"
            text_x = origin.x
            if line.kind == "swatch":
                add_element(
                    self._base_shape(
                        element_id=self._stable_id("swatch", key),
                        type_name="rectangle",
                        position=Point(origin.x, cursor_y + (size.height - SWATCH_SIZE) / 2),
                        width=SWATCH_SIZE,
                        height=SWATCH_SIZE,
                        metadata={**info_metadata, "role": "swatch"},
                        extra={
                            "strokeColor": SWATCH_STROKE_COLOR,
                            "backgroundColor": line.color or "transparent",
                            "fillStyle": "solid",
                            "roundness": {"type": 3, "value": 2},
                        },
                    )
                )
                text_x += SWATCH_SIZE + INLINE_SPACING
            elif line.kind == "legend" and line.number is not None:
                badge = ValueMarker(
                    label=str(line.number),
                    color=LEGEND_COLOR,
                    size=Size(LEGEND_BADGE_SIZE, LEGEND_BADGE_SIZE),
                    text_color=MARKER_TEXT_COLOR,
                    number=line.number,
                ).with_top_left(origin.x, cursor_y + (size.height - LEGEND_BADGE_SIZE) / 2)
                for element in self._marker_elements(
                    badge, Point(0.0, 0.0), [], info_metadata, key
                ):
                    add_element(element)
                text_x += LEGEND_BADGE_SIZE + INLINE_SPACING
            if line.kind != "spacer" and line.text:
                text = text_size(line.text, INFO_FONT_SIZE, INFO_LINE_HEIGHT)
                add_element(
                    self._text_element(
                        element_id=self._stable_id("info", key),
                        text=line.text,
                        position=Point(text_x, cursor_y + (size.height - text.height) / 2),
                        size=text,
                        metadata=info_metadata,
                        font_size=INFO_FONT_SIZE,
                        color=INFO_TEXT_COLOR,
                        bold=line.bold,
                    )
                )
            cursor_y += size.height + sheet.info_spacing

    def _line_element(
        self,
        line: LinePrimitive,
        offset: Point,
        group_ids: List[str],
        metadata: dict,
        key: str,
    ) -> dict:
        dx = line.end.x - line.start.x
        dy = line.end.y - line.start.y
        return self._base_shape(
            element_id=self._stable_id("line", key),
            type_name="line",
            position=Point(line.start.x + offset.x, line.start.y + offset.y),
            width=abs(dx),
            height=abs(dy),
            group_ids=group_ids,
            metadata={**metadata, "role": line.role},
            extra={
                "strokeColor": line.color,
                "backgroundColor": "transparent",
                "fillStyle": "solid",
                "points": [[0, 0], [dx, dy]],
                "startBinding": None,
                "endBinding": None,
            },
        )

    def _rectangle_element(
        self,
        element_id: str,
        position: Point,
        size: Size,
        metadata: dict,
        background_color: str,
        radius: float = 0.0,
    ) -> dict:
        return self._base_shape(
            element_id=element_id,
            type_name="rectangle",
            position=position,
            width=size.width,
            height=size.height,
            metadata=metadata,
            extra={
                "strokeColor": "transparent",
                "backgroundColor": background_color,
                "fillStyle": "solid",
                "roundness": {"type": 3, "value": radius} if radius > 0 else None,
            },
        )

    def _text_element(
        self,
        element_id: str,
        text: str,
        position: Point,
        size: Size,
        metadata: dict,
        font_size: float,
        color: str,
        group_ids: List[str] | None = None,
        container_id: str | None = None,
        opacity: int = 100,
        bold: bool = False,
        align: str = "left",
    ) -> dict:
        return self._base_shape(
            element_id=element_id,
            type_name="text",
            position=position,
            width=size.width,
            height=size.height,
            group_ids=group_ids,
            metadata={**metadata, "bold": bold} if bold else metadata,
            extra={
                "strokeColor": color,
                "backgroundColor": "transparent",
                "fillStyle": "solid",
                "opacity": opacity,
                "text": text,
                "originalText": text,
                "fontSize": font_size,
                "fontFamily": 2,
                "textAlign": align,
                "verticalAlign": "middle" if container_id else "top",
                "baseline": size.height / 2,
                "containerId": container_id,
                "lineHeight": 1.25,
            },
        )

    def _base_shape(
        self,
        element_id: str,
        type_name: str,
        position: Point,
        width: float,
        height: float,
        metadata: dict,
        group_ids: List[str] | None = None,
        extra: dict | None = None,
    ) -> dict:
        return {
            "id": element_id,
            "type": type_name,
            "x": position.x,
            "y": position.y,
            "width": width,
            "height": height,
            "angle": 0,
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "groupIds": group_ids or [],
            "roundness": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "boundElements": [],
            "locked": False,
            "frameId": None,
            "customData": {CUSTOM_DATA_KEY: metadata},
            **(extra or {}),
        }

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def _rand_seed(self) -> int:
        return random.randint(1, 2**31 - 1)


def _first_solid(paints: List[Paint]) -> Paint | None:
    for paint in paints:
        if paint.type == "SOLID" and paint.visible and paint.color is not None:
            return paint
    return None


def _paint_hex(paint: Paint | None) -> str | None:
    if paint is None or paint.color is None:
        return None
    return color_to_hex(paint.color).lower()


def _percent(opacity: float) -> int:
    return max(0, min(100, round(opacity * 100)))
