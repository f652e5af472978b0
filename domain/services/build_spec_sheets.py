from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Literal, TypeVar

from domain.errors import (
    FontUnavailableError,
    InvalidSelectionError,
    NothingToSpecError,
    SpecSheetError,
)
from domain.formatting import color_to_hex, color_to_rgb_text, format_number, format_px
from domain.geometry import require_bounds
from domain.models import (
    AnnotationPrimitive,
    BaseSceneNode,
    BoundingBox,
    CalloutPlan,
    CalloutTarget,
    FontName,
    FrameNode,
    HasChildren,
    Point,
)
from domain.ports.fonts import FontProvider
from domain.ports.layout import CalloutLayout, EdgeMarkerLayout
from domain.services.attribute_groups import (
    ColorGroup,
    RadiusGroup,
    TextStyleGroup,
    find_layout_frames,
    group_colors,
    group_radii,
    group_text_styles,
)
from domain.services.focus_highlight import ClonedTree, apply_focus_opacity, clone_tree

logger = logging.getLogger(__name__)

SpecCategory = Literal["layout", "colors", "radius", "text"]
SECTION_TITLES: dict[SpecCategory, str] = {
    "layout": "Spacing",
    "colors": "Colors",
    "radius": "Radii",
    "text": "Text",
}
SPEC_WEIGHTS: dict[SpecCategory, float] = {
    "layout": 2.0,
    "colors": 1.0,
    "radius": 1.5,
    "text": 5.0,
}
BASE_FONTS = (FontName(family="Inter", style="Bold"), FontName(family="Inter", style="Regular"))
BOOK_OFFSET_Y = 100.0

ProgressCallback = Callable[[float], None]
T = TypeVar("T")


@dataclass(frozen=True)
class InfoLine:
    text: str = ""
    bold: bool = False
    kind: Literal["text", "spacer", "swatch", "legend"] = "text"
    color: str | None = None
    number: int | None = None

    @classmethod
    def spacer(cls) -> InfoLine:
        return cls(kind="spacer")


@dataclass
class SpecSheet:
    key: str
    title: str
    category: SpecCategory
    artwork: ClonedTree
    annotations: list[AnnotationPrimitive]
    info: list[InfoLine]
    info_spacing: float = 8.0
    visual_name: str | None = None

    @property
    def name(self) -> str:
        return f"{self.title} Spec"


@dataclass
class SpecSection:
    category: SpecCategory
    sheets: list[SpecSheet] = field(default_factory=list)

    @property
    def title(self) -> str:
        return SECTION_TITLES[self.category]


@dataclass
class SpecBook:
    source_name: str
    origin: Point
    sections: list[SpecSection]

    def sheets(self) -> list[SpecSheet]:
        return [sheet for section in self.sections for sheet in section.sheets]


@dataclass(frozen=True)
class SpecOptions:
    layout: bool = True
    colors: bool = True
    radius: bool = True
    text: bool = True


class _ProgressTracker:
    def __init__(self, total_weight: float, callback: ProgressCallback | None) -> None:
        self.total_weight = total_weight
        self.completed = 0.0
        self.callback = callback

    def advance(self, weight: float) -> None:
        self.completed += weight
        if self.callback is None:
            return
        progress = (self.completed / self.total_weight) * 100 if self.total_weight > 0 else 0.0
        self.callback(progress)


class SpecSheetGenerator:
    def __init__(
        self,
        callouts: CalloutLayout,
        edge_markers: EdgeMarkerLayout,
        fonts: FontProvider,
        text_workers: int = 4,
    ) -> None:
        self.callouts = callouts
        self.edge_markers = edge_markers
        self.fonts = fonts
        self.text_workers = max(1, text_workers)

    def generate(
        self,
        root: BaseSceneNode,
        options: SpecOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> SpecBook:
        options = options or SpecOptions()
        if not isinstance(root, HasChildren):
            msg = "Please select a single frame, component, or group."
            raise InvalidSelectionError(msg)
        for font in BASE_FONTS:
            try:
                self.fonts.load(font)
            except FontUnavailableError:
                logger.error("Could not load the required font %s", font.key)
                raise
        reference = require_bounds(root)

        frames = find_layout_frames(root) if options.layout else []
        colors = group_colors(root) if options.colors else {}
        radii = group_radii(root) if options.radius else {}
        texts = group_text_styles(root) if options.text else {}
        tracker = _ProgressTracker(
            len(frames) * SPEC_WEIGHTS["layout"]
            + len(colors) * SPEC_WEIGHTS["colors"]
            + len(radii) * SPEC_WEIGHTS["radius"]
            + len(texts) * SPEC_WEIGHTS["text"],
            progress,
        )

        sections = [
            SpecSection("layout"),
            SpecSection("colors"),
            SpecSection("radius"),
            SpecSection("text"),
        ]
        layout_section, color_section, radius_section, text_section = sections

        for frame in frames:
            self._collect(layout_section, frame.name, lambda: self.layout_sheet(frame, root))
            tracker.advance(SPEC_WEIGHTS["layout"])
        for key, color_group in colors.items():
            self._collect(
                color_section, key, lambda: self.color_sheet(color_group, root, reference)
            )
            tracker.advance(SPEC_WEIGHTS["colors"])
        for key, radius_group in radii.items():
            self._collect(radius_section, key, lambda: self.radius_sheet(radius_group, root))
            tracker.advance(SPEC_WEIGHTS["radius"])
        text_section.sheets.extend(
            self._text_sheets(list(texts.values()), root, reference, tracker)
        )

        populated = [section for section in sections if section.sheets]
        if not populated:
            msg = "No spec-able items found for the selected options."
            raise NothingToSpecError(msg)
        logger.info(
            "Generated %d spec sheets for %s",
            sum(len(section.sheets) for section in populated),
            root.name or root.id,
        )
        return SpecBook(
            source_name=root.name or root.id,
            origin=Point(reference.x, reference.bottom + BOOK_OFFSET_Y),
            sections=populated,
        )

    def layout_sheet(self, frame: FrameNode, root: BaseSceneNode) -> SpecSheet:
        container = require_bounds(root)
        key = f"layout:{frame.id}"
        cloned = clone_tree(root, scope=key)
        apply_focus_opacity(root, cloned, [frame])
        annotations = [
            *self.edge_markers.padding_annotations(frame, container),
            *self.edge_markers.item_spacing_annotations(frame, container),
        ]
        info = [InfoLine(f'Frame: "{frame.name}"'), InfoLine.spacer()]
        info.append(InfoLine("Layout Specs:", bold=True))
        info.extend(InfoLine(line) for line in _layout_spec_lines(frame))
        return SpecSheet(
            key=key,
            title=frame.name,
            category="layout",
            artwork=cloned,
            annotations=annotations,
            info=info,
            info_spacing=4.0,
        )

    def color_sheet(
        self, group: ColorGroup, root: BaseSceneNode, reference: BoundingBox
    ) -> SpecSheet:
        nodes = group.nodes()
        key = f"colors:{group.key}"
        cloned = clone_tree(root, scope=key)
        apply_focus_opacity(root, cloned, nodes)
        plan = self.callouts.route_numbered_legend(_callout_targets(nodes), reference)
        title = group.variable.name if group.variable is not None else group.key
        hex_value = color_to_hex(group.color)
        info = [
            InfoLine(title, bold=True),
            InfoLine(
                f"{hex_value}  •  {color_to_rgb_text(group.color)}",
                kind="swatch",
                color=hex_value,
            ),
            InfoLine.spacer(),
            InfoLine("Applied To:", bold=True),
            *_legend_lines(plan),
        ]
        return SpecSheet(
            key=key,
            title=title,
            category="colors",
            artwork=cloned,
            annotations=plan.primitives,
            info=info,
            visual_name=f"Visuals for Color: {title}",
        )

    def radius_sheet(self, group: RadiusGroup, root: BaseSceneNode) -> SpecSheet:
        focus = group.nodes[0]
        key = f"radius:{group.key}"
        cloned = clone_tree(root, scope=key)
        apply_focus_opacity(root, cloned, group.nodes)
        annotations = self.edge_markers.radius_annotations(focus)
        info = [
            InfoLine(f'Frame: "{focus.name}"'),
            InfoLine.spacer(),
            InfoLine("Radius Specs:", bold=True),
            *(InfoLine(line) for line in _radius_spec_lines(group)),
        ]
        others = [node for node in group.nodes if node.id != focus.id]
        if others:
            info.append(InfoLine.spacer())
            info.append(InfoLine(f"Also applied to {len(others)} other element(s):", bold=True))
            info.extend(InfoLine(f"• {node.name}") for node in others)
        if group.variable is not None:
            title = group.variable.name
        elif "\n" in group.key:
            title = focus.name
        else:
            title = group.key
        return SpecSheet(
            key=key,
            title=f"{title} Radii",
            category="radius",
            artwork=cloned,
            annotations=annotations,
            info=info,
            info_spacing=4.0,
        )

    def text_sheet(
        self, group: TextStyleGroup, root: BaseSceneNode, reference: BoundingBox
    ) -> SpecSheet:
        for node in group.nodes:
            for font in node.required_fonts():
                self.fonts.load(font)
        key = f"text:{group.key}"
        cloned = clone_tree(root, scope=key)
        apply_focus_opacity(root, cloned, group.nodes)
        plan = self.callouts.route_numbered_legend(_callout_targets(group.nodes), reference)
        info = [
            InfoLine(group.key, bold=True),
            InfoLine(group.description),
            InfoLine.spacer(),
            InfoLine("Applied To:", bold=True),
            *_legend_lines(plan),
        ]
        return SpecSheet(
            key=key,
            title=group.key,
            category="text",
            artwork=cloned,
            annotations=plan.primitives,
            info=info,
            visual_name=f"Visuals for Text: {group.key}",
        )

    def _text_sheets(
        self,
        groups: Sequence[TextStyleGroup],
        root: BaseSceneNode,
        reference: BoundingBox,
        tracker: _ProgressTracker,
    ) -> list[SpecSheet]:
        if not groups:
            return []
        # Each text sheet clones its own artwork and owns its router state.
        with ThreadPoolExecutor(max_workers=self.text_workers) as pool:
            futures = [
                pool.submit(self._try_build, group.key, self.text_sheet, group, root, reference)
                for group in groups
            ]
            for _ in as_completed(futures):
                tracker.advance(SPEC_WEIGHTS["text"])
            results = [future.result() for future in futures]
        return [sheet for sheet in results if sheet is not None]

    def _collect(self, section: SpecSection, key: str, build: Callable[[], SpecSheet]) -> None:
        sheet = self._try_build(key, build)
        if sheet is not None:
            section.sheets.append(sheet)

    def _try_build(self, key: str, build: Callable[..., T], *args: object) -> T | None:
        try:
            return build(*args)
        except FontUnavailableError as exc:
            logger.error(
                'Could not generate spec for "%s" because a required font failed to load: %s',
                key,
                exc.font_key,
            )
        except SpecSheetError:
            logger.exception('Skipping spec for "%s"', key)
        return None


def _callout_targets(nodes: Sequence[BaseSceneNode]) -> list[CalloutTarget]:
    return [
        CalloutTarget(id=node.id, bounds=require_bounds(node), label=node.name or node.id)
        for node in nodes
    ]


def _legend_lines(plan: CalloutPlan) -> list[InfoLine]:
    return [
        InfoLine(entry.target.label or entry.target.id, kind="legend", number=entry.number)
        for entry in sorted(plan.entries, key=lambda entry: entry.number)
    ]


def _variable_suffix(node: BaseSceneNode, prop: str) -> str:
    variable = node.bound_variables.get(prop)
    return f" ({variable.name})" if variable is not None else ""


def _layout_spec_lines(frame: FrameNode) -> list[str]:
    lines: list[str] = []
    paddings = (
        ("Top", "padding_top", frame.padding_top),
        ("Bottom", "padding_bottom", frame.padding_bottom),
        ("Left", "padding_left", frame.padding_left),
        ("Right", "padding_right", frame.padding_right),
    )
    for label, prop, value in paddings:
        if value > 0:
            lines.append(f"• {label} Padding: {format_px(value)}{_variable_suffix(frame, prop)}")
    if frame.item_spacing > 0 and len(frame.children) > 1:
        direction = "Vertical" if frame.layout_mode == "VERTICAL" else "Horizontal"
        if frame.primary_axis_align_items == "SPACE_BETWEEN":
            gap = "Auto"
        else:
            gap = f"{format_px(frame.item_spacing)}{_variable_suffix(frame, 'item_spacing')}"
        lines.append(f"• {direction} Gap: {gap}")
    return lines


def _radius_spec_lines(group: RadiusGroup) -> list[str]:
    variable = group.variable
    if variable is not None:
        if isinstance(variable.value, (int, float)):
            return [f"• All Corners: {format_number(variable.value)}px ({variable.name})"]
        return [f"• All Corners: {variable.value} ({variable.name})"]
    if "\n" in group.value:
        return [f"• {line}" for line in group.value.split("\n")]
    return [f"• All Corners: {group.value}"]
