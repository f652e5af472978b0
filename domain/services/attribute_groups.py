from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Literal

from domain.formatting import color_to_hex, format_line_height, format_number, format_px
from domain.models import (
    BaseSceneNode,
    Color,
    FrameNode,
    HasChildren,
    HasCornerRadii,
    HasPaints,
    TextNode,
    TextStyleRef,
    VariableRef,
)

PaintProp = Literal["fills", "strokes"]
RADIUS_VARIABLE_KEYS = (
    "corner_radius",
    "top_left_radius",
    "top_right_radius",
    "bottom_left_radius",
    "bottom_right_radius",
)
MIXED_TEXT_STYLE = "Mixed Text Style"


@dataclass
class ColorUsage:
    node: BaseSceneNode
    props: set[str] = field(default_factory=set)


@dataclass
class ColorGroup:
    key: str
    color: Color
    variable: VariableRef | None = None
    elements: dict[str, ColorUsage] = field(default_factory=dict)

    def nodes(self) -> list[BaseSceneNode]:
        return [usage.node for usage in self.elements.values()]


@dataclass
class RadiusGroup:
    key: str
    value: str
    variable: VariableRef | None = None
    nodes: list[BaseSceneNode] = field(default_factory=list)


@dataclass
class TextStyleGroup:
    key: str
    description: str
    variable: VariableRef | None = None
    nodes: list[TextNode] = field(default_factory=list)


def iter_visible(nodes: Iterable[BaseSceneNode]) -> Iterator[BaseSceneNode]:
    """Pre-order walk that skips hidden nodes together with their subtrees."""
    for node in nodes:
        if not node.visible:
            continue
        yield node
        if isinstance(node, HasChildren):
            yield from iter_visible(node.children)


def is_layout_frame_to_spec(node: BaseSceneNode) -> bool:
    if not isinstance(node, FrameNode) or node.layout_mode == "NONE":
        return False
    has_padding = any(
        value > 0
        for value in (node.padding_top, node.padding_bottom, node.padding_left, node.padding_right)
    )
    has_gap = (
        node.item_spacing > 0
        and len(node.children) > 1
        and node.primary_axis_align_items != "SPACE_BETWEEN"
    )
    return has_padding or has_gap


def find_layout_frames(root: BaseSceneNode) -> list[FrameNode]:
    return [
        node
        for node in iter_visible([root])
        if isinstance(node, FrameNode) and is_layout_frame_to_spec(node)
    ]


def group_colors(root: BaseSceneNode) -> dict[str, ColorGroup]:
    groups: dict[str, ColorGroup] = {}
    for node in iter_visible([root]):
        if not isinstance(node, HasPaints):
            continue
        props: tuple[PaintProp, ...] = ("fills", "strokes")
        for prop in props:
            for paint in getattr(node, prop):
                if paint.type != "SOLID" or not paint.visible or paint.opacity <= 0:
                    continue
                if paint.color is None:
                    continue
                variable = paint.bound_variable
                key = variable.name if variable is not None else color_to_hex(paint.color)
                target = _color_focus_target(node)
                group = groups.setdefault(
                    key, ColorGroup(key=key, color=paint.color, variable=variable)
                )
                usage = group.elements.setdefault(target.id, ColorUsage(node=target))
                usage.props.add(prop)
    return groups


def radius_signature(node: BaseSceneNode) -> str | None:
    if not isinstance(node, HasCornerRadii):
        return None
    top_left, top_right, bottom_right, bottom_left = node.corner_radii()
    radii = (top_left, top_right, bottom_right, bottom_left)
    if all(value == 0 for value in radii):
        return None
    if all(value == top_left for value in radii):
        return format_px(top_left)
    return "\n".join(
        [
            f"Top-Left: {format_px(top_left)}",
            f"Top-Right: {format_px(top_right)}",
            f"Bottom-Right: {format_px(bottom_right)}",
            f"Bottom-Left: {format_px(bottom_left)}",
        ]
    )


def group_radii(root: BaseSceneNode) -> dict[str, RadiusGroup]:
    groups: dict[str, RadiusGroup] = {}
    for node in iter_visible([root]):
        variable = _radius_variable(node)
        signature = radius_signature(node)
        key = variable.name if variable is not None else signature
        if not key:
            continue
        group = groups.setdefault(
            key, RadiusGroup(key=key, value=signature or key, variable=variable)
        )
        group.nodes.append(node)
    return groups


def describe_text_style(style: TextStyleRef) -> str:
    return f"{style.font.family} {style.font.style} / {format_number(style.font_size)}px"


def text_style_key(node: TextNode) -> tuple[str, str, VariableRef | None]:
    variable = node.bound_variables.get("text_style")
    if variable is not None:
        if variable.text_style is not None:
            return variable.name, describe_text_style(variable.text_style), variable
        return variable.name, "Bound to variable (style not found)", variable
    if node.text_style is not None:
        return node.text_style.name, describe_text_style(node.text_style), None
    if node.font is not None and node.font_size is not None:
        description = (
            f"{node.font.family} {node.font.style} / {format_number(node.font_size)}px"
            f" / {format_line_height(node.line_height)}"
        )
        return description, description, None
    return MIXED_TEXT_STYLE, "Contains mixed text properties", None


def group_text_styles(root: BaseSceneNode) -> dict[str, TextStyleGroup]:
    groups: dict[str, TextStyleGroup] = {}
    for node in iter_visible([root]):
        if not isinstance(node, TextNode):
            continue
        key, description, variable = text_style_key(node)
        group = groups.setdefault(
            key, TextStyleGroup(key=key, description=description, variable=variable)
        )
        group.nodes.append(node)
    return groups


def _color_focus_target(node: BaseSceneNode) -> BaseSceneNode:
    # A masked shape is documented through the group that owns the mask.
    parent = node.parent
    if isinstance(parent, HasChildren) and any(child.is_mask for child in parent.children):
        return parent
    return node


def _radius_variable(node: BaseSceneNode) -> VariableRef | None:
    for key in RADIUS_VARIABLE_KEYS:
        variable = node.bound_variables.get(key)
        if variable is not None:
            return variable
    return None
