from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr, field_validator

CUSTOM_DATA_KEY = "specsheet"
DIM_OPACITY = 0.2
HIGHLIGHT_OPACITY = 0.3

PADDING_COLOR = "#bd4ff2"
GAP_COLOR = "#f2994a"
RADIUS_COLOR = "#bd4ff2"
LEGEND_COLOR = "#0068fa"
MARKER_TEXT_COLOR = "#ffffff"
SWATCH_STROKE_COLOR = "#333333"

Side = Literal["left", "right", "top", "bottom"]
SIDE_ORDER: tuple[Side, ...] = ("left", "right", "top", "bottom")


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


class Color(BaseModel):
    r: float = Field(..., ge=0.0, le=1.0)
    g: float = Field(..., ge=0.0, le=1.0)
    b: float = Field(..., ge=0.0, le=1.0)


class FontName(BaseModel):
    family: str
    style: str = "Regular"

    @property
    def key(self) -> str:
        return f"{self.family} {self.style}"


class LineHeight(BaseModel):
    unit: Literal["PIXELS", "PERCENT", "AUTO"] = "AUTO"
    value: Optional[float] = None


class TextStyleRef(BaseModel):
    name: str
    font: FontName
    font_size: float


class VariableRef(BaseModel):
    id: str
    name: str
    value: Union[float, str, None] = None
    text_style: Optional[TextStyleRef] = None


class Paint(BaseModel):
    type: str = "SOLID"
    color: Optional[Color] = None
    opacity: float = Field(1.0, ge=0.0, le=1.0)
    visible: bool = True
    bound_variable: Optional[VariableRef] = None


class BaseSceneNode(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    visible: bool = True
    bounds: Optional[BoundingBox] = None
    is_mask: bool = False
    bound_variables: Dict[str, VariableRef] = Field(default_factory=dict)

    _parent: Optional[BaseSceneNode] = PrivateAttr(default=None)

    @property
    def parent(self) -> Optional[BaseSceneNode]:
        return self._parent


class HasOpacity(BaseModel):
    opacity: float = Field(1.0, ge=0.0, le=1.0)


class HasPaints(BaseModel):
    fills: List[Paint] = Field(default_factory=list)
    strokes: List[Paint] = Field(default_factory=list)


class HasCornerRadii(BaseModel):
    top_left_radius: float = 0.0
    top_right_radius: float = 0.0
    bottom_right_radius: float = 0.0
    bottom_left_radius: float = 0.0

    def corner_radii(self) -> tuple[float, float, float, float]:
        return (
            self.top_left_radius,
            self.top_right_radius,
            self.bottom_right_radius,
            self.bottom_left_radius,
        )


class HasChildren(BaseModel):
    children: List[SceneNode] = Field(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        for child in self.children:
            child._parent = self

    def append_child(self, child: BaseSceneNode) -> None:
        child._parent = self
        self.children.append(child)


class FrameNode(BaseSceneNode, HasOpacity, HasPaints, HasCornerRadii, HasChildren):
    type: Literal["FRAME"] = "FRAME"
    layout_mode: Literal["NONE", "HORIZONTAL", "VERTICAL"] = "NONE"
    padding_top: float = 0.0
    padding_bottom: float = 0.0
    padding_left: float = 0.0
    padding_right: float = 0.0
    item_spacing: float = 0.0
    primary_axis_align_items: Literal["MIN", "MAX", "CENTER", "SPACE_BETWEEN"] = "MIN"


class GroupNode(BaseSceneNode, HasOpacity, HasChildren):
    type: Literal["GROUP"] = "GROUP"


class RectangleNode(BaseSceneNode, HasOpacity, HasPaints, HasCornerRadii):
    type: Literal["RECTANGLE"] = "RECTANGLE"


class EllipseNode(BaseSceneNode, HasOpacity, HasPaints):
    type: Literal["ELLIPSE"] = "ELLIPSE"


class VectorNode(BaseSceneNode, HasOpacity, HasPaints):
    type: Literal["VECTOR"] = "VECTOR"


class TextNode(BaseSceneNode, HasOpacity, HasPaints):
    type: Literal["TEXT"] = "TEXT"
    characters: str = ""
    font: Optional[FontName] = None
    segment_fonts: List[FontName] = Field(default_factory=list)
    font_size: Optional[float] = None
    line_height: LineHeight = Field(default_factory=LineHeight)
    text_style: Optional[TextStyleRef] = None

    def required_fonts(self) -> List[FontName]:
        if self.font is not None:
            return [self.font]
        return list(self.segment_fonts)


class SliceNode(BaseSceneNode):
    type: Literal["SLICE"] = "SLICE"


SceneNode = Annotated[
    Union[FrameNode, GroupNode, RectangleNode, EllipseNode, VectorNode, TextNode, SliceNode],
    Field(discriminator="type"),
]

HasChildren.model_rebuild()
FrameNode.model_rebuild()
GroupNode.model_rebuild()


class SceneDocument(BaseModel):
    name: str = "scene"
    root: SceneNode

    @field_validator("root", mode="after")
    @classmethod
    def ensure_unique_node_ids(cls, root: BaseSceneNode) -> BaseSceneNode:
        seen: set[str] = set()
        stack: List[BaseSceneNode] = [root]
        while stack:
            node = stack.pop()
            if node.id in seen:
                msg = f"Duplicate node id found: {node.id}"
                raise ValueError(msg)
            seen.add(node.id)
            if isinstance(node, HasChildren):
                stack.extend(node.children)
        return root


@dataclass(frozen=True)
class LinePrimitive:
    start: Point
    end: Point
    color: str
    role: str = "connector"


@dataclass(frozen=True)
class DotPrimitive:
    center: Point
    diameter: float
    color: str


@dataclass(frozen=True)
class ValueMarker:
    label: str
    color: str
    size: Size
    center: Point = Point(0.0, 0.0)
    shape: Literal["circle", "pill"] = "circle"
    text_color: str = MARKER_TEXT_COLOR
    number: int | None = None

    def centered_at(self, center: Point) -> ValueMarker:
        return replace(self, center=center)

    def with_top_left(self, x: float, y: float) -> ValueMarker:
        return replace(
            self, center=Point(x + self.size.width / 2, y + self.size.height / 2)
        )


@dataclass(frozen=True)
class HighlightRegion:
    bounds: BoundingBox
    color: str
    opacity: float = HIGHLIGHT_OPACITY
    corner_radii: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)


AnnotationPrimitive = Union[LinePrimitive, DotPrimitive, ValueMarker, HighlightRegion]


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": "specsheet",
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }


@dataclass(frozen=True)
class CalloutTarget:
    id: str
    bounds: BoundingBox
    label: str | None = None


@dataclass(frozen=True)
class Quadrants:
    top: List[CalloutTarget]
    bottom: List[CalloutTarget]
    left: List[CalloutTarget]
    right: List[CalloutTarget]

    def for_side(self, side: Side) -> List[CalloutTarget]:
        return getattr(self, side)


@dataclass(frozen=True)
class LegendEntry:
    number: int
    target: CalloutTarget
    side: Side


@dataclass(frozen=True)
class CalloutBatch:
    connectors: List[LinePrimitive] = field(default_factory=list)
    dots: List[DotPrimitive] = field(default_factory=list)
    markers: List[ValueMarker] = field(default_factory=list)
    entries: List[LegendEntry] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.connectors or self.dots or self.markers)


@dataclass(frozen=True)
class CalloutPlan:
    primitives: List[AnnotationPrimitive]
    entries: List[LegendEntry]
