from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import (
    AnnotationPrimitive,
    BaseSceneNode,
    BoundingBox,
    CalloutPlan,
    CalloutTarget,
    FrameNode,
)


class CalloutLayout(Protocol):
    def route_numbered_legend(
        self, targets: Sequence[CalloutTarget], reference: BoundingBox
    ) -> CalloutPlan:
        ...


class EdgeMarkerLayout(Protocol):
    def padding_annotations(
        self, frame: FrameNode, container: BoundingBox
    ) -> list[AnnotationPrimitive]:
        ...

    def item_spacing_annotations(
        self, frame: FrameNode, container: BoundingBox
    ) -> list[AnnotationPrimitive]:
        ...

    def radius_annotations(self, node: BaseSceneNode) -> list[AnnotationPrimitive]:
        ...
