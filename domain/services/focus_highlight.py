from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from domain.models import DIM_OPACITY, BaseSceneNode, HasChildren, HasOpacity, HasPaints

logger = logging.getLogger(__name__)

CLONE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "specsheet-clone")


@dataclass
class ClonedTree:
    """A cloned subtree plus a side table from original node id to clone node."""

    root: BaseSceneNode
    by_original_id: dict[str, BaseSceneNode] = field(default_factory=dict)

    def counterpart(self, original: BaseSceneNode) -> BaseSceneNode | None:
        return self.by_original_id.get(original.id)

    @classmethod
    def from_parallel(cls, original: BaseSceneNode, clone_root: BaseSceneNode) -> ClonedTree:
        """Pair an externally produced clone with its original by child position.

        Pairing stops below any node whose child counts differ, so those
        subtrees have no counterpart and are left as cloned.
        """
        mapping: dict[str, BaseSceneNode] = {}
        stack: list[tuple[BaseSceneNode, BaseSceneNode]] = [(original, clone_root)]
        while stack:
            source, copy = stack.pop()
            mapping[source.id] = copy
            if not isinstance(source, HasChildren) or not isinstance(copy, HasChildren):
                continue
            if len(source.children) != len(copy.children):
                logger.warning(
                    "Clone shape mismatch under %s: %d original vs %d cloned children",
                    source.id,
                    len(source.children),
                    len(copy.children),
                )
                continue
            stack.extend(zip(source.children, copy.children))
        return cls(root=clone_root, by_original_id=mapping)


def clone_tree(root: BaseSceneNode, scope: str = "") -> ClonedTree:
    mapping: dict[str, BaseSceneNode] = {}

    def _clone(node: BaseSceneNode, parent: BaseSceneNode | None) -> BaseSceneNode:
        update: dict[str, object] = {"id": _clone_id(node.id, scope)}
        if isinstance(node, HasChildren):
            update["children"] = []
        if isinstance(node, HasPaints):
            update["fills"] = [paint.model_copy() for paint in node.fills]
            update["strokes"] = [paint.model_copy() for paint in node.strokes]
        copy = node.model_copy(update=update)
        copy._parent = parent
        mapping[node.id] = copy
        if isinstance(node, HasChildren) and isinstance(copy, HasChildren):
            for child in node.children:
                copy.append_child(_clone(child, copy))
        return copy

    return ClonedTree(root=_clone(root, None), by_original_id=mapping)


def compute_visible_ids(
    root: BaseSceneNode, focus_nodes: Iterable[BaseSceneNode]
) -> set[str]:
    visible: set[str] = set()
    for focus in focus_nodes:
        stack: list[BaseSceneNode] = [focus]
        while stack:
            node = stack.pop()
            visible.add(node.id)
            if isinstance(node, HasChildren):
                stack.extend(node.children)
        if focus.id == root.id:
            continue
        current = focus.parent
        while current is not None:
            visible.add(current.id)
            if current.id == root.id:
                break
            current = current.parent
    return visible


def dim_node(node: BaseSceneNode, opacity: float = DIM_OPACITY) -> None:
    if isinstance(node, HasOpacity):
        node.opacity = opacity
    if isinstance(node, HasPaints):
        node.fills = [paint.model_copy(update={"opacity": opacity}) for paint in node.fills]
        node.strokes = [paint.model_copy(update={"opacity": opacity}) for paint in node.strokes]


def dim_clone(
    original_root: BaseSceneNode,
    cloned: ClonedTree | BaseSceneNode,
    visible_ids: set[str],
) -> None:
    if not isinstance(cloned, ClonedTree):
        cloned = ClonedTree.from_parallel(original_root, cloned)

    def _walk(original: BaseSceneNode) -> None:
        copy = cloned.counterpart(original)
        if copy is None:
            return
        if original.id not in visible_ids:
            dim_node(copy)
            return
        if isinstance(original, HasChildren):
            for child in original.children:
                _walk(child)

    _walk(original_root)


def apply_focus_opacity(
    original_root: BaseSceneNode,
    cloned: ClonedTree,
    focus_nodes: Iterable[BaseSceneNode],
) -> set[str]:
    visible_ids = compute_visible_ids(original_root, focus_nodes)
    dim_clone(original_root, cloned, visible_ids)
    return visible_ids


def _clone_id(node_id: str, scope: str) -> str:
    return str(uuid.uuid5(CLONE_NAMESPACE, f"{scope}|{node_id}"))
