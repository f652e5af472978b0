from __future__ import annotations

from typing import Any

from domain.models import DIM_OPACITY, GroupNode, HasChildren, RectangleNode
from domain.services.focus_highlight import (
    ClonedTree,
    apply_focus_opacity,
    clone_tree,
    compute_visible_ids,
    dim_clone,
)
from tests.helpers.scene_fixtures import box, focus_tree, solid


def _find(root: HasChildren, node_id: str) -> Any:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.id == node_id:
            return node
        if isinstance(node, HasChildren):
            stack.extend(node.children)
    raise KeyError(node_id)


def test_visible_ids_cover_focus_subtree_and_ancestors() -> None:
    root = focus_tree()
    focus = _find(root, "A")

    assert compute_visible_ids(root, [focus]) == {"R", "A", "A1"}


def test_visible_ids_stop_at_declared_root() -> None:
    root = focus_tree()
    subroot = _find(root, "A")
    leaf = _find(root, "A1")

    visible = compute_visible_ids(subroot, [leaf])

    assert visible == {"A", "A1"}
    assert "R" not in visible


def test_visible_ids_for_root_focus_include_whole_tree() -> None:
    root = focus_tree()

    assert compute_visible_ids(root, [root]) == {"R", "A", "A1", "B"}


def test_clone_tree_maps_every_original_node() -> None:
    root = focus_tree()

    cloned = clone_tree(root, scope="sheet")

    assert set(cloned.by_original_id) == {"R", "A", "A1", "B"}
    assert cloned.root.id != root.id
    clone_a1 = cloned.counterpart(_find(root, "A1"))
    assert clone_a1 is not None
    assert clone_a1.parent is cloned.counterpart(_find(root, "A"))
    assert clone_a1.fills[0] is not _find(root, "A1").fills[0]


def test_dim_only_touches_unrelated_nodes() -> None:
    root = focus_tree()
    cloned = clone_tree(root)

    apply_focus_opacity(root, cloned, [_find(root, "A")])

    clone_b = cloned.by_original_id["B"]
    assert clone_b.opacity == DIM_OPACITY
    assert [paint.opacity for paint in clone_b.fills] == [DIM_OPACITY]
    assert [paint.opacity for paint in clone_b.strokes] == [DIM_OPACITY]
    for node_id in ("R", "A", "A1"):
        assert cloned.by_original_id[node_id].opacity == 1.0
    assert cloned.by_original_id["A1"].fills[0].opacity == 1.0


def test_dim_leaves_original_tree_untouched() -> None:
    root = focus_tree()
    cloned = clone_tree(root)

    apply_focus_opacity(root, cloned, [_find(root, "A")])

    original_b = _find(root, "B")
    assert original_b.opacity == 1.0
    assert original_b.fills[0].opacity == 1.0


def test_dim_is_idempotent() -> None:
    root = focus_tree()
    cloned = clone_tree(root)
    visible = compute_visible_ids(root, [_find(root, "A")])

    dim_clone(root, cloned, visible)
    first = {
        node_id: (node.opacity, [paint.opacity for paint in getattr(node, "fills", [])])
        for node_id, node in cloned.by_original_id.items()
    }
    dim_clone(root, cloned, visible)
    second = {
        node_id: (node.opacity, [paint.opacity for paint in getattr(node, "fills", [])])
        for node_id, node in cloned.by_original_id.items()
    }

    assert first == second


def test_dim_does_not_descend_into_dimmed_subtree() -> None:
    root = focus_tree()
    cloned = clone_tree(root)

    apply_focus_opacity(root, cloned, [_find(root, "B")])

    assert cloned.by_original_id["A"].opacity == DIM_OPACITY
    assert cloned.by_original_id["A1"].opacity == 1.0


def test_parallel_pairing_stops_at_child_count_mismatch() -> None:
    root = focus_tree()
    clone_root = clone_tree(root).root
    assert isinstance(clone_root, HasChildren)
    clone_group = clone_root.children[0]
    assert isinstance(clone_group, GroupNode)
    clone_group.append_child(
        RectangleNode(id="extra", bounds=box(0, 0, 1, 1), fills=[solid("#ffffff")])
    )

    cloned = ClonedTree.from_parallel(root, clone_root)

    assert "A" in cloned.by_original_id
    assert "A1" not in cloned.by_original_id
    dim_clone(root, clone_root, {"R", "A"})
    assert clone_group.children[0].opacity == 1.0
    assert clone_root.children[1].opacity == DIM_OPACITY
