from __future__ import annotations

from adapters.fonts.font_registry import ConfiguredFontProvider
from adapters.layout.callouts import QuadrantCalloutRouter
from adapters.layout.edge_markers import EdgeMarkerAnnotator
from domain.models import CUSTOM_DATA_KEY, FrameNode, GroupNode, RectangleNode
from domain.services.build_spec_sheets import SpecBook, SpecOptions, SpecSheetGenerator
from domain.services.convert_spec_to_excalidraw import (
    SpecToExcalidrawConverter,
    effective_opacity,
)
from tests.helpers.scene_fixtures import box, card_scene, solid


def _generator() -> SpecSheetGenerator:
    return SpecSheetGenerator(
        callouts=QuadrantCalloutRouter(),
        edge_markers=EdgeMarkerAnnotator(),
        fonts=ConfiguredFontProvider(),
    )


def _book() -> SpecBook:
    return _generator().generate(card_scene())


def _meta(element: dict) -> dict:
    return element["customData"][CUSTOM_DATA_KEY]


def test_document_shape_and_master_container() -> None:
    book = _book()
    document = SpecToExcalidrawConverter().convert(book)
    payload = document.to_dict()

    assert payload["type"] == "excalidraw"
    assert payload["version"] == 2
    master = payload["elements"][0]
    assert _meta(master)["role"] == "master"
    assert (master["x"], master["y"]) == (book.origin.x, book.origin.y)
    ids = [element["id"] for element in payload["elements"]]
    assert len(ids) == len(set(ids))


def test_sections_and_sheet_titles_rendered() -> None:
    elements = SpecToExcalidrawConverter().convert(_book()).elements

    section_titles = [
        element["text"] for element in elements if _meta(element).get("role") == "section_title"
    ]
    sheet_titles = [
        element["text"] for element in elements if _meta(element).get("role") == "sheet_title"
    ]
    assert section_titles == ["Spacing", "Colors", "Radii", "Text"]
    assert "Card Spec" in sheet_titles
    assert "8px Radii Spec" in sheet_titles


def test_dimmed_nodes_render_with_compound_opacity() -> None:
    elements = SpecToExcalidrawConverter().convert(_book()).elements

    artwork = {
        _meta(element)["node_name"]: element
        for element in elements
        if _meta(element).get("sheet") == "#111111 Spec"
        and _meta(element).get("role") == "artwork"
    }
    assert artwork["Button"]["opacity"] == 4
    assert artwork["Title"]["opacity"] == 100
    assert artwork["Title"]["type"] == "text"
    assert artwork["Button"]["backgroundColor"] == "#0068fa"


def test_sheet_contents_sit_inside_their_sheet() -> None:
    elements = SpecToExcalidrawConverter().convert(_book()).elements

    sheets = {
        _meta(element)["sheet_key"]: element
        for element in elements
        if _meta(element).get("role") == "sheet"
    }
    for element in elements:
        meta = _meta(element)
        if meta.get("role") not in {"artwork", "info", "highlight"}:
            continue
        sheet = sheets[meta["sheet_key"]]
        assert element["x"] >= sheet["x"]
        assert element["y"] >= sheet["y"]
        assert element["x"] + element["width"] <= sheet["x"] + sheet["width"] + 1e-6
        assert element["y"] + element["height"] <= sheet["y"] + sheet["height"] + 1e-6


def test_legend_markers_carry_numbers() -> None:
    elements = SpecToExcalidrawConverter().convert(_book()).elements

    numbers = [
        _meta(element)["legend_number"]
        for element in elements
        if _meta(element).get("sheet") == "#111111 Spec"
        and _meta(element).get("role") == "marker"
        and element["type"] == "ellipse"
    ]
    assert sorted(numbers) == [1, 1, 2, 2]


def test_effective_opacity_multiplies_down_the_tree() -> None:
    group = GroupNode(id="g", opacity=0.5)
    rect = RectangleNode(id="r", opacity=0.5)

    assert effective_opacity(rect, effective_opacity(group)) == 0.25
    assert effective_opacity(RectangleNode(id="plain")) == 1.0


def test_same_named_layout_frames_get_distinct_elements() -> None:
    def button(node_id: str, x: float) -> FrameNode:
        return FrameNode(
            id=node_id,
            name="Button",
            bounds=box(x, 20, 120, 40),
            layout_mode="HORIZONTAL",
            padding_left=8,
            fills=[solid("#0068fa")],
        )

    root = FrameNode(
        id="root",
        name="Toolbar",
        bounds=box(0, 0, 320, 80),
        children=[button("save", 20), button("cancel", 180)],
    )
    options = SpecOptions(layout=True, colors=False, radius=False, text=False)
    book = _generator().generate(root, options)
    elements = SpecToExcalidrawConverter().convert(book).elements

    ids = [element["id"] for element in elements]
    assert len(ids) == len(set(ids))
    sheets = [element for element in elements if _meta(element).get("role") == "sheet"]
    assert [_meta(sheet)["sheet_key"] for sheet in sheets] == ["layout:save", "layout:cancel"]
    visual_groups = {
        _meta(element)["sheet_key"]: tuple(element["groupIds"])
        for element in elements
        if _meta(element).get("role") == "artwork"
    }
    assert visual_groups["layout:save"] != visual_groups["layout:cancel"]
