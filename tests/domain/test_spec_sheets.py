from __future__ import annotations

import pytest

from adapters.fonts.font_registry import ConfiguredFontProvider
from adapters.layout.callouts import QuadrantCalloutRouter
from adapters.layout.edge_markers import EdgeMarkerAnnotator
from domain.errors import FontUnavailableError, InvalidSelectionError, NothingToSpecError
from domain.models import DIM_OPACITY, Point, RectangleNode
from domain.services.build_spec_sheets import (
    InfoLine,
    SpecOptions,
    SpecSheet,
    SpecSheetGenerator,
)
from tests.helpers.scene_fixtures import box, card_scene, solid


def _generator(strict_fonts: tuple[str, ...] | None = None) -> SpecSheetGenerator:
    fonts = ConfiguredFontProvider(
        available=strict_fonts or (), strict=strict_fonts is not None
    )
    return SpecSheetGenerator(
        callouts=QuadrantCalloutRouter(),
        edge_markers=EdgeMarkerAnnotator(),
        fonts=fonts,
        text_workers=2,
    )


def _texts(sheet: SpecSheet) -> list[str]:
    return [line.text for line in sheet.info]


def test_book_contains_sections_in_fixed_order() -> None:
    book = _generator().generate(card_scene())

    assert [section.title for section in book.sections] == ["Spacing", "Colors", "Radii", "Text"]
    assert [sheet.name for sheet in book.sections[0].sheets] == ["Card Spec"]
    assert [sheet.title for sheet in book.sections[1].sheets] == ["#FFFFFF", "#111111", "#0068FA"]
    assert [sheet.title for sheet in book.sections[2].sheets] == ["8px Radii", "4px Radii"]
    assert [sheet.title for sheet in book.sections[3].sheets] == [
        "Heading/H1",
        "Roboto Regular / 14px / Auto",
    ]
    assert book.origin == Point(0, 400)


def test_disabled_categories_are_omitted() -> None:
    book = _generator().generate(card_scene(), SpecOptions(layout=False, text=False))

    assert [section.title for section in book.sections] == ["Colors", "Radii"]


def test_layout_sheet_lists_padding_and_gap() -> None:
    book = _generator().generate(card_scene(), SpecOptions(colors=False, radius=False, text=False))
    (sheet,) = book.sheets()

    assert _texts(sheet)[0] == 'Frame: "Card"'
    assert "• Top Padding: 16px" in _texts(sheet)
    assert "• Right Padding: 16px" in _texts(sheet)
    assert "• Vertical Gap: 8px" in _texts(sheet)
    assert sheet.annotations


def test_color_sheet_numbers_its_legend_and_dims_the_rest() -> None:
    book = _generator().generate(card_scene(), SpecOptions(layout=False, radius=False, text=False))
    sheet = next(sheet for sheet in book.sheets() if sheet.title == "#111111")

    assert sheet.info[1] == InfoLine(
        "#111111  •  rgb(17, 17, 17)", kind="swatch", color="#111111"
    )
    legend = [line for line in sheet.info if line.kind == "legend"]
    assert [(line.number, line.text) for line in legend] == [(1, "Title"), (2, "Body")]
    assert sheet.artwork.by_original_id["title"].opacity == 1.0
    assert sheet.artwork.by_original_id["button"].opacity == DIM_OPACITY
    assert sheet.visual_name == "Visuals for Color: #111111"


def test_radius_sheet_mentions_other_elements() -> None:
    root = card_scene()
    root.append_child(
        RectangleNode(
            id="chip",
            name="Chip",
            bounds=box(200, 96, 60, 24),
            top_left_radius=4,
            top_right_radius=4,
            bottom_right_radius=4,
            bottom_left_radius=4,
        )
    )

    book = _generator().generate(root, SpecOptions(layout=False, colors=False, text=False))
    sheet = next(sheet for sheet in book.sheets() if sheet.title == "4px Radii")

    assert _texts(sheet)[0] == 'Frame: "Button"'
    assert "• All Corners: 4px" in _texts(sheet)
    assert "Also applied to 1 other element(s):" in _texts(sheet)
    assert "• Chip" in _texts(sheet)


def test_progress_reaches_one_hundred() -> None:
    reported: list[float] = []

    _generator().generate(card_scene(), progress=reported.append)

    assert reported == sorted(reported)
    assert reported[-1] == pytest.approx(100.0)


def test_non_container_root_is_rejected() -> None:
    with pytest.raises(InvalidSelectionError):
        _generator().generate(RectangleNode(id="lonely", bounds=box(0, 0, 10, 10)))


def test_nothing_to_spec() -> None:
    options = SpecOptions(layout=False, colors=False, radius=False, text=False)

    with pytest.raises(NothingToSpecError):
        _generator().generate(card_scene(), options)


def test_missing_base_font_aborts_run() -> None:
    with pytest.raises(FontUnavailableError):
        _generator(strict_fonts=("Roboto Regular",)).generate(card_scene())


def test_missing_text_font_skips_only_that_sheet() -> None:
    book = _generator(strict_fonts=("Inter Regular", "Inter Bold")).generate(card_scene())

    text_section = book.sections[-1]
    assert [sheet.title for sheet in text_section.sheets] == ["Heading/H1"]
    assert any(section.title == "Colors" for section in book.sections)


def test_target_without_geometry_skips_its_sheet() -> None:
    root = card_scene()
    root.append_child(RectangleNode(id="floating", name="Floating", fills=[solid("#ff00ff")]))

    book = _generator().generate(root, SpecOptions(layout=False, radius=False, text=False))

    titles = [sheet.title for sheet in book.sheets()]
    assert "#FF00FF" not in titles
    assert "#0068FA" in titles
