from __future__ import annotations

from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from app.cli import app
from domain.models import CUSTOM_DATA_KEY
from tests.helpers.scene_fixtures import card_payload

runner = CliRunner()


@pytest.fixture
def scene_path(tmp_path: Path) -> Path:
    path = tmp_path / "card.json"
    path.write_bytes(orjson.dumps(card_payload()))
    return path


def test_generate_writes_excalidraw_scene(tmp_path: Path, scene_path: Path) -> None:
    output = tmp_path / "out" / "card.specs.excalidraw"

    result = runner.invoke(app, ["generate", str(scene_path), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "Wrote" in result.output
    payload = orjson.loads(output.read_bytes())
    assert payload["type"] == "excalidraw"
    sections = {
        element["customData"][CUSTOM_DATA_KEY].get("section")
        for element in payload["elements"]
    }
    assert {"Spacing", "Colors", "Radii", "Text"} <= sections


def test_generate_defaults_to_configured_output_dir(
    tmp_path: Path, scene_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SPECSHEET_SPECS__OUTPUT_DIR", str(tmp_path / "specs"))

    result = runner.invoke(app, ["generate", str(scene_path), "--no-text"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "specs" / "card.specs.excalidraw").exists()


def test_generate_reports_nothing_to_spec(tmp_path: Path, scene_path: Path) -> None:
    args = [
        "generate",
        str(scene_path),
        "--output",
        str(tmp_path / "never.excalidraw"),
        "--no-layout",
        "--no-colors",
        "--no-radius",
        "--no-text",
    ]

    result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert "No spec-able items" in result.output
    assert not (tmp_path / "never.excalidraw").exists()


def test_generate_fails_when_base_font_is_missing(
    tmp_path: Path, scene_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SPECSHEET_FONTS__STRICT", "true")
    monkeypatch.setenv("SPECSHEET_FONTS__AVAILABLE", '["Roboto Regular"]')

    result = runner.invoke(
        app, ["generate", str(scene_path), "--output", str(tmp_path / "x.excalidraw")]
    )

    assert result.exit_code == 1
    assert "Inter Bold" in result.output


def test_generate_reports_unwritable_output(tmp_path: Path, scene_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    result = runner.invoke(
        app, ["generate", str(scene_path), "--output", str(blocker / "card.excalidraw")]
    )

    assert result.exit_code == 1
    assert "Wrote" not in result.output
    assert blocker.read_text(encoding="utf-8") == "not a directory"


def test_validate_accepts_scene(scene_path: Path) -> None:
    result = runner.invoke(app, ["validate", str(scene_path)])

    assert result.exit_code == 0, result.output
    assert "Valid scene" in result.output


def test_validate_rejects_broken_scene(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"root": {"type": "FRAME"}}', encoding="utf-8")

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Validation failed" in result.output
