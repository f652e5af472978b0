from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress

from app.config import AppSettings, load_settings
from app.wiring import (
    build_converter,
    build_generator,
    build_output_repository,
    build_scene_repository,
)
from domain.errors import SpecSheetError
from domain.models import HasChildren
from domain.services.build_spec_sheets import SpecOptions

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_settings_or_exit(config_path: Path | None) -> AppSettings:
    try:
        return load_settings(config_path)
    except (FileNotFoundError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("generate")
def generate(
    input_path: Path = typer.Argument(..., help="Scene JSON file to document."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Target .excalidraw file (defaults to specs.output_dir)."
    ),
    layout: bool = typer.Option(True, "--layout/--no-layout", help="Spacing sheets."),
    colors: bool = typer.Option(True, "--colors/--no-colors", help="Color sheets."),
    radius: bool = typer.Option(True, "--radius/--no-radius", help="Corner radius sheets."),
    text: bool = typer.Option(True, "--text/--no-text", help="Text style sheets."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file."),
) -> None:
    settings = _load_settings_or_exit(config)
    configured = settings.specs.to_options()
    options = SpecOptions(
        layout=configured.layout and layout,
        colors=configured.colors and colors,
        radius=configured.radius and radius,
        text=configured.text and text,
    )
    generator = build_generator(settings)
    converter = build_converter()
    target_path = output or settings.specs.output_dir / f"{input_path.stem}.specs.excalidraw"

    try:
        document = build_scene_repository().load(input_path)
        with Progress(console=console, transient=True) as progress:
            task = progress.add_task("Generating specs", total=100)
            book = generator.generate(
                document.root,
                options,
                progress=lambda percent: progress.update(task, completed=percent),
            )
        excalidraw = converter.convert(book)
        build_output_repository().save(excalidraw, target_path)
    except (SpecSheetError, OSError) as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc

    console.print(f"[green]Wrote[/] {target_path} ({len(book.sheets())} sheets)")


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Scene JSON file to validate."),
) -> None:
    try:
        document = build_scene_repository().load(input_path)
    except SpecSheetError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    if not isinstance(document.root, HasChildren):
        console.print(f"[yellow]Scene root cannot be documented:[/] {document.root.type}")
        raise typer.Exit(code=1)
    console.print(f"[green]Valid scene:[/] {input_path}")


if __name__ == "__main__":
    app()
