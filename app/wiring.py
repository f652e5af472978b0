from __future__ import annotations

from adapters.filesystem.scene_repository import (
    FileSystemSceneRepository,
    FileSystemSpecOutputRepository,
)
from adapters.fonts.font_registry import ConfiguredFontProvider
from adapters.layout.callouts import QuadrantCalloutRouter
from adapters.layout.edge_markers import EdgeMarkerAnnotator
from app.config import AppSettings
from domain.ports.fonts import FontProvider
from domain.ports.repositories import SceneRepository, SpecOutputRepository
from domain.services.build_spec_sheets import SpecSheetGenerator
from domain.services.convert_spec_to_excalidraw import SpecToExcalidrawConverter


def build_font_provider(settings: AppSettings) -> FontProvider:
    return ConfiguredFontProvider(
        available=settings.fonts.available,
        strict=settings.fonts.strict,
    )


def build_generator(settings: AppSettings) -> SpecSheetGenerator:
    return SpecSheetGenerator(
        callouts=QuadrantCalloutRouter(),
        edge_markers=EdgeMarkerAnnotator(),
        fonts=build_font_provider(settings),
        text_workers=settings.specs.text_workers,
    )


def build_converter() -> SpecToExcalidrawConverter:
    return SpecToExcalidrawConverter()


def build_scene_repository() -> SceneRepository:
    return FileSystemSceneRepository()


def build_output_repository() -> SpecOutputRepository:
    return FileSystemSpecOutputRepository()
