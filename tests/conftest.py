from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, FontSettings, SpecSettings


def _clear_specsheet_env() -> None:
    for key in list(os.environ):
        if key.startswith("SPECSHEET_"):
            os.environ.pop(key, None)


_clear_specsheet_env()


@pytest.fixture(autouse=True)
def clear_specsheet_env() -> Generator[None, None, None]:
    _clear_specsheet_env()
    yield
    _clear_specsheet_env()


@pytest.fixture
def spec_settings(tmp_path: Path) -> SpecSettings:
    return SpecSettings(output_dir=tmp_path / "specs", text_workers=2)


@pytest.fixture
def app_settings(spec_settings: SpecSettings) -> AppSettings:
    return AppSettings(specs=spec_settings, fonts=FontSettings())


@pytest.fixture
def app_settings_factory(app_settings: AppSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return app_settings.model_copy(update=overrides)

    return _factory
