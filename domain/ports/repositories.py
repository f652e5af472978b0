from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import ExcalidrawDocument, SceneDocument


class SceneRepository(Protocol):
    def load(self, path: Path) -> SceneDocument: ...

    def load_raw(self, path: Path) -> dict: ...


class SpecOutputRepository(Protocol):
    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...
