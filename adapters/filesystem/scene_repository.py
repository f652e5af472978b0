from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from filelock import FileLock
from pydantic import ValidationError

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.errors import SceneFormatError
from domain.models import ExcalidrawDocument, SceneDocument
from domain.ports.repositories import SceneRepository, SpecOutputRepository

logger = logging.getLogger(__name__)


class FileSystemSceneRepository(SceneRepository):
    def load(self, path: Path) -> SceneDocument:
        payload = self.load_raw(path)
        try:
            document = SceneDocument.model_validate(payload)
        except ValidationError as exc:
            msg = f"{path} is not a valid scene document:\n{exc}"
            raise SceneFormatError(msg) from exc
        logger.debug("Loaded scene %s from %s", document.name, path)
        return document

    def load_raw(self, path: Path) -> dict[str, Any]:
        if not path.is_file():
            msg = f"Scene file not found: {path}"
            raise SceneFormatError(msg)
        return load_json(path)


class FileSystemSpecOutputRepository(SpecOutputRepository):
    def save(self, document: ExcalidrawDocument, path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, document.to_dict())
        logger.info("Wrote %d elements to %s", len(document.elements), path)
