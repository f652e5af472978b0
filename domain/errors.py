from __future__ import annotations


class SpecSheetError(Exception):
    """Base class for errors raised while generating spec sheets."""


class InvalidSelectionError(SpecSheetError):
    pass


class MissingGeometryError(SpecSheetError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node {node_id} has no resolvable bounding box")
        self.node_id = node_id


class FontUnavailableError(SpecSheetError):
    def __init__(self, font_key: str) -> None:
        super().__init__(f"Font is not available: {font_key}")
        self.font_key = font_key


class NothingToSpecError(SpecSheetError):
    pass


class SceneFormatError(SpecSheetError):
    """Raised when a scene file cannot be parsed into a scene document."""
