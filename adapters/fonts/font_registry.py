from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from domain.errors import FontUnavailableError
from domain.models import FontName
from domain.ports.fonts import FontProvider

logger = logging.getLogger(__name__)


class ConfiguredFontProvider(FontProvider):
    """Font availability driven by configuration.

    In strict mode only fonts listed in ``available`` (``"Family Style"``,
    case-insensitive) load; otherwise every font is accepted.
    """

    def __init__(self, available: Iterable[str] = (), strict: bool = False) -> None:
        self.available = {_normalize(name) for name in available if name.strip()}
        self.strict = strict
        self._loaded: set[str] = set()
        self._lock = threading.Lock()

    def load(self, font: FontName) -> None:
        key = font.key
        if self.strict and _normalize(key) not in self.available:
            logger.warning("Font %s is not in the configured font list", key)
            raise FontUnavailableError(key)
        with self._lock:
            self._loaded.add(key)

    @property
    def loaded(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._loaded)


def _normalize(name: str) -> str:
    return " ".join(name.split()).casefold()
