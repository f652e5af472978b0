from __future__ import annotations

from typing import Protocol

from domain.models import FontName


class FontProvider(Protocol):
    def load(self, font: FontName) -> None:
        """Make ``font`` available or raise ``FontUnavailableError``."""
        ...
