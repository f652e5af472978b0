from __future__ import annotations

from collections.abc import Iterable

from domain.geometry import center_delta
from domain.models import BoundingBox, CalloutTarget, Quadrants, Side


def classify_delta(dx: float, dy: float) -> Side:
    # Diagonal and dead-center targets fall into the vertical buckets.
    if abs(dx) > abs(dy):
        return "right" if dx > 0 else "left"
    return "bottom" if dy > 0 else "top"


def classify_targets(targets: Iterable[CalloutTarget], reference: BoundingBox) -> Quadrants:
    buckets: dict[Side, list[CalloutTarget]] = {"top": [], "bottom": [], "left": [], "right": []}
    for target in targets:
        dx, dy = center_delta(target.bounds, reference)
        buckets[classify_delta(dx, dy)].append(target)
    return Quadrants(
        top=buckets["top"],
        bottom=buckets["bottom"],
        left=buckets["left"],
        right=buckets["right"],
    )
