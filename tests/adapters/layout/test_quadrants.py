from __future__ import annotations

import pytest

from adapters.layout.quadrants import classify_delta, classify_targets
from domain.models import BoundingBox, CalloutTarget


@pytest.mark.parametrize(
    ("dx", "dy", "expected"),
    [
        (50, 10, "right"),
        (-50, 10, "left"),
        (10, 50, "bottom"),
        (10, -50, "top"),
        (0, 0, "top"),
        (30, 30, "bottom"),
        (-30, -30, "top"),
    ],
)
def test_classify_delta(dx: float, dy: float, expected: str) -> None:
    assert classify_delta(dx, dy) == expected


def test_classify_targets_preserves_input_order_per_side() -> None:
    reference = BoundingBox(0, 0, 200, 200)
    targets = [
        CalloutTarget(id="far-right", bounds=BoundingBox(290, 140, 20, 20)),
        CalloutTarget(id="near-right", bounds=BoundingBox(240, 40, 20, 20)),
        CalloutTarget(id="above", bounds=BoundingBox(90, -60, 20, 20)),
    ]

    quadrants = classify_targets(targets, reference)

    assert [target.id for target in quadrants.right] == ["far-right", "near-right"]
    assert [target.id for target in quadrants.top] == ["above"]
    assert quadrants.left == []
    assert quadrants.bottom == []
