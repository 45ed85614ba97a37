"""
Layout-type detection from child geometry.

Explicit auto-layout wins; otherwise children are tested for overlap
(stack), then left-to-right flow (row), then top-to-bottom flow
(column). Anything else falls back to absolute positioning.
"""

import math

from .types import NormalizedNode

# Calibration constants, hand-tuned against real exports.
ALIGNMENT_THRESHOLD = 2
ALIGNMENT_SLACK = 20
STACK_OVERLAP_RATIO = 0.5


def round_half_up(value: float) -> int:
    """Round .5 towards +infinity (matches design-tool rounding, unlike ``round``)."""
    return int(math.floor(value + 0.5))


def _boxes(children: list) -> list:
    return [c.bounding_box for c in children]


def is_row_by_position(children: list) -> bool:
    if len(children) < 2:
        return False
    tops = [b.y for b in _boxes(children)]
    if max(tops) - min(tops) > ALIGNMENT_THRESHOLD + ALIGNMENT_SLACK:
        return False
    ordered = sorted(_boxes(children), key=lambda b: b.x)
    for prev, curr in zip(ordered, ordered[1:]):
        if curr.x < prev.right - ALIGNMENT_THRESHOLD:
            return False
    return True


def is_column_by_position(children: list) -> bool:
    if len(children) < 2:
        return False
    lefts = [b.x for b in _boxes(children)]
    if max(lefts) - min(lefts) > ALIGNMENT_THRESHOLD + ALIGNMENT_SLACK:
        return False
    ordered = sorted(_boxes(children), key=lambda b: b.y)
    for prev, curr in zip(ordered, ordered[1:]):
        if curr.y < prev.bottom - ALIGNMENT_THRESHOLD:
            return False
    return True


def overlap_area(a, b) -> float:
    dx = max(0, min(a.right, b.right) - max(a.x, b.x))
    dy = max(0, min(a.bottom, b.bottom) - max(a.y, b.y))
    return dx * dy


def is_stack_by_position(children: list) -> bool:
    """Any pair overlapping by more than half of the smaller child's area."""
    boxes = _boxes(children)
    for i, a in enumerate(boxes):
        for b in boxes[i + 1:]:
            if overlap_area(a, b) > min(a.area, b.area) * STACK_OVERLAP_RATIO:
                return True
    return False


def detect_layout_type(node: NormalizedNode) -> str:
    if node.auto_layout is not None:
        return "row" if node.auto_layout.mode == "horizontal" else "column"
    if not node.children:
        return "absolute"
    if len(node.children) == 1:
        return "column"
    if is_stack_by_position(node.children):
        return "stack"
    if is_row_by_position(node.children):
        return "row"
    if is_column_by_position(node.children):
        return "column"
    return "absolute"


def _mean_positive_gap(deltas: list) -> int:
    positive = [d for d in deltas if d > 0]
    if not positive:
        return 0
    return round_half_up(sum(positive) / len(positive))


def calculate_row_gap(children: list) -> int:
    if len(children) < 2:
        return 0
    ordered = sorted(_boxes(children), key=lambda b: b.x)
    return _mean_positive_gap([curr.x - prev.right for prev, curr in zip(ordered, ordered[1:])])


def calculate_column_gap(children: list) -> int:
    if len(children) < 2:
        return 0
    ordered = sorted(_boxes(children), key=lambda b: b.y)
    return _mean_positive_gap([curr.y - prev.bottom for prev, curr in zip(ordered, ordered[1:])])
