"""
Layout extractor — NormalizedNode tree → LayoutNode tree.

Resolves one LayoutMeta per node (type, gap, padding, alignment, sizing,
overflow), top-down: a node's own type is settled first and handed to
its children, whose fill sizing depends on the parent's axis.
"""

import logging
from typing import Optional

from .constraint_mapper import map_constraints
from .layout_detector import (
    calculate_column_gap,
    calculate_row_gap,
    detect_layout_type,
    round_half_up,
)
from .types import PROP_FIELDS, BoundingBox, LayoutMeta, LayoutNode, NormalizedNode, Padding, Sizing

logger = logging.getLogger(__name__)

CENTER_THRESHOLD = 10
END_LEADING_MIN = 20

MAIN_AXIS_ALIGN = {
    "MIN": "start",
    "MAX": "end",
    "CENTER": "center",
    "SPACE_BETWEEN": "space-between",
    "SPACE_AROUND": "space-around",
}

CROSS_AXIS_ALIGN = {
    "MIN": "start",
    "MAX": "end",
    "CENTER": "center",
    "BASELINE": "baseline",
    "STRETCH": "stretch",
}

FLOW_TYPES = ("row", "column")


def normalize_main_axis_align(value: Optional[str]) -> str:
    return MAIN_AXIS_ALIGN.get(value, "start")


def normalize_cross_axis_align(value: Optional[str]) -> str:
    return CROSS_AXIS_ALIGN.get(value, "start")


def infer_padding(container: NormalizedNode, children: list) -> Padding:
    if not children:
        return Padding()
    box = container.bounding_box
    min_x = min(c.bounding_box.x for c in children)
    min_y = min(c.bounding_box.y for c in children)
    max_x = max(c.bounding_box.right for c in children)
    max_y = max(c.bounding_box.bottom for c in children)
    return Padding(
        top=max(0, round_half_up(min_y - box.y)),
        right=max(0, round_half_up(box.right - max_x)),
        bottom=max(0, round_half_up(box.bottom - max_y)),
        left=max(0, round_half_up(min_x - box.x)),
    )


def _classify_offsets(leading: float, trailing: float) -> str:
    if abs(leading - trailing) < CENTER_THRESHOLD:
        return "center"
    if trailing < CENTER_THRESHOLD and leading > END_LEADING_MIN:
        return "end"
    return "start"


def infer_main_axis_align(container: NormalizedNode, children: list, layout_type: str) -> str:
    """Leading offset of the first child vs trailing offset of the last one."""
    if not children:
        return "start"
    box = container.bounding_box
    if layout_type == "row":
        ordered = sorted(children, key=lambda c: c.bounding_box.x)
        leading = ordered[0].bounding_box.x - box.x
        trailing = box.right - ordered[-1].bounding_box.right
    else:
        ordered = sorted(children, key=lambda c: c.bounding_box.y)
        leading = ordered[0].bounding_box.y - box.y
        trailing = box.bottom - ordered[-1].bounding_box.bottom
    return _classify_offsets(leading, trailing)


def infer_cross_axis_align(container: NormalizedNode, children: list, layout_type: str) -> str:
    """Same rule as the main axis, on offsets averaged over all children."""
    if not children:
        return "start"
    box = container.bounding_box
    count = len(children)
    if layout_type == "row":
        leading = sum(c.bounding_box.y - box.y for c in children) / count
        trailing = sum(box.bottom - c.bounding_box.bottom for c in children) / count
    else:
        leading = sum(c.bounding_box.x - box.x for c in children) / count
        trailing = sum(box.right - c.bounding_box.right for c in children) / count
    return _classify_offsets(leading, trailing)


def extract_sizing(node: NormalizedNode, parent_layout_type: Optional[str], own_type: str) -> Sizing:
    sizing = Sizing()

    # fill: relative to the parent's axes
    if node.layout_grow == 1:
        if parent_layout_type == "row":
            sizing.horizontal = "fill"
        elif parent_layout_type == "column":
            sizing.vertical = "fill"
    if node.layout_align == "STRETCH":
        if parent_layout_type == "row":
            sizing.vertical = "fill"
        elif parent_layout_type == "column":
            sizing.horizontal = "fill"

    # hug: relative to the node's own axes
    if node.auto_layout is not None:
        own_mode = node.auto_layout.mode
    else:
        own_mode = "horizontal" if own_type == "row" else "vertical"
    if node.primary_axis_sizing_mode == "AUTO":
        if own_mode == "horizontal":
            sizing.horizontal = "hug"
        else:
            sizing.vertical = "hug"
    if node.counter_axis_sizing_mode == "AUTO":
        if own_mode == "horizontal":
            sizing.vertical = "hug"
        else:
            sizing.horizontal = "hug"
    return sizing


def _overflow(node: NormalizedNode) -> Optional[str]:
    if node.overflow_direction and node.overflow_direction != "NONE":
        return "scroll"
    return None


def extract_layout_meta(node: NormalizedNode, parent_layout_type: Optional[str]) -> LayoutMeta:
    layout_type = detect_layout_type(node)
    sizing = extract_sizing(node, parent_layout_type, layout_type)

    explicit = node.auto_layout
    if explicit is not None:
        return LayoutMeta(
            type=layout_type,
            gap=explicit.gap,
            padding=Padding(*explicit.padding.values()),
            main_align=normalize_main_axis_align(explicit.main_axis_align),
            cross_align=normalize_cross_axis_align(explicit.cross_axis_align),
            sizing=sizing,
            overflow=_overflow(node),
        )

    gap = 0
    if layout_type == "row":
        gap = calculate_row_gap(node.children)
    elif layout_type == "column":
        gap = calculate_column_gap(node.children)

    main_align = cross_align = "start"
    if layout_type in FLOW_TYPES:
        main_align = infer_main_axis_align(node, node.children, layout_type)
        cross_align = infer_cross_axis_align(node, node.children, layout_type)

    return LayoutMeta(
        type=layout_type,
        gap=gap,
        padding=infer_padding(node, node.children),
        main_align=main_align,
        cross_align=cross_align,
        sizing=sizing,
        overflow=_overflow(node),
    )


def is_absolutely_positioned(node: NormalizedNode, parent_layout_type: Optional[str]) -> bool:
    if parent_layout_type is None:
        return False
    return node.layout_positioning == "ABSOLUTE" or parent_layout_type not in FLOW_TYPES


def add_layout_info(
    node: NormalizedNode,
    parent_layout_type: Optional[str],
    parent_bounds: Optional[BoundingBox] = None,
) -> LayoutNode:
    """Resolve this node's layout, then recurse with it as the children's parent."""
    layout = extract_layout_meta(node, parent_layout_type)

    position = None
    if node.constraints is not None and is_absolutely_positioned(node, parent_layout_type):
        position = map_constraints(node, parent_bounds)

    children = [
        add_layout_info(child, layout.type, node.bounding_box)
        for child in node.children
    ]

    props = {name: getattr(node, name) for name in PROP_FIELDS}
    props["children"] = children
    logger.debug("layout %s %r → %s", node.id, node.name, layout.type)
    return LayoutNode(layout=layout, position=position, **props)
