"""
Constraint mapper — Figma constraints → absolute position fields.

Offsets are relative to the immediate parent's bounding box. SCALE
constraints become percentage strings; stretch constraints pin both
edges and leave the extent as ``"auto"``.
"""

from typing import Optional

from .types import BoundingBox


def format_percent(value: float) -> str:
    """Two decimals, trailing zeros trimmed: 25.0 → '25%', 33.333 → '33.33%'."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return f"{text}%"


def _num(value: float):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _percent(offset: float, extent: float) -> str:
    if not extent:
        return format_percent(0)
    return format_percent(offset / extent * 100)


def _axis(constraint: str, offset: float, size: float, extent: float, near: str, far: str, dim: str) -> dict:
    trailing = extent - (offset + size)
    if constraint in ("RIGHT", "BOTTOM"):
        return {far: _num(trailing)}
    if constraint in ("LEFT_RIGHT", "TOP_BOTTOM"):
        return {near: _num(offset), far: _num(trailing), dim: "auto"}
    if constraint == "SCALE":
        return {near: _percent(offset, extent), dim: _percent(size, extent)}
    # LEFT / TOP / CENTER
    return {near: _num(offset)}


def map_constraints(node, parent_bounds: Optional[BoundingBox]) -> Optional[dict]:
    """Absolute-position style for ``node`` inside ``parent_bounds``; None without constraints or parent."""
    if node.constraints is None or node.bounding_box is None or parent_bounds is None:
        return None
    box = node.bounding_box
    position = {"position": "absolute"}
    position.update(_axis(
        node.constraints.horizontal, box.x - parent_bounds.x, box.width,
        parent_bounds.width, "left", "right", "width",
    ))
    position.update(_axis(
        node.constraints.vertical, box.y - parent_bounds.y, box.height,
        parent_bounds.height, "top", "bottom", "height",
    ))
    return position
