"""
Modal overlay detection.

Looks for a full-screen scrim (a direct FRAME/GROUP child of the screen
covering it, with a semi-transparent solid fill) holding a sheet: a
frame pinned to the bottom with only its top corners rounded, pinned to
the top with only its bottom corners rounded, or named like a sheet and
pinned to either edge. Everything else on the screen is background.
"""

import logging
from typing import Optional

from .types import CornerRadii, ModalOverlayResult, RawNode, SolidFill

logger = logging.getLogger(__name__)

COVER_TOLERANCE = 2
EDGE_TOLERANCE = 5
MIN_CONTENT_HEIGHT = 50
SCRIM_MIN_ALPHA = 0.1
SCRIM_MAX_ALPHA = 0.8

SHEET_NAME_HINTS = ("sheet", "modal", "bottom", "drawer", "overlay")


def has_semi_transparent_fill(node: RawNode) -> bool:
    for fill in node.fills:
        if isinstance(fill, SolidFill):
            alpha = fill.opacity * fill.color.a
            if SCRIM_MIN_ALPHA < alpha < SCRIM_MAX_ALPHA:
                return True
    return False


def covers_parent(node: RawNode, parent: RawNode) -> bool:
    if node.bounding_box is None or parent.bounding_box is None:
        return False
    return (
        abs(node.bounding_box.width - parent.bounding_box.width) <= COVER_TOLERANCE
        and abs(node.bounding_box.height - parent.bounding_box.height) <= COVER_TOLERANCE
    )


def _corners(node: RawNode) -> Optional[list]:
    if isinstance(node.corner_radius, CornerRadii):
        return node.corner_radius.as_list()
    return None


def has_bottom_sheet_corners(node: RawNode) -> bool:
    corners = _corners(node)
    if corners is None:
        return False
    top_left, top_right, bottom_right, bottom_left = corners
    return top_left > 0 and top_right > 0 and bottom_right == 0 and bottom_left == 0


def has_top_sheet_corners(node: RawNode) -> bool:
    corners = _corners(node)
    if corners is None:
        return False
    top_left, top_right, bottom_right, bottom_left = corners
    return top_left == 0 and top_right == 0 and bottom_right > 0 and bottom_left > 0


def is_aligned_to_bottom(node: RawNode, parent: RawNode) -> bool:
    if node.bounding_box is None or parent.bounding_box is None:
        return False
    return abs(node.bounding_box.bottom - parent.bounding_box.bottom) <= EDGE_TOLERANCE


def is_aligned_to_top(node: RawNode, parent: RawNode) -> bool:
    if node.bounding_box is None or parent.bounding_box is None:
        return False
    return abs(node.bounding_box.y - parent.bounding_box.y) <= EDGE_TOLERANCE


def has_sheet_name(name: str) -> bool:
    lowered = (name or "").lower()
    return any(hint in lowered for hint in SHEET_NAME_HINTS)


def find_modal_content(overlay: RawNode) -> Optional[tuple]:
    """(content node, modal type) for the first sheet-like descendant."""
    for child in overlay.children:
        # grabbers and other small decorations
        if child.bounding_box is None or child.bounding_box.height < MIN_CONTENT_HEIGHT:
            continue
        if has_bottom_sheet_corners(child) and is_aligned_to_bottom(child, overlay):
            return child, "bottom-sheet"
        if has_top_sheet_corners(child) and is_aligned_to_top(child, overlay):
            return child, "top-sheet"
        if has_sheet_name(child.name):
            if is_aligned_to_bottom(child, overlay):
                return child, "bottom-sheet"
            if is_aligned_to_top(child, overlay):
                return child, "top-sheet"
        nested = find_modal_content(child)
        if nested is not None:
            return nested
    return None


def _subtree_ids(node: RawNode, out: list) -> None:
    out.append(node.id)
    for child in node.children:
        _subtree_ids(child, out)


def collect_background_ids(root: RawNode, overlay_id: str) -> list:
    ids = []
    for child in root.children:
        if child.id != overlay_id:
            _subtree_ids(child, ids)
    return ids


def detect_modal_overlay(root: RawNode) -> ModalOverlayResult:
    for child in root.children:
        if child.type not in ("FRAME", "GROUP"):
            continue
        if not covers_parent(child, root) or not has_semi_transparent_fill(child):
            continue
        found = find_modal_content(child)
        if found is None:
            continue
        content, modal_type = found
        logger.info("modal overlay %s → %s %r", child.id, modal_type, content.name)
        return ModalOverlayResult(
            has_modal_overlay=True,
            modal_type=modal_type,
            overlay_id=child.id,
            content_id=content.id,
            content_name=content.name,
            background_ids=collect_background_ids(root, child.id),
        )
    return ModalOverlayResult()


def extract_modal_content(root: RawNode, content_id: str) -> Optional[RawNode]:
    if root.id == content_id:
        return root
    for child in root.children:
        found = extract_modal_content(child, content_id)
        if found is not None:
            return found
    return None
