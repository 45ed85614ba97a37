"""
Safe-area detection — OS chrome (status bar, home indicator, navigation
bar, safe-area guides) found by layer name or, for direct children of
the screen, by position and typical iOS dimensions.

The result carries the insets the chrome occupies and the ids of every
node inside it, which the normalizer then drops.
"""

import logging
from typing import Optional

from .types import BoundingBox, ChromeElement, RawNode, SafeAreaInsets, SafeAreaResult

logger = logging.getLogger(__name__)

DEFAULT_SCREEN = BoundingBox(0, 0, 375, 812)

STATUS_BAR_MIN_HEIGHT = 20 - 2
STATUS_BAR_MAX_HEIGHT = 59 + 5
HOME_INDICATOR_MIN_HEIGHT = 30
HOME_INDICATOR_MAX_HEIGHT = 40
FULL_WIDTH_MIN = 375 - 10
EDGE_TOLERANCE = 5


def _has_pair(lowered: str, first: str, second: str) -> bool:
    return first in lowered and second in lowered


def chrome_type_by_name(name: str) -> Optional[str]:
    lowered = (name or "").lower()
    if "statusbar" in lowered or _has_pair(lowered, "status", "bar"):
        return "status-bar"
    if "homeindicator" in lowered or _has_pair(lowered, "home", "indicator"):
        return "home-indicator"
    if "safearea" in lowered or _has_pair(lowered, "safe", "area"):
        return "safe-area"
    if lowered == "navbar" or _has_pair(lowered, "navigation", "bar"):
        return "navigation-bar"
    return None


def _full_width(box: BoundingBox) -> bool:
    return box.width >= FULL_WIDTH_MIN


def looks_like_status_bar(box: BoundingBox, screen: BoundingBox) -> bool:
    return (
        abs(box.y - screen.y) < EDGE_TOLERANCE
        and STATUS_BAR_MIN_HEIGHT <= box.height <= STATUS_BAR_MAX_HEIGHT
        and _full_width(box)
    )


def looks_like_home_indicator(box: BoundingBox, screen: BoundingBox) -> bool:
    return (
        abs(box.bottom - screen.bottom) < EDGE_TOLERANCE
        and HOME_INDICATOR_MIN_HEIGHT <= box.height <= HOME_INDICATOR_MAX_HEIGHT
        and _full_width(box)
    )


def collect_chrome_elements(root: RawNode, screen: BoundingBox) -> list:
    """Pre-order; the screen itself is never chrome. Chrome subtrees are not searched further."""
    found = []

    def visit(node: RawNode, depth: int) -> None:
        chrome_type = chrome_type_by_name(node.name)
        box = node.bounding_box
        if chrome_type is None and box is not None and depth == 1:
            if looks_like_status_bar(box, screen):
                chrome_type = "status-bar"
            elif looks_like_home_indicator(box, screen):
                chrome_type = "home-indicator"
        if chrome_type is not None and box is not None:
            found.append(ChromeElement(id=node.id, name=node.name, type=chrome_type, bounding_box=box))
            return
        for child in node.children:
            visit(child, depth + 1)

    for child in root.children:
        visit(child, 1)
    return found


def calculate_insets(elements: list, screen: BoundingBox) -> SafeAreaInsets:
    insets = SafeAreaInsets()
    for element in elements:
        box = element.bounding_box
        if element.type == "status-bar":
            insets.top = max(insets.top, box.bottom - screen.y)
        elif element.type in ("home-indicator", "navigation-bar"):
            insets.bottom = max(insets.bottom, screen.bottom - box.y)
        elif element.type == "safe-area":
            top = box.y - screen.y
            left = box.x - screen.x
            right = screen.right - box.right
            bottom = screen.bottom - box.bottom
            if top > 0:
                insets.top = max(insets.top, top)
            if bottom > 0:
                insets.bottom = max(insets.bottom, bottom)
            if left > 0:
                insets.left = max(insets.left, left)
            if right > 0:
                insets.right = max(insets.right, right)
    return insets


def _subtree_ids(node: RawNode, out: set) -> None:
    out.add(node.id)
    for child in node.children:
        _subtree_ids(child, out)


def detect_safe_area(root: RawNode) -> SafeAreaResult:
    screen = root.bounding_box or DEFAULT_SCREEN
    elements = collect_chrome_elements(root, screen)
    insets = calculate_insets(elements, screen)

    chrome_ids = {e.id for e in elements}
    exclude_ids: set = set()

    def mark(node: RawNode) -> None:
        if node.id in chrome_ids:
            _subtree_ids(node, exclude_ids)
            return
        for child in node.children:
            mark(child)

    for child in root.children:
        mark(child)

    if elements:
        logger.info(
            "safe area: %d chrome element(s), insets top=%s bottom=%s",
            len(elements), insets.top, insets.bottom,
        )
    return SafeAreaResult(
        insets=insets,
        chrome_elements=elements,
        exclude_ids=exclude_ids,
        has_safe_area_layout=bool(elements) or insets.top > 0 or insets.bottom > 0,
    )
