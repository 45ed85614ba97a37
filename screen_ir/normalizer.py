"""
Normalizer — RawNode tree → NormalizedNode tree.

Drops hidden layers, OS chrome (status bar, home indicator, ...),
design annotations and explicitly excluded ids, then unwraps GROUP
layers that only wrap a single child and carry no visual treatment.
"""

import logging
import re
from functools import lru_cache
from typing import Iterable, Optional

from .types import PROP_FIELDS, BoundingBox, NormalizedNode, RawNode

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERNS = [
    "*annotation*",
    "*measure*",
    "*measurement*",
    "*redline*",
    "*spec*",
    "*-guide",
    "*_guide",
]

OS_COMPONENT_PATTERNS = [
    # iOS status bar / home indicator
    "StatusBar",
    "Status Bar",
    "_StatusBar*",
    "*StatusBar*",
    "Home Indicator",
    "HomeIndicator",
    "*Home Indicator*",
    "*HomeIndicator*",
    # device overlays
    "iPhone*Overlay",
    "iPhone*Frame",
    "Device Frame",
    "Device Overlay",
    # Android system UI
    "Navigation Bar",
    "NavigationBar",
    "System Bar",
    "SystemBar",
    "*Device Chrome*",
    "*Safe Area*",
    "SafeArea",
]


class FilterReason:
    HIDDEN = "hidden"
    STATUS_BAR = "status-bar"
    HOME_INDICATOR = "home-indicator"
    OS_COMPONENT = "os-component"
    PATTERN_MATCH = "pattern-match"
    EXCLUDED = "excluded"


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> "re.Pattern":
    regex = re.escape(pattern.lower()).replace(r"\*", ".*")
    return re.compile(f"^{regex}$", re.DOTALL)


def matches_pattern(name: str, pattern: str) -> bool:
    """Wildcard match: ``*`` spans any run of characters, case-insensitive, anchored."""
    return bool(_compile_pattern(pattern).match((name or "").lower()))


def matches_any_pattern(name: str, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(name, p) for p in patterns)


def os_component_reason(name: str) -> Optional[str]:
    lowered = (name or "").lower()
    if "status" in lowered and "bar" in lowered:
        return FilterReason.STATUS_BAR
    if "home" in lowered and "indicator" in lowered:
        return FilterReason.HOME_INDICATOR
    if matches_any_pattern(name, OS_COMPONENT_PATTERNS):
        return FilterReason.OS_COMPONENT
    if "navigation" in lowered and "bar" in lowered:
        return FilterReason.OS_COMPONENT
    return None


def should_filter(
    node: RawNode,
    ignore_patterns: Optional[list] = None,
    exclude_ids: Optional[set] = None,
) -> Optional[str]:
    """FilterReason for the node, or None when it is kept."""
    if exclude_ids and node.id in exclude_ids:
        return FilterReason.EXCLUDED
    if node.visible is False:
        return FilterReason.HIDDEN
    reason = os_component_reason(node.name)
    if reason is not None:
        return reason
    patterns = DEFAULT_IGNORE_PATTERNS if ignore_patterns is None else ignore_patterns
    if matches_any_pattern(node.name, patterns):
        return FilterReason.PATTERN_MATCH
    return None


def _to_normalized(node: RawNode, children: list) -> NormalizedNode:
    props = {name: getattr(node, name) for name in PROP_FIELDS}
    props["bounding_box"] = node.bounding_box or BoundingBox()
    props["children"] = children
    props["fills"] = list(node.fills)
    props["strokes"] = list(node.strokes)
    props["effects"] = list(node.effects)
    props["component_properties"] = dict(node.component_properties)
    if node.opacity == 1:
        props["opacity"] = None
    return NormalizedNode(**props)


def filter_tree(
    root: RawNode,
    ignore_patterns: Optional[list] = None,
    exclude_ids: Optional[set] = None,
) -> Optional[NormalizedNode]:
    """Copy the tree without filtered nodes; None when the root itself is filtered."""
    reason = should_filter(root, ignore_patterns, exclude_ids)
    if reason is not None:
        logger.debug("filtered %s %r (%s)", root.id, root.name, reason)
        return None
    children = []
    for child in root.children:
        kept = filter_tree(child, ignore_patterns, exclude_ids)
        if kept is not None:
            children.append(kept)
    return _to_normalized(root, children)


def has_visual_treatment(node: NormalizedNode) -> bool:
    return bool(
        node.fills
        or node.strokes
        or node.effects
        or node.corner_radius is not None
        or (node.opacity is not None and node.opacity != 1)
    )


def is_useless_group(node: NormalizedNode) -> bool:
    return node.type == "GROUP" and len(node.children) == 1 and not has_visual_treatment(node)


def unwrap_useless_groups(node: NormalizedNode) -> NormalizedNode:
    """Bottom-up: replace each single-child, undecorated GROUP with its child."""
    node.children = [unwrap_useless_groups(child) for child in node.children]
    if is_useless_group(node):
        logger.debug("unwrapped group %s %r", node.id, node.name)
        return node.children[0]
    return node


def normalize_tree(
    root: RawNode,
    ignore_patterns: Optional[list] = None,
    exclude_ids: Optional[set] = None,
    unwrap_groups: bool = True,
) -> Optional[NormalizedNode]:
    normalized = filter_tree(root, ignore_patterns, exclude_ids)
    if normalized is None or not unwrap_groups:
        return normalized
    return unwrap_useless_groups(normalized)
