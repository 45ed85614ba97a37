"""
List detection — containers whose children are all alike.

A Container or Card with at least three children that share the first
child's structure and size (within 10 %) is reported as a ListHint.
Once a list is found its items are not searched for nested lists.
"""

import logging
import re

from .types import CardIR, ContainerIR, IRNode, ListHint, ir_children

logger = logging.getLogger(__name__)

MIN_LIST_ITEMS = 3
SIZE_TOLERANCE = 0.1
MIN_DIMENSION = 0.01

_ITEM_FALLBACK = {
    "Card": "CardItem",
    "Container": "ListItem",
    "Button": "ButtonItem",
}


def is_container_like(node: IRNode) -> bool:
    return isinstance(node, (ContainerIR, CardIR))


def has_similar_size(a: IRNode, b: IRNode) -> bool:
    wa = max(a.bounding_box.width, MIN_DIMENSION)
    wb = max(b.bounding_box.width, MIN_DIMENSION)
    ha = max(a.bounding_box.height, MIN_DIMENSION)
    hb = max(b.bounding_box.height, MIN_DIMENSION)
    return (
        abs(wa - wb) / max(wa, wb) <= SIZE_TOLERANCE
        and abs(ha - hb) / max(ha, hb) <= SIZE_TOLERANCE
    )


def has_same_structure(a: IRNode, b: IRNode) -> bool:
    """Same variant and, for containers, same child variants in order."""
    if a.semantic_type != b.semantic_type:
        return False
    if is_container_like(a) and is_container_like(b):
        if len(a.children) != len(b.children):
            return False
        return all(x.semantic_type == y.semantic_type for x, y in zip(a.children, b.children))
    return True


def short_hash(value: str) -> str:
    """4-char base-36 digest of an id (stable across runs)."""
    h = 0
    for char in value:
        h = ((h << 5) - h + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    h = abs(h)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while True:
        h, rem = divmod(h, 36)
        out = digits[rem] + out
        if h == 0:
            break
    return out[:4]


def infer_item_type(node: IRNode) -> str:
    name = re.sub(r"^[0-9]+", "", re.sub(r"[^a-zA-Z0-9]", "", node.name or ""))
    if len(name) >= 3:
        return name[0].upper() + name[1:] + "Item"
    prefix = _ITEM_FALLBACK.get(node.semantic_type, "Item")
    return f"{prefix}{short_hash(node.id)}"


def detect_list_in_container(container: IRNode):
    children = container.children
    if len(children) < MIN_LIST_ITEMS:
        return None
    first = children[0]
    if not all(has_same_structure(c, first) and has_similar_size(c, first) for c in children):
        return None
    return ListHint(
        container_id=container.id,
        item_ids=[c.id for c in children],
        orientation="horizontal" if container.layout.type == "row" else "vertical",
        item_type=infer_item_type(first),
    )


def detect_lists(root: IRNode) -> list:
    hints = []

    def visit(node: IRNode) -> None:
        if is_container_like(node):
            hint = detect_list_in_container(node)
            if hint is not None:
                hints.append(hint)
                return
        for child in ir_children(node):
            visit(child)

    visit(root)
    logger.debug("found %d list candidates", len(hints))
    return hints
