"""
Repetition detection — structurally identical subtrees anywhere in the IR.

Containers / cards (with children) and buttons are grouped by a
structural fingerprint; every group of two or more becomes a
ComponentHint listing the instances and how their text varies.
"""

import logging
import re

from .types import ButtonIR, CardIR, ComponentHint, ContainerIR, IRNode, TextIR, ir_children

logger = logging.getLogger(__name__)

MIN_OCCURRENCES = 2

_NAME_FALLBACK = {
    "Card": "CardComponent",
    "Container": "SectionComponent",
    "Button": "ActionButton",
}


def structural_fingerprint(node: IRNode) -> str:
    """``Type`` or ``Type:[child,child,...]`` for nodes with children."""
    children = ir_children(node)
    if not children:
        if isinstance(node, (ContainerIR, CardIR)):
            return f"{node.semantic_type}:[]"
        return node.semantic_type
    return f"{node.semantic_type}:[{','.join(structural_fingerprint(c) for c in children)}]"


def extract_variable_props(node: IRNode) -> dict:
    """Positional text content: ``text``, ``label``, ``child{i}_...``."""
    if isinstance(node, TextIR):
        return {"text": node.text}
    if isinstance(node, ButtonIR):
        return {"label": node.label}
    props = {}
    for index, child in enumerate(ir_children(node)):
        for key, value in extract_variable_props(child).items():
            props[f"child{index}_{key}"] = value
    return props


def component_name_for(node: IRNode) -> str:
    words = re.sub(r"[^a-zA-Z0-9]", " ", node.name or "").split()
    cleaned = "".join(w[:1].upper() + w[1:].lower() for w in words)
    if len(cleaned) >= 3:
        return cleaned
    return _NAME_FALLBACK.get(node.semantic_type, "ExtractedComponent")


def _is_candidate(node: IRNode) -> bool:
    if isinstance(node, (ContainerIR, CardIR)):
        return bool(node.children)
    return isinstance(node, ButtonIR)


def merge_props_variations(instances: list) -> dict:
    variations: dict[str, list] = {}
    for instance in instances:
        for key, value in extract_variable_props(instance).items():
            values = variations.setdefault(key, [])
            if value not in values:
                values.append(value)
    return variations


def detect_repetitions(root: IRNode) -> list:
    groups: dict[str, list] = {}

    def collect(node: IRNode) -> None:
        if _is_candidate(node):
            groups.setdefault(structural_fingerprint(node), []).append(node)
        for child in ir_children(node):
            collect(child)

    collect(root)

    hints = []
    for nodes in groups.values():
        if len(nodes) < MIN_OCCURRENCES:
            continue
        hints.append(ComponentHint(
            component_name=component_name_for(nodes[0]),
            instance_ids=[n.id for n in nodes],
            props_variations=merge_props_variations(nodes),
        ))
    logger.debug("found %d repeated structures", len(hints))
    return hints
