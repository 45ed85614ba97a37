"""
classifier.py — LayoutNode tree → semantic IR

Each node is matched against an ordered rule list (first match wins):

  Component → Text → Icon → Image → Button → Card → Container

Containers and cards additionally fold runs of look-alike siblings into
a Repeater whose first child is the item template.
"""

import logging
import re
from typing import Callable, Optional

from .content_patterns import detect_content_pattern
from .naming_engine import NamingEngine, strip_trailing_digits
from .types import (
    ButtonIR,
    CardIR,
    ComponentIR,
    ContainerIR,
    IconIR,
    ImageFill,
    ImageIR,
    IRNode,
    LayoutMeta,
    LayoutNode,
    RepeaterIR,
    SolidFill,
    TextIR,
    ir_children,
)

logger = logging.getLogger(__name__)

ICON_MIN_SIZE = 8
ICON_MAX_SIZE = 48
BUTTON_MAX_HEIGHT = 80
BUTTON_MIN_WIDTH = 40
CARD_MIN_SIZE = 60
REPEATER_MIN_RUN = 2

VECTOR_TYPES = ("VECTOR", "BOOLEAN_OPERATION", "STAR", "ELLIPSE", "REGULAR_POLYGON", "LINE")
ICON_PART_TYPES = ("VECTOR", "BOOLEAN_OPERATION", "LINE", "ELLIPSE", "REGULAR_POLYGON")

_BUTTON_NAME = re.compile(r"button|btn", re.IGNORECASE)


# ════════════════════════════════════════════════════════════
# Predicates
# ════════════════════════════════════════════════════════════

def is_component(node: LayoutNode) -> bool:
    return node.type in ("INSTANCE", "COMPONENT")


def is_text(node: LayoutNode) -> bool:
    return node.type == "TEXT" and bool(node.text)


def has_image_fill(node: LayoutNode) -> bool:
    return any(isinstance(f, ImageFill) for f in node.fills)


def is_image(node: LayoutNode) -> bool:
    return has_image_fill(node) or node.type in VECTOR_TYPES


def is_icon(node: LayoutNode, min_size: float = ICON_MIN_SIZE, max_size: float = ICON_MAX_SIZE) -> bool:
    if node.type not in VECTOR_TYPES and node.type not in ("FRAME", "GROUP") and not is_image(node):
        return False
    width, height = node.bounding_box.width, node.bounding_box.height
    if width > max_size or height > max_size or width < min_size or height < min_size:
        return False
    aspect = width / height
    if aspect < 0.5 or aspect > 2:
        return False
    if is_image(node):
        return True
    if node.type in ("FRAME", "GROUP") and node.children:
        return all(child.type in ICON_PART_TYPES for child in node.children)
    return False


def _text_child(node: LayoutNode) -> Optional[LayoutNode]:
    for child in node.children:
        if is_text(child):
            return child
    return None


def is_button(node: LayoutNode) -> bool:
    if not node.children or _text_child(node) is None:
        return False
    width, height = node.bounding_box.width, node.bounding_box.height
    if height > BUTTON_MAX_HEIGHT:
        return False
    if _BUTTON_NAME.search(node.name or ""):
        return True

    if not any(isinstance(f, SolidFill) for f in node.fills):
        return False
    if width < BUTTON_MIN_WIDTH or height <= 0:
        return False
    aspect = width / height
    # small square buttons (icon buttons) are fine
    if aspect < 1.5 and width < 60 and (aspect < 0.8 or aspect > 1.2):
        return False
    return True


def has_corner_radius(node: LayoutNode) -> bool:
    radius = node.corner_radius
    if radius is None:
        return False
    if isinstance(radius, (int, float)):
        return radius != 0
    return any(r != 0 for r in radius.as_list())


def is_card(node: LayoutNode) -> bool:
    if not node.children:
        return False
    has_shadow = any(getattr(e, "type", None) == "drop-shadow" for e in node.effects)
    treatments = sum([has_corner_radius(node), has_shadow, bool(node.fills)])
    if treatments < 2:
        return False
    return node.bounding_box.width >= CARD_MIN_SIZE and node.bounding_box.height >= CARD_MIN_SIZE


def infer_button_variant(node: LayoutNode) -> str:
    has_stroke = bool(node.strokes)
    has_solid_fill = any(isinstance(f, SolidFill) and f.opacity > 0.1 for f in node.fills)
    if has_stroke and not has_solid_fill:
        return "outline"
    if any(isinstance(f, SolidFill) and f.opacity < 0.2 for f in node.fills):
        return "ghost"
    return "primary"


# ════════════════════════════════════════════════════════════
# Classifier
# ════════════════════════════════════════════════════════════

class SemanticClassifier:
    """Walks a LayoutNode tree and produces the IR tree."""

    def __init__(self, naming_engine: Optional[NamingEngine] = None):
        self.namer = naming_engine or NamingEngine()
        self.rules: list[tuple[Callable[[LayoutNode], bool], Callable]] = [
            (is_component, self._build_component),
            (is_text, self._build_text),
            (is_icon, self._build_icon),
            (is_image, self._build_image),
            (is_button, self._build_button),
            (is_card, self._build_card),
        ]
        self._count = 0

    def recognize(self, root: LayoutNode) -> IRNode:
        self._count = 0
        ir = self.to_ir(root)
        logger.debug("classified %d nodes", self._count)
        return ir

    def to_ir(self, node: LayoutNode) -> IRNode:
        self._count += 1
        for predicate, build in self.rules:
            if predicate(node):
                return build(node)
        return self._build_container(node)

    def _base(self, node: LayoutNode) -> dict:
        return {
            "id": node.id,
            "name": node.name,
            "bounding_box": node.bounding_box,
            "style_ref": self.namer.style_ref(node),
        }

    # ─── Leaf variants ───

    def _build_text(self, node: LayoutNode) -> TextIR:
        pattern = detect_content_pattern(node.text)
        return TextIR(
            **self._base(node),
            text=node.text or "",
            prop_name=self.namer.text_prop_name(node.name, pattern),
            default_value=node.text or "",
            content_pattern=pattern,
        )

    def _build_icon(self, node: LayoutNode) -> IconIR:
        base = self._base(node)
        return IconIR(
            **base,
            icon_ref=base["style_ref"],
            size=max(node.bounding_box.width, node.bounding_box.height),
        )

    def _build_image(self, node: LayoutNode) -> ImageIR:
        image_ref = None
        for fill in node.fills:
            if isinstance(fill, ImageFill):
                image_ref = fill.image_ref
                break
        return ImageIR(**self._base(node), image_ref=image_ref)

    def _build_button(self, node: LayoutNode) -> ButtonIR:
        text_child = _text_child(node)
        icon_child = next((c for c in node.children if is_icon(c)), None)
        icon_ref = self.namer.style_ref(icon_child) if icon_child else None
        return ButtonIR(
            **self._base(node),
            label=text_child.text if text_child else "Button",
            variant=infer_button_variant(node),
            icon_ref=icon_ref,
            text_id=text_child.id if text_child else None,
            icon_id=icon_child.id if icon_child else None,
            text_style_ref=self.namer.style_ref(text_child) if text_child else None,
            icon_style_ref=icon_ref,
        )

    # ─── Parent variants ───

    def _build_container(self, node: LayoutNode) -> ContainerIR:
        return ContainerIR(
            **self._base(node),
            layout=node.layout,
            children=self._children_with_repeaters(node.children),
        )

    def _build_card(self, node: LayoutNode) -> CardIR:
        return CardIR(
            **self._base(node),
            layout=node.layout,
            children=self._children_with_repeaters(node.children),
        )

    def _build_component(self, node: LayoutNode) -> ComponentIR:
        children = [self.to_ir(child) for child in node.children]
        props = self._instance_props(node)
        props.update(extract_props(children, self.namer))
        return ComponentIR(
            **self._base(node),
            component_id=node.component_id or "unknown",
            component_name=self.namer.component_name(node.name),
            props=props,
            layout=node.layout,
            children=children,
        )

    def _instance_props(self, node: LayoutNode) -> dict:
        props = {}
        for raw_name, prop in node.component_properties.items():
            if prop.type not in ("TEXT", "BOOLEAN"):
                continue
            # Figma suffixes property names with "#<id>"
            name = self.namer.identifier(raw_name.split("#", 1)[0])
            kind = "boolean" if prop.type == "BOOLEAN" else "string"
            props[name] = {"type": kind, "value": prop.value, "defaultValue": prop.value}
        return props

    # ════════════════════════════════════════════════════════════
    # Repeaters
    # ════════════════════════════════════════════════════════════

    def _children_with_repeaters(self, children: list) -> list:
        if len(children) < REPEATER_MIN_RUN:
            return [self.to_ir(child) for child in children]

        result = []
        i = 0
        while i < len(children):
            run = repeat_run_length(children, i)
            if run >= REPEATER_MIN_RUN:
                result.append(self._build_repeater(children[i:i + run]))
                i += run
            else:
                result.append(self.to_ir(children[i]))
                i += 1
        return result

    def _build_repeater(self, items: list) -> RepeaterIR:
        first = items[0]
        base_name = strip_trailing_digits(first.name)
        item_component_name, data_prop_name, style_ref = self.namer.repeater_names(base_name)
        items_ir = [self.to_ir(item) for item in items]
        template = items_ir[0]
        layout = getattr(template, "layout", None)
        if layout is None:
            layout = LayoutMeta(type="column")
        logger.debug("repeater %r × %d", base_name, len(items))
        return RepeaterIR(
            id=f"repeater_{first.id}",
            name=f"{base_name} (Repeater)",
            bounding_box=first.bounding_box,
            style_ref=style_ref,
            item_component_name=item_component_name,
            data_prop_name=data_prop_name,
            layout=layout,
            children=items_ir,
        )


def repeat_run_length(children: list, start: int) -> int:
    """Length of the run of look-alike siblings beginning at ``start``."""
    current = children[start]
    base_name = strip_trailing_digits(current.name)
    count = 1
    while start + count < len(children):
        nxt = children[start + count]
        same_name = len(base_name) > 2 and base_name == strip_trailing_digits(nxt.name)
        same_component = bool(current.component_id) and current.component_id == nxt.component_id
        same_shape = current.type == nxt.type and len(current.children) == len(nxt.children)
        if not ((same_name or same_component) and same_shape):
            break
        count += 1
    return count


# ════════════════════════════════════════════════════════════
# Component props
# ════════════════════════════════════════════════════════════

def _semantic_prop_name(layer_name: str, namer: NamingEngine) -> str:
    lowered = layer_name.lower()
    if "title" in lowered or lowered in ("header", "headline"):
        return "title"
    if "description" in lowered or "subtitle" in lowered or "body" in lowered:
        return "description"
    if lowered in ("label", "placeholder"):
        return lowered
    if "price" in lowered:
        return "price"
    if "date" in lowered or "time" in lowered:
        return "dateTime"
    return namer.identifier(layer_name)


def extract_props(children: list, namer: NamingEngine) -> dict:
    """Text / image descendants of a component become its props (repeaters are not entered)."""
    props: dict = {}
    seen: dict = {}

    def register(node: IRNode, kind: str, value: str, fallback: str) -> None:
        layer_name = node.name or fallback
        key = (layer_name, kind, value)
        if key in seen:
            node.prop_name = seen[key]
            return
        base = _semantic_prop_name(layer_name, namer) if kind == "string" else namer.identifier(layer_name)
        final = base
        counter = 1
        while final in props and props[final]["value"] != value:
            final = f"{base}{counter}"
            counter += 1
        props.setdefault(final, {"type": kind, "value": value, "defaultValue": value})
        node.prop_name = final
        seen[key] = final

    def visit(node: IRNode) -> None:
        if isinstance(node, TextIR) and node.text:
            register(node, "string", node.text, "text")
            return
        if isinstance(node, ImageIR):
            register(node, "image", node.image_ref or "", "image")
            return
        if isinstance(node, RepeaterIR):
            return
        for child in ir_children(node):
            visit(child)

    for child in children:
        visit(child)
    return props


def recognize(node: LayoutNode, naming_engine: Optional[NamingEngine] = None) -> IRNode:
    return SemanticClassifier(naming_engine).recognize(node)
