"""
Style / token extraction.

Every IR node gets an ExtractedStyle (a plain camelCase dict) built from
its LayoutNode's paints, effects, typography, size, absolute position
and flex layout. Styles are registered in a StyleRegistry that
deduplicates by content hash, so identical content always shares one
name and no two names hold identical content. Design tokens are then
bucketed from the registered styles and the layout tree.
"""

import hashlib
import json
import logging
from typing import Optional

from .layout_detector import round_half_up
from .types import (
    BlurEffect,
    ButtonIR,
    CornerRadii,
    DesignTokens,
    GradientFill,
    IconIR,
    IRNode,
    LayoutNode,
    RepeaterIR,
    ShadowEffect,
    SolidFill,
    StylesBundle,
    ir_children,
)

logger = logging.getLogger(__name__)

JUSTIFY_CONTENT = {
    "center": "center",
    "end": "flex-end",
    "space-between": "space-between",
    "space-around": "space-around",
}

ALIGN_ITEMS = {
    "center": "center",
    "end": "flex-end",
    "stretch": "stretch",
    "baseline": "baseline",
}

SHADOW_KEYS = {
    "drop-shadow": "shadow",
    "inner-shadow": "innerShadow",
}

BLUR_KEYS = {
    "layer-blur": "blur",
    "background-blur": "backdropBlur",
}


def _clean(value):
    """Integral floats → int, recursively, so 10 and 10.0 hash alike."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clean(v) for v in value]
    return value


# ════════════════════════════════════════════════════════════
# Paint / effect → style fields
# ════════════════════════════════════════════════════════════

def fills_to_background(fills: list) -> dict:
    fill = next((f for f in fills if f.opacity > 0), None)
    if isinstance(fill, SolidFill):
        return {"backgroundColor": fill.color.resolve(fill.opacity)}
    if isinstance(fill, GradientFill):
        gradient = {
            "type": fill.gradient_type,
            "colors": [stop.color.resolve(fill.opacity) for stop in fill.stops],
            "positions": [stop.position for stop in fill.stops],
        }
        if fill.angle is not None:
            gradient["angle"] = fill.angle
        return {"backgroundGradient": gradient}
    return {}


def strokes_to_border(strokes: list) -> dict:
    if not strokes:
        return {}
    stroke = strokes[0]
    border = {"borderColor": stroke.color.resolve(stroke.opacity)}
    if stroke.weight:
        border["borderWidth"] = stroke.weight
    return border


def effects_to_style(effects: list) -> dict:
    """First effect of each kind wins."""
    style = {}
    for effect in effects:
        if isinstance(effect, ShadowEffect):
            key = SHADOW_KEYS.get(effect.type)
            if key and key not in style:
                style[key] = {
                    "color": effect.color.resolve(),
                    "offsetX": effect.offset_x,
                    "offsetY": effect.offset_y,
                    "blur": effect.radius,
                    "spread": effect.spread,
                }
        elif isinstance(effect, BlurEffect):
            key = BLUR_KEYS.get(effect.type)
            if key and key not in style:
                style[key] = effect.radius
    return style


def corner_radius_to_style(radius) -> Optional[object]:
    if radius is None:
        return None
    if isinstance(radius, CornerRadii):
        return radius.to_dict()
    return radius or None


def text_color(fills: list) -> str:
    for fill in fills:
        if isinstance(fill, SolidFill):
            return fill.color.resolve(fill.opacity)
    for fill in fills:
        if isinstance(fill, GradientFill) and fill.stops:
            return fill.stops[0].color.resolve(fill.opacity)
    return "#000000"


def typography_to_style(node: LayoutNode) -> Optional[dict]:
    if node.typography is None:
        return None
    typography = node.typography.to_dict()
    typography["color"] = text_color(node.fills)
    return typography


def layout_to_style(layout) -> dict:
    """Flex fields for row / column / stack layouts."""
    if layout is None or layout.type not in ("row", "column", "stack"):
        return {}
    style = {"flexDirection": "row" if layout.type == "row" else "column"}
    if layout.gap:
        style["gap"] = layout.gap
    if any(layout.padding.values()):
        style["padding"] = layout.padding.to_dict()
    if layout.main_align in JUSTIFY_CONTENT:
        style["justifyContent"] = JUSTIFY_CONTENT[layout.main_align]
    if layout.cross_align in ALIGN_ITEMS:
        style["alignItems"] = ALIGN_ITEMS[layout.cross_align]
    if layout.type == "row" and layout.sizing.horizontal == "fill":
        style["flex"] = 1
    if layout.type == "column" and layout.sizing.vertical == "fill":
        style["flex"] = 1
    return style


def extract_style(node: LayoutNode) -> dict:
    """ExtractedStyle for a single LayoutNode."""
    style = {}
    style.update(fills_to_background(node.fills))
    style.update(strokes_to_border(node.strokes))

    radius = corner_radius_to_style(node.corner_radius)
    if radius:
        style["borderRadius"] = radius

    style.update(effects_to_style(node.effects))

    typography = typography_to_style(node)
    if typography:
        style["typography"] = typography

    style["width"] = round_half_up(node.bounding_box.width)
    style["height"] = round_half_up(node.bounding_box.height)

    for key, value in (node.position or {}).items():
        if isinstance(value, (int, float)):
            value = round_half_up(value)
        style[key] = value

    if node.opacity is not None and node.opacity != 1:
        style["opacity"] = node.opacity

    layout = node.layout
    style.update(layout_to_style(layout))
    if layout is not None and layout.type in ("row", "column", "stack"):
        if layout.sizing.horizontal == "hug":
            style.pop("width", None)
        if layout.sizing.vertical == "hug":
            style.pop("height", None)
    return _clean(style)


# ════════════════════════════════════════════════════════════
# Registry (dedup)
# ════════════════════════════════════════════════════════════

def style_hash(style: dict) -> str:
    canonical = json.dumps(style, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


class StyleRegistry:
    """name → style, with one name per distinct content."""

    def __init__(self):
        self.styles: dict[str, dict] = {}
        self._names_by_hash: dict[str, str] = {}

    def register(self, preferred_name: str, style: dict) -> str:
        """Name the style is stored under (existing name on identical content)."""
        digest = style_hash(style)
        existing = self._names_by_hash.get(digest)
        if existing is not None:
            return existing
        name = preferred_name
        suffix = 2
        while name in self.styles:
            name = f"{preferred_name}_{suffix}"
            suffix += 1
        self.styles[name] = style
        self._names_by_hash[digest] = name
        return name

    def __contains__(self, name: str) -> bool:
        return name in self.styles

    def __len__(self) -> int:
        return len(self.styles)


# ════════════════════════════════════════════════════════════
# Tokens
# ════════════════════════════════════════════════════════════

def _next_key(table: dict, prefix: str) -> str:
    return f"{prefix}_{len(table)}"


def collect_colors(styles: dict) -> dict:
    colors = {}
    for style in styles.values():
        candidates = [
            style.get("backgroundColor"),
            style.get("borderColor"),
            (style.get("shadow") or {}).get("color"),
            (style.get("typography") or {}).get("color"),
        ]
        for color in candidates:
            if color and color not in colors.values():
                colors[_next_key(colors, "color")] = color
    return colors


def collect_spacing(layout_root: Optional[LayoutNode]) -> dict:
    values = set()

    def walk(node: LayoutNode) -> None:
        layout = node.layout
        if layout is not None:
            if layout.gap > 0:
                values.add(layout.gap)
            values.update(v for v in layout.padding.values() if v > 0)
        for child in node.children:
            walk(child)

    if layout_root is not None:
        walk(layout_root)
    return {f"spacing_{i}": _clean(v) for i, v in enumerate(sorted(values))}


def collect_radii(styles: dict) -> dict:
    values = set()
    for style in styles.values():
        radius = style.get("borderRadius")
        if isinstance(radius, dict):
            values.update(radius.values())
        elif isinstance(radius, (int, float)):
            values.add(radius)
    positive = sorted(v for v in values if v > 0)
    return {f"radius_{i}": v for i, v in enumerate(positive)}


def collect_typography(styles: dict) -> dict:
    typography = {}
    seen = set()
    for style in styles.values():
        typo = style.get("typography")
        if not typo:
            continue
        key = (typo.get("fontFamily"), typo.get("fontSize"), typo.get("fontWeight"))
        if key in seen:
            continue
        seen.add(key)
        entry = {"fontFamily": key[0], "fontSize": key[1], "fontWeight": key[2]}
        if typo.get("lineHeight") is not None:
            entry["lineHeight"] = typo["lineHeight"]
        typography[_next_key(typography, "text")] = entry
    return typography


def collect_shadows(styles: dict) -> dict:
    shadows = {}
    for style in styles.values():
        shadow = style.get("shadow")
        if shadow and shadow not in shadows.values():
            shadows[_next_key(shadows, "shadow")] = shadow
    return shadows


def extract_tokens(styles: dict, layout_root: Optional[LayoutNode] = None) -> DesignTokens:
    return DesignTokens(
        colors=collect_colors(styles),
        spacing=collect_spacing(layout_root),
        radii=collect_radii(styles),
        typography=collect_typography(styles),
        shadows=collect_shadows(styles),
    )


# ════════════════════════════════════════════════════════════
# IR walk
# ════════════════════════════════════════════════════════════

def index_layout_tree(root: LayoutNode) -> dict:
    nodes = {}
    stack = [root]
    while stack:
        node = stack.pop()
        nodes[node.id] = node
        stack.extend(node.children)
    return nodes


def extract_styles(
    ir: IRNode,
    layout_tree: LayoutNode,
    registry: Optional[StyleRegistry] = None,
) -> StylesBundle:
    """Register a style for every IR node (pre-order) and rewrite style refs to the registered names."""
    registry = registry if registry is not None else StyleRegistry()
    layout_nodes = index_layout_tree(layout_tree)

    def style_for(node_id: Optional[str]) -> dict:
        layout_node = layout_nodes.get(node_id)
        return extract_style(layout_node) if layout_node is not None else {}

    def walk(node: IRNode) -> None:
        if isinstance(node, RepeaterIR):
            style = _clean(layout_to_style(node.layout))
        else:
            style = style_for(node.id)
        node.style_ref = registry.register(node.style_ref, style)
        if isinstance(node, IconIR):
            node.icon_ref = node.style_ref

        if isinstance(node, ButtonIR):
            if node.text_style_ref and node.text_id:
                node.text_style_ref = registry.register(node.text_style_ref, style_for(node.text_id))
            if node.icon_style_ref and node.icon_id:
                node.icon_style_ref = registry.register(node.icon_style_ref, style_for(node.icon_id))
                node.icon_ref = node.icon_style_ref

        for child in ir_children(node):
            walk(child)

    walk(ir)
    logger.debug("registered %d styles", len(registry))
    return StylesBundle(
        styles=registry.styles,
        tokens=extract_tokens(registry.styles, layout_tree),
    )
