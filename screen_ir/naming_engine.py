"""
命名引擎 — Figma 圖層名稱 → 識別字 / 樣式引用 / 組件名

優先順序：有意義的圖層名 → 內容樣式（price、date…）→ 型別前綴 + 短 id
"""

import re
from dataclasses import dataclass, field
from typing import Optional

# Figma 自動產生、不具語意的圖層名（Frame 1、Group 2、Vector…）
GENERIC_LAYER_NAME = re.compile(
    r"^(Frame|Group|Rectangle|Vector|Star|Ellipse|Line|Boolean|Union|Subtract"
    r"|Intersect|Exclude|Component|Instance)\s*\d*$",
    re.IGNORECASE,
)

GENERIC_FIGMA_PATTERNS = [
    re.compile(rf"^{word}\s*\d*$", re.IGNORECASE)
    for word in (
        "Frame", "Rectangle", "Ellipse", "Group", "Vector", "Line", "Polygon",
        "Star", "Text", "Component", "Instance", "Slice", "Union", "Subtract",
        "Intersect", "Exclude", "Image", "Shape", "Layer",
    )
]

_NOT_MEANINGFUL_PROP = [
    re.compile(r"^(text|element|container|frame|group|view|box|wrapper|row|column)_?\d*$", re.IGNORECASE),
    re.compile(r"^(Frame|Vector|Rectangle|Ellipse|Line|Star|Instance|Polygon|Boolean|Component|Group)\s*\d*$", re.IGNORECASE),
    re.compile(r"^(path|ellipse|union|subtract|intersect|vector|rectangle|line|polygon|star)\d*$", re.IGNORECASE),
    re.compile(r"^vector\d+(stroke|fill)?$", re.IGNORECASE),
    re.compile(r"^style\d+$", re.IGNORECASE),
    re.compile(r"^[a-zA-Z]$"),
    re.compile(r"^[0-9]+$"),
    re.compile(r"^(element|item|child|node)\d+$", re.IGNORECASE),
]

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


@dataclass
class NamingConfig:
    """命名引擎設定."""
    fallback_identifier: str = "element"
    digit_prefix: str = "style"
    component_prefix: str = "Component"
    container_prefix: str = "container"
    type_prefixes: dict = field(default_factory=lambda: {
        "TEXT": "text",
        "VECTOR": "icon",
    })
    generic_prop_names: list = field(default_factory=lambda: [
        "text", "element", "label", "frame", "group", "container",
        "view", "box", "wrapper", "row", "column",
    ])


def to_valid_identifier(name: str, config: Optional[NamingConfig] = None) -> str:
    """圖層名 → camelCase 識別字（'Product Card' → 'productCard'）."""
    cfg = config or NamingConfig()
    words = re.sub(r"[^a-zA-Z0-9]", " ", _CAMEL_BOUNDARY.sub(r"\1 \2", name or "")).split()
    if not words:
        return cfg.fallback_identifier
    ident = words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
    if ident[0].isdigit():
        return cfg.digit_prefix + ident
    return ident


def to_pascal_case(name: str, config: Optional[NamingConfig] = None) -> str:
    """圖層名 → PascalCase 組件名（'home screen' → 'HomeScreen'）."""
    cfg = config or NamingConfig()
    cleaned = re.sub(r"[^\w\s-]", "", name or "").strip()
    words = re.split(r"[\s\-_]+", _CAMEL_BOUNDARY.sub(r"\1 \2", cleaned))
    pascal = "".join(w[:1].upper() + w[1:].lower() for w in words if w)
    if not re.match(r"^[a-zA-Z]", pascal):
        return cfg.component_prefix + pascal
    return pascal


def is_generic_name(name: str) -> bool:
    return bool(GENERIC_LAYER_NAME.match(name or ""))


def is_generic_figma_name(name: str) -> bool:
    """空字串或 Figma 預設命名（Text 3、Layer 12…）."""
    trimmed = (name or "").strip()
    if not trimmed:
        return True
    return any(p.match(trimmed) for p in GENERIC_FIGMA_PATTERNS)


def is_meaningful_prop_name(name: str, config: Optional[NamingConfig] = None) -> bool:
    cfg = config or NamingConfig()
    if not name:
        return False
    if name.lower() in cfg.generic_prop_names:
        return False
    return not any(p.match(name) for p in _NOT_MEANINGFUL_PROP)


def strip_trailing_digits(name: str) -> str:
    """'Item 3' → 'Item'，用於重複兄弟節點分組."""
    return re.sub(r"[0-9]+$", "", name or "").strip()


class NamingEngine:
    """為 IR 節點產生穩定、可讀的樣式引用與組件名稱."""

    def __init__(self, config: Optional[NamingConfig] = None):
        self.config = config or NamingConfig()

    def style_ref(self, node) -> str:
        """有意義的圖層名 → camelCase；否則 `<前綴>_<短 id>`."""
        name = node.name or ""
        if name.strip() and not is_generic_name(name):
            ident = to_valid_identifier(name, self.config)
            if ident != self.config.fallback_identifier and not re.match(
                rf"^{self.config.digit_prefix}[0-9]+$", ident
            ):
                return ident

        safe_id = re.sub(r"[^a-zA-Z0-9]", "_", node.id)
        short_id = safe_id.split("_")[-1] or safe_id
        return f"{self._prefix_for(node)}_{short_id}"

    def _prefix_for(self, node) -> str:
        prefix = self.config.type_prefixes.get(node.type)
        if prefix:
            return prefix
        if node.children:
            return self.config.container_prefix
        return self.config.fallback_identifier

    def component_name(self, name: str) -> str:
        return to_pascal_case(name, self.config)

    def identifier(self, name: str) -> str:
        return to_valid_identifier(name, self.config)

    def text_prop_name(self, name: str, content_pattern: Optional[str]) -> Optional[str]:
        """文字節點的 prop 名稱：圖層名（若有語意）→ 內容樣式 → None."""
        if not is_generic_figma_name(name):
            ident = self.identifier(name)
            if is_meaningful_prop_name(ident, self.config):
                return ident
        return content_pattern

    def repeater_names(self, base_name: str) -> tuple[str, str, str]:
        """(項目組件名, 資料 prop 名, 樣式引用)."""
        ident = self.identifier(base_name)
        return (
            self.component_name(base_name),
            f"{ident.upper()}_DATA",
            f"style_{ident}_repeater",
        )


def preview_ir_tree(node, indent: int = 0) -> str:
    """除錯用：印出 IR 樹（語意型別 + 樣式引用）."""
    from .types import ButtonIR, ComponentIR, RepeaterIR, TextIR, ir_children

    prefix = "  " * indent
    label = f"{prefix}├─ {node.name}  [{node.semantic_type}]  .{node.style_ref}"
    if isinstance(node, TextIR):
        label += f"  \"{node.text[:40]}\""
        if node.content_pattern:
            label += f"  ({node.content_pattern})"
    elif isinstance(node, ButtonIR):
        label += f"  <{node.variant}: {node.label}>"
    elif isinstance(node, ComponentIR):
        label += f"  <{node.component_name}>"
    elif isinstance(node, RepeaterIR):
        label += f"  <{node.item_component_name} × {len(node.children)}>"
    lines = [label]
    for child in ir_children(node):
        lines.append(preview_ir_tree(child, indent + 1))
    return "\n".join(lines)
