"""
Core types for the Figma → screen IR lowering pipeline.

Raw / normalized / layout node shapes, the closed set of IR variants,
the styles bundle and the detector result records. Every record has a
``to_dict()`` that produces camelCase, JSON-ready output.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import ClassVar, Optional, Union


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(w[:1].upper() + w[1:] for w in rest)


def to_jsonable(value):
    """Recursively convert records / containers into plain JSON values."""
    if is_dataclass(value) and not isinstance(value, type):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value)
    return value


class _Record:
    """Mixin: dataclass → camelCase dict, ``None`` fields omitted."""

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[_camel(f.name)] = to_jsonable(value)
        return out


# ════════════════════════════════════════════════════════════
# Geometry & paint
# ════════════════════════════════════════════════════════════

@dataclass
class BoundingBox(_Record):
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass
class Padding(_Record):
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    def values(self) -> tuple:
        return (self.top, self.right, self.bottom, self.left)


@dataclass
class Color(_Record):
    """RGB in 0-255, alpha in 0-1."""
    r: int = 0
    g: int = 0
    b: int = 0
    a: float = 1.0

    def resolve(self, opacity: float = 1.0) -> str:
        """Uppercase hex with the paint opacity folded into alpha."""
        alpha = self.a * opacity
        base = f"#{self.r:02X}{self.g:02X}{self.b:02X}"
        if alpha >= 0.995:
            return base
        return f"{base}{int(alpha * 255 + 0.5):02X}"

    @property
    def hex(self) -> str:
        return self.resolve(1.0)


@dataclass
class SolidFill(_Record):
    color: Color = field(default_factory=Color)
    opacity: float = 1.0
    type: ClassVar[str] = "solid"

    def to_dict(self) -> dict:
        return {"type": self.type, **super().to_dict()}


@dataclass
class GradientStop(_Record):
    position: float = 0
    color: Color = field(default_factory=Color)


@dataclass
class GradientFill(_Record):
    gradient_type: str = "linear"
    stops: list = field(default_factory=list)
    opacity: float = 1.0
    angle: Optional[float] = None
    type: ClassVar[str] = "gradient"

    def to_dict(self) -> dict:
        return {"type": self.type, **super().to_dict()}


@dataclass
class ImageFill(_Record):
    image_ref: str = ""
    opacity: float = 1.0
    scale_mode: Optional[str] = None
    type: ClassVar[str] = "image"

    def to_dict(self) -> dict:
        return {"type": self.type, **super().to_dict()}


Fill = Union[SolidFill, GradientFill, ImageFill]


@dataclass
class Stroke(_Record):
    color: Color = field(default_factory=Color)
    weight: float = 1
    opacity: float = 1.0
    align: str = "inside"


@dataclass
class ShadowEffect(_Record):
    type: str = "drop-shadow"  # drop-shadow | inner-shadow
    color: Color = field(default_factory=Color)
    offset_x: float = 0
    offset_y: float = 0
    radius: float = 0
    spread: float = 0


@dataclass
class BlurEffect(_Record):
    type: str = "layer-blur"  # layer-blur | background-blur
    radius: float = 0


Effect = Union[ShadowEffect, BlurEffect]


@dataclass
class CornerRadii(_Record):
    top_left: float = 0
    top_right: float = 0
    bottom_right: float = 0
    bottom_left: float = 0

    def as_list(self) -> list:
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]


CornerRadius = Union[float, int, CornerRadii]


@dataclass
class Typography(_Record):
    font_family: str = "System"
    font_size: float = 14
    font_weight: float = 400
    line_height: Optional[float] = None
    letter_spacing: float = 0
    text_align: str = "left"
    text_decoration: Optional[str] = None
    text_transform: Optional[str] = None


@dataclass
class AutoLayout(_Record):
    """Explicit auto-layout metadata declared on a frame."""
    mode: str = "vertical"  # horizontal | vertical
    gap: float = 0
    padding: Padding = field(default_factory=Padding)
    main_axis_align: str = "MIN"
    cross_axis_align: str = "MIN"
    wrap: bool = False


@dataclass
class Constraints(_Record):
    horizontal: str = "LEFT"
    vertical: str = "TOP"


@dataclass
class ComponentProperty(_Record):
    type: str = "TEXT"  # VARIANT | TEXT | BOOLEAN | INSTANCE_SWAP
    value: Union[str, bool, None] = None
    options: Optional[list] = None


# ════════════════════════════════════════════════════════════
# Node trees
# ════════════════════════════════════════════════════════════

@dataclass
class NodeProps(_Record):
    """Visual / layout properties shared by raw, normalized and layout nodes."""
    id: str
    name: str
    type: str
    bounding_box: Optional[BoundingBox] = None
    children: list = field(default_factory=list)
    fills: list = field(default_factory=list)
    strokes: list = field(default_factory=list)
    effects: list = field(default_factory=list)
    corner_radius: Optional[CornerRadius] = None
    opacity: Optional[float] = None
    text: Optional[str] = None
    typography: Optional[Typography] = None
    auto_layout: Optional[AutoLayout] = None
    primary_axis_sizing_mode: Optional[str] = None
    counter_axis_sizing_mode: Optional[str] = None
    layout_align: Optional[str] = None
    layout_grow: Optional[float] = None
    layout_positioning: Optional[str] = None
    constraints: Optional[Constraints] = None
    overflow_direction: Optional[str] = None
    component_id: Optional[str] = None
    component_properties: dict = field(default_factory=dict)


PROP_FIELDS = tuple(f.name for f in fields(NodeProps))


@dataclass
class RawNode(NodeProps):
    """Design-tool node as delivered by the caller. Treated as immutable."""
    visible: bool = True


@dataclass
class NormalizedNode(NodeProps):
    """Pruned copy of a RawNode: visible, not ignored, children normalized."""


@dataclass
class Sizing(_Record):
    horizontal: str = "fixed"  # fixed | fill | hug
    vertical: str = "fixed"


@dataclass
class LayoutMeta(_Record):
    type: str = "absolute"  # row | column | stack | absolute
    gap: float = 0
    padding: Padding = field(default_factory=Padding)
    main_align: str = "start"
    cross_align: str = "start"
    sizing: Sizing = field(default_factory=Sizing)
    overflow: Optional[str] = None


@dataclass
class LayoutNode(NormalizedNode):
    """NormalizedNode with resolved layout (and absolute position, if any)."""
    layout: LayoutMeta = field(default_factory=LayoutMeta)
    position: Optional[dict] = None


# ════════════════════════════════════════════════════════════
# Semantic IR (closed variant set)
# ════════════════════════════════════════════════════════════

@dataclass
class IRNode(_Record):
    id: str
    name: str
    bounding_box: BoundingBox
    style_ref: str
    semantic_type: ClassVar[str] = ""

    def to_dict(self) -> dict:
        return {"semanticType": self.semantic_type, **super().to_dict()}


@dataclass
class ContainerIR(IRNode):
    layout: LayoutMeta = field(default_factory=LayoutMeta)
    children: list = field(default_factory=list)
    semantic_type: ClassVar[str] = "Container"


@dataclass
class TextIR(IRNode):
    text: str = ""
    prop_name: Optional[str] = None
    default_value: Optional[str] = None
    content_pattern: Optional[str] = None
    semantic_type: ClassVar[str] = "Text"


@dataclass
class ImageIR(IRNode):
    image_ref: Optional[str] = None
    prop_name: Optional[str] = None
    semantic_type: ClassVar[str] = "Image"


@dataclass
class IconIR(IRNode):
    icon_ref: str = ""
    size: float = 0
    semantic_type: ClassVar[str] = "Icon"


@dataclass
class ButtonIR(IRNode):
    label: str = "Button"
    variant: str = "primary"  # primary | secondary | outline | ghost
    icon_ref: Optional[str] = None
    text_id: Optional[str] = None
    icon_id: Optional[str] = None
    text_style_ref: Optional[str] = None
    icon_style_ref: Optional[str] = None
    semantic_type: ClassVar[str] = "Button"


@dataclass
class CardIR(IRNode):
    layout: LayoutMeta = field(default_factory=LayoutMeta)
    children: list = field(default_factory=list)
    semantic_type: ClassVar[str] = "Card"


@dataclass
class ComponentIR(IRNode):
    component_id: str = "unknown"
    component_name: str = "Component"
    props: dict = field(default_factory=dict)
    layout: LayoutMeta = field(default_factory=LayoutMeta)
    children: list = field(default_factory=list)
    semantic_type: ClassVar[str] = "Component"


@dataclass
class RepeaterIR(IRNode):
    """Run of structurally identical siblings; children[0] is the item template."""
    item_component_name: str = "Item"
    data_prop_name: str = "ITEM_DATA"
    layout: LayoutMeta = field(default_factory=LayoutMeta)
    children: list = field(default_factory=list)
    semantic_type: ClassVar[str] = "Repeater"


IR_VARIANTS = (ContainerIR, TextIR, ImageIR, IconIR, ButtonIR, CardIR, ComponentIR, RepeaterIR)
_PARENT_VARIANTS = (ContainerIR, CardIR, ComponentIR, RepeaterIR)
_LEAF_VARIANTS = (TextIR, ImageIR, IconIR, ButtonIR)


def ir_children(node: IRNode) -> list:
    """Children of any IR variant (leaf variants have none)."""
    if isinstance(node, _PARENT_VARIANTS):
        return node.children
    if isinstance(node, _LEAF_VARIANTS):
        return []
    raise TypeError(f"Unknown IR variant: {type(node).__name__}")


def walk_ir(node: IRNode):
    """Depth-first pre-order walk, children in original order."""
    yield node
    for child in ir_children(node):
        yield from walk_ir(child)


# ════════════════════════════════════════════════════════════
# Styles bundle
# ════════════════════════════════════════════════════════════

@dataclass
class DesignTokens(_Record):
    colors: dict = field(default_factory=dict)
    spacing: dict = field(default_factory=dict)
    radii: dict = field(default_factory=dict)
    typography: dict = field(default_factory=dict)
    shadows: dict = field(default_factory=dict)


@dataclass
class StylesBundle(_Record):
    styles: dict = field(default_factory=dict)
    tokens: DesignTokens = field(default_factory=DesignTokens)


# ════════════════════════════════════════════════════════════
# Detection results
# ════════════════════════════════════════════════════════════

@dataclass
class ListHint(_Record):
    container_id: str
    item_ids: list
    orientation: str  # horizontal | vertical
    item_type: str


@dataclass
class ComponentHint(_Record):
    component_name: str
    instance_ids: list
    props_variations: dict = field(default_factory=dict)


@dataclass
class ModalOverlayResult(_Record):
    has_modal_overlay: bool = False
    modal_type: Optional[str] = None
    overlay_id: Optional[str] = None
    content_id: Optional[str] = None
    content_name: Optional[str] = None
    background_ids: list = field(default_factory=list)


@dataclass
class VariantProperty(_Record):
    name: str
    values: list
    default_value: str


@dataclass
class StateStyle(_Record):
    state: str  # default | pressed | disabled | loading | error | hover | focused
    style_overrides: dict = field(default_factory=dict)
    has_indicator: bool = False


@dataclass
class VariantDetection(_Record):
    is_component_set: bool = False
    variants: list = field(default_factory=list)
    states: list = field(default_factory=list)


@dataclass
class SafeAreaInsets(_Record):
    top: float = 0
    bottom: float = 0
    left: float = 0
    right: float = 0


@dataclass
class ChromeElement(_Record):
    id: str
    name: str
    type: str  # status-bar | home-indicator | safe-area | navigation-bar
    bounding_box: BoundingBox


@dataclass
class SafeAreaResult(_Record):
    insets: SafeAreaInsets = field(default_factory=SafeAreaInsets)
    chrome_elements: list = field(default_factory=list)
    exclude_ids: set = field(default_factory=set)
    has_safe_area_layout: bool = False


@dataclass
class DetectionResult(_Record):
    lists: list = field(default_factory=list)
    components: list = field(default_factory=list)
    modal: Optional[ModalOverlayResult] = None
    variants: Optional[VariantDetection] = None
    safe_area: Optional[SafeAreaResult] = None
