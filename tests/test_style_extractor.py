"""
樣式抽取測試：fills / border / effects / typography → ExtractedStyle、去重 registry、design tokens
"""
import pytest
from screen_ir.classifier import recognize
from screen_ir.layout_extractor import add_layout_info
from screen_ir.style_extractor import (
    StyleRegistry,
    effects_to_style,
    extract_style,
    extract_styles,
    extract_tokens,
    fills_to_background,
    layout_to_style,
    style_hash,
)
from screen_ir.types import (
    AutoLayout,
    BlurEffect,
    BoundingBox,
    ButtonIR,
    Color,
    CornerRadii,
    GradientFill,
    GradientStop,
    LayoutMeta,
    NormalizedNode,
    Padding,
    ShadowEffect,
    SolidFill,
    Stroke,
    Typography,
    walk_ir,
)


def frame(node_id, name, x=0, y=0, w=100, h=100, children=None, node_type="FRAME", **kwargs):
    return NormalizedNode(
        id=node_id,
        name=name,
        type=node_type,
        bounding_box=BoundingBox(x, y, w, h),
        children=children or [],
        **kwargs,
    )


def layout_of(node):
    return add_layout_info(node, None)


# ─── 顏色 / 填色 ────────────────────────────────────────────────────────────

class TestPaints:
    def test_color_hex_uppercase(self):
        assert Color(255, 0, 128).hex == "#FF0080"

    def test_alpha_folded_into_hex(self):
        assert Color(0, 0, 0, 0.5).resolve() == "#00000080"
        assert Color(0, 0, 0).resolve(0.45) == "#00000073"

    def test_solid_background(self):
        assert fills_to_background([SolidFill(color=Color(255, 255, 255))]) == {"backgroundColor": "#FFFFFF"}

    def test_zero_opacity_fill_skipped(self):
        fills = [SolidFill(color=Color(255, 0, 0), opacity=0), SolidFill(color=Color(0, 255, 0))]
        assert fills_to_background(fills) == {"backgroundColor": "#00FF00"}

    def test_gradient_background(self):
        fill = GradientFill(stops=[
            GradientStop(0, Color(255, 0, 0)),
            GradientStop(1, Color(0, 0, 255)),
        ], angle=90)
        style = fills_to_background([fill])
        assert style["backgroundGradient"] == {
            "type": "linear",
            "colors": ["#FF0000", "#0000FF"],
            "positions": [0, 1],
            "angle": 90,
        }

    def test_effects_first_of_each_kind(self):
        effects = [
            ShadowEffect(color=Color(0, 0, 0, 0.25), offset_y=4, radius=8),
            ShadowEffect(color=Color(255, 0, 0), offset_y=1, radius=1),
            ShadowEffect(type="inner-shadow", color=Color(0, 0, 0), radius=2),
            BlurEffect(type="background-blur", radius=20),
        ]
        style = effects_to_style(effects)
        assert style["shadow"]["color"] == "#00000040"
        assert style["shadow"]["offsetY"] == 4
        assert style["innerShadow"]["blur"] == 2
        assert style["backdropBlur"] == 20
        assert "blur" not in style


# ─── extract_style ──────────────────────────────────────────────────────────

class TestExtractStyle:
    def test_box_style(self):
        node = layout_of(frame(
            "1", "Card", w=300.4, h=199.5,
            fills=[SolidFill(color=Color(255, 255, 255))],
            strokes=[Stroke(color=Color(229, 229, 234), weight=1)],
            corner_radius=12,
            opacity=0.9,
        ))
        style = extract_style(node)
        assert style["backgroundColor"] == "#FFFFFF"
        assert style["borderColor"] == "#E5E5EA"
        assert style["borderWidth"] == 1
        assert style["borderRadius"] == 12
        assert style["opacity"] == 0.9
        assert (style["width"], style["height"]) == (300, 200)

    def test_per_corner_radius(self):
        node = layout_of(frame("1", "Sheet", corner_radius=CornerRadii(16, 16, 0, 0)))
        assert extract_style(node)["borderRadius"] == {
            "topLeft": 16, "topRight": 16, "bottomRight": 0, "bottomLeft": 0,
        }

    def test_typography_with_text_color(self):
        node = layout_of(frame(
            "1", "Title", node_type="TEXT", text="Hi",
            typography=Typography(font_family="Inter", font_size=17, font_weight=600, line_height=22),
            fills=[SolidFill(color=Color(28, 28, 30))],
        ))
        typo = extract_style(node)["typography"]
        assert typo["fontFamily"] == "Inter"
        assert typo["fontSize"] == 17
        assert typo["fontWeight"] == 600
        assert typo["lineHeight"] == 22
        assert typo["color"] == "#1C1C1E"

    def test_flex_fields_from_layout(self):
        node = layout_of(frame("1", "Row", w=300, h=60, auto_layout=AutoLayout(
            mode="horizontal", gap=8.0, padding=Padding(10, 16, 10, 16),
            main_axis_align="SPACE_BETWEEN", cross_axis_align="CENTER",
        ), primary_axis_sizing_mode="AUTO"))
        style = extract_style(node)
        assert style["flexDirection"] == "row"
        assert style["gap"] == 8
        assert isinstance(style["gap"], int)
        assert style["padding"] == {"top": 10, "right": 16, "bottom": 10, "left": 16}
        assert style["justifyContent"] == "space-between"
        assert style["alignItems"] == "center"
        # hug 寬度不輸出 width
        assert "width" not in style
        assert style["height"] == 60

    def test_zero_padding_omitted(self):
        style = layout_to_style(LayoutMeta(type="column"))
        assert style == {"flexDirection": "column"}

    def test_absolute_layout_has_no_flex(self):
        assert layout_to_style(LayoutMeta(type="absolute")) == {}


# ─── Registry ───────────────────────────────────────────────────────────────

class TestStyleRegistry:
    def setup_method(self):
        self.registry = StyleRegistry()

    def test_identical_content_shares_name(self):
        a = self.registry.register("card", {"width": 10})
        b = self.registry.register("tile", {"width": 10})
        assert a == b == "card"
        assert len(self.registry) == 1

    def test_name_collision_gets_suffix(self):
        assert self.registry.register("title", {"width": 10}) == "title"
        assert self.registry.register("title", {"width": 20}) == "title_2"
        assert self.registry.register("title", {"width": 30}) == "title_3"

    def test_hash_ignores_key_order(self):
        assert style_hash({"a": 1, "b": 2}) == style_hash({"b": 2, "a": 1})


# ─── extract_styles（整棵樹）────────────────────────────────────────────────

def two_cards():
    def card(i, x):
        return frame(f"{i}:1", "Card", x, 0, 160, 100, fills=[SolidFill(color=Color(255, 255, 255))],
                     corner_radius=8, children=[frame(f"{i}:2", "Title", x + 8, 8, 100, 20, node_type="TEXT",
                                                      text=f"Card {i}", typography=Typography())])
    return frame("0:1", "Screen", 0, 0, 340, 100, children=[card(1, 0), card(2, 180)])


class TestExtractStyles:
    def setup_method(self):
        self.layout = layout_of(two_cards())
        self.ir = recognize(self.layout)
        self.bundle = extract_styles(self.ir, self.layout)

    def test_every_ref_resolves(self):
        for node in walk_ir(self.ir):
            assert node.style_ref in self.bundle.styles

    def test_identical_siblings_share_style(self):
        first, second = self.ir.children[0].children
        assert first.style_ref == second.style_ref

    def test_no_duplicate_content(self):
        hashes = [style_hash(s) for s in self.bundle.styles.values()]
        assert len(hashes) == len(set(hashes))

    def test_tokens(self):
        tokens = self.bundle.tokens
        assert "#FFFFFF" in tokens.colors.values()
        assert tokens.radii == {"radius_0": 8}
        assert tokens.spacing["spacing_0"] == 8
        assert len(tokens.typography) == 1


def test_button_text_and_icon_refs_registered():
    node = frame("1", "CTA", w=160, h=48, fills=[SolidFill(color=Color(0, 122, 255))], children=[
        frame("9:2", "Vector", 12, 12, 24, 24, node_type="VECTOR"),
        frame("3", "Label", 44, 14, 80, 20, node_type="TEXT", text="Go", typography=Typography()),
    ])
    layout = layout_of(node)
    ir = recognize(layout)
    bundle = extract_styles(ir, layout)
    assert isinstance(ir, ButtonIR)
    assert ir.text_style_ref in bundle.styles
    assert bundle.styles[ir.text_style_ref]["typography"]["color"] == "#000000"
    assert ir.icon_ref == ir.icon_style_ref
    assert bundle.styles[ir.icon_style_ref]["width"] == 24


def test_extract_tokens_spacing_sorted():
    styles = {}
    node = layout_of(frame("1", "Stack", auto_layout=AutoLayout(mode="vertical", gap=24, padding=Padding(16, 16, 16, 16))))
    tokens = extract_tokens(styles, node)
    assert tokens.spacing == {"spacing_0": 16, "spacing_1": 24}
