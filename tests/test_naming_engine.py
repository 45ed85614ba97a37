"""
NamingEngine 單元測試
測試優先順序：有意義的圖層名 → 內容樣式 → 型別前綴 + 短 id
"""
import pytest
from screen_ir.naming_engine import (
    NamingConfig,
    NamingEngine,
    is_generic_figma_name,
    is_generic_name,
    is_meaningful_prop_name,
    preview_ir_tree,
    strip_trailing_digits,
    to_pascal_case,
    to_valid_identifier,
)
from screen_ir.types import BoundingBox, ContainerIR, LayoutMeta, RawNode, TextIR


def make_node(name, node_id="1:2", node_type="FRAME", children=None):
    return RawNode(id=node_id, name=name, type=node_type, children=children or [])


# ─── 識別字轉換 ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("name,expected", [
    ("Product Card", "productCard"),
    ("ProductCard", "productCard"),
    ("user-profile_avatar", "userProfileAvatar"),
    ("1st item", "style1stItem"),
    ("!!!", "element"),
    ("", "element"),
])
def test_to_valid_identifier(name, expected):
    assert to_valid_identifier(name) == expected


def test_to_valid_identifier_uses_config_fallback():
    cfg = NamingConfig(fallback_identifier="node")
    assert to_valid_identifier("—", cfg) == "node"


@pytest.mark.parametrize("name,expected", [
    ("home screen", "HomeScreen"),
    ("user-profile_card", "UserProfileCard"),
    ("123 abc", "Component123Abc"),
])
def test_to_pascal_case(name, expected):
    assert to_pascal_case(name) == expected


# ─── 通用名稱偵測 ───────────────────────────────────────────────────────────

def test_generic_layer_names():
    assert is_generic_name("Frame 12")
    assert is_generic_name("rectangle")
    assert not is_generic_name("Header")


def test_generic_figma_names_include_text_and_blank():
    assert is_generic_figma_name("")
    assert is_generic_figma_name("   ")
    assert is_generic_figma_name("Text 3")
    assert is_generic_figma_name("Layer 12")
    assert not is_generic_figma_name("Title")


@pytest.mark.parametrize("name", ["text", "frame2", "a", "123", "item3", "vector12fill", "style4"])
def test_not_meaningful_prop_names(name):
    assert not is_meaningful_prop_name(name)


@pytest.mark.parametrize("name", ["title", "productPrice", "userName"])
def test_meaningful_prop_names(name):
    assert is_meaningful_prop_name(name)


def test_strip_trailing_digits():
    assert strip_trailing_digits("Item 3") == "Item"
    assert strip_trailing_digits("Row12") == "Row"
    assert strip_trailing_digits("Header") == "Header"


# ─── style_ref ──────────────────────────────────────────────────────────────

class TestStyleRef:
    def setup_method(self):
        self.engine = NamingEngine()

    def test_meaningful_name_becomes_camel_case(self):
        assert self.engine.style_ref(make_node("Product Card")) == "productCard"

    def test_generic_leaf_uses_fallback_prefix_and_short_id(self):
        assert self.engine.style_ref(make_node("Frame 1", node_id="12:34")) == "element_34"

    def test_generic_parent_uses_container_prefix(self):
        child = make_node("Title", node_id="12:35", node_type="TEXT")
        node = make_node("Group 3", node_id="12:34", node_type="GROUP", children=[child])
        assert self.engine.style_ref(node) == "container_34"

    def test_vector_uses_icon_prefix(self):
        assert self.engine.style_ref(make_node("Vector", node_id="3:5", node_type="VECTOR")) == "icon_5"

    def test_instance_id_takes_last_segment(self):
        node = make_node("Rectangle 2", node_id="I5:6;7:8")
        assert self.engine.style_ref(node) == "element_8"

    def test_custom_prefixes(self):
        cfg = NamingConfig(type_prefixes={"TEXT": "label"})
        engine = NamingEngine(cfg)
        assert engine.style_ref(make_node("", node_id="4:9", node_type="TEXT")) == "label_9"


# ─── 文字 prop 與 repeater 命名 ─────────────────────────────────────────────

def test_text_prop_name_prefers_layer_name():
    assert NamingEngine().text_prop_name("Title", "price") == "title"


def test_text_prop_name_falls_back_to_content_pattern():
    engine = NamingEngine()
    assert engine.text_prop_name("Text 2", "price") == "price"
    assert engine.text_prop_name("Frame", None) is None


def test_repeater_names():
    component, data_prop, style_ref = NamingEngine().repeater_names("Product Item")
    assert component == "ProductItem"
    assert data_prop == "PRODUCTITEM_DATA"
    assert style_ref == "style_productItem_repeater"


# ─── preview_ir_tree ────────────────────────────────────────────────────────

def test_preview_ir_tree_lists_children_indented():
    text = TextIR(id="2", name="Price", bounding_box=BoundingBox(), style_ref="price",
                  text="$9.99", content_pattern="price")
    root = ContainerIR(id="1", name="Screen", bounding_box=BoundingBox(), style_ref="screen",
                       layout=LayoutMeta(type="column"), children=[text])
    out = preview_ir_tree(root)
    lines = out.splitlines()
    assert lines[0].startswith("├─ Screen  [Container]")
    assert lines[1].startswith("  ├─ Price  [Text]  .price")
    assert '"$9.99"' in lines[1]
    assert "(price)" in lines[1]
