"""
Normalizer 測試：隱藏 / OS chrome / 註解圖層過濾，以及無用 GROUP 展開
"""
import pytest
from screen_ir.normalizer import (
    DEFAULT_IGNORE_PATTERNS,
    FilterReason,
    matches_pattern,
    normalize_tree,
    should_filter,
)
from screen_ir.types import BoundingBox, Color, NormalizedNode, RawNode, SolidFill


def node(node_id, name="Box", node_type="FRAME", children=None, **kwargs):
    return RawNode(
        id=node_id,
        name=name,
        type=node_type,
        bounding_box=kwargs.pop("bounding_box", BoundingBox(0, 0, 100, 100)),
        children=children or [],
        **kwargs,
    )


# ─── 萬用字元比對 ───────────────────────────────────────────────────────────

def test_wildcard_is_anchored_and_case_insensitive():
    assert matches_pattern("Design Annotation", "*annotation*")
    assert matches_pattern("grid-guide", "*-guide")
    assert not matches_pattern("guide-lines", "*-guide")


def test_regex_metacharacters_are_literal():
    assert matches_pattern("a.b", "a.b")
    assert not matches_pattern("axb", "a.b")


# ─── should_filter ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("name,reason", [
    ("Status Bar", FilterReason.STATUS_BAR),
    ("_StatusBar-iPhone", FilterReason.STATUS_BAR),
    ("Home Indicator", FilterReason.HOME_INDICATOR),
    ("iPhone 14 Overlay", FilterReason.OS_COMPONENT),
    ("Android Navigation Bar", FilterReason.OS_COMPONENT),
    ("Redline", FilterReason.PATTERN_MATCH),
    ("Spec notes", FilterReason.PATTERN_MATCH),
])
def test_filter_reasons(name, reason):
    assert should_filter(node("1", name)) == reason


def test_hidden_node_filtered():
    assert should_filter(node("1", visible=False)) == FilterReason.HIDDEN


def test_excluded_id_wins():
    assert should_filter(node("9", "Header"), exclude_ids={"9"}) == FilterReason.EXCLUDED


def test_custom_patterns_replace_defaults():
    assert should_filter(node("1", "Redline"), ignore_patterns=[]) is None
    assert should_filter(node("1", "Debug overlay"), ignore_patterns=["debug*"]) == FilterReason.PATTERN_MATCH


def test_ordinary_layer_kept():
    assert should_filter(node("1", "Header")) is None


def test_default_patterns_cover_annotations():
    assert "*annotation*" in DEFAULT_IGNORE_PATTERNS


# ─── normalize_tree ─────────────────────────────────────────────────────────

class TestNormalizeTree:
    def test_filtered_root_returns_none(self):
        assert normalize_tree(node("1", "Status Bar")) is None

    def test_hidden_descendants_removed(self):
        root = node("1", "Screen", children=[
            node("2", "Title", "TEXT", text="Hi"),
            node("3", "Ghost", visible=False),
            node("4", "Annotation: spacing"),
        ])
        result = normalize_tree(root)
        assert isinstance(result, NormalizedNode)
        assert [c.id for c in result.children] == ["2"]

    def test_input_tree_not_mutated(self):
        child = node("2", "Ghost", visible=False)
        root = node("1", "Screen", children=[child])
        normalize_tree(root)
        assert root.children == [child]

    def test_missing_bounding_box_defaults_to_zero(self):
        root = node("1", "Screen", bounding_box=None)
        result = normalize_tree(root)
        assert result.bounding_box == BoundingBox(0, 0, 0, 0)

    def test_full_opacity_dropped(self):
        result = normalize_tree(node("1", "Screen", opacity=1))
        assert result.opacity is None

    def test_useless_group_unwrapped(self):
        button = node("3", "Button")
        root = node("1", "Screen", children=[node("2", "Group 1", "GROUP", children=[button])])
        result = normalize_tree(root)
        assert [c.id for c in result.children] == ["3"]

    def test_nested_useless_groups_unwrapped_bottom_up(self):
        leaf = node("4", "Icon", "VECTOR")
        inner = node("3", "Group 2", "GROUP", children=[leaf])
        outer = node("2", "Group 1", "GROUP", children=[inner])
        result = normalize_tree(node("1", "Screen", children=[outer]))
        assert [c.id for c in result.children] == ["4"]

    def test_group_with_fill_kept(self):
        fill = SolidFill(color=Color(255, 0, 0))
        root = node("1", "Screen", children=[
            node("2", "Group 1", "GROUP", fills=[fill], children=[node("3", "Button")]),
        ])
        result = normalize_tree(root)
        assert result.children[0].id == "2"

    def test_group_with_two_children_kept(self):
        root = node("1", "Screen", children=[
            node("2", "Group 1", "GROUP", children=[node("3", "A"), node("4", "B")]),
        ])
        result = normalize_tree(root)
        assert result.children[0].id == "2"

    def test_unwrap_can_be_disabled(self):
        root = node("1", "Screen", children=[node("2", "Group 1", "GROUP", children=[node("3", "Button")])])
        result = normalize_tree(root, unwrap_groups=False)
        assert result.children[0].id == "2"

    def test_frame_wrapper_not_unwrapped(self):
        root = node("1", "Screen", children=[node("2", "Wrapper", children=[node("3", "Button")])])
        result = normalize_tree(root)
        assert result.children[0].id == "2"
