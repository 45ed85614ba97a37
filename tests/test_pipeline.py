"""
端到端 pipeline 測試：RawNode → ScreenIR，決定性序列化與空畫面 placeholder
"""
import json

import pytest
from screen_ir.pipeline import PipelineOptions, dump_screen_ir, run_detectors, stages, transform_to_screen_ir
from screen_ir.types import (
    BoundingBox,
    Color,
    ContainerIR,
    CornerRadii,
    IRNode,
    RawNode,
    RepeaterIR,
    SolidFill,
    Typography,
    ir_children,
    walk_ir,
)


def raw(node_id, name, x=0, y=0, w=375, h=812, children=None, node_type="FRAME", **kwargs):
    return RawNode(id=node_id, name=name, type=node_type, bounding_box=BoundingBox(x, y, w, h),
                   children=children or [], **kwargs)


def label(node_id, name, content, x, y, w=200, h=20):
    return raw(node_id, name, x, y, w, h, node_type="TEXT", text=content, typography=Typography(font_size=15))


def shop_screen():
    def product(i, x):
        return raw(f"3:{i}", f"Product {i}", x, 120, 100, 140,
                   fills=[SolidFill(color=Color(255, 255, 255))], corner_radius=12,
                   children=[
                       label(f"4:{i}", "Name", f"Item {i}", x + 8, 128, 84),
                       label(f"5:{i}", "Price", f"${i}9.99", x + 8, 150, 84),
                   ])

    return raw("1:1", "Shop", children=[
        raw("1:2", "Status Bar", 0, 0, 375, 44),
        label("2:1", "Title", "Shop", 16, 60, 200, 32),
        raw("2:2", "Grid", 16, 120, 340, 140, children=[product(1, 16), product(2, 136), product(3, 256)]),
        raw("1:3", "Home Indicator", 0, 778, 375, 34),
        raw("1:4", "Hidden banner", 0, 300, 375, 80, visible=False),
    ])


class TestTransform:
    def setup_method(self):
        self.screen = transform_to_screen_ir(shop_screen())

    def test_screen_identity(self):
        assert self.screen.id == "1:1"
        assert self.screen.name == "Shop"

    def test_chrome_and_hidden_layers_removed(self):
        ids = {n.id for n in walk_ir(self.screen.root)}
        assert not ids & {"1:2", "1:3", "1:4"}

    def test_safe_area_reported(self):
        assert self.screen.has_safe_area_layout
        assert self.screen.safe_area_insets.top == 44
        assert self.screen.safe_area_insets.bottom == 34

    def test_products_folded_into_repeater(self):
        grid = self.screen.root.children[1]
        assert isinstance(grid.children[0], RepeaterIR)
        assert grid.children[0].item_component_name == "Product"

    def test_every_style_ref_resolves(self):
        styles = self.screen.styles_bundle.styles
        for node in walk_ir(self.screen.root):
            assert node.style_ref in styles

    def test_repeated_products_detected(self):
        names = [h.component_name for h in self.screen.detection.components]
        assert "Product1" in names or "Product" in names
        for hint in self.screen.detection.components:
            assert len(hint.instance_ids) >= 2

    def test_detection_records_attached(self):
        detection = self.screen.detection
        assert detection.modal is not None and not detection.modal.has_modal_overlay
        assert detection.variants is not None
        assert detection.safe_area.exclude_ids == {"1:2", "1:3"}


def test_dump_is_byte_identical():
    first = dump_screen_ir(transform_to_screen_ir(shop_screen()))
    second = dump_screen_ir(transform_to_screen_ir(shop_screen()))
    assert first == second
    data = json.loads(first)
    assert data["root"]["semanticType"] == "Container"
    assert "stylesBundle" in data


def test_dump_keeps_non_ascii():
    screen = transform_to_screen_ir(raw("1", "結帳", children=[label("2", "Title", "確認訂單", 16, 60)]))
    out = dump_screen_ir(screen)
    assert "確認訂單" in out
    assert "\\u" not in out


def test_filtered_root_yields_placeholder():
    screen = transform_to_screen_ir(raw("1", "Status Bar"))
    assert isinstance(screen.root, ContainerIR)
    assert screen.root.children == []
    assert screen.root.style_ref == "style_empty"
    assert screen.styles_bundle.styles == {"style_empty": {}}


def test_options_disable_detectors():
    options = PipelineOptions(detect_safe_area=False, detect_modal_overlay=False, ignore_patterns=[])
    screen = transform_to_screen_ir(shop_screen(), options)
    assert screen.safe_area_insets is None
    assert screen.detection.modal is None
    assert not screen.has_safe_area_layout


def test_exclude_ids_option():
    screen = transform_to_screen_ir(shop_screen(), PipelineOptions(exclude_ids={"2:1"}))
    assert "2:1" not in {n.id for n in walk_ir(screen.root)}


def test_modal_content_becomes_root():
    sheet = raw("4:1", "Payment", 0, 412, 375, 400, corner_radius=CornerRadii(16, 16, 0, 0),
                fills=[SolidFill(color=Color(255, 255, 255))],
                children=[label("4:2", "Title", "Pay", 16, 430)])
    overlay = raw("3:1", "Overlay", fills=[SolidFill(color=Color(0, 0, 0), opacity=0.45)], children=[sheet])
    root = raw("1:1", "Checkout", children=[raw("2:1", "Content", children=[label("2:2", "Body", "Cart", 16, 100)]), overlay])
    screen = transform_to_screen_ir(root)
    assert screen.detection.modal.has_modal_overlay
    assert screen.detection.modal.modal_type == "bottom-sheet"
    assert screen.root.id == "4:1"
    assert "2:2" not in {n.id for n in walk_ir(screen.root)}


def test_to_dict_shape():
    data = transform_to_screen_ir(shop_screen()).to_dict()
    assert set(data) >= {"id", "name", "root", "stylesBundle", "detection", "hasSafeAreaLayout", "safeAreaInsets"}
    assert data["safeAreaInsets"]["top"] == 44


def test_unknown_ir_variant_raises():
    class Mystery(IRNode):
        semantic_type = "Mystery"

    with pytest.raises(TypeError):
        ir_children(Mystery(id="x", name="x", bounding_box=BoundingBox(), style_ref="x"))


def test_run_detectors_only_reads_ir():
    screen = transform_to_screen_ir(shop_screen())
    before = screen.root.to_dict()
    run_detectors(screen.root)
    assert screen.root.to_dict() == before


def test_stages_exported():
    assert set(stages) == {"normalize", "add_layout", "recognize", "extract_styles", "run_detectors"}
