"""
pipeline.py — RawNode tree → ScreenIR

Stages, each consuming only the previous stage's output:

  safe area → modal overlay → normalize → layout → classify → styles → detectors

The result is a ScreenIR: the IR root, its StylesBundle and the
detector hints. ``dump_screen_ir`` serialises it deterministically.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from .classifier import SemanticClassifier, recognize
from .layout_extractor import add_layout_info
from .list_detector import detect_lists
from .modal_overlay import detect_modal_overlay, extract_modal_content
from .naming_engine import NamingConfig, NamingEngine
from .normalizer import normalize_tree
from .repetition_detector import detect_repetitions
from .safe_area import detect_safe_area
from .style_extractor import StyleRegistry, extract_styles
from .types import (
    BoundingBox,
    ContainerIR,
    DesignTokens,
    DetectionResult,
    IRNode,
    LayoutMeta,
    RawNode,
    SafeAreaInsets,
    StylesBundle,
    to_jsonable,
)
from .variant_states import detect_variants_and_states

logger = logging.getLogger(__name__)

EMPTY_STYLE_REF = "style_empty"


@dataclass
class PipelineOptions:
    ignore_patterns: Optional[list] = None
    exclude_ids: set = field(default_factory=set)
    unwrap_groups: bool = True
    detect_safe_area: bool = True
    detect_modal_overlay: bool = True
    naming: NamingConfig = field(default_factory=NamingConfig)


@dataclass
class ScreenIR:
    id: str
    name: str
    root: IRNode
    styles_bundle: StylesBundle
    detection: DetectionResult = field(default_factory=DetectionResult)
    safe_area_insets: Optional[SafeAreaInsets] = None
    has_safe_area_layout: bool = False

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "name": self.name,
            "root": self.root.to_dict(),
            "stylesBundle": self.styles_bundle.to_dict(),
            "detection": self.detection.to_dict(),
            "hasSafeAreaLayout": self.has_safe_area_layout,
        }
        if self.safe_area_insets is not None:
            out["safeAreaInsets"] = to_jsonable(self.safe_area_insets)
        return out


def run_detectors(ir: IRNode) -> DetectionResult:
    """Pattern detectors that only read the IR tree."""
    return DetectionResult(
        lists=detect_lists(ir),
        components=detect_repetitions(ir),
    )


def _empty_screen(root: RawNode) -> tuple:
    placeholder = ContainerIR(
        id=root.id,
        name=root.name,
        bounding_box=BoundingBox(),
        style_ref=EMPTY_STYLE_REF,
        layout=LayoutMeta(type="column"),
        children=[],
    )
    return placeholder, StylesBundle(styles={EMPTY_STYLE_REF: {}}, tokens=DesignTokens())


def transform_to_screen_ir(root: RawNode, options: Optional[PipelineOptions] = None) -> ScreenIR:
    options = options or PipelineOptions()
    logger.info("lowering %s %r", root.id, root.name)

    exclude_ids = set(options.exclude_ids)
    safe_area = None
    if options.detect_safe_area:
        safe_area = detect_safe_area(root)
        exclude_ids |= safe_area.exclude_ids

    effective_root = root
    modal = None
    if options.detect_modal_overlay:
        modal = detect_modal_overlay(root)
        if modal.has_modal_overlay:
            content = extract_modal_content(root, modal.content_id)
            if content is not None:
                effective_root = content

    normalized = normalize_tree(
        effective_root,
        ignore_patterns=options.ignore_patterns,
        exclude_ids=exclude_ids,
        unwrap_groups=options.unwrap_groups,
    )

    if normalized is None:
        logger.warning("root %s was filtered out; emitting an empty screen", root.id)
        ir, bundle = _empty_screen(root)
        detection = DetectionResult()
    else:
        layout_tree = add_layout_info(normalized, None)
        ir = SemanticClassifier(NamingEngine(options.naming)).recognize(layout_tree)
        bundle = extract_styles(ir, layout_tree, StyleRegistry())
        detection = run_detectors(ir)

    detection.modal = modal
    detection.variants = detect_variants_and_states(effective_root)
    detection.safe_area = safe_area

    logger.info(
        "lowered %s: %d styles, %d list(s), %d repeated component(s)",
        root.id, len(bundle.styles), len(detection.lists), len(detection.components),
    )
    return ScreenIR(
        id=root.id,
        name=root.name,
        root=ir,
        styles_bundle=bundle,
        detection=detection,
        safe_area_insets=safe_area.insets if safe_area else None,
        has_safe_area_layout=bool(safe_area and safe_area.has_safe_area_layout),
    )


def dump_screen_ir(screen: ScreenIR, indent: Optional[int] = 2) -> str:
    """Deterministic JSON: sorted keys, non-ASCII kept as-is."""
    return json.dumps(screen.to_dict(), sort_keys=True, ensure_ascii=False, indent=indent)


stages = {
    "normalize": normalize_tree,
    "add_layout": add_layout_info,
    "recognize": recognize,
    "extract_styles": extract_styles,
    "run_detectors": run_detectors,
}
