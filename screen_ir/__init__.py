"""
screen-ir — Figma → 語意 IR（Python 管線）

把 Figma 節點樹依序經過 normalize / layout / classify / styles / 偵測器，
產出可決定性序列化的 ScreenIR。
"""

__version__ = "0.1.0"

from .types import (
    BoundingBox,
    RawNode,
    NormalizedNode,
    LayoutNode,
    LayoutMeta,
    IRNode,
    ContainerIR,
    TextIR,
    ImageIR,
    IconIR,
    ButtonIR,
    CardIR,
    ComponentIR,
    RepeaterIR,
    StylesBundle,
    DetectionResult,
    walk_ir,
)
from .naming_engine import NamingConfig, NamingEngine, preview_ir_tree
from .normalizer import normalize_tree
from .layout_extractor import add_layout_info
from .classifier import SemanticClassifier, recognize
from .style_extractor import StyleRegistry, extract_styles
from .pipeline import PipelineOptions, ScreenIR, dump_screen_ir, stages, transform_to_screen_ir
from .figma_reader import FigmaAPIClient, FigmaAPIError, FigmaNodeParser, load_raw_tree, parse_figma_url
from .config import load_config, validate_config

__all__ = [
    "__version__",
    "BoundingBox",
    "RawNode",
    "NormalizedNode",
    "LayoutNode",
    "LayoutMeta",
    "IRNode",
    "ContainerIR",
    "TextIR",
    "ImageIR",
    "IconIR",
    "ButtonIR",
    "CardIR",
    "ComponentIR",
    "RepeaterIR",
    "StylesBundle",
    "DetectionResult",
    "walk_ir",
    "NamingConfig",
    "NamingEngine",
    "preview_ir_tree",
    "normalize_tree",
    "add_layout_info",
    "SemanticClassifier",
    "recognize",
    "StyleRegistry",
    "extract_styles",
    "PipelineOptions",
    "ScreenIR",
    "dump_screen_ir",
    "stages",
    "transform_to_screen_ir",
    "FigmaAPIClient",
    "FigmaAPIError",
    "FigmaNodeParser",
    "load_raw_tree",
    "parse_figma_url",
    "load_config",
    "validate_config",
]
