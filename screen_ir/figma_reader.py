"""
Figma REST API 讀取與節點解析

抓取 Figma 節點（含 429 / 5xx 重試），並把 REST JSON 轉成 RawNode 樹，
作為 lowering 管線的輸入。
"""

import json
import logging
import math
import re
import time
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlparse

import requests

from .types import (
    AutoLayout,
    BlurEffect,
    BoundingBox,
    Color,
    ComponentProperty,
    Constraints,
    CornerRadii,
    GradientFill,
    GradientStop,
    ImageFill,
    Padding,
    RawNode,
    ShadowEffect,
    SolidFill,
    Stroke,
    Typography,
)

logger = logging.getLogger(__name__)

RETRY_STATUS = {429, 500, 502, 503, 504}

_FILE_PATH = re.compile(r"/(?:file|design)/([a-zA-Z0-9]+)")


class FigmaAPIError(Exception):
    """Figma API 呼叫失敗；status_code 為 None 表示連線層錯誤。"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def parse_figma_url(url: str) -> tuple:
    """figma.com/file|design/KEY?node-id=1-2 → (file_key, '1:2' 或 None)."""
    parsed = urlparse(url)
    match = _FILE_PATH.search(parsed.path)
    if not match:
        raise FigmaAPIError(f"無法從 URL 解析 file key：{url}")
    node_ids = parse_qs(parsed.query).get("node-id")
    node_id = node_ids[0].replace("-", ":") if node_ids else None
    return match.group(1), node_id


class FigmaAPIClient:
    """Figma REST API 唯讀封裝（限流 / 伺服器錯誤自動重試）."""

    BASE_URL = "https://api.figma.com/v1"

    def __init__(self, token: str, max_attempts: int = 3, backoff: float = 1.0, timeout: float = 30):
        self.token = token
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"X-Figma-Token": token})

    def _get(self, path: str, params: dict) -> dict:
        url = f"{self.BASE_URL}{path}"
        for attempt in range(1, self.max_attempts + 1):
            try:
                resp = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise FigmaAPIError(f"無法連線到 Figma API：{e}") from e

            if resp.status_code in RETRY_STATUS and attempt < self.max_attempts:
                delay = self._retry_delay(resp, attempt)
                logger.info("Figma API %s，%.1fs 後重試（第 %d 次）", resp.status_code, delay, attempt)
                time.sleep(delay)
                continue

            try:
                resp.raise_for_status()
            except requests.HTTPError as e:
                raise FigmaAPIError(f"Figma API 回應 {resp.status_code}：{url}", resp.status_code) from e
            return resp.json()

        raise FigmaAPIError(f"Figma API 重試 {self.max_attempts} 次仍失敗：{url}")

    def _retry_delay(self, resp, attempt: int) -> float:
        retry_after = resp.headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        return self.backoff * (2 ** (attempt - 1))

    def get_file_nodes(self, file_key: str, node_ids: list) -> dict:
        return self._get(f"/files/{file_key}/nodes", {"ids": ",".join(node_ids)})

    def get_images(self, file_key: str, node_ids: list, format: str = "png", scale: int = 2) -> dict:
        params = {"ids": ",".join(node_ids), "format": format, "scale": scale}
        return self._get(f"/images/{file_key}", params)

    def fetch_node(self, file_key: str, node_id: str) -> dict:
        """取得單一節點的 document JSON，找不到時拋 FigmaAPIError(404)."""
        data = self.get_file_nodes(file_key, [node_id])
        entry = (data.get("nodes") or {}).get(node_id)
        if not entry or not entry.get("document"):
            raise FigmaAPIError(f"節點 {node_id} 不存在於檔案 {file_key}", 404)
        return entry["document"]

    def fetch_node_by_url(self, url: str) -> dict:
        file_key, node_id = parse_figma_url(url)
        if not node_id:
            raise FigmaAPIError("URL 必須帶 node-id 參數")
        return self.fetch_node(file_key, node_id)


# ════════════════════════════════════════════════════════════
# REST JSON → RawNode
# ════════════════════════════════════════════════════════════

_TEXT_ALIGN = {"LEFT": "left", "RIGHT": "right", "CENTER": "center", "JUSTIFIED": "justify"}
_TEXT_DECORATION = {"UNDERLINE": "underline", "STRIKETHROUGH": "line-through"}
_TEXT_CASE = {"UPPER": "uppercase", "LOWER": "lowercase", "TITLE": "capitalize"}
_PROPERTY_TYPES = {"VARIANT", "TEXT", "BOOLEAN", "INSTANCE_SWAP"}


def _gradient_angle(handles: list) -> Optional[float]:
    """兩個 handle 的方向換成 CSS 角度（0deg 朝上，順時針）."""
    if not handles or len(handles) < 2:
        return None
    start, end = handles[0], handles[1]
    dx = end.get("x", 0) - start.get("x", 0)
    dy = end.get("y", 0) - start.get("y", 0)
    if dx == 0 and dy == 0:
        return None
    return round(math.degrees(math.atan2(dx, -dy)) % 360, 2)


class FigmaNodeParser:
    """把 Figma REST 節點 JSON 轉為 RawNode（缺欄位一律視為該特性不存在）."""

    def parse(self, raw: dict) -> RawNode:
        node = RawNode(
            id=raw.get("id", ""),
            name=raw.get("name", "Unnamed"),
            type=raw.get("type", "FRAME"),
            visible=raw.get("visible", True) is not False,
            bounding_box=self.bounding_box(raw),
            fills=self.fills(raw),
            strokes=self.strokes(raw),
            effects=self.effects(raw),
            corner_radius=self.corner_radius(raw),
            opacity=raw.get("opacity"),
            text=raw.get("characters"),
            typography=self.typography(raw),
            auto_layout=self.auto_layout(raw),
            primary_axis_sizing_mode=raw.get("primaryAxisSizingMode"),
            counter_axis_sizing_mode=raw.get("counterAxisSizingMode"),
            layout_align=raw.get("layoutAlign"),
            layout_grow=raw.get("layoutGrow"),
            layout_positioning=raw.get("layoutPositioning"),
            constraints=self.constraints(raw),
            overflow_direction=raw.get("overflowDirection"),
            component_id=raw.get("componentId"),
            component_properties=self.component_properties(raw),
        )
        node.children = [self.parse(c) for c in raw.get("children") or []]
        return node

    @staticmethod
    def color(raw: dict) -> Color:
        return Color(
            r=round(raw.get("r", 0) * 255),
            g=round(raw.get("g", 0) * 255),
            b=round(raw.get("b", 0) * 255),
            a=raw.get("a", 1),
        )

    def bounding_box(self, raw: dict) -> Optional[BoundingBox]:
        box = raw.get("absoluteBoundingBox")
        if not box:
            return None
        return BoundingBox(box.get("x", 0), box.get("y", 0), box.get("width", 0), box.get("height", 0))

    def fills(self, raw: dict) -> list:
        fills = []
        for fill in raw.get("fills") or []:
            if fill.get("visible") is False:
                continue
            opacity = fill.get("opacity", 1)
            if opacity == 0:
                continue
            fill_type = fill.get("type")
            if fill_type == "SOLID" and fill.get("color"):
                fills.append(SolidFill(color=self.color(fill["color"]), opacity=opacity))
            elif fill_type in ("GRADIENT_LINEAR", "GRADIENT_RADIAL"):
                stops = fill.get("gradientStops")
                if not stops:
                    continue
                linear = fill_type == "GRADIENT_LINEAR"
                fills.append(GradientFill(
                    gradient_type="linear" if linear else "radial",
                    stops=[GradientStop(s.get("position", 0), self.color(s.get("color", {}))) for s in stops],
                    opacity=opacity,
                    angle=_gradient_angle(fill.get("gradientHandlePositions")) if linear else None,
                ))
            elif fill_type == "IMAGE" and fill.get("imageRef"):
                scale_mode = fill.get("scaleMode")
                fills.append(ImageFill(
                    image_ref=fill["imageRef"],
                    opacity=opacity,
                    scale_mode=scale_mode.lower() if scale_mode else None,
                ))
        return fills

    def strokes(self, raw: dict) -> list:
        # 只取第一個 stroke，且必須是可見的 SOLID
        strokes = raw.get("strokes") or []
        if not strokes:
            return []
        stroke = strokes[0]
        if stroke.get("visible") is False or stroke.get("type") != "SOLID" or not stroke.get("color"):
            return []
        return [Stroke(
            color=self.color(stroke["color"]),
            weight=raw.get("strokeWeight", 1),
            opacity=stroke.get("opacity", 1),
            align=(raw.get("strokeAlign") or "INSIDE").lower(),
        )]

    def effects(self, raw: dict) -> list:
        effects = []
        for effect in raw.get("effects") or []:
            if effect.get("visible") is False:
                continue
            effect_type = effect.get("type")
            if effect_type in ("DROP_SHADOW", "INNER_SHADOW"):
                if not effect.get("color"):
                    continue
                offset = effect.get("offset") or {}
                effects.append(ShadowEffect(
                    type="drop-shadow" if effect_type == "DROP_SHADOW" else "inner-shadow",
                    color=self.color(effect["color"]),
                    offset_x=offset.get("x", 0),
                    offset_y=offset.get("y", 0),
                    radius=effect.get("radius", 0),
                    spread=effect.get("spread", 0),
                ))
            elif effect_type in ("LAYER_BLUR", "BACKGROUND_BLUR"):
                effects.append(BlurEffect(
                    type="layer-blur" if effect_type == "LAYER_BLUR" else "background-blur",
                    radius=effect.get("radius", 0),
                ))
        return effects

    def corner_radius(self, raw: dict):
        radii = raw.get("rectangleCornerRadii")
        if isinstance(radii, list) and len(radii) == 4:
            if len(set(radii)) == 1:
                return radii[0]
            return CornerRadii(*radii)
        return raw.get("cornerRadius")

    def typography(self, raw: dict) -> Optional[Typography]:
        style = raw.get("style")
        if not style:
            return None
        font_size = style.get("fontSize") or 14
        return Typography(
            font_family=style.get("fontFamily") or "System",
            font_size=font_size,
            font_weight=style.get("fontWeight") or 400,
            line_height=style.get("lineHeightPx") or font_size * 1.2,
            letter_spacing=style.get("letterSpacing") or 0,
            text_align=_TEXT_ALIGN.get(style.get("textAlignHorizontal"), "left"),
            text_decoration=_TEXT_DECORATION.get(style.get("textDecoration")),
            text_transform=_TEXT_CASE.get(style.get("textCase")),
        )

    def auto_layout(self, raw: dict) -> Optional[AutoLayout]:
        mode = raw.get("layoutMode")
        if not mode or mode == "NONE":
            return None
        return AutoLayout(
            mode="horizontal" if mode == "HORIZONTAL" else "vertical",
            gap=raw.get("itemSpacing", 0),
            padding=Padding(
                top=raw.get("paddingTop", 0),
                right=raw.get("paddingRight", 0),
                bottom=raw.get("paddingBottom", 0),
                left=raw.get("paddingLeft", 0),
            ),
            main_axis_align=raw.get("primaryAxisAlignItems") or "MIN",
            cross_axis_align=raw.get("counterAxisAlignItems") or "MIN",
            wrap=raw.get("layoutWrap") == "WRAP",
        )

    def constraints(self, raw: dict) -> Optional[Constraints]:
        constraints = raw.get("constraints")
        if not constraints:
            return None
        return Constraints(
            horizontal=constraints.get("horizontal", "LEFT"),
            vertical=constraints.get("vertical", "TOP"),
        )

    def component_properties(self, raw: dict) -> dict:
        definitions = raw.get("componentPropertyDefinitions") or {}
        properties = {}
        for name, definition in definitions.items():
            prop_type = definition.get("type")
            properties[name] = ComponentProperty(
                type=prop_type if prop_type in _PROPERTY_TYPES else "TEXT",
                value=definition.get("defaultValue", ""),
                options=definition.get("variantOptions"),
            )
        return properties


def unwrap_document(data: dict) -> dict:
    """接受 document 本身或 /files/:key/nodes 回應（取第一個節點）."""
    nodes = data.get("nodes")
    if isinstance(nodes, dict) and "id" not in data:
        for entry in nodes.values():
            if entry and entry.get("document"):
                return entry["document"]
        raise ValueError("nodes 回應中沒有任何 document")
    if "document" in data and "id" not in data:
        return data["document"]
    return data


def load_raw_tree(path) -> RawNode:
    """從存檔的 Figma JSON 載入 RawNode 樹."""
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' 應為 JSON 物件")
    return FigmaNodeParser().parse(unwrap_document(data))
