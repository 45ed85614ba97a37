"""設定檔載入與基本驗證."""

import json
import os
from pathlib import Path
from typing import Any

from .naming_engine import NamingConfig
from .normalizer import DEFAULT_IGNORE_PATTERNS
from .pipeline import PipelineOptions

DEFAULT_CONFIG_PATH = "screen-ir.config.json"

# 已知有效的頂層欄位
_KNOWN_TOP_KEYS = {"figma", "normalize", "detection", "output"}

# 各區塊已知欄位（用於拼字提示）
_KNOWN_SECTION_KEYS = {
    "figma": {"personalAccessToken", "fileKey", "nodeId"},
    "normalize": {"ignorePatterns", "excludeIds", "unwrapGroups"},
    "detection": {"safeArea", "modalOverlay"},
    "output": {"dir", "indent"},
}

_BOOL_KEYS = (
    ("normalize", "unwrapGroups"),
    ("detection", "safeArea"),
    ("detection", "modalOverlay"),
)


def _warn(msg: str) -> None:
    print(f"   ⚠️  [config] {msg}")


def _section(cfg: dict, name: str) -> dict:
    value = cfg.get(name, {})
    return value if isinstance(value, dict) else {}


def validate_config(cfg: dict) -> None:
    """對 config 做基本欄位驗證，印出警告但不拋例外。"""
    if not cfg:
        return

    # 頂層未知欄位
    for key in cfg:
        if key not in _KNOWN_TOP_KEYS:
            known = ", ".join(sorted(_KNOWN_TOP_KEYS))
            _warn(f"未知頂層欄位 '{key}'（已知欄位：{known}）")

    # 各區塊欄位
    for section, known_keys in _KNOWN_SECTION_KEYS.items():
        if section in cfg and not isinstance(cfg[section], dict):
            _warn(f"[{section}] 應為物件，目前是 {type(cfg[section]).__name__}")
            continue
        for key in _section(cfg, section):
            if key not in known_keys:
                known = ", ".join(sorted(known_keys))
                _warn(f"[{section}] 未知欄位 '{key}'（已知欄位：{known}）")

    # 忽略規則 / 排除 id 應為字串陣列
    for key in ("ignorePatterns", "excludeIds"):
        val = _section(cfg, "normalize").get(key)
        if val is not None and not (isinstance(val, list) and all(isinstance(v, str) for v in val)):
            _warn(f"normalize.{key} 應為字串陣列")

    for section, key in _BOOL_KEYS:
        val = _section(cfg, section).get(key)
        if val is not None and not isinstance(val, bool):
            _warn(f"{section}.{key} 應為布林值，目前是 {type(val).__name__}")

    indent = _section(cfg, "output").get("indent")
    if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int)):
        _warn(f"output.indent 應為整數，目前是 {type(indent).__name__}")

    # nodeId 用 URL 中的 1-2 格式時提示
    node_id = _section(cfg, "figma").get("nodeId")
    if isinstance(node_id, str) and "-" in node_id and ":" not in node_id:
        _warn(f"figma.nodeId '{node_id}' 看起來是 URL 格式，API 需要 '{node_id.replace('-', ':')}'")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """載入 JSON 設定檔，不存在則回傳空 dict；存在則做基本驗證。"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        cfg: Any = json.load(f)
    if not isinstance(cfg, dict):
        print(f"   ⚠️  [config] '{config_path}' 格式錯誤，應為 JSON 物件，回傳空設定。")
        return {}
    validate_config(cfg)
    return cfg


def resolve_token(cfg: dict) -> str:
    """config 的 personalAccessToken 優先，其次 FIGMA_TOKEN 環境變數。"""
    return _section(cfg, "figma").get("personalAccessToken") or os.environ.get("FIGMA_TOKEN", "")


def pipeline_options_from_config(cfg: dict) -> PipelineOptions:
    """config 轉 PipelineOptions；ignorePatterns 附加在預設規則之後。"""
    normalize = _section(cfg, "normalize")
    detection = _section(cfg, "detection")
    patterns = normalize.get("ignorePatterns")
    return PipelineOptions(
        ignore_patterns=[*DEFAULT_IGNORE_PATTERNS, *patterns] if isinstance(patterns, list) else None,
        exclude_ids=set(normalize.get("excludeIds") or []),
        unwrap_groups=normalize.get("unwrapGroups", True) is not False,
        detect_safe_area=detection.get("safeArea", True) is not False,
        detect_modal_overlay=detection.get("modalOverlay", True) is not False,
        naming=NamingConfig(),
    )
