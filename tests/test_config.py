"""
設定檔載入 / 驗證 / 轉 PipelineOptions 測試
"""
import json

from screen_ir.config import load_config, pipeline_options_from_config, resolve_token, validate_config
from screen_ir.normalizer import DEFAULT_IGNORE_PATTERNS


def write_config(tmp_path, data):
    path = tmp_path / "screen-ir.config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


# ─── load_config ────────────────────────────────────────────────────────────

def test_missing_file_returns_empty(tmp_path):
    assert load_config(str(tmp_path / "nope.json")) == {}


def test_non_object_returns_empty(tmp_path, capsys):
    assert load_config(write_config(tmp_path, ["figma"])) == {}
    assert "格式錯誤" in capsys.readouterr().out


def test_valid_config_loads_silently(tmp_path, capsys):
    cfg = {"figma": {"fileKey": "KEY", "nodeId": "1:2"}, "output": {"dir": "out", "indent": 4}}
    assert load_config(write_config(tmp_path, cfg)) == cfg
    assert capsys.readouterr().out == ""


# ─── validate_config ────────────────────────────────────────────────────────

class TestValidateConfig:
    def test_unknown_top_level_key(self, capsys):
        validate_config({"figam": {}})
        assert "未知頂層欄位 'figam'" in capsys.readouterr().out

    def test_unknown_section_key(self, capsys):
        validate_config({"normalize": {"ignorePattern": []}})
        assert "[normalize] 未知欄位 'ignorePattern'" in capsys.readouterr().out

    def test_section_must_be_object(self, capsys):
        validate_config({"output": "dist"})
        assert "[output] 應為物件" in capsys.readouterr().out

    def test_string_list_required(self, capsys):
        validate_config({"normalize": {"excludeIds": "1:2"}})
        assert "normalize.excludeIds 應為字串陣列" in capsys.readouterr().out

    def test_bool_required(self, capsys):
        validate_config({"detection": {"safeArea": "yes"}})
        assert "detection.safeArea 應為布林值" in capsys.readouterr().out

    def test_indent_must_be_int(self, capsys):
        validate_config({"output": {"indent": True}})
        assert "output.indent 應為整數" in capsys.readouterr().out

    def test_dash_node_id_hint(self, capsys):
        validate_config({"figma": {"nodeId": "12-34"}})
        assert "'12:34'" in capsys.readouterr().out


# ─── token / options ────────────────────────────────────────────────────────

def test_token_prefers_config(monkeypatch):
    monkeypatch.setenv("FIGMA_TOKEN", "from-env")
    assert resolve_token({"figma": {"personalAccessToken": "from-config"}}) == "from-config"
    assert resolve_token({}) == "from-env"


def test_token_missing(monkeypatch):
    monkeypatch.delenv("FIGMA_TOKEN", raising=False)
    assert resolve_token({}) == ""


def test_default_options():
    options = pipeline_options_from_config({})
    assert options.ignore_patterns is None
    assert options.exclude_ids == set()
    assert options.unwrap_groups
    assert options.detect_safe_area
    assert options.detect_modal_overlay


def test_options_from_config():
    options = pipeline_options_from_config({
        "normalize": {"ignorePatterns": ["*draft*"], "excludeIds": ["1:2"], "unwrapGroups": False},
        "detection": {"modalOverlay": False},
    })
    assert options.ignore_patterns == [*DEFAULT_IGNORE_PATTERNS, "*draft*"]
    assert options.exclude_ids == {"1:2"}
    assert not options.unwrap_groups
    assert options.detect_safe_area
    assert not options.detect_modal_overlay
