#!/usr/bin/env python3
"""
screen-ir CLI — Figma → 語意 IR

  screen-ir lower export.json                  # 存檔的 Figma JSON → IR
  screen-ir lower --url 'https://www.figma.com/design/KEY/x?node-id=1-2'
  screen-ir preview export.json                # 預覽 IR 樹
  screen-ir watch export.json                  # 檔案變更時自動重新 lower
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from . import __version__
from .config import DEFAULT_CONFIG_PATH, load_config, pipeline_options_from_config, resolve_token
from .figma_reader import FigmaAPIClient, FigmaAPIError, FigmaNodeParser, load_raw_tree, parse_figma_url
from .naming_engine import preview_ir_tree, to_valid_identifier
from .pipeline import dump_screen_ir, transform_to_screen_ir
from .types import walk_ir


def _count_nodes(screen) -> int:
    return sum(1 for _ in walk_ir(screen.root))


def _report_api_error(e: FigmaAPIError, file_key: str = "", node_id: str = "") -> None:
    if e.status_code == 403:
        print("❌ Figma API 403：Token 無效或已過期，請重新產生 FIGMA_TOKEN。")
    elif e.status_code == 404:
        print(f"❌ Figma API 404：找不到檔案 '{file_key}' 或節點 '{node_id}'，請確認 URL / node-id。")
    elif e.status_code == 429:
        print("❌ Figma API 429：請求過於頻繁，請稍後再試。")
    else:
        print(f"❌ Figma API 錯誤：{e}")


def fetch_raw_tree(args, config: dict):
    """依 --url / --file-key / config 從 Figma 取得 RawNode 樹；失敗回傳 None."""
    figma_cfg = config.get("figma", {})
    token = resolve_token(config)
    file_key = getattr(args, "file_key", None) or figma_cfg.get("fileKey")
    node_id = getattr(args, "node_id", None) or figma_cfg.get("nodeId")
    if getattr(args, "url", None):
        try:
            file_key, node_id = parse_figma_url(args.url)
        except FigmaAPIError as e:
            print(f"❌ {e}")
            return None

    if not token:
        print(f"❌ 請設定 FIGMA_TOKEN 環境變數，或在 {DEFAULT_CONFIG_PATH} 的 figma.personalAccessToken 設定。")
        print("   取得方式：Figma → Settings → Personal access tokens → 新增")
        return None
    if not file_key or not node_id:
        print("❌ 請使用 --url，或以 --file-key / --node-id（或 config 的 figma.fileKey / figma.nodeId）指定節點。")
        return None

    node_id = node_id.replace("-", ":")
    print(f"📥 Fetching {node_id} from Figma file {file_key}")
    client = FigmaAPIClient(token)
    try:
        document = client.fetch_node(file_key, node_id)
    except FigmaAPIError as e:
        _report_api_error(e, file_key, node_id)
        return None
    return FigmaNodeParser().parse(document)


def _read_input(args, config: dict):
    if getattr(args, "input", None):
        try:
            return load_raw_tree(args.input)
        except (OSError, ValueError) as e:
            print(f"❌ 無法讀取 '{args.input}'：{e}")
            return None
    return fetch_raw_tree(args, config)


def lower_and_save(raw, config: dict, output_dir: str, indent=2) -> Path:
    """Lower 一棵 RawNode 樹並寫出 <name>.ir.json，回傳輸出路徑."""
    screen = transform_to_screen_ir(raw, pipeline_options_from_config(config))
    os.makedirs(output_dir, exist_ok=True)
    out_path = Path(output_dir) / f"{to_valid_identifier(screen.name)}.ir.json"
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(dump_screen_ir(screen, indent=indent))
        f.write("\n")

    detection = screen.detection
    print(f"   ✅ {_count_nodes(screen)} IR nodes, {len(screen.styles_bundle.styles)} styles")
    if detection.lists or detection.components:
        print(f"   🔁 {len(detection.lists)} list(s), {len(detection.components)} repeated component(s)")
    if detection.modal and detection.modal.has_modal_overlay:
        print(f"   🪟 Modal overlay: {detection.modal.modal_type} ({detection.modal.content_name})")
    if screen.has_safe_area_layout:
        insets = screen.safe_area_insets
        print(f"   📱 Safe area insets: top={insets.top} bottom={insets.bottom}")
    print(f"   📄 Saved to {out_path}")
    return out_path


def _output_settings(args, config: dict) -> tuple:
    output_cfg = config.get("output", {})
    output_dir = getattr(args, "output", None) or output_cfg.get("dir") or "./screen-ir-out"
    indent = output_cfg.get("indent", 2)
    return output_dir, indent


def cmd_lower(args, config: dict) -> int:
    """Lower: Figma JSON（檔案或 API）→ IR JSON."""
    raw = _read_input(args, config)
    if raw is None:
        return 1
    print(f"🚀 Lowering '{raw.name}' ({raw.id})")
    output_dir, indent = _output_settings(args, config)
    lower_and_save(raw, config, output_dir, indent)
    return 0


def cmd_preview(args, config: dict) -> int:
    """預覽 IR 樹."""
    raw = _read_input(args, config)
    if raw is None:
        return 1
    print(f"👁️  Preview IR tree: {raw.name}")
    screen = transform_to_screen_ir(raw, pipeline_options_from_config(config))
    print(preview_ir_tree(screen.root))
    print(f"\nTotal nodes: {_count_nodes(screen)}")
    return 0


_WATCHED_EXTENSIONS = (".json",)


class ChangeHandler(FileSystemEventHandler):
    """檔案變更事件處理器，帶 debounce 防抖。"""

    def __init__(self, callback, target=None, debounce: float = 1.0):
        self.callback = callback
        self.target = Path(target).resolve() if target else None
        self.last_trigger = 0.0
        self.debounce_seconds = debounce

    def on_modified(self, event):
        if event.is_directory:
            return
        if not event.src_path.endswith(_WATCHED_EXTENSIONS):
            return
        if self.target is not None and Path(event.src_path).resolve() != self.target:
            return
        current_time = time.time()
        if current_time - self.last_trigger < self.debounce_seconds:
            return
        self.last_trigger = current_time
        print(f"\n🔄 File changed: {event.src_path}")
        self.callback(event.src_path)


def cmd_watch(args, config: dict) -> int:
    """Watch: 監聽 Figma JSON 變更並自動重新 lower."""
    target = Path(args.input)
    if not target.exists():
        print(f"❌ 找不到 '{target}'")
        return 1
    output_dir, indent = _output_settings(args, config)
    print(f"👀 Watching '{target}' for changes...")
    print(f"   Output: {output_dir}")
    print("   Press Ctrl+C to stop.")

    def relower(path: str) -> None:
        try:
            raw = load_raw_tree(path)
        except (OSError, ValueError) as e:
            # 編輯器存檔到一半時 JSON 可能不完整
            print(f"   ⚠️  無法讀取 '{path}'：{e}")
            return
        lower_and_save(raw, config, output_dir, indent)

    # 初始執行一次
    relower(str(target))

    event_handler = ChangeHandler(relower, target=target)
    observer = Observer()
    observer.schedule(event_handler, path=str(target.resolve().parent), recursive=False)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopping watch...")
        observer.stop()
    finally:
        observer.join()
    return 0


def _add_source_args(p) -> None:
    p.add_argument("input", nargs="?", help="Saved Figma node JSON (omit to fetch from the API)")
    p.add_argument("--url", help="Figma URL with node-id")
    p.add_argument("--file-key", help="Figma file key")
    p.add_argument("--node-id", help="Figma node id (1:2 or 1-2)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screen-ir",
        description="screen-ir: Figma → semantic IR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config path")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Debug logging for every pipeline stage")
    sub = parser.add_subparsers(dest="command")

    lower_p = sub.add_parser("lower", help="Figma JSON → IR JSON",
        epilog="Examples:\n  screen-ir lower export.json -o ./ir\n  screen-ir lower --file-key ABC123 --node-id 1:2",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    _add_source_args(lower_p)
    lower_p.add_argument("--output", "-o", help="Output directory")

    preview_p = sub.add_parser("preview", help="Preview IR tree",
        epilog="Examples:\n  screen-ir preview export.json\n  screen-ir preview --url 'https://www.figma.com/design/KEY/App?node-id=1-2'",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    _add_source_args(preview_p)

    watch_p = sub.add_parser("watch", help="Re-lower a JSON export whenever it changes",
        epilog="Examples:\n  screen-ir watch export.json -o ./ir",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    watch_p.add_argument("input", help="Saved Figma node JSON")
    watch_p.add_argument("--output", "-o", help="Output directory")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    config = load_config(args.config)

    if args.command == "lower":
        return cmd_lower(args, config)
    if args.command == "preview":
        return cmd_preview(args, config)
    if args.command == "watch":
        return cmd_watch(args, config)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
