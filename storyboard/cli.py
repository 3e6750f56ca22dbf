"""
Storyboard CLI
==============

Runs the engine over a JSON snapshot file without a host application.

A snapshot is either a list of scene records, or an object with
"records" (or canvas-style "nodes") and, for `build`, optional
"existing_ids", "existing_edges" and "links".

Usage:
    python -m storyboard.cli layout snapshot.json
    python -m storyboard.cli sync snapshot.json
    python -m storyboard.cli window snapshot.json node-3
    python -m storyboard.cli build snapshot.json
    python -m storyboard.cli extent snapshot.json
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .api.mapper import map_build_plan
from .config import load_settings
from .contracts.base import ConfigError, SceneNotFoundError, StoryboardError
from .engine import StoryboardEngine


def load_snapshot(path: str) -> Dict[str, Any]:
    """Read a snapshot file into {"records": [...], ...}."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read snapshot {path}: {e}") from e

    if isinstance(data, list):
        return {"records": data}
    if isinstance(data, dict):
        records = data.get("records", data.get("nodes", []))
        return dict(data, records=records)
    raise ConfigError(f"Snapshot {path} must be a list or an object")


def _report_issues(result) -> None:
    for issue in result.issues:
        context = ", ".join(f"{k}={v}" for k, v in issue.context)
        print(f"[WARN] {issue.code.name}: {issue.message} ({context})")


def cmd_layout(engine: StoryboardEngine, args) -> int:
    result = engine.extract(load_snapshot(args.snapshot)["records"])
    _report_issues(result)
    positions = engine.arrange(result.scenes)

    print("SCENE | ARC | DATE | X | Y")
    print("-" * 60)
    for scene in result.scenes:
        p = positions[scene.id]
        print(f"{scene.id} | {scene.arc} | {engine.format_date(scene.date)} | {p.x:g} | {p.y:g}")
    return 0


def cmd_sync(engine: StoryboardEngine, args) -> int:
    result = engine.extract(load_snapshot(args.snapshot)["records"])
    _report_issues(result)
    proposals = engine.sync(result.scenes, result.geometry)

    if not proposals:
        print("[*] Nothing to sync.")
        return 0
    for proposal in proposals:
        print(f"[PROPOSAL] {proposal.scene_id}: {proposal.reason}")
    return 0


def cmd_window(engine: StoryboardEngine, args) -> int:
    result = engine.extract(load_snapshot(args.snapshot)["records"])
    try:
        window = engine.window_for(args.scene_id, result.scenes)
    except SceneNotFoundError as e:
        print(f"[!] {e}")
        return 1

    earliest = engine.format_date(window.earliest) if window.earliest else "-"
    latest = engine.format_date(window.latest) if window.latest else "-"
    print(f"Earliest: {earliest}  {window.earliest_source}")
    print(f"Latest:   {latest}  {window.latest_source}")
    if not window.is_satisfiable:
        print("[WARN] No date satisfies every constraint.")
    return 0


def cmd_build(engine: StoryboardEngine, args) -> int:
    snapshot = load_snapshot(args.snapshot)
    result = engine.extract(snapshot["records"])
    plan = engine.build(
        result.scenes,
        existing_ids=snapshot.get("existing_ids", []),
        existing_edges=[tuple(pair) for pair in snapshot.get("existing_edges", []) if len(pair) == 2],
        links=snapshot.get("links"),
    )
    print(json.dumps(map_build_plan(plan), indent=2))
    return 0


def cmd_extent(engine: StoryboardEngine, args) -> int:
    result = engine.extract(load_snapshot(args.snapshot)["records"])
    extent = engine.extent(result.scenes)
    if extent is None:
        print("[!] No dated scenes.")
        return 1
    print(f"{engine.format_date(extent.min)} .. {engine.format_date(extent.max)}")
    return 0


COMMANDS = {
    "layout": cmd_layout,
    "sync": cmd_sync,
    "window": cmd_window,
    "build": cmd_build,
    "extent": cmd_extent,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Storyboard timeline engine")
    parser.add_argument("--settings", default=None, help="Path to settings JSON (default: $STORYBOARD_SETTINGS)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("layout", "Print canonical positions"),
        ("sync", "Print proposed edits for the snapshot geometry"),
        ("build", "Print the full rebuild plan as JSON"),
        ("extent", "Print the timeline extent"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("snapshot", help="Snapshot JSON file")

    window_parser = subparsers.add_parser("window", help="Print the allowed date window of a scene")
    window_parser.add_argument("snapshot", help="Snapshot JSON file")
    window_parser.add_argument("scene_id", help="Scene id")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    try:
        engine = StoryboardEngine(load_settings(args.settings))
        return command(engine, args)
    except StoryboardError as e:
        print(f"[!] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
