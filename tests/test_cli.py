"""
CLI Tests
=========

Runs the argparse entry point against snapshot files in tmp_path.
"""

import json

import pytest

from storyboard.cli import load_snapshot, main
from storyboard.config import SETTINGS_ENV_VAR
from storyboard.contracts.base import ConfigError
from tests.fixtures import make_record


@pytest.fixture(autouse=True)
def no_env_settings(monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)


@pytest.fixture
def snapshot(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({
        "records": [
            make_record("P", "2024-01-10", arc="Main", x=0, y=0),
            make_record("Q", "2024-01-15", arc="Main", x=450, y=0),
            make_record("R", "2024-02-01", arc="Main", x=200, y=0),
        ],
        "existing_ids": ["storyboard-marker-arc-0"],
    }), encoding="utf-8")
    return str(path)


def test_layout(snapshot, capsys):
    assert main(["layout", snapshot]) == 0
    out = capsys.readouterr().out
    assert "P | Main | 2024-01-10 | 0 | 0" in out
    assert "R | Main | 2024-02-01 | 900 | 0" in out


def test_sync(snapshot, capsys):
    assert main(["sync", snapshot]) == 0
    out = capsys.readouterr().out
    assert "[PROPOSAL] R:" in out
    assert "Suggesting new date: 2024-01-12" in out


def test_window(snapshot, capsys):
    assert main(["window", snapshot, "Q"]) == 0
    out = capsys.readouterr().out
    assert "Earliest: 2024-01-10" in out
    assert "Latest:   2024-02-01" in out


def test_window_unknown_scene(snapshot, capsys):
    assert main(["window", snapshot, "Z"]) == 1
    assert "[!]" in capsys.readouterr().out


def test_build_prints_json(snapshot, capsys):
    assert main(["build", snapshot]) == 0
    plan = json.loads(capsys.readouterr().out)
    assert plan["purge_ids"] == ["storyboard-marker-arc-0"]
    assert len(plan["edges"]) == 2


def test_extent(snapshot, capsys):
    assert main(["extent", snapshot]) == 0
    assert "2024-01-10 .. 2024-02-01" in capsys.readouterr().out


def test_settings_option(snapshot, tmp_path, capsys):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"layout": {"mode": "ordered"}}), encoding="utf-8")
    assert main(["--settings", str(settings), "layout", snapshot]) == 0
    assert "Q | Main | 2024-01-15 | 500 | 0" in capsys.readouterr().out


def test_invalid_settings_exit_code(snapshot, tmp_path, capsys):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"layout": {"arc_spacing": 0}}), encoding="utf-8")
    assert main(["--settings", str(settings), "layout", snapshot]) == 2
    assert "arc_spacing" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_snapshot_shapes(tmp_path):
    listed = tmp_path / "list.json"
    listed.write_text(json.dumps([{"id": "a"}]), encoding="utf-8")
    canvas = tmp_path / "canvas.json"
    canvas.write_text(json.dumps({"nodes": [{"id": "b"}]}), encoding="utf-8")

    assert load_snapshot(str(listed))["records"] == [{"id": "a"}]
    assert load_snapshot(str(canvas))["records"] == [{"id": "b"}]
    with pytest.raises(ConfigError):
        load_snapshot(str(tmp_path / "missing.json"))
