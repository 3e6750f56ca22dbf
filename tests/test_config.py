"""
Settings Loading Tests
"""

import json

import pytest

from storyboard.config import (
    SETTINGS_ENV_VAR, StoryboardSettings, load_settings, parse_mode, settings_from_mapping
)
from storyboard.contracts.base import ConfigError, LayoutConfig, LayoutMode
from storyboard.contracts.codec import Condition, DateFormatSettings, NumberToken, StringToken


@pytest.fixture(autouse=True)
def no_env_settings(monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)


def write_settings(tmp_path, data) -> str:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestDefaults:

    def test_no_path_no_env(self):
        settings = load_settings()
        assert settings.layout == LayoutConfig()
        assert settings.dates == DateFormatSettings()

    def test_post_init_fills_sections(self):
        settings = StoryboardSettings(layout=LayoutConfig(x_scale=2))
        assert settings.layout.x_scale == 2
        assert settings.dates == DateFormatSettings()


class TestMapping:

    def test_snake_and_camel_case(self):
        settings = settings_from_mapping({
            "layout": {"mode": "Ordered", "xScale": 3, "arc_spacing": 250, "nodeGapX": 10, "unknown": 1}
        })
        assert settings.layout == LayoutConfig(
            mode=LayoutMode.ORDERED, x_scale=3, arc_spacing=250, node_gap_x=10
        )

    def test_dates_section(self):
        settings = settings_from_mapping({"dates": {
            "parser_regex": r"(?<y>\d+)",
            "group_priority": ["y"],
            "display_format": "Year {y}",
            "apply_conditional_formatting": True,
            "tokens": [
                {"name": "y", "min_length": 3, "formatting": [
                    {"evaluations": [{"condition": "lessorequal", "value": 0}], "format": "{value}!"}
                ]},
                {"type": "string", "name": "M", "dictionary": ["Thaw", "Harvest"]},
            ],
        }})
        dates = settings.dates
        assert dates.group_priority == ("y",)
        assert dates.token("y") == NumberToken(
            name="y", min_length=3, formatting=dates.token("y").formatting
        )
        assert dates.token("y").formatting[0].evaluations[0].condition is Condition.LESS_OR_EQUAL
        assert dates.token("M") == StringToken(name="M", dictionary=("Thaw", "Harvest"))

    @pytest.mark.parametrize("data", [
        {"layout": {"mode": "sideways"}},
        {"layout": {"x_scale": "ten"}},
        {"layout": {"x_scale": True}},
        {"layout": []},
        {"dates": {"tokens": [{"type": "emoji", "name": "y"}]}},
        {"dates": {"tokens": [{"min_length": 2}]}},
        {"dates": {"group_priority": "y,M,d"}},
        {"dates": {"tokens": [{"name": "y", "formatting": [
            {"evaluations": [{"condition": "ROUGHLY", "value": 1}]}
        ]}]}},
        [],
    ])
    def test_invalid_values_raise(self, data):
        with pytest.raises(ConfigError):
            settings_from_mapping(data)

    def test_parse_mode_accepts_enum(self):
        assert parse_mode(LayoutMode.ABSOLUTE) is LayoutMode.ABSOLUTE


class TestLoading:

    def test_explicit_path(self, tmp_path):
        path = write_settings(tmp_path, {"layout": {"mode": "ordered"}})
        assert load_settings(path).layout.mode is LayoutMode.ORDERED

    def test_env_var(self, tmp_path, monkeypatch):
        path = write_settings(tmp_path, {"layout": {"x_scale": 42}})
        monkeypatch.setenv(SETTINGS_ENV_VAR, path)
        assert load_settings().layout.x_scale == 42

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(str(tmp_path / "absent.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(str(path))

    def test_loading_does_not_validate_ranges(self, tmp_path):
        # Range checks belong to the engine (InvalidLayoutConfigError)
        path = write_settings(tmp_path, {"layout": {"x_scale": 0}})
        assert load_settings(path).layout.x_scale == 0
