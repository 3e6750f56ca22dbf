"""
Settings Loading
================

Settings are plain JSON. Either section may be omitted; unknown keys are
ignored. Layout keys accept snake_case or the camelCase spelling used by
the host plugin's settings file (xScale, arcSpacing...).

    {
        "layout": {"mode": "ordered", "x_scale": 10, "arc_spacing": 500},
        "dates": {
            "parser_regex": "(?<y>-?\\d+)-(?<M>\\d+)-(?<d>\\d+)",
            "group_priority": ["y", "M", "d"],
            "display_format": "{d} {M} {y}",
            "apply_conditional_formatting": true,
            "tokens": [
                {"type": "number", "name": "y", "min_length": 4,
                 "formatting": [{"evaluations": [{"condition": "LESS", "value": 0}],
                                 "format": "{value} BC"}]},
                {"type": "string", "name": "M", "dictionary": ["Jan", "Feb"]},
                {"type": "number", "name": "d", "min_length": 2, "hide_sign": true}
            ]
        }
    }

The settings path comes from the caller or the STORYBOARD_SETTINGS
environment variable. With neither, defaults apply.
"""

from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .contracts.base import ConfigError, LayoutConfig, LayoutMode
from .contracts.codec import (
    Condition, ConditionalFormat, DateFormatSettings, DateToken,
    Evaluation, NumberToken, StringToken
)

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "STORYBOARD_SETTINGS"

_LAYOUT_ALIASES = {
    "mode": "mode",
    "x_scale": "x_scale",
    "xScale": "x_scale",
    "arc_spacing": "arc_spacing",
    "arcSpacing": "arc_spacing",
    "node_width": "node_width",
    "nodeWidth": "node_width",
    "node_height": "node_height",
    "nodeHeight": "node_height",
    "node_gap_x": "node_gap_x",
    "nodeGapX": "node_gap_x",
}


@dataclass
class StoryboardSettings:
    """Unified settings for the engine, API and CLI."""
    layout: LayoutConfig = None
    dates: DateFormatSettings = None

    def __post_init__(self):
        self.layout = self.layout or LayoutConfig()
        self.dates = self.dates or DateFormatSettings()


# =============================================================================
# PARSING
# =============================================================================

def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where} must be an object, got {type(value).__name__}")
    return value


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{where} must be a number, got {value!r}")
    return value


def parse_mode(value: Any) -> LayoutMode:
    """'absolute' / 'ordered' (case-insensitive) -> LayoutMode."""
    if isinstance(value, LayoutMode):
        return value
    try:
        return LayoutMode(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in LayoutMode)
        raise ConfigError(f"layout.mode must be one of {choices}, got {value!r}") from None


def layout_from_mapping(data: Mapping[str, Any]) -> LayoutConfig:
    data = _require_mapping(data, "layout")
    values: Dict[str, Any] = {}
    for key, value in data.items():
        field_name = _LAYOUT_ALIASES.get(key)
        if field_name is None:
            continue
        if field_name == "mode":
            values["mode"] = parse_mode(value)
        else:
            values[field_name] = _number(value, f"layout.{key}")
    return LayoutConfig(**values)


def _formatting_from_list(items: Any, where: str) -> Tuple[ConditionalFormat, ...]:
    if not isinstance(items, list):
        raise ConfigError(f"{where}.formatting must be a list")
    result = []
    for i, item in enumerate(items):
        item = _require_mapping(item, f"{where}.formatting[{i}]")
        evaluations = []
        for raw in item.get("evaluations", []):
            raw = _require_mapping(raw, f"{where}.formatting[{i}].evaluations")
            try:
                condition = Condition(str(raw.get("condition", "")).upper())
            except ValueError:
                raise ConfigError(
                    f"{where}.formatting[{i}]: unknown condition {raw.get('condition')!r}"
                ) from None
            evaluations.append(Evaluation(
                condition=condition,
                value=int(_number(raw.get("value", 0), f"{where}.formatting[{i}].value"))
            ))
        result.append(ConditionalFormat(
            evaluations=tuple(evaluations),
            format=str(item.get("format", "{value}")),
            conditions_are_exclusive=bool(item.get("conditions_are_exclusive", False)),
        ))
    return tuple(result)


def token_from_mapping(data: Any, index: int) -> DateToken:
    where = f"dates.tokens[{index}]"
    data = _require_mapping(data, where)
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"{where} needs a name")

    formatting = _formatting_from_list(data.get("formatting", []), where)
    kind = data.get("type", "number")
    if kind == "number":
        return NumberToken(
            name=name,
            min_length=int(_number(data.get("min_length", 0), f"{where}.min_length")),
            display_when_zero=bool(data.get("display_when_zero", True)),
            hide_sign=bool(data.get("hide_sign", False)),
            formatting=formatting,
        )
    if kind == "string":
        dictionary = data.get("dictionary", [])
        if not isinstance(dictionary, list):
            raise ConfigError(f"{where}.dictionary must be a list")
        return StringToken(name=name, dictionary=tuple(str(d) for d in dictionary), formatting=formatting)
    raise ConfigError(f"{where}.type must be 'number' or 'string', got {kind!r}")


def dates_from_mapping(data: Mapping[str, Any]) -> DateFormatSettings:
    data = _require_mapping(data, "dates")
    defaults = DateFormatSettings()

    priority = data.get("group_priority", list(defaults.group_priority))
    if not isinstance(priority, list) or not all(isinstance(p, str) for p in priority):
        raise ConfigError("dates.group_priority must be a list of group names")

    tokens = defaults.tokens
    if "tokens" in data:
        if not isinstance(data["tokens"], list):
            raise ConfigError("dates.tokens must be a list")
        tokens = tuple(token_from_mapping(t, i) for i, t in enumerate(data["tokens"]))

    return DateFormatSettings(
        parser_regex=str(data.get("parser_regex", defaults.parser_regex)),
        group_priority=tuple(priority),
        display_format=str(data.get("display_format", defaults.display_format)),
        tokens=tokens,
        apply_conditional_formatting=bool(
            data.get("apply_conditional_formatting", defaults.apply_conditional_formatting)
        ),
    )


def settings_from_mapping(data: Mapping[str, Any]) -> StoryboardSettings:
    data = _require_mapping(data, "settings")
    layout = layout_from_mapping(data["layout"]) if "layout" in data else None
    dates = dates_from_mapping(data["dates"]) if "dates" in data else None
    return StoryboardSettings(layout=layout, dates=dates)


# =============================================================================
# LOADING
# =============================================================================

def load_settings(path: Optional[str] = None) -> StoryboardSettings:
    """
    Load settings from `path`, else from $STORYBOARD_SETTINGS, else defaults.

    Raises ConfigError for unreadable files, invalid JSON or bad values.
    """
    path = path or os.environ.get(SETTINGS_ENV_VAR)
    if not path:
        logger.debug("No settings file given, using defaults")
        return StoryboardSettings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Settings file {path} is not valid JSON: {e}") from e

    settings = settings_from_mapping(data)
    logger.info("Loaded settings from %s (mode=%s)", path, settings.layout.mode.value)
    return settings
