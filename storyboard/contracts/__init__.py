"""
Contracts Module

Explicit data types shared by every layer of the storyboard engine.
All inter-layer communication uses these contracts.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Data-level problems are values (Error), caller-boundary violations raise
3. Scenes are snapshots; the core proposes changes, never applies them
"""

from .base import (
    AbstractDate,
    DEFAULT_ARC,
    ErrorCode,
    Error,
    StoryboardError,
    ConfigError,
    InvalidLayoutConfigError,
    DateCodecError,
    SceneNotFoundError,
    DependencyKind,
    Dependency,
    Scene,
    Position,
    LiveGeometry,
    PositionMap,
    LayoutMode,
    LayoutConfig,
    TimelineExtent,
    ConstraintWindow,
    ChangeProposal,
)
from .codec import (
    Condition,
    Evaluation,
    ConditionalFormat,
    NumberToken,
    StringToken,
    DateFormatSettings,
    DEFAULT_DATE_FORMAT_SETTINGS,
    DateCodec,
)

__all__ = [
    "AbstractDate",
    "DEFAULT_ARC",
    "ErrorCode",
    "Error",
    "StoryboardError",
    "ConfigError",
    "InvalidLayoutConfigError",
    "DateCodecError",
    "SceneNotFoundError",
    "DependencyKind",
    "Dependency",
    "Scene",
    "Position",
    "LiveGeometry",
    "PositionMap",
    "LayoutMode",
    "LayoutConfig",
    "TimelineExtent",
    "ConstraintWindow",
    "ChangeProposal",
    "Condition",
    "Evaluation",
    "ConditionalFormat",
    "NumberToken",
    "StringToken",
    "DateFormatSettings",
    "DEFAULT_DATE_FORMAT_SETTINGS",
    "DateCodec",
]
