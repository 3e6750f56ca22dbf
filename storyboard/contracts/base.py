"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.
No behavior beyond trivial derived properties, no side effects.

BOUNDARY ENFORCEMENT:
=====================
- Scenes are read-only snapshots produced by the extraction step
- The core never mutates a Scene, it only returns ChangeProposals
- Positions computed here are intentions; the host document owns storage
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple
from enum import Enum, auto


# An ordered sequence of integer segments, most significant first.
# [year, month, day] or a longer fantasy-calendar tuple.
AbstractDate = Tuple[int, ...]

DEFAULT_ARC = "default"


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for data-level problems.
    These are recorded as values, never raised from the core.
    """
    # Extraction errors
    MISSING_ID = auto()
    MISSING_DATE = auto()
    UNPARSABLE_DATE = auto()
    INVALID_TENSION = auto()
    MALFORMED_DEPENDENCY = auto()

    # Configuration errors
    INVALID_LAYOUT_CONFIG = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and reported.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: str) -> Error:
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple(sorted((k, str(v)) for k, v in context.items()))
        )


class StoryboardError(Exception):
    """Base class for precondition violations raised at the caller boundary."""
    pass


class ConfigError(StoryboardError):
    """Settings file or mapping could not be turned into settings."""
    pass


class InvalidLayoutConfigError(ConfigError):
    """LayoutConfig violates its invariants (non-positive scale/spacing...)."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("Invalid layout config: " + "; ".join(self.violations))


class DateCodecError(StoryboardError):
    """Date settings cannot encode the given date."""
    pass


class SceneNotFoundError(StoryboardError):
    """A scene id was requested that is not part of the snapshot."""
    pass


# =============================================================================
# SCENE TYPES
# =============================================================================

class DependencyKind(Enum):
    """Direction of a semantic ordering constraint: 'A kind B'."""
    BEFORE = "before"
    AFTER = "after"

    def inverse(self) -> DependencyKind:
        return DependencyKind.AFTER if self is DependencyKind.BEFORE else DependencyKind.BEFORE


@dataclass(frozen=True)
class Dependency:
    """
    Directed constraint declared on a scene.

    Dependency("B", AFTER) on scene A reads "A happens after B".
    """
    target_title: str
    kind: DependencyKind

    def to_token(self) -> str:
        """
        Storage form used by the host document.

        The host token describes the target relative to the owner, so
        Dependency("B", AFTER) is written as 'B:before'.
        """
        return f"{self.target_title}:{self.kind.inverse().value}"


@dataclass(frozen=True)
class Scene:
    """
    One tagged unit of narrative content.

    `id` is a stable reference into the host document. Scenes are produced
    by the extraction step and are read-only inputs to every core component.
    """
    id: str
    date: AbstractDate
    arc: str = DEFAULT_ARC
    title: str = ""
    end_date: Optional[AbstractDate] = None
    tension: Optional[int] = None
    dependencies: Tuple[Dependency, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept lists from callers, store tuples
        object.__setattr__(self, 'date', tuple(self.date))
        if self.end_date is not None:
            object.__setattr__(self, 'end_date', tuple(self.end_date))
        object.__setattr__(self, 'dependencies', tuple(self.dependencies))

    @property
    def label(self) -> str:
        return self.title or self.id


# =============================================================================
# GEOMETRY TYPES
# =============================================================================

@dataclass(frozen=True)
class Position:
    """Canvas coordinate. Owned by the host document."""
    x: float
    y: float


# scene id -> current on-canvas position, as extracted from the host document
LiveGeometry = Mapping[str, Position]

PositionMap = Dict[str, Position]


class LayoutMode(Enum):
    """
    ABSOLUTE: X scales with elapsed time, with per-lane crowd avoidance.
    ORDERED: nodes spaced evenly in chronological sequence.
    """
    ABSOLUTE = "absolute"
    ORDERED = "ordered"


@dataclass(frozen=True)
class LayoutConfig:
    """
    Layout parameters.

    INVARIANTS (caller-validated, the core does not defend):
    - arc_spacing > 0, x_scale > 0
    - node_width >= 0, node_height >= 0
    """
    mode: LayoutMode = LayoutMode.ABSOLUTE
    x_scale: float = 10
    arc_spacing: float = 500
    node_width: float = 400
    node_height: float = 300
    node_gap_x: float = 50

    @property
    def slot_width(self) -> float:
        """Uniform spacing used by ORDERED mode."""
        return self.node_width + 2 * self.node_gap_x

    @property
    def crowd_gap(self) -> float:
        """Minimum distance between consecutive same-lane nodes in ABSOLUTE mode."""
        return self.node_width + self.node_gap_x

    def validate(self) -> List[str]:
        """Return the list of violated invariants (empty when valid)."""
        violations = []
        if not self.x_scale > 0:
            violations.append(f"x_scale must be > 0 (got {self.x_scale})")
        if not self.arc_spacing > 0:
            violations.append(f"arc_spacing must be > 0 (got {self.arc_spacing})")
        if self.node_width < 0:
            violations.append(f"node_width must be >= 0 (got {self.node_width})")
        if self.node_height < 0:
            violations.append(f"node_height must be >= 0 (got {self.node_height})")
        return violations


# =============================================================================
# DERIVED RESULTS
# =============================================================================

@dataclass(frozen=True)
class TimelineExtent:
    """Earliest start and latest end across a scene set."""
    min: AbstractDate
    max: AbstractDate


@dataclass(frozen=True)
class ConstraintWindow:
    """
    Allowed date window for one scene, recomputed on demand.

    An unsatisfiable window (earliest > latest) is a legitimate result;
    surfacing it is the caller's job.
    """
    earliest: Optional[AbstractDate] = None
    earliest_source: str = ""
    latest: Optional[AbstractDate] = None
    latest_source: str = ""

    @property
    def is_satisfiable(self) -> bool:
        from ..temporal.abstract_date import compare
        if self.earliest is None or self.latest is None:
            return True
        return compare(self.earliest, self.latest) <= 0

    def contains(self, date: AbstractDate) -> bool:
        """Inclusive bounds check."""
        from ..temporal.abstract_date import compare
        if self.earliest is not None and compare(date, self.earliest) < 0:
            return False
        if self.latest is not None and compare(date, self.latest) > 0:
            return False
        return True


@dataclass(frozen=True)
class ChangeProposal:
    """
    Unapplied suggestion of a new arc and/or date for a scene.
    Never applied by the core.
    """
    scene: Scene
    new_arc: Optional[str] = None
    new_date: Optional[AbstractDate] = None
    reason: str = ""

    @property
    def scene_id(self) -> str:
        return self.scene.id
