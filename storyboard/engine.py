"""
Engine Orchestration Module

Single entry point the API and CLI talk to. Wires settings, the date
codec and the clock into the pure core functions.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. The engine keeps no snapshot between calls; every call receives one
3. Settings are validated once, at construction
4. Proposals and plans are returned, never applied
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import StoryboardSettings, load_settings
from .contracts.base import (
    AbstractDate, ChangeProposal, ConstraintWindow, Dependency,
    InvalidLayoutConfigError, LayoutConfig, LiveGeometry, Position,
    PositionMap, Scene, SceneNotFoundError, TimelineExtent
)
from .core import (
    DependencyGraph, GeneratedEdge, MarkerNode, MirrorEdge, PlaybackStep,
    ScenePlacement, calculate_layout, calculate_sync_changes, compute_window,
    generated_ids, place_new_scene, plan_chronological_edges, plan_link_edges,
    plan_markers, playback_sequence
)
from .ingestion import ExtractionResult, SceneExtractor
from .temporal.abstract_date import timeline_extent
from .temporal.clock import CalendarClock, resolve_clock
from .temporal.codec import RegexDateCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildPlan:
    """
    Everything a rebuild writes to the host document.

    The host deletes `purge_ids` first, then moves scenes to `positions`
    and adds `edges` and `markers`.
    """
    positions: PositionMap
    purge_ids: Tuple[str, ...] = field(default_factory=tuple)
    edges: Tuple[GeneratedEdge, ...] = field(default_factory=tuple)
    markers: Tuple[MarkerNode, ...] = field(default_factory=tuple)


class StoryboardEngine:
    """
    Unified facade over extraction, layout, inversion, constraints and
    reconciliation.

    FLOW:
    =====
    1. extract: host records -> Scenes + live geometry
    2. arrange / build: Scenes -> positions (+ generated artifacts)
    3. interpret_drop / window_for: answer interactive queries
    4. sync: live geometry after a drag -> ChangeProposals
    """

    def __init__(
        self,
        settings: Optional[StoryboardSettings] = None,
        clock: Optional[CalendarClock] = None
    ):
        self._settings = settings or StoryboardSettings()
        violations = self._settings.layout.validate()
        if violations:
            raise InvalidLayoutConfigError(violations)

        self._codec = RegexDateCodec(self._settings.dates)
        self._extractor = SceneExtractor(self._codec)
        self._clock = resolve_clock(clock)
        logger.debug("Engine ready (mode=%s)", self._settings.layout.mode.value)

    @classmethod
    def from_settings_file(
        cls,
        path: Optional[str] = None,
        clock: Optional[CalendarClock] = None
    ) -> StoryboardEngine:
        return cls(load_settings(path), clock=clock)

    @property
    def settings(self) -> StoryboardSettings:
        return self._settings

    @property
    def layout_config(self) -> LayoutConfig:
        return self._settings.layout

    def format_date(self, date: AbstractDate) -> str:
        return self._codec.encode(date)

    # =========================================================================
    # EXTRACTION
    # =========================================================================

    def extract(self, records: Iterable[Mapping[str, Any]]) -> ExtractionResult:
        result = self._extractor.extract(records)
        for issue in result.issues:
            logger.debug("Extraction issue %s: %s %s", issue.code.name, issue.message, dict(issue.context))
        return result

    # =========================================================================
    # FORWARD LAYOUT
    # =========================================================================

    def arrange(self, scenes: Sequence[Scene]) -> PositionMap:
        return calculate_layout(scenes, self.layout_config)

    def extent(self, scenes: Sequence[Scene]) -> Optional[TimelineExtent]:
        return timeline_extent(scenes)

    def build(
        self,
        scenes: Sequence[Scene],
        existing_ids: Iterable[str] = (),
        existing_edges: Iterable[Tuple[str, str]] = (),
        links: Optional[Mapping[str, Iterable[str]]] = None
    ) -> BuildPlan:
        """
        Full rebuild: purge previously generated artifacts, lay out every
        scene and regenerate edges and markers.

        `existing_edges` are user-authored (from, to) pairs that are not
        duplicated by generated edges.
        """
        existing_edges = list(existing_edges)
        purge = generated_ids(existing_ids)
        positions = self.arrange(scenes)

        edges = plan_chronological_edges(scenes, existing_edges)
        if links:
            taken = existing_edges + [(e.from_node, e.to_node) for e in edges]
            edges += plan_link_edges(links, (s.id for s in scenes), taken)

        markers = plan_markers(scenes, positions, self.layout_config, self.format_date)

        logger.info(
            "Build plan: %d scenes, purge %d, %d edges, %d markers",
            len(positions), len(purge), len(edges), len(markers)
        )
        return BuildPlan(
            positions=positions,
            purge_ids=tuple(purge),
            edges=tuple(edges),
            markers=tuple(markers),
        )

    # =========================================================================
    # INTERACTIVE QUERIES
    # =========================================================================

    def interpret_drop(
        self,
        position: Position,
        scenes: Sequence[Scene],
        geometry: LiveGeometry
    ) -> ScenePlacement:
        """Arc and date for a scene created at `position`."""
        return place_new_scene(position, scenes, geometry, self.layout_config, self._clock)

    def window_for(
        self,
        scene_id: str,
        scenes: Sequence[Scene],
        dependencies: Optional[Sequence[Dependency]] = None
    ) -> ConstraintWindow:
        """
        Allowed date window for the scene with `scene_id`.

        Raises SceneNotFoundError when the id is not in the snapshot.
        """
        scene = next((s for s in scenes if s.id == scene_id), None)
        if scene is None:
            raise SceneNotFoundError(f"Scene {scene_id!r} is not in the snapshot")

        window = compute_window(scene, scenes, dependencies)
        if not window.is_satisfiable:
            logger.warning(
                "Scene %s has no valid date: earliest %s (%s) > latest %s (%s)",
                scene_id, window.earliest, window.earliest_source,
                window.latest, window.latest_source
            )
        return window

    def sync(self, scenes: Sequence[Scene], geometry: LiveGeometry) -> List[ChangeProposal]:
        proposals = calculate_sync_changes(scenes, geometry, self.layout_config, self.format_date)
        if proposals:
            logger.info("Sync proposes %d change(s)", len(proposals))
        return proposals

    def mirror_dependencies(self, scenes: Sequence[Scene]) -> List[MirrorEdge]:
        """Declarations to add so every dependency is stored on both ends."""
        graph = DependencyGraph.from_scenes(scenes)
        dangling = graph.dangling_targets()
        if dangling:
            logger.info("Dependencies reference unknown scenes: %s", sorted(dangling))
        return graph.missing_mirrors()

    def playback(self, scenes: Sequence[Scene], geometry: LiveGeometry) -> List[PlaybackStep]:
        return playback_sequence(scenes, geometry, self.layout_config)
