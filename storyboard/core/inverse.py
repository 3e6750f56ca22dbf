"""
Inverse Layout Engine
=====================

Canvas position -> arc name / synthesized date.

Both directions work from the scenes' ACTUAL current positions supplied
by the caller, since hand-dragged nodes no longer sit on the canonical
layout grid.

NO INTERPOLATION:
=================
Segments may be dictionary tokens (moon names, seasons) with no generic
midpoint, so a synthesized date is always one least-significant step
away from a known neighbour, never an interpolated value.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..contracts.base import (
    AbstractDate, DEFAULT_ARC, LayoutConfig, LayoutMode, LiveGeometry, Position, Scene
)
from ..temporal.abstract_date import nudge, sort_chronologically, to_ordinal
from ..temporal.clock import CalendarClock, resolve_clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenePlacement:
    """Interpretation of a drop point: which lane, which date."""
    arc: str
    date: AbstractDate


# =============================================================================
# Y -> ARC
# =============================================================================

def arc_centroids(scenes: Sequence[Scene], geometry: LiveGeometry) -> Dict[str, float]:
    """
    Average live Y per arc, in order of first appearance.

    Scenes without a live position are left out.
    """
    ys: Dict[str, List[float]] = {}
    for scene in scenes:
        position = geometry.get(scene.id)
        if position is None:
            continue
        ys.setdefault(scene.arc, []).append(position.y)
    return {arc: float(np.mean(values)) for arc, values in ys.items()}


def arc_from_y(
    y: float,
    scenes: Sequence[Scene],
    geometry: LiveGeometry,
    config: LayoutConfig = LayoutConfig()
) -> str:
    """
    Arc lane a Y coordinate falls into.

    Lanes are ranked by the average live Y of their members, then `y` is
    snapped to the arc_spacing grid and clamped to the known lanes.
    """
    centroids = arc_centroids(scenes, geometry)
    if not centroids:
        return DEFAULT_ARC

    ranked = sorted(centroids, key=lambda arc: centroids[arc])
    lane = math.floor((y + config.arc_spacing / 2) / config.arc_spacing)
    lane = max(0, min(lane, len(ranked) - 1))
    return ranked[lane]


# =============================================================================
# X -> DATE
# =============================================================================

def _synthesize(
    before: Optional[Scene],
    after: Optional[Scene],
    clock: CalendarClock
) -> AbstractDate:
    if before is not None:
        return nudge(before.date, +1)
    if after is not None:
        return nudge(after.date, -1, floor=1)
    return clock.today_as_abstract()


def _bracket_by_ordinal(
    x: float,
    scenes: Sequence[Scene],
    config: LayoutConfig
) -> Tuple[Optional[Scene], Optional[Scene]]:
    ordered = sort_chronologically(scenes)
    ordinals = [to_ordinal(scene.date) for scene in ordered]
    target = x / config.x_scale + min(ordinals)

    before = None
    after = None
    for scene, ordinal in zip(ordered, ordinals):
        if ordinal <= target:
            before = scene
        elif after is None:
            after = scene
    return before, after


def _bracket_by_slot(
    x: float,
    scenes: Sequence[Scene],
    config: LayoutConfig,
    geometry: LiveGeometry
) -> Tuple[Optional[Scene], Optional[Scene]]:
    slot = config.slot_width
    ordered = sort_chronologically(scenes)

    placed = []
    for i, scene in enumerate(ordered):
        position = geometry.get(scene.id)
        px = position.x if position is not None else i * slot
        placed.append((px, scene))
    placed.sort(key=lambda item: item[0])

    def bucket(value: float) -> float:
        return math.floor(value / slot) if slot > 0 else value

    target = bucket(x)
    before = None
    after = None
    for px, scene in placed:
        if bucket(px) <= target:
            before = scene
        elif after is None:
            after = scene
    return before, after


def date_from_x(
    x: float,
    scenes: Sequence[Scene],
    config: LayoutConfig = LayoutConfig(),
    geometry: Optional[LiveGeometry] = None,
    clock: Optional[CalendarClock] = None
) -> AbstractDate:
    """
    Date a point on the X axis corresponds to.

    ABSOLUTE: invert the ordinal scaling and bracket over the whole scene
    set. ORDERED: bracket over physical X bucketed by slot width.
    The result is the "before" neighbour + 1 on its last segment, else the
    "after" neighbour - 1 (floored at 1), else today's date.
    """
    clock = resolve_clock(clock)
    if not scenes:
        return clock.today_as_abstract()

    if config.mode is LayoutMode.ORDERED:
        before, after = _bracket_by_slot(x, scenes, config, geometry or {})
    else:
        before, after = _bracket_by_ordinal(x, scenes, config)

    result = _synthesize(before, after, clock)
    logger.debug(
        "x=%s -> %s (before=%s, after=%s)",
        x, result,
        before.id if before else None,
        after.id if after else None
    )
    return result


def place_new_scene(
    position: Position,
    scenes: Sequence[Scene],
    geometry: LiveGeometry,
    config: LayoutConfig = LayoutConfig(),
    clock: Optional[CalendarClock] = None
) -> ScenePlacement:
    """Arc and date for a scene created at `position` (a dropped "ghost" node)."""
    return ScenePlacement(
        arc=arc_from_y(position.y, scenes, geometry, config),
        date=date_from_x(position.x, scenes, config, geometry=geometry, clock=clock)
    )
