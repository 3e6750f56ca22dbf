"""
Reconciliation (Sync) Engine
============================

Diffs the live visual arrangement against stored scene data and proposes
minimal corrective edits.

HARD CONTRACT:
==============
Proposals are returned, never applied. Applying them is a separate,
explicit step owned by the caller so users can review first.

RULES:
======
1. Arc: nearest live-Y centroid among declared arcs; relabel only when
   strictly closer than arc_spacing / 2 (hysteresis band).
2. Date: the stored date must lie strictly between the stored dates of
   the immediate visual neighbours (live X order, all arcs).
3. Repair computes only the least significant segment. Between two
   neighbours the other segments come from the predecessor, so the new
   date lands in the gap; next to a single neighbour they are copied from
   the scene's current date.

UNTOUCHED SCENES:
=================
A scene still sitting on its canonical layout position (within
UNTOUCHED_TOLERANCE on both axes) was not dragged; it gets no proposal,
but it still serves as a neighbour for dragged scenes. Live geometry
equal to the last computed layout therefore yields no proposals.

NOT PROVIDED:
=============
Renumbering a whole arc to satisfy an arbitrary drag. Only immediate
neighbour violations are repaired.
"""

from __future__ import annotations
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..contracts.base import (
    AbstractDate, ChangeProposal, LayoutConfig, LiveGeometry, Position, Scene
)
from ..temporal.abstract_date import compare, format_plain, segment_at
from .inverse import arc_centroids
from .layout import calculate_layout

logger = logging.getLogger(__name__)


UNTOUCHED_TOLERANCE = 0.5

DateFormatter = Callable[[AbstractDate], str]


def is_untouched(live: Position, canonical: Optional[Position]) -> bool:
    if canonical is None:
        return False
    return (
        abs(live.x - canonical.x) <= UNTOUCHED_TOLERANCE
        and abs(live.y - canonical.y) <= UNTOUCHED_TOLERANCE
    )


def propose_arc(
    scene: Scene,
    live: Position,
    centroids: dict,
    config: LayoutConfig
) -> Optional[str]:
    """Arc the scene was dragged into, or None when it stays put."""
    closest = scene.arc
    min_distance = float("inf")
    for arc, centroid in centroids.items():
        distance = abs(live.y - centroid)
        if distance < min_distance:
            min_distance = distance
            closest = arc

    if closest != scene.arc and min_distance < config.arc_spacing / 2:
        return closest
    return None


def is_out_of_sequence(
    scene: Scene,
    predecessor: Optional[Scene],
    successor: Optional[Scene]
) -> bool:
    if predecessor is not None and compare(scene.date, predecessor.date) <= 0:
        return True
    if successor is not None and compare(scene.date, successor.date) >= 0:
        return True
    return False


def repair_date(
    scene: Scene,
    predecessor: Optional[Scene],
    successor: Optional[Scene]
) -> AbstractDate:
    """
    New date between the visual neighbours, computing only the last segment.

    Both neighbours: the predecessor's upper segments with the floor of the
    midpoint, or predecessor + 1 when the midpoint does not exceed the
    predecessor. One neighbour: the scene's own upper segments, +1 / -1.
    """
    segments = list(scene.date)
    last = len(segments) - 1

    if predecessor is not None and successor is not None:
        segments = [segment_at(predecessor.date, i) for i in range(len(segments))]
        low = segment_at(predecessor.date, last)
        high = segment_at(successor.date, last)
        value = (low + high) // 2
        if value <= low:
            value = low + 1
        segments[last] = value
    elif predecessor is not None:
        segments[last] = segment_at(predecessor.date, last) + 1
    elif successor is not None:
        segments[last] = segment_at(successor.date, last) - 1

    return tuple(segments)


def _neighbours(visual: List[Scene], index: int) -> Tuple[Optional[Scene], Optional[Scene]]:
    predecessor = visual[index - 1] if index > 0 else None
    successor = visual[index + 1] if index < len(visual) - 1 else None
    return predecessor, successor


def _sequence_reason(
    scene: Scene,
    predecessor: Optional[Scene],
    successor: Optional[Scene],
    new_date: AbstractDate,
    formatter: DateFormatter
) -> str:
    bounds = []
    if predecessor is not None:
        bounds.append(f'after "{predecessor.label}" ({formatter(predecessor.date)})')
    if successor is not None:
        bounds.append(f'before "{successor.label}" ({formatter(successor.date)})')
    return (
        f"Sequence moved: {formatter(scene.date)} is not "
        f"{' and '.join(bounds)}. Suggesting new date: {formatter(new_date)}"
    )


def calculate_sync_changes(
    scenes: Sequence[Scene],
    live_geometry: LiveGeometry,
    config: LayoutConfig = LayoutConfig(),
    formatter: Optional[DateFormatter] = None
) -> List[ChangeProposal]:
    """
    Turn a finished drag into proposed arc/date edits.

    Scenes without a live position are ignored. Returns one proposal per
    scene with at least one change, in input order; an empty list means
    nothing to sync.
    """
    formatter = formatter or format_plain
    positioned = [s for s in scenes if s.id in live_geometry]
    if not positioned:
        return []

    canonical = calculate_layout(scenes, config)
    centroids = arc_centroids(positioned, live_geometry)

    visual = sorted(positioned, key=lambda s: live_geometry[s.id].x)
    visual_index = {id(s): i for i, s in enumerate(visual)}

    proposals: List[ChangeProposal] = []
    for scene in positioned:
        live = live_geometry[scene.id]
        if is_untouched(live, canonical.get(scene.id)):
            continue

        reasons = []

        new_arc = propose_arc(scene, live, centroids, config)
        if new_arc is not None:
            reasons.append(f'Arc changed from "{scene.arc}" to "{new_arc}"')

        new_date = None
        predecessor, successor = _neighbours(visual, visual_index[id(scene)])
        if scene.date and is_out_of_sequence(scene, predecessor, successor):
            new_date = repair_date(scene, predecessor, successor)
            reasons.append(_sequence_reason(scene, predecessor, successor, new_date, formatter))

        if reasons:
            proposals.append(ChangeProposal(
                scene=scene,
                new_arc=new_arc,
                new_date=new_date,
                reason="; ".join(reasons)
            ))

    logger.debug("Sync found %d proposals across %d positioned scenes", len(proposals), len(positioned))
    return proposals
