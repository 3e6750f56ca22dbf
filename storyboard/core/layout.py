"""
Forward Layout Engine
=====================

Scene list + LayoutConfig -> intended canvas position per scene.

X = f(date), Y = f(arc lane)

DETERMINISTIC:
==============
Same scenes in the same order + same config = identical positions.
Ties in date keep their input order (stable sort).

LANE ORDER:
===========
Lanes are numbered by first chronological appearance: the arc that
starts earliest in the story gets lane 0.

CROWDING (ABSOLUTE mode):
=========================
X is proportional to elapsed ordinal time until two same-lane nodes
would overlap; then the later one is pushed right to
`last_x + node_width + node_gap_x`. Proportionality is lost from that
point on in that lane.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Sequence

from ..contracts.base import LayoutConfig, LayoutMode, Position, PositionMap, Scene
from ..temporal.abstract_date import sort_chronologically, to_ordinal

logger = logging.getLogger(__name__)


def discover_lanes(sorted_scenes: Iterable[Scene]) -> List[str]:
    """Arc names in order of first appearance."""
    lanes: List[str] = []
    seen = set()
    for scene in sorted_scenes:
        if scene.arc not in seen:
            seen.add(scene.arc)
            lanes.append(scene.arc)
    return lanes


def calculate_layout(
    scenes: Sequence[Scene],
    config: LayoutConfig = LayoutConfig()
) -> PositionMap:
    """
    Calculate X/Y positions for all scenes.

    Returns a mapping scene id -> Position. Empty input gives an empty map.
    Duplicate ids collide; the chronologically later scene wins.
    """
    result: PositionMap = {}
    if not scenes:
        return result

    ordered = sort_chronologically(scenes)
    ordinals = [to_ordinal(scene.date) for scene in ordered]
    min_ordinal = min(ordinals)

    lanes = discover_lanes(ordered)
    lane_index = {arc: i for i, arc in enumerate(lanes)}

    last_x_per_lane: Dict[str, float] = {}

    for i, scene in enumerate(ordered):
        if config.mode is LayoutMode.ORDERED:
            x = i * config.slot_width
        else:
            x = (ordinals[i] - min_ordinal) * config.x_scale
            last_x = last_x_per_lane.get(scene.arc)
            if last_x is not None:
                floor = last_x + config.crowd_gap
                if x < floor:
                    x = floor
            last_x_per_lane[scene.arc] = x

        y = lane_index[scene.arc] * config.arc_spacing
        result[scene.id] = Position(x=x, y=y)

    logger.debug(
        "Laid out %d scenes across %d lanes (%s mode)",
        len(ordered), len(lanes), config.mode.value
    )
    return result
