"""
Playback Order

Chronological walk over the scenes on the canvas, with the viewport to
zoom to for each step. Timing and zooming belong to the host.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

from ..contracts.base import LayoutConfig, LiveGeometry, Scene
from ..temporal.abstract_date import sort_chronologically


@dataclass(frozen=True)
class Viewport:
    min_x: float
    min_y: float
    max_x: float
    max_y: float


@dataclass(frozen=True)
class PlaybackStep:
    scene: Scene
    viewport: Viewport


def playback_sequence(
    scenes: Sequence[Scene],
    geometry: LiveGeometry,
    config: LayoutConfig = LayoutConfig(),
    padding: float = 50
) -> List[PlaybackStep]:
    """Scenes in chronological order; scenes without a position are skipped."""
    steps = []
    for scene in sort_chronologically(scenes):
        position = geometry.get(scene.id)
        if position is None:
            continue
        steps.append(PlaybackStep(
            scene=scene,
            viewport=Viewport(
                min_x=position.x - padding,
                min_y=position.y - padding,
                max_x=position.x + config.node_width + padding,
                max_y=position.y + config.node_height + padding,
            )
        ))
    return steps
