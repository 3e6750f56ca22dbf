"""
Generated Artifacts
===================

Machine-generated canvas artifacts: chronological edges, cross-link
edges, arc lane labels, date header markers and per-node date labels.

RESERVED IDENTIFIERS:
=====================
Every generated artifact id starts with GENERATED_PREFIX. A rebuild
purges all ids carrying the prefix and regenerates them, so running a
build twice on an unchanged snapshot yields identical artifacts and
never touches user-authored nodes or edges.

Ids are derived from scene ids, never random.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..contracts.base import AbstractDate, LayoutConfig, LiveGeometry, Scene
from ..temporal.abstract_date import date_interval_label, format_plain, sort_chronologically


GENERATED_PREFIX = "storyboard-"
MARKER_PREFIX = GENERATED_PREFIX + "marker-"
EDGE_PREFIX = GENERATED_PREFIX + "edge-"

LABEL_WIDTH = 200
LABEL_HEIGHT = 60
NODE_LABEL_HEIGHT = 40
ARC_COLORS = ("1", "2", "3", "4", "5", "6")
NEUTRAL_COLOR = "0"


@dataclass(frozen=True)
class GeneratedEdge:
    """Edge to be written to the host document."""
    id: str
    from_node: str
    to_node: str
    from_side: str
    to_side: str
    label: Optional[str] = None
    style: str = "solid"


@dataclass(frozen=True)
class MarkerNode:
    """Text node to be written to the host document."""
    id: str
    kind: str  # arc | date | nodelabel
    text: str
    x: float
    y: float
    width: float
    height: float
    color: str = NEUTRAL_COLOR


def is_generated(artifact_id: str) -> bool:
    return artifact_id.startswith(GENERATED_PREFIX)


def generated_ids(artifact_ids: Iterable[str]) -> List[str]:
    """Ids a rebuild must purge before regenerating."""
    return [i for i in artifact_ids if is_generated(i)]


# =============================================================================
# EDGES
# =============================================================================

def _group_by_arc(scenes: Sequence[Scene]) -> Dict[str, List[Scene]]:
    groups: Dict[str, List[Scene]] = {}
    for scene in scenes:
        groups.setdefault(scene.arc, []).append(scene)
    return groups


def plan_chronological_edges(
    scenes: Sequence[Scene],
    existing: Iterable[Tuple[str, str]] = ()
) -> List[GeneratedEdge]:
    """
    Connect consecutive scenes of each arc in chronological order.

    `existing` holds (from, to) pairs of user-authored edges; a pair the
    user already connected is not duplicated. Labels give the elapsed time.
    """
    taken: Set[Tuple[str, str]] = set(existing)
    edges = []
    for group in _group_by_arc(scenes).values():
        ordered = sort_chronologically(group)
        for earlier, later in zip(ordered, ordered[1:]):
            pair = (earlier.id, later.id)
            if pair in taken:
                continue
            taken.add(pair)
            edges.append(GeneratedEdge(
                id=f"{EDGE_PREFIX}chrono-{earlier.id}-{later.id}",
                from_node=earlier.id,
                to_node=later.id,
                from_side="right",
                to_side="left",
                label=date_interval_label(earlier.date, later.date),
            ))
    return edges


def plan_link_edges(
    links: Mapping[str, Iterable[str]],
    scene_ids: Iterable[str],
    existing: Iterable[Tuple[str, str]] = ()
) -> List[GeneratedEdge]:
    """
    Cross-link edges from document links between scenes on the canvas.

    Links to nodes that are not scenes, self links and already connected
    pairs are skipped.
    """
    on_canvas = set(scene_ids)
    taken: Set[Tuple[str, str]] = set(existing)
    edges = []
    for source, targets in links.items():
        if source not in on_canvas:
            continue
        for target in targets:
            if target not in on_canvas or target == source:
                continue
            pair = (source, target)
            if pair in taken:
                continue
            taken.add(pair)
            edges.append(GeneratedEdge(
                id=f"{EDGE_PREFIX}link-{source}-{target}",
                from_node=source,
                to_node=target,
                from_side="bottom",
                to_side="top",
                style="dotted",
            ))
    return edges


# =============================================================================
# MARKERS
# =============================================================================

def plan_markers(
    scenes: Sequence[Scene],
    positions: LiveGeometry,
    config: LayoutConfig = LayoutConfig(),
    formatter: Optional[Callable[[AbstractDate], str]] = None
) -> List[MarkerNode]:
    """
    Arc lane labels on the left, date markers along the top and a date
    label above every node. Scenes without a position are skipped.
    """
    formatter = formatter or format_plain

    arc_y: Dict[str, float] = {}
    date_x: Dict[str, float] = {}
    for scene in scenes:
        position = positions.get(scene.id)
        if position is None:
            continue
        arc_y.setdefault(scene.arc, position.y)
        date_x.setdefault(formatter(scene.date), position.x)

    if not arc_y:
        return []

    header_y = min(arc_y.values()) - LABEL_HEIGHT - 80
    label_x = min(date_x.values()) - LABEL_WIDTH - 60

    markers = []
    for i, (arc, y) in enumerate(arc_y.items()):
        markers.append(MarkerNode(
            id=f"{MARKER_PREFIX}arc-{i}",
            kind="arc",
            text=f"## {arc}",
            x=label_x,
            y=y + config.node_height / 2 - LABEL_HEIGHT / 2,
            width=LABEL_WIDTH,
            height=LABEL_HEIGHT,
            color=ARC_COLORS[i % len(ARC_COLORS)],
        ))

    for i, (label, x) in enumerate(date_x.items()):
        markers.append(MarkerNode(
            id=f"{MARKER_PREFIX}date-{i}",
            kind="date",
            text=f"**{label}**",
            x=x + config.node_width / 2 - LABEL_WIDTH / 2,
            y=header_y,
            width=LABEL_WIDTH,
            height=LABEL_HEIGHT,
        ))

    for scene in scenes:
        position = positions.get(scene.id)
        if position is None:
            continue
        markers.append(MarkerNode(
            id=f"{MARKER_PREFIX}nodelabel-{scene.id}",
            kind="nodelabel",
            text=formatter(scene.date),
            x=position.x,
            y=position.y - NODE_LABEL_HEIGHT - 10,
            width=config.node_width,
            height=NODE_LABEL_HEIGHT,
        ))

    return markers
