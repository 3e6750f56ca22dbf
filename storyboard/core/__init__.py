"""
Core Storyboard Engines
=======================

Pure functions over immutable snapshots. No component retains state
between calls.

1. Forward layout (layout.py): scenes + config -> positions
2. Inverse layout (inverse.py): position -> arc / synthesized date
3. Constraint solver (constraints.py, topology.py): allowed date window
4. Reconciliation (sync.py): live drag -> proposed edits (never applied)
5. Generated artifacts (markers.py) and playback order (playback.py)
"""

from .layout import calculate_layout, discover_lanes
from .inverse import (
    ScenePlacement, arc_centroids, arc_from_y, date_from_x, place_new_scene
)
from .topology import DependencyGraph, MirrorEdge
from .constraints import compute_window
from .sync import UNTOUCHED_TOLERANCE, calculate_sync_changes
from .markers import (
    GENERATED_PREFIX, MARKER_PREFIX, EDGE_PREFIX,
    GeneratedEdge, MarkerNode,
    is_generated, generated_ids,
    plan_chronological_edges, plan_link_edges, plan_markers,
)
from .playback import PlaybackStep, Viewport, playback_sequence

__all__ = [
    "calculate_layout",
    "discover_lanes",
    "ScenePlacement",
    "arc_centroids",
    "arc_from_y",
    "date_from_x",
    "place_new_scene",
    "DependencyGraph",
    "MirrorEdge",
    "compute_window",
    "UNTOUCHED_TOLERANCE",
    "calculate_sync_changes",
    "GENERATED_PREFIX",
    "MARKER_PREFIX",
    "EDGE_PREFIX",
    "GeneratedEdge",
    "MarkerNode",
    "is_generated",
    "generated_ids",
    "plan_chronological_edges",
    "plan_link_edges",
    "plan_markers",
    "PlaybackStep",
    "Viewport",
    "playback_sequence",
]
