"""
Constraint Solver
=================

Allowed date window for one scene, from its arc-lane neighbours and its
dependency edges.

RULES:
======
1. Arc bound: the immediate predecessor / successor in the scene's own
   lane (chronological order) give the candidate earliest / latest.
2. Dependency bound: "after X" raises earliest to max(earliest, X.date);
   "before X" lowers latest to min(latest, X.date).
3. Each bound carries a human-readable source label.

TOLERATED, NOT REJECTED:
========================
- Dangling targets (title not found) are ignored
- One-sided declarations (only the other scene declares the edge) apply
- earliest > latest is returned as-is; the caller surfaces it
"""

from __future__ import annotations
import dataclasses
import logging
from typing import List, Optional, Sequence

from ..contracts.base import AbstractDate, ConstraintWindow, Dependency, Scene
from ..temporal.abstract_date import compare, sort_chronologically
from .topology import DependencyGraph

logger = logging.getLogger(__name__)


def arc_source(scene: Scene) -> str:
    return f'"{scene.label}" (arc lane "{scene.arc}")'


def dependency_source(scene: Scene) -> str:
    return f'"{scene.label}" (dependency)'


def _with_subject(scene: Scene, scenes: Sequence[Scene]) -> List[Scene]:
    """Snapshot that is guaranteed to contain `scene` (by id)."""
    found = False
    result = []
    for other in scenes:
        if other.id == scene.id and not found:
            result.append(scene)
            found = True
        else:
            result.append(other)
    if not found:
        result.append(scene)
    return result


def compute_window(
    scene: Scene,
    scenes: Sequence[Scene],
    dependencies: Optional[Sequence[Dependency]] = None
) -> ConstraintWindow:
    """
    Compute the earliest/latest permissible date for `scene`.

    `dependencies` overrides the scene's own declarations, e.g. to preview
    the window while the user is editing them.
    """
    if dependencies is not None:
        scene = dataclasses.replace(scene, dependencies=tuple(dependencies))
    snapshot = _with_subject(scene, scenes)

    earliest: Optional[AbstractDate] = None
    earliest_source = ""
    latest: Optional[AbstractDate] = None
    latest_source = ""

    # 1. Arc bound
    lane = sort_chronologically(s for s in snapshot if s.arc == scene.arc)
    index = next(i for i, s in enumerate(lane) if s.id == scene.id)
    if index > 0:
        predecessor = lane[index - 1]
        earliest, earliest_source = predecessor.date, arc_source(predecessor)
    if index < len(lane) - 1:
        successor = lane[index + 1]
        latest, latest_source = successor.date, arc_source(successor)

    # 2. Dependency bound
    graph = DependencyGraph.from_scenes(snapshot)
    for target in graph.happens_before(scene.label):
        if target.id == scene.id:
            continue
        if earliest is None or compare(target.date, earliest) > 0:
            earliest, earliest_source = target.date, dependency_source(target)

    for target in graph.happens_after(scene.label):
        if target.id == scene.id:
            continue
        if latest is None or compare(target.date, latest) < 0:
            latest, latest_source = target.date, dependency_source(target)

    window = ConstraintWindow(
        earliest=earliest,
        earliest_source=earliest_source,
        latest=latest,
        latest_source=latest_source
    )
    if not window.is_satisfiable:
        logger.info(
            "Unsatisfiable window for %s: earliest %s (%s) > latest %s (%s)",
            scene.id, earliest, earliest_source, latest, latest_source
        )
    return window
