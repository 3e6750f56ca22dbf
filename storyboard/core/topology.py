"""
Dependency Topology
===================

Directed graph of "happens before" constraints between scenes.

Every declared dependency is normalised to one edge u -> v meaning
"u happens before v":
- A declares Dependency(B, AFTER)  -> B -> A
- A declares Dependency(B, BEFORE) -> A -> B

A symmetric pair (A: B after, B: A before) collapses to a single edge,
and a one-sided declaration still constrains both endpoints.

ALLOWED:
- Graph construction from scene declarations
- Neighbour lookup for the constraint solver
- Listing missing mirror declarations for the storage layer

NOT PROVIDED:
- Cycle detection; contradictory chains surface as unsatisfiable windows
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import networkx as nx

from ..contracts.base import Dependency, DependencyKind, Scene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorEdge:
    """Declaration `dependency` that scene `scene_title` is missing."""
    scene_title: str
    dependency: Dependency


def _edge_for(owner_title: str, dependency: Dependency) -> Tuple[str, str]:
    if dependency.kind is DependencyKind.AFTER:
        return dependency.target_title, owner_title
    return owner_title, dependency.target_title


class DependencyGraph:
    """
    Wraps a NetworkX DiGraph keyed by scene title (`Scene.label`).

    Nodes exist for every title seen, including dangling targets that no
    scene carries; lookups resolve titles back to scenes and skip those.
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._scenes: Dict[str, Scene] = {}

    @classmethod
    def from_scenes(cls, scenes: Sequence[Scene]) -> DependencyGraph:
        graph = cls()
        graph.build(scenes)
        return graph

    def build(self, scenes: Sequence[Scene]) -> None:
        """
        Build graph from scene declarations.

        Replaces internal graph state. The first scene carrying a title owns
        it; untitled scenes are keyed by id.
        """
        self._graph = nx.DiGraph()
        self._scenes = {}

        for scene in scenes:
            if scene.label not in self._scenes:
                self._scenes[scene.label] = scene
                self._graph.add_node(scene.label)

        for scene in scenes:
            self.add_declarations(scene.label, scene.dependencies)

    def add_declarations(self, owner_title: str, dependencies: Iterable[Dependency]) -> None:
        for dependency in dependencies:
            if dependency.target_title == owner_title:
                continue
            u, v = _edge_for(owner_title, dependency)
            if self._graph.has_edge(u, v):
                self._graph[u][v]["declared_by"].add(owner_title)
            else:
                self._graph.add_edge(u, v, declared_by={owner_title})

    def resolve(self, title: str) -> Optional[Scene]:
        return self._scenes.get(title)

    def happens_before(self, title: str) -> List[Scene]:
        """Scenes constrained to happen before `title` (earliest-bound sources)."""
        if title not in self._graph:
            return []
        return [s for s in (self.resolve(t) for t in self._graph.predecessors(title)) if s]

    def happens_after(self, title: str) -> List[Scene]:
        """Scenes constrained to happen after `title` (latest-bound sources)."""
        if title not in self._graph:
            return []
        return [s for s in (self.resolve(t) for t in self._graph.successors(title)) if s]

    def dangling_targets(self) -> Set[str]:
        """Titles referenced by a declaration that no scene carries."""
        return {t for t in self._graph.nodes if t not in self._scenes}

    def missing_mirrors(self) -> List[MirrorEdge]:
        """
        Declarations the storage layer should add to make every edge
        symmetric: the earlier scene declares the later one BEFORE, the later
        one declares the earlier AFTER.

        Dangling endpoints are skipped; there is no scene to write to.
        """
        missing = []
        for u, v, data in self._graph.edges(data=True):
            declared_by = data["declared_by"]
            if u not in self._scenes or v not in self._scenes:
                continue
            forward = Dependency(v, DependencyKind.BEFORE)
            if u not in declared_by:
                missing.append(MirrorEdge(u, forward))
            if v not in declared_by:
                missing.append(MirrorEdge(v, Dependency(u, forward.kind.inverse())))
        return missing

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()
