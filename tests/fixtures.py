"""
Shared scene snapshots for the storyboard tests.
"""

from typing import Dict, List, Optional, Sequence

from storyboard.contracts.base import (
    DEFAULT_ARC, Dependency, DependencyKind, LayoutConfig, Position, Scene
)


def make_scene(
    scene_id: str,
    date: Sequence[int],
    arc: str = DEFAULT_ARC,
    title: str = "",
    depends: Sequence[str] = (),
    end_date: Optional[Sequence[int]] = None
) -> Scene:
    """
    Factory for test scenes.

    `depends` holds 'Title:before|after' shorthand read from this scene's side:
    'B:after' means this scene happens after B.
    """
    dependencies = []
    for token in depends:
        target, _, kind = token.rpartition(":")
        dependencies.append(Dependency(target, DependencyKind(kind)))
    return Scene(
        id=scene_id,
        date=tuple(date),
        arc=arc,
        title=title,
        end_date=tuple(end_date) if end_date is not None else None,
        dependencies=tuple(dependencies),
    )


def make_record(scene_id: str, date: str, arc: str = None, x: float = None, y: float = None, **meta) -> Dict:
    """Host-document record as the extraction step receives it."""
    frontmatter = {"story-date": date}
    if arc is not None:
        frontmatter["story-arc"] = arc
    frontmatter.update(meta)
    record = {"id": scene_id, "frontmatter": frontmatter}
    if x is not None and y is not None:
        record["x"] = x
        record["y"] = y
    return record


# Main: A (Jan 1) and B (Jun 1); Side: C (Mar 1)
def layout_example() -> List[Scene]:
    return [
        make_scene("A", (2024, 1, 1), arc="Main"),
        make_scene("B", (2024, 6, 1), arc="Main"),
        make_scene("C", (2024, 3, 1), arc="Side"),
    ]


LAYOUT_EXAMPLE_CONFIG = LayoutConfig(x_scale=1, arc_spacing=500, node_width=400, node_gap_x=50)


# P (Jan 10) and Q (Jan 15) in Main; R (Feb 1) dragged between them
def reconciliation_example():
    scenes = [
        make_scene("P", (2024, 1, 10), arc="Main"),
        make_scene("Q", (2024, 1, 15), arc="Main"),
        make_scene("R", (2024, 2, 1), arc="Main"),
    ]
    # Canonical (x_scale=10): P x=0, Q x=450, R x=900. R is dropped at x=200.
    geometry: Dict[str, Position] = {
        "P": Position(0, 0),
        "Q": Position(450, 0),
        "R": Position(200, 0),
    }
    return scenes, geometry
