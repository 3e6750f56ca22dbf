"""
API Mapper
==========

Transforms engine contracts into JSON-ready DTOs.
Dates go out both as raw segment lists and as display strings.
"""
from typing import Any, Callable, Dict, List, Optional

from ..contracts.base import (
    AbstractDate, ChangeProposal, ConstraintWindow, Error, Position, PositionMap
)
from ..core import MirrorEdge, PlaybackStep, ScenePlacement
from ..engine import BuildPlan

Formatter = Callable[[AbstractDate], str]


def _date(date: Optional[AbstractDate]) -> Optional[List[int]]:
    return list(date) if date is not None else None


def _label(date: Optional[AbstractDate], formatter: Formatter) -> Optional[str]:
    return formatter(date) if date is not None else None


def map_position(position: Position) -> Dict[str, float]:
    return {"x": position.x, "y": position.y}


def map_positions(positions: PositionMap) -> Dict[str, Dict[str, float]]:
    return {scene_id: map_position(p) for scene_id, p in positions.items()}


def map_error(error: Error) -> Dict[str, Any]:
    return {
        "code": error.code.name,
        "message": error.message,
        "context": dict(error.context),
    }


def map_issues(issues) -> List[Dict[str, Any]]:
    return [map_error(e) for e in issues]


def map_placement(placement: ScenePlacement, formatter: Formatter) -> Dict[str, Any]:
    return {
        "arc": placement.arc,
        "date": _date(placement.date),
        "date_label": formatter(placement.date),
    }


def map_window(window: ConstraintWindow, formatter: Formatter) -> Dict[str, Any]:
    return {
        "earliest": _date(window.earliest),
        "earliest_label": _label(window.earliest, formatter),
        "earliest_source": window.earliest_source,
        "latest": _date(window.latest),
        "latest_label": _label(window.latest, formatter),
        "latest_source": window.latest_source,
        "satisfiable": window.is_satisfiable,
    }


def map_proposal(proposal: ChangeProposal, formatter: Formatter) -> Dict[str, Any]:
    return {
        "scene_id": proposal.scene_id,
        "title": proposal.scene.label,
        "new_arc": proposal.new_arc,
        "new_date": _date(proposal.new_date),
        "new_date_label": _label(proposal.new_date, formatter),
        "reason": proposal.reason,
    }


def map_build_plan(plan: BuildPlan) -> Dict[str, Any]:
    """Map BuildPlan to the write-back DTO the host applies in order."""
    return {
        "purge_ids": list(plan.purge_ids),
        "positions": map_positions(plan.positions),
        "edges": [
            {
                "id": e.id,
                "fromNode": e.from_node,
                "toNode": e.to_node,
                "fromSide": e.from_side,
                "toSide": e.to_side,
                "label": e.label,
                "style": e.style,
            }
            for e in plan.edges
        ],
        "markers": [
            {
                "id": m.id,
                "kind": m.kind,
                "text": m.text,
                "x": m.x,
                "y": m.y,
                "width": m.width,
                "height": m.height,
                "color": m.color,
            }
            for m in plan.markers
        ],
    }


def map_mirror(mirror: MirrorEdge) -> Dict[str, str]:
    return {"scene": mirror.scene_title, "dependency": mirror.dependency.to_token()}


def map_playback(steps: List[PlaybackStep]) -> List[Dict[str, Any]]:
    return [
        {
            "scene_id": step.scene.id,
            "viewport": {
                "minX": step.viewport.min_x,
                "minY": step.viewport.min_y,
                "maxX": step.viewport.max_x,
                "maxY": step.viewport.max_y,
            },
        }
        for step in steps
    ]
