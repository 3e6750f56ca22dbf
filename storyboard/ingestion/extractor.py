"""
Scene Extractor
===============

Responsibility: turn host-document records into validated Scene snapshots.
Constraint: NO INFERENCE beyond documented defaults. Extract what is there.

A record is a mapping with the node data of the host document; metadata
keys are read from a nested "frontmatter" mapping when present, else
from the record itself:

    {
        "id": "node-1", "x": 0, "y": 0, "name": "Scene file",
        "frontmatter": {
            "story-date": "2024-01-10",
            "story-end-date": "2024-01-11",
            "story-arc": "Main",
            "story-title": "Arrival",
            "tension": 7,
            "story-deps": ["Departure:before"]
        }
    }

Invalid records are skipped and reported as Error values; nothing here
raises for bad data.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..contracts.base import (
    DEFAULT_ARC, Dependency, DependencyKind, Error, ErrorCode, Position, Scene
)
from ..contracts.codec import DateCodec
from ..temporal.codec import RegexDateCodec

logger = logging.getLogger(__name__)


DATE_KEY = "story-date"
END_DATE_KEY = "story-end-date"
ARC_KEY = "story-arc"
TITLE_KEY = "story-title"
TENSION_KEY = "tension"
DEPS_KEY = "story-deps"

TENSION_RANGE = (1, 10)


@dataclass(frozen=True)
class ExtractionResult:
    """
    Validated snapshot plus everything that was dropped on the way.

    `skipped` holds one Error per record that never became a Scene;
    `warnings` holds fields dropped from scenes that were kept.
    """
    scenes: Tuple[Scene, ...]
    geometry: Dict[str, Position] = field(default_factory=dict)
    skipped: Tuple[Error, ...] = field(default_factory=tuple)
    warnings: Tuple[Error, ...] = field(default_factory=tuple)

    @property
    def issues(self) -> Tuple[Error, ...]:
        return self.skipped + self.warnings


def parse_dependency(token: object) -> Optional[Dependency]:
    """
    Host token -> Dependency, else None.

    The host stores 'X:before' on scene O meaning "X happens before O", so
    the kind flips: O carries Dependency(X, AFTER).
    """
    if not isinstance(token, str):
        return None
    title, sep, kind = token.rpartition(":")
    title = title.strip()
    if not sep or not title:
        return None
    try:
        return Dependency(target_title=title, kind=DependencyKind(kind.strip().lower()).inverse())
    except ValueError:
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SceneExtractor:
    """Validating extraction step in front of the core."""

    def __init__(self, codec: Optional[DateCodec] = None):
        self._codec = codec or RegexDateCodec()

    def extract(self, records: Iterable[Mapping[str, Any]]) -> ExtractionResult:
        scenes: List[Scene] = []
        geometry: Dict[str, Position] = {}
        skipped: List[Error] = []
        warnings: List[Error] = []

        for record in records:
            scene = self._extract_one(record, skipped, warnings)
            if scene is None:
                continue
            scenes.append(scene)
            x, y = record.get("x"), record.get("y")
            if _is_number(x) and _is_number(y):
                geometry[scene.id] = Position(x=float(x), y=float(y))

        if skipped:
            logger.info("Extracted %d scenes, skipped %d records", len(scenes), len(skipped))
        return ExtractionResult(
            scenes=tuple(scenes),
            geometry=geometry,
            skipped=tuple(skipped),
            warnings=tuple(warnings)
        )

    def _extract_one(
        self,
        record: Mapping[str, Any],
        skipped: List[Error],
        warnings: List[Error]
    ) -> Optional[Scene]:
        scene_id = record.get("id")
        if not isinstance(scene_id, str) or not scene_id:
            skipped.append(Error.create(ErrorCode.MISSING_ID, "Record has no id"))
            return None

        meta = record.get("frontmatter")
        if not isinstance(meta, Mapping):
            meta = record

        raw_date = meta.get(DATE_KEY)
        if raw_date is None:
            logger.debug("Skipping %s: no %s", scene_id, DATE_KEY)
            skipped.append(Error.create(
                ErrorCode.MISSING_DATE, f"No {DATE_KEY} value", scene_id=scene_id
            ))
            return None

        date = self._codec.decode(raw_date)
        if date is None:
            logger.warning("Skipping %s: could not parse %s value %r", scene_id, DATE_KEY, raw_date)
            skipped.append(Error.create(
                ErrorCode.UNPARSABLE_DATE, f"Could not parse {DATE_KEY}",
                scene_id=scene_id, raw=str(raw_date)
            ))
            return None

        end_date = None
        raw_end = meta.get(END_DATE_KEY)
        if raw_end is not None:
            end_date = self._codec.decode(raw_end)
            if end_date is None:
                warnings.append(Error.create(
                    ErrorCode.UNPARSABLE_DATE, f"Could not parse {END_DATE_KEY}; ignored",
                    scene_id=scene_id, raw=str(raw_end)
                ))

        arc = meta.get(ARC_KEY)
        if not isinstance(arc, str) or not arc.strip():
            arc = DEFAULT_ARC

        title = meta.get(TITLE_KEY)
        if not isinstance(title, str) or not title.strip():
            name = record.get("name")
            title = name if isinstance(name, str) and name else scene_id

        return Scene(
            id=scene_id,
            date=date,
            end_date=end_date,
            arc=arc.strip(),
            title=title.strip(),
            tension=self._tension(scene_id, meta.get(TENSION_KEY), warnings),
            dependencies=self._dependencies(scene_id, meta.get(DEPS_KEY), warnings),
        )

    @staticmethod
    def _tension(scene_id: str, raw: Any, warnings: List[Error]) -> Optional[int]:
        if raw is None:
            return None
        value = None
        if isinstance(raw, int) and not isinstance(raw, bool):
            value = raw
        elif isinstance(raw, str) and raw.strip().isdigit():
            value = int(raw.strip())

        low, high = TENSION_RANGE
        if value is None or not low <= value <= high:
            logger.warning("Ignoring tension %r on %s", raw, scene_id)
            warnings.append(Error.create(
                ErrorCode.INVALID_TENSION, f"Tension must be an integer in {low}..{high}; ignored",
                scene_id=scene_id, raw=str(raw)
            ))
            return None
        return value

    @staticmethod
    def _dependencies(scene_id: str, raw: Any, warnings: List[Error]) -> Tuple[Dependency, ...]:
        if raw is None:
            return ()
        tokens = raw if isinstance(raw, (list, tuple)) else [raw]

        dependencies = []
        for token in tokens:
            dependency = parse_dependency(token)
            if dependency is None:
                warnings.append(Error.create(
                    ErrorCode.MALFORMED_DEPENDENCY, "Dependency must look like 'Title:before|after'; ignored",
                    scene_id=scene_id, raw=str(token)
                ))
                continue
            if dependency not in dependencies:
                dependencies.append(dependency)
        return tuple(dependencies)
