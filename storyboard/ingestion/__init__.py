"""
Ingestion Layer

RESPONSIBILITY: validated extraction of Scene snapshots from host records.
MUST NOT: lay out, reconcile or write anything back.
"""

from .extractor import (
    SceneExtractor,
    ExtractionResult,
    parse_dependency,
    DATE_KEY,
    END_DATE_KEY,
    ARC_KEY,
    TITLE_KEY,
    TENSION_KEY,
    DEPS_KEY,
)

__all__ = [
    "SceneExtractor",
    "ExtractionResult",
    "parse_dependency",
    "DATE_KEY",
    "END_DATE_KEY",
    "ARC_KEY",
    "TITLE_KEY",
    "TENSION_KEY",
    "DEPS_KEY",
]
