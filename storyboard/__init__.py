"""
Storyboard Timeline Engine

Places narrative scenes on a two-dimensional canvas (time on X, story arc
on Y), interprets user drags back into date/arc edits, and computes the
date window each scene may occupy.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Immutable scene, geometry, config and result types
   - Error values and the caller-boundary exception hierarchy

2. TEMPORAL (temporal/)
   - AbstractDate comparison, ordinal encoding, extent
   - Date codec collaborator and injectable calendar clock

3. INGESTION (ingestion/)
   - Responsibility: host records -> validated Scenes + live geometry
   - MUST NOT: lay out or reconcile

4. CORE (core/)
   - Forward layout, inverse layout, constraint solver, reconciliation
   - Generated artifacts and playback order
   - MUST NOT: mutate scenes or write to the host document

5. ENGINE (engine.py), API (api/), CLI (cli.py)
   - Orchestration and outer surfaces
"""

from .config import StoryboardSettings, load_settings
from .engine import BuildPlan, StoryboardEngine

__version__ = "0.1.0"

__all__ = [
    "StoryboardSettings",
    "load_settings",
    "BuildPlan",
    "StoryboardEngine",
]
