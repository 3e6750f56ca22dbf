"""
Storyboard Timeline Engine: API Server
======================================

Stateless query API over scene snapshots. Every request carries the raw
scene records of the host document; nothing is stored between calls.

Endpoints:
- GET  /health                       -> status
- POST /api/v1/layout                -> canonical positions
- POST /api/v1/inverse               -> arc + date for a drop point
- POST /api/v1/window                -> allowed date window for a scene
- POST /api/v1/sync                  -> change proposals after a drag
- POST /api/v1/build                 -> full rebuild plan
- POST /api/v1/dependencies/mirrors  -> declarations missing their mirror
- POST /api/v1/playback              -> chronological walk with viewports

Usage:
    uvicorn storyboard.api.server:app --reload
"""
import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import StoryboardSettings, layout_from_mapping, load_settings
from ..contracts.base import (
    ConfigError, DateCodecError, Position, SceneNotFoundError
)
from ..engine import StoryboardEngine
from ..ingestion import ExtractionResult, parse_dependency
from .mapper import (
    map_build_plan, map_issues, map_mirror, map_placement, map_playback,
    map_positions, map_proposal, map_window
)

logger = logging.getLogger(__name__)

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

# Engine built from the settings file at startup
engine_instance: Optional[StoryboardEngine] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings ($STORYBOARD_SETTINGS) and build the engine on startup."""
    global engine_instance

    try:
        engine_instance = StoryboardEngine(load_settings())
        logger.info("Storyboard engine initialized (mode=%s)", engine_instance.layout_config.mode.value)
    except ConfigError as e:
        logger.error("FAILED to initialize engine: %s", e)
        raise

    yield

    logger.info("Shutting down storyboard engine.")
    engine_instance = None


app = FastAPI(
    title="Storyboard Timeline Engine API",
    version="0.1.0",
    description="Layout, inverse layout, constraint and reconciliation queries for storyboard canvases",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(DateCodecError)
async def codec_error_handler(request: Request, exc: DateCodecError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(SceneNotFoundError)
async def scene_not_found_handler(request: Request, exc: SceneNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# =============================================================================
# REQUEST MODELS
# =============================================================================

class SnapshotRequest(BaseModel):
    """Raw scene records plus optional per-request layout overrides."""
    records: List[Dict[str, Any]] = Field(default_factory=list)
    layout: Optional[Dict[str, Any]] = None


class InverseRequest(SnapshotRequest):
    x: float
    y: float


class WindowRequest(SnapshotRequest):
    scene_id: str
    dependencies: Optional[List[str]] = None


class BuildRequest(SnapshotRequest):
    existing_ids: List[str] = Field(default_factory=list)
    existing_edges: List[List[str]] = Field(default_factory=list)
    links: Dict[str, List[str]] = Field(default_factory=dict)


# =============================================================================
# HELPERS
# =============================================================================

def _engine_for(request: SnapshotRequest) -> StoryboardEngine:
    """Startup engine, or a request-scoped one when layout overrides are given."""
    if not engine_instance:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    if not request.layout:
        return engine_instance

    base = dataclasses.asdict(engine_instance.layout_config)
    base.update(request.layout)
    settings = StoryboardSettings(layout=layout_from_mapping(base), dates=engine_instance.settings.dates)
    return StoryboardEngine(settings)


def _snapshot(engine: StoryboardEngine, request: SnapshotRequest) -> ExtractionResult:
    return engine.extract(request.records)


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
async def health_check():
    """System status."""
    if not engine_instance:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return {"status": "online", "mode": engine_instance.layout_config.mode.value}


@app.post("/api/v1/layout")
async def layout(request: SnapshotRequest):
    """Canonical positions for every valid scene."""
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)
    return {
        "positions": map_positions(engine.arrange(snapshot.scenes)),
        "issues": map_issues(snapshot.issues),
    }


@app.post("/api/v1/inverse")
async def inverse(request: InverseRequest):
    """Arc and date a new scene dropped at (x, y) would get."""
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)
    placement = engine.interpret_drop(Position(request.x, request.y), snapshot.scenes, snapshot.geometry)
    return map_placement(placement, engine.format_date)


@app.post("/api/v1/window")
async def window(request: WindowRequest):
    """
    Allowed date window for one scene.
    `dependencies` overrides the scene's stored declarations (edit preview).
    """
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)

    dependencies = None
    if request.dependencies is not None:
        dependencies = []
        for token in request.dependencies:
            dependency = parse_dependency(token)
            if dependency is None:
                raise HTTPException(status_code=422, detail=f"Malformed dependency {token!r}")
            dependencies.append(dependency)

    result = engine.window_for(request.scene_id, snapshot.scenes, dependencies)
    return map_window(result, engine.format_date)


@app.post("/api/v1/sync")
async def sync(request: SnapshotRequest):
    """Proposed edits for the live geometry carried by the records."""
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)
    proposals = engine.sync(snapshot.scenes, snapshot.geometry)
    return {
        "proposals": [map_proposal(p, engine.format_date) for p in proposals],
        "issues": map_issues(snapshot.issues),
    }


@app.post("/api/v1/build")
async def build(request: BuildRequest):
    """Full rebuild plan: purge, positions, edges, markers."""
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)
    existing_edges = [tuple(pair) for pair in request.existing_edges if len(pair) == 2]
    plan = engine.build(
        snapshot.scenes,
        existing_ids=request.existing_ids,
        existing_edges=existing_edges,
        links=request.links,
    )
    dto = map_build_plan(plan)
    dto["issues"] = map_issues(snapshot.issues)
    return dto


@app.post("/api/v1/dependencies/mirrors")
async def dependency_mirrors(request: SnapshotRequest):
    """Declarations to write so every dependency is stored on both scenes."""
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)
    return {"mirrors": [map_mirror(m) for m in engine.mirror_dependencies(snapshot.scenes)]}


@app.post("/api/v1/playback")
async def playback(request: SnapshotRequest):
    """Chronological playback order with a viewport per step."""
    engine = _engine_for(request)
    snapshot = _snapshot(engine, request)
    return {"steps": map_playback(engine.playback(snapshot.scenes, snapshot.geometry))}
