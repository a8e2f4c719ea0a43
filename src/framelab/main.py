"""
FrameLab Main Application
=========================

FastAPI entry point for the frame pipeline service.

One asyncio task ticks the orchestrator at the configured rate and swaps
the published PipelineOutputs reference. Handlers only read the published
outputs or replace the controls snapshot wholesale.

Endpoints:
    GET  /               - Service information
    GET  /health         - Liveness probe (is process alive?)
    GET  /ready          - Readiness probe (has a tick been published?)
    GET  /metrics        - Pipeline metrics
    GET  /output         - Summary of the latest tick
    GET  /frames/{name}  - PNG of one derived frame
    GET  /grid           - PNG of the inspection grid (or extension overlay)
    PUT  /controls       - Update cutoffs / filters
    POST /capture        - Freeze a fresh frame from the source
    POST /live           - Resume the live feed
    POST /frame          - Freeze an uploaded (base64) image
    WS   /ws/output      - Real-time summary stream
"""

import asyncio
import logging
import os
import signal
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, WebSocket
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from framelab.capture.image_codec import (
    ImageDecodeError,
    decode_image_b64,
    encode_bgr_png,
    encode_png,
)
from framelab.compositing.stickers import StickerStore
from framelab.config import settings
from framelab.models.controls import PipelineControls
from framelab.models.face import Rect
from framelab.models.filters import FilterMode
from framelab.models.output import FRAME_NAMES, PipelineOutputs
from framelab.observability.grid import GridRenderer
from framelab.pipeline.builder import build_orchestrator, create_controls
from framelab.pipeline.orchestrator import FrameOrchestrator


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

# Shutdown flag
_shutdown_flag: bool = False

# Pipeline
_orchestrator: Optional[FrameOrchestrator] = None
_controls: PipelineControls = PipelineControls()
_renderer: Optional[GridRenderer] = None
_stickers: Optional[StickerStore] = None

# Tick task
_tick_task: Optional[asyncio.Task] = None

# Current state
_current_outputs: Optional[PipelineOutputs] = None
_startup_time: float = 0.0

# Error counters
_tick_error_count: int = 0


# =============================================================================
# Getters
# =============================================================================

def get_orchestrator() -> Optional[FrameOrchestrator]:
    return _orchestrator

def get_controls() -> PipelineControls:
    return _controls

def get_current_outputs() -> Optional[PipelineOutputs]:
    return _current_outputs

def is_ready() -> bool:
    return _current_outputs is not None


# =============================================================================
# Request Models
# =============================================================================

class ControlsUpdate(BaseModel):
    """Partial controls update. Omitted fields keep their value."""

    red_cutoff: Optional[int] = Field(default=None, description="Red cutoff")
    green_cutoff: Optional[int] = Field(default=None, description="Green cutoff")
    blue_cutoff: Optional[int] = Field(default=None, description="Blue cutoff")
    face_filter: Optional[str] = Field(default=None, description="Face filter label")
    extension_filter: Optional[str] = Field(default=None, description="Extension filter label")


class FrameUpload(BaseModel):
    """Still image to freeze."""

    image: str = Field(..., description="Base64-encoded PNG or JPEG")


# =============================================================================
# Signal Handlers
# =============================================================================

def _handle_sigterm(signum, frame):
    """Handle SIGTERM for graceful shutdown."""
    global _shutdown_flag
    logger.info("Received SIGTERM, initiating graceful shutdown...")
    _shutdown_flag = True


# =============================================================================
# Pipeline Wiring
# =============================================================================

def init_pipeline(
    orchestrator: FrameOrchestrator,
    controls: Optional[PipelineControls] = None,
    renderer: Optional[GridRenderer] = None,
    stickers: Optional[StickerStore] = None,
) -> None:
    """Install pipeline components as the service's global state."""
    global _orchestrator, _controls, _renderer, _stickers
    global _current_outputs, _tick_error_count, _startup_time

    _orchestrator = orchestrator
    _controls = controls or PipelineControls()
    _renderer = renderer or GridRenderer()
    _stickers = stickers or StickerStore()
    _current_outputs = None
    _tick_error_count = 0
    _startup_time = time.time()


def publish_tick() -> Optional[PipelineOutputs]:
    """Run one tick with the current controls and publish its outputs."""
    global _current_outputs, _tick_error_count

    if _orchestrator is None:
        logger.error("Pipeline not initialized")
        return None

    try:
        _current_outputs = _orchestrator.tick(_controls)
    except Exception as e:
        _tick_error_count += 1
        logger.error(f"Tick error: {e}. Total tick errors: {_tick_error_count}")
    return _current_outputs


async def run_ticks() -> None:
    """Tick loop at the configured frame rate."""
    interval = 1.0 / settings.capture.fps
    logger.info(f"Tick loop started at {settings.capture.fps} fps")

    while not _shutdown_flag:
        try:
            started = time.perf_counter()
            publish_tick()
            elapsed = time.perf_counter() - started
            await asyncio.sleep(max(0.0, interval - elapsed))
        except asyncio.CancelledError:
            logger.info("Tick loop cancelled")
            break

    logger.info("Tick loop stopped")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _tick_task, _shutdown_flag

    # Register signal handlers
    signal.signal(signal.SIGTERM, _handle_sigterm)

    # Startup
    logger.info(f"Starting {settings.app.name} {settings.app.version}")

    overlay = settings.overlay
    init_pipeline(
        orchestrator=build_orchestrator(settings),
        controls=create_controls(settings),
        renderer=GridRenderer(
            cell_width=settings.grid.cell_width,
            cell_height=settings.grid.cell_height,
            padding=settings.grid.padding,
            extension_area=Rect(
                x=overlay.x, y=overlay.y, width=overlay.width, height=overlay.height
            ),
        ),
        stickers=StickerStore.load_directory(settings.stickers.directory),
    )

    _shutdown_flag = False
    _tick_task = asyncio.create_task(run_ticks(), name="tick_loop")

    logger.info("All components started")

    yield

    # Shutdown
    logger.info("Shutting down gracefully...")
    _shutdown_flag = True

    if _tick_task:
        _tick_task.cancel()
        try:
            await _tick_task
        except asyncio.CancelledError:
            pass

    release = getattr(_orchestrator.source, "release", None) if _orchestrator else None
    if release is not None:
        release()

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="FrameLab",
    description="Real-time frame processing pipeline with face-region filters",
    version=settings.app.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "FrameLab",
        "version": settings.app.version,
        "name": settings.app.name,
        "status": "running",
        "capture_backend": settings.capture.backend,
        "detector_backend": settings.detector.backend,
        "frames": FRAME_NAMES,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness probe - has the pipeline published a tick?

    Returns 503 until the first tick completes.
    """
    if is_ready():
        return JSONResponse({
            "status": "ready",
            "tick_id": _current_outputs.tick_id,
        })
    return JSONResponse({"status": "not_ready"}, status_code=503)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    pipeline_metrics = _orchestrator.get_metrics() if _orchestrator else {}
    render_metrics = _renderer.get_metrics() if _renderer else {}

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "tick_errors": _tick_error_count,
        "stickers_loaded": len(_stickers) if _stickers is not None else 0,
        "controls": _controls.model_dump(mode="json"),
        **pipeline_metrics,
        **render_metrics,
    })


@app.get("/output")
async def output() -> JSONResponse:
    """Summary of the latest tick."""
    current = get_current_outputs()

    if current is None:
        return JSONResponse(
            {"error": "No output available yet"},
            status_code=503,
        )

    return JSONResponse(current.summary().model_dump(mode="json"))


@app.get("/frames/{name}")
async def frame_png(name: str) -> Response:
    """PNG of one derived frame of the latest tick."""
    if name not in FRAME_NAMES:
        return JSONResponse(
            {"error": f"Unknown frame '{name}'", "frames": FRAME_NAMES},
            status_code=404,
        )

    current = get_current_outputs()
    if current is None:
        return JSONResponse({"error": "No output available yet"}, status_code=503)

    return Response(content=encode_png(getattr(current, name)), media_type="image/png")


@app.get("/grid")
async def grid_png(extension: bool = False) -> Response:
    """PNG of the inspection grid, or of the extension overlay."""
    current = get_current_outputs()
    if current is None or _renderer is None:
        return JSONResponse({"error": "No output available yet"}, status_code=503)

    if extension:
        canvas = _renderer.render_extension(current, _stickers)
    else:
        canvas = _renderer.render(current)
    return Response(content=encode_bgr_png(canvas), media_type="image/png")


@app.put("/controls")
async def update_controls(update: ControlsUpdate) -> JSONResponse:
    """
    Replace the controls snapshot.

    Cutoffs are clamped to [0, 255]. Unknown filter labels are taken as
    sticker names.
    """
    global _controls

    changes = update.model_dump(exclude_none=True)
    try:
        for key in ("face_filter", "extension_filter"):
            if key in changes:
                changes[key] = FilterMode.parse(changes[key])
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    _controls = PipelineControls.model_validate({**_controls.model_dump(), **changes})
    logger.info(f"Controls updated: {sorted(changes)}")
    return JSONResponse(_controls.model_dump(mode="json"))


@app.post("/capture")
async def capture() -> JSONResponse:
    """Freeze a fresh frame from the source and stop polling."""
    global _controls

    if _orchestrator is None:
        return JSONResponse({"error": "Pipeline not initialized"}, status_code=503)

    _orchestrator.capture()
    _controls = _controls.model_copy(update={"live": False})
    current = publish_tick()
    return JSONResponse(current.summary().model_dump(mode="json") if current else {})


@app.post("/live")
async def go_live() -> JSONResponse:
    """Resume polling the capture source."""
    global _controls

    _controls = _controls.model_copy(update={"live": True})
    logger.info("Live feed resumed")
    return JSONResponse({"live": True})


@app.post("/frame")
async def upload_frame(upload: FrameUpload) -> JSONResponse:
    """Freeze an uploaded image as the source frame."""
    global _controls

    if _orchestrator is None:
        return JSONResponse({"error": "Pipeline not initialized"}, status_code=503)

    try:
        frame = decode_image_b64(upload.image)
    except ImageDecodeError as e:
        logger.warning(f"Rejected frame upload: {e}")
        return JSONResponse({"error": str(e)}, status_code=400)

    _orchestrator.freeze(frame)
    _controls = _controls.model_copy(update={"live": False})
    current = publish_tick()
    return JSONResponse(current.summary().model_dump(mode="json") if current else {})


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/output")
async def output_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint for real-time tick summaries."""
    await websocket.accept()
    logger.info("Client connected to /ws/output")

    last_sent = -1
    try:
        while not _shutdown_flag:
            current = get_current_outputs()
            if current and current.tick_id != last_sent:
                await websocket.send_json(current.summary().model_dump(mode="json"))
                last_sent = current.tick_id
            await asyncio.sleep(1.0 / settings.capture.fps)

    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        logger.info("Client disconnected from /ws/output")


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "framelab.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
