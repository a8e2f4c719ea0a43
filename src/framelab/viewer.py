"""
FrameLab Real-Time OpenCV Viewer
================================

Runs the pipeline in-process and shows the inspection grid with cv2.imshow.

Trackbars set the red / green / blue cutoffs. The extension overlay
replaces the grid while open.

Usage:  framelab-viewer
Controls:
    0-4    face filter (Off, Gray, Blur, HSV overlay, Pixelate);
           also the extension filter while the extension is open
    e      open / close the extension overlay
    n      next extension filter (filters, then stickers)
    c      capture (freeze the current frame)
    l      live feed
    s      save the displayed canvas as PNG
    q/ESC  quit
"""

import time
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

import cv2

from framelab.compositing.stickers import STICKER_RULES, StickerStore
from framelab.config import settings
from framelab.models.controls import PipelineControls
from framelab.models.face import Rect
from framelab.models.filters import KEY_FILTERS, FilterKind, FilterMode
from framelab.observability.grid import GridRenderer, save_canvas
from framelab.pipeline.builder import build_orchestrator, create_controls


WINDOW_NAME = "FrameLab"
KEY_FILTERS_ORD = {ord(k) for k in KEY_FILTERS}

# Extension menu order: filters first, then stickers
EXTENSION_FILTERS: List[FilterMode] = [
    FilterMode(kind=kind)
    for kind in (
        FilterKind.IDENTITY,
        FilterKind.GRAYSCALE,
        FilterKind.BLUR,
        FilterKind.COLOR_SPACE_OVERLAY,
        FilterKind.PIXELATE,
        FilterKind.SEPIA,
        FilterKind.INVERT,
        FilterKind.EDGE,
    )
] + [FilterMode.sticker(name) for name in STICKER_RULES]


@dataclass(frozen=True)
class ViewerState:
    """What the viewer shows and the controls it feeds the pipeline."""

    controls: PipelineControls = field(default_factory=PipelineControls)
    extension_open: bool = False


def next_extension_filter(current: FilterMode) -> FilterMode:
    """The menu entry after `current`, wrapping around."""
    try:
        index = EXTENSION_FILTERS.index(current)
    except ValueError:
        return EXTENSION_FILTERS[0]
    return EXTENSION_FILTERS[(index + 1) % len(EXTENSION_FILTERS)]


def handle_key(key: int, state: ViewerState) -> Tuple[ViewerState, Optional[str]]:
    """
    Apply one key press.

    Returns:
        (new state, action) where action is None, "capture", "save" or
        "quit" for the caller to carry out
    """
    if key in (ord("q"), 27):
        return state, "quit"

    char = chr(key) if 0 <= key < 256 else ""
    controls = state.controls

    if char in KEY_FILTERS:
        mode = FilterMode(kind=KEY_FILTERS[char])
        update = {"face_filter": mode}
        if state.extension_open:
            update["extension_filter"] = mode
        return replace(state, controls=controls.model_copy(update=update)), None

    if char == "e":
        return replace(state, extension_open=not state.extension_open), None
    if char == "n":
        mode = next_extension_filter(controls.extension_filter)
        return replace(state, controls=controls.model_copy(update={"extension_filter": mode})), None
    if char == "l":
        return replace(state, controls=controls.model_copy(update={"live": True})), None
    if char == "c":
        return replace(state, controls=controls.model_copy(update={"live": False})), "capture"
    if char == "s":
        return state, "save"

    return state, None


def _read_trackbars(controls: PipelineControls) -> PipelineControls:
    cutoffs = {
        "red_cutoff": cv2.getTrackbarPos("Red", WINDOW_NAME),
        "green_cutoff": cv2.getTrackbarPos("Green", WINDOW_NAME),
        "blue_cutoff": cv2.getTrackbarPos("Blue", WINDOW_NAME),
    }
    if all(getattr(controls, k) == v for k, v in cutoffs.items()):
        return controls
    return PipelineControls.model_validate({**controls.model_dump(), **cutoffs})


def main():
    print("=" * 60)
    print("FrameLab Viewer")
    print("=" * 60)
    print(f"  Capture:  {settings.capture.backend}")
    print(f"  Detector: {settings.detector.backend}")
    print()
    print("  Controls:")
    print("    0-4    face filter (Off, Gray, Blur, HSV overlay, Pixelate)")
    print("    e      toggle extension overlay")
    print("    n      next extension filter")
    print("    c / l  capture / live")
    print("    s      save PNG")
    print("    q/ESC  quit")
    print("=" * 60)

    orchestrator = build_orchestrator(settings)
    overlay = settings.overlay
    renderer = GridRenderer(
        cell_width=settings.grid.cell_width,
        cell_height=settings.grid.cell_height,
        padding=settings.grid.padding,
        extension_area=Rect(x=overlay.x, y=overlay.y, width=overlay.width, height=overlay.height),
    )
    stickers = StickerStore.load_directory(settings.stickers.directory)
    state = ViewerState(controls=create_controls(settings))

    # ── Window ───────────────────────────────────────────────────────────
    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    width, height = renderer.canvas_size
    cv2.resizeWindow(WINDOW_NAME, width // 2, height // 2)
    cv2.createTrackbar("Red", WINDOW_NAME, state.controls.red_cutoff, 255, lambda _: None)
    cv2.createTrackbar("Green", WINDOW_NAME, state.controls.green_cutoff, 255, lambda _: None)
    cv2.createTrackbar("Blue", WINDOW_NAME, state.controls.blue_cutoff, 255, lambda _: None)

    frame_interval_ms = max(1, int(1000 / settings.capture.fps))

    while True:
        state = replace(state, controls=_read_trackbars(state.controls))
        outputs = orchestrator.tick(state.controls)

        if state.extension_open:
            canvas = renderer.render_extension(outputs, stickers)
        else:
            canvas = renderer.render(outputs)
        cv2.imshow(WINDOW_NAME, canvas)

        # Keyboard
        key = cv2.waitKey(frame_interval_ms) & 0xFF
        if key == 0xFF:
            continue
        state, action = handle_key(key, state)

        if action == "quit":
            break
        elif action == "capture":
            orchestrator.capture()
            print("[capture] frame frozen")
        elif action == "save":
            stem = "extension_view" if state.extension_open else "framelab_grid"
            path = save_canvas(canvas, f"{stem}_{int(time.time())}.png")
            print(f"[save] {path}")
        elif key in KEY_FILTERS_ORD:
            print(f"[filter] face: {state.controls.face_filter.label}")
        elif key == ord("n"):
            print(f"[filter] extension: {state.controls.extension_filter.label}")

    release = getattr(orchestrator.source, "release", None)
    if release is not None:
        release()
    cv2.destroyAllWindows()
    print("\n[viewer] Shutdown.")


if __name__ == "__main__":
    main()
