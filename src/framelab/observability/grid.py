"""
Grid Renderer
=============

Draw a tick's outputs as the 5 x 3 inspection grid and the extension
overlay.

This module generates PURELY DESCRIPTIVE artifacts. Rendering never feeds
back into the pipeline.

Layout (row by row):
    Face Detection    | Grayscale + Brightness | Extension Box
    Red Channel       | Green Channel          | Blue Channel
    Thresholded Red   | Thresholded Green      | Thresholded Blue
    HSV Space         | YCbCr Space            | Original Copy
    Thresholded HSV   | Thresholded YCbCr      | Original Copy

The face cell outlines the face box in red and carries a
"FACE - LIVE|PAUSED" header and a "No face detected" banner.

All canvases are OpenCV BGR uint8 images.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from framelab.compositing.stickers import StickerStore, overlay_sticker
from framelab.models.face import Rect
from framelab.models.filters import FilterKind
from framelab.models.frame import Frame
from framelab.models.output import PipelineOutputs


logger = logging.getLogger(__name__)


BACKGROUND = (196, 219, 197)  # #C5DBC4
LABEL_COLOR = (13, 25, 9)  # #09190D
FACE_BOX_COLOR = (0, 0, 255)
FONT = cv2.FONT_HERSHEY_SIMPLEX

# (label, PipelineOutputs attribute) per cell
GRID_LAYOUT: List[List[Tuple[str, str]]] = [
    [
        ("Face Detection", "face_preview"),
        ("Grayscale + Brightness", "grayscale"),
        ("Extension Box", "source"),
    ],
    [
        ("Red Channel", "red"),
        ("Green Channel", "green"),
        ("Blue Channel", "blue"),
    ],
    [
        ("Thresholded Red", "red_threshold"),
        ("Thresholded Green", "green_threshold"),
        ("Thresholded Blue", "blue_threshold"),
    ],
    [
        ("HSV Space", "hsv"),
        ("YCbCr Space", "ycbcr"),
        ("Original Copy", "source"),
    ],
    [
        ("Thresholded HSV", "hsv_threshold"),
        ("Thresholded YCbCr", "ycbcr_threshold"),
        ("Original Copy", "source"),
    ],
]


def _shade(canvas: np.ndarray, x0: int, y0: int, x1: int, y1: int, color, alpha: float) -> None:
    """Blend a filled rectangle into the canvas in place."""
    h, w = canvas.shape[:2]
    x0, y0 = max(0, x0), max(0, y0)
    x1, y1 = min(w, x1), min(h, y1)
    if x1 <= x0 or y1 <= y0:
        return
    region = canvas[y0:y1, x0:x1].astype(np.float64)
    fill = np.array(color, dtype=np.float64)
    canvas[y0:y1, x0:x1] = np.rint(region * (1.0 - alpha) + fill * alpha).astype(np.uint8)


def _draw_image(canvas: np.ndarray, frame: Frame, x: int, y: int, w: int, h: int) -> None:
    """Scale a frame into a canvas rectangle, clipped to the canvas."""
    if w <= 0 or h <= 0:
        return
    scaled = cv2.resize(frame.to_bgr(), (w, h), interpolation=cv2.INTER_NEAREST)
    canvas_h, canvas_w = canvas.shape[:2]
    left, top = max(0, x), max(0, y)
    right, bottom = min(canvas_w, x + w), min(canvas_h, y + h)
    if right <= left or bottom <= top:
        return
    canvas[top:bottom, left:right] = scaled[top - y:bottom - y, left - x:right - x]


class GridRenderer:
    """
    Render PipelineOutputs for display.

    Attributes:
        cell_width: Width of one grid cell
        cell_height: Height of one grid cell
        padding: Horizontal image padding inside a cell
        extension_area: Where the extension view is drawn on the overlay
            canvas; must match the orchestrator's overlay area so stickers
            line up

    Example:
        renderer = GridRenderer()
        canvas = renderer.render(outputs)
        cv2.imshow("FrameLab", canvas)
    """

    def __init__(
        self,
        cell_width: int = 360,
        cell_height: int = 280,
        padding: int = 20,
        extension_area: Optional[Rect] = None,
    ) -> None:
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.padding = padding

        width, height = self.canvas_size
        self.extension_area = extension_area or Rect(
            x=40.0, y=70.0, width=float(width - 80), height=float(height - 110)
        )
        self._render_count = 0

        logger.info(
            f"GridRenderer initialized: canvas={width}x{height}, "
            f"cell={cell_width}x{cell_height}"
        )

    @property
    def canvas_size(self) -> Tuple[int, int]:
        """(width, height) of the full grid."""
        return self.cell_width * 3, self.cell_height * 5

    def image_rect(self, col: int, row: int) -> Tuple[int, int, int, int]:
        """Image area (x, y, w, h) of a cell."""
        x = col * self.cell_width + self.padding
        y = row * self.cell_height + 40
        return x, y, self.cell_width - 2 * self.padding, self.cell_height - 60

    def _blank_canvas(self) -> np.ndarray:
        width, height = self.canvas_size
        canvas = np.empty((height, width, 3), dtype=np.uint8)
        canvas[...] = BACKGROUND
        return canvas

    def _draw_cell(self, canvas: np.ndarray, label: str, col: int, row: int) -> None:
        x = col * self.cell_width
        y = row * self.cell_height
        _shade(
            canvas,
            x + 10, y + 30,
            x + self.cell_width - 10, y + self.cell_height - 10,
            (255, 255, 255), 220 / 255,
        )
        (text_w, _), _ = cv2.getTextSize(label, FONT, 0.5, 1)
        cv2.putText(
            canvas, label, (x + (self.cell_width - text_w) // 2, y + 20),
            FONT, 0.5, LABEL_COLOR, 1, cv2.LINE_AA,
        )

    def _draw_face_overlay(self, canvas: np.ndarray, outputs: PipelineOutputs) -> None:
        box = outputs.display_face_box
        if box is not None:
            x, y, w, h = self.image_rect(0, 0)
            source = outputs.face_preview
            left = x + int(box.x / source.width * w)
            top = y + int(box.y / source.height * h)
            right = left + int(box.width / source.width * w)
            bottom = top + int(box.height / source.height * h)
            cv2.rectangle(canvas, (left, top), (right, bottom), FACE_BOX_COLOR, 3)

        header = f"FACE - {'LIVE' if outputs.live else 'PAUSED'}"
        _shade(canvas, 0, 0, 190, 24, (0, 0, 0), 150 / 255)
        cv2.putText(canvas, header, (8, 17), FONT, 0.45, (255, 255, 255), 1, cv2.LINE_AA)

        if not outputs.face_detected:
            bottom = self.cell_height
            _shade(canvas, 0, bottom - 22, 168, bottom, (0, 0, 0), 150 / 255)
            cv2.putText(
                canvas, "No face detected", (8, bottom - 6),
                FONT, 0.45, (255, 255, 255), 1, cv2.LINE_AA,
            )

    def render(self, outputs: PipelineOutputs) -> np.ndarray:
        """
        Render the inspection grid.

        Args:
            outputs: One tick's outputs

        Returns:
            BGR canvas of `canvas_size`
        """
        canvas = self._blank_canvas()
        for row, cells in enumerate(GRID_LAYOUT):
            for col, (label, attr) in enumerate(cells):
                self._draw_cell(canvas, label, col, row)
                _draw_image(canvas, getattr(outputs, attr), *self.image_rect(col, row))

        self._draw_face_overlay(canvas, outputs)
        self._render_count += 1
        return canvas

    def render_extension(
        self,
        outputs: PipelineOutputs,
        stickers: Optional[StickerStore] = None,
    ) -> np.ndarray:
        """
        Render the extension overlay.

        Draws the extension view into `extension_area` with a caption and,
        for sticker modes with a face present, the alpha-blended sticker.
        """
        canvas = self._blank_canvas()
        width, height = self.canvas_size
        pad = 20
        _shade(canvas, pad, pad, width - pad, height - pad, (255, 255, 255), 230 / 255)
        caption = f"Extension - Filter: {outputs.extension_filter.label}"
        cv2.putText(canvas, caption, (pad + 20, pad + 26), FONT, 0.6, LABEL_COLOR, 1, cv2.LINE_AA)

        _draw_image(canvas, outputs.extension_view, *self.extension_area.as_int())

        mode = outputs.extension_filter
        if mode.kind == FilterKind.STICKER and outputs.sticker_rect is not None:
            sticker = stickers.get(mode.sticker_id) if stickers is not None else None
            if sticker is None:
                logger.debug(f"No sticker asset for {mode.sticker_id!r}, skipping overlay")
            else:
                canvas = overlay_sticker(canvas, sticker, outputs.sticker_rect)

        self._render_count += 1
        return canvas

    def get_metrics(self) -> dict:
        return {"render_count": self._render_count}


def save_canvas(canvas: np.ndarray, path: Union[str, Path]) -> Path:
    """
    Save a rendered canvas as PNG.

    Raises:
        OSError: If the image cannot be written
    """
    target = Path(path)
    if target.suffix.lower() != ".png":
        target = target.with_suffix(".png")
    target.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(target), canvas):
        raise OSError(f"Failed to write {target}")
    logger.info(f"Saved canvas to {target}")
    return target
