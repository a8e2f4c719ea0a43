"""
Sticker Overlays
================

Placement geometry and drawing for face-aligned sticker overlays.

Each sticker has a fixed placement rule relative to the face box on the
overlay canvas: a size as multiples of face width/height, a horizontal
anchor (centered on the face, or offset from its left edge) and a vertical
anchor (above the face top, or down into the face).

Rule Table (face box fx, fy, fw, fh; sticker w, h):
    Hat:        w = 1.6 fw,  h = 0.9 fh,   centered, y = fy - 0.95 h
    Cat Ears:   w = 1.5 fw,  h = 0.7 fh,   centered, y = fy - 0.6 h
    Dog Nose:   w = 0.85 fw, h = 0.45 fh,  x = fx + 0.135 fw, y = fy + 0.35 fh
    Glasses:    w = 1.05 fw, h = 0.38 fh,  centered, y = fy + 0.18 fh
    Sunglasses: same as Glasses

The multipliers are tuned by eye; treat them as configuration.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import cv2
import numpy as np

from framelab.models.face import FaceBox, Rect
from framelab.models.frame import Frame


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StickerRule:
    """
    Placement rule for one sticker.

    Attributes:
        width_scale: Sticker width as a multiple of face width
        height_scale: Sticker height as a multiple of face height
        x_offset: Left edge offset as a multiple of face width, or None to
            center the sticker horizontally on the face
        y_offset_face: Top edge offset as a multiple of face height
        y_offset_self: Top edge offset as a multiple of the sticker's own
            height (negative lifts the sticker above the anchor)
    """

    width_scale: float
    height_scale: float
    x_offset: Optional[float] = None
    y_offset_face: float = 0.0
    y_offset_self: float = 0.0

    def place(self, face: Rect) -> Rect:
        """Placement rectangle for a face rectangle."""
        width = face.width * self.width_scale
        height = face.height * self.height_scale
        if self.x_offset is None:
            x = face.x - (width - face.width) / 2
        else:
            x = face.x + face.width * self.x_offset
        y = face.y + face.height * self.y_offset_face + height * self.y_offset_self
        return Rect(x=x, y=y, width=width, height=height)


_GLASSES = StickerRule(width_scale=1.05, height_scale=0.38, y_offset_face=0.18)

STICKER_RULES: Dict[str, StickerRule] = {
    "Hat": StickerRule(width_scale=1.6, height_scale=0.9, y_offset_self=-0.95),
    "Cat Ears": StickerRule(width_scale=1.5, height_scale=0.7, y_offset_self=-0.6),
    "Dog Nose": StickerRule(
        width_scale=0.85, height_scale=0.45, x_offset=0.135, y_offset_face=0.35
    ),
    "Glasses": _GLASSES,
    "Sunglasses": _GLASSES,
}

# Asset file stems, as shipped in the stickers/ directory
STICKER_FILES: Dict[str, str] = {
    "Hat": "hat",
    "Cat Ears": "cat-ears",
    "Dog Nose": "dog-nose",
    "Glasses": "glasses",
    "Sunglasses": "sunglasses",
}


def project_box(
    box: FaceBox,
    source_size: Tuple[int, int],
    canvas: Rect,
) -> Rect:
    """
    Map a box onto a canvas rectangle.

    Linear rescale without flooring, offset by the canvas origin.

    Args:
        box: Box in source coordinates (e.g. detector space)
        source_size: (width, height) of the source coordinate system
        canvas: Where the source image is drawn on the overlay canvas

    Returns:
        Face rectangle in canvas coordinates
    """
    scale_x = canvas.width / source_size[0]
    scale_y = canvas.height / source_size[1]
    return Rect(
        x=canvas.x + box.x * scale_x,
        y=canvas.y + box.y * scale_y,
        width=box.width * scale_x,
        height=box.height * scale_y,
    )


def sticker_placement(
    sticker_id: str,
    face: Rect,
    rules: Optional[Dict[str, StickerRule]] = None,
) -> Optional[Rect]:
    """
    Placement rectangle of a sticker for a face.

    Returns:
        Rect on the same canvas as `face`, or None for unknown stickers
    """
    rule = (rules or STICKER_RULES).get(sticker_id)
    if rule is None:
        return None
    return rule.place(face)


def overlay_sticker(canvas: np.ndarray, sticker: Frame, rect: Rect) -> np.ndarray:
    """
    Alpha-blend a sticker onto a BGR canvas.

    The sticker is resized to `rect` and clipped to the canvas.

    Args:
        canvas: BGR uint8 image (H, W, 3)
        sticker: RGBA sticker frame
        rect: Placement on the canvas

    Returns:
        New BGR canvas with the sticker drawn
    """
    out = canvas.copy()
    x, y, w, h = rect.as_int()
    if w <= 0 or h <= 0:
        return out

    resized = cv2.resize(sticker.pixels, (w, h), interpolation=cv2.INTER_LINEAR)

    canvas_h, canvas_w = out.shape[:2]
    left, top = max(0, x), max(0, y)
    right, bottom = min(canvas_w, x + w), min(canvas_h, y + h)
    if right <= left or bottom <= top:
        return out

    patch = resized[top - y:bottom - y, left - x:right - x]
    alpha = patch[..., 3:4].astype(np.float64) / 255.0
    sticker_bgr = patch[..., 2::-1].astype(np.float64)
    region = out[top:bottom, left:right].astype(np.float64)
    out[top:bottom, left:right] = np.rint(
        sticker_bgr * alpha + region * (1.0 - alpha)
    ).astype(np.uint8)
    return out


class StickerStore:
    """
    Read-only map of sticker id to RGBA image.

    Loaded once before the first tick and shared by presentation.

    Example:
        store = StickerStore.load_directory("stickers")
        hat = store.get("Hat")
    """

    def __init__(self, stickers: Optional[Dict[str, Frame]] = None) -> None:
        self._stickers: Dict[str, Frame] = dict(stickers or {})

    @classmethod
    def load_directory(
        cls,
        directory: str,
        names: Optional[Iterable[str]] = None,
    ) -> "StickerStore":
        """
        Load sticker PNGs from a directory.

        Missing or unreadable files are skipped with a warning.

        Args:
            directory: Folder containing <stem>.png files
            names: Sticker ids to load (default: all known stickers)
        """
        folder = Path(directory)
        stickers: Dict[str, Frame] = {}
        for sticker_id in names or STICKER_FILES:
            stem = STICKER_FILES.get(sticker_id, sticker_id.lower().replace(" ", "-"))
            path = folder / f"{stem}.png"
            if not path.exists():
                logger.warning(f"Sticker asset not found: {path}")
                continue
            image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
            if image is None:
                logger.warning(f"Sticker asset unreadable: {path}")
                continue
            stickers[sticker_id] = _to_rgba(image)

        logger.info(f"StickerStore loaded {len(stickers)} sticker(s) from {folder}")
        return cls(stickers)

    def get(self, sticker_id: str) -> Optional[Frame]:
        return self._stickers.get(sticker_id)

    def __contains__(self, sticker_id: str) -> bool:
        return sticker_id in self._stickers

    def __len__(self) -> int:
        return len(self._stickers)

    @property
    def ids(self) -> list:
        return sorted(self._stickers)


def _to_rgba(image: np.ndarray) -> Frame:
    """Convert an OpenCV image (gray, BGR or BGRA) to an RGBA frame."""
    if image.ndim == 2:
        return Frame(cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA))
    if image.shape[2] == 4:
        return Frame(cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA))
    return Frame(cv2.cvtColor(image, cv2.COLOR_BGR2RGBA))
