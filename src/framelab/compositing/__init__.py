"""
Compositing Module
==================

Face-region filtering and sticker placement.

Components:
    - FaceRegionCompositor: rescale, crop, filter, paste
    - rescale_box / clamp_box: coordinate helpers
    - StickerStore / sticker_placement / overlay_sticker: face-aligned overlays
"""

from framelab.compositing.face_region import (
    DETECTOR_SIZE,
    FacePreview,
    FaceRegionCompositor,
    clamp_box,
    rescale_box,
)
from framelab.compositing.stickers import (
    STICKER_RULES,
    StickerRule,
    StickerStore,
    overlay_sticker,
    project_box,
    sticker_placement,
)

__all__ = [
    "DETECTOR_SIZE",
    "FacePreview",
    "FaceRegionCompositor",
    "clamp_box",
    "rescale_box",
    "STICKER_RULES",
    "StickerRule",
    "StickerStore",
    "overlay_sticker",
    "project_box",
    "sticker_placement",
]
