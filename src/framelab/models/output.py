"""
Pipeline Output Models
======================

Everything one tick produces, published as a single immutable bundle.

Output Contract (summary, as served by /output):
    {
        "tick_id": 42,
        "timestamp": 1770500938.284,
        "live": true,
        "frame_size": {"width": 160, "height": 120},
        "face_detected": true,
        "face_box": {"x": 40, "y": 30, "width": 50, "height": 50},
        "display_face_box": {"x": 40, "y": 30, "width": 50, "height": 50},
        "face_filter": {"kind": "PIXELATE", "sticker_id": null},
        "extension_filter": {"kind": "STICKER", "sticker_id": "Hat"},
        "sticker_rect": {"x": 25.0, "y": -15.75, "width": 80.0, "height": 45.0},
        "frames": ["source", "grayscale", ...]
    }

Design Rules:
    - Frames are only reachable through the bundle; nothing is shared
      between ticks except the orchestrator's source buffer
    - The summary is JSON-safe and carries no pixel data
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from framelab.models.face import FaceBox, Rect
from framelab.models.filters import FilterMode
from framelab.models.frame import Frame


# Display order of the named frames, matching the inspection grid.
FRAME_NAMES: List[str] = [
    "source",
    "grayscale",
    "red",
    "green",
    "blue",
    "red_threshold",
    "green_threshold",
    "blue_threshold",
    "hsv",
    "ycbcr",
    "hsv_threshold",
    "ycbcr_threshold",
    "face_preview",
    "extension_view",
]


class TickSummary(BaseModel):
    """JSON-safe description of one tick's outputs."""

    tick_id: int = Field(..., ge=0, description="Tick counter")
    timestamp: float = Field(..., description="UNIX time the tick ran")
    live: bool = Field(..., description="Whether the source frame was live")
    frame_size: Dict[str, int] = Field(..., description="Source frame width/height")
    face_detected: bool = Field(..., description="Whether a face box was found")
    face_box: Optional[Dict[str, int]] = Field(
        default=None,
        description="Face box in detector space",
    )
    display_face_box: Optional[Dict[str, int]] = Field(
        default=None,
        description="Face box in display space, clamped to the frame",
    )
    face_filter: FilterMode
    extension_filter: FilterMode
    sticker_rect: Optional[Dict[str, float]] = Field(
        default=None,
        description="Sticker placement on the overlay canvas",
    )
    frames: List[str] = Field(default_factory=lambda: list(FRAME_NAMES))


@dataclass(frozen=True, slots=True, eq=False)
class PipelineOutputs:
    """
    All derived images and geometry from one tick.

    Attributes:
        tick_id: Tick counter
        timestamp: UNIX time the tick ran
        live: Whether the source was polled this tick
        source: The source frame the tick processed
        grayscale: Boosted grayscale
        red, green, blue: Channel isolations
        red_threshold, green_threshold, blue_threshold: Per-channel masks
        hsv, ycbcr: Color-space visualizations
        hsv_threshold, ycbcr_threshold: Fixed-cutoff masks of the above
        face_preview: Source with only the face region filtered
        face_box: Detector-space box, None when no face was found
        display_face_box: Box used for compositing (display space, clamped)
        extension_view: Source with the extension filter applied
        sticker_rect: Sticker placement on the overlay canvas, if any
        face_filter, extension_filter: Modes in effect for this tick
    """

    tick_id: int
    timestamp: float
    live: bool
    source: Frame
    grayscale: Frame
    red: Frame
    green: Frame
    blue: Frame
    red_threshold: Frame
    green_threshold: Frame
    blue_threshold: Frame
    hsv: Frame
    ycbcr: Frame
    hsv_threshold: Frame
    ycbcr_threshold: Frame
    face_preview: Frame
    face_box: Optional[FaceBox]
    display_face_box: Optional[FaceBox]
    extension_view: Frame
    sticker_rect: Optional[Rect]
    face_filter: FilterMode
    extension_filter: FilterMode

    def __repr__(self) -> str:
        return (
            f"PipelineOutputs(tick_id={self.tick_id}, "
            f"live={self.live}, face={self.face_box})"
        )

    @property
    def face_detected(self) -> bool:
        return self.face_box is not None

    def named_frames(self) -> Dict[str, Frame]:
        """All derived frames keyed by name, in grid order."""
        return {name: getattr(self, name) for name in FRAME_NAMES}

    def summary(self) -> TickSummary:
        """JSON-safe summary for HTTP / WebSocket consumers."""
        return TickSummary(
            tick_id=self.tick_id,
            timestamp=self.timestamp,
            live=self.live,
            frame_size={"width": self.source.width, "height": self.source.height},
            face_detected=self.face_detected,
            face_box=self.face_box.to_dict() if self.face_box else None,
            display_face_box=(
                self.display_face_box.to_dict() if self.display_face_box else None
            ),
            face_filter=self.face_filter,
            extension_filter=self.extension_filter,
            sticker_rect=self.sticker_rect.to_dict() if self.sticker_rect else None,
        )
