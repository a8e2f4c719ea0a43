"""
Pipeline Controls
=================

Snapshot of the user-adjustable inputs read by one pipeline tick.

Presentation layers (sliders, key bindings, HTTP clients) own these values
and replace the whole snapshot when something changes. The orchestrator only
reads it, so a tick never observes a half-applied update.

Out-of-range cutoffs are clamped rather than rejected: a slider glitch must
never stop the tick loop.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from framelab.models.filters import FilterMode


logger = logging.getLogger(__name__)


def clamp_cutoff(value: int) -> int:
    """Clamp a threshold cutoff into [0, 255]."""
    clamped = max(0, min(255, int(value)))
    if clamped != value:
        logger.debug(f"Cutoff {value} clamped to {clamped}")
    return clamped


class PipelineControls(BaseModel):
    """
    User controls for one tick.

    Attributes:
        red_cutoff: Red channel threshold slider
        green_cutoff: Green channel threshold slider
        blue_cutoff: Blue channel threshold slider
        face_filter: Filter applied to the detected face region
        extension_filter: Filter applied to the extension view
        live: True to poll the camera, False to reuse the frozen frame
    """

    model_config = ConfigDict(frozen=True)

    red_cutoff: int = Field(default=100, description="Red threshold cutoff [0, 255]")
    green_cutoff: int = Field(default=150, description="Green threshold cutoff [0, 255]")
    blue_cutoff: int = Field(default=200, description="Blue threshold cutoff [0, 255]")
    face_filter: FilterMode = Field(default_factory=FilterMode.identity)
    extension_filter: FilterMode = Field(default_factory=FilterMode.identity)
    live: bool = Field(default=True, description="Live feed (True) or frozen capture (False)")

    @field_validator("red_cutoff", "green_cutoff", "blue_cutoff", mode="after")
    @classmethod
    def clamp_cutoffs(cls, v: int) -> int:
        return clamp_cutoff(v)
