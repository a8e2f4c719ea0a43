"""
Data Models
===========

Typed data passed between pipeline stages.

This module re-exports all data models for convenient access.

Models:
    Frames:
        - Frame: Immutable RGBA pixel grid

    Geometry:
        - FaceBox: Integer detector/display-space bounding box
        - Rect: Float rectangle on an overlay canvas

    Configuration:
        - ChannelSelector: Threshold intensity source (ALL, R, G, B)
        - FilterKind / FilterMode: Filter variant with optional sticker id
        - PipelineControls: Per-tick user controls snapshot

    Output:
        - PipelineOutputs: Everything one tick produces
        - TickSummary: JSON-safe summary of a tick
"""

from framelab.models.frame import Frame
from framelab.models.face import FaceBox, Rect
from framelab.models.filters import ChannelSelector, FilterKind, FilterMode
from framelab.models.controls import PipelineControls
from framelab.models.output import FRAME_NAMES, PipelineOutputs, TickSummary

__all__ = [
    # Frames
    "Frame",
    # Geometry
    "FaceBox",
    "Rect",
    # Configuration
    "ChannelSelector",
    "FilterKind",
    "FilterMode",
    "PipelineControls",
    # Output
    "FRAME_NAMES",
    "PipelineOutputs",
    "TickSummary",
]
