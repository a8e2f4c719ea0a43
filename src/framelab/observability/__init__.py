"""
Observability Module
====================

Rendering of pipeline outputs for humans.

This module provides:
    - GridRenderer: 5 x 3 inspection grid and the extension overlay
    - save_canvas: PNG export of a rendered canvas

DESIGN RULES:
    - Does NOT feed back into the pipeline
    - Reads PipelineOutputs only
"""

from framelab.observability.grid import (
    GRID_LAYOUT,
    GridRenderer,
    save_canvas,
)


__all__ = [
    "GRID_LAYOUT",
    "GridRenderer",
    "save_canvas",
]
