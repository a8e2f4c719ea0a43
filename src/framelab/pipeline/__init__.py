"""
Pipeline Module
===============

Tick orchestration and component wiring.

Components:
    - FrameOrchestrator: runs one tick in fixed order
    - builder: assembles an orchestrator from Settings (imported
      explicitly, since it loads framelab.config)
"""

from framelab.pipeline.orchestrator import FrameOrchestrator, OrchestratorMetrics

__all__ = [
    "FrameOrchestrator",
    "OrchestratorMetrics",
]
