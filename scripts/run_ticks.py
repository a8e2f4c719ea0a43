#!/usr/bin/env python3
"""
Pipeline Tick Benchmark
=======================

Standalone script that runs the frame pipeline without the HTTP service.

This script:
    1. Builds the orchestrator from config.yaml / environment
    2. Runs a fixed number of ticks
    3. Logs tick statistics every N ticks
    4. Reports timing and detection summary
    5. Optionally saves the last grid as PNG

Usage:
    python scripts/run_ticks.py --ticks 300
    python scripts/run_ticks.py --capture blank --detector mock --save grid.png
"""

import argparse
import logging
import os
import statistics
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from framelab.config import settings
from framelab.observability.grid import GridRenderer, save_canvas
from framelab.pipeline.builder import build_orchestrator, create_controls


logger = logging.getLogger(__name__)


def run_benchmark(ticks: int, report_interval: int, save_path: str = None) -> dict:
    """
    Run the tick benchmark.

    Args:
        ticks: Number of ticks to run
        report_interval: Ticks between progress reports
        save_path: Where to save the final grid (None = don't save)

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("FrameLab Tick Benchmark")
    logger.info("=" * 60)
    logger.info(f"Capture backend: {settings.capture.backend}")
    logger.info(f"Detector backend: {settings.detector.backend}")
    logger.info(f"Ticks: {ticks}")
    logger.info("=" * 60)

    orchestrator = build_orchestrator(settings)
    controls = create_controls(settings)
    durations = []
    outputs = None

    try:
        for i in range(1, ticks + 1):
            started = time.perf_counter()
            outputs = orchestrator.tick(controls)
            durations.append((time.perf_counter() - started) * 1000.0)

            if i % report_interval == 0:
                recent = durations[-report_interval:]
                logger.info(
                    f"Tick {i}/{ticks}: mean {statistics.mean(recent):.2f}ms, "
                    f"face={outputs.face_detected}"
                )
    except KeyboardInterrupt:
        logger.info("Benchmark interrupted by user")
    finally:
        release = getattr(orchestrator.source, "release", None)
        if release is not None:
            release()

    metrics = orchestrator.get_metrics()

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Ticks run: {metrics['ticks']}")
    if durations:
        logger.info(f"Mean tick: {statistics.mean(durations):.2f}ms")
        logger.info(f"Max tick: {max(durations):.2f}ms")
    logger.info(f"Faces detected: {metrics['faces_detected']}")
    logger.info(f"Capture errors: {metrics['capture_errors']}")
    logger.info(f"Detector errors: {metrics['detection']['error_count']}")
    logger.info("=" * 60)

    if save_path and outputs is not None:
        renderer = GridRenderer(
            cell_width=settings.grid.cell_width,
            cell_height=settings.grid.cell_height,
            padding=settings.grid.padding,
        )
        save_canvas(renderer.render(outputs), save_path)

    return {
        "ticks": metrics["ticks"],
        "mean_ms": statistics.mean(durations) if durations else 0.0,
        "faces_detected": metrics["faces_detected"],
        "capture_errors": metrics["capture_errors"],
    }


def main():
    parser = argparse.ArgumentParser(
        description="Run FrameLab pipeline ticks and report timing"
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=300,
        help="Number of ticks to run (default: 300)",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=30,
        help="Ticks between progress reports (default: 30)",
    )
    parser.add_argument(
        "--capture",
        type=str,
        choices=["camera", "image", "blank"],
        default=None,
        help="Override capture.backend",
    )
    parser.add_argument(
        "--detector",
        type=str,
        choices=["haar", "mock", "none"],
        default=None,
        help="Override detector.backend",
    )
    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="Save the last rendered grid to this PNG path",
    )

    args = parser.parse_args()

    if args.capture:
        settings.capture.backend = args.capture
    if args.detector:
        settings.detector.backend = args.detector

    result = run_benchmark(
        ticks=args.ticks,
        report_interval=max(1, args.report_interval),
        save_path=args.save,
    )

    # Exit with appropriate code
    sys.exit(0 if result["ticks"] > 0 else 1)


if __name__ == "__main__":
    main()
