"""
FrameLab Configuration
======================

This module handles configuration loading for the frame pipeline.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    FRAMELAB_CAPTURE_BACKEND  -> capture.backend
    FRAMELAB_CAMERA_INDEX     -> capture.device_index
    FRAMELAB_IMAGE_PATH       -> capture.image_path
    FRAMELAB_DETECTOR_BACKEND -> detector.backend
    FRAMELAB_STICKER_DIR      -> stickers.directory
    FRAMELAB_RED_CUTOFF       -> thresholds.red
    FRAMELAB_GREEN_CUTOFF     -> thresholds.green
    FRAMELAB_BLUE_CUTOFF      -> thresholds.blue
    FRAMELAB_PORT             -> server.port
    FRAMELAB_LOG_LEVEL        -> logging.level
    PORT                      -> server.port (takes precedence)

Example:
    from framelab.config import settings

    print(settings.capture.backend)
    print(settings.thresholds.red)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Application identification configuration."""

    name: str = Field(default="framelab", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")


class CaptureConfig(BaseModel):
    """Frame source configuration."""

    backend: str = Field(
        default="camera",
        description="Capture backend: 'camera', 'image' or 'blank'",
    )
    device_index: int = Field(default=0, ge=0, description="OpenCV camera index")
    image_path: Optional[str] = Field(
        default=None,
        description="Still image used by the 'image' backend",
    )
    width: int = Field(default=160, ge=1, description="Source frame width")
    height: int = Field(default=120, ge=1, description="Source frame height")
    fps: float = Field(default=30.0, gt=0, le=120, description="Tick rate of the service loop")


class MockDetectorConfig(BaseModel):
    """Fixed box returned by the mock detector (detector space)."""

    x: int = Field(default=50, description="Box left edge")
    y: int = Field(default=30, description="Box top edge")
    width: int = Field(default=60, gt=0, description="Box width")
    height: int = Field(default=60, gt=0, description="Box height")


class DetectorConfig(BaseModel):
    """Face detector configuration."""

    backend: str = Field(
        default="haar",
        description="Detector backend: 'haar', 'mock' or 'none'",
    )
    width: int = Field(default=160, ge=1, description="Detector-space width")
    height: int = Field(default=120, ge=1, description="Detector-space height")
    scale_factor: float = Field(
        default=1.1,
        gt=1.0,
        description="Haar cascade pyramid scale step",
    )
    min_neighbors: int = Field(default=4, ge=0, description="Haar cascade minNeighbors")
    min_size: int = Field(default=20, ge=1, description="Smallest face edge in pixels")
    cascade_path: Optional[str] = Field(
        default=None,
        description="Cascade XML path (default: OpenCV's frontal-face cascade)",
    )
    mock: MockDetectorConfig = Field(default_factory=MockDetectorConfig)


class ThresholdsConfig(BaseModel):
    """Initial threshold cutoffs."""

    red: int = Field(default=100, ge=0, le=255, description="Red channel cutoff")
    green: int = Field(default=150, ge=0, le=255, description="Green channel cutoff")
    blue: int = Field(default=200, ge=0, le=255, description="Blue channel cutoff")
    color_space: int = Field(
        default=128,
        ge=0,
        le=255,
        description="Cutoff of the HSV and YCbCr masks",
    )


class FiltersConfig(BaseModel):
    """Filter parameters and initial filter selection."""

    pixelate_block_size: int = Field(default=10, ge=1, description="Pixelation tile size")
    blur_radius: int = Field(default=3, ge=1, description="Blur radius in pixels")
    face_filter: str = Field(default="None", description="Initial face filter label")
    extension_filter: str = Field(default="None", description="Initial extension filter label")


class StickersConfig(BaseModel):
    """Sticker asset configuration."""

    directory: str = Field(default="./stickers", description="Folder of sticker PNGs")


class OverlayConfig(BaseModel):
    """Where the extension view is drawn on the overlay canvas."""

    x: float = Field(default=40.0, description="Drawing area left edge")
    y: float = Field(default=70.0, description="Drawing area top edge")
    width: float = Field(default=1000.0, gt=0, description="Drawing area width")
    height: float = Field(default=1290.0, gt=0, description="Drawing area height")


class GridConfig(BaseModel):
    """Inspection grid layout."""

    cell_width: int = Field(default=360, ge=40, description="Grid cell width")
    cell_height: int = Field(default=280, ge=80, description="Grid cell height")
    padding: int = Field(default=20, ge=0, description="Image padding inside a cell")


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for FrameLab.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    stickers: StickersConfig = Field(default_factory=StickersConfig)
    overlay: OverlayConfig = Field(default_factory=OverlayConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    # Build settings object
    settings = Settings.model_validate(config_data)

    return settings


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Capture settings
    if env_backend := os.environ.get("FRAMELAB_CAPTURE_BACKEND"):
        config_data.setdefault("capture", {})["backend"] = env_backend
    if env_index := os.environ.get("FRAMELAB_CAMERA_INDEX"):
        config_data.setdefault("capture", {})["device_index"] = int(env_index)
    if env_image := os.environ.get("FRAMELAB_IMAGE_PATH"):
        config_data.setdefault("capture", {})["image_path"] = env_image

    # Detector settings
    if env_detector := os.environ.get("FRAMELAB_DETECTOR_BACKEND"):
        config_data.setdefault("detector", {})["backend"] = env_detector

    # Sticker assets
    if env_stickers := os.environ.get("FRAMELAB_STICKER_DIR"):
        config_data.setdefault("stickers", {})["directory"] = env_stickers

    # Threshold overrides
    if env_red := os.environ.get("FRAMELAB_RED_CUTOFF"):
        config_data.setdefault("thresholds", {})["red"] = int(env_red)
    if env_green := os.environ.get("FRAMELAB_GREEN_CUTOFF"):
        config_data.setdefault("thresholds", {})["green"] = int(env_green)
    if env_blue := os.environ.get("FRAMELAB_BLUE_CUTOFF"):
        config_data.setdefault("thresholds", {})["blue"] = int(env_blue)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("FRAMELAB_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("FRAMELAB_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
