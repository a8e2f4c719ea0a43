"""
Configuration Tests
===================

Tests for config loading, environment overrides and the pipeline builder.
"""

import pytest


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, tmp_path):
        """Verify an empty YAML file yields defaults."""
        from framelab.config import load_config

        path = tmp_path / "config.yaml"
        path.write_text("")
        settings = load_config(str(path))

        assert settings.thresholds.red == 100
        assert settings.thresholds.green == 150
        assert settings.thresholds.blue == 200
        assert settings.thresholds.color_space == 128
        assert settings.filters.pixelate_block_size == 10
        assert (settings.detector.width, settings.detector.height) == (160, 120)

    def test_yaml_values(self, tmp_path):
        """Verify YAML values are loaded."""
        from framelab.config import load_config

        path = tmp_path / "config.yaml"
        path.write_text(
            "capture:\n  backend: blank\n  width: 320\n  height: 240\n"
            "filters:\n  face_filter: Pixelate\n"
        )
        settings = load_config(str(path))

        assert settings.capture.backend == "blank"
        assert (settings.capture.width, settings.capture.height) == (320, 240)
        assert settings.filters.face_filter == "Pixelate"

    def test_env_overrides(self, tmp_path, monkeypatch):
        """Verify environment variables take precedence over YAML."""
        from framelab.config import load_config

        path = tmp_path / "config.yaml"
        path.write_text("thresholds:\n  red: 10\nserver:\n  port: 9000\n")
        monkeypatch.setenv("FRAMELAB_RED_CUTOFF", "42")
        monkeypatch.setenv("FRAMELAB_DETECTOR_BACKEND", "mock")
        monkeypatch.setenv("PORT", "8080")

        settings = load_config(str(path))

        assert settings.thresholds.red == 42
        assert settings.detector.backend == "mock"
        assert settings.server.port == 8080

    def test_invalid_value(self, tmp_path):
        """Verify out-of-range config values are rejected."""
        from pydantic import ValidationError

        from framelab.config import load_config

        path = tmp_path / "config.yaml"
        path.write_text("thresholds:\n  red: 300\n")
        with pytest.raises(ValidationError):
            load_config(str(path))


class TestBuilder:
    """Tests for the pipeline factories."""

    def _settings(self, **sections):
        from framelab.config import Settings

        data = {
            "capture": {"backend": "blank"},
            "detector": {"backend": "mock"},
        }
        data.update(sections)
        return Settings.model_validate(data)

    def test_build_and_tick(self):
        """Verify a blank source with the mock detector runs a tick."""
        from framelab.pipeline.builder import build_orchestrator, create_controls

        settings = self._settings()
        orchestrator = build_orchestrator(settings)
        outputs = orchestrator.tick(create_controls(settings))

        assert outputs.source.size == (160, 120)
        assert outputs.face_detected
        assert orchestrator.overlay_area.width == settings.overlay.width

    def test_detector_disabled(self):
        """Verify the 'none' backend disables detection."""
        from framelab.pipeline.builder import create_detector

        assert create_detector(self._settings(detector={"backend": "none"})) is None

    def test_unknown_backends(self):
        """Verify unknown backends fail fast."""
        from framelab.pipeline.builder import create_capture_source, create_detector

        with pytest.raises(ValueError):
            create_capture_source(self._settings(capture={"backend": "scanner"}))
        with pytest.raises(ValueError):
            create_detector(self._settings(detector={"backend": "dnn"}))

    def test_image_backend_needs_path(self):
        """Verify the image backend requires a path."""
        from framelab.pipeline.builder import create_capture_source

        with pytest.raises(ValueError):
            create_capture_source(self._settings(capture={"backend": "image"}))

    def test_create_controls(self):
        """Verify initial controls come from config labels."""
        from framelab.models.filters import FilterKind
        from framelab.pipeline.builder import create_controls

        settings = self._settings(
            thresholds={"red": 5},
            filters={"face_filter": "Pixelate", "extension_filter": "Hat"},
        )
        controls = create_controls(settings)

        assert controls.red_cutoff == 5
        assert controls.face_filter.kind == FilterKind.PIXELATE
        assert controls.extension_filter.kind == FilterKind.STICKER
        assert controls.extension_filter.sticker_id == "Hat"
        assert controls.live is True
