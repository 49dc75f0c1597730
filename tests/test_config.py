"""
Tests for Configuration Loading
================================
"""

import pytest
import yaml

from slidegesture.utils.config import Config


@pytest.fixture
def yaml_files(tmp_path):
    config_path = tmp_path / "config.yaml"
    gestures_path = tmp_path / "gestures.yaml"
    config_path.write_text(yaml.safe_dump({
        "camera": {"device_id": 2, "width": 320},
        "debouncing": {"debounce_ms": 500},
    }))
    gestures_path.write_text(yaml.safe_dump({
        "thresholds": {"thumb_up": 0.2},
        "keyboard": {"n": "SWIPE_RIGHT"},
    }))
    return str(config_path), str(gestures_path)


class TestConfig:
    """Test suite for the Config singleton."""

    def test_singleton(self, fresh_config):
        assert Config() is fresh_config

    def test_load_files(self, fresh_config, yaml_files):
        fresh_config.load(*yaml_files)

        assert fresh_config.get("camera.device_id") == 2
        assert fresh_config.debouncing == {"debounce_ms": 500}
        assert fresh_config.thresholds == {"thumb_up": 0.2}
        assert fresh_config.keyboard == {"n": "SWIPE_RIGHT"}

    def test_missing_files_fall_back(self, fresh_config, tmp_path):
        fresh_config.load(str(tmp_path / "nope.yaml"), str(tmp_path / "nope2.yaml"))

        assert fresh_config.camera == {}
        assert fresh_config.get("camera.width", 640) == 640
        assert fresh_config.thresholds == {}

    def test_dot_path_default(self, fresh_config, yaml_files):
        fresh_config.load(*yaml_files)
        assert fresh_config.get("camera.height", 480) == 480
        assert fresh_config.get("camera.width.nested", "x") == "x"

    def test_update_deep_merges(self, fresh_config, yaml_files):
        fresh_config.load(*yaml_files)
        fresh_config.update({"camera": {"device_id": 5}})

        assert fresh_config.camera == {"device_id": 5, "width": 320}

    def test_validation_warns_only(self, fresh_config, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text(yaml.safe_dump({
            "camera": {"width": "wide"},
            "debouncing": {"debounce_ms": 800},
            "motion": "fast",
        }))
        fresh_config.load(str(bad), str(tmp_path / "missing.yaml"))

        warnings = fresh_config._validate()
        assert len(warnings) == 2
        assert any("camera.width" in w for w in warnings)

    def test_repo_defaults(self, fresh_config):
        fresh_config.load()

        assert fresh_config.get("debouncing.debounce_ms") == 800
        assert fresh_config.get("debouncing.confidence_threshold") == 0.7
        assert fresh_config.get("calibration.samples_needed") == 10
        assert fresh_config.thresholds["thumb_up"] == 0.1
        assert fresh_config._validate() == []
