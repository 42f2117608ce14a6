"""
Tests for configuration loading and validation.
"""

import pytest

from main import validate_config, load_config, _deep_merge


class TestDeepMerge:
    """Tests for _deep_merge helper."""

    def test_nested_keys_preserved(self):
        """Nested keys not in override survive the merge."""
        base = {"removal": {"margin_px": 10, "target_label": "bottle"}}
        merged = _deep_merge(base, {"removal": {"margin_px": 4}})

        assert merged["removal"] == {"margin_px": 4, "target_label": "bottle"}

    def test_none_override(self):
        """A None override leaves base unchanged."""
        base = {"log_level": "INFO"}
        assert _deep_merge(base, None) == {"log_level": "INFO"}


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """Valid config returns (True, None)."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["camera", "detection", "removal", "log_path", "log_level"])
    def test_missing_section(self, valid_config, section):
        """Missing required section fails."""
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error

    def test_missing_device_id(self, valid_config):
        """Missing camera.device_id fails."""
        del valid_config["camera"]["device_id"]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "device_id" in error.lower()

    def test_negative_device_id(self, valid_config):
        """Negative device_id fails."""
        valid_config["camera"]["device_id"] = -1

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "device_id" in error.lower()

    def test_string_device_id_valid(self, valid_config):
        """String device_id (video file) is valid."""
        valid_config["camera"]["device_id"] = "videos/desk.mp4"

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_invalid_resolution(self, valid_config):
        """Resolution must be [width, height]."""
        valid_config["camera"]["resolution"] = [1920]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "resolution" in error.lower()

    def test_invalid_fps(self, valid_config):
        """Non-positive fps fails."""
        valid_config["camera"]["fps"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "fps" in error.lower()

    def test_invalid_camera_backend(self, valid_config):
        """Unknown camera backend fails."""
        valid_config["camera"]["backend"] = "picamera2"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "backend" in error.lower()

    def test_invalid_rotation(self, valid_config):
        """Rotation must be a right angle."""
        valid_config["camera"]["rotate"] = 45

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "rotate" in error.lower()

    def test_invalid_detection_backend(self, valid_config):
        """Unknown detection backend fails."""
        valid_config["detection"]["backend"] = "magic"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "backend" in error.lower()

    def test_empty_model(self, valid_config):
        """Empty YOLO model path fails."""
        valid_config["detection"]["yolo"]["model"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "model" in error.lower()

    def test_invalid_max_results(self, valid_config):
        """max_results must be positive."""
        valid_config["detection"]["yolo"]["max_results"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "max_results" in error

    @pytest.mark.parametrize("value", [-0.1, 1.5, "high"])
    def test_invalid_min_confidence(self, valid_config, value):
        """min_confidence must be a number in [0, 1]."""
        valid_config["removal"]["min_confidence"] = value

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "min_confidence" in error

    def test_negative_margin(self, valid_config):
        """Negative margin fails."""
        valid_config["removal"]["margin_px"] = -1

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "margin_px" in error

    def test_zero_margin_valid(self, valid_config):
        """A zero margin masks exactly the detection box."""
        valid_config["removal"]["margin_px"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_non_positive_radius(self, valid_config):
        """Inpaint radius must be positive."""
        valid_config["removal"]["inpaint_radius"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "inpaint_radius" in error

    def test_unknown_inpaint_method(self, valid_config):
        """Unknown inpaint method fails."""
        valid_config["removal"]["inpaint_method"] = "diffusion"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "inpaint_method" in error

    def test_empty_target_label(self, valid_config):
        """Empty target label fails."""
        valid_config["removal"]["target_label"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "target_label" in error

    def test_invalid_web_port(self, valid_config):
        """Out-of-range port fails."""
        valid_config["web"] = {"port": 70000}

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "port" in error

    def test_invalid_log_level(self, valid_config):
        """Invalid log level fails."""
        valid_config["log_level"] = "VERBOSE"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error.lower()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_yaml(self, temp_config_dir):
        """Config loads from default.yaml when only it exists."""
        config_path = str(temp_config_dir / "config.yaml")

        config = load_config(config_path)

        assert config["camera"]["backend"] == "opencv"
        assert config["camera"]["resolution"] == [640, 480]
        assert config["removal"]["target_label"] == "bottle"

    def test_local_overrides_merge(self, temp_config_dir):
        """Local config.yaml overrides default.yaml."""
        config_yaml = temp_config_dir / "config.yaml"
        config_yaml.write_text("""
removal:
  target_label: "cup"
  margin_px: 4
""")

        config = load_config(str(config_yaml))

        assert config["removal"]["target_label"] == "cup"
        assert config["removal"]["margin_px"] == 4
        # Original values preserved
        assert config["removal"]["min_confidence"] == 0.5
        assert config["removal"]["inpaint_radius"] == 10.0

    def test_explicit_path_applied_last(self, temp_config_dir):
        """An explicit config file overrides both layers."""
        (temp_config_dir / "config.yaml").write_text("""
removal:
  margin_px: 4
""")
        explicit = temp_config_dir / "desk.yaml"
        explicit.write_text("""
removal:
  margin_px: 20
""")

        config = load_config(str(explicit))

        assert config["removal"]["margin_px"] == 20
        assert config["detection"]["yolo"]["model"] == "yolov8n.pt"

    def test_loaded_defaults_validate(self, temp_config_dir):
        """The default layer alone is a valid configuration."""
        config = load_config(str(temp_config_dir / "config.yaml"))

        is_valid, error = validate_config(config)

        assert is_valid is True, error
