"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src (and this directory, for helpers) to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
sys.path.insert(0, os.path.dirname(__file__))

from helpers import make_frame  # noqa: E402


@pytest.fixture
def frame_100():
    return make_frame(100, 100)


@pytest.fixture
def shared_state():
    """The global presentation sink, reset around each test."""
    from web.state import state

    state.reset()
    yield state
    state.reset()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  backend: "opencv"
  device_id: 0
  resolution: [640, 480]
  fps: 30

detection:
  backend: "yolo"
  yolo:
    model: "yolov8n.pt"
    max_results: 10

removal:
  enabled: false
  target_label: "bottle"
  min_confidence: 0.5
  margin_px: 10
  inpaint_radius: 10.0

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "backend": "opencv",
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
        },
        "detection": {
            "backend": "yolo",
            "yolo": {"model": "yolov8n.pt", "conf_threshold": 0.25, "max_results": 10},
        },
        "removal": {
            "enabled": False,
            "target_label": "bottle",
            "min_confidence": 0.5,
            "margin_px": 10,
            "inpaint_radius": 10.0,
            "inpaint_method": "telea",
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
