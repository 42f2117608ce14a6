"""
Object Eraser: live object annotation and removal.

Reads frames from a camera or video file, detects objects asynchronously and
either annotates the target objects or erases them (inpainting with a
neighbour-patch fallback). The latest result is shown in a preview window
and/or served over HTTP.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --display: Show the preview window ('r' toggles removal, 'q' quits)
    --web: Serve the HTTP preview API
    --remove: Start in removal mode
"""

import os
import sys
import argparse
import logging
import threading
from typing import Any, Dict, Optional, Tuple

import yaml

from detection import AsyncDetector, DetectorUnavailable, create_detector_from_config
from models.config import Config
from algorithms.removal import INPAINT_METHODS
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from pipeline.stages.synthesize import SynthesizeStage
from runtime.context import RuntimeContext
from web.state import state as web_state


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        base_cfg: Dict[str, Any] = _read_yaml(base_path) if os.path.exists(base_path) else {}

        local_overrides_path = os.path.join(config_dir, "config.yaml")
        local_cfg: Dict[str, Any] = (
            _read_yaml(local_overrides_path) if os.path.exists(local_overrides_path) else {}
        )

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not one of the layers above
        explicit = os.path.abspath(config_path)
        if os.path.exists(config_path) and explicit not in (
            os.path.abspath(local_overrides_path),
            os.path.abspath(base_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'removal', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Camera
    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (file path)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        resolution = camera['resolution']
        if not isinstance(resolution, list) or len(resolution) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in resolution):
            return False, "camera.resolution values must be positive integers"
    if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
        return False, "camera.fps must be a positive integer"
    if camera.get('backend', 'opencv') != 'opencv':
        return False, "camera.backend must be: opencv"
    if camera.get('rotate', 0) not in (0, 90, 180, 270):
        return False, "camera.rotate must be one of: 0, 90, 180, 270"

    # Detection
    detection = config.get('detection') or {}
    backend = detection.get('backend', 'yolo')
    if backend != 'yolo':
        return False, "detection.backend must be: yolo"
    yolo_cfg = detection.get('yolo') or {}
    if 'model' in yolo_cfg and (not isinstance(yolo_cfg['model'], str) or not yolo_cfg['model']):
        return False, "detection.yolo.model must be a non-empty string"
    for key in ('conf_threshold', 'iou_threshold'):
        if key in yolo_cfg and not _is_number(yolo_cfg[key]):
            return False, f"detection.yolo.{key} must be a number"
    if 'max_results' in yolo_cfg:
        mr = yolo_cfg['max_results']
        if not isinstance(mr, int) or mr <= 0:
            return False, "detection.yolo.max_results must be a positive integer"

    # Removal policy
    removal = config.get('removal') or {}
    if 'target_label' in removal and (
        not isinstance(removal['target_label'], str) or not removal['target_label']
    ):
        return False, "removal.target_label must be a non-empty string"
    if 'min_confidence' in removal:
        mc = removal['min_confidence']
        if not _is_number(mc) or not (0 <= mc <= 1):
            return False, "removal.min_confidence must be between 0 and 1"
    if 'margin_px' in removal:
        margin = removal['margin_px']
        if not isinstance(margin, int) or margin < 0:
            return False, "removal.margin_px must be a non-negative integer"
    if 'inpaint_radius' in removal:
        radius = removal['inpaint_radius']
        if not _is_number(radius) or radius <= 0:
            return False, "removal.inpaint_radius must be a positive number"
    if removal.get('inpaint_method', 'telea') not in INPAINT_METHODS:
        return False, f"removal.inpaint_method must be one of: {', '.join(sorted(INPAINT_METHODS))}"

    # Web (optional)
    web = config.get('web') or {}
    if 'port' in web:
        port = web['port']
        if not isinstance(port, int) or not (0 < port < 65536):
            return False, "web.port must be an integer between 1 and 65535"

    # Logging
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def start_web_server(host: str, port: int) -> threading.Thread:
    """Serve the preview API from a daemon thread."""
    import uvicorn
    from web.app import app

    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="web", daemon=True)
    thread.start()
    logging.info(f"Preview API listening on http://{host}:{port}/api")
    return thread


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Object Eraser - live object annotation and removal')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--display', action='store_true',
                        help='Show preview window')
    parser.add_argument('--web', action='store_true',
                        help='Serve the HTTP preview API (overrides web.enabled)')
    parser.add_argument('--remove', action='store_true',
                        help='Start in removal mode (overrides removal.enabled)')
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting Object Eraser")

    try:
        detector = create_detector_from_config(config.detection)
    except DetectorUnavailable as e:
        logging.error(f"Detector unavailable: {e}")
        sys.exit(1)

    web_state.reset(
        removal_enabled=config.removal.enabled or args.remove,
        stream_fps=config.web.stream_fps,
    )

    ctx = RuntimeContext(
        config=config,
        detector=AsyncDetector(detector),
        stage=SynthesizeStage(config.removal),
        sink=web_state,
    )

    if args.web or config.web.enabled:
        start_web_server(config.web.host, config.web.port)

    engine = create_engine_from_config(config, ctx, display=args.display)
    engine.run()

    logging.info(
        f"Object Eraser stopped: submitted={engine.stats.frames_submitted}, "
        f"applied={engine.stats.results_applied}, stale={engine.stats.stale_results}"
    )


if __name__ == "__main__":
    main()
