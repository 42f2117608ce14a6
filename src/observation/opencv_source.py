"""
OpenCV-based observation source.

device_id selects the input:
- int: USB webcam index
- str: path to a video file

Frames are turned upright before they reach the pipeline: the configured
rotation is applied to the pixels and reported on FrameData.rotation_degrees,
so detection boxes and masks are always in the coordinates of the frame the
pipeline sees.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from models.config import CameraConfig
from models.frame import FrameData
from .base import ObservationSource, ObservationConfig

ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}

# Camera read failures tolerated (each followed by a reopen) before giving up.
MAX_REOPENS = 3


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Settings for cv2.VideoCapture sources.

    Attributes:
        device_id: Webcam index (int) or video file path (str).
        buffer_size: Capture buffer length; 1 keeps live previews current.
        max_retries: Open attempts before open() raises.
        swap_rb: Swap the R and B channels of every frame.
        rotate: Clockwise rotation applied to every frame (0, 90, 180, 270).
        flip_horizontal: Mirror frames left/right.
        flip_vertical: Mirror frames top/bottom.
    """
    device_id: Union[int, str] = 0
    buffer_size: int = 1
    max_retries: int = 3
    swap_rb: bool = False
    rotate: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @classmethod
    def from_camera_config(cls, camera: CameraConfig, source_id: str = "camera") -> "OpenCVSourceConfig":
        return cls(
            source_id=source_id,
            resolution=tuple(camera.resolution) if camera.resolution else None,
            fps=camera.fps,
            device_id=camera.device_id,
            swap_rb=camera.swap_rb,
            rotate=camera.rotate,
            flip_horizontal=camera.flip_horizontal,
            flip_vertical=camera.flip_vertical,
        )


class OpenCVSource(ObservationSource):
    """
    Frame source backed by cv2.VideoCapture.

    A camera that stops delivering frames is reopened a few times before
    read() gives up; a video file simply ends.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id="desk.mp4"))
        source.open()
        frame_data = source.read()
        source.close()
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._cv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._read_failures = 0

    @property
    def device_id(self) -> Union[int, str]:
        return self._cv_config.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    def open(self) -> None:
        if self._is_open:
            return

        self._cap = self._open_capture()
        self._is_open = True
        self._frame_index = 0
        self._read_failures = 0

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, device={self.device_id}, "
            f"resolution={self._cv_config.resolution}, rotate={self._cv_config.rotate}"
        )

    def _open_capture(self) -> cv2.VideoCapture:
        """Open the device, backing off between attempts."""
        attempts = max(1, self._cv_config.max_retries)
        for attempt in range(attempts):
            if attempt > 0:
                delay = min(2 ** attempt, 10)
                logging.warning(
                    f"Could not open {self.device_id}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                time.sleep(delay)

            cap = cv2.VideoCapture(self.device_id)
            if cap.isOpened():
                self._configure(cap)
                return cap
            cap.release()

        raise RuntimeError(f"Failed to open device {self.device_id} after {attempts} attempts")

    def _configure(self, cap: cv2.VideoCapture) -> None:
        # Capture properties only apply to live cameras.
        if not isinstance(self.device_id, int):
            return
        if self._cv_config.resolution:
            w, h = self._cv_config.resolution
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        if self._cv_config.fps:
            cap.set(cv2.CAP_PROP_FPS, self._cv_config.fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, self._cv_config.buffer_size)

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._cap is None:
            return None

        ok, frame = self._cap.read()
        if not ok or frame is None:
            self._handle_read_failure()
            return None

        self._read_failures = 0
        self._frame_index += 1
        return FrameData.from_numpy(
            apply_transforms(frame, self._cv_config),
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
            rotation_degrees=self._cv_config.rotate,
        )

    def _handle_read_failure(self) -> None:
        self._read_failures += 1
        if self.is_file:
            logging.info(f"End of video file: {self.device_id}")
            return
        if self._read_failures > MAX_REOPENS:
            logging.error(f"Camera {self.device_id} stopped delivering frames")
            return

        logging.warning(f"Frame read failed ({self._read_failures}/{MAX_REOPENS}), reopening camera")
        if self._cap is not None:
            self._cap.release()
        try:
            self._cap = self._open_capture()
        except RuntimeError as e:
            self._cap = None
            logging.error(f"Reopen failed: {e}")

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVSource closed: source_id={self.source_id}, frames={self._frame_index}")
        self._is_open = False

    def get_video_info(self) -> Dict[str, Any]:
        """Size and rate reported by the capture device (empty when closed)."""
        if self._cap is None or not self._cap.isOpened():
            return {}
        info = {
            "width": int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            "height": int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            "fps": self._cap.get(cv2.CAP_PROP_FPS),
        }
        if self.is_file:
            info["frame_count"] = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        return info


def apply_transforms(frame: np.ndarray, cfg: OpenCVSourceConfig) -> np.ndarray:
    """Rotate, flip and channel-swap a raw frame according to `cfg`."""
    rotation = ROTATIONS.get(cfg.rotate % 360)
    if rotation is not None:
        frame = cv2.rotate(frame, rotation)

    if cfg.flip_horizontal and cfg.flip_vertical:
        frame = cv2.flip(frame, -1)
    elif cfg.flip_horizontal:
        frame = cv2.flip(frame, 1)
    elif cfg.flip_vertical:
        frame = cv2.flip(frame, 0)

    if cfg.swap_rb:
        frame = np.ascontiguousarray(frame[..., ::-1])

    return frame
