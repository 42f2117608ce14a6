from __future__ import annotations

import time
from typing import Iterable, Optional

import cv2

from ..state import SharedState


class FrameService:
    """JPEG encoding of the latest synthesized frame."""

    @staticmethod
    def snapshot_jpeg(shared: SharedState, quality: int = 85) -> Optional[bytes]:
        frame = shared.get_frame()
        if frame is None:
            return None
        ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
        if not ok:
            raise RuntimeError("Failed to encode JPEG")
        return buf.tobytes()

    @staticmethod
    def mjpeg_stream(shared: SharedState, fps: int = 10, max_frames: Optional[int] = None) -> Iterable[bytes]:
        """
        Yield MJPEG multipart chunks of the latest result.

        Frames are re-sent only when the result slot has been updated.
        """
        fps = max(1, min(30, int(fps)))
        delay = 1.0 / fps
        last_update = None
        sent = 0

        while max_frames is None or sent < max_frames:
            update = shared.result_slot.updates
            if update == last_update:
                time.sleep(delay)
                continue
            jpg = FrameService.snapshot_jpeg(shared)
            if jpg is None:
                time.sleep(delay)
                continue
            last_update = update
            sent += 1
            yield b"--frame\r\nContent-Type: image/jpeg\r\n\r\n" + jpg + b"\r\n"
            time.sleep(delay)
