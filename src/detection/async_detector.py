"""
Asynchronous detection runner.

Frames are submitted without blocking; a single worker thread runs the
wrapped detector and hands the result to a listener. Submitting a new frame
cancels the previous pending task. Cancellation only succeeds while the task
is still queued, so listeners must compare the result generation against the
latest submission before acting on it.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from models.frame import FrameData
from .base import DetectionResult, Detector

DetectionListener = Callable[[DetectionResult], None]


class AsyncDetector:
    """Runs a synchronous Detector on a dedicated worker thread."""

    def __init__(self, detector: Detector):
        self._detector = detector
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="detector")
        self._pending: Optional[Future] = None
        self._lock = threading.Lock()
        self.cancelled = 0
        self.failures = 0

    @property
    def detector(self) -> Detector:
        return self._detector

    def detect_async(
        self,
        frame_data: FrameData,
        timestamp: float,
        listener: DetectionListener,
        generation: int = 0,
    ) -> Future:
        """
        Submit a frame for detection and return immediately.

        Any still-queued task from an earlier submission is cancelled.
        """
        with self._lock:
            if self._pending is not None and not self._pending.done():
                if self._pending.cancel():
                    self.cancelled += 1
            self._pending = self._executor.submit(
                self._run, frame_data, timestamp, listener, generation
            )
            return self._pending

    def _run(
        self,
        frame_data: FrameData,
        timestamp: float,
        listener: DetectionListener,
        generation: int,
    ) -> None:
        try:
            detections = self._detector.detect(frame_data.frame)
        except Exception as e:
            self.failures += 1
            logging.warning(f"Detection failed for frame {frame_data.frame_index}: {e}")
            return

        result = DetectionResult(
            detections=list(detections or []),
            timestamp=timestamp,
            generation=generation,
            frame_index=frame_data.frame_index,
        )
        try:
            listener(result)
        except Exception as e:
            logging.warning(f"Detection listener error: {e}")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker; with wait=True, block until the last task finishes."""
        self._executor.shutdown(wait=wait)
        try:
            self._detector.close()
        except Exception as e:
            logging.warning(f"Error closing detector: {e}")
