"""
Pipeline engine for the object eraser.

Main loop:
- read a frame from the observation source
- post it to the latest-frame mailbox (bumps the generation)
- submit it for asynchronous detection (cancels the previous pending task)

Detection results are applied on the detector worker thread. Each one is
rendered onto the latest posted frame (which may be newer than the frame it
was computed on) and published to the presentation sink. A result older than
the last published one is dropped so the display never goes backwards.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import cv2
import numpy as np

from detection.base import DetectionResult
from models.config import Config
from models.frame import FrameData
from models.synthesis import RemovalMode, SynthesizedFrame
from observation import ObservationSource, create_source_from_config
from runtime.context import RuntimeContext

WINDOW_NAME = "Object Eraser"


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        max_consecutive_failures: Max frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        display: Show the latest synthesized frame in a cv2 window.
        retry_delay: Seconds to wait after a failed frame read.
    """
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    display: bool = False
    retry_delay: float = 0.5


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frames_submitted: int = 0
    results_applied: int = 0
    stale_results: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    last_result_time: Optional[float] = None
    fps: float = 0.0
    consecutive_failures: int = 0


class PipelineEngine:
    """
    Drives frames from an ObservationSource through detection and synthesis.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0))
        ctx = RuntimeContext(config, AsyncDetector(detector), stage, sink)
        engine = PipelineEngine(source, ctx, PipelineConfig(display=True))
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        ctx: RuntimeContext,
        config: PipelineConfig,
    ):
        self.source = source
        self.ctx = ctx
        self.config = config
        self.stats = PipelineStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, SynthesizedFrame], None]] = []
        self._published_generation = 0

    def add_callback(self, callback: Callable[[FrameData, SynthesizedFrame], None]) -> None:
        """
        Add a callback to be called after each result is published.

        Args:
            callback: Function taking (frame_data, synthesized) as arguments.
                Runs on the detector worker thread.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the main processing loop.

        Opens the source, submits frames until stopped or exhausted, then
        waits for the last detection task and releases resources.
        """
        self._running = True
        self.stats = PipelineStats()
        self._published_generation = 0

        try:
            self.source.open()
            logging.info(
                f"Pipeline started: source={self.source.source_id}, "
                f"mode={self.ctx.sink.current_mode().value}"
            )

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(self.config.retry_delay)
                    continue

                self.stats.consecutive_failures = 0
                self.submit(frame_data)

                if self.config.display:
                    if not self._handle_display(frame_data):
                        break

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception as e:
            logging.exception(f"Pipeline error: {e}")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def submit(self, frame_data: FrameData) -> int:
        """Post a frame and start detection for it; returns its generation."""
        generation = self.ctx.mailbox.post(frame_data)
        self.stats.frames_submitted += 1
        self.ctx.detector.detect_async(
            frame_data,
            frame_data.timestamp,
            self._on_detections,
            generation=generation,
        )
        return generation

    def _on_detections(self, result: DetectionResult) -> None:
        """
        Render a detection result onto the latest frame and publish it.

        Results at or below the last published generation are dropped.
        """
        entry = self.ctx.mailbox.latest()
        if entry is None or result.generation <= self._published_generation:
            self.stats.stale_results += 1
            logging.debug(
                f"Discarding stale detections for frame {result.frame_index} "
                f"(generation {result.generation}, shown {self._published_generation})"
            )
            return
        self._published_generation = result.generation

        mode = self.ctx.sink.current_mode()
        synthesized = self.ctx.stage.process_frame(entry.frame_data, result.detections, mode)

        self._update_fps()
        self.stats.results_applied += 1
        self.ctx.system_stats.update({
            "frames_submitted": self.stats.frames_submitted,
            "results_applied": self.stats.results_applied,
            "stale_results": self.stats.stale_results,
        })
        self.ctx.publish(synthesized, fps=self.stats.fps)

        for callback in self._callbacks:
            try:
                callback(entry.frame_data, synthesized)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

    def _update_fps(self) -> None:
        now = time.time()
        if self.stats.last_result_time is not None:
            dt = now - self.stats.last_result_time
            if dt > 0:
                instant = 1.0 / dt
                self.stats.fps = instant if self.stats.fps == 0 else 0.9 * self.stats.fps + 0.1 * instant
        self.stats.last_result_time = now

    def _handle_display(self, frame_data: FrameData) -> bool:
        """
        Show the latest synthesized frame (or the raw frame until one exists).

        Keys: 'r' toggles removal, 'q' quits. Returns False on quit.
        """
        result = self.ctx.sink.get_result()
        frame = result.frame if result is not None else frame_data.frame
        cv2.imshow(WINDOW_NAME, self._draw_mode_banner(frame.copy()))

        key = cv2.waitKey(1) & 0xFF
        if key == ord('r'):
            mode = self.ctx.sink.toggle_removal()
            logging.info(f"Removal mode toggled: {mode.value}")
        return key != ord('q')

    def _draw_mode_banner(self, frame: np.ndarray) -> np.ndarray:
        mode = self.ctx.sink.current_mode()
        text = "REMOVE [r]" if mode == RemovalMode.REMOVE else "ANNOTATE [r]"
        cv2.putText(frame, text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)
        return frame

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: submitted={self.stats.frames_submitted}, "
                f"applied={self.stats.results_applied}, stale={self.stats.stale_results}, "
                f"fps={self.stats.fps:.1f}, by_method={self.ctx.stage.stats.by_method}, "
                f"by_failure={self.ctx.stage.stats.by_failure}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        # Waits for the last submitted frame so its result is published.
        self.ctx.detector.shutdown(wait=True)

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Pipeline stopped")


def create_engine_from_config(
    config: Config,
    ctx: RuntimeContext,
    display: bool = False,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the typed config.

    Args:
        config: Full application config.
        ctx: RuntimeContext with detector, stage and sink.
        display: Enable preview window.
    """
    source = create_source_from_config(config.camera, source_id="main-camera")
    return PipelineEngine(source, ctx, PipelineConfig(display=display))
