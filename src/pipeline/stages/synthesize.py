"""
Synthesis stage: turns a frame and its detections into the display frame.

Remove mode:
    label filter -> mask -> inpaint; on MASK_EMPTY or INPAINT_EXECUTION_ERROR
    the detections are re-filtered with the stricter label+confidence filter
    and the patch fallback runs instead.
Annotate mode:
    label+confidence filter -> box and label overlay.

process_frame never raises; an unexpected error yields a passthrough copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from algorithms.removal import InpaintingEngine, PatchSynthesizer, build_mask, draw_annotations
from detection.filter import mask_filter, strict_filter
from models.config import RemovalConfig
from models.detection import Detection
from models.frame import FrameData
from models.synthesis import InpaintFailure, RemovalMode, SynthesisMethod, SynthesizedFrame


@dataclass
class SynthesizeStats:
    """Per-method and per-failure counters."""
    frames: int = 0
    by_method: Dict[str, int] = field(default_factory=dict)
    by_failure: Dict[str, int] = field(default_factory=dict)

    def record(self, result: SynthesizedFrame) -> None:
        self.frames += 1
        key = result.method.value
        self.by_method[key] = self.by_method.get(key, 0) + 1
        if result.failure is not None:
            fkey = result.failure.value
            self.by_failure[fkey] = self.by_failure.get(fkey, 0) + 1


class SynthesizeStage:
    """
    Pipeline stage producing a SynthesizedFrame per detection result.

    Example:
        stage = SynthesizeStage(RemovalConfig())
        result = stage.process_frame(frame_data, detections, RemovalMode.REMOVE)
    """

    def __init__(
        self,
        config: RemovalConfig,
        engine: Optional[InpaintingEngine] = None,
        patcher: Optional[PatchSynthesizer] = None,
    ):
        self._config = config
        self._mask_filter = mask_filter(config)
        self._strict_filter = strict_filter(config)
        self._engine = engine or InpaintingEngine(
            radius=config.inpaint_radius,
            method=config.inpaint_method,
        )
        self._patcher = patcher or PatchSynthesizer(margin=config.margin_px)
        self.stats = SynthesizeStats()

    @property
    def config(self) -> RemovalConfig:
        return self._config

    def process_frame(
        self,
        frame_data: FrameData,
        detections: Optional[Iterable[Detection]],
        mode: RemovalMode,
    ) -> SynthesizedFrame:
        """
        Produce the display frame for one detection result.

        Args:
            frame_data: Source frame (not modified).
            detections: Detections for the frame; None is treated as empty.
            mode: ANNOTATE or REMOVE.
        """
        detections = list(detections or [])
        try:
            if mode == RemovalMode.REMOVE:
                result = self._remove(frame_data, detections)
            else:
                result = self._annotate(frame_data, detections)
        except Exception as e:
            logging.exception(
                f"Synthesis failed for frame {frame_data.frame_index} "
                f"({len(detections)} detections): {e}"
            )
            result = self._result(frame_data, frame_data.copy_pixels(), mode, SynthesisMethod.PASSTHROUGH)

        self.stats.record(result)
        return result

    def _remove(self, frame_data: FrameData, detections: list) -> SynthesizedFrame:
        targets = self._mask_filter.select(detections)
        mask = build_mask(frame_data.width, frame_data.height, targets, margin=self._config.margin_px)
        outcome = self._engine.inpaint(frame_data.frame, mask)

        if outcome.ok:
            return self._result(
                frame_data, outcome.frame, RemovalMode.REMOVE, SynthesisMethod.INPAINT, regions=len(targets)
            )

        if outcome.failure == InpaintFailure.MASK_EMPTY:
            logging.debug(f"Frame {frame_data.frame_index}: mask empty, using patch fallback")
        else:
            logging.warning(
                f"Frame {frame_data.frame_index}: inpainting failed "
                f"({len(targets)} of {len(detections)} detections masked): {outcome.error}"
            )

        patch_targets = self._strict_filter.select(detections)
        patched_frame, patched = self._patcher.synthesize(frame_data.frame, patch_targets)
        return self._result(
            frame_data,
            patched_frame,
            RemovalMode.REMOVE,
            SynthesisMethod.PATCH,
            failure=outcome.failure,
            regions=patched,
        )

    def _annotate(self, frame_data: FrameData, detections: list) -> SynthesizedFrame:
        targets = self._strict_filter.select(detections)
        annotated, count = draw_annotations(frame_data.frame, targets)
        return self._result(
            frame_data, annotated, RemovalMode.ANNOTATE, SynthesisMethod.ANNOTATE, regions=count
        )

    @staticmethod
    def _result(
        frame_data: FrameData,
        frame,
        mode: RemovalMode,
        method: SynthesisMethod,
        failure: Optional[InpaintFailure] = None,
        regions: int = 0,
    ) -> SynthesizedFrame:
        return SynthesizedFrame(
            frame=frame,
            mode=mode,
            method=method,
            failure=failure,
            regions=regions,
            frame_index=frame_data.frame_index,
            timestamp=frame_data.timestamp,
        )


def create_synthesize_stage(removal_cfg: Dict) -> SynthesizeStage:
    """Factory: build a SynthesizeStage from the raw `removal` config dict."""
    return SynthesizeStage(RemovalConfig.from_dict(removal_cfg or {}))
