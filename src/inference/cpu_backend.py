"""
CPU inference backend.

Uses Ultralytics if installed. The model is loaded at construction so a
missing package or unreadable weights surface immediately as
DetectorUnavailable instead of on the first frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from detection.base import Detector, DetectorUnavailable
from models.detection import Detection


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    max_results: int = 10
    classes: Optional[Sequence[int]] = None
    class_name_overrides: Optional[Dict[int, str]] = None


def _to_numpy(values) -> np.ndarray:
    return values.cpu().numpy() if hasattr(values, "cpu") else np.asarray(values)


class UltralyticsCpuBackend(Detector):
    def __init__(self, cfg: CpuYoloConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except ImportError as e:
            raise DetectorUnavailable(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or `pip install -e .[yolo]`."
            ) from e

        try:
            self._model = YOLO(cfg.model)
        except Exception as e:
            raise DetectorUnavailable(f"Failed to load YOLO model '{cfg.model}': {e}") from e

        logging.info(f"YOLO detector initialized: model={cfg.model}, max_results={cfg.max_results}")

    def detect(self, frame: np.ndarray) -> List[Detection]:
        results = self._model.predict(
            source=frame,
            conf=self.cfg.conf_threshold,
            iou=self.cfg.iou_threshold,
            max_det=self.cfg.max_results,
            classes=list(self.cfg.classes) if self.cfg.classes is not None else None,
            verbose=False,
        )
        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = _to_numpy(boxes.xyxy)
        conf = _to_numpy(boxes.conf)
        cls = _to_numpy(boxes.cls)

        out: List[Detection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            class_name = (
                (self.cfg.class_name_overrides or {}).get(class_id)
                or names.get(class_id)
                or str(class_id)
            )
            out.append(
                Detection.from_xyxy(
                    float(x1),
                    float(y1),
                    float(x2),
                    float(y2),
                    confidence=float(c),
                    class_id=class_id,
                    class_name=class_name,
                )
            )

        # Ultralytics already sorts by confidence; keep the cap for other model types.
        return out[: self.cfg.max_results]
