from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol

from models.config import Config
from models.synthesis import RemovalMode, SynthesizedFrame
from runtime.state import LatestFrameMailbox

if TYPE_CHECKING:
    from detection.async_detector import AsyncDetector
    from pipeline.stages.synthesize import SynthesizeStage


class PresentationSink(Protocol):
    """Receives every synthesized frame and owns the removal toggle."""

    @property
    def removal_enabled(self) -> bool:
        ...

    def display(self, result: SynthesizedFrame) -> None:
        ...

    def get_result(self) -> Optional[SynthesizedFrame]:
        ...

    def toggle_removal(self) -> RemovalMode:
        ...

    def current_mode(self) -> RemovalMode:
        ...

    def update_system_stats(self, stats: dict) -> None:
        ...


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: Config
    detector: "AsyncDetector"
    stage: "SynthesizeStage"
    sink: PresentationSink
    mailbox: LatestFrameMailbox = field(default_factory=LatestFrameMailbox)

    # Observability
    system_stats: dict = field(default_factory=dict)

    def publish(self, result: SynthesizedFrame, fps: Optional[float] = None) -> None:
        self.sink.display(result)
        if fps is not None:
            self.system_stats["fps"] = fps
        self.system_stats["last_frame_ts"] = time.time()
        self.sink.update_system_stats(dict(self.system_stats))
