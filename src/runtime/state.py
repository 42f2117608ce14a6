"""
Single-slot runtime state shared between the capture loop, the detection
worker and the presentation layer.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional

from models.frame import FrameData
from models.synthesis import RemovalMode, SynthesizedFrame


@dataclass(frozen=True)
class MailboxEntry:
    frame_data: FrameData
    generation: int


class LatestFrameMailbox:
    """
    Holds only the most recently submitted frame and its generation number.

    Each post() swaps in the new frame and bumps the generation. Detection
    results are rendered onto whatever frame is latest when they arrive, and
    their generation orders them against results already shown.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entry: Optional[MailboxEntry] = None
        self._generation = 0

    def post(self, frame_data: FrameData) -> int:
        """Replace the latest frame; return its generation."""
        with self._lock:
            self._generation += 1
            self._entry = MailboxEntry(frame_data=frame_data, generation=self._generation)
            return self._generation

    def latest(self) -> Optional[MailboxEntry]:
        with self._lock:
            return self._entry


class RemovalToggle:
    """Removal on/off switch read once per processed frame."""

    def __init__(self, enabled: bool = False):
        self._lock = threading.Lock()
        self._enabled = enabled

    @property
    def removal_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def toggle(self) -> RemovalMode:
        with self._lock:
            self._enabled = not self._enabled
            return RemovalMode.REMOVE if self._enabled else RemovalMode.ANNOTATE

    def current_mode(self) -> RemovalMode:
        return RemovalMode.REMOVE if self.removal_enabled else RemovalMode.ANNOTATE


class ResultSlot:
    """Latest-value store for synthesized frames; writes overwrite."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value: Optional[SynthesizedFrame] = None
        self._last_update_ts: Optional[float] = None
        self._updates = 0

    def set(self, value: SynthesizedFrame) -> None:
        with self._lock:
            self._value = value
            self._last_update_ts = time.time()
            self._updates += 1

    def get(self) -> Optional[SynthesizedFrame]:
        with self._lock:
            return self._value

    @property
    def last_update_ts(self) -> Optional[float]:
        with self._lock:
            return self._last_update_ts

    @property
    def updates(self) -> int:
        with self._lock:
            return self._updates
