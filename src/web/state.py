import threading
import time
from typing import Optional

import numpy as np

from models.synthesis import RemovalMode, SynthesizedFrame
from runtime.state import RemovalToggle, ResultSlot


class SharedState:
    """
    Singleton presentation sink shared between the processing pipeline,
    the preview window and the FastAPI server.

    Holds the latest synthesized frame (single slot, overwrite) and the
    removal toggle.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance._init_state()
        return cls._instance

    def _init_state(self, removal_enabled: bool = False, stream_fps: int = 10):
        self.result_slot = ResultSlot()
        self.toggle = RemovalToggle(enabled=removal_enabled)
        self.stream_fps = stream_fps
        self.stats_lock = threading.Lock()
        self.system_stats = {
            "start_time": time.time(),
            "fps": 0,
            "frames_submitted": 0,
            "results_applied": 0,
            "stale_results": 0,
        }

    def reset(self, removal_enabled: bool = False, stream_fps: int = 10):
        """Drop all state (used at startup and by tests)."""
        self._init_state(removal_enabled=removal_enabled, stream_fps=stream_fps)

    # Presentation sink interface

    def display(self, result: SynthesizedFrame):
        """Publish the latest synthesized frame."""
        self.result_slot.set(result)

    @property
    def removal_enabled(self) -> bool:
        return self.toggle.removal_enabled

    def toggle_removal(self) -> RemovalMode:
        return self.toggle.toggle()

    def current_mode(self) -> RemovalMode:
        return self.toggle.current_mode()

    # Readers

    def get_result(self) -> Optional[SynthesizedFrame]:
        return self.result_slot.get()

    def get_frame(self) -> Optional[np.ndarray]:
        """Get a copy of the latest synthesized frame pixels."""
        result = self.result_slot.get()
        if result is None:
            return None
        return result.frame.copy()

    def last_frame_age(self) -> Optional[float]:
        ts = self.result_slot.last_update_ts
        if ts is None:
            return None
        return time.time() - ts

    def update_system_stats(self, stats):
        with self.stats_lock:
            self.system_stats.update(stats)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        with self.stats_lock:
            return dict(self.system_stats)


# Global instance
state = SharedState()
