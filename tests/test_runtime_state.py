"""
Tests for the mailbox, removal toggle and result slot.
"""

import threading

import numpy as np

from helpers import make_frame
from models.synthesis import RemovalMode, SynthesisMethod, SynthesizedFrame
from runtime.state import LatestFrameMailbox, RemovalToggle, ResultSlot


def _result(frame_index=1):
    return SynthesizedFrame(
        frame=np.zeros((10, 10, 3), dtype=np.uint8),
        mode=RemovalMode.ANNOTATE,
        method=SynthesisMethod.ANNOTATE,
        frame_index=frame_index,
    )


class TestLatestFrameMailbox:
    def test_empty(self):
        mailbox = LatestFrameMailbox()
        assert mailbox.latest() is None

    def test_post_bumps_generation(self):
        mailbox = LatestFrameMailbox()
        first = mailbox.post(make_frame(frame_index=1))
        second = mailbox.post(make_frame(frame_index=2))

        assert second == first + 1
        entry = mailbox.latest()
        assert entry.frame_data.frame_index == 2
        assert entry.generation == second

    def test_concurrent_posts_unique_generations(self):
        mailbox = LatestFrameMailbox()
        frame = make_frame()
        generations = []
        lock = threading.Lock()

        def worker():
            for _ in range(100):
                g = mailbox.post(frame)
                with lock:
                    generations.append(g)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(generations)) == 400
        assert mailbox.latest().generation == 400


class TestRemovalToggle:
    def test_default_annotate(self):
        toggle = RemovalToggle()
        assert toggle.removal_enabled is False
        assert toggle.current_mode() == RemovalMode.ANNOTATE

    def test_toggle_returns_new_mode(self):
        toggle = RemovalToggle()
        assert toggle.toggle() == RemovalMode.REMOVE
        assert toggle.current_mode() == RemovalMode.REMOVE

    def test_toggle_twice_restores(self):
        toggle = RemovalToggle(enabled=True)
        toggle.toggle()
        toggle.toggle()
        assert toggle.removal_enabled is True


class TestResultSlot:
    def test_empty(self):
        slot = ResultSlot()
        assert slot.get() is None
        assert slot.last_update_ts is None
        assert slot.updates == 0

    def test_overwrite(self):
        slot = ResultSlot()
        slot.set(_result(1))
        slot.set(_result(2))

        assert slot.get().frame_index == 2
        assert slot.updates == 2
        assert slot.last_update_ts is not None
