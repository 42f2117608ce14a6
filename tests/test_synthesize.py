"""
Tests for the synthesis stage and annotation overlay.
"""

import numpy as np
import pytest
from unittest.mock import MagicMock

from algorithms.removal.annotate import COLOR_BOX, draw_annotations, format_label
from algorithms.removal.inpaint import InpaintingEngine
from helpers import bottle, make_frame
from models.config import RemovalConfig
from models.synthesis import InpaintFailure, InpaintResult, RemovalMode, SynthesisMethod
from pipeline.stages.synthesize import SynthesizeStage, create_synthesize_stage


def _failing_engine():
    return InpaintingEngine(primitive=MagicMock(side_effect=RuntimeError("inpaint exploded")))


class TestRemoveMode:
    def test_inpaint_success(self, frame_100):
        """A confident target is inpainted inside its padded region."""
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, confidence=0.9)], RemovalMode.REMOVE)

        assert out.method == SynthesisMethod.INPAINT
        assert out.failure is None
        assert out.mode == RemovalMode.REMOVE
        assert out.regions == 1
        assert out.frame.shape == frame_100.frame.shape
        assert not np.array_equal(out.frame[10:50, 10:50], frame_100.frame[10:50, 10:50])
        np.testing.assert_array_equal(out.frame[60:, :], frame_100.frame[60:, :])

    def test_inpaint_failure_falls_back_to_patch(self, frame_100):
        """An inpainting error is replaced by the right-hand neighbour patch."""
        stage = SynthesizeStage(RemovalConfig(), engine=_failing_engine())

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, confidence=0.9)], RemovalMode.REMOVE)

        assert out.method == SynthesisMethod.PATCH
        assert out.failure == InpaintFailure.INPAINT_EXECUTION_ERROR
        assert out.regions == 1
        np.testing.assert_array_equal(out.frame[10:50, 10:50], frame_100.frame[10:50, 50:90])

    def test_full_frame_target_without_donor(self, frame_100):
        """When inpainting fails and no donor fits, the frame is unchanged."""
        stage = SynthesizeStage(RemovalConfig(), engine=_failing_engine())

        out = stage.process_frame(frame_100, [bottle(0, 0, 100, 100, confidence=0.9)], RemovalMode.REMOVE)

        assert out.method == SynthesisMethod.PATCH
        assert out.regions == 0
        np.testing.assert_array_equal(out.frame, frame_100.frame)
        assert out.frame is not frame_100.frame

    def test_no_targets_mask_empty(self, frame_100):
        """No matching labels leaves an empty mask and an unchanged frame."""
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, label="person")], RemovalMode.REMOVE)

        assert out.method == SynthesisMethod.PATCH
        assert out.failure == InpaintFailure.MASK_EMPTY
        np.testing.assert_array_equal(out.frame, frame_100.frame)

    @pytest.mark.parametrize("detections", [None, []])
    def test_absent_detections(self, frame_100, detections):
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_100, detections, RemovalMode.REMOVE)

        assert out.failure == InpaintFailure.MASK_EMPTY
        np.testing.assert_array_equal(out.frame, frame_100.frame)

    def test_low_confidence_masked_but_not_patched(self, frame_100):
        """The mask uses label only; the patch fallback also requires confidence."""
        engine = MagicMock()
        engine.inpaint.return_value = InpaintResult.execution_error("forced")
        stage = SynthesizeStage(RemovalConfig(), engine=engine)

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, confidence=0.3)], RemovalMode.REMOVE)

        mask = engine.inpaint.call_args[0][1]
        assert np.count_nonzero(mask) == 40 * 40
        assert out.method == SynthesisMethod.PATCH
        assert out.regions == 0
        np.testing.assert_array_equal(out.frame, frame_100.frame)

    def test_low_confidence_inpainted(self, frame_100):
        """A label match below min_confidence is still inpainted."""
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, confidence=0.3)], RemovalMode.REMOVE)

        assert out.method == SynthesisMethod.INPAINT

    def test_input_frame_not_modified(self, frame_100):
        original = frame_100.frame.copy()
        stage = SynthesizeStage(RemovalConfig(), engine=_failing_engine())

        stage.process_frame(frame_100, [bottle(20, 20, 40, 40)], RemovalMode.REMOVE)

        np.testing.assert_array_equal(frame_100.frame, original)


class TestAnnotateMode:
    def test_annotates_confident_targets(self, frame_100):
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, confidence=0.9)], RemovalMode.ANNOTATE)

        assert out.method == SynthesisMethod.ANNOTATE
        assert out.mode == RemovalMode.ANNOTATE
        assert out.regions == 1
        assert tuple(out.frame[30, 20]) == COLOR_BOX

    def test_low_confidence_not_annotated(self, frame_100):
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40, confidence=0.5)], RemovalMode.ANNOTATE)

        assert out.regions == 0
        np.testing.assert_array_equal(out.frame, frame_100.frame)

    def test_never_inpaints(self, frame_100):
        engine = MagicMock()
        stage = SynthesizeStage(RemovalConfig(), engine=engine)

        stage.process_frame(frame_100, [bottle(20, 20, 40, 40)], RemovalMode.ANNOTATE)

        engine.inpaint.assert_not_called()


class TestStageRobustness:
    def test_unexpected_error_passthrough(self, frame_100):
        """Any synthesis error yields an unmodified copy instead of raising."""
        engine = MagicMock()
        engine.inpaint.side_effect = RuntimeError("boom")
        stage = SynthesizeStage(RemovalConfig(), engine=engine)

        out = stage.process_frame(frame_100, [bottle(20, 20, 40, 40)], RemovalMode.REMOVE)

        assert out.method == SynthesisMethod.PASSTHROUGH
        np.testing.assert_array_equal(out.frame, frame_100.frame)

    def test_frame_metadata_carried(self):
        frame_data = make_frame(frame_index=42)
        stage = SynthesizeStage(RemovalConfig())

        out = stage.process_frame(frame_data, [], RemovalMode.ANNOTATE)

        assert out.frame_index == 42
        assert out.timestamp == frame_data.timestamp

    def test_stats_recorded(self, frame_100):
        stage = SynthesizeStage(RemovalConfig())

        stage.process_frame(frame_100, [], RemovalMode.REMOVE)
        stage.process_frame(frame_100, [], RemovalMode.ANNOTATE)

        assert stage.stats.frames == 2
        assert stage.stats.by_method == {"patch": 1, "annotate": 1}
        assert stage.stats.by_failure == {InpaintFailure.MASK_EMPTY.value: 1}

    def test_factory_from_dict(self):
        stage = create_synthesize_stage({"target_label": "cup", "margin_px": 3})
        assert stage.config.target_label == "cup"
        assert stage.config.margin_px == 3


class TestAnnotationOverlay:
    def test_format_label(self):
        assert format_label(bottle(0, 0, 1, 1, confidence=0.87)) == "bottle (87%)"

    @pytest.mark.parametrize("confidence,text", [
        (0.125, "bottle (13%)"),
        (0.625, "bottle (63%)"),
        (0.999, "bottle (100%)"),
        (0.0, "bottle (0%)"),
    ])
    def test_format_label_rounds_half_up(self, confidence, text):
        """Percentages on a .5 boundary round up, not to even."""
        assert format_label(bottle(0, 0, 1, 1, confidence=confidence)) == text

    def test_draw_returns_copy(self):
        frame = make_frame().frame
        original = frame.copy()

        annotated, count = draw_annotations(frame, [bottle(20, 20, 40, 40)])

        assert count == 1
        np.testing.assert_array_equal(frame, original)
        assert not np.array_equal(annotated, frame)

    def test_nothing_to_draw(self):
        frame = make_frame().frame
        annotated, count = draw_annotations(frame, [])
        assert count == 0
        np.testing.assert_array_equal(annotated, frame)
