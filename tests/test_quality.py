"""Tests for the session quality score."""

import numpy as np
import pytest

from rom_engine.analysis.extractors import series_from_samples
from rom_engine.analysis.frame import LandmarkFrame
from rom_engine.analysis.joints import AngleSample, JointId
from rom_engine.config.engine_config import QualityConfig
from rom_engine.evaluation.quality import QualityScorer, series_smoothness


def _frame(confidence=1.0, hand=True, pose=False):
    rng = np.random.default_rng(3)
    return LandmarkFrame.from_arrays(
        hand=rng.uniform(0.3, 0.7, size=(21, 3)) if hand else None,
        pose=rng.uniform(0.2, 0.8, size=(33, 3)) if pose else None,
        handedness="Right",
        detection_confidence=confidence,
    )


class TestQualityScore:
    def test_empty_session_has_no_score(self):
        report = QualityScorer().assess([])
        assert report.score is None
        assert report.insufficient_data
        assert report.total_frames == 0

    def test_perfect_session(self):
        assert QualityScorer().score([_frame() for _ in range(12)]) == pytest.approx(100.0)

    def test_short_session_scaled_down(self):
        score = QualityScorer().score([_frame(), _frame()])
        assert score == pytest.approx(20.0)
        assert 0.0 < score < 100.0

    def test_completeness_and_confidence(self):
        frames = [_frame(0.8) for _ in range(10)] + [_frame(hand=False) for _ in range(10)]
        report = QualityScorer().assess(frames)
        assert report.completeness == pytest.approx(0.5)
        assert report.mean_confidence == pytest.approx(0.8)
        assert report.score == pytest.approx(65.0)

    def test_no_usable_frames(self):
        report = QualityScorer().assess([_frame(hand=False) for _ in range(5)])
        assert report.score is None
        assert report.usable_frames == 0

    def test_pose_required_for_arm_assessments(self):
        frames = [_frame() for _ in range(10)]
        assert QualityScorer(require_pose=True).score(frames) is None
        with_pose = [_frame(pose=True) for _ in range(10)]
        assert QualityScorer(require_pose=True).score(with_pose) == pytest.approx(100.0)

    def test_score_bounded(self):
        for confidence in (0.0, 0.3, 1.0):
            score = QualityScorer().score([_frame(confidence) for _ in range(15)])
            assert 0.0 <= score <= 100.0

    def test_custom_weights(self):
        scorer = QualityScorer(QualityConfig(completeness_weight=1.0, confidence_weight=0.0))
        assert scorer.score([_frame(0.1) for _ in range(10)]) == pytest.approx(100.0)


class TestTemporalQuality:
    def test_smoothness(self):
        assert series_smoothness([10.0, 10.0, 10.0]) == pytest.approx(1.0)
        assert series_smoothness([0.0, 15.0]) == pytest.approx(0.75)
        assert series_smoothness([0.0, 60.0]) == pytest.approx(0.0)

    def test_too_short(self):
        assert series_smoothness([5.0]) is None

    def test_report_includes_temporal_quality(self):
        samples = [AngleSample(i, JointId.INDEX_MCP, v) for i, v in enumerate([10.0, 10.0, 10.0])]
        series = series_from_samples(samples, [1.0, 1.0, 1.0])
        report = QualityScorer().assess([_frame() for _ in range(3)], series)
        assert report.temporal_quality == pytest.approx(1.0)
        assert report.to_dict()["usable_frames"] == 3
