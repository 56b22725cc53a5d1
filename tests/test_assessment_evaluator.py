"""End-to-end tests for the assessment evaluator."""

import numpy as np
import pytest

from rom_engine.analysis.extractors import AssessmentType
from rom_engine.analysis.frame import Handedness, LandmarkFrame
from rom_engine.analysis.joints import JointId
from rom_engine.analysis.repetition import Repetition, RepetitionRecorder
from rom_engine.evaluation.assessment_evaluator import AssessmentEvaluator
from rom_engine.evaluation.interpretation import InterpretationStatus


_STRAIGHT_HAND = {
    0: (0.5, 0.9),
    1: (0.42, 0.85), 2: (0.38, 0.8), 3: (0.35, 0.75), 4: (0.33, 0.7),
    5: (0.5, 0.6), 6: (0.5, 0.45), 7: (0.5, 0.35), 8: (0.5, 0.25),
    9: (0.55, 0.6), 10: (0.55, 0.45), 11: (0.55, 0.35), 12: (0.55, 0.25),
    13: (0.6, 0.6), 14: (0.6, 0.47), 15: (0.6, 0.38), 16: (0.6, 0.3),
    17: (0.65, 0.62), 18: (0.65, 0.5), 19: (0.65, 0.42), 20: (0.65, 0.35),
}

# Index PIP bent 90 degrees, DIP straight
_BENT_INDEX = {7: (0.6, 0.45), 8: (0.7, 0.45)}


def _hand_frame(overrides=None, confidence=1.0, handedness=Handedness.RIGHT):
    pts = dict(_STRAIGHT_HAND)
    pts.update(overrides or {})
    hand = np.zeros((21, 3))
    for idx, (x, y) in pts.items():
        hand[idx] = [x, y, 0.0]
    return LandmarkFrame.from_arrays(hand=hand, handedness=handedness, detection_confidence=confidence)


def _tam_repetition(bent_frames=3, total=12):
    return [_hand_frame(_BENT_INDEX if i < bent_frames else None) for i in range(total)]


def _centred_arm_frame(right_shoulder_more_visible):
    """Hand at the shoulder centre, no tracker label; shoulder visibility decides the side."""
    hand = np.zeros((21, 3))
    for idx, (x, y) in _STRAIGHT_HAND.items():
        hand[idx] = [x, y, 0.0]
    pose = np.zeros((33, 4))
    vis_left, vis_right = (0.8, 0.9) if right_shoulder_more_visible else (0.9, 0.8)
    pose[11] = [0.6, 0.3, 0.0, vis_left]
    pose[12] = [0.4, 0.3, 0.0, vis_right]
    pose[13] = [0.6, 1.0, 0.0, 1.0]
    pose[14] = [0.4, 1.0, 0.0, 1.0]
    pose[15] = [0.5, 0.9, 0.0, 1.0]
    pose[16] = [0.5, 0.9, 0.0, 1.0]
    return LandmarkFrame.from_arrays(hand=hand, pose=pose, handedness=Handedness.UNKNOWN)


class TestTamAssessment:
    def test_end_to_end(self):
        report = AssessmentEvaluator(AssessmentType.TAM, "Trigger Finger").evaluate([_tam_repetition()])

        assert report.result.value(JointId.INDEX_TAM) == pytest.approx(90.0)
        assert report.result.value(JointId.MIDDLE_TAM) < report.result.value(JointId.INDEX_TAM)
        index = report.interpretation(JointId.INDEX_TAM)
        assert index.status is InterpretationStatus.LIMITED
        assert index.target_value == pytest.approx(260.0)
        assert [i.joint_id for i in report.interpretations] == [
            JointId.INDEX_TAM, JointId.MIDDLE_TAM, JointId.RING_TAM, JointId.PINKY_TAM
        ]
        assert report.quality_score == pytest.approx(100.0)
        assert report.handedness is Handedness.RIGHT
        assert report.notes == []

    def test_accepts_closed_repetitions(self):
        recorder = RepetitionRecorder(index=0)
        for frame in _tam_repetition():
            recorder.add(frame)
        recorder.close()
        reps = [recorder, Repetition(tuple(_tam_repetition(bent_frames=0)), index=1)]
        report = AssessmentEvaluator(AssessmentType.TAM).evaluate(reps)
        assert report.result.best_repetition[JointId.INDEX_TAM] == 0
        assert len(report.quality_reports) == 2

    def test_open_recorder_rejected(self):
        recorder = RepetitionRecorder()
        recorder.add(_hand_frame())
        with pytest.raises(RuntimeError):
            AssessmentEvaluator(AssessmentType.TAM).evaluate([recorder])

    def test_inconsistent_repetitions_noted(self):
        reps = [_tam_repetition(bent_frames=3), _tam_repetition(bent_frames=0)]
        report = AssessmentEvaluator(AssessmentType.TAM).evaluate(reps)
        assert not report.result.is_reproducible
        assert any("reproducibility" in note for note in report.notes)

    def test_low_confidence_frames_ignored(self):
        frames = [_hand_frame(_BENT_INDEX, confidence=0.2)] + [_hand_frame() for _ in range(11)]
        report = AssessmentEvaluator(AssessmentType.TAM).evaluate([frames])
        assert report.result.value(JointId.INDEX_TAM) == pytest.approx(0.0, abs=1e-6)

    def test_empty_repetition(self):
        report = AssessmentEvaluator(AssessmentType.TAM, "Carpal Tunnel").evaluate([[]])
        assert report.quality_score is None
        assert all(i.status is InterpretationStatus.NO_DATA for i in report.interpretations)
        assert report.notes

    def test_to_dict(self):
        data = AssessmentEvaluator(AssessmentType.TAM, "Trigger Finger").evaluate([_tam_repetition()]).to_dict()
        assert data["assessment"] == "tam"
        assert data["handedness"] == "Right"
        assert data["joints"]["index_tam"]["max"] == pytest.approx(90.0)
        assert len(data["interpretations"]) == 4
        assert data["hand_tam"]["finger_count"] == 4

    def test_hand_level_verdict(self):
        report = AssessmentEvaluator(AssessmentType.TAM, "Trigger Finger").evaluate([_tam_repetition()])
        hand = report.hand_tam
        assert hand is not None
        assert hand.finger_count == 4
        percents = [min(i.percent_of_normal, 100.0) for i in report.interpretations]
        assert hand.average_percent == pytest.approx(sum(percents) / 4)
        values = [i.reduced_value for i in report.interpretations]
        assert hand.overall_score == pytest.approx(sum(values) / 4)
        assert hand.level == "Severely Limited"

    def test_no_hand_verdict_without_data(self):
        report = AssessmentEvaluator(AssessmentType.TAM).evaluate([[]])
        assert report.hand_tam is None
        assert report.to_dict()["hand_tam"] is None


class TestArmAssessments:
    def test_handedness_fixed_per_repetition(self):
        # Identical frames whose per-frame side guess alternates
        frames = [_centred_arm_frame(i % 2 == 1) for i in range(12)]
        report = AssessmentEvaluator(AssessmentType.WRIST_DEVIATION).evaluate([frames])
        assert report.handedness is Handedness.RIGHT
        deviation = report.result.summary(JointId.WRIST_DEVIATION)
        assert deviation.has_data
        assert deviation.sample_count == 12
        assert deviation.range_of_motion == pytest.approx(0.0, abs=1e-9)

    def test_missing_pose_gives_no_data(self):
        frames = [_hand_frame() for _ in range(12)]
        report = AssessmentEvaluator(AssessmentType.WRIST_FLEXION_EXTENSION, "Carpal Tunnel").evaluate([frames])
        assert report.quality_score is None
        statuses = {i.joint_id: i.status for i in report.interpretations}
        assert statuses == {
            JointId.WRIST_FLEXION: InterpretationStatus.NO_DATA,
            JointId.WRIST_EXTENSION: InterpretationStatus.NO_DATA,
        }


class TestKapandjiAssessment:
    def test_no_opposition(self):
        frames = [_hand_frame() for _ in range(12)]
        report = AssessmentEvaluator(AssessmentType.KAPANDJI, "Carpal Tunnel").evaluate([frames])
        assert report.result.opposition_level == 0
        kapandji = report.interpretation(JointId.KAPANDJI)
        assert kapandji.status is InterpretationStatus.LIMITED
        assert kapandji.grade == "Severe Limitation"
        assert report.hand_tam is None


class TestQuestionnaire:
    def test_quickdash_interpretation(self):
        evaluator = AssessmentEvaluator(AssessmentType.TAM, "Carpal Tunnel")
        result = evaluator.interpret_questionnaire([2] * 11)
        assert result.reduced_value == pytest.approx(25.0)
        assert result.status is InterpretationStatus.MINIMAL_DISABILITY

    def test_unscored_questionnaire(self):
        evaluator = AssessmentEvaluator(AssessmentType.TAM, "Carpal Tunnel")
        result = evaluator.interpret_questionnaire([2] * 8)
        assert result.status is InterpretationStatus.NO_DATA
