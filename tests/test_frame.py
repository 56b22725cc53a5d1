"""Tests for the landmark model: frame contract, accessors, mirroring, handedness."""

import dataclasses
import math

import numpy as np
import pytest

from rom_engine.analysis.frame import (
    Handedness,
    LandmarkFrame,
    frames_with_inferred_handedness,
    infer_handedness,
    repetition_handedness,
)
from rom_engine.analysis.geometry import Point3
from rom_engine.analysis.repetition import Repetition, RepetitionRecorder
from rom_engine.config.landmarks import HandLandmark, PoseLandmark
from rom_engine.errors import LandmarkContractError


def _hand(offset_x: float = 0.0, visibility=None):
    rng = np.random.default_rng(7)
    pts = rng.uniform(0.3, 0.7, size=(21, 3))
    pts[:, 2] = 0.0
    pts[:, 0] += offset_x
    return [Point3(float(x), float(y), float(z), visibility) for x, y, z in pts]


def _pose(left_shoulder=(0.6, 0.3), right_shoulder=(0.4, 0.3), vis_left=0.9, vis_right=0.9):
    pts = [Point3(0.5, 0.5, 0.0, 0.9) for _ in range(33)]
    pts[PoseLandmark.LEFT_SHOULDER] = Point3(*left_shoulder, 0.0, vis_left)
    pts[PoseLandmark.RIGHT_SHOULDER] = Point3(*right_shoulder, 0.0, vis_right)
    pts[PoseLandmark.LEFT_ELBOW] = Point3(0.65, 0.5, 0.0, 0.9)
    pts[PoseLandmark.RIGHT_ELBOW] = Point3(0.35, 0.5, 0.0, 0.9)
    return pts


class TestFrameContract:
    def test_wrong_hand_count_rejected(self):
        with pytest.raises(LandmarkContractError):
            LandmarkFrame(hand_landmarks=_hand()[:20])

    def test_wrong_pose_count_rejected(self):
        with pytest.raises(LandmarkContractError):
            LandmarkFrame(pose_landmarks=_pose()[:17])

    def test_contract_error_is_value_error(self):
        with pytest.raises(ValueError):
            LandmarkFrame(hand_landmarks=_hand() + _hand()[:1])

    @pytest.mark.parametrize("conf", [-0.1, 1.5, math.nan])
    def test_confidence_outside_unit_interval_rejected(self, conf):
        with pytest.raises(LandmarkContractError):
            LandmarkFrame(hand_landmarks=_hand(), detection_confidence=conf)

    def test_empty_set_means_absent(self):
        frame = LandmarkFrame(hand_landmarks=[], pose_landmarks=None)
        assert not frame.has_hand
        assert frame.wrist() is None

    def test_landmarks_frozen_to_tuples(self):
        frame = LandmarkFrame(hand_landmarks=_hand())
        assert isinstance(frame.hand_landmarks, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            frame.detection_confidence = 0.2

    def test_from_arrays_with_visibility(self):
        hand = np.full((21, 4), 0.5)
        hand[:, 3] = 0.8
        frame = LandmarkFrame.from_arrays(hand=hand, handedness=Handedness.RIGHT)
        assert frame.wrist().visibility == pytest.approx(0.8)
        assert frame.pose_landmarks is None

    def test_handedness_label_parsed(self):
        frame = LandmarkFrame(hand_landmarks=_hand(), handedness="left")
        assert frame.handedness is Handedness.LEFT
        assert Handedness.from_label("Ambidextrous") is Handedness.UNKNOWN
        assert Handedness.from_label(None) is Handedness.UNKNOWN


class TestAccessors:
    def test_named_accessors_map_indices(self):
        hand = _hand()
        frame = LandmarkFrame(hand_landmarks=hand, handedness=Handedness.RIGHT)
        assert frame.wrist() == hand[HandLandmark.WRIST]
        assert frame.thumb_tip() == hand[HandLandmark.THUMB_TIP]
        assert frame.index_mcp() == hand[HandLandmark.INDEX_MCP]
        assert frame.index_pip() == hand[HandLandmark.INDEX_PIP]
        assert frame.index_dip() == hand[HandLandmark.INDEX_DIP]
        assert frame.index_tip() == hand[HandLandmark.INDEX_TIP]
        assert frame.middle_mcp() == hand[HandLandmark.MIDDLE_MCP]
        assert frame.pinky_mcp() == hand[HandLandmark.PINKY_MCP]
        assert frame.finger_chain("ring") == tuple(hand[i] for i in (13, 14, 15, 16))

    def test_absent_sets_return_none(self):
        frame = LandmarkFrame(hand_landmarks=_hand())
        assert frame.elbow() is None
        assert frame.shoulder() is None
        hand_less = LandmarkFrame(pose_landmarks=_pose())
        assert hand_less.wrist() is None
        assert hand_less.elbow() is not None

    def test_left_hand_is_unmirrored(self):
        hand = _hand()
        frame = LandmarkFrame(hand_landmarks=hand, handedness=Handedness.LEFT)
        assert frame.index_tip().x == pytest.approx(1.0 - hand[HandLandmark.INDEX_TIP].x)
        assert frame.index_tip().y == hand[HandLandmark.INDEX_TIP].y

    def test_right_and_unknown_not_mirrored(self):
        hand = _hand()
        for handedness in (Handedness.RIGHT, Handedness.UNKNOWN):
            frame = LandmarkFrame(hand_landmarks=hand, handedness=handedness)
            assert frame.wrist().x == hand[0].x

    def test_pose_side_follows_handedness(self):
        pose = _pose()
        left = LandmarkFrame(pose_landmarks=pose, handedness=Handedness.LEFT)
        right = LandmarkFrame(pose_landmarks=pose, handedness=Handedness.RIGHT)
        assert left.elbow().x == pytest.approx(1.0 - 0.65)
        assert right.elbow().x == pytest.approx(0.35)

    def test_nan_point_is_missing(self):
        hand = _hand()
        hand[HandLandmark.INDEX_DIP] = Point3(math.nan, 0.5)
        frame = LandmarkFrame(hand_landmarks=hand)
        assert frame.index_dip() is None
        assert frame.index_pip() is not None

    def test_low_visibility_is_missing(self):
        frame = LandmarkFrame(hand_landmarks=_hand(visibility=0.3), min_visibility=0.7)
        assert frame.wrist() is None
        ok = LandmarkFrame(hand_landmarks=_hand(visibility=0.9), min_visibility=0.7)
        assert ok.wrist() is not None


class TestInferHandedness:
    def test_hand_left_of_centre_is_right_hand(self):
        hand = _hand()
        hand[0] = Point3(0.3, 0.5)
        assert infer_handedness(LandmarkFrame(hand_landmarks=hand, pose_landmarks=_pose())) is Handedness.RIGHT

    def test_hand_right_of_centre_is_left_hand(self):
        hand = _hand()
        hand[0] = Point3(0.7, 0.5)
        assert infer_handedness(LandmarkFrame(hand_landmarks=hand, pose_landmarks=_pose())) is Handedness.LEFT

    def test_centre_uses_shoulder_visibility(self):
        hand = _hand()
        hand[0] = Point3(0.51, 0.5)
        pose = _pose(vis_left=0.2, vis_right=0.9)
        assert infer_handedness(LandmarkFrame(hand_landmarks=hand, pose_landmarks=pose)) is Handedness.LEFT
        pose = _pose(vis_left=0.9, vis_right=0.2)
        assert infer_handedness(LandmarkFrame(hand_landmarks=hand, pose_landmarks=pose)) is Handedness.RIGHT

    def test_without_pose_unknown(self):
        assert infer_handedness(LandmarkFrame(hand_landmarks=_hand())) is Handedness.UNKNOWN


def _centred_frame(right_shoulder_more_visible, handedness=Handedness.UNKNOWN):
    hand = _hand()
    hand[0] = Point3(0.5, 0.5)
    vis = (0.8, 0.9) if right_shoulder_more_visible else (0.9, 0.8)
    pose = _pose(vis_left=vis[0], vis_right=vis[1])
    return LandmarkFrame(hand_landmarks=hand, pose_landmarks=pose, handedness=handedness)


class TestRepetitionHandedness:
    def test_alternating_guesses_give_one_side(self):
        frames = [_centred_frame(i % 2 == 1) for i in range(12)]
        assert {infer_handedness(f) for f in frames} == {Handedness.LEFT, Handedness.RIGHT}
        filled = frames_with_inferred_handedness(frames)
        assert len(filled) == 12
        # 6 / 6 tie goes to the first frame's side
        assert {f.handedness for f in filled} == {Handedness.RIGHT}

    def test_majority_wins(self):
        # Four LEFT guesses against two RIGHT
        frames = [_centred_frame(flag) for flag in (True, False, False, True, True, True)]
        assert repetition_handedness(frames) is Handedness.LEFT
        assert {f.handedness for f in frames_with_inferred_handedness(frames)} == {Handedness.LEFT}

    def test_tracker_labels_kept_and_counted(self):
        frames = [_centred_frame(False, Handedness.LEFT) for _ in range(3)] + [_centred_frame(False)]
        filled = frames_with_inferred_handedness(frames)
        assert [f.handedness for f in filled] == [Handedness.LEFT] * 4

    def test_labelled_frame_not_overwritten(self):
        frames = [_centred_frame(False) for _ in range(3)] + [_centred_frame(False, Handedness.LEFT)]
        filled = frames_with_inferred_handedness(frames)
        assert [f.handedness for f in filled] == [Handedness.RIGHT] * 3 + [Handedness.LEFT]

    def test_without_pose_unchanged(self):
        frames = [LandmarkFrame(hand_landmarks=_hand()) for _ in range(3)]
        assert repetition_handedness(frames) is Handedness.UNKNOWN
        assert frames_with_inferred_handedness(frames) == tuple(frames)


class TestRepetition:
    def test_recorder_requires_close(self):
        recorder = RepetitionRecorder(index=2)
        recorder.add(LandmarkFrame(hand_landmarks=_hand()))
        with pytest.raises(RuntimeError):
            _ = recorder.repetition
        rep = recorder.close()
        assert isinstance(rep, Repetition)
        assert len(rep) == 1 and rep.index == 2
        assert recorder.close() is rep

    def test_closed_recorder_rejects_frames(self):
        recorder = RepetitionRecorder()
        recorder.close()
        with pytest.raises(RuntimeError):
            recorder.add(LandmarkFrame())
