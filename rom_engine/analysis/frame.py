"""Typed view over one detection frame of hand / pose landmarks.

Extractors never index raw landmark arrays; they go through the accessors
here.  Every accessor unmirrors the point when the frame belongs to a left
hand, so the sign conventions of the extractors are the same for both hands.
"""

from __future__ import annotations

import dataclasses
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from ..config.landmarks import (
    ARM_CHAINS,
    FINGER_CHAINS,
    HAND_LANDMARK_COUNT,
    POSE_LANDMARK_COUNT,
    HandLandmark,
    PoseLandmark,
)
from ..errors import LandmarkContractError
from .geometry import Point3, mirror_x

# Hand wrist offset from the shoulder centre beyond which the side is certain
HANDEDNESS_CENTER_MARGIN = 0.05


class Handedness(Enum):
    LEFT = "Left"
    RIGHT = "Right"
    UNKNOWN = "Unknown"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Handedness":
        """Parse a tracker label such as ``"Left"`` or ``"RIGHT"``."""
        if not label:
            return cls.UNKNOWN
        for member in cls:
            if member.value.lower() == label.strip().lower():
                return member
        return cls.UNKNOWN


def _freeze_landmarks(points, expected: int, kind: str) -> Optional[Tuple[Point3, ...]]:
    if points is None:
        return None
    frozen = tuple(p if isinstance(p, Point3) else Point3.from_sequence(p) for p in points)
    # An empty detection is "no landmark set", not a partial one
    if not frozen:
        return None
    if len(frozen) != expected:
        raise LandmarkContractError(
            f"{kind} landmarks must have exactly {expected} points, got {len(frozen)}"
        )
    return frozen


@dataclass(frozen=True)
class LandmarkFrame:
    """
    One tracker detection.

    Attributes:
        hand_landmarks: 21 MediaPipe Hands points, or None.
        pose_landmarks: 33 MediaPipe Pose points, or None.
        handedness: Anatomical side of the tracked hand.
        detection_confidence: Tracker confidence in [0, 1].
        timestamp: Monotonic counter or milliseconds.
        min_visibility: Points with a visibility below this are treated as missing.
    """

    hand_landmarks: Optional[Tuple[Point3, ...]] = None
    pose_landmarks: Optional[Tuple[Point3, ...]] = None
    handedness: Handedness = Handedness.UNKNOWN
    detection_confidence: float = 1.0
    timestamp: float = 0.0
    min_visibility: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "hand_landmarks",
                           _freeze_landmarks(self.hand_landmarks, HAND_LANDMARK_COUNT, "Hand"))
        object.__setattr__(self, "pose_landmarks",
                           _freeze_landmarks(self.pose_landmarks, POSE_LANDMARK_COUNT, "Pose"))
        conf = float(self.detection_confidence)
        if not np.isfinite(conf) or not 0.0 <= conf <= 1.0:
            raise LandmarkContractError(
                f"detection_confidence must be in [0, 1], got {self.detection_confidence}"
            )
        object.__setattr__(self, "detection_confidence", conf)
        if not isinstance(self.handedness, Handedness):
            object.__setattr__(self, "handedness", Handedness.from_label(self.handedness))

    # ── Construction helpers ────────────────────────────────────────

    @classmethod
    def from_arrays(
        cls,
        hand: Optional[np.ndarray] = None,
        pose: Optional[np.ndarray] = None,
        handedness: Handedness = Handedness.UNKNOWN,
        detection_confidence: float = 1.0,
        timestamp: float = 0.0,
    ) -> "LandmarkFrame":
        """Build from ``(21, 2|3|4)`` / ``(33, 2|3|4)`` arrays (4th column = visibility)."""
        hand_points = None if hand is None else [Point3.from_sequence(row) for row in np.asarray(hand)]
        pose_points = None if pose is None else [Point3.from_sequence(row) for row in np.asarray(pose)]
        return cls(
            hand_landmarks=hand_points,
            pose_landmarks=pose_points,
            handedness=handedness,
            detection_confidence=detection_confidence,
            timestamp=timestamp,
        )

    def with_handedness(self, handedness: Handedness) -> "LandmarkFrame":
        return dataclasses.replace(self, handedness=handedness)

    # ── Generic accessors ───────────────────────────────────────────

    @property
    def has_hand(self) -> bool:
        return self.hand_landmarks is not None

    @property
    def has_pose(self) -> bool:
        return self.pose_landmarks is not None

    @property
    def is_mirrored(self) -> bool:
        return self.handedness is Handedness.LEFT

    def _usable(self, point: Point3) -> Optional[Point3]:
        if not point.is_finite():
            return None
        if point.visibility is not None and point.visibility < self.min_visibility:
            return None
        return mirror_x(point) if self.is_mirrored else point

    def hand_point(self, index: int) -> Optional[Point3]:
        """Hand landmark ``index`` in the unmirrored frame, or None."""
        if self.hand_landmarks is None:
            return None
        return self._usable(self.hand_landmarks[index])

    def pose_point(self, index: int) -> Optional[Point3]:
        """Pose landmark ``index`` in the unmirrored frame, or None."""
        if self.pose_landmarks is None:
            return None
        return self._usable(self.pose_landmarks[index])

    # ── Named hand accessors ────────────────────────────────────────

    def wrist(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.WRIST)

    def thumb_tip(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.THUMB_TIP)

    def index_mcp(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.INDEX_MCP)

    def index_pip(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.INDEX_PIP)

    def index_dip(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.INDEX_DIP)

    def index_tip(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.INDEX_TIP)

    def middle_mcp(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.MIDDLE_MCP)

    def ring_mcp(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.RING_MCP)

    def pinky_mcp(self) -> Optional[Point3]:
        return self.hand_point(HandLandmark.PINKY_MCP)

    def finger_chain(self, finger: str) -> Tuple[Optional[Point3], ...]:
        """(MCP, PIP, DIP, TIP) of a long finger: index, middle, ring or pinky."""
        return tuple(self.hand_point(idx) for idx in FINGER_CHAINS[finger])

    # ── Pose accessors (side follows handedness) ────────────────────

    @property
    def arm_side(self) -> str:
        return "left" if self.handedness is Handedness.LEFT else "right"

    def shoulder(self) -> Optional[Point3]:
        return self.pose_point(ARM_CHAINS[self.arm_side][0])

    def elbow(self) -> Optional[Point3]:
        return self.pose_point(ARM_CHAINS[self.arm_side][1])

    def pose_wrist(self) -> Optional[Point3]:
        return self.pose_point(ARM_CHAINS[self.arm_side][2])


def infer_handedness(frame: LandmarkFrame) -> Handedness:
    """
    Guess which hand is tracked from its position relative to the body.

    Works on raw (mirrored camera) coordinates: the user's right hand appears
    on the left of the image.  When the wrist is within
    ``HANDEDNESS_CENTER_MARGIN`` of the shoulder centre the better visible
    shoulder decides.
    """
    if frame.hand_landmarks is None or frame.pose_landmarks is None:
        return Handedness.UNKNOWN

    wrist = frame.hand_landmarks[HandLandmark.WRIST]
    left_shoulder = frame.pose_landmarks[PoseLandmark.LEFT_SHOULDER]
    right_shoulder = frame.pose_landmarks[PoseLandmark.RIGHT_SHOULDER]
    if not (wrist.is_finite() and left_shoulder.is_finite() and right_shoulder.is_finite()):
        return Handedness.UNKNOWN

    offset = wrist.x - (left_shoulder.x + right_shoulder.x) / 2.0
    if offset < -HANDEDNESS_CENTER_MARGIN:
        return Handedness.RIGHT
    if offset > HANDEDNESS_CENTER_MARGIN:
        return Handedness.LEFT

    left_vis = left_shoulder.visibility or 0.0
    right_vis = right_shoulder.visibility or 0.0
    return Handedness.LEFT if right_vis > left_vis else Handedness.RIGHT


def repetition_handedness(frames: Sequence[LandmarkFrame]) -> Handedness:
    """
    One side for a whole repetition.

    Tracker labels and per-frame guesses (for UNKNOWN frames) are pooled and
    the most common side wins; a tie goes to the side seen first.
    """
    votes: Counter = Counter()
    for frame in frames:
        side = frame.handedness
        if side is Handedness.UNKNOWN:
            side = infer_handedness(frame)
        if side is not Handedness.UNKNOWN:
            votes[side] += 1
    if not votes:
        return Handedness.UNKNOWN
    return votes.most_common(1)[0][0]


def frames_with_inferred_handedness(frames: Sequence[LandmarkFrame]) -> Tuple[LandmarkFrame, ...]:
    """Fill in UNKNOWN handedness with the single side inferred for the repetition.

    Tracker-labelled frames keep their label.
    """
    frames = tuple(frames)
    side = repetition_handedness(frames)
    if side is Handedness.UNKNOWN:
        return frames
    return tuple(
        f.with_handedness(side) if f.handedness is Handedness.UNKNOWN else f
        for f in frames
    )
