"""Forearm pronation / supination from arm-plane and palm-plane normals."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config.engine_config import DEFAULT_CONFIG, WristConfig
from .frame import LandmarkFrame
from .geometry import clamp, plane_normal, project_onto_plane, signed_angle_with_cross, vector
from .joints import AngleSample, JointId
from .wrist import baseline_corrected, split_signed

logger = logging.getLogger(__name__)


def forearm_rotation_angle(frame: LandmarkFrame, config: WristConfig = DEFAULT_CONFIG.wrist) -> Optional[float]:
    """
    Signed forearm rotation in degrees: supination positive, pronation negative.

    0 is the thumb-up position, where the palm plane contains the elbow
    flexion axis.  Both normals are projected perpendicular to the forearm
    before measuring the rotation about it.
    """
    shoulder, elbow, wrist = frame.shoulder(), frame.elbow(), frame.wrist()
    arm_normal = plane_normal(shoulder, elbow, wrist)
    # pinky -> index ordering puts the thumb-up palm normal along the arm normal
    hand_normal = plane_normal(wrist, frame.pinky_mcp(), frame.index_mcp())
    axis = vector(wrist, elbow)
    if arm_normal is None or hand_normal is None or axis is None:
        return None

    signed = signed_angle_with_cross(
        project_onto_plane(arm_normal, axis),
        project_onto_plane(hand_normal, axis),
        axis,
    )
    if signed is None:
        return None
    limit = config.rotation_clamp
    return clamp(signed, -limit, limit)


class ForearmRotationExtractor:
    """FOREARM_ROTATION plus FOREARM_SUPINATION or FOREARM_PRONATION per frame."""

    joint_ids = [JointId.FOREARM_ROTATION, JointId.FOREARM_SUPINATION,
                 JointId.FOREARM_PRONATION]

    def __init__(self, config: WristConfig = DEFAULT_CONFIG.wrist):
        self.config = config

    def __call__(self, frame: LandmarkFrame, frame_index: int,
                 reference: Optional[LandmarkFrame] = None) -> List[AngleSample]:
        value = baseline_corrected(forearm_rotation_angle, frame, reference, self.config)
        if value is None:
            logger.debug("Frame %d: forearm rotation not measurable", frame_index)
        return split_signed(frame_index, JointId.FOREARM_ROTATION, JointId.FOREARM_SUPINATION,
                        JointId.FOREARM_PRONATION, value, self.config.neutral_zone)
