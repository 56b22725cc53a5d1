"""Wrist flexion / extension and radial / ulnar deviation.

Both measurements use the elbow-referenced triangle: the forearm vector runs
from the pose elbow to the hand wrist, the hand vector from the wrist to the
middle-finger MCP.

Flexion / extension is measured in the plane perpendicular to the hand's
radial axis (pinky MCP -> index MCP), which is the wrist flexion axis.
Deviation is measured in the palm plane.  Each frame yields a signed value
plus at most one non-negative directional magnitude.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from ..config.engine_config import DEFAULT_CONFIG, WristConfig
from .frame import LandmarkFrame
from .geometry import (
    clamp,
    plane_normal,
    project_onto_plane,
    signed_angle_with_cross,
    vector,
)
from .joints import AngleSample, JointId

logger = logging.getLogger(__name__)


def wrist_flexion_angle(frame: LandmarkFrame, config: WristConfig = DEFAULT_CONFIG.wrist) -> Optional[float]:
    """
    Signed wrist flexion in degrees: flexion positive, extension negative.

    Returns None when the elbow or the hand triangle is missing or degenerate.
    """
    forearm = vector(frame.elbow(), frame.wrist())
    hand = vector(frame.wrist(), frame.middle_mcp())
    radial_axis = vector(frame.pinky_mcp(), frame.index_mcp())
    if forearm is None or hand is None or radial_axis is None:
        return None

    signed = signed_angle_with_cross(
        project_onto_plane(forearm, radial_axis),
        project_onto_plane(hand, radial_axis),
        radial_axis,
    )
    if signed is None:
        return None
    limit = config.flexion_extension_clamp
    return clamp(signed, -limit, limit)


def wrist_deviation_angle(frame: LandmarkFrame, config: WristConfig = DEFAULT_CONFIG.wrist) -> Optional[float]:
    """
    Signed wrist deviation in degrees: radial positive, ulnar negative.

    The direction is radial when the hand turns away from the forearm line
    the same way the radial axis does, so no per-hand sign table is needed.
    """
    forearm = vector(frame.elbow(), frame.wrist())
    hand = vector(frame.wrist(), frame.middle_mcp())
    radial_axis = vector(frame.pinky_mcp(), frame.index_mcp())
    palm = plane_normal(frame.wrist(), frame.index_mcp(), frame.pinky_mcp())
    if forearm is None or hand is None or radial_axis is None or palm is None:
        return None

    forearm_p = project_onto_plane(forearm, palm)
    signed = signed_angle_with_cross(forearm_p, project_onto_plane(hand, palm), palm)
    radial_side = signed_angle_with_cross(forearm_p, project_onto_plane(radial_axis, palm), palm)
    if signed is None or radial_side is None:
        return None

    deviation = abs(signed) if np.sign(signed) == np.sign(radial_side) else -abs(signed)
    return clamp(deviation, config.deviation_min, config.deviation_max)


def baseline_corrected(measure, frame, reference, config):
    """``measure`` on ``frame``, minus the same measure on a neutral ``reference`` frame."""
    value = measure(frame, config)
    if value is None or reference is None:
        return value
    baseline = measure(reference, config)
    if baseline is None:
        logger.debug("Reference frame not measurable, using absolute angle")
        return value
    return value - baseline


def split_signed(
    frame_index: int,
    signed_joint: JointId,
    positive_joint: JointId,
    negative_joint: JointId,
    value: Optional[float],
    neutral_zone: float,
) -> List[AngleSample]:
    """Signed sample plus the one directional magnitude it contributes to."""
    if value is None:
        return [AngleSample.invalid(frame_index, signed_joint)]
    samples = [AngleSample(frame_index, signed_joint, value)]
    if value > neutral_zone:
        samples.append(AngleSample(frame_index, positive_joint, value))
    elif value < -neutral_zone:
        samples.append(AngleSample(frame_index, negative_joint, -value))
    return samples


class WristFlexionExtractor:
    """WRIST_FLEX_EXT plus WRIST_FLEXION or WRIST_EXTENSION per frame."""

    joint_ids = [JointId.WRIST_FLEX_EXT, JointId.WRIST_FLEXION, JointId.WRIST_EXTENSION]

    def __init__(self, config: WristConfig = DEFAULT_CONFIG.wrist):
        self.config = config

    def __call__(self, frame: LandmarkFrame, frame_index: int,
                 reference: Optional[LandmarkFrame] = None) -> List[AngleSample]:
        value = baseline_corrected(wrist_flexion_angle, frame, reference, self.config)
        if value is None:
            logger.debug("Frame %d: wrist flexion not measurable", frame_index)
        return split_signed(frame_index, JointId.WRIST_FLEX_EXT, JointId.WRIST_FLEXION,
                        JointId.WRIST_EXTENSION, value, self.config.neutral_zone)


class WristDeviationExtractor:
    """WRIST_DEVIATION plus WRIST_RADIAL_DEVIATION or WRIST_ULNAR_DEVIATION per frame."""

    joint_ids = [JointId.WRIST_DEVIATION, JointId.WRIST_RADIAL_DEVIATION,
                 JointId.WRIST_ULNAR_DEVIATION]

    def __init__(self, config: WristConfig = DEFAULT_CONFIG.wrist):
        self.config = config

    def __call__(self, frame: LandmarkFrame, frame_index: int,
                 reference: Optional[LandmarkFrame] = None) -> List[AngleSample]:
        value = baseline_corrected(wrist_deviation_angle, frame, reference, self.config)
        if value is None:
            logger.debug("Frame %d: wrist deviation not measurable", frame_index)
        return split_signed(frame_index, JointId.WRIST_DEVIATION, JointId.WRIST_RADIAL_DEVIATION,
                        JointId.WRIST_ULNAR_DEVIATION, value, self.config.neutral_zone)
