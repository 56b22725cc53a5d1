"""Finger range of motion: MCP / PIP / DIP angles and Total Active Motion."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional

from ..config.engine_config import DEFAULT_CONFIG, FingerConfig
from .frame import LandmarkFrame
from .geometry import angle_between, clamp
from .joints import FINGERS, AngleSample, JointId, finger_joint_id

logger = logging.getLogger(__name__)


class AngleMode(Enum):
    """How a joint angle is reported.

    INCLUDED: the angle at the joint, 180 for a straight finger.
    FLEXION: ``180 - included``, 0 for a straight finger, capped at the
    anatomical flexion limit of each joint.
    """

    INCLUDED = "included"
    FLEXION = "flexion"


def finger_angles(
    frame: LandmarkFrame,
    finger: str,
    mode: AngleMode = AngleMode.INCLUDED,
    config: FingerConfig = DEFAULT_CONFIG.finger,
) -> Dict[str, Optional[float]]:
    """
    Angles of one finger on one frame.

    Returns:
        ``{"mcp", "pip", "dip", "tam"}`` -> degrees or None.  TAM is None
        unless all three joints are measurable.
    """
    wrist = frame.wrist()
    mcp, pip, dip, tip = frame.finger_chain(finger)

    included = {
        "mcp": angle_between(wrist, mcp, pip),
        "pip": angle_between(mcp, pip, dip),
        "dip": angle_between(pip, dip, tip),
    }

    if mode is AngleMode.FLEXION:
        limits = {
            "mcp": config.mcp_max_flexion,
            "pip": config.pip_max_flexion,
            "dip": config.dip_max_flexion,
        }
        angles = {
            joint: None if value is None else clamp(180.0 - value, 0.0, limits[joint])
            for joint, value in included.items()
        }
    else:
        angles = {
            joint: None if value is None else clamp(value, 0.0, 180.0)
            for joint, value in included.items()
        }

    if any(v is None for v in angles.values()):
        angles["tam"] = None
    else:
        angles["tam"] = angles["mcp"] + angles["pip"] + angles["dip"]
    return angles


class FingerRomExtractor:
    """Per-frame MCP / PIP / DIP / TAM samples for one finger."""

    def __init__(
        self,
        finger: str = "index",
        mode: AngleMode = AngleMode.INCLUDED,
        config: FingerConfig = DEFAULT_CONFIG.finger,
    ):
        if finger not in FINGERS:
            raise ValueError(f"Unknown finger '{finger}', expected one of {FINGERS}")
        self.finger = finger
        self.mode = mode
        self.config = config

    @property
    def joint_ids(self) -> List[JointId]:
        return [finger_joint_id(self.finger, j) for j in ("mcp", "pip", "dip", "tam")]

    def __call__(
        self,
        frame: LandmarkFrame,
        frame_index: int,
        reference: Optional[LandmarkFrame] = None,
    ) -> List[AngleSample]:
        angles = finger_angles(frame, self.finger, self.mode, self.config)
        samples = []
        for joint, value in angles.items():
            sample = AngleSample.of(frame_index, finger_joint_id(self.finger, joint), value)
            if not sample.valid:
                logger.debug("Frame %d: %s %s not measurable", frame_index, self.finger, joint)
            samples.append(sample)
        return samples
