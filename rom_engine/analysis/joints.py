"""Joint identifiers, their clinical metadata and the per-frame sample type."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class JointId(Enum):
    INDEX_MCP = "index_mcp"
    INDEX_PIP = "index_pip"
    INDEX_DIP = "index_dip"
    INDEX_TAM = "index_tam"
    MIDDLE_MCP = "middle_mcp"
    MIDDLE_PIP = "middle_pip"
    MIDDLE_DIP = "middle_dip"
    MIDDLE_TAM = "middle_tam"
    RING_MCP = "ring_mcp"
    RING_PIP = "ring_pip"
    RING_DIP = "ring_dip"
    RING_TAM = "ring_tam"
    PINKY_MCP = "pinky_mcp"
    PINKY_PIP = "pinky_pip"
    PINKY_DIP = "pinky_dip"
    PINKY_TAM = "pinky_tam"

    # Signed series (flexion +, radial +, supination +)
    WRIST_FLEX_EXT = "wrist_flex_ext"
    WRIST_DEVIATION = "wrist_deviation"
    FOREARM_ROTATION = "forearm_rotation"

    # Non-negative directional magnitudes
    WRIST_FLEXION = "wrist_flexion"
    WRIST_EXTENSION = "wrist_extension"
    WRIST_RADIAL_DEVIATION = "wrist_radial_deviation"
    WRIST_ULNAR_DEVIATION = "wrist_ulnar_deviation"
    FOREARM_PRONATION = "forearm_pronation"
    FOREARM_SUPINATION = "forearm_supination"

    KAPANDJI = "kapandji"
    QUICKDASH = "quickdash"


class Direction(Enum):
    HIGHER_IS_BETTER = "higher"
    LOWER_IS_BETTER = "lower"


class Reduction(Enum):
    """Which reduced figure represents a joint."""

    RANGE = "range"     # max - min over the repetition
    PEAK = "peak"       # max
    LEVEL = "level"     # ordinal level (Kapandji)


@dataclass(frozen=True)
class JointSpec:
    display_name: str
    unit: str = "°"
    direction: Direction = Direction.HIGHER_IS_BETTER
    reduction: Reduction = Reduction.PEAK


FINGERS = ("index", "middle", "ring", "pinky")
FINGER_JOINTS = ("mcp", "pip", "dip")


def finger_joint_id(finger: str, joint: str) -> JointId:
    """``finger_joint_id("ring", "pip") -> JointId.RING_PIP``."""
    return JointId(f"{finger}_{joint}")


def _finger_specs() -> Dict[JointId, JointSpec]:
    specs = {}
    for finger in FINGERS:
        for joint in FINGER_JOINTS:
            specs[finger_joint_id(finger, joint)] = JointSpec(
                f"{finger.capitalize()} {joint.upper()}", reduction=Reduction.RANGE
            )
        specs[finger_joint_id(finger, "tam")] = JointSpec(
            f"{finger.capitalize()} finger TAM", reduction=Reduction.PEAK
        )
    return specs


JOINT_SPECS: Dict[JointId, JointSpec] = {
    **_finger_specs(),
    JointId.WRIST_FLEX_EXT: JointSpec("Wrist flexion/extension arc", reduction=Reduction.RANGE),
    JointId.WRIST_DEVIATION: JointSpec("Wrist radial/ulnar deviation arc", reduction=Reduction.RANGE),
    JointId.FOREARM_ROTATION: JointSpec("Forearm rotation arc", reduction=Reduction.RANGE),
    JointId.WRIST_FLEXION: JointSpec("Wrist flexion"),
    JointId.WRIST_EXTENSION: JointSpec("Wrist extension"),
    JointId.WRIST_RADIAL_DEVIATION: JointSpec("Radial deviation"),
    JointId.WRIST_ULNAR_DEVIATION: JointSpec("Ulnar deviation"),
    JointId.FOREARM_PRONATION: JointSpec("Forearm pronation"),
    JointId.FOREARM_SUPINATION: JointSpec("Forearm supination"),
    JointId.KAPANDJI: JointSpec("Kapandji opposition", unit="/10", reduction=Reduction.LEVEL),
    JointId.QUICKDASH: JointSpec("QuickDASH disability", unit="/100",
                                 direction=Direction.LOWER_IS_BETTER),
}


def joint_spec(joint_id: JointId) -> JointSpec:
    return JOINT_SPECS[joint_id]


@dataclass(frozen=True)
class AngleSample:
    """One joint measurement on one frame.  Invalid samples carry NaN."""

    frame_index: int
    joint_id: JointId
    value_degrees: float
    valid: bool = True

    @classmethod
    def invalid(cls, frame_index: int, joint_id: JointId) -> "AngleSample":
        return cls(frame_index, joint_id, math.nan, False)

    @classmethod
    def of(cls, frame_index: int, joint_id: JointId, value) -> "AngleSample":
        """Valid sample for a finite ``value``, invalid otherwise (``None`` included)."""
        if value is None or not math.isfinite(value):
            return cls.invalid(frame_index, joint_id)
        return cls(frame_index, joint_id, float(value), True)
