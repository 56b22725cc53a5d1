"""Clinical interpretation of reduced joint values.

Each value is compared with the injury-specific target for its joint and
mapped to a status band, a percent-of-normal figure and a short templated
narrative.  Higher-is-better measures (ROM, TAM, Kapandji) and
lower-is-better scores (QuickDASH) use mirrored formulas; the direction
comes from the joint's ``JointSpec`` so it cannot be mixed up per call site.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..analysis.joints import Direction, JointId, joint_spec
from ..analysis.kapandji import opposition_grade
from ..config.engine_config import DEFAULT_CONFIG, InterpretationConfig
from ..config.landmarks import KAPANDJI_TARGET_NAMES
from ..config.injury_profiles import (
    DEFAULT_PROFILE,
    INJURY_PROFILES,
    InjuryProfile,
    JointTarget,
)

logger = logging.getLogger(__name__)

# Used only when even the default profile has no entry for a joint
_GENERIC_TARGET = JointTarget(0.0, 100.0, 100.0)

_TAM_JOINTS = {JointId.INDEX_TAM, JointId.MIDDLE_TAM, JointId.RING_TAM, JointId.PINKY_TAM}


class InterpretationStatus(Enum):
    NORMAL = "Normal"
    MODERATE = "Moderate"
    LIMITED = "Limited"
    MINIMAL_DISABILITY = "Minimal disability"
    MILD_DISABILITY = "Mild disability"
    MODERATE_DISABILITY = "Moderate disability"
    SEVERE_DISABILITY = "Severe disability"
    NO_DATA = "No data"


@dataclass(frozen=True)
class ClinicalInterpretation:
    joint_id: JointId
    status: InterpretationStatus
    percent_of_normal: Optional[float]
    narrative_text: str
    reduced_value: Optional[float] = None
    target_value: Optional[float] = None
    injury_type: Optional[str] = None
    used_default_profile: bool = False
    grade: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "joint": self.joint_id.value,
            "status": self.status.value,
            "percent_of_normal": self.percent_of_normal,
            "narrative": self.narrative_text,
            "value": self.reduced_value,
            "target": self.target_value,
            "injury_type": self.injury_type,
            "used_default_profile": self.used_default_profile,
            "grade": self.grade,
        }


def tam_grade(percent: float) -> str:
    if percent >= 90:
        return "Excellent"
    if percent >= 75:
        return "Good"
    if percent >= 60:
        return "Fair"
    if percent >= 40:
        return "Limited"
    return "Severely Limited"


# Whole-hand wording per tam_grade level: description, clinical meaning, functional implications
_HAND_TAM_TEXT: Dict[str, Tuple[str, str, str]] = {
    "Excellent": (
        "Excellent hand function",
        "Near-normal or normal finger flexion across all digits. Excellent functional capacity.",
        "Full grip strength and dexterity. Suitable for all daily activities and occupational tasks.",
    ),
    "Good": (
        "Good hand function",
        "Good functional range with minor limitations. Most daily activities achievable.",
        "Adequate grip strength. May have minor limitations with fine motor tasks or power grip.",
    ),
    "Fair": (
        "Fair hand function",
        "Moderate functional limitations. Some difficulty with grip and manipulation tasks.",
        "May require adaptive strategies. Difficulty with tight grips or small object manipulation.",
    ),
    "Limited": (
        "Limited hand function",
        "Significant functional limitations. Substantial difficulty with most hand activities.",
        "Requires assistive devices or adaptive techniques. Limited grip strength and dexterity.",
    ),
    "Severely Limited": (
        "Severely limited hand function",
        "Severely compromised hand function. Major limitations in all activities.",
        "Significant functional impairment. May require surgical intervention or intensive therapy.",
    ),
}


@dataclass(frozen=True)
class HandTamInterpretation:
    """Whole-hand verdict built from the per-finger TAM interpretations."""
    level: str
    average_percent: float
    overall_score: float
    description: str
    clinical_meaning: str
    functional_implications: str
    finger_count: int

    def to_dict(self) -> Dict:
        return {
            "level": self.level,
            "average_percent": self.average_percent,
            "overall_score": self.overall_score,
            "description": self.description,
            "clinical_meaning": self.clinical_meaning,
            "functional_implications": self.functional_implications,
            "finger_count": self.finger_count,
        }


def hand_tam_interpretation(
    interpretations: Iterable[ClinicalInterpretation],
) -> Optional[HandTamInterpretation]:
    """
    Combine finger TAM interpretations into one hand-level verdict.

    Each finger's percent is capped at 100 before averaging, and the level
    uses the same bands as ``tam_grade``.  Fingers without data are left
    out; ``None`` when no finger has data.
    """
    fingers = [
        i for i in interpretations
        if i.joint_id in _TAM_JOINTS and i.percent_of_normal is not None and i.reduced_value is not None
    ]
    if not fingers:
        return None
    average = sum(min(i.percent_of_normal, 100.0) for i in fingers) / len(fingers)
    score = sum(i.reduced_value for i in fingers) / len(fingers)
    level = tam_grade(average)
    description, meaning, implications = _HAND_TAM_TEXT[level]
    return HandTamInterpretation(
        level=level,
        average_percent=average,
        overall_score=score,
        description=description,
        clinical_meaning=meaning,
        functional_implications=implications,
        finger_count=len(fingers),
    )


# ── Narrative templates ─────────────────────────────────────────────

_NARRATIVES: Dict[InterpretationStatus, str] = {
    InterpretationStatus.NORMAL:
        "{joint} of {value:.0f}{unit} meets the {target:.0f}{unit} target ({percent:.0f}% of normal).",
    InterpretationStatus.MODERATE:
        "{joint} of {value:.0f}{unit} is {percent:.0f}% of the {target:.0f}{unit} target: "
        "moderate limitation, continue the home exercise programme.",
    InterpretationStatus.LIMITED:
        "{joint} of {value:.0f}{unit} is {percent:.0f}% of the {target:.0f}{unit} target: "
        "significant limitation, review with the treating therapist.",
    InterpretationStatus.MINIMAL_DISABILITY:
        "{joint} score of {value:.1f} indicates minimal disability (target {target:.0f} or lower).",
    InterpretationStatus.MILD_DISABILITY:
        "{joint} score of {value:.1f} indicates mild disability (target {target:.0f} or lower).",
    InterpretationStatus.MODERATE_DISABILITY:
        "{joint} score of {value:.1f} indicates moderate disability (target {target:.0f} or lower).",
    InterpretationStatus.SEVERE_DISABILITY:
        "{joint} score of {value:.1f} indicates severe disability (target {target:.0f} or lower).",
    InterpretationStatus.NO_DATA:
        "No usable measurements of {joint} were captured.",
}

# Joint-specific wording, falls back to _NARRATIVES
_JOINT_NARRATIVES: Dict[Tuple[InterpretationStatus, JointId], str] = {
    (InterpretationStatus.NORMAL, JointId.KAPANDJI):
        "Thumb opposition reached level {value:.0f}/10 ({landmark}), graded {grade}, "
        "meeting the target of {target:.0f}.",
    (InterpretationStatus.MODERATE, JointId.KAPANDJI):
        "Thumb opposition reached level {value:.0f}/10 ({landmark}), graded {grade}, "
        "{percent:.0f}% of the target of {target:.0f}.",
    (InterpretationStatus.LIMITED, JointId.KAPANDJI):
        "Thumb opposition reached only level {value:.0f}/10 ({landmark}), graded {grade}; "
        "target is {target:.0f}.",
    (InterpretationStatus.NORMAL, JointId.QUICKDASH):
        "{joint} score of {value:.1f} is within the {target:.0f}-point target.",
}


def _narrative(status: InterpretationStatus, joint_id: JointId, **values) -> str:
    template = _JOINT_NARRATIVES.get((status, joint_id), _NARRATIVES[status])
    spec = joint_spec(joint_id)
    return template.format(joint=spec.display_name, unit=spec.unit, **values)


class ClinicalClassifier:
    """Map reduced values to clinical interpretations for an injury type."""

    def __init__(
        self,
        profiles: Mapping[str, InjuryProfile] = INJURY_PROFILES,
        default_profile: InjuryProfile = DEFAULT_PROFILE,
        config: InterpretationConfig = DEFAULT_CONFIG.interpretation,
    ):
        self.profiles = profiles
        self.default_profile = default_profile
        self.config = config

    def lookup(self, joint_id: JointId, injury_type: Optional[str]) -> Tuple[JointTarget, bool]:
        """Target for the joint and whether the default profile had to be used."""
        profile = self.profiles.get(injury_type) if injury_type else None
        if profile is not None:
            target = profile.target(joint_id)
            if target is not None:
                return target, False
        logger.info("No %s target for injury '%s', using default profile", joint_id.value, injury_type)
        return self.default_profile.target(joint_id) or _GENERIC_TARGET, True

    def percent_of_normal(self, joint_id: JointId, value: float, target: float) -> float:
        if joint_spec(joint_id).direction is Direction.LOWER_IS_BETTER:
            percent = (target - value) / target * 100.0
        else:
            percent = value / target * 100.0
        return min(max(percent, self.config.percent_floor), self.config.percent_ceiling)

    def _disability_band(self, value: float) -> InterpretationStatus:
        if value <= self.config.minimal_disability_max:
            return InterpretationStatus.MINIMAL_DISABILITY
        if value <= self.config.mild_disability_max:
            return InterpretationStatus.MILD_DISABILITY
        if value <= self.config.moderate_disability_max:
            return InterpretationStatus.MODERATE_DISABILITY
        return InterpretationStatus.SEVERE_DISABILITY

    def classify(
        self,
        joint_id: JointId,
        reduced_value: Optional[float],
        injury_type: Optional[str] = None,
    ) -> ClinicalInterpretation:
        """Interpret one reduced value.  Never raises for missing data or profiles."""
        target, used_default = self.lookup(joint_id, injury_type)

        if reduced_value is None:
            return ClinicalInterpretation(
                joint_id=joint_id,
                status=InterpretationStatus.NO_DATA,
                percent_of_normal=None,
                narrative_text=_narrative(InterpretationStatus.NO_DATA, joint_id),
                target_value=target.target_value,
                injury_type=injury_type,
                used_default_profile=used_default,
            )

        value = float(reduced_value)
        percent = self.percent_of_normal(joint_id, value, target.target_value)

        if joint_spec(joint_id).direction is Direction.LOWER_IS_BETTER:
            if value <= target.target_value:
                status = InterpretationStatus.NORMAL
            else:
                status = self._disability_band(value)
        elif value >= target.target_value:
            status = InterpretationStatus.NORMAL
        elif percent >= self.config.moderate_percent:
            status = InterpretationStatus.MODERATE
        else:
            status = InterpretationStatus.LIMITED

        grade = None
        landmark = None
        if joint_id is JointId.KAPANDJI:
            level = int(round(value))
            grade = opposition_grade(level)
            landmark = KAPANDJI_TARGET_NAMES.get(level, "no target touched")
        elif joint_id in _TAM_JOINTS:
            grade = tam_grade(percent)

        return ClinicalInterpretation(
            joint_id=joint_id,
            status=status,
            percent_of_normal=percent,
            narrative_text=_narrative(status, joint_id, value=value,
                                      target=target.target_value, percent=percent, grade=grade,
                                      landmark=landmark),
            reduced_value=value,
            target_value=target.target_value,
            injury_type=injury_type,
            used_default_profile=used_default,
            grade=grade,
        )

    def classify_result(
        self,
        result,
        joint_ids: Iterable[JointId],
        injury_type: Optional[str] = None,
    ) -> List[ClinicalInterpretation]:
        """Interpret several joints of a ``SessionResult`` or ``AssessmentResult``."""
        return [self.classify(j, result.value(j), injury_type) for j in joint_ids]


def classify(joint_id: JointId, reduced_value: Optional[float], injury_type: Optional[str] = None) -> ClinicalInterpretation:
    """Classify with the built-in injury profiles."""
    return _DEFAULT_CLASSIFIER.classify(joint_id, reduced_value, injury_type)


_DEFAULT_CLASSIFIER = ClinicalClassifier()
