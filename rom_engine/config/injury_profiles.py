"""Per-injury clinical targets.

Targets are read-only reference data.  The built-in tables follow the
recovery goals used by the hand-therapy programme; alternative tables can be
loaded from YAML with ``load_injury_profiles``.

YAML layout::

    profiles:
      Carpal Tunnel:
        assessments: [tam, kapandji, wrist_flexion_extension]
        targets:
          index_tam: 260                     # target only
          wrist_flexion: {target: 80, normal_min: 60, normal_max: 80}
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from ..analysis.extractors import AssessmentType
from ..analysis.joints import FINGERS, JointId, finger_joint_id
from ..errors import ProfileError


@dataclass(frozen=True)
class JointTarget:
    normal_min: float
    normal_max: float
    target_value: float

    def __post_init__(self):
        if not self.target_value > 0:
            raise ProfileError(f"target_value must be positive, got {self.target_value}")
        if self.normal_min > self.normal_max:
            raise ProfileError(
                f"normal_min ({self.normal_min}) is above normal_max ({self.normal_max})"
            )


@dataclass(frozen=True)
class InjuryProfile:
    name: str
    targets: Mapping[JointId, JointTarget]
    assessments: Tuple[AssessmentType, ...] = field(default_factory=tuple)

    def target(self, joint_id: JointId) -> Optional[JointTarget]:
        return self.targets.get(joint_id)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "InjuryProfile":
        """Build from the YAML mapping of one injury; unspecified bounds come from the default profile."""
        if not isinstance(data, dict):
            raise ProfileError(f"Profile '{name}' must be a mapping")

        targets: Dict[JointId, JointTarget] = {}
        for key, spec in (data.get("targets") or {}).items():
            try:
                joint_id = JointId(key)
            except ValueError:
                raise ProfileError(f"Profile '{name}': unknown joint '{key}'") from None
            base = DEFAULT_PROFILE.target(joint_id)
            if isinstance(spec, (int, float)):
                spec = {"target": spec}
            if not isinstance(spec, dict) or "target" not in spec:
                raise ProfileError(f"Profile '{name}': joint '{key}' needs a target")
            target = float(spec["target"])
            targets[joint_id] = JointTarget(
                normal_min=float(spec.get("normal_min", base.normal_min if base else 0.0)),
                normal_max=float(spec.get("normal_max", base.normal_max if base else target)),
                target_value=target,
            )

        try:
            assessments = tuple(AssessmentType(a) for a in data.get("assessments") or ())
        except ValueError as exc:
            raise ProfileError(f"Profile '{name}': {exc}") from None
        return cls(name, MappingProxyType(targets), assessments)


# ── Reference values ────────────────────────────────────────────────

_NORMAL_TAM = {
    "index": (220.0, 260.0),
    "middle": (230.0, 270.0),
    "ring": (220.0, 260.0),
    "pinky": (200.0, 240.0),
}

_DEFAULT_TARGETS: Dict[JointId, JointTarget] = {}
for _finger in FINGERS:
    _low, _high = _NORMAL_TAM[_finger]
    _DEFAULT_TARGETS[finger_joint_id(_finger, "tam")] = JointTarget(_low, _high, _high)
    # Single-joint arcs (AAOS)
    _DEFAULT_TARGETS[finger_joint_id(_finger, "mcp")] = JointTarget(0.0, 90.0, 90.0)
    _DEFAULT_TARGETS[finger_joint_id(_finger, "pip")] = JointTarget(0.0, 100.0, 100.0)
    _DEFAULT_TARGETS[finger_joint_id(_finger, "dip")] = JointTarget(0.0, 90.0, 90.0)
del _finger, _low, _high

_DEFAULT_TARGETS.update({
    JointId.WRIST_FLEXION: JointTarget(60.0, 80.0, 80.0),
    JointId.WRIST_EXTENSION: JointTarget(50.0, 70.0, 70.0),
    JointId.WRIST_FLEX_EXT: JointTarget(110.0, 150.0, 150.0),
    JointId.WRIST_RADIAL_DEVIATION: JointTarget(15.0, 20.0, 20.0),
    JointId.WRIST_ULNAR_DEVIATION: JointTarget(25.0, 30.0, 30.0),
    JointId.WRIST_DEVIATION: JointTarget(40.0, 50.0, 50.0),
    JointId.FOREARM_PRONATION: JointTarget(70.0, 80.0, 80.0),
    JointId.FOREARM_SUPINATION: JointTarget(70.0, 80.0, 80.0),
    JointId.FOREARM_ROTATION: JointTarget(140.0, 160.0, 160.0),
    JointId.KAPANDJI: JointTarget(8.0, 10.0, 10.0),
    # Lower is better: scores at or under the target count as normal
    JointId.QUICKDASH: JointTarget(0.0, 15.0, 15.0),
})

DEFAULT_PROFILE = InjuryProfile("Default", MappingProxyType(_DEFAULT_TARGETS),
                                tuple(AssessmentType))


def _profile(name: str, assessments: Tuple[AssessmentType, ...], **overrides: float) -> InjuryProfile:
    """Default bounds with injury-specific target values.

    ``tam`` applies to every finger; other keys are ``JointId`` values.
    """
    targets = dict(_DEFAULT_TARGETS)
    tam = overrides.pop("tam", None)
    if tam is not None:
        for finger in FINGERS:
            overrides.setdefault(f"{finger}_tam", tam)
    for key, value in overrides.items():
        joint_id = JointId(key)
        base = targets[joint_id]
        targets[joint_id] = replace(base, target_value=float(value),
                                    normal_max=max(base.normal_max, float(value)))
    return InjuryProfile(name, MappingProxyType(targets), assessments)


_ALL_ASSESSMENTS = (
    AssessmentType.TAM,
    AssessmentType.KAPANDJI,
    AssessmentType.WRIST_FLEXION_EXTENSION,
    AssessmentType.FOREARM_PRONATION_SUPINATION,
    AssessmentType.WRIST_DEVIATION,
)

CARPAL_TUNNEL = _profile(
    "Carpal Tunnel", _ALL_ASSESSMENTS,
    tam=260, kapandji=10, wrist_flexion=80, wrist_extension=70,
    forearm_pronation=80, forearm_supination=80, wrist_deviation=30,
    wrist_radial_deviation=15, wrist_ulnar_deviation=35, quickdash=15,
)

TRIGGER_FINGER = _profile(
    "Trigger Finger", (AssessmentType.TAM,),
    tam=260, quickdash=10,
)

DISTAL_RADIUS_FRACTURE = _profile(
    "Distal Radius Fracture", _ALL_ASSESSMENTS,
    tam=240, kapandji=10, wrist_flexion=70, wrist_extension=60,
    forearm_pronation=70, forearm_supination=70, wrist_deviation=25,
    wrist_radial_deviation=15, wrist_ulnar_deviation=30, quickdash=20,
)

CMC_ARTHROPLASTY = _profile(
    "CMC Arthroplasty", _ALL_ASSESSMENTS,
    tam=220, kapandji=8, wrist_flexion=75, wrist_extension=65,
    forearm_pronation=75, forearm_supination=75, wrist_deviation=28, quickdash=25,
)

METACARPAL_ORIF = _profile(
    "Metacarpal ORIF", (AssessmentType.TAM,),
    tam=270, quickdash=15,
)

PHALANX_FRACTURE = _profile(
    "Phalanx Fracture", (AssessmentType.TAM,),
    tam=260, quickdash=18,
)

INJURY_PROFILES: Mapping[str, InjuryProfile] = MappingProxyType({
    p.name: p for p in (
        CARPAL_TUNNEL,
        TRIGGER_FINGER,
        DISTAL_RADIUS_FRACTURE,
        CMC_ARTHROPLASTY,
        METACARPAL_ORIF,
        PHALANX_FRACTURE,
    )
})


def assessments_for_injury(injury_type: str, profiles: Mapping[str, InjuryProfile] = INJURY_PROFILES) -> Tuple[AssessmentType, ...]:
    """Assessments prescribed for an injury; TAM alone when the injury is unknown."""
    profile = profiles.get(injury_type)
    if profile is None or not profile.assessments:
        return (AssessmentType.TAM,)
    return profile.assessments


def profiles_from_dict(data: Dict[str, Any]) -> Mapping[str, InjuryProfile]:
    if not isinstance(data, dict) or not isinstance(data.get("profiles"), dict):
        raise ProfileError("Profile document needs a top-level 'profiles' mapping")
    return MappingProxyType({
        name: InjuryProfile.from_dict(name, body) for name, body in data["profiles"].items()
    })


def load_injury_profiles(yaml_path: str) -> Mapping[str, InjuryProfile]:
    """Load injury profiles from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ProfileError: If the document is malformed.
    """
    with open(yaml_path) as f:
        data = yaml.safe_load(f)
    return profiles_from_dict(data)
