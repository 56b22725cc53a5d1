"""Assessment dispatch and per-repetition series extraction.

Each ``AssessmentType`` maps to an ``AssessmentDefinition`` that says which
extractors run and which joints carry the clinical result.  The table
replaces any matching on free-text assessment names.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config.engine_config import DEFAULT_CONFIG, EngineConfig
from ..errors import LandmarkContractError
from .finger_rom import AngleMode, FingerRomExtractor
from .forearm import ForearmRotationExtractor
from .frame import LandmarkFrame
from .joints import FINGERS, AngleSample, JointId, finger_joint_id
from .kapandji import KapandjiExtractor
from .wrist import WristDeviationExtractor, WristFlexionExtractor

logger = logging.getLogger(__name__)

Extractor = Callable[[LandmarkFrame, int, Optional[LandmarkFrame]], List[AngleSample]]


class AssessmentType(Enum):
    TAM = "tam"
    KAPANDJI = "kapandji"
    WRIST_FLEXION_EXTENSION = "wrist_flexion_extension"
    WRIST_DEVIATION = "wrist_deviation"
    FOREARM_PRONATION_SUPINATION = "forearm_pronation_supination"

    @classmethod
    def from_label(cls, label: str) -> "AssessmentType":
        """Exact lookup of a display label or enum value; raises ValueError otherwise."""
        key = label.strip()
        if key in ASSESSMENT_LABELS:
            return ASSESSMENT_LABELS[key]
        return cls(key.lower())


ASSESSMENT_LABELS: Dict[str, AssessmentType] = {
    "TAM (Total Active Motion)": AssessmentType.TAM,
    "Kapandji Score": AssessmentType.KAPANDJI,
    "Wrist Flexion/Extension": AssessmentType.WRIST_FLEXION_EXTENSION,
    "Wrist Radial/Ulnar Deviation": AssessmentType.WRIST_DEVIATION,
    "Forearm Pronation/Supination": AssessmentType.FOREARM_PRONATION_SUPINATION,
}


@dataclass(frozen=True)
class AssessmentDefinition:
    """What to run for one assessment type."""

    display_name: str
    build_extractors: Callable[[EngineConfig], List[Extractor]]
    primary_joints: Tuple[JointId, ...]
    needs_pose: bool = False


ASSESSMENTS: Mapping[AssessmentType, AssessmentDefinition] = MappingProxyType({
    AssessmentType.TAM: AssessmentDefinition(
        "TAM (Total Active Motion)",
        lambda cfg: [FingerRomExtractor(f, AngleMode.FLEXION, cfg.finger) for f in FINGERS],
        tuple(finger_joint_id(f, "tam") for f in FINGERS),
    ),
    AssessmentType.KAPANDJI: AssessmentDefinition(
        "Kapandji Score",
        lambda cfg: [KapandjiExtractor(cfg.kapandji)],
        (JointId.KAPANDJI,),
    ),
    AssessmentType.WRIST_FLEXION_EXTENSION: AssessmentDefinition(
        "Wrist Flexion/Extension",
        lambda cfg: [WristFlexionExtractor(cfg.wrist)],
        (JointId.WRIST_FLEXION, JointId.WRIST_EXTENSION),
        needs_pose=True,
    ),
    AssessmentType.WRIST_DEVIATION: AssessmentDefinition(
        "Wrist Radial/Ulnar Deviation",
        lambda cfg: [WristDeviationExtractor(cfg.wrist)],
        (JointId.WRIST_RADIAL_DEVIATION, JointId.WRIST_ULNAR_DEVIATION),
        needs_pose=True,
    ),
    AssessmentType.FOREARM_PRONATION_SUPINATION: AssessmentDefinition(
        "Forearm Pronation/Supination",
        lambda cfg: [ForearmRotationExtractor(cfg.wrist)],
        (JointId.FOREARM_PRONATION, JointId.FOREARM_SUPINATION),
        needs_pose=True,
    ),
})


def extractors_for(assessment: AssessmentType, config: EngineConfig = DEFAULT_CONFIG) -> List[Extractor]:
    return ASSESSMENTS[assessment].build_extractors(config)


@dataclass(frozen=True)
class SessionAngleSeries:
    """Per-joint samples of one repetition, plus each frame's detection confidence."""

    samples: Mapping[JointId, Tuple[AngleSample, ...]]
    frame_confidences: Tuple[float, ...]

    def __post_init__(self):
        n_frames = len(self.frame_confidences)
        for conf in self.frame_confidences:
            if not 0.0 <= conf <= 1.0:
                raise LandmarkContractError(f"frame confidence must be in [0, 1], got {conf}")
        for joint_id, samples in self.samples.items():
            for sample in samples:
                if not 0 <= sample.frame_index < n_frames:
                    raise LandmarkContractError(
                        f"{joint_id.value} sample at frame {sample.frame_index} "
                        f"but the series has {n_frames} frame confidences"
                    )

    @property
    def joint_ids(self) -> List[JointId]:
        return list(self.samples.keys())

    def get(self, joint_id: JointId) -> Tuple[AngleSample, ...]:
        return self.samples.get(joint_id, ())

    def __getitem__(self, joint_id: JointId) -> Tuple[AngleSample, ...]:
        return self.samples[joint_id]

    def __len__(self) -> int:
        return len(self.frame_confidences)

    def confidence(self, frame_index: int) -> float:
        return self.frame_confidences[frame_index]

    def valid_values(self, joint_id: JointId) -> List[float]:
        return [s.value_degrees for s in self.get(joint_id) if s.valid]


def extract_series(
    frames: Sequence[LandmarkFrame],
    extractors: Iterable[Extractor],
    reference: Optional[LandmarkFrame] = None,
) -> SessionAngleSeries:
    """
    Run every extractor over every frame of one repetition.

    Joints an extractor declares in ``joint_ids`` are present in the result
    even when no frame produced a sample for them, so downstream reduction
    can report them as "no data".
    """
    extractors = list(extractors)
    collected: Dict[JointId, List[AngleSample]] = OrderedDict()
    for extractor in extractors:
        for joint_id in getattr(extractor, "joint_ids", ()):
            collected.setdefault(joint_id, [])

    for frame_index, frame in enumerate(frames):
        for extractor in extractors:
            for sample in extractor(frame, frame_index, reference):
                collected.setdefault(sample.joint_id, []).append(sample)

    logger.debug("Extracted %d joints over %d frames", len(collected), len(frames))
    return SessionAngleSeries(
        samples=MappingProxyType({k: tuple(v) for k, v in collected.items()}),
        frame_confidences=tuple(f.detection_confidence for f in frames),
    )


def series_from_samples(
    samples: Iterable[AngleSample],
    frame_confidences: Sequence[float],
) -> SessionAngleSeries:
    """Build a series from precomputed samples (e.g. replayed from storage).

    Raises:
        LandmarkContractError: A sample refers to a frame with no confidence
            entry, or a confidence lies outside [0, 1].
    """
    collected: Dict[JointId, List[AngleSample]] = OrderedDict()
    for sample in samples:
        collected.setdefault(sample.joint_id, []).append(sample)
    return SessionAngleSeries(
        samples=MappingProxyType({k: tuple(v) for k, v in collected.items()}),
        frame_confidences=tuple(float(c) for c in frame_confidences),
    )
