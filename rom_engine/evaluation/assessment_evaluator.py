"""Assessment evaluator: the orchestration layer.

``AssessmentEvaluator`` runs one assessment end to end:
    1. Resolves the extractors for the assessment type.
    2. Fills in handedness where the tracker left it unknown.
    3. Extracts a ``SessionAngleSeries`` per closed repetition.
    4. Scores the quality of each repetition.
    5. Reduces each repetition, then keeps the best attempt per joint.
    6. Interprets the assessment's primary joints against the injury profile.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from ..analysis.extractors import ASSESSMENTS, AssessmentType, extract_series
from ..analysis.frame import Handedness, LandmarkFrame, frames_with_inferred_handedness
from ..analysis.joints import JointId
from ..analysis.kapandji import OppositionPolicy
from ..analysis.repetition import Repetition, RepetitionRecorder
from ..config.engine_config import DEFAULT_CONFIG, EngineConfig
from ..config.injury_profiles import INJURY_PROFILES, InjuryProfile
from .interpretation import (
    ClinicalClassifier,
    ClinicalInterpretation,
    HandTamInterpretation,
    hand_tam_interpretation,
)
from .quality import QualityReport, QualityScorer
from .questionnaire import Responses, quickdash_score
from .reducer import AssessmentResult, SessionReducer, SessionResult

logger = logging.getLogger(__name__)

RepetitionInput = Union[Repetition, RepetitionRecorder, Sequence[LandmarkFrame]]


# ── Result container ─────────────────────────────────────────────────

@dataclass
class AssessmentReport:
    """Complete evaluation output for one assessment."""
    assessment: AssessmentType
    injury_type: Optional[str]
    result: AssessmentResult
    interpretations: List[ClinicalInterpretation]
    quality_reports: List[QualityReport]
    quality_score: Optional[float]
    handedness: Handedness = Handedness.UNKNOWN
    notes: List[str] = field(default_factory=list)
    hand_tam: Optional[HandTamInterpretation] = None

    def interpretation(self, joint_id: JointId) -> Optional[ClinicalInterpretation]:
        return next((i for i in self.interpretations if i.joint_id is joint_id), None)

    def to_dict(self) -> Dict:
        return {
            "assessment": self.assessment.value,
            "injury_type": self.injury_type,
            "handedness": self.handedness.value,
            "quality_score": self.quality_score,
            "opposition_level": self.result.opposition_level,
            "reproducible": self.result.is_reproducible,
            "joints": {j.value: s.to_dict() for j, s in self.result.joints.items()},
            "interpretations": [i.to_dict() for i in self.interpretations],
            "repetitions": [r.to_dict() for r in self.result.repetitions],
            "notes": list(self.notes),
            "hand_tam": self.hand_tam.to_dict() if self.hand_tam else None,
        }


def _frames_of(repetition: RepetitionInput) -> Sequence[LandmarkFrame]:
    if isinstance(repetition, RepetitionRecorder):
        # Raises while the repetition is still recording
        return repetition.repetition.frames
    if isinstance(repetition, Repetition):
        return repetition.frames
    return tuple(repetition)


class AssessmentEvaluator:
    """Evaluate the repetitions of one assessment for one patient."""

    def __init__(
        self,
        assessment: AssessmentType,
        injury_type: Optional[str] = None,
        cfg: EngineConfig = DEFAULT_CONFIG,
        profiles: Mapping[str, InjuryProfile] = INJURY_PROFILES,
        opposition_policy: OppositionPolicy = OppositionPolicy.MONOTONIC,
        infer_handedness: bool = True,
    ):
        self.assessment = assessment
        self.definition = ASSESSMENTS[assessment]
        self.injury_type = injury_type
        self.cfg = cfg
        self.infer_handedness = infer_handedness

        self.reducer = SessionReducer(cfg.reducer, opposition_policy)
        self.classifier = ClinicalClassifier(profiles, config=cfg.interpretation)
        self.scorer = QualityScorer(cfg.quality, require_pose=self.definition.needs_pose)

    # ── Public API ────────────────────────────────────────────────────

    def evaluate_repetition(
        self,
        frames: Sequence[LandmarkFrame],
        repetition_index: int = 0,
        reference: Optional[LandmarkFrame] = None,
    ) -> SessionResult:
        """Extract, score and reduce one closed repetition."""
        result, _ = self._evaluate_repetition(frames, repetition_index, reference)
        return result

    def evaluate(
        self,
        repetitions: Sequence[RepetitionInput],
        reference: Optional[LandmarkFrame] = None,
    ) -> AssessmentReport:
        """Run the full pipeline over every repetition of the assessment.

        Parameters
        ----------
        repetitions : closed ``Repetition`` objects, closed recorders, or
            plain frame sequences.
        reference : optional neutral-posture frame for baseline correction.
        """
        notes: List[str] = []
        results: List[SessionResult] = []
        reports: List[QualityReport] = []
        hands: Counter = Counter()

        for index, repetition in enumerate(repetitions):
            frames = self._prepare(_frames_of(repetition))
            hands.update(f.handedness for f in frames)
            result, report = self._evaluate_repetition(frames, index, reference, prepared=True)
            results.append(result)
            reports.append(report)
            if report.insufficient_data:
                notes.append(f"Repetition {index}: insufficient data for a quality score")

        assessment_result = self.reducer.reduce_assessment(results)
        if not assessment_result.is_reproducible:
            notes.append("Repetitions differ by more than the reproducibility tolerance")

        interpretations = self.classifier.classify_result(
            assessment_result, self.definition.primary_joints, self.injury_type
        )
        hand_tam = None
        if self.assessment is AssessmentType.TAM:
            hand_tam = hand_tam_interpretation(interpretations)

        scores = [r.score for r in reports if r.score is not None]
        quality_score = float(np.mean(scores)) if scores else None

        hands.pop(Handedness.UNKNOWN, None)
        handedness = hands.most_common(1)[0][0] if hands else Handedness.UNKNOWN

        logger.info(
            "%s: %d repetitions, quality %s, %s",
            self.definition.display_name, len(results),
            "n/a" if quality_score is None else f"{quality_score:.0f}",
            ", ".join(f"{i.joint_id.value}={i.status.value}" for i in interpretations),
        )
        return AssessmentReport(
            assessment=self.assessment,
            injury_type=self.injury_type,
            result=assessment_result,
            interpretations=interpretations,
            quality_reports=reports,
            quality_score=quality_score,
            handedness=handedness,
            notes=notes,
            hand_tam=hand_tam,
        )

    def interpret_questionnaire(self, responses: Responses) -> ClinicalInterpretation:
        """QuickDASH score for the same injury context (None score -> NO_DATA)."""
        return self.classifier.classify(JointId.QUICKDASH, quickdash_score(responses), self.injury_type)

    # ── Internal ─────────────────────────────────────────────────────

    def _prepare(self, frames: Sequence[LandmarkFrame]) -> Sequence[LandmarkFrame]:
        if self.infer_handedness:
            return frames_with_inferred_handedness(frames)
        return tuple(frames)

    def _evaluate_repetition(self, frames, repetition_index, reference, prepared=False):
        if not prepared:
            frames = self._prepare(frames)
        if reference is not None:
            reference = self._prepare([reference])[0]
        extractors = self.definition.build_extractors(self.cfg)
        series = extract_series(frames, extractors, reference)
        report = self.scorer.assess(frames, series)
        result = self.reducer.reduce(series, report.score, repetition_index)
        return result, report
