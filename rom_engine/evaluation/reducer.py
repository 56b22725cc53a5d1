"""Session reduction: per-repetition extrema and best-attempt assessment values.

A repetition's ``SessionAngleSeries`` is filtered (invalid samples and
low-confidence frames dropped, optionally implausible jumps too) and reduced
to max / min / range per joint.  Kapandji is reduced to an opposition level.
Several repetitions of one assessment are reduced independently and the
best demonstrated value per joint is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..analysis.extractors import SessionAngleSeries
from ..analysis.joints import AngleSample, Direction, JointId, Reduction, joint_spec
from ..analysis.kapandji import OppositionPolicy, opposition_level
from ..config.engine_config import DEFAULT_CONFIG, ReducerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JointSummary:
    """Reduced values of one joint over one repetition.

    ``sample_count == 0`` means "no data": the extrema are None, never 0.
    """

    joint_id: JointId
    max_value: Optional[float]
    min_value: Optional[float]
    range_of_motion: Optional[float]
    sample_count: int = 0
    level: Optional[int] = None

    @classmethod
    def no_data(cls, joint_id: JointId) -> "JointSummary":
        return cls(joint_id, None, None, None, 0)

    @property
    def has_data(self) -> bool:
        return self.sample_count > 0

    @property
    def reported_value(self) -> Optional[float]:
        """The figure that represents this joint clinically."""
        if not self.has_data:
            return None
        reduction = joint_spec(self.joint_id).reduction
        if reduction is Reduction.LEVEL:
            return float(self.level)
        if reduction is Reduction.RANGE:
            return self.range_of_motion
        return self.max_value

    def to_dict(self) -> Dict:
        return {
            "joint": self.joint_id.value,
            "max": self.max_value,
            "min": self.min_value,
            "range_of_motion": self.range_of_motion,
            "level": self.level,
            "samples": self.sample_count,
        }


@dataclass(frozen=True)
class SessionResult:
    """Reduced record of one repetition."""

    joints: Mapping[JointId, JointSummary]
    opposition_level: Optional[int] = None
    quality_score: Optional[float] = None
    average_confidence: Optional[float] = None
    repetition_index: int = 0

    def summary(self, joint_id: JointId) -> JointSummary:
        return self.joints.get(joint_id) or JointSummary.no_data(joint_id)

    def value(self, joint_id: JointId) -> Optional[float]:
        return self.summary(joint_id).reported_value

    def to_dict(self) -> Dict:
        return {
            "repetition": self.repetition_index,
            "joints": {j.value: s.to_dict() for j, s in self.joints.items()},
            "opposition_level": self.opposition_level,
            "quality_score": self.quality_score,
            "average_confidence": self.average_confidence,
        }


@dataclass(frozen=True)
class AssessmentResult:
    """Best-attempt values across the repetitions of one assessment."""

    joints: Mapping[JointId, JointSummary]
    best_repetition: Mapping[JointId, int]
    reproducible: Mapping[JointId, bool]
    repetitions: Tuple[SessionResult, ...] = field(default_factory=tuple)
    opposition_level: Optional[int] = None

    def summary(self, joint_id: JointId) -> JointSummary:
        return self.joints.get(joint_id) or JointSummary.no_data(joint_id)

    def value(self, joint_id: JointId) -> Optional[float]:
        return self.summary(joint_id).reported_value

    @property
    def is_reproducible(self) -> bool:
        return all(self.reproducible.values())


def is_reproducible(values: Sequence[float], tolerance: float = 5.0) -> bool:
    """True when every value lies within ``tolerance`` of the mean (AMA guideline)."""
    if len(values) < 2:
        return True
    mean = float(np.mean(values))
    return all(abs(v - mean) <= tolerance for v in values)


class SessionReducer:
    """Reduce angle series to session-level summaries."""

    def __init__(
        self,
        config: ReducerConfig = DEFAULT_CONFIG.reducer,
        opposition_policy: OppositionPolicy = OppositionPolicy.MONOTONIC,
    ):
        self.config = config
        self.opposition_policy = opposition_policy

    # ── Filtering ───────────────────────────────────────────────────

    def usable_samples(self, series: SessionAngleSeries, joint_id: JointId) -> List[AngleSample]:
        """Valid samples from frames at or above ``min_confidence``, jump-filtered if enabled."""
        kept = [
            s for s in series.get(joint_id)
            if s.valid and series.confidence(s.frame_index) >= self.config.min_confidence
        ]
        max_change = self.config.max_change_per_frame
        if max_change is None or joint_spec(joint_id).reduction is Reduction.LEVEL:
            return kept
        return self._reject_jumps(kept, max_change, joint_id)

    @staticmethod
    def _reject_jumps(samples: List[AngleSample], max_change: float, joint_id: JointId) -> List[AngleSample]:
        accepted: List[AngleSample] = []
        for sample in samples:
            if accepted:
                last = accepted[-1]
                gap = max(1, sample.frame_index - last.frame_index)
                if abs(sample.value_degrees - last.value_degrees) > max_change * gap:
                    logger.debug("Rejected %s jump at frame %d: %.1f -> %.1f", joint_id.value,
                                 sample.frame_index, last.value_degrees, sample.value_degrees)
                    continue
            accepted.append(sample)
        return accepted

    # ── Reduction ───────────────────────────────────────────────────

    def reduce_joint(self, series: SessionAngleSeries, joint_id: JointId) -> JointSummary:
        values = [s.value_degrees for s in self.usable_samples(series, joint_id)]
        if not values:
            return JointSummary.no_data(joint_id)

        max_v, min_v = float(max(values)), float(min(values))
        if joint_spec(joint_id).reduction is Reduction.LEVEL:
            # Ordinal scale: the range is the highest value reached
            level = opposition_level(values, self.opposition_policy)
            return JointSummary(joint_id, max_v, min_v, max_v, len(values), level)
        return JointSummary(joint_id, max_v, min_v, max_v - min_v, len(values))

    def reduce(
        self,
        series: SessionAngleSeries,
        quality_score: Optional[float] = None,
        repetition_index: int = 0,
    ) -> SessionResult:
        """Reduce one repetition."""
        joints = {j: self.reduce_joint(series, j) for j in series.joint_ids}
        for joint_id, summary in joints.items():
            if not summary.has_data:
                logger.info("Repetition %d: no usable samples for %s", repetition_index, joint_id.value)

        kapandji = joints.get(JointId.KAPANDJI)
        opposition = kapandji.level if kapandji is not None and kapandji.has_data else None

        confidences = series.frame_confidences
        average_confidence = float(np.mean(confidences)) if confidences else None

        return SessionResult(
            joints=MappingProxyType(joints),
            opposition_level=opposition,
            quality_score=quality_score,
            average_confidence=average_confidence,
            repetition_index=repetition_index,
        )

    def reduce_assessment(self, results: Sequence[SessionResult]) -> AssessmentResult:
        """
        Best attempt per joint across independently reduced repetitions.

        "Best" is the largest reported value, or the smallest for
        lower-is-better joints; ties keep the earliest repetition.
        """
        joint_ids: List[JointId] = []
        for result in results:
            for joint_id in result.joints:
                if joint_id not in joint_ids:
                    joint_ids.append(joint_id)

        best: Dict[JointId, JointSummary] = {}
        best_rep: Dict[JointId, int] = {}
        reproducible: Dict[JointId, bool] = {}
        for joint_id in joint_ids:
            lower_better = joint_spec(joint_id).direction is Direction.LOWER_IS_BETTER
            candidates = [
                (r.repetition_index, r.summary(joint_id))
                for r in results if r.summary(joint_id).has_data
            ]
            if not candidates:
                best[joint_id] = JointSummary.no_data(joint_id)
                continue

            rep_index, summary = candidates[0]
            for idx, cand in candidates[1:]:
                better = (cand.reported_value < summary.reported_value if lower_better
                          else cand.reported_value > summary.reported_value)
                if better:
                    rep_index, summary = idx, cand
            best[joint_id] = summary
            best_rep[joint_id] = rep_index
            reproducible[joint_id] = is_reproducible(
                [c.reported_value for _, c in candidates], self.config.reproducibility_tolerance
            )

        kapandji = best.get(JointId.KAPANDJI)
        return AssessmentResult(
            joints=MappingProxyType(best),
            best_repetition=MappingProxyType(best_rep),
            reproducible=MappingProxyType(reproducible),
            repetitions=tuple(results),
            opposition_level=kapandji.level if kapandji is not None and kapandji.has_data else None,
        )
