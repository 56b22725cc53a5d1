"""Session quality score (0-100) from frame completeness and tracker confidence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..analysis.extractors import SessionAngleSeries
from ..analysis.frame import LandmarkFrame
from ..config.engine_config import DEFAULT_CONFIG, QualityConfig


@dataclass(frozen=True)
class QualityReport:
    """Breakdown of a quality score.  ``score is None`` means insufficient data."""

    score: Optional[float]
    total_frames: int
    usable_frames: int
    completeness: float
    mean_confidence: Optional[float]
    temporal_quality: Optional[float] = None

    @property
    def insufficient_data(self) -> bool:
        return self.score is None

    def to_dict(self) -> Dict:
        return {
            "score": self.score,
            "total_frames": self.total_frames,
            "usable_frames": self.usable_frames,
            "completeness": self.completeness,
            "mean_confidence": self.mean_confidence,
            "temporal_quality": self.temporal_quality,
        }


def series_smoothness(values: Sequence[float], max_change: float = 30.0) -> Optional[float]:
    """
    Temporal quality of one angle series in [0, 1].

    Mean of the share of frame-to-frame changes within ``max_change`` and of
    ``1 - mean_change / max_change``.  None for fewer than two values.
    """
    if len(values) < 2:
        return None
    changes = np.abs(np.diff(np.asarray(values, dtype=np.float64)))
    transition_quality = float(np.mean(changes <= max_change))
    smoothness = max(0.0, 1.0 - float(np.mean(changes)) / max_change)
    return (transition_quality + smoothness) / 2.0


class QualityScorer:
    """Score how trustworthy a recorded repetition is.

    Args:
        config: Weights and the usable-frame count below which the score
            is scaled down.
        require_pose: Count a frame as usable only if it also has pose
            landmarks (elbow-referenced assessments).
    """

    def __init__(self, config: QualityConfig = DEFAULT_CONFIG.quality, require_pose: bool = False):
        self.config = config
        self.require_pose = require_pose

    def is_usable(self, frame: LandmarkFrame) -> bool:
        if not frame.has_hand:
            return False
        return frame.has_pose or not self.require_pose

    def assess(self, frames: Sequence[LandmarkFrame], series: Optional[SessionAngleSeries] = None) -> QualityReport:
        total = len(frames)
        usable: List[LandmarkFrame] = [f for f in frames if self.is_usable(f)]
        temporal = self.temporal_quality(series) if series is not None else None
        if total == 0 or not usable:
            return QualityReport(None, total, len(usable), 0.0, None, temporal)

        completeness = len(usable) / total
        mean_conf = float(np.mean([f.detection_confidence for f in usable]))
        base = self.config.completeness_weight * completeness + self.config.confidence_weight * mean_conf
        # Few usable frames: scale down instead of trusting a tiny sample
        support = min(1.0, len(usable) / max(1, self.config.min_usable_frames))
        score = float(np.clip(100.0 * base * support, 0.0, 100.0))
        return QualityReport(score, total, len(usable), completeness, mean_conf, temporal)

    def score(self, frames: Sequence[LandmarkFrame]) -> Optional[float]:
        """0-100 score, or None when there is no usable frame to judge."""
        return self.assess(frames).score

    def temporal_quality(self, series: SessionAngleSeries) -> Optional[float]:
        """Mean smoothness over the joints with at least two valid samples."""
        per_joint = [
            series_smoothness(series.valid_values(j), self.config.max_change_per_frame)
            for j in series.joint_ids
        ]
        per_joint = [q for q in per_joint if q is not None]
        if not per_joint:
            return None
        return float(np.mean(per_joint))
