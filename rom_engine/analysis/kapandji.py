"""Kapandji thumb-opposition scoring (0-10)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional

from ..config.engine_config import DEFAULT_CONFIG, KapandjiConfig
from ..config.landmarks import KAPANDJI_TARGETS
from .frame import LandmarkFrame
from .geometry import EPSILON, centroid, distance
from .joints import AngleSample, JointId

logger = logging.getLogger(__name__)

MAX_LEVEL = 10


class OppositionPolicy(Enum):
    """How per-frame target hits become one repetition level.

    MONOTONIC: highest level L such that every level 1..L was reached at
    some point in the repetition.  A gap caps the score.
    ISOLATED: highest level reached at all.
    """

    MONOTONIC = "monotonic"
    ISOLATED = "isolated"


def kapandji_hits(frame: LandmarkFrame, config: KapandjiConfig = DEFAULT_CONFIG.kapandji) -> Optional[List[int]]:
    """
    Target levels touched by the thumb tip on one frame.

    Distances are rescaled by the hand span (wrist -> middle MCP) so the
    threshold holds at any distance from the camera.

    Returns:
        Sorted list of levels (possibly empty), or None when the thumb tip
        or the hand span is unavailable.
    """
    thumb = frame.thumb_tip()
    span = distance(frame.wrist(), frame.middle_mcp())
    if thumb is None or span is None or span < EPSILON:
        return None
    scale = config.reference_hand_span / span

    hits = []
    for level, indices in KAPANDJI_TARGETS.items():
        target = centroid(frame.hand_point(i) for i in indices)
        d = distance(thumb, target)
        if d is None:
            continue
        threshold = config.contact_threshold
        if level == MAX_LEVEL:
            threshold *= config.palmar_crease_multiplier
        if d * scale < threshold:
            hits.append(level)
    return hits


def opposition_level(levels: Iterable[float], policy: OppositionPolicy = OppositionPolicy.MONOTONIC) -> int:
    """Reduce the levels hit over a repetition to one score."""
    achieved = {int(round(v)) for v in levels if 1 <= v <= MAX_LEVEL}
    if not achieved:
        return 0
    if policy is OppositionPolicy.ISOLATED:
        return max(achieved)
    level = 0
    while level + 1 in achieved:
        level += 1
    return level


def opposition_grade(level: int) -> str:
    if level >= 9:
        return "Excellent"
    if level >= 7:
        return "Good"
    if level >= 5:
        return "Fair"
    if level >= 3:
        return "Poor"
    return "Severe Limitation"


class KapandjiExtractor:
    """One KAPANDJI sample per target touched; a single 0 when none is."""

    joint_ids = [JointId.KAPANDJI]

    def __init__(self, config: KapandjiConfig = DEFAULT_CONFIG.kapandji):
        self.config = config

    def __call__(self, frame: LandmarkFrame, frame_index: int,
                 reference: Optional[LandmarkFrame] = None) -> List[AngleSample]:
        hits = kapandji_hits(frame, self.config)
        if hits is None:
            logger.debug("Frame %d: thumb opposition not measurable", frame_index)
            return [AngleSample.invalid(frame_index, JointId.KAPANDJI)]
        if not hits:
            return [AngleSample(frame_index, JointId.KAPANDJI, 0.0)]
        return [AngleSample(frame_index, JointId.KAPANDJI, float(level)) for level in hits]
