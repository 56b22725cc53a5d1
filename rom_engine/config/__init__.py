"""Landmark indices and engine thresholds.

``injury_profiles`` is imported explicitly where needed since it depends on
the analysis package.
"""

from .engine_config import (
    DEFAULT_CONFIG,
    EngineConfig,
    FingerConfig,
    InterpretationConfig,
    KapandjiConfig,
    QualityConfig,
    ReducerConfig,
    WristConfig,
)
from .landmarks import HandLandmark, PoseLandmark
