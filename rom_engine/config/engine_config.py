"""Engine configuration.

All thresholds used by the extractors, reducer and quality scorer are
centralised here so that tuning never requires touching analysis code.

Sources:
    - AMA Guides (wrist reproducibility, +/-5 degrees)
    - Kapandji (1986) opposition scale
    - MediaPipe Hands / Pose landmark conventions
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

import yaml


# =====================================================================
# Finger ROM
# =====================================================================

@dataclass(frozen=True)
class FingerConfig:
    """Anatomical limits for flexion-mode finger angles (degrees)."""

    mcp_max_flexion: float = 95.0
    pip_max_flexion: float = 115.0
    dip_max_flexion: float = 90.0


# =====================================================================
# Wrist & forearm
# =====================================================================

@dataclass(frozen=True)
class WristConfig:
    """Thresholds for wrist and forearm extractors."""

    # Frames whose signed angle stays inside +/- this value are neutral
    neutral_zone: float = 3.0
    flexion_extension_clamp: float = 90.0
    # Physiological bounds of the signed deviation angle (ulnar negative)
    deviation_min: float = -35.0
    deviation_max: float = 25.0
    rotation_clamp: float = 180.0


# =====================================================================
# Kapandji opposition
# =====================================================================

@dataclass(frozen=True)
class KapandjiConfig:
    """Thumb-opposition contact detection."""

    contact_threshold: float = 0.055     # normalised units at reference span
    palmar_crease_multiplier: float = 1.5
    reference_hand_span: float = 0.15    # wrist -> middle MCP


# =====================================================================
# Session reduction
# =====================================================================

@dataclass(frozen=True)
class ReducerConfig:
    """Sample filtering for the session reducer."""

    min_confidence: float = 0.5
    # Largest accepted change between consecutive samples of one joint;
    # None disables the temporal filter.
    max_change_per_frame: Optional[float] = None
    reproducibility_tolerance: float = 5.0


# =====================================================================
# Quality
# =====================================================================

@dataclass(frozen=True)
class QualityConfig:
    """Weights for the session quality score."""

    completeness_weight: float = 0.5
    confidence_weight: float = 0.5
    min_usable_frames: int = 10
    # Largest frame-to-frame change counted as smooth
    max_change_per_frame: float = 30.0


# =====================================================================
# Clinical interpretation
# =====================================================================

@dataclass(frozen=True)
class InterpretationConfig:
    """Banding of reduced values against injury targets."""

    moderate_percent: float = 60.0       # below this share of target = limited
    percent_floor: float = 0.0
    percent_ceiling: float = 200.0
    # QuickDASH disability bands (upper bounds, 0-100 scale)
    minimal_disability_max: float = 25.0
    mild_disability_max: float = 50.0
    moderate_disability_max: float = 75.0


# =====================================================================
# Top-level config
# =====================================================================

@dataclass(frozen=True)
class EngineConfig:
    """Aggregated configuration for the whole engine."""

    finger: FingerConfig = field(default_factory=FingerConfig)
    wrist: WristConfig = field(default_factory=WristConfig)
    kapandji: KapandjiConfig = field(default_factory=KapandjiConfig)
    reducer: ReducerConfig = field(default_factory=ReducerConfig)
    interpretation: InterpretationConfig = field(default_factory=InterpretationConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        """Create from a nested mapping, e.g. ``{"reducer": {"min_confidence": 0.6}}``.

        Missing sections and keys keep their defaults; unknown keys raise
        ``TypeError`` from the dataclass constructor.
        """
        data = data or {}
        sections = {}
        for f in fields(cls):
            section = data.get(f.name)
            if section is not None:
                sections[f.name] = f.default_factory(**section)
        return cls(**sections)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "EngineConfig":
        with open(yaml_path) as f:
            return cls.from_dict(yaml.safe_load(f))


DEFAULT_CONFIG = EngineConfig()
