"""Landmark geometry and per-frame joint angle extraction."""

from .extractors import (
    ASSESSMENTS,
    AssessmentDefinition,
    AssessmentType,
    SessionAngleSeries,
    extract_series,
    extractors_for,
)
from .finger_rom import AngleMode, FingerRomExtractor
from .forearm import ForearmRotationExtractor
from .frame import Handedness, LandmarkFrame, infer_handedness, repetition_handedness
from .geometry import Point3, angle_between, mirror_x, signed_angle_with_cross
from .joints import AngleSample, JointId
from .kapandji import KapandjiExtractor, OppositionPolicy
from .repetition import Repetition, RepetitionRecorder
from .wrist import WristDeviationExtractor, WristFlexionExtractor
