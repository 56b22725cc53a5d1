"""Joint-angle measurement and clinical interpretation for hand / wrist rehabilitation."""

from .analysis import (
    AngleSample,
    AssessmentType,
    Handedness,
    JointId,
    LandmarkFrame,
    Point3,
    Repetition,
    RepetitionRecorder,
    extract_series,
)
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import LandmarkContractError, ProfileError
from .evaluation import (
    AssessmentEvaluator,
    AssessmentReport,
    ClinicalClassifier,
    ClinicalInterpretation,
    HandTamInterpretation,
    InterpretationStatus,
    QualityScorer,
    SessionReducer,
    SessionResult,
)

__version__ = "0.1.0"
