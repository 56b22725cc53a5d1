"""Session reduction, clinical interpretation and quality scoring."""

from .assessment_evaluator import AssessmentEvaluator, AssessmentReport
from .interpretation import (
    ClinicalClassifier,
    ClinicalInterpretation,
    HandTamInterpretation,
    InterpretationStatus,
    classify,
    hand_tam_interpretation,
)
from .quality import QualityReport, QualityScorer
from .questionnaire import quickdash_score
from .reducer import AssessmentResult, JointSummary, SessionReducer, SessionResult
