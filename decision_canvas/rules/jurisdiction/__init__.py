"""
Jurisdiction services for cross-border compliance.

Provides per-jurisdiction evaluation, conflict detection and obligation
merging.
"""

from .models import (
    ApplicableJurisdiction,
    JurisdictionEvaluation,
    CrossBorderConflict,
    CrossBorderEvaluation,
)
from .conflicts import (
    detect_conflicts,
    merge_obligations,
    RESOLUTION_STRATEGIES,
    EXCLUSIVE_OBLIGATION_PAIRS,
    OBLIGATION_PREREQUISITES,
    CLASSIFICATION_EQUIVALENCES,
)
from .evaluator import (
    evaluate_jurisdiction,
    evaluate_cross_border,
    summarize,
)

__all__ = [
    # Models
    "ApplicableJurisdiction",
    "JurisdictionEvaluation",
    "CrossBorderConflict",
    "CrossBorderEvaluation",
    # Conflicts
    "detect_conflicts",
    "merge_obligations",
    "RESOLUTION_STRATEGIES",
    "EXCLUSIVE_OBLIGATION_PAIRS",
    "OBLIGATION_PREREQUISITES",
    "CLASSIFICATION_EQUIVALENCES",
    # Evaluator
    "evaluate_jurisdiction",
    "evaluate_cross_border",
    "summarize",
]
