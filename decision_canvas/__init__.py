"""Decision Canvas - regulatory decision tree evaluation engine.

Evaluates declarative rule trees against facts with full tracing, falls
back to partial evaluation on incomplete facts, detects conflicts between
jurisdictions' outcomes and lays trees out for visualization. Every
operation is a pure function of its inputs.
"""

from .core.config import Settings, get_settings, configure_logging

from .core.ontology import (
    ComplianceStatus,
    ConflictSeverity,
    ConflictType,
    JurisdictionCode,
    JurisdictionRole,
    ResolutionStrategy,
)

# Rule trees and evaluation
from .rules import (
    DecisionEngine,
    RuleDefinition,
    RuleLoader,
    evaluate,
    evaluate_tree,
    evaluate_partial,
    detect_conflicts,
    merge_obligations,
    evaluate_cross_border,
)

# Layout
from .core.visualization import calculate_layout, get_path_from_trace

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "ComplianceStatus",
    "ConflictSeverity",
    "ConflictType",
    "JurisdictionCode",
    "JurisdictionRole",
    "ResolutionStrategy",
    "DecisionEngine",
    "RuleDefinition",
    "RuleLoader",
    "evaluate",
    "evaluate_tree",
    "evaluate_partial",
    "detect_conflicts",
    "merge_obligations",
    "evaluate_cross_border",
    "calculate_layout",
    "get_path_from_trace",
]
