"""Rules domain - rule trees, evaluation and cross-border conflicts."""

from .schema import (
    SourceRef,
    ConditionOp,
    Condition,
    ConditionChildren,
    ConditionNode,
    LeafNode,
    GroupNode,
    RouterBranch,
    RouterNode,
    ConflictAnchorNode,
    DecisionNode,
    TraceNode,
    EvaluationResult,
    PartialEvaluationResult,
    RuleMetadata,
    RuleDefinition,
    EvaluationTrace,
    parse_tree,
    dump_tree,
)
from .errors import (
    DecisionTreeError,
    MalformedTreeError,
    RouterContextError,
    IncompleteFactsError,
    RuleNotFoundError,
)
from .facts import MISSING, get_in, is_missing
from .conditions import compare, describe_condition, evaluate_condition, requires_presence
from .tree import (
    TreeIndex,
    validate_tree,
    iter_nodes,
    structural_children,
    count_nodes,
    collect_fact_paths,
    collect_leaves,
)
from .evaluator import evaluate, evaluate_tree, evaluate_partial, is_complete
from .loader import RuleLoader
from .engine import DecisionEngine
from .jurisdiction import (
    ApplicableJurisdiction,
    JurisdictionEvaluation,
    CrossBorderConflict,
    CrossBorderEvaluation,
    detect_conflicts,
    merge_obligations,
    evaluate_jurisdiction,
    evaluate_cross_border,
)

__all__ = [
    # Schema
    "SourceRef",
    "ConditionOp",
    "Condition",
    "ConditionChildren",
    "ConditionNode",
    "LeafNode",
    "GroupNode",
    "RouterBranch",
    "RouterNode",
    "ConflictAnchorNode",
    "DecisionNode",
    "TraceNode",
    "EvaluationResult",
    "PartialEvaluationResult",
    "RuleMetadata",
    "RuleDefinition",
    "EvaluationTrace",
    "parse_tree",
    "dump_tree",
    # Errors
    "DecisionTreeError",
    "MalformedTreeError",
    "RouterContextError",
    "IncompleteFactsError",
    "RuleNotFoundError",
    # Facts and conditions
    "MISSING",
    "get_in",
    "is_missing",
    "compare",
    "describe_condition",
    "evaluate_condition",
    "requires_presence",
    # Tree
    "TreeIndex",
    "validate_tree",
    "iter_nodes",
    "structural_children",
    "count_nodes",
    "collect_fact_paths",
    "collect_leaves",
    # Evaluation
    "evaluate",
    "evaluate_tree",
    "evaluate_partial",
    "is_complete",
    "RuleLoader",
    "DecisionEngine",
    # Jurisdiction
    "ApplicableJurisdiction",
    "JurisdictionEvaluation",
    "CrossBorderConflict",
    "CrossBorderEvaluation",
    "detect_conflicts",
    "merge_obligations",
    "evaluate_jurisdiction",
    "evaluate_cross_border",
]
