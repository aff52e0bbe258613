"""
Jurisdiction evaluator for multi-jurisdiction assessment.

Evaluates each jurisdiction's rule tree against the same facts, then hands
the per-jurisdiction outcomes to conflict detection.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from decision_canvas.core.ontology.jurisdiction import (
    ComplianceStatus,
    ConflictSeverity,
    JurisdictionRole,
    stricter_status,
)
from decision_canvas.rules.evaluator import evaluate, is_complete
from decision_canvas.rules.schema import RuleDefinition
from decision_canvas.rules.tree import TreeIndex
from .conflicts import detect_conflicts, merge_obligations
from .models import ApplicableJurisdiction, CrossBorderEvaluation, JurisdictionEvaluation


def evaluate_jurisdiction(
    rule: RuleDefinition | None,
    facts: dict[str, Any],
    jurisdiction: str,
    role: JurisdictionRole = JurisdictionRole.TARGET,
    regime_id: str | None = None,
    index: TreeIndex | None = None,
) -> JurisdictionEvaluation:
    """
    Evaluate facts against the rule tree that applies in a jurisdiction.

    Args:
        rule: Rule definition resolved for the jurisdiction (None if none applies)
        facts: Dictionary of fact values
        jurisdiction: Jurisdiction code, used to select router branches
        role: Role of the jurisdiction in the scenario
        regime_id: Regulatory regime identifier (defaults to the rule's framework)
        index: Prebuilt index of the rule tree

    Returns:
        Jurisdiction evaluation; incomplete facts give ``requires_action``
        with the missing fact paths
    """
    if rule is None:
        return JurisdictionEvaluation(
            jurisdiction=jurisdiction,
            role=role,
            regime_id=regime_id or "",
            status=ComplianceStatus.NO_APPLICABLE_RULES,
        )

    regime = regime_id or rule.metadata.framework
    result = evaluate(rule.tree, facts, jurisdiction=jurisdiction, index=index)

    if not is_complete(result):
        return JurisdictionEvaluation(
            jurisdiction=jurisdiction,
            role=role,
            regime_id=regime,
            status=ComplianceStatus.REQUIRES_ACTION,
            trace=result.partial_trace,
            rule_id=rule.id,
            missing_facts=result.missing_facts,
        )

    leaf = result.leaf
    return JurisdictionEvaluation(
        jurisdiction=jurisdiction,
        role=role,
        regime_id=regime,
        status=leaf.status,
        trace=result.trace,
        leaf_id=leaf.node_id,
        obligations=list(leaf.obligations),
        rule_id=rule.id,
        decision=leaf.decision,
        classification=leaf.classification,
        obligation_deadlines=dict(leaf.obligation_deadlines),
        anchor_ids=result.anchors,
    )


def summarize(evaluations: Iterable[JurisdictionEvaluation]) -> CrossBorderEvaluation:
    """Detect conflicts and aggregate obligations over jurisdiction evaluations."""
    evaluations = list(evaluations)
    conflicts = detect_conflicts(evaluations)

    overall = ComplianceStatus.NO_APPLICABLE_RULES
    for evaluation in evaluations:
        overall = stricter_status(overall, evaluation.status)

    return CrossBorderEvaluation(
        evaluations=evaluations,
        conflicts=conflicts,
        merged_obligations=merge_obligations(evaluations),
        overall_status=overall,
        blocking_count=sum(1 for c in conflicts if c.severity == ConflictSeverity.BLOCKING),
        warning_count=sum(1 for c in conflicts if c.severity == ConflictSeverity.WARNING),
        all_resolvable=all(c.resolvable for c in conflicts),
    )


def evaluate_cross_border(
    jurisdictions: Iterable[ApplicableJurisdiction],
    facts: dict[str, Any],
) -> CrossBorderEvaluation:
    """
    Evaluate one scenario across several jurisdictions.

    Args:
        jurisdictions: Jurisdictions with their role and resolved rule
        facts: Dictionary of fact values

    Returns:
        Per-jurisdiction evaluations, conflicts and merged obligations
    """
    indexes: dict[int, TreeIndex] = {}
    evaluations = []

    for applicable in jurisdictions:
        rule = applicable.rule
        index = None
        if rule is not None:
            # Several jurisdictions commonly share one routed tree
            index = indexes.get(id(rule.tree))
            if index is None:
                index = indexes[id(rule.tree)] = TreeIndex.build(rule.tree)
        evaluations.append(
            evaluate_jurisdiction(
                rule,
                facts,
                jurisdiction=applicable.jurisdiction,
                role=applicable.role,
                regime_id=applicable.regime_id,
                index=index,
            )
        )

    return summarize(evaluations)
