"""Models for per-jurisdiction outcomes and cross-border conflicts."""

from __future__ import annotations

from pydantic import Field

from decision_canvas.core.ontology.jurisdiction import (
    ComplianceStatus,
    ConflictSeverity,
    ConflictType,
    JurisdictionRole,
    ResolutionStrategy,
)
from decision_canvas.rules.schema import CanvasModel, RuleDefinition, TraceNode


class ApplicableJurisdiction(CanvasModel):
    """A jurisdiction taking part in a scenario, with the rule that applies there."""

    jurisdiction: str
    role: JurisdictionRole
    regime_id: str | None = None
    rule: RuleDefinition | None = None


class JurisdictionEvaluation(CanvasModel):
    """One jurisdiction's outcome for a scenario."""

    jurisdiction: str
    role: JurisdictionRole
    regime_id: str
    status: ComplianceStatus
    trace: list[TraceNode] = Field(default_factory=list)
    leaf_id: str | None = None
    obligations: list[str] = Field(default_factory=list)

    rule_id: str | None = None
    decision: str | None = None
    classification: str | None = None
    obligation_deadlines: dict[str, int] = Field(default_factory=dict)
    anchor_ids: list[str] = Field(default_factory=list)
    missing_facts: list[str] = Field(default_factory=list)


class CrossBorderConflict(CanvasModel):
    """A disagreement between two jurisdictions' outcomes."""

    id: str
    severity: ConflictSeverity
    type: ConflictType
    jurisdictions: list[str]
    anchor_node_ids: list[str] = Field(default_factory=list)
    description: str
    resolution_strategy: ResolutionStrategy
    resolution_note: str | None = None
    obligations: list[str] = Field(default_factory=list)
    rule_ids: list[str] = Field(default_factory=list)
    resolvable: bool = True


class CrossBorderEvaluation(CanvasModel):
    """Summary of evaluating one scenario across several jurisdictions."""

    evaluations: list[JurisdictionEvaluation] = Field(default_factory=list)
    conflicts: list[CrossBorderConflict] = Field(default_factory=list)
    merged_obligations: list[str] = Field(default_factory=list)
    overall_status: ComplianceStatus = ComplianceStatus.NO_APPLICABLE_RULES
    blocking_count: int = 0
    warning_count: int = 0
    all_resolvable: bool = True
