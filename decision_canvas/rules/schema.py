"""Pydantic models for declarative rule trees and evaluation results.

A rule tree is a nested discriminated union on the ``type`` field. Field
names are snake_case in Python and camelCase on the wire (``nodeId``,
``factPath``, ``reachableLeaves``); both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from decision_canvas.core.ontology.jurisdiction import (
    ComplianceStatus,
    JurisdictionCode,
    JurisdictionRole,
)


class CanvasModel(BaseModel):
    """Immutable model serialized with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# =============================================================================
# Source Reference
# =============================================================================

class SourceRef(CanvasModel):
    """Source reference linking a node to its legal text."""

    document_id: str = Field(..., description="Document identifier (e.g., 'mica_2023')")
    article: str | None = Field(None, description="Article number (e.g., '36(1)')")
    section: str | None = Field(None, description="Section identifier")
    paragraphs: list[str] = Field(default_factory=list, description="Paragraph references")
    pages: list[int] = Field(default_factory=list, description="Page numbers")
    url: str | None = Field(None, description="URL to source document")

    def citation(self) -> str:
        """Short citation, e.g. ``mica_2023 Art. 36(1) p. 12``."""
        parts = [self.document_id]
        if self.article:
            parts.append(f"Art. {self.article}")
        if self.pages:
            parts.append(f"p. {', '.join(map(str, self.pages))}")
        return " ".join(parts)


# =============================================================================
# Conditions
# =============================================================================

class ConditionOp(str, Enum):
    """Comparison operators for conditions."""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    IN = "in"
    CONTAINS = "contains"
    MATCHES = "matches"
    NIL = "nil?"
    SOME = "some?"


class Condition(CanvasModel):
    """A single comparison between a fact and an expected value."""

    fact: str = Field(..., description="Dotted path to the fact, e.g. 'instrument.type'")
    op: ConditionOp = Field(ConditionOp.EQ, description="Comparison operator")
    value: Any = Field(None, description="Value to compare against")


# =============================================================================
# Decision Tree Nodes
# =============================================================================

DecisionNode = Annotated[
    Union[
        "ConditionNode",
        "LeafNode",
        "GroupNode",
        "RouterNode",
        "ConflictAnchorNode",
    ],
    Field(discriminator="type"),
]


class ConditionChildren(CanvasModel):
    """The two outcomes of a condition node."""

    true: DecisionNode
    false: DecisionNode


class ConditionNode(CanvasModel):
    """An internal node that branches on a condition."""

    node_id: str
    type: Literal["condition"] = "condition"
    condition: Condition
    source_ref: SourceRef | None = None
    annotation: str | None = None
    children: ConditionChildren


class LeafNode(CanvasModel):
    """A terminal node carrying a decision."""

    node_id: str
    type: Literal["leaf"] = "leaf"
    decision: str
    status: ComplianceStatus
    obligations: list[str] = Field(default_factory=list)
    source_ref: SourceRef | None = None
    classification: str | None = Field(
        None, description="Regulatory category the decision assigns"
    )
    obligation_deadlines: dict[str, int] = Field(
        default_factory=dict, description="Obligation id -> days until due"
    )


class GroupNode(CanvasModel):
    """A named, collapsible region entered through ``entry_node_id``."""

    node_id: str
    type: Literal["group"] = "group"
    label: str
    entry_node_id: str
    exit_node_id: str | None = None
    collapsed: bool = False
    children: list[DecisionNode] = Field(default_factory=list)


class RouterBranch(CanvasModel):
    """One jurisdiction-tagged branch of a router."""

    jurisdiction: str
    role: JurisdictionRole
    target_node_id: str


class RouterNode(CanvasModel):
    """Fans out to one subtree per jurisdiction."""

    node_id: str
    type: Literal["router"] = "router"
    branches: list[RouterBranch] = Field(default_factory=list)
    children: list[DecisionNode] = Field(default_factory=list)

    def branch_for(self, jurisdiction: str) -> RouterBranch | None:
        """Get the branch tagged with a jurisdiction."""
        for branch in self.branches:
            if branch.jurisdiction == jurisdiction:
                return branch
        return None


class ConflictAnchorNode(CanvasModel):
    """Marks a known cross-jurisdiction tension point; evaluation passes through."""

    node_id: str
    type: Literal["conflict_anchor"] = "conflict_anchor"
    paired_anchor_id: str
    description: str | None = None
    child: DecisionNode


# =============================================================================
# Trace and Results
# =============================================================================

class TraceNode(CanvasModel):
    """A single evaluated condition."""

    node_id: str
    condition: str
    fact_path: str
    fact_value: Any = None
    expected_value: Any = None
    op: ConditionOp
    result: bool
    depth: int
    source_ref: SourceRef | None = None


class EvaluationResult(CanvasModel):
    """The reached leaf and the conditions evaluated on the way."""

    leaf: LeafNode
    trace: list[TraceNode] = Field(default_factory=list)
    anchors: list[str] = Field(
        default_factory=list, description="Conflict anchors passed through"
    )


class PartialEvaluationResult(CanvasModel):
    """Outcome of evaluating a tree against incomplete facts."""

    reachable_leaves: list[LeafNode] = Field(default_factory=list)
    missing_facts: list[str] = Field(default_factory=list)
    partial_trace: list[TraceNode] = Field(default_factory=list)


# =============================================================================
# Rule Definitions
# =============================================================================

class RuleMetadata(CanvasModel):
    """Metadata for a rule definition."""

    jurisdiction: JurisdictionCode
    framework: str
    effective_date: date
    expires_date: date | None = None
    tags: list[str] = Field(default_factory=list)


class RuleDefinition(CanvasModel):
    """A complete rule definition."""

    id: str
    version: str = "1.0"
    name: str
    description: str | None = None
    metadata: RuleMetadata
    tree: DecisionNode


class EvaluationTrace(CanvasModel):
    """Complete evaluation trace for a decision."""

    rule_id: str
    rule_version: str
    path: list[TraceNode] = Field(default_factory=list)
    final_node: LeafNode
    evaluated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )


# Enable forward references for recursive types
ConditionChildren.model_rebuild()
ConditionNode.model_rebuild()
GroupNode.model_rebuild()
RouterNode.model_rebuild()
ConflictAnchorNode.model_rebuild()
RuleDefinition.model_rebuild()

_NODE_ADAPTER: TypeAdapter = TypeAdapter(DecisionNode)


def parse_tree(data: Any) -> ConditionNode | LeafNode | GroupNode | RouterNode | ConflictAnchorNode:
    """Build a rule tree from its serialized (dict) form."""
    return _NODE_ADAPTER.validate_python(data)


def dump_tree(node: BaseModel) -> dict[str, Any]:
    """Serialize a rule tree to plain JSON-compatible data."""
    return node.model_dump(mode="json", by_alias=True, exclude_none=True)
