"""Decision tree evaluation with trace generation.

Full evaluation walks exactly one path from the root to a leaf. Partial
evaluation walks the same path but, at a condition whose fact is absent,
keeps every leaf below it reachable instead of choosing a branch.
"""

from __future__ import annotations

import logging
from typing import Any

from .conditions import compare, describe_condition, requires_presence
from .errors import (
    DecisionTreeError,
    IncompleteFactsError,
    MalformedTreeError,
    RouterContextError,
)
from .facts import Facts, get_in, is_missing
from .schema import (
    EvaluationResult,
    LeafNode,
    PartialEvaluationResult,
    TraceNode,
)
from .tree import Node, TreeIndex, collect_leaves, iter_nodes

logger = logging.getLogger(__name__)


class _Walk:
    """State of one evaluation pass. Never shared between calls."""

    def __init__(self, index: TreeIndex, facts: Facts, jurisdiction: str | None):
        self.index = index
        self.facts = facts
        self.jurisdiction = jurisdiction
        self.trace: list[TraceNode] = []
        self.anchors: list[str] = []
        self.reachable: list[LeafNode] = []
        self.missing: list[str] = []
        self.partial_trace: list[TraceNode] | None = None

    def resolve(self, node_id: str) -> Node:
        target = self.index.get(node_id)
        if target is None:
            raise DecisionTreeError(f"Node '{node_id}' is not in the tree")
        return target

    def block(self, node: Node, fact_path: str) -> None:
        """Record a condition that cannot be decided from the facts.

        Absent facts of conditions further down the blocked subtree are
        reported as missing too.
        """
        if self.partial_trace is None:
            self.partial_trace = list(self.trace)
        self.add_missing(fact_path)
        for inner in iter_nodes(node):
            if inner.type != "condition" or not requires_presence(inner.condition.op):
                continue
            if is_missing(get_in(self.facts, inner.condition.fact)):
                self.add_missing(inner.condition.fact)
        self.add_reachable(collect_leaves(node))
        logger.debug("Blocked at node %s: fact %s missing", node.node_id, fact_path)

    def add_missing(self, fact_path: str) -> None:
        if fact_path not in self.missing:
            self.missing.append(fact_path)

    def add_reachable(self, leaves: list[LeafNode]) -> None:
        known = {leaf.node_id for leaf in self.reachable}
        for leaf in leaves:
            if leaf.node_id not in known:
                known.add(leaf.node_id)
                self.reachable.append(leaf)

    def run(self, root: Node) -> LeafNode | None:
        """Walk from ``root``; return the leaf reached, or None when blocked."""
        node = root
        while True:
            node_type = node.type

            if node_type == "leaf":
                return node

            elif node_type == "condition":
                condition = node.condition
                actual = get_in(self.facts, condition.fact)
                if is_missing(actual) and requires_presence(condition.op):
                    self.block(node, condition.fact)
                    return None

                result = compare(condition.op, actual, condition.value)
                self.trace.append(
                    TraceNode(
                        node_id=node.node_id,
                        condition=node.annotation or describe_condition(condition),
                        fact_path=condition.fact,
                        fact_value=None if is_missing(actual) else actual,
                        expected_value=condition.value,
                        op=condition.op,
                        result=result,
                        depth=len(self.trace),
                        source_ref=node.source_ref,
                    )
                )
                node = node.children.true if result else node.children.false

            elif node_type == "group":
                node = self.resolve(node.entry_node_id)

            elif node_type == "router":
                if self.jurisdiction is None:
                    raise RouterContextError(node.node_id)
                branch = node.branch_for(self.jurisdiction)
                if branch is None:
                    raise RouterContextError(node.node_id, self.jurisdiction)
                node = self.resolve(branch.target_node_id)

            elif node_type == "conflict_anchor":
                self.anchors.append(node.node_id)
                node = node.child

            else:
                raise DecisionTreeError(f"Unknown node type: {node_type!r}")


def _index_for(root: Node, index: TreeIndex | None) -> TreeIndex:
    if index is not None and index.root is root:
        if index.problems:
            raise MalformedTreeError(index.problems)
        return index
    return TreeIndex.build(root)


def _partial_result(walk: _Walk, leaf: LeafNode | None) -> PartialEvaluationResult:
    if leaf is not None:
        return PartialEvaluationResult(
            reachable_leaves=[leaf],
            missing_facts=[],
            partial_trace=list(walk.trace),
        )
    return PartialEvaluationResult(
        reachable_leaves=list(walk.reachable),
        missing_facts=list(walk.missing),
        partial_trace=list(walk.partial_trace or []),
    )


def evaluate_tree(
    root: Node,
    facts: Facts,
    jurisdiction: str | None = None,
    index: TreeIndex | None = None,
) -> EvaluationResult:
    """Evaluate a tree to the leaf that applies.

    Args:
        root: Root node of the rule tree
        facts: Fact bag, nested or keyed by dotted path
        jurisdiction: Jurisdiction under evaluation, required to pass routers
        index: Prebuilt index of ``root`` to reuse

    Returns:
        The reached leaf with the trace of evaluated conditions

    Raises:
        MalformedTreeError: the tree is structurally invalid
        RouterContextError: a router was reached without a matching jurisdiction
        IncompleteFactsError: a needed fact is absent; carries the partial result
    """
    walk = _Walk(_index_for(root, index), facts, jurisdiction)
    leaf = walk.run(root)
    if leaf is None:
        raise IncompleteFactsError(_partial_result(walk, None))
    return EvaluationResult(leaf=leaf, trace=walk.trace, anchors=walk.anchors)


def evaluate_partial(
    root: Node,
    facts: Facts,
    jurisdiction: str | None = None,
    index: TreeIndex | None = None,
) -> PartialEvaluationResult:
    """Evaluate a tree against possibly incomplete facts.

    Every leaf below a blocking condition stays reachable. When nothing
    blocks, the single reached leaf is returned with the full trace.
    """
    walk = _Walk(_index_for(root, index), facts, jurisdiction)
    leaf = walk.run(root)
    return _partial_result(walk, leaf)


def evaluate(
    root: Node,
    facts: Facts,
    jurisdiction: str | None = None,
    index: TreeIndex | None = None,
) -> EvaluationResult | PartialEvaluationResult:
    """Full evaluation when the facts allow it, partial evaluation otherwise."""
    try:
        return evaluate_tree(root, facts, jurisdiction=jurisdiction, index=index)
    except IncompleteFactsError as e:
        return e.partial


def is_complete(result: Any) -> bool:
    """Whether a result from ``evaluate`` reached a single leaf."""
    return isinstance(result, EvaluationResult)
