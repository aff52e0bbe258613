"""Exceptions raised by the decision tree engine.

Only structural problems and contract misuse are raised. Missing facts and
type mismatches are absorbed into evaluation results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schema import PartialEvaluationResult


class DecisionTreeError(ValueError):
    """Base class for decision tree engine errors."""


class MalformedTreeError(DecisionTreeError):
    """The tree violates a structural invariant and cannot be evaluated."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Malformed decision tree: " + "; ".join(self.problems))


class RouterContextError(DecisionTreeError):
    """A router node was reached without a usable jurisdiction context."""

    def __init__(self, node_id: str, jurisdiction: str | None = None):
        self.node_id = node_id
        self.jurisdiction = jurisdiction
        if jurisdiction is None:
            message = f"Router '{node_id}' evaluated outside a jurisdiction context"
        else:
            message = f"Router '{node_id}' has no branch for jurisdiction '{jurisdiction}'"
        super().__init__(message)


class IncompleteFactsError(DecisionTreeError):
    """Full evaluation reached a condition whose fact is absent."""

    def __init__(self, partial: PartialEvaluationResult):
        self.partial = partial
        self.missing_facts = list(partial.missing_facts)
        super().__init__(
            "Facts incomplete, use partial evaluation: missing "
            + ", ".join(self.missing_facts)
        )


class RuleNotFoundError(DecisionTreeError):
    """No rule definition is loaded under the given id."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule not found: {rule_id}")
