"""Decision engine over loaded rule definitions."""

from __future__ import annotations

from typing import Any

from .errors import RuleNotFoundError
from .evaluator import evaluate, evaluate_tree
from .loader import RuleLoader
from .schema import (
    EvaluationResult,
    EvaluationTrace,
    PartialEvaluationResult,
    RuleDefinition,
)
from .tree import TreeIndex, collect_fact_paths


class DecisionEngine:
    """Evaluates loaded rules against facts with full tracing."""

    def __init__(self, loader: RuleLoader | None = None):
        self.loader = loader or RuleLoader()

    def _get(self, rule_id: str) -> tuple[RuleDefinition, TreeIndex | None]:
        rule = self.loader.get_rule(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule, self.loader.get_index(rule_id)

    def evaluate(
        self,
        rule_id: str,
        facts: dict[str, Any],
        jurisdiction: str | None = None,
    ) -> EvaluationResult | PartialEvaluationResult:
        """Evaluate a rule; incomplete facts give a partial result."""
        rule, index = self._get(rule_id)
        return evaluate(rule.tree, facts, jurisdiction=jurisdiction, index=index)

    def trace(
        self,
        rule_id: str,
        facts: dict[str, Any],
        jurisdiction: str | None = None,
    ) -> EvaluationTrace:
        """Evaluate a rule and wrap the outcome as an evaluation trace.

        Raises:
            IncompleteFactsError: the facts do not reach a leaf
        """
        rule, index = self._get(rule_id)
        result = evaluate_tree(rule.tree, facts, jurisdiction=jurisdiction, index=index)
        return EvaluationTrace(
            rule_id=rule.id,
            rule_version=rule.version,
            path=result.trace,
            final_node=result.leaf,
        )

    def required_facts(self, rule_id: str) -> list[str]:
        """Fact paths a rule can query."""
        rule, _ = self._get(rule_id)
        return collect_fact_paths(rule.tree)
