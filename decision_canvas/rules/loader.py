"""YAML/JSON rule loader and validator.

Every loaded tree is checked with ``TreeIndex.build`` so malformed trees are
rejected at load time rather than at evaluation time.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import DecisionTreeError
from .schema import RuleDefinition
from .tree import TreeIndex

logger = logging.getLogger(__name__)

RULE_FILE_SUFFIXES = (".yaml", ".yml", ".json")


class RuleLoader:
    """Loads and validates rule definitions from files or directories."""

    def __init__(self, rules_dir: str | Path | None = None):
        self.rules_dir = Path(rules_dir) if rules_dir else None
        self._rules: dict[str, RuleDefinition] = {}
        self._indexes: dict[str, TreeIndex] = {}

    def load_file(self, path: str | Path) -> list[RuleDefinition]:
        """Load rule definitions from a single YAML or JSON file.

        Raises:
            FileNotFoundError: the file does not exist
            ValueError: the content is not a valid rule definition
            MalformedTreeError: a rule tree violates a structural invariant
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Rule file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                content = json.load(f)
            else:
                content = yaml.safe_load(f)

        # Handle single rule or list of rules
        items = content if isinstance(content, list) else [content]
        rules = [self.add_rule(item) for item in items]
        logger.debug("Loaded %d rule(s) from %s", len(rules), path)
        return rules

    def load_directory(self, path: str | Path | None = None) -> list[RuleDefinition]:
        """Load all rule files from a directory.

        Files that fail to load are logged and skipped.
        """
        path = Path(path) if path else self.rules_dir
        if not path:
            raise ValueError("No rules directory specified")
        if not path.exists():
            raise FileNotFoundError(f"Rules directory not found: {path}")

        rules = []
        for rule_file in sorted(path.iterdir()):
            if rule_file.suffix not in RULE_FILE_SUFFIXES:
                continue
            try:
                rules.extend(self.load_file(rule_file))
            except (ValueError, yaml.YAMLError) as e:
                logger.warning("Failed to load %s: %s", rule_file, e)

        return rules

    def add_rule(self, data: dict[str, Any] | RuleDefinition) -> RuleDefinition:
        """Validate and register a rule definition."""
        if isinstance(data, RuleDefinition):
            rule = data
        else:
            if not isinstance(data, dict):
                raise DecisionTreeError("Rule definition must be a mapping")
            try:
                rule = RuleDefinition.model_validate(data)
            except ValidationError as e:
                raise DecisionTreeError(f"Invalid rule definition: {e}") from e

        self._indexes[rule.id] = TreeIndex.build(rule.tree)
        self._rules[rule.id] = rule
        return rule

    def get_rule(self, rule_id: str) -> RuleDefinition | None:
        """Get a loaded rule by ID."""
        return self._rules.get(rule_id)

    def get_index(self, rule_id: str) -> TreeIndex | None:
        """Get the node index built for a loaded rule's tree."""
        return self._indexes.get(rule_id)

    def get_all_rules(self) -> list[RuleDefinition]:
        """Get all loaded rules."""
        return list(self._rules.values())

    def get_rules_for_jurisdiction(self, jurisdiction: str) -> list[RuleDefinition]:
        """Get loaded rules scoped to a jurisdiction."""
        return [
            rule for rule in self._rules.values()
            if rule.metadata.jurisdiction.value == jurisdiction
        ]

    def get_applicable_rules(
        self,
        on: date | None = None,
        tags: list[str] | None = None,
    ) -> list[RuleDefinition]:
        """Get rules in force on a date, optionally filtered by tags."""
        on = on or date.today()
        rules = []

        for rule in self._rules.values():
            # Check effective dates
            if rule.metadata.effective_date > on:
                continue
            if rule.metadata.expires_date and rule.metadata.expires_date < on:
                continue

            # Check tags
            if tags:
                if not any(tag in rule.metadata.tags for tag in tags):
                    continue

            rules.append(rule)

        return rules
