"""Pytest fixtures for test suite."""

import pytest
from pathlib import Path
from typing import Any

from decision_canvas.core.ontology import ComplianceStatus, JurisdictionRole
from decision_canvas.rules import (
    RuleDefinition,
    RuleLoader,
    DecisionEngine,
    JurisdictionEvaluation,
    parse_tree,
)


# =============================================================================
# Tree Fixtures
# =============================================================================


def leaf(node_id: str, status: str, obligations: list[str] | None = None, **extra: Any) -> dict:
    """Serialized leaf node."""
    data = {
        "nodeId": node_id,
        "type": "leaf",
        "decision": node_id.replace("leaf_", ""),
        "status": status,
        "obligations": obligations or [],
    }
    data.update(extra)
    return data


def condition(node_id: str, fact: str, op: str, value: Any, true: dict, false: dict) -> dict:
    """Serialized condition node."""
    return {
        "nodeId": node_id,
        "type": "condition",
        "condition": {"fact": fact, "op": op, "value": value},
        "children": {"true": true, "false": false},
    }


@pytest.fixture
def simple_tree_data() -> dict:
    """Security token registration tree in wire format."""
    return condition(
        "root", "instrument.type", "eq", "security_token",
        true=leaf("leaf_register", "requires_action", ["register"]),
        false=leaf("leaf_ok", "compliant"),
    )


@pytest.fixture
def simple_tree(simple_tree_data):
    """Security token registration tree."""
    return parse_tree(simple_tree_data)


@pytest.fixture
def nested_tree():
    """Tree with a group (decoy child first), a conflict anchor and a numeric check."""
    return parse_tree(
        condition(
            "root", "instrument.type", "eq", "security_token",
            true={
                "nodeId": "authorization",
                "type": "group",
                "label": "Authorization",
                "entryNodeId": "auth_check",
                "children": [
                    leaf("leaf_decoy", "blocked"),
                    condition(
                        "auth_check", "issuer.authorized", "eq", True,
                        true={
                            "nodeId": "anchor_eu",
                            "type": "conflict_anchor",
                            "pairedAnchorId": "anchor_uk",
                            "child": leaf("leaf_authorized", "compliant", ["submit_whitepaper"]),
                        },
                        false=leaf("leaf_blocked", "blocked"),
                    ),
                ],
            },
            false=condition(
                "amount_check", "offer.amount", "gt", 1_000_000,
                true=leaf("leaf_prospectus", "requires_action", ["publish_prospectus"]),
                false=leaf("leaf_exempt", "compliant"),
            ),
        )
    )


@pytest.fixture
def routed_tree_data() -> dict:
    """Router with one subtree per jurisdiction, in wire format."""
    return {
        "nodeId": "jurisdiction_router",
        "type": "router",
        "branches": [
            {"jurisdiction": "EU", "role": "home", "targetNodeId": "eu_root"},
            {"jurisdiction": "UK", "role": "target", "targetNodeId": "uk_root"},
        ],
        "children": [
            condition(
                "eu_root", "investor.retail", "eq", True,
                true={
                    "nodeId": "anchor_eu_retail",
                    "type": "conflict_anchor",
                    "pairedAnchorId": "anchor_uk_retail",
                    "child": leaf(
                        "leaf_eu_retail", "requires_action",
                        ["add_risk_warning", "retail_distribution"],
                        classification="security_token",
                        obligationDeadlines={"add_risk_warning": 30},
                    ),
                },
                false=leaf("leaf_eu_pro", "compliant", classification="security_token"),
            ),
            condition(
                "uk_root", "investor.retail", "eq", True,
                true={
                    "nodeId": "anchor_uk_retail",
                    "type": "conflict_anchor",
                    "pairedAnchorId": "anchor_eu_retail",
                    "child": leaf(
                        "leaf_uk_block", "blocked", ["retail_marketing_ban"],
                        classification="security",
                    ),
                },
                false=leaf("leaf_uk_ok", "compliant", classification="security"),
            ),
        ],
    }


@pytest.fixture
def routed_rule(routed_tree_data) -> RuleDefinition:
    """Cross-border rule definition wrapping the routed tree."""
    return RuleDefinition.model_validate({
        "id": "retail_offer_cross_border",
        "version": "2.1",
        "name": "Retail offer of security tokens",
        "metadata": {
            "jurisdiction": "EU",
            "framework": "mica_2023",
            "effectiveDate": "2024-06-30",
        },
        "tree": routed_tree_data,
    })


# =============================================================================
# Jurisdiction Fixtures
# =============================================================================


def make_evaluation(
    jurisdiction: str,
    status: str,
    obligations: list[str] | None = None,
    role: JurisdictionRole = JurisdictionRole.TARGET,
    classification: str | None = None,
    deadlines: dict[str, int] | None = None,
    anchors: list[str] | None = None,
) -> JurisdictionEvaluation:
    """Build a jurisdiction evaluation without running a tree."""
    return JurisdictionEvaluation(
        jurisdiction=jurisdiction,
        role=role,
        regime_id=f"{jurisdiction.lower()}_regime",
        status=ComplianceStatus(status),
        leaf_id=f"leaf_{jurisdiction.lower()}",
        obligations=obligations or [],
        rule_id=f"rule_{jurisdiction.lower()}",
        classification=classification,
        obligation_deadlines=deadlines or {},
        anchor_ids=anchors or [],
    )


# =============================================================================
# Loader Fixtures
# =============================================================================


@pytest.fixture
def rules_dir() -> Path:
    """Path to the test rule definitions."""
    return Path(__file__).parent / "data"


@pytest.fixture
def rule_loader(rules_dir: Path) -> RuleLoader:
    """Rule loader with test rules loaded."""
    loader = RuleLoader(rules_dir)
    loader.load_directory()
    return loader


@pytest.fixture
def decision_engine(rule_loader: RuleLoader) -> DecisionEngine:
    """Decision engine with test rules loaded."""
    return DecisionEngine(rule_loader)
