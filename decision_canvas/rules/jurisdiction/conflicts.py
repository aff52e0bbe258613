"""
Conflict detection for cross-jurisdiction compliance.

Detects and classifies conflicts between jurisdiction evaluation results.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from decision_canvas.core.ontology.jurisdiction import (
    ComplianceStatus,
    ConflictSeverity,
    ConflictType,
    JurisdictionRole,
    ResolutionStrategy,
    SEVERITY_RANK,
)
from .models import CrossBorderConflict, JurisdictionEvaluation

logger = logging.getLogger(__name__)


# Resolution depends on the conflict type only
RESOLUTION_STRATEGIES: dict[ConflictType, ResolutionStrategy] = {
    ConflictType.DECISION: ResolutionStrategy.STRICTER,
    ConflictType.OBLIGATION: ResolutionStrategy.CUMULATIVE,
    ConflictType.CLASSIFICATION: ResolutionStrategy.HOME_JURISDICTION,
    ConflictType.TIMELINE: ResolutionStrategy.EARLIEST,
}

# Known mutually exclusive obligation pairs
EXCLUSIVE_OBLIGATION_PAIRS: dict[frozenset[str], dict] = {
    frozenset(["implement_cooling_off", "immediate_execution"]): {
        "description": "Cooling-off period requirement conflicts with immediate execution",
        "resolution": "Apply cooling off for offers reaching the cooling-off jurisdiction",
        "forbids": True,
    },
    frozenset(["submit_whitepaper", "no_disclosure"]): {
        "description": "Whitepaper requirement conflicts with minimal disclosure regime",
        "resolution": "Prepare whitepaper to satisfy stricter requirement",
        "forbids": False,
    },
    frozenset(["add_risk_warning", "no_warning_required"]): {
        "description": "Risk warning requirement conflicts with no-warning jurisdiction",
        "resolution": "Add risk warning to satisfy stricter requirement",
        "forbids": False,
    },
    frozenset(["retail_marketing_ban", "retail_distribution"]): {
        "description": "Retail marketing ban forbids distribution to retail investors",
        "resolution": "Restrict distribution to professional investors",
        "forbids": True,
    },
}

# Obligations that must be completed before another can be satisfied
OBLIGATION_PREREQUISITES: dict[str, list[str]] = {
    "submit_whitepaper": ["obtain_authorization"],
    "eu_passporting": ["obtain_authorization", "submit_whitepaper"],
    "uk_promotion": ["obtain_fca_authorization"],
    "implement_cooling_off": ["add_risk_warning"],
    "conduct_assessment": ["implement_cooling_off"],
}

# Classification labels that name the same regulatory category
CLASSIFICATION_EQUIVALENCES: list[frozenset[str]] = [
    frozenset(["asset_referenced_token", "art"]),
    frozenset(["e_money_token", "emt"]),
    frozenset(["security_token", "security"]),
]

_PERMISSIVE = (ComplianceStatus.COMPLIANT, ComplianceStatus.REQUIRES_ACTION)


def detect_conflicts(
    evaluations: Iterable[JurisdictionEvaluation],
    exclusive_pairs: Mapping[frozenset[str], dict] | None = None,
    prerequisites: Mapping[str, list[str]] | None = None,
    equivalent_classifications: Iterable[frozenset[str]] | None = None,
) -> list[CrossBorderConflict]:
    """
    Detect conflicts between jurisdiction evaluation results.

    Checks every unordered pair for:
    - Decision conflicts: permitted in one jurisdiction, blocked in another
    - Obligation conflicts: mutually exclusive requirements
    - Classification divergence: same instrument, incompatible categories
    - Timeline conflicts: deadlines that cannot both be met

    Conflicts of the same type between the same two jurisdictions are merged,
    and the result does not depend on the order of ``evaluations``.

    Args:
        evaluations: One evaluation per jurisdiction
        exclusive_pairs: Override for EXCLUSIVE_OBLIGATION_PAIRS
        prerequisites: Override for OBLIGATION_PREREQUISITES
        equivalent_classifications: Override for CLASSIFICATION_EQUIVALENCES

    Returns:
        Conflicts sorted by id
    """
    exclusive_pairs = EXCLUSIVE_OBLIGATION_PAIRS if exclusive_pairs is None else exclusive_pairs
    prerequisites = OBLIGATION_PREREQUISITES if prerequisites is None else prerequisites
    equivalences = list(
        CLASSIFICATION_EQUIVALENCES
        if equivalent_classifications is None
        else equivalent_classifications
    )

    ordered = sorted(
        evaluations,
        key=lambda e: (e.jurisdiction, e.role.value, e.regime_id, e.rule_id or ""),
    )
    merged: dict[tuple[ConflictType, tuple[str, str]], CrossBorderConflict] = {}

    # Compare each pair of jurisdictions
    for i, result_a in enumerate(ordered):
        for result_b in ordered[i + 1:]:
            if result_a.jurisdiction == result_b.jurisdiction:
                continue
            # Skip if either has no applicable rules
            if ComplianceStatus.NO_APPLICABLE_RULES in (result_a.status, result_b.status):
                continue

            found: list[CrossBorderConflict] = []
            decision_conflict = _check_decision_conflict(result_a, result_b)
            if decision_conflict:
                found.append(decision_conflict)
            found.extend(_check_obligation_conflicts(result_a, result_b, exclusive_pairs))
            classification_conflict = _check_classification_divergence(
                result_a, result_b, equivalences
            )
            if classification_conflict:
                found.append(classification_conflict)
            found.extend(_check_timeline_conflicts(result_a, result_b, prerequisites))

            for conflict in found:
                key = (conflict.type, (conflict.jurisdictions[0], conflict.jurisdictions[1]))
                if key in merged:
                    logger.debug("Merging duplicate %s conflict %s", conflict.type.value, conflict.id)
                    merged[key] = _merge(merged[key], conflict)
                else:
                    merged[key] = conflict

    return sorted(merged.values(), key=lambda c: c.id)


def merge_obligations(evaluations: Iterable[JurisdictionEvaluation]) -> list[str]:
    """Union of obligation ids across all jurisdictions, deduplicated and sorted."""
    obligations: set[str] = set()
    for evaluation in evaluations:
        obligations.update(evaluation.obligations)
    return sorted(obligations)


# =============================================================================
# Pair checks
# =============================================================================


def _conflict(
    conflict_type: ConflictType,
    severity: ConflictSeverity,
    result_a: JurisdictionEvaluation,
    result_b: JurisdictionEvaluation,
    description: str,
    resolution_note: str | None = None,
    obligations: Iterable[str] = (),
    resolvable: bool = True,
) -> CrossBorderConflict:
    jurisdictions = sorted([result_a.jurisdiction, result_b.jurisdiction])
    anchors = sorted(set(result_a.anchor_ids) | set(result_b.anchor_ids))
    if not anchors:
        anchors = sorted({r.leaf_id for r in (result_a, result_b) if r.leaf_id})
    return CrossBorderConflict(
        id=f"{conflict_type.value}:{jurisdictions[0]}-{jurisdictions[1]}",
        severity=severity,
        type=conflict_type,
        jurisdictions=jurisdictions,
        anchor_node_ids=anchors,
        description=description,
        resolution_strategy=RESOLUTION_STRATEGIES[conflict_type],
        resolution_note=resolution_note,
        obligations=sorted(set(obligations)),
        rule_ids=sorted({r.rule_id for r in (result_a, result_b) if r.rule_id}),
        resolvable=resolvable,
    )


def _check_decision_conflict(
    result_a: JurisdictionEvaluation, result_b: JurisdictionEvaluation
) -> CrossBorderConflict | None:
    """Check if jurisdictions have conflicting overall decisions."""
    if result_a.status == ComplianceStatus.BLOCKED and result_b.status in _PERMISSIVE:
        blocker, permitter = result_a, result_b
    elif result_b.status == ComplianceStatus.BLOCKED and result_a.status in _PERMISSIVE:
        blocker, permitter = result_b, result_a
    else:
        return None

    return _conflict(
        ConflictType.DECISION,
        ConflictSeverity.BLOCKING,
        result_a,
        result_b,
        description=(
            f"{permitter.jurisdiction} permits activity while "
            f"{blocker.jurisdiction} blocks it"
        ),
        resolution_note=f"Must satisfy {blocker.jurisdiction} requirements to proceed",
        resolvable=False,
    )


def _check_obligation_conflicts(
    result_a: JurisdictionEvaluation,
    result_b: JurisdictionEvaluation,
    exclusive_pairs: Mapping[frozenset[str], dict],
) -> Iterator[CrossBorderConflict]:
    """Check for mutually exclusive obligations split across the two jurisdictions."""
    obls_a = set(result_a.obligations)
    obls_b = set(result_b.obligations)

    for pair_key in sorted(exclusive_pairs, key=sorted):
        if len(pair_key) != 2:
            continue
        first, second = sorted(pair_key)
        split = (first in obls_a and second in obls_b) or (second in obls_a and first in obls_b)
        if not split:
            continue

        pair_info = exclusive_pairs[pair_key]
        severity = (
            ConflictSeverity.BLOCKING if pair_info.get("forbids") else ConflictSeverity.WARNING
        )
        yield _conflict(
            ConflictType.OBLIGATION,
            severity,
            result_a,
            result_b,
            description=pair_info.get("description", f"{first} conflicts with {second}"),
            resolution_note=pair_info.get("resolution"),
            obligations=[first, second],
        )


def _check_classification_divergence(
    result_a: JurisdictionEvaluation,
    result_b: JurisdictionEvaluation,
    equivalences: list[frozenset[str]],
) -> CrossBorderConflict | None:
    """Check if the same instrument is classified differently across jurisdictions."""
    class_a = result_a.classification
    class_b = result_b.classification

    if not class_a or not class_b or class_a == class_b:
        return None
    if any(class_a in group and class_b in group for group in equivalences):
        return None

    home = next(
        (r.jurisdiction for r in (result_a, result_b) if r.role == JurisdictionRole.HOME),
        None,
    )
    note = (
        f"Apply the '{home}' classification as issuer home jurisdiction"
        if home
        else "Defer to the issuer home jurisdiction classification"
    )
    return _conflict(
        ConflictType.CLASSIFICATION,
        ConflictSeverity.WARNING,
        result_a,
        result_b,
        description=(
            f"Classified as '{class_a}' in {result_a.jurisdiction} "
            f"but '{class_b}' in {result_b.jurisdiction}"
        ),
        resolution_note=note,
    )


def _check_timeline_conflicts(
    result_a: JurisdictionEvaluation,
    result_b: JurisdictionEvaluation,
    prerequisites: Mapping[str, list[str]],
) -> Iterator[CrossBorderConflict]:
    """Check for deadlines that differ or precede another jurisdiction's prerequisite."""
    deadlines_a = result_a.obligation_deadlines
    deadlines_b = result_b.obligation_deadlines

    # Same obligation, different deadlines: satisfiable by meeting the earliest
    for obl_id in sorted(set(deadlines_a) & set(deadlines_b)):
        if deadlines_a[obl_id] != deadlines_b[obl_id]:
            earliest = min(deadlines_a[obl_id], deadlines_b[obl_id])
            yield _conflict(
                ConflictType.TIMELINE,
                ConflictSeverity.INFO,
                result_a,
                result_b,
                description=(
                    f"Different deadlines for {obl_id}: {deadlines_a[obl_id]} days in "
                    f"{result_a.jurisdiction}, {deadlines_b[obl_id]} days in "
                    f"{result_b.jurisdiction}"
                ),
                resolution_note=f"Use earliest deadline ({earliest} days)",
                obligations=[obl_id],
            )

    # A deadline that falls before the other side's prerequisite is due
    for first, second in ((result_a, result_b), (result_b, result_a)):
        for obl_id, due in sorted(first.obligation_deadlines.items()):
            for prereq in prerequisites.get(obl_id, []):
                prereq_due = second.obligation_deadlines.get(prereq)
                if prereq_due is None or prereq_due <= due:
                    continue
                yield _conflict(
                    ConflictType.TIMELINE,
                    ConflictSeverity.WARNING,
                    result_a,
                    result_b,
                    description=(
                        f"{first.jurisdiction} requires {obl_id} within {due} days but its "
                        f"prerequisite {prereq} is due in {second.jurisdiction} after "
                        f"{prereq_due} days"
                    ),
                    resolution_note=f"Complete {prereq} within {due} days",
                    obligations=[obl_id, prereq],
                )


def _merge(existing: CrossBorderConflict, other: CrossBorderConflict) -> CrossBorderConflict:
    """Fold a same-type, same-pair conflict into an existing one."""
    severity = max(existing.severity, other.severity, key=lambda s: SEVERITY_RANK[s])
    descriptions = existing.description.split("; ")
    if other.description not in descriptions:
        descriptions.append(other.description)
    notes = [n for n in (existing.resolution_note, other.resolution_note) if n]
    return existing.model_copy(
        update={
            "severity": severity,
            "description": "; ".join(descriptions),
            "resolution_note": "; ".join(dict.fromkeys(notes)) or None,
            "obligations": sorted(set(existing.obligations) | set(other.obligations)),
            "anchor_node_ids": sorted(set(existing.anchor_node_ids) | set(other.anchor_node_ids)),
            "rule_ids": sorted(set(existing.rule_ids) | set(other.rule_ids)),
            "resolvable": existing.resolvable and other.resolvable,
        }
    )
