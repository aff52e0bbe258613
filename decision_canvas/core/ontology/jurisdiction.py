"""
Jurisdiction and compliance vocabulary for cross-border evaluation.

Enumerations shared by rule trees, jurisdiction evaluations and conflicts.
"""

from __future__ import annotations

from enum import Enum


class JurisdictionCode(str, Enum):
    """Supported jurisdiction codes."""
    EU = "EU"
    US = "US"
    UK = "UK"
    SG = "SG"
    CH = "CH"


class JurisdictionRole(str, Enum):
    """Role of a jurisdiction in a cross-border scenario."""
    HOME = "home"
    TARGET = "target"
    PASSPORT = "passport"
    THIRD_COUNTRY = "third_country"


class ComplianceStatus(str, Enum):
    """Compliance status reached by a decision."""
    COMPLIANT = "compliant"
    REQUIRES_ACTION = "requires_action"
    BLOCKED = "blocked"
    NO_APPLICABLE_RULES = "no_applicable_rules"


# Higher is more restrictive
STATUS_STRICTNESS: dict[ComplianceStatus, int] = {
    ComplianceStatus.NO_APPLICABLE_RULES: 0,
    ComplianceStatus.COMPLIANT: 1,
    ComplianceStatus.REQUIRES_ACTION: 2,
    ComplianceStatus.BLOCKED: 3,
}


def stricter_status(a: ComplianceStatus, b: ComplianceStatus) -> ComplianceStatus:
    """Return the more restrictive of two statuses."""
    return a if STATUS_STRICTNESS[a] >= STATUS_STRICTNESS[b] else b


class ConflictType(str, Enum):
    """Types of cross-jurisdiction conflicts."""
    DECISION = "decision"
    OBLIGATION = "obligation"
    CLASSIFICATION = "classification"
    TIMELINE = "timeline"


class ConflictSeverity(str, Enum):
    """Severity of cross-jurisdiction conflicts."""
    BLOCKING = "blocking"
    WARNING = "warning"
    INFO = "info"


SEVERITY_RANK: dict[ConflictSeverity, int] = {
    ConflictSeverity.INFO: 0,
    ConflictSeverity.WARNING: 1,
    ConflictSeverity.BLOCKING: 2,
}


class ResolutionStrategy(str, Enum):
    """How a cross-jurisdiction conflict is resolved."""
    CUMULATIVE = "cumulative"
    STRICTER = "stricter"
    HOME_JURISDICTION = "home_jurisdiction"
    SATISFY_BOTH = "satisfy_both"
    EARLIEST = "earliest"
