"""Ontology package - jurisdiction and compliance vocabulary."""

from .jurisdiction import (
    JurisdictionCode,
    JurisdictionRole,
    ComplianceStatus,
    STATUS_STRICTNESS,
    stricter_status,
    ConflictType,
    ConflictSeverity,
    SEVERITY_RANK,
    ResolutionStrategy,
)

__all__ = [
    "JurisdictionCode",
    "JurisdictionRole",
    "ComplianceStatus",
    "STATUS_STRICTNESS",
    "stricter_status",
    "ConflictType",
    "ConflictSeverity",
    "SEVERITY_RANK",
    "ResolutionStrategy",
]
