"""Static staleTime analysis over tree-sitter syntax trees."""

from stalecheck.analysis.auditor import audit_units, run_audit
from stalecheck.analysis.schemas import AuditResult, ConstantTable, Violation

__all__ = [
    "AuditResult",
    "ConstantTable",
    "Violation",
    "audit_units",
    "run_audit",
]
