"""Shared constants, the single source of truth for cross-module values.

Contract names are the literal strings the auditor searches for in the
audited codebase. Renaming any of them there silently disables detection
for the affected call sites.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

# ── Contract names ───────────────────────────────────────

MONITORED_WRAPPERS: frozenset[str] = frozenset({
    "useApiQuery",
    "useApiMutation",
})
STALE_TIME_OPTION = "staleTime"
CONSTANT_TABLE_NAME = "STALE_TIMES"

# ── String Enums ─────────────────────────────────────────


class ViolationKind(StrEnum):
    """Reason a monitored call site failed the policy."""

    MISSING_STALETIME = "MISSING_STALETIME"
    INVALID_STALETIME = "INVALID_STALETIME"
    UNMAPPED_STALETIME = "UNMAPPED_STALETIME"


class ReportFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


class ExitCode(IntEnum):
    """Process exit status for a run."""

    SUCCESS = 0
    VIOLATIONS = 1
    SETUP_FAILURE = 2


# ── Ingestion ────────────────────────────────────────────

BINARY_DETECTION_BUFFER = 8192
