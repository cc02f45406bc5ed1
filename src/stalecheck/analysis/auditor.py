"""Orchestrate an audit run.

Two passes over an in-memory snapshot of the project: resolve the
constant table once, then scan every unit for monitored calls and check
each one against the policy. No violation stops the scan early.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from stalecheck.analysis.call_sites import scan_call_sites
from stalecheck.analysis.constant_table import resolve_constant_table
from stalecheck.analysis.entities import classify_entity
from stalecheck.analysis.evaluator import ResolutionContext
from stalecheck.analysis.options import extract_stale_time
from stalecheck.analysis.parsing import SourceUnit, load_units
from stalecheck.analysis.policy import POLICY, validate_call_site
from stalecheck.analysis.schemas import AuditResult, Violation
from stalecheck.analysis.symbols import DefinitionProvider, SymbolIndex
from stalecheck.config import Settings
from stalecheck.ingestion import enumerate_files, load_tsconfig
from stalecheck.ingestion.schemas import TsConfig

logger = logging.getLogger(__name__)


def run_audit(root: Path, settings: Settings | None = None) -> AuditResult:
    """Enumerate, parse and audit the project under ``root``.

    Raises :class:`~stalecheck.errors.ProjectEnumerationError` when the
    file set cannot be enumerated; everything else is recovered.
    """
    cfg = settings or Settings()
    root = Path(root)

    file_set = enumerate_files(root, cfg)
    logger.info("Found %d candidate files under %s", len(file_set.files), root)

    tsconfig = load_tsconfig(root, cfg.tsconfig_path)
    units, skipped = load_units(file_set, cfg)
    return audit_units(units, tsconfig=tsconfig, files_skipped=skipped)


def audit_units(
    units: Sequence[SourceUnit],
    *,
    tsconfig: TsConfig | None = None,
    definitions: DefinitionProvider | None = None,
    files_skipped: int = 0,
) -> AuditResult:
    """Audit already-parsed units, in the order given."""
    context = ResolutionContext(
        constant_table=resolve_constant_table(units),
        definitions=definitions or SymbolIndex(units, tsconfig),
    )

    violations: list[Violation] = []
    call_count = 0
    for unit in units:
        for call_site in scan_call_sites(unit):
            call_count += 1
            entity = classify_entity(call_site.key_argument, POLICY)
            value = extract_stale_time(
                call_site.options_argument, unit, context
            )
            logger.debug(
                "%s %s entity=%s staleTime=%s",
                call_site.location,
                call_site.callee_name,
                entity,
                value,
            )
            violation = validate_call_site(call_site, entity, value, POLICY)
            if violation is not None:
                violations.append(violation)

    logger.info(
        "Audited %d call sites in %d files: %d violation(s)",
        call_count,
        len(units),
        len(violations),
    )
    return AuditResult(
        violations=tuple(violations),
        files_scanned=len(units),
        files_skipped=files_skipped,
        call_sites=call_count,
        constant_table=context.constant_table,
    )
