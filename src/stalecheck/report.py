"""Render an :class:`AuditResult` for humans or machines."""

from __future__ import annotations

from typing import TextIO

from stalecheck.analysis.schemas import AuditResult
from stalecheck.constants import ReportFormat

OK_MESSAGE = "OK: No staleTime violations found."


def render_text(result: AuditResult) -> str:
    """Plain-text report, one block per violation."""
    if not result.violations:
        return OK_MESSAGE

    lines = [f"FOUND {len(result.violations)} staleTime violation(s):"]
    for v in result.violations:
        lines.append(f"- {v.kind} @ {v.location}")
        lines.append(f"  file: {v.file}")
        lines.append(f"  detail: {v.detail}")
        if v.entity:
            lines.append(f"  entity: {v.entity}")
    return "\n".join(lines)


def render_json(result: AuditResult) -> str:
    return result.model_dump_json(indent=2)


def write_report(
    result: AuditResult,
    fmt: ReportFormat,
    *,
    stdout: TextIO,
    stderr: TextIO,
) -> None:
    """Write the report to the right stream.

    Text reports go to stdout when clean and to stderr otherwise; JSON
    always goes to stdout.
    """
    if fmt == ReportFormat.JSON:
        print(render_json(result), file=stdout)
        return
    stream = stderr if result.violations else stdout
    print(render_text(result), file=stream)
