"""The staleTime policy and the rules that compare call sites against it."""

from __future__ import annotations

from collections.abc import Mapping

from stalecheck.analysis.arithmetic import Number
from stalecheck.analysis.call_sites import CallSite
from stalecheck.analysis.schemas import Violation
from stalecheck.constants import ViolationKind

# entity → required staleTime in milliseconds; key order is match order
POLICY: dict[str, int] = {
    "tasks": 120_000,
    "subtasks": 120_000,
    "labels": 600_000,
    "workspaces": 300_000,
    "userProfile": 900_000,
}


def allowed_values(policy: Mapping[str, Number] = POLICY) -> frozenset[Number]:
    return frozenset(policy.values())


def validate_call_site(
    call_site: CallSite,
    entity: str | None,
    value: Number | None,
    policy: Mapping[str, Number] = POLICY,
) -> Violation | None:
    """Check one call site; ``None`` means it passes.

    An unclassified call passes as long as its value is one of the
    policy's values, whichever entity that value belongs to.
    """
    location = call_site.location

    if value is None:
        return Violation(
            file=call_site.file,
            line=call_site.line,
            location=location,
            kind=ViolationKind.MISSING_STALETIME,
            detail=f"No explicit staleTime resolved for call at {location}",
            entity=entity,
        )

    if entity is not None and entity in policy:
        expected = policy[entity]
        if value == expected:
            return None
        return Violation(
            file=call_site.file,
            line=call_site.line,
            location=location,
            kind=ViolationKind.INVALID_STALETIME,
            detail=f"entity={entity} -> got {value}ms expected {expected}ms",
            entity=entity,
            expected=expected,
            actual=value,
        )

    if value in allowed_values(policy):
        return None
    return Violation(
        file=call_site.file,
        line=call_site.line,
        location=location,
        kind=ViolationKind.UNMAPPED_STALETIME,
        detail=f"staleTime {value}ms is not among allowed values",
        actual=value,
    )
