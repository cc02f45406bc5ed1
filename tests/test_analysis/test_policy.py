"""Tests for policy validation of a single call site."""

from __future__ import annotations

import pytest

from stalecheck.analysis.call_sites import CallSite, scan_call_sites
from stalecheck.analysis.policy import POLICY, allowed_values, validate_call_site
from stalecheck.constants import ViolationKind
from tests.conftest import parse_units


@pytest.fixture
def call_site() -> CallSite:
    unit = parse_units({"src/hooks/useTasks.ts": "\nuseApiQuery(['tasks']);"})[0]
    (site,) = scan_call_sites(unit)
    return site


def test_policy_table() -> None:
    assert POLICY == {
        "tasks": 120000,
        "subtasks": 120000,
        "labels": 600000,
        "workspaces": 300000,
        "userProfile": 900000,
    }
    assert allowed_values() == {120000, 600000, 300000, 900000}


def test_matching_value_passes(call_site: CallSite) -> None:
    assert validate_call_site(call_site, "tasks", 120000) is None


def test_missing(call_site: CallSite) -> None:
    v = validate_call_site(call_site, "tasks", None)
    assert v is not None
    assert v.kind == ViolationKind.MISSING_STALETIME
    assert v.location == "src/hooks/useTasks.ts:2"
    assert v.detail == (
        "No explicit staleTime resolved for call at src/hooks/useTasks.ts:2"
    )
    assert v.entity == "tasks"


def test_invalid(call_site: CallSite) -> None:
    v = validate_call_site(call_site, "tasks", 60000)
    assert v is not None
    assert v.kind == ViolationKind.INVALID_STALETIME
    assert (v.expected, v.actual) == (120000, 60000)
    assert v.detail == "entity=tasks -> got 60000ms expected 120000ms"


def test_unmapped_with_allowed_value_passes(call_site: CallSite) -> None:
    """An unclassified call only needs some policy value."""
    assert validate_call_site(call_site, None, 900000) is None


def test_unmapped_with_unknown_value(call_site: CallSite) -> None:
    v = validate_call_site(call_site, None, 45000)
    assert v is not None
    assert v.kind == ViolationKind.UNMAPPED_STALETIME
    assert v.entity is None
    assert v.detail == "staleTime 45000ms is not among allowed values"


def test_float_equal_to_policy_value_passes(call_site: CallSite) -> None:
    assert validate_call_site(call_site, "labels", 600000.0) is None


def test_custom_policy(call_site: CallSite) -> None:
    v = validate_call_site(call_site, "tasks", 120000, {"tasks": 1})
    assert v is not None
    assert v.expected == 1
