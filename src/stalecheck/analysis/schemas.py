"""Pydantic models for audit output."""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from stalecheck.constants import ExitCode, ViolationKind


class ConstantTable(BaseModel):
    """The project's shared ``STALE_TIMES`` object, shallow-evaluated."""

    model_config = ConfigDict(frozen=True)

    name: str
    file: str
    entries: dict[str, int | float] = Field(
        default_factory=lambda: dict[str, int | float]()
    )


class Violation(BaseModel):
    """A monitored call site that failed the policy."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    location: str  # file:line
    kind: ViolationKind
    detail: str
    entity: str | None = None
    expected: int | float | None = None
    actual: int | float | None = None


class AuditResult(BaseModel):
    """Everything one run produced, in discovery order."""

    model_config = ConfigDict(frozen=True)

    violations: tuple[Violation, ...] = ()
    files_scanned: int = 0
    files_skipped: int = 0
    call_sites: int = 0
    constant_table: ConstantTable | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.VIOLATIONS if self.violations else ExitCode.SUCCESS
