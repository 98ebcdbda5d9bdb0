"""
Scenario records for the host group form conformance run.

Everything here is plain data: scenarios are immutable inputs, results are
what the runner reports back. State that scenarios share (which group the
update scenarios currently target, the user group whose rights are checked)
lives in an explicit ``FixtureContext`` rather than in module globals.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class AssertionMismatch(AssertionError):
    """The application diverged from what a scenario expects."""


class Operation(str, Enum):
    LAYOUT = "layout"
    CREATE = "create"
    UPDATE = "update"
    CLONE = "clone"
    DELETE = "delete"
    CANCEL = "cancel"
    SUBGROUPS = "subgroups"


class Expected(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


def _frozen(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Scenario:
    """One exercise of a form operation with its expected outcome.

    ``fields`` maps form labels to values. ``error`` is the detail message a
    failure must show; ``message`` overrides the default failure title.
    ``name`` is the existing group an update/clone/delete/cancel opens, or
    whose edit form a layout scenario inspects. ``discovered`` marks a group
    created by an LLD rule.
    """
    operation: Operation
    expected: Expected = Expected.SUCCESS
    fields: Mapping[str, Any] = field(default_factory=dict)
    error: str | None = None
    message: str | None = None
    name: str | None = None
    trim: bool = False
    discovered: bool = False
    action: str | None = None  # cancel scenarios: Add / Update / Clone / Delete

    def __post_init__(self):
        object.__setattr__(self, "fields", _frozen(self.fields))
        if self.expected is Expected.FAILURE and not self.error:
            raise ValueError("failure scenarios need an expected error message")

    def get(self, label: str, default: str = "") -> Any:
        """Return a field value, or *default* when the scenario leaves it unset."""
        return self.fields.get(label, default)

    @property
    def label(self) -> str:
        target = self.action or self.name or self.get("Group name", None)
        return f"{self.operation.value}:{self.expected.value}:{target!r}"


@dataclass(frozen=True)
class SubgroupScenario:
    """Create a group (optional), apply permissions to subgroups, check the result.

    ``groups_after`` lists (host group label, permission) rows and
    ``tags_after`` lists (host group, tags) rows, both in display order.
    """
    apply_permissions: str
    groups_after: tuple[tuple[str, str], ...]
    tags_after: tuple[tuple[str, str], ...]
    create: str | None = None
    open_form: str | None = None

    operation = Operation.SUBGROUPS

    @property
    def label(self) -> str:
        return f"subgroups:{self.apply_permissions!r}"


@dataclass
class FixtureContext:
    """Mutable state carried from one scenario to the next."""
    update_group: str
    delete_group: str
    user_groupid: int | None = None

    @classmethod
    def from_seed(cls, seeded: dict) -> "FixtureContext":
        return cls(
            update_group=seeded["update_group"],
            delete_group=seeded["delete_group"],
            user_groupid=seeded.get("user_groupid"),
        )


@dataclass(frozen=True)
class FormResult:
    """What the form showed after submit: outcome, message title and details."""
    outcome: Outcome
    title: str = ""
    details: tuple[str, ...] = ()


@dataclass
class ScenarioResult:
    scenario: Scenario | SubgroupScenario
    passed: bool
    reason: str = ""
    errored: bool = False

    def to_dict(self) -> dict:
        return {
            "scenario": self.scenario.label,
            "passed": self.passed,
            "reason": self.reason,
            "errored": self.errored,
        }


@dataclass
class ConformanceReport:
    results: list[ScenarioResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed and not r.errored)

    @property
    def errored(self) -> int:
        return sum(1 for r in self.results if r.errored)

    @property
    def ok(self) -> bool:
        return all(r.passed for r in self.results)

    def extend(self, other: "ConformanceReport") -> None:
        self.results.extend(other.results)

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "failed": self.failed,
            "errored": self.errored,
            "results": [r.to_dict() for r in self.results],
        }
