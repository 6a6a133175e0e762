"""Domain models for the railreporter result tracker.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias

CaseId: TypeAlias = int


class ResultStatus(Enum):
    """Outcome states a result can be reported with.

    Values are the TestRail status names. They are resolved to remote
    status identifiers through the catalog snapshot whenever needed.
    """

    PASSED = "passed"
    BLOCKED = "blocked"
    UNTESTED = "untested"
    RETEST = "retest"
    FAILED = "failed"


@dataclass(frozen=True)
class Project:
    """A TestRail project."""

    id: int
    name: str


@dataclass(frozen=True)
class Suite:
    """A named grouping of cases."""

    id: int
    name: str
    project_id: int


@dataclass(frozen=True)
class Section:
    """A folder of cases inside a suite. Sections nest via parent_id."""

    id: int
    name: str
    suite_id: int
    parent_id: int | None = None


@dataclass(frozen=True)
class Case:
    """A single test case in the catalog."""

    id: CaseId
    title: str
    section_id: int | None
    suite_id: int | None


@dataclass(frozen=True)
class Status:
    """A remote result status."""

    id: int
    name: str
    label: str = ""


@dataclass(frozen=True)
class User:
    """A TestRail user account."""

    id: int
    name: str
    email: str


@dataclass(frozen=True)
class Run:
    """A remote run created to hold submitted results."""

    id: int
    name: str
    suite_id: int | None
    url: str = ""


@dataclass
class PendingResult:
    """A result collected for one case, awaiting submission.

    Mutable so the tracker can update status and comment while the
    case is in flight.
    """

    case_id: CaseId
    assignedto_id: int
    status_id: int
    comment: str | None = None
    elapsed: str | None = None
    defects: str | None = None
    version: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)

    def append_comment(self, text: str) -> None:
        """Append text to the comment, newline-separated."""
        if self.comment is None:
            self.comment = text
        else:
            self.comment += f"\n{text}"


@dataclass(frozen=True)
class Failure:
    """A failure reported by the host while cases are open."""

    test_name: str
    description: str
    file_path: str | None
    line_number: int

    @property
    def comment(self) -> str:
        return (
            f"Failure: {self.test_name}:{self.file_path or ''}:"
            f"{self.line_number}: {self.description}"
        )


@dataclass(frozen=True)
class PlanEntry:
    """Cases of one suite included in a submission pass."""

    suite_id: int
    case_ids: tuple[CaseId, ...] = ()
    include_all: bool = False


@dataclass(frozen=True)
class SubmissionError:
    """A remote failure recorded during a submission pass.

    case_id is None when the failure happened while creating the run.
    """

    case_id: CaseId | None
    message: str


@dataclass(frozen=True)
class SubmissionReport:
    """Summary of a submission pass."""

    run: Run | None
    submitted: tuple[PendingResult, ...] = ()
    invalid: tuple[PendingResult, ...] = ()
    errors: tuple[SubmissionError, ...] = ()
    entries: tuple[PlanEntry, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.errors


class LifecycleSignal(Enum):
    """Lifecycle signals emitted by a test-execution host."""

    BUNDLE_WILL_START = "bundle_will_start"
    SUITE_WILL_START = "suite_will_start"
    CASE_WILL_START = "case_will_start"
    CASE_DID_FAIL = "case_did_fail"
    SUITE_DID_FAIL = "suite_did_fail"
    CASE_DID_FINISH = "case_did_finish"
    SUITE_DID_FINISH = "suite_did_finish"
    BUNDLE_DID_FINISH = "bundle_did_finish"


@dataclass(frozen=True)
class LifecycleEvent:
    """A typed lifecycle signal with its identifying payload."""

    signal: LifecycleSignal
    name: str = ""
    failure: Failure | None = None

    def __post_init__(self) -> None:
        """Failure signals must carry a failure."""
        failing = {LifecycleSignal.CASE_DID_FAIL, LifecycleSignal.SUITE_DID_FAIL}
        if self.signal in failing and self.failure is None:
            raise ValueError(f"{self.signal.value} requires a failure")
