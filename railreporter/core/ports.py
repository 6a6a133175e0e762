"""Port interfaces for the railreporter result tracker.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - CatalogPort: Fetch the project catalog snapshot
   - SubmissionPort: Create runs and attach results

2. **Driving Ports** (adapters/external systems call into core)
   - LifecyclePort: Lifecycle signals from the test-execution host
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from .catalog import CatalogSnapshot
from .models import CaseId, Failure, PendingResult, Run, SubmissionReport


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class CatalogPort(ABC):
    """Port for materializing the remote project as a CatalogSnapshot.

    The fetch happens once, at startup. Everything the tracker and the
    reporter look up afterwards comes from the returned snapshot.
    """

    @abstractmethod
    async def fetch_catalog(self, project_id: int) -> CatalogSnapshot:
        """Fetch suites, sections, cases, statuses and users of a project.

        Args:
            project_id: Identifier of the remote project.

        Returns:
            A fully populated, read-only snapshot.

        Raises:
            RemoteError: If the remote service cannot be reached or rejects
                any request. Callers treat this as fatal.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources held by the adapter."""


class SubmissionPort(ABC):
    """Port for reporting results to the remote service.

    Each call is awaited by the reporter before the next one is issued,
    so implementations never see concurrent calls.
    """

    @abstractmethod
    async def create_run(
        self,
        project_id: int,
        suite_id: int,
        case_ids: Sequence[CaseId],
        assignedto_id: int,
        name: str,
        include_all: bool = False,
    ) -> Run:
        """Create a run holding the given cases.

        Args:
            project_id: Project to create the run in.
            suite_id: Suite the run belongs to.
            case_ids: Cases to include when include_all is False.
            assignedto_id: User the run is assigned to.
            name: Display name of the run.
            include_all: Include every case of the suite.

        Returns:
            The created Run.

        Raises:
            Exception: If the run could not be created.
        """

    @abstractmethod
    async def add_result(self, result: PendingResult, run_id: int) -> dict[str, Any]:
        """Attach a result to its case within a run.

        Returns:
            The remote representation of the stored result.

        Raises:
            Exception: If the result could not be stored.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources held by the adapter."""


# ============================================================================
# DRIVING PORTS (External systems call into core)
# ============================================================================


class LifecyclePort(ABC):
    """Port receiving lifecycle signals from a test-execution host.

    Hosts (pytest, a custom runner, an event stream) call these methods
    in the order the events happen. Every call is applied before the
    next one is accepted.
    """

    @abstractmethod
    def bundle_will_start(self) -> None:
        """The whole test session is about to start."""

    @abstractmethod
    def suite_will_start(self, name: str) -> None:
        """A suite of tests is about to start."""

    @abstractmethod
    def case_will_start(self, name: str) -> None:
        """A single test is about to start."""

    @abstractmethod
    def case_did_fail(self, failure: Failure) -> None:
        """A test reported a failure."""

    @abstractmethod
    def suite_did_fail(self, failure: Failure) -> None:
        """A suite reported a failure outside any single test."""

    @abstractmethod
    def case_did_finish(self, name: str) -> None:
        """A single test finished."""

    @abstractmethod
    def suite_did_finish(self, name: str) -> None:
        """A suite finished."""

    @abstractmethod
    def bundle_did_finish(self) -> SubmissionReport | None:
        """The whole test session finished.

        Returns:
            The submission report, or None if submission is disabled.
        """
