"""Result lifecycle tracking.

This module implements the started/completed state machine that records
which cases are in flight, captures failures while they run, and
finalizes their status once they complete.

State Transitions (per case):
    untracked -> started     (start_testing)
    started   -> completed   (complete_testing, complete_all_tests)

A case is never started twice, never restarted after completion, and
never completed without being started. Violations raise UsageError
subclasses; they are programmer errors and are not recovered from.
"""

import logging
from collections.abc import Iterable

from .catalog import CatalogSnapshot
from .errors import CaseNotStartedError, DuplicateCaseError
from .models import CaseId, Failure, PendingResult, ResultStatus

logger = logging.getLogger(__name__)


class ResultTracker:
    """Owns the started and completed result collections.

    Not safe for unsynchronized concurrent use. HostLifecycleAdapter
    serializes every mutation.
    """

    def __init__(self, catalog: CatalogSnapshot, username: str):
        """Initialize the tracker.

        Args:
            catalog: Snapshot used to resolve statuses and the assignee.
            username: Email of the API principal; results are assigned
                to the catalog user with this email.
        """
        self.catalog = catalog
        self.username = username
        self._started: dict[CaseId, PendingResult] = {}
        self._completed: list[PendingResult] = []
        self._completed_ids: set[CaseId] = set()

    @property
    def started(self) -> tuple[PendingResult, ...]:
        """Results whose testing is in progress, in start order."""
        return tuple(self._started.values())

    @property
    def completed(self) -> tuple[PendingResult, ...]:
        """Results awaiting submission, in completion order."""
        return tuple(self._completed)

    def _status_id(self, status: ResultStatus) -> int:
        return self.catalog.status_named(status.value).id

    def _new_result(self, case_id: CaseId) -> PendingResult:
        assignee = self.catalog.user_with_email(self.username)
        return PendingResult(
            case_id=case_id,
            assignedto_id=assignee.id,
            status_id=self._status_id(ResultStatus.UNTESTED),
        )

    def start_testing(self, case_ids: Iterable[CaseId]) -> None:
        """Start testing one or more cases.

        Adds an untested result per case to the started collection. If any
        failure is recorded before a case is completed, that case is
        marked failed.

        Every start must be balanced by a completion, either explicitly via
        complete_testing or implicitly via complete_all_tests.

        Raises:
            DuplicateCaseError: If a case is already started, already
                completed, or listed more than once. Nothing is started.
        """
        case_ids = list(case_ids)
        requested: set[CaseId] = set()
        for case_id in case_ids:
            if case_id in self._started or case_id in requested:
                raise DuplicateCaseError(
                    f"You cannot start case {case_id} because it has already been started."
                )
            if case_id in self._completed_ids:
                raise DuplicateCaseError(
                    f"You cannot start case {case_id} because it has already been completed."
                )
            requested.add(case_id)

        for case_id in case_ids:
            self._started[case_id] = self._new_result(case_id)
            logger.debug(f"Started testing case {case_id}")

    def record_failure(self, failure: Failure) -> None:
        """Mark every started result failed and append the failure comment.

        The host cannot attribute a failure to one case among several
        open ones, so all of them are tainted.
        """
        if not self._started:
            logger.debug(f"Failure outside of tracked cases: {failure.comment}")
            return

        failed_id = self._status_id(ResultStatus.FAILED)
        for result in self._started.values():
            result.status_id = failed_id
            result.append_comment(failure.comment)
        logger.debug(
            f"Recorded failure against {len(self._started)} started case(s): "
            f"{failure.comment}"
        )

    def complete_testing(
        self,
        case_ids: Iterable[CaseId],
        result_if_untested: ResultStatus = ResultStatus.PASSED,
        comment: str | None = None,
    ) -> None:
        """Complete testing of one or more cases.

        1. Removes them from the started collection.
        2. Sets their status to result_if_untested if they are still
           untested. Any other status, such as a recorded failure, wins.
        3. Appends comment.
        4. Appends them to the completed collection in call order.

        Raises:
            CaseNotStartedError: If a case is not currently started or is
                listed more than once. Nothing is completed.
        """
        case_ids = list(case_ids)
        requested: set[CaseId] = set()
        for case_id in case_ids:
            if case_id not in self._started or case_id in requested:
                raise CaseNotStartedError(
                    f"You cannot complete case {case_id} because it has not been started."
                )
            requested.add(case_id)

        if not case_ids:
            return

        status_id = self._status_id(result_if_untested)
        untested_id = self._status_id(ResultStatus.UNTESTED)

        for case_id in case_ids:
            result = self._started.pop(case_id)
            if result.status_id == untested_id:
                result.status_id = status_id
            if comment is not None:
                result.append_comment(comment)
            self._completed.append(result)
            self._completed_ids.add(case_id)
            logger.debug(f"Completed testing case {case_id}")

    def complete_all_tests(self) -> None:
        """Complete every started case with default arguments."""
        self.complete_testing(list(self._started))

    def drain_completed(self) -> list[PendingResult]:
        """Remove and return all completed results.

        Drained cases still count as completed and cannot be started again.
        """
        drained, self._completed = self._completed, []
        return drained
