"""Public tracking API used from test code.

A ReportingSession is built once by the composition root and handed to
whatever code needs to report results (a pytest fixture, a test base
class, a custom runner).
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from .catalog import CatalogSnapshot
from .lifecycle import HostLifecycleAdapter
from .models import CaseId, ResultStatus
from .tracker import ResultTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReportingSession:
    """Starts and completes cases on behalf of test code.

    An exception leaving an activity decides the status of its untested
    cases: any Exception, or a type listed in failure_exceptions, fails
    them. Other BaseExceptions (interrupts, exits, host skip signals)
    leave them blocked.
    """

    def __init__(self, catalog: CatalogSnapshot, lifecycle: HostLifecycleAdapter):
        self.catalog = catalog
        self.lifecycle = lifecycle
        self.failure_exceptions: tuple[type[BaseException], ...] = ()

    @property
    def tracker(self) -> ResultTracker:
        return self.lifecycle.tracker

    def log_test(
        self,
        case_ids: Iterable[CaseId],
        with_case_id: bool = True,
        with_project_name: bool = False,
        with_suite_name: bool = True,
        with_section_names: bool = True,
    ) -> list[str]:
        """Log the title of each case and return the titles."""
        titles = self.catalog.case_titles(
            case_ids,
            with_case_id=with_case_id,
            with_project_name=with_project_name,
            with_suite_name=with_suite_name,
            with_section_names=with_section_names,
        )
        for title in titles:
            logger.info(title)
        return titles

    def start_testing(self, *case_ids: CaseId) -> None:
        with self.lifecycle.lock:
            self.tracker.start_testing(case_ids)

    def complete_testing(
        self,
        *case_ids: CaseId,
        result_if_untested: ResultStatus = ResultStatus.PASSED,
        comment: str | None = None,
    ) -> None:
        with self.lifecycle.lock:
            self.tracker.complete_testing(
                case_ids, result_if_untested=result_if_untested, comment=comment
            )

    def complete_started(
        self,
        result_if_untested: ResultStatus = ResultStatus.PASSED,
        comment: str | None = None,
    ) -> list[CaseId]:
        """Complete every started case and return their ids."""
        with self.lifecycle.lock:
            case_ids = [result.case_id for result in self.tracker.started]
            self.tracker.complete_testing(
                case_ids, result_if_untested=result_if_untested, comment=comment
            )
        return case_ids

    def exception_status(self, error: BaseException) -> ResultStatus:
        if isinstance(error, (Exception, *self.failure_exceptions)):
            return ResultStatus.FAILED
        return ResultStatus.BLOCKED

    def log_and_start_testing(self, *case_ids: CaseId) -> None:
        self.log_test(case_ids)
        self.start_testing(*case_ids)

    def activity_name(self, case_ids: Iterable[CaseId], name: str | None = None) -> str:
        titles = " | ".join(self.catalog.case_titles(case_ids))
        if name:
            return f"{name}: {titles}"
        return titles

    @contextmanager
    def activity(
        self, case_ids: Iterable[CaseId], name: str | None = None
    ) -> Iterator[str]:
        """Track case_ids for the duration of a with block.

        The cases are completed on every exit path. If the block raises,
        cases still untested are completed with exception_status(error)
        and the exception appended as a comment, and the exception
        propagates.

        Yields:
            The activity name built from name and the case titles.
        """
        case_ids = tuple(case_ids)
        activity_name = self.activity_name(case_ids, name)
        logger.info(f"Activity started: {activity_name}")
        self.start_testing(*case_ids)
        try:
            yield activity_name
        except BaseException as e:
            self.complete_testing(
                *case_ids,
                result_if_untested=self.exception_status(e),
                comment=f"{type(e).__name__}: {e}",
            )
            raise
        else:
            self.complete_testing(*case_ids)

    def run_activity(
        self,
        case_ids: Iterable[CaseId],
        block: Callable[[str], T],
        name: str | None = None,
    ) -> T:
        """Call block(activity_name) while tracking case_ids and return its result."""
        with self.activity(case_ids, name) as activity_name:
            return block(activity_name)
