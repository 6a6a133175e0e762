"""Host lifecycle dispatch.

Maps lifecycle signals from the test-execution host onto tracker
operations and triggers the submission pass when the session ends.
"""

import asyncio
import logging
import threading

from .models import Failure, LifecycleEvent, LifecycleSignal, SubmissionReport
from .ports import LifecyclePort
from .reporter import RunReporter
from .tracker import ResultTracker

logger = logging.getLogger(__name__)


def _require_failure(event: LifecycleEvent) -> Failure:
    if event.failure is None:
        raise ValueError(f"{event.signal.value} requires a failure")
    return event.failure


class HostLifecycleAdapter(LifecyclePort):
    """Implements LifecyclePort on top of a ResultTracker.

    Every start and finish boundary drains the started collection, so
    started results never leak from one test into the next. Failures
    taint every case open at the time.

    Signals may arrive from background threads; each one is applied
    under ``lock`` before the next is accepted. ReportingSession takes
    the same lock for direct tracker calls.
    """

    def __init__(self, tracker: ResultTracker, reporter: RunReporter):
        self.tracker = tracker
        self.reporter = reporter
        self.lock = threading.Lock()

    def bundle_will_start(self) -> None:
        with self.lock:
            self.tracker.complete_all_tests()

    def suite_will_start(self, name: str) -> None:
        with self.lock:
            self.tracker.complete_all_tests()

    def case_will_start(self, name: str) -> None:
        with self.lock:
            self.tracker.complete_all_tests()

    def case_did_fail(self, failure: Failure) -> None:
        with self.lock:
            self.tracker.record_failure(failure)

    def suite_did_fail(self, failure: Failure) -> None:
        with self.lock:
            self.tracker.record_failure(failure)

    def case_did_finish(self, name: str) -> None:
        with self.lock:
            self.tracker.complete_all_tests()

    def suite_did_finish(self, name: str) -> None:
        with self.lock:
            self.tracker.complete_all_tests()

    def bundle_did_finish(self) -> SubmissionReport | None:
        """Complete open cases and run the submission pass.

        Blocks until every remote call has finished. Must be called from
        synchronous code: the pass runs on its own event loop.
        """
        with self.lock:
            self.tracker.complete_all_tests()
            if not self.reporter.submit_results:
                logger.info("Submitting results is disabled.")
                return None
            results = self.tracker.drain_completed()
            return asyncio.run(self.reporter.submit(results))

    def handle(self, event: LifecycleEvent) -> SubmissionReport | None:
        """Apply a typed lifecycle event.

        Returns the submission report for BUNDLE_DID_FINISH, None otherwise.
        """
        signal = event.signal
        if signal is LifecycleSignal.BUNDLE_WILL_START:
            self.bundle_will_start()
        elif signal is LifecycleSignal.SUITE_WILL_START:
            self.suite_will_start(event.name)
        elif signal is LifecycleSignal.CASE_WILL_START:
            self.case_will_start(event.name)
        elif signal is LifecycleSignal.CASE_DID_FAIL:
            self.case_did_fail(_require_failure(event))
        elif signal is LifecycleSignal.SUITE_DID_FAIL:
            self.suite_did_fail(_require_failure(event))
        elif signal is LifecycleSignal.CASE_DID_FINISH:
            self.case_did_finish(event.name)
        elif signal is LifecycleSignal.SUITE_DID_FINISH:
            self.suite_did_finish(event.name)
        elif signal is LifecycleSignal.BUNDLE_DID_FINISH:
            return self.bundle_did_finish()
        else:
            raise ValueError(f"Unknown lifecycle signal: {signal}")
        return None
