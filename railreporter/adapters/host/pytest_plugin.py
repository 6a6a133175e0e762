"""pytest host adapter.

Translates pytest's run-test protocol into LifecyclePort signals so the
tracker sees the same start/fail/finish boundaries for every test.

Enable it with::

    pytest -p railreporter.adapters.host.pytest_plugin --testrail

Tests declare the cases they cover with a marker, or drive the tracker
themselves through the ``testrail`` fixture::

    @pytest.mark.testrail(101, 102)
    def test_checkout():
        ...

    def test_refund(testrail):
        with testrail.activity([103], "refund"):
            ...

Signal mapping:
- pytest_sessionstart          -> bundle_will_start
- first test of a new module   -> suite_did_finish (previous), suite_will_start
- pytest_runtest_logstart      -> case_will_start
- failed test report           -> case_did_fail
- failed collection report     -> suite_did_fail
- pytest_runtest_logfinish     -> case_did_finish
- pytest_sessionfinish         -> suite_did_finish, bundle_did_finish
"""

import logging
from typing import Any

import pytest

from railreporter.core.models import CaseId, Failure, ResultStatus, SubmissionReport
from railreporter.core.ports import LifecyclePort
from railreporter.core.session import ReportingSession

logger = logging.getLogger(__name__)

MARKER = "testrail"


def suite_name(nodeid: str) -> str:
    """The module part of a node id, e.g. ``tests/test_cart.py``."""
    return nodeid.split("::", 1)[0]


def marker_case_ids(item: Any) -> list[CaseId]:
    """Collect case ids from every testrail marker on an item, in order."""
    case_ids: list[CaseId] = []
    for marker in item.iter_markers(name=MARKER):
        for arg in marker.args:
            case_id = int(arg)
            if case_id not in case_ids:
                case_ids.append(case_id)
    return case_ids


def failure_from_report(report: Any) -> Failure:
    """Build a Failure from a failed TestReport or CollectReport.

    The crash location is preferred over the test location because it
    points at the failing line.
    """
    reprcrash = getattr(report.longrepr, "reprcrash", None)
    location = getattr(report, "location", None)

    if reprcrash is not None:
        description = reprcrash.message
        file_path = reprcrash.path
        line_number = reprcrash.lineno
    else:
        lines = [line for line in str(report.longreprtext).splitlines() if line.strip()]
        description = lines[-1].strip() if lines else "failed"
        file_path = location[0] if location else None
        line_number = location[1] + 1 if location and location[1] is not None else 0

    when = getattr(report, "when", None)
    if when in ("setup", "teardown"):
        description = f"error in {when}: {description}"

    return Failure(
        test_name=report.nodeid,
        description=description,
        file_path=file_path,
        line_number=line_number,
    )


def skip_comment(report: Any) -> str:
    """Comment for cases left open by a skipped or xfailed test."""
    wasxfail = getattr(report, "wasxfail", None)
    if wasxfail is not None:
        return f"Expected failure: {wasxfail or report.nodeid}"

    reason = report.nodeid
    if isinstance(report.longrepr, tuple) and len(report.longrepr) == 3:
        reason = report.longrepr[2].removeprefix("Skipped: ")
    return f"Skipped: {reason}"


class PytestLifecycleBridge:
    """pytest plugin object feeding a LifecyclePort."""

    def __init__(self, session: ReportingSession, lifecycle: LifecyclePort | None = None):
        # pytest.fail() raises a BaseException; inside an activity it still fails the cases
        if pytest.fail.Exception not in session.failure_exceptions:
            session.failure_exceptions += (pytest.fail.Exception,)
        self.session = session
        self.lifecycle = lifecycle or session.lifecycle
        self.current_suite: str | None = None
        self.report: SubmissionReport | None = None

    def pytest_sessionstart(self, session: Any) -> None:
        self.lifecycle.bundle_will_start()

    def pytest_runtest_logstart(self, nodeid: str, location: Any) -> None:
        suite = suite_name(nodeid)
        if suite != self.current_suite:
            if self.current_suite is not None:
                self.lifecycle.suite_did_finish(self.current_suite)
            self.current_suite = suite
            self.lifecycle.suite_will_start(suite)
        self.lifecycle.case_will_start(nodeid)

    @pytest.hookimpl(tryfirst=True)
    def pytest_runtest_setup(self, item: Any) -> None:
        case_ids = marker_case_ids(item)
        if case_ids:
            self.session.start_testing(*case_ids)

    def pytest_runtest_logreport(self, report: Any) -> None:
        if report.failed:
            self.lifecycle.case_did_fail(failure_from_report(report))
        elif report.skipped:
            self._complete_skipped(report)

    def _complete_skipped(self, report: Any) -> None:
        self.session.complete_started(
            result_if_untested=ResultStatus.BLOCKED,
            comment=skip_comment(report),
        )

    def pytest_collectreport(self, report: Any) -> None:
        if report.failed:
            self.lifecycle.suite_did_fail(failure_from_report(report))

    def pytest_runtest_logfinish(self, nodeid: str, location: Any) -> None:
        self.lifecycle.case_did_finish(nodeid)

    def pytest_sessionfinish(self, session: Any, exitstatus: int) -> None:
        if self.current_suite is not None:
            self.lifecycle.suite_did_finish(self.current_suite)
            self.current_suite = None
        self.report = self.lifecycle.bundle_did_finish()

    def pytest_terminal_summary(self, terminalreporter: Any) -> None:
        terminalreporter.section("TestRail")
        for line in summary_lines(self.report):
            terminalreporter.write_line(line)

    @pytest.fixture
    def testrail(self) -> ReportingSession:
        """The ReportingSession for tracking cases from test code."""
        return self.session


def summary_lines(report: SubmissionReport | None) -> list[str]:
    """Human-readable outcome of a submission pass."""
    if report is None:
        return ["Submitting results is disabled."]

    lines: list[str] = []
    if report.invalid:
        invalid_ids = ", ".join(str(result.case_id) for result in report.invalid)
        lines.append(f"Skipped results for unknown cases: {invalid_ids}")
    if report.run is None and not report.errors:
        lines.append("No results to submit.")
        return lines
    if report.run is not None:
        lines.append(f"Run {report.run.id}: {report.run.name}")
    if report.errors:
        lines.append(f"Submitting test results failed with {len(report.errors)} error(s):")
        for error in report.errors:
            target = "run creation" if error.case_id is None else f"case {error.case_id}"
            lines.append(f"  {target}: {error.message}")
    else:
        lines.append(f"Submitted {len(report.submitted)} test results.")
    return lines


def pytest_addoption(parser: Any) -> None:
    group = parser.getgroup("testrail", "TestRail result reporting")
    group.addoption(
        "--testrail",
        action="store_true",
        default=False,
        help="Track cases and submit results to TestRail",
    )
    group.addoption(
        "--testrail-env-file",
        default=None,
        help="Path to a .env file with TestRail settings",
    )


def pytest_configure(config: Any) -> None:
    config.addinivalue_line(
        "markers", f"{MARKER}(*case_ids): TestRail cases covered by the test"
    )
    if not config.getoption("testrail"):
        return

    from railreporter.config import load_settings
    from railreporter.main import bootstrap, configure_logging

    settings = load_settings(config.getoption("testrail_env_file"))
    configure_logging(settings.log_level, settings.log_format)
    session = bootstrap(settings)
    config.pluginmanager.register(PytestLifecycleBridge(session), "railreporter-bridge")
