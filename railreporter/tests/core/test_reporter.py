"""Tests for the RunReporter submission pass.

Covers validation against the catalog, suite grouping, run creation,
sequential result submission with error aggregation, and run naming.
"""

from datetime import date

import pytest

from railreporter.core.catalog import CatalogSnapshot
from railreporter.core.errors import CatalogLookupError
from railreporter.core.models import Case, PendingResult, PlanEntry
from railreporter.core.reporter import RunReporter, format_run_name, split_results
from railreporter.tests.fakes import FakeSubmissionPort, sample_catalog
from railreporter.tests.fakes.catalog import API_USER


@pytest.fixture
def catalog() -> CatalogSnapshot:
    return sample_catalog()


@pytest.fixture
def submission() -> FakeSubmissionPort:
    return FakeSubmissionPort()


@pytest.fixture
def reporter(submission: FakeSubmissionPort, catalog: CatalogSnapshot) -> RunReporter:
    return RunReporter(
        submission=submission,
        catalog=catalog,
        project_id=1,
        suite_id=1,
        username=API_USER,
        run_name="Nightly",
    )


def result(case_id: int, status_id: int = 1, comment: str | None = None) -> PendingResult:
    return PendingResult(case_id=case_id, assignedto_id=7, status_id=status_id, comment=comment)


# ============================================================================
# Validation
# ============================================================================


class TestSplitResults:
    def test_partition_is_exhaustive_and_disjoint(self, catalog: CatalogSnapshot) -> None:
        results = [result(101), result(99), result(102), result(5)]

        valid, invalid = split_results(results, catalog)

        assert [r.case_id for r in valid] == [101, 102]
        assert [r.case_id for r in invalid] == [99, 5]
        assert len(valid) + len(invalid) == len(results)

    def test_empty_input(self, catalog: CatalogSnapshot) -> None:
        assert split_results([], catalog) == ([], [])


# ============================================================================
# Grouping
# ============================================================================


class TestPlanEntries:
    def test_groups_cases_by_suite(self, reporter: RunReporter) -> None:
        entries = reporter.plan_entries([result(101), result(201), result(102)])
        assert entries == [
            PlanEntry(suite_id=1, case_ids=(101, 102)),
            PlanEntry(suite_id=2, case_ids=(201,)),
        ]

    def test_deduplicates_cases(self, reporter: RunReporter) -> None:
        entries = reporter.plan_entries([result(101), result(101)])
        assert entries == [PlanEntry(suite_id=1, case_ids=(101,))]

    def test_include_all_lists_every_suite(self, reporter: RunReporter) -> None:
        reporter.include_all_cases = True
        entries = reporter.plan_entries([result(101)])
        assert entries == [
            PlanEntry(suite_id=1, include_all=True),
            PlanEntry(suite_id=2, include_all=True),
        ]

    def test_case_without_suite_is_fatal(self, submission: FakeSubmissionPort) -> None:
        base = sample_catalog()
        catalog = CatalogSnapshot(
            project=base.project,
            suites=base.suites,
            cases=[Case(id=301, title="Orphan", section_id=None, suite_id=None)],
            statuses=base.statuses,
            users=base.users,
        )
        reporter = RunReporter(submission, catalog, 1, 1, API_USER)
        with pytest.raises(CatalogLookupError, match="does not have a suite"):
            reporter.plan_entries([result(301)])

    def test_unknown_suite_is_fatal(self, submission: FakeSubmissionPort) -> None:
        base = sample_catalog()
        catalog = CatalogSnapshot(
            project=base.project,
            suites=base.suites,
            cases=[Case(id=301, title="Moved", section_id=None, suite_id=9)],
            statuses=base.statuses,
            users=base.users,
        )
        reporter = RunReporter(submission, catalog, 1, 1, API_USER)
        with pytest.raises(CatalogLookupError, match="suite 9"):
            reporter.plan_entries([result(301)])


# ============================================================================
# Submission pass
# ============================================================================


class TestSubmit:
    @pytest.mark.asyncio
    async def test_creates_one_run_and_submits_each_result(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        report = await reporter.submit([result(101), result(102, status_id=5)])

        assert submission.created_runs == [
            {
                "project_id": 1,
                "suite_id": 1,
                "case_ids": [101, 102],
                "assignedto_id": 7,
                "name": "Nightly",
                "include_all": False,
            }
        ]
        assert submission.add_result_calls == [(101, 42), (102, 42)]
        assert report is not None
        assert report.succeeded
        assert report.run is not None and report.run.id == 42
        assert [r.case_id for r in report.submitted] == [101, 102]

    @pytest.mark.asyncio
    async def test_invalid_cases_are_not_submitted(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        report = await reporter.submit([result(101), result(99, comment="stale")])

        assert report is not None
        assert [r.case_id for r in report.invalid] == [99]
        assert submission.created_runs[0]["case_ids"] == [101]
        assert all(case_id != 99 for case_id, _ in submission.add_result_calls)

    @pytest.mark.asyncio
    async def test_invalid_cases_are_logged_as_warning(
        self, reporter: RunReporter, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING"):
            await reporter.submit([result(101), result(99, status_id=5, comment="stale")])
        assert "99: failed - stale" in caplog.text

    @pytest.mark.asyncio
    async def test_no_valid_results_skips_remote_calls(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        report = await reporter.submit([result(99)])

        assert report is not None
        assert report.run is None
        assert report.succeeded
        assert submission.created_runs == []
        assert submission.add_result_calls == []

    @pytest.mark.asyncio
    async def test_one_failed_result_does_not_stop_the_rest(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        submission.fail_for(102)

        report = await reporter.submit([result(101), result(102), result(103)])

        assert submission.add_result_calls == [(101, 42), (102, 42), (103, 42)]
        assert report is not None
        assert not report.succeeded
        assert [error.case_id for error in report.errors] == [102]
        assert "C102" in report.errors[0].message
        assert [r.case_id for r in report.submitted] == [101, 103]

    @pytest.mark.asyncio
    async def test_run_creation_failure_aborts_pass(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        submission.fail_run_creation = True

        report = await reporter.submit([result(101), result(102)])

        assert report is not None
        assert report.run is None
        assert len(report.errors) == 1
        assert report.errors[0].case_id is None
        assert "403" in report.errors[0].message
        assert submission.add_result_calls == []

    @pytest.mark.asyncio
    async def test_disabled_submission_returns_none(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        reporter.submit_results = False

        assert await reporter.submit([result(101)]) is None
        assert submission.created_runs == []
        assert submission.close_call_count == 0

    @pytest.mark.asyncio
    async def test_submission_port_closed_after_pass(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        submission.fail_for(101)
        await reporter.submit([result(101)])
        assert submission.close_call_count == 1

    @pytest.mark.asyncio
    async def test_include_all_flag_is_forwarded(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        reporter.include_all_cases = True
        report = await reporter.submit([result(101)])

        assert submission.created_runs[0]["include_all"] is True
        assert report is not None
        assert {entry.suite_id for entry in report.entries} == {1, 2}

    @pytest.mark.asyncio
    async def test_close_flag_leaves_run_open(
        self, reporter: RunReporter, caplog: pytest.LogCaptureFixture
    ) -> None:
        reporter.close_run_after_submit = True
        with caplog.at_level("INFO"):
            report = await reporter.submit([result(101)])
        assert report is not None and report.succeeded
        assert "left open" in caplog.text


# ============================================================================
# Run naming
# ============================================================================


class TestRunName:
    def test_static_name(self, reporter: RunReporter) -> None:
        assert reporter.resolve_run_name() == "Nightly"

    @pytest.mark.asyncio
    async def test_deferred_name_resolved_at_submit(
        self, reporter: RunReporter, submission: FakeSubmissionPort
    ) -> None:
        calls: list[str] = []

        def name() -> str:
            calls.append("resolved")
            return "Build 512"

        reporter.run_name = name
        assert calls == []

        await reporter.submit([result(101)])

        assert calls == ["resolved"]
        assert submission.created_runs[0]["name"] == "Build 512"

    def test_format_run_name_joins_parts(self) -> None:
        name = format_run_name(
            app_name="Storefront",
            device="ci-runner",
            os_version="3.12",
            branch_name="main",
            build_number="512",
            commit="1a2b3c4",
            today=date(2026, 10, 19),
        )
        assert name == "Storefront - Python - ci-runner (3.12) - main - 512 - 1a2b3c4 - 19/10/2026"

    def test_format_run_name_skips_missing_parts(self) -> None:
        name = format_run_name(
            app_name="Storefront",
            device="ci-runner",
            os_version="3.12",
            today=date(2026, 1, 2),
        )
        assert name == "Storefront - Python - ci-runner (3.12) - 02/01/2026"
