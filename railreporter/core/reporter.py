"""Submission of completed results to the remote service.

This module reduces the completed results of a test session into one
run creation plus one result submission per case, collecting every
remote error along the way.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import date

from .catalog import CatalogSnapshot
from .errors import CatalogLookupError
from .models import (
    PendingResult,
    PlanEntry,
    Run,
    SubmissionError,
    SubmissionReport,
)
from .ports import SubmissionPort

logger = logging.getLogger(__name__)

RunName = str | Callable[[], str]


def format_run_name(
    app_name: str,
    device: str,
    os_version: str,
    branch_name: str | None = None,
    build_number: str | None = None,
    commit: str | None = None,
    today: date | None = None,
) -> str:
    """Build a run name from the build environment.

    Empty parts are skipped. Example:
    ``Shop - Python - ci-runner (3.12) - main - 512 - 1a2b3c4 - 19/10/2026``
    """
    today = today or date.today()
    parts = [
        app_name,
        "Python",
        f"{device} ({os_version})",
        branch_name,
        build_number,
        commit,
        today.strftime("%d/%m/%Y"),
    ]
    return " - ".join(part for part in parts if part)


def split_results(
    results: Sequence[PendingResult], catalog: CatalogSnapshot
) -> tuple[list[PendingResult], list[PendingResult]]:
    """Split results into those whose case exists in the catalog and the rest.

    Useful to identify results created with invalid or stale case ids.
    Every result lands in exactly one of the two lists, order preserved.
    """
    valid: list[PendingResult] = []
    invalid: list[PendingResult] = []
    for result in results:
        if catalog.has_case(result.case_id):
            valid.append(result)
        else:
            invalid.append(result)
    return valid, invalid


class RunReporter:
    """Reports completed results as a single remote run.

    The run name is either a fixed string or a callable resolved when
    the submission pass starts, so it can depend on information that
    only exists at the end of the session.
    """

    def __init__(
        self,
        submission: SubmissionPort,
        catalog: CatalogSnapshot,
        project_id: int,
        suite_id: int,
        username: str,
        run_name: RunName = "Test Run",
        submit_results: bool = True,
        close_run_after_submit: bool = True,
        include_all_cases: bool = False,
    ):
        self.submission = submission
        self.catalog = catalog
        self.project_id = project_id
        self.suite_id = suite_id
        self.username = username
        self.run_name = run_name
        self.submit_results = submit_results
        self.close_run_after_submit = close_run_after_submit
        self.include_all_cases = include_all_cases

    def resolve_run_name(self) -> str:
        if callable(self.run_name):
            return self.run_name()
        return self.run_name

    def plan_entries(self, results: Sequence[PendingResult]) -> list[PlanEntry]:
        """Group valid results by the suite their case belongs to.

        With include_all_cases every suite of the catalog is included
        instead, whether or not it has results.

        Raises:
            CatalogLookupError: If a case or its suite is missing.
        """
        if self.include_all_cases:
            return [
                PlanEntry(suite_id=suite.id, include_all=True)
                for suite in self.catalog.suites
            ]

        by_suite: dict[int, list[int]] = {}
        for result in results:
            case = self.catalog.case(result.case_id)
            if case.suite_id is None:
                raise CatalogLookupError(f"Case {case.id} does not have a suite")
            suite = self.catalog.suite(case.suite_id)
            case_ids = by_suite.setdefault(suite.id, [])
            if case.id not in case_ids:
                case_ids.append(case.id)

        return [
            PlanEntry(suite_id=suite_id, case_ids=tuple(case_ids))
            for suite_id, case_ids in by_suite.items()
        ]

    def _warn_invalid(self, invalid: Sequence[PendingResult]) -> None:
        lines = [
            "The following results are for invalid case ids and will not be submitted:"
        ]
        for result in invalid:
            try:
                status_name = self.catalog.status(result.status_id).name
            except CatalogLookupError:
                status_name = ""
            lines.append(f"  {result.case_id}: {status_name} - {result.comment or ''}")
        logger.warning("\n".join(lines))

    async def submit(self, results: Sequence[PendingResult]) -> SubmissionReport | None:
        """Submit results, returning a report of what happened.

        Steps:
        1. Split results into valid and invalid
        2. Group valid results by suite
        3. Create one run for all valid cases
        4. Attach each result to the run, one at a time
        5. Log errors or the submitted count

        A failed run creation ends the pass. A failed result submission is
        recorded and the remaining results are still attempted.

        Returns:
            SubmissionReport, or None if submitting results is disabled.

        Raises:
            CatalogLookupError: If the catalog is inconsistent with the
                results (missing suite or assignee).
        """
        if not self.submit_results:
            logger.info("Submitting results is disabled.")
            return None

        try:
            return await self._submit(results)
        finally:
            await self.submission.close()

    async def _submit(self, results: Sequence[PendingResult]) -> SubmissionReport:
        valid, invalid = split_results(results, self.catalog)
        if invalid:
            self._warn_invalid(invalid)

        entries = self.plan_entries(valid)

        if not valid:
            logger.info("Run creation skipped. There are no results to submit.")
            return SubmissionReport(
                run=None,
                submitted=(),
                invalid=tuple(invalid),
                errors=(),
                entries=tuple(entries),
            )

        for entry in entries:
            if not entry.include_all and entry.suite_id != self.suite_id:
                logger.warning(
                    f"Cases {list(entry.case_ids)} belong to suite {entry.suite_id}, "
                    f"not to run suite {self.suite_id}"
                )

        assignee = self.catalog.user_with_email(self.username)
        name = self.resolve_run_name()
        errors: list[SubmissionError] = []

        logger.info(f"Run creation started: {name!r}")
        try:
            run: Run = await self.submission.create_run(
                project_id=self.project_id,
                suite_id=self.suite_id,
                case_ids=[result.case_id for result in valid],
                assignedto_id=assignee.id,
                name=name,
                include_all=self.include_all_cases,
            )
        except Exception as e:
            logger.error(f"Run creation failed: {e}", exc_info=True)
            errors.append(SubmissionError(case_id=None, message=str(e)))
            return SubmissionReport(
                run=None,
                submitted=(),
                invalid=tuple(invalid),
                errors=tuple(errors),
                entries=tuple(entries),
            )
        logger.info(f"Created run {run.id}: {run.name}")

        logger.info(f"Submitting {len(valid)} test results started.")
        submitted: list[PendingResult] = []
        for result in valid:
            try:
                response = await self.submission.add_result(result, run.id)
            except Exception as e:
                logger.debug(f"Result for case {result.case_id} failed", exc_info=True)
                errors.append(SubmissionError(case_id=result.case_id, message=str(e)))
                continue
            logger.debug(f"Submitted result for case {result.case_id}: {response}")
            submitted.append(result)

        if errors:
            logger.error(f"Submitting test results failed with {len(errors)} error(s):")
            for error in errors:
                logger.error(f"  case {error.case_id}: {error.message}")
        else:
            logger.info(f"Submitting {len(submitted)} test results completed.")

        if self.close_run_after_submit:
            # TODO: close the run once plan-closing semantics are settled
            logger.info(f"Run {run.id} left open; closing runs is not supported")

        return SubmissionReport(
            run=run,
            submitted=tuple(submitted),
            invalid=tuple(invalid),
            errors=tuple(errors),
            entries=tuple(entries),
        )
