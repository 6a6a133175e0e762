"""Composition root for railreporter.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Catalog fetch (blocking)
- Core service initialization
- Dependency injection
- Command-line entry point
"""

import argparse
import asyncio
import json
import logging
import platform
import sys
from collections.abc import Callable, Sequence

from railreporter.adapters.testrail.api import RailAPI
from railreporter.adapters.testrail.catalog import RailCatalogAdapter
from railreporter.adapters.testrail.submission import RailSubmissionAdapter
from railreporter.config import Settings, load_settings
from railreporter.core.catalog import CatalogSnapshot
from railreporter.core.lifecycle import HostLifecycleAdapter
from railreporter.core.ports import CatalogPort
from railreporter.core.reporter import RunName, RunReporter, format_run_name
from railreporter.core.session import ReportingSession
from railreporter.core.tracker import ResultTracker

logger = logging.getLogger(__name__)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_run_name(settings: Settings, project_name: str = "") -> RunName:
    """Pick the run naming strategy.

    A configured run_name is used as-is. Otherwise the name is formatted
    when the submission pass starts, so the date reflects the end of the
    session.
    """
    if settings.run_name:
        return settings.run_name

    def deferred() -> str:
        return format_run_name(
            app_name=settings.app_name or project_name,
            device=settings.device or platform.node(),
            os_version=settings.os_version or platform.python_version(),
            branch_name=settings.branch_name or None,
            build_number=settings.build_number or None,
            commit=settings.git_commit or None,
        )

    return deferred


def create_api(settings: Settings) -> RailAPI:
    return RailAPI(
        hostname=settings.testrail_hostname,
        username=settings.testrail_username,
        secret=settings.testrail_secret,
        port=settings.testrail_port,
        scheme=settings.testrail_scheme,
    )


async def fetch_catalog(catalog: CatalogPort, project_id: int) -> CatalogSnapshot:
    try:
        return await catalog.fetch_catalog(project_id)
    finally:
        await catalog.close()


def bootstrap(
    settings: Settings | None = None,
    api_factory: Callable[[Settings], RailAPI] = create_api,
) -> ReportingSession:
    """Load configuration, fetch the catalog, and wire the tracker.

    Blocks until the catalog fetch finishes. Any failure here is fatal:
    nothing can be tracked without a catalog.

    Returns:
        A ReportingSession whose lifecycle adapter is ready to receive
        host signals.

    Raises:
        RemoteError: If the catalog cannot be fetched.
        CatalogLookupError: If the API user is not a member of the project.
    """
    settings = settings or load_settings()

    logger.info("Loading TestRail catalog...")
    api = api_factory(settings)
    snapshot = asyncio.run(
        fetch_catalog(RailCatalogAdapter(api), settings.testrail_project_id)
    )
    assignee = snapshot.user_with_email(settings.testrail_username)
    logger.info(f"Results will be assigned to {assignee.name} <{assignee.email}>")

    tracker = ResultTracker(snapshot, settings.testrail_username)
    reporter = RunReporter(
        submission=RailSubmissionAdapter(api),
        catalog=snapshot,
        project_id=settings.testrail_project_id,
        suite_id=settings.testrail_suite_id,
        username=settings.testrail_username,
        run_name=build_run_name(settings, snapshot.project.name),
        submit_results=settings.submit_results,
        close_run_after_submit=settings.close_plan_after_submit,
        include_all_cases=settings.include_all_cases_in_plan,
    )
    lifecycle = HostLifecycleAdapter(tracker, reporter)
    logger.info("TestRail reporting ready.")
    return ReportingSession(snapshot, lifecycle)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="railreporter",
        description="Inspect the TestRail project results are reported to.",
    )
    parser.add_argument("--env-file", help="Path to a .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    titles = subparsers.add_parser("titles", help="Print the titles of cases")
    titles.add_argument("case_ids", nargs="+", type=int)
    titles.add_argument("--project-name", action="store_true", help="Include the project name")

    subparsers.add_parser("check", help="Fetch the catalog and print a summary")
    return parser


def _check(session: ReportingSession, settings: Settings) -> dict[str, object]:
    catalog = session.catalog
    assignee = catalog.user_with_email(settings.testrail_username)
    return {
        "project": catalog.project.name,
        "suites": len(catalog.suites),
        "cases": len(catalog.cases),
        "statuses": [status.name for status in catalog.statuses],
        "users": len(catalog.users),
        "assignee": assignee.email,
        "submit_results": settings.submit_results,
    }


def main(argv: Sequence[str] | None = None) -> None:
    """Command-line entry point.

    Exit codes:
        0: Success
        1: Fatal error (configuration, catalog fetch, lookup)
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
        configure_logging(settings.log_level, settings.log_format)
        session = bootstrap(settings)

        if args.command == "titles":
            for title in session.catalog.case_titles(
                args.case_ids, with_project_name=args.project_name
            ):
                print(title)
        elif args.command == "check":
            print(json.dumps(_check(session, settings), indent=2))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
