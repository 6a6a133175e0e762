"""TestRail catalog adapter.

Implements CatalogPort by fetching a project's suites, sections, cases,
statuses and users and normalizing them into core domain models.
"""

import logging
from typing import Any

from railreporter.core.catalog import CatalogSnapshot
from railreporter.core.models import Case, Project, Section, Status, Suite, User
from railreporter.core.ports import CatalogPort

from .api import RailAPI

logger = logging.getLogger(__name__)


class RailCatalogAdapter(CatalogPort):
    """Builds a CatalogSnapshot from the TestRail API."""

    def __init__(self, api: RailAPI):
        self.api = api

    async def close(self) -> None:
        await self.api.close()

    async def fetch_catalog(self, project_id: int) -> CatalogSnapshot:
        """Fetch the whole project hierarchy.

        Raises:
            RailAPIError: If any request fails.
        """
        project_data = await self.api.get(f"get_project/{project_id}")
        project = Project(id=project_data["id"], name=project_data["name"])

        suite_data = await self.api.get_all(f"get_suites/{project_id}", "suites")
        suites = [self._parse_suite(item, project.id) for item in suite_data]

        sections: list[Section] = []
        cases: list[Case] = []
        for suite in suites:
            section_data = await self.api.get_all(
                f"get_sections/{project_id}&suite_id={suite.id}", "sections"
            )
            sections.extend(self._parse_section(item, suite.id) for item in section_data)
            case_data = await self.api.get_all(
                f"get_cases/{project_id}&suite_id={suite.id}", "cases"
            )
            cases.extend(self._parse_case(item, suite.id) for item in case_data)

        status_data = await self.api.get("get_statuses")
        statuses = [self._parse_status(item) for item in status_data]
        user_data = await self.api.get_all(f"get_users/{project_id}", "users")
        users = [self._parse_user(item) for item in user_data]

        logger.info(
            f"Fetched project {project.name!r}: {len(suites)} suites, "
            f"{len(sections)} sections, {len(cases)} cases"
        )
        return CatalogSnapshot(
            project=project,
            suites=suites,
            sections=sections,
            cases=cases,
            statuses=statuses,
            users=users,
        )

    @staticmethod
    def _parse_suite(data: dict[str, Any], project_id: int) -> Suite:
        return Suite(
            id=data["id"],
            name=data.get("name", ""),
            project_id=data.get("project_id", project_id),
        )

    @staticmethod
    def _parse_section(data: dict[str, Any], suite_id: int) -> Section:
        return Section(
            id=data["id"],
            name=data.get("name", ""),
            suite_id=data.get("suite_id") or suite_id,
            parent_id=data.get("parent_id"),
        )

    @staticmethod
    def _parse_case(data: dict[str, Any], suite_id: int) -> Case:
        return Case(
            id=data["id"],
            title=data.get("title", ""),
            section_id=data.get("section_id"),
            suite_id=data.get("suite_id") or suite_id,
        )

    @staticmethod
    def _parse_status(data: dict[str, Any]) -> Status:
        return Status(id=data["id"], name=data["name"], label=data.get("label", ""))

    @staticmethod
    def _parse_user(data: dict[str, Any]) -> User:
        return User(id=data["id"], name=data.get("name", ""), email=data.get("email", ""))
