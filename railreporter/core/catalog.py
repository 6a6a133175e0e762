"""Read-only in-memory mirror of a TestRail project.

The snapshot is built once, at startup, by a CatalogPort adapter and is
shared by every reader afterwards. Nothing mutates it after construction.
"""

from collections.abc import Iterable
from types import MappingProxyType
from typing import TypeVar

from .errors import CatalogLookupError
from .models import Case, CaseId, Project, Section, Status, Suite, User

_T = TypeVar("_T")


def _index(items: Iterable[_T]) -> MappingProxyType[int, _T]:
    return MappingProxyType({item.id: item for item in items})  # type: ignore[attr-defined]


class CatalogSnapshot:
    """Suites, sections, cases, statuses and users of one project."""

    def __init__(
        self,
        project: Project,
        suites: Iterable[Suite] = (),
        sections: Iterable[Section] = (),
        cases: Iterable[Case] = (),
        statuses: Iterable[Status] = (),
        users: Iterable[User] = (),
    ):
        self.project = project
        self._suites = _index(suites)
        self._sections = _index(sections)
        self._cases = _index(cases)
        self._statuses = _index(statuses)
        self._users = _index(users)

    def __repr__(self) -> str:
        return (
            f"CatalogSnapshot(project={self.project.name!r}, "
            f"suites={len(self._suites)}, cases={len(self._cases)})"
        )

    @property
    def suites(self) -> tuple[Suite, ...]:
        return tuple(self._suites.values())

    @property
    def sections(self) -> tuple[Section, ...]:
        return tuple(self._sections.values())

    @property
    def cases(self) -> tuple[Case, ...]:
        return tuple(self._cases.values())

    @property
    def statuses(self) -> tuple[Status, ...]:
        return tuple(self._statuses.values())

    @property
    def users(self) -> tuple[User, ...]:
        return tuple(self._users.values())

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def has_case(self, case_id: CaseId) -> bool:
        return case_id in self._cases

    def find_case(self, case_id: CaseId) -> Case | None:
        return self._cases.get(case_id)

    def case(self, case_id: CaseId) -> Case:
        try:
            return self._cases[case_id]
        except KeyError:
            raise CatalogLookupError(
                f"There is no case {case_id} in project {self.project.name!r}"
            ) from None

    def suite(self, suite_id: int) -> Suite:
        try:
            return self._suites[suite_id]
        except KeyError:
            raise CatalogLookupError(
                f"There is no suite {suite_id} in project {self.project.name!r}"
            ) from None

    def section(self, section_id: int) -> Section:
        try:
            return self._sections[section_id]
        except KeyError:
            raise CatalogLookupError(
                f"There is no section {section_id} in project {self.project.name!r}"
            ) from None

    def status(self, status_id: int) -> Status:
        try:
            return self._statuses[status_id]
        except KeyError:
            raise CatalogLookupError(f"There is no status {status_id}") from None

    def user(self, user_id: int) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise CatalogLookupError(f"There is no user {user_id}") from None

    def status_named(self, name: str) -> Status:
        """Return the status whose system name is name."""
        for status in self._statuses.values():
            if status.name == name:
                return status
        raise CatalogLookupError(f"There is no status named {name!r}")

    def user_with_email(self, email: str) -> User:
        """Return the user whose email matches, ignoring case."""
        wanted = email.casefold()
        for user in self._users.values():
            if user.email.casefold() == wanted:
                return user
        raise CatalogLookupError(f"There is no user with email {email!r}")

    # ------------------------------------------------------------------
    # Titles
    # ------------------------------------------------------------------

    def section_path(self, section_id: int | None) -> list[Section]:
        """Return the chain of sections from the suite root down to section_id."""
        path: list[Section] = []
        seen: set[int] = set()
        while section_id is not None and section_id not in seen:
            seen.add(section_id)
            section = self.section(section_id)
            path.append(section)
            section_id = section.parent_id
        path.reverse()
        return path

    def case_title(
        self,
        case_id: CaseId,
        with_case_id: bool = True,
        with_project_name: bool = False,
        with_suite_name: bool = True,
        with_section_names: bool = True,
    ) -> str:
        """Render a human-readable title path for one case.

        Example: ``C12: Checkout / Payments / Cards / Pay with a saved card``
        """
        case = self.case(case_id)
        parts: list[str] = []
        if with_project_name:
            parts.append(self.project.name)
        if with_suite_name and case.suite_id is not None:
            parts.append(self.suite(case.suite_id).name)
        if with_section_names:
            parts.extend(section.name for section in self.section_path(case.section_id))
        parts.append(case.title)

        title = " / ".join(parts)
        if with_case_id:
            title = f"C{case.id}: {title}"
        return title

    def case_titles(
        self,
        case_ids: Iterable[CaseId],
        with_case_id: bool = True,
        with_project_name: bool = False,
        with_suite_name: bool = True,
        with_section_names: bool = True,
    ) -> list[str]:
        return [
            self.case_title(
                case_id,
                with_case_id=with_case_id,
                with_project_name=with_project_name,
                with_suite_name=with_suite_name,
                with_section_names=with_section_names,
            )
            for case_id in case_ids
        ]
