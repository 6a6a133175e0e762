"""TestRail submission adapter.

Implements SubmissionPort by creating runs and adding results for cases
through the TestRail API.
"""

import logging
from collections.abc import Sequence
from typing import Any

from railreporter.core.models import CaseId, PendingResult, Run
from railreporter.core.ports import SubmissionPort

from .api import RailAPI

logger = logging.getLogger(__name__)


def result_payload(result: PendingResult) -> dict[str, Any]:
    """Convert a PendingResult into an add_result_for_case request body.

    Unset optional fields are left out. Custom fields are sent as-is.
    """
    payload: dict[str, Any] = {
        "status_id": result.status_id,
        "assignedto_id": result.assignedto_id,
    }
    optional = {
        "comment": result.comment,
        "elapsed": result.elapsed,
        "defects": result.defects,
        "version": result.version,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    payload.update(result.custom_fields)
    return payload


class RailSubmissionAdapter(SubmissionPort):
    """Reports runs and results to TestRail."""

    def __init__(self, api: RailAPI):
        self.api = api

    async def close(self) -> None:
        await self.api.close()

    async def create_run(
        self,
        project_id: int,
        suite_id: int,
        case_ids: Sequence[CaseId],
        assignedto_id: int,
        name: str,
        include_all: bool = False,
    ) -> Run:
        payload = {
            "suite_id": suite_id,
            "name": name,
            "assignedto_id": assignedto_id,
            "include_all": include_all,
            "case_ids": list(case_ids),
        }
        data = await self.api.post(f"add_run/{project_id}", payload)
        run = Run(
            id=data["id"],
            name=data.get("name", name),
            suite_id=data.get("suite_id", suite_id),
            url=data.get("url") or "",
        )
        if run.url:
            logger.info(f"Run available at {run.url}")
        return run

    async def add_result(self, result: PendingResult, run_id: int) -> dict[str, Any]:
        return await self.api.post(
            f"add_result_for_case/{run_id}/{result.case_id}", result_payload(result)
        )
