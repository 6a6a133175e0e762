"""Core domain logic for the railreporter result tracker.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .catalog import CatalogSnapshot
from .errors import (
    CaseNotStartedError,
    CatalogLookupError,
    DuplicateCaseError,
    RemoteError,
    ReporterError,
    UsageError,
)
from .models import (
    Case,
    CaseId,
    Failure,
    LifecycleEvent,
    LifecycleSignal,
    PendingResult,
    PlanEntry,
    Project,
    ResultStatus,
    Run,
    Section,
    Status,
    SubmissionError,
    SubmissionReport,
    Suite,
    User,
)

__all__ = [
    "Case",
    "CaseId",
    "CaseNotStartedError",
    "CatalogLookupError",
    "CatalogSnapshot",
    "DuplicateCaseError",
    "Failure",
    "LifecycleEvent",
    "LifecycleSignal",
    "PendingResult",
    "PlanEntry",
    "Project",
    "RemoteError",
    "ReporterError",
    "ResultStatus",
    "Run",
    "Section",
    "Status",
    "SubmissionError",
    "SubmissionReport",
    "Suite",
    "UsageError",
    "User",
]
