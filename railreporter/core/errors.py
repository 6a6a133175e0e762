"""Exception hierarchy for railreporter.

UsageError and its subclasses signal programmer errors: the test suite
misuses the tracking API or the catalog is inconsistent with the cases
being tracked. They are never caught inside the package.

RemoteError signals a failure talking to the remote service.
"""


class ReporterError(Exception):
    """Base class for all railreporter errors."""


class UsageError(ReporterError):
    """The tracking API was used incorrectly."""


class DuplicateCaseError(UsageError):
    """A case was started while already started or completed."""


class CaseNotStartedError(UsageError):
    """A case was completed without being started."""


class CatalogLookupError(UsageError):
    """An entity required by the tracker is missing from the catalog."""


class RemoteError(ReporterError):
    """A call to the remote test-management service failed."""
