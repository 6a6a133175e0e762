"""TestRail adapters.

- api: httpx-based API v2 client shared by the adapters below
- catalog: CatalogPort implementation (project snapshot fetch)
- submission: SubmissionPort implementation (runs and results)
"""

from .api import RailAPI, RailAPIError
from .catalog import RailCatalogAdapter
from .submission import RailSubmissionAdapter

__all__ = ["RailAPI", "RailAPIError", "RailCatalogAdapter", "RailSubmissionAdapter"]
